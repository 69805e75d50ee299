"""Per-iteration trace of an optimization run."""

from __future__ import annotations

from typing import List

import numpy as np

from .core import Array


class History:
    """
    Ordered record of ``(function value, iterate, step)`` snapshots.

    The optimizer only writes to it; the arrays are meant for inspection and
    plotting after a run. Every appended vector is copied, so later in-place
    updates of the iterate do not alter the record.

    Example
    -------
    >>> hist = History(2)
    >>> hist.start(1.0, np.zeros(2))
    >>> hist.append(0.5, np.array([0.5, 0.0]), np.array([0.5, 0.0]))
    >>> len(hist)
    2
    """

    def __init__(self, dim: int) -> None:
        if dim <= 0:
            raise ValueError(f"dim must be positive, got {dim}")
        self.dim = dim
        self._f: List[float] = []
        self._x: List[Array] = []
        self._steps: List[Array] = []

    def start(self, f0: float, x0: Array) -> None:
        """Discard previous records and store the initial point."""
        self.clear()
        self.append(f0, x0, np.zeros(self.dim))

    def append(self, f: float, x: Array, step: Array) -> None:
        x = np.asarray(x, dtype=float)
        step = np.asarray(step, dtype=float)
        if x.shape != (self.dim,) or step.shape != (self.dim,):
            raise ValueError(
                f"expected vectors of shape ({self.dim},), got {x.shape} and {step.shape}"
            )
        self._f.append(float(f))
        self._x.append(x.copy())
        self._steps.append(step.copy())

    def clear(self) -> None:
        self._f.clear()
        self._x.clear()
        self._steps.clear()

    def __len__(self) -> int:
        return len(self._f)

    @property
    def f_values(self) -> Array:
        return np.asarray(self._f, dtype=float)

    @property
    def iterates(self) -> Array:
        return np.asarray(self._x, dtype=float).reshape(len(self), self.dim)

    @property
    def steps(self) -> Array:
        return np.asarray(self._steps, dtype=float).reshape(len(self), self.dim)

    @property
    def step_lengths(self) -> Array:
        """Euclidean norm of each recorded step."""
        return np.linalg.norm(self.steps, axis=1)

    def to_list(self) -> List[Array]:
        """Copies of the recorded iterates, oldest first."""
        return [x.copy() for x in self._x]


__all__ = ["History"]
