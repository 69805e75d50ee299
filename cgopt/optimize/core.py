"""Core interfaces shared across the optimization routines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]


class Status(Enum):
    """Exit reason of a conjugate-gradient run."""

    ZERO_GRADIENT = "zero_gradient"
    FTOL_SATISFIED = "ftol_satisfied"
    GTOL_SATISFIED = "gtol_satisfied"
    MAX_ITER = "max_iter"


STATUS_MESSAGES = {
    Status.ZERO_GRADIENT: "Previous gradient is exactly zero.",
    Status.FTOL_SATISFIED: "Function tolerance satisfied.",
    Status.GTOL_SATISFIED: "Gradient tolerance satisfied.",
    Status.MAX_ITER: "Maximum iterations reached.",
}


class OptimizationError(RuntimeError):
    """Base class for fatal optimizer failures."""


class ConvergenceError(OptimizationError):
    """Raised when the iteration budget is exhausted."""

    def __init__(self, nit: int) -> None:
        super().__init__(f"failed to converge after {nit} iterations")
        self.nit = nit


class LineSearchError(OptimizationError):
    """Raised when a line search cannot bracket a minimum."""


class GradientCheckError(OptimizationError):
    """Raised when an analytic gradient disagrees with finite differences."""

    def __init__(self, index: int, expected: float, actual: float) -> None:
        diff = abs(actual - expected)
        super().__init__(
            f"gradient function is incorrect at component {index}: "
            f"analytic={actual!r}, numerical={expected!r}, diff={diff!r}"
        )
        self.index = index
        self.expected = expected
        self.actual = actual
        self.diff = diff


@dataclass(frozen=True)
class Problem:
    """Container describing an optimization problem."""

    fun: Objective
    grad: Optional[Gradient] = None
    dim: Optional[int] = None


@dataclass
class OptimizeResult:
    """Standard result object returned by the functional optimizers."""

    x: Array
    fun: float
    nit: int
    success: bool
    status: Status
    message: str
    grad_norm: float
    nfev: int
    njev: int
    history: List[Array] = field(default_factory=list)


__all__ = [
    "Array",
    "ConvergenceError",
    "Gradient",
    "GradientCheckError",
    "LineSearchError",
    "Objective",
    "OptimizationError",
    "OptimizeResult",
    "Problem",
    "STATUS_MESSAGES",
    "Status",
]
