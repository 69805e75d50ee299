"""Finite-difference helpers used to verify analytic gradients.

These utilities avoid any dependency on SciPy and provide deterministic,
pure NumPy implementations suitable for small to medium scale problems.
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from .core import Array, GradientCheckError, Objective

GRADIENT_CHECK_TOL = 1e-12
GRADIENT_CHECK_STEP = 1e-3


def derivative_central5(f: Callable[[float], float], x: float, h: float) -> float:
    """Five-point central-difference estimate of ``f'(x)``.

    Uses the stencil ``(f(x-2h) - 8 f(x-h) + 8 f(x+h) - f(x+2h)) / 12h``,
    exact for polynomials up to degree four.
    """
    if h <= 0:
        raise ValueError("h must be positive")
    return (f(x - 2 * h) - 8 * f(x - h) + 8 * f(x + h) - f(x + 2 * h)) / (12 * h)


def check_gradient(
    fun: Objective,
    grad_value: Array,
    x: Array,
    tol: float = GRADIENT_CHECK_TOL,
    step: float = GRADIENT_CHECK_STEP,
    work: Optional[Array] = None,
) -> int:
    """Verify ``grad_value`` against finite differences of ``fun`` at ``x``.

    Each component is compared with a five-point central difference taken
    along that coordinate. ``x`` is never modified; ``work`` may supply a
    scratch vector of the same shape to avoid an allocation.

    Returns
    -------
    int
        Number of objective evaluations spent.

    Raises
    ------
    GradientCheckError
        If any component differs by more than ``tol``.
    """
    x = np.asarray(x, dtype=float)
    if work is None:
        work = np.empty_like(x)
    evals = 0

    for k in range(x.size):

        def partial(xk: float) -> float:
            nonlocal evals
            np.copyto(work, x)
            work[k] = xk
            evals += 1
            return float(fun(work))

        expected = derivative_central5(partial, float(x[k]), step)
        actual = float(grad_value[k])
        if abs(actual - expected) > tol:
            raise GradientCheckError(k, expected, actual)
    return evals


__all__ = [
    "GRADIENT_CHECK_STEP",
    "GRADIENT_CHECK_TOL",
    "check_gradient",
    "derivative_central5",
]
