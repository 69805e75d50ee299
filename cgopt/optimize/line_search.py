"""Deterministic line-search routines following Nocedal & Wright and
Numerical Recipes.

Two strategies share the :class:`LineSearch` interface: a strong Wolfe
search that uses gradients, and Brent's derivative-free bracketing
minimizer. Both advance the point they are given in place and report the
number of function and gradient evaluations spent by each call.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..logging import get_logger
from .core import Array, Gradient, LineSearchError, Objective

logger = get_logger(__name__)

GOLD = 0.5 * (1.0 + math.sqrt(5.0))
CGOLD = 0.5 * (3.0 - math.sqrt(5.0))
TINY = 1e-20
ZEPS = 1e-10


@dataclass(frozen=True)
class LineSearchResult:
    """Outcome of one line minimization along a direction."""

    step: float
    fmin: float
    nfev: int
    njev: int


def initial_step(phi0: float, der0: float, f_prev: float) -> float:
    """Initial trial step from the previous function value.

    Assumes the first-order change will match the previous one, as
    suggested by Nocedal & Wright (eq. 3.60), and caps the step at one.
    """
    alpha0 = 1.01 * 2.0 * (phi0 - f_prev) / der0
    if not math.isfinite(alpha0) or alpha0 <= 0:
        return 1.0
    return min(1.0, alpha0)


def wolfe_line_search(
    f: Objective,
    grad: Gradient,
    x: Array,
    p: Array,
    alpha0: float = 1.0,
    c1: float = 1e-4,
    c2: float = 0.1,
    max_iter: int = 40,
    max_zoom: int = 32,
    f_prev: Optional[float] = None,
) -> tuple[float, float, int, int]:
    """Perform a strong Wolfe line search using bracketing and zoom.

    Returns ``(alpha, phi(alpha), nfev, njev)``. When ``f_prev`` is given
    the first trial step is derived from it and ``alpha0`` is ignored. An
    accepted step is polished by one secant step on ``phi'``, which makes
    the search exact on quadratic objectives.
    """
    if not (0 < c1 < c2 < 1):
        raise ValueError("Require 0 < c1 < c2 < 1 for Wolfe conditions.")

    nfev = 0
    njev = 0

    def phi(alpha: float) -> float:
        nonlocal nfev
        nfev += 1
        return float(f(x + alpha * p))

    def phi_prime(alpha: float) -> float:
        nonlocal njev
        njev += 1
        return float(np.dot(grad(x + alpha * p), p))

    phi0 = phi(0.0)
    der0 = phi_prime(0.0)
    if der0 >= 0:
        raise ValueError("Search direction must be a descent direction.")

    if f_prev is not None:
        alpha = initial_step(phi0, der0, f_prev)
    else:
        alpha = float(alpha0)
    alpha_prev, phi_prev, der_prev = 0.0, phi0, der0
    der_alpha: Optional[float] = None

    for iteration in range(max_iter):
        phi_alpha = phi(alpha)
        if phi_alpha > phi0 + c1 * alpha * der0 or (
            iteration > 0 and phi_alpha >= phi_prev
        ):
            alpha, phi_alpha, der_alpha = _zoom(
                phi,
                phi_prime,
                (alpha_prev, phi_prev, der_prev),
                (alpha, phi_alpha),
                phi0,
                der0,
                c1,
                c2,
                max_zoom,
            )
            break
        der_alpha = phi_prime(alpha)
        if abs(der_alpha) <= -c2 * der0:
            break
        if der_alpha >= 0:
            alpha, phi_alpha, der_alpha = _zoom(
                phi,
                phi_prime,
                (alpha, phi_alpha, der_alpha),
                (alpha_prev, phi_prev),
                phi0,
                der0,
                c1,
                c2,
                max_zoom,
            )
            break
        alpha_prev, phi_prev, der_prev = alpha, phi_alpha, der_alpha
        alpha *= 2.0
    else:
        # Budget exhausted while still descending: keep the last tested step.
        return alpha_prev, phi_prev, nfev, njev

    if der_alpha is not None:
        alpha, phi_alpha = _secant_refine(
            phi, phi_prime, alpha, phi_alpha, der_alpha, phi0, der0, c1
        )
    return alpha, phi_alpha, nfev, njev


def _secant_refine(
    phi: Callable[[float], float],
    phi_prime: Callable[[float], float],
    alpha: float,
    phi_alpha: float,
    der_alpha: float,
    phi0: float,
    der0: float,
    c1: float,
) -> tuple[float, float]:
    """Move an accepted Wolfe step to the secant root of ``phi'``.

    Along a quadratic objective ``phi'`` is linear, so the secant through
    ``(0, der0)`` and ``(alpha, der_alpha)`` lands on the exact line minimum
    and conjugate directions stay conjugate. The refined step is kept only
    when it satisfies sufficient decrease and has a smaller slope.
    """
    if der_alpha == 0.0 or der_alpha <= der0:
        return alpha, phi_alpha
    trial = alpha * der0 / (der0 - der_alpha)
    if not math.isfinite(trial) or trial <= 0 or trial == alpha:
        return alpha, phi_alpha
    phi_trial = phi(trial)
    if phi_trial > phi0 + c1 * trial * der0:
        return alpha, phi_alpha
    if abs(phi_prime(trial)) > abs(der_alpha):
        return alpha, phi_alpha
    return trial, phi_trial


def _interpolate(alo: float, phi_lo: float, der_lo: float, ahi: float, phi_hi: float) -> float:
    """Minimizer of the quadratic through (alo, phi_lo, der_lo) and (ahi, phi_hi).

    Falls back to bisection when the model has no interior minimizer or it
    lies too close to either end of the interval.
    """
    d = ahi - alo
    midpoint = alo + 0.5 * d
    denom = 2.0 * (phi_hi - phi_lo - der_lo * d)
    if denom <= 0:
        return midpoint
    alpha = alo - der_lo * d * d / denom
    margin = 0.1 * abs(d)
    if not math.isfinite(alpha) or not (
        min(alo, ahi) + margin <= alpha <= max(alo, ahi) - margin
    ):
        return midpoint
    return alpha


def _zoom(
    phi: Callable[[float], float],
    phi_prime: Callable[[float], float],
    lo: tuple[float, float, float],
    hi: tuple[float, float],
    phi0: float,
    der0: float,
    c1: float,
    c2: float,
    max_zoom: int,
) -> tuple[float, float, Optional[float]]:
    """Zoom stage enforcing strong Wolfe conditions.

    Returns ``(alpha, phi(alpha), phi_prime(alpha))``. ``lo`` always
    satisfies sufficient decrease, so it is returned with no slope when the
    interval collapses before the curvature condition is met.
    """
    alo, phi_lo, der_lo = lo
    ahi, phi_hi = hi
    for _ in range(max_zoom):
        alpha = _interpolate(alo, phi_lo, der_lo, ahi, phi_hi)
        phi_alpha = phi(alpha)
        if phi_alpha > phi0 + c1 * alpha * der0 or phi_alpha >= phi_lo:
            ahi, phi_hi = alpha, phi_alpha
        else:
            der_alpha = phi_prime(alpha)
            if abs(der_alpha) <= -c2 * der0:
                return alpha, phi_alpha, der_alpha
            if der_alpha * (ahi - alo) >= 0:
                ahi, phi_hi = alo, phi_lo
            alo, phi_lo, der_lo = alpha, phi_alpha, der_alpha
        if abs(ahi - alo) <= 1e-12 * max(1.0, abs(alo)):
            break
    logger.debug("zoom stopped without curvature condition, alpha=%g", alo)
    return alo, phi_lo, None


def bracket_minimum(
    phi: Callable[[float], float],
    a: float = 0.0,
    b: float = 1.0,
    grow_limit: float = 100.0,
    max_iter: int = 200,
) -> tuple[tuple[float, float, float], tuple[float, float, float], int]:
    """Bracket a minimum of ``phi`` starting from the interval ``[a, b]``.

    Golden-ratio expansion with parabolic extrapolation (Numerical Recipes,
    ``mnbrak``). Returns ``((a, b, c), (fa, fb, fc), nfev)`` with ``b``
    between ``a`` and ``c`` and ``fb <= min(fa, fc)``.
    """
    nfev = 2
    fa = phi(a)
    fb = phi(b)
    if fb > fa:
        a, b = b, a
        fa, fb = fb, fa
    c = b + GOLD * (b - a)
    fc = phi(c)
    nfev += 1
    for _ in range(max_iter):
        if fb <= fc:
            return (a, b, c), (fa, fb, fc), nfev
        r = (b - a) * (fb - fc)
        q = (b - c) * (fb - fa)
        denom = 2.0 * math.copysign(max(abs(q - r), TINY), q - r)
        u = b - ((b - c) * q - (b - a) * r) / denom
        ulim = b + grow_limit * (c - b)
        if (b - u) * (u - c) > 0:
            fu = phi(u)
            nfev += 1
            if fu < fc:
                return (b, u, c), (fb, fu, fc), nfev
            if fu > fb:
                return (a, b, u), (fa, fb, fu), nfev
            u = c + GOLD * (c - b)
            fu = phi(u)
            nfev += 1
        elif (c - u) * (u - ulim) > 0:
            fu = phi(u)
            nfev += 1
            if fu < fc:
                b, c, u = c, u, u + GOLD * (u - c)
                fb, fc = fc, fu
                fu = phi(u)
                nfev += 1
        elif (u - ulim) * (ulim - c) >= 0:
            u = ulim
            fu = phi(u)
            nfev += 1
        else:
            u = c + GOLD * (c - b)
            fu = phi(u)
            nfev += 1
        a, b, c = b, c, u
        fa, fb, fc = fb, fc, fu
    raise LineSearchError(f"could not bracket a minimum after {max_iter} expansions")


def brent_minimize(
    phi: Callable[[float], float],
    bracket: tuple[float, float, float],
    fb: float,
    tol: float = 3e-8,
    max_iter: int = 100,
) -> tuple[float, float, int]:
    """Brent's parabolic/golden-section minimization inside a bracket.

    ``bracket`` is ``(a, b, c)`` as produced by :func:`bracket_minimum` and
    ``fb`` the known value ``phi(b)``. Returns ``(xmin, fmin, nfev)``.
    """
    a, b, c = bracket
    lo, hi = min(a, c), max(a, c)
    x = w = v = b
    fx = fw = fv = fb
    d = 0.0
    e = 0.0
    nfev = 0
    for _ in range(max_iter):
        xm = 0.5 * (lo + hi)
        tol1 = tol * abs(x) + ZEPS
        tol2 = 2.0 * tol1
        if abs(x - xm) <= tol2 - 0.5 * (hi - lo):
            return x, fx, nfev
        use_golden = True
        if abs(e) > tol1:
            r = (x - w) * (fx - fv)
            q = (x - v) * (fx - fw)
            p = (x - v) * q - (x - w) * r
            q = 2.0 * (q - r)
            if q > 0:
                p = -p
            q = abs(q)
            etemp = e
            e = d
            if not (
                abs(p) >= abs(0.5 * q * etemp) or p <= q * (lo - x) or p >= q * (hi - x)
            ):
                use_golden = False
                d = p / q
                u = x + d
                if u - lo < tol2 or hi - u < tol2:
                    d = math.copysign(tol1, xm - x)
        if use_golden:
            e = lo - x if x >= xm else hi - x
            d = CGOLD * e
        u = x + d if abs(d) >= tol1 else x + math.copysign(tol1, d)
        fu = phi(u)
        nfev += 1
        if fu <= fx:
            if u >= x:
                lo = x
            else:
                hi = x
            v, w, x = w, x, u
            fv, fw, fx = fw, fx, fu
        else:
            if u < x:
                lo = u
            else:
                hi = u
            if fu <= fw or w == x:
                v, w = w, u
                fv, fw = fw, fu
            elif fu <= fv or v == x or v == w:
                v, fv = u, fu
    logger.warning("brent_minimize reached %d iterations without meeting tol", max_iter)
    return x, fx, nfev


class LineSearch(ABC):
    """
    Common interface of the line-search strategies.

    ``minimize`` moves ``x`` to the (approximate) minimizer along
    ``direction`` and returns a :class:`LineSearchResult`. The counters of
    the last call are also kept on the instance as ``nfev`` and ``njev``.
    """

    name = "line_search"

    def __init__(self, fun: Objective, grad: Optional[Gradient] = None) -> None:
        if not callable(fun):
            raise TypeError("fun must be callable")
        self.fun = fun
        self.grad = grad
        self.nfev = 0
        self.njev = 0

    def minimize(
        self,
        x: Array,
        direction: Array,
        use_hint: bool = False,
        f_hint: Optional[float] = None,
    ) -> LineSearchResult:
        """Line-minimize from ``x`` along ``direction``, updating ``x`` in place."""
        hint = f_hint if use_hint else None
        step, fmin, nfev, njev = self._search(x, direction, hint)
        x += step * direction
        self.nfev = nfev
        self.njev = njev
        return LineSearchResult(step=float(step), fmin=float(fmin), nfev=nfev, njev=njev)

    @abstractmethod
    def _search(
        self, x: Array, direction: Array, f_hint: Optional[float]
    ) -> tuple[float, float, int, int]:
        """Return ``(step, fmin, nfev, njev)`` without modifying ``x``."""


class WolfeLineSearch(LineSearch):
    """Strong Wolfe line search; requires the gradient."""

    name = "wolfe"

    def __init__(
        self,
        fun: Objective,
        grad: Gradient,
        c1: float = 1e-4,
        c2: float = 0.1,
        max_iter: int = 40,
        max_zoom: int = 32,
    ) -> None:
        if grad is None:
            raise ValueError("WolfeLineSearch requires a gradient function.")
        if not (0 < c1 < c2 < 1):
            raise ValueError("Require 0 < c1 < c2 < 1 for Wolfe conditions.")
        super().__init__(fun, grad)
        self.c1 = c1
        self.c2 = c2
        self.max_iter = max_iter
        self.max_zoom = max_zoom

    def _search(self, x, direction, f_hint):
        return wolfe_line_search(
            self.fun,
            self.grad,
            x,
            direction,
            c1=self.c1,
            c2=self.c2,
            max_iter=self.max_iter,
            max_zoom=self.max_zoom,
            f_prev=f_hint,
        )


class BrentLineSearch(LineSearch):
    """Brent's method on a golden-ratio bracket; derivative free."""

    name = "brent"

    def __init__(
        self,
        fun: Objective,
        grad: Optional[Gradient] = None,
        tol: float = 3e-8,
        max_iter: int = 100,
    ) -> None:
        if tol <= 0:
            raise ValueError("tol must be positive")
        super().__init__(fun, grad)
        self.tol = tol
        self.max_iter = max_iter

    def _search(self, x, direction, f_hint):
        def phi(alpha: float) -> float:
            return float(self.fun(x + alpha * direction))

        bracket, values, nfev = bracket_minimum(phi, 0.0, 1.0)
        step, fmin, brent_fev = brent_minimize(
            phi, bracket, values[1], tol=self.tol, max_iter=self.max_iter
        )
        return step, fmin, nfev + brent_fev, 0


LINE_SEARCHES = {
    WolfeLineSearch.name: WolfeLineSearch,
    BrentLineSearch.name: BrentLineSearch,
}


def make_line_search(name: str, fun: Objective, grad: Optional[Gradient]) -> LineSearch:
    """Build the line-search strategy registered under ``name``."""
    try:
        cls = LINE_SEARCHES[name]
    except KeyError:
        raise ValueError(
            f"Unknown line search {name!r}; expected one of {sorted(LINE_SEARCHES)}."
        ) from None
    return cls(fun, grad)


__all__ = [
    "BrentLineSearch",
    "LINE_SEARCHES",
    "LineSearch",
    "LineSearchResult",
    "WolfeLineSearch",
    "bracket_minimum",
    "brent_minimize",
    "initial_step",
    "make_line_search",
    "wolfe_line_search",
]
