"""Nonlinear conjugate-gradient minimization (Fletcher-Reeves / Polak-Ribiere).

The optimizer performs successive line minimizations along conjugate
directions ``h_{k+1} = g_{k+1} + gamma_k h_k`` where ``g`` is the negative
gradient. Three exits are considered successful: an exactly zero previous
gradient, a small relative change of the function value, and a small scaled
gradient. Running out of iterations raises :class:`ConvergenceError`.

References:
    - Press, Teukolsky, Vetterling & Flannery, *Numerical Recipes*, 3rd ed.
      (2007), section 10.8
    - Nocedal & Wright, *Numerical Optimization* (2006), chapter 5
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from ..debug import is_debug_enabled
from ..logging import get_logger
from .core import (
    STATUS_MESSAGES,
    Array,
    ConvergenceError,
    Gradient,
    Objective,
    OptimizeResult,
    Problem,
    Status,
)
from .history import History
from .line_search import LINE_SEARCHES, LineSearch, make_line_search
from .utils import GRADIENT_CHECK_STEP, GRADIENT_CHECK_TOL, check_gradient

logger = get_logger(__name__)

POLAK_RIBIERE = "polak-ribiere"
FLETCHER_REEVES = "fletcher-reeves"
METHODS = (POLAK_RIBIERE, FLETCHER_REEVES)


@dataclass(frozen=True)
class ConjGradConfig:
    """
    Settings of a :class:`ConjugateGradient` optimizer.

    Attributes:
        max_iter: Maximum number of line minimizations.
        ftol: Relative tolerance on the change of the function value.
        gtol: Tolerance on the scaled gradient.
        tiny: Guard against division by a vanishing gradient norm.
        method: ``"polak-ribiere"`` or ``"fletcher-reeves"``.
        line_search: ``"wolfe"`` or ``"brent"``.
        check_gradient: Verify every gradient against finite differences.
            ``None`` follows the global debug mode.
        gradient_check_tol: Largest accepted absolute deviation.
        gradient_check_step: Finite-difference step of the check.
        history: Record a :class:`History` of the run.
    """

    max_iter: int = 200
    ftol: float = 1e-8
    gtol: float = 1e-8
    tiny: float = 1e-18
    method: str = POLAK_RIBIERE
    line_search: str = "wolfe"
    check_gradient: Optional[bool] = None
    gradient_check_tol: float = GRADIENT_CHECK_TOL
    gradient_check_step: float = GRADIENT_CHECK_STEP
    history: bool = False

    def __post_init__(self) -> None:
        """Validate ConjGradConfig invariants."""
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}.")
        for name in ("ftol", "gtol", "tiny", "gradient_check_tol"):
            value = getattr(self, name)
            if not value >= 0:
                raise ValueError(f"{name} must be non-negative, got {value}.")
        if not self.gradient_check_step > 0:
            raise ValueError(
                f"gradient_check_step must be positive, got {self.gradient_check_step}."
            )
        if self.method not in METHODS:
            raise ValueError(f"method must be one of {METHODS}, got {self.method!r}.")
        if self.line_search not in LINE_SEARCHES:
            raise ValueError(
                f"line_search must be one of {tuple(LINE_SEARCHES)}, "
                f"got {self.line_search!r}."
            )

    @property
    def gradient_check_enabled(self) -> bool:
        """Whether gradients are verified, falling back to the debug mode."""
        if self.check_gradient is None:
            return is_debug_enabled()
        return bool(self.check_gradient)


class ConjugateGradient:
    """
    Multidimensional minimizer using nonlinear conjugate gradients.

    The instance owns its working vectors and both line-search strategies,
    so repeated calls to :meth:`minimize` allocate nothing per iteration.
    It is not safe to call :meth:`minimize` concurrently on one instance.

    Attributes:
        nfev: Objective evaluations of the last run.
        njev: Gradient evaluations of the last run.
        nit: Iteration index at which the last run stopped.
        status: Exit reason of the last run.
        history: Trace of the last run when ``config.history`` is set.

    Example:
        >>> import numpy as np
        >>> opt = ConjugateGradient(
        ...     2,
        ...     lambda x: (x[0] - 3) ** 2 + (x[1] + 1) ** 2,
        ...     lambda x: np.array([2 * (x[0] - 3), 2 * (x[1] + 1)]),
        ... )
        >>> x = np.zeros(2)
        >>> fmin = opt.minimize(x)
        >>> bool(np.allclose(x, [3.0, -1.0]))
        True
    """

    def __init__(
        self,
        dim: int,
        fun: Objective,
        grad: Gradient,
        config: Optional[ConjGradConfig] = None,
        **options,
    ) -> None:
        if int(dim) != dim or dim <= 0:
            raise ValueError(f"dim must be a positive integer, got {dim}")
        if not callable(fun):
            raise TypeError("fun must be callable")
        if not callable(grad):
            raise TypeError("grad must be callable")
        if config is None:
            config = ConjGradConfig(**options)
        elif options:
            config = replace(config, **options)

        self.dim = int(dim)
        self.fun = fun
        self.grad = grad
        self.config = config

        self._u = np.zeros(self.dim)
        self._g = np.zeros(self.dim)
        self._h = np.zeros(self.dim)
        self._tmp = np.zeros(self.dim)
        self._line_searches: dict[str, LineSearch] = {
            name: make_line_search(name, fun, grad) for name in LINE_SEARCHES
        }

        self.nfev = 0
        self.njev = 0
        self.nit = 0
        self.fmin: Optional[float] = None
        self.status: Optional[Status] = None
        self.history: Optional[History] = None

    @classmethod
    def from_problem(
        cls, problem: Problem, config: Optional[ConjGradConfig] = None, **options
    ) -> "ConjugateGradient":
        """Build an optimizer from a :class:`Problem` with gradient and dim."""
        if problem.grad is None:
            raise ValueError("ConjugateGradient requires problem.grad.")
        if problem.dim is None:
            raise ValueError("ConjugateGradient requires problem.dim.")
        return cls(problem.dim, problem.fun, problem.grad, config, **options)

    @property
    def line_search(self) -> LineSearch:
        """Strategy selected by ``config.line_search``."""
        return self._line_searches[self.config.line_search]

    def minimize(self, x: Array) -> float:
        """
        Minimize the objective starting from ``x``.

        Args:
            x: Float64 array of shape ``(dim,)``; overwritten with the
                minimizer.

        Returns:
            Objective value at the final ``x``.

        Raises:
            ConvergenceError: If ``config.max_iter`` iterations pass without
                meeting a convergence test.
            GradientCheckError: If gradient checking is enabled and the
                gradient function disagrees with finite differences.
        """
        self._validate_point(x)
        cfg = self.config
        line_search = self.line_search
        verify = cfg.gradient_check_enabled
        fletcher_reeves = cfg.method == FLETCHER_REEVES
        u, g, h, tmp = self._u, self._g, self._h, self._tmp

        self.nfev = 0
        self.njev = 0
        self.nit = 0
        self.status = None

        fx = float(self.fun(x))
        self.nfev += 1
        self._gradient(x, u)
        np.negative(u, out=u)
        np.copyto(g, u)
        np.copyto(h, u)
        fmin = fx
        self.fmin = fmin

        if cfg.history:
            self.history = History(self.dim)
            self.history.start(fmin, x)
        else:
            self.history = None

        # Heuristic previous value, only used to size the first step.
        fold = fx + float(np.linalg.norm(u)) / 2.0

        logger.debug(
            "conjugate gradient (%s, %s line search) from f=%g",
            cfg.method,
            cfg.line_search,
            fx,
        )

        for nit in range(cfg.max_iter):
            self.nit = nit

            deno = float(np.dot(g, g))
            if abs(deno) < cfg.tiny:
                return self._finish(Status.ZERO_GRADIENT, fmin)

            search = line_search.minimize(x, u, True, fold)
            fmin = search.fmin
            self.fmin = fmin
            self.nfev += search.nfev
            self.njev += search.njev
            fold = fx

            if self.history is not None:
                self.history.append(fmin, x, search.step * u)

            if 2.0 * abs(fmin - fx) <= cfg.ftol * (abs(fmin) + abs(fx) + cfg.tiny):
                return self._finish(Status.FTOL_SATISFIED, fmin)

            # u holds the new gradient until the direction update below.
            fx = fmin
            self._gradient(x, u)
            if verify:
                self.nfev += check_gradient(
                    self.fun,
                    u,
                    x,
                    tol=cfg.gradient_check_tol,
                    step=cfg.gradient_check_step,
                    work=tmp,
                )

            np.abs(x, out=tmp)
            np.maximum(tmp, 1.0, out=tmp)
            tmp *= u
            np.abs(tmp, out=tmp)
            test = float(tmp.max()) / max(fx, 1.0)
            logger.debug("iter %d: f=%.12g step=%g gtest=%g", nit, fmin, search.step, test)
            if test < cfg.gtol:
                return self._finish(Status.GTOL_SATISFIED, fmin)

            # g still holds -gOld.
            if fletcher_reeves:
                nume = float(np.dot(u, u))
            else:
                np.add(u, g, out=tmp)
                nume = max(float(np.dot(tmp, u)), 0.0)
            gamma = nume / deno

            np.negative(u, out=g)
            np.multiply(h, gamma, out=u)
            u += g
            if float(np.dot(u, g)) <= 0:
                logger.debug("iter %d: not a descent direction, restarting", nit)
                np.copyto(u, g)
            np.copyto(h, u)

        self.nit = cfg.max_iter
        self.status = Status.MAX_ITER
        logger.warning(
            "conjugate gradient failed to converge after %d iterations (f=%g)",
            cfg.max_iter,
            fmin,
        )
        raise ConvergenceError(cfg.max_iter)

    def _finish(self, status: Status, fmin: float) -> float:
        self.status = status
        logger.debug(
            "%s nit=%d f=%.12g nfev=%d njev=%d",
            STATUS_MESSAGES[status],
            self.nit,
            fmin,
            self.nfev,
            self.njev,
        )
        return fmin

    def _gradient(self, x: Array, out: Array) -> None:
        value = np.asarray(self.grad(x), dtype=float)
        if value.shape != (self.dim,):
            raise ValueError(
                f"gradient must have shape ({self.dim},), got {value.shape}"
            )
        np.copyto(out, value)
        self.njev += 1

    def _validate_point(self, x: Array) -> None:
        if not isinstance(x, np.ndarray):
            raise TypeError("x must be a numpy array; it is updated in place")
        if x.shape != (self.dim,):
            raise ValueError(f"x must have shape ({self.dim},), got {x.shape}")
        if x.dtype != np.float64:
            raise TypeError(f"x must have dtype float64, got {x.dtype}")
        if not x.flags.writeable:
            raise ValueError("x must be writeable")


def conjugate_gradient(
    problem: Problem,
    x0: np.ndarray,
    maxiter: int = 200,
    ftol: float = 1e-8,
    gtol: float = 1e-8,
    method: str = POLAK_RIBIERE,
    line_search: str = "wolfe",
    check_gradient: Optional[bool] = None,
    history: bool = False,
) -> OptimizeResult:
    """Nonlinear conjugate gradients returning an :class:`OptimizeResult`.

    ``x0`` is copied. Exhausting ``maxiter`` is reported through
    ``success=False`` instead of an exception; a failed gradient check
    still raises :class:`GradientCheckError`.
    """
    if problem.grad is None:
        raise ValueError("conjugate_gradient requires problem.grad.")
    x = np.asarray(x0, dtype=float).copy()
    dim = problem.dim if problem.dim is not None else x.size
    optimizer = ConjugateGradient(
        dim,
        problem.fun,
        problem.grad,
        max_iter=maxiter,
        ftol=ftol,
        gtol=gtol,
        method=method,
        line_search=line_search,
        check_gradient=check_gradient,
        history=history,
    )
    try:
        fx = optimizer.minimize(x)
        success = True
    except ConvergenceError:
        fx = optimizer.fmin
        success = False
    grad_norm = float(np.linalg.norm(problem.grad(x)))
    hist = optimizer.history.to_list() if optimizer.history is not None else []
    return OptimizeResult(
        x=x,
        fun=float(fx),
        nit=optimizer.nit,
        success=success,
        status=optimizer.status,
        message=STATUS_MESSAGES[optimizer.status],
        grad_norm=grad_norm,
        nfev=optimizer.nfev,
        njev=optimizer.njev + 1,
        history=hist,
    )


__all__ = [
    "ConjGradConfig",
    "ConjugateGradient",
    "FLETCHER_REEVES",
    "METHODS",
    "POLAK_RIBIERE",
    "conjugate_gradient",
]
