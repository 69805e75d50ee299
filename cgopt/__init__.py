"""cgopt - nonlinear conjugate-gradient minimization on NumPy vectors."""

__version__ = "0.1.0"

from .debug import debug_context, is_debug_enabled, set_debug_enabled
from .logging import configure_logging, get_logger, set_log_level
from .optimize import (
    FLETCHER_REEVES,
    POLAK_RIBIERE,
    BrentLineSearch,
    ConjGradConfig,
    ConjugateGradient,
    ConvergenceError,
    GradientCheckError,
    History,
    LineSearch,
    LineSearchError,
    LineSearchResult,
    OptimizationError,
    OptimizeResult,
    Problem,
    Status,
    WolfeLineSearch,
    check_gradient,
    conjugate_gradient,
    derivative_central5,
    make_line_search,
    torch_problem,
)

__all__ = [
    "BrentLineSearch",
    "ConjGradConfig",
    "ConjugateGradient",
    "ConvergenceError",
    "FLETCHER_REEVES",
    "GradientCheckError",
    "History",
    "LineSearch",
    "LineSearchError",
    "LineSearchResult",
    "OptimizationError",
    "OptimizeResult",
    "POLAK_RIBIERE",
    "Problem",
    "Status",
    "WolfeLineSearch",
    "__version__",
    "check_gradient",
    "configure_logging",
    "conjugate_gradient",
    "debug_context",
    "derivative_central5",
    "get_logger",
    "is_debug_enabled",
    "make_line_search",
    "set_debug_enabled",
    "set_log_level",
    "torch_problem",
]
