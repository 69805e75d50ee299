"""Nonlinear conjugate-gradient minimization for cgopt.

Example
-------
>>> import numpy as np
>>> from cgopt.optimize import Problem, conjugate_gradient
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x):
...     return np.array([
...         -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
...         200 * (x[1] - x[0] ** 2),
...     ])
>>> problem = Problem(fun=rosen, grad=rosen_grad, dim=2)
>>> res = conjugate_gradient(problem, np.array([-1.2, 1.0]), maxiter=1000)
>>> bool(np.allclose(res.x, [1.0, 1.0], atol=1e-4))
True
"""

from .autodiff import torch_problem
from .conjgrad import (
    FLETCHER_REEVES,
    POLAK_RIBIERE,
    ConjGradConfig,
    ConjugateGradient,
    conjugate_gradient,
)
from .core import (
    ConvergenceError,
    GradientCheckError,
    LineSearchError,
    OptimizationError,
    OptimizeResult,
    Problem,
    Status,
)
from .history import History
from .line_search import (
    BrentLineSearch,
    LineSearch,
    LineSearchResult,
    WolfeLineSearch,
    bracket_minimum,
    brent_minimize,
    make_line_search,
    wolfe_line_search,
)
from .utils import check_gradient, derivative_central5

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
    "bracket_minimum",
    "brent_minimize",
    "check_gradient",
    "conjugate_gradient",
    "derivative_central5",
    "make_line_search",
    "torch_problem",
    "wolfe_line_search",
]
