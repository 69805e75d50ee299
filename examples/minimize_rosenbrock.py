"""Conjugate-gradient example: the Rosenbrock valley and a shifted bowl.

This example runs every combination of direction update (Polak-Ribiere,
Fletcher-Reeves) and line search (Wolfe, Brent) on the Rosenbrock function,
then minimizes a torch-defined objective whose gradient comes from autograd.
"""

from __future__ import annotations

import numpy as np
import torch

import cgopt
from cgopt.optimize import ConjugateGradient, Problem, conjugate_gradient, torch_problem


def rosenbrock(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def compare_variants() -> None:
    """Print evaluation counts of the four optimizer variants."""
    print("=" * 60)
    print("Rosenbrock from (-1.2, 1.0)")
    print("=" * 60)
    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    for method in (cgopt.POLAK_RIBIERE, cgopt.FLETCHER_REEVES):
        for line_search in ("wolfe", "brent"):
            res = conjugate_gradient(
                problem,
                np.array([-1.2, 1.0]),
                maxiter=2000,
                method=method,
                line_search=line_search,
            )
            print(
                f"{method:>16s} / {line_search:<5s}: "
                f"x = {np.array2string(res.x, precision=6)}, "
                f"f = {res.fun:.3e}, nit = {res.nit}, "
                f"nfev = {res.nfev}, njev = {res.njev}, {res.message}"
            )
    print()


def autograd_bowl() -> None:
    """Minimize a torch objective with the in-place optimizer API."""
    print("=" * 60)
    print("Shifted bowl with an autograd gradient")
    print("=" * 60)
    center = torch.tensor([3.0, -1.0, 0.5], dtype=torch.float64)
    problem = torch_problem(lambda t: ((t - center) ** 2).sum(), dim=3)
    optimizer = ConjugateGradient.from_problem(problem, history=True)
    x = np.zeros(3)
    fmin = optimizer.minimize(x)
    print(f"Minimum found at x = {np.array2string(x, precision=6)}, f = {fmin:.3e}")
    print(f"Line minimizations: {len(optimizer.history) - 1}")
    print(f"Step lengths: {np.array2string(optimizer.history.step_lengths, precision=4)}")
    print()


def main() -> None:
    compare_variants()
    autograd_bowl()


if __name__ == "__main__":
    main()
