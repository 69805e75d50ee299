"""Benchmark conjugate-gradient variants on the extended Rosenbrock function."""

import time
from typing import Dict

import numpy as np

from cgopt.optimize import Problem, conjugate_gradient


def extended_rosenbrock(x: np.ndarray) -> float:
    odd, even = x[0::2], x[1::2]
    return float(np.sum((1 - odd) ** 2 + 100 * (even - odd**2) ** 2))


def extended_rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    odd, even = x[0::2], x[1::2]
    grad = np.empty_like(x)
    grad[0::2] = -2 * (1 - odd) - 400 * odd * (even - odd**2)
    grad[1::2] = 200 * (even - odd**2)
    return grad


def benchmark_variant(
    dim: int,
    method: str,
    line_search: str,
    n_runs: int = 5,
) -> Dict[str, float]:
    """Benchmark one (method, line search) pair.

    Args:
        dim: Even problem dimension.
        method: Direction update formula.
        line_search: Line-search strategy name.
        n_runs: Number of timed runs.

    Returns:
        Dictionary with timing and evaluation counts.
    """
    problem = Problem(fun=extended_rosenbrock, grad=extended_rosenbrock_grad, dim=dim)
    x0 = np.tile([-1.2, 1.0], dim // 2)

    times = []
    res = None
    for _ in range(n_runs):
        start = time.perf_counter()
        res = conjugate_gradient(
            problem, x0, maxiter=5000, method=method, line_search=line_search
        )
        times.append(time.perf_counter() - start)

    return {
        "mean_time_ms": float(np.mean(times)) * 1000,
        "std_time_ms": float(np.std(times)) * 1000,
        "nit": res.nit,
        "nfev": res.nfev,
        "njev": res.njev,
        "fun": res.fun,
        "success": res.success,
    }


def main() -> None:
    """Run conjugate-gradient benchmarks."""
    print("=" * 70)
    print("Conjugate Gradient Benchmarks (extended Rosenbrock)")
    print("=" * 70)

    for dim in [2, 10, 50]:
        print(f"\ndim = {dim}")
        for method in ("polak-ribiere", "fletcher-reeves"):
            for line_search in ("wolfe", "brent"):
                stats = benchmark_variant(dim, method, line_search)
                print(
                    f"  {method:>16s} / {line_search:<5s}: "
                    f"{stats['mean_time_ms']:8.2f} ± {stats['std_time_ms']:6.2f} ms, "
                    f"nit={stats['nit']}, nfev={stats['nfev']}, njev={stats['njev']}, "
                    f"f={stats['fun']:.2e}"
                )


if __name__ == "__main__":
    main()
