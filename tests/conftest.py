"""Pytest configuration and shared fixtures for cgopt tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Common test problems with known minimizers
"""

import os

import numpy as np
import pytest
import torch

from cgopt.debug import set_debug_enabled


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture(scope="function", autouse=True)
def debug_disabled():
    """Run every test with gradient checking off unless it opts in."""
    set_debug_enabled(False)
    yield
    set_debug_enabled(False)


@pytest.fixture
def spd_quadratic(rng: np.random.Generator):
    """Random 5-dimensional ``0.5 x^T A x - b^T x`` with A positive definite."""
    n = 5
    m = rng.standard_normal((n, n))
    a_mat = m @ m.T + n * np.eye(n)
    b_vec = rng.standard_normal(n)

    def fun(x: np.ndarray) -> float:
        return float(0.5 * x @ (a_mat @ x) - b_vec @ x)

    def grad(x: np.ndarray) -> np.ndarray:
        return a_mat @ x - b_vec

    return fun, grad, np.linalg.solve(a_mat, b_vec)
