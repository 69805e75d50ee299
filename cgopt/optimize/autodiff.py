"""Objective/gradient pairs obtained from PyTorch autograd.

Writing a gradient by hand is the most common source of the errors that
gradient checking catches. :func:`torch_problem` instead derives the
gradient of a torch-traceable objective, while exposing the NumPy
interface the optimizers expect.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
import torch

from .core import Array, Problem

TorchObjective = Callable[[torch.Tensor], torch.Tensor]


def _as_tensor(x: Array, dtype: torch.dtype, requires_grad: bool) -> torch.Tensor:
    return torch.tensor(np.asarray(x, dtype=float), dtype=dtype, requires_grad=requires_grad)


def torch_problem(
    fun: TorchObjective,
    dim: int,
    dtype: torch.dtype = torch.float64,
) -> Problem:
    """
    Wrap a torch objective into a :class:`Problem` with an autograd gradient.

    Parameters
    ----------
    fun:
        Function mapping a 1-D tensor of length ``dim`` to a scalar tensor.
    dim:
        Problem dimension.
    dtype:
        Floating dtype used for evaluation (default: float64).

    Returns
    -------
    Problem
        ``fun`` returns Python floats and ``grad`` float64 arrays.

    Example
    -------
    >>> problem = torch_problem(lambda t: ((t - 1.0) ** 2).sum(), dim=3)
    >>> problem.grad(np.zeros(3))
    array([-2., -2., -2.])
    """
    if dim <= 0:
        raise ValueError(f"dim must be positive, got {dim}")
    if not dtype.is_floating_point:
        raise ValueError(f"dtype must be a floating point dtype, got {dtype}")

    def objective(x: Array) -> float:
        with torch.no_grad():
            value = fun(_as_tensor(x, dtype, requires_grad=False))
        return float(value.item())

    def gradient(x: Array) -> Array:
        point = _as_tensor(x, dtype, requires_grad=True)
        value = fun(point)
        if value.numel() != 1:
            raise ValueError(
                f"objective must return a scalar tensor, got shape {tuple(value.shape)}"
            )
        if not value.requires_grad:
            return np.zeros(dim)
        (grad,) = torch.autograd.grad(value.reshape(()), point, allow_unused=True)
        if grad is None:
            return np.zeros(dim)
        return grad.detach().cpu().numpy().astype(float)

    return Problem(fun=objective, grad=gradient, dim=dim)


__all__ = ["TorchObjective", "torch_problem"]
