import numpy as np
import pytest

from cgopt.optimize import GradientCheckError, Problem, Status, conjugate_gradient


def rosenbrock(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosenbrock_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def himmelblau(x: np.ndarray) -> float:
    return (x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2


def himmelblau_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            4 * x[0] * (x[0] ** 2 + x[1] - 11) + 2 * (x[0] + x[1] ** 2 - 7),
            2 * (x[0] ** 2 + x[1] - 11) + 4 * x[1] * (x[0] + x[1] ** 2 - 7),
        ]
    )


def test_rosenbrock_result_fields():
    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    x0 = np.array([-1.2, 1.0])
    res = conjugate_gradient(problem, x0, maxiter=1000)
    assert res.success
    assert res.status in (Status.GTOL_SATISFIED, Status.FTOL_SATISFIED)
    assert np.allclose(res.x, np.ones(2), atol=1e-3)
    assert res.fun < 1e-6
    assert res.grad_norm < 1e-1
    assert res.nfev > 0 and res.njev > 0
    assert np.array_equal(x0, [-1.2, 1.0])


@pytest.mark.parametrize("method", ["polak-ribiere", "fletcher-reeves"])
@pytest.mark.parametrize("line_search", ["wolfe", "brent"])
def test_himmelblau_minimum_found(method, line_search):
    problem = Problem(fun=himmelblau, grad=himmelblau_grad, dim=2)
    res = conjugate_gradient(
        problem,
        np.array([3.0, 1.5]),
        maxiter=500,
        ftol=1e-14,
        method=method,
        line_search=line_search,
    )
    assert res.success
    assert np.allclose(res.x, [3.0, 2.0], atol=1e-5)
    assert res.fun < 1e-9


def test_quadratic_matches_linear_solve():
    a_mat = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 0.5], [0.0, 0.5, 2.0]])
    b_vec = np.array([1.0, 2.0, -1.0])

    def fun(x: np.ndarray) -> float:
        return 0.5 * x @ (a_mat @ x) - b_vec @ x

    def grad(x: np.ndarray) -> np.ndarray:
        return a_mat @ x - b_vec

    problem = Problem(fun=fun, grad=grad)
    res = conjugate_gradient(problem, np.zeros(3), ftol=1e-14, gtol=1e-12)
    assert res.success
    assert np.allclose(res.x, np.linalg.solve(a_mat, b_vec), atol=1e-6)


def test_exhausted_budget_reported_without_raising():
    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    res = conjugate_gradient(problem, np.array([-1.2, 1.0]), maxiter=3)
    assert not res.success
    assert res.status is Status.MAX_ITER
    assert res.message == "Maximum iterations reached."
    assert res.nit == 3
    assert res.fun == pytest.approx(rosenbrock(res.x))
    assert res.fun < rosenbrock(np.array([-1.2, 1.0]))


def test_history_lists_iterates():
    problem = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
    res = conjugate_gradient(problem, np.array([-1.2, 1.0]), maxiter=1000, history=True)
    assert np.array_equal(res.history[0], [-1.2, 1.0])
    assert np.allclose(res.history[-1], res.x)
    assert len(res.history) == res.nit + 2 or len(res.history) == res.nit + 1


def test_gradient_check_failure_propagates():
    problem = Problem(fun=rosenbrock, grad=lambda x: 0.5 * rosenbrock_grad(x), dim=2)
    with pytest.raises(GradientCheckError):
        conjugate_gradient(problem, np.array([-1.2, 1.0]), check_gradient=True)


def test_requires_gradient():
    with pytest.raises(ValueError):
        conjugate_gradient(Problem(fun=rosenbrock, dim=2), np.zeros(2))
