import numpy as np
import pytest

from cgopt.optimize.line_search import (
    BrentLineSearch,
    WolfeLineSearch,
    bracket_minimum,
    brent_minimize,
    initial_step,
    make_line_search,
    wolfe_line_search,
)


def quadratic_fun(x: np.ndarray) -> float:
    return float(x.T @ x)


def quadratic_grad(x: np.ndarray) -> np.ndarray:
    return 2 * x


def rosen(x: np.ndarray) -> float:
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosen_grad(x: np.ndarray) -> np.ndarray:
    return np.array(
        [
            -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def test_wolfe_conditions_rosenbrock():
    x = np.array([-1.2, 1.0])
    grad = rosen_grad(x)
    direction = -grad
    alpha, phi_alpha, nfev, njev = wolfe_line_search(
        rosen, rosen_grad, x, direction, c2=0.9
    )
    phi0 = rosen(x)
    directional_derivative = rosen_grad(x + alpha * direction) @ direction
    assert phi_alpha == rosen(x + alpha * direction)
    assert phi_alpha <= phi0 + 1e-4 * alpha * (grad @ direction)
    assert abs(directional_derivative) <= 0.9 * abs(grad @ direction)
    assert nfev >= 2
    assert njev >= 1


def test_wolfe_zoom_phase_triggered():
    x = np.array([-1.2, 1.0])
    direction = -rosen_grad(x)
    alpha, phi_alpha, _, _ = wolfe_line_search(
        rosen,
        rosen_grad,
        x,
        direction,
        alpha0=5.0,
    )
    assert alpha < 1.0
    assert phi_alpha < rosen(x)


def test_wolfe_exact_on_quadratic_after_zoom():
    x = np.array([1.0, -2.0])
    direction = -quadratic_grad(x)
    alpha, phi_alpha, _, _ = wolfe_line_search(
        quadratic_fun, quadratic_grad, x, direction, alpha0=0.9
    )
    assert alpha == pytest.approx(0.5)
    assert phi_alpha == pytest.approx(0.0, abs=1e-12)


def test_wolfe_accepted_step_refined_to_line_minimum():
    # 0.48 already meets the strong Wolfe conditions; the secant step on
    # phi' lands on the exact minimizer 0.5.
    x = np.array([1.0, -2.0])
    direction = -quadratic_grad(x)
    alpha, phi_alpha, nfev, njev = wolfe_line_search(
        quadratic_fun, quadratic_grad, x, direction, alpha0=0.48
    )
    assert alpha == pytest.approx(0.5, abs=1e-12)
    assert phi_alpha == pytest.approx(0.0, abs=1e-12)
    assert (nfev, njev) == (3, 3)


def test_wolfe_rejects_ascent_direction():
    x = np.array([1.0, -2.0])
    with pytest.raises(ValueError):
        wolfe_line_search(quadratic_fun, quadratic_grad, x, quadratic_grad(x))


def test_wolfe_invalid_constants():
    x = np.array([1.0])
    with pytest.raises(ValueError):
        wolfe_line_search(quadratic_fun, quadratic_grad, x, -x, c1=0.5, c2=0.1)
    with pytest.raises(ValueError):
        WolfeLineSearch(quadratic_fun, quadratic_grad, c2=1.5)
    with pytest.raises(ValueError):
        WolfeLineSearch(quadratic_fun, None)


def test_initial_step_from_previous_value():
    # Previous decrease of 1 along a slope of -4 suggests a step of ~0.5.
    assert initial_step(10.0, -4.0, 11.0) == pytest.approx(0.505)
    assert initial_step(10.0, -0.1, 20.0) == 1.0
    assert initial_step(10.0, -4.0, 9.0) == 1.0


def test_wolfe_strategy_moves_point_in_place():
    search = WolfeLineSearch(rosen, rosen_grad)
    x0 = np.array([-1.2, 1.0])
    x = x0.copy()
    direction = -rosen_grad(x0)
    result = search.minimize(x, direction, True, rosen(x0) + 10.0)
    assert np.allclose(x, x0 + result.step * direction)
    assert result.fmin == pytest.approx(rosen(x))
    assert result.fmin < rosen(x0)
    assert (search.nfev, search.njev) == (result.nfev, result.njev)


def test_bracket_minimum_encloses_parabola_vertex():
    def phi(alpha: float) -> float:
        return (alpha - 2.0) ** 2

    (a, b, c), (fa, fb, fc), nfev = bracket_minimum(phi, 0.0, 1.0)
    assert min(a, c) < 2.0 < max(a, c)
    assert fb <= fa and fb <= fc
    assert (b - a) * (c - b) > 0
    assert nfev >= 3


def test_bracket_minimum_searches_backwards():
    def phi(alpha: float) -> float:
        return (alpha + 3.0) ** 2

    (a, b, c), _, _ = bracket_minimum(phi, 0.0, 1.0)
    assert min(a, c) < -3.0 < max(a, c)


def test_brent_minimize_finds_vertex():
    def phi(alpha: float) -> float:
        return (alpha - 2.0) ** 2 + 1.0

    bracket, values, _ = bracket_minimum(phi)
    xmin, fmin, nfev = brent_minimize(phi, bracket, values[1])
    assert xmin == pytest.approx(2.0, abs=1e-6)
    assert fmin == pytest.approx(1.0, abs=1e-12)
    assert nfev > 0


def test_brent_strategy_is_derivative_free():
    search = BrentLineSearch(quadratic_fun)
    x0 = np.array([1.0, -2.0])
    x = x0.copy()
    result = search.minimize(x, -quadratic_grad(x0))
    assert result.njev == 0
    assert result.step == pytest.approx(0.5, abs=1e-6)
    assert np.allclose(x, 0.0, atol=1e-6)


def test_make_line_search():
    assert isinstance(make_line_search("wolfe", rosen, rosen_grad), WolfeLineSearch)
    assert isinstance(make_line_search("brent", rosen, rosen_grad), BrentLineSearch)
    with pytest.raises(ValueError):
        make_line_search("armijo", rosen, rosen_grad)
