import io
from typing import Any, Callable

import numpy as np
import pytest
from numpy.typing import NDArray

from revopt.config import POWELL, NLCGMethod
from revopt.enums import ExitCode, NLCGFormula, VMLMScaling
from revopt.exceptions import InvalidParameter
from revopt.linesearch import ArmijoLineSearch, NonmonotoneLineSearch
from revopt.optimization import nlcg, vmlm
from revopt.optimization._report import HEADER

_ObjectiveFunction = Callable[[NDArray[Any], NDArray[Any]], float]

_DRIVERS = {"nlcg": nlcg, "vmlm": vmlm}


@pytest.fixture(name="driver", params=["nlcg", "vmlm"])
def driver_fixture(request: Any) -> Any:
    return _DRIVERS[request.param]


def _linear(x: NDArray[Any], g: NDArray[Any]) -> float:
    g[:] = [-1.0, 0.0]
    return float(-x[0])


def _invalid_gradient(x: NDArray[Any], g: NDArray[Any]) -> float:
    g[:] = np.nan
    return float(np.sum(x**2))


def test_quadratic(
    driver: Any,
    quadratic: _ObjectiveFunction,
    spd_problem: tuple[NDArray[np.float64], NDArray[np.float64]],
) -> None:
    matrix, rhs = spd_problem
    result = driver(quadratic, np.zeros(5), gatol=1e-6, grtol=0.0)
    assert result.converged
    assert result.exit_code == ExitCode.CONVERGED
    assert result.message == "convergence"
    assert result.gnorm <= 1e-6
    assert np.allclose(result.x, np.linalg.solve(matrix, rhs), atol=1e-6)


def test_rosenbrock(driver: Any, rosenbrock: _ObjectiveFunction) -> None:
    result = driver(rosenbrock, [-1.2, 1.0], gatol=1e-6, grtol=0.0, maxeval=5000)
    assert result.converged
    assert np.allclose(result.x, 1.0, atol=1e-4)
    assert result.f == pytest.approx(0.0, abs=1e-10)
    assert result.iterations > 0
    assert result.evaluations >= result.iterations


@pytest.mark.parametrize(
    "method",
    [
        NLCGFormula.FLETCHER_REEVES,
        NLCGFormula.POLAK_RIBIERE_POLYAK | POWELL,
        NLCGMethod(formula=NLCGFormula.PERRY_SHANNO, shanno_phua=True),
    ],
)
def test_nlcg_method(quadratic: _ObjectiveFunction, method: Any) -> None:
    result = nlcg(quadratic, np.zeros(5), method, gatol=1e-6, grtol=0.0)
    assert result.converged


@pytest.mark.parametrize("scaling", list(VMLMScaling))
def test_vmlm_scaling(quadratic: _ObjectiveFunction, scaling: VMLMScaling) -> None:
    result = vmlm(quadratic, np.zeros(5), 5, scaling=scaling, gatol=1e-6, grtol=0.0)
    assert result.converged


@pytest.mark.parametrize(
    "line_search", [ArmijoLineSearch(), NonmonotoneLineSearch(mem=5)]
)
def test_line_search(
    driver: Any,
    distance_squared: Callable[..., _ObjectiveFunction],
    line_search: Any,
) -> None:
    target = np.arange(1.0, 11.0)
    result = driver(distance_squared(target), np.zeros(10), line_search=line_search)
    assert result.converged
    assert np.allclose(result.x, target, atol=1e-4)


def test_max_iterations_zero(driver: Any, quadratic: _ObjectiveFunction) -> None:
    result = driver(quadratic, np.zeros(5), maxiter=0)
    assert result.exit_code == ExitCode.MAX_ITERATIONS_REACHED
    assert not result.converged
    assert "maximum number of iterations" in result.message
    assert result.iterations == 0
    assert result.evaluations == 1
    assert np.array_equal(result.x, np.zeros(5))


def test_max_iterations(driver: Any, rosenbrock: _ObjectiveFunction) -> None:
    result = driver(rosenbrock, [-1.2, 1.0], maxiter=3)
    assert result.exit_code == ExitCode.MAX_ITERATIONS_REACHED
    assert result.iterations == 3


def test_max_evaluations(driver: Any, quadratic: _ObjectiveFunction) -> None:
    result = driver(quadratic, np.zeros(5), maxeval=1)
    assert result.exit_code == ExitCode.MAX_EVALUATIONS_REACHED
    assert "maximum number of evaluations" in result.message
    assert result.evaluations == 1
    assert result.iterations == 0


def test_max_evaluations_checked_at_new_iterates(
    driver: Any, rosenbrock: _ObjectiveFunction
) -> None:
    result = driver(rosenbrock, [-1.2, 1.0], maxeval=10)
    assert result.exit_code == ExitCode.MAX_EVALUATIONS_REACHED
    assert result.evaluations >= 10


def test_line_search_warning(driver: Any) -> None:
    result = driver(_linear, np.zeros(2), stpmax=10.0)
    assert result.exit_code == ExitCode.LINE_SEARCH_WARNING
    assert "WARNING_STP_EQ_STPMAX" in result.message
    assert result.f == -10.0
    assert np.allclose(result.x, [10.0, 0.0])


def test_optimizer_error(driver: Any) -> None:
    result = driver(_invalid_gradient, np.ones(3))
    assert result.exit_code == ExitCode.OPTIMIZER_ERROR
    assert "not negative" in result.message
    assert result.evaluations == 1


def test_initial_variables_unchanged(
    driver: Any, distance_squared: Callable[..., _ObjectiveFunction]
) -> None:
    x0 = np.zeros(4)
    result = driver(distance_squared(np.ones(4)), x0)
    assert result.converged
    assert np.array_equal(x0, np.zeros(4))
    assert not np.shares_memory(result.x, x0)


@pytest.mark.parametrize(
    ("x0", "dtype"),
    [
        (np.zeros(3, dtype=np.float32), np.float32),
        (np.zeros(3), np.float64),
        ([0, 0, 0], np.float64),
        (np.zeros(3, dtype=np.float16), np.float64),
    ],
)
def test_element_type(
    driver: Any,
    distance_squared: Callable[..., _ObjectiveFunction],
    x0: Any,
    dtype: Any,
) -> None:
    result = driver(distance_squared(np.array([1.0, 2.0, 3.0])), x0, grtol=1e-5)
    assert result.converged
    assert result.x.dtype == dtype
    assert np.allclose(result.x, [1.0, 2.0, 3.0], atol=1e-3)


def test_multidimensional_variables(
    driver: Any, distance_squared: Callable[..., _ObjectiveFunction]
) -> None:
    target = np.arange(6.0).reshape(2, 3)
    result = driver(distance_squared(target), np.zeros((2, 3)))
    assert result.converged
    assert result.x.shape == (2, 3)
    assert np.allclose(result.x, target, atol=1e-4)


def test_verbose_output(driver: Any, quadratic: _ObjectiveFunction) -> None:
    output = io.StringIO()
    result = driver(quadratic, np.zeros(5), maxiter=2, verb=True, output=output)
    lines = output.getvalue().splitlines()
    assert output.getvalue().startswith(HEADER)
    rows = lines[2:]
    assert len(rows) == result.iterations + 1
    assert [int(row.split()[0]) for row in rows] == [0, 1, 2]
    assert int(rows[-1].split()[1]) == result.evaluations
    assert float(rows[-1].split()[3]) == pytest.approx(result.f)


def test_quiet_output(driver: Any, quadratic: _ObjectiveFunction) -> None:
    output = io.StringIO()
    driver(quadratic, np.zeros(5), output=output)
    assert output.getvalue() == ""


def test_debug_output(driver: Any, quadratic: _ObjectiveFunction) -> None:
    output = io.StringIO()
    driver(quadratic, np.zeros(5), maxiter=0, debug=True, output=output)
    assert output.getvalue() == (
        "gatol=0.000000E+00; grtol=1.000000E-06; "
        "stpmin=1.000000E-20; stpmax=1.000000E+20\n"
    )


def test_verbose_stdout(
    driver: Any, quadratic: _ObjectiveFunction, capsys: Any
) -> None:
    driver(quadratic, np.zeros(5), maxiter=0, verb=True)
    assert capsys.readouterr().out.startswith(HEADER)


def test_budget_warning_logged(
    driver: Any, quadratic: _ObjectiveFunction, caplog: Any
) -> None:
    driver(quadratic, np.zeros(5), maxiter=0)
    assert "maximum number of iterations (0)" in caplog.text


@pytest.mark.parametrize(
    "kwargs",
    [
        {"maxiter": -2},
        {"maxeval": -2},
        {"gatol": -1.0},
        {"grtol": np.nan},
        {"stpmin": 1.0, "stpmax": 0.5},
    ],
)
def test_invalid_options(
    driver: Any, quadratic: _ObjectiveFunction, kwargs: dict[str, Any]
) -> None:
    with pytest.raises(InvalidParameter):
        driver(quadratic, np.zeros(5), **kwargs)


@pytest.mark.parametrize("method", [0, 9, 1 << 10])
def test_invalid_method(quadratic: _ObjectiveFunction, method: int) -> None:
    with pytest.raises(InvalidParameter):
        nlcg(quadratic, np.zeros(5), method)


def test_invalid_memory(quadratic: _ObjectiveFunction) -> None:
    with pytest.raises(InvalidParameter):
        vmlm(quadratic, np.zeros(5), 0)


@pytest.mark.slow
@pytest.mark.parametrize(
    "method",
    [
        NLCGFormula.HAGER_ZHANG,
        NLCGFormula.PERRY_SHANNO,
        NLCGFormula.POLAK_RIBIERE_POLYAK | POWELL,
    ],
)
def test_large_rosenbrock_nlcg(rosenbrock: _ObjectiveFunction, method: Any) -> None:
    x0 = np.tile([-1.2, 1.0], 50)
    result = nlcg(rosenbrock, x0, method, gatol=1e-6, grtol=0.0, maxeval=100000)
    assert result.converged
    assert np.allclose(result.x, 1.0, atol=1e-4)


@pytest.mark.slow
@pytest.mark.parametrize("m", [1, 3, 10])
def test_large_rosenbrock_vmlm(rosenbrock: _ObjectiveFunction, m: int) -> None:
    x0 = np.tile([-1.2, 1.0], 50)
    result = vmlm(rosenbrock, x0, m, gatol=1e-6, grtol=0.0, maxeval=100000)
    assert result.converged
    assert np.allclose(result.x, 1.0, atol=1e-4)
