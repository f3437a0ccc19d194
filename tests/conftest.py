from typing import Any, Callable, Sequence

import numpy as np
import pytest
from numpy.typing import NDArray
from scipy.optimize import rosen, rosen_der

_ObjectiveFunction = Callable[[NDArray[Any], NDArray[Any]], float]


def pytest_addoption(parser: Any) -> Any:
    parser.addoption(
        "--run-slow", action="store_true", default=False, help="run slow tests"
    )


def pytest_collection_modifyitems(config: Any, items: Sequence[Any]) -> None:
    if not config.getoption("--run-slow"):
        skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


def _spd_matrix() -> NDArray[np.float64]:
    rng = np.random.default_rng(123)
    a = rng.standard_normal((5, 5))
    return a @ a.T + 5.0 * np.eye(5)


@pytest.fixture(name="spd_problem", scope="session")
def fixture_spd_problem() -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    matrix = _spd_matrix()
    rhs = np.arange(1.0, 6.0)
    return matrix, rhs


@pytest.fixture(scope="session")
def quadratic(
    spd_problem: tuple[NDArray[np.float64], NDArray[np.float64]],
) -> _ObjectiveFunction:
    matrix, rhs = spd_problem

    def _quadratic(x: NDArray[Any], g: NDArray[Any]) -> float:
        ax = matrix @ x
        g[:] = ax - rhs
        return float(0.5 * x @ ax - rhs @ x)

    return _quadratic


@pytest.fixture(scope="session")
def distance_squared() -> Callable[[NDArray[Any]], _ObjectiveFunction]:
    def _distance_squared(target: NDArray[Any]) -> _ObjectiveFunction:
        def _function(x: NDArray[Any], g: NDArray[Any]) -> float:
            g[:] = 2.0 * (x - target)
            return float(np.sum((x - target) ** 2))

        return _function

    return _distance_squared


@pytest.fixture(scope="session")
def rosenbrock() -> _ObjectiveFunction:
    def _rosenbrock(x: NDArray[Any], g: NDArray[Any]) -> float:
        g[:] = rosen_der(x)
        return float(rosen(x))

    return _rosenbrock
