from typing import Any, Callable

import numpy as np
import pytest

from revopt.enums import LineSearchStatus
from revopt.exceptions import InvalidParameter, LineSearchError, NotADescentDirection
from revopt.linesearch import (
    ArmijoLineSearch,
    LineSearch,
    MoreThuenteLineSearch,
    NonmonotoneLineSearch,
)

_Phi = Callable[[float], tuple[float, float]]


def _run(
    search: LineSearch,
    phi: _Phi,
    stp: float,
    stpmin: float = 0.0,
    stpmax: float = 1e10,
) -> tuple[LineSearchStatus, float, int]:
    f0, df0 = phi(0.0)
    stp = search.start(f0, df0, stp, stpmin, stpmax)
    status = LineSearchStatus.SEARCH
    count = 0
    while status == LineSearchStatus.SEARCH:
        count += 1
        assert count < 100
        status, stp = search.iterate(stp, *phi(stp))
    return status, stp, count


def _parabola(x_min: float) -> _Phi:
    return lambda stp: ((stp - x_min) ** 2, 2.0 * (stp - x_min))


def _phi_more_thuente(stp: float, beta: float = 2.0) -> tuple[float, float]:
    # Function (5.1) of Moré and Thuente.
    return -stp / (stp**2 + beta), (stp**2 - beta) / (stp**2 + beta) ** 2


@pytest.fixture(
    name="line_search",
    params=["armijo", "more_thuente", "nonmonotone"],
)
def line_search_fixture(request: Any) -> LineSearch:
    match request.param:
        case "armijo":
            return ArmijoLineSearch()
        case "more_thuente":
            return MoreThuenteLineSearch()
        case "nonmonotone":
            return NonmonotoneLineSearch()
    raise AssertionError


def test_initial_state(line_search: LineSearch) -> None:
    assert line_search.status == LineSearchStatus.ERROR_NOT_STARTED
    assert line_search.has_errors
    assert line_search.finished
    assert not line_search.converged


def test_iterate_before_start(line_search: LineSearch) -> None:
    status, stp = line_search.iterate(1.0, 0.0, -1.0)
    assert status == LineSearchStatus.ERROR_NOT_STARTED
    assert stp == 1.0


def test_start(line_search: LineSearch) -> None:
    stp = line_search.start(1.0, -1.0, 0.5, 0.0, 10.0)
    assert stp == 0.5
    assert line_search.status == LineSearchStatus.SEARCH
    assert line_search.step == 0.5
    assert not line_search.finished
    assert not line_search.has_errors
    assert not line_search.has_warnings


@pytest.mark.parametrize(
    ("stp", "expected"), [(-1.0, 0.1), (0.0, 0.1), (20.0, 10.0), (3.0, 3.0)]
)
def test_start_clips_step(line_search: LineSearch, stp: float, expected: float) -> None:
    assert line_search.start(1.0, -1.0, stp, 0.1, 10.0) == expected


def test_start_not_a_descent(line_search: LineSearch) -> None:
    with pytest.raises(NotADescentDirection) as exc_info:
        line_search.start(1.0, 0.0, 1.0, 0.0, 10.0)
    assert exc_info.value.status == LineSearchStatus.ERROR_INITIAL_DERIVATIVE_GE_ZERO
    assert line_search.status == LineSearchStatus.ERROR_INITIAL_DERIVATIVE_GE_ZERO


@pytest.mark.parametrize(
    ("stpmin", "stpmax", "status"),
    [
        (-1.0, 10.0, LineSearchStatus.ERROR_STPMIN_LT_ZERO),
        (2.0, 1.0, LineSearchStatus.ERROR_STPMIN_GT_STPMAX),
    ],
)
def test_start_invalid_bounds(
    line_search: LineSearch, stpmin: float, stpmax: float, status: LineSearchStatus
) -> None:
    with pytest.raises(LineSearchError, match="stpmin") as exc_info:
        line_search.start(1.0, -1.0, 1.0, stpmin, stpmax)
    assert exc_info.value.status == status
    assert line_search.status == status
    assert line_search.has_errors


def test_iterate_step_changed(line_search: LineSearch) -> None:
    line_search.start(1.0, -1.0, 1.0, 0.0, 10.0)
    status, _ = line_search.iterate(2.0, 0.0, 0.0)
    assert status == LineSearchStatus.ERROR_STP_CHANGED
    assert line_search.has_errors
    status, _ = line_search.iterate(1.0, 0.0, 0.0)
    assert status == LineSearchStatus.ERROR_STP_CHANGED


def test_converges_on_parabola(line_search: LineSearch) -> None:
    status, stp, _ = _run(line_search, _parabola(2.0), 1.0)
    assert status == LineSearchStatus.CONVERGENCE
    assert line_search.converged
    assert line_search.finished
    assert stp == line_search.step
    f0, df0 = _parabola(2.0)(0.0)
    f, _ = _parabola(2.0)(stp)
    assert f <= f0 + line_search.ftol * stp * df0


def test_restart_after_convergence(line_search: LineSearch) -> None:
    _run(line_search, _parabola(2.0), 1.0)
    status, _, _ = _run(line_search, _parabola(3.0), 0.5)
    assert status == LineSearchStatus.CONVERGENCE


@pytest.mark.parametrize("line_search_cls", [ArmijoLineSearch, NonmonotoneLineSearch])
def test_backtracking(line_search_cls: type[LineSearch]) -> None:
    line_search = line_search_cls()
    status, stp, count = _run(line_search, _parabola(1.0), 100.0)
    assert status == LineSearchStatus.CONVERGENCE
    assert count > 1
    assert stp < 2.0


def test_armijo_step_reduction() -> None:
    line_search = ArmijoLineSearch(ftol=0.5)
    stp = line_search.start(1.0, -1.0, 1.0, 0.0, 10.0)
    # Nearly flat quadratic model, the reduction is limited to 0.1.
    status, stp = line_search.iterate(stp, 1e6, 0.0)
    assert status == LineSearchStatus.SEARCH
    assert stp == pytest.approx(0.1)
    # Small increase, the reduction is limited to 0.5.
    status, stp = line_search.iterate(stp, 1.0, 0.0)
    assert status == LineSearchStatus.SEARCH
    assert stp == pytest.approx(0.05)


@pytest.mark.parametrize("line_search_cls", [ArmijoLineSearch, NonmonotoneLineSearch])
def test_backtracking_stpmin(line_search_cls: type[LineSearch]) -> None:
    line_search = line_search_cls()
    stp = line_search.start(0.0, -1.0, 1.0, 0.25, 10.0)
    status = LineSearchStatus.SEARCH
    while status == LineSearchStatus.SEARCH:
        status, stp = line_search.iterate(stp, 1.0, 1.0)
    assert status == LineSearchStatus.WARNING_STP_EQ_STPMIN
    assert line_search.has_warnings
    assert stp == 0.25


def test_backtracking_ignores_non_finite_values() -> None:
    line_search = ArmijoLineSearch()
    stp = line_search.start(0.0, -1.0, 1.0, 0.0, 10.0)
    status, stp = line_search.iterate(stp, np.nan, np.nan)
    assert status == LineSearchStatus.SEARCH
    assert stp == 0.5


def _accept_values(line_search: LineSearch, values: tuple[float, ...]) -> None:
    for f0 in values:
        stp = line_search.start(f0, -1.0, 1.0, 0.0, 10.0)
        status, _ = line_search.iterate(stp, f0, 0.0)
        assert status == LineSearchStatus.CONVERGENCE


def test_nonmonotone_memory() -> None:
    line_search = NonmonotoneLineSearch(mem=3, ftol=0.0)
    _accept_values(line_search, (10.0, 1.0))
    # Compared to max(10, 1, 5), the value 8 is acceptable.
    stp = line_search.start(5.0, -1.0, 1.0, 0.0, 10.0)
    status, _ = line_search.iterate(stp, 8.0, 0.0)
    assert status == LineSearchStatus.CONVERGENCE

    line_search.reset()
    stp = line_search.start(5.0, -1.0, 1.0, 0.0, 10.0)
    status, _ = line_search.iterate(stp, 8.0, 0.0)
    assert status == LineSearchStatus.SEARCH


def test_nonmonotone_memory_length() -> None:
    line_search = NonmonotoneLineSearch(mem=2, ftol=0.0)
    _accept_values(line_search, (10.0, 1.0))
    # The value 10 is forgotten, 8 exceeds max(1, 5).
    stp = line_search.start(5.0, -1.0, 1.0, 0.0, 10.0)
    status, _ = line_search.iterate(stp, 8.0, 0.0)
    assert status == LineSearchStatus.SEARCH


def test_nonmonotone_accepts_increase() -> None:
    line_search = NonmonotoneLineSearch(mem=3)
    stp = line_search.start(10.0, -1.0, 1.0, 0.0, 10.0)
    line_search.iterate(stp, 5.0, 0.0)
    stp = line_search.start(5.0, -1.0, 1.0, 0.0, 10.0)
    status, _ = line_search.iterate(stp, 8.0, 0.0)
    assert status == LineSearchStatus.CONVERGENCE


@pytest.mark.parametrize(
    ("amin", "amax", "f", "expected"),
    [
        (0.1, 0.9, 3.0, 0.25),  # Quadratic step within the bounds.
        (0.3, 0.9, 3.0, 0.5),  # Quadratic step too small, halved step.
        (0.1, 0.2, 3.0, 0.5),  # Quadratic step too large, halved step.
        (0.1, 0.9, 1e6, 0.5),  # Quadratic step near zero, halved step.
    ],
)
def test_nonmonotone_step(amin: float, amax: float, f: float, expected: float) -> None:
    line_search = NonmonotoneLineSearch(mem=1, amin=amin, amax=amax)
    stp = line_search.start(1.0, -2.0, 1.0, 0.0, 10.0)
    status, stp = line_search.iterate(stp, f, 0.0)
    assert status == LineSearchStatus.SEARCH
    assert stp == pytest.approx(expected)



@pytest.mark.parametrize(
    ("stp", "gtol"), [(1e-3, 0.1), (1e-1, 0.1), (1e1, 0.1), (1e3, 0.1)]
)
def test_more_thuente_function_1(stp: float, gtol: float) -> None:
    # The minimizer of this function is sqrt(2).
    line_search = MoreThuenteLineSearch(ftol=1e-3, gtol=gtol)
    status, stp, count = _run(line_search, _phi_more_thuente, stp)
    assert status == LineSearchStatus.CONVERGENCE
    assert count <= 20
    f0, df0 = _phi_more_thuente(0.0)
    f, df = _phi_more_thuente(stp)
    assert f <= f0 + line_search.ftol * stp * df0
    assert abs(df) <= gtol * abs(df0)


def test_more_thuente_strong_wolfe_on_parabola() -> None:
    line_search = MoreThuenteLineSearch(ftol=1e-4, gtol=0.1)
    status, stp, _ = _run(line_search, _parabola(2.0), 1e-3)
    assert status == LineSearchStatus.CONVERGENCE
    _, df = _parabola(2.0)(stp)
    assert abs(df) <= 0.1 * 4.0


def test_more_thuente_stpmax() -> None:
    line_search = MoreThuenteLineSearch()
    status, stp, _ = _run(line_search, lambda stp: (-stp, -1.0), 1.0, stpmax=5.0)
    assert status == LineSearchStatus.WARNING_STP_EQ_STPMAX
    assert stp == 5.0
    assert line_search.has_warnings


def test_more_thuente_stpmin() -> None:
    line_search = MoreThuenteLineSearch()
    status, stp, _ = _run(
        line_search, lambda stp: (stp, 1.0 if stp else -1.0), 1.0, stpmin=1.0
    )
    assert status == LineSearchStatus.WARNING_STP_EQ_STPMIN
    assert stp == 1.0


def _barrier(value: float) -> _Phi:
    # The parabola (stp - 1)^2, undefined beyond stp = 1.5.
    def phi(stp: float) -> tuple[float, float]:
        if stp >= 1.5:
            return value, value
        return (stp - 1.0) ** 2, 2.0 * (stp - 1.0)

    return phi


@pytest.mark.parametrize("value", [np.inf, np.nan])
def test_more_thuente_non_finite_values(value: float) -> None:
    line_search = MoreThuenteLineSearch()
    phi = _barrier(value)
    stp = line_search.start(*phi(0.0), 4.0, 0.0, 1e10)
    trace = []
    status = LineSearchStatus.SEARCH
    while status == LineSearchStatus.SEARCH:
        status, stp = line_search.iterate(stp, *phi(stp))
        trace.append((status, stp))
    assert trace == [
        (LineSearchStatus.SEARCH, 2.0),
        (LineSearchStatus.SEARCH, 1.0),
        (LineSearchStatus.CONVERGENCE, 1.0),
    ]


def test_more_thuente_non_finite_everywhere() -> None:
    line_search = MoreThuenteLineSearch()
    stp = line_search.start(0.0, -1.0, 4.0, 1e-3, 1e10)
    steps = [stp]
    status = LineSearchStatus.SEARCH
    while status == LineSearchStatus.SEARCH:
        assert len(steps) < 100
        status, stp = line_search.iterate(stp, np.inf, np.inf)
        steps.append(stp)
    assert status == LineSearchStatus.ERROR_BAD_WORKSPACE
    assert line_search.has_errors
    assert all(np.isfinite(steps))
    assert steps[1:4] == [2.0, 1.0, 0.5]


def test_more_thuente_parameters() -> None:
    line_search = MoreThuenteLineSearch(ftol=0.01, gtol=0.5, xtol=1e-6)
    assert line_search.ftol == 0.01
    assert line_search.gtol == 0.5
    assert line_search.xtol == 1e-6
    assert line_search.xtol == MoreThuenteLineSearch(xtol=1e-6).xtol
    assert MoreThuenteLineSearch().xtol == np.finfo(np.float64).eps


@pytest.mark.parametrize(
    "kwargs",
    [
        {"ftol": 0.5, "gtol": 0.5},
        {"ftol": 0.5, "gtol": 0.1},
        {"ftol": -0.1},
        {"gtol": 1.0},
        {"xtol": -1.0},
        {"xtol": 1.0},
    ],
)
def test_more_thuente_invalid_parameters(kwargs: dict[str, float]) -> None:
    with pytest.raises(InvalidParameter, match="MoreThuenteConfig"):
        MoreThuenteLineSearch(**kwargs)


@pytest.mark.parametrize("ftol", [-0.1, 1.0, np.nan])
def test_armijo_invalid_parameters(ftol: float) -> None:
    with pytest.raises(InvalidParameter, match="ArmijoConfig"):
        ArmijoLineSearch(ftol=ftol)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"mem": 0},
        {"amin": 0.0},
        {"amin": 0.5, "amax": 0.5},
        {"amax": 1.0},
        {"ftol": 1.0},
    ],
)
def test_nonmonotone_invalid_parameters(kwargs: dict[str, Any]) -> None:
    with pytest.raises(InvalidParameter, match="NonmonotoneConfig"):
        NonmonotoneLineSearch(**kwargs)


def test_nonmonotone_parameters() -> None:
    line_search = NonmonotoneLineSearch(mem=5, ftol=0.01, amin=0.2, amax=0.8)
    assert line_search.mem == 5
    assert line_search.ftol == 0.01
    assert line_search.amin == 0.2
    assert line_search.amax == 0.8
