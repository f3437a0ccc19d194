"""This module implements the optimization drivers."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import numpy as np

from revopt.config import DriverConfig, NLCGMethod, validate_config
from revopt.enums import ExitCode, NLCGFormula, OptimizerTask, VMLMScaling
from revopt.optimizers import NLCG, VMLM
from revopt.vectors import VariableSpace

from ._report import report_iteration, report_parameters
from ._result import OptimizationResult

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from revopt.linesearch import LineSearch
    from revopt.optimizers import Optimizer

    from ._callback import ObjectiveFunction

logger = logging.getLogger(__name__)

_SUPPORTED_TYPES = (np.dtype(np.float32), np.dtype(np.float64))


def nlcg(  # noqa: PLR0913
    fg: ObjectiveFunction,
    x0: ArrayLike,
    method: NLCGMethod | NLCGFormula | int = NLCGMethod(),  # noqa: B008
    *,
    line_search: LineSearch | None = None,
    gatol: float = 0.0,
    grtol: float = 1e-6,
    stpmin: float = 1e-20,
    stpmax: float = 1e20,
    maxeval: int = -1,
    maxiter: int = -1,
    verb: bool = False,
    debug: bool = False,
    output: TextIO | None = None,
) -> OptimizationResult:
    """Minimize a function with a nonlinear conjugate gradient method.

    The objective function is called with the current variables and an array
    receiving the gradient (see
    [`ObjectiveFunction`][revopt.optimization.ObjectiveFunction]). The initial
    variables are not modified: the optimization proceeds on a copy, with the
    same element type if it is single or double precision, and double precision
    otherwise.

    The optimization stops when the Euclidean norm of the gradient becomes
    smaller than `max(gatol, grtol * ‖g₀‖)`, when a budget is exhausted, or
    when the line search fails. The reason is reported by the `exit_code` of
    the result; none of these conditions raise exceptions.

    Args:
        fg:          The objective function.
        x0:          The initial variables.
        method:      The update rule: a method object, a formula, or bit flags.
        line_search: The line search, by default a Moré-Thuente search.
        gatol:       Absolute gradient tolerance.
        grtol:       Relative gradient tolerance.
        stpmin:      Relative lower bound of the line search step.
        stpmax:      Relative upper bound of the line search step.
        maxeval:     Maximum number of evaluations, `-1` for no limit.
        maxiter:     Maximum number of iterations, `-1` for no limit.
        verb:        Print one line per iteration.
        debug:       Print the convergence parameters before starting.
        output:      The stream for printing, by default `sys.stdout`.

    Returns:
        The result of the optimization.

    Raises:
        InvalidParameter: If an option is invalid.
    """
    config = validate_config(
        DriverConfig, maxiter=maxiter, maxeval=maxeval, verb=verb, debug=debug
    )
    x = _initial_variables(x0)
    optimizer = NLCG(
        VariableSpace(x.dtype, x.shape),
        method,
        line_search,
        gatol=gatol,
        grtol=grtol,
        stpmin=stpmin,
        stpmax=stpmax,
    )
    return _run(optimizer, fg, x, config, output)


def vmlm(  # noqa: PLR0913
    fg: ObjectiveFunction,
    x0: ArrayLike,
    m: int = 3,
    *,
    scaling: VMLMScaling = VMLMScaling.OREN_SPEDICATO,
    line_search: LineSearch | None = None,
    gatol: float = 0.0,
    grtol: float = 1e-6,
    stpmin: float = 1e-20,
    stpmax: float = 1e20,
    maxeval: int = -1,
    maxiter: int = -1,
    verb: bool = False,
    debug: bool = False,
    output: TextIO | None = None,
) -> OptimizationResult:
    """Minimize a function with a limited-memory variable metric method.

    This driver behaves as [`nlcg`][revopt.optimization.nlcg], using the
    [`VMLM`][revopt.optimizers.VMLM] optimizer.

    Args:
        fg:          The objective function.
        x0:          The initial variables.
        m:           Number of correction pairs to memorize.
        scaling:     Scaling of the initial inverse Hessian approximation.
        line_search: The line search, by default a Moré-Thuente search.
        gatol:       Absolute gradient tolerance.
        grtol:       Relative gradient tolerance.
        stpmin:      Relative lower bound of the line search step.
        stpmax:      Relative upper bound of the line search step.
        maxeval:     Maximum number of evaluations, `-1` for no limit.
        maxiter:     Maximum number of iterations, `-1` for no limit.
        verb:        Print one line per iteration.
        debug:       Print the convergence parameters before starting.
        output:      The stream for printing, by default `sys.stdout`.

    Returns:
        The result of the optimization.

    Raises:
        InvalidParameter: If an option is invalid.
    """
    config = validate_config(
        DriverConfig, maxiter=maxiter, maxeval=maxeval, verb=verb, debug=debug
    )
    x = _initial_variables(x0)
    optimizer = VMLM(
        VariableSpace(x.dtype, x.shape),
        m,
        line_search,
        scaling=scaling,
        gatol=gatol,
        grtol=grtol,
        stpmin=stpmin,
        stpmax=stpmax,
    )
    return _run(optimizer, fg, x, config, output)


def _initial_variables(x0: ArrayLike) -> NDArray[Any]:
    array = np.asarray(x0)
    dtype = array.dtype if array.dtype in _SUPPORTED_TYPES else np.dtype(np.float64)
    return np.array(array, dtype=dtype, order="C", copy=True)


def _run(
    optimizer: Optimizer[Any],
    fg: ObjectiveFunction,
    x: NDArray[Any],
    config: DriverConfig,
    output: TextIO | None,
) -> OptimizationResult:
    if output is None:
        output = sys.stdout
    g = np.zeros_like(x)
    wx = optimizer.space.wrap(x)
    wg = optimizer.space.wrap(g)
    if config.debug:
        report_parameters(output, optimizer)

    f = 0.0
    task = optimizer.start()
    while True:
        match task:
            case OptimizerTask.COMPUTE_FG:
                f = float(fg(x, g))
            case OptimizerTask.NEW_X | OptimizerTask.FINAL_X:
                if config.verb:
                    report_iteration(output, optimizer)
                if task == OptimizerTask.FINAL_X:
                    return _result(optimizer, x, ExitCode.CONVERGED, "convergence")
                if 0 <= config.maxiter <= optimizer.iterations:
                    msg = f"exceeding maximum number of iterations ({config.maxiter})"
                    logger.warning(msg)
                    return _result(optimizer, x, ExitCode.MAX_ITERATIONS_REACHED, msg)
                if 0 <= config.maxeval <= optimizer.evaluations:
                    msg = (
                        "exceeding maximum number of evaluations "
                        f"({optimizer.evaluations} >= {config.maxeval})"
                    )
                    logger.warning(msg)
                    return _result(optimizer, x, ExitCode.MAX_EVALUATIONS_REACHED, msg)
            case OptimizerTask.WARNING:
                return _result(
                    optimizer, x, ExitCode.LINE_SEARCH_WARNING, optimizer.reason
                )
            case OptimizerTask.ERROR:
                return _result(optimizer, x, ExitCode.OPTIMIZER_ERROR, optimizer.reason)
            case (
                OptimizerTask.PROJECT_X
                | OptimizerTask.PROJECT_D
                | OptimizerTask.FREE_VARS
            ):
                # Unconstrained problems: the projections are the identity.
                pass
            case _:
                msg = f"unexpected task: {task}"
                logger.error(msg)
                return _result(optimizer, x, ExitCode.UNEXPECTED_TASK, msg)
        task = optimizer.iterate(wx, f, wg)


def _result(
    optimizer: Optimizer[Any], x: NDArray[Any], exit_code: ExitCode, message: str
) -> OptimizationResult:
    return OptimizationResult(
        x=x,
        f=optimizer.f,
        gnorm=optimizer.gnorm,
        iterations=optimizer.iterations,
        evaluations=optimizer.evaluations,
        restarts=optimizer.restarts,
        exit_code=exit_code,
        message=message,
    )
