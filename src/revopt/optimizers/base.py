"""This module defines the base class of the optimizers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from revopt.config import OptimizerConfig, validate_config
from revopt.enums import LineSearchStatus, OptimizerTask
from revopt.exceptions import LineSearchError, SpaceMismatch
from revopt.vectors import combine, copy, dot

if TYPE_CHECKING:
    from revopt.linesearch import LineSearch
    from revopt.vectors import Variable, VariableSpace

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=OptimizerConfig)


class Optimizer(ABC, Generic[ConfigT]):
    """Abstract base class of the reverse-communication optimizers.

    An optimizer minimizes a smooth function of the variables of a
    [`VariableSpace`][revopt.vectors.VariableSpace] without ever evaluating the
    function itself. Instead, each call to
    [`start`][revopt.optimizers.Optimizer.start] or
    [`iterate`][revopt.optimizers.Optimizer.iterate] returns a
    [`task`][revopt.enums.OptimizerTask] that the caller must perform before
    calling `iterate` again:

    - `COMPUTE_FG`: Evaluate the function and its gradient at the variables.
    - `NEW_X`: A new iterate is available; the caller may inspect it, check
      its own stopping criteria, and call `iterate` to continue.
    - `FINAL_X`: The gradient convergence test is satisfied.
    - `WARNING`, `ERROR`: The optimization cannot proceed. The reason is
      available via the [`reason`][revopt.optimizers.Optimizer.reason]
      property. These tasks are sticky: further calls to `iterate` return
      them unchanged.

    The variables, function value and gradient are owned by the caller and
    passed to each call of `iterate`. During a line search the optimizer
    updates the variables in place to the next trial point.

    All search directions are followed by a line search. The step bounds given
    to the line search are relative to its first trial step.

    Subclasses must implement:
    - `_compute_direction`: Compute a search direction and its first trial step.
    - `_update`: Update the memory of the method after an accepted step.
    - `_clear`: Forget the memory of the method.
    """

    def __init__(
        self, space: VariableSpace, line_search: LineSearch, config: ConfigT
    ) -> None:
        """Initialize the common state of the optimizers.

        Args:
            space:       The variable space of the problem.
            line_search: The line search used along the search directions.
            config:      The validated configuration.
        """
        self._space = space
        self._line_search = line_search
        self._config = config
        self._x0 = space.create()
        self._g0 = space.create()
        self._d = space.create()
        self._task = OptimizerTask.ERROR
        self._reason = "the optimizer has not been started"
        self._f0 = 0.0
        self._f = 0.0
        self._dg0 = 0.0
        self._gnorm = 0.0
        self._gtest = 0.0
        self._stp = 0.0
        self._iterations = 0
        self._evaluations = 0
        self._restarts = 0
        self._searching = False

    @property
    def space(self) -> VariableSpace:
        """Return the variable space of the optimizer."""
        return self._space

    @property
    def line_search(self) -> LineSearch:
        """Return the line search used by the optimizer."""
        return self._line_search

    @property
    def task(self) -> OptimizerTask:
        """Return the pending task."""
        return self._task

    @property
    def reason(self) -> str:
        """Return a description of the last warning or error.

        Returns:
            The description, or an empty string.
        """
        return self._reason

    @property
    def f(self) -> float:
        """Return the function value at the current iterate."""
        return self._f

    @property
    def gnorm(self) -> float:
        """Return the Euclidean norm of the gradient at the current iterate."""
        return self._gnorm

    @property
    def step(self) -> float:
        """Return the current (or last accepted) step of the line search."""
        return self._stp

    @property
    def iterations(self) -> int:
        """Return the number of accepted steps."""
        return self._iterations

    @property
    def evaluations(self) -> int:
        """Return the number of function and gradient evaluations."""
        return self._evaluations

    @property
    def restarts(self) -> int:
        """Return the number of restarts along the steepest descent."""
        return self._restarts

    @property
    def gatol(self) -> float:
        """Return the absolute gradient tolerance."""
        return self._config.gatol

    @gatol.setter
    def gatol(self, value: float) -> None:
        self._reconfigure(gatol=value)

    @property
    def grtol(self) -> float:
        """Return the relative gradient tolerance."""
        return self._config.grtol

    @grtol.setter
    def grtol(self, value: float) -> None:
        self._reconfigure(grtol=value)

    @property
    def stpmin(self) -> float:
        """Return the relative lower bound of the line search step."""
        return self._config.stpmin

    @property
    def stpmax(self) -> float:
        """Return the relative upper bound of the line search step."""
        return self._config.stpmax

    @property
    def delta(self) -> float:
        """Return the relative size of the first change of the variables."""
        return self._config.delta

    @property
    def epsilon(self) -> float:
        """Return the threshold for sufficient descent directions."""
        return self._config.epsilon

    def set_step_bounds(self, stpmin: float, stpmax: float) -> None:
        """Set the relative bounds of the line search step.

        Args:
            stpmin: The lower bound.
            stpmax: The upper bound.

        Raises:
            InvalidParameter: Unless `0 <= stpmin < stpmax`.
        """
        self._reconfigure(stpmin=stpmin, stpmax=stpmax)

    def start(self) -> OptimizerTask:
        """Start a new optimization.

        The counters and the memory of the method are reset. The caller must
        then evaluate the function and the gradient at the initial variables.

        Returns:
            The `COMPUTE_FG` task.
        """
        self._iterations = 0
        self._evaluations = 0
        self._restarts = 0
        self._reason = ""
        self._searching = False
        self._stp = 0.0
        self._clear()
        self._line_search.reset()
        self._task = OptimizerTask.COMPUTE_FG
        return self._task

    def iterate(self, x: Variable, f: float, g: Variable) -> OptimizerTask:
        """Proceed with the optimization.

        Args:
            x: The variables, modified in place during the line searches.
            f: The function value at `x`, if the pending task is `COMPUTE_FG`.
            g: The gradient at `x`, if the pending task is `COMPUTE_FG`.

        Returns:
            The next task.

        Raises:
            SpaceMismatch: If `x` or `g` do not belong to the optimizer space.
        """
        for name, variable in (("variables", x), ("gradient", g)):
            if variable.space != self._space:
                msg = f"{name} from {variable.space}, expected {self._space}"
                raise SpaceMismatch(msg)
        if self._task == OptimizerTask.COMPUTE_FG:
            self._evaluations += 1
            if self._searching:
                self._task = self._continue_search(x, f, g)
            else:
                self._f = f
                self._gnorm = g.norm2()
                self._gtest = max(self.gatol, self.grtol * self._gnorm)
                self._task = self._check_convergence()
        elif self._task in {OptimizerTask.NEW_X, OptimizerTask.FINAL_X}:
            self._task = self._start_search(x, g)
        return self._task

    def _start_search(self, x: Variable, g: Variable) -> OptimizerTask:
        stp = self._compute_direction(x, g)
        dg = dot(self._d, g)
        copy(self._x0, x)
        copy(self._g0, g)
        self._f0 = self._f
        self._dg0 = dg
        try:
            self._stp = self._line_search.start(
                self._f0, dg, stp, self.stpmin * stp, self.stpmax * stp
            )
        except LineSearchError as exc:
            return self._error(str(exc))
        self._searching = True
        combine(x, 1.0, self._x0, self._stp, self._d)
        return OptimizerTask.COMPUTE_FG

    def _continue_search(self, x: Variable, f: float, g: Variable) -> OptimizerTask:
        status, stp = self._line_search.iterate(self._stp, f, dot(self._d, g))
        if status == LineSearchStatus.SEARCH:
            self._stp = stp
            combine(x, 1.0, self._x0, stp, self._d)
            return OptimizerTask.COMPUTE_FG
        self._searching = False
        if status == LineSearchStatus.CONVERGENCE:
            self._accept(f, g)
            self._update(x, g)
            return self._check_convergence()
        if status > LineSearchStatus.CONVERGENCE:
            if f <= self._f0:
                self._accept(f, g)
            else:
                self._restore(x, g)
            self._reason = f"line search warning: {status.name}"
            logger.warning(self._reason)
            return OptimizerTask.WARNING
        self._restore(x, g)
        return self._error(f"line search error: {status.name}")

    def _accept(self, f: float, g: Variable) -> None:
        self._f = f
        self._gnorm = g.norm2()
        self._iterations += 1

    def _restore(self, x: Variable, g: Variable) -> None:
        copy(x, self._x0)
        copy(g, self._g0)
        self._f = self._f0

    def _check_convergence(self) -> OptimizerTask:
        if self._gnorm <= self._gtest:
            return OptimizerTask.FINAL_X
        return OptimizerTask.NEW_X

    def _error(self, reason: str) -> OptimizerTask:
        self._searching = False
        self._reason = reason
        logger.error(reason)
        return OptimizerTask.ERROR

    def _steepest_descent(self, x: Variable, g: Variable) -> float:
        # d = -g, with a first step of norm delta * |x|, or of unit norm at x = 0.
        self._d.scale(-1.0, g)
        dnorm = self._d.norm2()
        if dnorm == 0.0:
            return 1.0
        xnorm = x.norm2()
        if xnorm > 0.0:
            return self.delta * xnorm / dnorm
        return 1.0 / dnorm

    def _is_descent(self, dg: float, g: Variable) -> bool:
        return dg < -self.epsilon * self._d.norm2() * g.norm2()

    def _restart(self, x: Variable, g: Variable, reason: str) -> float:
        self._restarts += 1
        self._clear()
        logger.debug("restart along the steepest descent: %s", reason)
        return self._steepest_descent(x, g)

    def _reconfigure(self, **kwargs: Any) -> None:  # noqa: ANN401
        values = self._config.model_dump()
        values.update(kwargs)
        self._config = validate_config(type(self._config), **values)

    @abstractmethod
    def _compute_direction(self, x: Variable, g: Variable) -> float:
        """Compute a search direction.

        The direction must be stored in `self._d`. The previous direction, and
        the variables and gradient at the start of the previous line search,
        are still available in `self._d`, `self._x0` and `self._g0`.

        Args:
            x: The current variables.
            g: The gradient at `x`.

        Returns:
            The first trial step along the direction.
        """

    @abstractmethod
    def _update(self, x: Variable, g: Variable) -> None:
        """Update the memory of the method after an accepted step.

        Args:
            x: The accepted variables.
            g: The gradient at `x`.
        """

    @abstractmethod
    def _clear(self) -> None:
        """Forget the memory of the method."""
