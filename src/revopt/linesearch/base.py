"""This module defines the base class of the line searches."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from revopt.enums import LineSearchStatus
from revopt.exceptions import LineSearchError, NotADescentDirection

logger = logging.getLogger(__name__)


class LineSearch(ABC):
    """Abstract base class of the line searches.

    A line search is a reverse-communication state machine looking for a step
    `stp` along a descent direction that satisfies conditions on the function
    `f(stp)` and its derivative `f'(stp)`. It never evaluates anything itself:

    1. [`start`][revopt.linesearch.LineSearch.start] is called with the value
       and derivative at step zero and an initial step, and returns the first
       trial step.
    2. The caller evaluates the function and the derivative at the trial step
       and passes them to [`iterate`][revopt.linesearch.LineSearch.iterate],
       which returns a status and the next step. While the status is
       `SEARCH`, the caller evaluates at the new step and calls `iterate`
       again.
    3. The search ends with `CONVERGENCE`, a warning, or an error. In the
       first two cases the returned step is the accepted step.

    A line search object is reused for all the searches of an optimization;
    each call to `start` begins a new search.

    Subclasses must implement:
    - `_initialize`: Set up a new search, after `start` validated its arguments.
    - `_iterate`: Process a trial step and select the next one.
    """

    def __init__(self, ftol: float) -> None:
        """Initialize the common state of a line search.

        Args:
            ftol: Tolerance of the sufficient decrease condition.
        """
        self._ftol = ftol
        self._status = LineSearchStatus.ERROR_NOT_STARTED
        self._stp = 0.0
        self._stpmin = 0.0
        self._stpmax = 0.0
        self._finit = 0.0
        self._ginit = 0.0

    @property
    def ftol(self) -> float:
        """Return the tolerance of the sufficient decrease condition."""
        return self._ftol

    @property
    def status(self) -> LineSearchStatus:
        """Return the status of the last transition."""
        return self._status

    @property
    def step(self) -> float:
        """Return the current step: the trial step or the accepted step."""
        return self._stp

    @property
    def finished(self) -> bool:
        """Return whether the search has terminated, successfully or not."""
        return self._status != LineSearchStatus.SEARCH

    @property
    def converged(self) -> bool:
        """Return whether the search has converged."""
        return self._status == LineSearchStatus.CONVERGENCE

    @property
    def has_errors(self) -> bool:
        """Return whether the search terminated with an error."""
        return self._status < LineSearchStatus.SEARCH

    @property
    def has_warnings(self) -> bool:
        """Return whether the search terminated with a warning."""
        return self._status > LineSearchStatus.CONVERGENCE

    def reset(self) -> None:
        """Forget the state carried from one search to the next.

        This is called by the optimizers when they start a new optimization.
        """
        self._status = LineSearchStatus.ERROR_NOT_STARTED

    def start(  # noqa: PLR0913
        self, f0: float, df0: float, stp: float, stpmin: float, stpmax: float
    ) -> float:
        """Start a new search.

        Args:
            f0:     The function value at step zero.
            df0:    The directional derivative at step zero, must be negative.
            stp:    The initial step.
            stpmin: The lower bound of the step, must be non-negative.
            stpmax: The upper bound of the step.

        Returns:
            The first trial step, `stp` clipped to `[stpmin, stpmax]`.

        Raises:
            NotADescentDirection: If `df0` is not negative.
            LineSearchError:      If the step bounds are invalid.
        """
        if stpmin < 0.0:
            self._fail(LineSearchStatus.ERROR_STPMIN_LT_ZERO, "stpmin < 0")
        if stpmin > stpmax:
            self._fail(LineSearchStatus.ERROR_STPMIN_GT_STPMAX, "stpmin > stpmax")
        if not df0 < 0.0:
            self._status = LineSearchStatus.ERROR_INITIAL_DERIVATIVE_GE_ZERO
            msg = f"initial directional derivative is not negative: {df0}"
            raise NotADescentDirection(self._status, msg)
        self._finit = f0
        self._ginit = df0
        self._stpmin = stpmin
        self._stpmax = stpmax
        self._stp = min(max(stp, stpmin), stpmax)
        self._status = LineSearchStatus.SEARCH
        self._initialize()
        return self._stp

    def iterate(
        self, stp: float, f: float, df: float
    ) -> tuple[LineSearchStatus, float]:
        """Process the function value and derivative at a trial step.

        Algorithmic failures are not raised, they are reported by the returned
        status, which must be inspected by the caller.

        Args:
            stp: The trial step, which must be the last returned step.
            f:   The function value at the trial step.
            df:  The directional derivative at the trial step.

        Returns:
            The new status and the next (or accepted) step.
        """
        if self._status != LineSearchStatus.SEARCH:
            if self._status == LineSearchStatus.ERROR_NOT_STARTED:
                return self._status, stp
            return self._status, self._stp
        if stp != self._stp:
            self._status = LineSearchStatus.ERROR_STP_CHANGED
        elif stp < self._stpmin:
            self._status = LineSearchStatus.ERROR_STP_LT_STPMIN
        elif stp > self._stpmax:
            self._status = LineSearchStatus.ERROR_STP_GT_STPMAX
        else:
            self._status, self._stp = self._iterate(stp, f, df)
        if self._status != LineSearchStatus.SEARCH:
            logger.debug(
                "line search finished: %s (stp=%g)", self._status.name, self._stp
            )
        return self._status, self._stp

    def _fail(self, status: LineSearchStatus, message: str) -> None:
        self._status = status
        raise LineSearchError(status, message)

    @abstractmethod
    def _initialize(self) -> None:
        """Prepare a new search.

        Called by `start` after the arguments have been validated and stored.
        """

    @abstractmethod
    def _iterate(
        self, stp: float, f: float, df: float
    ) -> tuple[LineSearchStatus, float]:
        """Process a trial step within the bounds.

        Args:
            stp: The trial step.
            f:   The function value at the trial step.
            df:  The directional derivative at the trial step.

        Returns:
            The new status and the next (or accepted) step.
        """
