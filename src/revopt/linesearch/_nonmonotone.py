"""This module implements the nonmonotone line search."""

from __future__ import annotations

from collections import deque

from revopt.config import NonmonotoneConfig, validate_config
from revopt.enums import LineSearchStatus

from .base import LineSearch


class NonmonotoneLineSearch(LineSearch):
    """Nonmonotone backtracking line search of Grippo, Lampariello and Lucidi.

    The sufficient decrease condition is measured against the largest of the
    last `mem` function values at the start of the searches, instead of the
    current function value:

    $$f(\\mathrm{stp}) \\le \\max_{0 \\le j < \\mathrm{mem}} f_{k-j} +
    \\mathrm{ftol}\\, \\mathrm{stp}\\, f'(0).$$

    With `mem = 1` this is the Armijo condition. When the condition does not
    hold, the minimizer of the quadratic interpolating `f(0)`, `f'(0)` and
    `f(stp)` is taken as the next step if it lies in `[amin stp, amax stp]`,
    otherwise the step is halved.

    The memory of function values persists from one search to the next, and is
    cleared by [`reset`][revopt.linesearch.LineSearch.reset].
    """

    def __init__(
        self,
        mem: int = 10,
        ftol: float = 1e-4,
        amin: float = 0.1,
        amax: float = 0.9,
    ) -> None:
        """Initialize the line search.

        Args:
            mem:  The number of function values to remember.
            ftol: Tolerance of the sufficient decrease condition.
            amin: Smallest relative reduction of the step.
            amax: Largest relative reduction of the step.

        Raises:
            InvalidParameter: Unless `mem >= 1`, `0 <= ftol < 1` and
                `0 < amin < amax < 1`.
        """
        config = validate_config(
            NonmonotoneConfig, mem=mem, ftol=ftol, amin=amin, amax=amax
        )
        super().__init__(config.ftol)
        self._mem = config.mem
        self._amin = config.amin
        self._amax = config.amax
        self._history: deque[float] = deque(maxlen=self._mem)
        self._fmax = 0.0

    @property
    def mem(self) -> int:
        """Return the number of remembered function values."""
        return self._mem

    @property
    def amin(self) -> float:
        """Return the smallest relative reduction of the step."""
        return self._amin

    @property
    def amax(self) -> float:
        """Return the largest relative reduction of the step."""
        return self._amax

    def __repr__(self) -> str:
        return (
            f"NonmonotoneLineSearch(mem={self._mem}, ftol={self._ftol}, "
            f"amin={self._amin}, amax={self._amax})"
        )

    def reset(self) -> None:
        """Forget the remembered function values."""
        super().reset()
        self._history.clear()

    def _initialize(self) -> None:
        self._history.append(self._finit)
        self._fmax = max(self._history)

    def _iterate(
        self, stp: float, f: float, _: float
    ) -> tuple[LineSearchStatus, float]:
        if f <= self._fmax + self._ftol * stp * self._ginit:
            return LineSearchStatus.CONVERGENCE, stp
        if stp <= self._stpmin:
            return LineSearchStatus.WARNING_STP_EQ_STPMIN, stp
        lower = self._amin * stp
        upper = self._amax * stp
        new_stp = 0.5 * stp
        curvature = f - self._finit - stp * self._ginit
        if curvature > 0.0:
            stp_q = -0.5 * self._ginit * stp * stp / curvature
            if lower <= stp_q <= upper:
                new_stp = stp_q
        return LineSearchStatus.SEARCH, max(new_stp, self._stpmin)
