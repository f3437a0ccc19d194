"""This module implements the line search of Moré and Thuente."""

from __future__ import annotations

import math
from typing import Final, NamedTuple

from revopt.config import MoreThuenteConfig, validate_config
from revopt.enums import LineSearchStatus

from .base import LineSearch

_P5: Final = 0.5
_P66: Final = 0.66
_XTRAPL: Final = 1.1
_XTRAPU: Final = 4.0


class _Bracket(NamedTuple):
    stx: float
    fx: float
    dx: float
    sty: float
    fy: float
    dy: float
    stp: float
    brackt: bool


class MoreThuenteLineSearch(LineSearch):
    """Line search for the strong Wolfe conditions.

    This is the safeguarded cubic and quadratic interpolation search of Moré
    and Thuente, as found in MINPACK-2. A step is accepted when it satisfies
    the sufficient decrease condition

    $$f(\\alpha) \\le f(0) + \\mathrm{ftol}\\, \\alpha f'(0)$$

    and the curvature condition

    $$|f'(\\alpha)| \\le \\mathrm{gtol}\\, |f'(0)|.$$

    The search maintains an interval bracketing an acceptable step, extrapolates
    while no such interval is known, and stops with a warning when the
    interval becomes too small or the step reaches one of its bounds.

    Reference: J. J. Moré and D. J. Thuente, "Line search algorithms with
    guaranteed sufficient decrease", ACM Trans. Math. Software 20, 286-307
    (1994).
    """

    def __init__(
        self,
        ftol: float = 1e-4,
        gtol: float = 0.9,
        xtol: float = MoreThuenteConfig.model_fields["xtol"].default,
    ) -> None:
        """Initialize the line search.

        Args:
            ftol: Tolerance of the sufficient decrease condition.
            gtol: Tolerance of the curvature condition.
            xtol: Relative tolerance on the width of the bracket.

        Raises:
            InvalidParameter: Unless `0 <= ftol < gtol < 1` and `0 <= xtol < 1`.
        """
        config = validate_config(MoreThuenteConfig, ftol=ftol, gtol=gtol, xtol=xtol)
        super().__init__(config.ftol)
        self._gtol = config.gtol
        self._xtol = config.xtol
        self._reset_bracket()

    @property
    def gtol(self) -> float:
        """Return the tolerance of the curvature condition."""
        return self._gtol

    @property
    def xtol(self) -> float:
        """Return the relative tolerance on the width of the bracket."""
        return self._xtol

    def __repr__(self) -> str:
        return (
            f"MoreThuenteLineSearch(ftol={self._ftol}, gtol={self._gtol}, "
            f"xtol={self._xtol})"
        )

    def _reset_bracket(self) -> None:
        self._brackt = False
        self._stage = 1
        self._gtest = 0.0
        self._stx = self._fx = self._gx = 0.0
        self._sty = self._fy = self._gy = 0.0
        self._stmin = self._stmax = 0.0
        self._width = self._width1 = 0.0

    def _initialize(self) -> None:
        self._reset_bracket()
        self._gtest = self._ftol * self._ginit
        self._width = self._stpmax - self._stpmin
        self._width1 = self._width / _P5
        self._fx = self._fy = self._finit
        self._gx = self._gy = self._ginit
        self._stmax = self._stp + _XTRAPU * self._stp

    def _iterate(  # noqa: C901
        self, stp: float, f: float, df: float
    ) -> tuple[LineSearchStatus, float]:
        ftest = self._finit + stp * self._gtest
        if self._stage == 1 and f <= ftest and df >= 0.0:
            self._stage = 2

        # Convergence is tested last, so that it takes precedence.
        status = LineSearchStatus.SEARCH
        if self._brackt and (stp <= self._stmin or stp >= self._stmax):
            status = LineSearchStatus.WARNING_ROUNDING_ERRORS_PREVENT_PROGRESS
        if self._brackt and self._stmax - self._stmin <= self._xtol * self._stmax:
            status = LineSearchStatus.WARNING_XTOL_TEST_SATISFIED
        if stp == self._stpmax and f <= ftest and df <= self._gtest:
            status = LineSearchStatus.WARNING_STP_EQ_STPMAX
        if stp == self._stpmin and (f > ftest or df >= self._gtest):
            status = LineSearchStatus.WARNING_STP_EQ_STPMIN
        if f <= ftest and abs(df) <= self._gtol * (-self._ginit):
            status = LineSearchStatus.CONVERGENCE
        if status != LineSearchStatus.SEARCH:
            return status, stp

        if not (math.isfinite(f) and math.isfinite(df)):
            # No interpolation through a non-finite value: bisect towards stx.
            self._sty, self._fy, self._gy = stp, f, df
            return self._bisect()

        if self._stage == 1 and self._fx >= f > ftest:
            # Use the modified function until a step with sufficient decrease
            # and non-negative derivative has been found.
            result = _cstep(
                self._stx,
                self._fx - self._stx * self._gtest,
                self._gx - self._gtest,
                self._sty,
                self._fy - self._sty * self._gtest,
                self._gy - self._gtest,
                stp,
                f - stp * self._gtest,
                df - self._gtest,
                brackt=self._brackt,
                stpmin=self._stmin,
                stpmax=self._stmax,
            )
            if isinstance(result, LineSearchStatus):
                return result, stp
            self._set_bracket(result)
            self._fx += self._stx * self._gtest
            self._fy += self._sty * self._gtest
            self._gx += self._gtest
            self._gy += self._gtest
        else:
            result = _cstep(
                self._stx,
                self._fx,
                self._gx,
                self._sty,
                self._fy,
                self._gy,
                stp,
                f,
                df,
                brackt=self._brackt,
                stpmin=self._stmin,
                stpmax=self._stmax,
            )
            if isinstance(result, LineSearchStatus):
                return result, stp
            self._set_bracket(result)
        if not math.isfinite(result.stp):
            if not self._brackt:
                return LineSearchStatus.ERROR_BAD_WORKSPACE, self._stx
            return self._bisect()
        stp = result.stp

        if self._brackt:
            # Force a sufficient decrease of the bracket width.
            if abs(self._sty - self._stx) >= _P66 * self._width1:
                stp = self._stx + _P5 * (self._sty - self._stx)
            self._width1 = self._width
            self._width = abs(self._sty - self._stx)
            self._stmin = min(self._stx, self._sty)
            self._stmax = max(self._stx, self._sty)
        else:
            self._stmin = stp + _XTRAPL * (stp - self._stx)
            self._stmax = stp + _XTRAPU * (stp - self._stx)

        stp = min(max(stp, self._stpmin), self._stpmax)

        # Fall back to the best step when no further progress is possible.
        if self._brackt and (
            stp <= self._stmin
            or stp >= self._stmax
            or self._stmax - self._stmin <= self._xtol * self._stmax
        ):
            stp = self._stx
        return LineSearchStatus.SEARCH, stp

    def _set_bracket(self, bracket: _Bracket) -> None:
        self._stx, self._fx, self._gx = bracket.stx, bracket.fx, bracket.dx
        self._sty, self._fy, self._gy = bracket.sty, bracket.fy, bracket.dy
        self._brackt = bracket.brackt

    def _bisect(self) -> tuple[LineSearchStatus, float]:
        # Midpoint of [stx, sty], where sty is the failed trial step.
        stp = self._stx + _P5 * (self._sty - self._stx)
        self._brackt = True
        self._width1 = self._width
        self._width = abs(self._sty - self._stx)
        self._stmin = min(self._stx, self._sty)
        self._stmax = max(self._stx, self._sty)
        if not (
            self._stmin < stp < self._stmax and self._stpmin <= stp <= self._stpmax
        ):
            return LineSearchStatus.ERROR_BAD_WORKSPACE, self._stx
        return LineSearchStatus.SEARCH, stp


def _cstep(  # noqa: C901, PLR0912, PLR0913, PLR0915
    stx: float,
    fx: float,
    dx: float,
    sty: float,
    fy: float,
    dy: float,
    stp: float,
    fp: float,
    dp: float,
    *,
    brackt: bool,
    stpmin: float,
    stpmax: float,
) -> _Bracket | LineSearchStatus:
    """Compute a safeguarded step and update the bracketing interval.

    The step `stx` has the least function value so far, and, if `brackt` is
    set, a minimizer lies between `stx` and `sty`. Given the function value and
    derivative at the trial step `stp`, a new trial step is selected by cubic
    or quadratic interpolation, and the interval is updated.

    Args:
        stx:    The best step so far.
        fx:     The function value at `stx`.
        dx:     The derivative at `stx`, of opposite sign to `stp - stx`.
        sty:    The other endpoint of the interval.
        fy:     The function value at `sty`.
        dy:     The derivative at `sty`.
        stp:    The current step.
        fp:     The function value at `stp`.
        dp:     The derivative at `stp`.
        brackt: Whether a minimizer has been bracketed.
        stpmin: Lower bound of the new step.
        stpmax: Upper bound of the new step.

    Returns:
        The updated interval and new step, or an error status if the
        arguments are inconsistent.
    """
    if brackt and (stp <= min(stx, sty) or stp >= max(stx, sty)):
        return LineSearchStatus.ERROR_STP_OUTSIDE_BRACKET
    if dx * (stp - stx) >= 0.0:
        return LineSearchStatus.ERROR_NOT_A_DESCENT
    if stpmax < stpmin:
        return LineSearchStatus.ERROR_STPMIN_GT_STPMAX

    sgnd = dp * math.copysign(1.0, dx)

    if fp > fx:
        # Higher function value: the minimum is bracketed. Take the cubic step
        # if it is closer to stx, else the average of the cubic and quadratic
        # steps.
        theta = 3.0 * (fx - fp) / (stp - stx) + dx + dp
        s = max(abs(theta), abs(dx), abs(dp))
        gamma = s * math.sqrt(max(0.0, (theta / s) ** 2 - (dx / s) * (dp / s)))
        if stp < stx:
            gamma = -gamma
        p = (gamma - dx) + theta
        q = ((gamma - dx) + gamma) + dp
        stpc = stx + (p / q) * (stp - stx)
        stpq = stx + ((dx / ((fx - fp) / (stp - stx) + dx)) / 2.0) * (stp - stx)
        if abs(stpc - stx) <= abs(stpq - stx):
            stpf = stpc
        else:
            stpf = stpc + (stpq - stpc) / 2.0
        brackt = True
    elif sgnd < 0.0:
        # Derivatives of opposite sign: the minimum is bracketed. Take the step
        # farthest from stp.
        theta = 3.0 * (fx - fp) / (stp - stx) + dx + dp
        s = max(abs(theta), abs(dx), abs(dp))
        gamma = s * math.sqrt(max(0.0, (theta / s) ** 2 - (dx / s) * (dp / s)))
        if stp > stx:
            gamma = -gamma
        p = (gamma - dp) + theta
        q = ((gamma - dp) + gamma) + dx
        stpc = stp + (p / q) * (stx - stp)
        stpq = stp + (dp / (dp - dx)) * (stx - stp)
        stpf = stpc if abs(stpc - stp) > abs(stpq - stp) else stpq
        brackt = True
    elif abs(dp) < abs(dx):
        # Same sign, decreasing magnitude. The cubic step is used only if it
        # tends to infinity in the direction of the step, or if its minimum
        # lies beyond stp.
        theta = 3.0 * (fx - fp) / (stp - stx) + dx + dp
        s = max(abs(theta), abs(dx), abs(dp))
        gamma = s * math.sqrt(max(0.0, (theta / s) ** 2 - (dx / s) * (dp / s)))
        if stp > stx:
            gamma = -gamma
        p = (gamma - dp) + theta
        q = (gamma + (dx - dp)) + gamma
        r = p / q
        if r < 0.0 and gamma != 0.0:
            stpc = stp + r * (stx - stp)
        elif stp > stx:
            stpc = stpmax
        else:
            stpc = stpmin
        stpq = stp + (dp / (dp - dx)) * (stx - stp)
        if brackt:
            stpf = stpc if abs(stpc - stp) < abs(stpq - stp) else stpq
            if stp > stx:
                stpf = min(stp + _P66 * (sty - stp), stpf)
            else:
                stpf = max(stp + _P66 * (sty - stp), stpf)
        else:
            stpf = stpc if abs(stpc - stp) > abs(stpq - stp) else stpq
            stpf = min(max(stpf, stpmin), stpmax)
    elif brackt:
        # Same sign, non-decreasing magnitude, bracketed: cubic step towards sty.
        theta = 3.0 * (fp - fy) / (sty - stp) + dy + dp
        s = max(abs(theta), abs(dy), abs(dp))
        gamma = s * math.sqrt(max(0.0, (theta / s) ** 2 - (dy / s) * (dp / s)))
        if stp > sty:
            gamma = -gamma
        p = (gamma - dp) + theta
        q = ((gamma - dp) + gamma) + dy
        stpf = stp + (p / q) * (sty - stp)
    elif stp > stx:
        stpf = stpmax
    else:
        stpf = stpmin

    if fp > fx:
        sty, fy, dy = stp, fp, dp
    else:
        if sgnd < 0.0:
            sty, fy, dy = stx, fx, dx
        stx, fx, dx = stp, fp, dp

    return _Bracket(stx, fx, dx, sty, fy, dy, stpf, brackt)
