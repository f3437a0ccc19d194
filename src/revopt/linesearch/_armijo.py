"""This module implements the backtracking line search."""

from __future__ import annotations

from revopt.config import ArmijoConfig, validate_config
from revopt.enums import LineSearchStatus

from .base import LineSearch


class ArmijoLineSearch(LineSearch):
    """Backtracking line search enforcing the Armijo condition.

    A trial step `stp` is accepted when

    $$f(\\mathrm{stp}) \\le f(0) + \\mathrm{ftol}\\, \\mathrm{stp}\\, f'(0).$$

    Otherwise the step is reduced using the minimizer of the quadratic
    interpolating `f(0)`, `f'(0)` and `f(stp)`, safeguarded to lie in
    `[0.1 stp, 0.5 stp]`. The derivative at the trial steps is not used.
    """

    def __init__(self, ftol: float = 1e-4) -> None:
        """Initialize the line search.

        Args:
            ftol: Tolerance of the sufficient decrease condition.

        Raises:
            InvalidParameter: Unless `0 <= ftol < 1`.
        """
        super().__init__(validate_config(ArmijoConfig, ftol=ftol).ftol)

    def __repr__(self) -> str:
        return f"ArmijoLineSearch(ftol={self._ftol})"

    def _initialize(self) -> None:
        pass

    def _iterate(
        self, stp: float, f: float, _: float
    ) -> tuple[LineSearchStatus, float]:
        if f <= self._finit + self._ftol * stp * self._ginit:
            return LineSearchStatus.CONVERGENCE, stp
        if stp <= self._stpmin:
            return LineSearchStatus.WARNING_STP_EQ_STPMIN, stp
        return LineSearchStatus.SEARCH, max(self._backtrack(stp, f), self._stpmin)

    def _backtrack(self, stp: float, f: float) -> float:
        # Minimizer of q(t) = f0 + df0 t + c t^2 with q(stp) = f.
        curvature = f - self._finit - stp * self._ginit
        if curvature > 0.0:
            stp_q = -0.5 * self._ginit * stp * stp / curvature
            return min(max(stp_q, 0.1 * stp), 0.5 * stp)
        return 0.5 * stp
