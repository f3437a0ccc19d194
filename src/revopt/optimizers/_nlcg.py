"""This module implements the nonlinear conjugate gradient method."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Final

from revopt.config import NLCGConfig, NLCGMethod, validate_config
from revopt.enums import NLCGFormula
from revopt.linesearch import MoreThuenteLineSearch
from revopt.vectors import combine, dot

from .base import Optimizer

if TYPE_CHECKING:
    from revopt.linesearch import LineSearch
    from revopt.vectors import Variable, VariableSpace

_HZ_ETA: Final = 0.01


def as_nlcg_method(method: NLCGMethod | NLCGFormula | int) -> NLCGMethod:
    """Convert a method description to an `NLCGMethod` object.

    Args:
        method: A method object, a formula (with the default modifiers), or
                the legacy bit flags.

    Returns:
        The method object.

    Raises:
        InvalidParameter: If the bit flags are invalid.
    """
    if isinstance(method, NLCGMethod):
        return method
    if isinstance(method, NLCGFormula):
        return NLCGMethod(formula=method)
    return NLCGMethod.from_flags(method)


class NLCG(Optimizer[NLCGConfig]):
    """Nonlinear conjugate gradient optimizer.

    The search directions are computed by the recurrence

    $$d_{k+1} = -g_{k+1} + \\beta_k d_k,$$

    where the conjugacy coefficient $\\beta_k$ is given by one of the formulas
    of [`NLCGFormula`][revopt.enums.NLCGFormula], except for the Perry-Shanno
    formula, which computes a memoryless BFGS direction. The method restarts
    along the steepest descent when $\\beta_k$ cannot be computed, when the
    Powell modifier clips a negative $\\beta_k$, or when the new direction is
    not a sufficient descent direction.

    The line search defaults to a Moré-Thuente search with `gtol = 0.1`, which
    is more exact than what quasi-Newton methods need.
    """

    def __init__(  # noqa: PLR0913
        self,
        space: VariableSpace,
        method: NLCGMethod | NLCGFormula | int = NLCGMethod(),  # noqa: B008
        line_search: LineSearch | None = None,
        *,
        gatol: float = 0.0,
        grtol: float = 1e-6,
        stpmin: float = 1e-20,
        stpmax: float = 1e20,
        delta: float = 1e-3,
        epsilon: float = 0.0,
    ) -> None:
        """Initialize the optimizer.

        Args:
            space:       The variable space of the problem.
            method:      The update rule: a method object, a formula, or bit flags.
            line_search: The line search, by default a Moré-Thuente search.
            gatol:       Absolute gradient tolerance.
            grtol:       Relative gradient tolerance.
            stpmin:      Relative lower bound of the line search step.
            stpmax:      Relative upper bound of the line search step.
            delta:       Relative size of the first change of the variables.
            epsilon:     Threshold for sufficient descent directions.

        Raises:
            InvalidParameter: If a parameter is invalid.
        """
        config = validate_config(
            NLCGConfig,
            method=as_nlcg_method(method),
            gatol=gatol,
            grtol=grtol,
            stpmin=stpmin,
            stpmax=stpmax,
            delta=delta,
            epsilon=epsilon,
        )
        if line_search is None:
            line_search = MoreThuenteLineSearch(ftol=1e-4, gtol=0.1)
        super().__init__(space, line_search, config)
        self._y = space.create()
        self._has_memory = False

    @property
    def method(self) -> NLCGMethod:
        """Return the update rule of the optimizer."""
        return self._config.method

    def __repr__(self) -> str:
        return f"NLCG({self._space!r}, flags={self.method.flags:#x})"

    def _clear(self) -> None:
        self._has_memory = False

    def _update(self, x: Variable, g: Variable) -> None:  # noqa: ARG002
        self._has_memory = True

    def _compute_direction(self, x: Variable, g: Variable) -> float:
        if not self._has_memory:
            return self._steepest_descent(x, g)
        method = self.method
        combine(self._y, 1.0, g, -1.0, self._g0)
        if method.formula == NLCGFormula.PERRY_SHANNO:
            if not self._perry_shanno(x, g):
                return self._restart(x, g, "undefined Perry-Shanno direction")
        else:
            beta = self._beta(method.formula, g)
            if beta is None or not math.isfinite(beta):
                return self._restart(x, g, f"undefined beta ({beta})")
            if method.powell and beta < 0.0:
                return self._restart(x, g, f"negative beta ({beta})")
            combine(self._d, -1.0, g, beta, self._d)
        dg = dot(self._d, g)
        if not self._is_descent(dg, g):
            return self._restart(x, g, "not a sufficient descent direction")
        if method.shanno_phua:
            return self._stp * self._dg0 / dg
        return 1.0

    def _beta(self, formula: NLCGFormula, g: Variable) -> float | None:  # noqa: PLR0911
        d, y, g0 = self._d, self._y, self._g0
        match formula:
            case NLCGFormula.FLETCHER_REEVES:
                return _ratio(dot(g, g), dot(g0, g0))
            case NLCGFormula.HESTENES_STIEFEL:
                return _ratio(dot(g, y), dot(d, y))
            case NLCGFormula.POLAK_RIBIERE_POLYAK:
                return _ratio(dot(g, y), dot(g0, g0))
            case NLCGFormula.FLETCHER:
                return _ratio(-dot(g, g), dot(d, g0))
            case NLCGFormula.LIU_STOREY:
                return _ratio(-dot(g, y), dot(d, g0))
            case NLCGFormula.DAI_YUAN:
                return _ratio(dot(g, g), dot(d, y))
            case NLCGFormula.HAGER_ZHANG:
                dy = dot(d, y)
                if dy == 0.0:
                    return None
                beta = (dot(y, g) - 2.0 * dot(y, y) * dot(d, g) / dy) / dy
                eta = -1.0 / (d.norm2() * min(_HZ_ETA, g0.norm2()))
                return max(beta, eta)
        return None

    def _perry_shanno(self, x: Variable, g: Variable) -> bool:
        # Memoryless BFGS with Oren-Spedicato scaling, s = x - x0 = stp * d.
        s, y = self._d, self._y
        combine(s, 1.0, x, -1.0, self._x0)
        sy = dot(s, y)
        yy = dot(y, y)
        if not (sy > 0.0 and yy > 0.0):
            return False
        gamma = sy / yy
        sg = dot(s, g)
        beta = (gamma * dot(y, g) - 2.0 * sg) / sy
        theta = sg / yy
        combine(self._d, -gamma, g, beta, s, theta, y)
        return True


def _ratio(numerator: float, denominator: float) -> float | None:
    if denominator == 0.0:
        return None
    return numerator / denominator
