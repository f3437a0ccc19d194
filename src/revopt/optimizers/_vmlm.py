"""This module implements the limited-memory variable metric method."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from revopt.config import VMLMConfig, validate_config
from revopt.enums import VMLMScaling
from revopt.linesearch import MoreThuenteLineSearch
from revopt.vectors import combine, copy, dot

from .base import Optimizer

if TYPE_CHECKING:
    from revopt.linesearch import LineSearch
    from revopt.vectors import Variable, VariableSpace

logger = logging.getLogger(__name__)


class VMLM(Optimizer[VMLMConfig]):
    """Limited-memory variable metric optimizer (L-BFGS).

    The search direction is $d = -H g$, where the inverse Hessian approximation
    $H$ is defined by the `m` most recent correction pairs $s = x - x_0$,
    $y = g - g_0$, and is applied with the two-loop recursion of Nocedal. The
    initial approximation is $\\gamma I$, with $\\gamma$ computed from the most
    recent pair according to the [`scaling`][revopt.enums.VMLMScaling].

    Pairs with $\\langle s, y \\rangle \\le 0$ are not stored. When the computed
    direction is not a sufficient descent direction, the memory is cleared and
    the method restarts along the steepest descent.
    """

    def __init__(  # noqa: PLR0913
        self,
        space: VariableSpace,
        m: int = 3,
        line_search: LineSearch | None = None,
        *,
        scaling: VMLMScaling = VMLMScaling.OREN_SPEDICATO,
        gatol: float = 0.0,
        grtol: float = 1e-6,
        stpmin: float = 1e-20,
        stpmax: float = 1e20,
        delta: float = 1e-3,
        epsilon: float = 0.0,
    ) -> None:
        """Initialize the optimizer.

        The number of memorized pairs is silently reduced to the number of
        variables if it is larger.

        Args:
            space:       The variable space of the problem.
            m:           Number of correction pairs to memorize.
            line_search: The line search, by default a Moré-Thuente search.
            scaling:     Scaling of the initial inverse Hessian approximation.
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
            VMLMConfig,
            m=m,
            scaling=scaling,
            gatol=gatol,
            grtol=grtol,
            stpmin=stpmin,
            stpmax=stpmax,
            delta=delta,
            epsilon=epsilon,
        )
        if line_search is None:
            line_search = MoreThuenteLineSearch(ftol=1e-4, gtol=0.9)
        super().__init__(space, line_search, config)
        self._m = min(config.m, space.length)
        self._s = [space.create() for _ in range(self._m)]
        self._y = [space.create() for _ in range(self._m)]
        self._rho = np.zeros(self._m)
        self._alpha = np.zeros(self._m)
        self._mp = 0
        self._next = 0

    @property
    def m(self) -> int:
        """Return the maximum number of memorized pairs."""
        return self._m

    @property
    def mp(self) -> int:
        """Return the number of pairs currently memorized."""
        return self._mp

    @property
    def scaling(self) -> VMLMScaling:
        """Return the scaling of the initial inverse Hessian approximation."""
        return self._config.scaling

    @scaling.setter
    def scaling(self, value: VMLMScaling) -> None:
        self._reconfigure(scaling=value)

    def __repr__(self) -> str:
        return f"VMLM({self._space!r}, m={self._m}, scaling={self.scaling.name})"

    def _clear(self) -> None:
        self._mp = 0
        self._next = 0

    def _slots(self) -> list[int]:
        # Slots of the memorized pairs, from the newest to the oldest.
        return [(self._next - 1 - j) % self._m for j in range(self._mp)]

    def _update(self, x: Variable, g: Variable) -> None:
        slot = self._next
        s, y = self._s[slot], self._y[slot]
        combine(s, 1.0, x, -1.0, self._x0)
        combine(y, 1.0, g, -1.0, self._g0)
        sy = dot(s, y)
        if sy > 0.0:
            self._rho[slot] = 1.0 / sy
            self._next = (slot + 1) % self._m
            self._mp = min(self._mp + 1, self._m)
        else:
            logger.debug("correction pair rejected: <s,y> = %g", sy)
            # The slot held the oldest pair, which has been overwritten.
            self._mp = min(self._mp, self._m - 1)

    def _gamma(self, slot: int) -> float:
        s, y = self._s[slot], self._y[slot]
        match self.scaling:
            case VMLMScaling.OREN_SPEDICATO:
                return dot(s, y) / dot(y, y)
            case VMLMScaling.BARZILAI_BORWEIN:
                return dot(s, s) / dot(s, y)
        return 1.0

    def _compute_direction(self, x: Variable, g: Variable) -> float:
        if self._mp == 0:
            return self._steepest_descent(x, g)
        slots = self._slots()
        d = self._d
        copy(d, g)
        for slot in slots:
            self._alpha[slot] = self._rho[slot] * dot(self._s[slot], d)
            combine(d, 1.0, d, -self._alpha[slot], self._y[slot])
        d.scale(self._gamma(slots[0]))
        for slot in reversed(slots):
            beta = self._rho[slot] * dot(self._y[slot], d)
            combine(d, 1.0, d, self._alpha[slot] - beta, self._s[slot])
        d.scale(-1.0)
        if not self._is_descent(dot(d, g), g):
            return self._restart(x, g, "not a sufficient descent direction")
        return 1.0
