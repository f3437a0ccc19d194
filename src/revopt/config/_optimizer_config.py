"""Configuration classes for the optimizers."""

from __future__ import annotations

from typing import Annotated, Final, Self

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from revopt.enums import NLCGFormula, VMLMScaling
from revopt.exceptions import InvalidParameter

NonNegativeFinite = Annotated[float, Field(ge=0.0, allow_inf_nan=False)]

POWELL: Final = 1 << 8
"""Legacy bit flag of the Powell modifier."""

SHANNO_PHUA: Final = 1 << 9
"""Legacy bit flag of the Shanno-Phua modifier."""

_FORMULA_MASK: Final = 0xFF


class OptimizerConfig(BaseModel):
    """Configuration class shared by the optimizers.

    The optimizers stop with a converged status when the Euclidean norm of the
    gradient becomes smaller than `max(gatol, grtol * ‖g₀‖)`, where `g₀` is the
    gradient at the initial point.

    The step bounds `stpmin` and `stpmax` are relative to the first trial step
    of each line search. When the memory of an optimizer is empty (first
    iteration, or after a restart), the first trial step is chosen so that the
    first change of the variables has a norm of `delta` times the norm of the
    variables. Search directions `d` satisfying
    `⟨d,g⟩ > -epsilon ‖d‖ ‖g‖` are rejected as not being sufficient descent
    directions.

    Attributes:
        gatol:   Absolute gradient tolerance.
        grtol:   Relative gradient tolerance.
        stpmin:  Relative lower bound of the line search step.
        stpmax:  Relative upper bound of the line search step.
        delta:   Relative size of the first change of the variables.
        epsilon: Threshold for sufficient descent directions, `0 <= epsilon < 1`.
    """

    gatol: NonNegativeFinite = 0.0
    grtol: NonNegativeFinite = 1e-6
    stpmin: NonNegativeFinite = 1e-20
    stpmax: float = Field(default=1e20, gt=0.0, allow_inf_nan=False)
    delta: float = Field(default=1e-3, gt=0.0, allow_inf_nan=False)
    epsilon: float = Field(default=0.0, ge=0.0, lt=1.0)

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_step_bounds(self) -> Self:
        if self.stpmin >= self.stpmax:
            msg = "the step bounds must satisfy 0 <= stpmin < stpmax"
            raise ValueError(msg)
        return self


class NLCGMethod(BaseModel):
    """Selection of the nonlinear conjugate gradient update rule.

    The method consists of a base formula and two independent modifiers. With
    the `powell` modifier, negative values of the conjugacy coefficient β are
    replaced by zero, which restarts the method along the steepest descent. With
    the `shanno_phua` modifier, the first trial step of each line search is
    scaled by the ratio of the previous and current directional derivatives;
    without it the first trial step is one.

    For instance, `NLCGMethod(formula=NLCGFormula.POLAK_RIBIERE_POLYAK,
    powell=True)` is the PRP+ method, and `NLCGMethod(
    formula=NLCGFormula.PERRY_SHANNO, shanno_phua=True)` corresponds to the
    method of CONMIN.

    Attributes:
        formula:     The update formula.
        powell:      Force β to be non-negative.
        shanno_phua: Scale the initial step using the previous iteration.
    """

    formula: NLCGFormula = NLCGFormula.HAGER_ZHANG
    powell: bool = False
    shanno_phua: bool = True

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        frozen=True,
    )

    @classmethod
    def from_flags(cls, flags: int) -> NLCGMethod:
        """Create a method from the legacy bit-flag encoding.

        The lowest byte holds the formula code (see
        [`NLCGFormula`][revopt.enums.NLCGFormula]), the
        [`POWELL`][revopt.config.POWELL] and
        [`SHANNO_PHUA`][revopt.config.SHANNO_PHUA] bits select the modifiers.

        Args:
            flags: The bit flags.

        Returns:
            The corresponding method.

        Raises:
            InvalidParameter: If the flags contain unknown bits or formula.
        """
        if flags & ~(_FORMULA_MASK | POWELL | SHANNO_PHUA):
            msg = f"unknown bits in NLCG method flags: {flags:#x}"
            raise InvalidParameter(msg)
        try:
            formula = NLCGFormula(flags & _FORMULA_MASK)
        except ValueError as exc:
            msg = f"unknown NLCG formula code: {flags & _FORMULA_MASK}"
            raise InvalidParameter(msg) from exc
        return cls(
            formula=formula,
            powell=bool(flags & POWELL),
            shanno_phua=bool(flags & SHANNO_PHUA),
        )

    @property
    def flags(self) -> int:
        """Return the legacy bit-flag encoding of the method.

        Returns:
            The bit flags.
        """
        return (
            int(self.formula)
            | (POWELL if self.powell else 0)
            | (SHANNO_PHUA if self.shanno_phua else 0)
        )


class NLCGConfig(OptimizerConfig):
    """Configuration class of the nonlinear conjugate gradient optimizer.

    Attributes:
        method: The update rule.
    """

    method: NLCGMethod = NLCGMethod()


class VMLMConfig(OptimizerConfig):
    """Configuration class of the limited-memory variable metric optimizer.

    Attributes:
        m:       Number of correction pairs to remember.
        scaling: Scaling of the initial inverse Hessian approximation.
    """

    m: PositiveInt = 3
    scaling: VMLMScaling = VMLMScaling.OREN_SPEDICATO
