"""Configuration classes for the line searches."""

from __future__ import annotations

from typing import Self

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator


class ArmijoConfig(BaseModel):
    """Configuration class for the backtracking line search.

    Attributes:
        ftol: Tolerance of the sufficient decrease condition, `0 <= ftol < 1`.
    """

    ftol: float = Field(default=1e-4, ge=0.0, lt=1.0, allow_inf_nan=False)

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        frozen=True,
    )


class MoreThuenteConfig(BaseModel):
    """Configuration class for the strong Wolfe line search of Moré and Thuente.

    The tolerances must satisfy `0 <= ftol < gtol < 1` and `0 <= xtol < 1`.
    The default values are suitable for quasi-Newton methods; for nonlinear
    conjugate gradient methods a smaller `gtol` (e.g. 0.1) gives a more exact
    search.

    Attributes:
        ftol: Tolerance of the sufficient decrease condition.
        gtol: Tolerance of the curvature condition.
        xtol: Relative width of the bracket below which the search stops.
    """

    ftol: float = Field(default=1e-4, allow_inf_nan=False)
    gtol: float = Field(default=0.9, allow_inf_nan=False)
    xtol: float = Field(default=float(np.finfo(np.float64).eps), ge=0.0, lt=1.0)

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_tolerances(self) -> Self:
        if not 0.0 <= self.ftol < self.gtol < 1.0:
            msg = "the tolerances must satisfy 0 <= ftol < gtol < 1"
            raise ValueError(msg)
        return self


class NonmonotoneConfig(BaseModel):
    """Configuration class for the nonmonotone line search.

    Attributes:
        mem:  Number of previous function values to remember, at least one.
        ftol: Tolerance of the sufficient decrease condition, `0 <= ftol < 1`.
        amin: Smallest relative reduction of the step, `0 < amin < amax`.
        amax: Largest relative reduction of the step, `amin < amax < 1`.
    """

    mem: PositiveInt = 10
    ftol: float = Field(default=1e-4, ge=0.0, lt=1.0, allow_inf_nan=False)
    amin: float = Field(default=0.1, allow_inf_nan=False)
    amax: float = Field(default=0.9, allow_inf_nan=False)

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if not 0.0 < self.amin < self.amax < 1.0:
            msg = "the step reductions must satisfy 0 < amin < amax < 1"
            raise ValueError(msg)
        return self
