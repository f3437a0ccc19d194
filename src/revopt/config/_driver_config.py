"""Configuration class for the optimization drivers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DriverConfig(BaseModel):
    """Configuration class for the reverse-communication drivers.

    The budgets are checked each time the optimizer reports a new iterate. A
    negative value disables the corresponding budget.

    Attributes:
        maxiter: Maximum number of iterations, `-1` for no limit.
        maxeval: Maximum number of function evaluations, `-1` for no limit.
        verb:    Print one line per iterate to the output stream.
        debug:   Print the optimizer parameters before starting.
    """

    maxiter: int = Field(default=-1, ge=-1)
    maxeval: int = Field(default=-1, ge=-1)
    verb: bool = False
    debug: bool = False

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        frozen=True,
    )
