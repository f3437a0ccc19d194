"""This module defines the result of the optimization drivers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from revopt.enums import ExitCode

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(slots=True)
class OptimizationResult:
    """Outcome of a run of an optimization driver.

    Abnormal terminations, such as an exhausted budget or a line search
    failure, are not raised as exceptions. They are reported by the
    `exit_code` field, with a description in `message`.

    Attributes:
        x:           The final variables.
        f:           The function value at `x`.
        gnorm:       The Euclidean norm of the gradient at `x`.
        iterations:  The number of iterations.
        evaluations: The number of function and gradient evaluations.
        restarts:    The number of restarts along the steepest descent.
        exit_code:   The reason for termination.
        message:     A description of the reason for termination.
    """

    x: NDArray[Any]
    f: float
    gnorm: float
    iterations: int
    evaluations: int
    restarts: int
    exit_code: ExitCode = ExitCode.UNKNOWN
    message: str = ""

    @property
    def converged(self) -> bool:
        """Return whether the convergence test is satisfied.

        Returns:
            `True` if the run ended with `ExitCode.CONVERGED`.
        """
        return self.exit_code == ExitCode.CONVERGED
