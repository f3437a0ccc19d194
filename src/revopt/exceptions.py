"""Exceptions raised within the `revopt` library."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import LineSearchStatus


class RevoptError(Exception):
    """Base class of all exceptions raised by `revopt`."""


class ConfigError(RevoptError, ValueError):
    """Raised when an object is constructed or configured with invalid values."""


class InvalidDimension(ConfigError):  # noqa: N818
    """Raised when a variable space is given a non-positive dimension."""


class InvalidParameter(ConfigError):  # noqa: N818
    """Raised when a tolerance, bound, or other parameter is invalid."""


class ContractViolation(RevoptError, ValueError):  # noqa: N818
    """Raised when the arguments of an operation violate its preconditions."""


class ShapeMismatch(ContractViolation):
    """Raised when a buffer does not match the size of a variable space."""


class ElementTypeMismatch(ShapeMismatch):
    """Raised when a buffer does not match the element type of a variable space."""


class SpaceMismatch(ContractViolation):
    """Raised when the operands of a vector operation belong to different spaces."""


class LineSearchError(ContractViolation):
    """Raised when a line search cannot be started.

    The status of the line search at the time of failure is available via the
    `status` attribute.
    """

    def __init__(self, status: LineSearchStatus, message: str) -> None:
        """Initialize the exception.

        Args:
            status:  The error status of the line search.
            message: The error message.
        """
        self.status = status
        super().__init__(message)


class NotADescentDirection(LineSearchError):
    """Raised when a line search is started along a non-descent direction."""
