"""This module defines the protocol of the objective functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from numpy.typing import NDArray


class ObjectiveFunction(Protocol):
    """Defines the call signature of the objective functions of the drivers.

    The [`nlcg`][revopt.optimization.nlcg] and
    [`vmlm`][revopt.optimization.vmlm] drivers call the objective function
    each time the optimizer requests the function value and the gradient.
    """

    def __call__(self, x: NDArray[Any], g: NDArray[Any], /) -> float:
        """Compute the function value and the gradient.

        The gradient must be written into `g`, which has the shape and
        element type of `x`. The variables must not be modified.

        Args:
            x: The variables.
            g: The array receiving the gradient.

        Returns:
            The function value at `x`.
        """
