"""This module defines the variable class."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from revopt.exceptions import ContractViolation

from . import _operations as ops

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from ._space import VariableSpace


class Variable:
    """A vector belonging to a variable space.

    Variables are created by a [`VariableSpace`][revopt.vectors.VariableSpace]:
    [`create`][revopt.vectors.VariableSpace.create] returns a variable owning
    private storage, [`wrap`][revopt.vectors.VariableSpace.wrap] returns a
    variable aliasing the memory of an existing array. The storage is accessible
    via the `array` property; it always has the shape and element type of the
    space.

    The vector operations of [`revopt.vectors`][revopt.vectors] are also
    available as methods. Methods modifying the variable return nothing.
    """

    __slots__ = ("_array", "_owner", "_space")

    def __init__(
        self, space: VariableSpace, array: NDArray[Any], *, owner: bool
    ) -> None:
        """Initialize a variable.

        Variables are normally created via the methods of a variable space,
        which check the storage before calling this constructor.

        Args:
            space: The variable space.
            array: The storage, matching the shape and type of the space.
            owner: Whether the variable owns the storage.
        """
        self._space = space
        self._array = array
        self._owner = owner

    @property
    def space(self) -> VariableSpace:
        """Return the variable space of the variable.

        Returns:
            The variable space.
        """
        return self._space

    @property
    def array(self) -> NDArray[Any]:
        """Return the storage of the variable.

        Returns:
            The array holding the values of the variable.
        """
        return self._array

    @property
    def owns_storage(self) -> bool:
        """Return whether the variable owns its storage.

        Returns:
            `False` if the variable wraps caller memory.
        """
        return self._owner

    @property
    def shape(self) -> tuple[int, ...]:
        """Return the shape of the variable."""
        return self._space.shape

    @property
    def dtype(self) -> np.dtype[Any]:
        """Return the element type of the variable."""
        return self._space.dtype

    @property
    def ndim(self) -> int:
        """Return the number of dimensions of the variable."""
        return self._space.ndim

    def __len__(self) -> int:
        return self._space.length

    def __repr__(self) -> str:
        kind = "owned" if self._owner else "wrapped"
        return f"Variable({self._space!r}, {kind})"

    def rewrap(self, array: NDArray[Any]) -> Variable:
        """Make a wrapped variable alias the memory of another array.

        No memory is allocated: the variable simply refers to the new array,
        which is checked as in [`wrap`][revopt.vectors.VariableSpace.wrap].

        Args:
            array: The new array to wrap.

        Returns:
            The variable itself.

        Raises:
            ContractViolation: If the variable owns its storage.
        """
        if self._owner:
            msg = "cannot re-wrap a variable that owns its storage"
            raise ContractViolation(msg)
        self._array = self._space.check_buffer(array)
        return self

    def norm1(self) -> float:
        """Return the L1 norm of the variable."""
        return ops.norm1(self)

    def norm2(self) -> float:
        """Return the Euclidean norm of the variable."""
        return ops.norm2(self)

    def norminf(self) -> float:
        """Return the infinity norm of the variable."""
        return ops.norminf(self)

    def dot(self, other: Variable) -> float:
        """Return the inner product with another variable."""
        return ops.dot(self, other)

    def zero(self) -> None:
        """Fill the variable with zeros."""
        ops.zero(self)

    def fill(self, alpha: float) -> None:
        """Fill the variable with a value."""
        ops.fill(self, alpha)

    def copy_from(self, src: Variable) -> None:
        """Copy the values of another variable."""
        ops.copy(self, src)

    def scale(self, alpha: float, src: Variable | None = None) -> None:
        """Store `alpha` times `src`, or scale the variable in place."""
        ops.scale(self, alpha, self if src is None else src)
