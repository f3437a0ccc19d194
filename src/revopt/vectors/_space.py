"""This module defines the variable space class."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Final

import numpy as np

from revopt.exceptions import (
    ElementTypeMismatch,
    InvalidDimension,
    InvalidParameter,
    ShapeMismatch,
)

from ._variable import Variable

if TYPE_CHECKING:
    from numpy.typing import DTypeLike, NDArray

_SUPPORTED_TYPES: Final = (np.dtype(np.float32), np.dtype(np.float64))


class VariableSpace:
    """A finite-dimensional real vector space of dense arrays.

    A variable space describes the vectors handled by the optimizers: their
    element type (single or double precision) and their shape. It does not hold
    any data itself, but acts as a factory for
    [`Variable`][revopt.vectors.Variable] objects, either owning private storage
    (`create`) or aliasing caller memory (`wrap`).

    Variable spaces are immutable; two spaces with the same element type and
    shape compare equal, and vector operations accept operands from equal
    spaces.
    """

    __slots__ = ("_dtype", "_length", "_shape")

    def __init__(self, dtype: DTypeLike, shape: int | tuple[int, ...]) -> None:
        """Initialize a variable space.

        Args:
            dtype: The element type, `numpy.float32` or `numpy.float64`.
            shape: The dimensions of the space.

        Raises:
            InvalidParameter: If the element type is not supported.
            InvalidDimension: If a dimension is not a positive integer.
        """
        try:
            self._dtype = np.dtype(dtype)
        except TypeError as exc:
            msg = f"unsupported element type: {dtype!r}"
            raise InvalidParameter(msg) from exc
        if self._dtype not in _SUPPORTED_TYPES:
            msg = f"unsupported element type: {self._dtype}"
            raise InvalidParameter(msg)
        dims = (shape,) if isinstance(shape, int | np.integer) else tuple(shape)
        if not dims:
            msg = "a variable space must have at least one dimension"
            raise InvalidDimension(msg)
        for dim in dims:
            if not isinstance(dim, int | np.integer) or isinstance(dim, bool):
                msg = f"invalid dimension: {dim!r}"
                raise InvalidDimension(msg)
            if dim < 1:
                msg = f"invalid dimension: {dim}"
                raise InvalidDimension(msg)
        self._shape: tuple[int, ...] = tuple(int(dim) for dim in dims)
        self._length = math.prod(self._shape)

    @property
    def dtype(self) -> np.dtype[Any]:
        """Return the element type of the space.

        Returns:
            The NumPy data type.
        """
        return self._dtype

    @property
    def shape(self) -> tuple[int, ...]:
        """Return the dimensions of the space.

        Returns:
            The shape of the vectors.
        """
        return self._shape

    @property
    def ndim(self) -> int:
        """Return the number of dimensions of the space.

        Returns:
            The number of dimensions.
        """
        return len(self._shape)

    @property
    def length(self) -> int:
        """Return the number of elements of the vectors of the space.

        Returns:
            The total number of elements.
        """
        return self._length

    def __len__(self) -> int:
        return self._length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariableSpace):
            return NotImplemented
        return self._dtype == other._dtype and self._shape == other._shape

    def __hash__(self) -> int:
        return hash((self._dtype, self._shape))

    def __repr__(self) -> str:
        return f"VariableSpace({self._dtype.name}, {self._shape})"

    def create(self) -> Variable:
        """Create a new variable with private zero-initialized storage.

        Returns:
            The new variable.
        """
        return Variable(self, np.zeros(self._shape, dtype=self._dtype), owner=True)

    def wrap(self, array: NDArray[Any]) -> Variable:
        """Create a variable aliasing the memory of an existing array.

        The array must be C-contiguous, have the element type of the space and
        the number of elements of the space. If its shape differs from the
        shape of the space, the variable stores a view with the shape of the
        space, which still shares the memory of the array. Changes to the array
        are visible in the variable and vice versa.

        Args:
            array: The array to wrap.

        Returns:
            The new variable.
        """
        return Variable(self, self.check_buffer(array), owner=False)

    def check_buffer(self, array: NDArray[Any]) -> NDArray[Any]:
        """Check that an array can be used as storage for a variable of the space.

        Args:
            array: The array to check.

        Returns:
            The array, or a view of it with the shape of the space.

        Raises:
            ShapeMismatch:       If the size of the array is wrong, or if the
                                 array is not contiguous.
            ElementTypeMismatch: If the element type of the array is wrong.
        """
        if not isinstance(array, np.ndarray):
            msg = f"expected a numpy array, got {type(array).__name__}"
            raise ShapeMismatch(msg)
        if array.dtype != self._dtype:
            msg = f"expected an array of {self._dtype}, got {array.dtype}"
            raise ElementTypeMismatch(msg)
        if array.size != self._length:
            msg = f"expected an array of {self._length} elements, got {array.size}"
            raise ShapeMismatch(msg)
        if not array.flags.c_contiguous:
            msg = "expected a contiguous array"
            raise ShapeMismatch(msg)
        if array.shape != self._shape:
            array = array.reshape(self._shape)
        return array
