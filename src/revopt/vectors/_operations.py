"""Vector operations on variables.

All operations taking several variables require them to belong to equal
variable spaces and raise a [`SpaceMismatch`][revopt.exceptions.SpaceMismatch]
exception otherwise. Operations writing into a destination variable only modify
its storage, they never reallocate it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from revopt.exceptions import ContractViolation, SpaceMismatch

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from ._variable import Variable


def norm1(v: Variable) -> float:
    """Return the L1 norm (sum of absolute values) of a variable.

    Args:
        v: The variable.

    Returns:
        The L1 norm.
    """
    return float(np.sum(np.abs(v.array)))


def norm2(v: Variable) -> float:
    """Return the Euclidean (L2) norm of a variable.

    Args:
        v: The variable.

    Returns:
        The Euclidean norm.
    """
    return float(np.linalg.norm(v.array.reshape(-1)))


def norminf(v: Variable) -> float:
    """Return the infinity norm (largest absolute value) of a variable.

    Args:
        v: The variable.

    Returns:
        The infinity norm.
    """
    return float(np.max(np.abs(v.array)))


def zero(v: Variable) -> None:
    """Fill a variable with zeros.

    Args:
        v: The variable.
    """
    v.array.fill(0)


def fill(v: Variable, alpha: float) -> None:
    """Fill a variable with a value.

    Args:
        v:     The variable.
        alpha: The value.
    """
    v.array.fill(alpha)


def copy(dst: Variable, src: Variable) -> None:
    """Copy the values of a variable into another one.

    Args:
        dst: The destination.
        src: The source.
    """
    _check_spaces(dst, src)
    if not _same_buffer(dst.array, src.array):
        np.copyto(dst.array, src.array)


def scale(dst: Variable, alpha: float, src: Variable) -> None:
    """Store a scaled copy of a variable, `dst = alpha * src`.

    The destination may be the source.

    Args:
        dst:   The destination.
        alpha: The multiplier.
        src:   The source.
    """
    _check_spaces(dst, src)
    _linear_combination(dst.array, [(alpha, src.array)])


def swap(x: Variable, y: Variable) -> None:
    """Exchange the contents of two variables.

    The storage of the variables is not exchanged, only the values. Wrapped
    variables therefore keep aliasing the same caller memory.

    Args:
        x: The first variable.
        y: The second variable.
    """
    _check_spaces(x, y)
    if not _same_buffer(x.array, y.array):
        tmp = x.array.copy()
        np.copyto(x.array, y.array)
        np.copyto(y.array, tmp)


def dot(x: Variable, y: Variable) -> float:
    """Return the inner product of two variables.

    Args:
        x: The first variable.
        y: The second variable.

    Returns:
        The inner product.
    """
    _check_spaces(x, y)
    return float(np.vdot(x.array, y.array))


def combine(  # noqa: PLR0913
    dst: Variable,
    alpha: float,
    x: Variable,
    beta: float,
    y: Variable,
    gamma: float | None = None,
    z: Variable | None = None,
) -> None:
    """Store a linear combination of two or three variables.

    Computes `dst = alpha*x + beta*y`, or `dst = alpha*x + beta*y + gamma*z`
    when the third term is given. The destination may be any of the operands:
    the operands are read before the destination is overwritten. Terms with a
    zero coefficient are ignored, even if the variable contains non-finite
    values.

    Args:
        dst:   The destination.
        alpha: The coefficient of `x`.
        x:     The first variable.
        beta:  The coefficient of `y`.
        y:     The second variable.
        gamma: The optional coefficient of `z`.
        z:     The optional third variable.

    Raises:
        ContractViolation: If only one of `gamma` and `z` is given.
    """
    if (gamma is None) != (z is None):
        msg = "the third coefficient and variable must be given together"
        raise ContractViolation(msg)
    terms = [(alpha, x), (beta, y)]
    if gamma is not None and z is not None:
        terms.append((gamma, z))
    _check_spaces(dst, *(variable for _, variable in terms))
    _linear_combination(dst.array, [(coef, var.array) for coef, var in terms])


def _check_spaces(first: Variable, *others: Variable) -> None:
    for other in others:
        if other.space != first.space:
            msg = f"operands from different spaces: {first.space}, {other.space}"
            raise SpaceMismatch(msg)


def _same_buffer(a: NDArray[Any], b: NDArray[Any]) -> bool:
    return a is b or (
        a.ctypes.data == b.ctypes.data and a.strides == b.strides and a.shape == b.shape
    )


def _linear_combination(
    out: NDArray[Any], terms: list[tuple[float, NDArray[Any]]]
) -> None:
    # Terms aliasing the destination are folded into a single in-place scaling,
    # the remaining terms are accumulated on top of it.
    own = 0.0
    aliased = False
    others: list[tuple[float, NDArray[Any]]] = []
    for coef, array in terms:
        coef = float(coef)  # noqa: PLW2901
        if _same_buffer(out, array):
            aliased = True
            own += coef
        elif coef == 0.0:
            continue
        elif np.may_share_memory(out, array):
            others.append((coef, array.copy()))
        else:
            others.append((coef, array))
    if aliased:
        if own == 0.0:
            out.fill(0)
        elif own != 1.0:
            out *= own
    elif others:
        coef, array = others.pop(0)
        np.multiply(array, coef, out=out)
    else:
        out.fill(0)
    for coef, array in others:
        _axpy(out, coef, array)


def _axpy(out: NDArray[Any], alpha: float, array: NDArray[Any]) -> None:
    if alpha == 1.0:
        out += array
    elif alpha == -1.0:
        out -= array
    else:
        out += alpha * array
