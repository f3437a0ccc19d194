"""Vector spaces and vectors over dense NumPy arrays.

The optimizers of `revopt` do not manipulate NumPy arrays directly. They
operate on [`Variable`][revopt.vectors.Variable] objects, vectors belonging to
a [`VariableSpace`][revopt.vectors.VariableSpace], using the linear algebra
primitives defined in this module:

- Norms: [`norm1`][revopt.vectors.norm1], [`norm2`][revopt.vectors.norm2],
  [`norminf`][revopt.vectors.norminf].
- Assignment: [`zero`][revopt.vectors.zero], [`fill`][revopt.vectors.fill],
  [`copy`][revopt.vectors.copy], [`scale`][revopt.vectors.scale],
  [`swap`][revopt.vectors.swap].
- Inner product: [`dot`][revopt.vectors.dot].
- Fused linear combinations of two or three variables:
  [`combine`][revopt.vectors.combine].

**Example**:
```py
import numpy as np
from revopt.vectors import VariableSpace, combine, dot

space = VariableSpace(np.float64, (3,))
x = space.wrap(np.array([1.0, 2.0, 3.0]))
y = space.create()
combine(y, 2.0, x, 0.0, y)  # y = 2x
print(dot(x, y))  # 28.0
```
"""

from ._operations import (
    combine,
    copy,
    dot,
    fill,
    norm1,
    norm2,
    norminf,
    scale,
    swap,
    zero,
)
from ._space import VariableSpace
from ._variable import Variable

__all__ = [
    "Variable",
    "VariableSpace",
    "combine",
    "copy",
    "dot",
    "fill",
    "norm1",
    "norm2",
    "norminf",
    "scale",
    "swap",
    "zero",
]
