"""Optimizers driven by reverse communication.

The optimizers minimize a smooth function using its gradient, but never call
the function themselves: they return a [`task`][revopt.enums.OptimizerTask]
describing what the caller must do next. This lets the caller control every
evaluation, for instance to run them on remote resources or to interleave them
with other work.

- [`NLCG`][revopt.optimizers.NLCG]: nonlinear conjugate gradient methods.
- [`VMLM`][revopt.optimizers.VMLM]: limited-memory variable metric method.

**Example**:
```py
import numpy as np
from revopt.enums import OptimizerTask
from revopt.optimizers import VMLM
from revopt.vectors import VariableSpace

space = VariableSpace(np.float64, 10)
x = space.wrap(np.zeros(10))
g = space.create()
target = np.arange(1.0, 11.0)

optimizer = VMLM(space, m=3)
task = optimizer.start()
f = 0.0
while task in {OptimizerTask.COMPUTE_FG, OptimizerTask.NEW_X}:
    if task == OptimizerTask.COMPUTE_FG:
        f = float(np.sum((x.array - target) ** 2))
        g.array[:] = 2.0 * (x.array - target)
    task = optimizer.iterate(x, f, g)
```
"""

from ._nlcg import NLCG, as_nlcg_method
from ._vmlm import VMLM
from .base import Optimizer

__all__ = [
    "NLCG",
    "VMLM",
    "Optimizer",
    "as_nlcg_method",
]
