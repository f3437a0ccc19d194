"""Drivers running a complete optimization.

The drivers [`nlcg`][revopt.optimization.nlcg] and
[`vmlm`][revopt.optimization.vmlm] take care of the reverse-communication
loop of the [`optimizers`][revopt.optimizers]: they call an
[`ObjectiveFunction`][revopt.optimization.ObjectiveFunction] whenever the
optimizer needs the function value and the gradient, report progress, enforce
the iteration and evaluation budgets, and return an
[`OptimizationResult`][revopt.optimization.OptimizationResult].

**Example**:
```py
import numpy as np
from revopt.optimization import vmlm

def fg(x, g):
    g[:] = 2.0 * (x - np.arange(1.0, 11.0))
    return float(np.sum((x - np.arange(1.0, 11.0)) ** 2))

result = vmlm(fg, np.zeros(10), m=3)
print(result.exit_code.name, result.x)
```
"""

from ._callback import ObjectiveFunction
from ._drivers import nlcg, vmlm
from ._result import OptimizationResult

__all__ = [
    "ObjectiveFunction",
    "OptimizationResult",
    "nlcg",
    "vmlm",
]
