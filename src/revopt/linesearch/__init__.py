"""Line searches driven by reverse communication.

A line search looks for a step along a descent direction satisfying a
sufficient decrease condition, and possibly a curvature condition. The line
searches in this module do not evaluate the objective function themselves:
the caller evaluates the function and its directional derivative at the trial
steps they request. The common protocol is defined by the
[`LineSearch`][revopt.linesearch.LineSearch] base class; three variants are
available:

- [`ArmijoLineSearch`][revopt.linesearch.ArmijoLineSearch]: backtracking until
  the Armijo condition holds.
- [`MoreThuenteLineSearch`][revopt.linesearch.MoreThuenteLineSearch]: cubic
  interpolation for the strong Wolfe conditions.
- [`NonmonotoneLineSearch`][revopt.linesearch.NonmonotoneLineSearch]:
  backtracking against the maximum of recent function values.

**Example**:
```py
from revopt.enums import LineSearchStatus
from revopt.linesearch import MoreThuenteLineSearch

def phi(stp):  # f(stp) = (stp - 2)^2
    return (stp - 2.0) ** 2, 2.0 * (stp - 2.0)

search = MoreThuenteLineSearch(ftol=1e-3, gtol=0.1)
f0, df0 = phi(0.0)
stp = search.start(f0, df0, 1.0, 0.0, 1e10)
status = LineSearchStatus.SEARCH
while status == LineSearchStatus.SEARCH:
    status, stp = search.iterate(stp, *phi(stp))
```
"""

from ._armijo import ArmijoLineSearch
from ._more_thuente import MoreThuenteLineSearch
from ._nonmonotone import NonmonotoneLineSearch
from .base import LineSearch

__all__ = [
    "ArmijoLineSearch",
    "LineSearch",
    "MoreThuenteLineSearch",
    "NonmonotoneLineSearch",
]
