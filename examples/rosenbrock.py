"""Example of optimization of a multi-dimensional Rosenbrock test function.

This example minimizes the extended Rosenbrock function with the two drivers,
printing one line per iteration, and compares the number of evaluations needed
by the nonlinear conjugate gradient and the variable metric methods.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from revopt.config import NLCGMethod
from revopt.enums import NLCGFormula
from revopt.optimization import OptimizationResult, nlcg, vmlm

DIM = 5


def rosenbrock(x: NDArray[np.float64], g: NDArray[np.float64]) -> float:
    """Compute the extended Rosenbrock function and its gradient.

    Args:
        x: The variables.
        g: The array receiving the gradient.

    Returns:
        The function value.
    """
    t1 = 1.0 - x[:-1]
    t2 = x[1:] - x[:-1] ** 2
    g[:] = 0.0
    g[:-1] = -2.0 * t1 - 400.0 * x[:-1] * t2
    g[1:] += 200.0 * t2
    return float(np.sum(t1**2 + 100.0 * t2**2))


def report(name: str, result: OptimizationResult) -> None:
    """Report the result of an optimization.

    Args:
        name:   The name of the method.
        result: The result.
    """
    print(f"{name}: {result.exit_code.name} ({result.message})")
    print(f"  iterations:  {result.iterations}")
    print(f"  evaluations: {result.evaluations}")
    print(f"  variables:   {result.x}")
    print(f"  objective:   {result.f}\n")


def run_optimization(**kwargs: Any) -> tuple[OptimizationResult, OptimizationResult]:
    """Run the optimization with both drivers.

    Args:
        kwargs: Options passed to the drivers.

    Returns:
        The results of the conjugate gradient and variable metric methods.
    """
    x0 = 2 * np.arange(DIM) / DIM + 0.5
    method = NLCGMethod(formula=NLCGFormula.POLAK_RIBIERE_POLYAK, powell=True)
    cg_result = nlcg(rosenbrock, x0, method, **kwargs)
    report("NLCG (PRP+)", cg_result)
    vm_result = vmlm(rosenbrock, x0, m=5, **kwargs)
    report("VMLM", vm_result)
    return cg_result, vm_result


def main() -> None:
    """Run the example and check the result."""
    for result in run_optimization(grtol=1e-10, verb=True):
        assert np.allclose(result.x, 1.0, atol=1e-4)
        assert result.f < 1e-8


if __name__ == "__main__":
    main()
