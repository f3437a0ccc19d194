"""Example of an optimizer driven by reverse communication.

Instead of using a driver, this example runs the optimization loop itself: the
optimizer requests function evaluations through its tasks, and the loop is
free to decide how and when these are computed. Here the variables are stored
in single precision, and the evaluations of a separable quadratic function are
counted by the loop.
"""

import numpy as np
from numpy.typing import NDArray

from revopt.enums import OptimizerTask
from revopt.optimizers import VMLM
from revopt.vectors import VariableSpace

DIM = 10
TARGET = np.arange(1, DIM + 1, dtype=np.float32)


def quadratic(x: NDArray[np.float32], g: NDArray[np.float32]) -> float:
    """Compute `sum((x - target)^2)` and its gradient.

    Args:
        x: The variables.
        g: The array receiving the gradient.

    Returns:
        The function value.
    """
    g[:] = 2.0 * (x - TARGET)
    return float(np.sum((x - TARGET) ** 2))


def run_optimization() -> tuple[NDArray[np.float32], OptimizerTask]:
    """Run the reverse-communication loop.

    Returns:
        The final variables and the last task of the optimizer.
    """
    space = VariableSpace(np.float32, DIM)
    x = np.zeros(DIM, dtype=np.float32)
    g = np.zeros(DIM, dtype=np.float32)
    wx = space.wrap(x)
    wg = space.wrap(g)

    optimizer = VMLM(space, m=3, grtol=1e-5)
    f = 0.0
    task = optimizer.start()
    while True:
        if task == OptimizerTask.COMPUTE_FG:
            f = quadratic(x, g)
        elif task == OptimizerTask.NEW_X:
            print(f"  iteration {optimizer.iterations}: f = {optimizer.f:.6e}")
        else:
            break
        task = optimizer.iterate(wx, f, wg)
    print(f"  {task.name} after {optimizer.evaluations} evaluations: {x}")
    return x, task


def main() -> None:
    """Run the example and check the result."""
    x, task = run_optimization()
    assert task == OptimizerTask.FINAL_X
    assert np.allclose(x, TARGET, atol=1e-3)


if __name__ == "__main__":
    main()
