"""Progress reporting of the optimization drivers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, TextIO

if TYPE_CHECKING:
    from revopt.optimizers import Optimizer

HEADER: Final = (
    " ITER   EVAL  RESTARTS         F(X)             ||G(X)||\n"
    "--------------------------------------------------------\n"
)


def report_parameters(output: TextIO, optimizer: Optimizer[Any]) -> None:
    """Write the convergence parameters of an optimizer.

    Args:
        output:    The output stream.
        optimizer: The optimizer.
    """
    output.write(
        f"gatol={optimizer.gatol:E}; grtol={optimizer.grtol:E}; "
        f"stpmin={optimizer.stpmin:E}; stpmax={optimizer.stpmax:E}\n"
    )


def report_iteration(output: TextIO, optimizer: Optimizer[Any]) -> None:
    """Write one row of the iteration table.

    The header of the table is written before the row of the initial iterate.

    Args:
        output:    The output stream.
        optimizer: The optimizer.
    """
    if optimizer.iterations == 0:
        output.write(HEADER)
    output.write(
        f"{optimizer.iterations:5d}  {optimizer.evaluations:5d}  "
        f"{optimizer.restarts:5d}  {optimizer.f:24.16E} {optimizer.gnorm:10.3E}\n"
    )
