"""Enumerations used within the `revopt` library."""

from enum import IntEnum


class LineSearchStatus(IntEnum):
    """Enumerates the states of a line search.

    A line search starts in the `ERROR_NOT_STARTED` state, enters the `SEARCH`
    state when [`start`][revopt.linesearch.LineSearch.start] succeeds, and ends
    in one of the terminal states. Negative values are errors, `CONVERGENCE`
    signals success, and values larger than one are warnings: the search could
    not satisfy its conditions, but the returned step is still the best one
    found.
    """

    ERROR_ILLEGAL_ADDRESS = -12
    """An illegal address was passed to the line search."""

    ERROR_CORRUPTED_WORKSPACE = -11
    """The internal state of the line search is corrupted."""

    ERROR_BAD_WORKSPACE = -10
    """The internal state of the line search is inconsistent."""

    ERROR_STP_CHANGED = -9
    """The step passed to `iterate` is not the one requested."""

    ERROR_STP_OUTSIDE_BRACKET = -8
    """The trial step lies outside of the bracketing interval."""

    ERROR_NOT_A_DESCENT = -7
    """A bracket endpoint does not have a descent derivative."""

    ERROR_STPMIN_GT_STPMAX = -6
    """The lower step bound is larger than the upper step bound."""

    ERROR_STPMIN_LT_ZERO = -5
    """The lower step bound is negative."""

    ERROR_STP_LT_STPMIN = -4
    """The trial step is smaller than the lower step bound."""

    ERROR_STP_GT_STPMAX = -3
    """The trial step is larger than the upper step bound."""

    ERROR_INITIAL_DERIVATIVE_GE_ZERO = -2
    """The initial directional derivative is not negative."""

    ERROR_NOT_STARTED = -1
    """The line search has not been started."""

    SEARCH = 0
    """The search is in progress, the next trial step must be evaluated."""

    CONVERGENCE = 1
    """The line search has converged."""

    WARNING_ROUNDING_ERRORS_PREVENT_PROGRESS = 2
    """Rounding errors prevent further progress."""

    WARNING_XTOL_TEST_SATISFIED = 3
    """The bracketing interval became smaller than the tolerance."""

    WARNING_STP_EQ_STPMAX = 4
    """The step is at its upper bound."""

    WARNING_STP_EQ_STPMIN = 5
    """The step is at its lower bound."""


class OptimizerTask(IntEnum):
    """Enumerates the tasks requested by a reverse-communication optimizer.

    Each call to [`start`][revopt.optimizers.Optimizer.start] or
    [`iterate`][revopt.optimizers.Optimizer.iterate] returns the next pending
    task. The caller must perform it before calling `iterate` again.
    """

    ERROR = -1
    """An error has occurred."""

    PROJECT_X = 0
    """The caller must project the variables `x`."""

    COMPUTE_FG = 1
    """The caller must compute the function value and the gradient at `x`."""

    PROJECT_D = 2
    """The caller must project the search direction."""

    FREE_VARS = 3
    """The caller must update the subspace of free variables."""

    NEW_X = 4
    """A new iterate is available."""

    FINAL_X = 5
    """The algorithm has converged, the solution is available."""

    WARNING = 6
    """The algorithm terminated with a warning."""


class NLCGFormula(IntEnum):
    """Enumerates the update formulas of the nonlinear conjugate gradient method.

    The values equal the codes of the legacy bit-flag encoding of the method,
    see [`NLCGMethod.from_flags`][revopt.config.NLCGMethod.from_flags].
    """

    FLETCHER_REEVES = 1
    r"""$\beta = \|g_k\|^2 / \|g_{k-1}\|^2$."""

    HESTENES_STIEFEL = 2
    r"""$\beta = \langle g_k, y \rangle / \langle d, y \rangle$."""

    POLAK_RIBIERE_POLYAK = 3
    r"""$\beta = \langle g_k, y \rangle / \|g_{k-1}\|^2$."""

    FLETCHER = 4
    r"""Conjugate descent, $\beta = -\|g_k\|^2 / \langle d, g_{k-1} \rangle$."""

    LIU_STOREY = 5
    r"""$\beta = -\langle g_k, y \rangle / \langle d, g_{k-1} \rangle$."""

    DAI_YUAN = 6
    r"""$\beta = \|g_k\|^2 / \langle d, y \rangle$."""

    PERRY_SHANNO = 7
    """Memoryless BFGS direction with Oren-Spedicato scaling."""

    HAGER_ZHANG = 8
    """The CG_DESCENT formula of Hager and Zhang."""


class VMLMScaling(IntEnum):
    """Enumerates the initial scalings of the limited-memory variable metric method.

    The scaling is the multiplier applied to the gradient at the start of the
    two-loop recursion, computed from the most recent correction pair.
    """

    NONE = 0
    r"""$\gamma = 1$."""

    OREN_SPEDICATO = 1
    r"""$\gamma = \langle s, y \rangle / \langle y, y \rangle$."""

    BARZILAI_BORWEIN = 2
    r"""$\gamma = \langle s, s \rangle / \langle s, y \rangle$."""


class ExitCode(IntEnum):
    """Enumerates the reasons for terminating an optimization driver."""

    UNKNOWN = 0
    """Unknown cause of termination."""

    CONVERGED = 1
    """The gradient convergence test is satisfied."""

    MAX_ITERATIONS_REACHED = 2
    """Returned when the maximum number of iterations is reached."""

    MAX_EVALUATIONS_REACHED = 3
    """Returned when the maximum number of function evaluations is reached."""

    LINE_SEARCH_WARNING = 4
    """The line search terminated with a warning."""

    OPTIMIZER_ERROR = 5
    """The optimizer terminated with an error."""

    UNEXPECTED_TASK = 6
    """The optimizer requested a task that the driver cannot perform."""
