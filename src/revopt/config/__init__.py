"""The `revopt.config` module provides configuration classes for the optimizers.

The tunable parameters of the line searches, the optimizers, and the drivers
are validated by [`pydantic`](https://docs.pydantic.dev/) models. The classes
in the rest of the library accept plain keyword arguments and validate them
through these models, converting validation failures into
[`InvalidParameter`][revopt.exceptions.InvalidParameter] exceptions.
"""

from ._driver_config import DriverConfig
from ._line_search_config import ArmijoConfig, MoreThuenteConfig, NonmonotoneConfig
from ._optimizer_config import (
    POWELL,
    SHANNO_PHUA,
    NLCGConfig,
    NLCGMethod,
    OptimizerConfig,
    VMLMConfig,
)
from .utils import validate_config

__all__ = [
    "POWELL",
    "SHANNO_PHUA",
    "ArmijoConfig",
    "DriverConfig",
    "MoreThuenteConfig",
    "NLCGConfig",
    "NLCGMethod",
    "NonmonotoneConfig",
    "OptimizerConfig",
    "VMLMConfig",
    "validate_config",
]
