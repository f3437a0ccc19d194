"""Utilities for checking and converting configuration values."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from revopt.exceptions import InvalidParameter

T = TypeVar("T", bound=BaseModel)


def validate_config(model: type[T], **kwargs: Any) -> T:  # noqa: ANN401
    """Validate keyword values against a configuration model.

    Pydantic validation errors are converted into an
    [`InvalidParameter`][revopt.exceptions.InvalidParameter] exception, so that
    all configuration failures raised by `revopt` share a single type. The
    pydantic validation error is chained to the new exception.

    Args:
        model:  The configuration model class.
        kwargs: The values to validate.

    Returns:
        The validated configuration object.

    Raises:
        InvalidParameter: If the values do not pass validation.
    """
    try:
        return model.model_validate(kwargs)
    except ValidationError as exc:
        msg = f"invalid {model.__name__}: " + "; ".join(
            _format_error(error) for error in exc.errors()
        )
        raise InvalidParameter(msg) from exc


def _format_error(error: Any) -> str:  # noqa: ANN401
    location = ".".join(str(item) for item in error["loc"])
    return f"{location}: {error['msg']}" if location else str(error["msg"])
