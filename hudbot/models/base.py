"""Base model for configuration values that degrade to defaults."""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = logging.getLogger(__name__)


class LenientModel(BaseModel):
    """Model whose malformed field values fall back to the field default.

    Fields listed in ``_strict_fields`` keep normal pydantic behavior so
    that structural errors still fail at load time.
    """

    _strict_fields: ClassVar[frozenset[str]] = frozenset()

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            if info.field_name is None or info.field_name in cls._strict_fields:
                raise
            field = cls.model_fields[info.field_name]
            default = field.get_default(call_default_factory=True)
            logger.warning(
                f"Invalid value {value!r} for {cls.__name__}.{info.field_name}, "
                f"using default {default!r}"
            )
            return default
