"""Effective cache configuration and its validation."""

import logging
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sqlcache.consts import MEMORY_DATABASE, SWEEP_INTERVAL_MS
from sqlcache.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)


class CacheConfiguration(BaseModel):
    """Fully-defaulted, immutable configuration of one cache instance.

    Validation is strict: strings are never coerced into numbers or booleans,
    and booleans are not accepted where a number is expected.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    database: str = Field(
        default=MEMORY_DATABASE, description="SQLite database path or ':memory:'"
    )
    default_ttl_ms: int | float | None = Field(
        default=None, description="TTL applied when set() gets none. None never expires"
    )
    max_items: int | float | None = Field(
        default=None, description="Capacity bound enforced by the sweeper. None is unbounded"
    )
    compress: bool = Field(default=False, description="Compress large payloads by default")
    sweep_interval_ms: int | float = Field(
        default=SWEEP_INTERVAL_MS, description="Period of the background sweep"
    )

    @field_validator("default_ttl_ms", "max_items", "sweep_interval_ms")
    @classmethod
    def must_be_finite(cls, value: int | float | None) -> int | float | None:
        if isinstance(value, float) and not math.isfinite(value):
            msg = f"must be a finite number, got {value}"
            raise ValueError(msg)
        return value

    @field_validator("max_items", "sweep_interval_ms")
    @classmethod
    def must_be_positive(cls, value: int | float | None) -> int | float | None:
        """Reject zero and negative bounds."""
        if value is not None and not value > 0:
            msg = f"must be positive, got {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_options(
        cls, options: "Mapping[str, Any] | CacheConfiguration | None" = None
    ) -> "CacheConfiguration":
        """Build the effective configuration from a loose options mapping.

        Args:
            options: Option names mapped to values, an existing configuration,
                or None for all defaults.

        Returns:
            The validated configuration.

        Raises:
            InvalidConfigurationError: Naming every offending option.
        """
        if options is None:
            return cls()
        if isinstance(options, CacheConfiguration):
            return options
        if not isinstance(options, Mapping):
            msg = f"Cache options must be a mapping, got {type(options).__name__}"
            raise TypeError(msg)

        unknown = [name for name in options if name not in cls.model_fields]
        if unknown:
            logger.warning(f"Ignoring unknown cache options: {', '.join(map(str, unknown))}")

        try:
            return cls.model_validate(dict(options))
        except ValidationError as e:
            raise InvalidConfigurationError(_offending_fields(e)) from e


def _offending_fields(error: ValidationError) -> list[str]:
    """Field names named by a validation error, in declaration order."""
    names: list[str] = []
    for detail in error.errors():
        loc = detail.get("loc") or ("options",)
        name = str(loc[0])
        if name not in names:
            names.append(name)

    declared = list(CacheConfiguration.model_fields)
    return sorted(names, key=lambda n: declared.index(n) if n in declared else len(declared))
