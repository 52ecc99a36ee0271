"""Instrumentation options and environment-driven loading.

This module is responsible for:

- Normalising caller-supplied options into a frozen `InstrumentOptions` model.
  `instrument()` never fails on options: malformed values are coerced or
  dropped with a warning, matching how lenient the entry point is.
- Loading `.env` into the process environment (without overriding existing vars)
  and converting `DETECTOR_*` variables into options via `load_options()`.
  Unlike `instrument()`, this path raises `ValueError` with actionable messages.
"""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Mapping
from typing import Any, TypeVar

import dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

_T = TypeVar("_T", int, float)

REGEX_PREFIX = "re:"


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T | None, cast: type[_T]) -> _T | None:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


def _get_env_patterns(name: str) -> tuple[str | re.Pattern[str], ...] | None:
    """Read a comma-separated pattern list; `re:` entries are compiled as regexes."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None

    patterns: list[str | re.Pattern[str]] = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        if item.startswith(REGEX_PREFIX):
            try:
                patterns.append(re.compile(item[len(REGEX_PREFIX):]))
            except re.error as exc:
                raise ValueError(f"{name} contains an invalid regular expression {item!r}: {exc}") from exc
        else:
            patterns.append(item)
    return tuple(patterns)


def _normalize_patterns(name: str, value: Any) -> tuple[Any, ...] | None:
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        logger.warning("Ignoring %s: expected a list of patterns, got %s", name, type(value).__name__)
        return None

    patterns = []
    for item in value:
        if isinstance(item, (str, re.Pattern)):
            patterns.append(item)
        else:
            logger.warning("Ignoring %s entry %r: expected str or compiled regex", name, item)
    return tuple(patterns)


class InstrumentOptions(BaseModel):
    """Options accepted by `instrument()`."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    enabled: bool = Field(default=True, description="False turns instrument() into an identity function")
    depth_limit: int | None = Field(default=None, description="Max recursive-wrap depth; None is unbounded")

    # Ordered literal-prefix or compiled-regex patterns.
    include: tuple[Any, ...] | None = Field(default=None, description="Allow-list; None allows everything")
    exclude: tuple[Any, ...] | None = Field(default=None, description="Deny-list; wins over include")

    @field_validator("enabled", mode="before")
    @classmethod
    def _normalize_enabled(cls, v: Any) -> bool:
        """Only an explicit False disables instrumentation."""
        return v is not False

    @field_validator("depth_limit", mode="before")
    @classmethod
    def _normalize_depth_limit(cls, v: Any) -> int | None:
        """Clamp negatives to 0; non-numeric or infinite means unbounded."""
        if v is None or isinstance(v, bool) or not isinstance(v, (int, float)):
            if v is not None:
                logger.warning("Ignoring depth_limit %r: expected a non-negative integer", v)
            return None
        if isinstance(v, float) and (math.isinf(v) or math.isnan(v)):
            return None
        return max(0, int(v))

    @field_validator("include", mode="before")
    @classmethod
    def _normalize_include(cls, v: Any) -> tuple[Any, ...] | None:
        return _normalize_patterns("include", v)

    @field_validator("exclude", mode="before")
    @classmethod
    def _normalize_exclude(cls, v: Any) -> tuple[Any, ...] | None:
        return _normalize_patterns("exclude", v)

    @classmethod
    def coerce(cls, options: InstrumentOptions | Mapping[str, Any] | None) -> InstrumentOptions:
        """Accept an options model, a mapping of its fields, or None."""
        if isinstance(options, InstrumentOptions):
            return options
        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            logger.warning("Ignoring options of type %s; using defaults", type(options).__name__)
            return cls()
        return cls.model_validate(dict(options))


def load_options() -> InstrumentOptions:
    """Load instrumentation options from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Reads `DETECTOR_ENABLED`, `DETECTOR_DEPTH_LIMIT`, `DETECTOR_INCLUDE` and
      `DETECTOR_EXCLUDE`; pattern lists are comma-separated, `re:`-prefixed
      entries are regexes.
    - Raises `ValueError` for malformed values.
    """
    dotenv.load_dotenv()

    depth_limit = _get_env_number("DETECTOR_DEPTH_LIMIT", None, int)
    if depth_limit is not None and depth_limit < 0:
        raise ValueError(f"DETECTOR_DEPTH_LIMIT must be >= 0. Got: {depth_limit}")

    return InstrumentOptions(
        enabled=_get_env_bool("DETECTOR_ENABLED", True),
        depth_limit=depth_limit,
        include=_get_env_patterns("DETECTOR_INCLUDE"),
        exclude=_get_env_patterns("DETECTOR_EXCLUDE"),
    )
