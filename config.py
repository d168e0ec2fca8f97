"""Configuration defaults for fetching a Zotero collection.

Values are resolved in three layers: built-in defaults, then ``ZOTERO_*``
environment variables (``.env`` is loaded by ``main``), then explicit
keyword overrides passed to :func:`load_config`. ``None`` overrides are
ignored so callers can forward optional CLI flags unchanged.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any

LOGGER = logging.getLogger(__name__)

EXPAND_ALL = "all"
GROUP_MODES: frozenset[str] = frozenset({"type", "collection"})

_DEFAULT_API_BASE = "api.zotero.org"
_DEFAULT_LIMIT = 100
_DEFAULT_CITATION_STYLE = "apa-annotated-bibliography"
_DEFAULT_INCLUDE = ("data", "citation")
_DEFAULT_ABSTRACT_LENGTH = 250
_DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class PublicationsConfig:
    api_base: str = _DEFAULT_API_BASE
    limit: int = _DEFAULT_LIMIT
    citation_style: str = _DEFAULT_CITATION_STYLE
    include: tuple[str, ...] = _DEFAULT_INCLUDE
    group: str | None = None
    expand: str | frozenset[str] = EXPAND_ALL
    shortened_abstract_length: int = _DEFAULT_ABSTRACT_LENGTH
    max_items: int | None = None
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS
    scheme: str = "https"

    def __post_init__(self) -> None:
        if self.group in ("", "none", "false", False):
            object.__setattr__(self, "group", None)
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        if self.max_items is not None and self.max_items < 1:
            raise ValueError(f"max_items must be >= 1 when set, got {self.max_items}")
        if self.group is not None and self.group not in GROUP_MODES:
            raise ValueError(f"Unknown group mode {self.group!r}; expected one of {sorted(GROUP_MODES)}")
        if self.shortened_abstract_length < 1:
            raise ValueError("shortened_abstract_length must be >= 1")
        # Normalize list-ish inputs so the frozen config stays hashable.
        # A bare string is one entry, not a sequence of characters.
        if isinstance(self.include, str):
            object.__setattr__(self, "include", (self.include,))
        elif not isinstance(self.include, tuple):
            object.__setattr__(self, "include", tuple(self.include))
        if self.expand == EXPAND_ALL:
            return
        if isinstance(self.expand, str):
            object.__setattr__(self, "expand", frozenset({self.expand}) if self.expand else frozenset())
        elif not isinstance(self.expand, frozenset):
            object.__setattr__(self, "expand", frozenset(self.expand or ()))


def load_config(**overrides: Any) -> PublicationsConfig:
    """Build a config from defaults, ``ZOTERO_*`` env vars and non-None overrides."""
    known = {f.name for f in fields(PublicationsConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

    values = _from_env()
    values.update({name: value for name, value in overrides.items() if value is not None})

    config = replace(PublicationsConfig(), **values)
    LOGGER.debug(
        "Config: api_base=%s limit=%s style=%s include=%s group=%s",
        config.api_base,
        config.limit,
        config.citation_style,
        ",".join(config.include),
        config.group,
    )
    return config


def parse_expand(raw: str | None) -> str | frozenset[str]:
    """Parse ``"all"`` or a comma-separated list of item types."""
    if raw is None:
        return frozenset()
    raw = raw.strip()
    if raw.lower() == EXPAND_ALL:
        return EXPAND_ALL
    return frozenset(_split_csv(raw))


def _from_env() -> dict[str, Any]:
    values: dict[str, Any] = {}

    if api_base := os.getenv("ZOTERO_API_BASE"):
        values["api_base"] = api_base
    if limit := os.getenv("ZOTERO_LIMIT"):
        values["limit"] = int(limit)
    if style := os.getenv("ZOTERO_CITATION_STYLE"):
        values["citation_style"] = style
    if include := os.getenv("ZOTERO_INCLUDE"):
        values["include"] = tuple(_split_csv(include))
    if (group := os.getenv("ZOTERO_GROUP")) is not None:
        values["group"] = group.strip().lower() or None
    if (expand := os.getenv("ZOTERO_EXPAND")) is not None:
        values["expand"] = parse_expand(expand)
    if abstract_length := os.getenv("ZOTERO_ABSTRACT_LENGTH"):
        values["shortened_abstract_length"] = int(abstract_length)
    if max_items := os.getenv("ZOTERO_MAX_ITEMS"):
        values["max_items"] = int(max_items)
    if timeout := os.getenv("ZOTERO_TIMEOUT_SECONDS"):
        values["timeout_seconds"] = float(timeout)
    if scheme := os.getenv("ZOTERO_SCHEME"):
        values["scheme"] = scheme

    return values


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]
