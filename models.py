"""Shared typed models for the publications pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ItemRecord:
    """Normalized Zotero item; child items (attachments, notes) hang off their parent."""

    key: str
    item_type: str
    data: dict[str, Any] = field(default_factory=dict, compare=False)
    citation: str | None = None
    abstract_short: str | None = None
    parent_key: str | None = None
    children: tuple[ItemRecord, ...] = ()

    @property
    def title(self) -> str:
        return _as_str(self.data.get("title")) or _as_str(self.data.get("note")) or ""

    @property
    def date(self) -> str:
        return _as_str(self.data.get("date")) or ""

    @property
    def abstract(self) -> str:
        return _as_str(self.data.get("abstractNote")) or ""

    @property
    def creators_summary(self) -> str:
        """Semicolon-joined creator names, "Last, First" where both parts exist."""
        names: list[str] = []
        for creator in self.data.get("creators") or []:
            if not isinstance(creator, dict):
                continue
            name = _as_str(creator.get("name"))
            if not name:
                last = _as_str(creator.get("lastName"))
                first = _as_str(creator.get("firstName"))
                name = ", ".join(part for part in (last, first) if part)
            if name:
                names.append(name)
        return "; ".join(names)


@dataclass(frozen=True, slots=True)
class Page:
    """One response from the paginated endpoint."""

    items: list[Any]
    next_url: str | None = None
    has_link_header: bool = False
    total_results: int | None = None


@dataclass(frozen=True, slots=True)
class Group:
    """Records sharing one classification key, plus their default visibility."""

    key: str
    records: tuple[ItemRecord, ...]
    expanded: bool = False

    def __len__(self) -> int:
        return len(self.records)


def _as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None
