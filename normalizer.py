"""Validation and normalization of raw Zotero API payloads."""

from __future__ import annotations

import logging
from typing import Any

from config import PublicationsConfig
from errors import MalformedResponseError
from models import ItemRecord

LOGGER = logging.getLogger(__name__)


def validate_page(payload: Any) -> list[dict[str, Any]]:
    """Check that one page payload is a list of item objects."""
    if not isinstance(payload, list):
        raise MalformedResponseError(
            f"Unexpected page payload shape: expected a list, got {type(payload).__name__}"
        )
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedResponseError(
                f"Unexpected item at position {index}: expected an object, got {type(item).__name__}"
            )
    return payload


def process_response(raw_items: list[Any], config: PublicationsConfig) -> list[ItemRecord]:
    """Turn the merged raw items into top-level ItemRecords.

    Items that point at a parent via ``data.parentItem`` are attached to that
    parent's ``children`` in delivered order and removed from the top level;
    nested children are attached the same way at every depth. A child whose
    parent was not delivered stays at the top level. Items caught in a
    ``parentItem`` cycle raise MalformedResponseError.
    """
    validate_page(raw_items)
    include_citation = "citation" in config.include

    top_level: list[dict[str, Any]] = []
    children_by_parent: dict[str, list[dict[str, Any]]] = {}
    keys = {_require_key(item) for item in raw_items}

    for item in raw_items:
        parent_key = _parent_key(item)
        if parent_key and parent_key in keys:
            children_by_parent.setdefault(parent_key, []).append(item)
        else:
            if parent_key:
                LOGGER.debug("Normalizer: parent %s missing for item %s", parent_key, item["key"])
            top_level.append(item)

    placed: set[int] = set()
    records = [
        _build_tree(item, children_by_parent, config, include_citation, placed)
        for item in top_level
    ]

    unplaced = [item["key"] for item in raw_items if id(item) not in placed]
    if unplaced:
        raise MalformedResponseError(
            f"Items unreachable from any top-level item (parentItem cycle): {', '.join(unplaced)}"
        )

    LOGGER.debug(
        "Normalizer: raw_count=%s top_level=%s with_children=%s",
        len(raw_items),
        len(records),
        sum(1 for record in records if record.children),
    )
    return records


def shorten_abstract(abstract: str, max_length: int) -> str | None:
    """Cut an abstract at the last word boundary within ``max_length`` chars.

    Returns None when the abstract already fits.
    """
    abstract = abstract.strip()
    if len(abstract) <= max_length:
        return None
    head = abstract[:max_length]
    boundary = head.rfind(" ")
    if boundary > 0:
        head = head[:boundary]
    return head.rstrip()


def _build_tree(
    item: dict[str, Any],
    children_by_parent: dict[str, list[dict[str, Any]]],
    config: PublicationsConfig,
    include_citation: bool,
    placed: set[int],
) -> ItemRecord:
    placed.add(id(item))
    children = tuple(
        _build_tree(child, children_by_parent, config, include_citation, placed)
        for child in children_by_parent.get(item["key"], [])
        if id(child) not in placed
    )
    return _build_record(item, config, include_citation, children=children)


def _build_record(
    item: dict[str, Any],
    config: PublicationsConfig,
    include_citation: bool,
    children: tuple[ItemRecord, ...] = (),
) -> ItemRecord:
    key = _require_key(item)
    data = item.get("data")
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Item {key} has no data object")

    item_type = data.get("itemType")
    if not isinstance(item_type, str) or not item_type:
        raise MalformedResponseError(f"Item {key} is missing itemType")

    abstract = data.get("abstractNote")
    abstract_short = (
        shorten_abstract(abstract, config.shortened_abstract_length)
        if isinstance(abstract, str)
        else None
    )

    citation = item.get("citation") if include_citation else None

    return ItemRecord(
        key=key,
        item_type=item_type,
        data=data,
        citation=citation if isinstance(citation, str) else None,
        abstract_short=abstract_short,
        parent_key=_parent_key(item),
        children=children,
    )


def _require_key(item: Any) -> str:
    if not isinstance(item, dict):
        raise MalformedResponseError(f"Unexpected item: expected an object, got {type(item).__name__}")
    key = item.get("key")
    if not isinstance(key, str) or not key:
        raise MalformedResponseError("Item is missing its key")
    return key


def _parent_key(item: dict[str, Any]) -> str | None:
    data = item.get("data")
    if not isinstance(data, dict):
        return None
    parent = data.get("parentItem")
    return parent if isinstance(parent, str) and parent else None
