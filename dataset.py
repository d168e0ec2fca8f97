"""In-memory aggregate of all fetched items, with optional grouping by item type."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Any, Union

from config import EXPAND_ALL
from errors import InvariantViolation
from models import Group, ItemRecord

LOGGER = logging.getLogger(__name__)

MODE_NONE = "none"
MODE_TYPE = "type"


@dataclass(frozen=True)
class Ungrouped:
    records: tuple[ItemRecord, ...]


@dataclass(frozen=True)
class GroupedByType:
    groups: tuple[Group, ...]


@dataclass(frozen=True)
class GroupedByCollection:
    """Declared view; never constructed because collection grouping is unsupported."""


DatasetView = Union[Ungrouped, GroupedByType, GroupedByCollection]


@dataclass(frozen=True)
class Advanced:
    value: Any
    has_more: bool


@dataclass(frozen=True)
class Finished:
    pass


class DatasetCursor:
    """Single pass over a dataset view.

    Ungrouped views yield ItemRecords; grouped views yield
    ``(item_type, records)`` pairs. ``position == length`` is the terminal
    position, after which ``advance`` keeps returning ``Finished``.
    """

    def __init__(self, view: DatasetView) -> None:
        if isinstance(view, GroupedByCollection):
            raise NotImplementedError("Iterating a collection-grouped dataset is not implemented")
        self._view = view
        self._length = _view_length(view)
        self.position = 0
        self.done = False

    def advance(self) -> Advanced | Finished:
        if self.done:
            if self.position != self._length:
                raise InvariantViolation(
                    f"Cursor finished at position {self.position} of {self._length}"
                )
            return Finished()

        if self.position == self._length:
            self.done = True
            return Finished()
        if self.position > self._length:
            raise InvariantViolation(f"Cursor overran: position {self.position} > length {self._length}")

        value = _entry_at(self._view, self.position)
        if value is None:
            raise InvariantViolation(f"No entry at position {self.position} of {self._length}")
        self.position += 1
        return Advanced(value=value, has_more=self.position < self._length)

    def __iter__(self) -> DatasetCursor:
        return self

    def __next__(self) -> Any:
        step = self.advance()
        if isinstance(step, Finished):
            raise StopIteration
        return step.value


class AggregatedDataset:
    """Ordered collection of every fetched ItemRecord.

    The raw, server-ordered sequence is kept for the dataset's lifetime;
    grouping always re-derives from it, so calling ``group_by_type`` twice
    never groups already-grouped data.
    """

    def __init__(self, items: Iterable[ItemRecord]) -> None:
        self._raw: tuple[ItemRecord, ...] = tuple(items)
        self._view: DatasetView = Ungrouped(self._raw)

    @property
    def view(self) -> DatasetView:
        return self._view

    @property
    def mode(self) -> str:
        if isinstance(self._view, GroupedByType):
            return MODE_TYPE
        return MODE_NONE

    @property
    def grouped(self) -> bool:
        return not isinstance(self._view, Ungrouped)

    @property
    def records(self) -> tuple[ItemRecord, ...]:
        """All records in server-delivered order, regardless of grouping."""
        return self._raw

    @property
    def groups(self) -> tuple[Group, ...]:
        if isinstance(self._view, GroupedByType):
            return self._view.groups
        return ()

    @property
    def size(self) -> int:
        if isinstance(self._view, GroupedByType):
            return sum(len(group) for group in self._view.groups)
        return len(self._raw)

    def __len__(self) -> int:
        return self.size

    def get_group(self, key: str) -> Group | None:
        for group in self.groups:
            if group.key == key:
                return group
        return None

    def group_by_type(self, expand: str | Collection[str] | None = EXPAND_ALL) -> None:
        """Partition records by ``item_type``.

        Groups are ordered by first occurrence of their key and keep the
        records' relative order. A group is expanded when ``expand`` is
        ``"all"`` or contains the group's key.
        """
        wanted: Collection[str] = () if expand is None or expand == EXPAND_ALL else expand
        if isinstance(wanted, str):
            wanted = (wanted,)

        buckets: dict[str, list[ItemRecord]] = {}
        for record in self._raw:
            buckets.setdefault(record.item_type, []).append(record)

        groups = tuple(
            Group(
                key=key,
                records=tuple(records),
                expanded=expand == EXPAND_ALL or key in wanted,
            )
            for key, records in buckets.items()
        )
        self._view = GroupedByType(groups)
        LOGGER.debug("Dataset: grouped %s records into %s types", len(self._raw), len(groups))

    def group_by_collection(self) -> None:
        raise NotImplementedError("Grouping by collection is not implemented")

    def iterate(self) -> DatasetCursor:
        return DatasetCursor(self._view)

    def __iter__(self) -> DatasetCursor:
        return self.iterate()

    def __repr__(self) -> str:
        return f"AggregatedDataset(size={self.size}, mode={self.mode!r})"


def _view_length(view: DatasetView) -> int:
    if isinstance(view, Ungrouped):
        return len(view.records)
    if isinstance(view, GroupedByType):
        return len(view.groups)
    raise NotImplementedError(f"Unsupported dataset view: {type(view).__name__}")


def _entry_at(view: DatasetView, position: int) -> Any:
    if isinstance(view, Ungrouped):
        return view.records[position]
    if isinstance(view, GroupedByType):
        group = view.groups[position]
        return group.key, group.records
    raise NotImplementedError(f"Unsupported dataset view: {type(view).__name__}")
