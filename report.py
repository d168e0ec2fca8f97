"""Plain-text and CSV summaries of an AggregatedDataset.

The text listing mirrors what the web widget shows: one section per item
type when grouped (collapsed sections marked ``[+]``, expanded ``[-]``),
otherwise a flat list in server order. Child items are indented beneath
their parent.
"""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path

from dataset import AggregatedDataset
from models import ItemRecord

LOGGER = logging.getLogger(__name__)

MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

CSV_COLUMNS = [
    "group",
    "key",
    "item_type",
    "title",
    "date",
    "creators",
    "children",
    "citation",
]

_ISO_DATE_RE = re.compile(r"(\d{4})(?:-?(\d{2}))?(?:-?(\d{2}))?")


def format_date(raw: str) -> str:
    """Format an ISO-ish date as "Month D, YYYY", "Month YYYY" or "YYYY".

    Anything that does not start with a 4-digit year is returned unchanged.
    """
    match = _ISO_DATE_RE.match(raw.strip())
    if not match:
        return raw
    year, month, day = match.groups()
    month_index = int(month) if month else 0
    if not 1 <= month_index <= 12:
        return year
    if day and int(day) > 0:
        return f"{MONTHS[month_index - 1]} {int(day)}, {year}"
    return f"{MONTHS[month_index - 1]} {year}"


def format_category_name(name: str) -> str:
    """Turn an item type like ``journalArticle`` into ``Journal Article``."""
    spaced = re.sub(r"(?<=[a-z0-9])([A-Z])", r" \1", name)
    return spaced[:1].upper() + spaced[1:]


def render_listing(dataset: AggregatedDataset) -> str:
    lines: list[str] = []
    if dataset.grouped:
        for group in dataset.groups:
            marker = "[-]" if group.expanded else "[+]"
            lines.append(f"{marker} {format_category_name(group.key)} ({len(group)})")
            if not group.expanded:
                continue
            for record in group.records:
                lines.extend(_record_lines(record, indent="    "))
    else:
        for record in dataset:
            lines.extend(_record_lines(record, indent=""))

    if not lines:
        return "No items."
    return "\n".join(lines)


def write_csv_summary(dataset: AggregatedDataset, path: str | Path) -> int:
    """Write one row per top-level record and return the number of rows."""
    rows = []
    if dataset.grouped:
        for group in dataset.groups:
            rows.extend(_csv_row(record, group.key) for record in group.records)
    else:
        rows.extend(_csv_row(record, "") for record in dataset)

    with Path(path).open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)

    LOGGER.info("report: %d records → %s", len(rows), path)
    return len(rows)


def _record_lines(record: ItemRecord, indent: str) -> list[str]:
    date = f"{format_date(record.date)}. " if record.date else ""
    creators = f" ({record.creators_summary})" if record.creators_summary else ""
    lines = [f"{indent}- {date}{record.title or '[untitled]'}{creators}"]
    for child in record.children:
        lines.append(f"{indent}    * {format_category_name(child.item_type)}: {child.title or child.key}")
    return lines


def _csv_row(record: ItemRecord, group: str) -> dict[str, object]:
    return {
        "group": group,
        "key": record.key,
        "item_type": record.item_type,
        "title": record.title,
        "date": record.date,
        "creators": record.creators_summary,
        "children": len(record.children),
        "citation": record.citation or "",
    }
