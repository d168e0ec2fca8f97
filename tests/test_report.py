from __future__ import annotations

import csv
from pathlib import Path

import pytest

from dataset import AggregatedDataset
from models import ItemRecord
from report import format_category_name, format_date, render_listing, write_csv_summary


def _record(key: str, item_type: str, title: str, date: str = "", children: tuple = ()) -> ItemRecord:
    return ItemRecord(
        key=key,
        item_type=item_type,
        data={"title": title, "date": date, "creators": [{"firstName": "Ada", "lastName": "Lovelace"}]},
        citation=f"<span>{title}</span>",
        children=children,
    )


def _dataset() -> AggregatedDataset:
    note = ItemRecord(key="N1", item_type="note", data={"note": "Reading notes"}, parent_key="B1")
    return AggregatedDataset([
        _record("B1", "book", "Analytical Engines", "1843-10-01", children=(note,)),
        _record("J1", "journalArticle", "On Numbers", "1850-02"),
        _record("B2", "book", "Second Book", "1851"),
    ])


@pytest.mark.parametrize("raw,expected", [
    ("2016-05-12", "May 12, 2016"),
    ("2016-05", "May 2016"),
    ("2016", "2016"),
    ("2016-13-01", "2016"),
    ("Spring 2016", "Spring 2016"),
])
def test_format_date(raw: str, expected: str) -> None:
    assert format_date(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("journalArticle", "Journal Article"),
    ("book", "Book"),
    ("conferencePaper", "Conference Paper"),
])
def test_format_category_name(raw: str, expected: str) -> None:
    assert format_category_name(raw) == expected


def test_render_listing_ungrouped_keeps_order_and_children() -> None:
    listing = render_listing(_dataset())

    lines = listing.splitlines()
    assert lines[0] == "- October 1, 1843. Analytical Engines (Lovelace, Ada)"
    assert lines[1] == "    * Note: Reading notes"
    assert lines[2].startswith("- February 1850. On Numbers")
    assert lines[3].startswith("- 1851. Second Book")


def test_render_listing_grouped_marks_collapsed_sections() -> None:
    dataset = _dataset()
    dataset.group_by_type(["book"])

    lines = render_listing(dataset).splitlines()

    assert lines[0] == "[-] Book (2)"
    assert "Analytical Engines" in lines[1]
    assert "[+] Journal Article (1)" in lines
    assert not any("On Numbers" in line for line in lines)


def test_render_listing_empty() -> None:
    assert render_listing(AggregatedDataset([])) == "No items."


def test_write_csv_summary(tmp_path: Path) -> None:
    dataset = _dataset()
    dataset.group_by_type("all")
    path = tmp_path / "summary.csv"

    count = write_csv_summary(dataset, path)

    with path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))

    assert count == 3
    assert [row["key"] for row in rows] == ["B1", "B2", "J1"]
    assert rows[0]["group"] == "book"
    assert rows[0]["children"] == "1"
    assert rows[0]["creators"] == "Lovelace, Ada"
    assert rows[2]["citation"] == "<span>On Numbers</span>"
