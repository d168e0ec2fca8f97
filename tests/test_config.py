from unittest.mock import patch

import pytest

from config import EXPAND_ALL, PublicationsConfig, load_config, parse_expand


def test_defaults() -> None:
    with patch.dict("os.environ", {}, clear=True):
        config = load_config()

    assert config.api_base == "api.zotero.org"
    assert config.limit == 100
    assert config.citation_style == "apa-annotated-bibliography"
    assert config.include == ("data", "citation")
    assert config.group is None
    assert config.expand == EXPAND_ALL
    assert config.shortened_abstract_length == 250
    assert config.max_items is None


def test_env_vars_override_defaults() -> None:
    env = {
        "ZOTERO_API_BASE": "zotero.example.org",
        "ZOTERO_LIMIT": "25",
        "ZOTERO_CITATION_STYLE": "chicago-note-bibliography",
        "ZOTERO_INCLUDE": "data, bib",
        "ZOTERO_GROUP": "type",
        "ZOTERO_EXPAND": "book,thesis",
        "ZOTERO_MAX_ITEMS": "60",
        "ZOTERO_TIMEOUT_SECONDS": "2.5",
    }
    with patch.dict("os.environ", env, clear=True):
        config = load_config()

    assert config.api_base == "zotero.example.org"
    assert config.limit == 25
    assert config.citation_style == "chicago-note-bibliography"
    assert config.include == ("data", "bib")
    assert config.group == "type"
    assert config.expand == frozenset({"book", "thesis"})
    assert config.max_items == 60
    assert config.timeout_seconds == 2.5


def test_explicit_overrides_win_and_none_is_ignored() -> None:
    with patch.dict("os.environ", {"ZOTERO_LIMIT": "25"}, clear=True):
        config = load_config(limit=10, citation_style=None)

    assert config.limit == 10
    assert config.citation_style == "apa-annotated-bibliography"


@pytest.mark.parametrize("group", [False, "", "none"])
def test_falsy_group_means_ungrouped(group: object) -> None:
    with patch.dict("os.environ", {}, clear=True):
        assert load_config(group=group).group is None


def test_list_inputs_are_normalized() -> None:
    config = PublicationsConfig(include=["data"], expand=["book"])

    assert config.include == ("data",)
    assert config.expand == frozenset({"book"})


@pytest.mark.parametrize("overrides", [
    {"limit": 0},
    {"group": "author"},
    {"max_items": 0},
    {"shortened_abstract_length": 0},
    {"colour": "blue"},
])
def test_invalid_values_raise(overrides: dict) -> None:
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(ValueError):
            load_config(**overrides)


@pytest.mark.parametrize("raw,expected", [
    ("all", EXPAND_ALL),
    (" ALL ", EXPAND_ALL),
    ("book, thesis", frozenset({"book", "thesis"})),
    ("", frozenset()),
    (None, frozenset()),
])
def test_parse_expand(raw: str | None, expected: object) -> None:
    assert parse_expand(raw) == expected


def test_single_string_expand_and_include_are_one_entry() -> None:
    with patch.dict("os.environ", {}, clear=True):
        config = load_config(group="type", expand="book", include="data")

    assert config.expand == frozenset({"book"})
    assert config.include == ("data",)


@pytest.mark.parametrize("group", [False, "", "none", "false", None])
def test_config_class_accepts_ungrouped_values(group: object) -> None:
    assert PublicationsConfig(group=group).group is None
