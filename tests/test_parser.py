"""Tests for board markdown splitting."""

import pytest

from portus.errors import ParseError
from portus.parser import (
    extract_front_matter,
    extract_settings_block,
    serialize_item,
    serialize_section,
    split_sections,
)


def test_front_matter_extracted():
    body, meta = extract_front_matter("---\nkanban-plugin: board\ntags: [a]\n---\n\n## Todo\n")
    assert meta == {"kanban-plugin": "board", "tags": ["a"]}
    assert body == "\n## Todo\n"


def test_no_front_matter():
    body, meta = extract_front_matter("## Todo\n")
    assert meta == {}
    assert body == "## Todo\n"


def test_malformed_front_matter_raises():
    with pytest.raises(ParseError):
        extract_front_matter("---\nkey: [unclosed\n---\n")


def test_scalar_front_matter_raises():
    with pytest.raises(ParseError):
        extract_front_matter("---\njust text\n---\n")


def test_settings_block():
    text = '## Todo\n\n%% kanban:settings\n```\n{"date-format":"YYYY"}\n```\n%%\n'
    body, settings = extract_settings_block(text)
    assert settings == {"date-format": "YYYY"}
    assert "kanban:settings" not in body


def test_settings_block_invalid_json():
    with pytest.raises(ParseError, match="Invalid settings block"):
        extract_settings_block("%% kanban:settings\n```\n{nope}\n```\n%%\n")


def test_settings_block_unterminated():
    with pytest.raises(ParseError, match="Unterminated"):
        extract_settings_block('%% kanban:settings\n```\n{"a": 1}\n')


def test_settings_block_must_be_object():
    with pytest.raises(ParseError):
        extract_settings_block("%% kanban:settings\n```\n[1, 2]\n```\n%%\n")


def test_split_lanes_and_items():
    sections = split_sections("## Todo\n\n- [ ] one\n- two\n\n## Done\n\n- [x] three\n")
    assert [s.title for s in sections] == ["Todo", "Done"]
    assert sections[0].items == [(" ", "one"), (" ", "two")]
    assert sections[1].items == [("x", "three")]


def test_continuation_lines_and_inner_blank_lines():
    text = "## Todo\n\n- [ ] first line\n    second line\n\n    after blank\n- [ ] next\n"
    sections = split_sections(text)
    assert sections[0].items == [(" ", "first line\nsecond line\n\nafter blank"), (" ", "next")]


def test_complete_marker_only_before_items():
    sections = split_sections("## A\n\n**Complete**\n- [ ] x\n\n## B\n\n- [ ] y\n**Complete**\n")
    assert sections[0].complete is True
    assert sections[1].complete is False


def test_archive_separator_marks_later_sections():
    sections = split_sections("## Todo\n\n***\n\n## Archive\n\n- [x] old\n")
    assert [s.archived for s in sections] == [False, True]


def test_code_fence_is_not_parsed():
    sections = split_sections("## Todo\n\n```\n## Not a lane\n- [ ] not a card\n```\n- [ ] real\n")
    assert len(sections) == 1
    assert sections[0].items == [(" ", "real")]


def test_text_before_first_heading_ignored():
    assert split_sections("intro\n- [ ] stray\n") == []


def test_serialize_item_indents_continuation():
    assert serialize_item(" ", "one\ntwo") == "- [ ] one\n    two"
    assert serialize_item("x", "done") == "- [x] done"


def test_serialize_section_complete():
    assert serialize_section("Done", ["- [ ] a"], complete=True) == "## Done\n\n**Complete**\n- [ ] a\n"
