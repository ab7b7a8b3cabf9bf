import pytest

from configloader.errors import ParseError, ReadError
from configloader.parsers import lower_keys, parse_file, parse_text


def test_json():
    assert parse_text('{"Name": "svc", "Ports": [{"Num": 80}]}', ".json") == {
        "name": "svc",
        "ports": [{"num": 80}],
    }


def test_yaml_empty_document():
    assert parse_text("", ".yml") == {}


def test_ini_sections_and_defaults():
    text = "[DEFAULT]\nregion = eu\n\n[Server]\nHost = example.org\n"
    assert parse_text(text, ".ini") == {
        "region": "eu",
        "server": {"host": "example.org", "region": "eu"},
    }


def test_top_level_must_be_mapping():
    with pytest.raises(ParseError, match="mapping"):
        parse_text("[1, 2, 3]", ".json")


def test_parser_message_preserved():
    with pytest.raises(ParseError) as exc_info:
        parse_text("key: [unclosed", ".yaml")
    assert str(exc_info.value.__cause__) in str(exc_info.value)


def test_unsupported_suffix():
    with pytest.raises(ParseError):
        parse_text("a=1", ".properties")


def test_parse_file_reads_by_suffix(tmp_path):
    path = tmp_path / "cfg.TOML"
    path.write_text("[A]\nB = 1\n", encoding="utf-8")
    assert parse_file(path) == {"a": {"b": 1}}


def test_parse_file_missing(tmp_path):
    with pytest.raises(ReadError):
        parse_file(tmp_path / "missing.json")


def test_lower_keys_stringifies():
    assert lower_keys({1: {"X": [{"Y": None}]}}) == {"1": {"x": [{"y": None}]}}
