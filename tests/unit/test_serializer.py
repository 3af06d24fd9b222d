"""Tests for extended JSON serialization."""

from __future__ import annotations

import pytest

from extjson import serialize
from extjson.core.config import ExtJsonSettings
from extjson.core.dates import MAX_EPOCH_MILLIS
from extjson.core.errors import SerializationError
from extjson.core.ir.values import BinData, IsoDate, NaNMarker, ObjectId, Regex
from extjson.core.serializer import canonical_flags, format_key, format_number, quote

DEFAULTS = ExtJsonSettings()


def compact(value: object) -> str:
    return serialize(value, pretty=False, settings=DEFAULTS)


# ============================================================================
# Layout
# ============================================================================


class TestLayout:
    def test_pretty_nested(self) -> None:
        text = serialize({"a": 1, "b": [1, 2]}, settings=DEFAULTS)
        assert text == "{\n    a: 1,\n    b: [\n        1,\n        2\n    ]\n}"

    def test_compact(self) -> None:
        assert compact({"a": 1, "b": [1, 2], "c": {"d": None}}) == "{a:1,b:[1,2],c:{d:null}}"

    def test_empty_containers(self) -> None:
        assert serialize({}, settings=DEFAULTS) == "{}"
        assert serialize({"a": {}, "b": []}, settings=DEFAULTS) == "{\n    a: {},\n    b: []\n}"
        assert serialize([[]], settings=DEFAULTS) == "[\n    []\n]"

    def test_key_order_preserved(self) -> None:
        assert compact({"z": 1, "a": 2, "m": 3}) == "{z:1,a:2,m:3}"

    def test_tab_indent(self) -> None:
        text = serialize({"a": [1]}, settings=ExtJsonSettings(indent="\t"))
        assert text == "{\n\ta: [\n\t\t1\n\t]\n}"

    def test_indent_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXTJSON_INDENT", "2")
        assert serialize({"a": 1}) == "{\n  a: 1\n}"

    def test_tuples_are_arrays(self) -> None:
        assert compact({"a": (1, 2)}) == "{a:[1,2]}"

    def test_scalars_at_top_level(self) -> None:
        assert compact(5) == "5"
        assert compact("x") == '"x"'


# ============================================================================
# Keys and strings
# ============================================================================


class TestKeys:
    @pytest.mark.parametrize("key", ["a", "_id", "$ref", "café", "x1", "Infinity"])
    def test_identifiers_unquoted(self, key: str) -> None:
        assert format_key(key) == key

    @pytest.mark.parametrize("key", ["default", "null", "true", "function", "eval", "arguments"])
    def test_reserved_words_quoted(self, key: str) -> None:
        assert format_key(key) == f'"{key}"'

    @pytest.mark.parametrize("key", ["", "1", "a b", "a-b", "a.b"])
    def test_non_identifiers_quoted(self, key: str) -> None:
        assert format_key(key) == f'"{key}"'

    def test_non_string_key_rejected(self) -> None:
        with pytest.raises(SerializationError, match="Object keys must be strings, got int"):
            compact({1: "a"})


class TestStrings:
    def test_short_escapes(self) -> None:
        assert quote('a"b\\c\nd\te\rf\bg\fh') == '"a\\"b\\\\c\\nd\\te\\rf\\bg\\fh"'

    def test_control_characters(self) -> None:
        assert quote("\x00\x1f\x7f") == '"\\u0000\\u001f\\u007f"'

    def test_line_separators(self) -> None:
        assert quote("\u2028\u2029") == '"\\u2028\\u2029"'

    def test_lone_surrogate(self) -> None:
        assert quote("\ud800") == '"\\ud800"'

    def test_printable_unicode_kept(self) -> None:
        assert quote("é\U0001f600") == '"é\U0001f600"'

    def test_slash_not_escaped(self) -> None:
        assert quote("a/b") == '"a/b"'


# ============================================================================
# Numbers
# ============================================================================


class TestNumbers:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0"),
            (-7, "-7"),
            (10**30, "1" + "0" * 30),
            (1.0, "1"),
            (-0.0, "0"),
            (1.5, "1.5"),
            (0.1, "0.1"),
            (1e21, "1e+21"),
            (float("inf"), "null"),
            (float("-inf"), "null"),
            (float("nan"), "null"),
        ],
    )
    def test_format_number(self, value: int | float, expected: str) -> None:
        assert format_number(value) == expected

    def test_booleans(self) -> None:
        assert compact([True, False]) == "[true,false]"


# ============================================================================
# Extended types
# ============================================================================


class TestExtendedTypes:
    def test_object_id(self) -> None:
        assert compact(ObjectId(hex="abc")) == 'ObjectId("abc")'
        assert compact(ObjectId()) == "ObjectId()"

    def test_iso_date(self) -> None:
        assert compact(IsoDate(epoch_millis_utc=0)) == 'ISODate("1970-01-01T00:00:00Z")'
        assert (
            compact(IsoDate(epoch_millis_utc=1577934245006))
            == 'ISODate("2020-01-02T03:04:05.006Z")'
        )

    def test_absent_date(self) -> None:
        assert compact(IsoDate()) == "ISODate(null)"

    def test_dates_outside_four_digit_years(self) -> None:
        assert compact(IsoDate(epoch_millis_utc=MAX_EPOCH_MILLIS)) == f"Date({MAX_EPOCH_MILLIS})"
        # 0001-01-01
        assert compact(IsoDate(epoch_millis_utc=-62135596800000)) == "Date(-62135596800000)"

    def test_regex_literal(self) -> None:
        assert compact(Regex(pattern="ab+c", flags="gi")) == "/ab+c/gi"
        assert compact(Regex(pattern="[/]", flags="")) == "/[/]/"

    def test_regex_constructor_for_unsafe_pattern(self) -> None:
        assert compact(Regex(pattern="a/b", flags="")) == 'RegExp("a/b", "")'
        assert compact(Regex(pattern="*", flags="g")) == 'RegExp("*", "g")'

    def test_regex_constructor_for_other_flags(self) -> None:
        assert compact(Regex(pattern="a", flags="ig")) == 'RegExp("a", "ig")'
        assert compact(Regex(pattern="a", flags="s")) == 'RegExp("a", "s")'

    def test_absent_regex(self) -> None:
        assert compact(Regex()) == "RegExp()"
        assert compact(Regex(flags="g")) == 'RegExp(null, "g")'

    def test_empty_strings_are_absent(self) -> None:
        assert ObjectId(hex="") == ObjectId()
        assert Regex(pattern="", flags="g") == Regex(flags="g")
        assert compact(ObjectId(hex="")) == "ObjectId()"
        assert compact(Regex(pattern="", flags="g")) == 'RegExp(null, "g")'

    def test_bin_data(self) -> None:
        assert compact(BinData(subtype=0, base64="AAAA")) == 'BinData(0, "AAAA")'

    def test_nan(self) -> None:
        assert compact({"n": NaNMarker()}) == "{n:NaN}"

    def test_dbref_is_a_plain_object(self) -> None:
        value = {"$ref": "users", "$id": ObjectId(hex="abc")}
        assert compact(value) == '{$ref:"users",$id:ObjectId("abc")}'

    def test_canonical_flags(self) -> None:
        assert canonical_flags("imgsy") == "gmi"
        assert canonical_flags("") == ""


# ============================================================================
# Errors
# ============================================================================


class TestErrors:
    def test_unsupported_type(self) -> None:
        with pytest.raises(SerializationError, match="Cannot serialize value of type set"):
            compact({"a": {1, 2}})

    def test_depth_limit(self) -> None:
        settings = ExtJsonSettings(max_depth=2)
        assert serialize({"a": {"b": 1}}, settings=settings) == "{\n    a: {\n        b: 1\n    }\n}"
        with pytest.raises(SerializationError, match="Maximum nesting depth of 2 exceeded"):
            serialize({"a": {"b": {}}}, settings=settings)

    def test_arrays_count_toward_depth(self) -> None:
        with pytest.raises(SerializationError):
            serialize([[[]]], pretty=False, settings=ExtJsonSettings(max_depth=2))
