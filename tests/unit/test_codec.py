"""
Tests for the parse / normalize entry points.

Covers:
- Input coercion
- Syntax vs structural failure and error locations
- Normalization layout and idempotence
- Settings and debug logging
"""

from __future__ import annotations

import logging

import pytest

from extjson import normalize, parse, serialize
from extjson.core.config import ExtJsonSettings
from extjson.core.errors import (
    ErrorKind,
    ExtJsonSyntaxError,
    ParseError,
    SerializationError,
    StructuralError,
)
from extjson.core.ir.values import BinData, IsoDate, NaNMarker, ObjectId, Regex, is_dbref

SAMPLE = """{
    _id: ObjectId("4d8e5d1b6a9e4c2f3a1b0c9d"),
    "default": true,
    when: ISODate("2020-01-02T03:04:05.006Z"),
    owner: DBRef("users", ObjectId("4d8e5d1b6a9e4c2f3a1b0c9e")),
    tags: [
        "a",
        /ab+c/gi
    ]
}"""


def parse_failure(text: str) -> ParseError:
    with pytest.raises(ParseError) as exc_info:
        parse(text)
    return exc_info.value


# ============================================================================
# Parsing
# ============================================================================


class TestParse:
    def test_sample(self) -> None:
        doc = parse(SAMPLE)
        assert list(doc) == ["_id", "default", "when", "owner", "tags"]
        assert doc["_id"] == ObjectId(hex="4d8e5d1b6a9e4c2f3a1b0c9d")
        assert doc["default"] is True
        assert doc["when"] == IsoDate(epoch_millis_utc=1577934245006)
        assert doc["owner"] == {"$ref": "users", "$id": ObjectId(hex="4d8e5d1b6a9e4c2f3a1b0c9e")}
        assert doc["tags"] == ["a", Regex(pattern="ab+c", flags="gi")]

    def test_plain_json(self) -> None:
        assert parse('{"a": [1, 2.5, "x", null, true, false]}') == {
            "a": [1, 2.5, "x", None, True, False]
        }

    def test_bytes_are_decoded(self) -> None:
        assert parse('{a: "é"}'.encode()) == {"a": "é"}

    def test_comments_and_whitespace(self) -> None:
        assert parse("  // leading\n{a: 1 /* inline */}\n") == {"a": 1}

    def test_empty_object(self) -> None:
        assert parse("{}") == {}

    def test_every_extended_type(self, sample_document: str) -> None:
        doc = parse(sample_document)
        assert doc["created"].isoformat() == "2011-03-26T18:44:27Z"
        assert is_dbref(doc["owner"])
        assert doc["pattern"] == Regex(pattern="^a.*z$", flags="i")
        assert doc["payload"] == BinData(subtype=0, base64="AAECAw==")
        assert doc["score"] == NaNMarker()


# ============================================================================
# Failures
# ============================================================================


class TestSyntaxErrors:
    def test_unexpected_end(self) -> None:
        error = parse_failure("{a: ")
        assert error.kind == ErrorKind.SYNTAX
        (item,) = error.errors
        assert isinstance(item, ExtJsonSyntaxError)
        assert item.message == "Unexpected end of input"
        assert (item.location.line, item.location.column) == (1, 5)

    def test_empty_text(self) -> None:
        error = parse_failure("")
        assert error.kind == ErrorKind.SYNTAX
        assert error.errors[0].location.column == 1

    def test_lexical_error_location(self) -> None:
        error = parse_failure("{\n  a: #}")
        assert error.kind == ErrorKind.SYNTAX
        first = error.errors[0]
        assert first.message == "Unexpected character: '#'"
        assert (first.location.line, first.location.column) == (2, 6)

    def test_syntax_errors_skip_validation(self) -> None:
        error = parse_failure("{a: foo, b: }")
        assert error.kind == ErrorKind.SYNTAX
        assert all(isinstance(e, ExtJsonSyntaxError) for e in error.errors)

    def test_depth_limit_is_a_syntax_error(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("{a: {b: {c: 1}}}", settings=ExtJsonSettings(max_depth=2))
        assert exc_info.value.kind == ErrorKind.SYNTAX
        assert exc_info.value.errors[0].message == "Maximum nesting depth of 2 exceeded"

    def test_depth_within_limit(self) -> None:
        assert parse("{a: {b: {c: 1}}}", settings=ExtJsonSettings(max_depth=3)) == {
            "a": {"b": {"c": 1}}
        }


class TestStructuralErrors:
    def test_location_is_relative_to_caller_text(self) -> None:
        error = parse_failure("{\n  a: foo\n}")
        assert error.kind == ErrorKind.STRUCTURAL
        (item,) = error.errors
        assert isinstance(item, StructuralError)
        assert (item.location.line, item.location.column) == (2, 6)
        assert item.location.snippet == "{\n  a: foo\n}"

    def test_message_counts_errors(self) -> None:
        assert parse_failure("{a: foo}").message == "1 parse error"
        assert parse_failure("{a: foo, b: bar}").message == "2 parse errors"

    def test_format_errors(self) -> None:
        error = parse_failure("{a: foo,\n b: Bar()}")
        assert error.format_errors() == "1:5: Unexpected value: foo\n2:5: bad call: Bar"


# ============================================================================
# Normalization
# ============================================================================


class TestNormalize:
    def test_pretty(self) -> None:
        expected = SAMPLE.replace(
            'DBRef("users", ObjectId("4d8e5d1b6a9e4c2f3a1b0c9e"))',
            '{\n        $ref: "users",\n        $id: ObjectId("4d8e5d1b6a9e4c2f3a1b0c9e")\n    }',
        )
        assert normalize(SAMPLE, settings=ExtJsonSettings()) == expected

    def test_compact(self) -> None:
        text = normalize("{b: 1, a: [/x/i, ISODate('2020-01-02')]}", pretty=False)
        assert text == '{b:1,a:[/x/i,ISODate("2020-01-02T00:00:00Z")]}'

    def test_constructor_forms_are_canonicalised(self) -> None:
        text = normalize("{d: new Date(0), r: RegExp('a+', 'gi'), n: - -NaN}", pretty=False)
        assert text == '{d:ISODate("1970-01-01T00:00:00Z"),r:/a+/gi,n:NaN}'

    def test_idempotent(self) -> None:
        once = normalize("{'x y': [1,,2], z: BinData(0, 'AA=='), 'new': ObjectId()}")
        assert normalize(once) == once

    def test_empty_identifier_and_pattern_round_trip(self) -> None:
        value = {"o": ObjectId(hex=""), "r": Regex(pattern="", flags="g")}
        assert parse(serialize(value)) == value
        assert parse('{o: ObjectId(""), r: RegExp("", "g")}') == value

    def test_propagates_parse_errors(self) -> None:
        with pytest.raises(ParseError):
            normalize("{a: foo}")


# ============================================================================
# Depth limit round trip
# ============================================================================


def nest(leaf: object, levels: int) -> dict:
    """``levels`` objects deep, the innermost holding ``x: leaf``."""
    value: dict = {"x": leaf}
    for _ in range(levels - 1):
        value = {"x": value}
    return value


class TestDepthRoundTrip:
    def test_output_at_the_limit_parses_back(self) -> None:
        settings = ExtJsonSettings(max_depth=3)
        value = {"a": {"b": {"c": 1}}}
        assert parse(serialize(value, settings=settings), settings=settings) == value

    @pytest.mark.parametrize(
        "leaf",
        [-1, -1.5, IsoDate(epoch_millis_utc=-62135596800000), BinData(subtype=0, base64="")],
    )
    def test_default_limit_with_signed_and_constructor_leaves(self, leaf: object) -> None:
        settings = ExtJsonSettings()
        value = nest(leaf, settings.max_depth)
        for pretty in (True, False):
            assert parse(serialize(value, pretty, settings=settings), settings=settings) == value

    def test_arrays_at_the_limit(self) -> None:
        settings = ExtJsonSettings(max_depth=4)
        value = {"a": [[[-1, Regex(flags="g")]]]}
        assert parse(serialize(value, settings=settings), settings=settings) == value

    def test_one_level_past_the_limit_fails_both_ways(self) -> None:
        settings = ExtJsonSettings(max_depth=3)
        value = nest(-1, 4)
        with pytest.raises(SerializationError):
            serialize(value, settings=settings)
        text = serialize(value, settings=ExtJsonSettings())
        with pytest.raises(ParseError) as exc_info:
            parse(text, settings=settings)
        assert exc_info.value.errors[0].message == "Maximum nesting depth of 3 exceeded"


# ============================================================================
# Logging
# ============================================================================


class TestLogging:
    def test_success_is_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="extjson.core.codec"):
            parse("{a: 1, b: 2}")
        assert "Parsed extended JSON object with 2 key(s)" in caplog.text

    def test_rejection_is_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="extjson.core.codec"):
            with pytest.raises(ParseError):
                parse("{a: foo}")
        assert "Rejected extended JSON: 1 parse error" in caplog.text
