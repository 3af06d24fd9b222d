"""
Property-based tests using Hypothesis.

These tests verify invariants across a wide range of inputs,
replacing the need for exhaustive example-based tests.
"""

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from extjson import normalize, parse, serialize
from extjson.core.config import ExtJsonSettings
from extjson.core.dates import MAX_EPOCH_MILLIS, format_iso_date, parse_iso_date
from extjson.core.errors import ParseError
from extjson.core.ir.values import BinData, IsoDate, NaNMarker, ObjectId, Regex

DEFAULTS = ExtJsonSettings()

# Lone surrogates cannot survive a \u escape round trip as separate characters
text = st.text(st.characters(blacklist_categories=("Cs",)), max_size=20)

object_ids = st.builds(ObjectId, hex=st.none() | text)
dates = st.builds(
    IsoDate,
    epoch_millis_utc=st.none() | st.integers(min_value=-MAX_EPOCH_MILLIS, max_value=MAX_EPOCH_MILLIS),
)
regexes = st.builds(
    Regex,
    pattern=st.none() | text,
    flags=st.text(alphabet="gimsuy", max_size=3) | text,
)
bin_data = st.builds(BinData, subtype=st.integers(min_value=0, max_value=255), base64=text)

scalars = (
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=False, allow_infinity=False)
    | text
    | st.just(NaNMarker())
    | object_ids
    | dates
    | regexes
    | bin_data
)

values = st.recursive(
    scalars,
    lambda children: st.lists(children, max_size=4)
    | st.dictionaries(text, children, max_size=4),
    max_leaves=15,
)

documents = st.dictionaries(text, values, max_size=5)


# =============================================================================
# Round trip
# =============================================================================


class TestRoundTripProperties:
    """Serialized values parse back to equal values."""

    @given(documents)
    @settings(max_examples=200, deadline=None)
    def test_pretty_round_trip(self, doc: dict[str, Any]) -> None:
        """Invariant: parse(serialize(doc)) == doc."""
        assert parse(serialize(doc, settings=DEFAULTS), settings=DEFAULTS) == doc

    @given(documents)
    @settings(max_examples=200, deadline=None)
    def test_compact_round_trip(self, doc: dict[str, Any]) -> None:
        """Invariant: compact output parses back to the same value."""
        assert parse(serialize(doc, pretty=False, settings=DEFAULTS), settings=DEFAULTS) == doc

    @given(documents, st.booleans())
    @settings(max_examples=100, deadline=None)
    def test_normalize_is_idempotent(self, doc: dict[str, Any], pretty: bool) -> None:
        """Invariant: normalizing canonical text leaves it unchanged."""
        once = serialize(doc, pretty, settings=DEFAULTS)
        assert normalize(once, pretty, settings=DEFAULTS) == once

    @given(st.integers(min_value=-59011459200000, max_value=253402300799999))
    @settings(max_examples=200, deadline=None)
    def test_iso_date_text_round_trip(self, millis: int) -> None:
        """Invariant: four-digit-year dates survive format then parse."""
        assert parse_iso_date(format_iso_date(millis)) == millis


# =============================================================================
# Robustness
# =============================================================================


class TestParserRobustness:
    """Arbitrary input is either accepted or rejected with ParseError."""

    @given(st.text(alphabet="{}[]():,;.'\"/\\-+!~ \nabcxNaIfinyg0123456789eE", max_size=60))
    @settings(max_examples=300, deadline=None)
    def test_parse_only_raises_parse_error(self, source: str) -> None:
        """Invariant: parse never raises anything but ParseError."""
        try:
            result = parse(source, settings=DEFAULTS)
        except ParseError as e:
            assert e.errors
        else:
            assert isinstance(result, dict)

    @given(st.text(max_size=100))
    @settings(max_examples=200, deadline=None)
    def test_arbitrary_unicode(self, source: str) -> None:
        """Invariant: no input crashes the tokenizer, parser or validator."""
        try:
            parse(source, settings=DEFAULTS)
        except ParseError:
            pass
