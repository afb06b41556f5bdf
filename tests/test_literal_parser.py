"""
Tests for the JavaScript literal parser used on SvelteKit hydration scripts.
"""

import math

import pytest

from settlement_sync.core.errors import PayloadParseError
from settlement_sync.core.parsing import parse_literal, parse_literal_value


class TestLiteralGrammar:
    """Test the supported literal subset."""

    def test_object_with_bare_quoted_and_numeric_keys(self):
        value = parse_literal_value("{a: 1, 'b': 2, \"c\": 3, 4: 'four', $d_1: true}")
        assert value == {"a": 1, "b": 2, "c": 3, "4": "four", "$d_1": True}

    def test_trailing_commas(self):
        assert parse_literal_value("{a: [1, 2,], b: 3,}") == {"a": [1, 2], "b": 3}

    def test_nested_structures(self):
        value = parse_literal_value("{data: {buildings: [{inventory: [{contents: null}]}]}}")
        assert value["data"]["buildings"][0]["inventory"][0]["contents"] is None

    def test_keywords(self):
        value = parse_literal_value("[true, false, null, undefined, void 0]")
        assert value == [True, False, None, None, None]

    def test_special_numbers(self):
        value = parse_literal_value("[NaN, Infinity, -Infinity]")
        assert math.isnan(value[0])
        assert value[1] == float("inf")
        assert value[2] == float("-inf")

    def test_numbers(self):
        value = parse_literal_value("[0, -5, 3.25, .5, 1e3, 0x1F, +7]")
        assert value == [0, -5, 3.25, 0.5, 1000.0, 31, 7]

    def test_bigint_literals(self):
        assert parse_literal_value("[144115188105096768n, BigInt('42')]") == [144115188105096768, 42]

    def test_string_escapes(self):
        value = parse_literal_value(r"['it\'s', 'line\nbreak', '\x41B\u{43}']")
        assert value == ["it's", "line\nbreak", "ABC"]

    def test_template_literal_without_substitutions(self):
        assert parse_literal_value("`plain text`") == "plain text"

    def test_comments_are_ignored(self):
        assert parse_literal_value("{/* block */ a: 1, // line\n b: 2}") == {"a": 1, "b": 2}

    def test_date_constructor_renders_iso_timestamp(self):
        assert parse_literal_value("new Date(0)") == "1970-01-01T00:00:00.000Z"
        assert parse_literal_value("new Date(1717243200123)") == "2024-06-01T12:00:00.123Z"

    def test_set_and_map_constructors(self):
        assert parse_literal_value("new Set([1, 2])") == [1, 2]
        assert parse_literal_value("new Map([['a', 1], ['b', 2]])") == {"a": 1, "b": 2}

    def test_defer_placeholder_requires_session(self):
        value = parse_literal_value("{members: __sveltekit_abc.defer(3)}", session_id="abc")
        assert value == {"members": "__DEFERRED_3__"}

        with pytest.raises(PayloadParseError):
            parse_literal_value("{members: __sveltekit_abc.defer(3)}")


class TestLiteralErrors:
    """Test that non-literal code is rejected rather than evaluated."""

    def test_function_call_rejected(self):
        with pytest.raises(PayloadParseError):
            parse_literal_value("{a: alert(1)}")

    def test_unterminated_object(self):
        with pytest.raises(PayloadParseError):
            parse_literal_value("{a: 1")

    def test_unterminated_string(self):
        with pytest.raises(PayloadParseError):
            parse_literal_value("'abc")

    def test_trailing_content(self):
        with pytest.raises(PayloadParseError):
            parse_literal_value("{a: 1} extra")

    def test_error_reports_offset(self):
        with pytest.raises(PayloadParseError) as exc_info:
            parse_literal_value("{a: foo}")
        assert exc_info.value.position is not None
        assert "offset" in str(exc_info.value)


class TestParseLiteralOffsets:
    def test_parse_from_offset_returns_end(self):
        text = "resolve({a: [1, 2]}) rest"
        value, end = parse_literal(text, len("resolve("))
        assert value == {"a": [1, 2]}
        assert text[end] == ")"
