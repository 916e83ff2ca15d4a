"""Tests for value tree rendering."""

import json

from logberry.models import (
    NULL,
    EventDataMap,
    EventDataSequence,
    Null,
    Scalar,
    ScalarKind,
    render_key,
)


class TestScalar:
    """Tests for Scalar nodes."""

    def test_string_is_quoted(self):
        """Test strings render with JSON escaping."""
        assert Scalar('say "hi"\n').text() == '"say \\"hi\\"\\n"'

    def test_numbers_render_as_literals(self):
        """Test ints and floats render naturally."""
        assert Scalar(42, ScalarKind.INT).text() == "42"
        assert Scalar(7, ScalarKind.UINT).text() == "7"
        assert Scalar(1.5, ScalarKind.FLOAT).text() == "1.5"

    def test_bools_render_lowercase(self):
        """Test booleans render as true/false."""
        assert Scalar(True, ScalarKind.BOOL).text() == "true"
        assert Scalar(False, ScalarKind.BOOL).text() == "false"

    def test_zero_values(self):
        """Test zero detection per kind."""
        assert Scalar("").is_zero()
        assert Scalar(0, ScalarKind.INT).is_zero()
        assert Scalar(0.0, ScalarKind.FLOAT).is_zero()
        assert not Scalar(False, ScalarKind.BOOL).is_zero()
        assert not Scalar("x").is_zero()


class TestNull:
    """Tests for the Null node."""

    def test_singleton(self):
        """Test Null is a singleton."""
        assert Null() is NULL

    def test_renders_as_empty_map(self):
        """Test Null text and JSON forms."""
        assert NULL.text() == "{ }"
        assert NULL.to_json() == "null"
        assert NULL.is_zero()


class TestEventDataMap:
    """Tests for map rendering."""

    def test_empty_map(self):
        """Test empty map renders as braces."""
        assert EventDataMap().text() == "{ }"

    def test_keys_sorted_in_text(self):
        """Test text output sorts keys."""
        tree = EventDataMap(b=Scalar(2, ScalarKind.INT), a=Scalar("x"))
        assert tree.text() == '{ a="x" b=2 }'

    def test_special_keys_quoted(self):
        """Test keys with whitespace or structure characters are quoted."""
        tree = EventDataMap({"two words": Scalar(1, ScalarKind.INT), "a=b": NULL})
        assert tree.text() == '{ "a=b"={ } "two words"=1 }'

    def test_json_keeps_insertion_order(self):
        """Test structured output preserves insertion order."""
        tree = EventDataMap(z=Scalar(1, ScalarKind.INT), a=NULL)
        assert tree.to_json() == '{"z": 1, "a": null}'
        assert tree.to_bytes() == tree.to_json().encode("utf-8")

    def test_nested(self):
        """Test nested maps and sequences."""
        tree = EventDataMap(
            items=EventDataSequence([Scalar(1, ScalarKind.INT), Scalar("two")]),
            inner=EventDataMap(flag=Scalar(True, ScalarKind.BOOL)),
        )
        assert tree.text() == '{ inner={ flag=true } items=[ 1, "two" ] }'
        assert json.loads(tree.to_json()) == {"items": [1, "two"], "inner": {"flag": True}}

    def test_clone_is_independent(self):
        """Test clone shares no mutable nodes."""
        inner = EventDataMap(a=Scalar(1, ScalarKind.INT))
        tree = EventDataMap(inner=inner)
        copy = tree.clone()
        copy["inner"]["b"] = Scalar(2, ScalarKind.INT)
        assert "b" not in inner


class TestEventDataSequence:
    """Tests for sequence rendering."""

    def test_empty_sequence(self):
        """Test empty sequence renders as brackets."""
        assert EventDataSequence().text() == "[ ]"
        assert EventDataSequence().is_zero()

    def test_order_preserved(self):
        """Test sequence order in both forms."""
        seq = EventDataSequence([Scalar("b"), Scalar("a")])
        assert seq.text() == '[ "b", "a" ]'
        assert seq.to_python() == ["b", "a"]


class TestRenderKey:
    """Tests for key quoting."""

    def test_plain_key(self):
        assert render_key("Name") == "Name"

    def test_empty_key(self):
        assert render_key("") == '""'

    def test_bracket_key(self):
        assert render_key("a[0]") == '"a[0]"'
