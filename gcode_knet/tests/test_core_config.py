"""Tests for the relaxed ``(Core: ...)`` comment parser.

Validates quoting of bare keys and values, separator normalisation,
field decoding and defaults, the nested ``(Core : {...})`` form, and the
park command format.
"""

from __future__ import annotations

import json

import pytest

from gcode_knet.gcode.core_config import (
    CoreConfig,
    CoreConfigError,
    decode_core_config,
    extract_fragment,
    parse_core_comment,
    sanitize_fragment,
)


# ---------------------------------------------------------------------------
# Fragment extraction and sanitising
# ---------------------------------------------------------------------------


class TestSanitize:
    def test_quotes_bare_keys_and_values(self) -> None:
        text = sanitize_fragment("{Core: A; X-Axis: X; Park: 10; Feed: 500}")
        assert json.loads(text) == {
            "Core": "A", "X-Axis": "X", "Park": 10, "Feed": 500,
        }

    def test_commas_accepted(self) -> None:
        text = sanitize_fragment("{Core: B, X-Axis: Y, Park: 2.5}")
        assert json.loads(text) == {"Core": "B", "X-Axis": "Y", "Park": 2.5}

    def test_numbers_stay_numbers(self) -> None:
        data = json.loads(sanitize_fragment("{Park: -12.75; Feed: 0}"))
        assert data["Park"] == -12.75
        assert data["Feed"] == 0

    def test_already_quoted_passes_through(self) -> None:
        text = sanitize_fragment('{"Core": "A", "X-Axis": "X"}')
        assert json.loads(text) == {"Core": "A", "X-Axis": "X"}

    def test_value_followed_by_space_is_not_quoted(self) -> None:
        # only values directly followed by a separator are quoted
        with pytest.raises(json.JSONDecodeError):
            json.loads(sanitize_fragment("{Core: A ; X-Axis: X}"))


class TestExtractFragment:
    def test_first_open_last_close(self) -> None:
        assert extract_fragment("(Core: A (left))") == "Core: A (left)"

    def test_missing_parens(self) -> None:
        assert extract_fragment("Core: A") is None
        assert extract_fragment(")Core: A(") is None


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class TestDecode:
    def test_full_record(self) -> None:
        cfg = decode_core_config("Core: A; X-Axis: X; Park: 10; Feed: 500")
        assert cfg == CoreConfig(core_id="A", axis_letter="X", park=10.0, feed=500.0)

    def test_park_and_feed_default_to_zero(self) -> None:
        cfg = decode_core_config("Core: B; X-Axis: U")
        assert cfg is not None
        assert cfg.park == 0.0
        assert cfg.feed == 0.0

    def test_axis_stored_uppercase(self) -> None:
        cfg = decode_core_config("Core: B; X-Axis: u")
        assert cfg is not None
        assert cfg.axis_letter == "U"

    def test_unknown_fields_ignored(self) -> None:
        cfg = decode_core_config("Core: A; X-Axis: X; Color: red; Park: 1")
        assert cfg is not None
        assert cfg.park == 1.0

    def test_missing_core_is_discarded(self) -> None:
        assert decode_core_config("X-Axis: X; Park: 10") is None

    def test_empty_core_is_discarded(self) -> None:
        assert decode_core_config('Core: ""; X-Axis: X') is None

    def test_nested_object_form(self) -> None:
        cfg = decode_core_config("Core : {Core: B; X-Axis: Y; Park: 300; Feed: 0}")
        assert cfg == CoreConfig(core_id="B", axis_letter="Y", park=300.0)

    def test_malformed_object(self) -> None:
        with pytest.raises(CoreConfigError, match="malformed"):
            decode_core_config("Core: A; X-Axis: X; Park: ")

    def test_park_must_be_numeric(self) -> None:
        with pytest.raises(CoreConfigError, match="Park must be a number"):
            decode_core_config("Core: A; X-Axis: X; Park: far")

    def test_missing_axis_rejected(self) -> None:
        with pytest.raises(CoreConfigError, match="X-Axis"):
            decode_core_config("Core: A; Park: 10")

    def test_multi_letter_axis_rejected(self) -> None:
        with pytest.raises(CoreConfigError, match="single letter"):
            decode_core_config("Core: A; X-Axis: XY")

    def test_field_names_are_case_sensitive(self) -> None:
        assert decode_core_config("core: A; X-Axis: X") is None


class TestParseCoreComment:
    def test_plain_comment(self) -> None:
        cfg = parse_core_comment("(Core: A; X-Axis: X; Park: 10; Feed: 500)")
        assert cfg is not None
        assert cfg.core_id == "A"

    def test_surrounding_whitespace(self) -> None:
        cfg = parse_core_comment("  (Core: B; X-Axis: Y)  ")
        assert cfg is not None
        assert cfg.axis_letter == "Y"

    def test_unclosed_comment_is_ignored(self) -> None:
        assert parse_core_comment("(Core: A; X-Axis: X") is None


# ---------------------------------------------------------------------------
# CoreConfig
# ---------------------------------------------------------------------------


class TestCoreConfig:
    def test_frozen(self) -> None:
        cfg = CoreConfig(core_id="A", axis_letter="X")
        with pytest.raises(AttributeError):
            cfg.park = 5.0  # type: ignore[misc]

    def test_canonical(self) -> None:
        assert CoreConfig(core_id="A", axis_letter="x").is_canonical
        assert not CoreConfig(core_id="B", axis_letter="Y").is_canonical

    def test_negative_feed_parks_rapid(self) -> None:
        cfg = CoreConfig(core_id="A", axis_letter="X", park=10.0, feed=-1.0)
        assert cfg.park_command() == "G00 X10.000"

    def test_rapid_park_command(self) -> None:
        cfg = CoreConfig(core_id="A", axis_letter="X", park=10.0)
        assert cfg.park_command() == "G00 X10.000"

    def test_feed_park_command(self) -> None:
        cfg = CoreConfig(core_id="A", axis_letter="X", park=10.0, feed=500.0)
        assert cfg.park_command() == "G1 X10.000 F500.000"

    def test_park_command_custom_format(self) -> None:
        cfg = CoreConfig(core_id="B", axis_letter="U", park=-2.5, feed=120.0)
        assert cfg.park_command("G0", "G01", 1) == "G01 U-2.5 F120.0"
