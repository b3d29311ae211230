"""
Tests for OSC response decoding.

Verifies that:
- Index-prefixed replies decode to the trailing value (last int/float/string wins)
- Single-argument replies coerce between int and float
- Booleans come from the first argument only
- Bundles decode from their first nested message
- Unusable replies raise InvalidResponse
"""

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from osc_test_utils import osc_bundle, osc_message
from remix_osc.errors import InvalidResponse
from remix_osc.response import (
    decode,
    flatten_args,
    get_bool,
    get_float,
    get_int,
    get_string,
    group_records,
    packet_args,
    strings_from_packets,
    to_args,
    to_bool,
    to_float,
    to_int,
    to_string,
)


def msg(*args):
    return osc_message("/live/test", *args)


# ============================================================================
# Raw argument extraction
# ============================================================================

class TestPacketArgs:
    def test_message_args(self):
        assert packet_args(msg(1, 2.5, "x")) == [1, 2.5, "x"]

    def test_message_without_args(self):
        assert packet_args(msg()) == []

    def test_bundle_uses_first_message(self):
        bundle = osc_bundle(msg(1, "first"), msg(2, "second"))
        assert packet_args(bundle) == [1, "first"]

    def test_bundle_skips_nested_bundles(self):
        inner = osc_bundle(msg(9))
        bundle = osc_bundle(inner, msg(3))
        assert packet_args(bundle) == [3]

    def test_empty_bundle_rejected(self):
        with pytest.raises(InvalidResponse, match="Empty bundle"):
            packet_args(osc_bundle())

    def test_bundle_of_bundles_rejected(self):
        with pytest.raises(InvalidResponse, match="Empty bundle"):
            packet_args(osc_bundle(osc_bundle(msg(1))))

    def test_to_args_is_identity(self):
        assert to_args(msg(0, None, "a")) == [0, None, "a"]


# ============================================================================
# String
# ============================================================================

class TestToString:
    def test_single_string(self):
        assert to_string(msg("Bass")) == "Bass"

    def test_index_prefixed(self):
        assert to_string(msg(0, "Bass")) == "Bass"

    def test_last_string_wins(self):
        assert to_string(msg("Audio", 2, "Drums")) == "Drums"

    def test_trailing_number_ignored(self):
        assert to_string(msg(1, "Lead", 0.5)) == "Lead"

    def test_no_string(self):
        with pytest.raises(InvalidResponse, match="Expected string"):
            to_string(msg(1, 2))

    def test_empty(self):
        with pytest.raises(InvalidResponse, match="No arguments"):
            to_string(msg())


# ============================================================================
# Integer
# ============================================================================

class TestToInt:
    def test_single_int(self):
        assert to_int(msg(42)) == 42

    def test_single_float_truncates_toward_zero(self):
        assert to_int(msg(3.9)) == 3
        assert to_int(msg(-3.9)) == -3

    def test_last_int_wins(self):
        assert to_int(msg(0, 7)) == 7

    def test_last_int_skips_trailing_float(self):
        assert to_int(msg(2, 5, 0.25)) == 5

    def test_fallback_to_first_float(self):
        assert to_int(msg(2.5, "name")) == 2

    def test_single_string_rejected(self):
        with pytest.raises(InvalidResponse, match="Expected int"):
            to_int(msg("seven"))

    def test_no_numbers_rejected(self):
        with pytest.raises(InvalidResponse):
            to_int(msg("a", "b"))

    def test_bool_is_not_an_int(self):
        with pytest.raises(InvalidResponse, match="bool"):
            to_int(msg(True))

    @pytest.mark.parametrize("value, expected", [
        (math.inf, 2 ** 31 - 1),
        (-math.inf, -(2 ** 31)),
        (math.nan, 0),
        (1e20, 2 ** 31 - 1),
        (-1e20, -(2 ** 31)),
    ])
    def test_float_saturates_at_int32_bounds(self, value, expected):
        assert to_int(msg(value)) == expected

    def test_fallback_float_saturates(self):
        assert to_int(msg(math.inf, "name")) == 2 ** 31 - 1

    def test_nil_prefix_skipped(self):
        assert to_int(msg(None, 3)) == 3

    def test_empty(self):
        with pytest.raises(InvalidResponse, match="No arguments"):
            to_int(msg())


# ============================================================================
# Float
# ============================================================================

class TestToFloat:
    def test_single_float(self):
        assert to_float(msg(0.75)) == pytest.approx(0.75)

    def test_index_prefixed(self):
        assert to_float(msg(0, 0.5)) == pytest.approx(0.5)

    def test_single_int_coerces(self):
        value = to_float(msg(5))
        assert value == 5.0
        assert isinstance(value, float)

    def test_last_float_wins(self):
        assert to_float(msg(0.1, 3, 0.9, 4)) == pytest.approx(0.9)

    def test_multiple_ints_fall_back_to_first(self):
        assert to_float(msg(2, 7)) == 2.0

    def test_string_rejected(self):
        with pytest.raises(InvalidResponse, match="Expected float"):
            to_float(msg("fast"))

    def test_empty(self):
        with pytest.raises(InvalidResponse, match="No arguments"):
            to_float(msg())


# ============================================================================
# Boolean
# ============================================================================

class TestToBool:
    def test_native_true(self):
        assert to_bool(msg(True)) is True

    def test_native_false(self):
        assert to_bool(msg(False)) is False

    def test_int_nonzero(self):
        assert to_bool(msg(1)) is True
        assert to_bool(msg(-2)) is True

    def test_int_zero(self):
        assert to_bool(msg(0)) is False

    def test_only_first_argument_consulted(self):
        # [track_index, muted] -> the index is what gets read
        assert to_bool(msg(0, 1)) is False

    def test_float_rejected(self):
        with pytest.raises(InvalidResponse, match="Expected bool"):
            to_bool(msg(1.0))

    def test_empty(self):
        with pytest.raises(InvalidResponse):
            to_bool(msg())


# ============================================================================
# Dispatch
# ============================================================================

class TestDecode:
    @pytest.mark.parametrize("as_type, expected", [
        (list, [3, 0.5, "Keys"]),
        (int, 3),
        (float, 0.5),
        (str, "Keys"),
    ])
    def test_dispatch(self, as_type, expected):
        result = decode(msg(3, 0.5, "Keys"), as_type)
        assert result == pytest.approx(expected) if as_type is float else result == expected

    def test_default_is_raw_list(self):
        assert decode(msg(1, 2)) == [1, 2]

    def test_bool_dispatch(self):
        assert decode(msg(1), bool) is True

    def test_unsupported_type(self):
        with pytest.raises(TypeError, match="supported"):
            decode(msg(1), dict)


# ============================================================================
# Positional helpers
# ============================================================================

class TestPositionalHelpers:
    ARGS = [0, 0.5, "name", True, None]

    def test_get_int(self):
        assert get_int(self.ARGS, 0) == 0
        assert get_int(self.ARGS, 1) == 0
        assert get_int(self.ARGS, 2) is None
        assert get_int(self.ARGS, 3) is None
        assert get_int(self.ARGS, 99) is None

    def test_get_int_non_finite(self):
        assert get_int([math.inf], 0) is None

    def test_get_float(self):
        assert get_float(self.ARGS, 0) == 0.0
        assert get_float(self.ARGS, 1) == 0.5
        assert get_float(self.ARGS, 4) is None

    def test_get_string(self):
        assert get_string(self.ARGS, 2) == "name"
        assert get_string(self.ARGS, 0) is None
        assert get_string(self.ARGS, -1) is None

    def test_get_bool(self):
        assert get_bool(self.ARGS, 3) is True
        assert get_bool(self.ARGS, 0) is False
        assert get_bool(self.ARGS, 2) is None


class TestPacketListHelpers:
    def test_flatten_args(self):
        packets = [msg(0, "Drums"), osc_bundle(msg(1, "Bass")), osc_bundle(), msg()]
        assert flatten_args(packets) == [0, "Drums", 1, "Bass"]

    def test_strings_from_packets(self):
        packets = [msg("Drums"), msg("Bass", 2), msg(3)]
        assert strings_from_packets(packets) == ["Drums", "Bass"]

    def test_group_pairs(self):
        args = ["instruments", "Operator", "audio_effects", "Reverb"]
        assert group_records(args, 2) == [
            ["instruments", "Operator"],
            ["audio_effects", "Reverb"],
        ]

    def test_group_quintuples_drop_partial(self):
        notes = [60, 0.0, 1.0, 100, 0, 64, 1.0, 0.5, 90, 0, 67]
        assert group_records(notes, 5) == [
            [60, 0.0, 1.0, 100, 0],
            [64, 1.0, 0.5, 90, 0],
        ]

    def test_group_invalid_size(self):
        with pytest.raises(ValueError):
            group_records([1, 2], 0)
