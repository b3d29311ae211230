"""
OSC response decoding.

AbletonOSC replies are not uniform: some addresses answer with just the value,
others echo the query's indices first (e.g. ``/live/track/get/volume`` replies
``[track_index, volume]``). The decoders below therefore prefer the *last*
value of the requested type and only fall back to the first argument.

This "prefer the end" rule is a convention of AbletonOSC, not of OSC itself.
A different peer needs its own rules here.
"""

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from pythonosc.osc_bundle import OscBundle
from pythonosc.osc_message import OscMessage

from .errors import InvalidResponse
from .message import INT32_MAX, INT32_MIN, Packet


def _is_int(value: Any) -> bool:
    # bool is an int subclass in Python but a separate OSC type tag
    return isinstance(value, int) and not isinstance(value, bool)


def _is_float(value: Any) -> bool:
    return isinstance(value, float)


def _truncate(value: float) -> int:
    """Truncate toward zero, clamped to the int32 range. NaN becomes 0."""
    if math.isnan(value):
        return 0
    if value >= INT32_MAX:
        return INT32_MAX
    if value <= INT32_MIN:
        return INT32_MIN
    return int(value)


def _describe(value: Any) -> str:
    return f"{type(value).__name__}({value!r})"


def packet_args(packet: Packet) -> List[Any]:
    """Raw argument list of a packet.

    For a bundle, the arguments of the first directly nested message are used.
    """
    if isinstance(packet, OscMessage):
        return list(packet.params)
    if isinstance(packet, OscBundle):
        for content in packet:
            if isinstance(content, OscMessage):
                return list(content.params)
        raise InvalidResponse("Empty bundle")
    raise InvalidResponse(f"Unsupported packet type {type(packet).__name__}")


def to_args(packet: Packet) -> List[Any]:
    return packet_args(packet)


def to_string(packet: Packet) -> str:
    """Last string argument. Handles ``[0, "name"]`` style replies."""
    args = packet_args(packet)
    for arg in reversed(args):
        if isinstance(arg, str):
            return arg
    if args:
        raise InvalidResponse(f"Expected string, got {_describe(args[0])}")
    raise InvalidResponse("No arguments in response")


def to_int(packet: Packet) -> int:
    """Single integer value. Handles ``[0, 1]`` style replies by taking the last int.

    Floats truncate toward zero and saturate at the int32 bounds.
    """
    args = packet_args(packet)
    if not args:
        raise InvalidResponse("No arguments in response")

    if len(args) == 1:
        value = args[0]
        if _is_int(value):
            return value
        if _is_float(value):
            return _truncate(value)
        raise InvalidResponse(f"Expected int, got {_describe(value)}")

    for arg in reversed(args):
        if _is_int(arg):
            return arg

    first = args[0]
    if _is_float(first):
        return _truncate(first)
    raise InvalidResponse(f"Expected int, got {_describe(first)}")


def to_float(packet: Packet) -> float:
    """Single float value. Handles ``[0, 0.5]`` style replies by taking the last float."""
    args = packet_args(packet)
    if not args:
        raise InvalidResponse("No arguments in response")

    for arg in reversed(args):
        if _is_float(arg):
            return arg
        if _is_int(arg) and len(args) == 1:
            return float(arg)

    first = args[0]
    if _is_float(first) or _is_int(first):
        return float(first)
    raise InvalidResponse(f"Expected float, got {_describe(first)}")


def to_bool(packet: Packet) -> bool:
    """Boolean from the first argument (native bool, or int non-zero)."""
    args = packet_args(packet)
    if not args:
        raise InvalidResponse("No arguments in response")
    first = args[0]
    if isinstance(first, bool):
        return first
    if _is_int(first):
        return first != 0
    raise InvalidResponse(f"Expected bool, got {_describe(first)}")


_DECODERS: Dict[Type, Callable[[Packet], Any]] = {
    list: to_args,
    str: to_string,
    int: to_int,
    float: to_float,
    bool: to_bool,
}


def decode(packet: Packet, as_type: Type = list) -> Any:
    """Convert a packet into ``as_type`` (one of list, str, int, float, bool)."""
    decoder = _DECODERS.get(as_type)
    if decoder is None:
        supported = ", ".join(t.__name__ for t in _DECODERS)
        raise TypeError(f"Cannot decode OSC response as {as_type!r}; supported: {supported}")
    return decoder(packet)


# =============================================================================
# Positional helpers for custom extraction
# =============================================================================

def get_float(args: List[Any], index: int) -> Optional[float]:
    value = args[index] if 0 <= index < len(args) else None
    if _is_float(value) or _is_int(value):
        return float(value)
    return None


def get_int(args: List[Any], index: int) -> Optional[int]:
    value = args[index] if 0 <= index < len(args) else None
    if _is_int(value):
        return value
    if _is_float(value) and math.isfinite(value):
        return int(value)
    return None


def get_string(args: List[Any], index: int) -> Optional[str]:
    value = args[index] if 0 <= index < len(args) else None
    return value if isinstance(value, str) else None


def get_bool(args: List[Any], index: int) -> Optional[bool]:
    value = args[index] if 0 <= index < len(args) else None
    if isinstance(value, bool):
        return value
    number = get_int(args, index)
    return None if number is None else number != 0


def flatten_args(packets: Iterable[Packet]) -> List[Any]:
    """Concatenate the arguments of every packet from a ``query_all`` result.

    Empty bundles are skipped.
    """
    flat: List[Any] = []
    for packet in packets:
        try:
            flat.extend(packet_args(packet))
        except InvalidResponse:
            continue
    return flat


def strings_from_packets(packets: Iterable[Packet]) -> List[str]:
    """Every string argument across a ``query_all`` result (e.g. track names)."""
    return [arg for arg in flatten_args(packets) if isinstance(arg, str)]


def group_records(args: List[Any], size: int) -> List[List[Any]]:
    """Split a flat argument list into fixed-size records.

    Used for replies such as ``(category, name)`` pairs from a browser search or
    ``(pitch, start, duration, velocity, mute)`` note quintuples. A trailing
    partial record is dropped.
    """
    if size < 1:
        raise ValueError("Record size must be at least 1")
    usable = len(args) - len(args) % size
    return [list(args[i:i + size]) for i in range(0, usable, size)]
