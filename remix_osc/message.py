"""
OSC message building and packet decoding.

Thin seam over python-osc: outbound arguments are restricted to the value
types AbletonOSC understands (int32, float32, string, bool sent as int), and
inbound datagrams are parsed into python-osc ``OscMessage``/``OscBundle``
objects.

Example:
    args = ArgsBuilder().add_int(0).add_float(0.85).build()
    message = build_message("/live/track/set/volume", args)
"""

from typing import Any, List, Optional, Sequence, Union

from pythonosc.osc_bundle import OscBundle
from pythonosc.osc_bundle import ParseError as BundleParseError
from pythonosc.osc_message import OscMessage
from pythonosc.osc_message import ParseError as MessageParseError
from pythonosc.osc_message_builder import BuildError, OscMessageBuilder
from pythonosc.parsing import osc_types

from .errors import EncodeError, InvalidResponse

Packet = Union[OscMessage, OscBundle]

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class ArgsBuilder:
    """Fluent builder for a typed OSC argument list."""

    def __init__(self):
        self._args: List[Any] = []

    def add_int(self, value: int) -> "ArgsBuilder":
        self._args.append(int(value))
        return self

    def add_float(self, value: float) -> "ArgsBuilder":
        self._args.append(float(value))
        return self

    def add_string(self, value: str) -> "ArgsBuilder":
        self._args.append(str(value))
        return self

    def add_bool(self, value: bool) -> "ArgsBuilder":
        """Add a boolean argument (sent as int 0/1)."""
        self._args.append(1 if value else 0)
        return self

    def build(self) -> List[Any]:
        return list(self._args)

    def __len__(self) -> int:
        return len(self._args)


def _arg_type(value: Any) -> str:
    """Pick the OSC type tag for one outbound argument."""
    if isinstance(value, bool):
        return OscMessageBuilder.ARG_TYPE_INT
    if isinstance(value, int):
        if not INT32_MIN <= value <= INT32_MAX:
            raise EncodeError(f"integer {value} does not fit in 32 bits")
        return OscMessageBuilder.ARG_TYPE_INT
    if isinstance(value, float):
        return OscMessageBuilder.ARG_TYPE_FLOAT
    if isinstance(value, str):
        return OscMessageBuilder.ARG_TYPE_STRING
    raise EncodeError(f"unsupported argument type {type(value).__name__}: {value!r}")


def build_message(address: str, args: Optional[Sequence[Any]] = None) -> OscMessage:
    """Encode an address and argument list into an ``OscMessage``.

    Raises:
        EncodeError: if the address or any argument cannot be serialized.
    """
    if not isinstance(address, str) or not address:
        raise EncodeError(f"invalid OSC address: {address!r}")

    builder = OscMessageBuilder(address=address)
    for value in args or []:
        arg_type = _arg_type(value)
        if isinstance(value, bool):
            value = 1 if value else 0
        builder.add_arg(value, arg_type)

    try:
        return builder.build()
    except (BuildError, OverflowError, ValueError) as exc:
        raise EncodeError(str(exc)) from exc


def decode_packet(dgram: bytes) -> Packet:
    """Parse one UDP datagram into an OSC message or bundle.

    Raises:
        InvalidResponse: if the datagram is not a well-formed OSC packet.
    """
    try:
        if OscBundle.dgram_is_bundle(dgram):
            return OscBundle(dgram)
        if OscMessage.dgram_is_message(dgram):
            return OscMessage(dgram)
    except (MessageParseError, BundleParseError, osc_types.ParseError,
            IndexError, UnicodeDecodeError) as exc:
        raise InvalidResponse(f"Malformed OSC packet ({len(dgram)} bytes): {exc}") from exc
    raise InvalidResponse(f"Datagram is not an OSC packet ({len(dgram)} bytes)")
