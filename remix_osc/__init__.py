"""
remix-osc: async OSC client for Ableton Live (via AbletonOSC).

Provides:
- A single-socket UDP client with request/response queries
- Lazy handles that bind on first use (one ephemeral port per handle)
- Tolerant decoding of AbletonOSC replies into str/int/float/bool

Usage:
    from remix_osc import OscHandle, setup_logging

    setup_logging()

    osc = OscHandle()
    if await osc.test_connection():
        tempo = await osc.query("/live/song/get/tempo", as_type=float)
"""

from .client import OscClient, OscHandle

from .config import (
    ABLETON_OSC_HOST,
    ABLETON_OSC_PORT,
    DEFAULT_TIMEOUT,
    OscSettings,
)

from .errors import (
    OscClientError,
    EncodeError,
    NetworkError,
    ResponseTimeout,
    InvalidResponse,
)

from .logging_config import get_logger, setup_logging

from .message import ArgsBuilder, Packet, build_message, decode_packet

from .response import (
    decode,
    packet_args,
    to_args,
    to_string,
    to_int,
    to_float,
    to_bool,
    # Positional helpers
    get_int,
    get_float,
    get_string,
    get_bool,
    flatten_args,
    strings_from_packets,
    group_records,
)

__version__ = "0.3.0"

__all__ = [
    # Client
    "OscClient",
    "OscHandle",
    # Configuration
    "ABLETON_OSC_HOST",
    "ABLETON_OSC_PORT",
    "DEFAULT_TIMEOUT",
    "OscSettings",
    # Errors
    "OscClientError",
    "EncodeError",
    "NetworkError",
    "ResponseTimeout",
    "InvalidResponse",
    # Logging
    "setup_logging",
    "get_logger",
    # Messages
    "ArgsBuilder",
    "Packet",
    "build_message",
    "decode_packet",
    # Decoding
    "decode",
    "packet_args",
    "to_args",
    "to_string",
    "to_int",
    "to_float",
    "to_bool",
    "get_int",
    "get_float",
    "get_string",
    "get_bool",
    "flatten_args",
    "strings_from_packets",
    "group_records",
]
