"""
Error types for the remix OSC client.

Every failure the client can produce derives from ``OscClientError`` so callers
can catch one base class, or a specific kind when they want to treat it
differently (e.g. ``ResponseTimeout`` meaning "Ableton is not running").
"""


class OscClientError(Exception):
    """Base class for all OSC client errors."""


class EncodeError(OscClientError, ValueError):
    """Argument set could not be serialized to the OSC wire format."""

    def __init__(self, message: str):
        super().__init__(f"OSC encoding error: {message}")


class NetworkError(OscClientError, ConnectionError):
    """OS-level socket failure on bind, send or receive."""

    def __init__(self, message: str):
        super().__init__(f"Network error: {message}")


class ResponseTimeout(OscClientError, TimeoutError):
    """No reply datagram arrived within the response window."""

    def __init__(self, address: str = "", timeout: float = 0.0):
        self.address = address
        self.timeout = timeout
        detail = f" to {address}" if address else ""
        super().__init__(
            f"Timeout waiting for response{detail} from Ableton Live ({timeout * 1000:.0f} ms)"
        )


class InvalidResponse(OscClientError, ValueError):
    """A reply was received but could not be decoded into the requested type."""

    def __init__(self, message: str):
        self.detail = message
        super().__init__(f"Invalid response: {message}")
