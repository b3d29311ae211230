"""
Async OSC client for communicating with Ableton Live via AbletonOSC.

One UDP socket is used for both directions. AbletonOSC replies to the
sender's address, so every client bound to an OS-assigned port receives its own
responses and any number of clients (or processes) can talk to the same
listener without fighting over a fixed response port.

Usage:
    handle = OscHandle()                       # no socket yet
    tempo = await handle.query("/live/song/get/tempo", as_type=float)
    await handle.send("/live/song/start_playing")
    names = await handle.query_all("/live/song/get/track_names")
"""

import asyncio
import enum
import logging
from typing import Any, List, Optional, Sequence, Tuple, Type, Union

from .config import TEST_CONNECTION_ADDRESS, OscSettings, resolve_settings
from .errors import InvalidResponse, NetworkError, ResponseTimeout
from .message import Packet, build_message, decode_packet
from .response import decode

logger = logging.getLogger(__name__)

# A queued item is either a received datagram or a transport-reported error
_Received = Union[Tuple[bytes, Tuple[str, int]], Exception]


class _DatagramQueue(asyncio.DatagramProtocol):
    """Pushes every received datagram (or transport error) onto a queue."""

    def __init__(self):
        self.queue: "asyncio.Queue[_Received]" = asyncio.Queue()
        self.closed = False

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        self.queue.put_nowait((data, addr))

    def error_received(self, exc: Exception) -> None:
        logger.warning(f"OSC socket error: {exc}")
        self.queue.put_nowait(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self.closed = True


class OscClient:
    """
    Single-socket OSC client.

    At most one query may be outstanding per client: replies carry no request
    id, so a second concurrent query would race on the same receive stream.
    Use separate clients for concurrent queries.
    """

    def __init__(self, transport: asyncio.DatagramTransport,
                 protocol: _DatagramQueue, settings: OscSettings):
        self._transport = transport
        self._protocol = protocol
        self.settings = settings
        sockname = transport.get_extra_info("sockname")
        self._local_port = sockname[1] if sockname else 0

    @classmethod
    async def create(cls, settings: Optional[OscSettings] = None, **overrides) -> "OscClient":
        """Bind a new client to an OS-assigned local port.

        Raises:
            NetworkError: if the socket cannot be created or bound.
        """
        settings = resolve_settings(settings, **overrides)
        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await loop.create_datagram_endpoint(
                _DatagramQueue, local_addr=(settings.local_host, 0)
            )
        except OSError as exc:
            raise NetworkError(f"Could not bind UDP socket on {settings.local_host}: {exc}") from exc

        client = cls(transport, protocol, settings)
        logger.debug(
            f"OSC client initialized on port {client.local_port} -> "
            f"{settings.remote_host}:{settings.remote_port}"
        )
        return client

    # ------------------------------------------------------------------ #
    # Properties                                                          #
    # ------------------------------------------------------------------ #

    @property
    def local_port(self) -> int:
        """Local port this client is bound to."""
        return self._local_port

    @property
    def remote_addr(self) -> Tuple[str, int]:
        return self.settings.remote_addr

    @property
    def response_timeout(self) -> float:
        return self.settings.response_timeout

    @property
    def closed(self) -> bool:
        return self._protocol.closed or self._transport.is_closing()

    # ------------------------------------------------------------------ #
    # Public API                                                          #
    # ------------------------------------------------------------------ #

    async def send(self, address: str, args: Optional[Sequence[Any]] = None) -> None:
        """Send an OSC message without waiting for a response."""
        message = build_message(address, args)
        if self.closed:
            raise NetworkError(f"Cannot send {address}: client is closed")

        logger.debug(f"Sending OSC message {address} ({len(message.params)} args)")
        try:
            self._transport.sendto(message.dgram, self.remote_addr)
        except OSError as exc:
            raise NetworkError(f"Failed to send {address}: {exc}") from exc

    async def query(self, address: str, args: Optional[Sequence[Any]] = None,
                    as_type: Type = list) -> Any:
        """Send an OSC message and wait for a single typed response.

        Args:
            address: OSC address, e.g. "/live/track/get/volume"
            args: Outbound arguments (int, float, str, bool)
            as_type: One of list (raw args), str, int, float, bool

        Raises:
            ResponseTimeout: no reply within the response timeout
            NetworkError: receive failure
            InvalidResponse: reply could not be decoded as ``as_type``
        """
        await self._clear_recv_buffer()
        await self.send(address, args)

        data = await self._recv(address)
        packet = decode_packet(data)
        logger.debug(f"Received OSC response for {address}: {packet}")
        return decode(packet, as_type)

    async def query_all(self, address: str, args: Optional[Sequence[Any]] = None) -> List[Packet]:
        """Send an OSC message and collect responses until the peer goes quiet.

        The response timeout is an idle timeout: it restarts after every
        datagram, so a steadily answering peer can keep this call running.
        """
        await self._clear_recv_buffer()
        await self.send(address, args)

        responses: List[Packet] = []
        while True:
            try:
                data = await self._recv(address)
            except ResponseTimeout:
                break
            try:
                responses.append(decode_packet(data))
            except InvalidResponse as exc:
                logger.warning(f"Skipping undecodable datagram for {address}: {exc}")

        logger.debug(f"Collected {len(responses)} OSC responses for {address}")
        return responses

    async def test_connection(self) -> bool:
        """Return True if Ableton answers, False if it stays silent."""
        try:
            await self.query(TEST_CONNECTION_ADDRESS, [])
        except ResponseTimeout:
            logger.debug("No response from Ableton Live")
            return False
        return True

    def close(self) -> None:
        if not self._transport.is_closing():
            self._transport.close()
            logger.debug(f"OSC client on port {self.local_port} closed")

    async def __aenter__(self) -> "OscClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Receiving                                                           #
    # ------------------------------------------------------------------ #

    async def _recv(self, address: str) -> bytes:
        if self.closed and self._protocol.queue.empty():
            raise NetworkError(f"Cannot receive response to {address}: client is closed")
        try:
            item = await asyncio.wait_for(self._protocol.queue.get(), self.response_timeout)
        except asyncio.TimeoutError:
            raise ResponseTimeout(address, self.response_timeout) from None

        if isinstance(item, Exception):
            raise NetworkError(f"Receive failed for {address}: {item}") from item
        data, _addr = item
        return data

    async def _clear_recv_buffer(self) -> None:
        """Drop anything still queued from earlier, abandoned queries.

        Each attempt waits ``flush_timeout`` so datagrams still sitting in the
        kernel buffer get delivered to the queue and drained as well.
        """
        queue = self._protocol.queue
        dropped = 0
        while True:
            try:
                item = await asyncio.wait_for(queue.get(), self.settings.flush_timeout)
            except asyncio.TimeoutError:
                break
            dropped += 1
            if isinstance(item, Exception):
                logger.debug(f"Discarding stale socket error: {item}")
        if dropped:
            logger.debug(f"Flushed {dropped} stale datagram(s) on port {self.local_port}")


class _HandleState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class OscHandle:
    """
    Lazy wrapper around ``OscClient`` that defers socket binding until first use.

    Lets the owning program start (and finish unrelated handshakes) even when
    Ableton is not running. Each handle creates its own client on an
    OS-assigned port, so handles in the same or different processes never
    contend with each other.
    """

    def __init__(self, settings: Optional[OscSettings] = None, **overrides):
        # Validated now so bad overrides fail here rather than on first use
        self.settings = resolve_settings(settings, **overrides)
        self._state = _HandleState.UNINITIALIZED
        self._client: Optional[OscClient] = None
        self._ready: Optional[asyncio.Future] = None

    @property
    def initialized(self) -> bool:
        return self._state is _HandleState.READY

    async def client(self) -> OscClient:
        """Get or lazily create the underlying ``OscClient``.

        Concurrent first callers share one creation; exactly one client is
        bound. If creation fails every waiter sees the error and the next call
        tries again. If the creating task is cancelled, one of the waiters
        takes over the creation.
        """
        while self._state is _HandleState.INITIALIZING:
            client = await asyncio.shield(self._ready)
            if client is not None:
                return client
        if self._state is _HandleState.READY:
            return self._client

        self._state = _HandleState.INITIALIZING
        ready = asyncio.get_running_loop().create_future()
        # Mark the outcome retrieved even if no other caller is waiting
        ready.add_done_callback(lambda f: f.cancelled() or f.exception())
        self._ready = ready

        try:
            client = await OscClient.create(self.settings)
        except asyncio.CancelledError:
            self._state = _HandleState.UNINITIALIZED
            # None wakes the waiters without cancelling them
            ready.set_result(None)
            raise
        except Exception as exc:
            self._state = _HandleState.UNINITIALIZED
            ready.set_exception(exc)
            raise

        self._client = client
        self._state = _HandleState.READY
        ready.set_result(client)
        logger.debug(f"OSC client bound to port {client.local_port}")
        return client

    async def send(self, address: str, args: Optional[Sequence[Any]] = None) -> None:
        client = await self.client()
        await client.send(address, args)

    async def query(self, address: str, args: Optional[Sequence[Any]] = None,
                    as_type: Type = list) -> Any:
        client = await self.client()
        return await client.query(address, args, as_type)

    async def query_all(self, address: str, args: Optional[Sequence[Any]] = None) -> List[Packet]:
        client = await self.client()
        return await client.query_all(address, args)

    async def test_connection(self) -> bool:
        client = await self.client()
        return await client.test_connection()

    def close(self) -> None:
        """Close the underlying client, if one was created."""
        if self._client is not None:
            self._client.close()


__all__ = ["OscClient", "OscHandle"]
