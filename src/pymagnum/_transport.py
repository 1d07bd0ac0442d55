"""Quartz TCP transport and the structural interface the router depends on."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from typing import Protocol

from pymagnum import _codec
from pymagnum._constants import DEFAULT_CONNECT_TIMEOUT
from pymagnum.exceptions import MagnumNotConnectedError, MagnumTransportError
from pymagnum.models.messages import QuartzResponse

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the router core.

    ``receive`` yields decoded inbound messages in arrival order and returns
    ``None`` once the connection has ended. Every other method raises
    :class:`MagnumTransportError` on failure.
    """

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def receive(self) -> QuartzResponse | None: ...

    async def request_source_name(self, source: int) -> None: ...

    async def request_destination_name(self, destination: int) -> None: ...

    async def request_destination_lock(self, destination: int) -> None: ...

    async def request_route(self, level_code: str, destination: int) -> None: ...

    async def set_crosspoint(self, level_codes: Sequence[str], destination: int, source: int) -> None: ...

    async def lock_destination(self, destination: int) -> None: ...

    async def unlock_destination(self, destination: int) -> None: ...


class QuartzConnection(asyncio.Protocol):
    """Persistent Quartz connection over TCP.

    Inbound bytes are split into lines, decoded, and queued for
    :meth:`receive`. Losing the connection queues an end-of-stream marker;
    there is no automatic reconnect.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._transport: asyncio.Transport | None = None
        self._buffer = _codec.LineBuffer()
        self._messages: asyncio.Queue[QuartzResponse | None] = asyncio.Queue()
        self._ended = False
        self._can_write = asyncio.Event()
        self._can_write.set()
        self._closed: asyncio.Future[None] | None = None
        self.peer_name: object = None

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        if self.is_connected:
            return
        loop = asyncio.get_running_loop()
        self._buffer = _codec.LineBuffer()
        # Drop the end-of-stream marker left by a previous connection.
        while not self._messages.empty():
            self._messages.get_nowait()
        self._ended = False
        self._closed = loop.create_future()
        _logger.debug("Connecting to %s:%s", self._host, self._port)
        try:
            await asyncio.wait_for(
                loop.create_connection(lambda: self, host=self._host, port=self._port),
                self._connect_timeout,
            )
        except TimeoutError as exc:
            raise MagnumTransportError(
                f"Timed out connecting to {self._host}:{self._port}",
                command="connect",
            ) from exc
        except OSError as exc:
            raise MagnumTransportError(
                f"Connection to {self._host}:{self._port} failed: {exc}",
                command="connect",
            ) from exc

    async def disconnect(self) -> None:
        transport = self._transport
        if transport is None:
            return
        transport.close()
        closed = self._closed
        if closed is not None:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(asyncio.shield(closed), self._connect_timeout)

    # ------------------------------------------------------------------
    # asyncio.Protocol callbacks
    # ------------------------------------------------------------------

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]
        self.peer_name = transport.get_extra_info("peername")
        self._can_write.set()
        _logger.info("Connection made: %s", self.peer_name)

    def data_received(self, data: bytes) -> None:
        _logger.debug("data_received: %r", data)
        for line in self._buffer.feed(data):
            self._messages.put_nowait(_codec.decode_line(line))

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            _logger.warning("Connection to %s:%s lost: %s", self._host, self._port, exc)
        else:
            _logger.info("Connection to %s:%s closed", self._host, self._port)
        self._transport = None
        self._ended = True
        # Wake any sender blocked on backpressure so it fails instead of hanging.
        self._can_write.set()
        self._messages.put_nowait(None)
        if self._closed is not None and not self._closed.done():
            self._closed.set_result(None)

    def pause_writing(self) -> None:
        self._can_write.clear()

    def resume_writing(self) -> None:
        self._can_write.set()

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def receive(self) -> QuartzResponse | None:
        if self._ended and self._messages.empty():
            return None
        return await self._messages.get()

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def _send(self, line: str) -> None:
        await self._can_write.wait()
        transport = self._transport
        if transport is None or transport.is_closing():
            raise MagnumNotConnectedError(f"Not connected, cannot send {line!r}", command=line)
        _logger.debug("SEND: %s", line)
        try:
            transport.write(_codec.frame(line))
        except (OSError, RuntimeError) as exc:
            raise MagnumTransportError(f"Send of {line!r} failed: {exc}", command=line) from exc

    async def request_source_name(self, source: int) -> None:
        await self._send(_codec.encode_read_source_name(source))

    async def request_destination_name(self, destination: int) -> None:
        await self._send(_codec.encode_read_destination_name(destination))

    async def request_destination_lock(self, destination: int) -> None:
        await self._send(_codec.encode_interrogate_lock(destination))

    async def request_route(self, level_code: str, destination: int) -> None:
        await self._send(_codec.encode_interrogate_route(level_code, destination))

    async def set_crosspoint(self, level_codes: Sequence[str], destination: int, source: int) -> None:
        await self._send(_codec.encode_set_crosspoint(level_codes, destination, source))

    async def lock_destination(self, destination: int) -> None:
        await self._send(_codec.encode_lock_destination(destination))

    async def unlock_destination(self, destination: int) -> None:
        await self._send(_codec.encode_unlock_destination(destination))
