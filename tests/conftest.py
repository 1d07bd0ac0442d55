from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from pymagnum.exceptions import MagnumTransportError
from pymagnum.models.messages import QuartzResponse


@dataclass
class FakeTransport:
    """In-memory stand-in for a Quartz connection.

    Outbound calls are recorded in ``sent`` as ``(method, args)``. Inbound
    messages are pushed with :meth:`push`; :meth:`end_stream` simulates the
    connection dropping.
    """

    sent: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    inbound: asyncio.Queue[QuartzResponse | None] = field(default_factory=asyncio.Queue)
    connected: bool = False
    connect_calls: int = 0
    disconnect_calls: int = 0
    fail_connect: bool = False
    # Fail the request that would become sent[fail_at].
    fail_at: int | None = None
    # When set, sends wait for it before recording.
    gate: asyncio.Event | None = None

    def push(self, *messages: QuartzResponse) -> None:
        for message in messages:
            self.inbound.put_nowait(message)

    def end_stream(self) -> None:
        self.inbound.put_nowait(None)

    async def _record(self, method: str, *args: Any) -> None:
        # Yield like a real socket write would.
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()
        if not self.connected:
            raise MagnumTransportError(f"not connected: {method}", command=method)
        if self.fail_at is not None and len(self.sent) >= self.fail_at:
            raise MagnumTransportError(f"send failed: {method}", command=method)
        self.sent.append((method, args))

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_connect:
            raise MagnumTransportError("connection refused", command="connect")
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False

    async def receive(self) -> QuartzResponse | None:
        return await self.inbound.get()

    async def request_source_name(self, source: int) -> None:
        await self._record("request_source_name", source)

    async def request_destination_name(self, destination: int) -> None:
        await self._record("request_destination_name", destination)

    async def request_destination_lock(self, destination: int) -> None:
        await self._record("request_destination_lock", destination)

    async def request_route(self, level_code: str, destination: int) -> None:
        await self._record("request_route", level_code, destination)

    async def set_crosspoint(self, level_codes: Sequence[str], destination: int, source: int) -> None:
        await self._record("set_crosspoint", tuple(level_codes), destination, source)

    async def lock_destination(self, destination: int) -> None:
        await self._record("lock_destination", destination)

    async def unlock_destination(self, destination: int) -> None:
        await self._record("unlock_destination", destination)

    def calls(self, method: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.sent if name == method]


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


async def wait_until(predicate: Any, timeout: float = 1.0) -> None:
    """Yield to the loop until *predicate()* is true."""

    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)
