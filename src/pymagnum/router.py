"""High-level async client for an Evertz Magnum router over Quartz."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from pymagnum._constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_SYNC_QUIET_PERIOD
from pymagnum._transport import QuartzConnection, Transport
from pymagnum.commands import CommandIssuer
from pymagnum.config import MagnumConfig
from pymagnum.dispatcher import DispatcherState, UpdateDispatcher
from pymagnum.models.messages import QuartzResponse
from pymagnum.models.snapshot import RouterSnapshot
from pymagnum.state.cache import RoutingStateCache
from pymagnum.sync import BulkSyncOrchestrator

_logger = logging.getLogger(__name__)


class MagnumRouter:
    """Cached view of a Magnum router, kept current by Quartz notifications.

    Usage::

        async with MagnumRouter("10.0.0.5", 23, 64, 32, 17) as router:
            await router.wait_for_sync()
            print(router.get_destination_name(1), router.get_route(0, 1))
            await router.set_route([0, 1], destination=1, source=5)

    Reads (``get_*``, ``snapshot``) are synchronous and safe from any thread.
    Everything that talks to the router is a coroutine on the router's loop.
    Mutators do not touch the cache: their effect appears once the router
    echoes the change back.
    """

    def __init__(
        self,
        address: str,
        port: int,
        source_count: int,
        destination_count: int,
        level_count: int,
        *,
        transport: Transport | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        sync_quiet_period: float = DEFAULT_SYNC_QUIET_PERIOD,
        on_message: Callable[[QuartzResponse], None] | None = None,
    ) -> None:
        self._config = MagnumConfig(
            host=address,
            port=port,
            source_count=source_count,
            destination_count=destination_count,
            level_count=level_count,
            connect_timeout=connect_timeout,
            sync_quiet_period=sync_quiet_period,
        ).validate()
        self._transport: Transport = (
            transport
            if transport is not None
            else QuartzConnection(address, port, connect_timeout=connect_timeout)
        )
        self._cache = RoutingStateCache(source_count, destination_count, level_count)
        self._dispatcher = UpdateDispatcher(
            transport=self._transport,
            cache=self._cache,
            on_message=on_message,
            on_closed=self._on_stream_closed,
        )
        self._sync = BulkSyncOrchestrator(
            transport=self._transport,
            source_count=source_count,
            destination_count=destination_count,
            level_count=level_count,
        )
        self._commands = CommandIssuer(
            transport=self._transport,
            source_count=source_count,
            destination_count=destination_count,
            level_count=level_count,
        )
        self._connected = False
        self._sync_finished_at: float | None = None

    @classmethod
    def from_config(
        cls,
        config: MagnumConfig,
        *,
        transport: Transport | None = None,
        on_message: Callable[[QuartzResponse], None] | None = None,
    ) -> MagnumRouter:
        return cls(
            config.host,
            config.port,
            config.source_count,
            config.destination_count,
            config.level_count,
            transport=transport,
            connect_timeout=config.connect_timeout,
            sync_quiet_period=config.sync_quiet_period,
            on_message=on_message,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MagnumRouter:
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.disconnect()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> MagnumConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def dispatcher_state(self) -> DispatcherState:
        return self._dispatcher.state

    @property
    def protocol_error_count(self) -> int:
        """Error notifications received from the router this session."""
        return self._dispatcher.protocol_error_count

    @property
    def expected_sync_requests(self) -> int:
        return self._sync.expected_request_count

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Connect, then request the router's full state.

        The dispatcher starts before the transport connects so no early
        notification is lost. If the connection fails the dispatcher is
        stopped and the error is raised. If a bulk sync request fails the
        dispatcher is stopped, the transport closed, and the error raised;
        whatever the cache received before the failure is kept and should
        be treated as unreliable.
        """
        self._sync_finished_at = None
        self._dispatcher.start()
        try:
            await self._transport.connect()
        except Exception:
            await self._dispatcher.stop()
            raise
        self._connected = True
        _logger.info("Connected to %s:%s", self._config.host, self._config.port)

        try:
            await self._sync.run()
        except Exception:
            _logger.warning(
                "Bulk sync aborted after %s of %s requests",
                self._sync.requests_issued,
                self._sync.expected_request_count,
            )
            await self._dispatcher.stop()
            self._connected = False
            await self._transport.disconnect()
            raise
        self._sync_finished_at = time.monotonic()

    async def disconnect(self) -> None:
        """Stop the dispatcher and close the connection."""
        await self._dispatcher.stop()
        self._connected = False
        await self._transport.disconnect()
        _logger.info("Disconnected from %s:%s", self._config.host, self._config.port)

    def _on_stream_closed(self) -> None:
        if self._connected:
            _logger.warning("Connection to %s:%s ended", self._config.host, self._config.port)
        self._connected = False

    async def wait_for_sync(self, *, timeout: float = 30.0, quiet_period: float | None = None) -> bool:
        """Wait until the inbound stream has been quiet since the bulk sync.

        Replies carry no request id, so completion can only be inferred:
        returns ``True`` once no message has arrived for *quiet_period*
        seconds after the last sync request went out, or ``False`` on
        *timeout* or if the dispatcher stops.
        """
        quiet = quiet_period if quiet_period is not None else self._config.sync_quiet_period
        deadline = time.monotonic() + timeout
        while True:
            if not self._dispatcher.is_running or self._sync_finished_at is None:
                return False
            now = time.monotonic()
            idle = now - max(self._dispatcher.last_activity, self._sync_finished_at)
            if idle >= quiet:
                return True
            if now >= deadline:
                return False
            await asyncio.sleep(min(quiet - idle, deadline - now))

    # ------------------------------------------------------------------
    # Re-sync
    # ------------------------------------------------------------------

    async def request_all_source_names(self) -> None:
        await self._sync.request_all_source_names()

    async def request_all_destination_names(self) -> None:
        await self._sync.request_all_destination_names()

    async def request_all_destination_locks(self) -> None:
        await self._sync.request_all_destination_locks()

    async def request_all_routes(self) -> None:
        await self._sync.request_all_routes()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def set_route(self, levels: Iterable[int], destination: int, source: int) -> None:
        """Route *source* to *destination* on *levels* (level indexes)."""
        await self._commands.set_route(levels, destination, source)

    async def set_lock(self, destination: int, locked: bool) -> None:
        await self._commands.set_lock(destination, locked)

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    def get_route(self, level: int, destination: int) -> int:
        return self._cache.get_route(level, destination)

    def get_source_name(self, source: int) -> str:
        return self._cache.get_source_name(source)

    def get_destination_name(self, destination: int) -> str:
        return self._cache.get_destination_name(destination)

    def get_destination_locked(self, destination: int) -> bool:
        return self._cache.get_destination_locked(destination)

    def get_route_table(self) -> tuple[tuple[int, ...], ...]:
        """Routes indexed ``[destination][level]``; row 0 is unused."""
        return self._cache.get_route_table()

    def get_source_name_table(self) -> tuple[str, ...]:
        return self._cache.get_source_name_table()

    def get_destination_name_table(self) -> tuple[str, ...]:
        return self._cache.get_destination_name_table()

    def get_destination_lock_table(self) -> tuple[bool, ...]:
        return self._cache.get_destination_lock_table()

    def snapshot(self) -> RouterSnapshot:
        return self._cache.snapshot()
