"""Async consumer that applies inbound Quartz messages to the state cache.

Owns:
- the ``RUNNING``/``STOPPED`` state of the receive loop
- classifying each message by kind and writing it to the cache
- end-of-stream handling (treated as an implicit disconnect)

The cache is only ever written from here. Commands never update it directly;
their effect shows up when the router echoes the change as a notification.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import time
from collections.abc import Callable

from pymagnum._transport import Transport
from pymagnum.exceptions import MagnumLevelMappingError
from pymagnum.levels import level_to_index
from pymagnum.models.messages import QuartzResponse, ResponseKind
from pymagnum.state.cache import RoutingStateCache

_logger = logging.getLogger(__name__)


def _assigned_id(value: int, what: str) -> int:
    """Reject id 0, the reserved "none" slot the router never reports."""
    if value == 0:
        raise IndexError(f"{what} 0 is reserved")
    return value


class DispatcherState(enum.StrEnum):
    RUNNING = "running"
    STOPPED = "stopped"


class UpdateDispatcher:
    """Long-lived receive loop feeding a :class:`RoutingStateCache`.

    The loop races each ``receive()`` against the stop signal, so
    :meth:`stop` ends it promptly even while the inbound stream is idle.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        cache: RoutingStateCache,
        on_message: Callable[[QuartzResponse], None] | None = None,
        on_closed: Callable[[], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._cache = cache
        self._on_message = on_message
        self._on_closed = on_closed
        self._clock = clock
        self._state = DispatcherState.STOPPED
        self._stop_requested = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._last_activity = clock()
        self._messages_applied = 0
        self._protocol_error_count = 0
        self._last_protocol_error: str | None = None

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == DispatcherState.RUNNING

    @property
    def last_activity(self) -> float:
        """Clock reading when the last message was received (or the loop started)."""
        return self._last_activity

    @property
    def messages_applied(self) -> int:
        return self._messages_applied

    @property
    def protocol_error_count(self) -> int:
        """Number of error notifications the router has sent this session."""
        return self._protocol_error_count

    @property
    def last_protocol_error(self) -> str | None:
        return self._last_protocol_error

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the receive loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return
        self._stop_requested = asyncio.Event()
        self._state = DispatcherState.RUNNING
        self._last_activity = self._clock()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="pymagnum-dispatcher")
        _logger.debug("Update dispatcher started")

    async def stop(self) -> None:
        """Signal the loop to stop and wait for it to finish."""
        self._state = DispatcherState.STOPPED
        self._stop_requested.set()
        task = self._task
        self._task = None
        if task is None or task is asyncio.current_task():
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.debug("Update dispatcher stopped")

    async def _run(self) -> None:
        stop_wait = asyncio.ensure_future(self._stop_requested.wait())
        ended = False
        try:
            while not self._stop_requested.is_set():
                receive = asyncio.ensure_future(self._transport.receive())
                done, _pending = await asyncio.wait(
                    {receive, stop_wait},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if receive not in done:
                    receive.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await receive
                    break

                try:
                    message = receive.result()
                except Exception:
                    _logger.warning("Receive failed, stopping dispatcher", exc_info=True)
                    ended = True
                    break

                if message is None:
                    ended = True
                    break
                if self._stop_requested.is_set():
                    # Stop raced the receive; the message is discarded.
                    break
                self.apply(message)
        finally:
            stop_wait.cancel()
            self._state = DispatcherState.STOPPED

        if ended:
            self._handle_end_of_stream()

    def _handle_end_of_stream(self) -> None:
        if self._stop_requested.is_set():
            return
        _logger.info("Inbound stream ended, dispatcher stopped")
        self._stop_requested.set()
        if self._on_closed is not None:
            try:
                self._on_closed()
            except Exception:
                _logger.debug("on_closed callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    def apply(self, message: QuartzResponse) -> None:
        """Apply one inbound message to the cache.

        Never raises: messages that reference unknown levels or ids outside
        the cached tables are logged and ignored.
        """
        self._last_activity = self._clock()
        try:
            self._dispatch(message)
        except (IndexError, MagnumLevelMappingError) as exc:
            _logger.debug("Ignoring out-of-range message %r: %s", message.raw, exc)
            return
        self._messages_applied += 1

        if self._on_message is not None:
            try:
                self._on_message(message)
            except Exception:
                _logger.debug("on_message callback failed", exc_info=True)

    def _dispatch(self, message: QuartzResponse) -> None:
        kind = message.kind
        if kind == ResponseKind.ACKNOWLEDGE:
            return
        if kind == ResponseKind.ERROR:
            self._protocol_error_count += 1
            self._last_protocol_error = message.message or message.raw
            _logger.warning("Router reported an error: %s", self._last_protocol_error)
            return
        if kind == ResponseKind.POWER_ON:
            _logger.info("Router power-on notice received")
            return
        if kind == ResponseKind.ROUTE_UPDATE:
            # Map every level first so a bad code leaves the route untouched.
            indexes = [level_to_index(code) for code in message.levels]
            destination = _assigned_id(message.destination, "destination")
            level_count = self._cache.level_count
            for index in indexes:
                if index >= level_count:
                    # The router may report levels beyond the configured count.
                    continue
                self._cache.set_route(index, destination, message.source)
            _logger.debug(
                "Route dst=%s src=%s levels=%s",
                message.destination,
                message.source,
                "".join(message.levels),
            )
            return
        if kind == ResponseKind.DESTINATION_NAME:
            self._cache.set_destination_name(_assigned_id(message.destination, "destination"), message.name)
            return
        if kind == ResponseKind.SOURCE_NAME:
            self._cache.set_source_name(_assigned_id(message.source, "source"), message.name)
            return
        if kind == ResponseKind.LEVEL_NAME:
            # Magnum does not support level reads.
            return
        if kind == ResponseKind.LOCK_STATUS:
            self._cache.set_destination_locked(_assigned_id(message.destination, "destination"), message.locked)
            return
        _logger.debug("Ignoring unhandled message kind=%s raw=%r", kind, message.raw)
