"""Bulk inventory requests that populate an empty cache.

The orchestrator only *asks*: one read request per source name, destination
name, destination lock and (destination, level) route. Replies arrive later
through the update dispatcher and carry no request id, so there is nothing to
wait on between requests. Completion is judged separately, by watching the
inbound stream go quiet (see :meth:`MagnumRouter.wait_for_sync`).
"""

from __future__ import annotations

import logging

from pymagnum._transport import Transport
from pymagnum.levels import index_to_level

_logger = logging.getLogger(__name__)


class BulkSyncOrchestrator:
    """Issue the full set of read requests for a router of a given size.

    Requests are sent serially. The first transport error aborts the sync and
    propagates to the caller; nothing is retried or skipped.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        source_count: int,
        destination_count: int,
        level_count: int,
    ) -> None:
        self._transport = transport
        self._source_count = source_count
        self._destination_count = destination_count
        self._level_count = level_count
        self.requests_issued = 0

    @property
    def expected_request_count(self) -> int:
        """Requests issued by a complete :meth:`run`."""
        return self._source_count + self._destination_count * (2 + self._level_count)

    async def run(self) -> None:
        """Request every name, lock and route, in that order."""
        self.requests_issued = 0
        await self.request_all_source_names()
        await self.request_all_destination_names()
        await self.request_all_destination_locks()
        await self.request_all_routes()
        _logger.debug("Bulk sync issued %s requests", self.requests_issued)

    async def request_all_source_names(self) -> None:
        _logger.debug("Requesting %s source names", self._source_count)
        for source in range(1, self._source_count + 1):
            await self._transport.request_source_name(source)
            self.requests_issued += 1

    async def request_all_destination_names(self) -> None:
        _logger.debug("Requesting %s destination names", self._destination_count)
        for destination in range(1, self._destination_count + 1):
            await self._transport.request_destination_name(destination)
            self.requests_issued += 1

    async def request_all_destination_locks(self) -> None:
        _logger.debug("Requesting %s destination locks", self._destination_count)
        for destination in range(1, self._destination_count + 1):
            await self._transport.request_destination_lock(destination)
            self.requests_issued += 1

    async def request_all_routes(self) -> None:
        """Interrogate every route, destination-major and level-minor."""
        _logger.debug(
            "Requesting %s routes (%s destinations x %s levels)",
            self._destination_count * self._level_count,
            self._destination_count,
            self._level_count,
        )
        level_codes = [index_to_level(level) for level in range(self._level_count)]
        for destination in range(1, self._destination_count + 1):
            for code in level_codes:
                await self._transport.request_route(code, destination)
                self.requests_issued += 1
