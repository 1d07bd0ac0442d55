"""Route and lock commands.

Commands are fire-and-forget with respect to local state: nothing here writes
to the cache. The router echoes every change it accepts as a notification,
and the update dispatcher applies that. A command the router silently
rejects never shows up in the cache.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pymagnum._transport import Transport
from pymagnum.exceptions import MagnumLevelMappingError
from pymagnum.levels import levels_to_codes

_logger = logging.getLogger(__name__)


class CommandIssuer:
    """Translate route/lock requests into Quartz commands."""

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

    def _require_destination(self, destination: int) -> int:
        if isinstance(destination, bool) or not isinstance(destination, int):
            raise ValueError(f"destination must be an integer, got {destination!r}")
        if not 1 <= destination <= self._destination_count:
            raise ValueError(f"destination must be between 1 and {self._destination_count}, got {destination}")
        return destination

    async def set_route(self, levels: Iterable[int], destination: int, source: int) -> None:
        """Route *source* to *destination* on every level in *levels* with one command.

        Raises :class:`MagnumLevelMappingError` for an unknown level index and
        :class:`ValueError` for an empty level set or an out-of-range id.
        """
        indexes = list(levels)
        codes = levels_to_codes(indexes)
        if not codes:
            raise ValueError("at least one level is required")
        beyond = [index for index in indexes if index >= self._level_count]
        if beyond:
            raise MagnumLevelMappingError(
                f"level index must be below the configured level count {self._level_count}, got {beyond[0]}",
                value=beyond[0],
            )
        self._require_destination(destination)
        if isinstance(source, bool) or not isinstance(source, int) or not 0 <= source <= self._source_count:
            raise ValueError(f"source must be between 0 and {self._source_count}, got {source!r}")
        _logger.debug("Set route dst=%s src=%s levels=%s", destination, source, "".join(codes))
        await self._transport.set_crosspoint(codes, destination, source)

    async def set_lock(self, destination: int, locked: bool) -> None:
        """Lock or unlock *destination*."""
        self._require_destination(destination)
        _logger.debug("Set lock dst=%s locked=%s", destination, locked)
        if locked:
            await self._transport.lock_destination(destination)
        else:
            await self._transport.unlock_destination(destination)
