"""Point-in-time view of the routing state cache."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RouterSnapshot(BaseModel):
    """All cached tables, captured under a single lock acquisition.

    Every table is indexed by id; index 0 is the reserved "none" slot and is
    never populated by the router. ``routes`` is indexed
    ``routes[destination][level]``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_names: tuple[str, ...]
    destination_names: tuple[str, ...]
    destination_locks: tuple[bool, ...]
    routes: tuple[tuple[int, ...], ...]

    @property
    def source_count(self) -> int:
        return len(self.source_names) - 1

    @property
    def destination_count(self) -> int:
        return len(self.destination_names) - 1

    @property
    def level_count(self) -> int:
        return len(self.routes[0]) if self.routes else 0
