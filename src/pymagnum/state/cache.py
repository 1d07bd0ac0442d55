"""In-memory cache of the router's routing state.

The update dispatcher is the only writer; readers may be on any thread. One
coarse lock guards every table: contention is low (one writer, a handful of
readers) and it lets whole-table reads return coherent snapshots.
"""

from __future__ import annotations

import threading

from pymagnum.models.snapshot import RouterSnapshot


def _check_id(value: int, upper: int, what: str) -> int:
    """Reject ids outside ``0..upper`` (including negatives, which Python would wrap)."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
        raise IndexError(f"{what} must be between 0 and {upper}, got {value!r}")
    return value


class RoutingStateCache:
    """Source names, destination names, destination locks and the route table.

    Tables are sized once at construction and never grow. Index 0 of every id
    space is the reserved "none" slot.
    """

    def __init__(self, source_count: int, destination_count: int, level_count: int) -> None:
        if source_count < 0 or destination_count < 0 or level_count < 0:
            raise ValueError("table sizes must be non-negative")
        self._lock = threading.RLock()
        self._source_count = source_count
        self._destination_count = destination_count
        self._level_count = level_count
        self._source_names: list[str] = [""] * (source_count + 1)
        self._destination_names: list[str] = [""] * (destination_count + 1)
        self._destination_locks: list[bool] = [False] * (destination_count + 1)
        self._routes: list[list[int]] = [[0] * level_count for _ in range(destination_count + 1)]

    @property
    def source_count(self) -> int:
        return self._source_count

    @property
    def destination_count(self) -> int:
        return self._destination_count

    @property
    def level_count(self) -> int:
        return self._level_count

    def _check_level(self, level: int) -> int:
        if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level < self._level_count:
            raise IndexError(f"level must be between 0 and {self._level_count - 1}, got {level!r}")
        return level

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_route(self, level: int, destination: int) -> int:
        """Source currently routed to *destination* on *level* (0 = none)."""
        self._check_level(level)
        _check_id(destination, self._destination_count, "destination")
        with self._lock:
            return self._routes[destination][level]

    def get_source_name(self, source: int) -> str:
        _check_id(source, self._source_count, "source")
        with self._lock:
            return self._source_names[source]

    def get_destination_name(self, destination: int) -> str:
        _check_id(destination, self._destination_count, "destination")
        with self._lock:
            return self._destination_names[destination]

    def get_destination_locked(self, destination: int) -> bool:
        _check_id(destination, self._destination_count, "destination")
        with self._lock:
            return self._destination_locks[destination]

    def get_source_name_table(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._source_names)

    def get_destination_name_table(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._destination_names)

    def get_destination_lock_table(self) -> tuple[bool, ...]:
        with self._lock:
            return tuple(self._destination_locks)

    def get_route_table(self) -> tuple[tuple[int, ...], ...]:
        """Route table indexed ``[destination][level]``, copied under the lock."""
        with self._lock:
            return tuple(tuple(row) for row in self._routes)

    def snapshot(self) -> RouterSnapshot:
        """Capture every table in one consistent view."""
        with self._lock:
            return RouterSnapshot(
                source_names=tuple(self._source_names),
                destination_names=tuple(self._destination_names),
                destination_locks=tuple(self._destination_locks),
                routes=tuple(tuple(row) for row in self._routes),
            )

    # ------------------------------------------------------------------
    # Writes (update dispatcher only)
    # ------------------------------------------------------------------

    def set_route(self, level: int, destination: int, source: int) -> None:
        self._check_level(level)
        _check_id(destination, self._destination_count, "destination")
        _check_id(source, self._source_count, "source")
        with self._lock:
            self._routes[destination][level] = source

    def set_source_name(self, source: int, name: str) -> None:
        _check_id(source, self._source_count, "source")
        with self._lock:
            self._source_names[source] = name

    def set_destination_name(self, destination: int, name: str) -> None:
        _check_id(destination, self._destination_count, "destination")
        with self._lock:
            self._destination_names[destination] = name

    def set_destination_locked(self, destination: int, locked: bool) -> None:
        _check_id(destination, self._destination_count, "destination")
        with self._lock:
            self._destination_locks[destination] = bool(locked)
