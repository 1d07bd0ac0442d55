from __future__ import annotations

import threading

import pytest

from pymagnum.models.snapshot import RouterSnapshot
from pymagnum.state.cache import RoutingStateCache


def test_tables_start_empty_and_sized_with_reserved_zero_slot() -> None:
    cache = RoutingStateCache(source_count=4, destination_count=2, level_count=3)

    assert cache.get_source_name_table() == ("", "", "", "", "")
    assert cache.get_destination_name_table() == ("", "", "")
    assert cache.get_destination_lock_table() == (False, False, False)
    assert cache.get_route_table() == ((0, 0, 0), (0, 0, 0), (0, 0, 0))


def test_setters_and_getters() -> None:
    cache = RoutingStateCache(source_count=4, destination_count=2, level_count=2)

    cache.set_source_name(1, "CAM1")
    cache.set_destination_name(2, "PGM")
    cache.set_destination_locked(2, True)
    cache.set_route(1, 2, 4)

    assert cache.get_source_name(1) == "CAM1"
    assert cache.get_destination_name(2) == "PGM"
    assert cache.get_destination_locked(2) is True
    assert cache.get_destination_locked(1) is False
    assert cache.get_route(1, 2) == 4
    assert cache.get_route(0, 2) == 0


def test_route_last_writer_wins() -> None:
    cache = RoutingStateCache(source_count=9, destination_count=1, level_count=1)
    for source in (3, 7, 1, 9):
        cache.set_route(0, 1, source)
    assert cache.get_route(0, 1) == 9


@pytest.mark.parametrize(
    ("call", "args"),
    [
        ("get_route", (2, 1)),
        ("get_route", (0, 3)),
        ("get_route", (-1, 1)),
        ("get_source_name", (5,)),
        ("get_source_name", (-1,)),
        ("get_destination_name", (3,)),
        ("get_destination_locked", (-1,)),
        ("set_route", (0, 1, 5)),
        ("set_source_name", (5, "x")),
        ("set_destination_locked", (3, True)),
    ],
)
def test_out_of_range_ids_raise_index_error(call: str, args: tuple[object, ...]) -> None:
    cache = RoutingStateCache(source_count=4, destination_count=2, level_count=2)
    with pytest.raises(IndexError):
        getattr(cache, call)(*args)


def test_table_reads_are_copies() -> None:
    cache = RoutingStateCache(source_count=2, destination_count=2, level_count=2)
    before = cache.get_route_table()
    cache.set_route(0, 1, 2)

    assert before[1][0] == 0
    assert cache.get_route_table()[1][0] == 2


def test_snapshot_captures_all_tables() -> None:
    cache = RoutingStateCache(source_count=2, destination_count=1, level_count=2)
    cache.set_source_name(2, "VTR")
    cache.set_destination_name(1, "MON")
    cache.set_destination_locked(1, True)
    cache.set_route(1, 1, 2)

    snapshot = cache.snapshot()

    assert isinstance(snapshot, RouterSnapshot)
    assert snapshot.source_names == ("", "", "VTR")
    assert snapshot.destination_names == ("", "MON")
    assert snapshot.destination_locks == (False, True)
    assert snapshot.routes == ((0, 0), (0, 2))
    assert (snapshot.source_count, snapshot.destination_count, snapshot.level_count) == (2, 1, 2)


def test_concurrent_table_reads_are_never_torn() -> None:
    destinations, levels, passes = 16, 4, 200
    cache = RoutingStateCache(source_count=passes, destination_count=destinations, level_count=levels)
    stop = threading.Event()
    problems: list[str] = []

    def writer() -> None:
        for value in range(1, passes + 1):
            for destination in range(1, destinations + 1):
                for level in range(levels):
                    cache.set_route(level, destination, value)
        stop.set()

    def reader() -> None:
        while not stop.is_set():
            table = cache.get_route_table()
            if len(table) != destinations + 1 or any(len(row) != levels for row in table):
                problems.append("bad shape")
                return
            values = [cell for row in table[1:] for cell in row]
            # Cells are written in order, so a coherent read is non-increasing.
            if any(later > earlier for earlier, later in zip(values, values[1:], strict=False)):
                problems.append(f"torn read: {values}")
                return

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    writer_thread.join()
    for thread in readers:
        thread.join()

    assert problems == []
    assert cache.get_route(levels - 1, destinations) == passes
