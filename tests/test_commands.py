from __future__ import annotations

import pytest
from conftest import FakeTransport

from pymagnum.commands import CommandIssuer
from pymagnum.exceptions import MagnumLevelMappingError


@pytest.fixture
def issuer(fake_transport: FakeTransport) -> CommandIssuer:
    fake_transport.connected = True
    return CommandIssuer(
        transport=fake_transport,
        source_count=8,
        destination_count=4,
        level_count=3,
    )


@pytest.mark.asyncio
async def test_set_route_sends_one_multi_level_command(
    issuer: CommandIssuer, fake_transport: FakeTransport
) -> None:
    await issuer.set_route([0, 2], 3, 7)

    assert fake_transport.sent == [("set_crosspoint", (("V", "B"), 3, 7))]


@pytest.mark.asyncio
async def test_set_route_accepts_any_iterable_and_dedupes(
    issuer: CommandIssuer, fake_transport: FakeTransport
) -> None:
    await issuer.set_route(iter([1, 1, 0]), 1, 0)

    assert fake_transport.sent == [("set_crosspoint", (("A", "V"), 1, 0))]


@pytest.mark.asyncio
async def test_empty_level_set_rejected(issuer: CommandIssuer, fake_transport: FakeTransport) -> None:
    with pytest.raises(ValueError):
        await issuer.set_route([], 1, 1)
    assert fake_transport.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize("levels", [[26], [-1], [0, 3]])
async def test_unknown_level_rejected(
    issuer: CommandIssuer, fake_transport: FakeTransport, levels: list[int]
) -> None:
    with pytest.raises(MagnumLevelMappingError):
        await issuer.set_route(levels, 1, 1)
    assert fake_transport.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize(("destination", "source"), [(0, 1), (5, 1), (1, 9), (1, -1), (True, 1)])
async def test_out_of_range_ids_rejected(
    issuer: CommandIssuer, fake_transport: FakeTransport, destination: int, source: int
) -> None:
    with pytest.raises(ValueError):
        await issuer.set_route([0], destination, source)
    assert fake_transport.sent == []


@pytest.mark.asyncio
async def test_set_lock(issuer: CommandIssuer, fake_transport: FakeTransport) -> None:
    await issuer.set_lock(2, True)
    await issuer.set_lock(2, False)

    assert fake_transport.sent == [
        ("lock_destination", (2,)),
        ("unlock_destination", (2,)),
    ]


@pytest.mark.asyncio
async def test_set_lock_rejects_bad_destination(issuer: CommandIssuer) -> None:
    with pytest.raises(ValueError):
        await issuer.set_lock(0, True)
