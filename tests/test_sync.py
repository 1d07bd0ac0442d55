from __future__ import annotations

import pytest
from conftest import FakeTransport

from pymagnum.exceptions import MagnumTransportError
from pymagnum.sync import BulkSyncOrchestrator


def _orchestrator(transport: FakeTransport, sources: int, destinations: int, levels: int) -> BulkSyncOrchestrator:
    return BulkSyncOrchestrator(
        transport=transport,
        source_count=sources,
        destination_count=destinations,
        level_count=levels,
    )


def test_expected_request_count() -> None:
    orchestrator = _orchestrator(FakeTransport(), 64, 32, 17)
    assert orchestrator.expected_request_count == 64 + 32 * (2 + 17)


@pytest.mark.asyncio
async def test_run_issues_every_request_in_order(fake_transport: FakeTransport) -> None:
    fake_transport.connected = True
    orchestrator = _orchestrator(fake_transport, 2, 2, 2)

    await orchestrator.run()

    assert fake_transport.sent == [
        ("request_source_name", (1,)),
        ("request_source_name", (2,)),
        ("request_destination_name", (1,)),
        ("request_destination_name", (2,)),
        ("request_destination_lock", (1,)),
        ("request_destination_lock", (2,)),
        ("request_route", ("V", 1)),
        ("request_route", ("A", 1)),
        ("request_route", ("V", 2)),
        ("request_route", ("A", 2)),
    ]
    assert orchestrator.requests_issued == orchestrator.expected_request_count == 10


@pytest.mark.asyncio
async def test_routes_cover_configured_levels(fake_transport: FakeTransport) -> None:
    fake_transport.connected = True
    orchestrator = _orchestrator(fake_transport, 1, 1, 17)

    await orchestrator.request_all_routes()

    codes = [args[0] for args in fake_transport.calls("request_route")]
    assert codes == list("VABCDEFGHIJKLMNOP")


@pytest.mark.asyncio
async def test_first_failure_aborts_the_run(fake_transport: FakeTransport) -> None:
    fake_transport.connected = True
    fake_transport.fail_at = 3
    orchestrator = _orchestrator(fake_transport, 2, 2, 2)

    with pytest.raises(MagnumTransportError):
        await orchestrator.run()

    assert len(fake_transport.sent) == 3
    assert orchestrator.requests_issued == 3
    assert fake_transport.calls("request_route") == []


@pytest.mark.asyncio
async def test_run_resets_request_counter(fake_transport: FakeTransport) -> None:
    fake_transport.connected = True
    orchestrator = _orchestrator(fake_transport, 1, 1, 1)

    await orchestrator.run()
    await orchestrator.run()

    assert orchestrator.requests_issued == 4
    assert len(fake_transport.sent) == 8
