"""Unit tests for the applicant transition trigger."""

import logging
from datetime import UTC, datetime

import pytest

from casesync.core.models import ApplicantRecord, SyncOutcome, SyncResult
from casesync.core.synchronizer import Synchronizer
from casesync.core.trigger import TransitionTrigger
from casesync.tests.fakes import (
    FakeCredentialStorePort,
    FakeRecordStorePort,
    FakeRemoteProtocolPort,
    FakeSynchronizePort,
)


@pytest.fixture
def port() -> FakeSynchronizePort:
    return FakeSynchronizePort()


@pytest.fixture
def trigger(port: FakeSynchronizePort) -> TransitionTrigger:
    return TransitionTrigger(synchronizer=port, field="hhs_id")


# ============================================================================
# Transition detection
# ============================================================================


class TestShouldFire:
    """Tests for empty → populated detection."""

    def test_fires_on_empty_to_populated(self, trigger: TransitionTrigger) -> None:
        assert trigger.should_fire({"hhs_id": "H1"}, {"hhs_id": ""})

    def test_fires_when_field_was_absent(self, trigger: TransitionTrigger) -> None:
        assert trigger.should_fire({"hhs_id": "H1"}, {})

    def test_fires_without_previous_snapshot(self, trigger: TransitionTrigger) -> None:
        assert trigger.should_fire({"hhs_id": "H1"}, None)

    def test_does_not_fire_when_already_populated(self, trigger: TransitionTrigger) -> None:
        assert not trigger.should_fire({"hhs_id": "H2"}, {"hhs_id": "H1"})

    def test_does_not_fire_when_still_empty(self, trigger: TransitionTrigger) -> None:
        assert not trigger.should_fire({"hhs_id": ""}, {"hhs_id": ""})
        assert not trigger.should_fire({}, None)

    def test_does_not_fire_when_person_handle_exists(
        self, trigger: TransitionTrigger
    ) -> None:
        current = {"hhs_id": "H1", "sm_person_handle": "P1"}
        assert not trigger.should_fire(current, {"hhs_id": ""})

    def test_bound_field_is_configurable(self, port: FakeSynchronizePort) -> None:
        trigger = TransitionTrigger(synchronizer=port, field="badge_number")
        assert trigger.should_fire({"badge_number": "B1"}, {"hhs_id": ""})
        assert not trigger.should_fire({"hhs_id": "H1"}, None)


def test_unknown_mode_is_rejected(port: FakeSynchronizePort) -> None:
    with pytest.raises(ValueError, match="Unknown trigger mode"):
        TransitionTrigger(synchronizer=port, mode="later")  # type: ignore[arg-type]


# ============================================================================
# Listener behavior
# ============================================================================


@pytest.mark.asyncio
async def test_sync_mode_invokes_inline(
    trigger: TransitionTrigger, port: FakeSynchronizePort
) -> None:
    previous = ApplicantRecord(id="app-1", attributes={"hhs_id": ""})
    current = ApplicantRecord(id="app-1", attributes={"hhs_id": "H1"})

    await trigger.on_applicant_saved(current, previous)

    assert port.synchronized == ["app-1"]


@pytest.mark.asyncio
async def test_sync_mode_ignores_non_transitions(
    trigger: TransitionTrigger, port: FakeSynchronizePort
) -> None:
    previous = ApplicantRecord(id="app-1", attributes={"hhs_id": "H1"})
    current = ApplicantRecord(id="app-1", attributes={"hhs_id": "H1", "ssn": "1"})

    await trigger.on_applicant_saved(current, previous)

    assert port.synchronized == []


@pytest.mark.asyncio
async def test_async_mode_schedules_without_previous_snapshot(
    port: FakeSynchronizePort,
) -> None:
    trigger = TransitionTrigger(synchronizer=port, mode="async")
    # Previous already populated, but async mode never consults it
    previous = ApplicantRecord(id="app-1", attributes={"hhs_id": "H1"})
    current = ApplicantRecord(id="app-1", attributes={"hhs_id": "H1"})

    await trigger.on_applicant_saved(current, previous)
    await trigger.drain()

    assert port.synchronized == ["app-1"]


@pytest.mark.asyncio
async def test_async_mode_still_skips_handled_applicants(
    port: FakeSynchronizePort,
) -> None:
    trigger = TransitionTrigger(synchronizer=port, mode="async")
    current = ApplicantRecord(
        id="app-1", attributes={"hhs_id": "H1"}, sm_person_handle="P1"
    )

    await trigger.on_applicant_saved(current, None)
    await trigger.drain()

    assert port.synchronized == []


@pytest.mark.asyncio
async def test_invoke_by_identifier_returns_result(
    port: FakeSynchronizePort,
) -> None:
    port.result = SyncResult(
        ok=True, http_status=200, outcome=SyncOutcome.SUCCESS, applicant_id="app-9"
    )
    trigger = TransitionTrigger(synchronizer=port)

    result = await trigger.invoke("app-9")

    assert result.ok
    assert port.synchronized == ["app-9"]


@pytest.mark.asyncio
async def test_redundant_invocations_issue_one_remote_call() -> None:
    store = FakeRecordStorePort()
    store.add_applicant("app-1", hhs_id="H1")
    store.add_case("case-1", "app-1", created_on=datetime(2024, 1, 1, tzinfo=UTC))
    protocol = FakeRemoteProtocolPort()
    synchronizer = Synchronizer(
        store=store, credentials=FakeCredentialStorePort(), protocol=protocol
    )
    trigger = TransitionTrigger(synchronizer=synchronizer)

    first = await trigger.invoke("app-1")
    second = await trigger.invoke("app-1")

    assert first.outcome is SyncOutcome.SUCCESS
    assert second.outcome is SyncOutcome.NO_CASE_FOUND
    assert protocol.call_count == 1


@pytest.mark.asyncio
async def test_async_mode_logs_background_failures(
    port: FakeSynchronizePort, caplog: pytest.LogCaptureFixture
) -> None:
    port.should_fail = True
    trigger = TransitionTrigger(synchronizer=port, mode="async")
    current = ApplicantRecord(id="app-1", attributes={"hhs_id": "H1"})

    with caplog.at_level(logging.ERROR):
        await trigger.on_applicant_saved(current, None)
        await trigger.drain()

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "app-1" in errors[0].getMessage()
    assert "Store unavailable" in errors[0].getMessage()
    assert errors[0].applicant_id == "app-1"
    assert errors[0].exc_info is not None
