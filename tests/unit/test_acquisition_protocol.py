import pytest

from automation.executors import AcquisitionConfig, AcquisitionProtocol, acquire_first_available
from automation.shared.booking_contracts import ConfirmationOutcome, SelectionOutcome, Slot
from automation.shared.errors import AcquisitionConflict, AcquisitionError
from tests.helpers import DummyLogger, FakeTeeSheetSite
from tracking import t


CANDIDATES = [
    Slot(time="10:30", handle="slot-a"),
    Slot(time="10:20", handle="slot-b"),
    Slot(time="10:10", handle="slot-c"),
]


@pytest.mark.asyncio
async def test_conflicts_fall_through_to_next_candidate():
    t('tests.unit.test_acquisition_protocol.test_conflicts_fall_through_to_next_candidate')
    site = FakeTeeSheetSite(
        selection_outcomes={
            "slot-a": SelectionOutcome.CONFLICT,
            "slot-b": SelectionOutcome.CONFLICT,
        }
    )

    result = await acquire_first_available(site, "view", CANDIDATES, logger=DummyLogger())

    assert result.success
    assert result.booked == CANDIDATES[2]
    assert result.confirmation_number == "CONF-slot-c"
    assert len(result.conflicts) == 2
    assert result.attempted == ["10:30", "10:20", "10:10"]
    assert site.count("dismiss_conflict") == 2
    assert site.count("confirm_acquisition") == 1
    result.raise_for_failure()


@pytest.mark.asyncio
async def test_first_candidate_books_without_touching_the_rest():
    site = FakeTeeSheetSite()

    result = await acquire_first_available(site, "view", CANDIDATES)

    assert result.booked == CANDIDATES[0]
    assert site.selected == ["slot-a"]
    assert result.failures == []


@pytest.mark.asyncio
async def test_all_conflicts_raise_slot_locked():
    site = FakeTeeSheetSite(
        selection_outcomes={slot.handle: SelectionOutcome.CONFLICT for slot in CANDIDATES}
    )

    result = await acquire_first_available(site, "view", CANDIDATES)

    assert not result.success
    assert site.selected == ["slot-a", "slot-b", "slot-c"]
    with pytest.raises(AcquisitionConflict) as excinfo:
        result.raise_for_failure()
    assert excinfo.value.reason == "Time slot locked by another user"
    assert excinfo.value.slot_time == "10:10"


@pytest.mark.asyncio
async def test_last_failure_decides_the_reason():
    site = FakeTeeSheetSite(
        selection_outcomes={
            "slot-a": SelectionOutcome.CONFLICT,
            "slot-b": SelectionOutcome.TIMEOUT,
        }
    )

    result = await acquire_first_available(site, "view", CANDIDATES[:2])

    assert site.count("dismiss_conflict") == 1
    with pytest.raises(AcquisitionError) as excinfo:
        result.raise_for_failure()
    assert excinfo.value.reason == "Failed to complete booking"


@pytest.mark.asyncio
async def test_unconfirmed_booking_moves_on():
    site = FakeTeeSheetSite(
        confirmations={"slot-a": ConfirmationOutcome(confirmed=False, detail="networkidle timeout")}
    )

    result = await AcquisitionProtocol(site, AcquisitionConfig(candidate_race_ms=10, confirmation_ms=20)).run(
        "view", CANDIDATES
    )

    assert result.booked == CANDIDATES[1]
    assert isinstance(result.failures[0], AcquisitionError)
    assert ("select_candidate", ("view", "slot-a", 10)) in site.calls
    assert ("confirm_acquisition", ("view", 20)) in site.calls


@pytest.mark.asyncio
async def test_unexpected_error_is_recorded_and_next_candidate_tried():
    class FlakySite(FakeTeeSheetSite):
        async def select_candidate(self, view, handle, timeout_ms):
            if handle == "slot-a":
                self.selected.append(handle)
                raise RuntimeError("element detached")
            return await super().select_candidate(view, handle, timeout_ms)

    site = FlakySite()
    logger = DummyLogger()

    result = await AcquisitionProtocol(site, logger=logger).run("view", CANDIDATES)

    assert result.booked == CANDIDATES[1]
    assert isinstance(result.failures[0], AcquisitionError)
    assert result.failures[0].slot_time == "10:30"
    assert ("warning", "Booking 10:30 failed: element detached") in logger.messages


@pytest.mark.asyncio
async def test_empty_candidate_list():
    result = await acquire_first_available(FakeTeeSheetSite(), "view", [])

    assert not result.success
    assert result.attempted == []
    with pytest.raises(AcquisitionError, match="No candidate slots to book"):
        result.raise_for_failure()
