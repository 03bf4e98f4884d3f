"""Tests for conflict detection and buffer-aware slot listing."""

from datetime import time, timedelta

import pytest

from booking_engine.conflict.detector import ConflictDetector
from booking_engine.conflict.slots import AvailabilityWindow, generate_slot_starts
from booking_engine.schemas.reservation_schema import ReservationStatus
from tests.conftest import DAY, START_OF_TESTS, at, make_event, make_reservation


@pytest.fixture
def detector(storage):
    storage.add_event(make_event())
    storage.add_reservation(make_reservation(at(10)))
    return ConflictDetector(storage)


class TestHasConflict:
    @pytest.mark.asyncio
    async def test_candidate_starting_inside_existing(self, detector):
        assert await detector.has_conflict("evt-1", at(10, 15), at(10, 45))

    @pytest.mark.asyncio
    async def test_candidate_ending_inside_existing(self, detector):
        assert await detector.has_conflict("evt-1", at(9, 45), at(10, 15))

    @pytest.mark.asyncio
    async def test_candidate_containing_existing(self, detector):
        assert await detector.has_conflict("evt-1", at(9, 30), at(11))

    @pytest.mark.asyncio
    async def test_exact_match(self, detector):
        assert await detector.has_conflict("evt-1", at(10), at(10, 30))

    @pytest.mark.asyncio
    async def test_back_to_back_is_free(self, detector):
        assert not await detector.has_conflict("evt-1", at(10, 30), at(11))
        assert not await detector.has_conflict("evt-1", at(9, 30), at(10))

    @pytest.mark.asyncio
    async def test_other_event_is_ignored(self, detector):
        assert not await detector.has_conflict("evt-2", at(10), at(10, 30))

    @pytest.mark.asyncio
    async def test_cancelled_reservation_is_ignored(self, storage):
        storage.add_reservation(make_reservation(at(14), status=ReservationStatus.CANCELLED))
        storage.add_reservation(make_reservation(at(15), status=ReservationStatus.COMPLETED))
        detector = ConflictDetector(storage)
        assert not await detector.has_conflict("evt-1", at(14), at(14, 30))
        assert not await detector.has_conflict("evt-1", at(15), at(15, 30))

    @pytest.mark.asyncio
    async def test_pending_reservation_blocks(self, storage):
        storage.add_reservation(make_reservation(at(14), status=ReservationStatus.PENDING))
        assert await ConflictDetector(storage).has_conflict("evt-1", at(14), at(14, 30))


class TestSlotGeneration:
    def test_slots_must_fit_inside_window(self):
        starts = generate_slot_starts(
            DAY.date(),
            [AvailabilityWindow(time(9), time(10, 15))],
            duration=timedelta(minutes=30),
            interval=timedelta(minutes=30),
        )
        assert starts == [at(9), at(9, 30)]

    def test_overlapping_windows_are_deduplicated(self):
        starts = generate_slot_starts(
            DAY.date(),
            [AvailabilityWindow(time(9), time(10)), AvailabilityWindow(time(9, 30), time(10, 30))],
            duration=timedelta(minutes=30),
            interval=timedelta(minutes=30),
        )
        assert starts == [at(9), at(9, 30), at(10)]

    def test_window_end_must_follow_start(self):
        with pytest.raises(ValueError):
            AvailabilityWindow(time(12), time(9))


class TestOpenSlots:
    @pytest.mark.asyncio
    async def test_without_buffer_neighbours_are_open(self, detector, storage):
        event = await storage.get_event("evt-1")
        slots = await detector.open_slots(
            event, DAY.date(), [AvailabilityWindow(time(9), time(12))],
            now=START_OF_TESTS, slot_interval_minutes=30,
        )
        available = {s.start: s.available for s in slots}
        assert available[at(9, 30)] is True
        assert available[at(10)] is False
        assert available[at(10, 30)] is True

    @pytest.mark.asyncio
    async def test_buffer_blocks_neighbouring_slots(self, storage):
        event = storage.add_event(make_event(event_id="evt-buf", buffer_minutes=15))
        storage.add_reservation(make_reservation(at(10), event_id="evt-buf"))
        detector = ConflictDetector(storage)

        slots = await detector.open_slots(
            event, DAY.date(), [AvailabilityWindow(time(9), time(12))],
            now=START_OF_TESTS, slot_interval_minutes=30,
        )
        available = [s.start for s in slots if s.available]
        assert available == [at(9), at(11), at(11, 30)]

    @pytest.mark.asyncio
    async def test_past_slots_are_not_available(self, detector, storage):
        event = await storage.get_event("evt-1")
        slots = await detector.open_slots(
            event, DAY.date(), [AvailabilityWindow(time(9), time(12))],
            now=at(11), slot_interval_minutes=30,
        )
        assert [s.start for s in slots if s.available] == [at(11, 30)]

    @pytest.mark.asyncio
    async def test_slot_end_uses_event_duration(self, detector, storage):
        event = await storage.get_event("evt-1")
        slots = await detector.open_slots(
            event, DAY.date(), [AvailabilityWindow(time(9), time(10))],
            now=START_OF_TESTS, slot_interval_minutes=30,
        )
        assert all(s.end - s.start == timedelta(minutes=30) for s in slots)
