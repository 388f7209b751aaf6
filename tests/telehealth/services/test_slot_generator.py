from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from telehealth.models.availability import AVAILABILITY_UNAVAILABLE
from telehealth.services.slot_generator import AvailabilityWindow, generate_slots

UTC = timezone.utc
WORKDAY = AvailabilityWindow(start_time=time(9, 0), end_time=time(17, 0))


def at(hour: int, minute: int = 0, day: int = 5) -> datetime:
    return datetime(2026, 1, day, hour, minute, tzinfo=UTC)


def test_full_day_before_window_opens_yields_sixteen_slots() -> None:
    result = generate_slots(WORKDAY, [], reference_instant=at(8, 0))

    slots = result['2026-01-05']
    assert len(slots) == 16
    assert (slots[0].start, slots[0].end) == (at(9, 0), at(9, 30))
    assert (slots[-1].start, slots[-1].end) == (at(16, 30), at(17, 0))
    assert slots[0].label == '9:00 AM - 9:30 AM'
    assert slots[-1].label == '4:30 PM - 5:00 PM'


def test_horizon_covers_four_consecutive_days_in_order() -> None:
    result = generate_slots(WORKDAY, [], reference_instant=at(8, 0))

    assert list(result) == ['2026-01-05', '2026-01-06', '2026-01-07', '2026-01-08']
    assert all(len(slots) == 16 for slots in result.values())


def test_custom_horizon_length() -> None:
    result = generate_slots(WORKDAY, [], reference_instant=at(8, 0), horizon_days=2)

    assert list(result) == ['2026-01-05', '2026-01-06']


def test_booked_interval_excludes_only_overlapping_slots() -> None:
    result = generate_slots(WORKDAY, [(at(10, 0), at(11, 0))], reference_instant=at(8, 0))

    starts = [slot.start for slot in result['2026-01-05']]
    assert at(10, 0) not in starts
    assert at(10, 30) not in starts
    assert at(9, 30) in starts
    assert at(11, 0) in starts
    assert len(starts) == 14


def test_booking_on_one_day_leaves_other_days_untouched() -> None:
    result = generate_slots(WORKDAY, [(at(10, 0), at(11, 0))], reference_instant=at(8, 0))

    assert len(result['2026-01-06']) == 16


def test_partial_booking_blocks_the_whole_slot() -> None:
    result = generate_slots(WORKDAY, [(at(10, 10), at(10, 20))], reference_instant=at(8, 0))

    starts = [slot.start for slot in result['2026-01-05']]
    assert at(10, 0) not in starts
    assert len(starts) == 15


def test_naive_booked_intervals_are_read_as_utc() -> None:
    booked = [(datetime(2026, 1, 5, 9, 0), datetime(2026, 1, 5, 9, 30))]

    result = generate_slots(WORKDAY, booked, reference_instant=at(8, 0))

    assert result['2026-01-05'][0].start == at(9, 30)


def test_slot_in_progress_is_still_offered() -> None:
    result = generate_slots(WORKDAY, [], reference_instant=at(12, 10))

    slots = result['2026-01-05']
    assert slots[0].start == at(12, 0)
    assert len(slots) == 10


def test_slot_ending_exactly_at_reference_is_past() -> None:
    result = generate_slots(WORKDAY, [], reference_instant=at(12, 30))

    assert result['2026-01-05'][0].start == at(12, 30)


def test_reference_after_window_leaves_today_empty_but_present() -> None:
    result = generate_slots(WORKDAY, [], reference_instant=at(18, 0))

    assert result['2026-01-05'] == []
    assert len(result['2026-01-06']) == 16


@pytest.mark.parametrize(
    'window',
    [
        AvailabilityWindow(start_time=time(17, 0), end_time=time(9, 0)),
        AvailabilityWindow(start_time=time(9, 0), end_time=time(9, 0)),
    ],
)
def test_malformed_window_yields_empty_days(window: AvailabilityWindow) -> None:
    result = generate_slots(window, [], reference_instant=at(8, 0))

    assert list(result) == ['2026-01-05', '2026-01-06', '2026-01-07', '2026-01-08']
    assert all(slots == [] for slots in result.values())


def test_missing_window_yields_empty_days() -> None:
    result = generate_slots(None, [], reference_instant=at(8, 0))

    assert len(result) == 4
    assert all(slots == [] for slots in result.values())


def test_unavailable_window_yields_empty_days() -> None:
    window = AvailabilityWindow(start_time=time(9, 0), end_time=time(17, 0), status=AVAILABILITY_UNAVAILABLE)

    result = generate_slots(window, [], reference_instant=at(8, 0))

    assert all(slots == [] for slots in result.values())


@pytest.mark.parametrize(
    ('start', 'end', 'expected'),
    [
        (time(9, 0), time(17, 0), 16),
        (time(8, 15), time(12, 0), 7),
        (time(9, 15), time(10, 50), 3),
        (time(13, 0), time(13, 29), 0),
    ],
)
def test_slot_count_matches_window_length(start: time, end: time, expected: int) -> None:
    window = AvailabilityWindow(start_time=start, end_time=end)

    result = generate_slots(window, [], reference_instant=at(0, 0))

    for slots in result.values():
        assert len(slots) == expected
        for slot in slots:
            assert slot.end - slot.start == timedelta(minutes=30)
        for previous, current in zip(slots, slots[1:]):
            assert previous.end == current.start


def test_slots_are_disjoint_and_strictly_increasing() -> None:
    booked = [(at(9, 45), at(10, 15)), (at(13, 0), at(14, 0))]

    result = generate_slots(WORKDAY, booked, reference_instant=at(8, 0))

    for slots in result.values():
        for previous, current in zip(slots, slots[1:]):
            assert previous.start < current.start
            assert previous.end <= current.start
        for slot in slots:
            for booked_start, booked_end in booked:
                assert not (slot.start < booked_end and booked_start < slot.end)


def test_identical_inputs_give_identical_output() -> None:
    booked = [(at(10, 0), at(11, 0))]

    first = generate_slots(WORKDAY, booked, reference_instant=at(8, 0))
    second = generate_slots(WORKDAY, booked, reference_instant=at(8, 0))

    assert first == second


def test_days_follow_the_doctor_time_zone() -> None:
    tokyo = ZoneInfo('Asia/Tokyo')
    # 20:00 UTC on Jan 5 is already 05:00 on Jan 6 in Tokyo.
    result = generate_slots(WORKDAY, [], reference_instant=at(20, 0), tz=tokyo)

    assert list(result)[0] == '2026-01-06'
    first = result['2026-01-06'][0]
    assert first.start == datetime(2026, 1, 6, 0, 0, tzinfo=UTC)
    assert first.label == '9:00 AM - 9:30 AM'
    assert first.day.isoformat() == '2026-01-06'


def test_slots_stay_thirty_minutes_across_spring_forward() -> None:
    new_york = ZoneInfo('America/New_York')
    window = AvailabilityWindow(start_time=time(1, 0), end_time=time(4, 0))
    # Midnight EST on 2026-03-08, the night clocks jump from 2:00 to 3:00.
    reference = datetime(2026, 3, 8, 5, 0, tzinfo=UTC)

    result = generate_slots(window, [], reference_instant=reference, horizon_days=1, tz=new_york)

    slots = result['2026-03-08']
    assert [slot.label for slot in slots] == [
        '1:00 AM - 1:30 AM',
        '1:30 AM - 3:00 AM',
        '3:00 AM - 3:30 AM',
        '3:30 AM - 4:00 AM',
    ]
    assert all(slot.end - slot.start == timedelta(minutes=30) for slot in slots)
