"""Free-slot derivation from a doctor's recurring daily window.

Everything here is pure: the same window, bookings and reference instant
always give the same slots. Callers recompute on every request.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Protocol
from zoneinfo import ZoneInfo

from telehealth.core.time_utils import as_utc, format_clock, intervals_overlap, local_instant
from telehealth.models.availability import AVAILABILITY_AVAILABLE

SLOT_DURATION_MINUTES = 30
SLOT_HORIZON_DAYS = 4


class DailyWindow(Protocol):
    start_time: time
    end_time: time


@dataclass(frozen=True)
class AvailabilityWindow:
    start_time: time
    end_time: time
    status: str = AVAILABILITY_AVAILABLE


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime
    label: str
    day: date


def _is_open(window: DailyWindow | None) -> bool:
    if window is None:
        return False
    return getattr(window, 'status', AVAILABILITY_AVAILABLE) == AVAILABILITY_AVAILABLE


def generate_slots(
    window: DailyWindow | None,
    booked_intervals: Iterable[tuple[datetime, datetime]],
    reference_instant: datetime,
    horizon_days: int = SLOT_HORIZON_DAYS,
    tz: ZoneInfo | timezone = timezone.utc,
) -> dict[str, list[Slot]]:
    """Return free slots keyed by local ISO date, days and slots ascending.

    ``booked_intervals`` must only contain SCHEDULED appointments. Every day of
    the horizon is present, with an empty list when nothing is bookable.
    """
    reference = as_utc(reference_instant)
    booked = [(as_utc(start), as_utc(end)) for start, end in booked_intervals]
    step = timedelta(minutes=SLOT_DURATION_MINUTES)
    first_day = reference.astimezone(tz).date()

    slots_by_day: dict[str, list[Slot]] = {}
    for offset in range(horizon_days):
        day = first_day + timedelta(days=offset)
        day_slots: list[Slot] = []
        slots_by_day[day.isoformat()] = day_slots

        if not _is_open(window):
            continue

        day_start = local_instant(day, window.start_time, tz)
        day_end = local_instant(day, window.end_time, tz)
        if day_end <= day_start:
            continue

        # Stepping on UTC instants keeps every slot exactly 30 real minutes across DST changes.
        cursor = day_start
        while cursor < day_end:
            slot_end = cursor + step
            if slot_end > day_end:
                break
            if slot_end <= reference:
                cursor = slot_end
                continue
            if not any(intervals_overlap(cursor, slot_end, start, end) for start, end in booked):
                local_start = cursor.astimezone(tz)
                local_end = slot_end.astimezone(tz)
                day_slots.append(
                    Slot(
                        start=cursor,
                        end=slot_end,
                        label=f'{format_clock(local_start)} - {format_clock(local_end)}',
                        day=day,
                    )
                )
            cursor = slot_end

    return slots_by_day
