from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import re

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DAYS: tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

PERIODS: tuple[tuple[str, str], ...] = (
    ("09:00", "10:00"),
    ("10:00", "11:00"),
    ("11:15", "12:15"),
    ("12:15", "13:15"),
    ("14:00", "15:00"),
    ("15:00", "16:00"),
)


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return parse_time_to_minutes(start_a) < parse_time_to_minutes(end_b) and parse_time_to_minutes(
        end_a
    ) > parse_time_to_minutes(start_b)


@dataclass(frozen=True)
class TimeSlotKey:
    day: str
    start_time: str
    end_time: str

    @property
    def time_key(self) -> str:
        return f"{self.start_time}-{self.end_time}"


SLOT_CATALOG: tuple[TimeSlotKey, ...] = tuple(
    TimeSlotKey(day=day, start_time=start, end_time=end) for day in DAYS for start, end in PERIODS
)


def max_attempts(room_count: int) -> int:
    return len(DAYS) * len(PERIODS) * max(1, room_count)


def iter_slot_attempts(room_count: int) -> Iterator[TimeSlotKey]:
    """Yield candidate slots for one demand item, walking the week round-robin.

    Attempt ``n`` lands on day ``(n // periods) % days`` and period
    ``n % periods``. The walk stops after ``days * periods * max(1, room_count)``
    attempts, so with more than one room the week is revisited once per room.
    """
    for attempt in range(max_attempts(room_count)):
        day = DAYS[(attempt // len(PERIODS)) % len(DAYS)]
        start, end = PERIODS[attempt % len(PERIODS)]
        yield TimeSlotKey(day=day, start_time=start, end_time=end)


class SlotCalendar:
    """Per-owner reservation sets over the weekly slot catalog.

    Owners (faculty ids, room ids) are created lazily on first lookup. One
    instance belongs to one allocator call.
    """

    def __init__(self) -> None:
        self._busy: dict[str, set[TimeSlotKey]] = defaultdict(set)

    def is_free(self, owner_id: str, slot: TimeSlotKey) -> bool:
        return slot not in self._busy[owner_id]

    def reserve(self, owner_id: str, slot: TimeSlotKey) -> None:
        # Callers check is_free first; a second reserve is not reported.
        self._busy[owner_id].add(slot)

    def reserve_many(self, owner_id: str, slots: Iterable[TimeSlotKey]) -> None:
        for slot in slots:
            self.reserve(owner_id, slot)

    def first_free(self, owner_ids: Iterable[str], slot: TimeSlotKey) -> str | None:
        for owner_id in owner_ids:
            if self.is_free(owner_id, slot):
                return owner_id
        return None

    def load(self, owner_id: str) -> int:
        return len(self._busy.get(owner_id, ()))

    def busy_count(self, slot: TimeSlotKey, *, exclude: Iterable[str] = ()) -> int:
        excluded = set(exclude)
        return sum(
            1 for owner_id, slots in self._busy.items() if owner_id not in excluded and slot in slots
        )

    def owners(self) -> list[str]:
        return list(self._busy)

    def reserved_slots(self, owner_id: str) -> set[TimeSlotKey]:
        return set(self._busy.get(owner_id, ()))
