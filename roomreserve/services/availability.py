from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from flask import current_app

from roomreserve.errors import InvalidInterval, ValidationError
from roomreserve.models import Reservation, Room
from roomreserve.services.store import ReservationStore, RoomFilter
from roomreserve.utils.timeutils import days_spanned, parse_instant


def intervals_overlap(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """True if [start, end) and [other_start, other_end) share any instant.

    Touching intervals (one ends exactly when the other starts) do not overlap.
    """
    return start < other_end and end > other_start


def normalize_interval(start, end):
    """Aware UTC (start, end), refusing naive or unparseable values and empty intervals."""
    try:
        start, end = parse_instant(start), parse_instant(end)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timestamp: {e}") from e
    if start >= end:
        raise InvalidInterval(start, end)
    return start, end


@dataclass
class PopularRoom:
    room: Room
    booking_count: int

    def to_dict(self):
        data = self.room.to_dict()
        data['booking_count'] = self.booking_count
        return data


@dataclass
class UtilizationStats:
    room_id: int
    period_start: datetime
    period_end: datetime
    total_reservations: int
    total_hours_booked: float
    utilization_percentage: float
    average_reservation_length: float

    def to_dict(self):
        return {
            'room_id': self.room_id,
            'period_start': self.period_start.isoformat(),
            'period_end': self.period_end.isoformat(),
            'total_reservations': self.total_reservations,
            'total_hours_booked': self.total_hours_booked,
            'utilization_percentage': self.utilization_percentage,
            'average_reservation_length': self.average_reservation_length
        }


class AvailabilityEngine:
    """Read-only decisions over the reservation store.

    Every method is a pure function of the current non-cancelled
    reservations; nothing here writes.
    """

    def __init__(self, store: ReservationStore, operating_hours_per_day=12, popular_rooms_limit=5):
        if operating_hours_per_day <= 0:
            raise ValueError("operating_hours_per_day must be positive")
        self.store = store
        self.operating_hours_per_day = operating_hours_per_day
        self.popular_rooms_limit = popular_rooms_limit

    @classmethod
    def from_config(cls, store, config):
        return cls(
            store,
            operating_hours_per_day=config['OPERATING_HOURS_PER_DAY'],
            popular_rooms_limit=config['POPULAR_ROOMS_LIMIT'],
        )

    def find_conflicts(self, room_id, start: datetime, end: datetime) -> List[Reservation]:
        """Non-cancelled reservations of the room that overlap [start, end)."""
        start, end = normalize_interval(start, end)
        room = self.store.get_room(room_id)
        return [
            r for r in self.store.list_reservations_for_room(room.id)
            if intervals_overlap(start, end, r.start_time, r.end_time)
        ]

    def check_availability(self, room_id, start: datetime, end: datetime) -> bool:
        """Check if room is free during interval."""
        return not self.find_conflicts(room_id, start, end)

    def search_available_rooms(self, start: datetime, end: datetime, room_filter: Optional[RoomFilter] = None):
        """Rooms matching the filter that are free for the whole interval.

        An empty list is a normal answer.
        """
        start, end = normalize_interval(start, end)
        available_rooms = []
        for room in self.store.list_rooms(room_filter):
            if self.check_availability(room.id, start, end):
                available_rooms.append(room)
        current_app.logger.debug(
            f"Availability search {start.isoformat()} - {end.isoformat()}: "
            f"{len(available_rooms)} room(s) free"
        )
        return available_rooms

    def rank_popular_rooms(self, limit: Optional[int] = None) -> List[PopularRoom]:
        """Most booked rooms first, ties broken by room id.

        Rooms with no active reservations never appear.
        """
        if limit is None:
            limit = self.popular_rooms_limit
        if limit < 0:
            raise ValidationError(f"limit must be non-negative, got {limit}.")

        counts = Counter(r.room_id for r in self.store.list_active_reservations())
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]

        return [
            PopularRoom(room=self.store.get_room(room_id), booking_count=count)
            for room_id, count in ranked
        ]

    def compute_utilization(self, room_id, period_start: datetime, period_end: datetime) -> UtilizationStats:
        """Share of operating hours booked for reservations starting in the period."""
        period_start, period_end = normalize_interval(period_start, period_end)
        room = self.store.get_room(room_id)

        reservations = self.store.list_reservations_in_range(room.id, period_start, period_end)
        total_hours = sum(r.duration_hours for r in reservations)
        count = len(reservations)

        available_hours = days_spanned(period_start, period_end) * self.operating_hours_per_day
        return UtilizationStats(
            room_id=room.id,
            period_start=period_start,
            period_end=period_end,
            total_reservations=count,
            total_hours_booked=total_hours,
            utilization_percentage=total_hours / available_hours * 100,
            average_reservation_length=total_hours / count if count else 0,
        )
