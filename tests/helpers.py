from datetime import datetime

import pytz

from roomreserve.models import Reservation, ReservationStatus


def at(hour, minute=0, day=20):
    """An aware UTC instant on 2026-10-<day>."""
    return datetime(2026, 10, day, hour, minute, tzinfo=pytz.utc)


def booking_data(room, start, end, **overrides):
    data = {
        'room_id': room.id,
        'user_id': 'user-1',
        'user_email': 'user1@example.com',
        'start_time': start,
        'end_time': end,
        'purpose': 'Team sync',
        'attendees': 2,
    }
    data.update(overrides)
    return data


def assert_no_overlaps():
    """No two non-cancelled reservations of a room may overlap."""
    active = Reservation.query.filter(Reservation.status != ReservationStatus.CANCELLED).all()
    for a in active:
        for b in active:
            if a.id < b.id and a.room_id == b.room_id:
                assert not (a.start_time < b.end_time and a.end_time > b.start_time), (a.id, b.id)
