import threading
from datetime import datetime
from typing import Optional

from flask import current_app

from roomreserve.errors import Conflict, ValidationError
from roomreserve.models import Reservation
from roomreserve.services.availability import AvailabilityEngine, normalize_interval
from roomreserve.services.store import ReservationStore, coerce_room_id
from roomreserve.utils.timeutils import parse_instant, utcnow


class RoomLocks:
    """One mutex per room id, so check+write for a room runs one at a time."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def for_room(self, room_id) -> threading.Lock:
        room_id = coerce_room_id(room_id)
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock

    def __contains__(self, room_id):
        with self._guard:
            return room_id in self._locks

    def __len__(self):
        with self._guard:
            return len(self._locks)


class BookingService:
    """Command surface: create and cancel reservations.

    Booking is serialized per room. The in-process lock covers threads of
    one worker; the row lock on the room (SELECT ... FOR UPDATE) covers
    separate processes on backends that honour it.
    """

    def __init__(self, store: ReservationStore, engine: AvailabilityEngine, locks: RoomLocks):
        self.store = store
        self.engine = engine
        self.locks = locks

    def create_reservation(self, data: dict) -> Reservation:
        """
        Main entry point to book a room.
        Raises Conflict if the interval overlaps a non-cancelled reservation.
        """
        missing = [name for name in ('room_id', 'start_time', 'end_time') if data.get(name) is None]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}.")
        start, end = normalize_interval(data['start_time'], data['end_time'])

        # Resolve before locking so the lock is keyed by the real primary key
        # and unknown ids never get a lock of their own
        room_id = self.store.get_room(data['room_id']).id

        with self.locks.for_room(room_id):
            try:
                # Row lock held until the store commits the new record
                self.store.get_room(room_id, for_update=True)

                conflicts = self.engine.find_conflicts(room_id, start, end)
                if conflicts:
                    current_app.logger.info(
                        f"Booking refused for room {room_id}: overlaps reservation {conflicts[0].id}"
                    )
                    raise Conflict(room_id, conflicts[0].id)

                reservation = self.store.create_reservation(
                    dict(data, room_id=room_id, start_time=start, end_time=end)
                )
            except Exception:
                # Nothing partial may survive a failed booking, and the row lock must go
                self.store.session.rollback()
                raise

        current_app.logger.info(f"Reservation {reservation.id} booked by {reservation.user_email}")
        return reservation

    book = create_reservation

    def cancel_reservation(self, reservation_id) -> None:
        self.store.cancel_reservation(reservation_id)

    def split_user_reservations(self, user_id, now: Optional[datetime] = None):
        """Split a user's reservations into (upcoming, past).

        Upcoming: not cancelled and starting after `now`, soonest first. This
        is the reverse of list_reservations_for_user, which is newest first.
        Past: everything else (including cancelled), most recent first.
        """
        now = parse_instant(now) if now is not None else utcnow()
        reservations = self.store.list_reservations_for_user(user_id)
        upcoming = [r for r in reservations if not r.is_cancelled and r.start_time > now]
        past = [r for r in reservations if r.is_cancelled or r.start_time <= now]
        upcoming.reverse()
        return upcoming, past
