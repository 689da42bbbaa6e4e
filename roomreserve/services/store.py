from dataclasses import dataclass, field
from datetime import datetime
from functools import wraps
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from roomreserve.errors import (
    InvalidAttendeeCount,
    InvalidInterval,
    NotFound,
    StorageError,
    ValidationError,
)
from roomreserve.extensions import db
from roomreserve.models import Reservation, ReservationStatus, Room
from roomreserve.utils.timeutils import parse_instant, utcnow

REQUIRED_RESERVATION_FIELDS = (
    'room_id', 'user_id', 'user_email', 'start_time', 'end_time', 'purpose', 'attendees',
)


@dataclass
class RoomFilter:
    """Optional criteria for listing rooms. Unset fields match everything."""
    min_capacity: Optional[int] = None
    type: Optional[str] = None
    building: Optional[str] = None
    # any-of match, case insensitive
    required_equipment: List[str] = field(default_factory=list)

    def matches(self, room: Room) -> bool:
        if self.min_capacity is not None and room.capacity < self.min_capacity:
            return False
        if self.type and room.type != self.type:
            return False
        if self.building and room.building != self.building:
            return False
        if self.required_equipment and not room.has_any_equipment(self.required_equipment):
            return False
        return True


def coerce_room_id(room_id) -> int:
    """Room ids are integers; digit strings from a web layer are accepted."""
    if isinstance(room_id, int) and not isinstance(room_id, bool):
        return room_id
    if isinstance(room_id, str) and room_id.strip().isdigit():
        return int(room_id.strip())
    raise ValidationError(f"Invalid room id {room_id!r}.")


def storage_errors(f):
    """Roll back and re-raise database failures as StorageError."""
    @wraps(f)
    def decorated(self, *args, **kwargs):
        try:
            return f(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Storage failure in {f.__name__}: {e}")
            raise StorageError(str(e)) from e
    return decorated


class ReservationStore:
    """Durable CRUD over rooms and reservations.

    The store never checks overlap; that belongs to the availability engine,
    which the booking service runs before any write reaches this class.
    """

    def __init__(self, session=None, default_status=ReservationStatus.CONFIRMED):
        if default_status not in ReservationStatus.BOOKABLE:
            raise ValueError(f"Unsupported default reservation status {default_status!r}")
        self.session = session if session is not None else db.session
        self.default_status = default_status

    # --- ROOMS ---

    @storage_errors
    def list_rooms(self, room_filter: Optional[RoomFilter] = None, include_inactive=False):
        query = self.session.query(Room)
        if not include_inactive:
            query = query.filter(Room.is_active.is_(True))
        if room_filter is not None:
            # Equipment is a JSON column, so that part is matched in Python
            if room_filter.min_capacity is not None:
                query = query.filter(Room.capacity >= room_filter.min_capacity)
            if room_filter.type:
                query = query.filter(Room.type == room_filter.type)
            if room_filter.building:
                query = query.filter(Room.building == room_filter.building)
        rooms = query.order_by(Room.id).all()
        if room_filter is not None and room_filter.required_equipment:
            rooms = [r for r in rooms if room_filter.matches(r)]
        return rooms

    @storage_errors
    def get_room(self, room_id, for_update=False) -> Room:
        room_id = coerce_room_id(room_id)
        if for_update:
            room = self.session.query(Room).filter(Room.id == room_id).with_for_update().first()
        else:
            room = self.session.get(Room, room_id)
        if room is None:
            raise NotFound('Room', room_id)
        return room

    # --- RESERVATIONS ---

    @storage_errors
    def get_reservation(self, reservation_id) -> Reservation:
        reservation = self.session.get(Reservation, reservation_id)
        if reservation is None:
            raise NotFound('Reservation', reservation_id)
        return reservation

    @storage_errors
    def list_reservations_for_room(self, room_id, include_cancelled=False):
        room_id = coerce_room_id(room_id)
        query = self.session.query(Reservation).filter(Reservation.room_id == room_id)
        if not include_cancelled:
            query = query.filter(Reservation.status != ReservationStatus.CANCELLED)
        return query.order_by(Reservation.start_time, Reservation.id).all()

    @storage_errors
    def list_reservations_for_user(self, user_id):
        return self.session.query(Reservation).filter(
            Reservation.user_id == user_id
        ).order_by(Reservation.start_time.desc(), Reservation.id.desc()).all()

    @storage_errors
    def list_reservations_in_range(self, room_id, start: datetime, end: datetime):
        """Non-cancelled reservations of a room starting in [start, end)."""
        room_id = coerce_room_id(room_id)
        return self.session.query(Reservation).filter(
            Reservation.room_id == room_id,
            Reservation.status != ReservationStatus.CANCELLED,
            Reservation.start_time >= start,
            Reservation.start_time < end
        ).order_by(Reservation.start_time).all()

    @storage_errors
    def list_active_reservations(self):
        return self.session.query(Reservation).filter(
            Reservation.status != ReservationStatus.CANCELLED
        ).order_by(Reservation.id).all()

    def _validate(self, data: dict) -> dict:
        missing = [
            name for name in REQUIRED_RESERVATION_FIELDS
            if data.get(name) is None or (isinstance(data.get(name), str) and not data[name].strip())
        ]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}.")

        try:
            start = parse_instant(data['start_time'])
            end = parse_instant(data['end_time'])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid timestamp: {e}") from e
        if start >= end:
            raise InvalidInterval(start, end)

        attendees = data['attendees']
        if isinstance(attendees, bool) or not isinstance(attendees, int):
            raise ValidationError(f"Attendees must be an integer, got {attendees!r}.")

        status = data.get('status') or self.default_status
        if status not in ReservationStatus.BOOKABLE:
            raise ValidationError(f"Cannot create a reservation with status {status!r}.")

        return {
            'room_id': coerce_room_id(data['room_id']),
            'user_id': str(data['user_id']),
            'user_email': str(data['user_email']).strip(),
            'start_time': start,
            'end_time': end,
            'purpose': str(data['purpose']).strip(),
            'attendees': attendees,
            'status': status,
        }

    @storage_errors
    def create_reservation(self, data: dict) -> Reservation:
        """Validate and persist a reservation. Overlap is NOT checked here."""
        fields = self._validate(data)

        room = self.get_room(fields['room_id'])
        if not 1 <= fields['attendees'] <= room.capacity:
            raise InvalidAttendeeCount(fields['attendees'], room.capacity)

        reservation = Reservation(created_at=utcnow(), **fields)
        self.session.add(reservation)
        self.session.commit()
        current_app.logger.info(
            f"Reservation {reservation.id} stored for room {room.id} "
            f"({reservation.start_time.isoformat()} - {reservation.end_time.isoformat()})"
        )
        return reservation

    @storage_errors
    def cancel_reservation(self, reservation_id) -> None:
        """Mark a reservation cancelled. Cancelling twice is a no-op."""
        reservation = self.get_reservation(reservation_id)
        if reservation.is_cancelled:
            return

        # Conditional update so a concurrent cancel cannot rewrite cancelled_at
        updated = self.session.query(Reservation).filter(
            Reservation.id == reservation_id,
            Reservation.status != ReservationStatus.CANCELLED
        ).update(
            {'status': ReservationStatus.CANCELLED, 'cancelled_at': utcnow()},
            synchronize_session='fetch'
        )
        self.session.commit()
        if updated:
            current_app.logger.info(f"Reservation {reservation_id} cancelled")
