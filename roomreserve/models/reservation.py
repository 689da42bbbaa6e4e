from roomreserve.extensions import db
from roomreserve.models.types import UTCDateTime
from roomreserve.utils.timeutils import hours_between, utcnow


class ReservationStatus:
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'

    ALL = (PENDING, CONFIRMED, CANCELLED)
    BOOKABLE = (PENDING, CONFIRMED)


class Reservation(db.Model):
    __tablename__ = 'reservations'
    __table_args__ = (
        db.CheckConstraint('start_time < end_time', name='check_interval_ordered'),
        db.CheckConstraint('attendees >= 1', name='check_attendees_positive'),
    )

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False, index=True)
    # Owner identity comes from the external auth provider
    user_id = db.Column(db.String(128), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=False)

    start_time = db.Column(UTCDateTime, nullable=False, index=True)
    end_time = db.Column(UTCDateTime, nullable=False, index=True)

    purpose = db.Column(db.Text, nullable=False)
    attendees = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(20), nullable=False, default=ReservationStatus.CONFIRMED, index=True)

    created_at = db.Column(UTCDateTime, nullable=False, default=utcnow)
    cancelled_at = db.Column(UTCDateTime)

    room = db.relationship('Room', back_populates='reservations')

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED

    @property
    def duration_hours(self) -> float:
        return hours_between(self.start_time, self.end_time)

    def to_dict(self):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'user_id': self.user_id,
            'user_email': self.user_email,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
            'purpose': self.purpose,
            'attendees': self.attendees,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'cancelled_at': self.cancelled_at.isoformat() if self.cancelled_at else None
        }
