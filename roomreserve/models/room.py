from sqlalchemy.orm import validates
from roomreserve.extensions import db


class RoomType:
    LECTURE_HALL = 'Lecture Hall'
    CLASSROOM = 'Classroom'
    LAB = 'Lab'
    MEETING_ROOM = 'Meeting Room'
    STUDY_ROOM = 'Study Room'
    CONFERENCE_ROOM = 'Conference Room'
    OFFICE = 'Office'
    AUDITORIUM = 'Auditorium'

    ALL = (
        LECTURE_HALL, CLASSROOM, LAB, MEETING_ROOM,
        STUDY_ROOM, CONFERENCE_ROOM, OFFICE, AUDITORIUM,
    )


def normalize_equipment(tags):
    """Strip tags and collapse duplicates case-insensitively, keeping first spelling."""
    seen = set()
    result = []
    for tag in tags or []:
        tag = str(tag).strip()
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        result.append(tag)
    return result


class Room(db.Model):
    __tablename__ = 'rooms'
    __table_args__ = (db.CheckConstraint('capacity > 0', name='check_capacity_positive'),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)
    location = db.Column(db.String(128))
    building = db.Column(db.String(64), index=True)
    capacity = db.Column(db.Integer, nullable=False)
    type = db.Column(db.String(32), nullable=False, default=RoomType.MEETING_ROOM)
    equipment = db.Column(db.JSON, default=list) # e.g. ["Projector", "Whiteboard"]
    is_active = db.Column(db.Boolean, default=True)

    reservations = db.relationship('Reservation', back_populates='room', lazy=True)

    @validates('equipment')
    def _normalize_equipment(self, key, value):
        return normalize_equipment(value)

    @validates('capacity')
    def _check_capacity(self, key, value):
        if value is None or int(value) < 1:
            raise ValueError(f"Room capacity must be a positive integer, got {value!r}.")
        return int(value)

    @validates('type')
    def _check_type(self, key, value):
        if value not in RoomType.ALL:
            raise ValueError(f"Unknown room type {value!r}.")
        return value

    def has_any_equipment(self, wanted) -> bool:
        room_eq_lower = {e.lower() for e in (self.equipment or [])}
        return any(w.strip().lower() in room_eq_lower for w in wanted)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'building': self.building,
            'capacity': self.capacity,
            'type': self.type,
            'equipment': self.equipment,
            'is_active': self.is_active
        }
