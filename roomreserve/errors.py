"""Typed failures raised by the reservation store and availability engine.

None of these are fatal to the process; callers translate them into
user-facing messages or retry prompts.
"""


class ReservationError(Exception):
    """Base class for every failure surfaced by the reservation core."""


class NotFound(ReservationError):
    """Unknown room or reservation id."""

    def __init__(self, kind, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found.")


class ValidationError(ReservationError, ValueError):
    """A required field is missing or malformed."""


class InvalidInterval(ReservationError, ValueError):
    """Start is not strictly before end."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid interval: start {start} must be before end {end}.")


class InvalidAttendeeCount(ReservationError, ValueError):
    def __init__(self, attendees, capacity):
        self.attendees = attendees
        self.capacity = capacity
        super().__init__(
            f"Room capacity error: Room holds {capacity}, requested {attendees}."
        )


class Conflict(ReservationError):
    """The interval overlaps an existing reservation, or lost a booking race."""

    def __init__(self, room_id, conflicting_id=None):
        self.room_id = room_id
        self.conflicting_id = conflicting_id
        message = f"Room {room_id} is already booked for this interval."
        if conflicting_id is not None:
            message += f" (reservation {conflicting_id})"
        super().__init__(message)


class StorageError(ReservationError):
    """Database I/O failure. Transient; the caller may retry."""
