from roomreserve.models.room import Room, RoomType
from roomreserve.models.reservation import Reservation, ReservationStatus

__all__ = ['Room', 'RoomType', 'Reservation', 'ReservationStatus']
