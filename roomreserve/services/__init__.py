from collections import namedtuple

from flask import current_app

from roomreserve.services.availability import AvailabilityEngine
from roomreserve.services.booking_service import BookingService
from roomreserve.services.store import ReservationStore, RoomFilter

Services = namedtuple('Services', ['store', 'engine', 'booking'])


def build_services(app=None, session=None) -> Services:
    """Wire store, engine and booking service from an app's config."""
    app = app or current_app._get_current_object()
    store = ReservationStore(session, default_status=app.config['DEFAULT_RESERVATION_STATUS'])
    engine = AvailabilityEngine.from_config(store, app.config)
    booking = BookingService(store, engine, app.extensions['room_locks'])
    return Services(store, engine, booking)


__all__ = [
    'AvailabilityEngine', 'BookingService', 'ReservationStore', 'RoomFilter',
    'Services', 'build_services',
]
