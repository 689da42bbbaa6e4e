import threading
import time

import pytest

from roomreserve import create_app, db
from roomreserve.config import TestingConfig
from roomreserve.errors import Conflict
from roomreserve.models import Reservation, Room, RoomType
from roomreserve.services import AvailabilityEngine, build_services

from helpers import assert_no_overlaps, at

ATTEMPTS = 8


@pytest.fixture
def file_app(tmp_path):
    # Threads need their own connections, so an in-memory database will not do
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'race.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'check_same_thread': False, 'timeout': 30}}

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        room = Room(name='Contested', capacity=10, type=RoomType.MEETING_ROOM)
        db.session.add(room)
        db.session.commit()
        room_id = room.id
    yield app, room_id
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def test_concurrent_overlapping_bookings_only_one_wins(file_app):
    app, room_id = file_app
    barrier = threading.Barrier(ATTEMPTS)
    outcomes = []

    def attempt(i):
        with app.app_context():
            services = build_services(app)
            barrier.wait()
            try:
                services.booking.book({
                    'room_id': room_id,
                    'user_id': f'user-{i}',
                    'user_email': f'user{i}@example.com',
                    # every candidate overlaps every other one
                    'start_time': at(10, i),
                    'end_time': at(11, i),
                    'purpose': 'Race',
                    'attendees': 1,
                })
                outcomes.append('booked')
            except Conflict:
                outcomes.append('conflict')
            finally:
                db.session.remove()

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(ATTEMPTS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(outcomes) == ['booked'] + ['conflict'] * (ATTEMPTS - 1)
    with app.app_context():
        assert Reservation.query.count() == 1
        assert_no_overlaps()


def test_room_locks_are_per_room(file_app):
    app, room_id = file_app
    with app.app_context():
        other = Room(name='Other', capacity=10, type=RoomType.MEETING_ROOM)
        db.session.add(other)
        db.session.commit()
        other_id = other.id
        locks = app.extensions['room_locks']
        assert locks.for_room(room_id) is locks.for_room(room_id)
        assert locks.for_room(room_id) is not locks.for_room(other_id)
        assert locks.for_room(str(room_id)) is locks.for_room(room_id)


def test_int_and_string_room_ids_share_one_lock(file_app, monkeypatch):
    app, room_id = file_app
    original = AvailabilityEngine.find_conflicts

    def slow_find_conflicts(self, *args, **kwargs):
        # Widen the window between the availability read and the write
        time.sleep(0.3)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(AvailabilityEngine, 'find_conflicts', slow_find_conflicts)
    barrier = threading.Barrier(2)
    outcomes = []

    def attempt(requested_id):
        with app.app_context():
            services = build_services(app)
            barrier.wait()
            try:
                services.booking.book({
                    'room_id': requested_id,
                    'user_id': f'user-{requested_id!r}',
                    'user_email': 'someone@example.com',
                    'start_time': at(10),
                    'end_time': at(11),
                    'purpose': 'Race',
                    'attendees': 1,
                })
                outcomes.append('booked')
            except Conflict:
                outcomes.append('conflict')
            finally:
                db.session.remove()

    threads = [threading.Thread(target=attempt, args=(rid,)) for rid in (room_id, str(room_id))]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(outcomes) == ['booked', 'conflict']
    with app.app_context():
        assert Reservation.query.count() == 1
        assert_no_overlaps()
