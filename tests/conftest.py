import pytest

from roomreserve import create_app, db
from roomreserve.config import TestingConfig
from roomreserve.models import Room, RoomType
from roomreserve.services import build_services


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def services(app):
    return build_services(app)


@pytest.fixture
def init_data(app):
    room_small = Room(name='Small', capacity=4, type=RoomType.STUDY_ROOM,
                      building='Library', equipment=['Whiteboard'])
    room_large = Room(name='Large', capacity=20, type=RoomType.CLASSROOM,
                      building='Liberal Arts', equipment=['Projector', 'whiteboard'])
    room_lab = Room(name='Lab', capacity=10, type=RoomType.LAB,
                    building='Science Building', equipment=['Computer'])
    db.session.add_all([room_small, room_large, room_lab])
    db.session.commit()
    return room_small, room_large, room_lab
