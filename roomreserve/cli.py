import click
from flask import current_app
from flask.cli import with_appcontext

from roomreserve.errors import ReservationError
from roomreserve.extensions import db
from roomreserve.models import Room, RoomType
from roomreserve.services import build_services
from roomreserve.utils.timeutils import parse_instant

DEFAULT_ROOMS = [
    {"name": "Seminar 101", "building": "Liberal Arts", "location": "1st floor",
     "capacity": 30, "type": RoomType.CLASSROOM, "equipment": ["Projector", "Whiteboard"]},
    {"name": "Chem Lab B", "building": "Science Building", "location": "Basement",
     "capacity": 20, "type": RoomType.LAB, "equipment": ["Computer", "Document Camera"]},
    {"name": "Boardroom", "building": "Business Center", "location": "3rd floor",
     "capacity": 12, "type": RoomType.CONFERENCE_ROOM, "equipment": ["Video Conference", "TV Screen"]},
    {"name": "Quiet Room 2", "building": "Library", "location": "2nd floor",
     "capacity": 4, "type": RoomType.STUDY_ROOM, "equipment": ["Whiteboard"]},
    {"name": "Main Auditorium", "building": "Student Center", "location": "Ground floor",
     "capacity": 250, "type": RoomType.AUDITORIUM, "equipment": ["Audio System", "Projector"]},
]


def seed_rooms(rooms_data=DEFAULT_ROOMS):
    """Insert rooms that do not exist yet (matched by name). Returns the count created."""
    created = 0
    for r_data in rooms_data:
        if not Room.query.filter_by(name=r_data['name']).first():
            db.session.add(Room(**r_data))
            created += 1
    db.session.commit()
    return created


def _fail(e):
    raise click.ClickException(str(e))


@click.command('seed-rooms')
@with_appcontext
def seed_rooms_command():
    """Create tables and the default room catalogue."""
    db.create_all()
    created = seed_rooms()
    click.echo(f"{created} room(s) created.")


@click.command('popular-rooms')
@with_appcontext
@click.option('--limit', type=int, default=None, help='How many rooms to list.')
def popular_rooms_command(limit):
    """Print rooms ranked by active reservations."""
    try:
        ranking = build_services().engine.rank_popular_rooms(limit)
    except ReservationError as e:
        _fail(e)
    if not ranking:
        click.echo("No reservations yet.")
    for position, entry in enumerate(ranking, start=1):
        click.echo(f"{position}. {entry.room.name} ({entry.booking_count})")


@click.command('utilization')
@with_appcontext
@click.argument('room_id', type=int)
@click.argument('start')
@click.argument('end')
def utilization_command(room_id, start, end):
    """Print utilization of ROOM_ID between START and END (ISO 8601)."""
    try:
        stats = build_services().engine.compute_utilization(
            room_id, parse_instant(start), parse_instant(end)
        )
    except (ReservationError, ValueError) as e:
        _fail(e)
    click.echo(f"Reservations: {stats.total_reservations}")
    click.echo(f"Hours booked: {stats.total_hours_booked:.2f}")
    click.echo(f"Utilization: {stats.utilization_percentage:.1f}%")
    click.echo(f"Average length: {stats.average_reservation_length:.2f}h")
    current_app.logger.debug(f"Utilization report for room {room_id}: {stats.to_dict()}")


def register_commands(app):
    app.cli.add_command(seed_rooms_command)
    app.cli.add_command(popular_rooms_command)
    app.cli.add_command(utilization_command)
