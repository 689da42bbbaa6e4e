from roomreserve.cli import DEFAULT_ROOMS
from roomreserve.models import Room

from helpers import at, booking_data


def test_seed_rooms_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed-rooms'])
    assert result.exit_code == 0
    assert f"{len(DEFAULT_ROOMS)} room(s) created." in result.output

    result = runner.invoke(args=['seed-rooms'])
    assert "0 room(s) created." in result.output
    assert Room.query.count() == len(DEFAULT_ROOMS)


def test_popular_rooms_command(app, services, init_data):
    small, large, _ = init_data
    runner = app.test_cli_runner()
    assert "No reservations yet." in runner.invoke(args=['popular-rooms']).output

    services.booking.book(booking_data(large, at(9), at(10)))
    services.booking.book(booking_data(large, at(10), at(11)))
    services.booking.book(booking_data(small, at(9), at(10)))

    result = runner.invoke(args=['popular-rooms', '--limit', '1'])
    assert result.exit_code == 0
    assert "1. Large (2)" in result.output
    assert "Small" not in result.output


def test_utilization_command(app, services, init_data):
    small, _, _ = init_data
    services.booking.book(booking_data(small, at(9), at(12)))
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'utilization', str(small.id), '2026-10-20T00:00:00Z', '2026-10-21T00:00:00Z'])
    assert result.exit_code == 0
    assert "Reservations: 1" in result.output
    assert "Utilization: 25.0%" in result.output


def test_utilization_command_reports_errors(app, init_data):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['utilization', '999', '2026-10-20T00:00:00Z', '2026-10-21T00:00:00Z'])
    assert result.exit_code != 0
    assert "not found" in result.output
