from roomreserve import create_app, db
from roomreserve.cli import DEFAULT_ROOMS, seed_rooms

app = create_app()

with app.app_context():
    db.create_all()

    # Create Rooms
    created = seed_rooms(DEFAULT_ROOMS)
    print(f"{created} room(s) created.")
    print("Database seeded successfully.")
