from flask import Flask
from roomreserve.config import DevelopmentConfig
from roomreserve.extensions import db, migrate

def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from roomreserve import models  # noqa: F401  register tables with metadata
    from roomreserve.services.booking_service import RoomLocks
    app.extensions['room_locks'] = RoomLocks()

    from roomreserve.cli import register_commands
    register_commands(app)

    return app
