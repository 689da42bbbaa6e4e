import pytz
from sqlalchemy.types import DateTime, TypeDecorator

from roomreserve.utils.timeutils import to_utc


class UTCDateTime(TypeDecorator):
    """Stores instants as naive UTC and hands them back timezone-aware.

    SQLite drops tzinfo on the way out, so the column does the round trip
    itself instead of relying on the backend.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)
