from buildquote.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from buildquote.database.engine import async_session, engine
from buildquote.database.session import get_db

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "async_session",
    "engine",
    "get_db",
]
