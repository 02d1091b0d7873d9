from .database import init_db, close_db, get_db_session, JsonDataStore
from .config import settings, setup_logging
from .exceptions import (
    custom_http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)


__all__ = [
    "settings",
    "init_db",
    "close_db",
    "get_db_session",
    "JsonDataStore",
    "setup_logging",
    "custom_http_exception_handler",
    "validation_exception_handler",
    "unhandled_exception_handler",
]
