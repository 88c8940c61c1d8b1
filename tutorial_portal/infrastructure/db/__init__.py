from . import models  # noqa: F401
from .base import Base, UTCDateTime
from .session import get_session, get_session_factory

__all__ = ["Base", "UTCDateTime", "get_session", "get_session_factory"]
