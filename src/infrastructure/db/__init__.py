from . import models  # noqa: F401
from .base import Base
from .session import bounded, get_session, get_session_factory

__all__ = ["Base", "bounded", "get_session", "get_session_factory"]
