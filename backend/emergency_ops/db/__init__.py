from .base import Base
from .models import ReportRecord
from .session import build_engine, build_session_factory, create_tables, session_scope

__all__ = [
    "Base",
    "ReportRecord",
    "build_engine",
    "build_session_factory",
    "create_tables",
    "session_scope",
]
