"""
Core module containing configuration, logging, errors and security helpers.
"""

from .config import Config, get_config, load_config
from .logging_config import setup_logging, get_logger
from .security import PasswordHasher, TokenManager
from .exceptions import (
    AppException,
    ValidationError,
    NotFoundError,
    InvalidTransitionError,
    SecurityError,
    AuthenticationError,
    PermissionDeniedError,
    PersistenceError,
)

__all__ = [
    # Config
    "Config",
    "get_config",
    "load_config",

    # Logging
    "setup_logging",
    "get_logger",

    # Security
    "PasswordHasher",
    "TokenManager",

    # Exceptions
    "AppException",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "SecurityError",
    "AuthenticationError",
    "PermissionDeniedError",
    "PersistenceError",
]
