"""
Security utilities: password hashing and JWT handling.
"""

from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from .config import get_config, SecurityConfig
from .exceptions import AuthenticationError


class PasswordHasher:
    """bcrypt hashing for operator passwords."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or get_config().security.password_hash_rounds

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        """True if ``password`` matches ``hashed_password``."""
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))


class TokenManager:
    """JWT token management."""

    def __init__(self, config: Optional[SecurityConfig] = None):
        """
        Initialize token manager.

        Args:
            config: Security configuration
        """
        self.config = config or get_config().security
        self.algorithm = self.config.algorithm

    def create_access_token(
        self,
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create access token.

        Args:
            data: Token payload data
            expires_delta: Token expiration time

        Returns:
            JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.config.access_token_expire_minutes))

        to_encode = data.copy()
        to_encode.update({
            "exp": expire,
            "iat": now,
            "type": "access",
        })

        return jwt.encode(to_encode, self.config.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode JWT token.

        Args:
            token: JWT token

        Returns:
            Decoded token payload

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.algorithm]
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired", details={"error": "token_expired"})
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}", details={"error": "invalid_token"})

        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type", details={"error": "invalid_token"})
        return payload
