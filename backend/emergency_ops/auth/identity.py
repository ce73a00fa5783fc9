"""
Identity provider for dashboard operators.

Ships with the two demo accounts of the dashboard. Production deployments
must replace them with real credential verification.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.exceptions import AuthenticationError, ValidationError
from ..core.security import PasswordHasher
from ..incidents.enums import UserRole
from ..incidents.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Account:
    user: User
    password_hash: str


DEMO_ACCOUNTS = (
    ("admin-001", "John Commander", "admin@emergency.gov", "admin123", UserRole.ADMIN),
    ("responder-001", "Alex Responder", "responder@emergency.gov", "responder123", UserRole.RESPONDER),
)


class IdentityProvider:
    """Maps a credential check to a ``User`` with a role."""

    def __init__(self, hasher: Optional[PasswordHasher] = None):
        self.hasher = hasher or PasswordHasher()
        self._accounts: Dict[str, _Account] = {}
        self._by_id: Dict[str, User] = {}

    @classmethod
    def with_demo_accounts(cls, hasher: Optional[PasswordHasher] = None) -> "IdentityProvider":
        provider = cls(hasher)
        for user_id, name, email, password, role in DEMO_ACCOUNTS:
            provider.register(User(id=user_id, name=name, email=email, role=role), password)
        return provider

    def register(self, user: User, password: str) -> User:
        """Add an account. Emails are matched case-insensitively."""
        email = user.email.strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")
        if email in self._accounts:
            raise ValidationError(f"Account {email} already exists")
        self._accounts[email] = _Account(user=user, password_hash=self.hasher.hash_password(password))
        self._by_id[user.id] = user
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            AuthenticationError: On unknown email or wrong password
        """
        account = self._accounts.get((email or "").strip().lower())
        if account is None or not password or not self.hasher.verify_password(password, account.password_hash):
            logger.warning(f"Failed login attempt for {email!r}")
            raise AuthenticationError("Invalid credentials or insufficient permissions")
        logger.info(f"User {account.user.id} authenticated with role {account.user.role.value}")
        return account.user

    def get_user(self, user_id: str) -> User:
        user = self._by_id.get(user_id)
        if user is None:
            raise AuthenticationError("Unknown user")
        return user
