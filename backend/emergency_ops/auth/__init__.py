from .identity import IdentityProvider, DEMO_ACCOUNTS
from .permissions import Capability, ROLE_CAPABILITIES, has_capability, require, require_status_change

__all__ = [
    "IdentityProvider",
    "DEMO_ACCOUNTS",
    "Capability",
    "ROLE_CAPABILITIES",
    "has_capability",
    "require",
    "require_status_change",
]
