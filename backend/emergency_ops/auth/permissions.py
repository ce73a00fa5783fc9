"""
Role gate: which operator roles may run which incident commands.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..core.exceptions import PermissionDeniedError
from ..incidents.enums import IncidentStatus, UserRole
from ..incidents.models import User


class Capability(str, Enum):
    """Incident commands subject to the role gate."""
    VERIFY = "verify"
    MARK_FALSE = "mark_false"
    MARK_DUPLICATE = "mark_duplicate"
    ASSIGN_DEPARTMENT = "assign_department"
    SET_STATUS = "set_status"
    SET_SEVERITY = "set_severity"
    ADD_NOTE = "add_note"
    REFRESH = "refresh"


ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.ADMIN: frozenset(Capability),
    UserRole.RESPONDER: frozenset({
        Capability.VERIFY,
        Capability.ADD_NOTE,
        Capability.SET_STATUS,
    }),
}

# Status changes a responder may make from the field. Everything else
# reachable through set_status is an admin override.
RESPONDER_STATUS_TRANSITIONS = frozenset({
    (IncidentStatus.ASSIGNED, IncidentStatus.IN_PROGRESS),
    (IncidentStatus.IN_PROGRESS, IncidentStatus.RESOLVED),
})


def has_capability(user: Optional[User], capability: Capability) -> bool:
    if user is None:
        return False
    return capability in ROLE_CAPABILITIES.get(user.role, frozenset())


def require(user: Optional[User], capability: Capability) -> None:
    """
    Ensure ``user`` holds ``capability``.

    Raises:
        PermissionDeniedError: If the user is missing or the role lacks it
    """
    if not has_capability(user, capability):
        role = user.role.value if user else "anonymous"
        raise PermissionDeniedError(
            f"Role {role} may not {capability.value.replace('_', ' ')}",
            required_permissions=[capability.value],
        )


def require_status_change(user: User, current: IncidentStatus, target: IncidentStatus) -> None:
    """Gate a set_status call; responders only get the field transitions."""
    require(user, Capability.SET_STATUS)
    if user.role == UserRole.ADMIN:
        return
    if (current, target) not in RESPONDER_STATUS_TRANSITIONS:
        raise PermissionDeniedError(
            f"Role {user.role.value} may not change status from {current.value} to {target.value}",
            required_permissions=["status_override"],
        )
