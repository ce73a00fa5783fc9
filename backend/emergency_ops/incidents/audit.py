"""
Append-only activity log, admin notes and notifications.
"""

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .enums import ActivityAction
from .models import ActivityLogEntry, AdminNote, Notification, User

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class AuditSink:
    """
    Records every accepted incident mutation.

    Entries are stored oldest-first and read newest-first. Notification
    ``read`` flags only ever move from False to True.
    """

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self._entries: List[ActivityLogEntry] = []
        self._notes: List[AdminNote] = []
        self._notifications: List[Notification] = []
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Activity log
    # ------------------------------------------------------------------

    def record(self, incident_id: str, action: ActivityAction, details: str, user: User) -> ActivityLogEntry:
        entry = ActivityLogEntry(
            id=generate_id("log"),
            incident_id=incident_id,
            action=action,
            details=details,
            user_id=user.id,
            user_name=user.name,
            timestamp=self.clock(),
        )
        with self._lock:
            self._entries.append(entry)
        logger.info(
            f"{action.value} on {incident_id} by {user.id}: {details}",
            extra={"incident_id": incident_id, "user_id": user.id, "action": action.value},
        )
        return entry

    def activity(self, incident_id: Optional[str] = None) -> List[ActivityLogEntry]:
        """Activity entries, newest first, optionally for one incident."""
        with self._lock:
            entries = list(self._entries)
        if incident_id is not None:
            entries = [e for e in entries if e.incident_id == incident_id]
        entries.reverse()
        return entries

    # ------------------------------------------------------------------
    # Admin notes
    # ------------------------------------------------------------------

    def append_note(self, incident_id: str, content: str, user: User) -> AdminNote:
        note = AdminNote(
            id=generate_id("note"),
            incident_id=incident_id,
            content=content,
            author_id=user.id,
            author_name=user.name,
            created_at=self.clock(),
        )
        with self._lock:
            self._notes.append(note)
        return note

    def notes(self, incident_id: str) -> List[AdminNote]:
        with self._lock:
            notes = [n for n in self._notes if n.incident_id == incident_id]
        notes.reverse()
        return notes

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notify(self, title: str, message: str, incident_id: Optional[str] = None) -> Notification:
        notification = Notification(
            id=generate_id("notif"),
            title=title,
            message=message,
            created_at=self.clock(),
            incident_id=incident_id,
        )
        with self._lock:
            self._notifications.append(notification)
        logger.debug(f"Notification raised: {title}")
        return notification

    def notifications(self, unread_only: bool = False) -> List[Notification]:
        with self._lock:
            items = list(self._notifications)
        if unread_only:
            items = [n for n in items if not n.read]
        items.reverse()
        return items

    def mark_notification_read(self, notification_id: str) -> None:
        """Flip ``read`` to True. Unknown IDs are ignored."""
        with self._lock:
            for index, notification in enumerate(self._notifications):
                if notification.id == notification_id:
                    if not notification.read:
                        self._notifications[index] = replace(notification, read=True)
                    return

    def mark_all_notifications_read(self) -> int:
        with self._lock:
            changed = 0
            for index, notification in enumerate(self._notifications):
                if not notification.read:
                    self._notifications[index] = replace(notification, read=True)
                    changed += 1
        return changed

    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._notifications if not n.read)

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    def load(
        self,
        entries: Optional[List[ActivityLogEntry]] = None,
        notes: Optional[List[AdminNote]] = None,
        notifications: Optional[List[Notification]] = None,
    ) -> None:
        """Replace stored records; inputs are oldest first."""
        with self._lock:
            if entries is not None:
                self._entries = list(entries)
            if notes is not None:
                self._notes = list(notes)
            if notifications is not None:
                self._notifications = list(notifications)
