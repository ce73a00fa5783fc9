"""
Repository owning the authoritative in-memory incident set.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..core.exceptions import NotFoundError, ValidationError
from .models import Incident

logger = logging.getLogger(__name__)


class IncidentRepository:
    """
    Owned, lock-guarded collection of incidents.

    Reads return immutable snapshots. Writes swap whole records under a
    single re-entrant lock, so a caller that reads, validates and writes
    inside ``locked()`` can never interleave with another writer.
    """

    def __init__(self, incidents: Optional[Iterable[Incident]] = None):
        self._incidents: Dict[str, Incident] = {}
        self._lock = threading.RLock()
        if incidents:
            self.load(incidents)

    @contextmanager
    def locked(self) -> Iterator["IncidentRepository"]:
        """Hold the write lock for a read-validate-write sequence."""
        with self._lock:
            yield self

    def __len__(self) -> int:
        return len(self._incidents)

    def __contains__(self, incident_id: object) -> bool:
        return incident_id in self._incidents

    def get(self, incident_id: str) -> Incident:
        """
        Get an incident by ID.

        Raises:
            NotFoundError: If no incident has this ID
        """
        incident = self._incidents.get(incident_id)
        if incident is None:
            raise NotFoundError(
                message=f"Incident with ID {incident_id} not found",
                resource_type="incident",
                resource_id=incident_id,
            )
        return incident

    def find(self, incident_id: str) -> Optional[Incident]:
        return self._incidents.get(incident_id)

    def snapshot(self) -> Tuple[Incident, ...]:
        """All incidents in insertion order."""
        with self._lock:
            return tuple(self._incidents.values())

    def add(self, incident: Incident) -> Incident:
        """
        Add a new incident.

        Raises:
            ValidationError: If the ID is already taken
        """
        with self._lock:
            if incident.id in self._incidents:
                raise ValidationError(
                    f"Incident with ID {incident.id} already exists",
                    field_errors={"id": ["duplicate identifier"]},
                )
            self._incidents[incident.id] = incident
        logger.debug(f"Incident added: {incident.id}")
        return incident

    def replace(self, incident: Incident) -> Incident:
        """Swap in a new version of an existing incident."""
        with self._lock:
            current = self.get(incident.id)
            if current.created_at != incident.created_at:
                raise ValidationError(
                    "createdAt is immutable",
                    field_errors={"created_at": ["cannot be changed"]},
                )
            self._incidents[incident.id] = incident
        return incident

    def load(self, incidents: Iterable[Incident]) -> None:
        """Replace the whole collection."""
        incoming = {}
        for incident in incidents:
            incoming[incident.id] = incident
        with self._lock:
            self._incidents = incoming
        logger.info(f"Incident repository loaded with {len(incoming)} incidents")
