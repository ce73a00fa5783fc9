"""
Ranking, filtering and dashboard aggregates over incident snapshots.

Everything here is a pure function of its input: nothing is cached and
nothing is mutated, so the numbers can never drift from the records.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .enums import IncidentSeverity, IncidentStatus, IncidentType
from .models import Incident


def rank_key(incident: Incident) -> Tuple[bool, float, int, datetime]:
    """
    Sort key, ascending:

    1. CRITICAL before everything else
    2. higher priority score first
    3. more upvotes first
    4. oldest first
    """
    return (
        incident.severity != IncidentSeverity.CRITICAL,
        -incident.priority,
        -incident.upvotes,
        incident.created_at,
    )


def rank(incidents: Iterable[Incident]) -> List[Incident]:
    """Return a new list in priority order. ``sorted`` keeps ties stable."""
    return sorted(incidents, key=rank_key)


@dataclass(frozen=True)
class IncidentFilter:
    """
    Predicate set for incident lists. Empty criteria match everything;
    applied criteria combine with AND.
    """
    statuses: FrozenSet[IncidentStatus] = field(default_factory=frozenset)
    severities: FrozenSet[IncidentSeverity] = field(default_factory=frozenset)
    types: FrozenSet[IncidentType] = field(default_factory=frozenset)
    areas: FrozenSet[str] = field(default_factory=frozenset)
    search: Optional[str] = None

    @classmethod
    def build(
        cls,
        statuses: Optional[Iterable[IncidentStatus]] = None,
        severities: Optional[Iterable[IncidentSeverity]] = None,
        types: Optional[Iterable[IncidentType]] = None,
        areas: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
    ) -> "IncidentFilter":
        return cls(
            statuses=frozenset(IncidentStatus(s) for s in statuses or ()),
            severities=frozenset(IncidentSeverity(s) for s in severities or ()),
            types=frozenset(IncidentType(t) for t in types or ()),
            areas=frozenset(a.strip().lower() for a in areas or () if a.strip()),
            search=search.strip().lower() if search and search.strip() else None,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.statuses or self.severities or self.types or self.areas or self.search)

    def matches(self, incident: Incident) -> bool:
        if self.statuses and incident.status not in self.statuses:
            return False
        if self.severities and incident.severity not in self.severities:
            return False
        if self.types and incident.type not in self.types:
            return False
        if self.areas and incident.location.area.lower() not in self.areas:
            return False
        if self.search:
            haystack = " ".join((
                incident.id,
                incident.title,
                incident.description,
                incident.location.area,
                incident.location.address,
            )).lower()
            if self.search not in haystack:
                return False
        return True


def filter_incidents(incidents: Iterable[Incident], criteria: Optional[IncidentFilter] = None) -> List[Incident]:
    """Subset of ``incidents`` matching every applied criterion, input order kept."""
    if criteria is None or criteria.is_empty:
        return list(incidents)
    return [incident for incident in incidents if criteria.matches(incident)]


def by_status(incidents: Iterable[Incident], *statuses: IncidentStatus) -> List[Incident]:
    return filter_incidents(incidents, IncidentFilter.build(statuses=statuses))


def by_severity(incidents: Iterable[Incident], *severities: IncidentSeverity) -> List[Incident]:
    return filter_incidents(incidents, IncidentFilter.build(severities=severities))


def by_type(incidents: Iterable[Incident], *types: IncidentType) -> List[Incident]:
    return filter_incidents(incidents, IncidentFilter.build(types=types))


def by_area(incidents: Iterable[Incident], *areas: str) -> List[Incident]:
    return filter_incidents(incidents, IncidentFilter.build(areas=areas))


@dataclass(frozen=True)
class DashboardStats:
    total_active: int
    unverified: int
    verified_in_progress: int
    resolved_today: int
    critical_active: int


_RESPONSE_STAGES = frozenset({
    IncidentStatus.VERIFIED,
    IncidentStatus.ASSIGNED,
    IncidentStatus.IN_PROGRESS,
})


def compute_stats(incidents: Iterable[Incident], now: Optional[datetime] = None) -> DashboardStats:
    """
    Aggregate counts for the dashboard header.

    ``resolved_today`` counts RESOLVED incidents last updated on the same
    UTC calendar day as ``now``.
    """
    now = now or datetime.now(timezone.utc)
    today = _utc_date(now)

    total_active = unverified = in_progress = resolved_today = critical = 0
    for incident in incidents:
        if not incident.is_terminal:
            total_active += 1
            if incident.severity == IncidentSeverity.CRITICAL:
                critical += 1
        if incident.status == IncidentStatus.UNVERIFIED:
            unverified += 1
        elif incident.status in _RESPONSE_STAGES:
            in_progress += 1
        elif incident.status == IncidentStatus.RESOLVED and _utc_date(incident.updated_at) == today:
            resolved_today += 1

    return DashboardStats(
        total_active=total_active,
        unverified=unverified,
        verified_in_progress=in_progress,
        resolved_today=resolved_today,
        critical_active=critical,
    )


def _utc_date(moment: datetime):
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def critical_alerts(incidents: Iterable[Incident]) -> List[Incident]:
    """CRITICAL incidents still needing attention, in rank order."""
    return rank(
        incident for incident in incidents
        if incident.severity == IncidentSeverity.CRITICAL and not incident.is_terminal
    )


def duplicate_candidates(incidents: Sequence[Incident], incident_id: str) -> List[Incident]:
    """Incidents ``incident_id`` may be linked to as a duplicate."""
    return [
        incident for incident in incidents
        if incident.id != incident_id and not incident.status.is_discarded
    ]
