"""
Shared fixtures: a controllable clock, operator accounts, an in-memory
incident set and an in-memory SQLite report store.
"""

from datetime import datetime, timedelta, timezone

import pytest

from emergency_ops.core.config import (
    Config,
    DatabaseConfig,
    LiveUpdatesConfig,
    LoggingConfig,
    SecurityConfig,
    StoreConfig,
)
from emergency_ops.core.security import PasswordHasher
from emergency_ops.db.session import build_engine, build_session_factory, create_tables
from emergency_ops.incidents.audit import AuditSink
from emergency_ops.incidents.authority import TransitionAuthority
from emergency_ops.incidents.enums import IncidentSeverity, IncidentStatus, IncidentType, UserRole
from emergency_ops.incidents.models import Incident, Location, User
from emergency_ops.incidents.repository import IncidentRepository
from emergency_ops.store.report_store import IncidentStore

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

# bcrypt's minimum cost keeps the suite fast
FAST_HASH_ROUNDS = 4


class FakeClock:
    """Returns a fixed time that tests move forward explicitly."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_incident(
    incident_id: str,
    severity: IncidentSeverity = IncidentSeverity.MEDIUM,
    status: IncidentStatus = IncidentStatus.UNVERIFIED,
    created_at: datetime = T0,
    **overrides,
) -> Incident:
    fields = dict(
        id=incident_id,
        type=IncidentType.FIRE,
        severity=severity,
        status=status,
        title=f"Incident {incident_id}",
        description=f"Description of {incident_id}",
        location=Location(latitude=28.6, longitude=77.2, area="Old Town", address="1 Main St"),
        created_at=created_at,
        updated_at=created_at,
    )
    fields.update(overrides)
    return Incident(**fields)


@pytest.fixture
def clock():
    return FakeClock(T0 + timedelta(hours=1))


@pytest.fixture
def admin():
    return User(id="admin-001", name="John Commander", email="admin@emergency.gov", role=UserRole.ADMIN)


@pytest.fixture
def responder():
    return User(id="responder-001", name="Alex Responder", email="responder@emergency.gov", role=UserRole.RESPONDER)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=FAST_HASH_ROUNDS)


@pytest.fixture
def repository():
    return IncidentRepository([
        make_incident("A", severity=IncidentSeverity.LOW),
        make_incident("B"),
        make_incident("C"),
        make_incident("D"),
        make_incident("E", status=IncidentStatus.RESOLVED),
        make_incident("F", status=IncidentStatus.ASSIGNED, verified_at=T0, verified_by="admin-001"),
    ])


@pytest.fixture
def audit(clock):
    return AuditSink(clock=clock)


@pytest.fixture
def authority(repository, audit, clock):
    return TransitionAuthority(repository, audit, clock=clock)


@pytest.fixture
def session_factory():
    engine = build_engine(DatabaseConfig(url="sqlite://"))
    create_tables(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store_config():
    return StoreConfig(timeout_seconds=2.0, retry_attempts=2)


@pytest.fixture
def store(session_factory, store_config):
    return IncidentStore(session_factory, store_config)


@pytest.fixture
def app_config():
    return Config(
        environment="testing",
        seed_demo_data=True,
        database=DatabaseConfig(url="sqlite://"),
        security=SecurityConfig(password_hash_rounds=FAST_HASH_ROUNDS),
        logging=LoggingConfig(level="WARNING"),
        live_updates=LiveUpdatesConfig(enabled=False),
        store=StoreConfig(timeout_seconds=2.0, retry_attempts=2),
    )
