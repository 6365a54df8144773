import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from access_gate.db.base import Base
from access_gate.models.participant import Participant
from access_gate.schemas import Operator
from access_gate.services.store import SqlAuditLog, SqlParticipantStore
from tests.fakes import EVENT


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def seed(session_factory):
    """Insert a participant straight into the database"""

    def _seed(identifier="12345678A", name="Ana Ruiz", event_id=EVENT, **fields):
        db = session_factory()
        try:
            participant = Participant(event_id=event_id, identifier=identifier, name=name, **fields)
            db.add(participant)
            db.commit()
        finally:
            db.close()
        return identifier

    return _seed


@pytest.fixture
def store(session_factory):
    return SqlParticipantStore(session_factory, strict_transitions=False)


@pytest.fixture
def audit(session_factory):
    return SqlAuditLog(session_factory)


@pytest.fixture
def controller():
    return Operator(uid="op-1", name="Laura", role="controller")


@pytest.fixture
def admin():
    return Operator(uid="adm-1", name="Marc", role="admin")
