import pytest

from access_gate.core.errors import CollaboratorError
from access_gate.db.base import Base, utcnow
from access_gate.models.enums import AccessMode, Direction
from access_gate.models.access_log import AccessLog
from access_gate.schemas import AuditRecord, ParticipantCreate
from access_gate.services.store import SqlParticipantStore
from access_gate.services.transitions import expected_prior_state, transition_updates
from tests.fakes import EVENT, run


def test_lookup_normalizes_identifier(store, seed):
    seed("12345678A")

    participant = run(store.lookup(" 12345678a ", EVENT))

    assert participant.identifier == "12345678A"
    assert participant.permissions() == {"main_hall": True, "workshop": False, "dinner": False}


def test_lookup_missing_returns_none(store):
    assert run(store.lookup("12345678A", EVENT)) is None


def test_lookup_without_event_is_refused(store, seed):
    seed("12345678A", event_id="")

    with pytest.raises(CollaboratorError):
        run(store.lookup("12345678A", ""))


def test_apply_transition_touches_one_flag(store, seed):
    seed(registered=True, can_dinner=True)

    run(store.apply_transition("12345678A", AccessMode.DINNER, Direction.ENTER, EVENT))
    participant = run(store.lookup("12345678A", EVENT))

    assert participant.in_dinner is True
    assert participant.in_main_hall is False
    assert participant.registered is True


def test_apply_transition_for_missing_participant(store):
    with pytest.raises(CollaboratorError):
        run(store.apply_transition("12345678A", AccessMode.REGISTRATION, None, EVENT))


def test_strict_transition_rejects_stale_state(session_factory, seed):
    seed(registered=True, in_main_hall=True)
    strict = SqlParticipantStore(session_factory, strict_transitions=True)

    with pytest.raises(CollaboratorError) as exc_info:
        run(strict.apply_transition("12345678A", AccessMode.MAIN_HALL, Direction.ENTER, EVENT))

    assert "another station" in exc_info.value.message

    run(strict.apply_transition("12345678A", AccessMode.MAIN_HALL, Direction.EXIT, EVENT))
    assert run(strict.lookup("12345678A", EVENT)).in_main_hall is False


def test_create_participant(store):
    created = run(store.create_participant(
        ParticipantCreate(identifier="x1234567b", name=" Joan Puig ", can_dinner=True), EVENT
    ))

    assert created.identifier == "X1234567B"
    assert created.name == "Joan Puig"
    assert created.can_dinner is True
    assert created.registered is False

    with pytest.raises(ValueError):
        run(store.create_participant(ParticipantCreate(identifier="X1234567B", name="Dup"), EVENT))


def test_same_identifier_in_two_events(store):
    run(store.create_participant(ParticipantCreate(identifier="12345678A", name="Ana"), EVENT))
    run(store.create_participant(ParticipantCreate(identifier="12345678A", name="Ana"), "other-event"))

    assert run(store.lookup("12345678A", "other-event")).event_id == "other-event"


def test_transition_updates():
    now = utcnow()

    assert transition_updates(AccessMode.REGISTRATION, None, now) == {
        "updated_at": now,
        "registered": True,
        "registered_at": now,
    }
    assert transition_updates(AccessMode.WORKSHOP, Direction.EXIT, now) == {
        "updated_at": now,
        "in_workshop": False,
    }
    with pytest.raises(ValueError):
        transition_updates(AccessMode.WORKSHOP, None, now)


def test_expected_prior_state():
    assert expected_prior_state(AccessMode.REGISTRATION, None) == {"registered": False}
    assert expected_prior_state(AccessMode.DINNER, Direction.ENTER) == {
        "can_dinner": True,
        "registered": True,
        "in_dinner": False,
    }


def make_attempt(**overrides):
    values = dict(
        event_id=EVENT,
        identifier="12345678A",
        name="Ana Ruiz",
        mode="registration",
        timestamp=utcnow(),
        operator="Laura",
        success=True,
        message="Registration successful",
    )
    values.update(overrides)
    return AuditRecord(**values)


def test_audit_record_is_written(audit, session_factory):
    assert run(audit.record(make_attempt())) is True

    db = session_factory()
    try:
        [log] = db.query(AccessLog).all()
    finally:
        db.close()
    assert log.identifier == "12345678A"
    assert log.direction is None


def test_audit_failure_is_reported_not_raised(audit, engine):
    Base.metadata.drop_all(bind=engine)

    assert run(audit.record(make_attempt())) is False
