"""
Storage collaborators for the scan pipeline.

The pipeline only depends on the three protocols below. The SQLAlchemy
implementations keep every query scoped to one event and run blocking
session work in a worker thread so the pipeline can await them.
"""
import logging
from typing import Callable, Optional, Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import and_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from access_gate.core.config import settings
from access_gate.core.errors import CollaboratorError
from access_gate.db.base import utcnow
from access_gate.models.access_log import AccessLog
from access_gate.models.participant import Participant
from access_gate.schemas import AuditRecord, ParticipantCreate, ParticipantRecord
from access_gate.services.decoder import normalize_identifier
from access_gate.services.transitions import expected_prior_state, transition_updates

logger = logging.getLogger(__name__)


class ParticipantLookup(Protocol):
    async def lookup(self, identifier: str, event_scope: str) -> Optional[ParticipantRecord]:
        ...


class StateMutator(Protocol):
    async def apply_transition(self, identifier: str, mode, direction, event_scope: str) -> None:
        ...


class AuditLogger(Protocol):
    async def record(self, attempt: AuditRecord) -> bool:
        ...


class SqlParticipantStore:
    """Participant lookup and state mutation backed by SQLAlchemy"""

    def __init__(self, session_factory: Callable[[], Session], strict_transitions: Optional[bool] = None):
        self.session_factory = session_factory
        if strict_transitions is None:
            strict_transitions = settings.STRICT_TRANSITIONS
        self.strict_transitions = strict_transitions

    async def lookup(self, identifier: str, event_scope: str) -> Optional[ParticipantRecord]:
        return await run_in_threadpool(self._lookup, identifier, event_scope)

    def _lookup(self, identifier: str, event_scope: str) -> Optional[ParticipantRecord]:
        if not event_scope:
            raise CollaboratorError("lookup", "No active event selected")

        db = self.session_factory()
        try:
            participant = (
                db.query(Participant)
                .filter(
                    Participant.event_id == event_scope,
                    Participant.identifier == normalize_identifier(identifier),
                )
                .first()
            )
            if participant is None:
                return None
            return ParticipantRecord.model_validate(participant)
        finally:
            db.close()

    async def apply_transition(self, identifier: str, mode, direction, event_scope: str) -> None:
        await run_in_threadpool(self._apply_transition, identifier, mode, direction, event_scope)

    def _apply_transition(self, identifier: str, mode, direction, event_scope: str) -> None:
        updates = transition_updates(mode, direction, utcnow())

        conditions = [
            Participant.event_id == event_scope,
            Participant.identifier == normalize_identifier(identifier),
        ]
        if self.strict_transitions:
            for column, value in expected_prior_state(mode, direction).items():
                conditions.append(getattr(Participant, column) == value)

        db = self.session_factory()
        try:
            result = db.execute(
                update(Participant).where(and_(*conditions)).values(**updates)
            )
            if result.rowcount != 1:
                db.rollback()
                if self.strict_transitions:
                    message = "Participant state changed on another station. Please scan again."
                else:
                    message = f"Participant {identifier} could not be updated in event {event_scope}"
                raise CollaboratorError("state update", message)
            db.commit()
        except CollaboratorError:
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.debug(f"Applied {updates} to {identifier}@{event_scope}")

    async def create_participant(self, data: ParticipantCreate, event_scope: str) -> ParticipantRecord:
        return await run_in_threadpool(self._create_participant, data, event_scope)

    def _create_participant(self, data: ParticipantCreate, event_scope: str) -> ParticipantRecord:
        values = data.model_dump()
        values["identifier"] = normalize_identifier(values["identifier"])
        values["name"] = values["name"].strip()

        db = self.session_factory()
        try:
            participant = Participant(event_id=event_scope, **values)
            db.add(participant)
            db.commit()
            db.refresh(participant)
            logger.info(f"✅ Enrolled {participant.identifier} in event {event_scope}")
            return ParticipantRecord.model_validate(participant)
        except IntegrityError:
            db.rollback()
            raise ValueError(f"Participant {values['identifier']} already exists in event {event_scope}")
        finally:
            db.close()


class SqlAuditLog:
    """Append-only audit log; failures are reported, never raised"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def record(self, attempt: AuditRecord) -> bool:
        return await run_in_threadpool(self._record, attempt)

    def _record(self, attempt: AuditRecord) -> bool:
        db = self.session_factory()
        try:
            db.add(AccessLog(**attempt.model_dump()))
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Audit write failed for {attempt.identifier}: {e}", exc_info=True)
            return False
        finally:
            db.close()
