"""
Scan pipeline: decode -> lookup -> evaluate -> (mutate) -> log.

One call to ``ScanPipeline.process_scan`` handles one scan from start to
finish and always returns a ``ScanOutcome``. Decode, lookup and storage
failures become denied outcomes; exactly one audit record is attempted
per scan, and a failed audit write never changes the outcome.
"""
import asyncio
import logging
from typing import Callable, Iterable, Optional

from access_gate.core.config import settings
from access_gate.core.errors import (
    AccessGateError,
    CollaboratorError,
    NotFoundError,
    ScopeMismatchError,
)
from access_gate.db.base import utcnow
from access_gate.models.enums import AccessMode, Direction, PipelineState, parse_mode
from access_gate.schemas import (
    AuditRecord,
    Operator,
    ParticipantRecord,
    ParticipantSummary,
    ScanOutcome,
)
from access_gate.services.decoder import decode_scan, names_differ
from access_gate.services.rules import evaluate, not_found_message
from access_gate.services.store import AuditLogger, ParticipantLookup, StateMutator

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "unknown"
MAX_RAW_IDENTIFIER = 64


class ScanPipeline:
    def __init__(
        self,
        lookup: ParticipantLookup,
        mutator: StateMutator,
        audit: AuditLogger,
        timeout: Optional[float] = None,
        admin_roles: Optional[Iterable[str]] = None,
        decoder: Callable = decode_scan,
    ):
        self.lookup = lookup
        self.mutator = mutator
        self.audit = audit
        self.timeout = settings.COLLABORATOR_TIMEOUT_SECONDS if timeout is None else timeout
        self.admin_roles = set(settings.ADMIN_ROLES if admin_roles is None else admin_roles)
        self.decoder = decoder

    async def _call(self, operation: str, awaitable):
        """Await a collaborator call, bounded by the configured timeout"""
        try:
            if self.timeout and self.timeout > 0:
                return await asyncio.wait_for(awaitable, self.timeout)
            return await awaitable
        except AccessGateError:
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"⏱️ {operation} timed out after {self.timeout:g}s")
            raise CollaboratorError(
                operation,
                f"Storage did not respond within {self.timeout:g}s during {operation}. Please scan again.",
            ) from e
        except Exception as e:
            logger.error(f"{operation} failed: {e}", exc_info=True)
            raise CollaboratorError(operation) from e

    async def _apply(self, identifier: str, mode, direction, event_scope: str):
        """Apply the state transition and wait for the write to settle.

        A write that runs past the timeout is not abandoned: its worker
        thread would still commit after a denial had been reported. The
        outcome follows whatever the write actually did.
        """
        write = asyncio.ensure_future(
            self.mutator.apply_transition(identifier, mode, direction, event_scope)
        )
        try:
            if self.timeout and self.timeout > 0:
                try:
                    return await asyncio.wait_for(asyncio.shield(write), self.timeout)
                except asyncio.TimeoutError:
                    logger.warning(
                        f"⏱️ state update for {identifier} still running after {self.timeout:g}s, waiting for it"
                    )
            return await write
        except AccessGateError:
            raise
        except Exception as e:
            logger.error(f"state update failed: {e}", exc_info=True)
            raise CollaboratorError("state update") from e

    async def process_scan(
        self,
        raw: str,
        mode,
        direction,
        event_scope: Optional[str],
        operator: Operator,
        on_state: Optional[Callable[[PipelineState], None]] = None,
    ) -> ScanOutcome:
        """Run one scan through the whole pipeline. Never raises."""

        def enter(state: PipelineState):
            if on_state:
                on_state(state)

        access_mode = parse_mode(mode)
        if access_mode is AccessMode.REGISTRATION:
            direction = None
        mode_value = mode.value if isinstance(mode, AccessMode) else str(mode)
        direction_value = direction.value if isinstance(direction, Direction) else direction

        identifier = (raw or "").strip()[:MAX_RAW_IDENTIFIER]
        participant: Optional[ParticipantRecord] = None
        warning: Optional[str] = None

        try:
            enter(PipelineState.DECODING)
            decoded = self.decoder(raw, event_scope)
            identifier = decoded.identifier

            enter(PipelineState.LOOKING_UP)
            if not event_scope:
                raise ScopeMismatchError(expected=event_scope, received=decoded.event_scope)
            participant = await self._call("lookup", self.lookup.lookup(identifier, event_scope))
            if participant is None:
                raise NotFoundError(
                    identifier=identifier,
                    name=decoded.name,
                    message=not_found_message(identifier, decoded.name, operator.role in self.admin_roles),
                )

            if names_differ(decoded.name, participant.name):
                warning = (
                    f"Name on the code differs from the record.\n\n"
                    f"Code: {decoded.name}\nRecord: {participant.name}"
                )
                logger.warning(f"⚠️ Name mismatch for {identifier}: code={decoded.name!r} record={participant.name!r}")

            enter(PipelineState.EVALUATING)
            evaluation = evaluate(participant, mode, direction)
            success, message, reason = evaluation.allowed, evaluation.message, evaluation.reason

            if evaluation.allowed:
                enter(PipelineState.MUTATING)
                await self._apply(identifier, access_mode, direction, event_scope)

        except AccessGateError as e:
            success, message, reason = False, e.message, e.reason
        except Exception as e:
            logger.error(f"Scan processing error: {str(e)}", exc_info=True)
            success, message, reason = False, "Error processing the code. Please scan again.", CollaboratorError.reason

        if success:
            logger.info(f"✅ {identifier} {mode_value}/{direction_value or '-'}: {message}")
        else:
            logger.info(f"❌ {identifier} {mode_value}/{direction_value or '-'} denied ({reason}): {message.splitlines()[0]}")

        enter(PipelineState.LOGGING)
        await self._record(
            identifier=identifier,
            participant=participant,
            mode_value=mode_value,
            direction_value=direction_value,
            event_scope=event_scope,
            operator=operator,
            success=success,
            message=message,
        )

        enter(PipelineState.AWAITING_ACK)
        summary = None
        if participant is not None:
            summary = ParticipantSummary(identifier=participant.identifier, name=participant.name)
        return ScanOutcome(
            success=success,
            message=message,
            reason=reason,
            participant=summary,
            warning=warning,
        )

    async def _record(self, identifier, participant, mode_value, direction_value, event_scope, operator, success, message):
        attempt = AuditRecord(
            event_id=event_scope or "",
            identifier=identifier,
            name=participant.name if participant else UNKNOWN_NAME,
            mode=mode_value,
            direction=direction_value,
            timestamp=utcnow(),
            operator=operator.name,
            operator_uid=operator.uid,
            success=success,
            message=message,
            email=participant.email if participant else None,
            phone=participant.phone if participant else None,
            school=participant.school if participant else None,
            position=participant.position if participant else None,
            has_paid=participant.has_paid if participant else None,
            permissions=participant.permissions() if participant else None,
        )
        try:
            written = await self._call("audit log", self.audit.record(attempt))
        except AccessGateError as e:
            logger.warning(f"⚠️ Audit record lost for {identifier}: {e.message}")
            return
        if written is False:
            logger.warning(f"⚠️ Audit record lost for {identifier}")
