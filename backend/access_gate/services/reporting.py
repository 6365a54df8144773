"""
Read-only reports over participants and the audit log of one event.
"""
import logging
from typing import Callable, List

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func
from sqlalchemy.orm import Session

from access_gate.models.access_log import AccessLog
from access_gate.models.enums import AccessMode, Direction
from access_gate.models.participant import Participant
from access_gate.schemas import AccessLogResult, AccessStats, Occupancy, PermissionCounts

logger = logging.getLogger(__name__)


class ReportingService:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def recent_logs(self, mode: AccessMode, event_scope: str, limit: int = 10) -> List[AccessLogResult]:
        return await run_in_threadpool(self._recent_logs, mode, event_scope, limit)

    def _recent_logs(self, mode: AccessMode, event_scope: str, limit: int) -> List[AccessLogResult]:
        db = self.session_factory()
        try:
            logs = (
                db.query(AccessLog)
                .filter(
                    AccessLog.event_id == event_scope,
                    AccessLog.mode == mode.value,
                    AccessLog.success.is_(True),
                )
                .order_by(AccessLog.timestamp.desc(), AccessLog.id.desc())
                .limit(limit)
                .all()
            )
            return [AccessLogResult.model_validate(log) for log in logs]
        finally:
            db.close()

    async def access_stats(self, mode: AccessMode, event_scope: str) -> AccessStats:
        return await run_in_threadpool(self._access_stats, mode, event_scope)

    def _access_stats(self, mode: AccessMode, event_scope: str) -> AccessStats:
        db = self.session_factory()
        try:
            if mode is AccessMode.REGISTRATION:
                registered = (
                    db.query(func.count(Participant.id))
                    .filter(Participant.event_id == event_scope, Participant.registered.is_(True))
                    .scalar()
                )
                return AccessStats(mode=mode, unique_entrances=registered, max_simultaneous=registered)

            logs = (
                db.query(AccessLog.identifier, AccessLog.direction)
                .filter(
                    AccessLog.event_id == event_scope,
                    AccessLog.mode == mode.value,
                    AccessLog.success.is_(True),
                )
                .order_by(AccessLog.timestamp.asc(), AccessLog.id.asc())
                .all()
            )
        finally:
            db.close()

        # Replay the successful moves to find the peak occupancy
        entered = set()
        inside = set()
        peak = 0
        for identifier, direction in logs:
            if direction == Direction.ENTER.value:
                entered.add(identifier)
                inside.add(identifier)
                peak = max(peak, len(inside))
            elif direction == Direction.EXIT.value:
                inside.discard(identifier)

        return AccessStats(mode=mode, unique_entrances=len(entered), max_simultaneous=peak)

    async def permission_counts(self, event_scope: str) -> PermissionCounts:
        return await run_in_threadpool(self._permission_counts, event_scope)

    def _permission_counts(self, event_scope: str) -> PermissionCounts:
        db = self.session_factory()
        try:
            row = (
                db.query(
                    func.count(Participant.id),
                    func.count(Participant.id).filter(Participant.can_main_hall.is_(True)),
                    func.count(Participant.id).filter(Participant.can_workshop.is_(True)),
                    func.count(Participant.id).filter(Participant.can_dinner.is_(True)),
                )
                .filter(Participant.event_id == event_scope)
                .one()
            )
        finally:
            db.close()
        return PermissionCounts(registration=row[0], main_hall=row[1], workshop=row[2], dinner=row[3])

    async def occupancy(self, event_scope: str) -> Occupancy:
        return await run_in_threadpool(self._occupancy, event_scope)

    def _occupancy(self, event_scope: str) -> Occupancy:
        db = self.session_factory()
        try:
            row = (
                db.query(
                    func.count(Participant.id).filter(Participant.registered.is_(True)),
                    func.count(Participant.id).filter(Participant.in_main_hall.is_(True)),
                    func.count(Participant.id).filter(Participant.in_workshop.is_(True)),
                    func.count(Participant.id).filter(Participant.in_dinner.is_(True)),
                )
                .filter(Participant.event_id == event_scope)
                .one()
            )
        finally:
            db.close()
        return Occupancy(registered=row[0], main_hall=row[1], workshop=row[2], dinner=row[3])
