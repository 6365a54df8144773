import logging

from fastapi import APIRouter, Depends, HTTPException, status

from access_gate.api.deps import get_event_scope, get_participant_store
from access_gate.core.deps import get_current_admin
from access_gate.schemas import Operator, ParticipantCreate, ParticipantRecord
from access_gate.services.store import SqlParticipantStore

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post(
    "/admin/participants",
    response_model=ParticipantRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_participant(
    data: ParticipantCreate,
    event_scope: str = Depends(get_event_scope),
    store: SqlParticipantStore = Depends(get_participant_store),
    admin: Operator = Depends(get_current_admin),
):
    """Enroll one participant in the active event"""
    try:
        participant = await store.create_participant(data, event_scope)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info(f"{admin.name} enrolled {participant.identifier}")
    return participant
