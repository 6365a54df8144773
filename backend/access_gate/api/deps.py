from fastapi import HTTPException, Request, status

from access_gate.services.guard import StationRegistry
from access_gate.services.reporting import ReportingService
from access_gate.services.store import SqlParticipantStore

def get_stations(request: Request) -> StationRegistry:
    return request.app.state.stations

def get_reporting(request: Request) -> ReportingService:
    return request.app.state.reporting

def get_participant_store(request: Request) -> SqlParticipantStore:
    return request.app.state.participants

def get_event_scope(request: Request) -> str:
    """Active event for this process; reports need one"""
    event_scope = request.app.state.event_scope
    if not event_scope:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No active event selected (set ACTIVE_EVENT_ID)",
        )
    return event_scope
