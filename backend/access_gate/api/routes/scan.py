from fastapi import APIRouter, Depends, HTTPException, Request, status
import logging

from access_gate.api.deps import get_stations
from access_gate.core.deps import get_current_operator
from access_gate.schemas import Operator, ScanOutcome, ScanRequest, StationStatus
from access_gate.services.guard import StationRegistry

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/stations/{station_id}/scan", response_model=ScanOutcome)
async def scan(
    station_id: str,
    body: ScanRequest,
    request: Request,
    stations: StationRegistry = Depends(get_stations),
    operator: Operator = Depends(get_current_operator),
):
    """
    Process one scanned code at an operator station.
    A station that is still showing a previous outcome drops the scan (409).
    """
    guard = stations.get(station_id)
    outcome = await guard.on_scan(
        body.raw,
        body.mode,
        body.direction,
        request.app.state.event_scope,
        operator,
    )
    if outcome is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Station busy: acknowledge the current result before scanning again",
        )
    return outcome

@router.post("/stations/{station_id}/ack", response_model=StationStatus)
async def acknowledge(
    station_id: str,
    stations: StationRegistry = Depends(get_stations),
    operator: Operator = Depends(get_current_operator),
):
    """Operator dismissed the result; the station accepts the next scan"""
    guard = stations.get(station_id)
    if not guard.acknowledge():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Nothing to acknowledge",
        )
    return guard.status()

@router.get("/stations/{station_id}", response_model=StationStatus)
async def station_status(
    station_id: str,
    stations: StationRegistry = Depends(get_stations),
    operator: Operator = Depends(get_current_operator),
):
    return stations.get(station_id).status()
