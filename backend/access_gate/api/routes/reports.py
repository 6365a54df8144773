from fastapi import APIRouter, Depends, Query
from typing import List
import logging

from access_gate.api.deps import get_event_scope, get_reporting
from access_gate.core.deps import get_current_operator
from access_gate.models.enums import AccessMode
from access_gate.schemas import AccessLogResult, AccessStats, Occupancy, Operator, PermissionCounts
from access_gate.services.reporting import ReportingService

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/reports/stats/{mode}", response_model=AccessStats)
async def access_stats(
    mode: AccessMode,
    event_scope: str = Depends(get_event_scope),
    reporting: ReportingService = Depends(get_reporting),
    operator: Operator = Depends(get_current_operator),
):
    """Unique entrances and peak occupancy for a mode"""
    return await reporting.access_stats(mode, event_scope)

@router.get("/reports/logs/{mode}", response_model=List[AccessLogResult])
async def recent_logs(
    mode: AccessMode,
    limit: int = Query(10, ge=1, le=200),
    event_scope: str = Depends(get_event_scope),
    reporting: ReportingService = Depends(get_reporting),
    operator: Operator = Depends(get_current_operator),
):
    """Latest successful scans for a mode, newest first"""
    return await reporting.recent_logs(mode, event_scope, limit)

@router.get("/reports/permissions", response_model=PermissionCounts)
async def permission_counts(
    event_scope: str = Depends(get_event_scope),
    reporting: ReportingService = Depends(get_reporting),
    operator: Operator = Depends(get_current_operator),
):
    return await reporting.permission_counts(event_scope)

@router.get("/reports/occupancy", response_model=Occupancy)
async def occupancy(
    event_scope: str = Depends(get_event_scope),
    reporting: ReportingService = Depends(get_reporting),
    operator: Operator = Depends(get_current_operator),
):
    return await reporting.occupancy(event_scope)
