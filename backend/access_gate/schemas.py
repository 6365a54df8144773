from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict
from datetime import datetime

from access_gate.models.enums import AccessMode, Direction, ZONE_FIELDS

class ParticipantRecord(BaseModel):
    """Detached snapshot of a participant as returned by a lookup"""
    event_id: str
    identifier: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    school: Optional[str] = None
    position: Optional[str] = None
    attendance: Optional[str] = None
    has_paid: Optional[bool] = None

    can_main_hall: bool = True
    can_workshop: bool = False
    can_dinner: bool = False

    registered: bool = False
    in_main_hall: bool = False
    in_workshop: bool = False
    in_dinner: bool = False

    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def has_permission(self, mode: AccessMode) -> bool:
        return bool(getattr(self, ZONE_FIELDS[mode][0]))

    def is_inside(self, mode: AccessMode) -> bool:
        return bool(getattr(self, ZONE_FIELDS[mode][1]))

    def permissions(self) -> Dict[str, bool]:
        return {
            "main_hall": self.can_main_hall,
            "workshop": self.can_workshop,
            "dinner": self.can_dinner,
        }

class ParticipantCreate(BaseModel):
    identifier: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    school: Optional[str] = None
    position: Optional[str] = None
    attendance: Optional[str] = None
    has_paid: Optional[bool] = None
    can_main_hall: bool = True
    can_workshop: bool = False
    can_dinner: bool = False

class Operator(BaseModel):
    uid: str
    name: str
    role: str = "controller"

class AuditRecord(BaseModel):
    """One scan attempt as handed to the audit logger"""
    event_id: str
    identifier: str
    name: str
    mode: str
    direction: Optional[str] = None
    timestamp: datetime
    operator: str
    operator_uid: Optional[str] = None
    success: bool
    message: str
    # Participant snapshot
    email: Optional[str] = None
    phone: Optional[str] = None
    school: Optional[str] = None
    position: Optional[str] = None
    has_paid: Optional[bool] = None
    permissions: Optional[Dict[str, bool]] = None

    model_config = ConfigDict(from_attributes=True)

class ParticipantSummary(BaseModel):
    identifier: str
    name: str

class ScanOutcome(BaseModel):
    """The only data the operator UI needs from a processed scan"""
    success: bool
    message: str
    reason: str
    participant: Optional[ParticipantSummary] = None
    warning: Optional[str] = None

# --- HTTP payloads ---

class ScanRequest(BaseModel):
    raw: str
    mode: AccessMode
    direction: Optional[Direction] = None

class StationStatus(BaseModel):
    station_id: str
    busy: bool
    last_outcome: Optional[ScanOutcome] = None

class AccessStats(BaseModel):
    mode: AccessMode
    unique_entrances: int
    max_simultaneous: int

class PermissionCounts(BaseModel):
    registration: int
    main_hall: int
    workshop: int
    dinner: int

class Occupancy(BaseModel):
    registered: int
    main_hall: int
    workshop: int
    dinner: int

class AccessLogResult(BaseModel):
    identifier: str
    name: str
    mode: str
    direction: Optional[str] = None
    timestamp: datetime
    operator: str
    success: bool
    message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class AccessLogList(BaseModel):
    total: int
    results: List[AccessLogResult]
