from enum import Enum
from typing import Dict, Optional


class AccessMode(str, Enum):
    """What an operator station is checking"""
    REGISTRATION = "registration"
    MAIN_HALL = "main_hall"
    WORKSHOP = "workshop"
    DINNER = "dinner"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]


class Direction(str, Enum):
    ENTER = "enter"
    EXIT = "exit"


class PipelineState(str, Enum):
    """Steps of one scan, in order"""
    IDLE = "idle"
    DECODING = "decoding"
    LOOKING_UP = "looking_up"
    EVALUATING = "evaluating"
    MUTATING = "mutating"
    LOGGING = "logging"
    AWAITING_ACK = "awaiting_ack"


MODE_LABELS: Dict[AccessMode, str] = {
    AccessMode.REGISTRATION: "initial registration",
    AccessMode.MAIN_HALL: "the main hall",
    AccessMode.WORKSHOP: "the workshop",
    AccessMode.DINNER: "the closing dinner",
}

# zone -> (permission attribute, "inside" attribute) on Participant
ZONE_FIELDS: Dict[AccessMode, tuple] = {
    AccessMode.MAIN_HALL: ("can_main_hall", "in_main_hall"),
    AccessMode.WORKSHOP: ("can_workshop", "in_workshop"),
    AccessMode.DINNER: ("can_dinner", "in_dinner"),
}


def parse_mode(value) -> Optional[AccessMode]:
    """Return the AccessMode for ``value`` or None when it is not one"""
    if isinstance(value, AccessMode):
        return value
    try:
        return AccessMode(value)
    except ValueError:
        return None
