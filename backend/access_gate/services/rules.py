"""
Access rules.

Pure decision logic: given a participant snapshot (or None when the
identifier is not enrolled), a mode and a direction, decide whether the
scan is allowed and what the operator should read. Preconditions are
checked in a fixed order, permission, then registration, then current
state, so the operator gets the single most actionable reason.
"""
from dataclasses import dataclass
from typing import Optional

from access_gate.core.errors import NotFoundError, RuleViolation
from access_gate.models.enums import AccessMode, Direction, parse_mode
from access_gate.schemas import ParticipantRecord

GRANTED = "granted"
NOT_FOUND = "not_found"
ALREADY_REGISTERED = "already_registered"
NO_PERMISSION = "no_permission"
NOT_REGISTERED = "not_registered"
ALREADY_INSIDE = "already_inside"
NOT_INSIDE = "not_inside"
UNKNOWN_MODE = "unknown_mode"
MISSING_DIRECTION = "missing_direction"


@dataclass(frozen=True)
class Evaluation:
    allowed: bool
    message: str
    reason: str

    @property
    def not_found(self) -> bool:
        return self.reason == NOT_FOUND


def check_access(participant: Optional[ParticipantRecord], mode, direction) -> str:
    """Return the confirmation message, or raise the first failed precondition"""
    if participant is None:
        raise NotFoundError(identifier="", message="Participant not enrolled in this event")

    access_mode = parse_mode(mode)
    if access_mode is None:
        raise RuleViolation(UNKNOWN_MODE, "Unrecognized access mode")

    if access_mode is AccessMode.REGISTRATION:
        if participant.registered:
            raise RuleViolation(ALREADY_REGISTERED, "Participant already registered")
        return "Registration successful"

    label = access_mode.label

    if not participant.has_permission(access_mode):
        raise RuleViolation(NO_PERMISSION, f"No permission to access {label}")

    if not participant.registered:
        raise RuleViolation(NOT_REGISTERED, "Must register first at the event entrance")

    if direction == Direction.ENTER:
        if participant.is_inside(access_mode):
            raise RuleViolation(ALREADY_INSIDE, f"Already inside {label}")
        return f"Access granted to {label}"

    if direction == Direction.EXIT:
        if not participant.is_inside(access_mode):
            raise RuleViolation(NOT_INSIDE, f"Not recorded as inside {label}")
        return f"Exit recorded from {label}"

    raise RuleViolation(MISSING_DIRECTION, f"Choose a direction (enter or exit) for {label}")


def evaluate(participant: Optional[ParticipantRecord], mode, direction=None) -> Evaluation:
    """Decide a scan without side effects; never raises"""
    try:
        message = check_access(participant, mode, direction)
    except NotFoundError as e:
        return Evaluation(allowed=False, message=e.message, reason=NOT_FOUND)
    except RuleViolation as e:
        return Evaluation(allowed=False, message=e.message, reason=e.reason)
    return Evaluation(allowed=True, message=message, reason=GRANTED)


def not_found_message(identifier: str, name: Optional[str], is_admin: bool) -> str:
    """Operator-facing text for an identifier missing from the active event"""
    details = f"Identifier: {identifier}"
    if name:
        details += f"\nName: {name}"
    if is_admin:
        hint = "To enroll this participant, add them first in the Administration section."
    else:
        hint = "If this participant should be enrolled, contact your administrator."
    return f"Participant not found in this event.\n\n{details}\n\n{hint}"
