"""
State transitions applied after a granted scan.

Registration sets ``registered`` (and stamps ``registered_at``); a zone
enter or exit sets that zone's "inside" flag to True or False.
"""
from datetime import datetime
from typing import Dict

from access_gate.models.enums import AccessMode, Direction, ZONE_FIELDS, parse_mode


def transition_updates(mode, direction, now: datetime) -> Dict[str, object]:
    """Column values to write for one granted scan"""
    access_mode = parse_mode(mode)
    if access_mode is None:
        raise ValueError(f"Unknown access mode: {mode}")

    updates: Dict[str, object] = {"updated_at": now}
    if access_mode is AccessMode.REGISTRATION:
        updates["registered"] = True
        updates["registered_at"] = now
    else:
        if direction not in (Direction.ENTER, Direction.EXIT):
            raise ValueError(f"Zone transitions need a direction, got {direction!r}")
        updates[ZONE_FIELDS[access_mode][1]] = direction == Direction.ENTER
    return updates


def expected_prior_state(mode, direction) -> Dict[str, bool]:
    """State the participant must still be in for the transition to apply"""
    access_mode = parse_mode(mode)
    if access_mode is AccessMode.REGISTRATION:
        return {"registered": False}

    permission, inside = ZONE_FIELDS[access_mode]
    return {
        permission: True,
        "registered": True,
        inside: direction != Direction.ENTER,
    }
