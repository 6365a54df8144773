from access_gate.models.access_log import AccessLog
from access_gate.models.participant import Participant

__all__ = ["AccessLog", "Participant"]
