"""
Scan processing errors.

Every error carries an operator-readable ``message``. The scan pipeline
recovers all of them into a denied outcome; none escape past it.
"""
from typing import Optional


class AccessGateError(Exception):
    """Base class for every recoverable scan failure"""

    reason = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(AccessGateError):
    """The scanned code is malformed or uses an unsupported format"""

    reason = "parse_error"


class ScopeMismatchError(AccessGateError):
    """The scanned code belongs to a different event"""

    reason = "scope_mismatch"

    def __init__(self, expected: Optional[str], received: Optional[str]):
        self.expected = expected
        self.received = received
        if not expected:
            message = "No active event selected. Choose an event before scanning."
        else:
            message = (
                f"This code belongs to another event.\n\n"
                f"Expected event: {expected}\nCode event: {received}"
            )
        super().__init__(message)


class NotFoundError(AccessGateError):
    """The identifier is not enrolled in the active event"""

    reason = "not_found"

    def __init__(self, identifier: str, name: Optional[str] = None, message: Optional[str] = None):
        self.identifier = identifier
        self.name = name
        super().__init__(message or f"Participant not enrolled in this event: {identifier}")


class RuleViolation(AccessGateError):
    """A named access precondition failed (permission, registration or state)"""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class CollaboratorError(AccessGateError):
    """A lookup, state update or audit write failed"""

    reason = "collaborator_error"

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(message or f"Storage error during {operation}. Please scan again.")
