from sqlalchemy import JSON, Boolean, Column, DateTime, String, Text

from access_gate.db.base import Base, BaseModel


class AccessLog(Base, BaseModel):
    """One row per processed scan attempt, granted or not"""
    __tablename__ = "access_logs"

    event_id = Column(String, nullable=False, index=True)
    identifier = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    mode = Column(String, nullable=False, index=True)
    direction = Column(String, nullable=True)  # null for registration
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    operator = Column(String, nullable=False)
    operator_uid = Column(String, nullable=True)
    success = Column(Boolean, nullable=False, index=True)
    message = Column(Text, nullable=True)

    # Participant snapshot at the time of the attempt
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    school = Column(String, nullable=True)
    position = Column(String, nullable=True)
    has_paid = Column(Boolean, nullable=True)
    permissions = Column(JSON, nullable=True)

    def __repr__(self):
        outcome = "OK" if self.success else "DENIED"
        return f"<AccessLog {self.identifier} {self.mode}/{self.direction} {outcome}>"
