from sqlalchemy import Boolean, Column, DateTime, String, UniqueConstraint

from access_gate.db.base import Base, BaseModel, utcnow


class Participant(Base, BaseModel):
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("event_id", "identifier", name="uq_participant_event_identifier"),
    )

    # Identity (identifier is a national-ID-like string, unique per event)
    event_id = Column(String, nullable=False, index=True)
    identifier = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)

    # Contact metadata, copied into audit records
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    school = Column(String, nullable=True)
    position = Column(String, nullable=True)
    attendance = Column(String, nullable=True)  # in-person / online
    has_paid = Column(Boolean, nullable=True)

    # Permissions (registration has no gate)
    can_main_hall = Column(Boolean, default=True, nullable=False)
    can_workshop = Column(Boolean, default=False, nullable=False)
    can_dinner = Column(Boolean, default=False, nullable=False)

    # Location state
    registered = Column(Boolean, default=False, nullable=False)
    in_main_hall = Column(Boolean, default=False, nullable=False)
    in_workshop = Column(Boolean, default=False, nullable=False)
    in_dinner = Column(Boolean, default=False, nullable=False)

    registered_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Participant {self.name} ({self.identifier}@{self.event_id})>"
