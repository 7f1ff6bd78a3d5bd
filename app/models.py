from datetime import UTC, datetime
import uuid
from sqlalchemy import (
    JSON, String, DateTime, ForeignKey, Text, Enum
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

class Base(DeclarativeBase): pass

MEMBER_ROLES = ("owner", "adult", "caregiver", "child-view", "guest")
READ_ONLY_ROLES = frozenset({"child-view", "guest"})

def _uuid() -> str:
    return str(uuid.uuid4())

def _utcnow() -> datetime:
    # stored naive, always UTC
    return datetime.now(UTC).replace(tzinfo=None)

class Household(Base):
    __tablename__ = "households"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    members: Mapped[list["Member"]] = relationship(back_populates="household", order_by="Member.created_at")
    events: Mapped[list["Event"]] = relationship(back_populates="household")

class Member(Base):
    __tablename__ = "members"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    household_id: Mapped[str] = mapped_column(ForeignKey("households.id"), index=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(Enum(*MEMBER_ROLES, name="member_role"), default="adult")
    color: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    household: Mapped[Household] = relationship(back_populates="members")

    @property
    def read_only(self) -> bool:
        return self.role in READ_ONLY_ROLES

class Event(Base):
    __tablename__ = "events"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    household_id: Mapped[str] = mapped_column(ForeignKey("households.id"), index=True)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start: Mapped[datetime] = mapped_column(DateTime, index=True)
    end: Mapped[datetime] = mapped_column(DateTime)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    attendees: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    member_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    recurrence_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    created_by: Mapped[str | None] = mapped_column(ForeignKey("members.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    household: Mapped[Household] = relationship(back_populates="events")

__all__ = ["Base", "Household", "Member", "Event", "MEMBER_ROLES", "READ_ONLY_ROLES"]
