from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationTurn(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class HouseholdMemberRef(CamelModel):
    id: str
    name: str


class ChatIn(CamelModel):
    message: str = Field(min_length=1, max_length=2000)
    conversation_history: list[ConversationTurn] = []
    # Browser getTimezoneOffset() convention: local = UTC - offset (PST = 480).
    timezone_offset_minutes: int = Field(
        default=0,
        ge=-14 * 60,
        le=14 * 60,
        validation_alias=AliasChoices("timezoneOffsetMinutes", "timezoneOffset", "timezone_offset_minutes"),
    )
    household_members: list[HouseholdMemberRef] | None = None
    current_user_name: str | None = None


class EventIn(CamelModel):
    title: str
    start: datetime
    end: datetime
    location: str | None = None
    attendees: list[str] | None = None
    description: str | None = None
    member_ids: list[str] | None = None

    @field_validator("start", "end")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # naive datetimes are UTC (that is how the store keeps them)
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class EventProposal(EventIn):
    """An unsaved, fully specified event awaiting the user's confirmation."""

    title: str = Field(min_length=1)

    @model_validator(mode="after")
    def _check_interval(self) -> "EventProposal":
        if not self.title.strip():
            raise ValueError("title must not be blank")
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class EventUpdate(CamelModel):
    title: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    location: str | None = None
    description: str | None = None
    member_ids: list[str] | None = None


class BatchEventsIn(CamelModel):
    events: list[EventIn] = Field(min_length=1)
    recurrence_id: str | None = None


class EventOut(EventIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recurrence_id: str | None = None
    created_by: str | None = None


class MemberOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: EmailStr | None = None
    role: str
    color: str | None = None


class DeleteResult(CamelModel):
    deleted: int


class MessageResponse(CamelModel):
    type: Literal["message"] = "message"
    message: str


class CreateEventResponse(CamelModel):
    type: Literal["create_event"] = "create_event"
    message: str
    proposal: EventProposal


class CreateEventsResponse(CamelModel):
    type: Literal["create_events"] = "create_events"
    message: str
    proposal: EventProposal  # first element of proposals
    proposals: list[EventProposal]
    recurrence_id: str


AssistantResponse = Annotated[
    MessageResponse | CreateEventResponse | CreateEventsResponse,
    Field(discriminator="type"),
]
