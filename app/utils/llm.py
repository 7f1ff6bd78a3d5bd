from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, time
from typing import Annotated

import structlog
from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.config import Settings, settings
from app.exceptions import RemoteExtractionError
from app.schemas import ConversationTurn, HouseholdMemberRef
from app.utils.nlp import EventDraft

logger = structlog.get_logger()

SYSTEM_PROMPT = """You are a smart household calendar assistant. Today is {today}. The current local time is {now}.

When the user wants to create an event, call the create_event function. You must infer:

DURATION RULES (apply these based on event type keywords):
- coffee, lunch, drinks -> 30 minutes
- meeting, sync, standup, 1:1, one-on-one -> 30 minutes
- dinner, movie -> 90 minutes
- workout, gym, run -> 60 minutes
- dentist, doctor, appointment -> 60 minutes
- "quick chat", "quick call" -> 15 minutes
- workshop, training -> 120 minutes
- preschool, school, daycare, camp -> 420 minutes
- An explicit time range ("9am to 4pm") always sets the duration
- Default (unrecognized) -> 60 minutes

TIME INFERENCE:
- "morning" -> 9:00 AM, "afternoon" -> 2:00 PM, "evening" -> 6:00 PM
- A bare number like "3" or "at 3" below 7 means PM
- "tomorrow" means the next day from today
- "next Tuesday" means the coming Tuesday

RECURRING EVENTS:
- "m-f", "monday to friday", "weekdays" -> recurringDays [1,2,3,4,5] (0 = Sunday)
- "for 8 weeks" -> recurringWeeks 8; default 8 when days repeat but no count is given
- date is then the first occurrence

HOUSEHOLD:
- Members: {members}
- The person chatting is {current_user}
- Put household member names the event is for in assignedMembers
- Set assignToEveryone only when the user clearly means the whole family
- People who are not household members go in attendees

SMART PARSING:
- "with George" -> attendee "George"
- "at Blue Bottle" -> location "Blue Bottle"
- Capitalize titles properly (e.g., "coffee with george" -> "Coffee with George")

Keep your responses very short and friendly. Don't be overly formal."""

CREATE_EVENT_TOOL = {
    "type": "function",
    "function": {
        "name": "create_event",
        "description": "Create a calendar event. Returns a proposal for user confirmation.",
        "parameters": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Event title, properly capitalized"},
                "date": {"type": "string", "description": "Date in YYYY-MM-DD format"},
                "startHour": {"type": "number", "description": "Start hour in 24h format (0-23)"},
                "startMinute": {"type": "number", "description": "Start minute (0-59)"},
                "durationMinutes": {"type": "number", "description": "Duration in minutes"},
                "location": {"type": "string"},
                "attendees": {"type": "array", "items": {"type": "string"}},
                "description": {"type": "string"},
                "recurringDays": {
                    "type": "array",
                    "items": {"type": "number"},
                    "description": "Weekdays the event repeats on, 0 = Sunday",
                },
                "recurringWeeks": {"type": "number", "description": "Number of weeks to repeat"},
                "assignedMembers": {"type": "array", "items": {"type": "string"}},
                "assignToEveryone": {"type": "boolean"},
            },
            "required": ["title", "date", "startHour", "startMinute", "durationMinutes"],
        },
    },
}


class RemoteEventArgs(BaseModel):
    """Validated arguments of a create_event tool call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1)
    day: date = Field(alias="date")
    start_hour: int = Field(ge=0, le=23)
    start_minute: int = Field(ge=0, le=59)
    duration_minutes: int = Field(gt=0, le=24 * 60)
    location: str | None = None
    attendees: list[str] = []
    description: str | None = None
    recurring_days: list[Annotated[int, Field(ge=0, le=6)]] = []
    recurring_weeks: int | None = Field(default=None, ge=1)
    assigned_members: list[str] = []
    assign_to_everyone: bool = False

    def to_draft(self) -> EventDraft:
        return EventDraft(
            title=self.title.strip(),
            day=self.day,
            start=time(self.start_hour, self.start_minute),
            duration_minutes=self.duration_minutes,
            location=self.location or None,
            attendees=list(self.attendees),
            description=self.description or None,
            weekdays=tuple(sorted(set(self.recurring_days))),
            week_count=self.recurring_weeks,
            assigned_members=list(self.assigned_members),
            everyone=self.assign_to_everyone,
        )


_client: OpenAI | None = None

def client(config: Settings = settings) -> OpenAI:
    global _client
    if _client is None:
        if not config.OPENAI_API_KEY:
            raise RemoteExtractionError("OPENAI_API_KEY not set")
        _client = OpenAI(
            api_key=config.OPENAI_API_KEY,
            timeout=config.EXTRACTION_TIMEOUT_SECONDS,
            max_retries=0,
        )
    return _client


def build_messages(
    message: str,
    history: Sequence[ConversationTurn],
    reference: datetime,
    members: Sequence[HouseholdMemberRef] | None,
    current_user_name: str | None,
    history_limit: int = 20,
) -> list[dict[str, str]]:
    system = SYSTEM_PROMPT.format(
        today=reference.strftime("%A, %B %d, %Y"),
        now=reference.strftime("%H:%M"),
        members=", ".join(m.name for m in members or ()) or "unknown",
        current_user=current_user_name or "unknown",
    )
    messages = [{"role": "system", "content": system}]
    recent = list(history)[-history_limit:] if history_limit > 0 else []
    messages += [{"role": turn.role, "content": turn.content} for turn in recent]
    messages.append({"role": "user", "content": message})
    return messages


def extract_event(
    message: str,
    history: Sequence[ConversationTurn],
    reference: datetime,
    members: Sequence[HouseholdMemberRef] | None = None,
    current_user_name: str | None = None,
    config: Settings = settings,
    openai_client: OpenAI | None = None,
) -> RemoteEventArgs | str:
    """
    Ask the model for a create_event call.

    Returns the validated tool arguments, or the model's plain-text reply
    when it chose not to create anything.

    Raises:
        RemoteExtractionError: on missing configuration, API errors and
            timeouts, or a reply that is neither a valid tool call nor text.
    """
    openai_client = openai_client or client(config)
    messages = build_messages(
        message, history, reference, members, current_user_name, config.HISTORY_LIMIT
    )
    try:
        resp = openai_client.chat.completions.create(
            model=config.OPENAI_MODEL,
            messages=messages,
            tools=[CREATE_EVENT_TOOL],
            temperature=0.2,
            timeout=config.EXTRACTION_TIMEOUT_SECONDS,
        )
    except OpenAIError as exc:
        raise RemoteExtractionError(f"model call failed: {exc}") from exc

    choice = resp.choices[0] if resp.choices else None
    if choice is None or choice.message is None:
        raise RemoteExtractionError("model returned no choices")

    for call in choice.message.tool_calls or []:
        if call.type == "function" and call.function.name == "create_event":
            try:
                args = RemoteEventArgs.model_validate_json(call.function.arguments)
            except ValidationError as exc:
                raise RemoteExtractionError(f"malformed create_event arguments: {exc}") from exc
            logger.info("remote_extraction_succeeded", title=args.title, recurring=bool(args.recurring_days))
            return args

    if choice.message.content:
        return choice.message.content.strip()
    raise RemoteExtractionError("model returned neither a tool call nor text")
