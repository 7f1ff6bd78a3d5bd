from fastapi import APIRouter

from app.assistant import process_message
from app.calendar_store import household_roster
from app.schemas import AssistantResponse, ChatIn
from app.security import DB, CurrentMember

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=AssistantResponse)
def chat_once(payload: ChatIn, db: DB, member: CurrentMember):
    # Fill in the signed-in member's household when the client sent no roster.
    if payload.household_members is None:
        payload = payload.model_copy(update={
            "household_members": household_roster(db, member.household_id),
            "current_user_name": payload.current_user_name or member.name,
        })
    elif payload.current_user_name is None:
        payload = payload.model_copy(update={"current_user_name": member.name})

    return process_message(payload)
