from fastapi import APIRouter

from lanshare.api.deps import DbSession, LiveBroadcaster
from lanshare.schemas.events import NewMessageEvent
from lanshare.schemas.message import MessageCreate, MessageResponse
from lanshare.services import message_service

router = APIRouter()


@router.get("", response_model=list[MessageResponse])
async def list_messages(db: DbSession):
    """List messages in the order they were sent."""
    messages = await message_service.list_messages(db)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post("", response_model=MessageResponse)
async def send_message(message_data: MessageCreate, db: DbSession, broadcaster: LiveBroadcaster):
    message = await message_service.create_message(db, message_data)
    response = MessageResponse.model_validate(message)
    broadcaster.broadcast(NewMessageEvent(data=response))
    return response
