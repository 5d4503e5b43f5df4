from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lanshare.models.base import utcnow
from lanshare.models.message import Message
from lanshare.schemas.message import MessageCreate
from lanshare.services.device_service import require_device


async def list_messages(db: AsyncSession) -> list[Message]:
    """All messages, oldest first."""
    result = await db.execute(select(Message).order_by(Message.id))
    return list(result.scalars().all())


async def create_message(db: AsyncSession, data: MessageCreate) -> Message:
    await require_device(db, data.from_device, "fromDevice")

    message = Message(
        content=data.content,
        from_device=data.from_device,
        sent_at=utcnow(),
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return message
