from datetime import datetime

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from lanshare.models.base import Base, IntegerIDMixin, UTCDateTime, utcnow


class Message(Base, IntegerIDMixin):
    """Text message. Immutable once sent."""
    __tablename__ = "messages"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    from_device: Mapped[int | None] = mapped_column(Integer, ForeignKey("devices.id"), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Message {self.id} from={self.from_device}>"
