from datetime import datetime

from pydantic import Field, field_validator

from lanshare.schemas.base import CamelModel


class MessageCreate(CamelModel):
    content: str = Field(..., min_length=1)
    from_device: int | None = None

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        # Whitespace is kept as sent, but a message must say something
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class MessageResponse(CamelModel):
    id: int
    content: str
    from_device: int | None
    sent_at: datetime
