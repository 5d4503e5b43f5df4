"""
Transfer model tracking a file moving between devices.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from lanshare.models.base import Base, IntegerIDMixin, UTCDateTime, utcnow


class TransferStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATUSES = (TransferStatus.PENDING, TransferStatus.ACTIVE)


class Transfer(Base, IntegerIDMixin):
    __tablename__ = "transfers"

    # Nulled when the file is deleted
    file_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("files.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    from_device: Mapped[int | None] = mapped_column(Integer, ForeignKey("devices.id"), nullable=True)
    to_device: Mapped[int | None] = mapped_column(Integer, ForeignKey("devices.id"), nullable=True)

    status: Mapped[TransferStatus] = mapped_column(
        SQLEnum(
            TransferStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=TransferStatus.PENDING,
        nullable=False,
        index=True,
    )
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # 0-100

    started_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Transfer {self.id} file={self.file_id} {self.status} {self.progress}%>"
