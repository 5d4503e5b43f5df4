from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lanshare.models.base import Base, IntegerIDMixin, UTCDateTime, utcnow


class File(Base, IntegerIDMixin):
    __tablename__ = "files"

    # Generated name inside the content area
    filename: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # User supplied, only used for display and the download header
    original_name: Mapped[str] = mapped_column(String(1024), nullable=False)

    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    uploaded_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("devices.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<File {self.id} ({self.original_name})>"
