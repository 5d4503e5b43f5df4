"""Initial migration - devices, files, transfers and messages

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEVICE_TYPES = ("mobile", "tablet", "desktop", "laptop", "unknown")
TRANSFER_STATUSES = ("pending", "active", "completed", "failed")


def upgrade() -> None:
    # Devices table
    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column(
            "type",
            sa.Enum(*DEVICE_TYPES, name="devicetype", native_enum=False, length=20),
            nullable=False,
        ),
        sa.Column("ip_address", sa.String(255), nullable=False),
        sa.Column("is_connected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )

    # Files table
    op.create_table(
        "files",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("filename", sa.String(64), nullable=False, unique=True),
        sa.Column("original_name", sa.String(1024), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(255), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("devices.id"), nullable=True),
        sqlite_autoincrement=True,
    )

    # Transfers table
    op.create_table(
        "transfers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "file_id",
            sa.Integer(),
            sa.ForeignKey("files.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("from_device", sa.Integer(), sa.ForeignKey("devices.id"), nullable=True),
        sa.Column("to_device", sa.Integer(), sa.ForeignKey("devices.id"), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*TRANSFER_STATUSES, name="transferstatus", native_enum=False, length=20),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sqlite_autoincrement=True,
    )

    op.create_index("ix_transfers_file_id", "transfers", ["file_id"])
    op.create_index("ix_transfers_status", "transfers", ["status"])

    # Messages table
    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("from_device", sa.Integer(), sa.ForeignKey("devices.id"), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_index("ix_transfers_status", table_name="transfers")
    op.drop_index("ix_transfers_file_id", table_name="transfers")
    op.drop_table("transfers")
    op.drop_table("files")
    op.drop_table("devices")
