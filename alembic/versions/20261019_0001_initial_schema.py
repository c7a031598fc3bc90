"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "links",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("subscriber_id", sa.String(length=64), nullable=False),
        sa.Column("release_id", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_links_subscriber_id"), "links", ["subscriber_id"], unique=False)
    op.create_index(op.f("ix_links_release_id"), "links", ["release_id"], unique=False)

    op.create_table(
        "download_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subscriber_id", sa.String(length=64), nullable=False),
        sa.Column("release_id", sa.String(length=32), nullable=False),
        sa.Column("count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subscriber_id", "release_id", name="uq_download_records_subscriber_release"),
    )
    op.create_index(op.f("ix_download_records_id"), "download_records", ["id"], unique=False)
    op.create_index(op.f("ix_download_records_subscriber_id"), "download_records", ["subscriber_id"], unique=False)

    op.create_table(
        "subscribers",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_subscribers_email"), "subscribers", ["email"], unique=True)

    op.create_table(
        "config_entries",
        sa.Column("key", sa.String(length=120), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("config_entries")
    op.drop_index(op.f("ix_subscribers_email"), table_name="subscribers")
    op.drop_table("subscribers")
    op.drop_index(op.f("ix_download_records_subscriber_id"), table_name="download_records")
    op.drop_index(op.f("ix_download_records_id"), table_name="download_records")
    op.drop_table("download_records")
    op.drop_index(op.f("ix_links_release_id"), table_name="links")
    op.drop_index(op.f("ix_links_subscriber_id"), table_name="links")
    op.drop_table("links")
