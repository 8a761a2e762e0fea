"""Video review notes and ledger rows that outlive deleted videos.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Adds:
- quality_note and reviewed_at columns to videos
- cost_logs.video_id foreign key switched from CASCADE to SET NULL

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# PostgreSQL's name for the unnamed constraint created in 0001
COST_LOG_VIDEO_FK = "cost_logs_video_id_fkey"


def upgrade() -> None:
    op.add_column("videos", sa.Column("quality_note", sa.Text(), nullable=True))
    op.add_column(
        "videos", sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True)
    )

    op.drop_constraint(COST_LOG_VIDEO_FK, "cost_logs", type_="foreignkey")
    op.create_foreign_key(
        COST_LOG_VIDEO_FK, "cost_logs", "videos", ["video_id"], ["id"], ondelete="SET NULL"
    )


def downgrade() -> None:
    op.drop_constraint(COST_LOG_VIDEO_FK, "cost_logs", type_="foreignkey")
    op.create_foreign_key(
        COST_LOG_VIDEO_FK, "cost_logs", "videos", ["video_id"], ["id"], ondelete="CASCADE"
    )

    op.drop_column("videos", "reviewed_at")
    op.drop_column("videos", "quality_note")
