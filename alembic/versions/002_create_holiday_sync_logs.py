"""Add holiday_sync_logs (one row per reconciliation run)

Revision ID: 002_holiday_sync_logs
Revises: 001_holidays
Create Date: Record provider/fallback outcome of each holiday sync

"""
from alembic import op  # type: ignore
import sqlalchemy as sa  # type: ignore


revision = "002_holiday_sync_logs"
down_revision = "001_holidays"
branch_labels = None
depends_on = None

SYNC_STATES = ("UNSYNCED", "SYNCING", "SYNCED_FROM_PROVIDER", "SYNCED_FROM_FALLBACK")


def upgrade() -> None:
    op.create_table(
        "holiday_sync_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("country_code", sa.String(2), nullable=False),
        sa.Column("state", sa.Enum(*SYNC_STATES, name="syncstateenum"), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0", comment="Provider calls made"),
        sa.Column("inserted_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("details", sa.JSON(), nullable=True, comment="Result summary as JSON"),
        sa.Column("executed_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_sync_year_country", "holiday_sync_logs", ["year", "country_code"])
    op.create_index("idx_sync_executed_at", "holiday_sync_logs", ["executed_at"])


def downgrade() -> None:
    op.drop_table("holiday_sync_logs")
