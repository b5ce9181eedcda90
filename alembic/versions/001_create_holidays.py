"""Create holidays table with (name, holiday_date, country_code) unique key

Revision ID: 001_holidays
Revises:
Create Date: holidays table for synchronized and built-in public holidays

"""
from alembic import op  # type: ignore
import sqlalchemy as sa  # type: ignore
from sqlalchemy import text  # type: ignore


# revision identifiers, used by Alembic.
revision = "001_holidays"
down_revision = None
branch_labels = None
depends_on = None

HOLIDAY_TYPES = ("PUBLIC", "NATIONAL", "TRADITIONAL", "RELIGIOUS", "MEMORIAL", "SUBSTITUTE", "ANNIVERSARY")


def _table_exists(connection, table_name: str) -> bool:
    result = connection.execute(
        text(
            "SELECT 1 FROM information_schema.tables "
            "WHERE table_schema = DATABASE() AND table_name = :t"
        ),
        {"t": table_name},
    )
    return result.scalar() is not None


def upgrade() -> None:
    connection = op.get_bind()
    if _table_exists(connection, "holidays"):
        return

    op.create_table(
        "holidays",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("holiday_date", sa.Date(), nullable=False),
        sa.Column("country_code", sa.String(2), nullable=False, server_default="KR"),
        sa.Column("holiday_type", sa.Enum(*HOLIDAY_TYPES, name="holidaytypeenum"), nullable=False, server_default="PUBLIC"),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false(), comment="Same month/day every year"),
        sa.Column("color", sa.String(7), nullable=True, comment="Display color derived from holiday_type"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "holiday_date", "country_code", name="uq_holiday_name_date_country"),
    )
    op.create_index("idx_holiday_date", "holidays", ["holiday_date"])
    op.create_index("idx_holiday_country", "holidays", ["country_code"])
    op.create_index("idx_holiday_type", "holidays", ["holiday_type"])
    op.create_index("idx_holiday_country_date", "holidays", ["country_code", "holiday_date"])


def downgrade() -> None:
    op.drop_table("holidays")
