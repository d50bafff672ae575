"""add_domain_analyses

Creates the domain_analyses table: one assistant analysis per
(date, dimension_code), full answer as JSONB plus summary columns.

Revision ID: a1c3e5d7f901
Revises:
Create Date: 2025-10-20 00:01:00.000000+00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "a1c3e5d7f901"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "domain_analyses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("dimension_code", sa.String(length=20), nullable=False),
        sa.Column("dimension_name", sa.String(length=100), nullable=False),
        sa.Column("as_of_date", sa.Date(), nullable=False),
        sa.Column("full_analysis", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("indicator_count", sa.Integer(), nullable=True),
        sa.Column("integrated_read_bullets", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("overall_conclusion_summary", sa.Text(), nullable=True),
        sa.Column("tone_headline", sa.Text(), nullable=True),
        sa.Column("tone_bullets", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_domain_analyses")),
        sa.UniqueConstraint(
            "date", "dimension_code", name="uq_domain_analyses_date_dimension_code"
        ),
    )
    op.create_index("idx_domain_analyses_dimension_code", "domain_analyses", ["dimension_code"])
    op.create_index("idx_domain_analyses_date", "domain_analyses", ["date"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("idx_domain_analyses_date", table_name="domain_analyses")
    op.drop_index("idx_domain_analyses_dimension_code", table_name="domain_analyses")
    op.drop_table("domain_analyses")
