"""initial schema

Revision ID: 20261019_01
Revises: 
Create Date: 2026-10-19 09:30:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

taste_primary = sa.Enum("SOUR", "PERFECT", "BITTER", name="tasteprimary")
taste_secondary = sa.Enum("WEAK", "STRONG", name="tastesecondary")
adjustment_direction = sa.Enum("FINER", "COARSER", "NO_CHANGE", name="adjustmentdirection")
confidence_level = sa.Enum("HIGH", "MEDIUM", "LOW", name="confidencelevel")
reason_code = sa.Enum(
    "TASTE_SOUR",
    "TASTE_BITTER",
    "TASTE_PERFECT",
    "TIME_TOO_FAST",
    "TIME_TOO_SLOW",
    "TIME_OPTIMAL",
    "NO_SIGNAL",
    name="reasoncode",
)


def upgrade() -> None:
    op.create_table(
        "grinder_configurations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("scale_min", sa.Float(), nullable=False),
        sa.Column("scale_max", sa.Float(), nullable=False),
        sa.Column("step_size", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_grinder_configurations_id"), "grinder_configurations", ["id"], unique=False)
    op.create_index(
        op.f("ix_grinder_configurations_created_at"),
        "grinder_configurations",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "beans",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("roast_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("grinder_configuration_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["grinder_configuration_id"],
            ["grinder_configurations.id"],
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_beans_id"), "beans", ["id"], unique=False)

    op.create_table(
        "shots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("bean_id", sa.Integer(), nullable=False),
        sa.Column("dose_grams", sa.Float(), nullable=False),
        sa.Column("yield_grams", sa.Float(), nullable=False),
        sa.Column("extraction_time_seconds", sa.Integer(), nullable=True),
        sa.Column("grinder_setting", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("taste_primary", taste_primary, nullable=True),
        sa.Column("taste_secondary", taste_secondary, nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["bean_id"], ["beans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shots_id"), "shots", ["id"], unique=False)
    op.create_index(op.f("ix_shots_bean_id"), "shots", ["bean_id"], unique=False)
    op.create_index("ix_shots_bean_id_created_at", "shots", ["bean_id", "created_at"], unique=False)

    op.create_table(
        "shot_recommendations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shot_id", sa.Integer(), nullable=False),
        sa.Column("recommended_grind_setting", sa.Float(), nullable=False),
        sa.Column("adjustment_direction", adjustment_direction, nullable=False),
        sa.Column("adjustment_steps", sa.Integer(), nullable=False),
        sa.Column("confidence_level", confidence_level, nullable=False),
        sa.Column("reason_code", reason_code, nullable=False),
        sa.Column("was_followed", sa.Boolean(), nullable=False),
        sa.Column("evaluated_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("metadata_json", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["shot_id"], ["shots.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("shot_id", name="uq_shot_recommendations_shot_id"),
    )
    op.create_index(op.f("ix_shot_recommendations_id"), "shot_recommendations", ["id"], unique=False)
    op.create_index(
        op.f("ix_shot_recommendations_was_followed"),
        "shot_recommendations",
        ["was_followed"],
        unique=False,
    )
    op.create_index(
        op.f("ix_shot_recommendations_created_at"),
        "shot_recommendations",
        ["created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_shot_recommendations_created_at"), table_name="shot_recommendations")
    op.drop_index(op.f("ix_shot_recommendations_was_followed"), table_name="shot_recommendations")
    op.drop_index(op.f("ix_shot_recommendations_id"), table_name="shot_recommendations")
    op.drop_table("shot_recommendations")

    op.drop_index("ix_shots_bean_id_created_at", table_name="shots")
    op.drop_index(op.f("ix_shots_bean_id"), table_name="shots")
    op.drop_index(op.f("ix_shots_id"), table_name="shots")
    op.drop_table("shots")

    op.drop_index(op.f("ix_beans_id"), table_name="beans")
    op.drop_table("beans")

    op.drop_index(op.f("ix_grinder_configurations_created_at"), table_name="grinder_configurations")
    op.drop_index(op.f("ix_grinder_configurations_id"), table_name="grinder_configurations")
    op.drop_table("grinder_configurations")
