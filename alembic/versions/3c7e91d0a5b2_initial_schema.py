"""initial_schema

Revision ID: 3c7e91d0a5b2
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the farm profile, growth cycle, stage boundary override, historical
baseline and saved analysis tables plus their PostgreSQL enum types.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c7e91d0a5b2"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# ── Enum type names (PostgreSQL CREATE TYPE) ────────────────────────────────
ENUM_RICE_STAGE = postgresql.ENUM(
    "nursery",
    "vegetative",
    "tillering",
    "panicle_initiation",
    "booting",
    "heading",
    "flowering",
    "grain_fill",
    "maturity",
    name="rice_stage",
    create_type=False,
)
ENUM_PLANTING_METHOD = postgresql.ENUM(
    "transplanted", "direct_seeded", name="planting_method", create_type=False
)
ENUM_RISK_LEVEL = postgresql.ENUM(
    "low", "medium", "high", name="risk_level", create_type=False
)


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("uuid_generate_v4()"),
        nullable=False,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
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
    ]


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. Create enum types ────────────────────────────────────────────
    ENUM_RICE_STAGE.create(op.get_bind(), checkfirst=True)
    ENUM_PLANTING_METHOD.create(op.get_bind(), checkfirst=True)
    ENUM_RISK_LEVEL.create(op.get_bind(), checkfirst=True)

    # ── 2. Crop tracking ────────────────────────────────────────────────

    # farm_profiles
    op.create_table(
        "farm_profiles",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("province", sa.String(128), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_farm_profiles_user_id", "farm_profiles", ["user_id"])

    # growth_cycles
    op.create_table(
        "growth_cycles",
        _id_column(),
        sa.Column("farm_profile_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("variety", sa.String(128), nullable=False),
        sa.Column("method", ENUM_PLANTING_METHOD, nullable=False),
        sa.Column("cycle_start_date", sa.Date(), nullable=False),
        sa.Column("cycle_end_date", sa.Date(), nullable=True),
        *_timestamp_columns(),
        sa.ForeignKeyConstraint(
            ["farm_profile_id"], ["farm_profiles.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "farm_profile_id",
            "cycle_start_date",
            name="uq_growth_cycles_profile_start",
        ),
    )

    # stage_boundary_overrides
    op.create_table(
        "stage_boundary_overrides",
        _id_column(),
        sa.Column("growth_cycle_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("stage", ENUM_RICE_STAGE, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        *_timestamp_columns(),
        sa.ForeignKeyConstraint(
            ["growth_cycle_id"], ["growth_cycles.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_stage_boundary_overrides_cycle_start",
        "stage_boundary_overrides",
        ["growth_cycle_id", "start_date"],
    )

    # ── 3. Reference data ───────────────────────────────────────────────

    # historical_records
    op.create_table(
        "historical_records",
        _id_column(),
        sa.Column("quarter", sa.SmallInteger(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("yield_tonnes_per_ha", sa.Float(), nullable=False),
        sa.Column("mean_temperature", sa.Float(), nullable=False),
        sa.Column("total_precipitation", sa.Float(), nullable=False),
        sa.Column("mean_humidity", sa.Float(), nullable=False),
        sa.Column("mean_wind", sa.Float(), nullable=False),
        sa.Column("sample_size", sa.Integer(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("quarter", "year", name="uq_historical_records_quarter_year"),
        sa.CheckConstraint("quarter BETWEEN 1 AND 4", name="ck_historical_records_quarter"),
    )

    # ── 4. Saved analyses ───────────────────────────────────────────────

    # planting_analyses
    op.create_table(
        "planting_analyses",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("location_name", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quarter", sa.SmallInteger(), nullable=False),
        sa.Column("predicted_yield", sa.Float(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("risk_level", ENUM_RISK_LEVEL, nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_planting_analyses_user_created",
        "planting_analyses",
        ["user_id", "created_at"],
    )


def downgrade() -> None:
    # ── Drop tables in reverse dependency order ─────────────────────────
    op.drop_table("planting_analyses")
    op.drop_table("historical_records")
    op.drop_table("stage_boundary_overrides")
    op.drop_table("growth_cycles")
    op.drop_table("farm_profiles")

    # ── Drop enum types ─────────────────────────────────────────────────
    ENUM_RISK_LEVEL.drop(op.get_bind(), checkfirst=True)
    ENUM_PLANTING_METHOD.drop(op.get_bind(), checkfirst=True)
    ENUM_RICE_STAGE.drop(op.get_bind(), checkfirst=True)
