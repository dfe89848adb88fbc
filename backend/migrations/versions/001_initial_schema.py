"""Initial schema: projects, floor plans, space requirements, layout solutions.

Revision ID: 001
Revises: (none)
Create Date: 2026-10-17
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def _fk(name: str, target: str, *, ondelete: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    # --- projects ---
    op.create_table(
        "projects",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("status", sa.String(20), server_default="draft", nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'archived')", name="ck_projects_status"
        ),
    )

    # --- floor_plans ---
    op.create_table(
        "floor_plans",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _fk("project_id", "projects.id", ondelete="CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("storage_key", sa.String(500), nullable=False),
        sa.Column("floor_area_sqm", sa.Float(), nullable=True),
        sa.Column("usable_area_sqm", sa.Float(), nullable=True),
        sa.Column(
            "dimensions_json", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("idx_floor_plans_project", "floor_plans", ["project_id", "created_at"])

    # --- space_requirements ---
    op.create_table(
        "space_requirements",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _fk("project_id", "projects.id", ondelete="CASCADE"),
        _fk("floor_plan_id", "floor_plans.id", ondelete="SET NULL", nullable=True),
        *[
            sa.Column(name, sa.Integer(), server_default="0", nullable=False)
            for name in (
                "workstations",
                "meeting_rooms_small",
                "meeting_rooms_medium",
                "meeting_rooms_large",
                "phone_booths",
                "breakout_areas",
            )
        ],
        sa.Column("kitchen_pantry", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("reception_area", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("storage_rooms", sa.Integer(), server_default="0", nullable=False),
        sa.Column("server_room", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("additional_notes", sa.Text(), server_default="", nullable=False),
        _timestamp("created_at"),
    )
    op.create_index(
        "idx_space_requirements_floor_plan",
        "space_requirements",
        ["floor_plan_id", "created_at"],
    )

    # --- layout_solutions ---
    op.create_table(
        "layout_solutions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _fk("floor_plan_id", "floor_plans.id", ondelete="CASCADE"),
        _fk("space_requirement_id", "space_requirements.id", ondelete="CASCADE"),
        sa.Column("solution_image_url", sa.Text(), nullable=True),
        sa.Column("feasibility_score", sa.Float(), nullable=False),
        sa.Column("is_feasible", sa.Boolean(), nullable=False),
        sa.Column("workstations_placed", sa.Integer(), nullable=False),
        sa.Column("meeting_rooms_placed", JSONB(), nullable=False),
        sa.Column("amenities_placed", JSONB(), nullable=False),
        sa.Column("utilization_rate", sa.Float(), nullable=False),
        sa.Column("constraints_met", JSONB(), nullable=False),
        sa.Column("suggestions", sa.Text(), server_default="", nullable=False),
        sa.Column(
            "generation_params", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False
        ),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "feasibility_score >= 0 AND feasibility_score <= 100",
            name="ck_layout_solutions_score",
        ),
    )
    op.create_index(
        "idx_layout_solutions_requirement",
        "layout_solutions",
        ["space_requirement_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_table("layout_solutions")
    op.drop_table("space_requirements")
    op.drop_table("floor_plans")
    op.drop_table("projects")
