"""Tests for SQLAlchemy ORM models.

Validates that:
- All models are registered with Base.metadata
- Foreign keys use the intended delete behaviour
- Required indexes and check constraints exist
- Requirement columns mirror the SpaceRequirement contract
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import CheckConstraint

from app.models import db
from app.models.contracts import SpaceRequirement
from app.models.db import (
    Base,
    FloorPlanRow,
    LayoutSolutionRow,
    ProjectRow,
    SpaceRequirementRow,
)


def _fk(table, column: str):
    return next(iter(table.__table__.c[column].foreign_keys))


def _check_names(table) -> set[str]:
    return {c.name for c in table.__table__.constraints if isinstance(c, CheckConstraint)}


class TestAllTablesRegistered:
    def test_table_names(self):
        """All four tables are registered."""
        assert set(Base.metadata.tables) == {
            "projects",
            "floor_plans",
            "space_requirements",
            "layout_solutions",
        }


class TestProjectRow:
    """Project is the root entity; floor plans and requirements cascade from it."""

    def test_uuid_primary_key(self):
        """Primary key is the id column."""
        assert ProjectRow.__table__.c.id.primary_key

    def test_status_constraint(self):
        """Status is limited to draft, active, archived."""
        assert "ck_projects_status" in _check_names(ProjectRow)

    def test_has_timestamps(self):
        """created_at and updated_at columns exist."""
        assert "created_at" in ProjectRow.__table__.c
        assert "updated_at" in ProjectRow.__table__.c


class TestFloorPlanRow:
    def test_cascade_delete(self):
        """Floor plans go with their project."""
        assert _fk(FloorPlanRow, "project_id").ondelete == "CASCADE"

    def test_has_index(self):
        """Index on (project_id, created_at) exists."""
        assert "idx_floor_plans_project" in {i.name for i in FloorPlanRow.__table__.indexes}

    def test_area_columns_nullable(self):
        """Area is optional; unknown means no ceiling."""
        assert FloorPlanRow.__table__.c.floor_area_sqm.nullable
        assert FloorPlanRow.__table__.c.usable_area_sqm.nullable


class TestSpaceRequirementRow:
    def test_project_cascade_and_floor_plan_set_null(self):
        """Project delete removes rows; floor-plan delete only clears the link."""
        assert _fk(SpaceRequirementRow, "project_id").ondelete == "CASCADE"
        assert _fk(SpaceRequirementRow, "floor_plan_id").ondelete == "SET NULL"

    def test_columns_match_contract(self):
        """Every SpaceRequirement field has a column."""
        columns = set(SpaceRequirementRow.__table__.c.keys())
        assert set(SpaceRequirement.model_fields) <= columns

    def test_has_index(self):
        """Latest-requirement lookup is indexed."""
        names = {i.name for i in SpaceRequirementRow.__table__.indexes}
        assert "idx_space_requirements_floor_plan" in names


class TestLayoutSolutionRow:
    def test_cascade_delete(self):
        """Solutions go with their floor plan and requirement."""
        assert _fk(LayoutSolutionRow, "floor_plan_id").ondelete == "CASCADE"
        assert _fk(LayoutSolutionRow, "space_requirement_id").ondelete == "CASCADE"

    def test_score_constraint(self):
        """Score is bounded to 0-100 in the database."""
        assert "ck_layout_solutions_score" in _check_names(LayoutSolutionRow)

    def test_image_url_nullable(self):
        """No image is rendered yet."""
        assert LayoutSolutionRow.__table__.c.solution_image_url.nullable


class TestTimestampDefault:
    """created_at defaults never repeat, so newest-first ordering is total."""

    def test_strictly_increasing_when_clock_stalls(self, monkeypatch):
        """A stalled clock still yields distinct, increasing stamps."""
        frozen = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        monkeypatch.setattr(db, "_clock", lambda: frozen)
        monkeypatch.setattr(db, "_last_stamp", None)

        stamps = [db._utcnow() for _ in range(3)]

        assert stamps[0] == frozen
        assert stamps[1] == frozen + timedelta(microseconds=1)
        assert stamps[2] == frozen + timedelta(microseconds=2)

    def test_clock_going_backwards(self, monkeypatch):
        """A clock step back does not reorder later inserts."""
        readings = iter(
            [
                datetime(2026, 3, 1, 9, 0, 5, tzinfo=timezone.utc),
                datetime(2026, 3, 1, 9, 0, 1, tzinfo=timezone.utc),
            ]
        )
        monkeypatch.setattr(db, "_clock", lambda: next(readings))
        monkeypatch.setattr(db, "_last_stamp", None)

        first = db._utcnow()
        second = db._utcnow()

        assert second > first

    def test_follows_wall_clock(self):
        """Normal readings pass through unchanged in UTC."""
        stamp = db._utcnow()
        assert stamp.tzinfo is not None
        assert abs(datetime.now(timezone.utc) - stamp) < timedelta(seconds=5)
