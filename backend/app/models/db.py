"""SQLAlchemy ORM models for the office planner.

Requirements and layout solutions are insert-only: a new requirement row
supersedes the previous one for its floor plan, and solutions are historical
snapshots that are never updated.
"""

import threading
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonDict = JSON().with_variant(JSONB(), "postgresql")


_clock_lock = threading.Lock()
_last_stamp: datetime | None = None


def _clock() -> datetime:
    return datetime.now(timezone.utc)


def _utcnow() -> datetime:
    """Wall-clock UTC, strictly increasing within the process.

    "Current requirement" and solution history order by created_at, so two
    inserts in the same microsecond must not share a timestamp.
    """
    global _last_stamp  # noqa: PLW0603
    with _clock_lock:
        now = _clock()
        if _last_stamp is not None and now <= _last_stamp:
            now = _last_stamp + timedelta(microseconds=1)
        _last_stamp = now
        return now


class Base(DeclarativeBase):
    pass


class ProjectRow(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'active', 'archived')", name="ck_projects_status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    floor_plans: Mapped[list["FloorPlanRow"]] = relationship(
        back_populates="project", cascade="all, delete", passive_deletes=True
    )


class FloorPlanRow(Base):
    __tablename__ = "floor_plans"
    __table_args__ = (Index("idx_floor_plans_project", "project_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False)
    floor_area_sqm: Mapped[float | None] = mapped_column(Float, nullable=True)
    usable_area_sqm: Mapped[float | None] = mapped_column(Float, nullable=True)
    dimensions_json: Mapped[dict] = mapped_column(JsonDict, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    project: Mapped["ProjectRow"] = relationship(back_populates="floor_plans")


class SpaceRequirementRow(Base):
    __tablename__ = "space_requirements"
    __table_args__ = (Index("idx_space_requirements_floor_plan", "floor_plan_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    floor_plan_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("floor_plans.id", ondelete="SET NULL"), nullable=True
    )
    workstations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meeting_rooms_small: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meeting_rooms_medium: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    meeting_rooms_large: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    phone_booths: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    breakout_areas: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    kitchen_pantry: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reception_area: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    storage_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    server_room: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    additional_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class LayoutSolutionRow(Base):
    __tablename__ = "layout_solutions"
    __table_args__ = (
        Index("idx_layout_solutions_requirement", "space_requirement_id", "created_at"),
        CheckConstraint(
            "feasibility_score >= 0 AND feasibility_score <= 100",
            name="ck_layout_solutions_score",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    floor_plan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("floor_plans.id", ondelete="CASCADE"), nullable=False
    )
    space_requirement_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("space_requirements.id", ondelete="CASCADE"), nullable=False
    )
    solution_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    feasibility_score: Mapped[float] = mapped_column(Float, nullable=False)
    is_feasible: Mapped[bool] = mapped_column(Boolean, nullable=False)
    workstations_placed: Mapped[int] = mapped_column(Integer, nullable=False)
    meeting_rooms_placed: Mapped[dict] = mapped_column(JsonDict, nullable=False)
    amenities_placed: Mapped[dict] = mapped_column(JsonDict, nullable=False)
    utilization_rate: Mapped[float] = mapped_column(Float, nullable=False)
    constraints_met: Mapped[dict] = mapped_column(JsonDict, nullable=False)
    suggestions: Mapped[str] = mapped_column(Text, nullable=False, default="")
    generation_params: Mapped[dict] = mapped_column(JsonDict, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
