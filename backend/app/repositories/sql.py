"""SQLAlchemy-backed repositories (PostgreSQL via asyncpg in production).

Each call opens its own short session and commits before returning, so a
write is visible to the caller's next read. Ordering is newest first on the
ORM's strictly increasing timestamps, with id as a deterministic tie-break.
"""

from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.models.contracts import (
    FloorPlan,
    LayoutPlan,
    LayoutSolution,
    Project,
    ProjectStatus,
    SpaceRequirement,
    StoredRequirement,
)
from app.models.db import FloorPlanRow, LayoutSolutionRow, ProjectRow, SpaceRequirementRow
from app.repositories.base import REQUIREMENT_FIELDS, ObjectStore, Store, solution_values


def _parse_id(value: str) -> uuid.UUID | None:
    """Path ids are untrusted strings; anything that isn't a UUID matches nothing."""
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        return None


def _to_project(row: ProjectRow) -> Project:
    return Project(
        id=str(row.id),
        name=row.name,
        description=row.description,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_floor_plan(row: FloorPlanRow) -> FloorPlan:
    return FloorPlan(
        id=str(row.id),
        project_id=str(row.project_id),
        name=row.name,
        storage_key=row.storage_key,
        floor_area_sqm=row.floor_area_sqm,
        usable_area_sqm=row.usable_area_sqm,
        dimensions_json=row.dimensions_json or {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_requirement(row: SpaceRequirementRow) -> StoredRequirement:
    return StoredRequirement(
        id=str(row.id),
        project_id=str(row.project_id),
        floor_plan_id=str(row.floor_plan_id),
        created_at=row.created_at,
        **{name: getattr(row, name) for name in REQUIREMENT_FIELDS},
    )


def _to_solution(row: LayoutSolutionRow) -> LayoutSolution:
    return LayoutSolution(
        id=str(row.id),
        floor_plan_id=str(row.floor_plan_id),
        space_requirement_id=str(row.space_requirement_id),
        solution_image_url=row.solution_image_url,
        feasibility_score=row.feasibility_score,
        is_feasible=row.is_feasible,
        workstations_placed=row.workstations_placed,
        meeting_rooms_placed=row.meeting_rooms_placed,
        amenities_placed=row.amenities_placed,
        utilization_rate=row.utilization_rate,
        constraints_met=row.constraints_met,
        suggestions=row.suggestions,
        generation_params=row.generation_params or {},
        created_at=row.created_at,
    )


class _SqlRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions


class SqlProjectRepository(_SqlRepository):
    async def create(
        self, name: str, description: str = "", status: ProjectStatus = "draft"
    ) -> Project:
        async with self._sessions() as session:
            row = ProjectRow(name=name, description=description, status=status)
            session.add(row)
            await session.commit()
            return _to_project(row)

    async def get(self, project_id: str) -> Project | None:
        pid = _parse_id(project_id)
        if pid is None:
            return None
        async with self._sessions() as session:
            row = await session.get(ProjectRow, pid)
            return _to_project(row) if row is not None else None

    async def list_all(self) -> list[Project]:
        async with self._sessions() as session:
            result = await session.execute(
                select(ProjectRow).order_by(
                    ProjectRow.updated_at.desc(), ProjectRow.id.desc()
                )
            )
            return [_to_project(row) for row in result.scalars()]

    async def delete(self, project_id: str) -> bool:
        pid = _parse_id(project_id)
        if pid is None:
            return False
        # Children go with the project via ON DELETE CASCADE.
        async with self._sessions() as session:
            result = await session.execute(delete(ProjectRow).where(ProjectRow.id == pid))
            await session.commit()
            return result.rowcount > 0


class SqlFloorPlanRepository(_SqlRepository):
    async def create(
        self,
        project_id: str,
        name: str,
        storage_key: str,
        floor_area_sqm: float | None = None,
        usable_area_sqm: float | None = None,
        dimensions_json: dict | None = None,
    ) -> FloorPlan:
        async with self._sessions() as session:
            row = FloorPlanRow(
                project_id=uuid.UUID(project_id),
                name=name,
                storage_key=storage_key,
                floor_area_sqm=floor_area_sqm,
                usable_area_sqm=usable_area_sqm,
                dimensions_json=dimensions_json or {},
            )
            session.add(row)
            await session.commit()
            return _to_floor_plan(row)

    async def get(self, floor_plan_id: str) -> FloorPlan | None:
        fid = _parse_id(floor_plan_id)
        if fid is None:
            return None
        async with self._sessions() as session:
            row = await session.get(FloorPlanRow, fid)
            return _to_floor_plan(row) if row is not None else None

    async def list_for_project(self, project_id: str) -> list[FloorPlan]:
        pid = _parse_id(project_id)
        if pid is None:
            return []
        async with self._sessions() as session:
            result = await session.execute(
                select(FloorPlanRow)
                .where(FloorPlanRow.project_id == pid)
                .order_by(FloorPlanRow.created_at.desc(), FloorPlanRow.id.desc())
            )
            return [_to_floor_plan(row) for row in result.scalars()]


class SqlRequirementsRepository(_SqlRepository):
    async def append(
        self, project_id: str, floor_plan_id: str, requirement: SpaceRequirement
    ) -> StoredRequirement:
        async with self._sessions() as session:
            row = SpaceRequirementRow(
                project_id=uuid.UUID(project_id),
                floor_plan_id=uuid.UUID(floor_plan_id),
                **requirement.model_dump(),
            )
            session.add(row)
            await session.commit()
            return _to_requirement(row)

    async def latest_for_floor_plan(self, floor_plan_id: str) -> StoredRequirement | None:
        fid = _parse_id(floor_plan_id)
        if fid is None:
            return None
        async with self._sessions() as session:
            result = await session.execute(
                select(SpaceRequirementRow)
                .where(SpaceRequirementRow.floor_plan_id == fid)
                .order_by(SpaceRequirementRow.created_at.desc(), SpaceRequirementRow.id.desc())
                .limit(1)
            )
            row = result.scalars().first()
            return _to_requirement(row) if row is not None else None


class SqlSolutionsRepository(_SqlRepository):
    async def append(
        self,
        floor_plan_id: str,
        space_requirement_id: str,
        plan: LayoutPlan,
        generation_params: dict,
    ) -> LayoutSolution:
        async with self._sessions() as session:
            row = LayoutSolutionRow(
                floor_plan_id=uuid.UUID(floor_plan_id),
                space_requirement_id=uuid.UUID(space_requirement_id),
                generation_params=dict(generation_params),
                **solution_values(plan),
            )
            session.add(row)
            await session.commit()
            return _to_solution(row)

    async def list_for_requirement(self, space_requirement_id: str) -> list[LayoutSolution]:
        rid = _parse_id(space_requirement_id)
        if rid is None:
            return []
        async with self._sessions() as session:
            result = await session.execute(
                select(LayoutSolutionRow)
                .where(LayoutSolutionRow.space_requirement_id == rid)
                .order_by(LayoutSolutionRow.created_at.desc(), LayoutSolutionRow.id.desc())
            )
            return [_to_solution(row) for row in result.scalars()]


def build_sql_store(engine: AsyncEngine, objects: ObjectStore) -> Store:
    sessions = async_sessionmaker(engine, expire_on_commit=False)
    return Store(
        projects=SqlProjectRepository(sessions),
        floor_plans=SqlFloorPlanRepository(sessions),
        requirements=SqlRequirementsRepository(sessions),
        solutions=SqlSolutionsRepository(sessions),
        objects=objects,
    )
