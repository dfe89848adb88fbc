"""In-memory repositories.

Default backend when USE_DATABASE is off: lets the API run and be tested
without PostgreSQL. State lives in process dicts and is lost on restart.
"""

from __future__ import annotations

import itertools
import uuid
from datetime import datetime, timezone

from app.models.contracts import (
    FloorPlan,
    LayoutPlan,
    LayoutSolution,
    Project,
    ProjectStatus,
    SpaceRequirement,
    StoredRequirement,
)
from app.repositories.base import ObjectStore, Store, solution_values


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _Sequenced:
    """Insertion counter used to break created_at ties when sorting newest first."""

    def __init__(self) -> None:
        self._seq = itertools.count()
        self._order: dict[str, int] = {}

    def _stamp(self, record_id: str) -> None:
        self._order[record_id] = next(self._seq)

    def _newest_first(self, records: list, key: str = "created_at") -> list:
        return sorted(
            records,
            key=lambda r: (getattr(r, key), self._order[r.id]),
            reverse=True,
        )


class InMemoryProjectRepository(_Sequenced):
    def __init__(self, cascade: list) -> None:
        super().__init__()
        self._projects: dict[str, Project] = {}
        # repositories holding children keyed by project
        self._cascade = cascade

    async def create(
        self, name: str, description: str = "", status: ProjectStatus = "draft"
    ) -> Project:
        now = _now()
        project = Project(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self._projects[project.id] = project
        self._stamp(project.id)
        return project

    async def get(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    async def list_all(self) -> list[Project]:
        return self._newest_first(list(self._projects.values()), key="updated_at")

    async def delete(self, project_id: str) -> bool:
        if self._projects.pop(project_id, None) is None:
            return False
        for repo in self._cascade:
            repo.drop_project(project_id)
        return True


class InMemoryFloorPlanRepository(_Sequenced):
    def __init__(self) -> None:
        super().__init__()
        self._floor_plans: dict[str, FloorPlan] = {}

    async def create(
        self,
        project_id: str,
        name: str,
        storage_key: str,
        floor_area_sqm: float | None = None,
        usable_area_sqm: float | None = None,
        dimensions_json: dict | None = None,
    ) -> FloorPlan:
        now = _now()
        floor_plan = FloorPlan(
            id=str(uuid.uuid4()),
            project_id=project_id,
            name=name,
            storage_key=storage_key,
            floor_area_sqm=floor_area_sqm,
            usable_area_sqm=usable_area_sqm,
            dimensions_json=dimensions_json or {},
            created_at=now,
            updated_at=now,
        )
        self._floor_plans[floor_plan.id] = floor_plan
        self._stamp(floor_plan.id)
        return floor_plan

    async def get(self, floor_plan_id: str) -> FloorPlan | None:
        return self._floor_plans.get(floor_plan_id)

    async def list_for_project(self, project_id: str) -> list[FloorPlan]:
        return self._newest_first(
            [fp for fp in self._floor_plans.values() if fp.project_id == project_id]
        )

    def drop_project(self, project_id: str) -> None:
        for fp_id in [k for k, fp in self._floor_plans.items() if fp.project_id == project_id]:
            del self._floor_plans[fp_id]


class InMemoryRequirementsRepository(_Sequenced):
    def __init__(self) -> None:
        super().__init__()
        self._requirements: dict[str, StoredRequirement] = {}

    async def append(
        self, project_id: str, floor_plan_id: str, requirement: SpaceRequirement
    ) -> StoredRequirement:
        stored = StoredRequirement(
            **requirement.model_dump(),
            id=str(uuid.uuid4()),
            project_id=project_id,
            floor_plan_id=floor_plan_id,
            created_at=_now(),
        )
        self._requirements[stored.id] = stored
        self._stamp(stored.id)
        return stored

    async def latest_for_floor_plan(self, floor_plan_id: str) -> StoredRequirement | None:
        matches = self._newest_first(
            [r for r in self._requirements.values() if r.floor_plan_id == floor_plan_id]
        )
        return matches[0] if matches else None

    def drop_project(self, project_id: str) -> set[str]:
        dropped = {k for k, r in self._requirements.items() if r.project_id == project_id}
        for req_id in dropped:
            del self._requirements[req_id]
        return dropped


class InMemorySolutionsRepository(_Sequenced):
    def __init__(self, requirements: InMemoryRequirementsRepository) -> None:
        super().__init__()
        self._solutions: dict[str, LayoutSolution] = {}
        self._requirements = requirements

    async def append(
        self,
        floor_plan_id: str,
        space_requirement_id: str,
        plan: LayoutPlan,
        generation_params: dict,
    ) -> LayoutSolution:
        solution = LayoutSolution(
            id=str(uuid.uuid4()),
            floor_plan_id=floor_plan_id,
            space_requirement_id=space_requirement_id,
            generation_params=dict(generation_params),
            created_at=_now(),
            **solution_values(plan),
        )
        self._solutions[solution.id] = solution
        self._stamp(solution.id)
        return solution

    async def list_for_requirement(self, space_requirement_id: str) -> list[LayoutSolution]:
        return self._newest_first(
            [s for s in self._solutions.values() if s.space_requirement_id == space_requirement_id]
        )

    def drop_project(self, project_id: str) -> None:
        dropped = self._requirements.drop_project(project_id)
        for sol_id in [k for k, s in self._solutions.items() if s.space_requirement_id in dropped]:
            del self._solutions[sol_id]


def build_memory_store(objects: ObjectStore) -> Store:
    floor_plans = InMemoryFloorPlanRepository()
    requirements = InMemoryRequirementsRepository()
    solutions = InMemorySolutionsRepository(requirements)
    # solutions drops requirements too, so they are not listed separately
    projects = InMemoryProjectRepository(cascade=[solutions, floor_plans])
    return Store(
        projects=projects,
        floor_plans=floor_plans,
        requirements=requirements,
        solutions=solutions,
        objects=objects,
    )
