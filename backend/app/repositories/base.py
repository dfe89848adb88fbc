"""Capability interfaces for persistence and object storage.

The allocation estimator never calls these; the HTTP layer loads inputs
through them, runs the estimator, and appends the result.

Contracts every implementation honours:
- requirements and solutions are insert-only
- the newest requirement for a floor plan is the current one
- lists come back newest first
- a write is visible to the next read from the same caller
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from app.models.contracts import (
    FloorPlan,
    LayoutPlan,
    LayoutSolution,
    Project,
    ProjectStatus,
    SpaceRequirement,
    StoredRequirement,
)


class ProjectRepository(Protocol):
    async def create(
        self, name: str, description: str = "", status: ProjectStatus = "draft"
    ) -> Project: ...

    async def get(self, project_id: str) -> Project | None: ...

    async def list_all(self) -> list[Project]:
        """Most recently updated first."""
        ...

    async def delete(self, project_id: str) -> bool:
        """Delete the project and everything under it. False if it did not exist."""
        ...


class FloorPlanRepository(Protocol):
    async def create(
        self,
        project_id: str,
        name: str,
        storage_key: str,
        floor_area_sqm: float | None = None,
        usable_area_sqm: float | None = None,
        dimensions_json: dict | None = None,
    ) -> FloorPlan: ...

    async def get(self, floor_plan_id: str) -> FloorPlan | None: ...

    async def list_for_project(self, project_id: str) -> list[FloorPlan]: ...


class RequirementsRepository(Protocol):
    async def append(
        self, project_id: str, floor_plan_id: str, requirement: SpaceRequirement
    ) -> StoredRequirement: ...

    async def latest_for_floor_plan(self, floor_plan_id: str) -> StoredRequirement | None: ...


class SolutionsRepository(Protocol):
    async def append(
        self,
        floor_plan_id: str,
        space_requirement_id: str,
        plan: LayoutPlan,
        generation_params: dict,
    ) -> LayoutSolution: ...

    async def list_for_requirement(self, space_requirement_id: str) -> list[LayoutSolution]: ...


class ObjectStore(Protocol):
    """Blocking object storage; call from a worker thread in async code."""

    def upload(self, key: str, data: bytes, content_type: str) -> str: ...

    def url_for(self, key: str) -> str: ...

    def delete(self, key: str) -> None: ...

    def delete_prefix(self, prefix: str) -> None: ...


@dataclass
class Store:
    projects: ProjectRepository
    floor_plans: FloorPlanRepository
    requirements: RequirementsRepository
    solutions: SolutionsRepository
    objects: ObjectStore


REQUIREMENT_FIELDS = tuple(SpaceRequirement.model_fields)


def solution_values(plan: LayoutPlan) -> dict:
    """Flatten a LayoutPlan into the persisted solution columns.

    Scores and rates are stored as real numbers; breakdowns as plain dicts.
    """
    placement = plan.placement
    return {
        "feasibility_score": float(plan.feasibility_score),
        "is_feasible": plan.is_feasible,
        "workstations_placed": placement.workstations_placed,
        "meeting_rooms_placed": placement.meeting_rooms_placed.model_dump(),
        "amenities_placed": placement.amenities_placed.model_dump(),
        "utilization_rate": float(placement.utilization_rate),
        "constraints_met": placement.constraints_met.model_dump(),
        "suggestions": plan.suggestions,
    }
