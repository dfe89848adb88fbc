"""Office planner contract models.

Shared by the allocation estimator, the repositories and the HTTP layer.
Value objects produced by the estimator are frozen: a generated solution is a
historical snapshot and is never edited after the fact.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# === Requirements ===


class SpaceRequirement(BaseModel):
    """What the tenant needs to fit on one floor.

    Counts are not range-checked here; the HTTP layer clamps them with
    ``normalize_requirement`` before they reach the estimator.
    """

    model_config = ConfigDict(frozen=True)

    workstations: int = 0
    meeting_rooms_small: int = 0  # 4-6 people
    meeting_rooms_medium: int = 0  # 8-10 people
    meeting_rooms_large: int = 0  # 12+ people
    phone_booths: int = 0
    breakout_areas: int = 0
    kitchen_pantry: bool = False
    reception_area: bool = False
    storage_rooms: int = 0
    server_room: bool = False
    additional_notes: str = ""


class StoredRequirement(SpaceRequirement):
    id: str
    project_id: str
    floor_plan_id: str
    created_at: datetime


# === Estimator output ===


class AreaEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_area_sqm: float
    estimated_area_sqm: int  # raw area plus circulation, rounded
    available_area_sqm: float | None = None
    is_sufficient: bool


class MeetingRoomsPlaced(BaseModel):
    model_config = ConfigDict(frozen=True)

    small: int = 0
    medium: int = 0
    large: int = 0


class AmenitiesPlaced(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone_booths: int = 0
    breakout_areas: int = 0
    kitchen: bool = False
    reception: bool = False
    storage: int = 0
    server_room: bool = False


class ConstraintsMet(BaseModel):
    model_config = ConfigDict(frozen=True)

    workstations: bool
    meeting_rooms: bool
    amenities: bool = True


class PlacementPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    workstations_placed: int
    meeting_rooms_placed: MeetingRoomsPlaced
    amenities_placed: AmenitiesPlaced
    utilization_rate: float
    constraints_met: ConstraintsMet


class LayoutPlan(BaseModel):
    """Everything the estimator derives for one generate request."""

    model_config = ConfigDict(frozen=True)

    feasibility_score: int = Field(ge=0, le=100)
    is_feasible: bool
    placement: PlacementPlan
    suggestions: str


class LayoutSolution(BaseModel):
    """A persisted LayoutPlan. Append-only; ordered newest first."""

    model_config = ConfigDict(frozen=True)

    id: str
    floor_plan_id: str
    space_requirement_id: str
    solution_image_url: str | None = None
    feasibility_score: float = Field(ge=0, le=100)
    is_feasible: bool
    workstations_placed: int
    meeting_rooms_placed: MeetingRoomsPlaced
    amenities_placed: AmenitiesPlaced
    utilization_rate: float
    constraints_met: ConstraintsMet
    suggestions: str
    generation_params: dict = {}
    created_at: datetime


# === Projects & floor plans ===


ProjectStatus = Literal["draft", "active", "archived"]


class Project(BaseModel):
    id: str
    name: str
    description: str = ""
    status: ProjectStatus = "draft"
    created_at: datetime
    updated_at: datetime


class FloorPlan(BaseModel):
    id: str
    project_id: str
    name: str
    storage_key: str
    floor_area_sqm: float | None = None
    usable_area_sqm: float | None = None
    dimensions_json: dict = {}
    created_at: datetime
    updated_at: datetime


# === Floor-plan validation ===


class ValidateFloorPlanInput(BaseModel):
    image_data: bytes
    filename: str | None = None


class ValidateFloorPlanOutput(BaseModel):
    passed: bool
    failures: list[str]
    messages: list[str]
    width_px: int | None = None
    height_px: int | None = None
    image_format: str | None = None


# === API Request/Response Models ===


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    status: ProjectStatus = "draft"


class FloorPlanResponse(FloorPlan):
    image_url: str


class FloorPlanUploadResponse(BaseModel):
    floor_plan: FloorPlanResponse
    validation: ValidateFloorPlanOutput


class RequirementResponse(BaseModel):
    requirement: StoredRequirement
    estimate: AreaEstimate


class SolutionListResponse(BaseModel):
    space_requirement_id: str | None = None
    solutions: list[LayoutSolution] = []


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool
    detail: str | None = None
