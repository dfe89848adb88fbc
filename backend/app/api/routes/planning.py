"""Space requirements, area estimates and layout solutions for a floor plan.

Every handler normalises its inputs (negative counts -> 0, unusable areas ->
unknown) before they reach the allocation estimator.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from app.activities.allocation import (
    ALGORITHM_NAME,
    build_area_estimate,
    normalize_available_area,
    normalize_requirement,
    plan_layout,
)
from app.api.deps import error_response, get_store
from app.api.routes.projects import floor_plan_response
from app.models.contracts import (
    AreaEstimate,
    ErrorResponse,
    FloorPlanResponse,
    LayoutSolution,
    RequirementResponse,
    SolutionListResponse,
    SpaceRequirement,
)
from app.repositories.base import Store

logger = structlog.get_logger()

router = APIRouter(tags=["planning"])

_NOT_FOUND = ("floor_plan_not_found", "Floor plan not found")


@router.get(
    "/floor-plans/{floor_plan_id}",
    response_model=FloorPlanResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_floor_plan(floor_plan_id: str, store: Store = Depends(get_store)):
    floor_plan = await store.floor_plans.get(floor_plan_id)
    if floor_plan is None:
        return error_response(404, *_NOT_FOUND)
    return await floor_plan_response(store, floor_plan)


# --- Requirements ---


@router.post(
    "/floor-plans/{floor_plan_id}/requirements",
    status_code=201,
    response_model=RequirementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def save_requirements(
    floor_plan_id: str, body: SpaceRequirement, store: Store = Depends(get_store)
):
    """Append a new requirement; it becomes the floor plan's current one."""
    floor_plan = await store.floor_plans.get(floor_plan_id)
    if floor_plan is None:
        return error_response(404, *_NOT_FOUND)

    requirement = normalize_requirement(body)
    stored = await store.requirements.append(floor_plan.project_id, floor_plan.id, requirement)
    estimate = build_area_estimate(stored, normalize_available_area(floor_plan.floor_area_sqm))

    logger.info(
        "requirements_saved",
        floor_plan_id=floor_plan.id,
        space_requirement_id=stored.id,
        estimated_area_sqm=estimate.estimated_area_sqm,
        is_sufficient=estimate.is_sufficient,
    )
    return RequirementResponse(requirement=stored, estimate=estimate)


@router.get(
    "/floor-plans/{floor_plan_id}/requirements/latest",
    response_model=RequirementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_latest_requirements(floor_plan_id: str, store: Store = Depends(get_store)):
    floor_plan = await store.floor_plans.get(floor_plan_id)
    if floor_plan is None:
        return error_response(404, *_NOT_FOUND)

    stored = await store.requirements.latest_for_floor_plan(floor_plan.id)
    if stored is None:
        return error_response(
            404, "requirements_not_found", "No space requirements saved for this floor plan"
        )
    estimate = build_area_estimate(stored, normalize_available_area(floor_plan.floor_area_sqm))
    return RequirementResponse(requirement=stored, estimate=estimate)


@router.post(
    "/floor-plans/{floor_plan_id}/estimate",
    response_model=AreaEstimate,
    responses={404: {"model": ErrorResponse}},
)
async def estimate_requirements(
    floor_plan_id: str, body: SpaceRequirement, store: Store = Depends(get_store)
):
    """Live estimate for an unsaved requirement. Nothing is persisted."""
    floor_plan = await store.floor_plans.get(floor_plan_id)
    if floor_plan is None:
        return error_response(404, *_NOT_FOUND)
    return build_area_estimate(
        normalize_requirement(body), normalize_available_area(floor_plan.floor_area_sqm)
    )


# --- Solutions ---


@router.post(
    "/floor-plans/{floor_plan_id}/solutions",
    status_code=201,
    response_model=LayoutSolution,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def generate_solution(floor_plan_id: str, store: Store = Depends(get_store)):
    """Run the estimator on the current requirement and append the result."""
    floor_plan = await store.floor_plans.get(floor_plan_id)
    if floor_plan is None:
        return error_response(404, *_NOT_FOUND)

    stored = await store.requirements.latest_for_floor_plan(floor_plan.id)
    if stored is None:
        return error_response(
            409, "no_requirements", "Save space requirements before generating a solution"
        )

    available_area = normalize_available_area(floor_plan.floor_area_sqm)
    plan = plan_layout(normalize_requirement(stored), available_area)
    solution = await store.solutions.append(
        floor_plan.id,
        stored.id,
        plan,
        {
            "algorithm": ALGORITHM_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "available_area_sqm": available_area,
        },
    )

    logger.info(
        "solution_generated",
        floor_plan_id=floor_plan.id,
        space_requirement_id=stored.id,
        solution_id=solution.id,
        feasibility_score=plan.feasibility_score,
        is_feasible=plan.is_feasible,
    )
    return solution


@router.get(
    "/floor-plans/{floor_plan_id}/solutions",
    response_model=SolutionListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_solutions(floor_plan_id: str, store: Store = Depends(get_store)):
    """Solutions for the current requirement, newest first."""
    floor_plan = await store.floor_plans.get(floor_plan_id)
    if floor_plan is None:
        return error_response(404, *_NOT_FOUND)

    stored = await store.requirements.latest_for_floor_plan(floor_plan.id)
    if stored is None:
        return SolutionListResponse()
    solutions = await store.solutions.list_for_requirement(stored.id)
    return SolutionListResponse(space_requirement_id=stored.id, solutions=solutions)
