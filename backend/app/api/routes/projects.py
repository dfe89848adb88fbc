"""Project and floor-plan upload endpoints.

Projects group floor plans. A floor plan is an uploaded image plus the total
floor area the allocation estimator uses as its ceiling.
"""

import asyncio
import time

import structlog
from fastapi import APIRouter, Depends, Form, UploadFile

from app.activities.allocation import normalize_available_area
from app.activities.validation import (
    FORMAT_CONTENT_TYPES,
    FORMAT_EXTENSIONS,
    validate_floor_plan,
)
from app.api.deps import error_response, get_store
from app.config import settings
from app.models.contracts import (
    CreateProjectRequest,
    ErrorResponse,
    FloorPlan,
    FloorPlanResponse,
    FloorPlanUploadResponse,
    Project,
    ValidateFloorPlanInput,
)
from app.repositories.base import Store

logger = structlog.get_logger()

router = APIRouter(tags=["projects"])

_NOT_FOUND = ("project_not_found", "Project not found")


async def floor_plan_response(store: Store, floor_plan: FloorPlan) -> FloorPlanResponse:
    image_url = await asyncio.to_thread(store.objects.url_for, floor_plan.storage_key)
    return FloorPlanResponse(**floor_plan.model_dump(), image_url=image_url)


# --- Projects ---


@router.post("/projects", status_code=201, response_model=Project)
async def create_project(body: CreateProjectRequest, store: Store = Depends(get_store)):
    name = body.name.strip()
    if not name:
        return error_response(422, "invalid_name", "Project name must not be blank")
    project = await store.projects.create(name, body.description, body.status)
    logger.info("project_created", project_id=project.id, status=project.status)
    return project


@router.get("/projects", response_model=list[Project])
async def list_projects(store: Store = Depends(get_store)):
    """Most recently updated first."""
    return await store.projects.list_all()


@router.get(
    "/projects/{project_id}",
    response_model=Project,
    responses={404: {"model": ErrorResponse}},
)
async def get_project(project_id: str, store: Store = Depends(get_store)):
    project = await store.projects.get(project_id)
    if project is None:
        return error_response(404, *_NOT_FOUND)
    return project


@router.delete(
    "/projects/{project_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
)
async def delete_project(project_id: str, store: Store = Depends(get_store)):
    """Delete the project, its rows and its stored floor-plan images."""
    if not await store.projects.delete(project_id):
        return error_response(404, *_NOT_FOUND)
    await asyncio.to_thread(store.objects.delete_prefix, f"{project_id}/")
    logger.info("project_deleted", project_id=project_id)


# --- Floor plans ---


@router.post(
    "/projects/{project_id}/floor-plans",
    status_code=201,
    response_model=FloorPlanUploadResponse,
    responses={
        404: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def upload_floor_plan(
    project_id: str,
    file: UploadFile,
    name: str = Form(...),
    floor_area_sqm: float | None = Form(None),
    usable_area_sqm: float | None = Form(None),
    store: Store = Depends(get_store),
):
    """Upload image -> validate -> store object -> record floor plan."""
    if await store.projects.get(project_id) is None:
        return error_response(404, *_NOT_FOUND)

    name = name.strip()
    if not name:
        return error_response(422, "invalid_name", "Floor plan name must not be blank")

    # Stream-read with early termination to avoid buffering unbounded uploads
    chunks: list[bytes] = []
    total = 0
    while chunk := await file.read(65_536):
        total += len(chunk)
        if total > settings.max_floor_plan_bytes:
            mb = settings.max_floor_plan_bytes // (1024 * 1024)
            return error_response(413, "file_too_large", f"Floor plan exceeds {mb} MB limit")
        chunks.append(chunk)
    image_data = b"".join(chunks)

    validation = await asyncio.to_thread(
        validate_floor_plan,
        ValidateFloorPlanInput(image_data=image_data, filename=file.filename),
    )
    if not validation.passed:
        return error_response(422, "invalid_floor_plan", " ".join(validation.messages))

    image_format = validation.image_format or "JPEG"
    storage_key = f"{project_id}/{int(time.time() * 1000)}.{FORMAT_EXTENSIONS[image_format]}"
    await asyncio.to_thread(
        store.objects.upload, storage_key, image_data, FORMAT_CONTENT_TYPES[image_format]
    )

    try:
        floor_plan = await store.floor_plans.create(
            project_id,
            name,
            storage_key,
            floor_area_sqm=normalize_available_area(floor_area_sqm),
            usable_area_sqm=normalize_available_area(usable_area_sqm),
            dimensions_json={"width_px": validation.width_px, "height_px": validation.height_px},
        )
    except Exception:
        # Remove the orphaned object before surfacing the failure
        try:
            await asyncio.to_thread(store.objects.delete, storage_key)
        except Exception:
            logger.error(
                "floor_plan_rollback_failed",
                storage_key=storage_key,
                project_id=project_id,
                exc_info=True,
            )
        raise

    logger.info(
        "floor_plan_uploaded",
        project_id=project_id,
        floor_plan_id=floor_plan.id,
        storage_key=storage_key,
        floor_area_sqm=floor_plan.floor_area_sqm,
        size_bytes=len(image_data),
    )
    return FloorPlanUploadResponse(
        floor_plan=await floor_plan_response(store, floor_plan),
        validation=validation,
    )


@router.get(
    "/projects/{project_id}/floor-plans",
    response_model=list[FloorPlanResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_floor_plans(project_id: str, store: Store = Depends(get_store)):
    """Newest first."""
    if await store.projects.get(project_id) is None:
        return error_response(404, *_NOT_FOUND)
    floor_plans = await store.floor_plans.list_for_project(project_id)
    return [await floor_plan_response(store, fp) for fp in floor_plans]
