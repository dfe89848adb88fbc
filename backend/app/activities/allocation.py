"""Space allocation estimator.

Pure functions over a SpaceRequirement and an optional available floor area.
Nothing here touches storage, the clock or randomness, so every call with
the same inputs returns the same value.

This is an area-budget heuristic, not a layout solver: it aggregates
per-item areas and applies fixed ratio thresholds. It never reasons about
walls, adjacency or packing.

Steps, in the order the generate endpoint runs them:
1. score_feasibility: available area vs. required area plus circulation
2. generate_placement: what could plausibly be accommodated
3. build_suggestions: fixed advisory text keyed on feasibility and size
"""

from __future__ import annotations

import math

import structlog
from pydantic import BaseModel, ConfigDict

from app.models.contracts import (
    AmenitiesPlaced,
    AreaEstimate,
    ConstraintsMet,
    LayoutPlan,
    MeetingRoomsPlaced,
    PlacementPlan,
    SpaceRequirement,
)

logger = structlog.get_logger()

ALGORITHM_NAME = "space_allocation_v1"

_COUNT_FIELDS = (
    "workstations",
    "meeting_rooms_small",
    "meeting_rooms_medium",
    "meeting_rooms_large",
    "phone_booths",
    "breakout_areas",
    "storage_rooms",
)


class AllocationConfig(BaseModel):
    """Every constant the estimator uses. Areas are square meters."""

    model_config = ConfigDict(frozen=True)

    # Per-unit areas
    workstation_sqm: float = 6
    meeting_room_small_sqm: float = 15
    meeting_room_medium_sqm: float = 25
    meeting_room_large_sqm: float = 40
    phone_booth_sqm: float = 2
    breakout_area_sqm: float = 20
    kitchen_pantry_sqm: float = 15
    reception_area_sqm: float = 20
    storage_room_sqm: float = 10
    server_room_sqm: float = 15

    # Corridors and common space, as a flat multiplier on programmed area
    circulation_factor: float = 1.4

    # (minimum ratio, score), most favorable first; first match wins
    score_bands: tuple[tuple[float, int], ...] = (
        (1.2, 95),
        (1.0, 85),
        (0.9, 70),
        (0.8, 55),
    )
    floor_score: int = 40
    unknown_area_score: int = 50
    feasible_min_score: int = 60

    # Placement
    workstation_packing: float = 0.85
    sqm_per_small_room: float = 100
    sqm_per_medium_room: float = 150
    max_large_rooms: int = 1
    max_utilization: float = 95
    workstations_met_ratio: float = 0.8
    meeting_rooms_met_ratio: float = 0.7

    # Suggestions
    collaboration_zone_min_workstations: int = 30
    booking_system_min_rooms: int = 5


DEFAULT_ALLOCATION_CONFIG = AllocationConfig()


# --- Boundary normalisation ---


def normalize_requirement(req: SpaceRequirement) -> SpaceRequirement:
    """Clamp negative counts to zero. Flags and notes pass through."""
    clamped = {name: max(0, getattr(req, name)) for name in _COUNT_FIELDS}
    if all(clamped[name] == getattr(req, name) for name in _COUNT_FIELDS):
        return req
    return req.model_copy(update=clamped)


def normalize_available_area(available_area: float | None) -> float | None:
    """Map missing, non-finite and non-positive areas to None (unknown)."""
    if available_area is None:
        return None
    area = float(available_area)
    if not math.isfinite(area) or area <= 0:
        return None
    return area


# --- Area ---


def raw_area(req: SpaceRequirement, config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG) -> float:
    """Programmed area before circulation."""
    total = (
        req.workstations * config.workstation_sqm
        + req.meeting_rooms_small * config.meeting_room_small_sqm
        + req.meeting_rooms_medium * config.meeting_room_medium_sqm
        + req.meeting_rooms_large * config.meeting_room_large_sqm
        + req.phone_booths * config.phone_booth_sqm
        + req.breakout_areas * config.breakout_area_sqm
        + req.storage_rooms * config.storage_room_sqm
    )
    if req.kitchen_pantry:
        total += config.kitchen_pantry_sqm
    if req.reception_area:
        total += config.reception_area_sqm
    if req.server_room:
        total += config.server_room_sqm
    return total


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def estimate_area(
    req: SpaceRequirement, config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG
) -> int:
    """Required area including circulation, rounded to whole square meters."""
    return _round_half_up(raw_area(req, config) * config.circulation_factor)


def is_sufficient(estimated_area: float, available_area: float | None) -> bool:
    """True when no ceiling is known or the estimate fits under it."""
    if not available_area:
        return True
    return estimated_area <= available_area


def build_area_estimate(
    req: SpaceRequirement,
    available_area: float | None,
    config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG,
) -> AreaEstimate:
    estimated = estimate_area(req, config)
    return AreaEstimate(
        raw_area_sqm=raw_area(req, config),
        estimated_area_sqm=estimated,
        available_area_sqm=available_area,
        is_sufficient=is_sufficient(estimated, available_area),
    )


# --- Feasibility ---


def score_feasibility(
    req: SpaceRequirement,
    available_area: float | None,
    config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG,
) -> int:
    """Map available / (required x circulation) onto the discrete score bands.

    Returns ``config.unknown_area_score`` when the area is unknown. Each band
    test ``ratio >= t`` is evaluated as ``available >= with_circulation * t``,
    which keeps boundaries inclusive under float rounding and gives an empty
    requirement (infinite ratio) the top score. A negative requirement gives
    a negative ratio, which falls below every band.
    """
    if not available_area:
        return config.unknown_area_score

    with_circulation = raw_area(req, config) * config.circulation_factor
    if with_circulation < 0:
        return config.floor_score
    for min_ratio, score in config.score_bands:
        if available_area >= with_circulation * min_ratio:
            return score
    return config.floor_score


# --- Placement ---


def generate_placement(
    req: SpaceRequirement,
    available_area: float | None,
    config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG,
) -> PlacementPlan:
    area = available_area or 0

    workstations = math.floor(req.workstations * config.workstation_packing)
    small = min(req.meeting_rooms_small, math.floor(area / config.sqm_per_small_room))
    medium = min(req.meeting_rooms_medium, math.floor(area / config.sqm_per_medium_room))
    # At most one large room regardless of demand or area.
    large = min(req.meeting_rooms_large, config.max_large_rooms)

    utilization = min(
        config.max_utilization,
        (workstations * config.workstation_sqm) / (available_area or 1) * 100,
    )

    requested_rooms = req.meeting_rooms_small + req.meeting_rooms_medium
    return PlacementPlan(
        workstations_placed=workstations,
        meeting_rooms_placed=MeetingRoomsPlaced(small=small, medium=medium, large=large),
        amenities_placed=AmenitiesPlaced(
            phone_booths=req.phone_booths,
            breakout_areas=req.breakout_areas,
            kitchen=req.kitchen_pantry,
            reception=req.reception_area,
            storage=req.storage_rooms,
            server_room=req.server_room,
        ),
        utilization_rate=utilization,
        constraints_met=ConstraintsMet(
            workstations=workstations >= req.workstations * config.workstations_met_ratio,
            # Large rooms do not count towards this check.
            meeting_rooms=small + medium >= requested_rooms * config.meeting_rooms_met_ratio,
            amenities=True,
        ),
    )


# --- Suggestions ---

SET_FLOOR_AREA_MESSAGE = "Set the floor plan's total area to get a more accurate analysis."

INFEASIBLE_SUGGESTIONS = (
    "The space cannot accommodate all requirements. Suggestions:",
    "- Reduce the number of workstations or use a more compact arrangement",
    "- Consider flexible shared spaces in place of some fixed meeting rooms",
    "- Reassess whether every facility is really needed",
)

FEASIBLE_SUGGESTIONS = (
    "The space allocation is feasible! Suggestions:",
    "- Use open-plan work areas to make better use of the space",
    "- Use glass partitions to bring in light and a sense of openness",
    "- Reserve 10-15% of the space for future expansion",
)

COLLABORATION_ZONE_SUGGESTION = "- Consider a collaboration zone to encourage team interaction"

BOOKING_SYSTEM_SUGGESTION = (
    "- With this many meeting rooms, consider a booking system to improve utilization"
)


def build_suggestions(
    req: SpaceRequirement,
    available_area: float | None,
    is_feasible: bool,
    config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG,
) -> str:
    if not available_area:
        return SET_FLOOR_AREA_MESSAGE

    lines = list(FEASIBLE_SUGGESTIONS if is_feasible else INFEASIBLE_SUGGESTIONS)

    if req.workstations > config.collaboration_zone_min_workstations:
        lines.append(COLLABORATION_ZONE_SUGGESTION)

    total_rooms = req.meeting_rooms_small + req.meeting_rooms_medium + req.meeting_rooms_large
    if total_rooms > config.booking_system_min_rooms:
        lines.append(BOOKING_SYSTEM_SUGGESTION)

    return "\n".join(lines)


# --- Composition ---


def plan_layout(
    req: SpaceRequirement,
    available_area: float | None,
    config: AllocationConfig = DEFAULT_ALLOCATION_CONFIG,
) -> LayoutPlan:
    """Score, place and advise for one requirement snapshot."""
    score = score_feasibility(req, available_area, config)
    is_feasible = score >= config.feasible_min_score
    placement = generate_placement(req, available_area, config)

    logger.debug(
        "layout_planned",
        feasibility_score=score,
        is_feasible=is_feasible,
        available_area=available_area,
        workstations_placed=placement.workstations_placed,
    )
    return LayoutPlan(
        feasibility_score=score,
        is_feasible=is_feasible,
        placement=placement,
        suggestions=build_suggestions(req, available_area, is_feasible, config),
    )
