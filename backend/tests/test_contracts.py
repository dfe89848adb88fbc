"""Tests for the Pydantic contract models.

Covers defaults, frozen value objects, Field constraints and the JSON shapes
the API returns.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from app.models.contracts import (
    AmenitiesPlaced,
    AreaEstimate,
    ConstraintsMet,
    CreateProjectRequest,
    ErrorResponse,
    LayoutPlan,
    LayoutSolution,
    MeetingRoomsPlaced,
    PlacementPlan,
    Project,
    SolutionListResponse,
    SpaceRequirement,
    StoredRequirement,
)

_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _placement() -> PlacementPlan:
    return PlacementPlan(
        workstations_placed=8,
        meeting_rooms_placed=MeetingRoomsPlaced(small=1, medium=1),
        amenities_placed=AmenitiesPlaced(phone_booths=2, kitchen=True),
        utilization_rate=16.0,
        constraints_met=ConstraintsMet(workstations=True, meeting_rooms=True),
    )


class TestSpaceRequirement:
    def test_defaults_are_empty(self):
        """An empty body means nothing requested."""
        req = SpaceRequirement()
        assert req.workstations == 0
        assert req.kitchen_pantry is False
        assert req.additional_notes == ""

    def test_frozen(self):
        """Requirements are immutable snapshots."""
        req = SpaceRequirement(workstations=3)
        with pytest.raises(ValidationError):
            req.workstations = 4

    def test_rejects_non_integer_counts(self):
        """Counts must be whole numbers."""
        with pytest.raises(ValidationError):
            SpaceRequirement(workstations="lots")

    def test_stored_requirement_carries_ids(self):
        """StoredRequirement adds identity and ownership."""
        stored = StoredRequirement(
            id="r1", project_id="p1", floor_plan_id="f1", created_at=_NOW, workstations=5
        )
        assert stored.workstations == 5
        assert isinstance(stored, SpaceRequirement)


class TestEstimatorOutputs:
    def test_area_estimate_unknown_ceiling(self):
        """available_area_sqm defaults to None."""
        est = AreaEstimate(raw_area_sqm=169, estimated_area_sqm=237, is_sufficient=True)
        assert est.available_area_sqm is None

    def test_constraints_amenities_default_true(self):
        """Amenities are always considered satisfied."""
        assert ConstraintsMet(workstations=False, meeting_rooms=False).amenities is True

    @pytest.mark.parametrize("score", [-1, 101])
    def test_layout_plan_score_range(self, score):
        """Feasibility score is bounded to 0-100."""
        with pytest.raises(ValidationError):
            LayoutPlan(
                feasibility_score=score, is_feasible=False, placement=_placement(), suggestions=""
            )

    def test_layout_solution_json_shape(self):
        """Breakdowns serialize as nested objects."""
        solution = LayoutSolution(
            id="s1",
            floor_plan_id="f1",
            space_requirement_id="r1",
            feasibility_score=95.0,
            is_feasible=True,
            workstations_placed=8,
            meeting_rooms_placed={"small": 1, "medium": 1, "large": 0},
            amenities_placed={"phone_booths": 2, "kitchen": True},
            utilization_rate=16.0,
            constraints_met={"workstations": True, "meeting_rooms": True, "amenities": True},
            suggestions="ok",
            created_at=_NOW,
        )
        data = solution.model_dump(mode="json")
        assert data["meeting_rooms_placed"] == {"small": 1, "medium": 1, "large": 0}
        assert data["amenities_placed"]["storage"] == 0
        assert data["solution_image_url"] is None
        assert data["generation_params"] == {}


class TestProjects:
    def test_create_request_defaults(self):
        """New projects start as drafts."""
        body = CreateProjectRequest(name="HQ level 3")
        assert body.status == "draft"
        assert body.description == ""

    def test_create_request_rejects_empty_name(self):
        """Name is required."""
        with pytest.raises(ValidationError):
            CreateProjectRequest(name="")

    def test_create_request_rejects_long_name(self):
        """Name is capped at 200 characters."""
        with pytest.raises(ValidationError):
            CreateProjectRequest(name="x" * 201)

    def test_unknown_status_rejected(self):
        """Status is one of draft, active, archived."""
        with pytest.raises(ValidationError):
            Project(id="p", name="n", status="deleted", created_at=_NOW, updated_at=_NOW)


class TestResponses:
    def test_error_response_shape(self):
        """Errors carry a code, message and retryable flag."""
        err = ErrorResponse(error="project_not_found", message="Project not found", retryable=False)
        data = err.model_dump()
        assert data["error"] == "project_not_found"
        assert data["retryable"] is False

    def test_empty_solution_list(self):
        """No current requirement -> no id and no solutions."""
        resp = SolutionListResponse()
        assert resp.space_requirement_id is None
        assert resp.solutions == []
