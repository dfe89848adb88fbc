"""Floor-plan image validation.

Runs synchronously in the upload handler (via asyncio.to_thread) because it
is fast and the user needs immediate feedback.

Checks:
1. Decode: Pillow must be able to fully load the image
2. Format: JPEG, PNG or WEBP
3. Resolution: min 256px on the shortest side, enough to read room outlines
"""

from __future__ import annotations

import io

import structlog
from PIL import Image

from app.models.contracts import ValidateFloorPlanInput, ValidateFloorPlanOutput

logger = structlog.get_logger()

MIN_RESOLUTION = 256
ALLOWED_FORMATS = frozenset({"JPEG", "PNG", "WEBP"})

FORMAT_EXTENSIONS = {"JPEG": "jpg", "PNG": "png", "WEBP": "webp"}
FORMAT_CONTENT_TYPES = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}


def validate_floor_plan(input: ValidateFloorPlanInput) -> ValidateFloorPlanOutput:
    """Run all validation checks on an uploaded floor-plan image."""
    try:
        img = Image.open(io.BytesIO(input.image_data))
        img.load()  # full decode catches truncated files and decompression bombs
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning(
            "floor_plan_validation_open_failed", filename=input.filename, error=str(exc)
        )
        return ValidateFloorPlanOutput(
            passed=False,
            failures=["invalid_image"],
            messages=["Could not open image. Please upload a JPEG, PNG or WEBP floor plan."],
        )

    failures: list[str] = []
    messages: list[str] = []

    if img.format not in ALLOWED_FORMATS:
        failures.append("unsupported_format")
        messages.append(
            f"Unsupported image format {img.format!r}. Use JPEG, PNG or WEBP."
        )

    res_ok, res_msg = _check_resolution(img)
    if not res_ok:
        failures.append("low_resolution")
        messages.append(res_msg)

    passed = not failures
    if passed:
        messages.append("Floor plan looks good!")

    width, height = img.size
    logger.info(
        "floor_plan_validation",
        filename=input.filename,
        image_format=img.format,
        width_px=width,
        height_px=height,
        passed=passed,
        failures=failures,
    )
    return ValidateFloorPlanOutput(
        passed=passed,
        failures=failures,
        messages=messages,
        width_px=width,
        height_px=height,
        image_format=img.format,
    )


def _check_resolution(img: Image.Image) -> tuple[bool, str]:
    """Check that the shortest side is at least MIN_RESOLUTION pixels."""
    shortest = min(img.size)
    if shortest < MIN_RESOLUTION:
        return (
            False,
            f"Image is too small ({shortest}px). Minimum {MIN_RESOLUTION}px on shortest side.",
        )
    return True, ""
