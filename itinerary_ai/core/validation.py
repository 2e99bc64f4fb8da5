"""Parsing and structural validation of raw model output.

The model is asked for exactly one JSON object matching ``ItineraryOutput``.
Anything else is reported as a ``ValidationFailure`` carrying a readable
summary plus field-level issues that can be fed back into a retry prompt.
Malformed input never raises.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from itinerary_ai.core.schemas import ItineraryOutput, TripRequest

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```$")

ITINERARY_JSON_SPEC = """
Return ONLY a valid JSON object with this exact structure (no markdown, no explanations):
{
  "itinerary": [
    {
      "day": 1,
      "title": "Day title",
      "activities": [
        {
          "time": "09:00 AM",
          "name": "Activity name",
          "description": "Detailed description",
          "location": "Specific location",
          "cost": 50,
          "duration": "2 hours"
        }
      ],
      "estimated_cost": 150,
      "tips": ["Tip 1", "Tip 2"]
    }
  ],
  "total_estimated_cost": 1000
}""".strip()


class ValidationIssue(BaseModel):
    """Single field-level problem found in the model output."""

    path: str = Field(description="Dotted location of the offending field")
    message: str


class ValidationSuccess(BaseModel):
    success: bool = True
    data: ItineraryOutput


class ValidationFailure(BaseModel):
    success: bool = False
    error: str
    issues: List[ValidationIssue] = Field(default_factory=list)


ValidationResult = Union[ValidationSuccess, ValidationFailure]


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present."""

    cleaned = raw.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _format_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _issues_from_error(exc: ValidationError) -> List[ValidationIssue]:
    return [
        ValidationIssue(path=_format_path(err.get("loc", ())), message=err.get("msg", "Invalid value"))
        for err in exc.errors()
    ]


def _summarise(issues: List[ValidationIssue]) -> str:
    return "; ".join(
        f"{issue.path}: {issue.message}" if issue.path else issue.message for issue in issues
    )


def validate_itinerary_response(raw: Optional[str]) -> ValidationResult:
    """Parse ``raw`` and validate it against the itinerary contract."""

    if not raw or not raw.strip():
        return ValidationFailure(error="Empty response")

    try:
        parsed: Any = json.loads(strip_code_fences(raw))
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, oversized integer literals and over-deep nesting
        logger.debug(f"Model output is not valid JSON: {exc}")
        reason = exc.msg if isinstance(exc, json.JSONDecodeError) else str(exc)
        return ValidationFailure(error=f"Invalid JSON: {reason}")

    try:
        data = ItineraryOutput.model_validate(parsed)
    except ValidationError as exc:
        issues = _issues_from_error(exc)
        return ValidationFailure(error=_summarise(issues), issues=issues)

    return ValidationSuccess(data=data)


def consistency_warnings(output: ItineraryOutput, trip: TripRequest) -> List[str]:
    """Report plan-level inconsistencies that structural validation accepts.

    Day numbering, per-day cost sums and the budget ceiling are requested in
    the prompt only; an itinerary breaking them is still a valid result.
    """

    warnings: List[str] = []
    days = [day.day for day in output.itinerary]
    if days != list(range(1, len(days) + 1)):
        warnings.append(f"Day numbers are not consecutive from 1: {days}")
    if len(days) != trip.travel_days:
        warnings.append(f"Expected {trip.travel_days} days, got {len(days)}")

    daily_total = sum(day.estimated_cost for day in output.itinerary)
    if abs(daily_total - output.total_estimated_cost) > 0.01:
        warnings.append(
            f"Daily costs sum to {daily_total:.2f} but total_estimated_cost is "
            f"{output.total_estimated_cost:.2f}"
        )
    if output.total_estimated_cost > trip.budget:
        warnings.append(
            f"Total estimated cost {output.total_estimated_cost:.2f} exceeds budget {trip.budget:.2f}"
        )
    return warnings
