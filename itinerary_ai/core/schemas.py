"""Pydantic data models for the itinerary generation layer.

This module holds every model that crosses a component boundary in the
generation flow: the caller's trip request, the itinerary shape the model must
produce, retrieved context chunks, normalised provider responses, usage
records, and the two caller-facing outcomes of a generation run.

Key model categories:
- TripRequest: immutable trip parameters supplied by the caller
- Activity / DayItinerary / ItineraryOutput: the JSON contract for model output
- RetrievedChunk: read-only context fetched from the vector index
- LLMResponse: provider-agnostic result of one model call
- UsageRecord: append-only token accounting entry
- GenerateItineraryResult / GenerateItineraryError: run outcomes
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from itinerary_ai.core.types import (
    DayNumber,
    Description,
    Location,
    NonNegMoney,
    ShortText,
    Tip,
    TimeOfDay,
    Title,
)

TravelStyle = Literal["budget", "moderate", "luxury"]


class TripRequest(BaseModel):
    """Trip parameters used to build a single itinerary.

    Attributes:
        destination: City or region to plan for
        travel_days: Number of days to cover (at least one)
        budget: Total budget ceiling in USD
        travel_style: Spending tier that activities should match
        interests: Free-text tags used for personalisation and retrieval
    """

    destination: str = Field(min_length=1, description="Trip destination")
    travel_days: int = Field(ge=1, description="Duration of the trip in days")
    budget: float = Field(ge=0, description="Total budget in USD")
    travel_style: TravelStyle = Field(description="budget, moderate or luxury")
    interests: List[str] = Field(min_length=1, description="Interest tags")

    model_config = ConfigDict(frozen=True)


class Activity(BaseModel):
    """One scheduled activity inside a day."""

    time: TimeOfDay = Field(description='Start time such as "09:00 AM"')
    name: Title
    description: Description
    location: Location
    cost: NonNegMoney
    duration: ShortText


class DayItinerary(BaseModel):
    """A single day of the plan with its ordered activities."""

    day: DayNumber
    title: Title
    activities: List[Activity] = Field(min_length=1, max_length=20)
    estimated_cost: NonNegMoney
    tips: List[Tip] = Field(max_length=10)


class ItineraryOutput(BaseModel):
    """Complete itinerary as returned by the model."""

    itinerary: List[DayItinerary]
    total_estimated_cost: NonNegMoney


class ContentType(str, Enum):
    """Kinds of content stored in the travel vector index."""

    CITY = "city"
    ATTRACTION = "attraction"
    VISA_RULE = "visa_rule"
    ITINERARY_SUMMARY = "itinerary_summary"


class RetrievedChunk(BaseModel):
    """Ranked text chunk returned by a semantic search."""

    id: Optional[str] = None
    content_type: ContentType
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class LLMResponse(BaseModel):
    """Normalised output of a single provider call."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    provider: str
    model: str


class UsageRecord(BaseModel):
    """Token consumption for one accepted model call."""

    user_id: str
    provider: str
    model: str
    input_tokens: int = Field(ge=0)
    output_tokens: int = Field(ge=0)
    request_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @computed_field(return_type=int)
    @property
    def total_tokens(self) -> int:
        """Return input plus output tokens."""

        return self.input_tokens + self.output_tokens


class ErrorCode(str, Enum):
    """Machine-readable failure codes surfaced to callers."""

    RATE_LIMIT = "RATE_LIMIT"
    QUOTA = "QUOTA"
    VALIDATION = "VALIDATION"
    PROVIDER = "PROVIDER"


class GenerateItineraryResult(BaseModel):
    """Successful generation run."""

    success: Literal[True] = True
    itinerary: List[DayItinerary]
    total_estimated_cost: float
    provider: str
    request_id: str


class GenerateItineraryError(BaseModel):
    """Failed generation run. Never carries itinerary data."""

    success: Literal[False] = False
    message: str
    code: ErrorCode


__all__ = [
    "Activity",
    "ContentType",
    "DayItinerary",
    "ErrorCode",
    "GenerateItineraryError",
    "GenerateItineraryResult",
    "ItineraryOutput",
    "LLMResponse",
    "RetrievedChunk",
    "TravelStyle",
    "TripRequest",
    "UsageRecord",
]
