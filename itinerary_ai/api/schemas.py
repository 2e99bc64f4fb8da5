from typing import Optional

from pydantic import BaseModel, Field

from itinerary_ai.core.schemas import ErrorCode, TripRequest


class GenerateRequest(BaseModel):
    """Request payload used to start a generation run."""

    user_id: str = Field(min_length=1, description="Caller identity for limits and usage")
    trip: TripRequest = Field(description="Trip parameters")
    enable_retrieval: bool = Field(default=True, description="Prepend verified context from the vector index")
    request_id: Optional[str] = Field(default=None, description="Correlation id; generated when omitted")


class ErrorBody(BaseModel):
    """Body of a failed generation response."""

    code: ErrorCode
    message: str


class UsageResponse(BaseModel):
    """Token usage in the current quota window."""

    user_id: str
    used_tokens: int
    daily_quota: int
    remaining_tokens: int
