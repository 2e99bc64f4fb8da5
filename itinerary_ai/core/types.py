"""Shared type aliases used across the itinerary models."""
from __future__ import annotations

from typing import Annotated

from pydantic import Field, StringConstraints

NonNegMoney = Annotated[float, Field(ge=0, strict=True, allow_inf_nan=False)]
DayNumber = Annotated[int, Field(ge=1, strict=True)]
TimeOfDay = Annotated[
    str,
    StringConstraints(
        pattern=r"(?i)^(?:0?[1-9]|1[0-2]):[0-5]\d\s*(?:AM|PM)$",
    ),
]
ShortText = Annotated[str, StringConstraints(min_length=1, max_length=100)]
Title = Annotated[str, StringConstraints(min_length=1, max_length=200)]
Location = Annotated[str, StringConstraints(min_length=1, max_length=300)]
Description = Annotated[str, StringConstraints(min_length=1, max_length=1000)]
Tip = Annotated[str, StringConstraints(max_length=500)]
