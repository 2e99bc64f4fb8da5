"""Pytest configuration for the itinerary generation project."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# Ensure the project root is on sys.path so that import itinerary_ai works under pytest.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from itinerary_ai.core.schemas import TripRequest  # noqa: E402


def make_itinerary_payload(days: int = 2, cost_per_day: float = 120.0) -> Dict[str, Any]:
    """Return a schema-valid itinerary dict."""

    return {
        "itinerary": [
            {
                "day": day,
                "title": f"Day {day} in Lisbon",
                "activities": [
                    {
                        "time": "09:00 AM",
                        "name": "Belem Tower",
                        "description": "Walk along the river and visit the tower.",
                        "location": "Av. Brasilia, Lisbon",
                        "cost": 10,
                        "duration": "2 hours",
                    },
                    {
                        "time": "1:30 pm",
                        "name": "Time Out Market",
                        "description": "Lunch at the food hall.",
                        "location": "Cais do Sodre",
                        "cost": 25.5,
                        "duration": "1 hour",
                    },
                ],
                "estimated_cost": cost_per_day,
                "tips": ["Buy a Viva Viagem card"],
            }
            for day in range(1, days + 1)
        ],
        "total_estimated_cost": cost_per_day * days,
    }


@pytest.fixture
def itinerary_payload() -> Dict[str, Any]:
    return make_itinerary_payload()


@pytest.fixture
def sample_trip() -> TripRequest:
    return TripRequest(
        destination="Lisbon",
        travel_days=2,
        budget=900,
        travel_style="moderate",
        interests=["food", "history"],
    )
