"""Travel helper tools the model may consult while planning.

Each tool returns a JSON string. The implementations are deterministic
estimates so planning can run without weather, FX or maps credentials; the
``note`` field in every payload says which live service would replace it.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Literal, Optional

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

MOCK_RATES: Dict[str, float] = {"USD": 1.0, "EUR": 0.92, "GBP": 0.79}

BUDGET_ALLOCATIONS: Dict[str, Dict[str, float]] = {
    "budget": {"accommodation": 0.35, "food": 0.3, "activities": 0.2, "transport": 0.15},
    "moderate": {"accommodation": 0.4, "food": 0.28, "activities": 0.22, "transport": 0.1},
    "luxury": {"accommodation": 0.5, "food": 0.25, "activities": 0.15, "transport": 0.1},
}


class WeatherInput(BaseModel):
    """Weather lookup for outdoor activities or packing advice."""

    city: str = Field(description="City name")
    date: str = Field(description="ISO date YYYY-MM-DD")


class CurrencyConvertInput(BaseModel):
    amount: float = Field(description="Amount to convert")
    from_currency: str = Field(default="USD", description="e.g. USD")
    to_currency: str = Field(default="EUR", description="e.g. EUR")


class BudgetCalculatorInput(BaseModel):
    total_budget: float = Field(description="Total budget in USD")
    days: int = Field(default=1, ge=1, description="Number of days")
    style: Literal["budget", "moderate", "luxury"] = Field(default="moderate", description="Travel style")


class DistanceInput(BaseModel):
    from_place: str = Field(description="Starting location")
    to_place: str = Field(description="Destination")
    city: str = Field(description="City name")


def get_weather(city: str, date: str) -> str:
    return json.dumps(
        {
            "city": city,
            "date": date,
            "conditions": "Partly cloudy",
            "high_c": 22,
            "low_c": 14,
            "note": "Check a weather API for real data.",
        }
    )


def currency_convert(amount: float, from_currency: str = "USD", to_currency: str = "EUR") -> str:
    rate = MOCK_RATES.get(to_currency, 1.0) / MOCK_RATES.get(from_currency, 1.0)
    return json.dumps(
        {
            "amount": amount,
            "from_currency": from_currency,
            "to_currency": to_currency,
            "converted_amount": round(amount * rate, 2),
            "note": "Use a live API for real rates.",
        }
    )


def budget_calculator(total_budget: float, days: int = 1, style: str = "moderate") -> str:
    """Split a total budget per day and across spending categories."""

    allocation = BUDGET_ALLOCATIONS.get(style, BUDGET_ALLOCATIONS["moderate"])
    return json.dumps(
        {
            "total_budget_usd": total_budget,
            "days": days,
            "per_day_usd": round(total_budget / days),
            "allocation": allocation,
            "note": "Use these ratios to split the budget across days.",
        }
    )


def get_distance(from_place: str, to_place: str, city: str) -> str:
    return json.dumps(
        {
            "from_place": from_place,
            "to_place": to_place,
            "city": city,
            "approximate_km": 3,
            "approximate_duration_min": 15,
            "note": "Use a maps API for real distances.",
        }
    )


_TOOL_SPECS: Dict[str, tuple[Callable[..., str], type[BaseModel], str]] = {
    "get_weather": (
        get_weather,
        WeatherInput,
        "Get weather forecast for a city on a given date. Use when suggesting outdoor activities or packing.",
    ),
    "currency_convert": (
        currency_convert,
        CurrencyConvertInput,
        "Convert amount between currencies (e.g. USD to EUR).",
    ),
    "budget_calculator": (
        budget_calculator,
        BudgetCalculatorInput,
        "Allocate a total budget across days or categories (accommodation, food, activities, transport).",
    ),
    "get_distance": (
        get_distance,
        DistanceInput,
        "Get approximate distance and travel time between two places in a city (for ordering activities).",
    ),
}


def create_travel_tools() -> List[StructuredTool]:
    """Return LangChain tools suitable for ``llm.bind_tools``."""

    return [
        StructuredTool.from_function(func=func, name=name, description=description, args_schema=schema)
        for name, (func, schema, description) in _TOOL_SPECS.items()
    ]


def execute_tool(name: str, args: Optional[Dict[str, Any]] = None) -> str:
    """Run a tool by name with raw model-supplied arguments."""

    entry = _TOOL_SPECS.get(name)
    if entry is None:
        return json.dumps({"error": f"Unknown tool: {name}"})
    func, schema, _ = entry
    payload = schema(**(args or {}))
    return func(**payload.model_dump())
