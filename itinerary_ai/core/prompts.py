from itinerary_ai.core.schemas import TripRequest
from itinerary_ai.core.validation import ITINERARY_JSON_SPEC

VERIFIED_CONTEXT_START = (
    "--- Verified context (use only this information; do not invent details not stated here) ---"
)
VERIFIED_CONTEXT_END = "--- End of verified context ---"

SYSTEM_PROMPT = """You are an expert travel planner. You only use verified information from the context below or from tool results. Do not invent addresses, opening hours, or exact prices unless they were provided in the context or by a tool.

Output rules:
- Respond with exactly one JSON object matching the provided schema.
- No markdown, no code fences, no extra text before or after the JSON.
- Budget is in USD; the total estimated cost must not exceed the user's budget.
- Respect the number of days and travel style (budget = low-cost, moderate = mid-range, luxury = high-end).
- If context does not contain enough detail for a specific activity, describe it in general terms and do not fabricate names, times, or prices.

Expected JSON shape:
{json_spec}""".format(json_spec=ITINERARY_JSON_SPEC)

trip_details_prompt = """Trip details:
- Destination: {destination}
- Duration: {travel_days} days
- Budget: ${budget} USD total (do not suggest a total cost above this)
- Travel style: {travel_style}
- Interests: {interests}

Requirements:
1. Create a day-by-day itinerary with specific activities.
2. Include time slots, locations, and descriptions for each activity.
3. Estimate costs for each activity (accommodation, food, activities, transport).
4. Provide daily estimated costs.
5. Include practical travel tips for each day.
6. Total estimated cost must be at or below ${budget} USD.
7. Match activities to the interests and travel style."""

retry_prompt = """Your previous response had validation errors. Please return valid JSON only.
Errors: {errors}"""

RETRY_SEPARATOR = "\n\n---\n\n"


def build_system_prompt() -> str:
    """Return the fixed instruction block sent with every generation call."""

    return SYSTEM_PROMPT


def _format_budget(budget: float) -> str:
    return str(int(budget)) if float(budget).is_integer() else f"{budget:.2f}"


def build_trip_block(trip: TripRequest) -> str:
    return trip_details_prompt.format(
        destination=trip.destination,
        travel_days=trip.travel_days,
        budget=_format_budget(trip.budget),
        travel_style=trip.travel_style,
        interests=", ".join(trip.interests),
    )


def build_user_message(trip: TripRequest, context: str | None = None) -> str:
    """Compose the user message: optional verified context, trip details, JSON shape."""

    parts: list[str] = []
    if context and context.strip():
        parts.append(VERIFIED_CONTEXT_START)
        parts.append(context.strip())
        parts.append(VERIFIED_CONTEXT_END)
    parts.append(build_trip_block(trip))
    parts.append(ITINERARY_JSON_SPEC)
    return "\n\n".join(parts)


def build_retry_message(validation_error: str) -> str:
    """Corrective instruction embedding the validator's error text."""

    return retry_prompt.format(errors=validation_error)


def with_retry(user_message: str, validation_error: str) -> str:
    """Append a corrective instruction to the original user message."""

    return f"{user_message}{RETRY_SEPARATOR}{build_retry_message(validation_error)}"
