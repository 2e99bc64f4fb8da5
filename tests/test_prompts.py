"""Tests for system, user and retry prompt composition."""
from __future__ import annotations

from itinerary_ai.core.prompts import (
    RETRY_SEPARATOR,
    VERIFIED_CONTEXT_END,
    VERIFIED_CONTEXT_START,
    build_retry_message,
    build_system_prompt,
    build_user_message,
    with_retry,
)
from itinerary_ai.core.validation import ITINERARY_JSON_SPEC


def test_system_prompt_sets_rules_and_shape():
    prompt = build_system_prompt()
    assert "Do not invent addresses" in prompt
    assert "exactly one JSON object" in prompt
    assert "must not exceed the user's budget" in prompt
    assert '"total_estimated_cost"' in prompt


def test_user_message_without_context(sample_trip):
    message = build_user_message(sample_trip)

    assert VERIFIED_CONTEXT_START not in message
    assert message.startswith("Trip details:")
    assert "- Destination: Lisbon" in message
    assert "- Duration: 2 days" in message
    assert "- Budget: $900 USD total" in message
    assert "- Travel style: moderate" in message
    assert "- Interests: food, history" in message
    assert message.endswith(ITINERARY_JSON_SPEC)


def test_whitespace_context_is_not_emitted(sample_trip):
    assert build_user_message(sample_trip, "  \n ") == build_user_message(sample_trip)


def test_context_block_precedes_trip_details(sample_trip):
    message = build_user_message(sample_trip, "\n[city]\nLisbon is hilly.\n")

    start = message.index(VERIFIED_CONTEXT_START)
    end = message.index(VERIFIED_CONTEXT_END)
    trip = message.index("Trip details:")
    assert start < end < trip
    assert f"{VERIFIED_CONTEXT_START}\n\n[city]\nLisbon is hilly.\n\n{VERIFIED_CONTEXT_END}" in message


def test_retry_message_embeds_errors():
    message = build_retry_message("itinerary.0.day: Input should be greater than or equal to 1")
    assert "validation errors" in message
    assert message.endswith("Errors: itinerary.0.day: Input should be greater than or equal to 1")


def test_retry_appends_to_original_message(sample_trip):
    original = build_user_message(sample_trip)
    retried = with_retry(original, "Invalid JSON")

    assert retried.startswith(original)
    assert retried == original + RETRY_SEPARATOR + build_retry_message("Invalid JSON")
