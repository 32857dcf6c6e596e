"""Conversion between domain objects, JSON-shaped dicts and protobuf Structs.

Wire dicts use the camelCase field names of the web client
(``roastLevel``, ``coffeeId``, ``matchReason`` ...). Timestamps travel as
RFC 3339 strings. Numbers that pass through a ``google.protobuf.Struct``
come back as floats, so every integer field is coerced on the way in.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from google.protobuf import json_format, struct_pb2
from google.protobuf.timestamp_pb2 import Timestamp

from coffee_reco.models import (
    Coffee,
    FlavorNote,
    QuizResults,
    Review,
    ScoredCoffee,
    UserPreference,
)

# ---------------------------------------------------------------------------
# Struct payloads
# ---------------------------------------------------------------------------


def to_struct(payload: dict[str, Any]) -> struct_pb2.Struct:
    """Wrap a JSON-shaped dict in a ``google.protobuf.Struct``."""
    return json_format.ParseDict(payload, struct_pb2.Struct())


def from_struct(message: struct_pb2.Struct) -> dict[str, Any]:
    """Unwrap a ``google.protobuf.Struct`` into a plain dict."""
    return json_format.MessageToDict(message)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def catalogue_from_dict(
    data: dict[str, Any],
) -> tuple[list[Coffee], list[Review], list[FlavorNote]]:
    """Parse a catalogue snapshot ``{coffees, reviews, flavorNotes}``.

    Missing sections are treated as empty.

    Raises:
        ValueError: If any entry is malformed.
    """
    coffees = [coffee_from_dict(item) for item in data.get("coffees") or []]
    reviews = [review_from_dict(item) for item in data.get("reviews") or []]
    notes = [flavor_note_from_dict(item) for item in data.get("flavorNotes") or []]
    return coffees, reviews, notes


def coffee_from_dict(data: dict[str, Any]) -> Coffee:
    return Coffee(
        id=as_int(_require(data, "id"), "id"),
        name=str(_require(data, "name")),
        roaster=str(data.get("roaster") or ""),
        origin=str(_require(data, "origin")),
        roast_level=str(_require(data, "roastLevel")),
        region=data.get("region") or None,
        process_method=data.get("processMethod") or None,
        description=data.get("description") or None,
        created_at=parse_timestamp(data.get("createdAt"), "createdAt"),
    )


def review_from_dict(data: dict[str, Any]) -> Review:
    return Review(
        id=as_int(_require(data, "id"), "id"),
        user_id=as_int(_require(data, "userId"), "userId"),
        coffee_id=as_int(_require(data, "coffeeId"), "coffeeId"),
        rating=as_int(_require(data, "rating"), "rating"),
        flavor_notes=tuple(as_int(n, "flavorNotes") for n in data.get("flavorNotes") or []),
        created_at=parse_timestamp(data.get("createdAt"), "createdAt"),
    )


def flavor_note_from_dict(data: dict[str, Any]) -> FlavorNote:
    return FlavorNote(
        id=as_int(_require(data, "id"), "id"),
        name=str(_require(data, "name")),
        category=data.get("category") or None,
    )


def quiz_from_dict(data: dict[str, Any]) -> QuizResults:
    """Parse quiz answers. Every field is optional.

    Raises:
        ValueError: If *data* is not an object, ``preferredRoast`` is not a
            string, or ``preferredFlavors`` is not a string or list.
    """
    if not isinstance(data, dict):
        raise ValueError(f"quiz must be an object, got {data!r}")
    roast = data.get("preferredRoast") or None
    if roast is not None and not isinstance(roast, str):
        raise ValueError(f"preferredRoast must be a string, got {roast!r}")
    flavors = data.get("preferredFlavors") or []
    if isinstance(flavors, str):
        flavors = [flavors]
    if not isinstance(flavors, list):
        raise ValueError(f"preferredFlavors must be a list, got {flavors!r}")
    return QuizResults(
        preferred_roast=roast,
        preferred_flavors=[str(f) for f in flavors],
        brewing_method=data.get("brewingMethod") or None,
        consumption_time=data.get("consumptionTime") or None,
        caffeine_preference=data.get("caffeinePreference") or None,
    )


def as_int(value: Any, field: str) -> int:
    """Coerce *value* to ``int``, accepting integral floats and digit strings.

    Raises:
        ValueError: If *value* is not an integer in any of those forms.
    """
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"{field} must be an integer, got {value!r}")


def parse_timestamp(value: Any, field: str) -> datetime | None:
    """Parse an RFC 3339 string into a UTC-aware datetime; ``None`` passes through."""
    if value is None or value == "":
        return None
    ts = Timestamp()
    try:
        ts.FromJsonString(str(value))
    except ValueError as exc:
        raise ValueError(f"{field} is not an RFC 3339 timestamp: {value!r}") from exc
    return ts.ToDatetime(tzinfo=timezone.utc)


def _require(data: dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ValueError(f"Missing required field {key!r}")
    return value


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def coffee_to_dict(coffee: Coffee) -> dict[str, Any]:
    return {
        "id": coffee.id,
        "name": coffee.name,
        "roaster": coffee.roaster,
        "origin": coffee.origin,
        "region": coffee.region,
        "roastLevel": coffee.roast_level,
        "processMethod": coffee.process_method,
        "description": coffee.description,
        "createdAt": format_timestamp(coffee.created_at),
    }


def scored_coffee_to_dict(scored: ScoredCoffee) -> dict[str, Any]:
    return {
        "coffee": coffee_to_dict(scored.coffee),
        "score": scored.score,
        "matchReason": list(scored.match_reasons),
    }


def preferences_to_dict(prefs: UserPreference) -> dict[str, Any]:
    return {
        "favoriteOrigins": list(prefs.favorite_origins),
        "favoriteRoastLevels": list(prefs.favorite_roast_levels),
        "favoriteProcessMethods": list(prefs.favorite_process_methods),
        "favoriteFlavorProfiles": list(prefs.favorite_flavor_profiles),
    }


def quiz_to_dict(quiz: QuizResults) -> dict[str, Any]:
    return {
        "preferredRoast": quiz.preferred_roast,
        "preferredFlavors": list(quiz.preferred_flavors),
        "brewingMethod": quiz.brewing_method,
        "consumptionTime": quiz.consumption_time,
        "caffeinePreference": quiz.caffeine_preference,
    }


def format_timestamp(dt: datetime | None) -> str | None:
    """Format *dt* as RFC 3339 (naive datetimes are assumed UTC)."""
    if dt is None:
        return None
    ts = Timestamp()
    ts.FromDatetime(dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc))
    return ts.ToJsonString()
