"""Tests for coffee_reco.codec."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from google.protobuf import struct_pb2

from coffee_reco.codec import (
    as_int,
    catalogue_from_dict,
    coffee_from_dict,
    coffee_to_dict,
    format_timestamp,
    from_struct,
    parse_timestamp,
    preferences_to_dict,
    quiz_from_dict,
    quiz_to_dict,
    review_from_dict,
    scored_coffee_to_dict,
    to_struct,
)
from coffee_reco.models import Coffee, QuizResults, ScoredCoffee, UserPreference


COFFEE_DICT = {
    "id": 12,
    "name": "Guji Natural",
    "roaster": "Bright Side",
    "origin": "Ethiopia",
    "region": "Guji",
    "roastLevel": "Medium-Light",
    "processMethod": "Natural",
    "description": "Blueberry jam.",
    "createdAt": "2026-06-02T09:00:00Z",
}


class TestCoffeeFromDict:
    def test_all_fields(self) -> None:
        coffee = coffee_from_dict(COFFEE_DICT)
        assert coffee == Coffee(
            id=12,
            name="Guji Natural",
            roaster="Bright Side",
            origin="Ethiopia",
            roast_level="Medium-Light",
            region="Guji",
            process_method="Natural",
            description="Blueberry jam.",
            created_at=datetime(2026, 6, 2, 9, 0, tzinfo=timezone.utc),
        )

    def test_optional_fields_missing(self) -> None:
        coffee = coffee_from_dict(
            {"id": 1, "name": "X", "origin": "Peru", "roastLevel": "Dark", "processMethod": None}
        )
        assert coffee.process_method is None
        assert coffee.created_at is None
        assert coffee.roaster == ""

    def test_missing_required_field(self) -> None:
        data = dict(COFFEE_DICT)
        del data["origin"]
        with pytest.raises(ValueError, match="origin"):
            coffee_from_dict(data)


class TestReviewFromDict:
    def test_struct_floats_become_ints(self) -> None:
        review = review_from_dict(
            {"id": 1.0, "userId": 7.0, "coffeeId": 3.0, "rating": 5.0, "flavorNotes": [2.0, 1.0]}
        )
        assert review.user_id == 7
        assert review.rating == 5
        assert review.flavor_notes == (2, 1)
        assert isinstance(review.coffee_id, int)

    def test_missing_flavor_notes(self) -> None:
        review = review_from_dict({"id": 1, "userId": 7, "coffeeId": 3, "rating": 4})
        assert review.flavor_notes == ()

    def test_bad_rating(self) -> None:
        with pytest.raises(ValueError, match="rating"):
            review_from_dict({"id": 1, "userId": 7, "coffeeId": 3, "rating": 4.5})


class TestCatalogueFromDict:
    def test_parses_all_sections(self) -> None:
        coffees, reviews, notes = catalogue_from_dict(
            {
                "coffees": [COFFEE_DICT],
                "reviews": [{"id": 1, "userId": 2, "coffeeId": 12, "rating": 4}],
                "flavorNotes": [{"id": 1, "name": "Blueberry", "category": "Fruity"}],
            }
        )
        assert [c.id for c in coffees] == [12]
        assert reviews[0].coffee_id == 12
        assert notes[0].name == "Blueberry"

    def test_missing_sections_are_empty(self) -> None:
        assert catalogue_from_dict({}) == ([], [], [])


class TestQuizFromDict:
    def test_all_fields(self) -> None:
        quiz = quiz_from_dict(
            {
                "preferredRoast": "medium",
                "preferredFlavors": ["sweet", "nutty"],
                "brewingMethod": "espresso",
                "consumptionTime": "morning",
                "caffeinePreference": "regular",
            }
        )
        assert quiz == QuizResults("medium", ["sweet", "nutty"], "espresso", "morning", "regular")

    def test_single_flavor_string(self) -> None:
        assert quiz_from_dict({"preferredFlavors": "fruity"}).preferred_flavors == ["fruity"]

    def test_empty(self) -> None:
        assert quiz_from_dict({}) == QuizResults()

    @pytest.mark.parametrize("data", [["x"], "dark", 3])
    def test_non_object_rejected(self, data) -> None:
        with pytest.raises(ValueError, match="quiz"):
            quiz_from_dict(data)

    def test_non_string_roast_rejected(self) -> None:
        with pytest.raises(ValueError, match="preferredRoast"):
            quiz_from_dict({"preferredRoast": 1})

    def test_non_list_flavors_rejected(self) -> None:
        with pytest.raises(ValueError, match="preferredFlavors"):
            quiz_from_dict({"preferredFlavors": {"a": 1}})

    def test_round_trip_shape(self) -> None:
        quiz = QuizResults("dark", ["earthy"])
        assert quiz_from_dict(quiz_to_dict(quiz)) == quiz


class TestAsInt:
    @pytest.mark.parametrize("value, expected", [(3, 3), (3.0, 3), ("42", 42), (" 7 ", 7), ("-2", -2)])
    def test_accepted(self, value, expected) -> None:
        assert as_int(value, "id") == expected

    @pytest.mark.parametrize("value", [None, 2.5, "abc", "", True, [1]])
    def test_rejected(self, value) -> None:
        with pytest.raises(ValueError, match="id"):
            as_int(value, "id")


class TestTimestamps:
    def test_parse_utc(self) -> None:
        assert parse_timestamp("2026-10-01T09:00:00Z", "createdAt") == datetime(
            2026, 10, 1, 9, 0, tzinfo=timezone.utc
        )

    def test_parse_offset_converted_to_utc(self) -> None:
        assert parse_timestamp("2026-10-01T09:00:00+02:00", "createdAt") == datetime(
            2026, 10, 1, 7, 0, tzinfo=timezone.utc
        )

    def test_parse_missing(self) -> None:
        assert parse_timestamp(None, "createdAt") is None
        assert parse_timestamp("", "createdAt") is None

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError, match="createdAt"):
            parse_timestamp("last tuesday", "createdAt")

    def test_format(self) -> None:
        dt = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2026-10-01T09:00:00Z"

    def test_format_naive_as_utc(self) -> None:
        assert format_timestamp(datetime(2026, 10, 1, 9, 0)) == "2026-10-01T09:00:00Z"

    def test_format_none(self) -> None:
        assert format_timestamp(None) is None


class TestEncoding:
    def test_coffee_to_dict_uses_wire_names(self) -> None:
        data = coffee_to_dict(coffee_from_dict(COFFEE_DICT))
        assert data == COFFEE_DICT

    def test_scored_coffee_to_dict(self) -> None:
        scored = ScoredCoffee(
            coffee=coffee_from_dict(COFFEE_DICT), score=3.25, match_reasons=["Well rated by the community"]
        )
        data = scored_coffee_to_dict(scored)
        assert data["score"] == 3.25
        assert data["matchReason"] == ["Well rated by the community"]
        assert data["coffee"]["id"] == 12

    def test_preferences_to_dict(self) -> None:
        prefs = UserPreference(favorite_origins=["Kenya"], favorite_flavor_profiles=[3, 1])
        assert preferences_to_dict(prefs) == {
            "favoriteOrigins": ["Kenya"],
            "favoriteRoastLevels": [],
            "favoriteProcessMethods": [],
            "favoriteFlavorProfiles": [3, 1],
        }


class TestStruct:
    def test_to_struct_returns_struct(self) -> None:
        assert isinstance(to_struct({"userId": 1}), struct_pb2.Struct)

    def test_numbers_come_back_as_floats(self) -> None:
        data = from_struct(to_struct({"userId": 7, "reasons": ["a"], "missing": None}))
        assert data == {"userId": 7.0, "reasons": ["a"], "missing": None}
        assert as_int(data["userId"], "userId") == 7
