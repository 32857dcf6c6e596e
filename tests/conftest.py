"""Shared pytest fixtures for all recommender tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from coffee_reco.models import Coffee, FlavorNote, Review


NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def make_coffee(
    coffee_id: int,
    origin: str = "Nowhere",
    roast_level: str = "Medium",
    process_method: str | None = None,
    created_at: datetime | None = NOW,
    name: str | None = None,
) -> Coffee:
    """Build a coffee whose unimportant fields are filled in."""
    return Coffee(
        id=coffee_id,
        name=name or f"Coffee {coffee_id}",
        roaster="Test Roaster",
        origin=origin,
        roast_level=roast_level,
        process_method=process_method,
        created_at=created_at,
    )


def make_review(
    review_id: int,
    coffee_id: int,
    rating: int,
    user_id: int = 100,
    notes: tuple[int, ...] = (),
) -> Review:
    return Review(
        id=review_id,
        user_id=user_id,
        coffee_id=coffee_id,
        rating=rating,
        flavor_notes=notes,
        created_at=NOW,
    )


# ---------------------------------------------------------------------------
# Flavor note fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def flavor_notes() -> list[FlavorNote]:
    return [
        FlavorNote(1, "Blueberry", "Fruity"),
        FlavorNote(2, "Jasmine", "Floral"),
        FlavorNote(3, "Lemon", "Fruity"),
        FlavorNote(4, "Milk Chocolate", "Sweet"),
        FlavorNote(5, "Roasted Peanut", "Nutty"),
        FlavorNote(6, "Tobacco", "Earthy"),
    ]


# ---------------------------------------------------------------------------
# Coffee fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def coffee_ethiopia() -> Coffee:
    return Coffee(
        1, "Yirgacheffe", "Bright Side", "Ethiopia", "Light",
        region="Yirgacheffe", process_method="Washed", created_at=days_ago(10),
    )


@pytest.fixture
def coffee_brazil() -> Coffee:
    return Coffee(
        2, "Cerrado", "Harbor Roasting", "Brazil", "Dark",
        process_method="Natural", created_at=days_ago(400),
    )


@pytest.fixture
def coffee_colombia() -> Coffee:
    return Coffee(
        3, "Huila Honey", "Harbor Roasting", "Colombia", "Medium",
        process_method="Honey", created_at=days_ago(100),
    )


@pytest.fixture
def coffee_kenya() -> Coffee:
    return Coffee(
        4, "Kirinyaga", "Bright Side", "Kenya", "Medium-Light",
        process_method="Washed", created_at=days_ago(30),
    )


@pytest.fixture
def sample_coffees(coffee_ethiopia, coffee_brazil, coffee_colombia, coffee_kenya) -> list[Coffee]:
    return [coffee_ethiopia, coffee_brazil, coffee_colombia, coffee_kenya]


# ---------------------------------------------------------------------------
# Review fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_reviews() -> list[Review]:
    """User 7 loves the Ethiopian, likes the Colombian, dislikes the Brazilian.

    User 8 has tasted the Kenyan.
    """
    return [
        make_review(1, coffee_id=1, rating=5, user_id=7, notes=(1, 2)),
        make_review(2, coffee_id=3, rating=4, user_id=7, notes=(4,)),
        make_review(3, coffee_id=2, rating=2, user_id=7, notes=(6,)),
        make_review(4, coffee_id=4, rating=5, user_id=8, notes=(3, 1)),
    ]
