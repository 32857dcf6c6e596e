"""Core domain dataclasses shared across all recommender modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RoastLevel(str, Enum):
    """Canonical roast levels, ordered light to dark."""

    LIGHT = "Light"
    MEDIUM_LIGHT = "Medium-Light"
    MEDIUM = "Medium"
    MEDIUM_DARK = "Medium-Dark"
    DARK = "Dark"


@dataclass(frozen=True)
class Coffee:
    """A single coffee in the catalogue.

    Attributes:
        id: Unique identifier for the coffee.
        name: Human-readable coffee name.
        roaster: Name of the roaster that sells it.
        origin: Country of origin (e.g. ``"Ethiopia"``).
        roast_level: One of the :class:`RoastLevel` values.
        region: Growing region within the origin country, if known.
        process_method: E.g. ``"Washed"`` or ``"Natural"``, if known.
        description: Free-text description.
        created_at: When the coffee was added to the catalogue. Drives the
            freshness term of the score.
    """

    id: int
    name: str
    roaster: str
    origin: str
    roast_level: str
    region: str | None = None
    process_method: str | None = None
    description: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Review:
    """A user's rating of a coffee.

    Attributes:
        id: Unique identifier for the review.
        user_id: The reviewing user.
        coffee_id: The reviewed coffee.
        rating: Integer in [1, 5].
        flavor_notes: Flavor-note IDs the user tasted, in the order given.
            These belong to the tasting, not to the coffee itself.
        created_at: When the review was written.
    """

    id: int
    user_id: int
    coffee_id: int
    rating: int
    flavor_notes: tuple[int, ...] = ()
    created_at: datetime | None = None


@dataclass(frozen=True)
class FlavorNote:
    """A named flavor tag such as ``"Blueberry"``."""

    id: int
    name: str
    category: str | None = None


@dataclass
class UserPreference:
    """Preference profile derived from a user's highly rated reviews.

    Each list is ordered most-favored first.

    Attributes:
        favorite_origins: Up to 3 origin countries.
        favorite_roast_levels: Up to 2 roast levels.
        favorite_process_methods: Up to 2 process methods.
        favorite_flavor_profiles: Up to 5 flavor-note IDs.
    """

    favorite_origins: list[str] = field(default_factory=list)
    favorite_roast_levels: list[str] = field(default_factory=list)
    favorite_process_methods: list[str] = field(default_factory=list)
    favorite_flavor_profiles: list[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.favorite_origins
            or self.favorite_roast_levels
            or self.favorite_process_methods
            or self.favorite_flavor_profiles
        )


@dataclass
class QuizResults:
    """Answers from the onboarding taste quiz.

    Only ``preferred_roast`` and ``preferred_flavors`` affect scoring; the
    remaining answers are carried so callers can round-trip them.

    Attributes:
        preferred_roast: ``"light"``, ``"medium"`` or ``"dark"``.
        preferred_flavors: Flavor categories such as ``"fruity"`` or ``"nutty"``.
        brewing_method: E.g. ``"pour over"``.
        consumption_time: E.g. ``"morning"``.
        caffeine_preference: E.g. ``"regular"`` or ``"decaf"``.
    """

    preferred_roast: str | None = None
    preferred_flavors: list[str] = field(default_factory=list)
    brewing_method: str | None = None
    consumption_time: str | None = None
    caffeine_preference: str | None = None


@dataclass
class RecommendationContext:
    """Everything known about the requesting user for one ranking pass.

    Attributes:
        user_preferences: Explicit or review-derived preferences.
        ratings_map: ``coffee_id -> rating`` for coffees the user already
            rated. Rated coffees are never recommended.
        favorited_ids: Coffees the user favorited. Never recommended.
        recently_viewed_ids: Most recent first. Not used for scoring.
        quiz_results: Optional quiz answers used as a fallback signal.
    """

    user_preferences: UserPreference = field(default_factory=UserPreference)
    ratings_map: dict[int, int] = field(default_factory=dict)
    favorited_ids: set[int] = field(default_factory=set)
    recently_viewed_ids: list[int] = field(default_factory=list)
    quiz_results: QuizResults | None = None

    def excluded_ids(self) -> set[int]:
        """Return the IDs of coffees that must not be recommended."""
        return set(self.ratings_map) | set(self.favorited_ids)


@dataclass
class CoffeeScore:
    """Raw scorer output: the affinity value and the reasons behind it."""

    value: float
    reasons: list[str] = field(default_factory=list)


@dataclass
class ScoredCoffee:
    """A recommended coffee together with its score and match reasons."""

    coffee: Coffee
    score: float
    match_reasons: list[str] = field(default_factory=list)


@dataclass
class UserActivity:
    """Per-user session state held by :class:`~coffee_reco.user_state.UserStateStore`.

    Attributes:
        user_id: The user's identifier.
        favorited_ids: Coffees the user has favorited.
        recently_viewed_ids: Coffees the user viewed, most recent first.
        quiz_results: The user's latest quiz submission, if any.
    """

    user_id: int
    favorited_ids: set[int] = field(default_factory=set)
    recently_viewed_ids: list[int] = field(default_factory=list)
    quiz_results: QuizResults | None = None
