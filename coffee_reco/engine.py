"""Recommendation engine: joins catalogue and user activity, then ranks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from coffee_reco.catalogue import CoffeeCatalogue
from coffee_reco.models import QuizResults, ScoredCoffee, UserPreference
from coffee_reco.preferences import extract_preferences
from coffee_reco.ranker import (
    build_user_context,
    get_quiz_based_recommendations,
    get_recommendations,
)
from coffee_reco.user_state import UserStateStore

logger = logging.getLogger(__name__)

_DEFAULT_LIMIT = 20
_MAX_LIMIT = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationEngine:
    """Produces ranked recommendations for users of the coffee catalogue.

    For each request the engine takes a consistent catalogue snapshot and
    a copy of the user's activity, builds a
    :class:`~coffee_reco.models.RecommendationContext` from them, and hands
    everything to the pure ranker in :mod:`coffee_reco.ranker`.

    Args:
        catalogue: The :class:`~coffee_reco.catalogue.CoffeeCatalogue`.
        user_state_store: The :class:`~coffee_reco.user_state.UserStateStore`.
        default_limit: Number of results returned when no limit is given.
        max_limit: Upper bound on any requested limit.
        clock: Returns the reference time for freshness. Injectable for tests.
    """

    def __init__(
        self,
        catalogue: CoffeeCatalogue,
        user_state_store: UserStateStore,
        default_limit: int = _DEFAULT_LIMIT,
        max_limit: int = _MAX_LIMIT,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._catalogue = catalogue
        self._user_state_store = user_state_store
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._clock = clock

    def get_recommendations(self, user_id: int, limit: int | None = None) -> list[ScoredCoffee]:
        """Return the best-scoring unseen coffees for *user_id*.

        Coffees the user reviewed or favorited are never included.

        Args:
            user_id: The requesting user.
            limit: Maximum number of results; defaults to the engine's
                default limit and is capped at its maximum.

        Returns:
            Scored coffees, best first.

        Raises:
            ValueError: If *user_id* is missing or *limit* is not positive.
        """
        if user_id is None:
            raise ValueError("user_id is required")
        n = self._resolve_limit(limit)

        coffees, reviews, notes = self._catalogue.snapshot()
        activity = self._user_state_store.snapshot(user_id)
        context = build_user_context(
            user_id,
            reviews,
            coffees,
            notes,
            favorited_ids=activity.favorited_ids,
            recently_viewed_ids=activity.recently_viewed_ids,
            quiz_results=activity.quiz_results,
        )
        if context.user_preferences.is_empty():
            logger.debug("User %r has no highly rated reviews; cold-start scoring.", user_id)
        ranked = get_recommendations(coffees, reviews, notes, context, now=self._clock())
        logger.debug(
            "Recommendations for user %r: %s",
            user_id,
            [s.coffee.id for s in ranked[:n]],
        )
        return ranked[:n]

    def get_quiz_recommendations(
        self, quiz: QuizResults, limit: int | None = None
    ) -> list[ScoredCoffee]:
        """Return recommendations driven only by *quiz* answers.

        Raises:
            ValueError: If *limit* is not positive.
        """
        n = self._resolve_limit(limit)
        coffees, reviews, notes = self._catalogue.snapshot()
        ranked = get_quiz_based_recommendations(coffees, reviews, notes, quiz, now=self._clock())
        return ranked[:n]

    def get_preferences(self, user_id: int) -> UserPreference:
        """Return the preference profile derived from *user_id*'s reviews."""
        if user_id is None:
            raise ValueError("user_id is required")
        coffees, reviews, notes = self._catalogue.snapshot()
        user_reviews = [r for r in reviews if r.user_id == user_id]
        return extract_preferences(user_reviews, coffees, notes)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_limit(self, limit: int | None) -> int:
        if limit is None:
            return self._default_limit
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit!r}")
        return min(limit, self._max_limit)
