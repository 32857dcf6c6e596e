"""Rank unseen coffees for a user."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

import numpy as np

from coffee_reco.models import (
    Coffee,
    FlavorNote,
    QuizResults,
    RecommendationContext,
    Review,
    ScoredCoffee,
    UserPreference,
)
from coffee_reco.preferences import extract_preferences
from coffee_reco.quiz import roast_levels_for_quiz
from coffee_reco.scorer import score_with_index

logger = logging.getLogger(__name__)


def get_recommendations(
    coffees: Sequence[Coffee],
    reviews: Sequence[Review],
    flavor_notes: Sequence[FlavorNote],
    context: RecommendationContext,
    now: datetime | None = None,
) -> list[ScoredCoffee]:
    """Score every coffee the user has not rated or favorited, best first.

    Coffees with equal scores keep their catalogue order.

    Args:
        coffees: The full catalogue.
        reviews: Reviews from all users.
        flavor_notes: All known flavor notes.
        context: The requesting user's context.
        now: Reference time for freshness. Defaults to the current UTC time,
            fixed once for the whole pass.

    Returns:
        Scored coffees sorted by descending score. Never contains a coffee
        whose ID is in ``context.ratings_map`` or ``context.favorited_ids``.
    """
    now = now or datetime.now(timezone.utc)
    excluded = context.excluded_ids()
    candidates = [c for c in coffees if c.id not in excluded]
    if not candidates:
        return []

    reviews_by_coffee: dict[int, list[Review]] = defaultdict(list)
    for review in reviews:
        reviews_by_coffee[review.coffee_id].append(review)
    note_names = {note.id: note.name for note in flavor_notes}

    scored = []
    for coffee in candidates:
        result = score_with_index(
            coffee, reviews_by_coffee.get(coffee.id, []), note_names, context, now
        )
        scored.append(ScoredCoffee(coffee=coffee, score=result.value, match_reasons=result.reasons))

    order = np.argsort(-np.array([s.score for s in scored], dtype=np.float64), kind="stable")
    logger.debug(
        "Ranked %d of %d coffees (%d excluded).",
        len(scored),
        len(coffees),
        len(coffees) - len(candidates),
    )
    return [scored[i] for i in order]


def get_quiz_based_recommendations(
    coffees: Sequence[Coffee],
    reviews: Sequence[Review],
    flavor_notes: Sequence[FlavorNote],
    quiz_results: QuizResults,
    now: datetime | None = None,
) -> list[ScoredCoffee]:
    """Rank coffees for someone known only through their quiz answers.

    The quiz roast is turned into explicit favorite roast levels, so roast
    matches carry the plain "matches your preference" reason. No other
    preference is set; flavor can only score through the quiz keywords.
    """
    context = RecommendationContext(
        user_preferences=UserPreference(
            favorite_roast_levels=roast_levels_for_quiz(quiz_results.preferred_roast),
        ),
        quiz_results=quiz_results,
    )
    return get_recommendations(coffees, reviews, flavor_notes, context, now=now)


def build_user_context(
    user_id: int,
    reviews: Sequence[Review],
    coffees: Sequence[Coffee],
    flavor_notes: Sequence[FlavorNote],
    favorited_ids: Iterable[int] = (),
    recently_viewed_ids: Iterable[int] = (),
    quiz_results: QuizResults | None = None,
) -> RecommendationContext:
    """Assemble a :class:`RecommendationContext` for *user_id*.

    The user's own reviews give both the ratings map (so rated coffees are
    excluded) and, through :func:`~coffee_reco.preferences.extract_preferences`,
    the preference profile.
    """
    user_reviews = [r for r in reviews if r.user_id == user_id]
    return RecommendationContext(
        user_preferences=extract_preferences(user_reviews, coffees, flavor_notes),
        ratings_map={r.coffee_id: r.rating for r in user_reviews},
        favorited_ids=set(favorited_ids),
        recently_viewed_ids=list(recently_viewed_ids),
        quiz_results=quiz_results,
    )
