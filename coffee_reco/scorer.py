"""Additive affinity scorer for a single candidate coffee.

Every signal that fires adds a fixed (or proportional) amount to a running
score and appends a human-readable reason, so each point of the final
score can be traced back to something shown to the user.

=========================  ===============================  ==============================
Signal                     Contribution                     Fires when
=========================  ===============================  ==============================
Freshness                  ``max(0.8, 1 - days / 365)``     always
Origin                     1.5                              origin is a favorite
Roast (explicit)           1.0                              roast level is a favorite
Roast (quiz)               1.0                              explicit roast did not fire and
                                                            the quiz roast covers it
Process                    0.7                              process method is a favorite
Flavor (explicit)          ``2.0 × min(n, 3)``              n review notes are favorites
Flavor (quiz)              ``2.0 × 0.8 × m``                m quiz categories hit note names
Community rating           ``0.5 × max(0, avg - 3)``        coffee has reviews
=========================  ===============================  ==============================
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone

import numpy as np

from coffee_reco.models import (
    Coffee,
    CoffeeScore,
    FlavorNote,
    RecommendationContext,
    Review,
)
from coffee_reco.quiz import count_quiz_flavor_matches, roast_levels_for_quiz

# Freshness
FRESHNESS_FLOOR = 0.8
FRESHNESS_HORIZON_DAYS = 365
DEFAULT_AGE_DAYS = 90  # assumed age when created_at is unknown

# Preference matches
WEIGHT_ORIGIN_MATCH = 1.5
WEIGHT_ROAST_MATCH = 1.0
WEIGHT_PROCESS_MATCH = 0.7
WEIGHT_FLAVOR_MATCH = 2.0
QUIZ_FLAVOR_FACTOR = 0.8
MAX_SCORED_FLAVOR_MATCHES = 3

# Community rating
WEIGHT_RATING = 0.5
NEUTRAL_RATING = 3.0
HIGHLY_RATED_THRESHOLD = 4.5
WELL_RATED_THRESHOLD = 4.0


def score_coffee(
    coffee: Coffee,
    reviews: Sequence[Review],
    flavor_notes: Sequence[FlavorNote],
    context: RecommendationContext,
    now: datetime | None = None,
) -> CoffeeScore:
    """Score *coffee* against the user described by *context*.

    Args:
        coffee: The candidate coffee.
        reviews: Reviews from all users; only those for *coffee* are used.
        flavor_notes: All known flavor notes, used to resolve note names.
        context: The requesting user's preferences and quiz answers.
        now: Reference time for freshness. Defaults to the current UTC time.

    Returns:
        A :class:`~coffee_reco.models.CoffeeScore` with the score value and
        the reasons that contributed to it, in signal order.
    """
    coffee_reviews = [r for r in reviews if r.coffee_id == coffee.id]
    note_names = {note.id: note.name for note in flavor_notes}
    return score_with_index(coffee, coffee_reviews, note_names, context, now)


def score_with_index(
    coffee: Coffee,
    coffee_reviews: Sequence[Review],
    note_names: Mapping[int, str],
    context: RecommendationContext,
    now: datetime | None = None,
) -> CoffeeScore:
    """Score *coffee* from pre-indexed inputs.

    Same result as :func:`score_coffee`, but *coffee_reviews* must already
    be limited to this coffee and *note_names* maps note ID to name. The
    ranker uses this to avoid rescanning every review for every coffee.
    """
    prefs = context.user_preferences
    quiz = context.quiz_results
    reasons: list[str] = []

    score = freshness(coffee.created_at, now or datetime.now(timezone.utc))

    if coffee.origin in prefs.favorite_origins:
        score += WEIGHT_ORIGIN_MATCH
        reasons.append(f"From {coffee.origin}, one of your favorite origins")

    if coffee.roast_level in prefs.favorite_roast_levels:
        score += WEIGHT_ROAST_MATCH
        reasons.append(f"{coffee.roast_level} roast matches your preference")
    elif quiz is not None and coffee.roast_level in roast_levels_for_quiz(quiz.preferred_roast):
        score += WEIGHT_ROAST_MATCH
        reasons.append(f"{coffee.roast_level} roast matches your quiz preference")

    if coffee.process_method and coffee.process_method in prefs.favorite_process_methods:
        score += WEIGHT_PROCESS_MATCH
        reasons.append(f"{coffee.process_method} process matches your preference")

    note_ids = flavor_note_ids(coffee_reviews)

    favorite_notes = set(prefs.favorite_flavor_profiles)
    flavor_matches = sum(1 for note_id in note_ids if note_id in favorite_notes)
    if flavor_matches > 0:
        score += min(flavor_matches, MAX_SCORED_FLAVOR_MATCHES) * WEIGHT_FLAVOR_MATCH
        if flavor_matches == 1:
            reasons.append("Has a flavor note you like")
        else:
            reasons.append(f"Has {flavor_matches} flavor notes you like")

    if quiz is not None and quiz.preferred_flavors:
        names = [note_names[i] for i in note_ids if note_names.get(i)]
        quiz_matches = count_quiz_flavor_matches(quiz.preferred_flavors, names)
        if quiz_matches > 0:
            score += quiz_matches * WEIGHT_FLAVOR_MATCH * QUIZ_FLAVOR_FACTOR
            reasons.append(f"Matches {quiz_matches} flavor preferences from your quiz")

    avg = average_rating(coffee_reviews)
    if avg is not None:
        score += max(0.0, avg - NEUTRAL_RATING) * WEIGHT_RATING
        if avg >= HIGHLY_RATED_THRESHOLD:
            reasons.append("Highly rated by the community")
        elif avg >= WELL_RATED_THRESHOLD:
            reasons.append("Well rated by the community")

    return CoffeeScore(value=score, reasons=reasons)


def freshness(created_at: datetime | None, now: datetime) -> float:
    """Return the freshness term, always within [0.8, 1.0].

    Age is counted in whole days. Coffees without a creation time are
    treated as :data:`DEFAULT_AGE_DAYS` old; coffees dated in the future
    count as brand new.
    """
    if created_at is None:
        days_old = DEFAULT_AGE_DAYS
    else:
        days_old = max(0, (_as_utc(now) - _as_utc(created_at)) // timedelta(days=1))
    return max(FRESHNESS_FLOOR, 1.0 - days_old / FRESHNESS_HORIZON_DAYS)


def flavor_note_ids(coffee_reviews: Sequence[Review]) -> list[int]:
    """Return distinct flavor-note IDs across *coffee_reviews*, first seen first."""
    return list(dict.fromkeys(n for r in coffee_reviews for n in r.flavor_notes))


def average_rating(coffee_reviews: Sequence[Review]) -> float | None:
    """Return the mean rating, or ``None`` when there are no reviews."""
    if not coffee_reviews:
        return None
    return float(np.mean([r.rating for r in coffee_reviews]))


def _as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
