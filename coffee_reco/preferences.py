"""Derive a user's preference profile from their highly rated reviews."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Hashable, Iterable, Sequence

from coffee_reco.models import Coffee, FlavorNote, Review, UserPreference

logger = logging.getLogger(__name__)

# Reviews at or above this rating count towards preferences
HIGH_RATING_THRESHOLD = 4

_TOP_ORIGINS = 3
_TOP_ROAST_LEVELS = 2
_TOP_PROCESS_METHODS = 2
_TOP_FLAVOR_NOTES = 5


def extract_preferences(
    user_reviews: Sequence[Review],
    coffees: Sequence[Coffee],
    flavor_notes: Sequence[FlavorNote],
) -> UserPreference:
    """Build a :class:`UserPreference` from one user's review history.

    Only reviews rated :data:`HIGH_RATING_THRESHOLD` or higher contribute.
    Reviews pointing at coffees missing from *coffees* are skipped, so a
    partial catalogue is fine.

    Origins, roast levels and process methods are counted over the coffees
    behind those reviews; flavor notes are counted over the reviews
    themselves, since flavor perception belongs to the tasting. Ties keep
    the order in which values were first seen.

    Args:
        user_reviews: The user's reviews, in chronological order.
        coffees: The catalogue (or any superset of the reviewed coffees).
        flavor_notes: All flavor notes. Accepted for symmetry with the
            scorer; note IDs are used as-is.

    Returns:
        The preference profile. All lists are empty when the user has no
        highly rated reviews (cold start).
    """
    coffee_by_id = {coffee.id: coffee for coffee in coffees}
    liked = [r for r in user_reviews if r.rating >= HIGH_RATING_THRESHOLD]
    liked_coffees = [coffee_by_id[r.coffee_id] for r in liked if r.coffee_id in coffee_by_id]

    if len(liked_coffees) < len(liked):
        logger.debug(
            "Skipped %d highly rated reviews for coffees outside the catalogue.",
            len(liked) - len(liked_coffees),
        )

    return UserPreference(
        favorite_origins=top_n((c.origin for c in liked_coffees), _TOP_ORIGINS),
        favorite_roast_levels=top_n((c.roast_level for c in liked_coffees), _TOP_ROAST_LEVELS),
        favorite_process_methods=top_n(
            (c.process_method for c in liked_coffees), _TOP_PROCESS_METHODS
        ),
        favorite_flavor_profiles=top_n(
            (note_id for r in liked for note_id in r.flavor_notes), _TOP_FLAVOR_NOTES
        ),
    )


def top_n(values: Iterable[Hashable | None], n: int) -> list:
    """Return the *n* most frequent values, ties in first-seen order.

    ``None`` and empty strings are not counted.
    """
    counts = Counter(v for v in values if v is not None and v != "")
    # Counter keeps insertion order; sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [value for value, _ in ranked[:n]]
