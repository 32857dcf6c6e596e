"""User state store: favorites, recently viewed coffees and quiz answers."""

from __future__ import annotations

import logging
import threading

from coffee_reco.models import QuizResults, UserActivity
from coffee_reco.quiz import validate_quiz

logger = logging.getLogger(__name__)

_DEFAULT_RECENTLY_VIEWED_LIMIT = 20


class UserStateStore:
    """Thread-safe in-memory store of per-user session activity.

    Ratings are not kept here; they come from the reviews in the
    :class:`~coffee_reco.catalogue.CoffeeCatalogue`. This store holds what
    the session layer knows on top of that: favorites, the recently viewed
    list and the latest quiz submission.

    Args:
        recently_viewed_limit: How many recently viewed coffees to keep
            per user.
    """

    def __init__(self, recently_viewed_limit: int = _DEFAULT_RECENTLY_VIEWED_LIMIT) -> None:
        if recently_viewed_limit < 1:
            raise ValueError("recently_viewed_limit must be at least 1")
        self._recently_viewed_limit = recently_viewed_limit
        self._lock = threading.RLock()
        self._activities: dict[int, UserActivity] = {}

    # ------------------------------------------------------------------
    # Activity access
    # ------------------------------------------------------------------

    def get_or_create_activity(self, user_id: int) -> UserActivity:
        """Return the existing activity for *user_id*, or create an empty one."""
        with self._lock:
            if user_id not in self._activities:
                self._activities[user_id] = UserActivity(user_id=user_id)
            return self._activities[user_id]

    def snapshot(self, user_id: int) -> UserActivity:
        """Return a detached copy of *user_id*'s activity.

        The copy can be read without holding the lock while other threads
        keep recording events.
        """
        with self._lock:
            activity = self.get_or_create_activity(user_id)
            return UserActivity(
                user_id=activity.user_id,
                favorited_ids=set(activity.favorited_ids),
                recently_viewed_ids=list(activity.recently_viewed_ids),
                quiz_results=activity.quiz_results,
            )

    # ------------------------------------------------------------------
    # Event recording
    # ------------------------------------------------------------------

    def record_favorited(self, user_id: int, coffee_id: int) -> None:
        """Mark *coffee_id* as a favorite of *user_id*."""
        with self._lock:
            self.get_or_create_activity(user_id).favorited_ids.add(coffee_id)
        logger.debug("User %r favorited coffee %r.", user_id, coffee_id)

    def record_unfavorited(self, user_id: int, coffee_id: int) -> None:
        """Remove *coffee_id* from *user_id*'s favorites (no-op if absent)."""
        with self._lock:
            self.get_or_create_activity(user_id).favorited_ids.discard(coffee_id)
        logger.debug("User %r unfavorited coffee %r.", user_id, coffee_id)

    def record_viewed(self, user_id: int, coffee_id: int) -> None:
        """Move *coffee_id* to the front of *user_id*'s recently viewed list.

        The list is deduplicated and capped at the configured limit.
        """
        with self._lock:
            activity = self.get_or_create_activity(user_id)
            viewed = [cid for cid in activity.recently_viewed_ids if cid != coffee_id]
            viewed.insert(0, coffee_id)
            activity.recently_viewed_ids = viewed[: self._recently_viewed_limit]

    def record_quiz(self, user_id: int, quiz: QuizResults) -> None:
        """Store *quiz* as *user_id*'s latest quiz submission.

        Raises:
            ValueError: If the roast answer or a flavor category is not a
                string. Unmapped values are stored and score as no match.
        """
        validate_quiz(quiz)
        with self._lock:
            self.get_or_create_activity(user_id).quiz_results = quiz
        logger.info("Recorded quiz results for user %r.", user_id)
