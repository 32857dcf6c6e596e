"""Tests for coffee_reco.user_state.UserStateStore."""

from __future__ import annotations

import threading

import pytest

from coffee_reco.models import QuizResults
from coffee_reco.user_state import UserStateStore


@pytest.fixture
def store() -> UserStateStore:
    return UserStateStore(recently_viewed_limit=3)


class TestGetOrCreateActivity:
    def test_creates_empty_activity(self, store: UserStateStore) -> None:
        activity = store.get_or_create_activity(5)
        assert activity.user_id == 5
        assert activity.favorited_ids == set()

    def test_returns_same_instance(self, store: UserStateStore) -> None:
        assert store.get_or_create_activity(5) is store.get_or_create_activity(5)

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValueError):
            UserStateStore(recently_viewed_limit=0)


class TestFavorites:
    def test_record_favorited(self, store: UserStateStore) -> None:
        store.record_favorited(1, 10)
        store.record_favorited(1, 11)
        assert store.snapshot(1).favorited_ids == {10, 11}

    def test_record_unfavorited(self, store: UserStateStore) -> None:
        store.record_favorited(1, 10)
        store.record_unfavorited(1, 10)
        assert store.snapshot(1).favorited_ids == set()

    def test_unfavorite_unknown_is_noop(self, store: UserStateStore) -> None:
        store.record_unfavorited(1, 99)
        assert store.snapshot(1).favorited_ids == set()

    def test_users_are_independent(self, store: UserStateStore) -> None:
        store.record_favorited(1, 10)
        assert store.snapshot(2).favorited_ids == set()


class TestRecentlyViewed:
    def test_most_recent_first(self, store: UserStateStore) -> None:
        for coffee_id in (1, 2, 3):
            store.record_viewed(1, coffee_id)
        assert store.snapshot(1).recently_viewed_ids == [3, 2, 1]

    def test_repeat_view_moves_to_front(self, store: UserStateStore) -> None:
        for coffee_id in (1, 2, 1):
            store.record_viewed(1, coffee_id)
        assert store.snapshot(1).recently_viewed_ids == [1, 2]

    def test_capped_at_limit(self, store: UserStateStore) -> None:
        for coffee_id in range(1, 6):
            store.record_viewed(1, coffee_id)
        assert store.snapshot(1).recently_viewed_ids == [5, 4, 3]


class TestQuiz:
    def test_record_quiz(self, store: UserStateStore) -> None:
        quiz = QuizResults(preferred_roast="dark", preferred_flavors=["earthy"])
        store.record_quiz(1, quiz)
        assert store.snapshot(1).quiz_results == quiz

    def test_latest_quiz_wins(self, store: UserStateStore) -> None:
        store.record_quiz(1, QuizResults(preferred_roast="dark"))
        store.record_quiz(1, QuizResults(preferred_roast="light"))
        assert store.snapshot(1).quiz_results.preferred_roast == "light"

    def test_unmapped_answers_are_stored(self, store: UserStateStore) -> None:
        quiz = QuizResults("medium-dark", ["fruity", "chocolate"])
        store.record_quiz(1, quiz)
        assert store.snapshot(1).quiz_results == quiz

    def test_malformed_quiz_rejected(self, store: UserStateStore) -> None:
        with pytest.raises(ValueError):
            store.record_quiz(1, QuizResults(preferred_roast=2))
        assert store.snapshot(1).quiz_results is None


class TestSnapshot:
    def test_snapshot_is_detached(self, store: UserStateStore) -> None:
        store.record_favorited(1, 10)
        snap = store.snapshot(1)
        snap.favorited_ids.add(99)
        snap.recently_viewed_ids.append(5)
        assert store.snapshot(1).favorited_ids == {10}
        assert store.snapshot(1).recently_viewed_ids == []


class TestThreadSafety:
    def test_concurrent_favorites(self) -> None:
        store = UserStateStore()

        def worker(start: int) -> None:
            for coffee_id in range(start, start + 100):
                store.record_favorited(1, coffee_id)

        threads = [threading.Thread(target=worker, args=(i * 100,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.snapshot(1).favorited_ids) == 400
