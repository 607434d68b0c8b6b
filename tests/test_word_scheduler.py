"""
Tests for the persisted word table in sukhan.word_scheduler.
"""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from sukhan.constants import MAX_INTERVAL, WORD_PROGRESS_KEY
from sukhan.db import PersistentStore
from sukhan.exceptions import StoreOperationError
from sukhan.models import Rating, WordRef, get_word_id
from sukhan.word_scheduler import WordScheduler


def test_word_id_is_category_and_index():
    assert get_word_id("greetings", 3) == "greetings_3"
    assert WordRef(category="food", index=0).word_id == "food_0"


def test_mark_word_seen_creates_default_state(word_scheduler: WordScheduler, today: date):
    word_scheduler.mark_word_seen("greetings_0")
    state = word_scheduler.get_word_data("greetings_0")
    assert state.rating is None
    assert state.interval == 1
    assert state.ease == 2.5
    assert state.review_count == 0
    assert state.next_review is None
    assert state.last_seen == today


def test_mark_word_seen_is_a_noop_for_tracked_words(word_scheduler: WordScheduler):
    word_scheduler.rate_word("greetings_0", Rating.Good)
    before = word_scheduler.get_word_data("greetings_0")
    word_scheduler.mark_word_seen("greetings_0")
    assert word_scheduler.get_word_data("greetings_0") == before


def test_unknown_word_has_no_data(word_scheduler: WordScheduler):
    assert word_scheduler.get_word_data("food_99") is None


def test_rate_fresh_word_again_then_easy(word_scheduler: WordScheduler, today: date):
    first = word_scheduler.rate_word("greetings_0", Rating.Again)
    assert first.interval == 1
    assert first.ease == pytest.approx(2.3)
    assert first.review_count == 1
    assert first.next_review == today + timedelta(days=1)

    second = word_scheduler.rate_word("greetings_0", Rating.Easy)
    assert second.interval == 3
    assert second.ease == pytest.approx(2.45)
    assert second.review_count == 2
    assert second.rating is Rating.Easy
    assert second.next_review == today + timedelta(days=3)


def test_rate_word_accepts_string_rating(word_scheduler: WordScheduler):
    state = word_scheduler.rate_word("greetings_0", "hard")
    assert state.rating is Rating.Hard


def test_rate_word_rejects_unknown_rating(word_scheduler: WordScheduler):
    with pytest.raises(ValueError):
        word_scheduler.rate_word("greetings_0", "meh")
    assert word_scheduler.get_word_data("greetings_0") is None


def test_rate_word_uses_injected_clock(memory_store):
    days = iter([date(2024, 1, 1), date(2024, 1, 5)])
    scheduler = WordScheduler(memory_store, clock=lambda: next(days))
    state = scheduler.rate_word("food_1", Rating.Good)
    assert state.last_seen == date(2024, 1, 1)
    state = scheduler.rate_word("food_1", Rating.Good)
    assert state.last_seen == date(2024, 1, 5)
    assert state.next_review == date(2024, 1, 5) + timedelta(days=state.interval)


def test_table_is_persisted_in_camel_case(word_scheduler: WordScheduler, today: date):
    word_scheduler.rate_word("greetings_0", Rating.Good)
    assert word_scheduler.store.get(WORD_PROGRESS_KEY) == {
        "greetings_0": {
            "rating": "good",
            "interval": 3,
            "ease": 2.5,
            "nextReview": (today + timedelta(days=3)).isoformat(),
            "reviewCount": 1,
            "lastSeen": today.isoformat(),
        }
    }


def test_reads_records_written_with_null_rating(word_scheduler: WordScheduler):
    word_scheduler.store.set(
        WORD_PROGRESS_KEY,
        {
            "greetings_0": {
                "rating": None,
                "interval": 1,
                "ease": 2.5,
                "nextReview": None,
                "reviewCount": 0,
                "lastSeen": "2024-02-01",
            }
        },
    )
    state = word_scheduler.get_word_data("greetings_0")
    assert state.rating is None
    assert state.last_seen == date(2024, 2, 1)


def test_hard_and_easy_filters(word_scheduler: WordScheduler):
    refs = [WordRef(category="greetings", index=i) for i in range(5)]
    word_scheduler.rate_word("greetings_0", Rating.Again)
    word_scheduler.rate_word("greetings_1", Rating.Hard)
    word_scheduler.rate_word("greetings_2", Rating.Good)
    word_scheduler.rate_word("greetings_3", Rating.Easy)
    word_scheduler.mark_word_seen("greetings_4")

    assert word_scheduler.get_hard_words(refs) == refs[:2]
    assert word_scheduler.get_easy_words(refs) == refs[2:4]
    assert word_scheduler.get_rated_words(refs) == refs[:4]


def test_due_words(word_scheduler: WordScheduler, today: date):
    refs = [WordRef(category="food", index=i) for i in range(3)]
    word_scheduler.rate_word("food_0", Rating.Again)
    word_scheduler.rate_word("food_1", Rating.Easy)
    word_scheduler.mark_word_seen("food_2")

    assert word_scheduler.get_due_words(refs) == []
    assert word_scheduler.get_due_words(refs, today + timedelta(days=1)) == [refs[0]]
    assert word_scheduler.get_due_words(refs, today + timedelta(days=30)) == refs[:2]


def test_reset_word_progress(word_scheduler: WordScheduler):
    word_scheduler.rate_word("greetings_0", Rating.Good)
    word_scheduler.reset_word_progress()
    assert word_scheduler.get_word_progress() == {}


def test_malformed_entries_are_skipped(word_scheduler: WordScheduler):
    word_scheduler.store.set(
        WORD_PROGRESS_KEY,
        {
            "greetings_0": {"rating": "good", "interval": 3, "ease": 2.5, "lastSeen": "2024-01-01"},
            "greetings_1": {"rating": "sometimes", "interval": 0, "ease": 0.5},
            "greetings_2": "garbage",
        },
    )
    progress = word_scheduler.get_word_progress()
    assert list(progress) == ["greetings_0"]


def test_non_mapping_table_is_treated_as_empty(word_scheduler: WordScheduler):
    word_scheduler.store.set(WORD_PROGRESS_KEY, ["greetings_0"])
    assert word_scheduler.get_word_progress() == {}
    word_scheduler.mark_word_seen("greetings_0")
    assert list(word_scheduler.get_word_progress()) == ["greetings_0"]


def test_storage_read_errors_are_swallowed(today: date):
    store = MagicMock(spec=PersistentStore)
    store.get.side_effect = StoreOperationError("disk I/O error")
    scheduler = WordScheduler(store, clock=lambda: today)

    assert scheduler.get_word_progress() == {}
    assert scheduler.get_hard_words([WordRef(category="food", index=0)]) == []

    state = scheduler.rate_word("food_0", Rating.Good)
    assert state.review_count == 1
    store.set.assert_called_once()


def test_malformed_entries_survive_other_writes(word_scheduler: WordScheduler):
    bogus = {"rating": "bogus", "interval": 2, "ease": 2.5}
    word_scheduler.store.set(
        WORD_PROGRESS_KEY,
        {
            "food_0": bogus,
            "food_1": {"rating": "good", "interval": 3, "ease": 2.5, "lastSeen": "2024-01-01"},
        },
    )

    word_scheduler.rate_word("food_2", Rating.Good)
    word_scheduler.mark_word_seen("food_3")

    stored = word_scheduler.store.get(WORD_PROGRESS_KEY)
    assert stored["food_0"] == bogus
    assert set(stored) == {"food_0", "food_1", "food_2", "food_3"}
    assert "food_0" not in word_scheduler.get_word_progress()


def test_rating_a_malformed_word_replaces_its_entry(word_scheduler: WordScheduler, today: date):
    word_scheduler.store.set(WORD_PROGRESS_KEY, {"food_0": {"rating": "bogus"}})

    state = word_scheduler.rate_word("food_0", Rating.Hard)

    assert state.review_count == 1
    assert word_scheduler.get_word_data("food_0") == state
    assert word_scheduler.store.get(WORD_PROGRESS_KEY)["food_0"]["rating"] == "hard"


def test_repeated_easy_ratings_are_capped(word_scheduler: WordScheduler, today: date):
    for _ in range(15):
        state = word_scheduler.rate_word("greetings_0", Rating.Easy)

    assert state.interval == MAX_INTERVAL
    assert state.next_review == today + timedelta(days=MAX_INTERVAL)
    assert state.review_count == 15

    for _ in range(3):
        state = word_scheduler.rate_word("greetings_0", Rating.Good)
    assert state.interval == MAX_INTERVAL
    assert word_scheduler.get_word_data("greetings_0").review_count == 18
