"""
This module defines the WordScheduler class, which owns the persisted table of
per-word spaced-repetition state. It records first exposures, applies ratings
through a scheduler and answers hard/easy/due queries over word refs.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from .constants import WORD_PROGRESS_KEY
from .db.store import PersistentStore
from .exceptions import StorageError
from .models import EASY_RATINGS, HARD_RATINGS, Rating, WordRef, WordState
from .scheduler import BaseScheduler, SM2Scheduler

logger = logging.getLogger(__name__)


class WordScheduler:
    """
    Persisted word table `{word_id: WordState}`.

    State only changes on an explicit exposure or rating; there is no
    passive decay. Each mutating call is a full read-modify-write of the
    table record.
    """

    def __init__(
        self,
        store: PersistentStore,
        scheduler: Optional[BaseScheduler] = None,
        clock: Callable[[], date] = date.today,
        key: str = WORD_PROGRESS_KEY,
    ):
        """
        Parameters:
            store (PersistentStore): Durable storage holding the word table.
            scheduler (BaseScheduler): Update rule for ratings; SM2Scheduler by default.
            clock (Callable[[], date]): Returns today's local date.
            key (str): Record key of the word table.
        """
        self.store = store
        self.scheduler = scheduler or SM2Scheduler()
        self.clock = clock
        self.key = key

    def _load(self) -> Tuple[Dict[str, WordState], Dict[str, Any]]:
        """
        Read the word table as (valid states, raw entries that failed
        validation). A missing or unreadable record yields two empty dicts.
        """
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning(f"Could not read word progress, starting empty: {e}")
            return {}, {}
        if raw is None:
            return {}, {}
        if not isinstance(raw, dict):
            logger.warning(
                f"Word progress record is a {type(raw).__name__}, not a mapping; starting empty."
            )
            return {}, {}

        progress: Dict[str, WordState] = {}
        unparsed: Dict[str, Any] = {}
        for word_id, data in raw.items():
            try:
                progress[word_id] = WordState.model_validate(data)
            except ValidationError as e:
                logger.warning(f"Skipping malformed state for word '{word_id}': {e}")
                unparsed[word_id] = data
        return progress, unparsed

    def get_word_progress(self) -> Dict[str, WordState]:
        """
        Load the whole word table. A missing or unreadable record yields an
        empty table; individual malformed entries are skipped.
        """
        return self._load()[0]

    def _save(
        self, progress: Dict[str, WordState], unparsed: Dict[str, Any]
    ) -> None:
        # Malformed entries are written back as they were read.
        record = {
            word_id: data for word_id, data in unparsed.items() if word_id not in progress
        }
        for word_id, state in progress.items():
            record[word_id] = state.model_dump(mode="json", by_alias=True)
        self.store.set(self.key, record)

    def get_word_data(self, word_id: str) -> Optional[WordState]:
        return self.get_word_progress().get(word_id)

    def mark_word_seen(self, word_id: str) -> None:
        """
        Record a first exposure. Already tracked words are left untouched; a
        malformed entry for the word is replaced by a fresh state.
        """
        progress, unparsed = self._load()
        if word_id in progress:
            return
        progress[word_id] = self.scheduler.new_state(self.clock())
        self._save(progress, unparsed)
        logger.debug(f"Word '{word_id}' seen for the first time.")

    def rate_word(self, word_id: str, rating: Union[Rating, str]) -> WordState:
        """
        Apply a rating to a word, creating its state if needed, persist the
        table and return the updated state.

        Raises:
            ValueError: If `rating` is not a valid Rating.
        """
        today = self.clock()
        progress, unparsed = self._load()
        state = progress.get(word_id)
        if state is None:
            state = self.scheduler.new_state(today)

        output = self.scheduler.compute_next_state(state, rating, today)
        updated = state.model_copy(
            update={
                "rating": Rating(rating),
                "interval": output.interval,
                "ease": output.ease,
                "next_review": output.next_review,
                "review_count": state.review_count + 1,
                "last_seen": today,
            }
        )
        progress[word_id] = updated
        self._save(progress, unparsed)
        logger.debug(
            f"Word '{word_id}' rated '{updated.rating.value}', next review {updated.next_review}."
        )
        return updated

    def _filter_by_rating(
        self, refs: Sequence[WordRef], ratings: FrozenSet[Rating]
    ) -> List[WordRef]:
        progress = self.get_word_progress()
        result = []
        for ref in refs:
            state = progress.get(ref.word_id)
            if state is not None and state.rating in ratings:
                result.append(ref)
        return result

    def get_hard_words(self, refs: Sequence[WordRef]) -> List[WordRef]:
        """Refs whose last rating was again or hard; unrated refs are excluded."""
        return self._filter_by_rating(refs, HARD_RATINGS)

    def get_easy_words(self, refs: Sequence[WordRef]) -> List[WordRef]:
        """Refs whose last rating was good or easy; unrated refs are excluded."""
        return self._filter_by_rating(refs, EASY_RATINGS)

    def get_rated_words(self, refs: Sequence[WordRef]) -> List[WordRef]:
        return self._filter_by_rating(refs, HARD_RATINGS | EASY_RATINGS)

    def get_due_words(
        self, refs: Sequence[WordRef], on_date: Optional[date] = None
    ) -> List[WordRef]:
        """Refs scheduled for review on or before `on_date` (today by default)."""
        on_date = on_date or self.clock()
        progress = self.get_word_progress()
        return [
            ref
            for ref in refs
            if (state := progress.get(ref.word_id)) is not None
            and state.next_review is not None
            and state.next_review <= on_date
        ]

    def reset_word_progress(self) -> None:
        """Erase the whole word table."""
        self.store.delete(self.key)
        logger.info("Word progress reset.")
