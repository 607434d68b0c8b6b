"""
Completion ledger: which lessons, reviews and quizzes the learner has finished.

The ledger is a single persisted record. Reads never fail: a missing or
malformed record is treated as "no history yet".
"""

import logging
from typing import List, Sequence

from pydantic import ValidationError

from .constants import PROGRESS_KEY
from .db.store import PersistentStore
from .exceptions import StorageError
from .models import CompletionRecord, Lesson

logger = logging.getLogger(__name__)


class CompletionLedger:
    """
    Tracks completed checkpoints. Ids are only ever added; the only way to
    remove one is `reset_progress`.
    """

    def __init__(self, store: PersistentStore, key: str = PROGRESS_KEY):
        self.store = store
        self.key = key

    def get_progress(self) -> CompletionRecord:
        """
        Load the ledger record, substituting an empty one if it is absent or
        cannot be read.
        """
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning(f"Could not read completion ledger, starting empty: {e}")
            return CompletionRecord()
        if raw is None:
            return CompletionRecord()
        try:
            return CompletionRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Completion ledger record is malformed, starting empty: {e}")
            return CompletionRecord()

    def _save(self, record: CompletionRecord) -> None:
        self.store.set(self.key, record.model_dump(mode="json", by_alias=True))

    def _mark(self, field: str, item_id: str) -> None:
        record = self.get_progress()
        completed: List[str] = getattr(record, field)
        if item_id in completed:
            return
        completed.append(item_id)
        self._save(record)
        logger.info(f"Marked '{item_id}' complete ({field}).")

    def mark_lesson_complete(self, lesson_id: str) -> None:
        self._mark("completed_lessons", lesson_id)

    def mark_review_complete(self, review_id: str) -> None:
        self._mark("completed_reviews", review_id)

    def mark_quiz_complete(self, quiz_id: str) -> None:
        self._mark("completed_quizzes", quiz_id)

    def is_lesson_complete(self, lesson_id: str) -> bool:
        return lesson_id in self.get_progress().completed_lessons

    def is_review_complete(self, review_id: str) -> bool:
        return review_id in self.get_progress().completed_reviews

    def is_quiz_complete(self, quiz_id: str) -> bool:
        return quiz_id in self.get_progress().completed_quizzes

    def get_unit_progress(self, lessons: Sequence[Lesson]) -> int:
        """Number of the given lessons that are complete."""
        completed = set(self.get_progress().completed_lessons)
        return sum(1 for lesson in lessons if lesson.id in completed)

    def reset_progress(self) -> None:
        """Erase the ledger record entirely."""
        self.store.delete(self.key)
        logger.info("Completion ledger reset.")
