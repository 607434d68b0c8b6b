"""
This module defines the CheckpointSessionManager class, which runs study
sessions for a single checkpoint. It checks the checkpoint is unlocked, builds
the session's word set, forwards ratings to the word scheduler and records
completion in the ledger.
"""

import logging
from typing import List, Mapping

from .checkpoints import find_checkpoint
from .exceptions import CheckpointLockedError, CheckpointNotFoundError
from .models import (
    Checkpoint,
    Curriculum,
    Dictionary,
    LessonCheckpoint,
    QuizCheckpoint,
    QuizResult,
    Rating,
    ReviewCheckpoint,
    StudyItem,
    StudySession,
    Unit,
    WordRef,
    WordState,
)
from .progress import CompletionLedger
from .selector import ReviewSetSelector
from .unlock import UnlockEvaluator
from .word_scheduler import WordScheduler

logger = logging.getLogger(__name__)


class CheckpointSessionManager:
    """
    Manages study sessions over a curriculum.

    This class is responsible for:
    - Refusing sessions for locked or unknown checkpoints.
    - Building the word set of a lesson, review or quiz.
    - Recording ratings and first exposures.
    - Marking checkpoints complete and grading quizzes.
    """

    def __init__(
        self,
        curriculum: Curriculum,
        dictionary: Dictionary,
        ledger: CompletionLedger,
        word_scheduler: WordScheduler,
        selector: ReviewSetSelector,
    ):
        self.curriculum = curriculum
        self.dictionary = dictionary
        self.ledger = ledger
        self.word_scheduler = word_scheduler
        self.selector = selector
        self.evaluator = UnlockEvaluator(ledger)

    def get_unit(self, unit_id: str) -> Unit:
        unit = self.curriculum.get_unit(unit_id)
        if unit is None:
            raise CheckpointNotFoundError(f"Unit '{unit_id}' not found.")
        return unit

    def start_session(self, unit_id: str, checkpoint_id: str) -> StudySession:
        """
        Open a session for a checkpoint of a unit.

        Raises:
            CheckpointNotFoundError: If the unit or checkpoint does not exist.
            CheckpointLockedError: If the checkpoint is currently locked.
        """
        unit = self.get_unit(unit_id)
        checkpoint = find_checkpoint(unit, checkpoint_id)
        if checkpoint is None:
            raise CheckpointNotFoundError(
                f"Checkpoint '{checkpoint_id}' not found in unit '{unit_id}'."
            )
        if not self.evaluator.is_checkpoint_unlocked(checkpoint, unit):
            raise CheckpointLockedError(f"Checkpoint '{checkpoint_id}' is locked.")

        refs = self._select_words(unit, checkpoint)
        items = self._resolve(refs)
        translations: List[str] = []
        if isinstance(checkpoint, QuizCheckpoint):
            translations = self.selector.shuffle_translations(
                [item.entry for item in items]
            )

        session = StudySession(
            unit_id=unit.id,
            checkpoint=checkpoint,
            items=items,
            translations=translations,
        )
        logger.info(
            f"Started session {session.session_uuid} for '{checkpoint_id}' "
            f"with {len(items)} words."
        )
        return session

    def _select_words(self, unit: Unit, checkpoint: Checkpoint) -> List[WordRef]:
        if isinstance(checkpoint, LessonCheckpoint):
            for ref in checkpoint.lesson.words:
                self.word_scheduler.mark_word_seen(ref.word_id)
            return list(checkpoint.lesson.words)
        if isinstance(checkpoint, ReviewCheckpoint):
            if checkpoint.is_end_review:
                return self.selector.get_end_unit_review_words(unit.lessons)
            return self.selector.get_mid_unit_review_words(
                unit.lessons, checkpoint.after_lesson_index
            )
        return self.selector.get_quiz_words(unit.lessons)

    def _resolve(self, refs: List[WordRef]) -> List[StudyItem]:
        items = [
            StudyItem(ref=ref, entry=entry)
            for ref, entry in self.dictionary.resolve_words(refs)
        ]
        if len(items) < len(refs):
            resolved = {item.ref for item in items}
            missing = [ref.word_id for ref in refs if ref not in resolved]
            logger.warning(f"Dropping unresolvable words: {', '.join(missing)}.")
        return items

    def rate(self, ref: WordRef, rating: Rating) -> WordState:
        return self.word_scheduler.rate_word(ref.word_id, rating)

    def complete_session(self, session: StudySession) -> None:
        """
        Mark a lesson or review session's checkpoint complete.

        Raises:
            ValueError: For quiz sessions, which complete through submit_quiz.
        """
        checkpoint = session.checkpoint
        if isinstance(checkpoint, LessonCheckpoint):
            self.ledger.mark_lesson_complete(checkpoint.id)
        elif isinstance(checkpoint, ReviewCheckpoint):
            self.ledger.mark_review_complete(checkpoint.id)
        else:
            raise ValueError("Quiz sessions are completed with submit_quiz.")
        logger.info(f"Completed session {session.session_uuid} ('{checkpoint.id}').")

    def submit_quiz(
        self, session: StudySession, answers: Mapping[int, int]
    ) -> QuizResult:
        """
        Grade a quiz attempt and mark the quiz complete.

        Args:
            session: A session started for a quiz checkpoint.
            answers: Word position -> index into `session.translations`.
                Missing or out-of-range answers count as wrong.
        """
        if not isinstance(session.checkpoint, QuizCheckpoint):
            raise ValueError("Only quiz sessions can be submitted.")

        correct = 0
        for position, item in enumerate(session.items):
            choice = answers.get(position)
            if choice is None or not 0 <= choice < len(session.translations):
                continue
            if session.translations[choice] == item.entry.english:
                correct += 1

        result = QuizResult(correct=correct, total=len(session.items))
        self.ledger.mark_quiz_complete(session.checkpoint.id)
        logger.info(
            f"Quiz '{session.checkpoint.id}' submitted: {result.correct}/{result.total}."
        )
        return result
