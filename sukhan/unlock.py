"""
Decides whether a checkpoint may currently be entered.

Unlock state is recomputed from the completion ledger on every call; nothing
here is cached. Completion is read straight from the ledger and is never
overridden by the unlock rules.
"""

import logging
from typing import List, Sequence, Tuple

from .checkpoints import end_review_id, get_unit_checkpoints
from .models import (
    Checkpoint,
    CheckpointStatus,
    Lesson,
    LessonCheckpoint,
    QuizCheckpoint,
    ReviewCheckpoint,
    Unit,
)
from .progress import CompletionLedger

logger = logging.getLogger(__name__)


class UnlockEvaluator:
    """
    Evaluates the locked / unlocked / completed state of checkpoints.

    Mid-unit reviews are optional: a lesson only waits for the lesson before
    it, never for a review placed between them. Reviews gate the quiz only
    through the end-of-unit review.
    """

    def __init__(self, ledger: CompletionLedger):
        self.ledger = ledger

    def is_lesson_unlocked(self, lesson_id: str, lessons: Sequence[Lesson]) -> bool:
        """
        The first lesson is always unlocked; any other lesson is unlocked once
        the lesson before it is complete. Unknown ids are locked.
        """
        for i, lesson in enumerate(lessons):
            if lesson.id == lesson_id:
                if i == 0:
                    return True
                return self.ledger.is_lesson_complete(lessons[i - 1].id)
        logger.debug(f"Lesson '{lesson_id}' is not part of the unit; treating as locked.")
        return False

    def is_review_unlocked(
        self,
        after_lesson_index: int,
        lessons: Sequence[Lesson],
        is_end_review: bool = False,
    ) -> bool:
        """
        A mid-unit review opens once the lesson it follows is complete; the
        end-of-unit review opens once every lesson is complete. An
        out-of-range lesson index is always locked.
        """
        if after_lesson_index < 0 or after_lesson_index >= len(lessons):
            return False
        if is_end_review:
            completed = set(self.ledger.get_progress().completed_lessons)
            return all(lesson.id in completed for lesson in lessons)
        return self.ledger.is_lesson_complete(lessons[after_lesson_index].id)

    def is_quiz_unlocked(self, unit: Unit) -> bool:
        return self.ledger.is_review_complete(end_review_id(unit.id))

    def is_checkpoint_complete(self, checkpoint: Checkpoint) -> bool:
        if isinstance(checkpoint, LessonCheckpoint):
            return self.ledger.is_lesson_complete(checkpoint.id)
        if isinstance(checkpoint, ReviewCheckpoint):
            return self.ledger.is_review_complete(checkpoint.id)
        return self.ledger.is_quiz_complete(checkpoint.id)

    def is_checkpoint_unlocked(self, checkpoint: Checkpoint, unit: Unit) -> bool:
        if isinstance(checkpoint, LessonCheckpoint):
            return self.is_lesson_unlocked(checkpoint.id, unit.lessons)
        if isinstance(checkpoint, ReviewCheckpoint):
            return self.is_review_unlocked(
                checkpoint.after_lesson_index,
                unit.lessons,
                is_end_review=checkpoint.is_end_review,
            )
        if isinstance(checkpoint, QuizCheckpoint):
            return self.is_quiz_unlocked(unit)
        return False

    def get_checkpoint_status(self, checkpoint: Checkpoint, unit: Unit) -> CheckpointStatus:
        if self.is_checkpoint_complete(checkpoint):
            return CheckpointStatus.Completed
        if self.is_checkpoint_unlocked(checkpoint, unit):
            return CheckpointStatus.Unlocked
        return CheckpointStatus.Locked

    def get_unit_path(self, unit: Unit) -> List[Tuple[Checkpoint, CheckpointStatus]]:
        """The unit's checkpoints in order, each paired with its current status."""
        return [
            (checkpoint, self.get_checkpoint_status(checkpoint, unit))
            for checkpoint in get_unit_checkpoints(unit)
        ]
