"""
Builds the ordered checkpoint sequence of a unit.

The sequence is a pure function of the unit's lesson list and is recomputed
on every call; it is never persisted.
"""

from typing import List, Optional

from .models import (
    Checkpoint,
    LessonCheckpoint,
    QuizCheckpoint,
    ReviewCheckpoint,
    Unit,
)


def mid_review_id(unit_id: str, lesson_index: int) -> str:
    """Id of the review that follows the lesson at 0-based `lesson_index`."""
    return f"review-{unit_id}-{lesson_index + 1}"


def end_review_id(unit_id: str) -> str:
    return f"review-{unit_id}-end"


def quiz_id(unit_id: str) -> str:
    return f"quiz-{unit_id}"


def get_unit_checkpoints(unit: Unit) -> List[Checkpoint]:
    """
    Return the unit's checkpoints in progression order.

    Each lesson is followed by a mid-unit review when its 1-based position is
    even and it is not the last lesson. The sequence always ends with the
    end-of-unit review and the quiz.
    """
    checkpoints: List[Checkpoint] = []
    last_index = len(unit.lessons) - 1

    for i, lesson in enumerate(unit.lessons):
        checkpoints.append(LessonCheckpoint(lesson_index=i, lesson=lesson))
        if (i + 1) % 2 == 0 and i != last_index:
            checkpoints.append(
                ReviewCheckpoint(
                    id=mid_review_id(unit.id, i),
                    after_lesson_index=i,
                )
            )

    checkpoints.append(
        ReviewCheckpoint(
            id=end_review_id(unit.id),
            after_lesson_index=last_index,
            is_end_review=True,
        )
    )
    checkpoints.append(QuizCheckpoint(id=quiz_id(unit.id)))
    return checkpoints


def find_checkpoint(unit: Unit, checkpoint_id: str) -> Optional[Checkpoint]:
    for checkpoint in get_unit_checkpoints(unit):
        if checkpoint.id == checkpoint_id:
            return checkpoint
    return None
