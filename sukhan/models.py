"""
Pydantic models for curriculum reference data, learner state and derived
checkpoints.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Sequence, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_EASE, MIN_EASE, WORD_ID_SEPARATOR


class Rating(str, Enum):
    """
    Represents the learner's rating of their recall of a word.
    """

    Again = "again"
    Hard = "hard"
    Good = "good"
    Easy = "easy"


HARD_RATINGS = frozenset({Rating.Again, Rating.Hard})
EASY_RATINGS = frozenset({Rating.Good, Rating.Easy})


class CheckpointStatus(str, Enum):
    """
    Availability of a checkpoint. Completed implies unlocked.
    """

    Locked = "locked"
    Unlocked = "unlocked"
    Completed = "completed"


class PronunciationDisplay(str, Enum):
    Both = "both"
    Cyrillic = "cyrillic"
    Latin = "latin"
    Hidden = "none"


def get_word_id(category: str, index: int) -> str:
    """Canonical persisted key for a dictionary word."""
    return f"{category}{WORD_ID_SEPARATOR}{index}"


# --- Reference data ---


class WordRef(BaseModel):
    """
    Stable address of a vocabulary item in the dictionary.
    Two refs are equal iff category and index match.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: str = Field(..., min_length=1)
    index: int = Field(..., ge=0)

    @property
    def word_id(self) -> str:
        return get_word_id(self.category, self.index)


class Lesson(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    words: List[WordRef] = Field(default_factory=list)


class Unit(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    lessons: List[Lesson] = Field(default_factory=list)


class Curriculum(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    units: List[Unit] = Field(default_factory=list)

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None


class DictionaryEntry(BaseModel):
    """A single dictionary word with its translations and pronunciations."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tajik: str
    english: str
    russian: Optional[str] = None
    pronunciation_latin: Optional[str] = None
    pronunciation_cyrillic: Optional[str] = None


class Dictionary(BaseModel):
    """
    Category -> ordered word list. Read-only reference data.
    """

    model_config = ConfigDict(frozen=True)

    categories: Dict[str, List[DictionaryEntry]] = Field(default_factory=dict)

    def resolve(self, ref: WordRef) -> Optional[DictionaryEntry]:
        """Return the entry a ref points to, or None if it does not exist."""
        words = self.categories.get(ref.category)
        if words is None or ref.index >= len(words):
            return None
        return words[ref.index]

    def resolve_words(
        self, refs: Sequence[WordRef]
    ) -> List[Tuple[WordRef, DictionaryEntry]]:
        """Pair refs with their entries in order, dropping unresolvable refs."""
        pairs = []
        for ref in refs:
            entry = self.resolve(ref)
            if entry is not None:
                pairs.append((ref, entry))
        return pairs


# --- Learner state ---


class WordState(BaseModel):
    """
    Spaced-repetition state of a single word, keyed by its word id.
    Persisted with camelCase field names.
    """

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    rating: Optional[Rating] = Field(
        default=None,
        description="Last rating given, None if the word was only seen.",
    )
    interval: int = Field(
        default=1,
        ge=1,
        description="Current retention interval in days.",
    )
    ease: float = Field(
        default=DEFAULT_EASE,
        ge=MIN_EASE,
        description="Ease multiplier applied to the interval on 'good'.",
    )
    next_review: Optional[date] = Field(
        default=None,
        alias="nextReview",
        description="Date the word is next due, None until first rated.",
    )
    review_count: int = Field(
        default=0,
        ge=0,
        alias="reviewCount",
        description="Number of ratings recorded.",
    )
    last_seen: date = Field(
        default_factory=date.today,
        alias="lastSeen",
        description="Date of the last exposure or rating.",
    )


class CompletionRecord(BaseModel):
    """
    Persisted completion ledger. Ids are only ever appended.
    """

    model_config = ConfigDict(populate_by_name=True)

    completed_lessons: List[str] = Field(
        default_factory=list, alias="completedLessons"
    )
    completed_reviews: List[str] = Field(
        default_factory=list, alias="completedReviews"
    )
    completed_quizzes: List[str] = Field(
        default_factory=list, alias="completedQuizzes"
    )


class UserSettings(BaseModel):
    model_config = ConfigDict(
        validate_assignment=True, populate_by_name=True, extra="ignore"
    )

    pronunciation_display: PronunciationDisplay = Field(
        default=PronunciationDisplay.Both, alias="pronunciationDisplay"
    )


# --- Derived checkpoints ---


class LessonCheckpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["lesson"] = "lesson"
    lesson_index: int = Field(..., ge=0)
    lesson: Lesson

    @property
    def id(self) -> str:
        return self.lesson.id

    @property
    def title(self) -> str:
        return self.lesson.title


class ReviewCheckpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["review"] = "review"
    id: str
    after_lesson_index: int
    is_end_review: bool = False


class QuizCheckpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["quiz"] = "quiz"
    id: str


Checkpoint = Annotated[
    Union[LessonCheckpoint, ReviewCheckpoint, QuizCheckpoint],
    Field(discriminator="kind"),
]


# --- Study sessions ---


class StudyItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: WordRef
    entry: DictionaryEntry


class StudySession(BaseModel):
    """
    A single pass through one checkpoint: the resolved words to show and,
    for quizzes, the shuffled translations to match them against.
    """

    session_uuid: UUID = Field(default_factory=uuid.uuid4)
    unit_id: str
    checkpoint: Checkpoint
    items: List[StudyItem] = Field(default_factory=list)
    translations: List[str] = Field(default_factory=list)
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def refs(self) -> List[WordRef]:
        return [item.ref for item in self.items]


class QuizResult(BaseModel):
    correct: int = Field(..., ge=0)
    total: int = Field(..., ge=0)

    @property
    def score(self) -> float:
        """Fraction of correct matches, 0.0 for an empty quiz."""
        if self.total == 0:
            return 0.0
        return self.correct / self.total
