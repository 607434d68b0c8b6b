"""
Builds the concrete word sets for review and quiz sessions.

Sampling and shuffling draw from an injected `random.Random` so sessions are
reproducible under a fixed seed. The randomness is for pedagogical variety
only.
"""

import logging
import math
import random
from typing import List, Optional, Sequence

from .constants import (
    MAX_DERANGEMENT_ATTEMPTS,
    NO_HISTORY_REVIEW_SIZE,
    QUIZ_WORD_COUNT,
    REVIEW_COVERAGE_RATIO,
)
from .models import DictionaryEntry, Lesson, WordRef
from .word_scheduler import WordScheduler

logger = logging.getLogger(__name__)


def get_words_up_to_lesson(lessons: Sequence[Lesson], up_to_index: int) -> List[WordRef]:
    """Words of lessons 0..up_to_index inclusive, in lesson then in-lesson order."""
    words: List[WordRef] = []
    for lesson in lessons[: max(0, up_to_index + 1)]:
        words.extend(lesson.words)
    return words


def _unique(refs: Sequence[WordRef]) -> List[WordRef]:
    seen = set()
    result = []
    for ref in refs:
        if ref not in seen:
            seen.add(ref)
            result.append(ref)
    return result


class ReviewSetSelector:
    """
    Produces review and quiz word sets from a unit's lessons and the learner's
    word ratings.
    """

    def __init__(
        self,
        word_scheduler: WordScheduler,
        rng: Optional[random.Random] = None,
        coverage_ratio: float = REVIEW_COVERAGE_RATIO,
        quiz_size: int = QUIZ_WORD_COUNT,
    ):
        self.word_scheduler = word_scheduler
        self.rng = rng or random.Random()
        self.coverage_ratio = coverage_ratio
        self.quiz_size = quiz_size

    def _sample_review(self, all_words: List[WordRef]) -> List[WordRef]:
        """
        Fill a review up to the coverage quota: every hard word, topped up
        with a random sample of the remaining words, in random order.
        """
        target_count = math.ceil(len(all_words) * self.coverage_ratio)
        hard_words = self.word_scheduler.get_hard_words(all_words)

        if len(hard_words) >= target_count:
            review = list(hard_words)
        else:
            hard_set = set(hard_words)
            remaining = [ref for ref in all_words if ref not in hard_set]
            filler = self.rng.sample(remaining, target_count - len(hard_words))
            review = hard_words + filler

        self.rng.shuffle(review)
        logger.debug(
            f"Review set: {len(review)} of {len(all_words)} words "
            f"({len(hard_words)} hard, quota {target_count})."
        )
        return review

    def get_mid_unit_review_words(
        self, lessons: Sequence[Lesson], up_to_index: int
    ) -> List[WordRef]:
        """
        Review set covering lessons 0..up_to_index. When none of the covered
        words has been rated yet, the first few covered words are returned.
        """
        all_words = _unique(get_words_up_to_lesson(lessons, up_to_index))
        if not all_words:
            return []
        if not self.word_scheduler.get_rated_words(all_words):
            logger.debug("No rated words in range; using the no-history review.")
            return all_words[:NO_HISTORY_REVIEW_SIZE]
        return self._sample_review(all_words)

    def get_end_unit_review_words(self, lessons: Sequence[Lesson]) -> List[WordRef]:
        """Review set covering every lesson of the unit."""
        all_words = _unique(get_words_up_to_lesson(lessons, len(lessons) - 1))
        if not all_words:
            return []
        return self._sample_review(all_words)

    def get_quiz_words(self, lessons: Sequence[Lesson]) -> List[WordRef]:
        """Up to `quiz_size` distinct words of the unit, in random order."""
        all_words = _unique(get_words_up_to_lesson(lessons, len(lessons) - 1))
        return self.rng.sample(all_words, min(self.quiz_size, len(all_words)))

    def shuffle_translations(self, words: Sequence[DictionaryEntry]) -> List[str]:
        """
        English translations of `words`, permuted so that, where possible, no
        translation stays at its word's index. After MAX_DERANGEMENT_ATTEMPTS
        tries the last permutation is returned as is.
        """
        translations = [word.english for word in words]
        if len(translations) <= 1:
            return translations

        shuffled = list(translations)
        for _ in range(MAX_DERANGEMENT_ATTEMPTS):
            shuffled = list(translations)
            self.rng.shuffle(shuffled)
            if all(s != t for s, t in zip(shuffled, translations)):
                return shuffled
        logger.debug("No derangement found; returning a partial shuffle.")
        return shuffled
