# sukhan/scheduler.py

"""
Defines the BaseScheduler abstract class and the SM2Scheduler, a simplified
SM-2 ease/interval update rule.
"""

import datetime
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from .constants import (
    AGAIN_EASE_PENALTY,
    DEFAULT_EASE,
    EASY_EASE_BONUS,
    EASY_INTERVAL_MULTIPLIER,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_MULTIPLIER,
    MAX_INTERVAL,
    MIN_EASE,
)
from .models import Rating, WordState

logger = logging.getLogger(__name__)


@dataclass
class SchedulerOutput:
    interval: int
    ease: float
    next_review: datetime.date


class BaseScheduler(ABC):
    """
    Abstract base class for all schedulers in sukhan.
    """

    def new_state(self, today: datetime.date) -> WordState:
        """State of a word on first exposure."""
        return WordState(last_seen=today)

    @abstractmethod
    def compute_next_state(
        self, state: WordState, rating: Rating, today: datetime.date
    ) -> SchedulerOutput:
        """
        Computes the next interval and ease of a word from its current state
        and a new rating.

        Args:
            state: The word's current WordState.
            rating: The rating given for this review.
            today: The local date of the review.

        Returns:
            A SchedulerOutput with the new interval, ease and review date.

        Raises:
            ValueError: If the rating is invalid.
        """
        pass


class SM2SchedulerConfig(BaseModel):
    """Configuration for the SM-2 scheduler."""

    default_ease: float = DEFAULT_EASE
    min_ease: float = Field(default=MIN_EASE, ge=MIN_EASE)
    again_ease_penalty: float = AGAIN_EASE_PENALTY
    hard_ease_penalty: float = HARD_EASE_PENALTY
    easy_ease_bonus: float = EASY_EASE_BONUS
    hard_interval_multiplier: float = HARD_INTERVAL_MULTIPLIER
    easy_interval_multiplier: float = EASY_INTERVAL_MULTIPLIER
    max_interval: int = Field(default=MAX_INTERVAL, ge=1)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class SM2Scheduler(BaseScheduler):
    """
    Deterministic interval/ease update:

    again: interval 1, ease - 0.2
    hard:  interval * 1.2, ease - 0.15
    good:  interval * ease, ease unchanged
    easy:  interval * ease * 1.3, ease + 0.15

    Ease never drops below min_ease. The interval stays between 1 and
    max_interval, and next_review never passes date.max.
    """

    def __init__(self, config: Optional[SM2SchedulerConfig] = None):
        if config is None:
            config = SM2SchedulerConfig()
        self.config = config

    def new_state(self, today: datetime.date) -> WordState:
        """State of a word on first exposure."""
        return WordState(
            rating=None,
            interval=1,
            ease=max(self.config.min_ease, self.config.default_ease),
            next_review=None,
            review_count=0,
            last_seen=today,
        )

    def _validate_rating(self, rating) -> Rating:
        try:
            return Rating(rating)
        except ValueError:
            raise ValueError(
                f"Invalid rating: {rating!r}. Must be one of "
                f"{', '.join(r.value for r in Rating)}."
            ) from None

    def compute_next_state(
        self, state: WordState, rating: Rating, today: datetime.date
    ) -> SchedulerOutput:
        rating = self._validate_rating(rating)
        cfg = self.config
        interval = min(state.interval, cfg.max_interval)
        ease = state.ease

        if rating is Rating.Again:
            interval = 1
            ease = max(cfg.min_ease, ease - cfg.again_ease_penalty)
        elif rating is Rating.Hard:
            interval = max(1, round_half_up(interval * cfg.hard_interval_multiplier))
            ease = max(cfg.min_ease, ease - cfg.hard_ease_penalty)
        elif rating is Rating.Good:
            interval = round_half_up(interval * ease)
        elif rating is Rating.Easy:
            interval = round_half_up(interval * ease * cfg.easy_interval_multiplier)
            ease = ease + cfg.easy_ease_bonus

        interval = min(max(1, interval), cfg.max_interval)
        days_left = (datetime.date.max - today).days
        next_review = today + datetime.timedelta(days=min(interval, days_left))
        logger.debug(
            f"Rating '{rating.value}': interval {state.interval} -> {interval}, "
            f"ease {state.ease:.2f} -> {ease:.2f}, next review {next_review}"
        )
        return SchedulerOutput(interval=interval, ease=ease, next_review=next_review)
