"""Sukhan - curriculum progress and adaptive review engine for vocabulary learning."""

from .models import (
    Rating,
    WordRef,
    WordState,
    Lesson,
    Unit,
    Curriculum,
    Dictionary,
    DictionaryEntry,
    CheckpointStatus,
    get_word_id,
)
from .constants import DEFAULT_EASE, MIN_EASE
from .db import DuckDBStore, PersistentStore
from .checkpoints import get_unit_checkpoints
from .progress import CompletionLedger
from .unlock import UnlockEvaluator
from .word_scheduler import WordScheduler
from .selector import ReviewSetSelector
from .curriculum import load_curriculum, load_dictionary

__all__ = [
    "Rating",
    "WordRef",
    "WordState",
    "Lesson",
    "Unit",
    "Curriculum",
    "Dictionary",
    "DictionaryEntry",
    "CheckpointStatus",
    "get_word_id",
    "DEFAULT_EASE",
    "MIN_EASE",
    "DuckDBStore",
    "PersistentStore",
    "get_unit_checkpoints",
    "CompletionLedger",
    "UnlockEvaluator",
    "WordScheduler",
    "ReviewSetSelector",
    "load_curriculum",
    "load_dictionary",
]
