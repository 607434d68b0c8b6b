"""
Scheduling and selection constants.

This module contains static policy values for the word scheduler, the
review/quiz set selector and the persisted record keys.
No runtime configuration or path defaults - pure constants only.
"""

# --- Word scheduler (simplified SM-2) ---
DEFAULT_EASE: float = 2.5
MIN_EASE: float = 1.3

AGAIN_EASE_PENALTY: float = 0.2
HARD_EASE_PENALTY: float = 0.15
EASY_EASE_BONUS: float = 0.15

HARD_INTERVAL_MULTIPLIER: float = 1.2
EASY_INTERVAL_MULTIPLIER: float = 1.3
# Longest interval a rating can produce, in days (about a century).
MAX_INTERVAL: int = 36500

# --- Review / quiz set selection ---
# Share of the covered words a review session should contain.
REVIEW_COVERAGE_RATIO: float = 0.7
QUIZ_WORD_COUNT: int = 5
# Size of a mid-unit review when none of the covered words has been rated.
NO_HISTORY_REVIEW_SIZE: int = 5
MAX_DERANGEMENT_ATTEMPTS: int = 50

# --- Persisted record keys ---
PROGRESS_KEY: str = "progress"
WORD_PROGRESS_KEY: str = "word_progress"
SETTINGS_KEY: str = "settings"

WORD_ID_SEPARATOR: str = "_"
