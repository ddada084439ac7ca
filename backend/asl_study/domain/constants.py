"""
Shared Domain Constants.

Central location for timeouts, cache keys and user-facing messages used
across domain services. Timing values are in seconds unless noted.
"""

# =============================================================================
# Load Timeouts (seconds)
# =============================================================================
# A load that exceeds its budget is treated as a load failure and falls back
# to the local cache or an explicit error state.

CARD_LOAD_TIMEOUT_SECONDS = 8.0
STARRED_LOAD_TIMEOUT_SECONDS = 3.0


# =============================================================================
# Quiz Sessions
# =============================================================================

QUIZ_TIMEOUT_MINUTES = 30  # Idle quiz sessions expire after this


# =============================================================================
# Local Cache
# =============================================================================

STARRED_CACHE_KEY = "asl_study_tool_starred_cards"


def starred_cache_key(user_id: str) -> str:
    """Cache key holding one user's starred card ids."""
    return f"{STARRED_CACHE_KEY}:{user_id}"


# =============================================================================
# Sample Data
# =============================================================================

DEMO_USER_EMAIL = "demo@example.com"
DEMO_DECK_TITLE = "ASL Conversation Vocabulary"
UNKNOWN_DECK_TITLE = "Unknown Deck"


# =============================================================================
# Feedback Messages (Single Source of Truth)
# =============================================================================


class FeedbackMessages:
    """Centralized messages shown by quiz views and error screens."""

    CORRECT = "Correct!"
    INCORRECT = "Incorrect"

    # No-cards terminal state
    NO_CARDS_IN_DECK = "This deck doesn't have any cards to test with."
    NO_STARRED_CARDS = "You haven't starred any cards in this deck yet."
    NO_STARRED_CARDS_ANYWHERE = "You haven't starred any cards yet."

    # Load failures
    LOAD_FAILED = "Failed to load cards"
    LOAD_TIMEOUT = "Loading cards took too long. Please try again."

    # Validation
    EMPTY_ANSWER = "Please type an answer before submitting."
    SEARCH_TERM_REQUIRED = "Search term is required"

    @classmethod
    def for_answer(cls, is_correct: bool) -> str:
        """Get the feedback headline for a scored answer."""
        return cls.CORRECT if is_correct else cls.INCORRECT
