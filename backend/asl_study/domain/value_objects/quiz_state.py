"""Quiz state value object for quiz session lifecycle management."""

from enum import StrEnum


class QuizState(StrEnum):
    """Quiz session lifecycle states.

    State machine:
        PRESENTING -> SUBMITTED -> PRESENTING (next card)
                          |
                          v
                       COMPLETE

        NO_CARDS (entered at construction when the card list is empty)

    States:
        PRESENTING: Waiting for a free-text answer to the current card
        SUBMITTED: Answer scored, feedback shown
        COMPLETE: All cards answered, score available
        NO_CARDS: Nothing to quiz on
    """

    PRESENTING = "presenting"
    SUBMITTED = "submitted"
    COMPLETE = "complete"
    NO_CARDS = "no_cards"

    def can_accept_answers(self) -> bool:
        """Check if the session is waiting for an answer."""
        return self is QuizState.PRESENTING

    def is_terminal(self) -> bool:
        """Check if the session is in a terminal state."""
        return self in (QuizState.COMPLETE, QuizState.NO_CARDS)
