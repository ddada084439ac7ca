"""
Match Result Value Object.

Represents the outcome of checking a typed answer against a card.
Immutable data structure used between AnswerEvaluator and quiz sessions.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchResult:
    """Result of answer matching.

    Attributes:
        is_correct: Whether the submission was accepted
        submission: Normalised (trimmed, lowercased) submission
        accepted_answers: Normalised accepted alternatives from the card
        matched_answer: Accepted alternative that matched, None if incorrect
        is_exact: True when the match needed no edit
    """

    is_correct: bool
    submission: str
    accepted_answers: tuple[str, ...]
    matched_answer: str | None = None
    is_exact: bool = False

    def __post_init__(self) -> None:
        """Validate consistency of fields."""
        if self.is_correct and self.matched_answer is None:
            raise ValueError("matched_answer required when is_correct is True")
        if not self.is_correct and self.matched_answer is not None:
            raise ValueError("matched_answer should be None when is_correct is False")
        if self.is_exact and not self.is_correct:
            raise ValueError("is_exact requires is_correct")

    @property
    def is_fuzzy(self) -> bool:
        """Whether the match was accepted only through edit tolerance."""
        return self.is_correct and not self.is_exact

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "is_correct": self.is_correct,
            "submission": self.submission,
            "accepted_answers": list(self.accepted_answers),
            "matched_answer": self.matched_answer,
            "is_exact": self.is_exact,
        }

    @classmethod
    def incorrect(cls, submission: str, accepted_answers: tuple[str, ...]) -> "MatchResult":
        """Factory method for a rejected submission."""
        return cls(
            is_correct=False,
            submission=submission,
            accepted_answers=accepted_answers,
        )
