"""
Answer Evaluator.

Domain service that decides whether a typed answer matches a card.
Owns normalisation, multi-answer splitting and the optional one-edit
tolerance. Pure: no I/O, no state beyond the configured strictness.
"""

import logging

from asl_study.domain.value_objects.match_result import MatchResult
from asl_study.domain.value_objects.match_strictness import MatchStrictness

logger = logging.getLogger(__name__)

ANSWER_SEPARATOR = "/"


def normalize(text: str) -> str:
    """Trim surrounding whitespace and case-fold to lowercase."""
    return text.strip().lower()


def split_answers(canonical_answer: str) -> tuple[str, ...]:
    """Split a canonical answer into normalised alternatives.

    Empty parts (e.g. from a trailing "/") are dropped.
    """
    parts = (normalize(part) for part in canonical_answer.split(ANSWER_SEPARATOR))
    return tuple(part for part in parts if part)


def within_one_edit(a: str, b: str) -> bool:
    """Check whether two strings differ by at most one edit.

    One edit is either a single substitution between equal-length strings,
    or a single insertion/deletion between strings whose lengths differ by
    exactly one.
    """
    if a == b:
        return True

    len_a, len_b = len(a), len(b)
    if abs(len_a - len_b) > 1:
        return False

    if len_a == len_b:
        differences = 0
        for char_a, char_b in zip(a, b, strict=True):
            if char_a != char_b:
                differences += 1
                if differences > 1:
                    return False
        return True

    longer, shorter = (a, b) if len_a > len_b else (b, a)
    i = j = 0
    skipped = False
    while i < len(longer) and j < len(shorter):
        if longer[i] == shorter[j]:
            i += 1
            j += 1
            continue
        if skipped:
            return False
        # Skip the extra character in the longer string
        skipped = True
        i += 1
    return True


class AnswerEvaluator:
    """Domain service for checking typed answers.

    Rules:
    - Submission and answers are trimmed and lowercased
    - A canonical answer may list alternatives separated by "/"
    - An empty submission is never correct
    - In FUZZY mode a submission one edit away from an alternative counts
    """

    def __init__(self, strictness: MatchStrictness = MatchStrictness.FUZZY) -> None:
        self._strictness = strictness

    @property
    def strictness(self) -> MatchStrictness:
        return self._strictness

    def evaluate(self, submission: str, canonical_answer: str) -> MatchResult:
        """Evaluate a submission against a card's canonical answer.

        Args:
            submission: Raw text typed by the user
            canonical_answer: Card answer, possibly "/"-separated

        Returns:
            MatchResult describing whether and how the submission matched
        """
        normalized = normalize(submission)
        accepted = split_answers(canonical_answer)

        if not normalized:
            return MatchResult.incorrect(normalized, accepted)

        if normalized in accepted:
            return MatchResult(
                is_correct=True,
                submission=normalized,
                accepted_answers=accepted,
                matched_answer=normalized,
                is_exact=True,
            )

        if self._strictness is MatchStrictness.FUZZY:
            for answer in accepted:
                if within_one_edit(normalized, answer):
                    logger.debug(
                        "Accepted answer within one edit",
                        extra={"submission": normalized, "matched": answer},
                    )
                    return MatchResult(
                        is_correct=True,
                        submission=normalized,
                        accepted_answers=accepted,
                        matched_answer=answer,
                    )

        return MatchResult.incorrect(normalized, accepted)

    def is_correct(self, submission: str, canonical_answer: str) -> bool:
        """Boolean shortcut for evaluate()."""
        return self.evaluate(submission, canonical_answer).is_correct


def evaluate(
    submission: str,
    canonical_answer: str,
    strictness: MatchStrictness = MatchStrictness.FUZZY,
) -> bool:
    """Check a submission against a canonical answer."""
    return AnswerEvaluator(strictness).is_correct(submission, canonical_answer)
