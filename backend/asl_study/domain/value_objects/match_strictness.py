"""Answer matching strictness."""

from enum import StrEnum


class MatchStrictness(StrEnum):
    """How tolerant answer matching is.

    - EXACT: normalised submission must equal one accepted answer
    - FUZZY: one substitution, insertion or deletion is also accepted
    """

    EXACT = "exact"
    FUZZY = "fuzzy"

    @classmethod
    def parse(cls, value: str) -> "MatchStrictness":
        """Parse a configuration value, case-insensitively.

        Raises:
            ValueError: If the value names no known strictness
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid answer match mode '{value}'. Valid options: {valid}") from None
