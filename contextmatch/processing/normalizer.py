"""Text normalization for profile fields.

Skills, locations and travel descriptors are free text typed by members.
Scoring compares them case-insensitively, so every comparison goes
through the same folding and tokenizing rules defined here.
"""

import logging
import re
from typing import Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


class TextNormalizer:
    """Normalizes free-text profile fields for comparison."""

    # Locations are split on runs of whitespace and commas
    TOKEN_SEPARATORS = re.compile(r"[\s,]+")

    def fold(self, text: Optional[str]) -> str:
        """Lowercase a value for case-insensitive comparison.

        Args:
            text: Raw field value (may be None)

        Returns:
            Lowercased string, empty string for None
        """
        if not text:
            return ""
        return text.lower()

    def fold_all(self, values: Iterable[str]) -> List[str]:
        """Lowercase every entry of a list, keeping order."""
        return [self.fold(v) for v in values]

    def skill_set(self, skills: Iterable[str]) -> Set[str]:
        """Build a case-insensitive set of skills, dropping blank entries."""
        return {self.fold(s) for s in skills if s.strip()}

    def tokenize_location(self, location: Optional[str]) -> List[str]:
        """Split a location into lowercase tokens.

        "Singapore, Network School" -> ["singapore", "network", "school"]
        """
        folded = self.fold(location)
        if not folded:
            return []
        return [t for t in self.TOKEN_SEPARATORS.split(folded) if t]

    def contains_either(self, a: str, b: str) -> bool:
        """Check if either string contains the other.

        Both values are expected to be folded already.
        """
        return a in b or b in a

    def count_mentions(self, terms: Iterable[str], text: Optional[str]) -> int:
        """Count how many terms appear as substrings of text (case-insensitive).

        Blank terms are never counted, the same as blank travel entries.
        """
        haystack = self.fold(text)
        if not haystack:
            return 0
        return sum(1 for term in terms if term.strip() and self.fold(term) in haystack)
