"""Heuristic string similarity tuned for mutated UI identifiers."""

from typing import Iterable, Optional, Set

from element_matcher.config.models import HeuristicConfig, StringMatch
from element_matcher.core import edit_distance, subsequence
from element_matcher.core.preprocessor import TextPreprocessor


class HeuristicMatcher:
    """
    Composite similarity that forgives typos, truncation and abbreviation.

    Identifiers of UI elements tend to drift in structured ways: a trailing
    character goes missing, a prefix is renamed, a token gets abbreviated.
    Raw edit distance punishes these too hard, so the score here blends edit
    distance and LCS with containment, common-run and bigram bonuses.
    """

    SUBSTRING_BONUS_CAP = 0.6
    ABBREVIATION_BONUS_CAP = 0.3
    KEYWORD_BONUS_CAP = 0.2

    def __init__(self, config: Optional[HeuristicConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Abbreviation table and keywords; defaults to an empty
                abbreviation table and the standard UI keywords
        """
        self.config = config or HeuristicConfig()
        self.abbreviations = {
            key.lower(): [expansion.lower() for expansion in expansions]
            for key, expansions in self.config.abbreviations.items()
        }
        self.keywords = [keyword.lower() for keyword in self.config.keywords]
        self.normalizer = TextPreprocessor()

    def enhanced_similarity(self, s1: Optional[str], s2: Optional[str]) -> float:
        """
        Calculate the composite similarity of two strings.

        Args:
            s1: First string
            s2: Second string

        Returns:
            float: Similarity score between 0 and 1
        """
        if s1 is None and s2 is None:
            return 1.0
        if s1 is None or s2 is None:
            return 0.0

        n1 = self.normalizer.process(s1)
        n2 = self.normalizer.process(s2)
        if n1 == n2:
            return 1.0

        levenshtein_sim = edit_distance.similarity(n1, n2)
        lcs_sim = subsequence.similarity(n1, n2)
        substring_bonus = self._substring_bonus(n1, n2)
        abbreviation_bonus = self._abbreviation_bonus(n1, n2)
        length_adjustment = self._length_adjustment(n1, n2)

        base = 0.3 * levenshtein_sim + 0.2 * lcs_sim + 0.5 * substring_bonus
        return max(0.0, min(1.0, base + abbreviation_bonus + length_adjustment))

    def dynamic_threshold(
        self,
        s1: Optional[str],
        s2: Optional[str],
        base_threshold: float
    ) -> float:
        """
        Acceptance bar for a specific pair of strings.

        The bar drops sharply for near-identical or containment-related
        pairs and tightens as the strings get longer.

        Args:
            s1: First string
            s2: Second string
            base_threshold: Threshold to relax from

        Returns:
            float: Threshold for this pair
        """
        if s1 is None or s2 is None:
            return base_threshold

        n1 = self.normalizer.process(s1)
        n2 = self.normalizer.process(s2)
        min_length = min(len(n1), len(n2))
        max_length = max(len(n1), len(n2))

        if max_length - min_length <= 3 and min_length >= 10:
            return 0.15

        shorter, longer = (n1, n2) if len(n1) <= len(n2) else (n2, n1)
        if shorter in longer and len(shorter) >= 5:
            return 0.20

        # Dropped or extra trailing characters
        if min_length >= 8 and longer.startswith(shorter):
            return 0.25

        if min_length <= 3:
            return max(0.15, base_threshold - 0.5)
        elif min_length <= 6:
            return max(0.25, base_threshold - 0.4)
        elif max_length <= 15:
            return max(0.30, base_threshold - 0.3)
        return max(0.35, base_threshold - 0.2)

    def best_string_match(
        self,
        target: str,
        candidates: Iterable[str],
        base_threshold: float
    ) -> StringMatch:
        """
        Find the candidate string closest to the target.

        Args:
            target: String to look for
            candidates: Strings to choose from
            base_threshold: Score needed for a high-confidence match

        Returns:
            StringMatch: Best candidate with a confidence label
        """
        best = StringMatch()
        for candidate in candidates:
            score = self.enhanced_similarity(target, candidate)
            if score <= best.score:
                continue

            best.score = score
            best.matched = candidate
            if score >= base_threshold:
                best.confidence = "HIGH_CONFIDENCE"
            elif score >= self.dynamic_threshold(target, candidate, base_threshold):
                best.confidence = "MEDIUM_CONFIDENCE"
            elif score >= 0.3:
                best.confidence = "LOW_CONFIDENCE"
            else:
                best.confidence = "PARTIAL_MATCH"
        return best

    def _substring_bonus(self, n1: str, n2: str) -> float:
        bonus = 0.0
        shorter, longer = (n1, n2) if len(n1) <= len(n2) else (n2, n1)

        if shorter in longer:
            bonus += 0.5 * len(shorter) / len(longer)
            if longer.startswith(shorter):
                bonus += 0.3
            if longer.endswith(shorter):
                bonus += 0.25

        common_ratio = longest_common_substring(n1, n2) / max(len(n1), len(n2))

        # Near misses of comparable length
        if abs(len(n1) - len(n2)) <= 3 and min(len(n1), len(n2)) >= 8:
            if common_ratio >= 0.75:
                bonus += 0.5
            elif common_ratio >= 0.6:
                bonus += 0.3

        if common_ratio >= 0.85:
            bonus += 0.4

        bonus += self._bigram_bonus(n1, n2)
        return min(bonus, self.SUBSTRING_BONUS_CAP)

    @staticmethod
    def _bigram_bonus(n1: str, n2: str) -> float:
        grams1 = ngrams(n1, 2)
        grams2 = ngrams(n2, 2)
        if not grams1 or not grams2:
            return 0.0
        common = grams1 & grams2
        return 0.15 * len(common) / max(len(grams1), len(grams2))

    def _abbreviation_bonus(self, n1: str, n2: str) -> float:
        bonus = self._expansion_bonus(n1, n2) + self._expansion_bonus(n2, n1)
        bonus += self._keyword_bonus(n1, n2)
        return min(bonus, self.ABBREVIATION_BONUS_CAP)

    def _expansion_bonus(self, abbreviation: str, full: str) -> float:
        for expansion in self.abbreviations.get(abbreviation, ()):
            if expansion in full:
                return 0.25
        return 0.0

    def _keyword_bonus(self, n1: str, n2: str) -> float:
        bonus = 0.0
        for keyword in self.keywords:
            stem = keyword[:3]
            if (keyword in n1 and stem in n2) or (keyword in n2 and stem in n1):
                bonus += 0.1
        return min(bonus, self.KEYWORD_BONUS_CAP)

    @staticmethod
    def _length_adjustment(n1: str, n2: str) -> float:
        min_length = min(len(n1), len(n2))
        max_length = max(len(n1), len(n2))

        if min_length <= 3 and max_length <= 8:
            return 0.15
        elif min_length <= 5 and max_length <= 12:
            return 0.1

        if min_length / max_length < 0.3:
            return -0.1
        return 0.0


def longest_common_substring(s1: str, s2: str) -> int:
    """Length of the longest run of characters shared by both strings."""
    max_length = 0
    for i in range(len(s1)):
        for j in range(len(s2)):
            length = 0
            while (i + length < len(s1) and j + length < len(s2)
                   and s1[i + length] == s2[j + length]):
                length += 1
            max_length = max(max_length, length)
    return max_length


def ngrams(text: str, n: int) -> Set[str]:
    """Set of distinct n-character substrings."""
    if len(text) < n:
        return set()
    return {text[i:i + n] for i in range(len(text) - n + 1)}
