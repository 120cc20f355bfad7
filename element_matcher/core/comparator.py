"""Weighted multi-attribute comparison of element records."""

import logging
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple

from element_matcher.config.models import (
    CONTEXT_BONUS_CAP,
    DEFAULT_FIELD_CONFIGS,
    EXACT_MATCH_FIELDS,
    KEY_IDENTIFIER_FIELDS,
    ElementRecord,
    FieldMatchConfig,
    FieldName,
    ScoredCandidate,
    has_value,
)
from element_matcher.core import edit_distance, subsequence
from element_matcher.core.heuristic import HeuristicMatcher
from element_matcher.core.preprocessor import LocatorPreprocessor

logger = logging.getLogger(__name__)

# (weight, present on both sides, field score)
WeightedTerm = Tuple[float, bool, float]


def weighted_average(terms: Iterable[WeightedTerm]) -> float:
    """
    Average the scores of present terms, renormalized by their weights.

    Args:
        terms: (weight, present, score) tuples; absent terms are skipped

    Returns:
        float: Weighted mean, 0.0 when no term is present
    """
    total, total_weight = reduce(
        lambda acc, term: (acc[0] + term[0] * term[2], acc[1] + term[0])
        if term[1] else acc,
        terms,
        (0.0, 0.0),
    )
    return total / total_weight if total_weight > 0 else 0.0


class AttributeComparator:
    """Scores element records against each other attribute by attribute."""

    # Score for values that differ only in case
    CASE_INSENSITIVE_SCORE = 0.95

    def __init__(
        self,
        heuristic: Optional[HeuristicMatcher] = None,
        field_configs: Sequence[FieldMatchConfig] = DEFAULT_FIELD_CONFIGS
    ):
        """
        Initialize the comparator.

        Args:
            heuristic: String matcher used for every textual attribute
            field_configs: Weight, comparison method and context bonus per field
        """
        self.heuristic = heuristic or HeuristicMatcher()
        self.field_configs = tuple(field_configs)
        self.locator_preprocessor = LocatorPreprocessor(
            type_marker=self.heuristic.config.type_marker
        )

    def compare_strings(self, s1: Optional[str], s2: Optional[str]) -> float:
        """
        Compare two attribute values.

        Args:
            s1: First value
            s2: Second value

        Returns:
            float: Similarity score between 0 and 1
        """
        if not s1 and not s2:
            return 1.0
        if not s1 or not s2:
            return 0.0

        if s1 == s2:
            return 1.0
        if s1.lower() == s2.lower():
            return self.CASE_INSENSITIVE_SCORE

        enhanced = self.heuristic.enhanced_similarity(s1, s2)
        traditional = (
            0.6 * edit_distance.normalized_similarity(s1, s2) +
            0.4 * subsequence.normalized_similarity(s1, s2)
        )
        return max(enhanced, traditional)

    def compare_locators(self, l1: Optional[str], l2: Optional[str]) -> float:
        """
        Compare two structural locators.

        The name attribute and element-type token are compared on their own
        and weighed against the whole-string similarity.

        Args:
            l1: First locator
            l2: Second locator

        Returns:
            float: Similarity score between 0 and 1
        """
        if not l1 and not l2:
            return 1.0
        if not l1 or not l2:
            return 0.0
        if l1 == l2:
            return 1.0

        features1 = self.locator_preprocessor.features(l1)
        features2 = self.locator_preprocessor.features(l2)

        type_similarity = self.compare_strings(
            features1.element_type, features2.element_type
        )
        attribute_similarity = self.compare_strings(
            features1.name_attribute, features2.name_attribute
        )
        structural = 0.75 * attribute_similarity + 0.25 * type_similarity

        return max(structural, 0.8 * self.compare_strings(l1, l2))

    def compare_field(self, config: FieldMatchConfig, value1: str, value2: str) -> float:
        if config.match_method == 'locator':
            return self.compare_locators(value1, value2)
        return self.compare_strings(value1, value2)

    def compare(self, r1: Optional[ElementRecord], r2: Optional[ElementRecord]) -> float:
        """
        Calculate the overall similarity of two records.

        Only attributes present on both records are compared; their weights
        are renormalized so missing attributes carry no penalty.

        Args:
            r1: First record
            r2: Second record

        Returns:
            float: Similarity score between 0 and 1
        """
        if r1 is None or r2 is None:
            return 0.0

        terms: List[WeightedTerm] = []
        for config in self.field_configs:
            present = r1.has(config.field) and r2.has(config.field)
            score = (
                self.compare_field(config, r1.get(config.field), r2.get(config.field))
                if present else 0.0
            )
            terms.append((config.weight, present, score))

        if not any(present for _, present, _ in terms):
            logger.debug("No attribute present on both records")
            return 0.0

        score = weighted_average(terms) + self.context_bonus(r1, r2)
        return max(0.0, min(1.0, score))

    def context_bonus(self, r1: ElementRecord, r2: ElementRecord) -> float:
        """Bonus for agreeing on screen, element type and class name."""
        bonus = 0.0
        for config in self.field_configs:
            if not config.context_bonus:
                continue
            value1 = r1.get(config.field)
            value2 = r2.get(config.field)
            if value1 and value2 and value1.lower() == value2.lower():
                bonus += config.context_bonus
        return min(bonus, CONTEXT_BONUS_CAP)

    def is_exact_match(self, r1: Optional[ElementRecord], r2: Optional[ElementRecord]) -> bool:
        """
        Check whether every critical attribute present on both records agrees.

        Returns:
            bool: True if at least one attribute was compared and all matched
        """
        if r1 is None or r2 is None:
            return False

        compared = False
        for field_name in EXACT_MATCH_FIELDS:
            if r1.has(field_name) and r2.has(field_name):
                if r1.get(field_name) != r2.get(field_name):
                    return False
                compared = True
        return compared

    @staticmethod
    def key_identifier(record: ElementRecord) -> str:
        """Most identifying attribute of a record, '' if it has none."""
        for field_name in KEY_IDENTIFIER_FIELDS:
            value = record.get(field_name)
            if value:
                return value
        return ''

    def dynamic_threshold(
        self,
        r1: ElementRecord,
        r2: ElementRecord,
        base_threshold: float
    ) -> float:
        """Per-pair acceptance bar computed from the key identifiers."""
        return self.heuristic.dynamic_threshold(
            self.key_identifier(r1),
            self.key_identifier(r2),
            base_threshold
        )

    def search_field(
        self,
        query: ElementRecord,
        corpus: Sequence[ElementRecord],
        field_name: FieldName,
        base_threshold: float,
        floor: float
    ) -> List[ScoredCandidate]:
        """
        Rank the corpus by a single attribute.

        Args:
            query: Record holding the attribute to search for
            corpus: Records to search
            field_name: Attribute to compare
            base_threshold: Threshold the per-pair bar is relaxed from
            floor: Cap on the acceptance bar

        Returns:
            List[ScoredCandidate]: Matches sorted by descending score
        """
        target = query.get(field_name) if query is not None else None
        if not has_value(target):
            return []

        matches = []
        for candidate in corpus:
            value = candidate.get(field_name)
            if not has_value(value):
                continue

            score = self.compare_strings(target, value)
            threshold = min(
                base_threshold,
                self.heuristic.dynamic_threshold(target, value, base_threshold),
                floor
            )
            if score >= threshold:
                matches.append(ScoredCandidate(candidate, score))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches
