"""Main element matching system implementation."""

from typing import Any, Dict, List, Optional, Sequence
import pandas as pd
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from os import cpu_count
import logging
import time

from element_matcher.core.comparator import AttributeComparator
from element_matcher.config.models import (
    FIELD_SEARCH_BASE_THRESHOLD,
    FIELD_SEARCH_FLOORS,
    FIND_BASE_THRESHOLD,
    IDENTIFYING_FIELDS,
    RANK_INCLUSION_FLOOR,
    SUGGEST_BASE_THRESHOLD,
    ElementRecord,
    FieldName,
    MatchCategory,
    MatchOutcome,
    MatcherConfig,
    ReplacementRequest,
    ScoredCandidate,
    Suggestion,
)
from element_matcher.config.rules import ValidationRules


class ElementMatcher:
    """
    Finds the corpus record a broken element descriptor most likely refers to.

    The matcher never mutates the corpus. When a match should replace a stale
    record, the outcome carries a ReplacementRequest for the owner of the
    corpus to apply.
    """

    def __init__(
        self,
        comparator: Optional[AttributeComparator] = None,
        validation_rules: Optional[ValidationRules] = None,
        worker_threads: int = -1
    ):
        """
        Initialize the element matcher.

        Args:
            comparator: Record comparator; defaults to the standard weights
            validation_rules: Rules applied by validate()
            worker_threads: Number of threads for batch matching (-1 for CPU count)
        """
        self.comparator = comparator or AttributeComparator()
        self.validation_rules = validation_rules or ValidationRules()
        self.worker_threads = worker_threads if worker_threads > 0 else (cpu_count() or 1)

        self._initialize_logging()

    def _initialize_logging(self) -> None:
        """Setup logging configuration."""
        self.logger = logging.getLogger(__name__)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(levelname)s - %(message)s'
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def rank(
        self,
        query: ElementRecord,
        corpus: Sequence[ElementRecord],
        base_threshold: float
    ) -> List[ScoredCandidate]:
        """
        Score every corpus record against the query.

        A candidate is kept when it clears its per-pair dynamic threshold or
        the absolute inclusion floor.

        Args:
            query: Record to look for
            corpus: Records to search
            base_threshold: Threshold the per-pair bar is relaxed from

        Returns:
            List[ScoredCandidate]: Candidates sorted by descending score
        """
        if query is None:
            return []

        matches = []
        for candidate in corpus:
            if query.element_id is not None and query.element_id == candidate.element_id:
                continue

            score = self.comparator.compare(query, candidate)
            threshold = self.comparator.dynamic_threshold(query, candidate, base_threshold)

            if score >= threshold or score >= RANK_INCLUSION_FLOOR:
                matches.append(ScoredCandidate(candidate, score))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    def find_best_match(
        self,
        query: Optional[ElementRecord],
        corpus: Sequence[ElementRecord],
        config: Optional[MatcherConfig] = None
    ) -> MatchOutcome:
        """
        Find and classify the best match for a query.

        Exact element_id matches win outright, then records agreeing on every
        shared critical attribute, then the top of the fuzzy ranking.

        Args:
            query: Record to look for
            corpus: Records to search
            config: Thresholds and auto-update switch

        Returns:
            MatchOutcome: Classified result
        """
        config = config or MatcherConfig()

        if query is None:
            return MatchOutcome.not_found(query, "Invalid target element")
        if not any(query.has(f) for f in IDENTIFYING_FIELDS):
            return MatchOutcome.not_found(query, "No identifier fields provided")

        if query.has(FieldName.ELEMENT_ID):
            for record in corpus:
                if record.element_id == query.element_id:
                    self.logger.debug(f"Found exact ID match for: {query.element_id}")
                    return MatchOutcome.exact(query, record)

        for record in corpus:
            if self.comparator.is_exact_match(query, record):
                self.logger.debug(f"Found exact attribute match for: {query.element_id}")
                return self._create_outcome(query, record, 1.0, config)

        candidates = self.rank(query, corpus, FIND_BASE_THRESHOLD)
        if not candidates:
            self.logger.info(
                f"No similar elements found. Threshold: {config.similarity_threshold}, "
                f"available fields: {[f.value for f in query.present_fields()]}"
            )
            return MatchOutcome.not_found(
                query, "No similar elements found above minimum threshold"
            )

        best = candidates[0]
        self.logger.debug(
            f"Found similar element for: {query.element_id} -> "
            f"{best.record.element_id} (similarity: {best.score:.3f})"
        )
        return self._create_outcome(query, best.record, best.score, config)

    def _create_outcome(
        self,
        query: ElementRecord,
        matched: ElementRecord,
        score: float,
        config: MatcherConfig
    ) -> MatchOutcome:
        """Classify a hit and decide whether it should replace the query."""
        above_threshold = score >= config.similarity_threshold
        category = (
            MatchCategory.SIMILARITY if above_threshold
            else MatchCategory.LOW_SIMILARITY
        )

        replacement = None
        if (config.auto_update_enabled and above_threshold
                and query.has(FieldName.ELEMENT_ID)
                and query.element_id != matched.element_id):
            replacement = ReplacementRequest(query.element_id, matched)

        return MatchOutcome(
            category=category,
            query=query,
            matched=matched,
            score=score,
            auto_applied=replacement is not None,
            replacement=replacement,
            reason='exact attribute match' if score == 1.0 else 'similarity match'
        )

    def suggest(
        self,
        query: Optional[ElementRecord],
        corpus: Sequence[ElementRecord],
        config: Optional[MatcherConfig] = None,
        limit: Optional[int] = None
    ) -> List[Suggestion]:
        """
        List the closest records to a query.

        Args:
            query: Record to look for
            corpus: Records to search
            config: Threshold used to label each suggestion
            limit: Maximum number of suggestions (defaults to config.max_suggestions)

        Returns:
            List[Suggestion]: Labelled candidates, best first
        """
        config = config or MatcherConfig()
        limit = config.max_suggestions if limit is None else limit

        candidates = self.rank(query, corpus, SUGGEST_BASE_THRESHOLD)
        return [
            Suggestion(c.record, c.score, self.classify(c.score, config))
            for c in candidates[:limit]
        ]

    def find_by_field(
        self,
        query: Optional[ElementRecord],
        corpus: Sequence[ElementRecord],
        field_name: FieldName
    ) -> List[ScoredCandidate]:
        """
        Search the corpus using a single attribute of the query.

        Args:
            query: Record holding the attribute
            corpus: Records to search
            field_name: One of locator, accessibility_id, element_id,
                class_name or name

        Returns:
            List[ScoredCandidate]: Matches sorted by descending score, empty
            if the query lacks the attribute

        Raises:
            ValueError: If the attribute is not searchable on its own
        """
        field_name = FieldName(field_name)
        floor = FIELD_SEARCH_FLOORS.get(field_name)
        if floor is None:
            raise ValueError(f"Field is not searchable: {field_name.value}")

        return self.comparator.search_field(
            query, corpus, field_name, FIELD_SEARCH_BASE_THRESHOLD, floor
        )

    def validate(self, record: Optional[ElementRecord]) -> List[str]:
        """Return the reasons a record is invalid, empty if it is valid."""
        return self.validation_rules.validate(record)

    @staticmethod
    def classify(score: float, config: MatcherConfig) -> MatchCategory:
        if score >= config.similarity_threshold:
            return MatchCategory.SIMILARITY
        return MatchCategory.LOW_SIMILARITY

    def match_records(
        self,
        queries: Sequence[ElementRecord],
        corpus: Sequence[ElementRecord],
        config: Optional[MatcherConfig] = None
    ) -> List[MatchOutcome]:
        """
        Run find_best_match for many queries in parallel.

        Args:
            queries: Records to look for
            corpus: Records to search
            config: Thresholds and auto-update switch

        Returns:
            List[MatchOutcome]: One outcome per query, in query order
        """
        if not queries:
            return []

        start_time = time.time()
        chunks = [
            chunk for chunk in np.array_split(
                np.arange(len(queries)), min(self.worker_threads, len(queries))
            )
            if len(chunk)
        ]

        with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
            results = executor.map(
                lambda chunk: [
                    self.find_best_match(queries[i], corpus, config) for i in chunk
                ],
                chunks
            )
            outcomes = [outcome for sublist in results for outcome in sublist]

        self.logger.info(
            f"Matched {len(queries)} elements in {time.time() - start_time:.2f} seconds"
        )
        return outcomes

    def match_dataframe(
        self,
        frame: pd.DataFrame,
        corpus: Sequence[ElementRecord],
        config: Optional[MatcherConfig] = None
    ) -> pd.DataFrame:
        """
        Match every row of a DataFrame of element descriptors.

        Args:
            frame: One element per row, columns named like the persisted keys
            corpus: Records to search
            config: Thresholds and auto-update switch

        Returns:
            pd.DataFrame: Input columns plus the match result columns
        """
        queries = records_from_frame(frame)
        outcomes = self.match_records(queries, corpus, config)
        return outcomes_to_frame(frame, outcomes)


def records_from_frame(frame: pd.DataFrame) -> List[ElementRecord]:
    """Convert DataFrame rows to records, treating NaN as absent."""
    return [
        ElementRecord.from_dict({
            col: val for col, val in row.items() if pd.notna(val)
        })
        for row in frame.to_dict(orient='records')
    ]


def outcomes_to_frame(frame: pd.DataFrame, outcomes: Sequence[MatchOutcome]) -> pd.DataFrame:
    """Append match result columns to the rows the outcomes belong to."""
    rows = []
    for row, outcome in zip(frame.to_dict(orient='records'), outcomes):
        result = _create_result_record(row, outcome)
        rows.append(result)
    return pd.DataFrame(rows)


def _create_result_record(row: Dict[str, Any], outcome: MatchOutcome) -> Dict[str, Any]:
    """Create a result record with match information."""
    result = {
        col: str(val) if pd.notna(val) else ''
        for col, val in row.items()
    }
    result.update({
        'is_matched': outcome.is_matched,
        'match_category': outcome.category.value,
        'match_similarity': outcome.score,
        'matched_element_id': outcome.matched.element_id if outcome.matched else None,
        'auto_applied': outcome.auto_applied,
    })
    return result
