"""Self-healing service tying the matcher to the element store."""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from element_matcher.config.models import (
    ElementRecord,
    FieldName,
    MatchOutcome,
    MatcherConfig,
    Suggestion,
)
from element_matcher.core.matcher import ElementMatcher, outcomes_to_frame, records_from_frame
from element_matcher.core.store import ElementStore


class HealingService:
    """Finds elements in the stored corpus and applies auto-updates."""

    def __init__(
        self,
        store: ElementStore,
        config: Optional[MatcherConfig] = None,
        matcher: Optional[ElementMatcher] = None
    ):
        self.store = store
        self.config = config or MatcherConfig()
        self.matcher = matcher or ElementMatcher()
        self.logger = logging.getLogger(__name__)

    def find(self, query: Optional[ElementRecord]) -> MatchOutcome:
        """
        Find an element and replace its stale record when auto-update fires.

        Raises:
            CorpusUnavailableError: If the corpus cannot be loaded
        """
        corpus = self.store.load()
        outcome = self.matcher.find_best_match(query, corpus, self.config)
        self._apply(outcome)
        return outcome

    def suggest(self, query: Optional[ElementRecord], limit: Optional[int] = None) -> List[Suggestion]:
        return self.matcher.suggest(query, self.store.load(), self.config, limit)

    def find_by_field(self, query: Optional[ElementRecord], field_name: FieldName) -> List[Suggestion]:
        """Single-attribute search, truncated and labelled like suggestions."""
        if query is None or not query.has(field_name):
            return []

        self.logger.debug(f"Finding elements by {FieldName(field_name).value}")
        matches = self.matcher.find_by_field(query, self.store.load(), field_name)
        return [
            Suggestion(m.record, m.score, self.matcher.classify(m.score, self.config))
            for m in matches[:self.config.max_suggestions]
        ]

    def update(self, old_element_id: str, record: ElementRecord) -> bool:
        return self.store.replace(old_element_id, record)

    def validate(self, record: Optional[ElementRecord]) -> List[str]:
        return self.matcher.validate(record)

    def statistics(self) -> Dict[str, Any]:
        stats = self.store.statistics()
        stats.update({
            'similarityThreshold': self.config.similarity_threshold,
            'autoUpdateEnabled': self.config.auto_update_enabled,
            'maxSuggestions': self.config.max_suggestions,
        })
        return stats

    def match_frame(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Match a DataFrame of descriptors and apply resulting auto-updates."""
        outcomes = self.matcher.match_records(
            records_from_frame(frame), self.store.load(), self.config
        )
        for outcome in outcomes:
            self._apply(outcome)
        return outcomes_to_frame(frame, outcomes)

    def _apply(self, outcome: MatchOutcome) -> None:
        if outcome.replacement is None:
            return
        if not self.store.apply(outcome.replacement):
            self.logger.warning(
                f"Auto-update skipped, {outcome.replacement.old_element_id} "
                f"is no longer in the corpus"
            )
