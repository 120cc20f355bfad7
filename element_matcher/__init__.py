"""
Element Matcher
===============

Self-healing lookup of UI element descriptors. Given a partially broken
descriptor (a truncated id, a renamed accessibility label, a drifted
locator), find the record in a corpus of known elements it most likely
refers to.

Key Features:
- Levenshtein and LCS primitives with a heuristic composite score
- Per-pair dynamic acceptance thresholds
- Weighted multi-attribute comparison with structural locator analysis
- Exact / similar / low-similarity / not-found classification with
  auto-update instructions
- File-backed corpus with time-based caching and batch DataFrame matching
"""

from element_matcher.core.matcher import ElementMatcher
from element_matcher.core.comparator import AttributeComparator
from element_matcher.core.heuristic import HeuristicMatcher
from element_matcher.core.store import ElementStore
from element_matcher.core.service import HealingService
from element_matcher.core.exceptions import ElementMatcherError, CorpusUnavailableError

from element_matcher.config.models import (
    ElementRecord,
    FieldName,
    HeuristicConfig,
    MatchCategory,
    MatchOutcome,
    MatcherConfig,
    ReplacementRequest,
    ScoredCandidate,
    StoreConfig,
    Suggestion,
)
from element_matcher.config.rules import PatternRule, RequiredAnyFieldRule, ValidationRules

__version__ = "1.0.0"
