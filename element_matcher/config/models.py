"""Configuration and result models for the element matching system."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from enum import Enum


class FieldName(str, Enum):
    """Attributes an element record can carry."""
    ELEMENT_ID = "element_id"
    LOCATOR = "locator"
    ACCESSIBILITY_ID = "accessibility_id"
    CLASS_NAME = "class_name"
    NAME = "name"
    SCREEN = "screen"
    ELEMENT_TYPE = "element_type"


class MatchCategory(str, Enum):
    """Categories for matching results."""
    EXACT = "EXACT"
    SIMILARITY = "SIMILARITY"
    LOW_SIMILARITY = "LOW_SIMILARITY"
    NOT_FOUND = "NOT_FOUND"


# Serialized key for each field. The original corpus files spell the
# locator as "xpath"; "locator" is accepted on input as well.
FIELD_KEYS: Dict[FieldName, str] = {
    FieldName.ELEMENT_ID: "element_id",
    FieldName.LOCATOR: "xpath",
    FieldName.ACCESSIBILITY_ID: "accessibility_id",
    FieldName.CLASS_NAME: "class_name",
    FieldName.NAME: "name",
    FieldName.SCREEN: "screen",
    FieldName.ELEMENT_TYPE: "element_type",
}

KEY_ALIASES: Dict[str, FieldName] = {
    **{key: name for name, key in FIELD_KEYS.items()},
    "locator": FieldName.LOCATOR,
}

# Fields that identify an element well enough to be searched for
IDENTIFYING_FIELDS: Tuple[FieldName, ...] = (
    FieldName.ELEMENT_ID,
    FieldName.LOCATOR,
    FieldName.ACCESSIBILITY_ID,
    FieldName.CLASS_NAME,
    FieldName.NAME,
)

# Fields compared by the exact-match predicate
EXACT_MATCH_FIELDS: Tuple[FieldName, ...] = (
    FieldName.ACCESSIBILITY_ID,
    FieldName.NAME,
    FieldName.LOCATOR,
    FieldName.ELEMENT_ID,
)

# Precedence of the field used to compute a per-pair dynamic threshold
KEY_IDENTIFIER_FIELDS: Tuple[FieldName, ...] = (
    FieldName.ACCESSIBILITY_ID,
    FieldName.NAME,
    FieldName.ELEMENT_ID,
)

# Base thresholds the decision workflow ranks with
FIND_BASE_THRESHOLD = 0.1
SUGGEST_BASE_THRESHOLD = 0.15
FIELD_SEARCH_BASE_THRESHOLD = 0.15

# Absolute score above which a ranked candidate is always kept, whatever its
# dynamic threshold says. Keeps near-misses visible; it also admits almost
# every non-empty pair, so treat it as product policy.
RANK_INCLUSION_FLOOR = 0.1

# Per-field caps on the acceptance bar of single-attribute searches
FIELD_SEARCH_FLOORS: Dict[FieldName, float] = {
    FieldName.LOCATOR: 0.2,
    FieldName.ACCESSIBILITY_ID: 0.2,
    FieldName.ELEMENT_ID: 0.15,
    FieldName.CLASS_NAME: 0.2,
    FieldName.NAME: 0.2,
}

CONTEXT_BONUS_CAP = 0.1


def has_value(value: Optional[str]) -> bool:
    """Check if a value is present and not blank."""
    return value is not None and value.strip() != ''


@dataclass(frozen=True)
class ElementRecord:
    """Descriptor of a UI element. Every attribute is optional."""
    element_id: Optional[str] = None
    locator: Optional[str] = None
    accessibility_id: Optional[str] = None
    class_name: Optional[str] = None
    name: Optional[str] = None
    screen: Optional[str] = None
    element_type: Optional[str] = None

    def get(self, field_name: FieldName) -> Optional[str]:
        return getattr(self, FieldName(field_name).value)

    def has(self, field_name: FieldName) -> bool:
        return has_value(self.get(field_name))

    def present_fields(self) -> List[FieldName]:
        return [name for name in FieldName if self.has(name)]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ElementRecord":
        """
        Build a record from its serialized form.

        Unknown keys are ignored and non-string values are stringified.

        Args:
            data: Mapping using the persisted key names

        Returns:
            ElementRecord: Parsed record
        """
        values: Dict[str, str] = {}
        for key, value in data.items():
            field_name = KEY_ALIASES.get(key)
            if field_name is None or value is None:
                continue
            values.setdefault(field_name.value, str(value))
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        """Serialize the record, omitting absent fields."""
        return {
            FIELD_KEYS[name]: self.get(name)
            for name in FieldName
            if self.get(name) is not None
        }


@dataclass(frozen=True)
class FieldMatchConfig:
    """Configuration for how to compare a specific attribute."""
    field: FieldName
    weight: float
    match_method: str = 'text'  # 'text' or 'locator'
    context_bonus: float = 0.0  # added when values agree case-insensitively

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"Weight for {self.field.value} must be non-negative")
        if self.match_method not in ('text', 'locator'):
            raise ValueError(f"Unknown match method: {self.match_method}")


DEFAULT_FIELD_CONFIGS: Tuple[FieldMatchConfig, ...] = (
    FieldMatchConfig(FieldName.ACCESSIBILITY_ID, 0.30),
    FieldMatchConfig(FieldName.NAME, 0.25),
    FieldMatchConfig(FieldName.LOCATOR, 0.18, match_method='locator'),
    FieldMatchConfig(FieldName.CLASS_NAME, 0.12, context_bonus=0.02),
    FieldMatchConfig(FieldName.SCREEN, 0.10, context_bonus=0.05),
    FieldMatchConfig(FieldName.ELEMENT_TYPE, 0.05, context_bonus=0.03),
)

DEFAULT_KEYWORDS: Tuple[str, ...] = (
    'button', 'field', 'text', 'image', 'label', 'view', 'screen'
)


@dataclass(frozen=True)
class HeuristicConfig:
    """Lookup tables for the heuristic string matcher."""
    abbreviations: Mapping[str, Sequence[str]] = field(default_factory=dict)
    keywords: Sequence[str] = DEFAULT_KEYWORDS
    type_marker: str = 'XCUIElementType'  # structural type prefix in locators


@dataclass(frozen=True)
class MatcherConfig:
    """Thresholds and switches for the find/suggest workflow."""
    similarity_threshold: float = 0.75
    auto_update_enabled: bool = True
    max_suggestions: int = 5

    def __post_init__(self):
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be within [0, 1], "
                f"got {self.similarity_threshold}"
            )
        if self.max_suggestions < 1:
            raise ValueError(
                f"max_suggestions must be positive, got {self.max_suggestions}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MatcherConfig":
        """Build a config from a flat mapping, falling back to defaults."""
        defaults = cls()
        auto_update = data.get('auto_update_enabled', defaults.auto_update_enabled)
        if isinstance(auto_update, str):
            auto_update = auto_update.strip().lower() in ('1', 'true', 'yes', 'on')
        return cls(
            similarity_threshold=float(
                data.get('similarity_threshold', defaults.similarity_threshold)
            ),
            auto_update_enabled=bool(auto_update),
            max_suggestions=int(
                data.get('max_suggestions', defaults.max_suggestions)
            ),
        )


@dataclass(frozen=True)
class StoreConfig:
    """Configuration for the file-backed element corpus."""
    path: str
    cache_ttl_seconds: float = 60.0
    encoding: str = 'utf-8'

    def __post_init__(self):
        if self.cache_ttl_seconds < 0:
            raise ValueError("cache_ttl_seconds must be non-negative")


@dataclass(frozen=True)
class ScoredCandidate:
    """Corpus record paired with its similarity to the query."""
    record: ElementRecord
    score: float


@dataclass(frozen=True)
class ReplacementRequest:
    """Instruction to replace a stale corpus record with a matched one."""
    old_element_id: str
    new_record: ElementRecord


@dataclass(frozen=True)
class MatchOutcome:
    """Classified result of a find-best-match call."""
    category: MatchCategory
    query: Optional[ElementRecord]
    matched: Optional[ElementRecord] = None
    score: float = 0.0
    auto_applied: bool = False
    replacement: Optional[ReplacementRequest] = None
    reason: str = ''

    @classmethod
    def exact(cls, query: ElementRecord, matched: ElementRecord) -> "MatchOutcome":
        return cls(MatchCategory.EXACT, query, matched, 1.0, reason='exact element_id match')

    @classmethod
    def not_found(cls, query: Optional[ElementRecord], reason: str) -> "MatchOutcome":
        return cls(MatchCategory.NOT_FOUND, query, None, 0.0, reason=reason)

    @property
    def is_matched(self) -> bool:
        return self.matched is not None


@dataclass(frozen=True)
class Suggestion:
    """Ranked candidate labelled against the similarity threshold."""
    record: ElementRecord
    score: float
    category: MatchCategory


@dataclass
class StringMatch:
    """Best match of a plain string among candidate strings."""
    score: float = 0.0
    matched: Optional[str] = None
    confidence: str = "NOT_FOUND"
