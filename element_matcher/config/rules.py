"""Record validation rules for the element matching system."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from dataclasses import dataclass, field
import regex as re

from element_matcher.config.models import ElementRecord, FieldName, FIELD_KEYS


class RecordRule(ABC):
    """Base class for record validation rules."""

    @abstractmethod
    def check(self, record: ElementRecord) -> Optional[str]:
        """
        Check a record against the rule.

        Args:
            record: Record to check

        Returns:
            Optional[str]: Human-readable reason if the record fails, else None
        """
        pass


class RequiredAnyFieldRule(RecordRule):
    """Require at least one of the given fields to be present."""

    def __init__(self, fields: Sequence[FieldName]):
        self.fields = tuple(fields)

    def check(self, record: ElementRecord) -> Optional[str]:
        if any(record.has(f) for f in self.fields):
            return None
        names = ', '.join(FIELD_KEYS[f] for f in self.fields[:-1])
        return (
            f"At least one identifier is required ({names}, "
            f"or {FIELD_KEYS[self.fields[-1]]})"
        )


class PatternRule(RecordRule):
    """Require a field, when present, to match a regex pattern."""

    def __init__(self, field_name: FieldName, pattern: str, message: Optional[str] = None):
        self.field_name = field_name
        self.pattern = re.compile(pattern)
        self.message = message or f"{FIELD_KEYS[field_name]} does not match {pattern}"

    def check(self, record: ElementRecord) -> Optional[str]:
        value = record.get(self.field_name)
        if value is None or not value.strip():
            return None
        if self.pattern.match(value):
            return None
        return self.message


def default_rules() -> List[RecordRule]:
    return [
        RequiredAnyFieldRule((
            FieldName.ELEMENT_ID,
            FieldName.LOCATOR,
            FieldName.ACCESSIBILITY_ID,
            FieldName.CLASS_NAME,
        ))
    ]


@dataclass
class ValidationRules:
    """Rules a record must satisfy before it is accepted."""

    rules: List[RecordRule] = field(default_factory=default_rules)

    def validate(self, record: Optional[ElementRecord]) -> List[str]:
        """
        Collect the reasons a record is invalid.

        Args:
            record: Record to validate

        Returns:
            List[str]: Validation errors, empty if the record is valid
        """
        if record is None:
            return ["Element is null"]

        errors = []
        for rule in self.rules:
            reason = rule.check(record)
            if reason:
                errors.append(reason)
        return errors
