"""Normalization and feature extraction for element attributes."""

from typing import Any, NamedTuple, Optional
from abc import ABC, abstractmethod
import regex as re

from element_matcher.config.models import HeuristicConfig


class BasePreprocessor(ABC):
    """Base class for preprocessors with common functionality."""

    @abstractmethod
    def process(self, value: Any) -> str:
        """Process a value into a standardized string format."""
        pass

    def _handle_null(self, value: Any) -> bool:
        """Check if value is null."""
        return value is None


class TextPreprocessor(BasePreprocessor):
    """Lower-cases and trims attribute text."""

    def process(self, value: Any) -> str:
        if self._handle_null(value):
            return ''
        return str(value).lower().strip()


class LocatorFeatures(NamedTuple):
    """Sub-features pulled out of a structural locator."""
    element_type: str
    name_attribute: str


_NAME_ATTRIBUTE = re.compile(r"@name='([^']*)'")


class LocatorPreprocessor(BasePreprocessor):
    """Extracts the element-type token and name attribute from a locator."""

    def __init__(self, type_marker: str = HeuristicConfig().type_marker):
        self.type_marker = type_marker
        # //XCUIElementTypeButton[@name='login'] -> XCUIElementTypeButton
        self._type_pattern = re.compile(re.escape(type_marker) + r'[^\[]*')

    def process(self, value: Any) -> str:
        if self._handle_null(value):
            return ''
        return str(value)

    def features(self, value: Optional[str]) -> LocatorFeatures:
        """
        Extract structural sub-features from a locator.

        Args:
            value: Locator expression, e.g. //XCUIElementTypeButton[@name='x']

        Returns:
            LocatorFeatures: Type token and name attribute, '' when absent
        """
        if not value:
            return LocatorFeatures('', '')

        type_match = self._type_pattern.search(value)
        name_match = _NAME_ATTRIBUTE.search(value)
        return LocatorFeatures(
            type_match.group(0) if type_match else '',
            name_match.group(1) if name_match else '',
        )

