"""Exceptions raised by the element matching system."""


class ElementMatcherError(Exception):
    """Base exception for the element matcher."""

    pass


class CorpusUnavailableError(ElementMatcherError):
    """The element corpus could not be loaded.

    Raised when the backing file is missing, unreadable or malformed.
    Callers must treat the corpus as unavailable rather than matching
    against a partial one.
    """

    pass
