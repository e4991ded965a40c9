"""Exceptions raised while loading inputs for a correlation run."""

from __future__ import annotations


class CorrelatorError(Exception):
    """Base class for failures that abort a correlation run."""


class InputFileNotFoundError(CorrelatorError, FileNotFoundError):
    def __init__(self, path) -> None:
        super().__init__(f"Input file not found: {path}")
        self.path = path


class MalformedInputError(CorrelatorError, ValueError):
    """Raised when an input file cannot be parsed at all."""
