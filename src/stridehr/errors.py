# src/stridehr/errors.py
from __future__ import annotations

from typing import Any, Sequence


class StrideHRError(Exception):
    """Base class for errors raised by the schema tooling."""


class ConfigurationError(StrideHRError):
    pass


class MigrationError(StrideHRError):
    """A migration command failed; the transaction was rolled back."""

    def __init__(self, message: str, revision: str | None = None):
        super().__init__(message)
        self.revision = revision


class SchemaDriftError(StrideHRError):
    """The live database does not match the model metadata."""

    def __init__(self, differences: Sequence[Any]):
        self.differences = list(differences)
        super().__init__(f"{len(self.differences)} schema difference(s) detected")
