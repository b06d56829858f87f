"""Error hierarchy for phyloreference testing."""

from __future__ import annotations


class PhylorefCheckError(Exception):
    """Base class for every error raised by phylorefcheck."""


class InputError(PhylorefCheckError):
    """Raised when an input document cannot be read or has the wrong shape."""


class ConfigurationError(PhylorefCheckError):
    """Raised when the facts describing a run are internally inconsistent.

    A configuration error aborts the run before any verdict is produced, since
    none of the downstream results could be trusted.
    """


class StatusAnnotationError(ConfigurationError):
    """Raised when a status annotation does not have a recognised shape."""

    def __init__(self, definition_id: str, detail: str) -> None:
        super().__init__(f"unrecognised status annotation on <{definition_id}>: {detail}")
        self.definition_id = definition_id
        self.detail = detail
