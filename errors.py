"""Error taxonomy for the publications pipeline."""

from __future__ import annotations


class ZoteroPublicationsError(RuntimeError):
    """Base class for failures surfaced by the aggregation pipeline."""


class TransportError(ZoteroPublicationsError):
    """Network or HTTP failure while fetching a page."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedResponseError(ZoteroPublicationsError):
    """A page payload or one of its items failed structural validation."""


class InvariantViolation(ZoteroPublicationsError):
    """The dataset cursor reached an inconsistent position/done state."""
