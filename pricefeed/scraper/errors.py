"""Stage-level failures raised by the scrape pipeline.

Each error records the pipeline ``stage`` it belongs to so the runner can
report where a run broke without inspecting the exception type.  The
underlying library exception is kept as ``__cause__`` (``raise ... from``).
"""

from __future__ import annotations


class ScrapeError(Exception):
    """Base class for every pipeline stage failure."""

    stage: str = "unknown"


class FetchError(ScrapeError):
    """The page could not be retrieved (transport error, timeout, non-2xx)."""

    stage = "fetch"

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class ParseError(ScrapeError):
    """The input could not be parsed as markup at all."""

    stage = "extract"


class StorageError(ScrapeError):
    """A connection- or transaction-level database failure."""

    stage = "persist"
