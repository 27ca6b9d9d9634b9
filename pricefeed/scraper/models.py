"""Data models for the scraper pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int


@dataclass(frozen=True)
class PriceFact:
    """One figure/description pair extracted from the key-facts block.

    ``figure`` is ``NaN`` when the source text is not numeric.
    ``captured_at`` stays ``None`` until the batch is handed to storage.
    """

    sequence_number: int
    figure: float
    description: str
    quote: str
    captured_at: Optional[datetime] = None

    @property
    def is_sentinel(self) -> bool:
        return math.isnan(self.figure)

    def captured(self, when: datetime) -> "PriceFact":
        """Return a copy stamped with *when*."""
        return replace(self, captured_at=when)
