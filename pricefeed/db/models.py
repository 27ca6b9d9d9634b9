"""Dataclass models representing DB rows.

These are plain Python objects - not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class PriceRecord:
    id: int
    order_id: int
    figure: float
    description: str
    quote: str
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe mapping; a non-finite figure (``NaN``, ``inf``) becomes ``None``."""
        figure: Optional[float] = self.figure if math.isfinite(self.figure) else None
        return {
            "id": self.id,
            "orderID": self.order_id,
            "figure": figure,
            "description": self.description,
            "quote": self.quote,
            "created_at": self.created_at,
        }
