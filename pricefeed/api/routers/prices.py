"""Read endpoint for scraped prices.

Routes
------
GET /prices    The five most recently inserted rows, newest first
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from pricefeed.db.prices import LATEST_LIMIT, latest_prices

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class PriceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    order_id: int = Field(alias="orderID")
    # None when the scraped text was not numeric.
    figure: Optional[float]
    description: str
    quote: str
    created_at: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/prices", response_model=list[PriceResponse], response_model_by_alias=True)
def list_latest(request: Request) -> list[dict[str, Any]]:
    """Return the most recent prices, newest surrogate key first."""
    conn = request.app.state.db
    try:
        records = latest_prices(conn, limit=LATEST_LIMIT)
    except Exception as exc:
        logger.exception("Error fetching prices")
        raise HTTPException(status_code=500, detail="Error fetching data") from exc
    return [r.to_dict() for r in records]
