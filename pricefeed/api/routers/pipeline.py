"""Pipeline trigger endpoints.

Routes
------
GET /update    Run the scrape pipeline now; plain-text success/failure
GET /health    Liveness plus the next scheduled scrape time

``/update`` deliberately reports only an opaque status; stage and cause of a
failure go to the server log.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    next_run_at: Optional[str]


@router.get("/update", response_class=PlainTextResponse)
def update(request: Request) -> PlainTextResponse:
    """Synchronously run the pipeline once."""
    result = request.app.state.scheduler.trigger()
    if result.ok:
        return PlainTextResponse("Data updated", status_code=200)
    if result.skipped:
        return PlainTextResponse("Update already in progress", status_code=409)
    return PlainTextResponse("Error updating data", status_code=500)


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> dict[str, Any]:
    scheduler = request.app.state.scheduler
    next_run = scheduler.next_run_at
    return {
        "status": "ok",
        "scheduler_running": scheduler.is_running,
        "next_run_at": next_run.isoformat() if next_run else None,
    }
