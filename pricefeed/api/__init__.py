"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from pricefeed.api import app

    uvicorn pricefeed.api:app
"""

from pricefeed.api.app import app

__all__ = ["app"]
