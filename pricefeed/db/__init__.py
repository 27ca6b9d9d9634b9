"""Database layer package.

Public re-exports so callers can write::

    from pricefeed.db import get_connection, init_db
    from pricefeed.db import prices
"""

from pricefeed.db.connection import get_connection
from pricefeed.db.migrations import init_db
from pricefeed.db import prices

__all__ = ["get_connection", "init_db", "prices"]
