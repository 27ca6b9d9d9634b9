"""HTTP fetcher for the key-facts page."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from pricefeed.config import settings
from pricefeed.scraper.errors import FetchError
from pricefeed.scraper.models import RawPage

logger = logging.getLogger(__name__)


def fetch_page(url: str, timeout: Optional[float] = None) -> RawPage:
    """Fetch *url* with a single GET and return a :class:`RawPage`.

    No retry is attempted; one request per call.

    Args:
        url: Absolute URL of the page to scrape.
        timeout: Override ``settings.request_timeout`` (seconds).

    Raises:
        FetchError: On a transport error, a timeout, or a 4xx/5xx status.
    """
    if not url:
        raise FetchError(url, "No scrape URL configured")

    logger.debug("GET %s", url)
    try:
        with httpx.Client(
            headers={"User-Agent": settings.user_agent},
            timeout=timeout if timeout is not None else settings.request_timeout,
            follow_redirects=True,
        ) as client:
            response = client.get(url)
            response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise FetchError(url, "Request timed out") from exc
    except httpx.HTTPStatusError as exc:
        raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(url, f"Request failed: {exc}") from exc

    return RawPage(url=url, html=response.text, status_code=response.status_code)
