"""Scraper package - page fetch & key-facts extraction."""

from pricefeed.scraper.errors import FetchError, ParseError, ScrapeError, StorageError
from pricefeed.scraper.extractor import Selectors, count_sentinels, extract_facts
from pricefeed.scraper.fetcher import fetch_page
from pricefeed.scraper.models import PriceFact, RawPage

__all__ = [
    "fetch_page",
    "extract_facts",
    "count_sentinels",
    "Selectors",
    "PriceFact",
    "RawPage",
    "ScrapeError",
    "FetchError",
    "ParseError",
    "StorageError",
]
