"""Price feed - scheduled key-facts scraper with a small HTTP surface."""

__version__ = "0.1.0"
