"""Key-facts extraction: turns page markup into an ordered list of :class:`PriceFact`."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from pricefeed.scraper.errors import ParseError
from pricefeed.scraper.models import PriceFact

logger = logging.getLogger(__name__)

# Longest leading decimal literal, e.g. "12.5%" -> "12.5", "-.5e3x" -> "-.5e3".
_LEADING_NUMBER = re.compile(
    r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


@dataclass(frozen=True)
class Selectors:
    """CSS selectors locating the key-facts block on the source page."""

    wrapper: str = ".key-facts-full__fact-wrapper"
    figure: str = ".key-facts-full__figure"
    description: str = ".key-facts-full__description"
    quote: str = ".key-facts-full__quote p"


DEFAULT_SELECTORS = Selectors()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse_figure(text: str) -> float:
    """Parse the leading number of *text*; ``NaN`` when there is none."""
    match = _LEADING_NUMBER.match(text.strip())
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def _joined_text(elements: Iterable[Tag]) -> str:
    """Concatenate the text of every element in *elements*."""
    return "".join(el.get_text() for el in elements)


def _make_soup(markup: Union[str, bytes]) -> BeautifulSoup:
    if not isinstance(markup, (str, bytes)):
        raise ParseError(f"Expected markup text, got {type(markup).__name__}")
    try:
        return BeautifulSoup(markup, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Markup could not be parsed: {exc}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_facts(
    markup: Union[str, bytes],
    selectors: Optional[Selectors] = None,
) -> List[PriceFact]:
    """Extract every key fact from *markup*, in document order.

    The single quote block is read once and attached to every fact.
    Missing sub-elements degrade to an empty description or a ``NaN``
    figure for that fact only; an empty list is returned when the page
    has no fact wrappers.

    Raises:
        ParseError: If *markup* is not parseable markup at all.
    """
    sel = selectors or DEFAULT_SELECTORS
    soup = _make_soup(markup)

    quote = _joined_text(soup.select(sel.quote))

    facts: List[PriceFact] = []
    for order, wrapper in enumerate(soup.select(sel.wrapper), start=1):
        facts.append(
            PriceFact(
                sequence_number=order,
                figure=_parse_figure(_joined_text(wrapper.select(sel.figure))),
                description=_joined_text(wrapper.select(sel.description)),
                quote=quote,
            )
        )

    if not facts:
        logger.warning("No elements matched %r; page structure may have changed", sel.wrapper)
    return facts


def count_sentinels(facts: Iterable[PriceFact]) -> int:
    """Return how many facts carry a ``NaN`` figure."""
    return sum(1 for fact in facts if fact.is_sentinel)
