"""Tests for the scraper - page fetch + key-facts extraction.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_page`` tests.
- Extraction runs against inline HTML fixtures.
"""

from __future__ import annotations

import math

import httpx
import pytest
import respx

from pricefeed.scraper.errors import FetchError, ParseError
from pricefeed.scraper.extractor import (
    Selectors,
    _parse_figure,
    count_sentinels,
    extract_facts,
)
from pricefeed.scraper.fetcher import fetch_page
from pricefeed.scraper.models import PriceFact, RawPage


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_FACTS_HTML = """\
<!DOCTYPE html>
<html>
<head><title>Key facts</title></head>
<body>
  <section class="key-facts-full">
    <div class="key-facts-full__fact-wrapper">
      <span class="key-facts-full__figure">12.5</span>
      <span class="key-facts-full__description">Price per barrel</span>
    </div>
    <div class="key-facts-full__fact-wrapper">
      <span class="key-facts-full__figure">abc</span>
      <span class="key-facts-full__description">Unavailable figure</span>
    </div>
    <div class="key-facts-full__fact-wrapper">
      <span class="key-facts-full__figure">7</span>
      <span class="key-facts-full__description">Daily change</span>
    </div>
    <blockquote class="key-facts-full__quote"><p>Test quote</p></blockquote>
  </section>
</body>
</html>
"""


def _wrappers(count: int) -> str:
    items = "".join(
        f'<div class="key-facts-full__fact-wrapper">'
        f'<b class="key-facts-full__figure">{i}</b>'
        f'<i class="key-facts-full__description">fact {i}</i>'
        f"</div>"
        for i in range(count)
    )
    quote = '<div class="key-facts-full__quote"><p>Shared</p></div>'
    return f"<html><body>{items}{quote}</body></html>"


# ---------------------------------------------------------------------------
# fetch_page tests
# ---------------------------------------------------------------------------

class TestFetchPage:
    def test_successful_fetch_returns_raw_page(self) -> None:
        with respx.mock:
            respx.get("https://example.com/facts").mock(
                return_value=httpx.Response(200, text=_FACTS_HTML)
            )
            raw = fetch_page("https://example.com/facts")

        assert isinstance(raw, RawPage)
        assert raw.url == "https://example.com/facts"
        assert raw.status_code == 200
        assert "key-facts-full__figure" in raw.html

    def test_http_error_raises_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/missing").mock(
                return_value=httpx.Response(503, text="Unavailable")
            )
            with pytest.raises(FetchError) as excinfo:
                fetch_page("https://example.com/missing")

        assert "503" in str(excinfo.value)
        assert excinfo.value.stage == "fetch"
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)

    def test_timeout_raises_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/slow").mock(
                side_effect=httpx.ConnectTimeout("timed out")
            )
            with pytest.raises(FetchError, match="timed out"):
                fetch_page("https://example.com/slow")

    def test_connection_error_raises_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/down").mock(
                side_effect=httpx.ConnectError("refused")
            )
            with pytest.raises(FetchError):
                fetch_page("https://example.com/down")

    def test_single_attempt_only(self) -> None:
        with respx.mock:
            route = respx.get("https://example.com/flaky").mock(
                return_value=httpx.Response(500)
            )
            with pytest.raises(FetchError):
                fetch_page("https://example.com/flaky")

        assert route.call_count == 1

    def test_empty_url_raises_fetch_error(self) -> None:
        with pytest.raises(FetchError, match="No scrape URL"):
            fetch_page("")


# ---------------------------------------------------------------------------
# Figure parsing
# ---------------------------------------------------------------------------

class TestParseFigure:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("12.5", 12.5),
            ("  7 ", 7.0),
            ("12.5%", 12.5),
            ("-3", -3.0),
            (".5", 0.5),
            ("1e3", 1000.0),
            ("1,234", 1.0),
        ],
    )
    def test_leading_number(self, text: str, expected: float) -> None:
        assert _parse_figure(text) == expected

    @pytest.mark.parametrize("text", ["abc", "", "   ", "$12", "n/a"])
    def test_non_numeric_is_nan(self, text: str) -> None:
        assert math.isnan(_parse_figure(text))

    def test_infinity(self) -> None:
        assert _parse_figure("Infinity") == math.inf


# ---------------------------------------------------------------------------
# extract_facts
# ---------------------------------------------------------------------------

class TestExtractFacts:
    def test_fixture_produces_three_facts(self) -> None:
        facts = extract_facts(_FACTS_HTML)

        assert [f.sequence_number for f in facts] == [1, 2, 3]
        assert facts[0].figure == 12.5
        assert math.isnan(facts[1].figure)
        assert facts[2].figure == 7.0
        assert [f.description for f in facts] == [
            "Price per barrel",
            "Unavailable figure",
            "Daily change",
        ]

    def test_quote_shared_by_every_fact(self) -> None:
        facts = extract_facts(_FACTS_HTML)
        assert {f.quote for f in facts} == {"Test quote"}

    @pytest.mark.parametrize("count", [1, 4, 12])
    def test_n_wrappers_give_dense_sequence(self, count: int) -> None:
        facts = extract_facts(_wrappers(count))

        assert len(facts) == count
        assert [f.sequence_number for f in facts] == list(range(1, count + 1))
        assert [f.description for f in facts] == [f"fact {i}" for i in range(count)]
        assert len({f.quote for f in facts}) == 1

    def test_no_wrappers_returns_empty_list(self) -> None:
        html = "<html><body><p>The page was redesigned.</p></body></html>"
        assert extract_facts(html) == []

    def test_empty_string_returns_empty_list(self) -> None:
        assert extract_facts("") == []

    def test_missing_sub_elements_degrade(self) -> None:
        html = (
            '<div class="key-facts-full__fact-wrapper"></div>'
            '<div class="key-facts-full__fact-wrapper">'
            '<span class="key-facts-full__figure">3</span>'
            "</div>"
        )
        facts = extract_facts(html)

        assert len(facts) == 2
        assert math.isnan(facts[0].figure)
        assert facts[0].description == ""
        assert facts[1].figure == 3.0
        assert facts[0].quote == ""

    def test_description_kept_verbatim(self) -> None:
        html = (
            '<div class="key-facts-full__fact-wrapper">'
            '<span class="key-facts-full__figure">1</span>'
            '<span class="key-facts-full__description">  Spot <em>price</em> </span>'
            "</div>"
        )
        assert extract_facts(html)[0].description == "  Spot price "

    def test_multiple_quote_paragraphs_concatenated(self) -> None:
        html = (
            '<div class="key-facts-full__quote"><p>First.</p><p>Second.</p></div>'
            '<div class="key-facts-full__fact-wrapper">'
            '<span class="key-facts-full__figure">1</span></div>'
        )
        assert extract_facts(html)[0].quote == "First.Second."

    def test_bytes_markup_accepted(self) -> None:
        facts = extract_facts(_FACTS_HTML.encode("utf-8"))
        assert len(facts) == 3

    def test_custom_selectors(self) -> None:
        html = '<li class="f"><i class="n">2.5</i><u class="d">x</u></li><q class="q"><p>q</p></q>'
        sel = Selectors(wrapper=".f", figure=".n", description=".d", quote=".q p")
        facts = extract_facts(html, sel)
        assert facts == [PriceFact(sequence_number=1, figure=2.5, description="x", quote="q")]

    def test_captured_at_not_assigned(self) -> None:
        assert all(f.captured_at is None for f in extract_facts(_FACTS_HTML))

    def test_non_markup_input_raises_parse_error(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            extract_facts(None)  # type: ignore[arg-type]
        assert excinfo.value.stage == "extract"


class TestCountSentinels:
    def test_counts_nan_figures(self) -> None:
        assert count_sentinels(extract_facts(_FACTS_HTML)) == 1

    def test_zero_for_clean_batch(self) -> None:
        assert count_sentinels(extract_facts(_wrappers(3))) == 0
