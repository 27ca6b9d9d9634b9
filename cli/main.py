"""Price feed CLI - entry-point for operating the scraper outside the API.

Usage:
    pricefeed --help

Command groups:
    db       -> schema management
    scrape   -> fetch + extract only, prints what would be stored
    update   -> one full pipeline run against the configured database
    prices   -> show the newest stored rows
    serve    -> run the HTTP API (scheduler included) under uvicorn
"""

from __future__ import annotations

import math
import sqlite3
from typing import Optional

import typer

from pricefeed.config import configure_logging, settings
from pricefeed.db import get_connection, init_db
from pricefeed.db.prices import LATEST_LIMIT, latest_prices
from pricefeed.pipeline.runner import PipelineRunner
from pricefeed.scraper import ScrapeError, extract_facts, fetch_page

app = typer.Typer(
    name="pricefeed",
    help="Price feed scraper CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL."),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level.upper() if log_level else None)


def _format_figure(figure: float) -> str:
    return "NaN" if math.isnan(figure) else f"{figure:g}"


def _open_db(command: str) -> sqlite3.Connection:
    """Open and initialise the database, exiting with status 1 on failure."""
    conn = None
    try:
        conn = get_connection()
        init_db(conn)
    except ScrapeError as exc:
        if conn is not None:
            conn.close()
        typer.echo(f"[{command}] Failed: {exc.stage}: {exc}", err=True)
        raise typer.Exit(1)
    return conn


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    _open_db("db init").close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Scrape / update commands
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: Optional[str] = typer.Option(None, help="Page to scrape (defaults to $URL)."),
) -> None:
    """Fetch the page and print the extracted facts without storing them."""
    target = url or settings.scrape_url
    typer.echo(f"[scrape] Fetching {target!r} ...")
    try:
        raw = fetch_page(target)
        facts = extract_facts(raw.html)
    except ScrapeError as exc:
        typer.echo(f"[scrape] Failed at {exc.stage} stage: {exc}", err=True)
        raise typer.Exit(1)

    typer.echo(f"[scrape] HTTP {raw.status_code} - {len(facts)} facts")
    if facts:
        typer.echo(f"[scrape] Quote  : {facts[0].quote}")
    for fact in facts:
        typer.echo(f"  #{fact.sequence_number}  {_format_figure(fact.figure):>10}  {fact.description}")


@app.command("update")
def update(
    url: Optional[str] = typer.Option(None, help="Page to scrape (defaults to $URL)."),
) -> None:
    """Run the full pipeline once and store new rows."""
    conn = _open_db("update")
    try:
        result = PipelineRunner(conn, url=url or settings.scrape_url).run_once()
    finally:
        conn.close()

    if not result.ok:
        typer.echo(f"[update] Failed: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo(
        f"[update] {result.extracted} extracted, {result.inserted} inserted, "
        f"{result.sentinels} non-numeric"
    )


# ---------------------------------------------------------------------------
# Query commands
# ---------------------------------------------------------------------------
@app.command("prices")
def prices(
    limit: int = typer.Option(LATEST_LIMIT, help="Number of rows to show."),
) -> None:
    """Print the most recently stored prices, newest first."""
    conn = _open_db("prices")
    try:
        records = latest_prices(conn, limit=limit)
    finally:
        conn.close()

    if not records:
        typer.echo("[prices] No prices stored yet.")
        return
    for r in records:
        typer.echo(f"  {r.id:>6}  #{r.order_id}  {_format_figure(r.figure):>10}  {r.description}")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address."),
    port: Optional[int] = typer.Option(None, help="Port (defaults to $PORT)."),
) -> None:
    """Run the HTTP API and the daily scheduler."""
    import uvicorn

    uvicorn.run("pricefeed.api.app:app", host=host, port=port or settings.port)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
