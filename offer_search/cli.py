from __future__ import annotations

import asyncio
import logging
from typing import Optional

import click

from .config import Settings, get_settings
from .db import SqliteStore, migrate
from .offer_client import OfferSearchClient
from .orchestrator import Phase, Presenter, SearchOrchestrator, SearchState
from .presenter import render_state
from .result_cache import ResultCache

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        format=LOG_FORMAT,
    )


def build_orchestrator(
    settings: Settings, presenter: Optional[Presenter] = None
) -> SearchOrchestrator:
    """Wire the sqlite cache and HTTP client configured in *settings*."""
    cache = ResultCache(SqliteStore(settings.cache_db))
    client = OfferSearchClient(
        settings.offer_api_url, timeout=settings.request_timeout_s
    )
    return SearchOrchestrator(cache, client, presenter=presenter)


def echo_state(state: SearchState) -> None:
    failed = state.phase in (Phase.INVALID, Phase.ERROR)
    click.echo(render_state(state), err=failed)


def _in_catalog(kind: str):
    def check(ctx: click.Context, param: click.Parameter, value: Optional[str]):
        if value is None:
            return value
        # Built per call so the catalog follows the current settings.
        choice = click.Choice(getattr(get_settings(), kind), case_sensitive=False)
        return choice.convert(value.strip(), param, ctx)

    return check


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every state change")
def cli(verbose: bool) -> None:
    """Round-trip flight offer search."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


@cli.command()
@click.option("--departure-date", required=True, help="Departure date (YYYY-MM-DD)")
@click.option("--return-date", required=True, help="Return date (YYYY-MM-DD)")
@click.option("--origin", required=True, callback=_in_catalog("airports"))
@click.option("--destination", required=True, callback=_in_catalog("airports"))
@click.option("--adults", default="1", show_default=True, help="Number of passengers")
@click.option("--currency", default="USD", show_default=True, callback=_in_catalog("currencies"))
@click.pass_context
def search(
    ctx: click.Context,
    departure_date: str,
    return_date: str,
    origin: str,
    destination: str,
    adults: str,
    currency: str,
) -> None:
    """Search offers, serving repeated searches from the local cache."""
    orchestrator = build_orchestrator(get_settings(), presenter=echo_state)
    fields = {
        "departureDate": departure_date,
        "returnDate": return_date,
        "originLocationCode": origin,
        "destinationLocationCode": destination,
        "adults": adults,
        "currencyCode": currency,
    }
    state = asyncio.run(orchestrator.submit(fields))
    logger.debug("Search finished in phase %s", state.phase.value)
    if state.phase is Phase.INVALID:
        ctx.exit(2)
    if state.phase is Phase.ERROR:
        ctx.exit(1)


@cli.command("init-db")
def init_db() -> None:
    """Create or upgrade the local result cache."""
    settings = get_settings()
    migrate(db_path=settings.cache_db)
    click.echo(f"Cache ready at {settings.cache_db}")


if __name__ == "__main__":
    cli()
