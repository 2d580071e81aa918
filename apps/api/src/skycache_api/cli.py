"""Command-line access to the search pipeline and cache maintenance."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

import click

from skycache_api import bootstrap
from skycache_api.config import ApiSettings
from skycache_api.errors import SearchError
from skycache_core.schemas import SearchRequest, SortSpec

if TYPE_CHECKING:
    from skycache_core.schemas import CabinClass, FlightRecord, SearchResult

logger = logging.getLogger(__name__)


def _print_records(title: str, records: list[FlightRecord], cabin: CabinClass) -> None:
    if not records:
        click.echo(f"{title}: no flights found.")
        return
    click.echo(f"\n{title}: {len(records)} flight(s)\n")
    for i, r in enumerate(records, 1):
        price = r.price_for(cabin)
        price_str = f"{price:.2f}" if price is not None else "n/a"
        click.echo(
            f"  {i}. {r.flight_number} | {r.origin} → {r.destination} | "
            f"{r.departure_time:%H:%M} - {r.arrival_time:%H:%M} | "
            f"{r.duration_minutes}min | {cabin.label} {price_str} | "
            f"{r.seats_for(cabin)} seat(s)"
        )


@click.group()
@click.option("--log-level", default=None, help="Override SKYCACHE_LOG_LEVEL")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """SkyCache CLI."""
    settings = ApiSettings()
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(levelname)s: %(message)s",
    )
    ctx.obj = settings


@cli.command("search")
@click.argument("origin")
@click.argument("destination")
@click.argument("departure_date")
@click.option("--return-date", default=None, help="ISO date of the return leg")
@click.option("--cabin", default="economy", help="Cabin class")
@click.option("--adults", default=1, show_default=True, type=int)
@click.option("--children", default=0, show_default=True, type=int)
@click.option("--infants", default=0, show_default=True, type=int)
@click.option(
    "--sort",
    "sort_field",
    default="departure_time",
    type=click.Choice(["price", "duration", "departure_time", "arrival_time"]),
)
@click.option("--desc", is_flag=True, help="Sort descending")
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.pass_obj
def search(
    settings: ApiSettings,
    origin: str,
    destination: str,
    departure_date: str,
    return_date: str | None,
    cabin: str,
    adults: int,
    children: int,
    infants: int,
    sort_field: str,
    desc: bool,
    json_output: bool,
) -> None:
    """Search flights, answering from the local cache when possible."""
    params = {
        "origin": origin,
        "destination": destination,
        "departure_date": departure_date,
        "return_date": return_date,
        "cabin_class": cabin,
        "passengers": {"adults": adults, "children": children, "infants": infants},
    }
    sort = SortSpec(field=sort_field, order="desc" if desc else "asc")

    async def _run() -> SearchResult:
        async with bootstrap.build_orchestrator(settings, with_sweeper=False) as orch:
            return await orch.search(params, sort=sort)

    try:
        result = asyncio.run(_run())
    except SearchError as exc:
        raise click.ClickException(f"{exc.code}: {exc}") from exc

    if json_output:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return
    request = SearchRequest.model_validate(params)
    click.echo(f"Key: {result.key} | {'cached' if result.cached else 'fetched'}")
    _print_records("Outbound", result.outbound, request.cabin_class)
    if request.is_round_trip:
        _print_records("Return", result.return_flights, request.cabin_class)


@cli.command("evict")
@click.pass_obj
def evict(settings: ApiSettings) -> None:
    """Delete expired cache entries."""

    async def _run() -> int:
        store = bootstrap.build_store(settings)
        await store.open()
        try:
            return await store.evict_expired()
        finally:
            await store.close()

    try:
        evicted = asyncio.run(_run())
    except SearchError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Evicted {evicted} expired entr{'y' if evicted == 1 else 'ies'}.")


@cli.command("clear")
@click.confirmation_option(prompt="Delete every cached search?")
@click.pass_obj
def clear(settings: ApiSettings) -> None:
    """Delete every cache entry."""

    async def _run() -> int:
        store = bootstrap.build_store(settings)
        await store.open()
        try:
            return await store.clear()
        finally:
            await store.close()

    try:
        cleared = asyncio.run(_run())
    except SearchError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Cleared {cleared} entr{'y' if cleared == 1 else 'ies'}.")


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True)
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "skycache_api.main:app", host=host, port=port, reload=reload, log_level="info"
    )


if __name__ == "__main__":
    cli()
