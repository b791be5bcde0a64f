"""Command-line interface for the risk zones service."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
import structlog
import yaml

from riskzones.config import get_config, reload_config
from riskzones.db.client import Database
from riskzones.db.collection import initialize
from riskzones.risk.store import RiskPointStore, to_record
from riskzones.strings import get_strings

# Configure structlog for CLI output
import logging

logging.basicConfig(format="%(message)s", level=logging.INFO)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


def read_batch(path: Path) -> list[dict[str, Any]]:
    """Read a batch of risk point records from a JSON or YAML file.

    The file holds either a list of records or a mapping with a ``points``
    list.
    """
    with open(path) as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if isinstance(data, dict):
        data = data.get("points", [])
    if not isinstance(data, list):
        raise click.BadParameter(f"{path} does not contain a list of points")
    return data


@click.group()
@click.option("--config-dir", type=click.Path(exists=True, path_type=Path), help="Configuration directory")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """High-risk point store and proximity queries."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if config_dir:
        reload_config(config_dir)

    if verbose:
        config = get_config()
        click.echo(f"Using {config.mongo.database}.{config.mongo.collection}")


@cli.command()
def init() -> None:
    """Create the risk point collection and its 2dsphere index."""

    async def _init() -> None:
        async with Database() as database:
            await initialize(database)

    try:
        asyncio.run(_init())
        click.echo(get_strings(get_config().locale).collection_ready)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, help="Remove existing points before loading (in one transaction)")
def load(batch_file: Path, replace: bool) -> None:
    """Load a batch of risk points from a JSON or YAML file."""

    async def _load(records: list[dict[str, Any]]) -> None:
        async with Database() as database:
            store = RiskPointStore.from_database(database)
            if replace:
                async with database.start_session() as session:
                    await session.with_transaction(
                        lambda s: store.add_batch(records, preserve=False, session=s)
                    )
            else:
                await store.add_batch(records)

    try:
        records = read_batch(batch_file)
        asyncio.run(_load(records))
        click.echo(get_strings(get_config().locale).points_loaded.format(count=len(records)))
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def truncate(yes: bool) -> None:
    """Remove every risk point."""
    if not yes:
        click.confirm("Remove all risk points?", abort=True)

    async def _truncate() -> None:
        async with Database() as database:
            await RiskPointStore.from_database(database).truncate()

    try:
        asyncio.run(_truncate())
        click.echo(get_strings(get_config().locale).points_truncated)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("lon", type=float)
@click.argument("lat", type=float)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def near(lon: float, lat: float, as_json: bool) -> None:
    """Show the risk point whose zone contains LON LAT."""

    async def _near() -> dict[str, Any] | None:
        async with Database() as database:
            return await RiskPointStore.from_database(database).get_near_point([lon, lat])

    try:
        document = asyncio.run(_near())
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        point = None
        if document is not None:
            point = to_record(document)
            point["distance"] = document["distance"]
        click.echo(json.dumps({"point": point}))
        return

    strings = get_strings(get_config().locale)
    if document is None:
        click.echo(strings.no_risk_point)
        return

    click.echo(f"{strings.inside_risk_point}: {document['title']}")
    click.echo(f"  Risk: {document['risk']}")
    click.echo(f"  Radius: {document['radius']} m")
    click.echo(f"  Distance: {document['distance']:.1f} m")


@cli.command()
@click.option("--grv", nargs=2, type=float, required=True, help="Gravity point LON LAT")
@click.option("--delta", type=float, required=True, help="Search radius in degrees")
@click.option("--loc", nargs=2, type=float, default=None, help="Reference location LON LAT for distances")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def nearby(grv: tuple[float, float], delta: float, loc: tuple[float, float] | None, as_json: bool) -> None:
    """List risk points around a gravity point."""
    args: dict[str, Any] = {"grvpoint": list(grv), "delta": delta}
    if loc:
        args["locpoint"] = list(loc)

    async def _nearby():
        async with Database() as database:
            return await RiskPointStore.from_database(database).get_near_points(args)

    try:
        points = asyncio.run(_nearby())
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in points], indent=2))
        return

    click.echo(f"Found {len(points)} risk points:")
    for p in points:
        distance = f" | {p.distance} km" if p.distance is not None else ""
        click.echo(f"  {p.title} | risk {p.risk} | {p.radius} m | {p.time}{distance}")


@cli.command()
def health() -> None:
    """Check database connectivity and report the number of risk points."""

    async def _health() -> int:
        async with Database() as database:
            await database.ping()
            return await RiskPointStore.from_database(database).count()

    try:
        count = asyncio.run(_health())
        click.echo("MongoDB: connected")
        click.echo(f"Risk points: {count}")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
