"""CLI entry point for zarrvec."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from zarrvec.config import ZARR_MULTIVEC_TYPE
from zarrvec.core.types import TileError
from zarrvec.fetchers import ZarrMultivecDataFetcher, get_data_fetcher


def _parse_storage_options(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ``key=value`` pairs into fsspec storage options."""
    options = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected key=value, got {pair!r}")
        options[key] = value
    return options


def _data_config(url: str, storage_option: tuple[str, ...]) -> dict:
    return {
        "type": ZARR_MULTIVEC_TYPE,
        "url": url,
        "storage_options": _parse_storage_options(storage_option),
    }


def _open_fetcher(url: str, storage_option: tuple[str, ...]) -> ZarrMultivecDataFetcher:
    data_config = _data_config(url, storage_option)
    try:
        return get_data_fetcher(data_config)
    except ValueError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def _tile_summary(tile: dict) -> dict:
    return {key: value for key, value in tile.items() if key != "dense"}


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Inspect and fetch tiles from zarr multivec tilesets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("url")
@click.option("--storage-option", "-o", multiple=True, help="fsspec option as key=value")
def info(url: str, storage_option: tuple[str, ...]) -> None:
    """Print the tileset info of the store at URL."""
    fetcher = _open_fetcher(url, storage_option)
    result = asyncio.run(fetcher.tileset_info())
    click.echo(json.dumps(result, indent=2))
    if "error" in result:
        sys.exit(1)


@cli.command()
@click.argument("url")
@click.argument("tile_ids", nargs=-1, required=True)
@click.option("--storage-option", "-o", multiple=True, help="fsspec option as key=value")
@click.option("--summary", is_flag=True, help="Omit the dense data, print shape and extrema only")
def tiles(url: str, tile_ids: tuple[str, ...], storage_option: tuple[str, ...], summary: bool) -> None:
    """Fetch TILE_IDS (zoom.column) from the store at URL and print them as JSON."""
    fetcher = _open_fetcher(url, storage_option)
    results = asyncio.run(fetcher.fetch_tiles(tile_ids))

    output = {}
    for identifier, result in results.items():
        data = result.to_dict()
        output[identifier] = _tile_summary(data) if summary else data
    click.echo(json.dumps(output, indent=2))

    failed = [i for i, r in results.items() if isinstance(r, TileError)]
    if failed:
        click.echo(click.style(f"{len(failed)} tile(s) failed", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option("--host", envvar="ZARRVEC_WEB_HOST", default="0.0.0.0", show_default=True)
@click.option("--port", envvar="ZARRVEC_WEB_PORT", default=8000, type=int, show_default=True)
@click.option("--app-dir", default=".", type=click.Path(exists=True, file_okay=False),
              help="Checkout directory containing the web package")
def serve(host: str, port: int, app_dir: str) -> None:
    """Run the HTTP tile server for the datasets in ZARRVEC_WEB_DATASETS."""
    import uvicorn

    uvicorn.run("web.server.main:app", host=host, port=port, app_dir=app_dir)


def main() -> None:
    """Run the zarrvec command line interface."""
    cli()


if __name__ == "__main__":
    main()
