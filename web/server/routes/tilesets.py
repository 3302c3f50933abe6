from __future__ import annotations

import logging
from collections import defaultdict
from typing import Mapping

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from zarrvec.fetchers import ZarrMultivecDataFetcher

logger = logging.getLogger(__name__)


def build_fetcher_index(datasets: Mapping[str, str]) -> dict[str, ZarrMultivecDataFetcher]:
    fetchers: dict[str, ZarrMultivecDataFetcher] = {}

    for uid, url in datasets.items():
        try:
            fetcher = ZarrMultivecDataFetcher({"type": "zarr-multivec", "url": url})
        except ValueError as exc:
            logger.warning("Skipping dataset %s (%s): %s", uid, url, exc)
            continue
        fetchers[uid] = fetcher

    return fetchers


def _group_tile_ids(tile_ids: list[str]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    for tile_id in tile_ids:
        uid, sep, position = tile_id.partition(".")
        if not sep:
            logger.warning("Ignoring tile id without tileset uid: %r", tile_id)
            continue
        grouped[uid].append(position)
    return grouped


def create_tilesets_router(fetchers: dict[str, ZarrMultivecDataFetcher]) -> APIRouter:
    router = APIRouter()

    @router.get("/api/v1/tilesets/")
    def list_tilesets() -> JSONResponse:
        response = [
            {
                "uuid": uid,
                "datatype": "multivec",
                "filetype": "zarr-multivec",
                "url": str(fetcher.data_config.get("url", "")),
            }
            for uid, fetcher in fetchers.items()
        ]
        return JSONResponse(
            content={"count": len(response), "results": response},
            headers={"Cache-Control": "public, max-age=60"},
        )

    @router.get("/api/v1/tileset_info/")
    async def get_tileset_info(d: list[str] = Query(default=[])) -> JSONResponse:
        content = {}
        for uid in d:
            fetcher = fetchers.get(uid)
            if fetcher is None:
                content[uid] = {"error": f"No such tileset with uid: {uid}"}
                continue
            content[uid] = await fetcher.tileset_info()
        return JSONResponse(content=content)

    @router.get("/api/v1/tiles/")
    async def get_tiles(d: list[str] = Query(default=[])) -> JSONResponse:
        content = {}
        for uid, positions in _group_tile_ids(d).items():
            fetcher = fetchers.get(uid)
            if fetcher is None:
                logger.warning("Tiles requested for unknown tileset %s", uid)
                continue
            tiles = await fetcher.fetch_tiles(positions)
            for position, tile in tiles.items():
                tile_id = f"{uid}.{position}"
                content[tile_id] = {**tile.to_dict(), "tilePositionId": tile_id}
        return JSONResponse(content=content)

    return router
