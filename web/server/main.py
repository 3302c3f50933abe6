from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from .config import ServerConfig, load_config
from .routes.tilesets import build_fetcher_index, create_tilesets_router

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig | None = None) -> FastAPI:
    config = config or load_config()
    fetchers = build_fetcher_index(config.datasets)
    if not fetchers:
        logger.warning("No datasets configured. Set ZARRVEC_WEB_DATASETS=uid=url,...")
    else:
        logger.info("Serving %d tileset(s): %s", len(fetchers), ", ".join(fetchers))

    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.state.config = config
    app.state.fetchers = fetchers

    app.include_router(create_tilesets_router(fetchers))

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    config = load_config()
    uvicorn.run(
        "web.server.main:app",
        host=config.host,
        port=config.port,
    )


if __name__ == "__main__":
    main()
