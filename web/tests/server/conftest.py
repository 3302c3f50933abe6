from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from _multivec import write_multivec
from web.server.config import ServerConfig
from web.server.main import create_app


@pytest.fixture()
def multivec_path(tmp_path: Path) -> Path:
    path = tmp_path / "sample.zarr"
    write_multivec(str(path))
    return path


@pytest.fixture()
def app(multivec_path: Path, tmp_path: Path):
    missing = tmp_path / "missing.zarr"
    missing.mkdir()
    return create_app(
        ServerConfig(
            datasets={
                "vec": str(multivec_path),
                "empty": str(missing),
                "bad": str(tmp_path / "notes.txt"),
            }
        )
    )


@pytest.fixture()
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client
