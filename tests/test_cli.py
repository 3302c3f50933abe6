"""Tests for the zarrvec command line interface."""

from __future__ import annotations

import base64
import json

import numpy as np
import pytest
from click.testing import CliRunner

from zarrvec.__main__ import cli

from _multivec import expected_rows


def _invoke(*args: str):
    return CliRunner().invoke(cli, list(args))


class TestInfoCommand:
    def test_prints_tileset_info(self, multivec_dir):
        result = _invoke("info", str(multivec_dir))

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["tile_size"] == 4
        assert data["chromSizes"][0] == ["chr1", 1000]

    def test_missing_metadata_exits_nonzero(self, tmp_path):
        empty = tmp_path / "empty.zarr"
        empty.mkdir()

        result = _invoke("info", str(empty))

        assert result.exit_code == 1
        assert "error" in json.loads(result.output)

    def test_bad_storage_option(self, multivec_dir):
        result = _invoke("info", str(multivec_dir), "-o", "novalue")
        assert result.exit_code != 0
        assert "key=value" in result.output


class TestTilesCommand:
    def test_prints_dense_tiles(self, multivec_dir):
        result = _invoke("tiles", str(multivec_dir), "1.2")

        assert result.exit_code == 0, result.output
        tile = json.loads(result.output)["1.2"]
        dense = np.frombuffer(base64.b64decode(tile["dense"]), dtype="<f4")
        np.testing.assert_array_equal(dense, expected_rows([(0, 8, 10), (1, 0, 2)]).ravel())
        assert tile["shape"] == [3, 4]

    def test_summary_omits_dense(self, multivec_dir):
        result = _invoke("tiles", str(multivec_dir), "0.0", "--summary")

        assert result.exit_code == 0, result.output
        tile = json.loads(result.output)["0.0"]
        assert "dense" not in tile
        assert tile["max_value"] == 220_000.0

    def test_failed_tile_exits_nonzero(self, multivec_dir):
        result = _invoke("tiles", str(multivec_dir), "1.0", "1.9")

        assert result.exit_code == 1
        assert "1 tile(s) failed" in result.output

    def test_non_zarr_url_reported(self, tmp_path):
        result = _invoke("tiles", str(tmp_path / "data.h5"), "0.0")
        assert result.exit_code == 1
        assert "Error: Expected a .zarr store" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_info_non_zarr_url_reported(self, tmp_path):
        result = _invoke("info", str(tmp_path / "data.h5"))
        assert result.exit_code == 1
        assert "Expected a .zarr store" in result.output


class TestServeCommand:
    @pytest.fixture
    def uvicorn_calls(self, monkeypatch):
        import uvicorn

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
        return calls

    def test_runs_web_app(self, uvicorn_calls, monkeypatch):
        monkeypatch.delenv("ZARRVEC_WEB_HOST", raising=False)
        monkeypatch.delenv("ZARRVEC_WEB_PORT", raising=False)

        result = _invoke("serve")

        assert result.exit_code == 0, result.output
        assert uvicorn_calls == [
            ("web.server.main:app", {"host": "0.0.0.0", "port": 8000, "app_dir": "."})
        ]

    def test_host_and_port_from_environment(self, uvicorn_calls, monkeypatch):
        monkeypatch.setenv("ZARRVEC_WEB_HOST", "127.0.0.1")
        monkeypatch.setenv("ZARRVEC_WEB_PORT", "9001")

        result = _invoke("serve")

        assert result.exit_code == 0, result.output
        _app, kwargs = uvicorn_calls[0]
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9001

    def test_options_override_environment(self, uvicorn_calls, monkeypatch):
        monkeypatch.setenv("ZARRVEC_WEB_PORT", "9001")
        result = _invoke("serve", "--port", "8123")
        assert result.exit_code == 0, result.output
        assert uvicorn_calls[0][1]["port"] == 8123
