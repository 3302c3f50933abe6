"""Test fixtures for zarrvec tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from _multivec import InstrumentedStore, write_multivec


@pytest.fixture
def multivec_store() -> InstrumentedStore:
    """In-memory multivec with three chromosomes and three resolutions."""
    store = InstrumentedStore()
    write_multivec(store)
    store.reads.clear()
    return store


@pytest.fixture
def multivec_dir(tmp_path: Path) -> Path:
    """The same multivec written to a local .zarr directory."""
    path = tmp_path / "sample.zarr"
    write_multivec(str(path))
    return path
