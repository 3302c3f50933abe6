"""Data fetchers and the factory that selects one for a data config."""

from __future__ import annotations

from typing import Any

from zarrvec.config import ZARR_MULTIVEC_TYPE

from .multivec import ZarrMultivecDataFetcher, plan_tile


def get_data_fetcher(data_config: dict[str, Any]) -> ZarrMultivecDataFetcher:
    """Create the data fetcher for ``data_config["type"]``.

    Raises:
        ValueError: For data types other than ``zarr-multivec``.
    """
    data_type = data_config.get("type")
    if data_type == ZARR_MULTIVEC_TYPE:
        return ZarrMultivecDataFetcher(data_config)
    raise ValueError(f"Unsupported data fetcher type: {data_type!r}")


__all__ = ["ZarrMultivecDataFetcher", "get_data_fetcher", "plan_tile"]
