"""zarrvec - tiles for multi-sample genomic signals stored as zarr."""

from zarrvec.fetchers import ZarrMultivecDataFetcher, get_data_fetcher

__version__ = "0.1.0"

__all__ = ["ZarrMultivecDataFetcher", "get_data_fetcher", "__version__"]
