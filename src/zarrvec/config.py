"""Centralized configuration for zarrvec.

All tunable parameters are defined here with sensible defaults.
Values can be overridden via environment variables.

Environment Variables:
    ZARRVEC_BIN_CAPACITY: Default bins per tile for chunk planning (default: 256)
    ZARRVEC_TILE_TIMEOUT_SECONDS: Per-tile fetch timeout, 0 disables (default: 30)
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def _get_env_int(name: str, default: int) -> int:
    """Get an integer from environment variable with fallback."""
    value = os.environ.get(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            logger.warning(
                "Invalid integer for %s: %r, using default %d", name, value, default
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Get a float from environment variable with fallback."""
    value = os.environ.get(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            logger.warning(
                "Invalid number for %s: %r, using default %.1f", name, value, default
            )
    return default


# =============================================================================
# Store Layout
# =============================================================================

#: Key of the tileset metadata document at the root of the store
METADATA_KEY: str = ".zattrs"

#: Array path for one chromosome at one resolution
CHUNK_PATH_TEMPLATE: str = "chromosomes/{chrom}/{resolution}"

#: Data fetcher type handled by this package
ZARR_MULTIVEC_TYPE: str = "zarr-multivec"


# =============================================================================
# Tile Configuration
# =============================================================================

#: Default tile size in bins
DEFAULT_TILE_SIZE: int = 256

#: Maximum bins assembled into one tile
BIN_CAPACITY: int = _get_env_int("ZARRVEC_BIN_CAPACITY", DEFAULT_TILE_SIZE)

#: Seconds before a single tile's fetch is abandoned (0 = wait forever)
TILE_TIMEOUT_SECONDS: float = _get_env_float("ZARRVEC_TILE_TIMEOUT_SECONDS", 30.0)


# =============================================================================
# Validation
# =============================================================================


def _validate_config() -> None:
    """Validate configuration values and log warnings for out-of-range settings."""
    global BIN_CAPACITY, TILE_TIMEOUT_SECONDS

    if BIN_CAPACITY < 1:
        logger.warning("BIN_CAPACITY=%d is too low, clamping to 1", BIN_CAPACITY)
        BIN_CAPACITY = 1

    if TILE_TIMEOUT_SECONDS < 0:
        logger.warning(
            "TILE_TIMEOUT_SECONDS=%.1f is negative, disabling the timeout",
            TILE_TIMEOUT_SECONDS,
        )
        TILE_TIMEOUT_SECONDS = 0.0


_validate_config()
