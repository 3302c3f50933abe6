from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerConfig:
    datasets: dict[str, str] = field(default_factory=dict)
    host: str = "0.0.0.0"
    port: int = 8000


def _split_datasets(value: str) -> dict[str, str]:
    datasets: dict[str, str] = {}
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        uid, sep, url = part.partition("=")
        uid, url = uid.strip(), url.strip()
        if not sep or not uid or not url or "." in uid:
            logger.warning("Ignoring invalid dataset entry %r (expected uid=url)", part)
            continue
        datasets[uid] = url
    return datasets


def load_config() -> ServerConfig:
    datasets = _split_datasets(os.getenv("ZARRVEC_WEB_DATASETS", ""))
    host = os.getenv("ZARRVEC_WEB_HOST", "0.0.0.0")
    port_str = os.getenv("ZARRVEC_WEB_PORT", "8000")
    try:
        port = int(port_str)
    except ValueError:
        port = 8000
    return ServerConfig(datasets=datasets, host=host, port=port)
