"""Settings for the finance tracker.

Every value can be overridden through a ``FINANCE_TRACKER_*`` environment
variable; defaults keep all data under ``./data``.
"""
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    store_path: Path
    log_level: str
    currency: str
    recent_count: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = Path(os.getenv("FINANCE_TRACKER_DATA_DIR", "./data")).resolve()
    store_path = Path(os.getenv("FINANCE_TRACKER_STORE", data_dir / "store.json")).resolve()
    return Settings(
        data_dir=data_dir,
        store_path=store_path,
        log_level=os.getenv("FINANCE_TRACKER_LOG_LEVEL", "INFO").upper(),
        currency=os.getenv("FINANCE_TRACKER_CURRENCY", "USD"),
        recent_count=int(os.getenv("FINANCE_TRACKER_RECENT_COUNT", "5")),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
