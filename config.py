import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo


class Settings:
    def __init__(
        self,
        database_url: str,
        storage_backend: str,
        timezone: str,
    ) -> None:
        self.database_url = database_url
        self.storage_backend = storage_backend
        self.timezone = timezone


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("BUDGET_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "budget.db"
    database_url = os.getenv("BUDGET_DATABASE_URL", f"sqlite:///{default_db}")
    storage_backend = os.getenv("BUDGET_STORAGE_BACKEND", "sql").strip().lower()
    timezone = os.getenv("BUDGET_TIMEZONE", "UTC")
    return Settings(
        database_url=database_url,
        storage_backend=storage_backend,
        timezone=timezone,
    )


def local_now() -> datetime:
    # Stored naive, as wall-clock time in the configured zone.
    return datetime.now(ZoneInfo(get_settings().timezone)).replace(tzinfo=None)
