import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_echo: bool
    api_url: str
    log_level: str
    stale_time_seconds: float


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    # sqlite by default; production sets postgresql+asyncpg://...
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./database.db"),
        database_echo=_flag(os.getenv("DATABASE_ECHO", "false")),
        api_url=os.getenv("API_URL", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        stale_time_seconds=float(os.getenv("STALE_TIME_SECONDS", "600")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
