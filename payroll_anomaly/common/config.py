from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    db_url: str
    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("PAYROLL_ANOMALY_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    db_url = os.getenv("PAYROLL_ANOMALY_DB_URL", "sqlite:///payroll_anomaly.db")
    log_level = os.getenv("PAYROLL_ANOMALY_LOG_LEVEL", "INFO").upper()

    return Settings(
        db_url=db_url,
        log_level=log_level,
    )
