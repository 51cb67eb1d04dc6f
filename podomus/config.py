from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# SQLite file in the project root (next to streamlit_app.py)
DB_PATH = Path(__file__).resolve().parents[1] / "podomus.sqlite"


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    server_port: int
    client_url: str
    api_base: str
    log_level: str
    log_json: bool
    sql_echo: bool


def get_settings() -> Settings:
    """Read settings from the environment (re-evaluated on each call)."""
    port = int(os.getenv("SERVER_PORT", "2022"))
    return Settings(
        database_url=os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}"),
        server_port=port,
        client_url=os.getenv("CLIENT_URL", "http://localhost:3000"),
        api_base=os.getenv("API_BASE", f"http://127.0.0.1:{port}"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_json=_env_flag("LOG_JSON"),
        sql_echo=_env_flag("SQL_ECHO"),
    )
