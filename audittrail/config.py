"""Runtime settings, read from the environment (and an optional .env file)."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

REPO = Path(__file__).resolve().parents[1]

STORE_BACKENDS = ("memory", "file", "redis")


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    store_backend: str = "memory"
    capacity: int = 1000
    log_file: Path = REPO / "data" / "audit-logs.json"
    redis_url: str = "redis://localhost:6379/0"
    redis_key: str = "audit:events"
    top_pages_limit: int = 10
    require_event_type: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    export_dir: Path = REPO / "data" / "exports"
    seed_url: str = "http://127.0.0.1:8000/api/audit"

    @classmethod
    def from_env(cls, env_file: str | os.PathLike | None = None) -> "Settings":
        load_dotenv(dotenv_path=env_file or REPO / ".env")
        env = os.environ
        origins = [o.strip() for o in env.get("AUDIT_CORS_ORIGINS", "*").split(",") if o.strip()]
        return cls(
            store_backend=env.get("AUDIT_STORE", "memory").strip().lower(),
            capacity=int(env.get("AUDIT_CAPACITY", "1000")),
            log_file=Path(env.get("AUDIT_LOG_FILE", str(REPO / "data" / "audit-logs.json"))),
            redis_url=env.get("AUDIT_REDIS_URL", "redis://localhost:6379/0"),
            redis_key=env.get("AUDIT_REDIS_KEY", "audit:events"),
            top_pages_limit=int(env.get("AUDIT_TOP_PAGES", "10")),
            require_event_type=_flag(env.get("AUDIT_REQUIRE_EVENT_TYPE", "false")),
            cors_origins=origins or ["*"],
            log_level=env.get("AUDIT_LOG_LEVEL", "INFO").upper(),
            export_dir=Path(env.get("AUDIT_EXPORT_DIR", str(REPO / "data" / "exports"))),
            seed_url=env.get("AUDIT_SEED_URL", "http://127.0.0.1:8000/api/audit"),
        )
