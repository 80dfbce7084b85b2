"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .csv_codec import DEFAULT_CSV_PATH
from .storage import DEFAULT_DB_PATH


@dataclass(frozen=True)
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    csv_path: Path = DEFAULT_CSV_PATH
    log_level: str = "INFO"
    env: str = "prod"
    allowed_origins: List[str] = field(default_factory=list)

    @property
    def is_dev(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("EXPENSE_TRACKER_ALLOWED_ORIGINS") or ""
        return cls(
            db_path=Path(env.get("EXPENSE_TRACKER_DB") or DEFAULT_DB_PATH),
            csv_path=Path(env.get("EXPENSE_TRACKER_CSV") or DEFAULT_CSV_PATH),
            log_level=(env.get("EXPENSE_TRACKER_LOG_LEVEL") or "INFO").upper(),
            env=(env.get("EXPENSE_TRACKER_ENV") or "prod").lower(),
            allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        )
