"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:

    data_dir: Path
    order_email: str
    log_level: str
    email_timeout: float

    @staticmethod
    def from_env() -> Settings:
        return Settings(
            data_dir=Path(os.environ.get("PORTAL_DATA_DIR", _DEFAULT_DATA_DIR)),
            order_email=os.environ.get("PORTAL_ORDER_EMAIL", "orders@example.com"),
            log_level=os.environ.get("PORTAL_LOG_LEVEL", "WARNING").upper(),
            email_timeout=float(os.environ.get("PORTAL_EMAIL_TIMEOUT", "10")),
        )
