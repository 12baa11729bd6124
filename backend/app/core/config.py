"""
Runtime settings for the ride ledger backend.

Values come from the process environment; a ``.env`` file in the project
root is loaded first so local development does not need exported variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[3]


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    remote_endpoint: str = ""
    remote_key: str = ""
    remote_collection: str = "transacoes"
    currency_symbol: str = "R$"
    environment: str = "development"

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        load_dotenv(env_file or PROJECT_ROOT / ".env")
        data_dir = os.environ.get("LEDGER_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else PROJECT_ROOT / "data",
            remote_endpoint=os.environ.get("LEDGER_REMOTE_ENDPOINT", "").strip(),
            remote_key=os.environ.get("LEDGER_REMOTE_KEY", "").strip(),
            remote_collection=os.environ.get("LEDGER_REMOTE_COLLECTION", "transacoes"),
            currency_symbol=os.environ.get("LEDGER_CURRENCY_SYMBOL", "R$"),
            environment=os.environ.get("ENVIRONMENT", "development"),
        )
