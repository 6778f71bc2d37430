import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    supabase_url: str = _require_env("SUPABASE_URL")
    supabase_service_role_key: str = _require_env("SUPABASE_SERVICE_ROLE_KEY")
    campus_timezone: str = os.getenv("CAMPUS_TIMEZONE", "Asia/Jakarta")
    payments_api_base_url: str = os.getenv(
        "PAYMENTS_API_BASE_URL", "https://beegrub-payments-api.vercel.app"
    )
    payments_api_timeout_seconds: float = float(
        os.getenv("PAYMENTS_API_TIMEOUT_SECONDS", "10")
    )
    role_lookup_timeout_seconds: float = float(
        os.getenv("ROLE_LOOKUP_TIMEOUT_SECONDS", "5")
    )
    orphan_sweep_interval_seconds: int = int(
        os.getenv("ORPHAN_SWEEP_INTERVAL_SECONDS", "300")
    )
    orphan_order_grace_seconds: int = int(
        os.getenv("ORPHAN_ORDER_GRACE_SECONDS", "600")
    )
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )


settings = Settings()
