import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")

DEFAULT_TTN_SERVER = "https://eu1.cloud.thethings.network"


@dataclass
class DownlinkSettings:
    ttn_server: str
    api_key: str
    application_id: str
    device_id: str
    f_port: int
    priority: str
    insert_mode: str
    confirmed: bool


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def load_downlink_settings() -> DownlinkSettings:
    """Load the Things Stack target and downlink defaults from the environment."""

    return DownlinkSettings(
        ttn_server=os.getenv("TTN_SERVER", DEFAULT_TTN_SERVER).strip(),
        api_key=os.getenv("TTN_API_KEY", "").strip(),
        application_id=os.getenv("TTN_APPLICATION_ID", "").strip(),
        device_id=os.getenv("TTN_DEVICE_ID", "").strip(),
        f_port=_env_int("DOWNLINK_F_PORT", 1),
        priority=os.getenv("DOWNLINK_PRIORITY", "NORMAL").strip().upper(),
        insert_mode=os.getenv("DOWNLINK_INSERT_MODE", "replace").strip().lower(),
        confirmed=_env_bool("DOWNLINK_CONFIRMED", False),
    )


def cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    return [o.strip() for o in raw.split(",") if o.strip()]
