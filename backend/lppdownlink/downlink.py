"""Downlink preparation for The Things Stack application server.

Encodes the entries, checks the resulting payload and builds the
``/api/v3/as/applications/{app}/devices/{device}/down/{push|replace}`` request.
The request is returned unsent as an :class:`httpx.Request`.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence
from urllib.parse import quote

import httpx

from .config import DownlinkSettings
from .lpp_encode import EncodeResult, encode
from .lpp_types import SENSOR_TYPES, SensorTypeDescriptor

logger = logging.getLogger(__name__)

USER_AGENT = "lppdownlink/0.1.0"

F_PORT_MIN = 1
F_PORT_MAX = 223

# The device only applies settings carrying this password entry
PASSWORD_CHANNEL = 100
PASSWORD_TYPE = "addPower"

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_PASSWORD_RE = re.compile(r"^[0-9]{1,4}$")


class Priority(str, Enum):
    LOWEST = "LOWEST"
    LOW = "LOW"
    BELOW_NORMAL = "BELOW_NORMAL"
    NORMAL = "NORMAL"
    ABOVE_NORMAL = "ABOVE_NORMAL"
    HIGH = "HIGH"
    HIGHEST = "HIGHEST"


class InsertMode(str, Enum):
    PUSH = "push"
    REPLACE = "replace"


class DownlinkError(Exception):
    """Base error for a downlink that cannot be prepared."""


class MissingSetting(DownlinkError):
    """Raised when a required target or password setting is empty."""


class InvalidSetting(DownlinkError):
    """Raised when a setting is present but unusable."""


class EmptyPayload(DownlinkError):
    """Raised when no entry could be encoded."""


class InvalidPayload(DownlinkError):
    """Raised when the payload is not hexadecimal."""


class IncompletePayload(DownlinkError):
    """Raised when the payload has an odd number of hex digits."""


def is_valid_hex_payload(payload: str) -> bool:
    return isinstance(payload, str) and bool(_HEX_RE.match(payload))


def validate_payload(payload: str) -> None:
    if not payload:
        raise EmptyPayload("Payload is empty!")
    if not is_valid_hex_payload(payload):
        raise InvalidPayload("Payload must be a hex value.")
    if len(payload) % 2 != 0:
        raise IncompletePayload("Payload must be a complete hex value")


def build_envelope(
    payload_hex: str,
    f_port: int = 1,
    confirmed: bool = False,
    priority: Priority | str = Priority.NORMAL,
) -> dict[str, Any]:
    """Wrap *payload_hex* in the JSON body the application server expects."""

    validate_payload(payload_hex)
    if isinstance(f_port, bool) or not isinstance(f_port, int) or not F_PORT_MIN <= f_port <= F_PORT_MAX:
        raise InvalidSetting(f"FPort must be between {F_PORT_MIN} and {F_PORT_MAX}")
    try:
        priority = Priority(priority)
    except ValueError as exc:
        raise InvalidSetting(f"Unknown downlink priority {priority!r}") from exc

    frm_payload = base64.b64encode(bytes.fromhex(payload_hex)).decode("ascii")
    return {
        "downlinks": [
            {
                "frm_payload": frm_payload,
                "f_port": f_port,
                "confirmed": bool(confirmed),
                "priority": priority.value,
            }
        ]
    }


@dataclass(frozen=True)
class DownlinkOptions:
    f_port: int = 1
    confirmed: bool = False
    priority: Priority = Priority.NORMAL
    insert_mode: InsertMode = InsertMode.REPLACE


@dataclass(frozen=True)
class DownlinkTarget:
    server: str
    api_key: str
    application_id: str
    device_id: str

    def check(self) -> None:
        if not (self.server or "").strip():
            raise MissingSetting("TTN server is empty!")
        if not (self.api_key or "").strip():
            raise MissingSetting("API key is empty!")
        if not (self.application_id or "").strip():
            raise MissingSetting("Application name is empty!")
        if not (self.device_id or "").strip():
            raise MissingSetting("End device name is empty!")

    def url(self, insert_mode: InsertMode | str = InsertMode.REPLACE) -> str:
        try:
            mode = InsertMode(insert_mode)
        except ValueError as exc:
            raise InvalidSetting(f"Unknown insert mode {insert_mode!r}") from exc
        base = self.server.strip().rstrip("/")
        app_id = quote(self.application_id.strip(), safe="")
        device_id = quote(self.device_id.strip(), safe="")
        return f"{base}/api/v3/as/applications/{app_id}/devices/{device_id}/down/{mode.value}"

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key.strip()}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }


@dataclass(frozen=True)
class PreparedDownlink:
    url: str
    headers: dict[str, str]
    body: dict[str, Any]
    result: EncodeResult

    @property
    def payload(self) -> str:
        return self.result.payload

    def to_request(self) -> httpx.Request:
        return httpx.Request("POST", self.url, headers=self.headers, json=self.body)


def target_from_settings(settings: DownlinkSettings) -> DownlinkTarget:
    return DownlinkTarget(
        server=settings.ttn_server,
        api_key=settings.api_key,
        application_id=settings.application_id,
        device_id=settings.device_id,
    )


def options_from_settings(settings: DownlinkSettings) -> DownlinkOptions:
    try:
        priority = Priority(settings.priority)
        insert_mode = InsertMode(settings.insert_mode)
    except ValueError as exc:
        raise InvalidSetting(str(exc)) from exc
    return DownlinkOptions(
        f_port=settings.f_port,
        confirmed=settings.confirmed,
        priority=priority,
        insert_mode=insert_mode,
    )


def password_entry(password: str) -> list:
    if password is None or password == "":
        raise MissingSetting("Settings password is empty!")
    if not _PASSWORD_RE.match(str(password)):
        raise InvalidSetting("Settings password must be 1 to 4 digits")
    return [PASSWORD_CHANNEL, PASSWORD_TYPE, int(password)]


def prepare_downlink(
    entries: Iterable[Sequence[Any]],
    target: DownlinkTarget,
    password: str,
    options: DownlinkOptions = DownlinkOptions(),
    registry: Mapping[str, SensorTypeDescriptor] = SENSOR_TYPES,
) -> PreparedDownlink:
    """
    Encode *entries* plus the settings password and build the downlink request.

    Raises a DownlinkError when the target is incomplete, the password is
    missing, or nothing could be encoded. Skipped entries do not raise; they
    are available on ``result.diagnostics``.
    """
    target.check()
    lpp = list(entries)
    lpp.append(password_entry(password))

    result = encode(lpp, registry)
    body = build_envelope(
        result.payload,
        f_port=options.f_port,
        confirmed=options.confirmed,
        priority=options.priority,
    )
    url = target.url(options.insert_mode)
    logger.info(
        "Prepared downlink for %s/%s: %d byte(s), %d skipped entr%s",
        target.application_id,
        target.device_id,
        len(result.payload) // 2,
        len(result.diagnostics),
        "y" if len(result.diagnostics) == 1 else "ies",
    )
    return PreparedDownlink(url=url, headers=target.headers(), body=body, result=result)
