from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from .commands import CommonSettings, LightIntensitySettings, SunPosition, SwitchingTimes


class RangeOut(BaseModel):
    lo: float
    hi: float
    scale: float
    model_config = ConfigDict(from_attributes=True)


class SensorTypeOut(BaseModel):
    name: str
    code: str
    byte_size: int
    signed: bool
    expected_entry_length: int
    value_range: RangeOut
    altitude_range: Optional[RangeOut] = None
    model_config = ConfigDict(from_attributes=True)


class EncodeIn(BaseModel):
    entries: list[list[Any]]


class DiagnosticOut(BaseModel):
    index: int
    channel: Any = None
    type_name: Any = None
    reason: str
    message: str


class EncodeOut(BaseModel):
    payload: str
    diagnostics: list[DiagnosticOut] = []


class DownlinkIn(BaseModel):
    password: str = Field(min_length=1, max_length=4, pattern=r"^[0-9]+$")


class LightIntensityDownlinkIn(DownlinkIn):
    settings: LightIntensitySettings


class CommonDownlinkIn(DownlinkIn):
    settings: CommonSettings


class SwitchingTimesDownlinkIn(DownlinkIn):
    settings: SwitchingTimes


class SunPositionDownlinkIn(DownlinkIn):
    settings: SunPosition


class DownlinkOut(EncodeOut):
    url: str
    body: dict[str, Any]
