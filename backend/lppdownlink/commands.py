# commands.py
# Device settings -> LPP entries. Channels and types are the device's settings protocol.

from __future__ import annotations

from datetime import time
from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, Field

# Sentinel day-second for a switching time that is enabled but not set
TIME_NOT_SET = 100000


class WorkingMode(IntEnum):
    OFF = 0
    ON = 1
    LIGHT_INTENSITY = 2
    TIME = 3
    LIGHT_INTENSITY_IN_TIME = 4
    SUNSET_SUNRISE = 5


class Timezone(IntEnum):
    CENTRAL_EUROPEAN = 0
    UNITED_KINGDOM = 1
    UTC = 2
    US_EASTERN = 3
    US_CENTRAL = 4
    US_MOUNTAIN = 5
    US_ARIZONA = 6
    US_PACIFIC = 7
    AUSTRALIA_EASTERN = 8


class PowerGrid(IntEnum):
    V230 = 0
    V400 = 1


class ResetAndLoad(IntEnum):
    SAVED = 1
    DEFAULT = 2


class LightIntensitySettings(BaseModel):
    threshold: Optional[int] = Field(default=None, ge=0, le=65535)
    safe_zone: Optional[int] = Field(default=None, ge=0, le=65535)

    def to_entries(self) -> list[list]:
        lpp: list[list] = []
        if self.threshold is not None:
            lpp.append([101, "addLuminosity", self.threshold])
        if self.safe_zone is not None:
            lpp.append([102, "addLuminosity", self.safe_zone])
        return lpp


class ReportSelection(BaseModel):
    """Which readings the device reports; packed LSB-first into two bytes."""

    relay_state: bool = True
    number_of_changes: bool = True
    light_intensity: bool = True
    battery_voltage: bool = True
    battery_percentage: bool = True
    battery_temperature: bool = True
    rtc_temperature: bool = True
    power_line_voltage: bool = True

    power_line_frequency: bool = True
    active_energy: bool = True
    current: bool = True
    active_power: bool = True
    power_factor: bool = True
    sunrise: bool = True
    sunset: bool = True

    def to_bytes(self) -> tuple[int, int]:
        first = (
            self.relay_state,
            self.number_of_changes,
            self.light_intensity,
            self.battery_voltage,
            self.battery_percentage,
            self.battery_temperature,
            self.rtc_temperature,
            self.power_line_voltage,
        )
        second = (
            self.power_line_frequency,
            self.active_energy,
            self.current,
            self.active_power,
            self.power_factor,
            self.sunrise,
            self.sunset,
        )
        return _pack_bits(first), _pack_bits(second)


def _pack_bits(flags) -> int:
    value = 0
    for bit, flag in enumerate(flags):
        if flag:
            value |= 1 << bit
    return value


class CommonSettings(BaseModel):
    send_data_every: Optional[int] = Field(default=None, ge=0, le=16777215, description="seconds")
    working_mode: Optional[WorkingMode] = None
    number_of_samples: Optional[int] = Field(default=None, ge=0, le=255)
    timezone: Optional[Timezone] = None
    power_grid: Optional[PowerGrid] = None
    report_selection: Optional[ReportSelection] = None
    reset_and_load: Optional[ResetAndLoad] = None

    def to_entries(self) -> list[list]:
        # Loading the default config resets everything else on the device
        if self.reset_and_load == ResetAndLoad.DEFAULT:
            return [[100, "addDigitalInput", int(ResetAndLoad.DEFAULT)]]

        lpp: list[list] = []
        if self.send_data_every is not None:
            lpp.append([100, "addSmallTime", self.send_data_every])
        if self.working_mode is not None:
            lpp.append([101, "addDigitalInput", int(self.working_mode)])
        if self.number_of_samples is not None:
            lpp.append([100, "addPresence", self.number_of_samples])
        if self.timezone is not None:
            lpp.append([102, "addDigitalInput", int(self.timezone)])
        if self.power_grid is not None:
            lpp.append([103, "addDigitalInput", int(self.power_grid)])
        if self.report_selection is not None:
            first, second = self.report_selection.to_bytes()
            lpp.append([1, "addDigitalOutput", first])
            lpp.append([2, "addDigitalOutput", second])
        if self.reset_and_load == ResetAndLoad.SAVED:
            lpp.append([100, "addDigitalInput", int(ResetAndLoad.SAVED)])
        return lpp


class SwitchingSlot(BaseModel):
    """An enabled switching time; ``at=None`` clears the time on the device."""

    at: Optional[time] = None

    def day_seconds(self) -> int:
        if self.at is None:
            return TIME_NOT_SET
        return seconds_of_day(self.at)


def seconds_of_day(at: time) -> int:
    return at.hour * 3600 + at.minute * 60 + at.second


# On-times are sent before off-times
SWITCHING_CHANNELS = (
    ("on_1", 101),
    ("on_2", 103),
    ("on_3", 105),
    ("off_1", 102),
    ("off_2", 104),
    ("off_3", 106),
)


class SwitchingTimes(BaseModel):
    on_1: Optional[SwitchingSlot] = None
    on_2: Optional[SwitchingSlot] = None
    on_3: Optional[SwitchingSlot] = None
    off_1: Optional[SwitchingSlot] = None
    off_2: Optional[SwitchingSlot] = None
    off_3: Optional[SwitchingSlot] = None

    def to_entries(self) -> list[list]:
        lpp: list[list] = []
        for name, channel in SWITCHING_CHANNELS:
            slot = getattr(self, name)
            if slot is not None:
                lpp.append([channel, "addSmallTime", slot.day_seconds()])
        return lpp


class SunPosition(BaseModel):
    """Device location used for the sunset/sunrise working mode."""

    latitude: float
    longitude: float

    def to_entries(self) -> list[list]:
        return [[101, "addGPS", self.latitude, self.longitude, 0.0]]
