# lpp_types.py
# Cayenne LPP sensor type table used by the downlink encoder.

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

_CODE_RE = re.compile(r"^[0-9a-f]{2}$")


@dataclass(frozen=True)
class ScaledRange:
    """Inclusive bounds on the raw value plus the multiplier applied before packing.

    ``twos_complement_bits`` is the width used to reinterpret negative scaled
    values. It does not follow the descriptor's byte size.
    """

    lo: float
    hi: float
    scale: float = 1
    twos_complement_bits: int = 16

    def contains(self, value: float) -> bool:
        return self.lo <= value <= self.hi


@dataclass(frozen=True)
class SensorTypeDescriptor:
    name: str
    code: str
    byte_size: int
    signed: bool
    value_range: ScaledRange
    expected_entry_length: int = 3
    altitude_range: ScaledRange | None = None

    @property
    def value_count(self) -> int:
        return self.expected_entry_length - 2

    @property
    def scale(self) -> float:
        return self.value_range.scale

    def range_for(self, position: int) -> ScaledRange:
        """Return the range/scale pair for the 0-based value *position*.

        GPS packs latitude and longitude with one pair and altitude with another.
        """

        if self.altitude_range is not None and position >= 2:
            return self.altitude_range
        return self.value_range

    def validate(self) -> None:
        if not _CODE_RE.match(self.code):
            raise ValueError(f"{self.name}: type code must be two lowercase hex digits, got {self.code!r}")
        if self.byte_size <= 0:
            raise ValueError(f"{self.name}: byte size must be positive")
        if self.expected_entry_length not in (3, 5):
            raise ValueError(f"{self.name}: entry length must be 3 or 5")
        for pair in (self.value_range, self.altitude_range):
            if pair is None:
                continue
            if pair.lo > pair.hi:
                raise ValueError(f"{self.name}: range {pair.lo}..{pair.hi} is inverted")
            if pair.scale <= 0:
                raise ValueError(f"{self.name}: scale must be positive")
            if pair.twos_complement_bits not in (16, 32):
                raise ValueError(f"{self.name}: two's complement width must be 16 or 32")


def _simple(name, code, size, scale, signed, lo, hi, length=3) -> SensorTypeDescriptor:
    return SensorTypeDescriptor(
        name=name,
        code=code,
        byte_size=size,
        signed=signed,
        value_range=ScaledRange(lo, hi, scale),
        expected_entry_length=length,
    )


DESCRIPTORS = [
    _simple("addDigitalInput", "00", 1, 1, False, 0, 255),
    _simple("addDigitalOutput", "01", 1, 1, False, 0, 255),
    _simple("addAnalogInput", "02", 2, 100, True, -327.67, 327.67),
    _simple("addAnalogOutput", "03", 2, 100, True, -327.67, 327.67),
    _simple("addGenericSensor", "64", 4, 1, False, 0, 4294967295),
    _simple("addLuminosity", "65", 2, 1, False, 0, 65535),
    _simple("addPresence", "66", 1, 1, False, 0, 255),
    _simple("addTemperature", "67", 2, 10, True, -3276.7, 3276.7),
    _simple("addRelativeHumidity", "68", 1, 2, False, 0, 100),
    _simple("addAccelerometer", "71", 2, 1000, True, -32.767, 32.767, length=5),
    _simple("addBarometricPressure", "73", 2, 10, False, 0, 6553.5),
    _simple("addVoltage", "74", 2, 100, False, 0, 655.34),
    _simple("addCurrent", "75", 2, 1000, False, 0, 65.535),
    _simple("addFrequency", "76", 4, 1, False, 0, 4294967295),
    _simple("addPercentage", "78", 1, 1, False, 0, 255),
    _simple("addAltitude", "79", 2, 1, True, -32767, 32767),
    _simple("addConcentration", "7d", 2, 1, False, 0, 65535),
    _simple("addPower", "80", 2, 1, False, 0, 65535),
    _simple("addDistance", "82", 4, 1000, False, 0, 4294967.295),
    _simple("addEnergy", "83", 4, 1000, False, 0, 4294967.295),
    _simple("addDirection", "84", 2, 1, False, 0, 65535),
    _simple("addUnixTime", "85", 4, 1, False, 0, 4294967295),
    _simple("addGyrometer", "86", 2, 100, True, -327.67, 327.67, length=5),
    _simple("addColour", "87", 1, 1, False, 0, 255, length=5),
    SensorTypeDescriptor(
        name="addGPS",
        code="88",
        byte_size=3,
        signed=True,
        value_range=ScaledRange(-838.8607, 838.8607, 10000, twos_complement_bits=32),
        expected_entry_length=5,
        altitude_range=ScaledRange(-83886.07, 83886.07, 100, twos_complement_bits=32),
    ),
    _simple("addSwitch", "8e", 1, 1, False, 0, 255),
    # Project-local: 3-byte counter for day-seconds and intervals
    _simple("addSmallTime", "c0", 3, 1, False, 0, 16777215),
]


def build_registry(descriptors: Iterable[SensorTypeDescriptor]) -> Mapping[str, SensorTypeDescriptor]:
    """Validate *descriptors* and return them as a read-only name -> descriptor mapping."""

    table: dict[str, SensorTypeDescriptor] = {}
    for desc in descriptors:
        desc.validate()
        if desc.name in table:
            raise ValueError(f"duplicate sensor type {desc.name!r}")
        if desc.name == "addGPS" and desc.altitude_range is None:
            raise ValueError("addGPS needs an altitude range")
        table[desc.name] = desc
    return MappingProxyType(table)


SENSOR_TYPES = build_registry(DESCRIPTORS)


def get_descriptor(
    type_name: object, registry: Mapping[str, SensorTypeDescriptor] = SENSOR_TYPES
) -> SensorTypeDescriptor | None:
    """Return the descriptor registered under *type_name*, or None if there is none."""

    if not isinstance(type_name, str):
        return None
    return registry.get(type_name)
