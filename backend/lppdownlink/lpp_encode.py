# lpp_encode.py
# Pack [channel, type, value...] entries into a Cayenne LPP payload (lowercase hex).

from __future__ import annotations

import base64
import logging
import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence, Union

from .lpp_types import SENSOR_TYPES, ScaledRange, SensorTypeDescriptor, get_descriptor

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    UNKNOWN_TYPE = "unknown type"
    ARITY_MISMATCH = "arity mismatch"
    INVALID_CHANNEL = "invalid channel"
    NON_NUMERIC_VALUE = "non-numeric value"
    OUT_OF_RANGE = "out of range"


class EntryError(Exception):
    """Base error for an entry that cannot be encoded."""

    reason: SkipReason


class UnknownType(EntryError):
    reason = SkipReason.UNKNOWN_TYPE


class ArityMismatch(EntryError):
    reason = SkipReason.ARITY_MISMATCH


class InvalidChannel(EntryError):
    reason = SkipReason.INVALID_CHANNEL


class NonNumericValue(EntryError):
    reason = SkipReason.NON_NUMERIC_VALUE


class OutOfRange(EntryError):
    reason = SkipReason.OUT_OF_RANGE


@dataclass(frozen=True)
class Diagnostic:
    """Why the entry at *index* was left out of the payload."""

    index: int
    channel: Any
    type_name: Any
    reason: SkipReason
    message: str


@dataclass(frozen=True)
class EntryEncoded:
    index: int
    hex: str


@dataclass(frozen=True)
class EntrySkipped:
    index: int
    diagnostic: Diagnostic


EntryResult = Union[EntryEncoded, EntrySkipped]


@dataclass(frozen=True)
class EncodeResult:
    payload: str
    diagnostics: tuple[Diagnostic, ...] = ()
    results: tuple[EntryResult, ...] = ()

    @property
    def ok(self) -> bool:
        """False when nothing was encoded; callers must not transmit such a payload."""

        return bool(self.payload)

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.payload)

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _js_round(x: float) -> int:
    # Math.round: halves go towards +infinity
    return math.floor(x + 0.5)


def _field(entry: object, pos: int) -> Any:
    if isinstance(entry, (list, tuple)) and len(entry) > pos:
        return entry[pos]
    return None


def _channel_hex(channel: object) -> str:
    if not _is_number(channel):
        raise InvalidChannel(f"The channel number {channel!r} is not a number")
    if not isinstance(channel, numbers.Integral):
        if not math.isfinite(channel) or channel != math.floor(channel):
            raise InvalidChannel(f"The channel number {channel!r} is not an integer")
    if not 0 <= channel <= 255:
        raise InvalidChannel(f"The channel number {channel!r} does not fit in one byte")
    return f"{int(channel):02x}"


def _value_hex(value: float, desc: SensorTypeDescriptor, pair: ScaledRange) -> str:
    scaled = _js_round(value * pair.scale)
    if desc.signed and value < 0:
        scaled &= (1 << pair.twos_complement_bits) - 1
    # keep the low byte_size bytes
    scaled &= (1 << (desc.byte_size * 8)) - 1
    return f"{scaled:0{desc.byte_size * 2}x}"


def _encode_entry(entry: object, registry: Mapping[str, SensorTypeDescriptor]) -> str:
    if not isinstance(entry, (list, tuple)) or len(entry) < 2:
        raise UnknownType(f"Entry {entry!r} has no type")

    channel, type_name = entry[0], entry[1]
    desc = get_descriptor(type_name, registry)
    if desc is None:
        raise UnknownType(f"Unknown type {type_name} in channel {channel}.")
    if not isinstance(desc, SensorTypeDescriptor):
        raise TypeError(f"registry entry for {type_name!r} is not a SensorTypeDescriptor")

    if len(entry) != desc.expected_entry_length:
        raise ArityMismatch(
            f"Expected {desc.value_count} value(s) in channel {channel} of the type {type_name}, "
            f"got {len(entry) - 2}."
        )

    parts = [_channel_hex(channel), desc.code]
    for pos, value in enumerate(entry[2:]):
        if not _is_number(value):
            raise NonNumericValue(f"The value in channel {channel} of the type {type_name} is not a number.")
        pair = desc.range_for(pos)
        if not pair.contains(value):
            raise OutOfRange(
                f"Value {value} in channel {channel} of the type {type_name} "
                f"is outside the {pair.lo} - {pair.hi} range!"
            )
        parts.append(_value_hex(value, desc, pair))
    return "".join(parts)


def encode_entry(
    entry: Sequence[Any],
    index: int = 0,
    registry: Mapping[str, SensorTypeDescriptor] = SENSOR_TYPES,
) -> EntryResult:
    """Encode a single entry; malformed entries come back as EntrySkipped."""

    try:
        encoded = _encode_entry(entry, registry)
    except EntryError as exc:
        diagnostic = Diagnostic(
            index=index,
            channel=_field(entry, 0),
            type_name=_field(entry, 1),
            reason=exc.reason,
            message=str(exc),
        )
        logger.warning("Skipping LPP entry %d (%s): %s", index, exc.reason.value, diagnostic.message)
        return EntrySkipped(index=index, diagnostic=diagnostic)
    return EntryEncoded(index=index, hex=encoded)


def encode(
    entries: Iterable[Sequence[Any]],
    registry: Mapping[str, SensorTypeDescriptor] = SENSOR_TYPES,
) -> EncodeResult:
    """
    Encode *entries* in order into one Cayenne LPP payload.

    Every entry contributes ``channel || type || values`` or nothing at all.
    Skipped entries are reported in ``diagnostics`` and never stop the
    remaining entries from being encoded. An empty payload means every entry
    failed (or there were none).
    """
    if not isinstance(registry, Mapping):
        raise TypeError("registry must be a mapping of sensor type descriptors")

    results = tuple(encode_entry(entry, i, registry) for i, entry in enumerate(entries))
    payload = "".join(r.hex for r in results if isinstance(r, EntryEncoded))
    diagnostics = tuple(r.diagnostic for r in results if isinstance(r, EntrySkipped))
    return EncodeResult(payload=payload, diagnostics=diagnostics, results=results)
