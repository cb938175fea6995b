import pytest

from lppdownlink.lpp_types import (
    DESCRIPTORS,
    SENSOR_TYPES,
    ScaledRange,
    SensorTypeDescriptor,
    build_registry,
    get_descriptor,
)


def test_registry_covers_every_type():
    assert len(SENSOR_TYPES) == 27
    assert set(SENSOR_TYPES) >= {"addDigitalInput", "addGPS", "addSwitch", "addSmallTime"}


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        SENSOR_TYPES["addDigitalInput"] = SENSOR_TYPES["addSwitch"]


def test_get_descriptor_unknown_names_return_none():
    assert get_descriptor("addMagic") is None
    assert get_descriptor(None) is None
    assert get_descriptor(["addGPS"]) is None
    assert get_descriptor("addTemperature").code == "67"


def test_multi_value_types_expect_five_items():
    for name in ("addAccelerometer", "addGyrometer", "addColour", "addGPS"):
        assert SENSOR_TYPES[name].expected_entry_length == 5
        assert SENSOR_TYPES[name].value_count == 3


def test_gps_range_selection_by_position():
    gps = SENSOR_TYPES["addGPS"]

    assert gps.range_for(0) is gps.value_range
    assert gps.range_for(1) is gps.value_range
    assert gps.range_for(2) is gps.altitude_range
    assert gps.range_for(2).scale == 100
    assert gps.value_range.twos_complement_bits == 32
    assert gps.altitude_range.twos_complement_bits == 32


def test_simple_types_share_one_range_and_default_to_16_bit():
    accel = SENSOR_TYPES["addAccelerometer"]

    assert accel.range_for(2) is accel.value_range
    assert accel.value_range.twos_complement_bits == 16
    assert accel.scale == 1000


def test_codes_are_two_lowercase_hex_digits():
    for desc in DESCRIPTORS:
        assert len(desc.code) == 2
        assert desc.code == desc.code.lower()
        int(desc.code, 16)


def test_small_time_is_three_byte_unsigned():
    small = SENSOR_TYPES["addSmallTime"]

    assert (small.code, small.byte_size, small.signed) == ("c0", 3, False)
    assert small.value_range.hi == 16777215


def _desc(**kwargs):
    defaults = dict(
        name="addTest",
        code="f1",
        byte_size=1,
        signed=False,
        value_range=ScaledRange(0, 255),
    )
    defaults.update(kwargs)
    return SensorTypeDescriptor(**defaults)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(code="7D"),
        dict(code="123"),
        dict(byte_size=0),
        dict(expected_entry_length=4),
        dict(value_range=ScaledRange(10, 0)),
        dict(value_range=ScaledRange(0, 10, scale=0)),
        dict(value_range=ScaledRange(0, 10, twos_complement_bits=8)),
    ],
)
def test_build_registry_rejects_corrupt_descriptors(kwargs):
    with pytest.raises(ValueError):
        build_registry([_desc(**kwargs)])


def test_build_registry_rejects_duplicates_and_gps_without_altitude():
    with pytest.raises(ValueError):
        build_registry([_desc(), _desc()])
    with pytest.raises(ValueError):
        build_registry([_desc(name="addGPS", code="88", expected_entry_length=5)])
