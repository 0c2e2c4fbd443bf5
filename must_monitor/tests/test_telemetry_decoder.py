import pytest

from must_monitor.models.schema import ENERGY, FieldSpec
from must_monitor.services.telemetry_decoder import (
    CHARGER_SCHEMA,
    INVERTER_SCHEMA,
    decode_charger,
    decode_inverter,
    twos_complement16,
)
from must_monitor.tests.fake_transport import as_hex
from must_monitor.tests.sample_registers import (
    CHARGER_EXPECTED,
    INVERTER_EXPECTED,
    charger_registers,
    inverter_registers,
)


@pytest.mark.parametrize(
    "text,expected",
    [("7FFF", 32767), ("8000", -32768), ("FFFF", -1), ("0000", 0), ("0064", 100)],
)
def test_twos_complement16(text, expected):
    assert twos_complement16(text) == expected


def test_decode_charger_fields():
    record = decode_charger(as_hex(charger_registers()))
    assert record == CHARGER_EXPECTED
    assert len(record) == 14


def test_decode_inverter_fields():
    record = decode_inverter(as_hex(inverter_registers()))
    assert record is not None
    assert len(record) == 45
    assert list(record) == [spec.name for spec in INVERTER_SCHEMA]

    expected = dict(INVERTER_EXPECTED)
    frequency = expected.pop("InverterFrequency")
    assert record.pop("InverterFrequency") == pytest.approx(frequency)
    assert record == expected


def test_inverter_sample_registers_are_distinct_where_read():
    regs = inverter_registers()
    used = [spec.index for spec in INVERTER_SCHEMA]
    used += [spec.low_index for spec in INVERTER_SCHEMA if spec.low_index is not None]
    values = [regs[i] for i in used]
    assert 0 not in values
    assert len(set(values)) > len(values) // 2
    assert any(value & 0x8000 for value in values)


def test_inverter_frequency_stays_unformatted():
    record = decode_inverter(as_hex(inverter_registers()))
    assert isinstance(record["InverterFrequency"], float)
    assert record["InverterFrequency"] == pytest.approx(50.0)
    assert isinstance(record["GridFrequency"], str)


def test_identifier_fields_are_raw_register_text():
    record = decode_inverter(as_hex(inverter_registers()))
    assert record["InverterMaxNumber"] == "0001"
    assert record["CombineType"] == "FFFF"
    assert record["InverterNumber"] == "00A2"


def test_accumulated_energy_combines_register_pairs():
    record = decode_inverter(as_hex(inverter_registers()))
    assert record["AccumulatedChargerPower"] == "2000.70"
    assert record["AccumulatedDischargerPower"] == "-999.00"
    assert record["AccumulatedBuyPower"] == "12034.50"
    assert record["AccumulatedPV_sellPower"] == "999.50"
    energy = [spec for spec in INVERTER_SCHEMA if spec.kind == ENERGY]
    assert len(energy) == 8
    assert all(spec.low_index == spec.index + 1 for spec in energy)


@pytest.mark.parametrize("length", [0, 20, 22, 74])
def test_decode_charger_wrong_length_is_absent(length):
    assert decode_charger(["0000"] * length) is None


@pytest.mark.parametrize("length", [0, 21, 73, 75])
def test_decode_inverter_wrong_length_is_absent(length):
    assert decode_inverter(["0000"] * length) is None


def test_schemas_have_disjoint_names():
    charger = {spec.name for spec in CHARGER_SCHEMA}
    inverter = {spec.name for spec in INVERTER_SCHEMA}
    assert len(charger) == len(CHARGER_SCHEMA)
    assert len(inverter) == len(INVERTER_SCHEMA)
    assert not charger & inverter


def test_schema_indices():
    assert [s.index for s in CHARGER_SCHEMA] == [0, 1, 2, *range(4, 14), 15]
    expected = (
        [0, 1, 2]
        + list(range(4, 19))
        + [20, 21, 22, 24, 25, 28, 29, 30, 32, 33, 34]
        + list(range(36, 42))
        + list(range(44, 60, 2))
        + [72, 73]
    )
    assert [s.index for s in INVERTER_SCHEMA] == expected


def test_field_spec_validation():
    with pytest.raises(ValueError):
        FieldSpec(0, "Bogus", "percent")
    with pytest.raises(ValueError):
        FieldSpec(0, "NoLow", ENERGY)
