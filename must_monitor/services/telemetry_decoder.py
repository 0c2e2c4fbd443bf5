# must_monitor/services/telemetry_decoder.py

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple, Union

from must_monitor.models.schema import (
    ENERGY,
    HUNDREDTH,
    HUNDREDTH_RAW,
    INT,
    RAW,
    TENTH,
    FieldSpec,
)

FieldValue = Union[int, float, str]
TelemetryRecord = Dict[str, FieldValue]

CHARGER_ARITY = 21
INVERTER_ARITY = 74


# ============================================================================
# Register maps
# ============================================================================

CHARGER_SCHEMA: Tuple[FieldSpec, ...] = (
    FieldSpec(0, "ChargerWorkstate"),
    FieldSpec(1, "MpptState"),
    FieldSpec(2, "ChargingState"),
    FieldSpec(4, "PvVoltage", TENTH),
    FieldSpec(5, "BatteryVoltage", TENTH),
    FieldSpec(6, "ChargerCurrent", TENTH),
    FieldSpec(7, "ChargerPower"),
    FieldSpec(8, "RadiatorTemperature"),
    FieldSpec(9, "ExternalTemperature"),
    FieldSpec(10, "BatteryRelay"),
    FieldSpec(11, "PvRelay"),
    FieldSpec(12, "ErrorMessage"),
    FieldSpec(13, "WarningMessage"),
    FieldSpec(15, "RatedCurrent", TENTH),
)

INVERTER_SCHEMA: Tuple[FieldSpec, ...] = (
    FieldSpec(0, "WorkState"),
    FieldSpec(1, "AcVoltageGrade"),
    FieldSpec(2, "RatedPower"),
    FieldSpec(4, "InverterBatteryVoltage", TENTH),
    FieldSpec(5, "InverterVoltage", TENTH),
    FieldSpec(6, "GridVoltage", TENTH),
    FieldSpec(7, "BusVoltage", TENTH),
    FieldSpec(8, "ControlCurrent", TENTH),
    FieldSpec(9, "InverterCurrent", TENTH),
    FieldSpec(10, "GridCurrent", TENTH),
    FieldSpec(11, "LoadCurrent", TENTH),
    FieldSpec(12, "PInverter"),
    FieldSpec(13, "PGrid"),
    FieldSpec(14, "PLoad"),
    FieldSpec(15, "LoadPercent"),
    FieldSpec(16, "SInverter"),
    FieldSpec(17, "SGrid"),
    FieldSpec(18, "Sload"),
    FieldSpec(20, "Qinverter"),
    FieldSpec(21, "Qgrid"),
    FieldSpec(22, "Qload"),
    # Not string-formatted, unlike GridFrequency.
    FieldSpec(24, "InverterFrequency", HUNDREDTH_RAW),
    FieldSpec(25, "GridFrequency", HUNDREDTH),
    FieldSpec(28, "InverterMaxNumber", RAW),
    FieldSpec(29, "CombineType", RAW),
    FieldSpec(30, "InverterNumber", RAW),
    FieldSpec(32, "AcRadiatorTemperature"),
    FieldSpec(33, "TransformerTemperature"),
    FieldSpec(34, "DcRadiatorTemperature"),
    FieldSpec(36, "InverterRelayState"),
    FieldSpec(37, "GridRelayState"),
    FieldSpec(38, "LoadRelayState"),
    FieldSpec(39, "N_LineRelayState"),
    FieldSpec(40, "DCRelayState"),
    FieldSpec(41, "EarthRelayState"),
    FieldSpec(44, "AccumulatedChargerPower", ENERGY, low_index=45),
    FieldSpec(46, "AccumulatedDischargerPower", ENERGY, low_index=47),
    FieldSpec(48, "AccumulatedBuyPower", ENERGY, low_index=49),
    FieldSpec(50, "AccumulatedSellPower", ENERGY, low_index=51),
    FieldSpec(52, "AccumulatedLoadPower", ENERGY, low_index=53),
    FieldSpec(54, "AccumulatedSelf_usePower", ENERGY, low_index=55),
    FieldSpec(56, "AccumulatedPV_sellPower", ENERGY, low_index=57),
    FieldSpec(58, "AccumulatedGrid_chargerPower", ENERGY, low_index=59),
    FieldSpec(72, "BattPower"),
    FieldSpec(73, "BattCurrent"),
)


# ============================================================================
# Conversion helpers
# ============================================================================

def twos_complement16(hex_text: str) -> int:
    value = int(hex_text, 16) & 0xFFFF
    if value & (1 << 15):
        value -= 1 << 16
    return value


def _fmt2(value: float) -> str:
    return f"{value:.2f}"


def _convert(spec: FieldSpec, registers: Sequence[str]) -> FieldValue:
    raw = registers[spec.index]
    kind = spec.kind

    if kind == RAW:
        return raw
    if kind == INT:
        return twos_complement16(raw)
    if kind == TENTH:
        return _fmt2(twos_complement16(raw) * 0.1)
    if kind == HUNDREDTH:
        return _fmt2(twos_complement16(raw) * 0.01)
    if kind == HUNDREDTH_RAW:
        return twos_complement16(raw) * 0.01
    if kind == ENERGY:
        high = twos_complement16(raw)
        low = twos_complement16(registers[spec.low_index])
        return _fmt2(high * 1000 + low * 0.1)

    raise ValueError(f"{spec.name}: unknown field kind {kind!r}")


# ============================================================================
# Decoders
# ============================================================================

def decode_registers(
    registers: Sequence[str],
    schema: Sequence[FieldSpec],
    arity: int,
) -> Optional[TelemetryRecord]:
    if len(registers) != arity:
        return None
    return {spec.name: _convert(spec, registers) for spec in schema}


def decode_charger(registers: Sequence[str]) -> Optional[TelemetryRecord]:
    return decode_registers(registers, CHARGER_SCHEMA, CHARGER_ARITY)


def decode_inverter(registers: Sequence[str]) -> Optional[TelemetryRecord]:
    return decode_registers(registers, INVERTER_SCHEMA, INVERTER_ARITY)
