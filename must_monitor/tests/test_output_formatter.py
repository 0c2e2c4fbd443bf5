import json

from must_monitor.services.output_formatter import build_payload, emit_human, emit_json, format_human
from must_monitor.services.telemetry_decoder import decode_charger
from must_monitor.tests.fake_transport import as_hex
from must_monitor.tests.sample_registers import CHARGER_EXPECTED, charger_registers


def test_payload_splits_sections():
    record = dict(CHARGER_EXPECTED)
    record["WorkState"] = 4

    payload = build_payload(record, "/dev/ttyUSB0")

    assert payload["port"] == "/dev/ttyUSB0"
    assert payload["charger"] == CHARGER_EXPECTED
    assert payload["inverter"] == {"WorkState": 4}


def test_empty_record_marks_both_offline():
    assert build_payload({}) == {"charger": None, "inverter": None}
    lines = format_human({})
    assert lines == ["[charger] OFFLINE: no data", "[inverter] OFFLINE: no data"]


def test_emit_json(capsys):
    emit_json(decode_charger(as_hex(charger_registers())))
    out = json.loads(capsys.readouterr().out)
    assert out["charger"]["PvVoltage"] == "10.00"
    assert out["inverter"] is None


def test_emit_human(capsys):
    emit_human(CHARGER_EXPECTED, "/dev/ttyUSB0")
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "[charger@/dev/ttyUSB0]"
    assert any(line.split() == ["PvVoltage", "10.00"] for line in out)
    assert out[-1] == "[inverter@/dev/ttyUSB0] OFFLINE: no data"
