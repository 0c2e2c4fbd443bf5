# must_monitor/services/output_formatter.py

from __future__ import annotations

import json
from typing import Mapping, Optional, Sequence

from must_monitor.models.schema import FieldSpec
from must_monitor.services.telemetry_decoder import CHARGER_SCHEMA, INVERTER_SCHEMA

SECTIONS: Sequence[tuple[str, Sequence[FieldSpec]]] = (
    ("charger", CHARGER_SCHEMA),
    ("inverter", INVERTER_SCHEMA),
)


def _section(record: Mapping, schema: Sequence[FieldSpec]) -> Optional[dict]:
    values = {spec.name: record[spec.name] for spec in schema if spec.name in record}
    return values or None


def build_payload(record: Mapping, port: str | None = None) -> dict:
    payload: dict = {}
    if port is not None:
        payload["port"] = port
    for name, schema in SECTIONS:
        payload[name] = _section(record, schema)
    return payload


def emit_json(record: Mapping, port: str | None = None) -> None:
    print(json.dumps(build_payload(record, port), indent=2))


def format_human(record: Mapping, port: str | None = None) -> list[str]:
    lines = []
    for name, schema in SECTIONS:
        values = _section(record, schema)
        header = f"[{name}]" if port is None else f"[{name}@{port}]"
        if values is None:
            lines.append(f"{header} OFFLINE: no data")
            continue
        lines.append(header)
        width = max(len(k) for k in values)
        for key, value in values.items():
            lines.append(f"  {key:<{width}}  {value}")
    return lines


def emit_human(record: Mapping, port: str | None = None) -> None:
    for line in format_human(record, port):
        print(line)
