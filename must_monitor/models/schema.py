# must_monitor/models/schema.py
from dataclasses import dataclass


# Transform kinds understood by the telemetry decoder.
INT = "int"
TENTH = "tenth"
HUNDREDTH = "hundredth"
HUNDREDTH_RAW = "hundredth_raw"
ENERGY = "energy"
RAW = "raw"

KINDS = (INT, TENTH, HUNDREDTH, HUNDREDTH_RAW, ENERGY, RAW)


@dataclass(frozen=True)
class FieldSpec:
    index: int
    name: str
    kind: str = INT
    low_index: int | None = None  # ENERGY only: register holding the 0.1 part

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"{self.name}: unknown field kind {self.kind!r}")
        if (self.kind == ENERGY) != (self.low_index is not None):
            raise ValueError(f"{self.name}: low_index is required for energy fields only")
