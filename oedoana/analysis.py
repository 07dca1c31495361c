"""Event-level helpers for timing/charge hit lists and a columnar dump tool."""

from __future__ import annotations

import argparse
import copy
import json
import struct
import sys
from collections.abc import Iterable, Sequence
from typing import Any

from .data import TimingChargeData

# Branch name in the input events -> column prefix in the output table.
DUMP_BRANCHES = (
    ("sr91_x_cal", "sr91x"),
    ("sr91_y_cal", "sr91y"),
    ("diapad", "diapad"),
)


def tot_to_charge(tot: float) -> float:
    """Convert a time-over-threshold value into a charge."""
    if tot < 20:
        return 0.004667 * tot + 0.006667
    return 0.000469 * tot * tot - 0.01415 * tot + 0.19722


def convert_tot(hits: Iterable[Any]) -> list[Any]:
    """Return copies of the hits whose charge (holding a TOT) is turned into charge."""
    converted = []
    for hit in hits:
        out = copy.copy(hit)
        out.charge = tot_to_charge(hit.charge)
        converted.append(out)
    return converted


def sort_by_charge(hits: Iterable[Any], descending: bool = True) -> list[Any]:
    """Return the hits ordered by charge, highest first unless ``descending`` is false."""
    return sorted(hits, key=lambda hit: hit.charge, reverse=descending)


def charges(hits: Iterable[Any]) -> list[float]:
    """Return the charge of every hit, in order."""
    return [float(hit.charge) for hit in hits]


def ids(hits: Iterable[Any]) -> list[float]:
    """Return the channel id of every hit, in order, as floating-point values."""
    return [float(hit.id) for hit in hits]


def _float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _int32(value: int) -> int:
    return struct.unpack("<i", struct.pack("<i", value))[0]


class TimingChargeColumns:
    """Accumulate per-event hit lists into list-valued tot, timing and id columns.

    Charge and timing are stored as 32-bit floats, ids as 32-bit integers.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._reset()

    def _reset(self) -> None:
        self._tot: list[list[float]] = []
        self._timing: list[list[float]] = []
        self._id: list[list[int]] = []

    def __len__(self) -> int:
        return len(self._tot)

    def fill(self, hits: Iterable[Any]) -> None:
        """Append one event (one row) made of the given hits."""
        hits = list(hits)
        self._tot.append([_float32(hit.charge) for hit in hits])
        self._timing.append([_float32(hit.timing) for hit in hits])
        self._id.append([_int32(hit.id) for hit in hits])

    def finalize(self) -> dict[str, list[list[Any]]]:
        """Return the finished columns keyed by field name and start afresh."""
        columns = {
            f"{self.name}_tot": self._tot,
            f"{self.name}_timing": self._timing,
            f"{self.name}_id": self._id,
        }
        self._reset()
        return columns


def _hit_from_dict(record: dict[str, Any]) -> TimingChargeData:
    return TimingChargeData(
        id=int(record["id"]),
        timing=float(record["timing"]),
        charge=float(record["charge"]),
    )


def _usage(prog: str) -> None:
    print(
        f"[DumpParquet]: Usage: {prog} -i [input_file] -n [n_workers] -o [output_file]"
    )


def _read_events(path: str) -> Iterable[dict[str, Any]]:
    with open(path, encoding="utf-8") as stream:
        for line in stream:
            line = line.strip()
            if line:
                yield json.loads(line)


def dump_columns(events: Iterable[dict[str, Any]]) -> dict[str, list[list[Any]]]:
    """Build the output table for a stream of events."""
    builders = [(branch, TimingChargeColumns(name)) for branch, name in DUMP_BRANCHES]
    for event in events:
        for branch, builder in builders:
            builder.fill(_hit_from_dict(r) for r in event.get(branch, []))
    table: dict[str, list[list[Any]]] = {}
    for _, builder in builders:
        table.update(builder.finalize())
    return table


def main(argv: Sequence[str] | None = None) -> int:
    """Dump the timing/charge hits of a JSON-lines event file into a column table."""
    args = list(sys.argv[1:] if argv is None else argv)
    prog = "dump-columns"
    parser = argparse.ArgumentParser(prog=prog, add_help=False)
    parser.add_argument("-o", dest="output", default="output.json")
    parser.add_argument("-n", dest="workers", type=int, default=1)
    parser.add_argument("-i", dest="input", default="")
    try:
        options = parser.parse_args(args)
    except SystemExit:
        _usage(prog)
        return 1
    if not options.input:
        _usage(prog)
        return 1
    table = dump_columns(_read_events(options.input))
    with open(options.output, "w", encoding="utf-8") as stream:
        json.dump(table, stream)
    return 0