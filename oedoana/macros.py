"""Small analysis helpers: missing channel ids, dq/dx tables and beam extrapolation."""

from __future__ import annotations

import os
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

# Distance between the upstream and downstream SR-PPACs, and from them to the TPC.
PPAC_DISTANCE = 466.0
TPC_DISTANCE = 958.0


def missing_ids(ids: Iterable[int], count: int) -> list[int]:
    """Return the ids in ``0 .. count-1`` that never occur in ``ids``."""
    seen = Counter(ids)
    return [i for i in range(count) if seen[i] == 0]


def cumulative_table(
    counts: Sequence[float], n_bins: int, upper: float
) -> list[tuple[float, float]]:
    """Return ``(x, F(x))`` rows of the normalised cumulative histogram.

    ``counts`` are the bin contents, bin 1 first. Row ``i`` (1-based) holds
    ``upper / n_bins * i`` and the normalised sum of bins 1 to ``i``.
    """
    total = sum(counts)
    if total == 0:
        raise ValueError("histogram is empty")
    rows = []
    running = 0.0
    for i in range(1, n_bins + 1):
        if i <= len(counts):
            running += counts[i - 1] / total
        rows.append((upper / n_bins * i, running))
    return rows


def write_dq2dx(
    path: str | os.PathLike[str], counts: Sequence[float], n_bins: int, upper: float
) -> Path:
    """Write the cumulative table to ``path``: a row count, then ``x F`` lines."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    rows = cumulative_table(counts, n_bins, upper)
    with target.open("w", encoding="utf-8") as stream:
        stream.write(f"{n_bins}\n")
        for x, value in rows:
            stream.write(f"{x:g} {value:g}\n")
    return target


@dataclass(frozen=True)
class BeamPositions:
    """Beam angles and positions derived from the two SR-PPACs."""

    a_angle: float
    b_angle: float
    xmean: float
    ymean: float
    xtpc: float
    ytpc: float


def extrapolate_positions(xu: float, xd: float, yu: float, yd: float) -> BeamPositions:
    """Compute beam angles, mean positions and positions at the TPC."""
    a_angle = (xd - xu) / PPAC_DISTANCE
    b_angle = (yd - yu) / PPAC_DISTANCE
    xmean = (xu + xd) / 2
    ymean = (yu + yd) / 2
    return BeamPositions(
        a_angle=a_angle,
        b_angle=b_angle,
        xmean=xmean,
        ymean=ymean,
        xtpc=xmean + a_angle * TPC_DISTANCE,
        ytpc=ymean + b_angle * TPC_DISTANCE,
    )