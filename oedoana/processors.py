"""Per-event processors: charge validation, DALI summary and ion-chamber averaging."""

from __future__ import annotations

import copy
import math
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from .data import DaliData

T = TypeVar("T")

DALI_CHANNELS = 256

# Polar angle of each DALI strip, in degrees.
DALI_THETA = (
    9.19, 10.18, 11.19, 12.21,
    13.26, 14.33, 15.42, 16.52,
    17.65, 18.79, 19.95, 21.13,
    22.32, 23.54, 24.77, 26.00,
)


def validate_get_charge(pulses: Iterable[T], threshold: float = 0.0) -> list[T]:
    """Return copies of the pulses whose charge is at least ``threshold``."""
    return [copy.copy(pulse) for pulse in pulses if not pulse.charge < threshold]


class ChargeRangeValidator:
    """Mark hits valid when their charge lies in ``[low, high]``.

    Hits outside the range are dropped, or kept and marked invalid when
    ``output_invalid`` is set. The output is sorted by descending charge.
    """

    def __init__(self, low: float = 0.0, high: float = 0.0, output_invalid: bool = False) -> None:
        if low > high:
            raise ValueError(
                f"invalid order of range: [0] {low} should be less than [1] {high}"
            )
        self.low = low
        self.high = high
        self.output_invalid = output_invalid

    def process(self, hits: Iterable[Any]) -> list[Any]:
        """Return validated copies of the hits, highest charge first."""
        output = []
        for hit in hits:
            charge = hit.charge
            inside = not (charge < self.low or self.high < charge)
            if not inside and not self.output_invalid:
                continue
            out = copy.copy(hit)
            out.valid = inside
            output.append(out)
        output.sort(key=lambda h: h.charge, reverse=True)
        return output


def dali_summary(hits: Sequence[Any]) -> DaliData | None:
    """Summarise DALI hits: the two largest deposits, their ids and the total.

    Returns None when there are no hits. Hits with an id outside
    ``0 .. 255`` are ignored.
    """
    if not hits:
        return None
    values = [0.0] * DALI_CHANNELS
    addback = 0.0
    for hit in hits:
        if 0 <= hit.id < DALI_CHANNELS:
            values[hit.id] = hit.charge
            addback += hit.charge
    ranked = sorted(range(DALI_CHANNELS), key=lambda pos: (-values[pos], pos))
    first, second = ranked[0], ranked[1]
    return DaliData(
        energy1=values[first],
        energy2=values[second],
        pos1=first,
        pos2=second,
        theta=DALI_THETA[0],
        total_e=addback,
    )


def ion_chamber_average(
    hits: Sequence[Any], num_channels: int = 6, drop_ratio: float = 0.0
) -> float | None:
    """Average the ion-chamber channel charges up to the first dropped one.

    A channel is dropped when its charge is below ``drop_ratio`` times the
    charge of channel 0; that channel and all later ones are left out.
    Returns None when there are no hits or no channels.
    """
    if not hits:
        return None
    if num_channels <= 0:
        return None
    values = [0.0] * num_channels
    for hit in hits:
        if 0 <= hit.id < num_channels:
            values[hit.id] = hit.charge
    threshold = values[0] * drop_ratio
    kept = []
    for value in values:
        if value < threshold:
            break
        kept.append(value)
    if not kept:
        return math.nan
    return sum(kept) / len(kept)