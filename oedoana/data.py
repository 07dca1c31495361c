"""Event data records shared by the decoders and the analysis processors."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass

INVALID_D = math.nan
INVALID_I = -(2**31)


@dataclass
class TimingChargeData:
    """A detector hit carrying a channel id, a timing and a charge."""

    id: int = INVALID_I
    timing: float = INVALID_D
    charge: float = INVALID_D
    valid: bool = True


@dataclass
class DaliData:
    """Summary of one DALI gamma-ray event: the two leading hits and the sum."""

    id: int = INVALID_I
    energy1: float = INVALID_D
    energy2: float = INVALID_D
    pos1: int = INVALID_I
    pos2: int = INVALID_I
    theta: float = INVALID_D
    total_e: float = INVALID_D

    def clear(self) -> None:
        """Reset every field to its invalid value."""
        for field in dataclasses.fields(self):
            setattr(self, field.name, field.default)

    def copy(self) -> DaliData:
        """Return an independent copy of this record."""
        return dataclasses.replace(self)