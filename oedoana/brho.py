"""Magnetic rigidity (Brho) reconstruction from tracks at two foci."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Sequence

MM = 1.0
MRAD = 1.0e-3

# Optical matrix indices: 0:X 1:A 2:Y 3:B 4:L 5:D
_X, _A, _D = 0, 1, 5


class CubicRoots(NamedTuple):
    """Roots of a cubic polynomial.

    When ``complex`` is true, ``a`` is the real root and the other two roots
    are ``b + i*c`` and ``b - i*c``.
    """

    a: float
    b: float
    c: float
    complex: bool


def _cbrt(value: float) -> float:
    if value == 0:
        return 0.0
    return math.copysign(math.exp(math.log(abs(value)) / 3.0), value)


def roots_cubic(coef: Sequence[float]) -> CubicRoots:
    """Solve ``coef[0] + coef[1]*x + coef[2]*x**2 + coef[3]*x**3 = 0``.

    A zero cubic coefficient yields all-zero roots.
    """
    c0, c1, c2, c3 = coef
    if c3 == 0:
        return CubicRoots(0.0, 0.0, 0.0, False)
    r = c2 / c3
    s = c1 / c3
    t = c0 / c3
    p = s - r * r / 3
    ps3 = p / 3
    q = 2 * r * r * r / 27.0 - r * s / 3 + t
    qs2 = q / 2
    ps33 = ps3 * ps3 * ps3
    d = ps33 + qs2 * qs2
    shift = r / 3
    if d >= 0:
        d = math.sqrt(d)
        u = _cbrt(-qs2 + d)
        v = _cbrt(-qs2 - d)
        y1 = u + v
        y2 = -y1 / 2
        y3 = (u - v) * math.sqrt(3.0) / 2
        return CubicRoots(y1 - shift, y2 - shift, y3, True)
    ps3 = -ps3
    ps33 = -ps33
    cphi = max(-1.0, min(1.0, -qs2 / math.sqrt(ps33)))
    phis3 = math.acos(cphi) / 3
    pis3 = math.pi / 3
    scale = math.sqrt(ps3)
    y1 = 2 * scale * math.cos(phis3)
    y2 = -2 * scale * math.cos(pis3 + phis3)
    y3 = -2 * scale * math.cos(pis3 - phis3)
    return CubicRoots(y1 - shift, y2 - shift, y3 - shift, False)


@dataclass
class Track:
    """A straight track at a focal plane: position, angles and z position."""

    x: float
    a: float
    y: float = 0.0
    b: float = 0.0
    z: float = 0.0


def _empty_matrix() -> list[list[float]]:
    return [[0.0] * 6 for _ in range(6)]


class BrhoReconstructor:
    """First-order Brho reconstruction for the F3-F5 or F5-F7 section.

    Modes: 0 both tracks on focus, 1 only the entrance track on focus,
    2 only the exit track on focus.
    """

    MODES = (0, 1, 2)

    def __init__(
        self, brho0: float = 0.0, z: float = 0.0, mode: int = 0, section: int = 35
    ) -> None:
        if mode not in self.MODES:
            raise ValueError(f"unknown mode {mode}")
        self.brho0 = brho0
        self.z = z
        self.mode = mode
        self.section = section
        m = _empty_matrix()
        if section == 35:
            m[0][0] = 0.926591
            m[0][1] = -0.00471245 * MM / MRAD
            m[1][0] = -0.0196513 * MRAD / MM
            m[1][1] = 1.07932
            m[0][5] = 31.6690
            m[1][5] = 0.015266
        elif section == 57:
            m[0][0] = 1.08043
            m[0][1] = 0.0226346 * MM / MRAD
            m[1][0] = -0.0182343 * MRAD / MM
            m[1][1] = 0.925174
            m[0][5] = -34.1741
            m[1][5] = 0.654360
        else:
            raise ValueError(f"unknown section {section}")
        self.matrix = m

    def reconstruct(self, track1: Track | None, track2: Track | None) -> float | None:
        """Return Brho for the entrance and exit tracks, or None if one is missing."""
        if track1 is None or track2 is None:
            return None
        m = self.matrix
        x1, a1 = track1.x, track1.a
        x2, a2 = track2.x, track2.a
        l1 = self.z - track1.z
        l2 = self.z - track2.z
        if self.mode == 0:
            d = (x2 - m[0][0] * x1 - m[0][1] * a1) / m[0][5]
        elif self.mode == 1:
            d = (x2 - (m[0][0] - m[1][0] * l1) * x1 + (m[0][1] - l1 * m[1][1]) * a1) / (
                m[0][5] - l1 * m[1][5]
            )
        else:
            factor = m[1][0] * l2 + m[1][1]
            d = (
                (x2 - m[0][0] * x1) * factor
                - (a2 - m[1][0] * x1) * (m[0][0] * l2 + m[0][1])
            ) / (factor * m[0][5] - factor * m[1][5])
        return self.brho0 * (1 + d / 100.0)


class S1BrhoReconstructor:
    """Higher-order iterative Brho reconstruction for the S1 spectrometer."""

    X0 = 0.0
    XD = -2055.0
    XDD = -814.19
    XDDD = 12795.1
    XA = 0.0
    XAD = 19.2342
    XADD = -414.067
    XADDD = 4882.33
    XX = -0.799825
    XXD = 11.402
    XYY = -0.0493525
    XYYD = -0.350427
    XBB = 0.0237474
    XBBBB = -0.392603e-05

    A0 = 0.0
    ADD = 0.0
    AD = -1022.0
    AA = -1.42
    AAD = 7.22942
    AX = -0.88
    AYY = -0.0163254
    ABB = 0.011862
    ABBBB = -1.99647e-05

    B_ASSUMED = 5.872
    ITERATIONS = 6

    def __init__(self, brho0: float = 0.0, z: float = 0.0, mode: int = 0) -> None:
        self.brho0 = brho0
        self.z = z
        self.mode = mode
        m = _empty_matrix()
        m[0][0] = self.XX
        m[0][1] = self.XA
        m[1][0] = self.AX
        m[1][1] = self.AA
        m[0][5] = self.XD
        m[1][5] = self.AD
        self.matrix = m

    def reconstruct(self, track1: Track | None, track2: Track | None) -> float | None:
        """Return Brho for the S0 and S1 tracks, or None if one is missing."""
        if track1 is None or track2 is None:
            return None
        s0x = track1.x
        s0y = track1.y
        s1x = track2.x
        s1a = track2.a * 1000.0
        b = self.B_ASSUMED

        d = (s1x - self.X0) / self.XD
        a = (s1a - self.A0) / (self.AA + self.AAD * d)
        xcb = self.XBB * b * b + self.XBBBB * b**4
        acb = self.ABB * b * b + self.ABBBB * b**4
        for _ in range(self.ITERATIONS):
            xca = (
                self.XA * a
                + self.XAD * a * d
                + self.XADD * a * d * d
                + self.XADDD * a * d * d * d
            )
            xcx = self.XX * s0x + self.XXD * s0x * d
            xcy = self.XYY * s0y * s0y + self.XYYD * s0y * s0y * d
            coef = (
                self.X0 - s1x + xca + xcx + xcy + xcb,
                self.XD,
                self.XDD,
                self.XDDD,
            )
            d = roots_cubic(coef).b
            acd = self.AD * d + self.ADD * d * d
            acx = self.AX * s0x
            acy = self.AYY * s0y * s0y
            a = (s1a - self.A0 - acd - acx - acy - acb) / (self.AA + self.AAD * d)
        return self.brho0 * (1 + d)