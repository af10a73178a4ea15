"""Colour helpers turning HSL triples into descriptors with CIE Lab values.

The experiment is configured in HSL because that is how the stimuli are
reasoned about, but analysis needs perceptual coordinates.  The pipeline is
HSL -> gamma-encoded sRGB -> linear sRGB -> CIE XYZ (D65) -> CIE L*a*b*.
Keeping the maths here lets the generator and the exporter share a single,
deterministic conversion.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import numpy as np

# ---------------------------------------------------------------------------
# Colorimetric constants
# ---------------------------------------------------------------------------

# sRGB primaries to XYZ, D65 white point
SRGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ]
)
D65_WHITE = np.array([0.95047, 1.00000, 1.08883])

LAB_EPSILON: float = (6.0 / 29.0) ** 3

COLOR_MODE: str = "HSL"


@dataclass(frozen=True)
class ColorDescriptor:
    """A resolved colour: HSL inputs, derived Lab coordinates and a CSS string."""

    h: float
    s: float
    l: float
    lab_l: float
    lab_a: float
    lab_b: float
    css: str
    mode: str = COLOR_MODE

    @property
    def lab(self) -> Tuple[float, float, float]:
        return self.lab_l, self.lab_a, self.lab_b

    @property
    def chroma(self) -> float:
        return float(np.hypot(self.lab_a, self.lab_b))


def normalize_hue(h: float) -> float:
    """Wrap ``h`` into ``[0, 360)``; ``-30`` becomes ``330`` and ``420`` becomes ``60``."""

    return ((h % 360) + 360) % 360


def _hue_channel(h: float, m1: float, m2: float) -> float:
    if h < 60:
        return m1 + (m2 - m1) * h / 60
    if h < 180:
        return m2
    if h < 240:
        return m1 + (m2 - m1) * (240 - h) / 60
    return m1


def hsl_to_rgb(h: float, s: float, l: float) -> np.ndarray:
    """Return gamma-encoded sRGB in ``[0, 1]`` for hue in degrees, ``s``/``l`` in ``[0, 1]``.

    Channels outside the displayable gamut (possible for saturation or
    lightness beyond their nominal range) are clipped.
    """

    h = normalize_hue(h)
    m2 = l + (l if l < 0.5 else 1 - l) * s
    m1 = 2 * l - m2
    rgb = np.array(
        [
            _hue_channel(h - 240 if h >= 240 else h + 120, m1, m2),
            _hue_channel(h, m1, m2),
            _hue_channel(h + 240 if h < 120 else h - 120, m1, m2),
        ],
        dtype=np.float64,
    )
    return np.clip(rgb, 0.0, 1.0)


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert gamma-encoded sRGB in ``[0, 1]`` to CIE Lab (D65)."""

    rgb = np.asarray(rgb, dtype=np.float64)
    linear = np.where(rgb > 0.04045, ((rgb + 0.055) / 1.055) ** 2.4, rgb / 12.92)
    xyz = SRGB_TO_XYZ @ linear
    ratio = xyz / D65_WHITE
    f = np.where(ratio > LAB_EPSILON, np.cbrt(ratio), ratio / (3 * (6.0 / 29.0) ** 2) + 4.0 / 29.0)
    fx, fy, fz = f
    return np.array([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)])


def format_rgb(rgb: np.ndarray) -> str:
    """Return a CSS ``rgb(r, g, b)`` string with 0-255 integer channels."""

    channels = np.floor(np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 1.0) * 255 + 0.5)
    r, g, b = (int(value) for value in channels)
    return f"rgb({r}, {g}, {b})"


@lru_cache(maxsize=4096)
def resolve_color(h: float, s: float, l: float) -> ColorDescriptor:
    """Build the :class:`ColorDescriptor` for an HSL triple.

    ``h`` may be any finite number and is wrapped into ``[0, 360)``.
    ``s`` and ``l`` are percentages; they are stored unchanged and divided by
    100 only for the colour conversion.
    """

    hue = normalize_hue(h)
    rgb = hsl_to_rgb(hue, s / 100.0, l / 100.0)
    lab_l, lab_a, lab_b = (float(value) for value in rgb_to_lab(rgb))
    return ColorDescriptor(
        h=hue,
        s=s,
        l=l,
        lab_l=lab_l,
        lab_a=lab_a,
        lab_b=lab_b,
        css=format_rgb(rgb),
    )


__all__ = [
    "COLOR_MODE",
    "ColorDescriptor",
    "D65_WHITE",
    "SRGB_TO_XYZ",
    "format_rgb",
    "hsl_to_rgb",
    "normalize_hue",
    "resolve_color",
    "rgb_to_lab",
]
