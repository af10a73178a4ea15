"""Colour difference metrics between two resolved descriptors."""
from __future__ import annotations

import math

import numpy as np

from .colors import ColorDescriptor


def chroma(color: ColorDescriptor) -> float:
    """Return the CIE Lab chroma ``sqrt(a*^2 + b*^2)`` of ``color``."""

    return color.chroma


def delta_e(c1: ColorDescriptor, c2: ColorDescriptor) -> float:
    """CIE76 colour difference: Euclidean distance in Lab space."""

    return float(np.linalg.norm(np.subtract(c1.lab, c2.lab)))


def delta_h(c1: ColorDescriptor, c2: ColorDescriptor) -> float:
    """Metric hue difference ``sqrt(dE^2 - dL^2 - dC^2)``.

    For near-identical colours rounding can push the radicand slightly below
    zero; it is clamped so the result is always a non-negative number.
    """

    d_e = delta_e(c1, c2)
    d_l = c1.lab_l - c2.lab_l
    d_c = chroma(c1) - chroma(c2)
    return math.sqrt(max(0.0, d_e * d_e - d_l * d_l - d_c * d_c))


__all__ = ["chroma", "delta_e", "delta_h"]
