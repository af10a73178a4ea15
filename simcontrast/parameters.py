"""Expand a single :class:`~simcontrast.config.AxisSpec` into its values.

Every generated trial is a combination of per-channel value sequences.  The
helpers in this module turn one axis rule into that ordered sequence:

* ``FIXED`` gives a single value,
* ``RANGE`` subdivides ``start..end`` linearly, inclusive of both ends,
* ``LIST`` returns the explicit values verbatim (order and duplicates kept),
* ``MAPPING`` can only be resolved against the keys produced by another axis.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .config import AxisMode, AxisSpec, ConfigurationError

RANGE_PRECISION: int = 2


def resolve_range(start: float, end: float, steps: int) -> List[float]:
    """Return ``steps`` evenly spaced values from ``start`` to ``end``.

    Values are rounded to :data:`RANGE_PRECISION` decimals so that generated
    identifiers and exported data do not carry floating point drift.  With a
    single step only ``start`` is returned.
    """

    if isinstance(steps, bool) or not isinstance(steps, int):
        raise ConfigurationError(f"Range steps must be an integer, got {steps!r}")
    if steps <= 0:
        raise ConfigurationError(f"Range steps must be >= 1, got {steps}")
    if steps == 1:
        return [start]

    step_size = (end - start) / (steps - 1)
    return [round(start + index * step_size, RANGE_PRECISION) for index in range(steps)]


def resolve_mapping(spec: AxisSpec, keys: Iterable[float]) -> List[float]:
    """Look up each of ``keys`` in a mapping axis, in order.

    Keys without an entry resolve to themselves.  ``FIXED`` axes are accepted
    too and give their value for every key.
    """

    if spec.mode is AxisMode.MAPPING:
        table = spec.mapping.as_dict()
        return [table.get(key, key) for key in keys]
    if spec.mode is AxisMode.FIXED:
        return [spec.value for _ in keys]
    raise ConfigurationError(
        f"A {spec.mode.value} axis cannot be resolved against another axis's values"
    )


def resolve_axis(spec: AxisSpec, keys: Optional[Sequence[float]] = None) -> List[float]:
    """Return the ordered value sequence described by ``spec``.

    ``keys`` is only consulted for ``MAPPING`` axes, which have no values of
    their own; resolving such an axis without keys is a configuration error.
    """

    if spec.mode is AxisMode.FIXED:
        return [spec.value]
    if spec.mode is AxisMode.RANGE:
        return resolve_range(spec.start, spec.end, spec.steps)
    if spec.mode is AxisMode.LIST:
        return list(spec.values)
    if keys is None:
        raise ConfigurationError("Mapping axes must be resolved against a list of keys")
    return resolve_mapping(spec, keys)


__all__ = ["RANGE_PRECISION", "resolve_axis", "resolve_mapping", "resolve_range"]
