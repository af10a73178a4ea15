"""Expand an :class:`ExperimentConfig` into the full set of stimulus trials.

The trial set is the Cartesian product of every resolved axis, enumerated in a
fixed nesting order (outer to inner): target H, target S, target L,
background A hue offset, background B H, background B S, background B L.
Background A is not independent: its hue is the target hue plus an offset and
its saturation/lightness are looked up from the target's current values.
"""
from __future__ import annotations

import logging
import random
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from .colors import resolve_color
from .config import AxisMode, ConfigurationError, ExperimentConfig
from .parameters import resolve_axis, resolve_mapping
from .trial import Trial, TrialProvenance

logger = logging.getLogger(__name__)


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(float(value))


def _format_hue(h: float) -> str:
    """Round a hue to whole degrees, halves away from zero (2.5 -> 3)."""

    return str(Decimal(str(h)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _describe(h: float, s: float, l: float) -> str:
    return f"H:{_format_hue(h)}, S:{_format_value(s)}, L:{_format_value(l)}"


def _check_dependent_axes(config: ExperimentConfig) -> None:
    for name, axis in (("s", config.background_a.s), ("l", config.background_a.l)):
        if axis.mode not in (AxisMode.MAPPING, AxisMode.FIXED):
            raise ConfigurationError(
                f"background_a.{name}: must be a mapping or fixed value, got {axis.mode.value}"
            )


def expected_trial_count(config: ExperimentConfig) -> int:
    """Return how many trials :func:`generate_trials` will emit for ``config``."""

    _check_dependent_axes(config)
    count = 1
    for axis in (
        config.target.h,
        config.target.s,
        config.target.l,
        config.background_a.h,
        config.background_b.h,
        config.background_b.s,
        config.background_b.l,
    ):
        count *= len(resolve_axis(axis))
    return count


def generate_trials(
    config: ExperimentConfig,
    rng: Optional[random.Random] = None,
) -> List[Trial]:
    """Return every trial described by ``config``.

    Trial ids (``trial-1``, ``trial-2``, ...) follow enumeration order and are
    assigned before the optional shuffle.  Every axis is resolved up front, so
    a configuration error is raised before any trial exists.  ``rng`` drives
    the shuffle; without one a generator seeded from ``config.random_seed`` is
    used.
    """

    _check_dependent_axes(config)
    target_hs = resolve_axis(config.target.h)
    target_ss = resolve_axis(config.target.s)
    target_ls = resolve_axis(config.target.l)
    bg_b_hs = resolve_axis(config.background_b.h)
    bg_b_ss = resolve_axis(config.background_b.s)
    bg_b_ls = resolve_axis(config.background_b.l)
    bg_a_deltas = resolve_axis(config.background_a.h)
    bg_a_ss = resolve_mapping(config.background_a.s, target_ss)
    bg_a_ls = resolve_mapping(config.background_a.l, target_ls)

    trials: List[Trial] = []
    for t_h in target_hs:
        for t_s, a_s in zip(target_ss, bg_a_ss):
            for t_l, a_l in zip(target_ls, bg_a_ls):
                target = resolve_color(t_h, t_s, t_l)
                target_params = _describe(t_h, t_s, t_l)

                for delta in bg_a_deltas:
                    # wrapping into [0, 360) happens in resolve_color
                    a_h = t_h + delta
                    background_a = resolve_color(a_h, a_s, a_l)
                    bg_a_params = (
                        f"H:{_format_hue(a_h)} (Δ{_format_value(delta)}), "
                        f"S:{_format_value(a_s)}, L:{_format_value(a_l)}"
                    )

                    for b_h in bg_b_hs:
                        for b_s in bg_b_ss:
                            for b_l in bg_b_ls:
                                trials.append(
                                    Trial(
                                        trial_id=f"trial-{len(trials) + 1}",
                                        target=target,
                                        background_a=background_a,
                                        background_b=resolve_color(b_h, b_s, b_l),
                                        provenance=TrialProvenance(
                                            target=target_params,
                                            background_a=bg_a_params,
                                            background_b=_describe(b_h, b_s, b_l),
                                        ),
                                    )
                                )

    logger.info("Generated %d trials", len(trials))
    if config.randomize_order and len(trials) > 1:
        if rng is None:
            rng = random.Random(config.random_seed)
        # random.Random.shuffle is an in-place Fisher-Yates shuffle
        rng.shuffle(trials)
        logger.debug("Shuffled %d trials", len(trials))
    return trials


__all__ = ["expected_trial_count", "generate_trials"]
