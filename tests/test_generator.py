import dataclasses
import random

import pytest

from simcontrast.colors import resolve_color
from simcontrast.config import AxisSpec, ConfigurationError, EntityConfig, ExperimentConfig
from simcontrast.generator import expected_trial_count, generate_trials


def _ordered(config):
    return dataclasses.replace(config, randomize_order=False)


def test_default_config_trial_count(default_config):
    trials = generate_trials(_ordered(default_config))
    assert len(trials) == 4 * 3 * 2 * 3 * 1 * 1 * 1 == 72
    assert expected_trial_count(default_config) == 72


def test_ids_follow_enumeration_order(default_config):
    trials = generate_trials(_ordered(default_config))
    assert [trial.trial_id for trial in trials] == [f"trial-{i}" for i in range(1, 73)]


def test_nesting_order(small_config):
    trials = generate_trials(small_config)
    assert [trial.provenance.target for trial in trials] == [
        "H:180, S:50, L:30",
        "H:180, S:50, L:30",
        "H:300, S:50, L:30",
        "H:300, S:50, L:30",
    ]
    assert [trial.provenance.background_a for trial in trials] == [
        "H:240 (Δ60), S:50, L:70",
        "H:300 (Δ120), S:50, L:70",
        "H:360 (Δ60), S:50, L:70",
        "H:420 (Δ120), S:50, L:70",
    ]
    assert trials[0].provenance.background_b == "H:60, S:30, L:80"


def test_background_a_hue_wraps_in_descriptor(small_config):
    trials = generate_trials(small_config)
    assert trials[2].background_a.h == 0
    assert trials[3].background_a.h == 60
    assert trials[3].background_a == resolve_color(60, 50, 70)


def test_descriptors_match_color_resolver(small_config):
    trial = generate_trials(small_config)[0]
    assert trial.target == resolve_color(180, 50, 30)
    assert trial.background_a == resolve_color(240, 50, 70)
    assert trial.background_b == resolve_color(60, 30, 80)


def test_mapping_fallback_uses_target_value():
    config = ExperimentConfig(
        target=EntityConfig(
            h=AxisSpec.fixed(0),
            s=AxisSpec.from_list([20, 50]),
            l=AxisSpec.from_list([40]),
        ),
        background_a=EntityConfig(
            h=AxisSpec.from_list([0]),
            s=AxisSpec.from_mapping([(20, 80)]),
            l=AxisSpec.from_mapping([]),
        ),
        background_b=EntityConfig(
            h=AxisSpec.fixed(0), s=AxisSpec.fixed(0), l=AxisSpec.fixed(50)
        ),
        randomize_order=False,
    )
    trials = generate_trials(config)
    by_target_s = {trial.target.s: trial.background_a for trial in trials}
    assert by_target_s[20].s == 80
    assert by_target_s[50].s == 50
    assert all(trial.background_a.l == 40 for trial in trials)


def test_fixed_background_a_saturation(small_config):
    config = dataclasses.replace(
        small_config,
        background_a=dataclasses.replace(small_config.background_a, s=AxisSpec.fixed(10)),
    )
    assert {trial.background_a.s for trial in generate_trials(config)} == {10}


def test_background_a_list_saturation_is_rejected(small_config):
    config = dataclasses.replace(
        small_config,
        background_a=dataclasses.replace(small_config.background_a, s=AxisSpec.from_list([1, 2])),
    )
    with pytest.raises(ConfigurationError):
        generate_trials(config)
    with pytest.raises(ConfigurationError):
        expected_trial_count(config)


@pytest.mark.parametrize("entity, axis", [("target", "s"), ("target", "l"), ("background_a", "h")])
def test_empty_axis_yields_no_trials(default_config, entity, axis):
    entity_config = dataclasses.replace(
        getattr(default_config, entity), **{axis: AxisSpec.from_list([])}
    )
    config = dataclasses.replace(default_config, **{entity: entity_config})
    assert generate_trials(config) == []
    assert expected_trial_count(config) == 0


def test_invalid_range_fails_before_emitting(default_config):
    config = dataclasses.replace(
        default_config,
        background_b=dataclasses.replace(
            default_config.background_b, l=AxisSpec.from_range(0, 100, 0)
        ),
    )
    with pytest.raises(ConfigurationError):
        generate_trials(config)


def test_count_is_product_of_axis_lengths():
    config = ExperimentConfig(
        target=EntityConfig(
            h=AxisSpec.from_range(0, 270, 3),
            s=AxisSpec.from_list([20, 50]),
            l=AxisSpec.fixed(50),
        ),
        background_a=EntityConfig(
            h=AxisSpec.from_list([90, 180]),
            s=AxisSpec.from_mapping([]),
            l=AxisSpec.from_mapping([]),
        ),
        background_b=EntityConfig(
            h=AxisSpec.from_range(0, 180, 2),
            s=AxisSpec.from_list([10, 20, 30]),
            l=AxisSpec.from_range(20, 80, 2),
        ),
        randomize_order=True,
        random_seed=3,
    )
    assert len(generate_trials(config)) == 3 * 2 * 1 * 2 * 2 * 3 * 2
    assert expected_trial_count(config) == 144


def test_shuffle_is_permutation(default_config):
    ordered = generate_trials(_ordered(default_config))
    shuffled = generate_trials(default_config, random.Random(1234))
    assert len(shuffled) == len(ordered)
    assert sorted(t.trial_id for t in shuffled) == sorted(t.trial_id for t in ordered)
    assert [t.trial_id for t in shuffled] != [t.trial_id for t in ordered]
    by_id = {t.trial_id: t for t in ordered}
    assert all(by_id[t.trial_id] == t for t in shuffled)


def test_shuffle_is_reproducible_with_seed(default_config):
    first = generate_trials(default_config, random.Random(7))
    second = generate_trials(default_config, random.Random(7))
    assert [t.trial_id for t in first] == [t.trial_id for t in second]


def test_config_seed_is_used_without_rng(default_config):
    config = dataclasses.replace(default_config, random_seed=99)
    first = [t.trial_id for t in generate_trials(config)]
    second = [t.trial_id for t in generate_trials(config)]
    assert first == second
    assert first == [t.trial_id for t in generate_trials(default_config, random.Random(99))]


def test_unshuffled_ignores_rng(small_config):
    class ExplodingRandom(random.Random):
        def shuffle(self, x):
            raise AssertionError("shuffle should not be called")

    trials = generate_trials(small_config, ExplodingRandom())
    assert [t.trial_id for t in trials] == ["trial-1", "trial-2", "trial-3", "trial-4"]


@pytest.mark.parametrize("hue, shown", [(2.5, "3"), (0.5, "1"), (359.5, "360"), (2.4, "2")])
def test_provenance_hue_rounds_half_up(small_config, hue, shown):
    config = dataclasses.replace(
        small_config,
        target=EntityConfig(h=AxisSpec.fixed(hue), s=AxisSpec.fixed(20), l=AxisSpec.fixed(30)),
        background_a=EntityConfig(
            h=AxisSpec.from_list([60]), s=AxisSpec.fixed(50), l=AxisSpec.fixed(70)
        ),
        background_b=EntityConfig(h=AxisSpec.fixed(hue), s=AxisSpec.fixed(30), l=AxisSpec.fixed(80)),
    )
    (trial,) = generate_trials(config)
    assert trial.provenance.target == f"H:{shown}, S:20, L:30"
    assert trial.provenance.background_b == f"H:{shown}, S:30, L:80"
    assert trial.provenance.background_a.startswith(f"H:{int(shown) + 60} (Δ60)")
