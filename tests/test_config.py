import pytest

from simcontrast.config import (
    DEFAULT_CONFIG,
    EXPORT_FIELDS,
    AxisMode,
    AxisSpec,
    ConfigurationError,
    ExperimentConfig,
    load_config,
    save_config,
)
from simcontrast.generator import generate_trials


def _payload():
    return {
        "target": {
            "h": {"mode": "range", "start": 0, "end": 360, "steps": 4},
            "s": {"mode": "list", "values": [20, 50, 60]},
            "l": {"mode": "list", "values": [30, 50]},
        },
        "background_a": {
            "h": {"mode": "list", "values": [60, 120, 180]},
            "s": {"mode": "mapping", "mapping": [{"target": 20, "value": 80}]},
            "l": {"mode": "mapping", "mapping": []},
        },
        "background_b": {
            "h": {"mode": "fixed", "value": 60},
            "s": {"mode": "fixed", "value": 30},
            "l": {"mode": "fixed", "value": 80},
        },
        "randomize_order": False,
    }


def test_from_dict_parses_all_modes():
    config = ExperimentConfig.from_dict(_payload())
    assert config.target.h == AxisSpec.from_range(0, 360, 4)
    assert config.target.s.mode is AxisMode.LIST
    assert config.target.s.values == (20, 50, 60)
    assert config.background_a.s.mapping.lookup(20) == 80
    assert config.background_a.s.mapping.lookup(50) == 50
    assert config.background_b.l == AxisSpec.fixed(80)
    assert config.randomize_order is False
    assert config.random_seed is None
    assert config.data_fields == EXPORT_FIELDS


def test_round_trip_through_file(tmp_path):
    path = save_config(DEFAULT_CONFIG, tmp_path / "config.json")
    loaded = load_config(path)
    assert loaded == DEFAULT_CONFIG
    assert len(generate_trials(loaded)) == 72


def test_runtime_options(tmp_json):
    payload = _payload()
    payload.update(random_seed=5, experiment_name="pilot", response_timeout_ms=3000)
    config = load_config(tmp_json(payload))
    assert config.random_seed == 5
    assert config.experiment_name == "pilot"
    assert config.response_timeout_ms == 3000


@pytest.mark.parametrize(
    "mutate, path",
    [
        (lambda p: p["target"]["h"].update(mode="spiral"), "target.h"),
        (lambda p: p["target"]["s"].update(values="20,50"), "target.s.values"),
        (lambda p: p["target"]["l"].update(values=[30, "fifty"]), "target.l.values[1]"),
        (lambda p: p["target"]["h"].update(steps=2.5), "target.h.steps"),
        (lambda p: p["background_a"]["s"]["mapping"].append({"target": 50}), "background_a.s.mapping[1].value"),
        (lambda p: p["background_b"]["h"].pop("value"), "background_b.h.value"),
        (lambda p: p["background_b"].pop("l"), "background_b.l"),
        (lambda p: p.pop("background_a"), "background_a"),
        (lambda p: p.update(random_seed="abc"), "random_seed"),
        (lambda p: p.update(response_timeout_ms=0), "response_timeout_ms"),
        (lambda p: p.update(randomize_order="false"), "randomize_order"),
        (lambda p: p.update(randomize_order=0), "randomize_order"),
    ],
)
def test_invalid_payload_names_the_axis(mutate, path):
    payload = _payload()
    mutate(payload)
    with pytest.raises(ConfigurationError, match=path.replace("[", r"\[").replace("]", r"\]")):
        ExperimentConfig.from_dict(payload)


@pytest.mark.parametrize("flag", [True, False])
def test_randomize_order_accepts_booleans(flag):
    payload = _payload()
    payload["randomize_order"] = flag
    assert ExperimentConfig.from_dict(payload).randomize_order is flag


def test_invalid_json_is_configuration_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_mapping_to_dict_keeps_pairs():
    spec = AxisSpec.from_mapping([(30, 70), (50, 50)])
    assert spec.to_dict() == {
        "mode": "mapping",
        "mapping": [{"target": 30, "value": 70}, {"target": 50, "value": 50}],
    }
    assert AxisSpec.from_dict(spec.to_dict()) == spec


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)
