import json
from pathlib import Path

import pytest

from simcontrast.config import DEFAULT_CONFIG, AxisSpec, EntityConfig, ExperimentConfig


@pytest.fixture
def tmp_json(tmp_path: Path):
    def _make(data, name="sample.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def default_config():
    return DEFAULT_CONFIG


@pytest.fixture
def small_config():
    """Two targets x two offsets x one background B, in enumeration order."""
    return ExperimentConfig(
        target=EntityConfig(
            h=AxisSpec.from_list([180, 300]),
            s=AxisSpec.from_list([50]),
            l=AxisSpec.from_list([30]),
        ),
        background_a=EntityConfig(
            h=AxisSpec.from_list([60, 120]),
            s=AxisSpec.from_mapping([(50, 50)]),
            l=AxisSpec.from_mapping([(30, 70)]),
        ),
        background_b=EntityConfig(
            h=AxisSpec.fixed(60),
            s=AxisSpec.fixed(30),
            l=AxisSpec.fixed(80),
        ),
        randomize_order=False,
    )
