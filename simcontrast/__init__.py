"""Trial generation and colour metrics for a simultaneous contrast experiment.

A target disk is shown on two background colours and the subject judges
whether it looks the same in both contexts.  This package expands a compact
HSL parameter configuration into the full set of trials, converts every colour
to CIE Lab, and flattens recorded responses (with Delta E / Delta H between
the backgrounds) into rows for analysis.  Presentation of the stimuli is left
to whichever front end runs the session.
"""

from .colors import ColorDescriptor, resolve_color
from .config import (
    DEFAULT_CONFIG,
    EXPORT_FIELDS,
    AxisMode,
    AxisSpec,
    ConfigurationError,
    EntityConfig,
    ExperimentConfig,
    ParameterMapping,
    load_config,
    save_config,
)
from .export import ResultsExporter, SubjectInfo, flatten_result, load_results
from .generator import expected_trial_count, generate_trials
from .metrics import delta_e, delta_h
from .parameters import resolve_axis, resolve_mapping, resolve_range
from .trial import ResponseOutcome, ResultSummary, Trial, TrialProvenance, TrialResult, summarize_results
from .cli import main as run_cli

__all__ = [
    "AxisMode",
    "AxisSpec",
    "ColorDescriptor",
    "ConfigurationError",
    "DEFAULT_CONFIG",
    "EXPORT_FIELDS",
    "EntityConfig",
    "ExperimentConfig",
    "ParameterMapping",
    "ResponseOutcome",
    "ResultSummary",
    "ResultsExporter",
    "SubjectInfo",
    "Trial",
    "TrialProvenance",
    "TrialResult",
    "delta_e",
    "delta_h",
    "expected_trial_count",
    "flatten_result",
    "generate_trials",
    "load_config",
    "load_results",
    "resolve_axis",
    "resolve_color",
    "resolve_mapping",
    "resolve_range",
    "run_cli",
    "save_config",
    "summarize_results",
]
