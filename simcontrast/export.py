"""Flatten trial results into rows and save them for analysis.

The :class:`ResultsExporter` keeps the accumulated rows of one session in
memory and writes them to a CSV file with a JSON sidecar holding the subject
information.  The column layout (:data:`~simcontrast.config.EXPORT_FIELDS`)
is what downstream analysis scripts read, so it must stay stable.
"""
from __future__ import annotations

import csv
import datetime as dt
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .colors import ColorDescriptor
from .config import EXPORT_FIELDS
from .metrics import delta_e, delta_h
from .trial import ResponseOutcome, Trial, TrialResult, summarize_results

logger = logging.getLogger(__name__)

TIMEOUT_SENTINEL: str = "TIMEOUT"


@dataclass(frozen=True)
class SubjectInfo:
    """Free-form subject metadata collected before the session."""

    id: str
    age: str = ""
    gender: str = ""


def encode_outcome(outcome: ResponseOutcome) -> object:
    """Return ``1`` for same, ``0`` for different and ``"TIMEOUT"`` otherwise."""

    if outcome is ResponseOutcome.SAME:
        return 1
    if outcome is ResponseOutcome.DIFFERENT:
        return 0
    return TIMEOUT_SENTINEL


def _reaction_time(value: float) -> object:
    return int(value) if float(value).is_integer() else value


def _color_fields(prefix: str, color: ColorDescriptor) -> Dict[str, str]:
    return {
        f"{prefix}_css": color.css,
        f"{prefix}_h": f"{color.h:.2f}",
        f"{prefix}_s": f"{color.s:.2f}",
        f"{prefix}_l": f"{color.l:.2f}",
        f"{prefix}_L": f"{color.lab_l:.2f}",
        f"{prefix}_a": f"{color.lab_a:.2f}",
        f"{prefix}_b": f"{color.lab_b:.2f}",
    }


def flatten_result(
    result: TrialResult,
    subject: SubjectInfo,
    random_seed: int,
) -> Dict[str, object]:
    """Return the export row for ``result``.

    Delta E and Delta H are computed between the two backgrounds, the context
    difference that drives the contrast effect.
    """

    trial = result.trial
    row: Dict[str, object] = {
        "subject_id": subject.id,
        "subject_age": subject.age,
        "subject_gender": subject.gender,
        "trial_id": result.trial_id,
        "random_seed": random_seed,
        "reaction_time": _reaction_time(result.reaction_time_ms),
        "perceived_same": encode_outcome(result.outcome),
        "timed_out": 1 if result.timed_out else 0,
        "target_mode": trial.target.mode,
    }
    row.update(_color_fields("target", trial.target))
    row.update(_color_fields("bgA", trial.background_a))
    row.update(_color_fields("bgB", trial.background_b))
    row["delta_E_ab"] = f"{delta_e(trial.background_a, trial.background_b):.4f}"
    row["delta_H"] = f"{delta_h(trial.background_a, trial.background_b):.4f}"
    return row


def load_results(
    path: str | os.PathLike[str],
    trials: Sequence[Trial],
    *,
    timeout_ms: Optional[int] = None,
) -> List[TrialResult]:
    """Read a JSON results file and join each entry to its generated trial.

    Each entry needs ``trial_id``, ``response`` (``same``, ``different`` or
    ``timeout``), ``reaction_time_ms`` and ``timestamp_ms``.  When
    ``timeout_ms`` is given, timed-out entries record it as their reaction
    time instead of the stored value.
    """

    by_id = {trial.trial_id: trial for trial in trials}
    with Path(path).open("r", encoding="utf-8") as results_file:
        payload: Any = json.load(results_file)
    if not isinstance(payload, list):
        raise ValueError(f"Results file '{Path(path).name}' must contain a JSON list.")

    results: List[TrialResult] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, Mapping):
            raise ValueError(f"Result #{index}: expected an object, got {entry!r}")
        try:
            trial_id = str(entry["trial_id"])
            outcome = ResponseOutcome(str(entry["response"]).lower())
            reaction_time = float(entry["reaction_time_ms"])
            timestamp = int(entry["timestamp_ms"])
        except KeyError as exc:
            raise ValueError(f"Result #{index}: missing field {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Result #{index}: {exc}") from exc
        if trial_id not in by_id:
            raise KeyError(f"Result #{index} refers to unknown trial '{trial_id}'")
        if outcome is ResponseOutcome.TIMEOUT and timeout_ms is not None:
            reaction_time = float(timeout_ms)
        results.append(TrialResult(by_id[trial_id], outcome, reaction_time, timestamp))
    return results


class ResultsExporter:
    """Accumulate export rows for one session and write them to disk."""

    def __init__(
        self,
        subject: SubjectInfo,
        random_seed: int,
        *,
        data_fields: Sequence[str] = EXPORT_FIELDS,
        results_directory: str | os.PathLike[str] = "data",
        experiment_name: str = "experiment",
    ) -> None:
        self.subject = subject
        self.experiment_name = experiment_name
        self.random_seed = random_seed
        self.data_fields: List[str] = list(data_fields)
        self.results_directory = Path(results_directory)
        self.experiment_data: List[Dict[str, object]] = []
        self.experiment_data_filename: Optional[Path] = None
        self.data_lines_written: int = 0
        self._results: List[TrialResult] = []

    # ------------------------------------------------------------------
    # File naming helpers
    # ------------------------------------------------------------------
    def default_filename(self, suffix: str = ".csv", date: dt.date | None = None) -> Path:
        """Return ``<experiment_name>_<subject>_<YYYY-MM-DD><suffix>`` in the results directory."""

        day = (date or dt.date.today()).isoformat()
        subject_code = self.subject.id or "unknown"
        return self.results_directory / f"{self.experiment_name}_{subject_code}_{day}{suffix}"

    # ------------------------------------------------------------------
    # CSV handling
    # ------------------------------------------------------------------
    def open_csv_data_file(self, data_filename: str | os.PathLike[str] | None = None) -> Path:
        """Prepare an empty CSV file with the header row."""

        filename = Path(data_filename) if data_filename else self.default_filename(".csv")
        filename.parent.mkdir(parents=True, exist_ok=True)
        self.experiment_data_filename = filename
        with filename.open("w", newline="", encoding="utf-8") as csv_file:
            writer = csv.writer(csv_file)
            writer.writerow(self.data_fields)
        self.data_lines_written = 0
        return filename

    def update_experiment_data(self, results: Iterable[TrialResult]) -> None:
        """Flatten new results and append them to the in-memory store."""

        for result in results:
            self._results.append(result)
            self.experiment_data.append(flatten_result(result, self.subject, self.random_seed))

    def save_data_to_csv(self) -> Path:
        """Append all rows not yet written to the CSV file."""

        if self.experiment_data_filename is None:
            self.open_csv_data_file()
        assert self.experiment_data_filename is not None
        with self.experiment_data_filename.open("a", newline="", encoding="utf-8") as csv_file:
            writer = csv.DictWriter(csv_file, fieldnames=self.data_fields, extrasaction="ignore")
            for row in self.experiment_data[self.data_lines_written :]:
                writer.writerow(row)
                self.data_lines_written += 1
        return self.experiment_data_filename

    # ------------------------------------------------------------------
    # Session summary
    # ------------------------------------------------------------------
    def save_subject_info(self, filename: str | os.PathLike[str] | None = None) -> Path:
        """Write subject info, seed and response counts as JSON."""

        if filename is None:
            base = self.experiment_data_filename or self.default_filename(".csv")
            filename = base.with_suffix(".json")
        info_path = Path(filename)
        info_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "subject": asdict(self.subject),
            "random_seed": self.random_seed,
            "summary": asdict(summarize_results(self._results)),
        }
        with info_path.open("w", encoding="utf-8") as info_file:
            json.dump(payload, info_file, indent=2)
        return info_path

    def save_results(
        self,
        results: Iterable[TrialResult],
        data_filename: str | os.PathLike[str] | None = None,
    ) -> Path:
        """Write ``results`` to a fresh CSV plus JSON sidecar; return the CSV path."""

        filename = self.open_csv_data_file(data_filename)
        self.update_experiment_data(results)
        self.save_data_to_csv()
        info_path = self.save_subject_info()
        logger.info("Saved %d rows to %s (info: %s)", self.data_lines_written, filename, info_path)
        return filename


__all__ = [
    "ResultsExporter",
    "SubjectInfo",
    "TIMEOUT_SENTINEL",
    "encode_outcome",
    "flatten_result",
    "load_results",
]
