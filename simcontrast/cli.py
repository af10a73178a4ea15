"""Command line helpers for the simultaneous contrast trial generator."""
from __future__ import annotations

import argparse
import dataclasses
import logging
import random
import sys
import time
from pathlib import Path

from .config import DEFAULT_CONFIG, ConfigurationError, ExperimentConfig, load_config, save_config
from .export import ResultsExporter, SubjectInfo, load_results
from .generator import expected_trial_count, generate_trials
from .metrics import delta_e, delta_h
from .trial import summarize_results


def build_arg_parser() -> argparse.ArgumentParser:
    """Create an argument parser with one sub-command per task."""

    parser = argparse.ArgumentParser(
        prog="simcontrast",
        description=(
            "Generate simultaneous colour contrast trials and export subject "
            "responses. Without --config the built-in default design is used."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log generation and export details.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    init_parser = commands.add_parser(
        "init-config",
        help="Write the default configuration as JSON so it can be edited.",
    )
    init_parser.add_argument("path", type=Path, help="Destination JSON file.")

    preview_parser = commands.add_parser(
        "preview",
        help="List every generated trial without running a session.",
    )
    _add_config_argument(preview_parser)
    preview_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the presentation order (default: random_seed from the config, else current time in ms).",
    )
    preview_parser.add_argument(
        "--no-shuffle",
        action="store_true",
        help="Keep enumeration order even if the configuration randomizes it.",
    )
    preview_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only print the first N trials.",
    )

    export_parser = commands.add_parser(
        "export",
        help="Convert a JSON results file into the analysis CSV.",
    )
    _add_config_argument(export_parser)
    export_parser.add_argument(
        "--results",
        type=Path,
        required=True,
        help="JSON list of {trial_id, response, reaction_time_ms, timestamp_ms}.",
    )
    export_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Session seed written to every row (default: random_seed from the config, else current time in ms).",
    )
    export_parser.add_argument("--subject-id", required=True, help="Subject identifier.")
    export_parser.add_argument("--age", default="", help="Subject age.")
    export_parser.add_argument("--gender", default="", help="Subject gender.")
    export_parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Folder where the CSV/JSON outputs are saved (default: results_directory from the config).",
    )
    export_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Explicit CSV path (default: <experiment_name>_<subject>_<date>.csv in the data folder).",
    )
    return parser


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Experiment configuration JSON (default: built-in design).",
    )


def _session_seed(seed: int | None, config: ExperimentConfig) -> int:
    """Return ``--seed``, else the configured ``random_seed``, else the clock in ms."""

    if seed is not None:
        return seed
    if config.random_seed is not None:
        return config.random_seed
    return int(time.time() * 1000)


def _load_config(path: Path | None) -> ExperimentConfig:
    if path is None:
        return DEFAULT_CONFIG
    if not path.exists():
        raise SystemExit(f"Configuration file '{path}' not found")
    try:
        return load_config(path)
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def main(argv: list[str] | None = None) -> None:
    """Parse command line options and run the requested command."""

    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init-config":
        written = save_config(DEFAULT_CONFIG, args.path)
        print(f"Default configuration written to '{written}'.")
        return

    config = _load_config(args.config)
    seed = _session_seed(args.seed, config)
    try:
        if args.command == "preview":
            if args.no_shuffle:
                config = dataclasses.replace(config, randomize_order=False)
            perform_preview(config, seed=seed, limit=args.limit)
        else:
            perform_export(
                config,
                seed=seed,
                results_path=args.results,
                subject=SubjectInfo(id=args.subject_id, age=args.age, gender=args.gender),
                data_dir=args.data_dir,
                output=args.output,
            )
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def perform_preview(config: ExperimentConfig, *, seed: int, limit: int | None = None) -> None:
    """Print every generated trial with the colour difference between its backgrounds."""

    expected = expected_trial_count(config)
    if expected == 0:
        print("Configuration yields no trials; nothing to report.")
        return

    trials = generate_trials(config, random.Random(seed))
    order = "randomized" if config.randomize_order else "enumeration"
    print(f"Preview: {len(trials)} trials ({order} order, seed={seed}).")
    shown = trials if limit is None else trials[: max(0, limit)]
    for index, trial in enumerate(shown, start=1):
        print(f"[{index:03}] {trial.trial_id}")
        print(f"      target : {trial.provenance.target:<28} {trial.target.css}")
        print(f"      bgA    : {trial.provenance.background_a:<28} {trial.background_a.css}")
        print(f"      bgB    : {trial.provenance.background_b:<28} {trial.background_b.css}")
        print(
            f"      dE(A,B)={delta_e(trial.background_a, trial.background_b):.4f} | "
            f"dH(A,B)={delta_h(trial.background_a, trial.background_b):.4f}"
        )
    print("Preview complete.")


def perform_export(
    config: ExperimentConfig,
    *,
    seed: int,
    results_path: Path,
    subject: SubjectInfo,
    data_dir: Path | None = None,
    output: Path | None = None,
) -> Path:
    """Join recorded responses with their trials and write the analysis CSV."""

    if not results_path.exists():
        raise SystemExit(f"Results file '{results_path}' not found")
    trials = generate_trials(config, random.Random(seed))
    try:
        results = load_results(results_path, trials, timeout_ms=config.response_timeout_ms)
    except (KeyError, ValueError) as exc:
        raise SystemExit(f"Could not read results: {exc}") from exc

    exporter = ResultsExporter(
        subject,
        seed,
        data_fields=config.data_fields,
        results_directory=data_dir or Path(config.results_directory),
        experiment_name=config.experiment_name,
    )
    filename = exporter.save_results(results, output)
    summary = summarize_results(results)
    print(f"Saved {summary.total} results to '{filename}'.")
    print(
        f"  same={summary.same} | different={summary.different} | "
        f"timeouts={summary.timed_out}"
    )
    return filename


if __name__ == "__main__":  # pragma: no cover - module level CLI hook
    main(sys.argv[1:])
