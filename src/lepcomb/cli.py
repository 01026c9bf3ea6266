"""Command-line interface for running lepton combinations on event inputs."""

from __future__ import annotations

import argparse
import importlib.util
import logging
import time
from pathlib import Path
from typing import Any, Iterator

import awkward as ak

from .columnar import (
    combine_columnar,
    concatenate_candidates,
    events_from_awkward,
    events_to_awkward,
    flat_masses,
)
from .combiner import ParticleCombiner, masses
from .config import AnalysisConfig, load_config
from .io import (
    iterate_particles_root,
    load_events_json,
    load_particles_root,
    write_columnar_table,
    write_mass_histogram,
    write_results_table,
)
from .logging_config import setup_logging
from .models import Event
from .plotting import plot_mass_histogram

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lepton-combiner",
        description="Build n-lepton combinations, compute invariant masses, and histogram them.",
    )
    parser.add_argument("--input", required=True, help="Input events (.json or .root).")
    parser.add_argument("--config", default=None, help="Optional JSON analysis configuration.")
    parser.add_argument("--tree", default=None, help="ROOT tree name (default: Events).")
    parser.add_argument(
        "--collection",
        default=None,
        help="Branch prefix of the particle collection (default: Muon).",
    )
    parser.add_argument("--species", default=None, help="Species mass used when no mass branch exists.")
    parser.add_argument("--n-body", type=int, choices=[2, 3, 4], default=None, help="Combination multiplicity.")
    charge = parser.add_mutually_exclusive_group()
    charge.add_argument("--total-charge", type=int, default=None, help="Required candidate charge (default: 0).")
    charge.add_argument("--any-charge", action="store_true", help="Disable the candidate charge filter.")
    parser.add_argument(
        "--allowed-charge-patterns",
        type=str,
        default=None,
        help="Comma-separated allowed charge patterns by particle order (e.g. ++--,+-+-).",
    )
    parser.add_argument("--min-mass", type=float, default=None, help="Minimum candidate invariant mass.")
    parser.add_argument("--max-mass", type=float, default=None, help="Maximum candidate invariant mass.")
    parser.add_argument("--min-candidate-pt", type=float, default=None, help="Minimum candidate transverse momentum.")
    parser.add_argument("--max-candidate-pt", type=float, default=None, help="Maximum candidate transverse momentum.")
    parser.add_argument("--min-candidate-eta", type=float, default=None, help="Minimum candidate pseudorapidity.")
    parser.add_argument("--max-candidate-eta", type=float, default=None, help="Maximum candidate pseudorapidity.")
    parser.add_argument("--min-pt", type=float, default=None, help="Particle preselection: minimum pT.")
    parser.add_argument("--min-eta", type=float, default=None, help="Particle preselection: minimum eta.")
    parser.add_argument("--max-eta", type=float, default=None, help="Particle preselection: maximum eta.")
    parser.add_argument("--max-abs-eta", type=float, default=None, help="Particle preselection: maximum |eta|.")
    parser.add_argument(
        "--mode",
        choices=["loop", "vectorized"],
        default=None,
        help="Event loop or whole-array evaluation (default: vectorized).",
    )
    parser.add_argument("--out", default=None, help="Output table for candidates (.parquet, .csv, .pkl).")
    parser.add_argument("--histogram", default=None, help="Output ROOT file for the mass histogram.")
    parser.add_argument("--plot", default=None, help="Output image for the mass histogram (e.g. mass.png).")
    parser.add_argument(
        "--custom-script",
        default=None,
        help="Path to Python file with process(results, context) function.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...).")
    return parser


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    """Merge an optional configuration file with command-line overrides."""
    config = load_config(args.config) if args.config else AnalysisConfig()
    data = config.model_dump()
    overrides = {
        ("input", "tree_name"): args.tree,
        ("input", "collection"): args.collection,
        ("input", "species"): args.species,
        ("selection", "n_body"): args.n_body,
        ("selection", "total_charge"): args.total_charge,
        ("selection", "min_mass"): args.min_mass,
        ("selection", "max_mass"): args.max_mass,
        ("selection", "min_candidate_pt"): args.min_candidate_pt,
        ("selection", "max_candidate_pt"): args.max_candidate_pt,
        ("selection", "min_candidate_eta"): args.min_candidate_eta,
        ("selection", "max_candidate_eta"): args.max_candidate_eta,
        ("selection", "min_pt"): args.min_pt,
        ("selection", "min_eta"): args.min_eta,
        ("selection", "max_eta"): args.max_eta,
        ("selection", "max_abs_eta"): args.max_abs_eta,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            data[section][key] = value
    if args.any_charge:
        data["selection"]["total_charge"] = None
    if args.allowed_charge_patterns is not None:
        data["selection"]["allowed_charge_patterns"] = tuple(
            x.strip() for x in args.allowed_charge_patterns.split(",") if x.strip()
        )
    if args.mode is not None:
        data["mode"] = args.mode
    return AnalysisConfig.model_validate(data)


def iter_input_chunks(path: str, config: AnalysisConfig) -> Iterator[list[Event] | ak.Array]:
    """Yield the input in chunks: `Event` lists for JSON, particle arrays for ROOT.

    JSON files are a single chunk. ROOT trees are one chunk unless
    `input.step_size` is set, in which case `[entry_start, entry_stop)` is
    read `step_size` entries at a time.
    """
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        yield load_events_json(path)
        return
    if suffix != ".root":
        raise ValueError(f"Unsupported input format '{suffix}'. Use .json or .root")
    inp = config.input
    if inp.step_size is None:
        yield load_particles_root(
            path,
            tree_name=inp.tree_name,
            collection=inp.collection,
            entry_start=inp.entry_start,
            entry_stop=inp.entry_stop,
            default_mass=inp.default_mass(),
        )
        return
    yield from iterate_particles_root(
        path,
        tree_name=inp.tree_name,
        collection=inp.collection,
        step_size=inp.step_size,
        entry_start=inp.entry_start,
        entry_stop=inp.entry_stop,
        default_mass=inp.default_mass(),
    )


def combine_chunk(chunk: list[Event] | ak.Array, config: AnalysisConfig, first_entry: int = 0) -> Any:
    """Run the configured combiner over one input chunk.

    ROOT entries are named `evt{entry}` in loop mode, counting from `first_entry`.
    """
    n_body = config.selection.n_body
    if config.mode == "loop":
        if isinstance(chunk, list):
            events = chunk
        else:
            events = events_from_awkward(chunk, [f"evt{first_entry + i}" for i in range(len(chunk))])
        return ParticleCombiner(n_body=n_body).combine_events(
            events,
            preselection=config.preselection(),
            cuts=config.cuts(),
        )
    particles = events_to_awkward(chunk) if isinstance(chunk, list) else chunk
    return combine_columnar(
        particles,
        n_body=n_body,
        preselection=config.preselection(),
        cuts=config.cuts(),
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint: load inputs, run combiner, write outputs, optional custom hook."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    config = config_from_args(args)

    start = time.perf_counter()
    first_entry = config.input.entry_start or 0
    n_events = 0
    parts: list[Any] = []
    for chunk in iter_input_chunks(args.input, config):
        parts.append(combine_chunk(chunk, config, first_entry + n_events))
        n_events += len(chunk)
    if not parts:
        parts.append(combine_chunk([], config, first_entry))

    results: Any
    if config.mode == "loop":
        results = [r for part in parts for r in part]
        mass_values = masses(results)
    else:
        results = concatenate_candidates(parts)
        mass_values = flat_masses(results)
    logger.info(
        "%s evaluation over %d event(s) in %d chunk(s) took %.3f s",
        config.mode,
        n_events,
        len(parts),
        time.perf_counter() - start,
    )

    if args.out:
        if config.mode == "loop":
            write_results_table(args.out, results)
        else:
            write_columnar_table(args.out, results)
    hist = config.histogram
    if args.histogram:
        write_mass_histogram(
            args.histogram, mass_values, bins=hist.bins, low=hist.low, high=hist.high, name=hist.name
        )
    if args.plot:
        plot_mass_histogram(args.plot, mass_values, bins=hist.bins, low=hist.low, high=hist.high)

    if args.custom_script:
        run_custom_script(
            script_path=args.custom_script,
            results=results,
            context={
                "input_path": args.input,
                "config": config,
                "mode": config.mode,
                "masses": mass_values,
                "output_path": args.out,
                "histogram_path": args.histogram,
            },
        )
    return 0


def run_custom_script(script_path: str, results: Any, context: dict[str, Any]) -> None:
    """Execute user-supplied post-processing callback `process(results, context)`."""
    module = _load_module(script_path)
    process = getattr(module, "process", None)
    if process is None or not callable(process):
        raise ValueError(
            f"Custom script {script_path} must define callable process(results, context)."
        )
    process(results, context)


def _load_module(script_path: str):
    """Import a Python module from an arbitrary file path."""
    path = Path(script_path)
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import custom script: {script_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


if __name__ == "__main__":
    raise SystemExit(main())
