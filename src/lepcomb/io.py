"""Input/output helpers: JSON and ROOT inputs, table and histogram export."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Sequence

import awkward as ak
import numpy as np
import uproot

from .columnar import ColumnarCandidates, zip_particles
from .models import CombinationResult, Event, Particle
from .pid import species_from_name

logger = logging.getLogger(__name__)

RESULT_COLUMNS = (
    "event_id",
    "particle_ids",
    "indices",
    "source_particle_ids",
    "px",
    "py",
    "pz",
    "energy",
    "candidate_mass",
    "candidate_pt",
    "candidate_eta",
    "candidate_phi",
    "charge_pattern",
    "total_charge",
)

COLUMNAR_FIELDS = ("pt", "eta", "phi", "charge")


def load_events_json(path: str | Path) -> list[Event]:
    """Load multi-event input JSON into `Event` objects.

    Expected shape:
    {
      "events": [
        {"event_id": "...", "particles": [{"pt": ..., "eta": ..., "phi": ...,
                                           "charge": ..., "mass": ...}, ...]},
        ...
      ]
    }
    A particle may give `"species": "mu"` instead of an explicit mass.
    """
    data = _load_json(path)
    events_data = data.get("events")
    if not isinstance(events_data, list):
        raise ValueError("Events JSON must contain a list under key 'events'.")
    out: list[Event] = []
    for idx, event in enumerate(events_data):
        if not isinstance(event, dict):
            raise ValueError(f"Event entry at index {idx} must be an object.")
        event_id = str(event.get("event_id", f"evt{idx}"))
        particles_data = event.get("particles")
        if not isinstance(particles_data, list):
            raise ValueError(f"Event '{event_id}' must contain a list under key 'particles'.")
        particles = tuple(
            _parse_particle_item(item=item, idx=pidx, context=f"event '{event_id}'")
            for pidx, item in enumerate(particles_data)
        )
        out.append(Event(event_id=event_id, particles=particles))
    logger.info("Loaded %d event(s) from %s", len(out), path)
    return out


def load_particles_root(
    path: str | Path,
    tree_name: str = "Events",
    collection: str = "Muon",
    entry_start: int | None = None,
    entry_stop: int | None = None,
    default_mass: float | None = None,
) -> ak.Array:
    """Read one particle collection from a ROOT TTree into a jagged record array.

    Branches are expected as `{collection}_pt`, `{collection}_eta`,
    `{collection}_phi`, `{collection}_charge` and optionally
    `{collection}_mass`. Without a mass branch, `default_mass` (or the
    species mass matching `collection`) is used.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input ROOT file not found: {path}")
    with uproot.open(path) as file:
        tree = _get_tree(file, tree_name, path)
        branches, fill_mass = _resolve_branches(tree, collection, default_mass)
        arrays = tree.arrays(
            branches,
            entry_start=entry_start,
            entry_stop=entry_stop,
            library="ak",
        )
    particles = _zip_collection(arrays, collection, fill_mass)
    logger.info("Read %d event(s) of '%s' from %s:%s", len(particles), collection, path, tree_name)
    return particles


def iterate_particles_root(
    path: str | Path,
    tree_name: str = "Events",
    collection: str = "Muon",
    step_size: int | str = 100_000,
    entry_start: int | None = None,
    entry_stop: int | None = None,
    default_mass: float | None = None,
) -> Iterator[ak.Array]:
    """Yield jagged particle record arrays chunk by chunk.

    Only entries in `[entry_start, entry_stop)` are read, `step_size` at a time.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input ROOT file not found: {path}")
    with uproot.open(path) as file:
        tree = _get_tree(file, tree_name, path)
        branches, fill_mass = _resolve_branches(tree, collection, default_mass)
        for arrays in tree.iterate(
            branches,
            step_size=step_size,
            entry_start=entry_start,
            entry_stop=entry_stop,
            library="ak",
        ):
            yield _zip_collection(arrays, collection, fill_mass)


def write_results_table(path: str | Path, results: Sequence[CombinationResult]) -> None:
    """Write event-loop combination results into Parquet/CSV/Pickle table."""
    pd = _require_pandas()
    _write_dataframe(pd.DataFrame(_result_rows(results), columns=list(RESULT_COLUMNS)), path)


def write_columnar_table(path: str | Path, candidates: ColumnarCandidates) -> None:
    """Write vectorized candidates (one row per candidate) into a table."""
    pd = _require_pandas()
    cands = candidates.candidates
    counts = ak.to_numpy(ak.num(cands, axis=1))
    event_index = np.flatnonzero(ak.to_numpy(candidates.event_mask))
    flat = ak.flatten(cands, axis=1)
    indices = ak.to_list(flat.indices)
    df = pd.DataFrame(
        {
            "event_index": np.repeat(event_index, counts),
            "indices": [",".join(str(i) for i in idx) for idx in indices],
            "candidate_mass": ak.to_numpy(flat.mass),
            "candidate_pt": ak.to_numpy(flat.pt),
            "candidate_eta": ak.to_numpy(flat.eta),
            "candidate_phi": ak.to_numpy(flat.phi),
            "total_charge": ak.to_numpy(flat.charge),
        }
    )
    _write_dataframe(df, path)


def write_mass_histogram(
    path: str | Path,
    masses: Sequence[float] | np.ndarray,
    bins: int = 36,
    low: float = 80.0,
    high: float = 250.0,
    name: str = "mass",
) -> tuple[np.ndarray, np.ndarray]:
    """Histogram candidate masses and store them as a TH1 in a ROOT file."""
    counts, edges = np.histogram(np.asarray(masses, dtype=np.float64), bins=bins, range=(low, high))
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with uproot.recreate(out) as file:
        file[name] = (counts, edges)
    logger.info("Histogram '%s' (%d entries in range) written to %s", name, int(counts.sum()), out)
    return counts, edges


def _result_rows(results: Sequence[CombinationResult]) -> list[dict[str, Any]]:
    """Flatten combination objects into DataFrame-ready row dictionaries."""
    rows: list[dict[str, Any]] = []
    for res in results:
        row: dict[str, Any] = {
            "event_id": res.event_id,
            "particle_ids": ",".join(res.particle_ids),
            "indices": ",".join(str(i) for i in res.indices),
            "source_particle_ids": ",".join(res.source_particle_ids),
            "px": res.candidate_p4.px,
            "py": res.candidate_p4.py,
            "pz": res.candidate_p4.pz,
            "energy": res.candidate_p4.e,
            "candidate_mass": res.mass,
            "candidate_pt": res.pt,
            "candidate_eta": res.eta,
            "candidate_phi": res.phi,
            "charge_pattern": res.charge_pattern,
            "total_charge": res.total_charge,
        }
        rows.append(row)
    return rows


def _write_dataframe(df, path: str | Path) -> None:
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(out, index=False)
    elif suffix in (".pkl", ".pickle"):
        df.to_pickle(out)
    elif suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Use .parquet, .csv, or .pkl"
        )
    logger.info("Wrote %d row(s) to %s", len(df), out)


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required to write output tables. Install pandas and pyarrow."
        ) from exc
    return pd


def _get_tree(file, tree_name: str, path: Path):
    if tree_name not in file:
        raise ValueError(f"Tree '{tree_name}' not found in {path}.")
    return file[tree_name]


def _resolve_branches(tree, collection: str, default_mass: float | None) -> tuple[list[str], float | None]:
    """Return the branches to read and the mass to fill when none is stored."""
    branches = [f"{collection}_{field}" for field in COLUMNAR_FIELDS]
    missing = [b for b in branches if b not in tree]
    if missing:
        raise KeyError(f"Missing branch(es) in tree '{tree.name}': {', '.join(missing)}")
    mass_branch = f"{collection}_mass"
    if mass_branch in tree:
        return branches + [mass_branch], None
    if default_mass is not None:
        return branches, float(default_mass)
    try:
        return branches, species_from_name(collection).mass
    except ValueError as exc:
        raise ValueError(
            f"No '{mass_branch}' branch and no default mass for collection '{collection}'."
        ) from exc


def _zip_collection(arrays: ak.Array, collection: str, fill_mass: float | None) -> ak.Array:
    mass = None if fill_mass is not None else arrays[f"{collection}_mass"]
    return zip_particles(
        pt=arrays[f"{collection}_pt"],
        eta=arrays[f"{collection}_eta"],
        phi=arrays[f"{collection}_phi"],
        charge=arrays[f"{collection}_charge"],
        mass=mass,
        default_mass=0.0 if fill_mass is None else fill_mass,
    )


def _parse_particle_item(item: Any, idx: int, context: str) -> Particle:
    """Parse one particle dictionary into a `Particle`."""
    if not isinstance(item, dict):
        raise ValueError(f"Particle entry at index {idx} in {context} must be an object.")
    missing = [k for k in ("pt", "eta", "phi") if k not in item]
    if missing:
        raise ValueError(
            f"Particle at index {idx} in {context} is missing field(s): {', '.join(missing)}"
        )
    if "mass" in item:
        mass = float(item["mass"])
    elif "species" in item:
        mass = species_from_name(str(item["species"])).mass
    else:
        mass = 0.0
    particle_id = str(item.get("particle_id", f"p{idx}"))
    source_ids_raw = item.get("source_particle_ids")
    if source_ids_raw is None:
        source_ids = (particle_id,)
    else:
        if not isinstance(source_ids_raw, list):
            raise ValueError("Particle field 'source_particle_ids' must be a list of strings.")
        source_ids = tuple(str(x) for x in source_ids_raw)
    return Particle(
        particle_id=particle_id,
        pt=float(item["pt"]),
        eta=float(item["eta"]),
        phi=float(item["phi"]),
        charge=int(item.get("charge", 0)),
        mass=mass,
        source_particle_ids=source_ids,
    )


def _load_json(path: str | Path) -> dict[str, Any]:
    """Read and validate a JSON object document from disk."""
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"JSON document at {path} must be an object.")
    return data
