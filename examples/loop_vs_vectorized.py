"""Compare the explicit event loop with whole-array evaluation.

Reads a NanoAOD-style ROOT file (Muon_pt, Muon_eta, ...) if given, otherwise
generates toy events, then times both strategies on the same input.

Run from repository root without installation:
    PYTHONPATH=src python examples/loop_vs_vectorized.py [file.root]
"""

from __future__ import annotations

import sys
import time

import awkward as ak
import numpy as np

from lepcomb import (
    ParticleCombiner,
    combine_columnar,
    events_from_awkward,
    flat_masses,
    make_muon,
    masses,
    zip_particles,
)
from lepcomb.io import load_particles_root


def toy_muons(n_events: int = 20_000, seed: int = 1) -> ak.Array:
    """Poisson-distributed muon multiplicities with random kinematics."""
    rng = np.random.default_rng(seed)
    counts = rng.poisson(2.5, size=n_events)
    n = int(counts.sum())
    return zip_particles(
        pt=ak.unflatten(rng.exponential(15.0, n) + 3.0, counts),
        eta=ak.unflatten(rng.uniform(-2.4, 2.4, n), counts),
        phi=ak.unflatten(rng.uniform(-np.pi, np.pi, n), counts),
        charge=ak.unflatten(rng.choice([-1, 1], n), counts),
        default_mass=make_muon().mass,
    )


def main(argv: list[str]) -> int:
    particles = load_particles_root(argv[0]) if argv else toy_muons()

    start = time.perf_counter()
    loop_masses = masses(ParticleCombiner().combine_events(events_from_awkward(particles)))
    loop_time = time.perf_counter() - start

    start = time.perf_counter()
    vec_masses = flat_masses(combine_columnar(particles))
    vec_time = time.perf_counter() - start

    print(f"events={len(particles)} candidates={len(vec_masses)}")
    print(f"loop:       {loop_time:8.3f} s")
    print(f"vectorized: {vec_time:8.3f} s")
    print(f"agree: {np.allclose(np.asarray(loop_masses), vec_masses)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
