"""Staged H -> ZZ -> 4mu selection using composite Z candidates.

The key abstraction is `combination_to_particle`, which turns an accepted
dimuon candidate into a new `Particle` that the combiner can pair again.

Run from repository root without installation:
    PYTHONPATH=src python examples/staged_zz.py
"""

from __future__ import annotations

from lepcomb import (
    CombinationCuts,
    ParticleCombiner,
    combination_to_particle,
    shares_constituents,
)
from lepcomb.io import load_events_json

M_Z = 91.1876


def main() -> int:
    """Build Z -> mu+ mu- candidates per event, then pair disjoint Z candidates."""
    events = load_events_json("examples/events.json")
    pair_combiner = ParticleCombiner(n_body=2)
    for event in events:
        z_results = pair_combiner.combine(
            event.particles,
            cuts=CombinationCuts(total_charge=0, min_mass=12.0, max_mass=120.0),
            event_id=event.event_id,
        )
        z_candidates = [combination_to_particle(z, f"Z{i}") for i, z in enumerate(z_results)]

        # Stage 2 combines composites; reject pairs that reuse a muon.
        zz_results = [
            cand
            for cand in pair_combiner.combine(z_candidates, event_id=event.event_id)
            if not shares_constituents(
                z_candidates[cand.indices[0]], z_candidates[cand.indices[1]]
            )
        ]
        for zz in zz_results:
            z1, z2 = (z_candidates[i] for i in zz.indices)
            on_shell = min((z1, z2), key=lambda z: abs(z.mass - M_Z))
            print(
                f"{event.event_id}: m4l={zz.mass:.2f} GeV "
                f"(Z1 {on_shell.mass:.2f} GeV from {','.join(on_shell.source_particle_ids)})"
            )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
