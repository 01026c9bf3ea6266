"""Helpers to treat combination outputs as particle-like composite objects.

This enables staged selections where an intermediate resonance candidate
(e.g. a Z -> l+ l- pair) is reused as an input "particle" for a higher-level
combination.
"""

from __future__ import annotations

from .models import CombinationResult, Particle


def combination_to_particle(result: CombinationResult, particle_id: str) -> Particle:
    """Convert one `CombinationResult` into a `Particle`.

    The composite uses:
    - `(pt, eta, phi)` from the summed candidate 4-vector.
    - `mass` from the absolute value of the signed candidate mass.
    - `charge` from the summed constituent charge.
    - `source_particle_ids` from the constituent provenance.

    Notes:
    - Energy is recomputed from `mass`, so an unphysical (negative mass2)
      candidate does not keep its sign once staged.
    """
    return Particle(
        particle_id=particle_id,
        pt=result.pt,
        eta=result.eta,
        phi=result.phi,
        charge=result.total_charge,
        mass=abs(result.mass),
        source_particle_ids=result.source_particle_ids,
    )


def shares_constituents(a: Particle, b: Particle) -> bool:
    """Return True when two (composite) particles reuse a source particle."""
    a_ids = set(a.source_particle_ids or (a.particle_id,))
    b_ids = set(b.source_particle_ids or (b.particle_id,))
    return not a_ids.isdisjoint(b_ids)
