"""Public package exports for the lepton-combination framework."""

from .columnar import (
    ColumnarCandidates,
    combine_columnar,
    concatenate_candidates,
    events_from_awkward,
    events_to_awkward,
    flat_masses,
    zip_particles,
)
from .combiner import ParticleCombiner, masses
from .composite import combination_to_particle, shares_constituents
from .models import (
    CombinationCuts,
    CombinationResult,
    Event,
    LorentzVector,
    Particle,
    ParticlePreselection,
)
from .pid import (
    ParticleSpecies,
    make_electron,
    make_kaon,
    make_muon,
    make_pion,
    make_proton,
    species_from_name,
)

__version__ = "0.1.0"

__all__ = [
    "ParticleCombiner",
    "Particle",
    "Event",
    "LorentzVector",
    "CombinationResult",
    "ParticlePreselection",
    "CombinationCuts",
    "ColumnarCandidates",
    "concatenate_candidates",
    "combine_columnar",
    "zip_particles",
    "flat_masses",
    "events_from_awkward",
    "events_to_awkward",
    "masses",
    "ParticleSpecies",
    "make_muon",
    "make_electron",
    "make_pion",
    "make_kaon",
    "make_proton",
    "species_from_name",
    "combination_to_particle",
    "shares_constituents",
]
