"""Particle-species helpers used to assign masses to reconstructed objects.

This module exposes named species builders that can be used directly in the
combiner API (as a mass hypothesis) or to fill a missing mass column.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParticleSpecies:
    """Named particle species with its PDG mass in GeV."""

    name: str
    mass: float
    pdg_id: int | None = None


_MUON = ParticleSpecies(name="mu", mass=0.1056583755, pdg_id=13)
_ELECTRON = ParticleSpecies(name="e", mass=0.00051099895, pdg_id=11)
_PION = ParticleSpecies(name="pi", mass=0.13957039, pdg_id=211)
_KAON = ParticleSpecies(name="K", mass=0.493677, pdg_id=321)
_PROTON = ParticleSpecies(name="p", mass=0.93827208816, pdg_id=2212)

_NAME_TO_SPECIES: dict[str, ParticleSpecies] = {
    "mu": _MUON,
    "muon": _MUON,
    "e": _ELECTRON,
    "electron": _ELECTRON,
    "pi": _PION,
    "pion": _PION,
    "k": _KAON,
    "kaon": _KAON,
    "p": _PROTON,
    "proton": _PROTON,
}


def make_muon() -> ParticleSpecies:
    """Return the muon species."""
    return _MUON


def make_electron() -> ParticleSpecies:
    """Return the electron species."""
    return _ELECTRON


def make_pion() -> ParticleSpecies:
    return _PION


def make_kaon() -> ParticleSpecies:
    return _KAON


def make_proton() -> ParticleSpecies:
    return _PROTON


def species_from_name(name: str) -> ParticleSpecies:
    """Resolve a short species name (e.g. `mu`, `Electron`) into a species.

    NanoAOD-style collection names (`Muon`, `Electron`) resolve as well.
    """
    key = name.strip().lower()
    try:
        return _NAME_TO_SPECIES[key]
    except KeyError as exc:
        supported = ", ".join(sorted(_NAME_TO_SPECIES))
        raise ValueError(
            f"Unknown particle species name '{name}'. Supported names: {supported}"
        ) from exc


def resolve_mass(value: float | ParticleSpecies | str) -> float:
    """Coerce a float, species, or species name into a mass value."""
    if isinstance(value, ParticleSpecies):
        return value.mass
    if isinstance(value, str):
        return species_from_name(value).mass
    return float(value)
