"""Core data models used by the lepton-combination framework.

This module defines:
- immutable physics objects (`Particle`, `LorentzVector`)
- event containers (`Event`)
- combination outputs (`CombinationResult`)
- configurable filtering controls (`ParticlePreselection`, `CombinationCuts`)
- helper iterator for n-body combinatorics.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, Sequence

ETA_AT_ZERO_PT = 1e9


def signed_mass(mass2: float) -> float:
    """Return `sqrt(m2)`, or `-sqrt(-m2)` for unphysical negative inputs."""
    return mass2**0.5 if mass2 >= 0.0 else -((-mass2) ** 0.5)


@dataclass(frozen=True)
class Particle:
    """Single reconstructed particle parameterized by `(pt, eta, phi, mass)`.

    Angles are in radians, momenta and masses in GeV.
    """

    particle_id: str
    pt: float
    eta: float
    phi: float
    charge: int = 0
    mass: float = 0.0
    source_particle_ids: tuple[str, ...] = ()

    @property
    def px(self) -> float:
        return self.pt * math.cos(self.phi)

    @property
    def py(self) -> float:
        return self.pt * math.sin(self.phi)

    @property
    def pz(self) -> float:
        return self.pt * math.sinh(self.eta)

    @property
    def p(self) -> float:
        """Momentum magnitude, `pt * cosh(eta)`."""
        return self.pt * math.cosh(self.eta)

    @property
    def energy(self) -> float:
        """Energy from the mass-energy relation."""
        p = self.p
        return (self.mass * self.mass + p * p) ** 0.5


@dataclass(frozen=True)
class Event:
    """One event payload with its own (variable-length) particle list."""

    event_id: str
    particles: tuple[Particle, ...]

    @property
    def n_particles(self) -> int:
        return len(self.particles)


@dataclass(frozen=True)
class LorentzVector:
    """Simple 4-vector with convenience properties and addition."""

    px: float
    py: float
    pz: float
    e: float

    def __add__(self, other: "LorentzVector") -> "LorentzVector":
        """Component-wise 4-vector addition."""
        return LorentzVector(
            self.px + other.px,
            self.py + other.py,
            self.pz + other.pz,
            self.e + other.e,
        )

    @property
    def p2(self) -> float:
        """Squared 3-momentum magnitude."""
        return self.px * self.px + self.py * self.py + self.pz * self.pz

    @property
    def mass2(self) -> float:
        """Invariant mass squared."""
        return self.e * self.e - self.p2

    @property
    def mass(self) -> float:
        """Invariant mass with signed handling for negative mass2 values."""
        return signed_mass(self.mass2)

    @property
    def pt(self) -> float:
        return math.hypot(self.px, self.py)

    @property
    def eta(self) -> float:
        pt = self.pt
        if pt == 0.0:
            return ETA_AT_ZERO_PT if self.pz >= 0 else -ETA_AT_ZERO_PT
        return math.asinh(self.pz / pt)

    @property
    def phi(self) -> float:
        return math.atan2(self.py, self.px)


@dataclass(frozen=True)
class CombinationResult:
    """One accepted n-body candidate with its summed 4-vector and observables."""

    particle_ids: tuple[str, ...]
    indices: tuple[int, ...]
    candidate_p4: LorentzVector
    mass: float
    pt: float
    eta: float
    phi: float
    charge_pattern: str
    total_charge: int
    source_particle_ids: tuple[str, ...]
    event_id: str | None = None


@dataclass(frozen=True)
class ParticlePreselection:
    """Particle-level preselection applied before n-body combinatorics."""

    min_pt: float | None = None
    min_eta: float | None = None
    max_eta: float | None = None
    max_abs_eta: float | None = None


@dataclass(frozen=True)
class CombinationCuts:
    """Candidate-level cuts applied after building each n-body combination.

    `total_charge` defaults to neutral candidates; set it to `None` to keep
    every charge combination.
    """

    total_charge: int | None = 0
    min_mass: float | None = None
    max_mass: float | None = None
    min_pt: float | None = None
    max_pt: float | None = None
    min_eta: float | None = None
    max_eta: float | None = None
    allowed_charge_patterns: tuple[str, ...] | None = None


SUPPORTED_N_BODY = (2, 3, 4)


def iter_n_body_combinations(
    particles: Sequence[Particle], n_body: int
) -> Iterable[tuple[Particle, ...]]:
    """Yield particle tuples for supported n-body values (2, 3, 4)."""
    if n_body not in SUPPORTED_N_BODY:
        raise ValueError("Only 2-body, 3-body, and 4-body combinations are supported.")
    return combinations(particles, n_body)


def charge_pattern_of(charges: Iterable[int]) -> str:
    """Encode charges as a `+`/`-`/`0` string in input order."""
    return "".join("+" if q > 0 else "-" if q < 0 else "0" for q in charges)
