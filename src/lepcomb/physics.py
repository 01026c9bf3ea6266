"""Kinematics helpers for building and filtering particle combinations."""

from __future__ import annotations

import math
from typing import Iterable

from .models import ETA_AT_ZERO_PT, LorentzVector, Particle, signed_mass


def pt_eta_phi_to_cartesian(pt: float, eta: float, phi: float) -> tuple[float, float, float]:
    """Convert `(pt, eta, phi)` into `(px, py, pz)`."""
    return pt * math.cos(phi), pt * math.sin(phi), pt * math.sinh(eta)


def cartesian_to_pt_eta_phi(px: float, py: float, pz: float) -> tuple[float, float, float]:
    """Convert `(px, py, pz)` back into `(pt, eta, phi)`.

    Along the beam axis (`pt == 0`) pseudorapidity is undefined and the
    `ETA_AT_ZERO_PT` sentinel is returned with the sign of `pz`.
    """
    pt = math.hypot(px, py)
    if pt == 0.0:
        eta = ETA_AT_ZERO_PT if pz >= 0 else -ETA_AT_ZERO_PT
    else:
        eta = math.asinh(pz / pt)
    return pt, eta, math.atan2(py, px)


def energy_from_mass(p2: float, mass: float) -> float:
    """Energy from squared momentum and mass, `sqrt(m^2 + p^2)`."""
    return (mass * mass + p2) ** 0.5


def particle_to_lorentz(particle: Particle, mass: float | None = None) -> LorentzVector:
    """Convert a particle (optionally with a mass override) into a 4-vector."""
    px, py, pz = pt_eta_phi_to_cartesian(particle.pt, particle.eta, particle.phi)
    m = particle.mass if mass is None else mass
    energy = energy_from_mass(px * px + py * py + pz * pz, m)
    return LorentzVector(px=px, py=py, pz=pz, e=energy)


def sum_lorentz(vectors: Iterable[LorentzVector]) -> LorentzVector:
    """Sum an iterable of Lorentz vectors."""
    total = LorentzVector(0.0, 0.0, 0.0, 0.0)
    for vec in vectors:
        total = total + vec
    return total


def candidate_kinematics(p4: LorentzVector) -> tuple[float, float, float]:
    """Return `(pt, eta, phi)` from a candidate 4-vector."""
    return cartesian_to_pt_eta_phi(p4.px, p4.py, p4.pz)


def n_combinations(n: int, k: int) -> int:
    """Number of unordered k-subsets of n items; zero when `n < k`."""
    if n < k or k < 0:
        return 0
    return math.comb(n, k)
