"""Event-by-event combination engine for particle collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .models import (
    CombinationCuts,
    CombinationResult,
    Event,
    Particle,
    SUPPORTED_N_BODY,
    ParticlePreselection,
    charge_pattern_of,
    iter_n_body_combinations,
)
from .physics import candidate_kinematics, particle_to_lorentz, sum_lorentz
from .pid import ParticleSpecies, resolve_mass

logger = logging.getLogger(__name__)


@dataclass
class ParticleCombiner:
    """Build and filter n-body candidates from per-event particle lists."""

    n_body: int = 4

    def preselect_particles(
        self,
        particles: Sequence[Particle],
        preselection: ParticlePreselection | None = None,
    ) -> list[Particle]:
        """Apply particle-level preselection before combinatorics."""
        return [p for p in particles if _passes_preselection(p, preselection)]

    def combine(
        self,
        particles: Sequence[Particle],
        n_body: int | None = None,
        preselection: ParticlePreselection | None = None,
        cuts: CombinationCuts | None = None,
        mass_hypothesis: float | ParticleSpecies | str | None = None,
        event_id: str | None = None,
    ) -> list[CombinationResult]:
        """Build n-body candidates and apply candidate-level cuts.

        Workflow:
        1. Preselect particles.
        2. Skip the event if fewer than `n_body` particles survive.
        3. Enumerate n-body combinations.
        4. Sum the 4-vectors (optionally under a common mass hypothesis).
        5. Apply cuts (total charge, charge pattern, mass, pt, eta).
        6. Return accepted `CombinationResult` objects.
        """
        n_body = self.n_body if n_body is None else n_body
        if n_body not in SUPPORTED_N_BODY:
            raise ValueError("Only 2-body, 3-body, and 4-body combinations are supported.")
        cuts = cuts or CombinationCuts()
        self._validate_charge_patterns(cuts.allowed_charge_patterns, n_body)
        mass_override = None if mass_hypothesis is None else resolve_mass(mass_hypothesis)

        # Indices refer to the original event order, not the preselected list.
        indexed = [
            (idx, p)
            for idx, p in enumerate(particles)
            if _passes_preselection(p, preselection)
        ]
        if len(indexed) < n_body:
            logger.debug(
                "Skipping event %s: %d particle(s) for %d-body combinations",
                event_id,
                len(indexed),
                n_body,
            )
            return []

        results: list[CombinationResult] = []
        for combo in iter_n_body_combinations(indexed, n_body):
            combo_particles = [p for _, p in combo]
            total_charge = sum(int(p.charge) for p in combo_particles)
            if cuts.total_charge is not None and total_charge != cuts.total_charge:
                continue
            charge_pattern = charge_pattern_of(p.charge for p in combo_particles)
            if cuts.allowed_charge_patterns is not None and charge_pattern not in cuts.allowed_charge_patterns:
                continue

            p4 = sum_lorentz(particle_to_lorentz(p, mass_override) for p in combo_particles)
            mass = p4.mass
            pt, eta, phi = candidate_kinematics(p4)
            if cuts.min_mass is not None and mass < cuts.min_mass:
                continue
            if cuts.max_mass is not None and mass > cuts.max_mass:
                continue
            if cuts.min_pt is not None and pt < cuts.min_pt:
                continue
            if cuts.max_pt is not None and pt > cuts.max_pt:
                continue
            if cuts.min_eta is not None and eta < cuts.min_eta:
                continue
            if cuts.max_eta is not None and eta > cuts.max_eta:
                continue

            source_ids: list[str] = []
            for p in combo_particles:
                if p.source_particle_ids:
                    source_ids.extend(p.source_particle_ids)
                else:
                    source_ids.append(p.particle_id)

            results.append(
                CombinationResult(
                    particle_ids=tuple(p.particle_id for p in combo_particles),
                    indices=tuple(idx for idx, _ in combo),
                    candidate_p4=p4,
                    mass=mass,
                    pt=pt,
                    eta=eta,
                    phi=phi,
                    charge_pattern=charge_pattern,
                    total_charge=total_charge,
                    source_particle_ids=tuple(dict.fromkeys(source_ids)),
                    event_id=event_id,
                )
            )
        return results

    def combine_events(
        self,
        events: Sequence[Event],
        n_body: int | None = None,
        preselection: ParticlePreselection | None = None,
        cuts: CombinationCuts | None = None,
        mass_hypothesis: float | ParticleSpecies | str | None = None,
    ) -> list[CombinationResult]:
        """Run `combine` on a list of events and aggregate tagged candidates."""
        n_body = self.n_body if n_body is None else n_body
        out: list[CombinationResult] = []
        n_skipped = 0
        for event in events:
            if event.n_particles < n_body:
                n_skipped += 1
                continue
            out.extend(
                self.combine(
                    particles=event.particles,
                    n_body=n_body,
                    preselection=preselection,
                    cuts=cuts,
                    mass_hypothesis=mass_hypothesis,
                    event_id=event.event_id,
                )
            )
        logger.info(
            "Combined %d event(s) (%d with fewer than %d particles): %d candidate(s) kept",
            len(events),
            n_skipped,
            n_body,
            len(out),
        )
        return out

    @staticmethod
    def _validate_charge_patterns(
        allowed_charge_patterns: tuple[str, ...] | None,
        n_body: int,
    ) -> None:
        """Validate optional charge-pattern filters against current n-body mode."""
        if allowed_charge_patterns is None:
            return
        for pat in allowed_charge_patterns:
            if len(pat) != n_body:
                raise ValueError(
                    f"Charge pattern '{pat}' length does not match n_body={n_body}."
                )
            if any(ch not in "+-0" for ch in pat):
                raise ValueError(
                    f"Charge pattern '{pat}' contains invalid symbol. Use +, -, or 0."
                )


def _passes_preselection(particle: Particle, preselection: ParticlePreselection | None) -> bool:
    if preselection is None:
        return True
    if preselection.min_pt is not None and particle.pt < preselection.min_pt:
        return False
    if preselection.min_eta is not None and particle.eta < preselection.min_eta:
        return False
    if preselection.max_eta is not None and particle.eta > preselection.max_eta:
        return False
    if preselection.max_abs_eta is not None and abs(particle.eta) > preselection.max_abs_eta:
        return False
    return True


def masses(results: Sequence[CombinationResult]) -> list[float]:
    """Return candidate masses in result order, ready for histogramming."""
    return [r.mass for r in results]
