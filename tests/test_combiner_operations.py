"""Unit tests for core combiner operations and helper behavior."""

from __future__ import annotations

import itertools
import math
import unittest

from lepcomb import (
    CombinationCuts,
    Event,
    LorentzVector,
    Particle,
    ParticleCombiner,
    ParticlePreselection,
    make_muon,
    masses,
)
from lepcomb.physics import particle_to_lorentz, sum_lorentz

M_MU = make_muon().mass


class TestCombinerOperations(unittest.TestCase):
    """Validate combination counts, charge filtering, kinematics, and skips."""

    @staticmethod
    def _particle(pid: str, pt: float, eta: float, phi: float, charge: int, mass: float = M_MU) -> Particle:
        """Build a particle with muon mass by default."""
        return Particle(pid, pt=pt, eta=eta, phi=phi, charge=charge, mass=mass)

    def _six_particles(self) -> list[Particle]:
        """Three positive and three negative particles with distinct kinematics."""
        return [
            self._particle("a", 25.0, 0.1, 0.2, +1),
            self._particle("b", 18.0, -0.7, 1.9, +1),
            self._particle("c", 12.0, 1.3, -2.4, +1),
            self._particle("d", 30.0, -0.2, -0.9, -1),
            self._particle("e", 9.0, 2.0, 3.0, -1),
            self._particle("f", 7.5, -1.8, 0.6, -1),
        ]

    def test_subset_count_matches_binomial_without_charge_filter(self) -> None:
        """All C(n,4) subsets are produced when the charge filter is disabled."""
        results = ParticleCombiner().combine(
            self._six_particles(),
            cuts=CombinationCuts(total_charge=None),
        )
        self.assertEqual(len(results), math.comb(6, 4))
        self.assertEqual(len({r.indices for r in results}), 15)

    def test_neutral_filter_keeps_only_zero_charge_subsets(self) -> None:
        """Default cuts keep exactly the subsets whose charges sum to zero."""
        results = ParticleCombiner().combine(self._six_particles())
        # Two of three positives times two of three negatives.
        self.assertEqual(len(results), 9)
        self.assertTrue(all(r.total_charge == 0 for r in results))
        self.assertTrue(all(sorted(r.charge_pattern) == ["+", "+", "-", "-"] for r in results))

    def test_charged_subsets_can_be_selected(self) -> None:
        """A non-zero total charge selects same-sign-heavy subsets instead."""
        results = ParticleCombiner().combine(
            self._six_particles(),
            cuts=CombinationCuts(total_charge=2),
        )
        # Three positives plus one negative.
        self.assertEqual(len(results), 3)
        self.assertTrue(all(r.total_charge == 2 for r in results))

    def test_identical_kinematics_yield_one_pooled_candidate(self) -> None:
        """Four identical +,+,-,- particles give one candidate with mass 4m."""
        particles = [
            self._particle(f"l{i}", 10.0, 0.5, 0.3, q, mass=1.5)
            for i, q in enumerate((+1, +1, -1, -1))
        ]
        [res] = ParticleCombiner().combine(particles)
        self.assertEqual(res.charge_pattern, "++--")
        self.assertEqual(res.indices, (0, 1, 2, 3))
        self.assertAlmostEqual(res.mass, 6.0, places=9)
        single = particle_to_lorentz(particles[0])
        self.assertAlmostEqual(res.candidate_p4.e, 4.0 * single.e, places=9)
        self.assertAlmostEqual(res.pt, 40.0, places=9)
        self.assertAlmostEqual(res.eta, 0.5, places=9)
        self.assertAlmostEqual(res.phi, 0.3, places=9)

    def test_mass_is_invariant_under_reordering(self) -> None:
        """Summing the same four particles in any order gives the same mass."""
        four = self._six_particles()[1:5]
        reference = sum_lorentz(particle_to_lorentz(p) for p in four).mass
        for perm in itertools.permutations(four):
            mass = sum_lorentz(particle_to_lorentz(p) for p in perm).mass
            self.assertAlmostEqual(mass, reference, places=9)

    def test_fewer_than_four_particles_yield_nothing(self) -> None:
        """Events below the combination multiplicity are skipped."""
        particles = self._six_particles()[:3]
        self.assertEqual(ParticleCombiner().combine(particles, cuts=CombinationCuts(total_charge=None)), [])
        self.assertEqual(ParticleCombiner().combine([]), [])

    def test_combine_events_tags_and_skips(self) -> None:
        """Multi-event runs tag candidates by event and skip small events."""
        six = self._six_particles()
        events = [
            Event("small", tuple(six[:3])),
            Event("neutral4", (six[0], six[1], six[3], six[4])),
            Event("empty", ()),
        ]
        results = ParticleCombiner().combine_events(events)
        self.assertEqual([r.event_id for r in results], ["neutral4"])
        self.assertEqual(results[0].particle_ids, ("a", "b", "d", "e"))

    def test_indices_refer_to_original_event_positions(self) -> None:
        """Preselection removes particles without renumbering the survivors."""
        particles = [self._particle("soft", 2.0, 0.0, 0.0, +1)] + self._six_particles()[:2] + self._six_particles()[3:5]
        [res] = ParticleCombiner().combine(particles, preselection=ParticlePreselection(min_pt=5.0))
        self.assertEqual(res.indices, (1, 2, 3, 4))
        self.assertNotIn("soft", res.particle_ids)

    def test_preselection_eta_window(self) -> None:
        """Absolute-eta preselection keeps only central particles."""
        out = ParticleCombiner().preselect_particles(
            self._six_particles(),
            ParticlePreselection(max_abs_eta=1.5),
        )
        self.assertEqual([p.particle_id for p in out], ["a", "b", "c", "d"])

    def test_mass_hypothesis_overrides_particle_mass(self) -> None:
        """A species hypothesis replaces the stored particle masses."""
        massless = [
            self._particle(p.particle_id, p.pt, p.eta, p.phi, p.charge, mass=0.0)
            for p in self._six_particles()
        ]
        with_mu = ParticleCombiner().combine(massless, mass_hypothesis="mu")
        reference = ParticleCombiner().combine(self._six_particles())
        for got, want in zip(with_mu, reference, strict=True):
            self.assertAlmostEqual(got.mass, want.mass, places=9)

    def test_mass_window_cut(self) -> None:
        """Mass cuts keep only candidates inside the window."""
        results = ParticleCombiner().combine(self._six_particles())
        all_masses = sorted(masses(results))
        low, high = all_masses[2], all_masses[5]
        cut = ParticleCombiner().combine(
            self._six_particles(),
            cuts=CombinationCuts(min_mass=low, max_mass=high),
        )
        self.assertEqual(len(cut), 4)
        self.assertTrue(all(low <= r.mass <= high for r in cut))

    def test_charge_pattern_filter(self) -> None:
        """Charge patterns are matched in event order."""
        results = ParticleCombiner().combine(
            self._six_particles(),
            cuts=CombinationCuts(allowed_charge_patterns=("++--",)),
        )
        self.assertEqual(len(results), 9)
        self.assertTrue(all(r.charge_pattern == "++--" for r in results))

    def test_invalid_inputs_raise(self) -> None:
        """Unsupported multiplicities and malformed charge patterns raise."""
        with self.assertRaises(ValueError):
            ParticleCombiner().combine(self._six_particles(), n_body=5)
        with self.assertRaises(ValueError):
            ParticleCombiner().combine([], n_body=1)
        with self.assertRaises(ValueError):
            ParticleCombiner().combine(
                self._six_particles(),
                cuts=CombinationCuts(allowed_charge_patterns=("+-",)),
            )
        with self.assertRaises(ValueError):
            ParticleCombiner().combine(
                self._six_particles(),
                cuts=CombinationCuts(allowed_charge_patterns=("++x-",)),
            )

    def test_unphysical_mass_keeps_sign(self) -> None:
        """Negative mass squared is reported as a negative mass."""
        vec = LorentzVector(px=0.0, py=0.0, pz=3.0, e=2.0)
        self.assertAlmostEqual(vec.mass, -math.sqrt(5.0), places=12)


if __name__ == "__main__":
    unittest.main()
