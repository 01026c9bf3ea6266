"""Unit tests for kinematic conversion helpers."""

from __future__ import annotations

import math
import unittest

from lepcomb import Particle
from lepcomb.models import ETA_AT_ZERO_PT, LorentzVector
from lepcomb.physics import (
    candidate_kinematics,
    cartesian_to_pt_eta_phi,
    energy_from_mass,
    n_combinations,
    particle_to_lorentz,
    pt_eta_phi_to_cartesian,
    signed_mass,
    sum_lorentz,
)


class TestPhysicsHelpers(unittest.TestCase):
    """Validate coordinate conversions, energies, and combinatorics."""

    def test_pt_eta_phi_round_trip(self) -> None:
        """Converting to Cartesian and back reproduces the inputs."""
        for pt, eta, phi in [
            (25.0, 0.0, 0.0),
            (3.2, 2.4, -3.0),
            (110.0, -1.7, 1.2),
            (0.5, 4.5, 3.1),
        ]:
            px, py, pz = pt_eta_phi_to_cartesian(pt, eta, phi)
            back = cartesian_to_pt_eta_phi(px, py, pz)
            self.assertAlmostEqual(back[0], pt, places=9)
            self.assertAlmostEqual(back[1], eta, places=9)
            self.assertAlmostEqual(back[2], phi, places=9)

    def test_zero_pt_uses_eta_sentinel(self) -> None:
        """Momenta along the beam axis return a signed eta sentinel."""
        self.assertEqual(cartesian_to_pt_eta_phi(0.0, 0.0, 5.0)[1], ETA_AT_ZERO_PT)
        self.assertEqual(cartesian_to_pt_eta_phi(0.0, 0.0, -5.0)[1], -ETA_AT_ZERO_PT)

    def test_particle_properties_match_helpers(self) -> None:
        """Particle convenience properties agree with the functional helpers."""
        p = Particle("mu1", pt=20.0, eta=-0.8, phi=2.2, charge=-1, mass=0.105)
        vec = particle_to_lorentz(p)
        self.assertAlmostEqual(p.px, vec.px, places=12)
        self.assertAlmostEqual(p.py, vec.py, places=12)
        self.assertAlmostEqual(p.pz, vec.pz, places=12)
        self.assertAlmostEqual(p.energy, vec.e, places=9)
        self.assertAlmostEqual(vec.mass, 0.105, places=6)
        self.assertAlmostEqual(p.p, math.sqrt(vec.p2), places=9)

    def test_mass_override(self) -> None:
        """An explicit mass replaces the stored particle mass."""
        p = Particle("x", pt=5.0, eta=0.0, phi=0.0, mass=0.0)
        vec = particle_to_lorentz(p, mass=3.0)
        self.assertAlmostEqual(vec.e, math.sqrt(34.0), places=12)

    def test_energy_and_signed_mass(self) -> None:
        """Energy follows E^2 = m^2 + p^2 and negative m^2 keeps its sign."""
        self.assertAlmostEqual(energy_from_mass(16.0, 3.0), 5.0, places=12)
        self.assertAlmostEqual(signed_mass(9.0), 3.0, places=12)
        self.assertAlmostEqual(signed_mass(-9.0), -3.0, places=12)
        self.assertEqual(signed_mass(0.0), 0.0)

    def test_lorentz_mass_uses_signed_mass(self) -> None:
        """A spacelike 4-vector reports the same negative mass as the helper."""
        vec = LorentzVector(px=3.0, py=0.0, pz=4.0, e=3.0)
        self.assertAlmostEqual(vec.mass2, -16.0, places=12)
        self.assertEqual(vec.mass, signed_mass(vec.mass2))
        self.assertAlmostEqual(vec.mass, -4.0, places=12)

    def test_back_to_back_pair_is_at_rest(self) -> None:
        """Two opposite momenta sum to a candidate with zero pt."""
        a = particle_to_lorentz(Particle("a", pt=10.0, eta=0.0, phi=0.0, mass=0.0))
        b = particle_to_lorentz(Particle("b", pt=10.0, eta=0.0, phi=math.pi, mass=0.0))
        total = sum_lorentz([a, b])
        self.assertAlmostEqual(total.mass, 20.0, places=9)
        pt, _, _ = candidate_kinematics(total)
        self.assertAlmostEqual(pt, 0.0, places=9)

    def test_lorentz_vector_kinematics(self) -> None:
        """LorentzVector pt/eta/phi agree with the conversion helper."""
        vec = LorentzVector(px=3.0, py=4.0, pz=12.0, e=20.0)
        self.assertEqual((vec.pt, vec.eta, vec.phi), candidate_kinematics(vec))

    def test_n_combinations(self) -> None:
        """Binomial counts are zero below the subset size."""
        self.assertEqual(n_combinations(3, 4), 0)
        self.assertEqual(n_combinations(4, 4), 1)
        self.assertEqual(n_combinations(7, 4), 35)


if __name__ == "__main__":
    unittest.main()
