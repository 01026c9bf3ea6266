"""Unit tests for analysis configuration loading and validation."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from lepcomb import CombinationCuts, ParticlePreselection, make_electron
from lepcomb.config import AnalysisConfig, load_config


class TestAnalysisConfig(unittest.TestCase):
    """Validate defaults, JSON loading, and rejection of bad settings."""

    def test_defaults(self) -> None:
        """An empty configuration selects neutral four-body candidates."""
        config = AnalysisConfig()
        self.assertEqual(config.input.tree_name, "Events")
        self.assertEqual(config.input.collection, "Muon")
        self.assertEqual(config.selection.n_body, 4)
        self.assertEqual(config.mode, "vectorized")
        self.assertEqual(config.cuts(), CombinationCuts())
        self.assertEqual(config.preselection(), ParticlePreselection())

    def test_load_config_from_json(self) -> None:
        """JSON sections map onto preselection and cut dataclasses."""
        payload = {
            "input": {"collection": "Electron", "species": "electron", "step_size": 1000},
            "selection": {
                "n_body": 2,
                "total_charge": None,
                "min_pt": 7.0,
                "max_abs_eta": 2.5,
                "min_mass": 60.0,
                "max_mass": 120.0,
                "allowed_charge_patterns": ["+-", "-+"],
            },
            "histogram": {"bins": 30, "low": 60.0, "high": 120.0},
            "mode": "loop",
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            path.write_text(json.dumps(payload), encoding="utf-8")
            config = load_config(path)
        self.assertEqual(config.mode, "loop")
        self.assertAlmostEqual(config.input.default_mass(), make_electron().mass, places=12)
        self.assertEqual(config.preselection(), ParticlePreselection(min_pt=7.0, max_abs_eta=2.5))
        self.assertEqual(
            config.cuts(),
            CombinationCuts(
                total_charge=None,
                min_mass=60.0,
                max_mass=120.0,
                allowed_charge_patterns=("+-", "-+"),
            ),
        )
        self.assertEqual(config.histogram.bins, 30)

    def test_invalid_settings_are_rejected(self) -> None:
        """Bad multiplicities, patterns, binning, and species fail validation."""
        bad = [
            {"selection": {"n_body": 5}},
            {"selection": {"n_body": 4, "allowed_charge_patterns": ["+-"]}},
            {"histogram": {"bins": 0}},
            {"histogram": {"low": 100.0, "high": 50.0}},
            {"input": {"species": "graviton"}},
            {"mode": "parallel"},
        ]
        for payload in bad:
            with self.assertRaises(ValidationError):
                AnalysisConfig.model_validate(payload)


if __name__ == "__main__":
    unittest.main()
