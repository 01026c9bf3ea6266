"""Analysis configuration models.

Configurations are plain JSON documents validated with pydantic, e.g.

    {
      "input": {"tree_name": "Events", "collection": "Muon"},
      "selection": {"n_body": 4, "total_charge": 0, "min_pt": 5.0},
      "histogram": {"bins": 36, "low": 80.0, "high": 250.0},
      "mode": "vectorized"
    }

Every section and field is optional.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import SUPPORTED_N_BODY, CombinationCuts, ParticlePreselection
from .pid import species_from_name

logger = logging.getLogger(__name__)


class InputConfig(BaseModel):
    """Where and how particles are read from columnar inputs."""

    tree_name: Annotated[str, Field(default="Events", description="ROOT tree name")]
    collection: Annotated[
        str,
        Field(
            default="Muon",
            description="Branch prefix of the particle collection, e.g. 'Muon' for Muon_pt",
        ),
    ]
    species: Annotated[
        Optional[str],
        Field(
            default=None,
            description="Species used to fill masses when the input has no mass column",
        ),
    ]
    entry_start: Annotated[Optional[int], Field(default=None, ge=0)]
    entry_stop: Annotated[Optional[int], Field(default=None, ge=0)]
    step_size: Annotated[
        Optional[int],
        Field(default=None, gt=0, description="Read the tree in chunks of this many entries"),
    ]

    @field_validator("species")
    @classmethod
    def validate_species(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            species_from_name(v)
        return v

    def default_mass(self) -> Optional[float]:
        return None if self.species is None else species_from_name(self.species).mass


class SelectionConfig(BaseModel):
    """Particle preselection and candidate cuts."""

    n_body: Annotated[int, Field(default=4, description="Combination multiplicity")]
    total_charge: Annotated[
        Optional[int],
        Field(default=0, description="Required candidate charge; null keeps every charge"),
    ]
    allowed_charge_patterns: Optional[Tuple[str, ...]] = None
    min_pt: Optional[float] = None
    min_eta: Optional[float] = None
    max_eta: Optional[float] = None
    max_abs_eta: Optional[float] = None
    min_mass: Optional[float] = None
    max_mass: Optional[float] = None
    min_candidate_pt: Optional[float] = None
    max_candidate_pt: Optional[float] = None
    min_candidate_eta: Optional[float] = None
    max_candidate_eta: Optional[float] = None

    @field_validator("n_body")
    @classmethod
    def validate_n_body(cls, v: int) -> int:
        if v not in SUPPORTED_N_BODY:
            raise ValueError(f"n_body must be one of {SUPPORTED_N_BODY}, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_charge_patterns(self) -> "SelectionConfig":
        for pat in self.allowed_charge_patterns or ():
            if len(pat) != self.n_body or any(ch not in "+-0" for ch in pat):
                raise ValueError(
                    f"Charge pattern '{pat}' must use +, -, 0 and have length {self.n_body}."
                )
        return self


class HistogramConfig(BaseModel):
    """Binning of the candidate mass histogram."""

    name: Annotated[str, Field(default="mass")]
    bins: Annotated[int, Field(default=36, gt=0)]
    low: Annotated[float, Field(default=80.0)]
    high: Annotated[float, Field(default=250.0)]

    @model_validator(mode="after")
    def validate_range(self) -> "HistogramConfig":
        if self.high <= self.low:
            raise ValueError(f"Histogram range is empty: low={self.low}, high={self.high}.")
        return self


class AnalysisConfig(BaseModel):
    """Top-level configuration of one combination run."""

    input: Annotated[InputConfig, Field(default_factory=InputConfig)]
    selection: Annotated[SelectionConfig, Field(default_factory=SelectionConfig)]
    histogram: Annotated[HistogramConfig, Field(default_factory=HistogramConfig)]
    mode: Annotated[
        Literal["loop", "vectorized"],
        Field(default="vectorized", description="Event loop or whole-array evaluation"),
    ]

    def preselection(self) -> ParticlePreselection:
        s = self.selection
        return ParticlePreselection(
            min_pt=s.min_pt,
            min_eta=s.min_eta,
            max_eta=s.max_eta,
            max_abs_eta=s.max_abs_eta,
        )

    def cuts(self) -> CombinationCuts:
        s = self.selection
        return CombinationCuts(
            total_charge=s.total_charge,
            min_mass=s.min_mass,
            max_mass=s.max_mass,
            min_pt=s.min_candidate_pt,
            max_pt=s.max_candidate_pt,
            min_eta=s.min_candidate_eta,
            max_eta=s.max_candidate_eta,
            allowed_charge_patterns=s.allowed_charge_patterns,
        )


def load_config(path: str | Path) -> AnalysisConfig:
    """Load and validate an `AnalysisConfig` from a JSON file."""
    raw = Path(path).read_text(encoding="utf-8")
    config = AnalysisConfig.model_validate(json.loads(raw))
    logger.debug("Loaded configuration from %s: %s", path, config.model_dump())
    return config
