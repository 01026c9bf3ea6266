"""Vectorized n-body combinations over jagged awkward arrays.

Every function here operates on a whole dataset at once: `particles` is an
`awkward.Array` of events, each holding a variable-length list of records with
fields `pt`, `eta`, `phi`, `charge` and `mass`. The results agree with the
event loop in `lepcomb.combiner` for identical inputs and cuts.
"""

from __future__ import annotations

import functools
import logging
import operator
from dataclasses import dataclass
from typing import Sequence

import awkward as ak
import numpy as np

from .models import (
    ETA_AT_ZERO_PT,
    SUPPORTED_N_BODY,
    CombinationCuts,
    Event,
    Particle,
    ParticlePreselection,
)

logger = logging.getLogger(__name__)

PARTICLE_FIELDS = ("pt", "eta", "phi", "charge", "mass")


@dataclass(frozen=True)
class ColumnarCandidates:
    """Vectorized combination output.

    `event_mask` flags the input events that had enough particles to be
    combined; `candidates` holds one jagged list of candidate records per
    flagged event with fields `mass`, `pt`, `eta`, `phi`, `charge` and
    `indices` (positions of the constituents in the original event).
    """

    event_mask: ak.Array
    candidates: ak.Array

    @property
    def n_events(self) -> int:
        return len(self.candidates)

    @property
    def n_candidates(self) -> int:
        return int(ak.sum(ak.num(self.candidates, axis=1)))


def zip_particles(pt, eta, phi, charge, mass=None, default_mass: float = 0.0) -> ak.Array:
    """Zip per-field jagged arrays into one particle record array."""
    if mass is None:
        mass = ak.full_like(pt, default_mass, dtype=np.float64)
    return ak.zip({"pt": pt, "eta": eta, "phi": phi, "charge": charge, "mass": mass})


def to_cartesian(particles: ak.Array) -> ak.Array:
    """Return `px, py, pz, e` records with the same jagged shape as the input."""
    px = particles.pt * np.cos(particles.phi)
    py = particles.pt * np.sin(particles.phi)
    pz = particles.pt * np.sinh(particles.eta)
    e = np.sqrt(particles.mass**2 + px**2 + py**2 + pz**2)
    return ak.zip({"px": px, "py": py, "pz": pz, "e": e})


def signed_mass(mass2):
    """Element-wise `sqrt(m2)` keeping the sign of negative inputs."""
    return np.sign(mass2) * np.sqrt(np.abs(mass2))


def preselection_mask(particles: ak.Array, preselection: ParticlePreselection | None) -> ak.Array:
    """Jagged boolean mask of particles passing the preselection."""
    mask = ak.ones_like(particles.pt, dtype=bool)
    if preselection is None:
        return mask
    if preselection.min_pt is not None:
        mask = mask & (particles.pt >= preselection.min_pt)
    if preselection.min_eta is not None:
        mask = mask & (particles.eta >= preselection.min_eta)
    if preselection.max_eta is not None:
        mask = mask & (particles.eta <= preselection.max_eta)
    if preselection.max_abs_eta is not None:
        mask = mask & (abs(particles.eta) <= preselection.max_abs_eta)
    return mask


def combine_columnar(
    particles: ak.Array,
    n_body: int = 4,
    preselection: ParticlePreselection | None = None,
    cuts: CombinationCuts | None = None,
) -> ColumnarCandidates:
    """Build every n-body candidate of every event in one pass.

    Events with fewer than `n_body` particles (after preselection) are
    dropped before enumeration and reported through `event_mask`.
    """
    if n_body not in SUPPORTED_N_BODY:
        raise ValueError("Only 2-body, 3-body, and 4-body combinations are supported.")
    cuts = cuts or CombinationCuts()
    pattern_codes = _charge_pattern_codes(cuts.allowed_charge_patterns, n_body)

    particles = ak.with_field(particles, ak.local_index(particles, axis=1), "index")
    particles = particles[preselection_mask(particles, preselection)]
    event_mask = ak.num(particles, axis=1) >= n_body
    particles = particles[event_mask]

    legs = ak.unzip(ak.combinations(particles, n_body, axis=1))
    legs_p4 = [to_cartesian(leg) for leg in legs]
    px = functools.reduce(operator.add, (p4.px for p4 in legs_p4))
    py = functools.reduce(operator.add, (p4.py for p4 in legs_p4))
    pz = functools.reduce(operator.add, (p4.pz for p4 in legs_p4))
    e = functools.reduce(operator.add, (p4.e for p4 in legs_p4))
    charge = functools.reduce(operator.add, (leg.charge for leg in legs))

    mass = signed_mass(e**2 - (px**2 + py**2 + pz**2))
    pt = np.sqrt(px**2 + py**2)
    with np.errstate(divide="ignore", invalid="ignore"):
        eta = ak.where(pt > 0, np.arcsinh(pz / pt), ((pz >= 0) * 2 - 1) * ETA_AT_ZERO_PT)
    phi = np.arctan2(py, px)

    candidates = ak.zip(
        {
            "mass": mass,
            "pt": pt,
            "eta": eta,
            "phi": phi,
            "charge": charge,
            "indices": ak.combinations(particles.index, n_body, axis=1),
        },
        depth_limit=2,
    )

    keep = ak.ones_like(mass, dtype=bool)
    if cuts.total_charge is not None:
        keep = keep & (charge == cuts.total_charge)
    if pattern_codes is not None:
        code = functools.reduce(
            operator.add,
            ((np.sign(leg.charge) + 1) * 3 ** (n_body - 1 - k) for k, leg in enumerate(legs)),
        )
        keep = keep & functools.reduce(
            operator.or_, (code == c for c in pattern_codes), ak.zeros_like(mass, dtype=bool)
        )
    for value, low, high in (
        (mass, cuts.min_mass, cuts.max_mass),
        (pt, cuts.min_pt, cuts.max_pt),
        (eta, cuts.min_eta, cuts.max_eta),
    ):
        if low is not None:
            keep = keep & (value >= low)
        if high is not None:
            keep = keep & (value <= high)

    result = ColumnarCandidates(event_mask=event_mask, candidates=candidates[keep])
    logger.info(
        "Vectorized %d-body combination: %d/%d event(s) combined, %d candidate(s) kept",
        n_body,
        result.n_events,
        len(event_mask),
        result.n_candidates,
    )
    return result


def flat_masses(candidates: ColumnarCandidates) -> np.ndarray:
    """Flatten candidate masses into a 1-D numpy array for histogramming."""
    return ak.to_numpy(ak.flatten(candidates.candidates.mass, axis=None)).astype(np.float64)


def concatenate_candidates(parts: Sequence[ColumnarCandidates]) -> ColumnarCandidates:
    """Join per-chunk outputs, in chunk order, into one result."""
    if len(parts) == 1:
        return parts[0]
    return ColumnarCandidates(
        event_mask=ak.concatenate([p.event_mask for p in parts]),
        candidates=ak.concatenate([p.candidates for p in parts]),
    )


def events_from_awkward(particles: ak.Array, event_ids: Sequence[str] | None = None) -> list[Event]:
    """Materialize a jagged particle array as `Event` objects for the event loop."""
    if event_ids is not None and len(event_ids) != len(particles):
        raise ValueError("event_ids length must match the number of events.")
    events: list[Event] = []
    for idx, row in enumerate(ak.to_list(particles[list(PARTICLE_FIELDS)])):
        event_id = f"evt{idx}" if event_ids is None else str(event_ids[idx])
        events.append(
            Event(
                event_id=event_id,
                particles=tuple(
                    Particle(
                        particle_id=f"p{pidx}",
                        pt=float(item["pt"]),
                        eta=float(item["eta"]),
                        phi=float(item["phi"]),
                        charge=int(item["charge"]),
                        mass=float(item["mass"]),
                    )
                    for pidx, item in enumerate(row)
                ),
            )
        )
    return events


def events_to_awkward(events: Sequence[Event]) -> ak.Array:
    """Pack `Event` objects into a jagged particle record array."""
    counts = np.asarray([e.n_particles for e in events], dtype=np.int64)
    flat = [p for e in events for p in e.particles]
    columns = {
        "pt": np.asarray([p.pt for p in flat], dtype=np.float64),
        "eta": np.asarray([p.eta for p in flat], dtype=np.float64),
        "phi": np.asarray([p.phi for p in flat], dtype=np.float64),
        "charge": np.asarray([p.charge for p in flat], dtype=np.int32),
        "mass": np.asarray([p.mass for p in flat], dtype=np.float64),
    }
    return ak.zip({name: ak.unflatten(values, counts) for name, values in columns.items()})


def _charge_pattern_codes(allowed_charge_patterns: tuple[str, ...] | None, n_body: int) -> list[int] | None:
    """Encode `+`/`0`/`-` patterns as base-3 integers (`-`=0, `0`=1, `+`=2)."""
    if allowed_charge_patterns is None:
        return None
    digits = {"-": 0, "0": 1, "+": 2}
    codes: list[int] = []
    for pat in allowed_charge_patterns:
        if len(pat) != n_body:
            raise ValueError(f"Charge pattern '{pat}' length does not match n_body={n_body}.")
        if any(ch not in digits for ch in pat):
            raise ValueError(f"Charge pattern '{pat}' contains invalid symbol. Use +, -, or 0.")
        codes.append(sum(digits[ch] * 3 ** (n_body - 1 - k) for k, ch in enumerate(pat)))
    return codes
