"""Quick-look plots for candidate mass distributions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


def _require_matplotlib():
    """Import matplotlib (non-interactive backend) with an install hint on failure."""
    try:
        import matplotlib  # type: ignore

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "matplotlib is required for plotting. Install with: pip install matplotlib"
        ) from exc
    return plt


def plot_mass_histogram(
    path: str | Path,
    masses: Sequence[float] | np.ndarray,
    bins: int = 36,
    low: float = 80.0,
    high: float = 250.0,
    title: str = "Four-lepton invariant mass",
) -> Path:
    """Draw a step histogram of candidate masses and save it as an image."""
    plt = _require_matplotlib()
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.hist(np.asarray(masses, dtype=np.float64), bins=bins, range=(low, high), histtype="step")
    ax.set_xlabel("m [GeV]")
    ax.set_ylabel(f"Candidates / {(high - low) / bins:g} GeV")
    ax.set_title(title)
    fig.tight_layout()
    fig.savefig(out, dpi=120)
    plt.close(fig)
    logger.info("Saved plot: %s", out)
    return out
