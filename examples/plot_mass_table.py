"""Re-plot the candidate mass distribution from a combiner output table.

Run from repository root without installation:
    PYTHONPATH=src python examples/plot_mass_table.py --input cands.parquet
"""

from __future__ import annotations

import argparse
from pathlib import Path

from lepcomb.plotting import plot_mass_histogram


def _require_pandas():
    """Import pandas with an actionable error if not installed."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required. Install with: pip install pandas pyarrow"
        ) from exc
    return pd


def main(argv: list[str] | None = None) -> int:
    """Load a table, print a short summary, and save a mass histogram."""
    parser = argparse.ArgumentParser(description="Plot candidate masses from a combiner table.")
    parser.add_argument("--input", required=True, help="Path to .parquet/.csv/.pkl output.")
    parser.add_argument("--bins", type=int, default=36)
    parser.add_argument("--low", type=float, default=80.0)
    parser.add_argument("--high", type=float, default=250.0)
    args = parser.parse_args(argv)

    pd = _require_pandas()
    path = Path(args.input)
    readers = {".parquet": pd.read_parquet, ".csv": pd.read_csv, ".pkl": pd.read_pickle}
    if path.suffix.lower() not in readers:
        raise ValueError("Supported input formats: .parquet, .csv, .pkl")
    df = readers[path.suffix.lower()](path)

    print(df["candidate_mass"].describe().to_string())
    out = plot_mass_histogram(
        path.with_suffix(".png"),
        df["candidate_mass"].to_numpy(),
        bins=args.bins,
        low=args.low,
        high=args.high,
    )
    print(f"Saved plot: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
