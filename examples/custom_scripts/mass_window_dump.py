"""Example custom callback: keep candidates in a Higgs mass window and dump them."""

from __future__ import annotations

import json
from pathlib import Path

LOW, HIGH = 110.0, 140.0


def process(results, context):
    """Filter masses to the window and write a compact JSON report."""
    masses = [float(m) for m in context["masses"]]
    selected = [m for m in masses if LOW < m < HIGH]
    payload = {
        "mode": context["mode"],
        "n_candidates": len(masses),
        "window": [LOW, HIGH],
        "n_selected": len(selected),
        "selected_masses": selected,
    }
    base = context["output_path"] or context["input_path"]
    out = Path(base).with_name("selected_candidates.json")
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Wrote {out}")
