#!/usr/bin/env python3
from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

import polycal
from polycal.engines.chinese import ELAPSED_OFFSET


def _need_matplotlib():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "polycal[diagnostics]"') from e


@dataclass(frozen=True)
class Style:
    label: str
    variant: str
    marker: str
    size: float
    hollow: bool
    color: str = "0.15"
    lw: float = 1.2
    alpha: float = 0.95


DEFAULT_STYLES: Dict[str, Style] = {
    "chinese": Style("Chinese", "chinese", marker="o", size=22, hollow=False),
    "japanese": Style("Japanese (Tenpo)", "japanese", marker="s", size=80, hollow=True),
}


def parse_variants(s: str) -> List[str]:
    out = [x.strip() for x in s.split(",") if x.strip()]
    if not (1 <= len(out) <= 2):
        raise SystemExit("--calendars must contain 1 or 2 comma-separated lunisolar calendars")
    return out


def leap_month_of(variant: str, related_year: int) -> Optional[int]:
    """Number of the leap month of the lunisolar year starting in `related_year`."""
    cal = polycal.calendar(variant)
    year = related_year + ELAPSED_OFFSET if variant == "chinese" else related_year
    if not (cal.min_year <= year <= cal.max_year):
        return None
    for m in cal.months(year):
        if m.leap:
            return m.number
    return None


def build_points(variant: str, start_year: int, end_year: int) -> Tuple[np.ndarray, np.ndarray]:
    xs, ys = [], []
    for y in range(start_year, end_year + 1):
        m = leap_month_of(variant, y)
        if m is not None:
            xs.append(y)
            ys.append(m)
    return np.array(xs, dtype=int), np.array(ys, dtype=int)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Leap-month barcode diagram of lunisolar calendars.")
    p.add_argument("--start-year", type=int, default=1960)
    p.add_argument("--end-year", type=int, default=2030)
    p.add_argument("--out", default="leapmonth_barcode.png")
    p.add_argument("--title", default="Leap month pattern")
    p.add_argument("--calendars", default="chinese", help="Comma list of 1-2 of: chinese, japanese.")
    p.add_argument("--year-step", type=int, default=5, help="Label every k years (default: 5).")
    p.add_argument("--cell-edge", default="0.88", help="Cell border color (matplotlib gray string).")
    p.add_argument("--cell-lw", type=float, default=0.6, help="Cell border line width.")
    args = p.parse_args(argv)

    plt = _need_matplotlib()
    from matplotlib.colors import ListedColormap

    start_year, end_year = args.start_year, args.end_year
    if end_year < start_year:
        raise SystemExit("--end-year must be >= --start-year")

    styles: List[Style] = []
    for v in parse_variants(args.calendars):
        if v not in DEFAULT_STYLES:
            raise SystemExit(f"Unknown calendar '{v}'. Known: {sorted(DEFAULT_STYLES.keys())}")
        styles.append(DEFAULT_STYLES[v])

    fig, ax = plt.subplots(figsize=(16, 3.6))

    x_edges = np.arange(start_year - 0.5, end_year + 1.5, 1.0)
    y_edges = np.arange(0.5, 13.5, 1.0)
    Z = np.zeros((12, end_year - start_year + 1), dtype=float)
    ax.pcolormesh(
        x_edges,
        y_edges,
        Z,
        shading="flat",
        cmap=ListedColormap(["white"]),
        vmin=0, vmax=1,
        edgecolors=args.cell_edge,
        linewidth=float(args.cell_lw),
        antialiased=True,
        zorder=0,
    )
    ax.set_xlim(start_year - 0.5, end_year + 0.5)
    ax.set_ylim(0.5, 12.5)
    ax.grid(False)
    ax.tick_params(axis="both", which="both", length=0)

    step = max(1, int(args.year_step))
    xt = list(range(start_year, end_year + 1, step))
    ax.set_xticks(xt)
    ax.set_xticklabels([str(y) for y in xt])
    ax.set_xlabel("Gregorian year")
    ax.set_yticks([1, 3, 6, 9, 12])
    ax.set_ylabel("Leap month (number)")

    for st in styles:
        x, m = build_points(st.variant, start_year, end_year)
        if st.hollow:
            ax.scatter(x, m, s=st.size, marker=st.marker, facecolors="none", edgecolors=st.color,
                       linewidths=st.lw, alpha=st.alpha, label=st.label, zorder=5)
        else:
            ax.scatter(x, m, s=st.size, marker=st.marker, c=st.color,
                       linewidths=0.0, alpha=st.alpha, label=st.label, zorder=5)

    ax.set_title(args.title)
    ax.legend(loc="center left", bbox_to_anchor=(1.01, 0.5), frameon=False)
    fig.tight_layout()
    fig.savefig(args.out, dpi=250)
    print(f"Saved: {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
