"""
Benchmark: reference vs vectorized backend for shadow raster builds

Uses a synthetic city block grid around San Francisco. Also checks that both
backends produce the same grid.

Usage:
    python scripts/benchmark_shadows.py
    python scripts/benchmark_shadows.py --repeats 5 --diameter 800 --cell 5
"""

from __future__ import annotations

import argparse
import time
from datetime import datetime, timezone

import numpy as np
from shadecast import BuildingFootprint, GeoPoint, LocalPoint, build_shadow_raster
from shadecast.projection import unproject

CENTER = GeoPoint(longitude=-122.4194, latitude=37.7749)

SUN_TIMES = {
    "morning": datetime(2024, 6, 21, 16, 0, tzinfo=timezone.utc),
    "noon": datetime(2024, 6, 21, 20, 10, tzinfo=timezone.utc),
    "evening": datetime(2024, 6, 22, 1, 30, tzinfo=timezone.utc),
}


def make_blocks(extent: float, spacing: float = 40.0, size: float = 24.0, seed: int = 0) -> list[BuildingFootprint]:
    """Square buildings on a regular street grid with random heights."""
    rng = np.random.default_rng(seed)
    buildings = []
    half = size / 2
    steps = np.arange(-extent, extent + spacing, spacing)
    for x in steps:
        for y in steps:
            corners = [(x - half, y - half), (x + half, y - half), (x + half, y + half), (x - half, y + half)]
            ring = [unproject(CENTER, LocalPoint(float(cx), float(cy))) for cx, cy in corners]
            ring.append(ring[0])
            buildings.append(
                BuildingFootprint(id=len(buildings), outer_ring=tuple(ring), height_meters=float(rng.uniform(6, 60)))
            )
    return buildings


def time_fn(fn, repeats: int):
    samples = []
    result = None
    for _ in range(repeats):
        t0 = time.perf_counter()
        result = fn()
        samples.append(time.perf_counter() - t0)
    return samples, result


def _fmt_samples(samples: list[float]) -> str:
    avg = sum(samples) / len(samples)
    return f"min={min(samples):.3f}s  avg={avg:.3f}s  max={max(samples):.3f}s"


def _print_table(rows: list[tuple[str, list[float], float | None]]) -> None:
    """Print a benchmark result table.

    rows: [(label, samples, speedup_vs_reference), ...]
    """
    col_label = 16
    col_timing = 36
    col_speedup = 14
    rule = "-" * (col_label + col_timing + col_speedup)

    header = f"{'backend':<{col_label}}{'timing':<{col_timing}}{'speedup':>{col_speedup}}"
    print(f"  {header}")
    print(f"  {rule}")
    for label, samples, speedup in rows:
        speedup_str = f"{speedup:.1f}x faster" if speedup is not None else "baseline"
        print(f"  {label:<{col_label}}{_fmt_samples(samples):<{col_timing}}{speedup_str:>{col_speedup}}")


def main(repeats: int, when: str, diameter: float, cell: float):
    parser = argparse.ArgumentParser(description="Benchmark shadow raster backends")
    parser.add_argument("--repeats", type=int, default=repeats, help=f"Timed repetitions (default: {repeats})")
    parser.add_argument(
        "--when",
        choices=[*SUN_TIMES, "all"],
        default=when,
        help=f"Sun position to benchmark (default: {when})",
    )
    parser.add_argument("--diameter", type=float, default=diameter, help=f"Raster diameter in m (default: {diameter})")
    parser.add_argument("--cell", type=float, default=cell, help=f"Cell size in m (default: {cell})")
    parser.add_argument("--workers", type=int, default=None, help="Thread count (default: adaptive)")
    args = parser.parse_args()

    buildings = make_blocks(args.diameter / 2 + 50)
    print(f"  {len(buildings)} buildings  |  diameter={args.diameter}m  |  cell={args.cell}m  |  repeats={args.repeats}")

    instants = SUN_TIMES if args.when == "all" else {args.when: SUN_TIMES[args.when]}

    for name, instant in instants.items():
        print(f"\n  Sun: {name}  ({instant.isoformat()})")
        print()

        def run(backend: str):
            return build_shadow_raster(
                CENTER, args.diameter, instant, args.cell, buildings, backend=backend, workers=args.workers
            )

        ref_samples, ref_raster = time_fn(lambda: run("reference"), args.repeats)
        vec_samples, vec_raster = time_fn(lambda: run("vectorized"), args.repeats)
        ref_avg = sum(ref_samples) / len(ref_samples)
        vec_avg = sum(vec_samples) / len(vec_samples)

        _print_table([("reference", ref_samples, None), ("vectorized", vec_samples, ref_avg / vec_avg)])
        match = "identical" if ref_raster == vec_raster else "DIFFERENT"
        print(f"\n  grids {match}; shaded fraction {ref_raster.shaded_fraction:.3f}")


if __name__ == "__main__":
    main(repeats=3, when="noon", diameter=400.0, cell=10.0)
