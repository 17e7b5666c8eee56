#!/usr/bin/env python3
"""
tracklens-analyze: print track metrics and map framing for GPX files.

Paths may be GPX files or directories (searched recursively). With no paths,
the configured work root is searched.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Optional

from tracklens.analyze.track import compute_metrics
from tracklens.config import TrackLensConfig, _as_float, load_config
from tracklens.errors import ConfigError, InvalidGpxError
from tracklens.formats.gpx import load_points
from tracklens.mapping.markers import classify_markers
from tracklens.mapping.viewport import viewport_from_config
from tracklens.models import TrackMetrics, Viewport
from tracklens.util.logging import log, utc_now_iso

TSV_HEADER = (
    "file\tpoints\tdistance_m\tduration_s\tavg_speed_mps\tmax_speed_mps\t"
    "ascent_m\tdescent_m\tmin_alt_m\tmax_alt_m\t"
    "center_lat\tcenter_lon\tspan_lat\tspan_lon"
)


def _fmt_opt(v: Optional[float], spec: str) -> str:
    return "" if v is None else format(v, spec)


def print_report(path: Path, m: TrackMetrics, vp: Optional[Viewport], *, tsv: bool) -> None:
    if tsv:
        vp_cols = (
            f"{vp.center.latitude:.6f}\t{vp.center.longitude:.6f}\t"
            f"{vp.span.latitude_delta:.6f}\t{vp.span.longitude_delta:.6f}"
            if vp else "\t\t\t"
        )
        print(
            f"{path}\t"
            f"{m.point_count}\t"
            f"{m.total_distance_meters:.2f}\t"
            f"{m.total_duration_seconds:.1f}\t"
            f"{m.average_speed_meters_per_second:.3f}\t"
            f"{m.max_speed_meters_per_second:.3f}\t"
            f"{m.total_ascent_meters:.1f}\t"
            f"{m.total_descent_meters:.1f}\t"
            f"{_fmt_opt(m.min_altitude_meters, '.1f')}\t"
            f"{_fmt_opt(m.max_altitude_meters, '.1f')}\t"
            f"{vp_cols}"
        )
        return

    print(f"\n{path}")
    print(f"  points        : {m.point_count}")
    print(f"  distance (m)  : {m.total_distance_meters:.2f}")
    print(f"  duration (s)  : {m.total_duration_seconds:.1f}")
    print(f"  avg speed m/s : {m.average_speed_meters_per_second:.3f}")
    print(f"  max speed m/s : {m.max_speed_meters_per_second:.3f}")
    print(f"  ascent (m)    : {m.total_ascent_meters:.1f}")
    print(f"  descent (m)   : {m.total_descent_meters:.1f}")
    print(f"  altitude (m)  : {_fmt_opt(m.min_altitude_meters, '.1f')} .. {_fmt_opt(m.max_altitude_meters, '.1f')}")
    if vp is None:
        print("  viewport      : (no points)")
    else:
        print(f"  center        : {vp.center.latitude:.6f}, {vp.center.longitude:.6f}")
        print(f"  span (deg)    : {vp.span.latitude_delta:.6f} x {vp.span.longitude_delta:.6f}")


def collect_gpx(paths: list[Path]) -> list[Path]:
    out: list[Path] = []
    for p in paths:
        if p.is_dir():
            out.extend(sorted(p.rglob("*.gpx")))
        elif p.is_file():
            out.append(p)
        else:
            log(f"Skipping (not found): {p}")
    return out


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="tracklens: analyze GPX file(s).")
    ap.add_argument("gpx", nargs="*",
                    help="GPX files or directories. If omitted, search the work root.")
    ap.add_argument("--work-root", default=None,
                    help="Working root (default: from tracklens config or ~/GPS/_work)")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("--padding", type=float, default=None,
                    help="Viewport padding fraction (default: from config, 0.2)")
    ap.add_argument("--min-span", type=float, default=None,
                    help="Minimum viewport span in degrees (default: from config, 0.001)")
    ap.add_argument("--plot", action="store_true",
                    help="Show a matplotlib plot per track.")
    return ap


def apply_cli_overrides(cfg: TrackLensConfig, args: argparse.Namespace) -> TrackLensConfig:
    vp = cfg.viewport
    if args.padding is not None:
        vp = replace(vp, padding_fraction=_as_float(args.padding, "--padding"))
    if args.min_span is not None:
        vp = replace(vp, min_span_degrees=_as_float(args.min_span, "--min-span"))
    paths = cfg.paths
    if args.work_root:
        paths = replace(paths, work_root=Path(args.work_root).expanduser())
    return replace(cfg, viewport=vp, paths=paths)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = apply_cli_overrides(load_config(), args)
    except ConfigError as e:
        log(f"Config error: {e}")
        return 2

    roots = [Path(p).expanduser() for p in args.gpx] or [cfg.paths.work_root]
    selected = collect_gpx(roots)
    if not selected:
        log(f"No GPX files found under: {', '.join(str(r) for r in roots)}")
        return 1

    if args.tsv:
        print(TSV_HEADER)
    else:
        print(f"tracklens report {utc_now_iso()}")

    for path in selected:
        try:
            points = load_points(path)
        except InvalidGpxError as e:
            log(f"Skipping: {e}")
            continue

        metrics = compute_metrics(points, config=cfg.metrics)
        viewport = viewport_from_config(points, cfg.viewport)
        print_report(path, metrics, viewport, tsv=args.tsv)

        if args.plot:
            from tracklens.visualize.plot import plot_track

            plot_track(points, markers=classify_markers(points), viewport=viewport, show=True)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
