"""
Roll Polar Command Line
=======================

Inspect .bpolar datasets, fit operating parameters onto the dataset grid and
export dense interpolated grids.

Usage:
    rollpolar inspect PolarData/scantling/GM=1.5m/bin/MAXROLL_H5.5_T7.5.bpolar
    rollpolar fit --gm 1.73 --hs 5.6 --tz 7.4 --aft 8.8 --fore 8.4 --control PolarData/proll.ctl
    rollpolar densify FILE --angles 360 --density 3 --output grid.json
"""

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

from .codec.bpolar import ResponseMatrix, read_bpolar
from .config import PolarConfig
from .errors import PolarDataError
from .grid import naming
from .grid.control_file import load_control_file
from .grid.fitter import DraftCategory, FitParameters, fit
from .polar.chart import dense_grid_dict, dense_grid_for

logger = logging.getLogger(__name__)


def _finite_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}")
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"must be finite, got {text!r}")
    return value


def _format_values(values) -> str:
    return ', '.join(f"{v:g}" for v in values)


def _print_matrix(matrix: ResponseMatrix) -> None:
    peak_roll, peak_speed, peak_heading = matrix.peak()
    print(f"Source:    {matrix.source_key}")
    print(f"Headers:   {matrix.header1!r} {matrix.header2!r}")
    print(f"Status:    {matrix.status!r}")
    print(f"Speeds:    {matrix.speed_count} [{_format_values(matrix.speeds)}]")
    print(f"Headings:  {matrix.heading_count} [{_format_values(matrix.headings)}]")
    print(f"Peak roll: {peak_roll:.2f} deg at {peak_speed:g} kn, {peak_heading:g} deg")


def cmd_inspect(args: argparse.Namespace, config: PolarConfig) -> int:
    matrix = read_bpolar(args.file)
    _print_matrix(matrix)
    return 0


def cmd_fit(args: argparse.Namespace, config: PolarConfig) -> int:
    control = None
    if args.control:
        try:
            control = load_control_file(args.control)
        except PolarDataError as e:
            logger.warning(f"Control file ignored, using fixed draft thresholds: {e}")

    params = FitParameters(
        draft=DraftCategory(args.draft),
        gm=args.gm,
        hs=args.hs,
        tz=args.tz,
        draft_aft_peak=args.aft,
        draft_fore_peak=args.fore,
    )
    key = fit(params, control, config.rounding)

    print(f"Draft:   {key.draft_category.value}")
    print(f"GM:      {key.gm:.1f} m")
    print(f"Hs:      {key.hs:.1f} m")
    print(f"Tz:      {key.tz:.1f} s")
    print(f"Dataset: {naming.storage_key(key)}")
    print(f"Image:   {naming.image_key(key)}")
    return 0


def cmd_densify(args: argparse.Namespace, config: PolarConfig) -> int:
    matrix = read_bpolar(args.file)
    grid = dense_grid_for(
        matrix,
        target_angle_count=args.angles or config.target_angle_count,
        radial_density_factor=args.density or config.radial_density_factor,
        angle_weighted=args.weighted or config.angle_weighted,
    )
    body = dense_grid_dict(grid)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(body, f, indent=2)
        logger.info(f"Dense grid {grid.shape[0]}x{grid.shape[1]} written to {args.output}")
    else:
        json.dump(body, sys.stdout)
        print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Roll polar dataset tools")
    parser.add_argument("--config", "-c", type=Path,
                        help="JSON configuration file")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_inspect = sub.add_parser("inspect", help="Show the contents of a .bpolar file")
    p_inspect.add_argument("file", type=Path)
    p_inspect.set_defaults(func=cmd_inspect)

    p_fit = sub.add_parser("fit", help="Fit parameters onto the dataset grid")
    p_fit.add_argument("--gm", type=_finite_float, required=True, help="Metacentric height (m)")
    p_fit.add_argument("--hs", type=_finite_float, required=True, help="Significant wave height (m)")
    p_fit.add_argument("--tz", type=_finite_float, required=True, help="Zero-crossing period (s)")
    p_fit.add_argument("--draft", default=DraftCategory.SCANTLING.value,
                       choices=[d.value for d in DraftCategory],
                       help="Draft category when peak drafts are not given")
    p_fit.add_argument("--aft", type=_finite_float, help="Aft peak draft (m)")
    p_fit.add_argument("--fore", type=_finite_float, help="Fore peak draft (m)")
    p_fit.add_argument("--control", type=Path, help="Control file (proll.ctl)")
    p_fit.set_defaults(func=cmd_fit)

    p_dense = sub.add_parser("densify", help="Export a dense interpolated grid as JSON")
    p_dense.add_argument("file", type=Path)
    p_dense.add_argument("--angles", type=int, help="Dense angle count")
    p_dense.add_argument("--density", type=int, help="Radial density factor")
    p_dense.add_argument("--weighted", action="store_true",
                         help="Weight angular neighbours by distance")
    p_dense.add_argument("--output", "-o", type=Path, help="Output JSON file")
    p_dense.set_defaults(func=cmd_densify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    try:
        config = PolarConfig.from_json(args.config) if args.config else PolarConfig()
        return args.func(args, config)
    except (PolarDataError, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
