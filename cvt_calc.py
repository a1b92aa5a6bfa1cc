#!/usr/bin/env python3
# Prints CVT timings as X11 modelines or YAML reports.

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

import yaml

from cvt_core import (
    VARIANT_CONSTANTS,
    ConversionError,
    ModeRequest,
    Resolution,
    TimingError,
    compute_request,
    format_modeline,
    mode_request_from_mapping,
    parse_refresh_rate,
    timing_to_dict,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "cvt_calc", description="Compute VESA CVT display timings."
    )
    parser.add_argument("width", nargs="?", type=int, help="Horizontal pixels")
    parser.add_argument("height", nargs="?", type=int, help="Vertical lines")
    parser.add_argument("refresh", nargs="?", default="60", help="Refresh rate in Hz (default 60)")
    blanking = parser.add_mutually_exclusive_group()
    blanking.add_argument("-r", "--reduced", action="store_true", help="Reduced blanking v1")
    blanking.add_argument("--rb2", action="store_true", help="Reduced blanking v2")
    parser.add_argument("-i", "--interlaced", action="store_true", help="Interlaced mode")
    parser.add_argument("--margins", action="store_true", help="Add 1.8%% CVT borders")
    parser.add_argument(
        "--video-optimized", action="store_true", help="RBv2 1000/1001 pixel clock"
    )
    parser.add_argument("--config", help="YAML file with a top-level 'modes' list")
    parser.add_argument(
        "--format", choices=("modeline", "yaml"), default="modeline", help="Output format"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def load_requests(path: str) -> List[ModeRequest]:
    """Read every entry of the ``modes`` list in the YAML file at ``path``."""

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    modes = data.get("modes") if isinstance(data, dict) else None
    if not isinstance(modes, list):
        raise ConversionError(f"{path}: expected a top-level 'modes' list.")

    requests = []
    for index, entry in enumerate(modes):
        if not isinstance(entry, dict):
            raise ConversionError(f"{path}: modes[{index}] must be a mapping.")
        requests.append(mode_request_from_mapping(entry))
    logger.debug("Loaded %d mode(s) from %s", len(requests), path)
    return requests


def request_from_args(args: argparse.Namespace) -> ModeRequest:
    if args.width is None or args.height is None:
        raise ConversionError("width and height are required without --config.")

    if args.rb2:
        variant = "reduced_v2"
    elif args.reduced:
        variant = "reduced"
    else:
        variant = "normal"

    return ModeRequest(
        resolution=Resolution(args.width, args.height),
        refresh_rate=parse_refresh_rate(args.refresh),
        variant=variant,
        interlaced=args.interlaced,
        margins=args.margins,
        video_optimized=args.video_optimized,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        requests = load_requests(args.config) if args.config else [request_from_args(args)]
    except (OSError, yaml.YAMLError) as e:
        logger.error("Could not load '%s': %s", args.config, e)
        return 2
    except TimingError as e:
        logger.error("%s", e)
        return 2

    status = 0
    reports = []
    for request in requests:
        res = request.resolution
        label = f"{res.horizontal_pixels}x{res.vertical_lines}@{float(request.refresh_rate):g}"

        cell_gran = VARIANT_CONSTANTS[request.variant].cell_gran
        if res.horizontal_pixels % cell_gran:
            logger.warning(
                "%s: width is not a multiple of %d, active pixels are rounded down",
                label, cell_gran,
            )

        try:
            timing = compute_request(request)
        except TimingError as e:
            field = getattr(e, "field", None)
            logger.error("%s: %s%s", label, e, f" (field: {field})" if field else "")
            status = 2
            continue

        logger.debug(
            "%s: %s blanking, %d x %d total, achieved %.3f Hz",
            label, timing.variant, timing.h_total, timing.v_total, float(timing.frame_rate),
        )
        if args.format == "modeline":
            print(format_modeline(timing))
        else:
            reports.append(timing_to_dict(timing))

    if reports:
        yaml.safe_dump({"modes": reports}, sys.stdout, sort_keys=False)
    return status


if __name__ == "__main__":
    sys.exit(main())
