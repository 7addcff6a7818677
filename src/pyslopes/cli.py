"""
Command line entry point.

    pyslopes render --seed 1234 --perspective 60 --output slopes.svg --preview slopes.png
    pyslopes export --random --size large --output-dir output/
"""
import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .config import get_section, load_config
from .core import CanvasDimensions
from .errors import InvalidParameter, SlopesError
from .export import PRINT_SIZES, export_artwork
from .logger import setup_logger
from .params import SLIDER_NAMES, SLOPES_ASPECT_RATIO, ParameterSet, random_parameters
from .pipeline import build_artwork
from .serializer import polylines_to_svg

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", type=int, default=None, help="Noise seed, 0-65535 (default: 0)")
    parser.add_argument("--random", action="store_true", help="Roll a random seed and parameter set")
    parser.add_argument("--rng-seed", type=int, default=None, help="Seed for --random, for reproducible rolls")
    parser.add_argument("--params", default=None, help="JSON file with a parameter set")
    parser.add_argument("--no-occlusion", action="store_true", help="Draw hidden line parts too")
    parser.add_argument("--config", default=None, help="JSON config file overriding the defaults")
    parser.add_argument("--log-dir", default=None, help="Directory for log files (default: from config)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: from config)")
    parser.add_argument("--quiet", action="store_true", help="Only warnings on the console")

    knobs = parser.add_argument_group("knobs", "Slider values, 0-100")
    for name in SLIDER_NAMES:
        knobs.add_argument(f"--{name.replace('_', '-')}", dest=name, type=float, default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyslopes", description="Generate 'Slopes' line-art drawings")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render one artwork to SVG (and optionally a PNG preview)")
    _add_common_arguments(render)
    render.add_argument("--height", type=float, default=800.0, help="Canvas height (default: 800)")
    render.add_argument("--width", type=float, default=None, help="Canvas width (default: height x 3/4)")
    render.add_argument("--output", default="slopes.svg", help="SVG output path")
    render.add_argument("--preview", default=None, help="Also save a matplotlib PNG preview here")
    render.add_argument("--no-retrace", action="store_true", help="Skip the simplification pass")
    render.add_argument("--clip-margins", action="store_true", help="Clip to the canvas margins instead of its edges")

    export = subparsers.add_parser("export", help="Export print files for a physical print size")
    _add_common_arguments(export)
    export.add_argument("--size", choices=sorted(PRINT_SIZES), default="medium")
    export.add_argument("--output-dir", default=None, help="Destination folder (default: from config)")
    export.add_argument("--name", default=None, help="Base filename (default: random uuid)")

    return parser


def resolve_parameters(args: argparse.Namespace) -> Tuple[int, ParameterSet]:
    """Combines --random, --params and the knob flags (in that order of precedence, lowest first)."""
    values: Dict[str, Any] = {}
    seed = 0

    if args.random:
        rng = np.random.default_rng(args.rng_seed)
        seed, rolled = random_parameters(rng)
        values = rolled.to_dict()

    if args.params:
        try:
            with open(args.params, "r", encoding="utf-8") as handle:
                loaded = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidParameter(f"Could not read parameters from {args.params}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise InvalidParameter(f"Parameter file {args.params} must contain a JSON object.")
        loaded = dict(loaded)
        if "seed" in loaded:
            seed = loaded.pop("seed")
        values.update(loaded)

    for name in SLIDER_NAMES:
        value = getattr(args, name)
        if value is not None:
            values[name] = value

    if args.no_occlusion:
        values["enable_occlusion"] = False

    if args.seed is not None:
        seed = args.seed

    return seed, ParameterSet.from_dict(values)


def _run_render(args: argparse.Namespace, config: Dict[str, Any], seed: int, params: ParameterSet) -> None:
    height = args.height
    width = args.width if args.width is not None else height * SLOPES_ASPECT_RATIO

    margins = (0.0, 0.0)
    if args.clip_margins:
        margins = CanvasDimensions.from_size(width, height, config).margins

    artwork = build_artwork(
        seed,
        params,
        width,
        height,
        margins=margins,
        retrace=not args.no_retrace,
        config=config,
        show_progress=not args.quiet,
    )

    export_cfg = get_section(config, "export")
    markup = polylines_to_svg(
        artwork.polylines,
        width,
        height,
        stroke=export_cfg["stroke"],
        stroke_width=export_cfg["stroke_width"],
        precision=export_cfg["precision"],
        background=export_cfg["background"],
    )
    with open(args.output, "w", encoding="utf-8") as handle:
        handle.write(markup)
    logger.info(f"Saved SVG to {args.output}")

    if args.preview:
        from .preview import render_preview
        render_preview(artwork.polylines, width, height, output_path=args.preview)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except SlopesError as exc:
        parser.error(str(exc))

    log_cfg = get_section(config, "logging")
    setup_logger(
        log_dir=args.log_dir or log_cfg["log_dir"],
        log_name=log_cfg["log_name"],
        level=args.log_level or log_cfg["level"],
        quiet=args.quiet,
    )

    try:
        seed, params = resolve_parameters(args)
        logger.info(f"Seed {seed}, parameters: {params.to_dict()}")

        if args.command == "render":
            _run_render(args, config, seed, params)
        else:
            result = export_artwork(
                seed,
                params,
                size=args.size,
                output_dir=args.output_dir,
                config=config,
                filename=args.name,
            )
            logger.info(f"Export complete: {result.svg_path} ({result.polyline_count} polylines)")
    except SlopesError as exc:
        logger.error(str(exc))
        return 1
    except OSError as exc:
        logger.error(f"I/O error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
