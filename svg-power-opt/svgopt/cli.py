import argparse
import logging
import sys

from .batch import BatchOptions, default_workers, resolve_inputs, run_batch
from .catalog import PluginSpec
from .errors import BatchError, PluginError
from .options import BACKENDS, OptimizeOptions
from .svgo import svgo_available

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value!r}")
    return number


def _plugin_descriptor(value: str) -> PluginSpec:
    try:
        return PluginSpec.from_json(value)
    except PluginError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svg-power-opt",
        description="Optimize SVG/SVGZ files in bulk.",
    )
    parser.add_argument('input', metavar='INPUT', help="SVG/SVGZ file, directory (recursive) or glob pattern.")
    parser.add_argument('-o', '--out', default='optimized', help="Output directory (default: ./optimized).")
    parser.add_argument('--aggressive', action='store_true', help="Also run the aggressive plugins (may alter rendering).")
    parser.add_argument('--dry-run', action='store_true', help="Report sizes without writing anything.")
    parser.add_argument('--png', action='store_true', help="Also export a PNG thumbnail next to each output.")
    parser.add_argument('--png-size', type=_positive_int, default=512, help="Thumbnail width and height in pixels.")
    parser.add_argument('--png-timeout', type=_non_negative_int, default=0,
                        help="Seconds allowed per PNG render, 0 for no limit (POSIX only).")
    parser.add_argument('-j', '--jobs', type=_positive_int, default=default_workers(),
                        help="Number of worker processes (default: CPU count).")
    parser.add_argument('--plugin', action='append', default=[], type=_plugin_descriptor,
                        help="Extra plugin descriptor as JSON, e.g. '{\"name\": \"removeComments\", \"active\": false}'. Repeatable.")
    parser.add_argument('--keep-dimensions', action='store_true', help="Keep width/height on the root <svg>.")
    parser.add_argument('--no-preserve-viewbox', action='store_true', help="Do not force removeViewBox off (it still only runs when added with --plugin).")
    parser.add_argument('--single-pass', action='store_true', help="Run the plugin pipeline only once.")
    parser.add_argument('--backend', choices=BACKENDS, default='native', help="Optimization engine.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help="Debug logging.")
    verbosity.add_argument('-q', '--quiet', action='store_true', help="Only warnings and errors, no progress bar.")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.backend == "svgo" and not svgo_available():
        logger.error("'svgo' not found. Install with: npm i -g svgo")
        return 2

    options = BatchOptions(
        out_dir=args.out,
        optimize=OptimizeOptions(
            aggressive=args.aggressive,
            multipass=not args.single_pass,
            preserve_viewbox=not args.no_preserve_viewbox,
            remove_dimensions=not args.keep_dimensions,
            plugins=tuple(args.plugin),
            backend=args.backend,
        ),
        dry_run=args.dry_run,
        png=args.png,
        png_size=args.png_size,
        png_timeout=args.png_timeout,
        workers=args.jobs,
    )

    try:
        inputs = resolve_inputs(args.input)
        summary = run_batch(inputs, options, progress=not args.quiet)
    except BatchError as e:
        logger.error("%s", e)
        return 2
    return summary.exit_code


if __name__ == '__main__':
    sys.exit(main())
