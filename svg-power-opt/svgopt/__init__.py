"""Batch SVG/SVGZ optimizer built around an svgo-style plugin pipeline."""

from .catalog import AGGRESSIVE_PLUGINS, SAFE_PLUGINS, Builtin, PluginSpec
from .composer import compose_from_options, compose_plugins
from .engine import optimize, optimize_svg, resolve_plugins
from .errors import (
    BatchError,
    OptimizationError,
    PluginError,
    SvgFetchError,
    SvgInputError,
    SvgOptError,
    SvgParseError,
    ThumbnailError,
)
from .options import OptimizeOptions
from .sources import (
    optimize_svg_from_buffer,
    optimize_svg_from_file,
    optimize_svg_from_url,
    optimize_svg_stream,
)
from .validation import validate_svg

__version__ = "0.1.0"

__all__ = [
    "Builtin",
    "PluginSpec",
    "SAFE_PLUGINS",
    "AGGRESSIVE_PLUGINS",
    "OptimizeOptions",
    "compose_plugins",
    "compose_from_options",
    "optimize",
    "optimize_svg",
    "resolve_plugins",
    "optimize_svg_from_file",
    "optimize_svg_from_buffer",
    "optimize_svg_from_url",
    "optimize_svg_stream",
    "validate_svg",
    "SvgOptError",
    "SvgParseError",
    "PluginError",
    "OptimizationError",
    "SvgInputError",
    "SvgFetchError",
    "ThumbnailError",
    "BatchError",
]
