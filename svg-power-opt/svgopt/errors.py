class SvgOptError(Exception):
    """Base class for every error raised by *svgopt*."""


class SvgParseError(SvgOptError):
    """Markup could not be parsed into an SVG document."""


class PluginError(SvgOptError):
    """A plugin descriptor is unknown, malformed or carries invalid params."""


class OptimizationError(SvgOptError):
    """One engine execution failed; the original cause is chained."""


class SvgInputError(SvgOptError):
    """Input could not be read or decoded into markup."""


class SvgFetchError(SvgInputError):
    """Remote SVG could not be fetched (network error or non-2xx status)."""


class ThumbnailError(SvgOptError):
    """PNG thumbnail export failed."""


class BatchError(SvgOptError):
    """Fatal pre-flight error: the batch cannot start."""


__all__ = [
    "SvgOptError",
    "SvgParseError",
    "PluginError",
    "OptimizationError",
    "SvgInputError",
    "SvgFetchError",
    "ThumbnailError",
    "BatchError",
]
