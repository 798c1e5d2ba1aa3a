import io
import logging
import os
import re
import signal
from contextlib import contextmanager
from pathlib import Path

from cairosvg import svg2png
from PIL import Image, ImageOps, ImageStat

from .errors import SvgInputError, ThumbnailError
from .sources import read_svg_file
from .util import atomic_write_bytes

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Render timeout (SIGALRM, so POSIX main thread only; unbounded elsewhere)
# ---------------------------------------------------------------------------

class RenderTimeout(Exception):
    """The render exceeded its time budget; surfaced as ThumbnailError."""


@contextmanager
def _render_deadline(seconds: int):
    if os.name != "posix" or seconds <= 0:
        yield
        return

    def _expired(signum, frame):
        raise RenderTimeout()

    old_handler = signal.signal(signal.SIGALRM, _expired)
    signal.alarm(seconds)
    try:
        yield
    finally:
        signal.alarm(0)
        signal.signal(signal.SIGALRM, old_handler)


# ---------------------------------------------------------------------------
# Sanitize helpers
# ---------------------------------------------------------------------------

def sanitize(svg: str) -> str:
    """Fix common SVG issues so that CairoSVG can render them reliably."""
    # add viewBox if missing, so the drawing scales to the output size
    if "viewBox" not in svg and "viewbox" not in svg:
        w = re.search(r"<svg[^>]*?\swidth=\"([\d\.]+)", svg)
        h = re.search(r"<svg[^>]*?\sheight=\"([\d\.]+)", svg)
        if w and h:
            svg = svg.replace(
                "<svg", f"<svg viewBox=\"0 0 {w.group(1)} {h.group(1)}\"", 1
            )
    return svg


def is_blank(img: Image.Image, thr: int = 5) -> bool:
    """True when *img* is fully transparent or its gray std-dev is below *thr*."""
    if img.mode in ("RGBA", "LA") and max(img.split()[-1].getextrema()) < thr:
        return True
    return ImageStat.Stat(img.convert("L")).stddev[0] < thr


def _load_markup(source: str | os.PathLike) -> str:
    if isinstance(source, str) and source.lstrip().startswith("<"):
        return source
    if isinstance(source, (str, os.PathLike)):
        try:
            return read_svg_file(source)
        except SvgInputError as e:
            raise ThumbnailError(str(e)) from e
    raise ThumbnailError(
        f"Thumbnail source must be SVG markup or a file path, got {type(source).__name__}"
    )


# ---------------------------------------------------------------------------
# Core rasterisation
# ---------------------------------------------------------------------------

def svg_to_png_bytes(
    svg: str,
    *,
    width: int = 512,
    height: int = 512,
    density: int = 120,
    quality: int = 90,
    timeout: int = 0,
) -> bytes:
    """Render *svg* to a PNG of exactly ``width x height`` pixels.

    ``quality`` below 100 reduces the image to a palette of
    ``round(256 * quality / 100)`` colors (at least 2).
    """
    try:
        with _render_deadline(timeout):
            png_bytes = svg2png(
                bytestring=sanitize(svg).encode("utf-8"),
                dpi=density,
                output_width=width,
                output_height=height,
            )
    except RenderTimeout as e:
        raise ThumbnailError(f"Rendering timed out after {timeout}s") from e
    except Exception as e:
        # CairoSVG can throw many different exceptions on malformed input.
        raise ThumbnailError(f"Rendering failed: {e}") from e

    try:
        img = Image.open(io.BytesIO(png_bytes))
        img.load()
    except OSError as e:  # corrupt stream
        raise ThumbnailError(f"Renderer produced an unreadable PNG: {e}") from e

    img = img.convert("RGBA")
    if img.size != (width, height):
        img = ImageOps.fit(img, (width, height), method=Image.LANCZOS)
    if is_blank(img):
        logger.warning("Rendered thumbnail is blank")

    if quality < 100:
        colors = max(2, round(256 * quality / 100))
        img = img.quantize(colors=colors, method=Image.FASTOCTREE)

    out = io.BytesIO()
    img.save(out, format="PNG", optimize=True)
    return out.getvalue()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def export_png_thumbnail(
    source: str | os.PathLike,
    output_path: str | os.PathLike,
    *,
    width: int = 512,
    height: int = 512,
    density: int = 120,
    quality: int = 90,
    timeout: int = 0,
) -> Path:
    """Rasterize *source* into a PNG at *output_path*.

    *source* counts as markup when it is a ``str`` whose stripped text starts
    with ``<``, so a leading ``<?xml ...?>`` or ``<!DOCTYPE ...>`` works as
    well as ``<svg``. Any other ``str`` or ``PathLike`` is read as an
    SVG/SVGZ file. *timeout* (seconds, 0 for none) bounds the render.
    """
    for name, value in (("width", width), ("height", height), ("density", density)):
        if not isinstance(value, int) or value <= 0:
            raise ThumbnailError(f"{name} must be a positive integer, got {value!r}")
    if not 1 <= quality <= 100:
        raise ThumbnailError(f"quality must be within 1..100, got {quality!r}")

    svg = _load_markup(source)
    png_bytes = svg_to_png_bytes(
        svg,
        width=width,
        height=height,
        density=density,
        quality=quality,
        timeout=timeout,
    )
    try:
        return atomic_write_bytes(Path(output_path), png_bytes)
    except OSError as e:
        raise ThumbnailError(f"Cannot write {output_path}: {e}") from e


__all__ = [
    "sanitize",
    "is_blank",
    "svg_to_png_bytes",
    "export_png_thumbnail",
]
