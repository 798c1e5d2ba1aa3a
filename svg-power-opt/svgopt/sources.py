"""Entry points that fetch or read markup before handing it to the engine."""

import gzip
import logging
import os
import zlib
from pathlib import Path
from typing import BinaryIO, Iterable

import aiohttp

from .engine import optimize_svg
from .errors import SvgFetchError, SvgInputError
from .options import OptimizeOptions
from .util import is_svgz

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------

def decode_svg_bytes(data: bytes, *, compressed: bool | None = None) -> str:
    """UTF-8 markup from raw bytes, gunzipping SVGZ payloads.

    With *compressed* left as ``None`` the gzip magic number decides.
    """
    if compressed is None:
        compressed = data[:2] == b"\x1f\x8b"
    if compressed:
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise SvgInputError(f"Invalid gzip data: {e}") from e
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SvgInputError(f"SVG is not valid UTF-8: {e}") from e


def read_svg_file(path: str | os.PathLike) -> str:
    """Read a ``.svg`` (UTF-8) or ``.svgz`` (gzip) file as markup."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SvgInputError(f"Cannot read {path}: {e}") from e
    return decode_svg_bytes(data, compressed=is_svgz(path))


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def optimize_svg_from_file(
    path: str | os.PathLike,
    options: OptimizeOptions | None = None,
    **overrides,
) -> str:
    """Optimize the markup stored at *path* (``.svgz`` is decompressed)."""
    return optimize_svg(read_svg_file(path), options, **overrides)


def optimize_svg_from_buffer(
    data: bytes,
    options: OptimizeOptions | None = None,
    **overrides,
) -> str:
    """Optimize UTF-8 (or gzip-compressed) markup held in memory."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise SvgInputError(f"Expected bytes, got {type(data).__name__}")
    return optimize_svg(decode_svg_bytes(bytes(data)), options, **overrides)


def optimize_svg_stream(
    stream: BinaryIO | Iterable[bytes],
    options: OptimizeOptions | None = None,
    **overrides,
) -> str:
    """Buffer a binary stream (file-like or iterable of chunks), then optimize."""
    chunks = []
    try:
        if hasattr(stream, "read"):
            for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):  # 8 KiB
                chunks.append(chunk)
        else:
            for chunk in stream:
                if not isinstance(chunk, (bytes, bytearray)):
                    raise SvgInputError(f"Stream yielded {type(chunk).__name__}, expected bytes")
                chunks.append(bytes(chunk))
    except OSError as e:
        raise SvgInputError(f"Cannot read stream: {e}") from e
    return optimize_svg(decode_svg_bytes(b"".join(chunks)), options, **overrides)


async def fetch_svg(url: str, session: aiohttp.ClientSession | None = None) -> str:
    """GET *url* and return its markup; any non-2xx status is an error."""
    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()
    try:
        async with session.get(url) as resp:
            if not 200 <= resp.status < 300:
                raise SvgFetchError(f"GET {url} returned HTTP {resp.status}")
            data = await resp.read()
    except aiohttp.ClientError as e:
        raise SvgFetchError(f"GET {url} failed: {e}") from e
    finally:
        if own_session:
            await session.close()
    logger.debug("Fetched %d bytes from %s", len(data), url)
    return decode_svg_bytes(data)


async def optimize_svg_from_url(
    url: str,
    options: OptimizeOptions | None = None,
    session: aiohttp.ClientSession | None = None,
    **overrides,
) -> str:
    """Fetch markup over HTTP(S) and optimize it."""
    svg = await fetch_svg(url, session=session)
    return optimize_svg(svg, options, **overrides)


__all__ = [
    "decode_svg_bytes",
    "read_svg_file",
    "optimize_svg_from_file",
    "optimize_svg_from_buffer",
    "optimize_svg_stream",
    "fetch_svg",
    "optimize_svg_from_url",
]
