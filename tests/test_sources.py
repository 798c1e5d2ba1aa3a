import asyncio
import gzip
import io

import aiohttp
import pytest
from aiohttp import web
from conftest import ILLUSTRATOR_SVG

from svgopt.engine import optimize_svg
from svgopt.errors import OptimizationError, SvgFetchError, SvgInputError
from svgopt.sources import (
    decode_svg_bytes,
    optimize_svg_from_buffer,
    optimize_svg_from_file,
    optimize_svg_from_url,
    optimize_svg_stream,
)


def test_svg_and_svgz_give_same_output(tmp_path) -> None:
    plain = tmp_path / "icon.svg"
    packed = tmp_path / "icon.svgz"
    plain.write_text(ILLUSTRATOR_SVG, encoding="utf-8")
    packed.write_bytes(gzip.compress(ILLUSTRATOR_SVG.encode("utf-8")))
    expected = optimize_svg(ILLUSTRATOR_SVG)
    assert optimize_svg_from_file(plain) == expected
    assert optimize_svg_from_file(str(packed)) == expected


def test_file_options_overrides(tmp_path) -> None:
    path = tmp_path / "a.svg"
    path.write_text('<svg width="10" height="10"><g/></svg>', encoding="utf-8")
    assert 'width="10"' in optimize_svg_from_file(path, remove_dimensions=False)


def test_missing_file(tmp_path) -> None:
    with pytest.raises(SvgInputError):
        optimize_svg_from_file(tmp_path / "missing.svg")


def test_bad_svgz(tmp_path) -> None:
    path = tmp_path / "bad.svgz"
    path.write_bytes(b"not gzip at all")
    with pytest.raises(SvgInputError):
        optimize_svg_from_file(path)


def test_buffer() -> None:
    data = ILLUSTRATOR_SVG.encode("utf-8")
    assert optimize_svg_from_buffer(data) == optimize_svg(ILLUSTRATOR_SVG)
    assert optimize_svg_from_buffer(gzip.compress(data)) == optimize_svg(ILLUSTRATOR_SVG)


def test_buffer_rejects_bad_input() -> None:
    with pytest.raises(SvgInputError):
        optimize_svg_from_buffer(b"\xff\xfe<svg/>")
    with pytest.raises(SvgInputError):
        optimize_svg_from_buffer("<svg/>")


def test_buffer_malformed_markup() -> None:
    with pytest.raises(OptimizationError):
        optimize_svg_from_buffer(b"<svg><g></svg")


def test_stream_file_like_and_chunks() -> None:
    data = ILLUSTRATOR_SVG.encode("utf-8")
    expected = optimize_svg(ILLUSTRATOR_SVG)
    assert optimize_svg_stream(io.BytesIO(data)) == expected
    chunks = [data[i:i + 7] for i in range(0, len(data), 7)]
    assert optimize_svg_stream(iter(chunks)) == expected


def test_stream_rejects_text_chunks() -> None:
    with pytest.raises(SvgInputError):
        optimize_svg_stream(["<svg/>"])


def test_decode_detects_gzip_magic() -> None:
    assert decode_svg_bytes(gzip.compress(b"<svg/>")) == "<svg/>"
    assert decode_svg_bytes(b"<svg/>") == "<svg/>"


async def _serve_and_fetch():
    async def icon(request):
        return web.Response(body=ILLUSTRATOR_SVG.encode("utf-8"), content_type="image/svg+xml")

    async def missing(request):
        return web.Response(status=404, text="nope")

    app = web.Application()
    app.router.add_get("/icon.svg", icon)
    app.router.add_get("/missing.svg", missing)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    base = f"http://127.0.0.1:{port}"
    try:
        fetched = await optimize_svg_from_url(f"{base}/icon.svg")
        async with aiohttp.ClientSession() as session:
            shared = await optimize_svg_from_url(f"{base}/icon.svg", session=session)
            assert not session.closed
        with pytest.raises(SvgFetchError, match="404"):
            await optimize_svg_from_url(f"{base}/missing.svg")
    finally:
        await runner.cleanup()
    return fetched, shared


def test_from_url() -> None:
    fetched, shared = asyncio.run(_serve_and_fetch())
    expected = optimize_svg(ILLUSTRATOR_SVG)
    assert fetched == expected
    assert shared == expected


def test_from_url_connection_error() -> None:
    async def scenario():
        # port 9 (discard) is closed on any sane test machine
        await optimize_svg_from_url("http://127.0.0.1:9/icon.svg")

    with pytest.raises(SvgFetchError):
        asyncio.run(scenario())
