import json

import pytest
from conftest import svg_doc

from svgopt.composer import compose_plugins
from svgopt.engine import optimize_svg
from svgopt.errors import OptimizationError, PluginError
from svgopt.svgo import build_config, svgo_available

needs_svgo = pytest.mark.skipif(not svgo_available(), reason="svgo CLI not installed")


def _parse(config_text):
    prefix = "export default "
    assert config_text.startswith(prefix)
    return json.loads(config_text[len(prefix):].rstrip().rstrip(";"))


def test_config_safe_tier() -> None:
    config = _parse(build_config(compose_plugins()))
    names = [p["name"] for p in config["plugins"]]
    assert config["multipass"] is True
    assert names[0] == "cleanupAttrs"
    assert "removeDimensions" in names
    # inactive entries are left out entirely
    assert "removeViewBox" not in names
    assert "sortAttrs" not in names


def test_config_aggressive_params() -> None:
    config = _parse(build_config(compose_plugins(True), multipass=False))
    assert config["multipass"] is False
    by_name = {p["name"]: p for p in config["plugins"]}
    assert by_name["removeAttrs"]["params"] == {"attrs": ["(class|data-name)"]}
    assert "params" not in by_name["sortAttrs"]


def test_config_last_descriptor_wins() -> None:
    plugins = compose_plugins(extra=[
        {"name": "convertPathData", "params": {"floatPrecision": 1}},
        {"name": "removeComments", "active": False},
    ])
    config = _parse(build_config(plugins))
    names = [p["name"] for p in config["plugins"]]
    assert "removeComments" not in names
    assert names.count("convertPathData") == 1
    entry = next(p for p in config["plugins"] if p["name"] == "convertPathData")
    assert entry["params"] == {"floatPrecision": 1}


def test_config_rejects_custom_plugins() -> None:
    with pytest.raises(PluginError):
        build_config([{"name": "mine", "fn": lambda doc, params: None}])


@pytest.mark.skipif(svgo_available(), reason="svgo CLI is installed")
def test_missing_svgo_fails_cleanly() -> None:
    with pytest.raises(OptimizationError, match="svgo"):
        optimize_svg(svg_doc("<g/>"), backend="svgo")


@needs_svgo
def test_svgo_backend_shrinks() -> None:
    svg = svg_doc("<!-- comment --><rect width=\"10\" height=\"10\"/>", width="10", height="10")
    out = optimize_svg(svg, backend="svgo")
    assert "comment" not in out
    assert len(out) < len(svg)
