import pytest
from conftest import root_of, svg_doc

from svgopt.document import localname
from svgopt.engine import optimize, optimize_svg, resolve_plugins
from svgopt.errors import OptimizationError, PluginError, SvgParseError
from svgopt.options import OptimizeOptions

EXPECTED_ILLUSTRATOR = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<g><rect width="50" height="50" fill="red"/>'
    '<path d="M10 10h10v10z" fill="#00f"/></g></svg>'
)


def _drop_first_group(doc, params) -> None:
    for child in doc.root:
        if isinstance(child.tag, str) and localname(child.tag) == "g":
            doc.root.remove(child)
            return


def test_safe_mode_end_to_end(illustrator_svg) -> None:
    assert optimize_svg(illustrator_svg) == EXPECTED_ILLUSTRATOR


def test_safe_output_is_a_fixed_point(illustrator_svg) -> None:
    once = optimize_svg(illustrator_svg)
    assert optimize_svg(once) == once


def test_comment_and_doctype_shrink() -> None:
    svg = (
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" '
        '"http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">'
        + svg_doc("<!-- comment --><rect width=\"10\" height=\"10\"/>")
    )
    out = optimize_svg(svg)
    assert len(out) < len(svg)
    assert "comment" not in out
    assert "DOCTYPE" not in out


def test_minimal_document_safe_mode() -> None:
    out = optimize_svg('<svg><!--hi--><rect width="10" height="10"/></svg>')
    assert out == '<svg><rect width="10" height="10"/></svg>'


def test_whitespace_in_text_survives() -> None:
    svg = svg_doc('<text x="0" y="10"><tspan>Hello</tspan> <tspan>World</tspan></text>')
    assert optimize(svg, [], multipass=False) == svg
    assert "<tspan>Hello</tspan> <tspan>World</tspan>" in optimize_svg(svg)


def test_indentation_is_dropped_outside_text() -> None:
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg">\n'
        '  <g>\n    <rect width="1" height="1"/>\n  </g>\n'
        '  <text>\n    <tspan>a</tspan> <tspan>b</tspan>\n  </text>\n'
        '  <g xml:space="preserve"> <rect width="2" height="2"/> </g>\n'
        '</svg>'
    )
    out = optimize(svg, [], multipass=False)
    assert '<svg xmlns="http://www.w3.org/2000/svg"><g><rect width="1" height="1"/></g>' in out
    assert '<text>\n    <tspan>a</tspan> <tspan>b</tspan>\n  </text>' in out
    assert '<g xml:space="preserve"> <rect width="2" height="2"/> </g></svg>' in out


def test_sort_attrs_only_in_aggressive_mode() -> None:
    svg = svg_doc('<rect height="10" width="10" class="c"/>')
    assert 'height="10" width="10" class="c"' in optimize_svg(svg)
    out = optimize_svg(svg, aggressive=True)
    assert '<rect width="10" height="10"/>' in out


def test_user_descriptor_disables_builtin() -> None:
    svg = svg_doc("<!--keep me--><g/>")
    out = optimize_svg(svg, plugins=({"name": "removeComments", "active": False},))
    assert "<!--keep me-->" in out


def test_dimensions_toggle() -> None:
    svg = svg_doc('<rect width="1" height="1"/>', width="10", height="20")
    root = root_of(optimize_svg(svg))
    assert root.get("width") is None
    assert root.get("viewBox") == "0 0 10 20"
    root = root_of(optimize_svg(svg, remove_dimensions=False))
    assert (root.get("width"), root.get("height")) == ("10", "20")


def test_viewbox_preserved_by_default() -> None:
    svg = svg_doc('<rect width="1" height="1"/>', width="10", height="10", viewBox="0 0 10 10")
    assert root_of(optimize_svg(svg)).get("viewBox") == "0 0 10 10"
    out = optimize_svg(
        svg,
        remove_dimensions=False,
        preserve_viewbox=False,
        plugins=("removeViewBox",),
    )
    assert root_of(out).get("viewBox") is None


def test_override_runs_at_first_position_with_last_config() -> None:
    calls = []

    def first(doc, params):
        calls.append(("first", params.get("tag")))

    def second(doc, params):
        calls.append(("second", None))

    plugins = [
        {"name": "first", "fn": first, "params": {"tag": "old"}},
        {"name": "second", "fn": second},
        {"name": "first", "fn": first, "params": {"tag": "new"}},
    ]
    optimize(svg_doc("<g/>"), plugins, multipass=False)
    assert calls == [("first", "new"), ("second", None)]


def test_resolve_skips_inactive() -> None:
    resolved = resolve_plugins(["removeComments", "removeTitle", {"name": "removeComments", "active": False}])
    assert [r.name for r in resolved] == ["removeTitle"]


def test_multipass_runs_until_no_gain() -> None:
    svg = svg_doc("<g/><g/><g/>")
    plugins = [{"name": "dropFirstGroup", "fn": _drop_first_group}]
    assert optimize(svg, plugins, multipass=False) == svg_doc("<g/><g/>")
    assert optimize(svg, plugins, multipass=True, max_passes=2) == svg_doc("<g/>")
    assert optimize(svg, plugins) == '<svg xmlns="http://www.w3.org/2000/svg"/>'


def test_unknown_plugin_fails() -> None:
    with pytest.raises(OptimizationError) as excinfo:
        optimize(svg_doc("<g/>"), ["noSuchPlugin"])
    assert isinstance(excinfo.value.__cause__, PluginError)
    assert str(excinfo.value).startswith("SVG optimization failed:")


@pytest.mark.parametrize(
    "params",
    [{"floatPrecision": -1}, {"bogus": True}],
)
def test_invalid_params_fail(params) -> None:
    with pytest.raises(OptimizationError) as excinfo:
        optimize(svg_doc("<g/>"), [{"name": "convertPathData", "params": params}])
    assert isinstance(excinfo.value.__cause__, PluginError)


def test_malformed_markup_fails() -> None:
    with pytest.raises(OptimizationError) as excinfo:
        optimize_svg("<svg><g></svg")
    assert isinstance(excinfo.value.__cause__, SvgParseError)


def test_non_svg_root_fails() -> None:
    with pytest.raises(OptimizationError):
        optimize_svg("<html/>")


def test_plugin_exception_is_wrapped() -> None:
    def boom(doc, params):
        raise RuntimeError("boom")

    with pytest.raises(OptimizationError, match="boom"):
        optimize(svg_doc("<g/>"), [{"name": "boom", "fn": boom}])


def test_options_validation() -> None:
    with pytest.raises(ValueError):
        OptimizeOptions(backend="nope")
    with pytest.raises(ValueError):
        OptimizeOptions(max_passes=0)
