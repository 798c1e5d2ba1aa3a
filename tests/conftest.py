import pytest

from svgopt.document import parse_svg
from svgopt.engine import optimize

SVG_NS = "http://www.w3.org/2000/svg"

ILLUSTRATOR_SVG = """<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!-- Generator: Adobe Illustrator 24.0.0, SVG Export Plug-In -->
<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">
<svg xmlns="http://www.w3.org/2000/svg" xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     width="100" height="100" viewBox="0 0 100 100" inkscape:version="1.0">
  <title>Icon</title>
  <desc>Created with Sketch.</desc>
  <metadata>stuff</metadata>
  <defs></defs>
  <g>
    <rect x="0" y="0" width="50" height="50" fill="#FF0000" style="stroke:none"/>
    <path d="M 10 10 L 20 10 L 20 20 Z" fill="rgb(0, 0, 255)" transform="translate(0,0)"/>
  </g>
  <g></g>
</svg>
"""


def run_plugin(svg, name, params=None, **extra):
    """Run a single plugin once and return the serialized result."""
    descriptor = {"name": name}
    if params is not None:
        descriptor["params"] = params
    descriptor.update(extra)
    return optimize(svg, [descriptor], multipass=False)


def root_of(svg):
    return parse_svg(svg).root


def svg_doc(body, **attrs):
    extra = "".join(f' {k.replace("_", "-")}="{v}"' for k, v in attrs.items())
    return f'<svg xmlns="{SVG_NS}"{extra}>{body}</svg>'


@pytest.fixture
def illustrator_svg() -> str:
    return ILLUSTRATOR_SVG


@pytest.fixture
def svg_dir(tmp_path):
    """Three inputs, one of them malformed."""
    src = tmp_path / "in"
    src.mkdir()
    (src / "a.svg").write_text(
        svg_doc('<!-- a --><rect width="10" height="10"/>', width="10", height="10"),
        encoding="utf-8",
    )
    (src / "b.svg").write_text(ILLUSTRATOR_SVG, encoding="utf-8")
    (src / "broken.svg").write_text("<svg><g></svg", encoding="utf-8")
    return src
