import re
from dataclasses import dataclass
from typing import Tuple

from ..catalog import Builtin
from ..document import SvgDocument, localname, qualified_name
from .base import register

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?)(px)?\s*$")
_VIEWBOX_SPLIT_RE = re.compile(r"[\s,]+")


def _plain_length(value: str | None) -> float | None:
    """``"100"``/``"100px"`` -> ``100.0``; anything else (``%``, ``em``) -> None."""
    if value is None:
        return None
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


# ---------------------------------------------------------------------------
# removeDimensions / removeViewBox
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoveDimensionsParams:
    pass


@register(Builtin.REMOVE_DIMENSIONS, RemoveDimensionsParams)
def remove_dimensions(doc: SvgDocument, params) -> None:
    """Drop width/height of the root ``<svg>``, adding a viewBox if needed.

    Without a viewBox the dimensions are only removed when both are plain
    numbers, since the viewBox has to be derived from them.
    """
    root = doc.root
    width, height = root.get("width"), root.get("height")
    if root.get("viewBox") is None:
        w, h = _plain_length(width), _plain_length(height)
        if w is None or h is None:
            return
        root.set("viewBox", f"0 0 {width.strip().rstrip('px')} {height.strip().rstrip('px')}")
    root.attrib.pop("width", None)
    root.attrib.pop("height", None)


@dataclass(frozen=True)
class RemoveViewBoxParams:
    pass


@register(Builtin.REMOVE_VIEW_BOX, RemoveViewBoxParams)
def remove_view_box(doc: SvgDocument, params) -> None:
    """Drop a viewBox that only restates ``0 0 width height``."""
    for elem in doc.iter_elements():
        tag = localname(elem.tag)
        if tag not in ("svg", "pattern", "symbol"):
            continue
        # nested <svg> viewBox also positions the content
        if tag == "svg" and elem is not doc.root:
            continue
        view_box = elem.get("viewBox")
        if view_box is None:
            continue
        parts = _VIEWBOX_SPLIT_RE.split(view_box.strip())
        if len(parts) != 4:
            continue
        try:
            x, y, w, h = (float(p) for p in parts)
        except ValueError:
            continue
        if x == 0 and y == 0 and w == _plain_length(elem.get("width")) and h == _plain_length(elem.get("height")):
            del elem.attrib["viewBox"]


# ---------------------------------------------------------------------------
# sortAttrs
# ---------------------------------------------------------------------------

DEFAULT_ATTR_ORDER = (
    "id", "width", "height", "x", "x1", "x2", "y", "y1", "y2", "cx", "cy", "r",
    "fill", "stroke", "marker", "d", "points",
)


@dataclass(frozen=True)
class SortAttrsParams:
    order: Tuple[str, ...] = DEFAULT_ATTR_ORDER
    xmlns_order: str = "front"

    def __post_init__(self):
        object.__setattr__(self, "order", tuple(self.order))
        if self.xmlns_order not in ("front", "alphabetical"):
            raise ValueError(f"xmlnsOrder must be 'front' or 'alphabetical', got {self.xmlns_order!r}")


@register(Builtin.SORT_ATTRS, SortAttrsParams)
def sort_attrs(doc: SvgDocument, params: SortAttrsParams) -> None:
    """Reorder attributes: known ones in a fixed order, the rest alphabetically.

    ``fill-opacity`` sorts with ``fill``; prefixed attributes (``xlink:href``)
    come first when *xmlns_order* is ``front``.
    """
    index = {name: i for i, name in enumerate(params.order)}

    def sort_key(item):
        name = item[0]
        prefixed = 1 if ":" in name and params.xmlns_order == "front" else 0
        return (-prefixed, index.get(name.split("-", 1)[0], len(index)), name)

    for elem in doc.iter_elements():
        if len(elem.attrib) < 2:
            continue
        items = [(qualified_name(elem, key), key, value) for key, value in elem.attrib.items()]
        ordered = sorted(items, key=sort_key)
        if ordered == items:
            continue
        elem.attrib.clear()
        for _, key, value in ordered:
            elem.set(key, value)


# ---------------------------------------------------------------------------
# removeAttrs
# ---------------------------------------------------------------------------

_PAINT_PREFIXES = ("fill", "stroke")


@dataclass(frozen=True)
class RemoveAttrsParams:
    """``attrs`` patterns: ``attr``, ``elem:attr`` or ``elem:attr:value``."""

    attrs: Tuple[str, ...] = ()
    elem_separator: str = ":"
    preserve_current_color: bool = False
    keep_paint: bool = True

    def __post_init__(self):
        attrs = self.attrs
        if isinstance(attrs, str):
            attrs = (attrs,)
        object.__setattr__(self, "attrs", tuple(attrs))
        if not self.elem_separator:
            raise ValueError("elemSeparator must not be empty")

    def patterns(self):
        sep = self.elem_separator
        compiled = []
        for pattern in self.attrs:
            if sep not in pattern:
                pattern = sep.join((".*", pattern, ".*"))
            elif len(pattern.split(sep)) < 3:
                pattern = sep.join((pattern, ".*"))
            parts = [".*" if part == "*" else part for part in pattern.split(sep)]
            compiled.append(tuple(re.compile(f"^{part}$", re.IGNORECASE) for part in parts[:3]))
        return compiled


@register(Builtin.REMOVE_ATTRS, RemoveAttrsParams)
def remove_attrs(doc: SvgDocument, params: RemoveAttrsParams) -> None:
    """Drop attributes matching ``[element:]attribute[:value]`` patterns."""
    patterns = params.patterns()
    if not patterns:
        return
    for elem in doc.iter_elements():
        tag = localname(elem.tag)
        for elem_re, attr_re, value_re in patterns:
            if not elem_re.match(tag):
                continue
            for key in list(elem.attrib):
                name = qualified_name(elem, key)
                if not attr_re.match(name):
                    continue
                value = elem.attrib[key]
                if params.keep_paint and name.startswith(_PAINT_PREFIXES):
                    continue
                if (
                    params.preserve_current_color
                    and name in _PAINT_PREFIXES
                    and value.lower() == "currentcolor"
                ):
                    continue
                if value_re.match(value):
                    del elem.attrib[key]
