import logging
import re
from dataclasses import dataclass
from typing import Dict, Set

import cssutils
from PIL import ImageColor

from ..catalog import Builtin
from ..document import SvgDocument, localname, namespace_of
from ..tables import (
    COLOR_ATTRS,
    ELEMENT_DEFAULTS,
    GROUP_APPLICABLE_ATTRS,
    INHERITABLE_ATTRS,
    NON_INHERITABLE_ATTRS,
    PRESENTATION_ATTRS,
    PRESENTATION_DEFAULTS,
    SHAPE_ELEMS,
)
from .base import (
    computed_value,
    has_scripts,
    has_stylesheet,
    own_value,
    parse_style_attribute,
    referenced_ids,
    register,
)

cssutils.log.setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

_RGB_RE = re.compile(
    r"^rgb\(\s*([-+]?[\d.]+%?)\s*[,\s]\s*([-+]?[\d.]+%?)\s*[,\s]\s*([-+]?[\d.]+%?)\s*\)$",
    re.IGNORECASE,
)
_HEX6_RE = re.compile(r"^#([0-9a-f])\1([0-9a-f])\2([0-9a-f])\3$")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# elements whose paint is resolved against a different context than their
# document parent (<use> instances, paint servers, masks)
_ISOLATED_CONTEXTS = frozenset({
    "clipPath", "defs", "marker", "mask", "pattern", "symbol",
})


# ---------------------------------------------------------------------------
# convertStyleToAttrs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConvertStyleToAttrsParams:
    keep_important: bool = True


@register(Builtin.CONVERT_STYLE_TO_ATTRS, ConvertStyleToAttrsParams)
def convert_style_to_attrs(doc: SvgDocument, params: ConvertStyleToAttrsParams) -> None:
    """Move presentation properties from ``style`` into attributes.

    Declarations marked ``!important`` and non-presentation properties stay in
    ``style``. A style that cssutils cannot parse losslessly is left alone.
    """
    for elem in doc.iter_elements():
        style = elem.get("style")
        if style is None:
            continue
        raw = parse_style_attribute(style)
        declaration = cssutils.parseStyle(style, validate=False)
        props = list(declaration.getProperties(all=False))
        if len(props) != len(raw):
            logger.debug("Keeping unparsable style %r on <%s>", style, localname(elem.tag))
            continue

        remaining = []
        for prop in props:
            name = prop.name
            value = prop.value
            important = prop.priority == "important"
            if name in PRESENTATION_ATTRS and not (important and params.keep_important):
                elem.set(name, value)
            else:
                remaining.append(f"{name}:{value}" + ("!important" if important else ""))
        if remaining:
            elem.set("style", ";".join(remaining))
        else:
            del elem.attrib["style"]


# ---------------------------------------------------------------------------
# convertColors
# ---------------------------------------------------------------------------

def _short_hex(value: str) -> str:
    match = _HEX6_RE.match(value)
    if match:
        return "#" + "".join(match.groups())
    return value


def _build_color_tables():
    names: Dict[str, str] = {}
    for name in list(ImageColor.colormap):
        r, g, b = ImageColor.getrgb(name)[:3]
        names[name] = f"#{r:02x}{g:02x}{b:02x}"
    short_names: Dict[str, str] = {}
    for name, hex_value in sorted(names.items()):
        short = _short_hex(hex_value)
        if len(name) < len(short):
            best = short_names.get(short)
            if best is None or len(name) < len(best):
                short_names[short] = name
    return names, short_names


_NAME_TO_HEX, _HEX_TO_SHORT_NAME = _build_color_tables()


def _channel(token: str) -> int:
    if token.endswith("%"):
        value = float(token[:-1]) * 255 / 100
    else:
        value = float(token)
    return max(0, min(255, int(round(value))))


@dataclass(frozen=True)
class ConvertColorsParams:
    current_color: bool = False
    names2hex: bool = True
    rgb2hex: bool = True
    shorthex: bool = True
    shortname: bool = True


@register(Builtin.CONVERT_COLORS, ConvertColorsParams)
def convert_colors(doc: SvgDocument, params: ConvertColorsParams) -> None:
    """Rewrite colors in their shortest form (``rgb(255,0,0)`` -> ``red``)."""
    for elem in doc.iter_elements():
        for name in COLOR_ATTRS:
            value = elem.get(name)
            if value is None:
                continue
            new = value.strip()
            if new.startswith("url(") or new.lower() in ("none", "currentcolor", "inherit"):
                continue
            if params.current_color:
                elem.set(name, "currentColor")
                continue
            lowered = new.lower()
            if params.names2hex and lowered in _NAME_TO_HEX:
                new = _NAME_TO_HEX[lowered]
            if params.rgb2hex:
                match = _RGB_RE.match(new)
                if match:
                    r, g, b = (_channel(t) for t in match.groups())
                    new = f"#{r:02x}{g:02x}{b:02x}"
            if _HEX_RE.match(new):
                new = new.lower()
                if params.shorthex:
                    new = _short_hex(new)
                if params.shortname:
                    new = _HEX_TO_SHORT_NAME.get(_short_hex(new), new)
            if new != value:
                elem.set(name, new)


# ---------------------------------------------------------------------------
# removeUnknownsAndDefaults
# ---------------------------------------------------------------------------

def _in_referenced_tree(elem, used: Set[str]) -> bool:
    node = elem
    while node is not None:
        if node.get("id") in used:
            return True
        node = node.getparent()
    return False


def _in_isolated_context(elem) -> bool:
    return any(localname(a.tag) in _ISOLATED_CONTEXTS for a in elem.iterancestors())


def _parent_value(elem, name: str) -> str | None:
    parent = elem.getparent()
    if parent is None:
        return None
    return computed_value(parent, name)


@dataclass(frozen=True)
class RemoveUnknownsAndDefaultsParams:
    default_attrs: bool = True
    useless_overrides: bool = True
    default_markup_declarations: bool = True


@register(Builtin.REMOVE_UNKNOWNS_AND_DEFAULTS, RemoveUnknownsAndDefaultsParams)
def remove_unknowns_and_defaults(doc: SvgDocument, params: RemoveUnknownsAndDefaultsParams) -> None:
    """Drop attributes that restate a default or the inherited value.

    Inheritable properties are only touched when no stylesheet is present and
    the element is not part of a referenced (``<use>``-able) subtree.
    """
    if params.default_markup_declarations and doc.declaration:
        doc.declaration = re.sub(r"\s+standalone=(['\"])no\1", "", doc.declaration)

    stylesheet = has_stylesheet(doc)
    used = referenced_ids(doc)
    for elem in doc.iter_elements():
        tag = localname(elem.tag)
        cascading_safe = not (
            stylesheet or _in_referenced_tree(elem, used) or _in_isolated_context(elem)
        )
        element_defaults = ELEMENT_DEFAULTS.get(tag, {})
        for attr in list(elem.attrib):
            if namespace_of(attr) is not None:
                continue
            value = elem.attrib[attr].strip()
            if params.default_attrs and element_defaults.get(attr) == value:
                del elem.attrib[attr]
                continue
            if attr not in PRESENTATION_ATTRS:
                continue
            inheritable = attr in INHERITABLE_ATTRS
            if inheritable and not cascading_safe:
                continue
            parent_value = _parent_value(elem, attr) if inheritable else None
            if params.default_attrs and PRESENTATION_DEFAULTS.get(attr) == value:
                if parent_value is None or parent_value == value:
                    del elem.attrib[attr]
                    continue
            if (
                params.useless_overrides
                and inheritable
                and parent_value is not None
                and parent_value == value
                and elem.get("style") is None
            ):
                del elem.attrib[attr]


# ---------------------------------------------------------------------------
# removeNonInheritableGroupAttrs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoveNonInheritableGroupAttrsParams:
    pass


@register(Builtin.REMOVE_NON_INHERITABLE_GROUP_ATTRS, RemoveNonInheritableGroupAttrsParams)
def remove_non_inheritable_group_attrs(doc: SvgDocument, params) -> None:
    """Drop non-inheritable presentation attributes that do nothing on ``<g>``."""
    for group in doc.iter_elements("g"):
        for attr in list(group.attrib):
            if attr in NON_INHERITABLE_ATTRS and attr not in GROUP_APPLICABLE_ATTRS:
                del group.attrib[attr]


# ---------------------------------------------------------------------------
# removeUselessStrokeAndFill
# ---------------------------------------------------------------------------

def _is_zero(value: str | None) -> bool:
    if value is None:
        return False
    try:
        return float(value) == 0
    except ValueError:
        return False


@dataclass(frozen=True)
class RemoveUselessStrokeAndFillParams:
    stroke: bool = True
    fill: bool = True
    remove_none: bool = False


@register(Builtin.REMOVE_USELESS_STROKE_AND_FILL, RemoveUselessStrokeAndFillParams)
def remove_useless_stroke_and_fill(doc: SvgDocument, params: RemoveUselessStrokeAndFillParams) -> None:
    """Drop stroke-*/fill-* attributes of shapes that paint no stroke/fill."""
    if has_stylesheet(doc) or has_scripts(doc):
        return
    used = referenced_ids(doc)
    for elem in list(doc.iter_elements()):
        if localname(elem.tag) not in SHAPE_ELEMS:
            continue
        if elem.get("id") is not None or _in_referenced_tree(elem, used) or _in_isolated_context(elem):
            continue
        if any(elem.get(m) is not None for m in ("marker-start", "marker-mid", "marker-end")):
            continue

        if params.stroke:
            stroke = computed_value(elem, "stroke")
            if (
                stroke is None
                or stroke == "none"
                or _is_zero(computed_value(elem, "stroke-opacity"))
                or _is_zero(computed_value(elem, "stroke-width"))
            ):
                for attr in list(elem.attrib):
                    if attr.startswith("stroke"):
                        del elem.attrib[attr]
                parent_stroke = _parent_value(elem, "stroke")
                if parent_stroke is not None and parent_stroke != "none":
                    elem.set("stroke", "none")

        if params.fill:
            fill = computed_value(elem, "fill")
            if fill == "none" or _is_zero(computed_value(elem, "fill-opacity")):
                for attr in list(elem.attrib):
                    if attr.startswith("fill-"):
                        del elem.attrib[attr]
                if _parent_value(elem, "fill") == "none":
                    elem.attrib.pop("fill", None)
                else:
                    elem.set("fill", "none")

        if params.remove_none:
            if own_value(elem, "stroke") in (None, "none") and computed_value(elem, "fill") == "none":
                if computed_value(elem, "stroke") in (None, "none"):
                    parent = elem.getparent()
                    if parent is not None:
                        parent.remove(elem)
