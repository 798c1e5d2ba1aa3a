from dataclasses import dataclass

from ..catalog import Builtin
from ..document import SvgDocument, XLINK_NS, element_children, localname, remove_node
from ..tables import CONTAINER_ELEMS
from .base import own_value, referenced_ids, register


# ---------------------------------------------------------------------------
# removeUselessDefs
# ---------------------------------------------------------------------------

_NON_RENDERING = frozenset({
    "clipPath", "filter", "linearGradient", "marker", "mask", "pattern",
    "radialGradient", "solidColor", "symbol",
})


def _useful_nodes(elem, out: list) -> None:
    for child in element_children(elem):
        if child.get("id") is not None or localname(child.tag) == "style":
            out.append(child)
        else:
            _useful_nodes(child, out)


@dataclass(frozen=True)
class RemoveUselessDefsParams:
    pass


@register(Builtin.REMOVE_USELESS_DEFS, RemoveUselessDefsParams)
def remove_useless_defs(doc: SvgDocument, params) -> None:
    """Drop ``<defs>`` content and non-rendering elements nothing can reference."""
    for defs in list(doc.iter_elements()):
        tag = localname(defs.tag)
        if tag != "defs" and not (tag in _NON_RENDERING and defs.get("id") is None):
            continue
        useful: list = []
        _useful_nodes(defs, useful)
        if not useful:
            remove_node(defs)
            continue
        for child in list(defs):
            defs.remove(child)
        for node in useful:
            node.tail = None
            defs.append(node)


# ---------------------------------------------------------------------------
# removeHiddenElems
# ---------------------------------------------------------------------------

def _zero(value) -> bool:
    if value is None:
        return False
    try:
        return float(value.strip().rstrip("px")) == 0
    except ValueError:
        return False


def _is_hidden(elem) -> bool:
    tag = localname(elem.tag)
    if own_value(elem, "display") == "none":
        return True
    opacity = own_value(elem, "opacity")
    if opacity is not None and _zero(opacity):
        parent = elem.getparent()
        # inside a clipPath only the geometry matters
        if parent is None or localname(parent.tag) != "clipPath":
            return True
    if tag == "circle" and _zero(elem.get("r")) and not element_children(elem):
        return True
    if tag == "ellipse" and (_zero(elem.get("rx")) or _zero(elem.get("ry"))) and not element_children(elem):
        return True
    if tag in ("rect", "pattern", "image") and (
        _zero(elem.get("width")) or _zero(elem.get("height"))
    ) and not element_children(elem):
        return True
    if tag == "path" and not (elem.get("d") or "").strip():
        return True
    if tag in ("polyline", "polygon") and not (elem.get("points") or "").strip():
        return True
    if tag == "use" and not (elem.get("href") or elem.get(f"{{{XLINK_NS}}}href")):
        return True
    return False


@dataclass(frozen=True)
class RemoveHiddenElemsParams:
    pass


@register(Builtin.REMOVE_HIDDEN_ELEMS, RemoveHiddenElemsParams)
def remove_hidden_elems(doc: SvgDocument, params) -> None:
    """Drop elements that never render (display:none, opacity 0, zero size).

    Elements referenced by id, and anything inside ``<defs>``, are kept:
    they may be rendered through ``<use>`` or paint servers.
    """
    used = referenced_ids(doc)
    for elem in list(doc.iter_elements()):
        if elem is doc.root or elem.getparent() is None:
            continue
        if elem.get("id") in used:
            continue
        if any(localname(a.tag) in ("defs", "clipPath", "mask", "marker", "symbol", "pattern")
               for a in elem.iterancestors()):
            continue
        if _is_hidden(elem):
            remove_node(elem)


# ---------------------------------------------------------------------------
# removeEmptyText
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoveEmptyTextParams:
    text: bool = True
    tspan: bool = True
    tref: bool = True


@register(Builtin.REMOVE_EMPTY_TEXT, RemoveEmptyTextParams)
def remove_empty_text(doc: SvgDocument, params: RemoveEmptyTextParams) -> None:
    """Drop ``<text>``/``<tspan>`` with no content at all and ``<tref>`` without a link.

    A whitespace-only ``<tspan> </tspan>`` renders a gap and is kept.
    """
    for elem in list(doc.iter_elements()):
        tag = localname(elem.tag)
        if tag in ("text", "tspan"):
            if (tag == "text" and not params.text) or (tag == "tspan" and not params.tspan):
                continue
            if len(elem) == 0 and not elem.text:
                remove_node(elem)
        elif tag == "tref" and params.tref:
            if not elem.get(f"{{{XLINK_NS}}}href"):
                remove_node(elem)


# ---------------------------------------------------------------------------
# removeEmptyContainers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoveEmptyContainersParams:
    pass


@register(Builtin.REMOVE_EMPTY_CONTAINERS, RemoveEmptyContainersParams)
def remove_empty_containers(doc: SvgDocument, params) -> None:
    """Drop container elements without children, innermost first."""
    used = referenced_ids(doc)
    # reversed document order visits children before their parents
    for elem in reversed(list(doc.iter_elements())):
        tag = localname(elem.tag)
        if tag == "svg" or tag not in CONTAINER_ELEMS or len(elem) != 0:
            continue
        if tag == "pattern" and len(elem.attrib) != 0:
            continue
        # an empty group with a filter may still paint the filter region
        if tag == "g" and elem.get("filter") is not None:
            continue
        if tag == "mask" and elem.get("id") in used:
            continue
        remove_node(elem)
