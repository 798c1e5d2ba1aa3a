import re
from dataclasses import dataclass, field
from typing import Iterator, List

from lxml import etree

from .errors import SvgParseError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_NS = "http://www.w3.org/XML/1998/namespace"

XML_SPACE = f"{{{XML_NS}}}space"

# whitespace inside these is content, not indentation
TEXT_CONTENT_ELEMS = frozenset(("text", "tspan", "textPath", "title", "desc", "style", "script"))

_DECLARATION_RE = re.compile(r"^\s*(<\?xml\s[^>]*?\?>)")
_DOCTYPE_RE = re.compile(r"<!DOCTYPE[^\[>]*(?:\[[\s\S]*?\])?\s*>", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------------

def localname(tag: str) -> str:
    """``{namespace}tag`` -> ``tag``"""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def namespace_of(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def is_element(node) -> bool:
    """Comments and processing instructions have a callable *tag*."""
    return isinstance(node.tag, str)


def qualified_name(elem, attr: str) -> str:
    """Return *attr* as it appears in markup, e.g. ``xlink:href``."""
    ns = namespace_of(attr)
    if ns is None:
        return attr
    if ns == XML_NS:
        return f"xml:{localname(attr)}"
    for prefix, uri in elem.nsmap.items():
        if uri == ns and prefix:
            return f"{prefix}:{localname(attr)}"
    return localname(attr)


def remove_node(node) -> None:
    """Detach *node* from its parent, keeping its tail text in place."""
    parent = node.getparent()
    if parent is None:
        return
    if node.tail:
        prev = node.getprevious()
        if prev is not None:
            prev.tail = (prev.tail or "") + node.tail
        else:
            parent.text = (parent.text or "") + node.tail
    parent.remove(node)


def element_children(elem) -> List[etree._Element]:
    return [child for child in elem if is_element(child)]


def _is_blank(text: str | None) -> bool:
    return text is not None and not text.strip()


def strip_blank_text(elem, keep: bool = False) -> None:
    """Drop whitespace-only ``text``/``tail`` used as indentation.

    Text content elements and ``xml:space="preserve"`` subtrees keep
    their whitespace, including the tails of their children.
    """
    space = elem.get(XML_SPACE)
    if space == "preserve":
        keep = True
    elif space == "default":
        keep = False
    keep = keep or localname(elem.tag) in TEXT_CONTENT_ELEMS

    if not keep and _is_blank(elem.text):
        elem.text = None
    for child in elem:
        if not keep and _is_blank(child.tail):
            child.tail = None
        if is_element(child):
            strip_blank_text(child, keep)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

@dataclass
class SvgDocument:
    """Parsed SVG plus the parts of the file that live outside the root.

    ``prolog``/``epilog`` hold the top-level comments and processing
    instructions before and after the root element. Plugins mutate the
    document in place; :meth:`to_string` serializes it compactly.
    """

    root: etree._Element
    declaration: str | None = None
    doctype: str | None = None
    prolog: list = field(default_factory=list)
    epilog: list = field(default_factory=list)

    def iter_elements(self, tag: str | None = None) -> Iterator[etree._Element]:
        """Yield every element (no comments/PIs), optionally by local name."""
        for node in self.root.iter():
            if not is_element(node):
                continue
            if tag is None or localname(node.tag) == tag:
                yield node

    def to_string(self) -> str:
        parts = []
        if self.declaration:
            parts.append(self.declaration)
        if self.doctype:
            parts.append(self.doctype)
        for node in self.prolog:
            parts.append(etree.tostring(node, encoding="unicode", with_tail=False))
        parts.append(etree.tostring(self.root, encoding="unicode", with_tail=False))
        for node in self.epilog:
            parts.append(etree.tostring(node, encoding="unicode", with_tail=False))
        return "".join(parts)


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_blank_text=False,
        strip_cdata=False,
        no_network=True,
        huge_tree=False,
    )


def parse_svg(svg: str) -> SvgDocument:
    """Parse *svg* markup; raise :class:`SvgParseError` on malformed input."""
    if not isinstance(svg, str):
        raise SvgParseError(f"Expected SVG markup as str, got {type(svg).__name__}")

    text = svg.lstrip("\ufeff")
    declaration = None
    match = _DECLARATION_RE.match(text)
    if match:
        declaration = match.group(1)
        # lxml refuses unicode input that carries an encoding declaration
        text = text[match.end():]

    if not text.strip():
        raise SvgParseError("Empty SVG document")

    try:
        root = etree.fromstring(text, _make_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise SvgParseError(f"Malformed SVG: {e}") from e

    if localname(root.tag) != "svg":
        raise SvgParseError(f"Root element is <{localname(root.tag)}>, expected <svg>")

    strip_blank_text(root)

    doctype = None
    if root.getroottree().docinfo.doctype:
        found = _DOCTYPE_RE.search(text)
        doctype = found.group(0) if found else root.getroottree().docinfo.doctype

    prolog = list(reversed(list(root.itersiblings(preceding=True))))
    epilog = list(root.itersiblings())

    return SvgDocument(
        root=root,
        declaration=declaration,
        doctype=doctype,
        prolog=prolog,
        epilog=epilog,
    )


__all__ = [
    "SVG_NS",
    "XLINK_NS",
    "TEXT_CONTENT_ELEMS",
    "SvgDocument",
    "parse_svg",
    "strip_blank_text",
    "localname",
    "qualified_name",
    "remove_node",
    "element_children",
    "is_element",
]
