import re
from dataclasses import dataclass
from typing import Tuple

from lxml import etree

from ..catalog import Builtin
from ..document import SvgDocument, localname, namespace_of, remove_node
from ..tables import CONDITIONAL_ATTRS, EDITOR_NAMESPACES
from .base import parse_style_attribute, register

_NEWLINE_BETWEEN_RE = re.compile(r"(\S)\r?\n(\S)")
_NEWLINE_RE = re.compile(r"\r?\n")
_SPACES_RE = re.compile(r"\s{2,}")
_STANDARD_DESC_RE = re.compile(r"^(Created with|Created using)")
_ENABLE_BACKGROUND_RE = re.compile(
    r"^new\s0\s0\s([-+]?\d*\.?\d+([eE][-+]?\d+)?)\s([-+]?\d*\.?\d+([eE][-+]?\d+)?)$"
)


# ---------------------------------------------------------------------------
# Attribute text
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CleanupAttrsParams:
    newlines: bool = True
    trim: bool = True
    spaces: bool = True


@register(Builtin.CLEANUP_ATTRS, CleanupAttrsParams)
def cleanup_attrs(doc: SvgDocument, params: CleanupAttrsParams) -> None:
    """Collapse newlines and runs of whitespace in attribute values."""
    for elem in doc.iter_elements():
        for name, value in elem.attrib.items():
            new = value
            if params.newlines:
                new = _NEWLINE_BETWEEN_RE.sub(r"\1 \2", new)
                new = _NEWLINE_RE.sub("", new)
            if params.trim:
                new = new.strip()
            if params.spaces:
                new = _SPACES_RE.sub(" ", new)
            if new != value:
                elem.set(name, new)


@dataclass(frozen=True)
class RemoveEmptyAttrsParams:
    pass


@register(Builtin.REMOVE_EMPTY_ATTRS, RemoveEmptyAttrsParams)
def remove_empty_attrs(doc: SvgDocument, params) -> None:
    """Drop attributes with an empty value.

    Conditional processing attributes are kept: an empty ``systemLanguage``
    disables rendering of the element.
    """
    for elem in doc.iter_elements():
        for name in list(elem.attrib):
            if elem.attrib[name] == "" and localname(name) not in CONDITIONAL_ATTRS:
                del elem.attrib[name]


# ---------------------------------------------------------------------------
# Document prolog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoveDoctypeParams:
    pass


@register(Builtin.REMOVE_DOCTYPE, RemoveDoctypeParams)
def remove_doctype(doc: SvgDocument, params) -> None:
    """Drop the DOCTYPE declaration."""
    doc.doctype = None


@dataclass(frozen=True)
class RemoveXMLProcInstParams:
    pass


@register(Builtin.REMOVE_XML_PROC_INST, RemoveXMLProcInstParams)
def remove_xml_proc_inst(doc: SvgDocument, params) -> None:
    """Drop the ``<?xml ...?>`` declaration."""
    doc.declaration = None


@dataclass(frozen=True)
class RemoveCommentsParams:
    # comments matching any pattern are kept (legal notices: <!--! ... -->)
    preserve_patterns: Tuple[str, ...] = ("^!",)

    def __post_init__(self):
        patterns = self.preserve_patterns
        if patterns is False or patterns is None:
            patterns = ()
        if isinstance(patterns, str):
            patterns = (patterns,)
        object.__setattr__(self, "preserve_patterns", tuple(patterns))
        for pattern in self.preserve_patterns:
            re.compile(pattern)


@register(Builtin.REMOVE_COMMENTS, RemoveCommentsParams)
def remove_comments(doc: SvgDocument, params: RemoveCommentsParams) -> None:
    """Drop comments, inside the root and around it."""
    patterns = [re.compile(p) for p in params.preserve_patterns]

    def keep(node) -> bool:
        return any(p.search(node.text or "") for p in patterns)

    for node in list(doc.root.iter(etree.Comment)):
        if not keep(node):
            remove_node(node)
    doc.prolog = [n for n in doc.prolog if not (n.tag is etree.Comment and not keep(n))]
    doc.epilog = [n for n in doc.epilog if not (n.tag is etree.Comment and not keep(n))]


# ---------------------------------------------------------------------------
# Descriptive elements
# ---------------------------------------------------------------------------

def _remove_elements(doc: SvgDocument, name: str) -> None:
    for elem in list(doc.iter_elements(name)):
        remove_node(elem)


@dataclass(frozen=True)
class RemoveMetadataParams:
    pass


@register(Builtin.REMOVE_METADATA, RemoveMetadataParams)
def remove_metadata(doc: SvgDocument, params) -> None:
    """Drop ``<metadata>`` elements."""
    _remove_elements(doc, "metadata")


@dataclass(frozen=True)
class RemoveTitleParams:
    pass


@register(Builtin.REMOVE_TITLE, RemoveTitleParams)
def remove_title(doc: SvgDocument, params) -> None:
    """Drop ``<title>`` elements."""
    _remove_elements(doc, "title")


@dataclass(frozen=True)
class RemoveDescParams:
    remove_any: bool = False


@register(Builtin.REMOVE_DESC, RemoveDescParams)
def remove_desc(doc: SvgDocument, params: RemoveDescParams) -> None:
    """Drop empty or editor-generated ``<desc>`` elements (any with *remove_any*)."""
    for elem in list(doc.iter_elements("desc")):
        text = "".join(elem.itertext()).strip()
        if params.remove_any or not text or _STANDARD_DESC_RE.match(text):
            remove_node(elem)


@dataclass(frozen=True)
class RemoveEditorsNSDataParams:
    additional_namespaces: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "additional_namespaces", tuple(self.additional_namespaces))


@register(Builtin.REMOVE_EDITORS_NS_DATA, RemoveEditorsNSDataParams)
def remove_editors_ns_data(doc: SvgDocument, params: RemoveEditorsNSDataParams) -> None:
    """Drop elements and attributes in editor namespaces (Inkscape, Illustrator, ...)."""
    namespaces = EDITOR_NAMESPACES | set(params.additional_namespaces)
    for elem in list(doc.iter_elements()):
        if elem is not doc.root and namespace_of(elem.tag) in namespaces:
            remove_node(elem)
            continue
        for name in list(elem.attrib):
            if namespace_of(name) in namespaces:
                del elem.attrib[name]
    # drop the now unused xmlns:inkscape & co.
    etree.cleanup_namespaces(doc.root)


# ---------------------------------------------------------------------------
# enable-background
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CleanupEnableBackgroundParams:
    pass


@register(Builtin.CLEANUP_ENABLE_BACKGROUND, CleanupEnableBackgroundParams)
def cleanup_enable_background(doc: SvgDocument, params) -> None:
    """Remove or shorten ``enable-background``.

    Without any ``<filter>`` the property has no effect and goes away; else
    ``new 0 0 W H`` matching the element size becomes ``new`` (and is dropped
    on ``<svg>``).
    """
    has_filter = any(True for _ in doc.iter_elements("filter"))
    for elem in doc.iter_elements():
        style = elem.get("style")
        if not has_filter and style and "enable-background" in style:
            decls = parse_style_attribute(style)
            decls.pop("enable-background", None)
            if decls:
                elem.set("style", ";".join(f"{k}:{v}" for k, v in decls.items()))
            else:
                del elem.attrib["style"]

        value = elem.get("enable-background")
        if value is None:
            continue
        if not has_filter:
            del elem.attrib["enable-background"]
            continue
        tag = localname(elem.tag)
        match = _ENABLE_BACKGROUND_RE.match(value.strip())
        if tag not in ("svg", "mask", "pattern") or not match:
            continue
        if elem.get("width") == match.group(1) and elem.get("height") == match.group(3):
            if tag == "svg":
                del elem.attrib["enable-background"]
            else:
                elem.set("enable-background", "new")
