"""Static SVG reference data shared by the plugins."""

import re

EDITOR_NAMESPACES = frozenset({
    "http://code.google.com/p/sketchy",
    "http://inkscape.sourceforge.net/DTD/sodipodi-0.dtd",
    "http://ns.adobe.com/AdobeIllustrator/10.0/",
    "http://ns.adobe.com/AdobeSVGViewerExtensions/3.0/",
    "http://ns.adobe.com/Extensibility/1.0/",
    "http://ns.adobe.com/Flows/1.0/",
    "http://ns.adobe.com/GenericCustomNamespace/1.0/",
    "http://ns.adobe.com/Graphs/1.0/",
    "http://ns.adobe.com/ImageReplacement/1.0/",
    "http://ns.adobe.com/SaveForWeb/1.0/",
    "http://ns.adobe.com/Variables/1.0/",
    "http://ns.adobe.com/XPath/1.0/",
    "http://purl.org/dc/elements/1.1/",
    "http://schemas.microsoft.com/visio/2003/SVGExtensions/",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "http://taptrix.com/vectorillustrator/svg_extensions",
    "http://www.bohemiancoding.com/sketch/ns",
    "http://www.figma.com/figma/ns",
    "http://www.inkscape.org/namespaces/inkscape",
    "http://www.serif.com/",
    "http://www.vector.evaxdesign.sk",
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
})

CONTAINER_ELEMS = frozenset({
    "a", "defs", "g", "marker", "mask", "missing-glyph", "pattern", "svg",
    "switch", "symbol",
})

SHAPE_ELEMS = frozenset({
    "circle", "ellipse", "line", "path", "polygon", "polyline", "rect",
})

CONDITIONAL_ATTRS = frozenset({
    "requiredExtensions", "requiredFeatures", "systemLanguage",
})

INHERITABLE_ATTRS = frozenset({
    "clip-rule", "color", "color-interpolation", "color-interpolation-filters",
    "color-profile", "color-rendering", "cursor", "direction",
    "dominant-baseline", "fill", "fill-opacity", "fill-rule", "font",
    "font-family", "font-size", "font-size-adjust", "font-stretch",
    "font-style", "font-variant", "font-weight", "glyph-orientation-horizontal",
    "glyph-orientation-vertical", "image-rendering", "letter-spacing",
    "marker", "marker-end", "marker-mid", "marker-start", "paint-order",
    "pointer-events", "shape-rendering", "stroke", "stroke-dasharray",
    "stroke-dashoffset", "stroke-linecap", "stroke-linejoin",
    "stroke-miterlimit", "stroke-opacity", "stroke-width", "text-anchor",
    "text-rendering", "visibility", "word-spacing", "writing-mode",
})

NON_INHERITABLE_ATTRS = frozenset({
    "alignment-baseline", "baseline-shift", "clip", "clip-path", "display",
    "filter", "flood-color", "flood-opacity", "lighting-color", "mask",
    "opacity", "overflow", "stop-color", "stop-opacity", "text-decoration",
    "transform", "unicode-bidi",
})

PRESENTATION_ATTRS = INHERITABLE_ATTRS | NON_INHERITABLE_ATTRS | frozenset({
    "enable-background", "kerning", "mix-blend-mode", "isolation",
    "vector-effect", "transform-origin",
})

# Non-inheritable presentation attributes that still mean something on <g>
GROUP_APPLICABLE_ATTRS = frozenset({
    "clip-path", "display", "filter", "mask", "opacity", "text-decoration",
    "transform", "unicode-bidi",
})

PRESENTATION_DEFAULTS = {
    "clip-rule": "nonzero",
    "color-interpolation": "sRGB",
    "color-interpolation-filters": "linearRGB",
    "direction": "ltr",
    "display": "inline",
    "fill": "#000",
    "fill-opacity": "1",
    "fill-rule": "nonzero",
    "flood-color": "#000",
    "flood-opacity": "1",
    "font-size-adjust": "none",
    "font-stretch": "normal",
    "font-style": "normal",
    "font-variant": "normal",
    "font-weight": "normal",
    "image-rendering": "auto",
    "letter-spacing": "normal",
    "lighting-color": "#fff",
    "marker-end": "none",
    "marker-mid": "none",
    "marker-start": "none",
    "opacity": "1",
    "shape-rendering": "auto",
    "stop-color": "#000",
    "stop-opacity": "1",
    "stroke": "none",
    "stroke-dasharray": "none",
    "stroke-dashoffset": "0",
    "stroke-linecap": "butt",
    "stroke-linejoin": "miter",
    "stroke-miterlimit": "4",
    "stroke-opacity": "1",
    "stroke-width": "1",
    "text-anchor": "start",
    "text-rendering": "auto",
    "unicode-bidi": "normal",
    "visibility": "visible",
    "word-spacing": "normal",
    "writing-mode": "lr-tb",
}

# Geometry attributes whose initial value is 0 on the given element
ELEMENT_DEFAULTS = {
    "circle": {"cx": "0", "cy": "0"},
    "ellipse": {"cx": "0", "cy": "0"},
    "line": {"x1": "0", "y1": "0", "x2": "0", "y2": "0"},
    "rect": {"x": "0", "y": "0"},
    "image": {"x": "0", "y": "0"},
    "use": {"x": "0", "y": "0"},
    "svg": {"x": "0", "y": "0", "preserveAspectRatio": "xMidYMid meet"},
    "pattern": {"x": "0", "y": "0"},
    "marker": {"refX": "0", "refY": "0", "markerWidth": "3", "markerHeight": "3"},
}

COLOR_ATTRS = frozenset({
    "color", "fill", "flood-color", "lighting-color", "stop-color", "stroke",
})

URL_REF_RE = re.compile(r"url\(\s*['\"]?#([^)'\"]+)['\"]?\s*\)")
HREF_RE = re.compile(r"^#(.+)$")
