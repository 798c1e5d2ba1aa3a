import logging
import math
import re
from dataclasses import dataclass
from typing import List

import numpy as np
from svgpathtools.parser import parse_transform

from ..catalog import Builtin
from ..document import SvgDocument, element_children, is_element, localname, remove_node
from ..pathdata import PathDataError, bboxes_intersect, parse_path, path_bbox, stringify_path
from ..util import format_number, join_numbers
from .base import computed_value, register

logger = logging.getLogger(__name__)

_TRANSFORM_RE = re.compile(
    r"^\s*(?:(?:matrix|translate|scale|rotate|skewX|skewY)\s*\([^()]*\)\s*,?\s*)+$"
)
_TRANSFORM_ATTRS = ("transform", "gradientTransform", "patternTransform")


# ---------------------------------------------------------------------------
# convertPathData
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConvertPathDataParams:
    float_precision: int = 3

    def __post_init__(self):
        if not isinstance(self.float_precision, int) or self.float_precision < 0:
            raise ValueError("floatPrecision must be a non-negative integer")


@register(Builtin.CONVERT_PATH_DATA, ConvertPathDataParams)
def convert_path_data(doc: SvgDocument, params: ConvertPathDataParams) -> None:
    """Rewrite path data with rounded numbers and the shorter of abs/rel commands."""
    for path in doc.iter_elements("path"):
        d = path.get("d")
        if not d:
            continue
        try:
            segments = parse_path(d)
        except PathDataError as e:
            logger.debug("Leaving path data untouched: %s", e)
            continue
        if not segments:
            continue
        new = stringify_path(segments, params.float_precision)
        if len(new) < len(d):
            path.set("d", new)


# ---------------------------------------------------------------------------
# convertTransform
# ---------------------------------------------------------------------------

def _candidates(m: np.ndarray, precision: int, transform_precision: int) -> List[str]:
    """Spellings of the 2D affine matrix *m*, exact up to the precisions given."""
    a, b, c, d = m[0, 0], m[1, 0], m[0, 1], m[1, 1]
    e, f = m[0, 2], m[1, 2]
    tol = 10 ** -transform_precision

    def close(x, y) -> bool:
        return abs(x - y) < tol

    def fmt(values, digits) -> str:
        return join_numbers(format_number(v, digits) for v in values)

    out = []
    linear_identity = close(a, 1) and close(b, 0) and close(c, 0) and close(d, 1)
    no_translation = close(e, 0) and close(f, 0)
    if linear_identity:
        if no_translation:
            return [""]
        out.append(f"translate({fmt([e] if close(f, 0) else [e, f], precision)})")
    elif close(b, 0) and close(c, 0) and no_translation:
        out.append(f"scale({fmt([a] if close(a, d) else [a, d], transform_precision)})")
    elif no_translation and close(a, d) and close(b, -c) and close(a * a + b * b, 1):
        angle = math.degrees(math.atan2(b, a))
        out.append(f"rotate({format_number(angle, precision)})")
    out.append(
        "matrix("
        + join_numbers(
            [format_number(v, transform_precision) for v in (a, b, c, d)]
            + [format_number(v, precision) for v in (e, f)]
        )
        + ")"
    )
    return out


@dataclass(frozen=True)
class ConvertTransformParams:
    float_precision: int = 3
    transform_precision: int = 5


@register(Builtin.CONVERT_TRANSFORM, ConvertTransformParams)
def convert_transform(doc: SvgDocument, params: ConvertTransformParams) -> None:
    """Collapse transform lists into one shortest equivalent (or drop identity)."""
    for elem in doc.iter_elements():
        for attr in _TRANSFORM_ATTRS:
            value = elem.get(attr)
            if value is None or not _TRANSFORM_RE.match(value):
                continue
            try:
                matrix = parse_transform(value)
            except (ValueError, IndexError) as e:
                logger.debug("Leaving transform %r untouched: %s", value, e)
                continue
            best = min(
                _candidates(matrix, params.float_precision, params.transform_precision),
                key=len,
            )
            if best == "":
                del elem.attrib[attr]
            elif len(best) < len(value.strip()):
                elem.set(attr, best)


# ---------------------------------------------------------------------------
# mergePaths
# ---------------------------------------------------------------------------

_BLOCKING_ATTRS = ("marker-start", "marker-mid", "marker-end", "clip-path", "mask")


def _mergeable(elem) -> bool:
    if not is_element(elem) or localname(elem.tag) != "path" or len(elem):
        return False
    if elem.get("id") is not None or not elem.get("d"):
        return False
    if any(computed_value(elem, name) not in (None, "none") for name in _BLOCKING_ATTRS):
        return False
    return not any("url(" in value for value in elem.attrib.values())


def _same_attrs(a, b) -> bool:
    left = {k: v for k, v in a.attrib.items() if k != "d"}
    right = {k: v for k, v in b.attrib.items() if k != "d"}
    return left == right


@dataclass(frozen=True)
class MergePathsParams:
    float_precision: int = 3


@register(Builtin.MERGE_PATHS, MergePathsParams)
def merge_paths(doc: SvgDocument, params: MergePathsParams) -> None:
    """Join adjacent sibling paths with identical attributes into one.

    Paths are only joined when their bounding boxes do not overlap, so fill
    rules and opacity render the same.
    """
    for parent in list(doc.iter_elements()):
        if len(element_children(parent)) < 2:
            continue
        prev = None
        prev_segments: list | None = None
        for child in list(parent):
            if not _mergeable(child):
                prev = prev_segments = None
                continue
            try:
                segments = parse_path(child.get("d"))
            except PathDataError:
                prev = prev_segments = None
                continue
            if prev is not None and _same_attrs(prev, child) and not bboxes_intersect(
                path_bbox(prev_segments), path_bbox(segments)
            ):
                prev_segments = prev_segments + segments
                prev.set("d", stringify_path(prev_segments, params.float_precision))
                remove_node(child)
                continue
            prev, prev_segments = child, segments
