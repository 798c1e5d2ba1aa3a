import pytest

from svgopt.pathdata import PathDataError, bboxes_intersect, parse_path, path_bbox, stringify_path
from svgopt.util import format_number, join_numbers


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, ".5"), (-0.5, "-.5"), (2.0, "2"), (-0.0001, "0"), (1.23456, "1.235"), (10, "10")],
)
def test_format_number(value, expected) -> None:
    assert format_number(value) == expected


def test_join_numbers_drops_redundant_separators() -> None:
    assert join_numbers(["10", "-5", ".5", ".5", "3"]) == "10-5 .5.5 3"


def test_parse_relative_and_implicit_lineto() -> None:
    segments = parse_path("m10 10 5 0 0 5z")
    assert [s.command for s in segments] == ["M", "L", "L", "Z"]
    assert segments[1].end == (15, 10)
    assert segments[2].end == (15, 15)
    assert segments[3].end == (10, 10)


def test_parse_arc_flags_without_separators() -> None:
    segments = parse_path("M0 0a5 5 0 1110 0")
    arc = segments[1]
    assert arc.command == "A"
    assert arc.args == (5, 5, 0, 1, 1, 10, 0)


@pytest.mark.parametrize("d", ["L10 10", "M0 0 L", "M0 0 X5", "M0 0z3"])
def test_parse_rejects_malformed(d) -> None:
    with pytest.raises(PathDataError):
        parse_path(d)


def test_stringify_uses_shortest_commands() -> None:
    d = stringify_path(parse_path("M 10 10 L 20 10 L 20 20 Z"))
    assert d == "M10 10h10v10z"


def test_stringify_rounds_to_precision() -> None:
    d = stringify_path(parse_path("M0.12345 0.98765"), precision=2)
    assert d == "M.12.99"


def test_bbox_and_intersection() -> None:
    a = path_bbox(parse_path("M0 0h10v10H0z"))
    b = path_bbox(parse_path("M20 20h5v5h-5z"))
    c = path_bbox(parse_path("M5 5h10v10h-10z"))
    assert a == (0, 0, 10, 10)
    assert not bboxes_intersect(a, b)
    assert bboxes_intersect(a, c)
