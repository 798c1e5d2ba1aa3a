"""SVG path data: parsing to absolute segments and compact re-serialization."""

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .util import format_number, join_numbers

_COMMAND_RE = re.compile(r"[MmZzLlHhVvCcSsQqTtAa]")
_NUMBER_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")
_SEPARATOR_RE = re.compile(r"[\s,]*")
_FLAG_RE = re.compile(r"[01]")

_ARG_COUNTS = {
    "M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0,
}


class PathDataError(ValueError):
    pass


@dataclass
class Segment:
    """One path command in absolute coordinates.

    ``args`` follows the SVG argument order of *command* (always upper-case),
    with every coordinate absolute. ``start`` is the current point before the
    command runs.
    """

    command: str
    args: Tuple[float, ...]
    start: Tuple[float, float]

    @property
    def end(self) -> Tuple[float, float]:
        if self.command == "H":
            return (self.args[0], self.start[1])
        if self.command == "V":
            return (self.start[0], self.args[0])
        return (self.args[-2], self.args[-1])


def _tokenize(d: str) -> List[Tuple[str, List[float]]]:
    """Split *d* into ``(command, flat_args)`` groups, respecting arc flags."""
    groups = []
    pos = 0
    length = len(d)
    current = None
    args: List[float] = []
    while pos < length:
        pos = _SEPARATOR_RE.match(d, pos).end()
        if pos >= length:
            break
        match = _COMMAND_RE.match(d, pos)
        if match:
            if current is not None:
                groups.append((current, args))
            current = match.group(0)
            args = []
            pos = match.end()
            continue
        if current is None:
            raise PathDataError(f"Path data must start with a command: {d[:20]!r}")
        if current in "Aa" and len(args) % 7 in (3, 4):
            flag = _FLAG_RE.match(d, pos)
            if not flag:
                raise PathDataError(f"Invalid arc flag at offset {pos}")
            args.append(float(flag.group(0)))
            pos = flag.end()
            continue
        number = _NUMBER_RE.match(d, pos)
        if not number:
            raise PathDataError(f"Unexpected character {d[pos]!r} at offset {pos}")
        args.append(float(number.group(0)))
        pos = number.end()
    if current is not None:
        groups.append((current, args))
    if groups and groups[0][0] not in "Mm":
        raise PathDataError("Path data must start with a moveto")
    return groups


def parse_path(d: str) -> List[Segment]:
    """Parse path data into absolute :class:`Segment` objects.

    Implicit repetitions are expanded (``M 0 0 10 10`` gives ``M`` then ``L``).
    Raises :class:`PathDataError` on malformed data.
    """
    segments: List[Segment] = []
    x = y = 0.0
    sx = sy = 0.0
    for command, args in _tokenize(d):
        upper = command.upper()
        relative = command != upper
        count = _ARG_COUNTS[upper]
        if upper == "Z":
            if args:
                raise PathDataError("Close path takes no arguments")
            segments.append(Segment("Z", (sx, sy), (x, y)))
            x, y = sx, sy
            continue
        if not args or len(args) % count:
            raise PathDataError(f"Wrong number of arguments for {command!r}")
        for i in range(0, len(args), count):
            chunk = args[i:i + count]
            cmd = upper
            if upper == "M" and i > 0:
                cmd = "L"
            if upper == "H":
                nx = chunk[0] + (x if relative else 0.0)
                abs_args = (nx,)
            elif upper == "V":
                ny = chunk[0] + (y if relative else 0.0)
                abs_args = (ny,)
            elif upper == "A":
                ex, ey = chunk[5], chunk[6]
                if relative:
                    ex, ey = ex + x, ey + y
                abs_args = (abs(chunk[0]), abs(chunk[1]), chunk[2], chunk[3], chunk[4], ex, ey)
            else:
                pairs = []
                for j in range(0, count, 2):
                    px, py = chunk[j], chunk[j + 1]
                    if relative:
                        px, py = px + x, py + y
                    pairs.extend((px, py))
                abs_args = tuple(pairs)
            seg = Segment(cmd, tuple(abs_args), (x, y))
            segments.append(seg)
            x, y = seg.end
            if cmd == "M":
                sx, sy = x, y
    return segments


def round_segments(segments: List[Segment], precision: int) -> List[Segment]:
    """Round absolute coordinates so that relative deltas stay consistent."""
    out: List[Segment] = []
    x = y = 0.0
    sx = sy = 0.0
    for seg in segments:
        if seg.command == "Z":
            out.append(Segment("Z", (sx, sy), (x, y)))
            x, y = sx, sy
            continue
        if seg.command == "A":
            rx, ry, rot, large, sweep, ex, ey = seg.args
            args = (
                round(rx, precision), round(ry, precision), round(rot, precision),
                large, sweep, round(ex, precision), round(ey, precision),
            )
        else:
            args = tuple(round(v, precision) for v in seg.args)
        new = Segment(seg.command, args, (x, y))
        out.append(new)
        x, y = new.end
        if seg.command == "M":
            sx, sy = x, y
    return out


def _format_args(command: str, values: Sequence[float], precision: int) -> List[str]:
    if command in "Aa":
        rx, ry, rot, large, sweep, ex, ey = values
        return [
            format_number(rx, precision), format_number(ry, precision),
            format_number(rot, precision), str(int(large)), str(int(sweep)),
            format_number(ex, precision), format_number(ey, precision),
        ]
    return [format_number(v, precision) for v in values]


def _variants(seg: Segment) -> Tuple[Tuple[str, Tuple[float, ...]], Tuple[str, Tuple[float, ...]]]:
    """Absolute and relative spellings of *seg* as ``(command, args)``."""
    x, y = seg.start
    cmd = seg.command
    if cmd == "L" and seg.args[1] == y:
        cmd = "H"
        absolute = (seg.args[0],)
    elif cmd == "L" and seg.args[0] == x:
        cmd = "V"
        absolute = (seg.args[1],)
    else:
        absolute = seg.args

    if cmd == "H":
        relative = (absolute[0] - x,)
    elif cmd == "V":
        relative = (absolute[0] - y,)
    elif cmd == "A":
        rx, ry, rot, large, sweep, ex, ey = absolute
        relative = (rx, ry, rot, large, sweep, ex - x, ey - y)
    else:
        relative = tuple(
            v - (x if i % 2 == 0 else y) for i, v in enumerate(absolute)
        )
    return (cmd, absolute), (cmd.lower(), relative)


def stringify_path(segments: List[Segment], precision: int = 3) -> str:
    """Serialize segments choosing the shorter of absolute/relative per command.

    A command letter is omitted when it repeats the previous one (``M`` and
    ``m`` excepted, since a repeated move means an implicit line-to).
    """
    segments = round_segments(segments, precision)
    out = []
    prev_cmd = None
    for index, seg in enumerate(segments):
        if seg.command == "Z":
            out.append("z")
            prev_cmd = "z"
            continue
        (abs_cmd, abs_args), (rel_cmd, rel_args) = _variants(seg)
        if index == 0:
            # the first moveto is always absolute
            candidates = [(abs_cmd, abs_args)]
        else:
            candidates = [(rel_cmd, rel_args), (abs_cmd, abs_args)]
        best = None
        for cmd, args in candidates:
            nums = join_numbers(_format_args(cmd, [round(v, precision) for v in args], precision))
            repeat = cmd == prev_cmd and cmd not in "Mm"
            if repeat:
                text = nums if nums.startswith("-") else " " + nums
            else:
                text = cmd + nums
            if best is None or len(text) < len(best[1]):
                best = (cmd, text)
        prev_cmd = best[0]
        out.append(best[1])
    return "".join(out)


def path_bbox(segments: Sequence[Segment]) -> Tuple[float, float, float, float]:
    """Conservative bounding box: control points included, arcs padded."""
    xs: List[float] = []
    ys: List[float] = []
    for seg in segments:
        if seg.command == "Z":
            continue
        if seg.command == "A":
            rx, ry = seg.args[0], seg.args[1]
            pad = 2 * max(rx, ry)
            for px, py in (seg.start, seg.end):
                xs.extend((px - pad, px + pad))
                ys.extend((py - pad, py + pad))
            continue
        xs.append(seg.start[0])
        ys.append(seg.start[1])
        if seg.command == "H":
            xs.append(seg.args[0])
        elif seg.command == "V":
            ys.append(seg.args[0])
        else:
            xs.extend(seg.args[0::2])
            ys.extend(seg.args[1::2])
    if not xs:
        return (0.0, 0.0, 0.0, 0.0)
    return (min(xs), min(ys), max(xs), max(ys))


def bboxes_intersect(a, b) -> bool:
    return not (a[2] < b[0] or b[2] < a[0] or a[3] < b[1] or b[3] < a[1])


__all__ = [
    "PathDataError",
    "Segment",
    "parse_path",
    "stringify_path",
    "path_bbox",
    "bboxes_intersect",
]
