import gzip
import os
import tempfile
from pathlib import Path
from typing import Iterable


def format_number(value: float, precision: int = 3) -> str:
    """Shortest decimal form of *value* rounded to *precision* digits.

    ``0.5`` -> ``.5``, ``-0.5`` -> ``-.5``, ``2.0`` -> ``2``, ``-0`` -> ``0``
    """
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    text = f"{rounded:.{precision}f}".rstrip("0").rstrip(".")
    if text.startswith("0."):
        text = text[1:]
    elif text.startswith("-0."):
        text = "-" + text[2:]
    return text


def join_numbers(numbers: Iterable[str]) -> str:
    """Join formatted numbers with the fewest separators a parser accepts."""
    out = ""
    prev = None
    for num in numbers:
        if prev is None:
            out = num
        elif num.startswith("-") or (num.startswith(".") and "." in prev and "e" not in prev):
            out += num
        else:
            out += " " + num
        prev = num
    return out


def is_svgz(path: str | os.PathLike) -> bool:
    return Path(path).suffix.lower() == ".svgz"


def atomic_write_bytes(path: Path, data: bytes) -> Path:
    """Write *data* in one shot: temp file in the same dir, then ``os.replace``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("wb", delete=False, dir=path.parent, suffix=".tmp") as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)
    return path


def svg_bytes_for(path: str | os.PathLike, svg_txt: str) -> bytes:
    """Bytes stored for *svg_txt* at *path*: UTF-8, gzip-compressed for ``.svgz``."""
    data = svg_txt.encode("utf-8")
    if is_svgz(path):
        data = gzip.compress(data, mtime=0)
    return data


def write_svg(path: Path, svg_txt: str) -> Path:
    return atomic_write_bytes(path, svg_bytes_for(path, svg_txt))
