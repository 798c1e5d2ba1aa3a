import glob
import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .engine import optimize_svg
from .errors import BatchError
from .options import OptimizeOptions
from .sources import read_svg_file
from .util import svg_bytes_for, write_svg
from .validation import validate_svg

logger = logging.getLogger(__name__)

SVG_SUFFIXES = (".svg", ".svgz")

# aggressive runs above this reduction (percent) get a visual-check warning
AGGRESSIVE_WARN_THRESHOLD = 10.0


def default_workers() -> int:
    return max(1, os.cpu_count() or 1)


@dataclass(frozen=True)
class BatchOptions:
    out_dir: str | Path = "optimized"
    optimize: OptimizeOptions = field(default_factory=OptimizeOptions)
    dry_run: bool = False
    png: bool = False
    png_size: int = 512
    # seconds per PNG render, 0 disables the limit (POSIX only)
    png_timeout: int = 0
    workers: int = field(default_factory=default_workers)

    def __post_init__(self):
        if not isinstance(self.workers, int) or self.workers < 1:
            raise ValueError(f"workers must be a positive integer, got {self.workers!r}")
        if self.png_size < 1:
            raise ValueError(f"png_size must be positive, got {self.png_size!r}")
        if self.png_timeout < 0:
            raise ValueError(f"png_timeout must be >= 0, got {self.png_timeout!r}")


@dataclass
class FileReport:
    """Outcome for one input file; failures carry ``error`` instead of raising."""

    source: str
    destination: str | None = None
    original_size: int = 0
    optimized_size: int = 0
    valid: bool | None = None
    png_path: str | None = None
    png_error: str | None = None
    error: str | None = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reduction(self) -> float:
        """Size reduction in percent (negative when the output grew)."""
        if not self.original_size:
            return 0.0
        return (self.original_size - self.optimized_size) / self.original_size * 100


@dataclass
class BatchSummary:
    reports: List[FileReport]

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.reports if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.reports if not r.ok)

    @property
    def total_original(self) -> int:
        return sum(r.original_size for r in self.reports if r.ok)

    @property
    def total_optimized(self) -> int:
        return sum(r.optimized_size for r in self.reports if r.ok)

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1


# ---------------------------------------------------------------------------
# Input discovery
# ---------------------------------------------------------------------------

def _is_svg_path(path: Path) -> bool:
    return path.suffix.lower() in SVG_SUFFIXES


def resolve_inputs(target: str | os.PathLike) -> List[Path]:
    """Expand a file, a directory (recursive) or a glob pattern into SVG paths."""
    path = Path(target)
    if path.is_file():
        return [path]
    if path.is_dir():
        found = [p for p in path.rglob("*") if p.is_file() and _is_svg_path(p)]
    else:
        found = [
            Path(p) for p in glob.glob(str(target), recursive=True)
            if Path(p).is_file() and _is_svg_path(Path(p))
        ]
    if not found:
        raise BatchError(f"No SVG/SVGZ files found for {str(target)!r}")
    return sorted(found)


def destination_for(src: Path, out_dir: str | Path) -> Path:
    return Path(out_dir) / src.name


def png_destination_for(src: Path, out_dir: str | Path) -> Path:
    return Path(out_dir) / f"{src.stem}.png"


# ---------------------------------------------------------------------------
# Per-file work
# ---------------------------------------------------------------------------

def optimize_one_file(src: Path, options: BatchOptions) -> FileReport:
    """Optimize, validate and optionally rasterize one file; never raises."""
    src = Path(src)
    report = FileReport(source=str(src))
    dest = destination_for(src, options.out_dir)
    try:
        report.original_size = src.stat().st_size
        optimized = optimize_svg(read_svg_file(src), options.optimize)
        data = svg_bytes_for(dest, optimized)
        report.optimized_size = len(data)

        report.valid = validate_svg(optimized)
        if not report.valid:
            report.warnings.append("optimized output failed validation")

        if options.optimize.aggressive and report.reduction > AGGRESSIVE_WARN_THRESHOLD:
            report.warnings.append(
                f"aggressive mode removed {report.reduction:.1f}%, check the rendering"
            )

        if not options.dry_run:
            write_svg(dest, optimized)
            report.destination = str(dest)
    except Exception as e:
        logger.debug("Failed to optimize %s", src, exc_info=True)
        report.error = str(e) or type(e).__name__
        return report

    if options.png and not options.dry_run:
        from .rasterization import export_png_thumbnail

        png_path = png_destination_for(src, options.out_dir)
        try:
            export_png_thumbnail(
                optimized,
                png_path,
                width=options.png_size,
                height=options.png_size,
                timeout=options.png_timeout,
            )
            report.png_path = str(png_path)
        except Exception as e:
            # the optimized SVG stays on disk
            report.png_error = str(e)
            report.warnings.append(f"PNG export failed: {e}")
    return report


def _worker(src_str: str, options: BatchOptions) -> FileReport:
    return optimize_one_file(Path(src_str), options)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def format_report(report: FileReport) -> List[str]:
    if not report.ok:
        return [f"[FAIL] {report.source}: {report.error}"]
    dest = report.destination or "(dry run)"
    lines = [
        f"[ OK ] {report.source} -> {dest}: "
        f"{report.original_size} -> {report.optimized_size} bytes "
        f"({report.reduction:.1f}% smaller)"
    ]
    for warning in report.warnings:
        lines.append(f"[WARN] {report.source}: {warning}")
    return lines


def format_summary(summary: BatchSummary) -> str:
    saved = summary.total_original - summary.total_optimized
    pct = saved / summary.total_original * 100 if summary.total_original else 0.0
    return (
        f"Done: {summary.succeeded} optimized, {summary.failed} failed, "
        f"{summary.total_original} -> {summary.total_optimized} bytes ({pct:.1f}% smaller)"
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_batch(
    inputs: Sequence[str | os.PathLike],
    options: BatchOptions | None = None,
    *,
    progress: bool = True,
) -> BatchSummary:
    """Optimize every file in *inputs*; one failure never stops the others."""
    options = options or BatchOptions()
    paths = [Path(p) for p in inputs]
    if not paths:
        raise BatchError("No input files")

    if not options.dry_run:
        try:
            Path(options.out_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BatchError(f"Cannot create output directory {options.out_dir}: {e}") from e

    names = [p.name for p in paths]
    if len(set(names)) != len(names):
        logger.warning("Several inputs share a file name; later outputs overwrite earlier ones")

    reports: List[FileReport] = []
    successful = 0
    failed = 0

    with logging_redirect_tqdm(), tqdm(
        total=len(paths),
        unit="SVG",
        desc="Optimizing SVGs",
        leave=True,
        disable=not progress,
        bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}, S:{postfix[0]}, F:{postfix[1]}]',
        postfix=[successful, failed],
    ) as bar:

        def record(report: FileReport) -> None:
            nonlocal successful, failed
            if report.ok:
                successful += 1
            else:
                failed += 1
            reports.append(report)
            lines = format_report(report)
            if report.ok:
                if progress:
                    tqdm.write(lines[0])
                for line in lines[1:]:
                    logger.warning(line)
            else:
                logger.error(lines[0])
            if not bar.disable:
                bar.postfix[0] = successful
                bar.postfix[1] = failed
            bar.update()

        if options.workers == 1 or len(paths) == 1:
            for p in paths:
                record(optimize_one_file(p, options))
        else:
            with ProcessPoolExecutor(max_workers=options.workers) as ex:
                fut_to_path = {ex.submit(_worker, str(p), options): p for p in paths}
                for fut in as_completed(fut_to_path):
                    try:
                        report = fut.result()
                    except Exception as e:
                        report = FileReport(source=str(fut_to_path[fut]), error=str(e) or type(e).__name__)
                    record(report)

    summary = BatchSummary(reports)
    logger.info(format_summary(summary))
    return summary


__all__ = [
    "BatchOptions",
    "FileReport",
    "BatchSummary",
    "default_workers",
    "resolve_inputs",
    "destination_for",
    "png_destination_for",
    "optimize_one_file",
    "format_report",
    "format_summary",
    "run_batch",
]
