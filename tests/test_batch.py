import gzip
import logging
from pathlib import Path

import pytest
from conftest import svg_doc

from svgopt.batch import (
    BatchOptions,
    BatchSummary,
    FileReport,
    format_report,
    format_summary,
    optimize_one_file,
    resolve_inputs,
    run_batch,
)
from svgopt.errors import BatchError
from svgopt.options import OptimizeOptions


def _by_name(summary):
    return {Path(r.source).name: r for r in summary.reports}


def test_batch_with_one_broken_file(svg_dir, tmp_path) -> None:
    out_dir = tmp_path / "out"
    summary = run_batch(resolve_inputs(svg_dir), BatchOptions(out_dir=out_dir, workers=1), progress=False)
    assert (summary.succeeded, summary.failed) == (2, 1)
    assert summary.exit_code == 1
    assert (out_dir / "a.svg").exists()
    assert (out_dir / "b.svg").exists()
    assert not (out_dir / "broken.svg").exists()

    reports = _by_name(summary)
    assert reports["broken.svg"].error
    assert reports["a.svg"].valid is True
    assert reports["a.svg"].optimized_size == (out_dir / "a.svg").stat().st_size
    assert reports["b.svg"].reduction > 0


def test_batch_all_good(svg_dir, tmp_path) -> None:
    (svg_dir / "broken.svg").unlink()
    summary = run_batch(resolve_inputs(svg_dir), BatchOptions(out_dir=tmp_path / "out", workers=1), progress=False)
    assert summary.exit_code == 0
    assert summary.total_optimized < summary.total_original


def test_batch_process_pool(svg_dir, tmp_path) -> None:
    out_dir = tmp_path / "out"
    summary = run_batch(resolve_inputs(svg_dir), BatchOptions(out_dir=out_dir, workers=2), progress=False)
    assert (summary.succeeded, summary.failed) == (2, 1)
    assert sorted(p.name for p in out_dir.iterdir()) == ["a.svg", "b.svg"]


def test_dry_run_writes_nothing(svg_dir, tmp_path) -> None:
    out_dir = tmp_path / "out"
    summary = run_batch(
        resolve_inputs(svg_dir),
        BatchOptions(out_dir=out_dir, dry_run=True, png=True, workers=1),
        progress=False,
    )
    assert summary.succeeded == 2
    assert not out_dir.exists()
    assert all(r.destination is None and r.png_path is None for r in summary.reports)
    assert _by_name(summary)["b.svg"].optimized_size > 0


def test_svgz_input_stays_compressed(tmp_path) -> None:
    src = tmp_path / "icon.svgz"
    src.write_bytes(gzip.compress(svg_doc("<!-- x --><g/>").encode("utf-8")))
    out_dir = tmp_path / "out"
    report = optimize_one_file(src, BatchOptions(out_dir=out_dir, workers=1))
    assert report.ok
    data = (out_dir / "icon.svgz").read_bytes()
    assert data[:2] == b"\x1f\x8b"
    assert gzip.decompress(data).decode("utf-8") == '<svg xmlns="http://www.w3.org/2000/svg"/>'


def test_aggressive_reduction_warning(svg_dir, tmp_path) -> None:
    src = svg_dir / "b.svg"
    safe = optimize_one_file(src, BatchOptions(out_dir=tmp_path / "safe", workers=1))
    assert not safe.warnings
    aggressive = optimize_one_file(
        src,
        BatchOptions(out_dir=tmp_path / "aggr", optimize=OptimizeOptions(aggressive=True), workers=1),
    )
    assert aggressive.reduction > 10
    assert any("aggressive" in w for w in aggressive.warnings)


def test_resolve_inputs(svg_dir) -> None:
    nested = svg_dir / "sub"
    nested.mkdir()
    (nested / "c.SVGZ").write_bytes(gzip.compress(b"<svg/>"))
    (svg_dir / "notes.txt").write_text("x", encoding="utf-8")

    found = [p.name for p in resolve_inputs(svg_dir)]
    assert found == ["a.svg", "b.svg", "broken.svg", "c.SVGZ"]
    assert [p.name for p in resolve_inputs(str(svg_dir / "*.svg"))] == ["a.svg", "b.svg", "broken.svg"]
    assert [p.name for p in resolve_inputs(svg_dir / "a.svg")] == ["a.svg"]
    assert [p.name for p in resolve_inputs(str(svg_dir / "**" / "c.*"))] == ["c.SVGZ"]


def test_resolve_inputs_nothing_found(tmp_path) -> None:
    with pytest.raises(BatchError):
        resolve_inputs(tmp_path)
    with pytest.raises(BatchError):
        resolve_inputs(str(tmp_path / "*.svg"))


def test_run_batch_requires_inputs(tmp_path) -> None:
    with pytest.raises(BatchError):
        run_batch([], BatchOptions(out_dir=tmp_path / "out"), progress=False)


def test_batch_options_validation() -> None:
    with pytest.raises(ValueError):
        BatchOptions(workers=0)
    with pytest.raises(ValueError):
        BatchOptions(png_size=0)
    with pytest.raises(ValueError):
        BatchOptions(png_timeout=-1)


def test_report_lines() -> None:
    ok = FileReport(source="a.svg", destination="out/a.svg", original_size=200, optimized_size=150,
                    warnings=["optimized output failed validation"])
    failed = FileReport(source="b.svg", error="SVG optimization failed: boom")
    assert format_report(ok) == [
        "[ OK ] a.svg -> out/a.svg: 200 -> 150 bytes (25.0% smaller)",
        "[WARN] a.svg: optimized output failed validation",
    ]
    assert format_report(failed) == ["[FAIL] b.svg: SVG optimization failed: boom"]
    assert format_summary(BatchSummary([ok, failed])) == (
        "Done: 1 optimized, 1 failed, 200 -> 150 bytes (25.0% smaller)"
    )


def test_failures_and_warnings_are_logged_without_progress(svg_dir, tmp_path, caplog) -> None:
    options = BatchOptions(out_dir=tmp_path / "out", optimize=OptimizeOptions(aggressive=True), workers=1)
    with caplog.at_level(logging.WARNING, logger="svgopt"):
        run_batch(resolve_inputs(svg_dir), options, progress=False)
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(errors) == 1 and errors[0].startswith("[FAIL]") and "broken.svg" in errors[0]
    assert any(w.startswith("[WARN]") and "b.svg" in w and "aggressive" in w for w in warnings)
    assert not any(r.getMessage().startswith("[ OK ]") for r in caplog.records)
