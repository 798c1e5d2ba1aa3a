import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Iterable, List

from .catalog import PluginLike, PluginSpec
from .composer import compose_from_options
from .engine import resolve_plugins
from .errors import OptimizationError, PluginError
from .options import OptimizeOptions

# ---------------------------------------------------------------------------
# Utils
# ---------------------------------------------------------------------------

def svgo_available() -> bool:
    """Return *True* if the `svgo` CLI is in PATH."""
    return shutil.which("svgo") is not None


def _ensure_svgo() -> None:
    if not svgo_available():
        raise OptimizationError("'svgo' not found. Install with: npm i -g svgo")


def _build_cmd(src: Path, dst: Path, config: Path | None) -> List[str]:
    cmd = ["svgo", str(src), "-o", str(dst)]
    if config is not None:
        cmd += ["--config", str(config)]
    return cmd


def build_config(plugins: Iterable[PluginLike], *, multipass: bool = True) -> str:
    """Render an ``svgo.config.mjs`` running the resolved plugin list.

    Descriptors go through the same last-wins resolution as the native engine,
    so svgo sees each plugin once, in first-occurrence order. Custom plugins
    (Python callables) cannot be handed to svgo.
    """
    plugins = list(plugins)
    entries = []
    for item in resolve_plugins(plugins):
        if item.plugin.params_cls is None:
            raise PluginError(f"Custom plugin '{item.name}' cannot run on the svgo backend")
        entry: dict = {"name": item.name}
        raw = _raw_params(plugins, item.name)
        if raw:
            entry["params"] = raw
        entries.append(entry)
    config = {"multipass": multipass, "plugins": entries}
    return f"export default {json.dumps(config, indent=2)};\n"


def _raw_params(plugins: List[PluginLike], name: str) -> dict | None:
    params = None
    for obj in plugins:
        spec = PluginSpec.from_obj(obj)
        if spec.key == name:
            params = spec.params
    return dict(params) if params else None


# ---------------------------------------------------------------------------
# Core single-file helper
# ---------------------------------------------------------------------------

def optimize_with_svgo(svg: str, options: OptimizeOptions | None = None) -> str:
    """Optimize markup by running the composed plugin list through ``svgo``."""
    options = options or OptimizeOptions()
    try:
        _ensure_svgo()
        plugins = compose_from_options(options)
        config_text = build_config(plugins, multipass=options.multipass)

        with tempfile.TemporaryDirectory(prefix="svgo_tmp_") as tmpdir:
            src = Path(tmpdir) / "input.svg"
            dst = Path(tmpdir) / "output.svg"
            config = Path(tmpdir) / "svgo.config.mjs"
            src.write_text(svg, encoding="utf-8")
            config.write_text(config_text, encoding="utf-8")

            result = subprocess.run(
                _build_cmd(src, dst, config),
                capture_output=True,
                text=True,
            )
            if result.returncode != 0 or not dst.exists():
                raise OptimizationError(result.stderr.strip() or f"svgo exited with {result.returncode}")
            return dst.read_text(encoding="utf-8")
    except Exception as e:
        raise OptimizationError(f"SVG optimization failed: {e}") from e


__all__ = [
    "svgo_available",
    "build_config",
    "optimize_with_svgo",
]
