import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from .catalog import PluginLike, PluginSpec
from .composer import compose_from_options
from .document import parse_svg
from .errors import OptimizationError, PluginError
from .options import DEFAULT_MAX_PASSES, OptimizeOptions
from .plugins import Plugin, get_plugin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPlugin:
    """A plugin ready to run: the callable plus its validated params."""

    name: str
    plugin: Plugin
    params: Any

    def apply(self, doc) -> None:
        self.plugin(doc, self.params)


def resolve_plugins(plugins: Iterable[PluginLike]) -> List[ResolvedPlugin]:
    """Turn descriptors into the execution list.

    Descriptors are grouped by name: the last one for a name supplies its
    configuration (active flag, params, fn) and the plugin runs at the
    position where the name first appeared. Disabled plugins are left out.
    Raises :class:`PluginError` for anything that cannot run.
    """
    order: List[str] = []
    last: Dict[str, PluginSpec] = {}
    for obj in plugins:
        spec = PluginSpec.from_obj(obj)
        if spec.key not in last:
            order.append(spec.key)
        last[spec.key] = spec

    resolved = []
    for key in order:
        spec = last[key]
        if spec.fn is not None:
            if not callable(spec.fn):
                raise PluginError(f"Plugin '{key}': 'fn' is not callable")
            plugin = Plugin(name=key, fn=spec.fn)
        else:
            plugin = get_plugin(key)
        if not spec.enabled:
            continue
        resolved.append(ResolvedPlugin(key, plugin, plugin.configure(spec.params)))
    return resolved


def _run_pipeline(svg: str, resolved: List[ResolvedPlugin]) -> str:
    doc = parse_svg(svg)
    for item in resolved:
        item.apply(doc)
    return doc.to_string()


def optimize(
    svg: str,
    plugins: Iterable[PluginLike],
    *,
    multipass: bool = True,
    max_passes: int = DEFAULT_MAX_PASSES,
) -> str:
    """Run *plugins* over *svg* and return the optimized markup.

    With *multipass* the pipeline is re-run on its own output while that keeps
    getting strictly shorter (at most *max_passes* runs); the shortest output
    wins. Every failure is raised as :class:`OptimizationError`.
    """
    try:
        resolved = resolve_plugins(plugins)
        best = _run_pipeline(svg, resolved)
        passes = 1
        while multipass and passes < max_passes:
            candidate = _run_pipeline(best, resolved)
            passes += 1
            if len(candidate) >= len(best):
                break
            best = candidate
        logger.debug("Optimized in %d pass(es) with %d plugin(s)", passes, len(resolved))
        return best
    except Exception as e:
        raise OptimizationError(f"SVG optimization failed: {e}") from e


def optimize_svg(svg: str, options: OptimizeOptions | None = None, **overrides) -> str:
    """Optimize markup according to *options* (keyword overrides allowed).

    >>> optimize_svg('<svg xmlns="http://www.w3.org/2000/svg"><!--x--></svg>')
    '<svg xmlns="http://www.w3.org/2000/svg"/>'
    """
    options = (options or OptimizeOptions()).with_overrides(**overrides)
    if options.backend == "svgo":
        from .svgo import optimize_with_svgo
        return optimize_with_svgo(svg, options)
    return optimize(
        svg,
        compose_from_options(options),
        multipass=options.multipass,
        max_passes=options.max_passes,
    )


__all__ = ["ResolvedPlugin", "resolve_plugins", "optimize", "optimize_svg"]
