from typing import Iterable, List

from .catalog import AGGRESSIVE_PLUGINS, SAFE_PLUGINS, Builtin, PluginLike, PluginSpec
from .errors import PluginError
from .options import OptimizeOptions


def _as_spec(obj: PluginLike) -> PluginSpec:
    # Descriptors the catalog cannot interpret are passed through untouched;
    # the engine reports them when it resolves the list.
    if isinstance(obj, PluginSpec):
        return obj
    try:
        return PluginSpec.from_obj(obj)
    except PluginError:
        return obj  # type: ignore[return-value]


def compose_plugins(
    aggressive: bool = False,
    *,
    preserve_viewbox: bool = True,
    remove_dimensions: bool = True,
    extra: Iterable[PluginLike] = (),
) -> List[PluginSpec]:
    """Build the ordered plugin list for one optimization request.

    1. the safe tier;
    2. the aggressive tier, when *aggressive*;
    3. without *remove_dimensions*, the first removeDimensions entry is dropped;
    4. with *preserve_viewbox*, an inactive removeViewBox is appended;
    5. *extra* descriptors, in the order given.

    Later entries win over earlier ones with the same name at execution time,
    so *extra* can disable, re-enable or reconfigure any built-in.
    """
    plugins: List[PluginSpec] = list(SAFE_PLUGINS)
    if aggressive:
        plugins.extend(AGGRESSIVE_PLUGINS)

    if not remove_dimensions:
        for idx, spec in enumerate(plugins):
            if spec.name == Builtin.REMOVE_DIMENSIONS:
                del plugins[idx]
                break

    if preserve_viewbox:
        plugins.append(PluginSpec(Builtin.REMOVE_VIEW_BOX, active=False))

    plugins.extend(_as_spec(p) for p in extra)
    return plugins


def compose_from_options(options: OptimizeOptions) -> List[PluginSpec]:
    return compose_plugins(
        options.aggressive,
        preserve_viewbox=options.preserve_viewbox,
        remove_dimensions=options.remove_dimensions,
        extra=options.plugins,
    )


__all__ = ["compose_plugins", "compose_from_options"]
