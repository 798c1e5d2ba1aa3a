import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Tuple

from .errors import PluginError


class Builtin(str, Enum):
    """Built-in transformations, valued by their svgo plugin names."""

    CLEANUP_ATTRS = "cleanupAttrs"
    REMOVE_DOCTYPE = "removeDoctype"
    REMOVE_XML_PROC_INST = "removeXMLProcInst"
    REMOVE_COMMENTS = "removeComments"
    REMOVE_METADATA = "removeMetadata"
    REMOVE_TITLE = "removeTitle"
    REMOVE_DESC = "removeDesc"
    REMOVE_USELESS_DEFS = "removeUselessDefs"
    REMOVE_EDITORS_NS_DATA = "removeEditorsNSData"
    REMOVE_EMPTY_ATTRS = "removeEmptyAttrs"
    REMOVE_HIDDEN_ELEMS = "removeHiddenElems"
    REMOVE_EMPTY_TEXT = "removeEmptyText"
    REMOVE_EMPTY_CONTAINERS = "removeEmptyContainers"
    CLEANUP_ENABLE_BACKGROUND = "cleanupEnableBackground"
    CONVERT_STYLE_TO_ATTRS = "convertStyleToAttrs"
    CONVERT_COLORS = "convertColors"
    CONVERT_PATH_DATA = "convertPathData"
    CONVERT_TRANSFORM = "convertTransform"
    REMOVE_UNKNOWNS_AND_DEFAULTS = "removeUnknownsAndDefaults"
    REMOVE_NON_INHERITABLE_GROUP_ATTRS = "removeNonInheritableGroupAttrs"
    REMOVE_USELESS_STROKE_AND_FILL = "removeUselessStrokeAndFill"
    MERGE_PATHS = "mergePaths"
    REMOVE_DIMENSIONS = "removeDimensions"
    SORT_ATTRS = "sortAttrs"
    REMOVE_ATTRS = "removeAttrs"
    REMOVE_VIEW_BOX = "removeViewBox"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PluginSpec:
    """A named, optionally parameterized transformation.

    ``name`` is a :class:`Builtin` or any string (custom plugin). ``params``
    is opaque here and only interpreted by the plugin that runs. ``active``
    set to ``False`` disables the plugin; ``None`` means enabled. ``fn`` is
    the callable of a custom plugin, ``fn(doc, params)``.
    """

    name: Builtin | str
    params: Mapping[str, Any] | None = None
    active: bool | None = None
    fn: Callable | None = None

    def __post_init__(self):
        if isinstance(self.name, str) and not isinstance(self.name, Builtin):
            try:
                object.__setattr__(self, "name", Builtin(self.name))
            except ValueError:
                pass
        if self.params is not None:
            object.__setattr__(self, "params", dict(self.params))

    @property
    def key(self) -> str:
        """Identity used for override-by-recurrence."""
        return str(self.name)

    @property
    def kind(self) -> Builtin | None:
        """The built-in kind, or ``None`` for a custom plugin."""
        return self.name if isinstance(self.name, Builtin) else None

    @property
    def enabled(self) -> bool:
        return self.active is not False

    @classmethod
    def from_obj(cls, obj: Any) -> "PluginSpec":
        """Build a descriptor from a name, a mapping or a PluginSpec.

        Mappings use the svgo shape ``{"name": ..., "params": {...},
        "active": bool}``; an optional ``"fn"`` callable is kept as is.
        """
        if isinstance(obj, PluginSpec):
            return obj
        if isinstance(obj, str):
            return cls(obj)
        if isinstance(obj, Mapping):
            unknown = set(obj) - {"name", "params", "active", "fn"}
            if unknown:
                raise PluginError(f"Unknown plugin descriptor keys: {sorted(unknown)}")
            name = obj.get("name")
            if not isinstance(name, str) or not name:
                raise PluginError(f"Plugin descriptor needs a non-empty 'name': {obj!r}")
            params = obj.get("params")
            if params is not None and not isinstance(params, Mapping):
                raise PluginError(f"Plugin '{name}': 'params' must be an object")
            active = obj.get("active")
            if active is not None and not isinstance(active, bool):
                raise PluginError(f"Plugin '{name}': 'active' must be a boolean")
            return cls(name, params=params, active=active, fn=obj.get("fn"))
        raise PluginError(f"Invalid plugin descriptor: {obj!r}")

    @classmethod
    def from_json(cls, text: str) -> "PluginSpec":
        try:
            return cls.from_obj(json.loads(text))
        except json.JSONDecodeError as e:
            raise PluginError(f"Plugin descriptor is not valid JSON: {e}") from e

    def to_obj(self) -> dict:
        obj: dict = {"name": self.key}
        if self.params is not None:
            obj["params"] = dict(self.params)
        if self.active is not None:
            obj["active"] = self.active
        return obj


PluginLike = PluginSpec | str | Mapping[str, Any]


# ---------------------------------------------------------------------------
# Tiers (order matters: later plugins expect earlier cleanup to have run)
# ---------------------------------------------------------------------------

SAFE_PLUGINS: Tuple[PluginSpec, ...] = tuple(PluginSpec(name) for name in (
    Builtin.CLEANUP_ATTRS,
    Builtin.REMOVE_DOCTYPE,
    Builtin.REMOVE_XML_PROC_INST,
    Builtin.REMOVE_COMMENTS,
    Builtin.REMOVE_METADATA,
    Builtin.REMOVE_TITLE,
    Builtin.REMOVE_DESC,
    Builtin.REMOVE_USELESS_DEFS,
    Builtin.REMOVE_EDITORS_NS_DATA,
    Builtin.REMOVE_EMPTY_ATTRS,
    Builtin.REMOVE_HIDDEN_ELEMS,
    Builtin.REMOVE_EMPTY_TEXT,
    Builtin.REMOVE_EMPTY_CONTAINERS,
    Builtin.CLEANUP_ENABLE_BACKGROUND,
    Builtin.CONVERT_STYLE_TO_ATTRS,
    Builtin.CONVERT_COLORS,
    Builtin.CONVERT_PATH_DATA,
    Builtin.CONVERT_TRANSFORM,
    Builtin.REMOVE_UNKNOWNS_AND_DEFAULTS,
    Builtin.REMOVE_NON_INHERITABLE_GROUP_ATTRS,
    Builtin.REMOVE_USELESS_STROKE_AND_FILL,
    Builtin.MERGE_PATHS,
    Builtin.REMOVE_DIMENSIONS,
))

# May drop class / data-name attributes that external CSS or scripts rely on
AGGRESSIVE_PLUGINS: Tuple[PluginSpec, ...] = (
    PluginSpec(Builtin.SORT_ATTRS),
    PluginSpec(Builtin.REMOVE_ATTRS, params={"attrs": ["(class|data-name)"]}),
)


__all__ = [
    "Builtin",
    "PluginSpec",
    "PluginLike",
    "SAFE_PLUGINS",
    "AGGRESSIVE_PLUGINS",
]
