import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Set

from ..document import SvgDocument, localname
from ..errors import PluginError
from ..tables import HREF_RE, INHERITABLE_ATTRS, URL_REF_RE

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    """``floatPrecision`` -> ``float_precision``"""
    return _CAMEL_RE.sub("_", key).lower()


@dataclass(frozen=True)
class Plugin:
    """A registered transformation: ``fn(doc, params)`` mutates *doc*."""

    name: str
    fn: Callable[[SvgDocument, Any], None]
    params_cls: type | None = None

    def configure(self, params: Mapping[str, Any] | None) -> Any:
        """Validate raw descriptor params into the plugin's typed config.

        Custom plugins (no ``params_cls``) get the raw mapping back.
        """
        if self.params_cls is None:
            return dict(params or {})
        if params is not None and not isinstance(params, Mapping):
            raise PluginError(f"Invalid params for plugin '{self.name}': expected a mapping")
        kwargs = {_snake(str(k)): v for k, v in (params or {}).items()}
        try:
            return self.params_cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise PluginError(f"Invalid params for plugin '{self.name}': {e}") from e

    def __call__(self, doc: SvgDocument, params: Any) -> None:
        self.fn(doc, params)


_REGISTRY: Dict[str, Plugin] = {}


def register(name, params_cls: type | None = None):
    """Decorator adding a plugin function to the built-in registry."""
    def decorator(fn):
        _REGISTRY[str(name)] = Plugin(name=str(name), fn=fn, params_cls=params_cls)
        return fn
    return decorator


def get_plugin(name) -> Plugin:
    try:
        return _REGISTRY[str(name)]
    except KeyError:
        raise PluginError(f"Unknown plugin '{name}'") from None


def registered_plugins() -> Dict[str, Plugin]:
    return dict(_REGISTRY)


# ---------------------------------------------------------------------------
# Helpers shared by plugins
# ---------------------------------------------------------------------------

def parse_style_attribute(s: str) -> Dict[str, str]:
    """Given a 'style' string, parse it into a dict: key -> value"""
    style_dict = {}
    for chunk in s.split(";"):
        if ":" not in chunk:
            continue
        key, value = chunk.split(":", 1)
        if key.strip():
            style_dict[key.strip().lower()] = value.strip()
    return style_dict


def has_stylesheet(doc: SvgDocument) -> bool:
    return any(True for _ in doc.iter_elements("style"))


def has_scripts(doc: SvgDocument) -> bool:
    if any(True for _ in doc.iter_elements("script")):
        return True
    return any(
        localname(attr).startswith("on")
        for elem in doc.iter_elements()
        for attr in elem.attrib
    )


def own_value(elem, name: str) -> str | None:
    """Value of presentation property *name* set on *elem* itself.

    Inline ``style`` wins over the attribute.
    """
    style = elem.get("style")
    if style:
        value = parse_style_attribute(style).get(name)
        if value is not None:
            return value.replace("!important", "").strip()
    return elem.get(name)


def computed_value(elem, name: str) -> str | None:
    """Own value, or the nearest ancestor's for inheritable properties."""
    value = own_value(elem, name)
    if value is not None and value != "inherit":
        return value
    if name not in INHERITABLE_ATTRS and value != "inherit":
        return None
    parent = elem.getparent()
    while parent is not None:
        value = own_value(parent, name)
        if value is not None and value != "inherit":
            return value
        parent = parent.getparent()
    return None


def referenced_ids(doc: SvgDocument) -> Set[str]:
    """Ids referenced via ``url(#id)``, ``href="#id"`` or CSS text."""
    used: Set[str] = set()
    for elem in doc.iter_elements():
        for attr, value in elem.attrib.items():
            for match in URL_REF_RE.finditer(value):
                used.add(match.group(1))
            if localname(attr) == "href":
                match = HREF_RE.match(value.strip())
                if match:
                    used.add(match.group(1))
        if localname(elem.tag) in ("style", "script") and elem.text:
            used.update(URL_REF_RE.findall(elem.text))
            used.update(re.findall(r"#([A-Za-z_][\w.-]*)", elem.text))
    return used
