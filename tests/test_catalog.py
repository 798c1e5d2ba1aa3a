import pytest

from svgopt.catalog import AGGRESSIVE_PLUGINS, SAFE_PLUGINS, Builtin, PluginSpec
from svgopt.errors import PluginError
from svgopt.plugins import registered_plugins


def test_safe_tier_order() -> None:
    names = [spec.key for spec in SAFE_PLUGINS]
    assert names[0] == "cleanupAttrs"
    assert names[-1] == "removeDimensions"
    assert len(names) == 23
    assert names.index("convertStyleToAttrs") < names.index("convertColors")
    assert names.index("convertPathData") < names.index("mergePaths")


def test_aggressive_tier() -> None:
    assert [spec.key for spec in AGGRESSIVE_PLUGINS] == ["sortAttrs", "removeAttrs"]
    assert AGGRESSIVE_PLUGINS[1].params == {"attrs": ["(class|data-name)"]}


def test_every_builtin_is_registered() -> None:
    registry = registered_plugins()
    for member in Builtin:
        assert member.value in registry
        assert registry[member.value].params_cls is not None
        assert registry[member.value].name == member.value
        assert callable(registry[member.value].fn)


def test_spec_from_string_is_builtin() -> None:
    spec = PluginSpec.from_obj("removeComments")
    assert spec.kind is Builtin.REMOVE_COMMENTS
    assert spec.enabled


def test_spec_custom_name_kept_as_string() -> None:
    spec = PluginSpec.from_obj({"name": "myPlugin", "params": {"x": 1}})
    assert spec.kind is None
    assert spec.key == "myPlugin"
    assert spec.params == {"x": 1}


def test_spec_from_json_inactive() -> None:
    spec = PluginSpec.from_json('{"name": "removeComments", "active": false}')
    assert spec.key == "removeComments"
    assert not spec.enabled
    assert spec.to_obj() == {"name": "removeComments", "active": False}


@pytest.mark.parametrize(
    "obj",
    [
        {"params": {}},
        {"name": ""},
        {"name": "removeComments", "params": "nope"},
        {"name": "removeComments", "active": "no"},
        {"name": "removeComments", "extra": 1},
        42,
    ],
)
def test_spec_rejects_malformed(obj) -> None:
    with pytest.raises(PluginError):
        PluginSpec.from_obj(obj)


def test_spec_from_json_rejects_bad_json() -> None:
    with pytest.raises(PluginError):
        PluginSpec.from_json("{name: removeComments}")
