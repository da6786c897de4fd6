import io

import pytest

from scriptcli.scriptcli_environment import (
    OUTPUT_VARIABLE_NAME, RESERVED_NAMES, STORE_VARIABLE_NAME, Environment
)
from scriptcli.scriptcli_errors import UndefinedBindingError


def test_new_environment_holds_only_the_store():
    env = Environment()
    assert env.variables() == {STORE_VARIABLE_NAME: {}}
    assert env.has_variable(STORE_VARIABLE_NAME)
    assert not env.has_variable(OUTPUT_VARIABLE_NAME)
    assert RESERVED_NAMES == {"store", "out"}


def test_set_get_and_replace():
    env = Environment()
    env.set_variable("service", "first")
    assert env.get_variable("service") == "first"
    env.set_variable("service", "second")
    assert env.get_variable("service") == "second"


def test_missing_binding_raises():
    env = Environment()
    with pytest.raises(UndefinedBindingError) as info:
        env.get_variable("nope")
    assert info.value.name == "nope"
    assert "nope" in str(info.value)
    # Still usable as a KeyError by mapping-minded callers
    with pytest.raises(KeyError):
        env["nope"]


def test_out_is_undefined_until_bound():
    env = Environment()
    with pytest.raises(UndefinedBindingError):
        env.get_variable(OUTPUT_VARIABLE_NAME)
    sink = io.StringIO()
    env.bind_output(sink)
    assert env.get_variable(OUTPUT_VARIABLE_NAME) is sink
    assert env.variables()[OUTPUT_VARIABLE_NAME] is sink


def test_binding_names_must_be_strings():
    env = Environment()
    with pytest.raises(TypeError):
        env.set_variable(1, "x")


def test_store_is_shared_by_reference():
    env = Environment()
    env.store["count"] = 1
    assert env.get_variable("store") is env.store
    assert env.namespace()["store"] is env.store


def test_reserved_slots_win_over_host_bindings():
    env = Environment({"store": "host value", "svc": object()})
    assert env.get_variable("store") is env.store
    assert env.variables()["store"] is env.store
    assert env.reserved_collisions() == ["store"]
    assert env.bindings["store"] == "host value"


def test_update_from_namespace():
    env = Environment({"keep": 1, "drop": 2, "store": "shadowed"})
    store = env.store
    namespace = env.namespace()
    namespace.pop("drop")
    namespace["new"] = 3
    namespace["store"] = {}
    namespace["__builtins__"] = {}
    env.update_from_namespace(namespace)
    assert env.bindings == {"keep": 1, "new": 3, "store": "shadowed"}
    assert env.store is store


def test_namespace_persists_and_tracks_host_changes():
    env = Environment({"a": 1})
    ns = env.namespace()
    assert env.namespace() is ns
    env.set_variable("b", 2)
    env.remove_variable("a")
    assert ns["b"] == 2
    assert "a" not in ns
    # Script-side writes reach the bindings only through update_from_namespace.
    ns["c"] = 3
    assert not env.has_variable("c")
    env.update_from_namespace(ns)
    assert env.get_variable("c") == 3


def test_namespace_refreshes_reserved_slots():
    env = Environment({"store": "host value"})
    ns = env.namespace()
    assert ns["store"] is env.store
    assert "out" not in ns
    sink = io.StringIO()
    env.bind_output(sink)
    assert env.namespace()["out"] is sink


def test_mapping_sugar():
    env = Environment()
    env["x"] = 1
    assert env["x"] == 1
    assert "x" in env
    assert 5 not in env
    assert set(env) == {"x", "store"}
    assert len(env) == 2
    del env["x"]
    assert "x" not in env
    with pytest.raises(UndefinedBindingError):
        del env["x"]
