import pytest
from pydantic import Field

from eventing.crd.base import CRDSpec
from eventing.crd.registry import CRDRegistry
from eventing.crd.conditions import new_batch_condition_set
from eventing.plugins.base import PluginBase
from eventing.plugins.registry import PluginRegistry


@pytest.fixture
def plugin_registry():
    registry = PluginRegistry()
    registry.clear()
    yield registry
    registry.clear()


class UndeclaredSpec(CRDSpec):
    name: str = Field(default="")


class BrokenPlugin(PluginBase):
    name = "broken"
    version = "0.0.1"
    description = "Provides a model that was never registered"
    models = [UndeclaredSpec]

    def register_handlers(self):
        raise AssertionError("handlers of an uninitialized plugin must not be registered")


def test_registry_records_condition_set():
    condition_set = new_batch_condition_set("Built", "Pushed")

    @CRDRegistry.register("test.example.com", "v1", "Build", condition_set=condition_set)
    class BuildSpec(CRDSpec):
        image: str = Field(default="")

    info = CRDRegistry().get_model_by_api_version("test.example.com/v1", "Build")
    assert info["model"] is BuildSpec
    assert info["plural"] == "builds"
    assert info["condition_set"].happy == "Succeeded"
    assert CRDRegistry().get_models_by_kind("Build") == [info]


def test_builtin_plugins(plugin_registry):
    assert plugin_registry.discover_plugins(builtin_only=True) == 1
    assert plugin_registry.list_plugin_names() == ["channels"]

    assert plugin_registry.initialize_all_plugins() == {"channels": True}
    plugin_registry.register_all_handlers()

    health = plugin_registry.get_plugins_health_status()["channels"]
    assert health["status"] == "healthy"
    assert health["models_count"] == 1
    assert "Channels" in health["description"]


def test_duplicate_plugin_is_rejected(plugin_registry):
    plugin_registry.discover_plugins(builtin_only=True)
    assert plugin_registry.discover_plugins(builtin_only=True) == 0


def test_plugin_with_unregistered_model_fails(plugin_registry):
    assert plugin_registry.register_plugin(BrokenPlugin())
    assert plugin_registry.initialize_all_plugins() == {"broken": False}

    plugin_registry.register_all_handlers()
    assert plugin_registry.get_plugin("broken").get_health_status()["status"] == "not_initialized"


def test_shutdown(plugin_registry):
    plugin_registry.discover_plugins(builtin_only=True)
    plugin_registry.initialize_all_plugins()
    plugin_registry.shutdown_all_plugins()

    assert not plugin_registry.get_plugin("channels").initialized
