# tests/test_extensible.py
"""Tests for ridr/core/extensible.py: plugin registration, nesting, snapshots."""
from __future__ import annotations

import pytest

from ridr.core.errors import InvalidMiddlewareError
from ridr.core.extensible import Extensible, ExtensiblePlugin
from ridr.core.plugin import Plugin, PluginState


class Registry(Extensible):
    def middleware_names(self):
        return ["s", "t"]


class CounterPlugin(Plugin):
    data_fields = ("seen",)

    def __init__(self, config=None):
        super().__init__(config)
        self.seen = []

    def default_config(self):
        return {"step": 1, "nested": {"a": 1}}

    def install(self, parent):
        return [("s", self.on_stage)]

    def on_stage(self, value):
        self.seen.append(value)


class BadStagePlugin(Plugin):
    """Contributes to a known stage, then to one that does not exist."""

    def install(self, parent):
        return [("s", self.on_stage), ("missing", print)]

    def on_stage(self, value):
        raise AssertionError("handler of a failed install must not run")


class ReplacementCounter(CounterPlugin):
    @property
    def name(self):
        return "CounterPlugin"

    def install(self, parent):
        return [("missing", self.on_stage)]


class LifecyclePlugin(Plugin):
    def __init__(self, label, calls, fail=False):
        super().__init__()
        self.label = label
        self.calls = calls
        self.fail = fail

    @property
    def name(self):
        return self.label

    async def initialize(self, parent):
        if self.fail:
            raise RuntimeError(f"{self.label} failed")
        self.calls.append(self.label)


class InnerPlugin(Plugin):
    def __init__(self, config=None, calls=None):
        super().__init__(config)
        self.calls = calls if calls is not None else []

    def install(self, parent):
        return [("nested.stage", self.on_nested)]

    def on_nested(self, value):
        self.calls.append(value)


class NestedPlugin(ExtensiblePlugin):
    def middleware_names(self):
        return ["nested.stage"]


# ============================================================================
# Registration
# ============================================================================

class TestRegistration:
    def test_use_installs_and_folds_handlers(self):
        registry = Registry()
        plugin = CounterPlugin()
        registry.use(plugin)

        assert registry.plugins == {"CounterPlugin": plugin}
        assert plugin.state == PluginState.INSTALLED
        assert plugin.parent is registry
        assert registry.middleware("s").fns == [plugin.on_stage]

    def test_constructor_plugins_are_registered(self):
        plugin = CounterPlugin()
        registry = Registry({"plugins": [plugin]})
        assert registry.plugins["CounterPlugin"] is plugin
        assert "plugins" not in registry.config

    @pytest.mark.asyncio
    async def test_contribution_to_unknown_stage_raises(self):
        registry = Registry()
        plugin = BadStagePlugin()
        with pytest.raises(InvalidMiddlewareError) as exc_info:
            registry.use(plugin)

        assert exc_info.value.name == "missing"
        assert registry.plugins == {}
        assert registry.middleware("s").fns == []
        assert plugin.state == PluginState.UNINSTALLED
        assert plugin.parent is None
        # Nothing of the failed install runs
        await registry.middleware_collection.run(["s", "t"], "value")

    def test_failed_replacement_keeps_previous_plugin(self):
        registry = Registry()
        first = CounterPlugin({"nested": {"b": 2}})
        registry.use(first)

        with pytest.raises(InvalidMiddlewareError):
            registry.use(ReplacementCounter())

        assert registry.plugins == {"CounterPlugin": first}
        assert first.state == PluginState.INSTALLED
        assert registry.middleware("s").fns == [first.on_stage]

    def test_replacement_keeps_registration_slot(self):
        calls = []
        registry = Registry()
        registry.use(LifecyclePlugin("one", calls), CounterPlugin(), LifecyclePlugin("three", calls))
        replacement = CounterPlugin()
        registry.use(replacement)

        assert list(registry.plugins) == ["one", "CounterPlugin", "three"]
        assert registry.plugins["CounterPlugin"] is replacement

    def test_same_class_replaces_and_merges_config(self):
        registry = Registry()
        first = CounterPlugin({"nested": {"b": 2}})
        second = CounterPlugin({"nested": {"c": 3}, "step": 5})
        registry.use(first)
        registry.use(second)

        assert registry.plugins["CounterPlugin"] is second
        assert second.config == {"step": 5, "nested": {"a": 1, "b": 2, "c": 3}}
        assert first.state == PluginState.UNINSTALLED
        # The replaced plugin's handlers are gone
        assert registry.middleware("s").fns == [second.on_stage]

    def test_per_plugin_override_from_config(self):
        registry = Registry({"plugin": {"CounterPlugin": {"nested": {"z": 9}}}})
        plugin = CounterPlugin()
        registry.use(plugin)
        assert plugin.config["nested"] == {"a": 1, "z": 9}

    def test_hook_registers_plain_function(self):
        registry = Registry()
        registry.hook("t", print)
        assert registry.middleware("t").fns == [print]


# ============================================================================
# Test mode
# ============================================================================

class TestSkipTests:
    def test_skipped_in_test_mode(self):
        registry = Registry(test_mode=True)
        registry.use(CounterPlugin({"skip_tests": True}))
        assert registry.plugins == {}
        assert registry.middleware("s").fns == []

    def test_registered_outside_test_mode(self):
        registry = Registry(test_mode=False)
        registry.use(CounterPlugin({"skip_tests": True}))
        assert "CounterPlugin" in registry.plugins

    def test_plugins_without_flag_always_registered(self):
        registry = Registry(test_mode=True)
        registry.use(CounterPlugin())
        assert "CounterPlugin" in registry.plugins

    def test_nested_plugins_follow_owner_test_mode(self):
        registry = Registry(test_mode=True)
        nested = NestedPlugin(plugins=[InnerPlugin({"skip_tests": True})])
        registry.use(nested)
        assert nested.test_mode is True
        assert nested.plugins == {}


# ============================================================================
# Nested plugins
# ============================================================================

class TestNestedPlugins:
    @pytest.mark.asyncio
    async def test_nested_stages_are_folded_into_owner(self):
        calls = []
        registry = Registry(test_mode=False)
        registry.use(NestedPlugin(plugins=[InnerPlugin(calls=calls)]))

        assert registry.middleware_collection.has("nested.stage")
        await registry.middleware_collection.run(["nested.stage"], "value")
        assert calls == ["value"]

    @pytest.mark.asyncio
    async def test_initialize_cascades(self):
        calls = []
        registry = Registry(test_mode=False)
        registry.use(NestedPlugin(plugins=[LifecyclePlugin("inner", calls)]))
        await registry.initialize_plugins()
        assert calls == ["inner"]


# ============================================================================
# Lifecycle
# ============================================================================

class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_in_registration_order(self):
        calls = []
        registry = Registry()
        registry.use(LifecyclePlugin("one", calls), LifecyclePlugin("two", calls))
        await registry.initialize_plugins()
        assert calls == ["one", "two"]

    @pytest.mark.asyncio
    async def test_initialize_stops_at_first_failure(self):
        calls = []
        registry = Registry()
        registry.use(
            LifecyclePlugin("one", calls),
            LifecyclePlugin("two", calls, fail=True),
            LifecyclePlugin("three", calls),
        )
        with pytest.raises(RuntimeError, match="two failed"):
            await registry.initialize_plugins()
        assert calls == ["one"]


# ============================================================================
# Snapshots
# ============================================================================

class TestSnapshot:
    def test_snapshot_isolates_config_and_data_fields(self):
        registry = Registry()
        plugin = CounterPlugin()
        registry.use(plugin)

        owner = Registry()
        registry.snapshot_into(owner)
        clone = owner.plugins["CounterPlugin"]

        clone.config["nested"]["a"] = 100
        clone.seen.append("x")

        assert clone is not plugin
        assert clone.parent is owner
        assert plugin.config["nested"]["a"] == 1
        assert plugin.seen == []

    @pytest.mark.asyncio
    async def test_snapshot_handlers_run_against_clone(self):
        registry = Registry()
        plugin = CounterPlugin()
        registry.use(plugin)

        owner = Registry()
        registry.snapshot_into(owner)
        await owner.middleware_collection.run(["s"], "request-1")

        assert owner.plugins["CounterPlugin"].seen == ["request-1"]
        assert plugin.seen == []

    def test_snapshot_registration_does_not_leak_back(self):
        registry = Registry()
        registry.use(CounterPlugin())

        owner = Registry()
        registry.snapshot_into(owner)
        owner.hook("t", print)

        assert registry.middleware("t").fns == []

    @pytest.mark.asyncio
    async def test_nested_handlers_rebound_to_clones(self):
        calls = []
        registry = Registry(test_mode=False)
        inner = InnerPlugin(calls=calls)
        registry.use(NestedPlugin(plugins=[inner]))

        owner = Registry()
        registry.snapshot_into(owner)
        cloned_inner = owner.plugins["NestedPlugin"].plugins["InnerPlugin"]

        # The clone shares the calls list (not a data field) but is a different object
        assert cloned_inner is not inner
        handler = owner.middleware("nested.stage").fns[0]
        assert handler.__self__ is cloned_inner
