"""Tests for plugin selection and loading."""

from __future__ import annotations

import pytest

from cemgen.diagnostics import PLUGIN_UNAVAILABLE, PluginLoadError, Severity
from cemgen.plugins import build_pipeline, load_plugins
from cemgen.plugins.base import Plugin
from cemgen.plugins.catalyst import CatalystPlugin
from cemgen.plugins.lit import LitPlugin
from cemgen.plugins.stencil import StencilPlugin


class CustomPlugin(Plugin):
    name = "custom"


def test_framework_plugins_follow_canonical_order() -> None:
    selection = load_plugins({"catalyst": True, "litelement": True, "stencil": True, "fast": False})

    assert [type(plugin) for plugin in selection.plugins] == [LitPlugin, StencilPlugin, CatalystPlugin]
    assert selection.names == ["litelement", "stencil", "catalyst"]
    assert selection.diagnostics == []


def test_flags_can_be_given_as_names() -> None:
    selection = load_plugins(["FAST"])
    assert selection.names == ["fast"]


def test_unknown_framework_flag_is_rejected() -> None:
    with pytest.raises(PluginLoadError):
        load_plugins({"angular": True})


def test_custom_plugins_run_after_framework_plugins() -> None:
    selection = load_plugins(
        {"litelement": True},
        [CustomPlugin(), "cemgen.plugins.catalyst:CatalystPlugin"],
    )

    assert selection.names == ["litelement", "custom", "catalyst"]


def test_unavailable_plugin_is_skipped_with_warning() -> None:
    pipeline, diagnostics = build_pipeline((), ["cemgen_plugin_that_does_not_exist:Plugin"])

    assert pipeline.plugins == []
    (diagnostic,) = diagnostics
    assert diagnostic.code == PLUGIN_UNAVAILABLE
    assert diagnostic.severity is Severity.WARNING


def test_bad_plugin_specs_raise() -> None:
    with pytest.raises(PluginLoadError):
        load_plugins((), ["cemgen.plugins.lit:DoesNotExist"])
    with pytest.raises(PluginLoadError):
        load_plugins((), [object()])
    with pytest.raises(PluginLoadError):
        load_plugins((), ["no-such-entry-point"])
