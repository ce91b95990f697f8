"""Plugin registry: framework plugins, entry points and explicit specs."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from importlib import metadata
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Set

from ..diagnostics import PLUGIN_UNAVAILABLE, Diagnostic, PluginLoadError, warning
from ..logging import get_logger
from .base import ModuleContext, Plugin
from .pipeline import PluginPipeline

_ENTRY_POINT_GROUP = "cemgen.plugins"

# Constructors are imported only when their flag is enabled.
_BUILTIN_FACTORIES: Dict[str, str] = {
    "litelement": "cemgen.plugins.lit:LitPlugin",
    "fast": "cemgen.plugins.fast:FastPlugin",
    "stencil": "cemgen.plugins.stencil:StencilPlugin",
    "catalyst": "cemgen.plugins.catalyst:CatalystPlugin",
}
FRAMEWORK_FLAGS = tuple(_BUILTIN_FACTORIES)

logger = get_logger("plugins")


@dataclass
class PluginSelection:
    """Plugins in run order plus the warnings raised while loading them."""

    plugins: List[Plugin] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [str(getattr(plugin, "name", type(plugin).__name__)) for plugin in self.plugins]


def load_plugins(
    flags: Mapping[str, bool] | Iterable[str] = (),
    custom: Sequence[str | object] = (),
) -> PluginSelection:
    """Construct enabled plugins in canonical order.

    ``flags`` selects framework plugins, either as a mapping of flag to
    enabled or as an iterable of enabled flag names. ``custom`` holds plugin
    instances, ``module:attribute`` specs or entry point names and runs after
    the framework plugins in the given order.
    """
    if isinstance(flags, Mapping):
        enabled: Set[str] = {name.lower() for name, value in flags.items() if value}
    else:
        enabled = {name.lower() for name in flags}
    unknown = enabled - set(_BUILTIN_FACTORIES)
    if unknown:
        raise PluginLoadError(f"Unknown framework plugins requested: {', '.join(sorted(unknown))}")

    selection = PluginSelection()
    reported: Set[str] = set()

    def _add(label: str, factory: Callable[[], object]) -> None:
        try:
            instance = _coerce_plugin(factory())
        except ModuleNotFoundError as exc:
            if label in reported:
                return
            reported.add(label)
            message = f"plugin '{label}' is unavailable ({exc}); skipping it"
            logger.warning(message)
            selection.diagnostics.append(warning("", message, PLUGIN_UNAVAILABLE))
            return
        selection.plugins.append(instance)

    for name, target in _BUILTIN_FACTORIES.items():
        if name in enabled:
            _add(name, lambda target=target: _import_object(target))

    entry_points = None
    for spec in custom:
        if not isinstance(spec, str):
            selection.plugins.append(_coerce_plugin(spec))
            continue
        if ":" in spec:
            _add(spec, lambda spec=spec: _import_object(spec))
            continue
        if spec in _BUILTIN_FACTORIES:
            if spec not in enabled:
                _add(spec, lambda spec=spec: _import_object(_BUILTIN_FACTORIES[spec]))
            continue
        if entry_points is None:
            entry_points = {entry.name: entry for entry in _iter_entry_points()}
        entry = entry_points.get(spec)
        if entry is None:
            raise PluginLoadError(f"Unknown plugin '{spec}'")
        _add(spec, entry.load)

    return selection


def build_pipeline(
    flags: Mapping[str, bool] | Iterable[str] = (),
    custom: Sequence[str | object] = (),
) -> tuple[PluginPipeline, List[Diagnostic]]:
    selection = load_plugins(flags, custom)
    return PluginPipeline(selection.plugins), selection.diagnostics


def _import_object(spec: str) -> object:
    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise PluginLoadError(f"Plugin spec '{spec}' must look like 'module:attribute'")
    module = importlib.import_module(module_name)
    target: object = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise PluginLoadError(f"Plugin spec '{spec}' does not name an attribute of {module_name}") from exc
    return target


def _coerce_plugin(obj: object) -> Plugin:
    if isinstance(obj, Plugin):
        return obj
    if isinstance(obj, type) and issubclass(obj, Plugin):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Plugin):
            return instance
    raise PluginLoadError("Plugin must be a Plugin instance, subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "FRAMEWORK_FLAGS",
    "ModuleContext",
    "Plugin",
    "PluginPipeline",
    "PluginSelection",
    "build_pipeline",
    "load_plugins",
]
