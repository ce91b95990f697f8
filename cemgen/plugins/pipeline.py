"""Runs plugin hooks over an analyzed module with per-hook isolation."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from ..diagnostics import PLUGIN_FAILURE, Diagnostic, error
from ..logging import get_logger
from ..models import ClassDeclaration, ClassMember, Declaration, Module
from ..syntax import ParsedSource
from .base import ModuleContext, Plugin

logger = get_logger("plugins")


class PluginPipeline:
    """Threads a module through the class, member and module hooks of each plugin.

    A hook that raises leaves the value it was given untouched, marks the
    enclosing declaration (or module) partial and records a ``plugin-failure``
    diagnostic. Other hooks and other modules keep running.
    """

    def __init__(self, plugins: Sequence[Plugin] = ()) -> None:
        self._plugins = list(plugins)

    @property
    def plugins(self) -> List[Plugin]:
        return list(self._plugins)

    @property
    def names(self) -> List[str]:
        return [_plugin_name(plugin) for plugin in self._plugins]

    def run(self, module: Module, parsed: ParsedSource) -> Module:
        if not self._plugins:
            return module

        context = ModuleContext(path=module.path, parsed=parsed, module=module)
        diagnostics: List[Diagnostic] = []
        declarations: List[Declaration] = []
        for declaration in module.declarations:
            if isinstance(declaration, ClassDeclaration):
                declaration = self._run_class(declaration, context, diagnostics)
            declarations.append(declaration)
        module = replace(module, declarations=tuple(declarations)).with_diagnostics(*diagnostics)

        for plugin in self._plugins:
            hook = getattr(plugin, "analyze_module", None)
            if hook is None:
                continue
            try:
                result = hook(module, replace(context, module=module))
            except Exception as exc:
                module = replace(module, partial=True).with_diagnostics(
                    self._failure(plugin, "analyze_module", module.path, module.path, exc)
                )
                continue
            if result is None:
                continue
            if result.path != module.path:
                module = replace(module, partial=True).with_diagnostics(
                    self._failure(
                        plugin,
                        "analyze_module",
                        module.path,
                        module.path,
                        ValueError(f"hook returned module {result.path!r}"),
                    )
                )
                continue
            module = result
        return module

    def _run_class(
        self, declaration: ClassDeclaration, context: ModuleContext, diagnostics: List[Diagnostic]
    ) -> ClassDeclaration:
        for plugin in self._plugins:
            hook = getattr(plugin, "analyze_class", None)
            if hook is None:
                continue
            try:
                result = hook(declaration, context)
            except Exception as exc:
                diagnostics.append(self._failure(plugin, "analyze_class", context.path, declaration.name, exc))
                declaration = replace(declaration, partial=True)
                continue
            if result is not None:
                declaration = result

        partial = declaration.partial
        members: List[ClassMember] = []
        for member in declaration.members:
            current = member
            for plugin in self._plugins:
                hook = getattr(plugin, "analyze_member", None)
                if hook is None:
                    continue
                try:
                    result = hook(current, declaration, context)
                except Exception as exc:
                    diagnostics.append(
                        self._failure(
                            plugin, "analyze_member", context.path, f"{declaration.name}.{current.name}", exc
                        )
                    )
                    partial = True
                    continue
                if result is None:
                    current = None
                    break
                current = result
            if current is not None:
                members.append(current)
        return replace(declaration, members=tuple(members), partial=partial)

    @staticmethod
    def _failure(plugin: Plugin, hook: str, path: str, target: str, exc: BaseException) -> Diagnostic:
        name = _plugin_name(plugin)
        logger.warning("Plugin %s failed in %s for %s: %s", name, hook, target, exc)
        logger.debug("Plugin failure details", exc_info=exc)
        return error(path, f"plugin '{name}' failed in {hook} for {target}: {exc}", PLUGIN_FAILURE)


def _plugin_name(plugin: object) -> str:
    return str(getattr(plugin, "name", type(plugin).__name__))


__all__ = ["PluginPipeline"]
