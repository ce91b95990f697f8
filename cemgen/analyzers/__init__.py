"""Per-module analysis: parse, collect, run plugins and apply ``@ignore``."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

from ..diagnostics import PARSE_FAILURE, SYNTAX_ERROR, Diagnostic, ParseFailure, error, warning
from ..logging import get_logger
from ..models import CustomElementDefinition, Module
from ..plugins.pipeline import PluginPipeline
from ..syntax import ParsedSource, SyntaxProvider
from ..visibility import apply_ignore
from .classes import ClassAnalyzer
from .collector import DeclarationCollector, collect_module

logger = get_logger("analyzers")


@dataclass(frozen=True)
class ModuleResult:
    """Outcome of analyzing one module; ``module`` is None when it failed to parse."""

    path: str
    module: Optional[Module]
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return self.module is not None


class ModuleAnalyzer:
    """Runs the per-module phases that need no knowledge of other modules."""

    def __init__(
        self,
        syntax: Optional[SyntaxProvider] = None,
        pipeline: Optional[PluginPipeline] = None,
    ) -> None:
        self._syntax = syntax or SyntaxProvider()
        self._pipeline = pipeline or PluginPipeline()

    @property
    def pipeline(self) -> PluginPipeline:
        return self._pipeline

    def analyze(self, path: str, text: str | bytes | None = None, tree: Any = None) -> ModuleResult:
        try:
            if tree is not None:
                parsed = self._syntax.wrap(path, tree, text if isinstance(text, str) else None)
            else:
                parsed = self._syntax.parse(path, text if text is not None else "")
        except ParseFailure as exc:
            logger.warning("Skipping %s: %s", path, exc.reason)
            return ModuleResult(path=path, module=None, diagnostics=(error(path, exc.reason, PARSE_FAILURE),))

        module = self.analyze_parsed(parsed)
        return ModuleResult(path=path, module=module, diagnostics=module.diagnostics)

    def analyze_parsed(self, parsed: ParsedSource) -> Module:
        module = collect_module(parsed)
        if parsed.root.has_error:
            logger.debug("Syntax errors in %s; analyzing recovered tree", parsed.path)
            module = module.with_diagnostics(
                warning(parsed.path, "source contains syntax errors; results may be incomplete", SYNTAX_ERROR)
            )
        module = self._pipeline.run(module, parsed)
        module = register_tagged_classes(module)
        return apply_ignore(module)


def register_tagged_classes(module: Module) -> Module:
    """Add a registration for classes that carry a tag name but were never defined."""
    registered_tags = {definition.tag_name for definition in module.definitions}
    added: List[CustomElementDefinition] = []
    for declaration in module.class_declarations():
        tag_name = declaration.tag_name
        if not tag_name or tag_name in registered_tags:
            continue
        added.append(
            CustomElementDefinition(
                tag_name=tag_name,
                class_name=declaration.name,
                module=module.path,
                location=declaration.location,
            )
        )
        registered_tags.add(tag_name)
    if not added:
        return module
    return replace(module, definitions=module.definitions + tuple(added))


__all__ = [
    "ClassAnalyzer",
    "DeclarationCollector",
    "ModuleAnalyzer",
    "ModuleResult",
    "collect_module",
    "register_tagged_classes",
]
