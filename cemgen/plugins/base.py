"""Base classes for analysis plugins."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..jsdoc import JSDoc, parse_jsdoc
from ..models import ClassDeclaration, ClassMember, Module
from ..syntax import (
    Decorator,
    ParsedSource,
    decorators,
    jsdoc_comment,
    literal_text,
    object_entries,
    string_value,
)


@dataclass(frozen=True)
class ModuleContext:
    """Read-only view of the module a hook is running for."""

    path: str
    parsed: ParsedSource
    module: Module

    @property
    def source(self) -> bytes:
        return self.parsed.source

    def text(self, node: Any) -> str:
        return self.parsed.text(node)

    def decorators(self, node: Any) -> List[Decorator]:
        if node is None:
            return []
        return decorators(self.parsed, node)

    def decorator(self, node: Any, *names: str) -> Optional[Decorator]:
        for item in self.decorators(node):
            if item.name in names:
                return item
        return None

    def jsdoc(self, node: Any) -> JSDoc:
        return parse_jsdoc(jsdoc_comment(self.parsed, node)) if node is not None else parse_jsdoc(None)

    def object_entries(self, node: Any) -> Dict[str, Any]:
        return object_entries(self.parsed, node)

    def string_value(self, node: Any) -> Optional[str]:
        return string_value(self.parsed, node)

    def literal_text(self, node: Any) -> Optional[str]:
        return literal_text(self.parsed, node)


class Plugin(ABC):
    """Contract for plugins that refine analyzed modules.

    Every hook receives the current immutable value and returns a new one.
    The defaults hand the value back unchanged so subclasses only override
    the hooks they need.
    """

    name = "plugin"

    def analyze_class(
        self, declaration: ClassDeclaration, context: ModuleContext
    ) -> Optional[ClassDeclaration]:
        """Refine a class or mixin declaration; None keeps it unchanged."""
        return declaration

    def analyze_member(
        self, member: ClassMember, declaration: ClassDeclaration, context: ModuleContext
    ) -> Optional[ClassMember]:
        """Refine a member of ``declaration``; None drops the member."""
        return member

    def analyze_module(self, module: Module, context: ModuleContext) -> Optional[Module]:
        """Refine the whole module; None keeps it unchanged."""
        return module


__all__ = ["ModuleContext", "Plugin"]
