"""Core data models shared across cemgen components.

Every model is a frozen dataclass. Pipeline phases never mutate a value they
receive; they build a new one with :func:`dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Iterator, Optional, Tuple

from .diagnostics import Diagnostic

SCHEMA_VERSION = "1.0.0"
GLOBAL_PACKAGE = "global:"

PUBLIC = "public"
PROTECTED = "protected"
PRIVATE = "private"


@dataclass(frozen=True)
class SourceLocation:
    """1-indexed line and 0-indexed column of a construct in its module."""

    line: int
    column: int = 0


@dataclass(frozen=True)
class Reference:
    """Points at a declaration by name inside a module or a package."""

    name: str
    module: Optional[str] = None
    package: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.package or "", self.module or "", self.name)

    @property
    def is_global(self) -> bool:
        return self.package == GLOBAL_PACKAGE


@dataclass(frozen=True)
class ImportRecord:
    local_name: str
    imported_name: str
    specifier: str


@dataclass(frozen=True)
class ExportRecord:
    """An export statement entry.

    ``local_name`` is the name inside the module the export reads from: the
    current module when ``specifier`` is None, otherwise the target module.
    A star export (``export * from``) has ``name == "*"``. ``declaration`` is
    filled by the module linker.
    """

    name: str
    local_name: str
    specifier: Optional[str] = None
    location: Optional[SourceLocation] = None
    declaration: Optional[Reference] = None

    @property
    def is_star(self) -> bool:
        return self.name == "*"


@dataclass(frozen=True)
class Parameter:
    name: str
    type_text: Optional[str] = None
    default: Optional[str] = None
    optional: bool = False
    rest: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class ClassMember:
    name: str
    kind: str = "field"
    static: bool = False
    privacy: str = PUBLIC
    tags: FrozenSet[str] = frozenset()
    description: Optional[str] = None
    deprecated: Optional[str] = None
    type_text: Optional[str] = None
    default: Optional[str] = None
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None
    readonly: bool = False
    attribute: Optional[str] = None
    reflects: bool = False
    inherited_from: Optional[Reference] = None
    location: Optional[SourceLocation] = None
    node: Any = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> Tuple[str, bool]:
        return (self.name, self.static)


@dataclass(frozen=True)
class Attribute:
    name: str
    field_name: Optional[str] = None
    type_text: Optional[str] = None
    default: Optional[str] = None
    description: Optional[str] = None
    deprecated: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    inherited_from: Optional[Reference] = None

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class Event:
    name: str
    type_text: Optional[str] = None
    description: Optional[str] = None
    deprecated: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    inherited_from: Optional[Reference] = None

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class Slot:
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class CssProperty:
    name: str
    description: Optional[str] = None
    default: Optional[str] = None
    syntax: Optional[str] = None


@dataclass(frozen=True)
class CssPart:
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class InheritanceEdge:
    """Weak reference from a class to a superclass or applied mixin.

    ``specifier`` is the import specifier the name was imported from, used as
    the module hint while linking. ``resolved`` stays None for external bases.
    """

    name: str
    specifier: Optional[str] = None
    resolved: Optional[Reference] = None


@dataclass(frozen=True)
class Declaration:
    name: str
    kind: str = ""
    tags: FrozenSet[str] = frozenset()
    description: Optional[str] = None
    summary: Optional[str] = None
    deprecated: Optional[str] = None
    location: Optional[SourceLocation] = None
    partial: bool = False
    node: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class VariableDeclaration(Declaration):
    kind: str = "variable"
    type_text: Optional[str] = None
    default: Optional[str] = None


@dataclass(frozen=True)
class FunctionDeclaration(Declaration):
    kind: str = "function"
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None


@dataclass(frozen=True)
class ClassDeclaration(Declaration):
    kind: str = "class"
    members: Tuple[ClassMember, ...] = ()
    attributes: Tuple[Attribute, ...] = ()
    events: Tuple[Event, ...] = ()
    slots: Tuple[Slot, ...] = ()
    css_properties: Tuple[CssProperty, ...] = ()
    css_parts: Tuple[CssPart, ...] = ()
    superclass: Optional[InheritanceEdge] = None
    mixins: Tuple[InheritanceEdge, ...] = ()
    tag_name: Optional[str] = None

    def member(self, name: str, *, static: bool = False) -> Optional[ClassMember]:
        for candidate in self.members:
            if candidate.name == name and candidate.static == static:
                return candidate
        return None


@dataclass(frozen=True)
class MixinDeclaration(ClassDeclaration):
    kind: str = "mixin"
    parameters: Tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class CustomElementDefinition:
    tag_name: str
    class_name: str
    module: str
    location: Optional[SourceLocation] = None
    declaration: Optional[Reference] = None


@dataclass(frozen=True)
class Module:
    path: str
    declarations: Tuple[Declaration, ...] = ()
    exports: Tuple[ExportRecord, ...] = ()
    imports: Tuple[ImportRecord, ...] = ()
    definitions: Tuple[CustomElementDefinition, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()
    ignored_names: FrozenSet[str] = frozenset()
    partial: bool = False
    package: Optional[str] = None

    def declaration(self, name: str) -> Optional[Declaration]:
        for candidate in self.declarations:
            if candidate.name == name:
                return candidate
        return None

    def import_for(self, local_name: str) -> Optional[ImportRecord]:
        for record in self.imports:
            if record.local_name == local_name:
                return record
        return None

    def class_declarations(self) -> Iterator[ClassDeclaration]:
        for declaration in self.declarations:
            if isinstance(declaration, ClassDeclaration):
                yield declaration

    def with_diagnostics(self, *diagnostics: Diagnostic) -> "Module":
        if not diagnostics:
            return self
        return replace(self, diagnostics=self.diagnostics + tuple(diagnostics))


@dataclass(frozen=True)
class Package:
    """A dependency's previously built manifest, loaded read-only."""

    name: str
    modules: Tuple[Module, ...] = ()


@dataclass(frozen=True)
class Manifest:
    schema_version: str = SCHEMA_VERSION
    modules: Tuple[Module, ...] = ()
    definitions: Tuple[CustomElementDefinition, ...] = ()
    packages: Tuple[Package, ...] = ()

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        collected: Tuple[Diagnostic, ...] = ()
        for module in self.modules:
            collected += module.diagnostics
        return collected


__all__ = [
    "Attribute",
    "ClassDeclaration",
    "ClassMember",
    "CssPart",
    "CssProperty",
    "CustomElementDefinition",
    "Declaration",
    "Event",
    "ExportRecord",
    "FunctionDeclaration",
    "GLOBAL_PACKAGE",
    "ImportRecord",
    "InheritanceEdge",
    "Manifest",
    "MixinDeclaration",
    "Module",
    "PRIVATE",
    "PROTECTED",
    "PUBLIC",
    "Package",
    "Parameter",
    "Reference",
    "SCHEMA_VERSION",
    "Slot",
    "SourceLocation",
    "VariableDeclaration",
]
