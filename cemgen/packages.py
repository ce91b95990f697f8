"""Loads dependency manifests as read-only packages used while linking."""

from __future__ import annotations

import json
import posixpath
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .diagnostics import AnalysisError, Diagnostic, warning
from .logging import get_logger
from .models import (
    Attribute,
    ClassDeclaration,
    ClassMember,
    CssPart,
    CssProperty,
    CustomElementDefinition,
    Declaration,
    Event,
    ExportRecord,
    FunctionDeclaration,
    InheritanceEdge,
    MixinDeclaration,
    Module,
    Package,
    Parameter,
    Reference,
    Slot,
    VariableDeclaration,
)

logger = get_logger("packages")


class PackageLoadError(AnalysisError):
    """Raised when a dependency manifest cannot be read."""


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _type_text(payload: Mapping[str, Any]) -> Optional[str]:
    value = payload.get("type")
    if isinstance(value, Mapping):
        return _text(value.get("text"))
    return None


def _deprecated(value: Any) -> Optional[str]:
    if value is None or value is False:
        return None
    if value is True:
        return "true"
    return str(value)


def normalize_path(path: str) -> str:
    normalized = posixpath.normpath(path.replace("\\", "/"))
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


class _PackageReader:
    def __init__(self, name: str) -> None:
        self._name = name

    def reference(self, payload: Any) -> Optional[Reference]:
        if not isinstance(payload, Mapping) or not payload.get("name"):
            return None
        module = payload.get("module")
        package = payload.get("package")
        if module is not None:
            return Reference(
                name=str(payload["name"]),
                module=normalize_path(str(module)),
                package=str(package) if package else self._name,
            )
        return Reference(name=str(payload["name"]), package=_text(package))

    def edge(self, payload: Any) -> Optional[InheritanceEdge]:
        reference = self.reference(payload)
        if reference is None:
            return None
        resolved = reference if reference.module is not None else None
        return InheritanceEdge(name=reference.name, specifier=reference.package, resolved=resolved)

    def parameters(self, payloads: Iterable[Any]) -> Tuple[Parameter, ...]:
        return tuple(
            Parameter(
                name=str(item.get("name", "")),
                type_text=_type_text(item),
                default=_text(item.get("default")),
                optional=bool(item.get("optional", False)),
                rest=bool(item.get("rest", False)),
                description=_text(item.get("description")),
            )
            for item in payloads
            if isinstance(item, Mapping)
        )

    def member(self, item: Mapping[str, Any]) -> ClassMember:
        returned = item.get("return")
        return ClassMember(
            name=str(item.get("name", "")),
            kind=str(item.get("kind", "field")),
            static=bool(item.get("static", False)),
            privacy=str(item.get("privacy", "public")),
            description=_text(item.get("description")),
            deprecated=_deprecated(item.get("deprecated")),
            type_text=_type_text(item),
            default=_text(item.get("default")),
            parameters=self.parameters(item.get("parameters", ())),
            return_type=_type_text(returned) if isinstance(returned, Mapping) else None,
            readonly=bool(item.get("readonly", False)),
            attribute=_text(item.get("attribute")),
            reflects=bool(item.get("reflects", False)),
            inherited_from=self.reference(item.get("inheritedFrom")),
        )

    def declaration(self, item: Mapping[str, Any]) -> Optional[Declaration]:
        kind = item.get("kind")
        common: Dict[str, Any] = {
            "name": str(item.get("name", "")),
            "description": _text(item.get("description")),
            "summary": _text(item.get("summary")),
            "deprecated": _deprecated(item.get("deprecated")),
        }
        if kind in {"class", "mixin"}:
            fields: Dict[str, Any] = dict(
                common,
                members=tuple(self.member(entry) for entry in item.get("members", ()) if isinstance(entry, Mapping)),
                attributes=tuple(
                    Attribute(
                        name=str(entry.get("name", "")),
                        field_name=_text(entry.get("fieldName")),
                        type_text=_type_text(entry),
                        default=_text(entry.get("default")),
                        description=_text(entry.get("description")),
                        deprecated=_deprecated(entry.get("deprecated")),
                        inherited_from=self.reference(entry.get("inheritedFrom")),
                    )
                    for entry in item.get("attributes", ())
                    if isinstance(entry, Mapping)
                ),
                events=tuple(
                    Event(
                        name=str(entry.get("name", "")),
                        type_text=_type_text(entry),
                        description=_text(entry.get("description")),
                        deprecated=_deprecated(entry.get("deprecated")),
                        inherited_from=self.reference(entry.get("inheritedFrom")),
                    )
                    for entry in item.get("events", ())
                    if isinstance(entry, Mapping)
                ),
                slots=tuple(
                    Slot(name=str(entry.get("name", "")), description=_text(entry.get("description")))
                    for entry in item.get("slots", ())
                    if isinstance(entry, Mapping)
                ),
                css_properties=tuple(
                    CssProperty(
                        name=str(entry.get("name", "")),
                        description=_text(entry.get("description")),
                        default=_text(entry.get("default")),
                        syntax=_text(entry.get("syntax")),
                    )
                    for entry in item.get("cssProperties", ())
                    if isinstance(entry, Mapping)
                ),
                css_parts=tuple(
                    CssPart(name=str(entry.get("name", "")), description=_text(entry.get("description")))
                    for entry in item.get("cssParts", ())
                    if isinstance(entry, Mapping)
                ),
                superclass=self.edge(item.get("superclass")),
                mixins=tuple(
                    edge for edge in (self.edge(entry) for entry in item.get("mixins", ())) if edge is not None
                ),
                tag_name=_text(item.get("tagName")),
            )
            if kind == "mixin":
                return MixinDeclaration(parameters=self.parameters(item.get("parameters", ())), **fields)
            return ClassDeclaration(**fields)
        if kind == "function":
            returned = item.get("return")
            return FunctionDeclaration(
                parameters=self.parameters(item.get("parameters", ())),
                return_type=_type_text(returned) if isinstance(returned, Mapping) else None,
                **common,
            )
        if kind == "variable":
            return VariableDeclaration(type_text=_type_text(item), default=_text(item.get("default")), **common)
        return None

    def module(self, payload: Mapping[str, Any]) -> Module:
        path = normalize_path(str(payload.get("path", "")))
        declarations = tuple(
            declaration
            for declaration in (
                self.declaration(item) for item in payload.get("declarations", ()) if isinstance(item, Mapping)
            )
            if declaration is not None
        )
        exports: List[ExportRecord] = []
        definitions: List[CustomElementDefinition] = []
        for item in payload.get("exports", ()):
            if not isinstance(item, Mapping):
                continue
            reference = self.reference(item.get("declaration"))
            if reference is None:
                continue
            if item.get("kind") == "custom-element-definition":
                definitions.append(
                    CustomElementDefinition(
                        tag_name=str(item.get("name", "")),
                        class_name=reference.name,
                        module=path,
                        declaration=reference,
                    )
                )
            else:
                exports.append(
                    ExportRecord(name=str(item.get("name", "")), local_name=reference.name, declaration=reference)
                )
        return Module(
            path=path,
            declarations=declarations,
            exports=tuple(exports),
            definitions=tuple(definitions),
            package=self._name,
        )


def load_package(name: str, document: Mapping[str, Any]) -> Package:
    """Convert a manifest document produced for dependency ``name`` into a Package."""
    reader = _PackageReader(name)
    modules = tuple(
        reader.module(payload) for payload in document.get("modules", ()) if isinstance(payload, Mapping)
    )
    return Package(name=name, modules=modules)


def load_package_file(name: str, path: Path) -> Package:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise PackageLoadError(f"Failed to read manifest for {name} at {path}: {exc}") from exc
    if not isinstance(document, Mapping):
        raise PackageLoadError(f"Manifest for {name} at {path} must be a JSON object")
    return load_package(name, document)


def discover_manifest(root: Path, name: str) -> Optional[Path]:
    """Locate a dependency's manifest through its package.json ``customElements`` field."""
    package_dir = root / "node_modules" / name
    package_json = package_dir / "package.json"
    if not package_json.is_file():
        return None
    try:
        payload = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    manifest = payload.get("customElements") if isinstance(payload, Mapping) else None
    if not isinstance(manifest, str) or not manifest:
        return None
    candidate = package_dir / manifest
    return candidate if candidate.is_file() else None


def dependency_names(root: Path) -> List[str]:
    """Names listed under ``dependencies`` in the project's package.json."""
    package_json = root / "package.json"
    try:
        payload = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return []
    dependencies = payload.get("dependencies") if isinstance(payload, Mapping) else None
    if not isinstance(dependencies, Mapping):
        return []
    return sorted(str(name) for name in dependencies)


def load_dependencies(
    root: Path, specs: Sequence[str | Mapping[str, Any]]
) -> Tuple[List[Package], List[Diagnostic]]:
    """Load every configured dependency; missing manifests become warnings."""
    packages: List[Package] = []
    diagnostics: List[Diagnostic] = []
    for spec in specs:
        if isinstance(spec, Mapping):
            name = str(spec.get("name", ""))
            manifest_value = spec.get("manifest")
            manifest = (root / str(manifest_value)) if manifest_value else discover_manifest(root, name)
        else:
            name = str(spec)
            manifest = discover_manifest(root, name)
        if not name:
            continue
        if manifest is None or not manifest.is_file():
            message = f"no custom elements manifest found for dependency '{name}'"
            logger.warning(message)
            diagnostics.append(warning("", message))
            continue
        try:
            packages.append(load_package_file(name, manifest))
        except PackageLoadError as exc:
            logger.warning(str(exc))
            diagnostics.append(warning("", str(exc)))
    packages.sort(key=lambda package: package.name)
    return packages, diagnostics


__all__ = [
    "PackageLoadError",
    "dependency_names",
    "discover_manifest",
    "load_dependencies",
    "load_package",
    "load_package_file",
    "normalize_path",
]
