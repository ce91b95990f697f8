"""Name and specifier index over analyzed modules and loaded packages."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .models import Declaration, Module, Package, Reference

DEFAULT_MAX_HOPS = 10

PLATFORM_BASES = re.compile(r"^(HTML\w*Element|SVG\w*Element|Element|Node|EventTarget)$")

_SOURCE_SUFFIXES = (".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx")
_SUFFIX_SWAPS = {
    ".js": (".ts", ".tsx"),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
    ".jsx": (".tsx",),
    ".ts": (".js",),
    ".tsx": (".jsx", ".js"),
}


def is_platform_base(name: str) -> bool:
    return PLATFORM_BASES.match(name) is not None


def is_relative(specifier: str) -> bool:
    return specifier.startswith(("./", "../", "/")) or specifier in {".", ".."}


def package_name(specifier: str) -> Tuple[str, str]:
    """Split a bare specifier into package name and subpath."""
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2]), "/".join(parts[2:])
    return parts[0], "/".join(parts[1:])


def _candidates(path: str) -> Iterator[str]:
    yield path
    stem, suffix = posixpath.splitext(path)
    for swapped in _SUFFIX_SWAPS.get(suffix, ()):
        yield stem + swapped
    if suffix not in _SOURCE_SUFFIXES:
        for extra in (".js", ".ts", ".tsx", ".mjs"):
            yield path + extra
    for index in ("index.js", "index.ts", "index.tsx"):
        yield posixpath.join(path, index)


@dataclass(frozen=True)
class SpecifierTarget:
    """Where an import specifier points.

    ``modules`` holds the candidate modules in lookup order: one module for a
    path specifier, every module of a loaded package for a bare package name.
    ``package`` names a dependency that was not supplied (external).
    """

    modules: Tuple[Module, ...] = ()
    package: Optional[str] = None

    @property
    def missing(self) -> bool:
        return not self.modules and self.package is None


class ModuleIndex:
    """Non-owning lookup tables built once every module has been analyzed."""

    def __init__(
        self,
        modules: Sequence[Module],
        packages: Sequence[Package] = (),
        *,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> None:
        self.max_hops = max_hops
        self._local: Dict[str, Module] = {module.path: module for module in modules}
        self._packages: Dict[str, Dict[str, Module]] = {
            package.name: {module.path: module for module in package.modules} for package in packages
        }
        self._declarations: Dict[Tuple[str, str, str], Tuple[Module, Declaration]] = {}
        for module in self.all_modules():
            for declaration in module.declarations:
                key = Reference(name=declaration.name, module=module.path, package=module.package).key
                self._declarations.setdefault(key, (module, declaration))
        self._exporters: Dict[str, Optional[Reference]] = {}
        self._exports: Dict[Tuple[str, str, str], Optional[Reference]] = {}

    # ------------------------------------------------------------------
    # Lookups

    def all_modules(self) -> Iterator[Module]:
        """Local modules by path, then package modules by package name and path."""
        for path in sorted(self._local):
            yield self._local[path]
        for name in sorted(self._packages):
            modules = self._packages[name]
            for path in sorted(modules):
                yield modules[path]

    @property
    def package_names(self) -> Set[str]:
        return set(self._packages)

    def module(self, path: str, package: Optional[str] = None) -> Optional[Module]:
        if package is None:
            return self._local.get(path)
        return self._packages.get(package, {}).get(path)

    def lookup(self, reference: Reference) -> Optional[Tuple[Module, Declaration]]:
        return self._declarations.get(reference.key)

    def is_internal(self, reference: Reference) -> bool:
        """True when the reference names a module that is part of this run."""
        if reference.module is None:
            return False
        return reference.package is None or reference.package in self._packages

    # ------------------------------------------------------------------
    # Specifiers and exports

    def resolve_specifier(self, importer: Module, specifier: str) -> SpecifierTarget:
        if is_relative(specifier):
            if specifier.startswith("/"):
                joined = posixpath.normpath(specifier.lstrip("/"))
            else:
                joined = posixpath.normpath(posixpath.join(posixpath.dirname(importer.path), specifier))
            scope = self._scope(importer.package)
            for candidate in _candidates(joined):
                module = scope.get(candidate)
                if module is not None:
                    return SpecifierTarget(modules=(module,))
            return SpecifierTarget()

        name, subpath = package_name(specifier)
        if name not in self._packages:
            return SpecifierTarget(package=name)
        modules = self._packages[name]
        if subpath:
            for candidate in _candidates(posixpath.normpath(subpath)):
                if candidate in modules:
                    return SpecifierTarget(modules=(modules[candidate],))
            return SpecifierTarget()
        return SpecifierTarget(modules=tuple(modules[path] for path in sorted(modules)))

    def _scope(self, package: Optional[str]) -> Dict[str, Module]:
        if package is None:
            return self._local
        return self._packages.get(package, {})

    def resolve_from(
        self, importer: Module, specifier: str, name: str, *, depth: int = 0
    ) -> Optional[Reference]:
        """Resolve ``name`` as exported by the module ``specifier`` points at."""
        target = self.resolve_specifier(importer, specifier)
        if target.package is not None:
            return Reference(name=name, package=target.package)
        for module in target.modules:
            reference = self.resolve_export(module, name, depth=depth + 1)
            if reference is not None:
                return reference
        return None

    def resolve_export(
        self, module: Module, name: str, *, depth: int = 0, _seen: Optional[Set[Tuple[str, str, str]]] = None
    ) -> Optional[Reference]:
        """Follow export records of ``module`` to the declaration exported as ``name``."""
        key = Reference(name=name, module=module.path, package=module.package).key
        if depth == 0 and key in self._exports:
            return self._exports[key]
        if depth > self.max_hops:
            return None
        seen = _seen if _seen is not None else set()
        if key in seen:
            return None
        seen.add(key)

        result: Optional[Reference] = None
        for record in module.exports:
            if record.is_star or record.name != name:
                continue
            if record.declaration is not None:
                result = record.declaration
            elif record.specifier is not None:
                result = self._follow(module, record.specifier, record.local_name, depth, seen)
            else:
                result = self.resolve_local(module, record.local_name, depth=depth, _seen=seen)
            if result is not None:
                break

        if result is None and name != "default":
            for record in module.exports:
                if not record.is_star or record.specifier is None:
                    continue
                result = self._follow(module, record.specifier, name, depth, seen)
                if result is not None and result.module is not None:
                    break
                result = None

        if depth == 0:
            self._exports[key] = result
        return result

    def _follow(
        self, module: Module, specifier: str, name: str, depth: int, seen: Set[Tuple[str, str, str]]
    ) -> Optional[Reference]:
        target = self.resolve_specifier(module, specifier)
        if target.package is not None:
            return Reference(name=name, package=target.package)
        for candidate in target.modules:
            reference = self.resolve_export(candidate, name, depth=depth + 1, _seen=seen)
            if reference is not None:
                return reference
        return None

    def resolve_local(
        self, module: Module, name: str, *, depth: int = 0, _seen: Optional[Set[Tuple[str, str, str]]] = None
    ) -> Optional[Reference]:
        """Resolve a name in scope of ``module``: a declaration or an import binding."""
        if module.declaration(name) is not None:
            return Reference(name=name, module=module.path, package=module.package)
        record = module.import_for(name)
        if record is None or record.imported_name == "*":
            return None
        return self._follow(module, record.specifier, record.imported_name, depth, _seen if _seen is not None else set())

    def export_names(self, module: Module, *, depth: int = 0) -> List[str]:
        """Names a module exports, including names pulled in by star exports."""
        names: List[str] = []
        for record in module.exports:
            if record.is_star:
                if depth >= self.max_hops or record.specifier is None:
                    continue
                for target in self.resolve_specifier(module, record.specifier).modules:
                    for name in self.export_names(target, depth=depth + 1):
                        if name != "default" and name not in names:
                            names.append(name)
            elif record.name not in names:
                names.append(record.name)
        return names

    def find_exporter(self, name: str) -> Optional[Reference]:
        """First module exporting ``name``: local modules by path, then packages."""
        if name in self._exporters:
            return self._exporters[name]
        found: Optional[Reference] = None
        for module in self.all_modules():
            if not any(record.name == name for record in module.exports):
                continue
            found = self.resolve_export(module, name)
            if found is not None and found.module is not None:
                break
            found = None
        self._exporters[name] = found
        return found


__all__ = [
    "DEFAULT_MAX_HOPS",
    "ModuleIndex",
    "PLATFORM_BASES",
    "SpecifierTarget",
    "is_platform_base",
    "is_relative",
    "package_name",
]
