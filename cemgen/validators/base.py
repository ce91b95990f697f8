"""Core validation data structures for the merged manifest."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Set, Tuple

from ..diagnostics import ManifestValidationError, ValidationIssue
from ..models import Manifest, Reference


@dataclass
class ValidationContext:
    """Context shared with validators when checking the emission view."""

    view: Manifest
    document: Dict[str, Any]
    declarations: Set[Tuple[str, str, str]]
    loaded_packages: Set[str]

    def is_internal(self, reference: Reference) -> bool:
        if reference.module is None:
            return False
        return reference.package is None or reference.package in self.loaded_packages

    def resolves(self, reference: Reference) -> bool:
        return reference.key in self.declarations


class Validator(Protocol):
    """Protocol implemented by manifest validators."""

    name: str

    def validate(self, context: ValidationContext) -> List[ValidationIssue]:
        """Run validation and return any issues."""


def build_context(view: Manifest, document: Dict[str, Any]) -> ValidationContext:
    """Collect every declaration key a reference in ``view`` may point at."""
    declarations: Set[Tuple[str, str, str]] = set()
    for module in view.modules:
        for declaration in module.declarations:
            declarations.add(Reference(name=declaration.name, module=module.path).key)
    for package in view.packages:
        for module in package.modules:
            for declaration in module.declarations:
                declarations.add(Reference(name=declaration.name, module=module.path, package=package.name).key)
    return ValidationContext(
        view=view,
        document=document,
        declarations=declarations,
        loaded_packages={package.name for package in view.packages},
    )


__all__ = [
    "ManifestValidationError",
    "ValidationContext",
    "ValidationIssue",
    "Validator",
    "build_context",
]
