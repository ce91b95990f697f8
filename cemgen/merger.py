"""Combines linked modules into one manifest and validates the emission view."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from .diagnostics import DUPLICATE_TAG, ManifestValidationError, warning
from .emitter import to_document
from .logging import get_logger
from .models import CustomElementDefinition, Manifest, Module, Package
from .validators import Validator, build_context, default_validators
from .visibility import emission_view

logger = get_logger("merger")


@dataclass(frozen=True)
class MergedManifest:
    """The full linked manifest plus the validated document built from its emission view."""

    manifest: Manifest
    document: Dict[str, Any]


class ManifestMerger:
    def __init__(
        self,
        packages: Sequence[Package] = (),
        validators: Optional[Sequence[Validator]] = None,
    ) -> None:
        self._packages = tuple(packages)
        self._validators = list(validators) if validators is not None else default_validators()

    def merge(self, modules: Sequence[Module]) -> MergedManifest:
        ordered = sorted(modules, key=lambda module: module.path)
        definitions: List[CustomElementDefinition] = []
        seen_pairs: Set[Tuple[str, Tuple[str, str, str]]] = set()
        owners: Dict[str, CustomElementDefinition] = {}
        merged: List[Module] = []

        for module in ordered:
            kept: List[CustomElementDefinition] = []
            warnings = []
            for definition in module.definitions:
                if definition.declaration is None:
                    continue
                pair = (definition.tag_name, definition.declaration.key)
                if pair in seen_pairs:
                    continue
                seen_pairs.add(pair)
                owner = owners.get(definition.tag_name)
                if owner is None:
                    owners[definition.tag_name] = definition
                elif owner.declaration != definition.declaration:
                    message = (
                        f"tag '{definition.tag_name}' is registered for {definition.class_name} "
                        f"and already for {owner.class_name} in {owner.module}"
                    )
                    logger.warning(message)
                    warnings.append(warning(module.path, message, DUPLICATE_TAG))
                kept.append(definition)
            definitions.extend(kept)
            merged.append(replace(module, definitions=tuple(kept)).with_diagnostics(*warnings))

        manifest = Manifest(modules=tuple(merged), definitions=tuple(definitions), packages=self._packages)
        return MergedManifest(manifest=manifest, document=self.validate(manifest))

    def validate(self, manifest: Manifest) -> Dict[str, Any]:
        """Validate the emission view of ``manifest`` and return its document."""
        view = emission_view(manifest)
        document = to_document(view, filtered=True)
        context = build_context(view, document)
        issues = [issue for validator in self._validators for issue in validator.validate(context)]
        if issues:
            raise ManifestValidationError(
                f"Merged manifest failed validation with {len(issues)} issue(s)", issues
            )
        return document


__all__ = ["ManifestMerger", "MergedManifest"]
