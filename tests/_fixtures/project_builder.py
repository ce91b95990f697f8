"""Helper utilities for constructing temporary web component projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, List, Mapping, Sequence

from cemgen.config import merge_globs_and_excludes
from cemgen.loader import ModuleLoader, SourceFile

FIXTURES = Path(__file__).resolve().parent


class ProjectBuilder:
    """Utility for writing source files into a throwaway project and loading them."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()
        self._loader = ModuleLoader()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_json(self, relative: str, payload: Any) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        return path

    def sources(self, globs: Sequence[str] = ()) -> List[SourceFile]:
        """Load the project's modules with the default globs and ignores."""
        return self._loader.load(self.root, merge_globs_and_excludes(cli_globs=globs))

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


def source(path: str, text: str) -> SourceFile:
    """Build an in-memory source file from dedented text."""
    return SourceFile(path=path, text=textwrap.dedent(text).lstrip("\n"))


def fixture_text(*parts: str) -> str:
    return FIXTURES.joinpath(*parts).read_text(encoding="utf-8")


__all__ = ["FIXTURES", "ProjectBuilder", "fixture_text", "source"]
