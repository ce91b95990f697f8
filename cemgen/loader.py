"""Expands source globs into the module files handed to the analyzer."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, List, Pattern, Sequence, Tuple

from .logging import get_logger

logger = get_logger("loader")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "bower_components",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
}


@dataclass(frozen=True)
class SourceFile:
    """A module to analyze: POSIX path relative to the root plus its text or a parsed tree."""

    path: str
    text: str | bytes | None = None
    tree: Any = field(default=None, compare=False, repr=False)


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` groups, including nested ones."""
    depth = 0
    start = -1
    for index, char in enumerate(pattern):
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0:
                options = _split_options(pattern[start + 1 : index])
                prefix, suffix = pattern[:start], pattern[index + 1 :]
                expanded: List[str] = []
                for option in options:
                    expanded.extend(expand_braces(prefix + option + suffix))
                return expanded
    return [pattern]


def _split_options(body: str) -> List[str]:
    options: List[str] = []
    depth = 0
    current: List[str] = []
    for char in body:
        if char == "," and depth == 0:
            options.append("".join(current))
            current = []
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current.append(char)
    options.append("".join(current))
    return options


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> Pattern[str]:
    """Translate a single brace-free glob into a regular expression."""
    if pattern.startswith("./"):
        pattern = pattern[2:]
    parts: List[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("^" + "".join(parts) + "$")


def split_patterns(globs: Sequence[str]) -> Tuple[List[Pattern[str]], List[Pattern[str]]]:
    include: List[Pattern[str]] = []
    exclude: List[Pattern[str]] = []
    for glob in globs:
        negated = glob.startswith("!")
        body = glob[1:] if negated else glob
        for expanded in expand_braces(body):
            (exclude if negated else include).append(compile_glob(expanded))
    return include, exclude


def matches(rel_path: str, globs: Sequence[str]) -> bool:
    include, exclude = split_patterns(globs)
    return _matches(rel_path, include, exclude)


def _matches(rel_path: str, include: Sequence[Pattern[str]], exclude: Sequence[Pattern[str]]) -> bool:
    if not any(pattern.match(rel_path) for pattern in include):
        return False
    return not any(pattern.match(rel_path) for pattern in exclude)


def _iter_files(root: Path) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            yield f"{rel_dir}/{filename}" if rel_dir else filename


class ModuleLoader:
    """Walks the project root to produce the source files matching the globs."""

    def discover(self, root: str | Path, globs: Sequence[str]) -> List[str]:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")
        include, exclude = split_patterns(globs)
        return sorted(path for path in _iter_files(root_path) if _matches(path, include, exclude))

    def load(self, root: str | Path, globs: Sequence[str]) -> List[SourceFile]:
        """Return matching files sorted by path, with their raw bytes."""
        root_path = Path(root).expanduser().resolve()
        files: List[SourceFile] = []
        for rel_path in self.discover(root_path, globs):
            try:
                data = (root_path / rel_path).read_bytes()
            except OSError as exc:
                logger.warning("Could not read %s: %s", rel_path, exc)
                continue
            files.append(SourceFile(path=rel_path, text=data))
        logger.debug("Loaded %d module(s) from %s", len(files), root_path)
        return files


__all__ = ["ModuleLoader", "SourceFile", "compile_glob", "expand_braces", "matches", "split_patterns"]
