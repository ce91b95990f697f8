"""Minimal JSDoc block parser for documentation annotations."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

_TAG_START = re.compile(r"^@(\w+)\s*(.*)$")
_NAMED_TAGS = {
    "attr",
    "attribute",
    "prop",
    "property",
    "fires",
    "event",
    "slot",
    "cssprop",
    "cssproperty",
    "csspart",
    "param",
    "arg",
    "argument",
}

PRIVACY_TAGS = ("private", "protected", "public")


@dataclass(frozen=True)
class JSDocTag:
    tag: str
    type_text: Optional[str] = None
    name: Optional[str] = None
    default: Optional[str] = None
    description: Optional[str] = None
    optional: bool = False


@dataclass(frozen=True)
class JSDoc:
    description: Optional[str] = None
    tags: Tuple[JSDocTag, ...] = ()

    @property
    def tag_names(self) -> FrozenSet[str]:
        return frozenset(tag.tag for tag in self.tags)

    def first(self, *names: str) -> Optional[JSDocTag]:
        for tag in self.tags:
            if tag.tag in names:
                return tag
        return None

    def all(self, *names: str) -> List[JSDocTag]:
        return [tag for tag in self.tags if tag.tag in names]

    def param(self, name: str) -> Optional[JSDocTag]:
        for tag in self.all("param", "arg", "argument"):
            if tag.name == name:
                return tag
        return None

    @property
    def privacy(self) -> Optional[str]:
        for name in PRIVACY_TAGS:
            if name in self.tag_names:
                return name
        return None

    @property
    def deprecated(self) -> Optional[str]:
        tag = self.first("deprecated")
        if tag is None:
            return None
        return tag.description or "true"

    @property
    def summary(self) -> Optional[str]:
        tag = self.first("summary")
        return tag.description if tag else None

    @property
    def type_text(self) -> Optional[str]:
        tag = self.first("type")
        return tag.type_text if tag else None


EMPTY = JSDoc()


def parse_jsdoc(comment: Optional[str]) -> JSDoc:
    """Parse a ``/** ... */`` comment into a description and tags."""
    if not comment:
        return EMPTY
    body = comment.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]

    lines = [_strip_star(line) for line in body.splitlines()]
    description_lines: List[str] = []
    raw_tags: List[List[str]] = []
    for line in lines:
        stripped = line.strip()
        # Tags may start mid-line in single-line blocks: /** @ignore */
        if stripped.startswith("@"):
            raw_tags.append([stripped])
        elif raw_tags:
            raw_tags[-1].append(stripped)
        else:
            description_lines.append(stripped)

    description = _join(description_lines)
    tags = tuple(_parse_tag(" ".join(part for part in chunk if part)) for chunk in raw_tags)
    return JSDoc(description=description, tags=tuple(tag for tag in tags if tag is not None))


def _strip_star(line: str) -> str:
    stripped = line.strip()
    if stripped.startswith("*"):
        stripped = stripped[1:]
    return stripped


def _join(lines: List[str]) -> Optional[str]:
    text = "\n".join(lines).strip()
    return text or None


def _parse_tag(text: str) -> Optional[JSDocTag]:
    match = _TAG_START.match(text)
    if match is None:
        return None
    tag = match.group(1)
    rest = match.group(2).strip()

    type_text: Optional[str] = None
    if rest.startswith("{"):
        type_text, rest = _read_braced(rest)

    if tag not in _NAMED_TAGS:
        return JSDocTag(tag=tag, type_text=type_text, description=_clean_description(rest))

    name: Optional[str] = None
    default: Optional[str] = None
    optional = False
    if rest.startswith("["):
        closing = rest.find("]")
        if closing != -1:
            inner = rest[1:closing].strip()
            rest = rest[closing + 1 :].strip()
            optional = True
            if "=" in inner:
                inner, default = inner.split("=", 1)
                default = default.strip() or None
            name = inner.strip() or None
    elif rest and rest != "-" and not rest.startswith("- "):
        parts = rest.split(None, 1)
        name = parts[0]
        rest = parts[1] if len(parts) > 1 else ""

    # A second braced type is allowed after the name for event payloads.
    if type_text is None and rest.startswith("{"):
        type_text, rest = _read_braced(rest)

    return JSDocTag(
        tag=tag,
        type_text=type_text,
        name=name,
        default=default,
        description=_clean_description(rest),
        optional=optional,
    )


def _read_braced(text: str) -> Tuple[Optional[str], str]:
    depth = 0
    for index, char in enumerate(text):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                inner = text[1:index].strip()
                return (inner or None), text[index + 1 :].strip()
    return None, text


def _clean_description(text: str) -> Optional[str]:
    text = text.strip()
    if text.startswith("-"):
        text = text[1:].strip()
    return text or None


__all__ = ["EMPTY", "JSDoc", "JSDocTag", "PRIVACY_TAGS", "parse_jsdoc"]
