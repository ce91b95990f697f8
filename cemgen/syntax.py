"""Tree-sitter powered syntax provider and node helpers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .diagnostics import ParseFailure
from .models import SourceLocation

try:  # pragma: no cover - optional dependency
    from tree_sitter import Parser
    from tree_sitter_language_pack import get_parser

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    Parser = None  # type: ignore[assignment]
    get_parser = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False


_LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

CLASS_NODES = {"class_declaration", "abstract_class_declaration", "class"}
FUNCTION_NODES = {
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "generator_function",
}
VARIABLE_NODES = {"lexical_declaration", "variable_declaration"}


@dataclass
class ParsedSource:
    """A syntax tree together with the bytes its offsets point into."""

    path: str
    language: str
    tree: Any
    source: bytes
    offset: int = 0

    @property
    def root(self) -> Any:
        return self.tree.root_node

    def text(self, node: Any) -> str:
        if node is None:
            return ""
        start = node.start_byte - self.offset
        end = node.end_byte - self.offset
        return self.source[start:end].decode("utf-8", errors="replace")


class SyntaxProvider:
    """Turns module text into tree-sitter syntax trees.

    Parsers are cached per thread because tree-sitter parsers are not safe to
    share between the analysis workers.
    """

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self._enabled = TREE_SITTER_AVAILABLE if enabled is None else enabled
        self._local = threading.local()

    @staticmethod
    def language_for(path: str) -> Optional[str]:
        return _LANGUAGE_BY_SUFFIX.get(PurePosixPath(path).suffix.lower())

    def parse(self, path: str, text: str | bytes) -> ParsedSource:
        language = self.language_for(path)
        if language is None:
            raise ParseFailure(path, "unsupported file type")
        if isinstance(text, bytes):
            try:
                text.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ParseFailure(path, f"source is not valid UTF-8 ({exc.reason})") from exc
            source = text
        else:
            source = text.encode("utf-8")
        parser = self._get_parser(path, language)
        try:
            tree = parser.parse(source)
        except Exception as exc:  # tree-sitter raises plain ValueError/RuntimeError
            raise ParseFailure(path, str(exc)) from exc
        return ParsedSource(path=path, language=language, tree=tree, source=source)

    def wrap(self, path: str, tree: Any, text: str | None = None) -> ParsedSource:
        """Adopt a tree parsed elsewhere."""
        language = self.language_for(path) or "javascript"
        root = tree.root_node
        if text is not None:
            return ParsedSource(path=path, language=language, tree=tree, source=text.encode("utf-8"))
        source = root.text if root.text is not None else b""
        return ParsedSource(
            path=path, language=language, tree=tree, source=source, offset=root.start_byte
        )

    def _get_parser(self, path: str, language: str) -> Parser:
        if not self._enabled:
            raise ParseFailure(path, "tree-sitter grammars are not installed")
        parsers: Dict[str, Any] = getattr(self._local, "parsers", None) or {}
        parser = parsers.get(language)
        if parser is None:
            parser = get_parser(language)
            parsers[language] = parser
            self._local.parsers = parsers
        return parser


# ---------------------------------------------------------------------------
# Node helpers


@dataclass(frozen=True)
class Decorator:
    name: str
    arguments: Tuple[Any, ...]
    node: Any


def location(node: Any) -> SourceLocation:
    point = node.start_point
    return SourceLocation(line=point[0] + 1, column=point[1])


def field(node: Any, *names: str) -> Any:
    if node is None:
        return None
    for name in names:
        child = node.child_by_field_name(name)
        if child is not None:
            return child
    return None


def first_child(node: Any, types: Sequence[str] | set[str]) -> Any:
    if node is None:
        return None
    for child in node.children:
        if child.type in types:
            return child
    return None


def has_keyword(node: Any, keyword: str) -> bool:
    """True when ``node`` has a direct child token of the given type."""
    for child in node.children:
        if keyword in child.type.split(" "):
            return True
    return False


def iter_descendants(node: Any, *, skip: set[str] | None = None) -> Iterator[Any]:
    """Yield descendants in pre-order, not entering nodes whose type is in ``skip``."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        if skip and current.type in skip:
            continue
        stack.extend(reversed(current.children))


def string_value(parsed: ParsedSource, node: Any) -> Optional[str]:
    """Return the literal value of a string or substitution-free template."""
    if node is None:
        return None
    if node.type == "string":
        return parsed.text(node)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            return None
        return parsed.text(node)[1:-1]
    return None


def jsdoc_comment(parsed: ParsedSource, node: Any) -> Optional[str]:
    """Return the ``/** */`` block directly preceding a construct.

    Variable declarators and exported declarations are documented on their
    enclosing statement, so the lookup climbs to it first.
    """
    anchor = node
    if anchor.type == "variable_declarator" and anchor.parent is not None:
        anchor = anchor.parent
    if anchor.parent is not None and anchor.parent.type == "export_statement":
        anchor = anchor.parent
    previous = anchor.prev_named_sibling
    if previous is None or previous.type != "comment":
        return None
    text = parsed.text(previous)
    if not text.startswith("/**"):
        return None
    return text


def decorators(parsed: ParsedSource, node: Any) -> List[Decorator]:
    found: List[Any] = []
    parent = node.parent
    if parent is not None and parent.type == "export_statement":
        found.extend(child for child in parent.children if child.type == "decorator")
    found.extend(child for child in node.children if child.type == "decorator")

    result: List[Decorator] = []
    for item in found:
        expressions = item.named_children
        if not expressions:
            continue
        expression = expressions[0]
        if expression.type == "call_expression":
            function = field(expression, "function")
            arguments = field(expression, "arguments")
            args = tuple(arguments.named_children) if arguments is not None else ()
            result.append(Decorator(name=parsed.text(function), arguments=args, node=item))
        else:
            result.append(Decorator(name=parsed.text(expression), arguments=(), node=item))
    return result


def object_entries(parsed: ParsedSource, node: Any) -> Dict[str, Any]:
    """Map the keys of an object literal to their value nodes."""
    entries: Dict[str, Any] = {}
    if node is None or node.type != "object":
        return entries
    for child in node.named_children:
        if child.type == "pair":
            key_node = field(child, "key")
            key = string_value(parsed, key_node)
            if key is None:
                key = parsed.text(key_node)
            entries[key] = field(child, "value")
        elif child.type == "shorthand_property_identifier":
            entries[parsed.text(child)] = child
    return entries


def literal_text(parsed: ParsedSource, node: Any) -> Optional[str]:
    """Return a literal's value as text (strings unquoted), or None."""
    if node is None:
        return None
    value = string_value(parsed, node)
    if value is not None:
        return value
    return parsed.text(node)


def unwrap_expression(node: Any) -> Any:
    """Strip parentheses and TypeScript ``as``/``satisfies`` wrappers."""
    while node is not None and node.type in {
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
    }:
        named = node.named_children
        if not named:
            break
        node = named[0]
    return node


def type_annotation_text(parsed: ParsedSource, node: Any) -> Optional[str]:
    if node is None:
        return None
    text = parsed.text(node).strip()
    if text.startswith(":"):
        text = text[1:].strip()
    return text or None


__all__ = [
    "CLASS_NODES",
    "Decorator",
    "FUNCTION_NODES",
    "ParsedSource",
    "SyntaxProvider",
    "TREE_SITTER_AVAILABLE",
    "VARIABLE_NODES",
    "decorators",
    "field",
    "first_child",
    "has_keyword",
    "iter_descendants",
    "jsdoc_comment",
    "literal_text",
    "location",
    "object_entries",
    "string_value",
    "type_annotation_text",
    "unwrap_expression",
]
