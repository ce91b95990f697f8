"""Tests for the per-module analysis driver."""

from __future__ import annotations

import pytest

from cemgen.analyzers import ModuleAnalyzer
from cemgen.diagnostics import PARSE_FAILURE, SYNTAX_ERROR, Severity
from cemgen.syntax import TREE_SITTER_AVAILABLE, SyntaxProvider

requires_tree_sitter = pytest.mark.skipif(
    not TREE_SITTER_AVAILABLE, reason="tree-sitter grammars not installed"
)


def test_unsupported_file_is_a_parse_failure() -> None:
    result = ModuleAnalyzer().analyze("styles/theme.css", "body {}")

    assert result.ok is False
    assert result.module is None
    (diagnostic,) = result.diagnostics
    assert diagnostic.code == PARSE_FAILURE
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.path == "styles/theme.css"


def test_missing_grammars_are_a_parse_failure() -> None:
    analyzer = ModuleAnalyzer(syntax=SyntaxProvider(enabled=False))

    result = analyzer.analyze("src/a.js", "export const a = 1;")

    assert result.ok is False
    assert result.diagnostics[0].code == PARSE_FAILURE


def test_invalid_utf8_is_a_parse_failure() -> None:
    result = ModuleAnalyzer().analyze("src/a.js", b"\xff\xfe export const a = 1;")

    assert result.ok is False
    assert "UTF-8" in result.diagnostics[0].message


@requires_tree_sitter
def test_syntax_errors_are_warnings_and_analysis_continues() -> None:
    result = ModuleAnalyzer().analyze(
        "src/broken.js",
        "export class Fine extends HTMLElement {}\nconst = ;\n",
    )

    assert result.ok is True
    assert [declaration.name for declaration in result.module.declarations] == ["Fine"]
    assert [diagnostic.code for diagnostic in result.diagnostics] == [SYNTAX_ERROR]


@requires_tree_sitter
def test_tagged_classes_are_registered() -> None:
    result = ModuleAnalyzer().analyze(
        "src/tagged.js",
        """
/** @tag tagged-element */
export class Tagged extends HTMLElement {}
""",
    )

    (definition,) = result.module.definitions
    assert definition.tag_name == "tagged-element"
    assert definition.class_name == "Tagged"


@requires_tree_sitter
def test_explicit_definition_is_not_duplicated_by_tag() -> None:
    result = ModuleAnalyzer().analyze(
        "src/tagged.js",
        """
/** @tag tagged-element */
export class Tagged extends HTMLElement {}
customElements.define('tagged-element', Tagged);
""",
    )

    assert [definition.tag_name for definition in result.module.definitions] == ["tagged-element"]


@requires_tree_sitter
def test_ignored_declarations_are_removed_before_linking() -> None:
    result = ModuleAnalyzer().analyze(
        "src/ignored.js",
        """
/** @ignore */
export class Hidden extends HTMLElement {}
customElements.define('hidden-element', Hidden);
export const shown = 1;
""",
    )

    module = result.module
    assert [declaration.name for declaration in module.declarations] == ["shown"]
    assert [record.name for record in module.exports] == ["shown"]
    assert module.definitions == ()
    assert "Hidden" in module.ignored_names
