"""Top-level declaration, import, export and registration collector."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..jsdoc import parse_jsdoc
from ..models import (
    ClassDeclaration,
    CustomElementDefinition,
    Declaration,
    ExportRecord,
    FunctionDeclaration,
    ImportRecord,
    MixinDeclaration,
    Module,
    VariableDeclaration,
)
from ..syntax import (
    CLASS_NODES,
    FUNCTION_NODES,
    VARIABLE_NODES,
    ParsedSource,
    field,
    first_child,
    iter_descendants,
    jsdoc_comment,
    location,
    string_value,
    type_annotation_text,
    unwrap_expression,
)
from .classes import ClassAnalyzer, extract_parameters, infer_type, return_type

DEFINE_CALLS = frozenset(
    {
        "customElements.define",
        "window.customElements.define",
        "globalThis.customElements.define",
        "self.customElements.define",
    }
)
DEFAULT_EXPORT = "default"

_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_SCOPE_NODES = CLASS_NODES | FUNCTION_NODES | {"method_definition", "class_body"}


class DeclarationCollector:
    """Walks the top level of one module and records what it declares."""

    def __init__(self, parsed: ParsedSource) -> None:
        self._parsed = parsed
        self._declarations: List[Declaration] = []
        self._exports: List[ExportRecord] = []
        self._imports: List[ImportRecord] = []
        self._definitions: List[CustomElementDefinition] = []
        self._import_map: Dict[str, ImportRecord] = {}

    def collect(self) -> Module:
        root = self._parsed.root
        # Imports are gathered first so heritage edges can carry their specifier.
        for statement in root.named_children:
            if statement.type == "import_statement":
                self._collect_import(statement)

        for statement in root.named_children:
            if statement.type in {"comment", "import_statement"}:
                continue
            if statement.type == "export_statement":
                self._collect_export(statement)
            else:
                self._collect_declaration(statement)
                if statement.type not in CLASS_NODES | _FUNCTION_DECLARATIONS:
                    self._collect_definitions(statement)

        return Module(
            path=self._parsed.path,
            declarations=tuple(self._declarations),
            exports=tuple(self._exports),
            imports=tuple(self._imports),
            definitions=tuple(self._definitions),
        )

    # ------------------------------------------------------------------
    # Imports and exports

    def _collect_import(self, statement: Any) -> None:
        specifier = string_value(self._parsed, field(statement, "source"))
        clause = first_child(statement, {"import_clause"})
        if specifier is None or clause is None:
            return
        for child in clause.named_children:
            if child.type == "identifier":
                self._add_import(self._parsed.text(child), DEFAULT_EXPORT, specifier)
            elif child.type == "namespace_import":
                names = [node for node in child.named_children if node.type == "identifier"]
                if names:
                    self._add_import(self._parsed.text(names[0]), "*", specifier)
            elif child.type == "named_imports":
                for item in child.named_children:
                    if item.type != "import_specifier":
                        continue
                    name_node = field(item, "name")
                    alias_node = field(item, "alias")
                    imported = self._name_text(name_node)
                    local = self._name_text(alias_node) if alias_node is not None else imported
                    self._add_import(local, imported, specifier)

    def _add_import(self, local: str, imported: str, specifier: str) -> None:
        record = ImportRecord(local_name=local, imported_name=imported, specifier=specifier)
        self._imports.append(record)
        self._import_map[local] = record

    def _collect_export(self, statement: Any) -> None:
        source = string_value(self._parsed, field(statement, "source"))
        is_default = any(child.type == "default" for child in statement.children)
        declaration = field(statement, "declaration")
        value = field(statement, "value")

        if declaration is not None:
            names = self._collect_declaration(declaration, default=is_default)
            for name in names:
                exported_as = DEFAULT_EXPORT if is_default else name
                self._exports.append(
                    ExportRecord(name=exported_as, local_name=name, location=location(statement))
                )
            return

        if is_default and value is not None:
            value = unwrap_expression(value)
            if value.type == "identifier":
                self._exports.append(
                    ExportRecord(
                        name=DEFAULT_EXPORT, local_name=self._parsed.text(value), location=location(statement)
                    )
                )
                return
            names = self._collect_declaration(value, default=True)
            for name in names:
                self._exports.append(
                    ExportRecord(name=DEFAULT_EXPORT, local_name=name, location=location(statement))
                )
            return

        clause = first_child(statement, {"export_clause"})
        if clause is not None:
            for item in clause.named_children:
                if item.type != "export_specifier":
                    continue
                local = self._name_text(field(item, "name"))
                alias_node = field(item, "alias")
                exported_as = self._name_text(alias_node) if alias_node is not None else local
                self._exports.append(
                    ExportRecord(
                        name=exported_as,
                        local_name=local,
                        specifier=source,
                        location=location(statement),
                    )
                )
            return

        if source is not None and first_child(statement, {"namespace_export"}) is None:
            if any(child.type == "*" for child in statement.children):
                self._exports.append(
                    ExportRecord(name="*", local_name="*", specifier=source, location=location(statement))
                )

    def _name_text(self, node: Any) -> str:
        value = string_value(self._parsed, node)
        return value if value is not None else self._parsed.text(node)

    # ------------------------------------------------------------------
    # Declarations

    def _collect_declaration(self, node: Any, *, default: bool = False) -> List[str]:
        """Record the declarations a statement introduces and return their names."""
        if node.type in CLASS_NODES:
            name_node = field(node, "name")
            if name_node is None and not default:
                return []
            name = self._parsed.text(name_node) if name_node is not None else DEFAULT_EXPORT
            self._declarations.append(self._class(node, name))
            return [name]

        if node.type in _FUNCTION_DECLARATIONS or (default and node.type in FUNCTION_NODES):
            name_node = field(node, "name")
            name = self._parsed.text(name_node) if name_node is not None else DEFAULT_EXPORT
            self._declarations.append(self._function(node, name, doc_node=node))
            return [name]

        if node.type in VARIABLE_NODES:
            names: List[str] = []
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = field(declarator, "name")
                if name_node is None or name_node.type != "identifier":
                    continue
                name = self._parsed.text(name_node)
                self._declarations.append(self._variable(declarator, name))
                names.append(name)
            return names

        return []

    def _class(self, node: Any, name: str, doc_node: Any = None) -> ClassDeclaration:
        analyzer = ClassAnalyzer(self._parsed, self._import_map)
        return analyzer.analyze(node, name=name, doc_node=doc_node)

    def _function(self, node: Any, name: str, doc_node: Any) -> Declaration:
        doc = parse_jsdoc(jsdoc_comment(self._parsed, doc_node))
        params_node = field(node, "parameters", "parameter")
        parameters = extract_parameters(self._parsed, params_node, doc)

        returned = self._returned_class(node)
        if returned is not None:
            analyzer = ClassAnalyzer(self._parsed, self._import_map)
            return analyzer.analyze(
                returned,
                name=name,
                doc_node=doc_node,
                declaration_type=MixinDeclaration,
                base_parameters=[parameter.name for parameter in parameters],
                parameters=parameters,
            )

        return FunctionDeclaration(
            name=name,
            tags=doc.tag_names,
            description=doc.description,
            summary=doc.summary,
            deprecated=doc.deprecated,
            location=location(node),
            node=node,
            parameters=parameters,
            return_type=return_type(self._parsed, node, doc),
        )

    def _variable(self, declarator: Any, name: str) -> Declaration:
        value = unwrap_expression(field(declarator, "value"))
        if value is not None and value.type in CLASS_NODES:
            return self._class(value, name, doc_node=declarator)
        if value is not None and value.type in FUNCTION_NODES:
            return self._function(value, name, doc_node=declarator)

        doc = parse_jsdoc(jsdoc_comment(self._parsed, declarator))
        annotation = type_annotation_text(self._parsed, field(declarator, "type"))
        return VariableDeclaration(
            name=name,
            tags=doc.tag_names,
            description=doc.description,
            summary=doc.summary,
            deprecated=doc.deprecated,
            location=location(declarator),
            node=declarator,
            type_text=annotation or doc.type_text or infer_type(value),
            default=self._parsed.text(value) if value is not None else None,
        )

    # ------------------------------------------------------------------
    # Registrations

    def _collect_definitions(self, node: Any) -> None:
        candidates = [node] if node.type == "call_expression" else []
        candidates.extend(iter_descendants(node, skip=_SCOPE_NODES))
        for call in candidates:
            if call.type != "call_expression":
                continue
            function = field(call, "function")
            if function is None or self._parsed.text(function) not in DEFINE_CALLS:
                continue
            arguments = field(call, "arguments")
            args = arguments.named_children if arguments is not None else []
            if len(args) < 2:
                continue
            tag_name = string_value(self._parsed, args[0])
            target = unwrap_expression(args[1])
            if not tag_name or target is None or target.type != "identifier":
                continue
            self._definitions.append(
                CustomElementDefinition(
                    tag_name=tag_name,
                    class_name=self._parsed.text(target),
                    module=self._parsed.path,
                    location=location(call),
                )
            )

    def _returned_class(self, function: Any) -> Optional[Any]:
        """Return the class node a mixin-shaped function evaluates to."""
        body = field(function, "body")
        if body is None:
            return None
        expression = unwrap_expression(body)
        if expression.type in CLASS_NODES:
            return expression
        if expression.type != "statement_block":
            return None

        local_classes: Dict[str, Any] = {}
        for statement in expression.named_children:
            if statement.type in CLASS_NODES:
                name_node = field(statement, "name")
                if name_node is not None:
                    local_classes[self._parsed.text(name_node)] = statement
            elif statement.type == "return_statement" and statement.named_children:
                returned = unwrap_expression(statement.named_children[0])
                if returned.type in CLASS_NODES:
                    return returned
                if returned.type == "identifier":
                    return local_classes.get(self._parsed.text(returned))
        return None


def collect_module(parsed: ParsedSource) -> Module:
    return DeclarationCollector(parsed).collect()


__all__ = ["DEFAULT_EXPORT", "DEFINE_CALLS", "DeclarationCollector", "collect_module"]
