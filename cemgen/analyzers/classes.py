"""Class analyzer: members, events, attributes and heritage of one class."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Type

from ..jsdoc import JSDoc, parse_jsdoc
from ..models import (
    PRIVATE,
    PUBLIC,
    Attribute,
    ClassDeclaration,
    ClassMember,
    CssPart,
    CssProperty,
    Event,
    ImportRecord,
    InheritanceEdge,
    Parameter,
    Slot,
)
from ..syntax import (
    ParsedSource,
    field,
    first_child,
    has_keyword,
    iter_descendants,
    jsdoc_comment,
    location,
    string_value,
    type_annotation_text,
    unwrap_expression,
)
from ..visibility import IGNORE, INTERNAL

LIFECYCLE_CALLBACKS = frozenset(
    {
        "constructor",
        "connectedCallback",
        "disconnectedCallback",
        "adoptedCallback",
        "attributeChangedCallback",
    }
)

_FIELD_NODES = {"field_definition", "public_field_definition"}
_METHOD_NODES = {"method_definition", "method_signature", "abstract_method_signature"}
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function"}
_LITERAL_TYPES = {
    "string": "string",
    "template_string": "string",
    "number": "number",
    "true": "boolean",
    "false": "boolean",
    "array": "array",
    "object": "object",
    "null": "null",
}


def infer_type(node: Any) -> Optional[str]:
    if node is None:
        return None
    return _LITERAL_TYPES.get(unwrap_expression(node).type)


def extract_parameters(
    parsed: ParsedSource, params_node: Any, doc: JSDoc
) -> Tuple[Parameter, ...]:
    """Build parameters from a formal parameter list merged with ``@param`` tags."""
    if params_node is None:
        return ()
    if params_node.type == "identifier":
        nodes = [params_node]
    else:
        nodes = [child for child in params_node.named_children if child.type != "comment"]

    parameters: List[Parameter] = []
    for node in nodes:
        parameter = _parameter(parsed, node)
        if parameter is None:
            continue
        tag = doc.param(parameter.name)
        if tag is not None:
            parameter = replace(
                parameter,
                type_text=parameter.type_text or tag.type_text,
                description=tag.description,
                optional=parameter.optional or tag.optional,
                default=parameter.default or tag.default,
            )
        parameters.append(parameter)
    return tuple(parameters)


def _parameter(parsed: ParsedSource, node: Any) -> Optional[Parameter]:
    if node.type in {"required_parameter", "optional_parameter"}:
        pattern = field(node, "pattern")
        default = field(node, "value")
        base = _parameter(parsed, pattern) if pattern is not None else None
        if base is None:
            return None
        return replace(
            base,
            type_text=type_annotation_text(parsed, field(node, "type")),
            default=parsed.text(default) if default is not None else base.default,
            optional=node.type == "optional_parameter" or default is not None,
        )
    if node.type == "assignment_pattern":
        left = field(node, "left")
        right = field(node, "right")
        return Parameter(
            name=parsed.text(left),
            default=parsed.text(right) if right is not None else None,
            optional=True,
            type_text=infer_type(right),
        )
    if node.type == "rest_pattern":
        inner = node.named_children[0] if node.named_children else None
        return Parameter(name=parsed.text(inner) if inner is not None else "args", rest=True)
    if node.type in {"identifier", "object_pattern", "array_pattern", "this"}:
        return Parameter(name=parsed.text(node))
    return None


def return_type(parsed: ParsedSource, node: Any, doc: JSDoc) -> Optional[str]:
    annotation = type_annotation_text(parsed, field(node, "return_type"))
    if annotation:
        return annotation
    tag = doc.first("returns", "return")
    return tag.type_text if tag else None


def camel_case(name: str) -> str:
    parts = name.split("-")
    return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


def kebab_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


class ClassAnalyzer:
    """Extracts the API surface of a single class node."""

    def __init__(self, parsed: ParsedSource, imports: Mapping[str, ImportRecord]) -> None:
        self._parsed = parsed
        self._imports = imports

    def analyze(
        self,
        node: Any,
        *,
        name: str,
        doc_node: Any = None,
        declaration_type: Type[ClassDeclaration] = ClassDeclaration,
        base_parameters: Sequence[str] = (),
        **extra: Any,
    ) -> ClassDeclaration:
        doc = parse_jsdoc(jsdoc_comment(self._parsed, doc_node if doc_node is not None else node))
        superclass, mixins = self._heritage(node, base_parameters)

        fields: List[ClassMember] = []
        methods: List[ClassMember] = []
        attributes: List[Attribute] = []
        events: List[Event] = []
        constructor: Any = None
        accessor_index: Dict[Tuple[str, bool], int] = {}

        body = field(node, "body")
        members = body.named_children if body is not None else []
        for member in members:
            if member.type in _METHOD_NODES:
                member_name = self._member_name(member)
                if member_name is None:
                    continue
                static = has_keyword(member, "static")
                self._collect_events(member, events)
                if member_name == "constructor":
                    constructor = member
                    continue
                if static and member_name == "observedAttributes":
                    attributes.extend(self._observed_attributes(member))
                    continue
                if member_name in LIFECYCLE_CALLBACKS and not static:
                    continue
                if has_keyword(member, "get") or has_keyword(member, "set"):
                    self._add_accessor(member, member_name, static, fields, accessor_index)
                    continue
                methods.append(self._method(member, member_name, static))
            elif member.type in _FIELD_NODES:
                member_name = self._member_name(member)
                if member_name is None:
                    continue
                static = has_keyword(member, "static")
                value = field(member, "value")
                if static and member_name == "observedAttributes":
                    attributes.extend(self._string_array(value))
                    continue
                if value is not None and unwrap_expression(value).type in _FUNCTION_VALUES:
                    self._collect_events(value, events)
                    methods.append(self._method(member, member_name, static, function=unwrap_expression(value)))
                    continue
                fields.append(self._field(member, member_name, static, value))

        constructor_fields = self._constructor_fields(constructor, fields + methods) if constructor is not None else []
        fields = self._merge_constructor_defaults(constructor, fields)
        members_out = list(fields) + constructor_fields + methods

        members_out, attributes, events, slots, css_properties, css_parts = self._apply_class_tags(
            doc, members_out, attributes, events
        )
        attributes, members_out = _link_attributes(attributes, members_out)

        tag_name = None
        tag = doc.first("tag", "tagname", "customElement", "customelement")
        if tag is not None:
            tag_name = tag.name or (tag.description.split()[0] if tag.description else None)

        return declaration_type(
            name=name,
            tags=doc.tag_names,
            description=doc.description,
            summary=doc.summary,
            deprecated=doc.deprecated,
            location=location(node),
            node=node,
            members=tuple(members_out),
            attributes=tuple(attributes),
            events=tuple(events),
            slots=tuple(slots),
            css_properties=tuple(css_properties),
            css_parts=tuple(css_parts),
            superclass=superclass,
            mixins=tuple(mixins),
            tag_name=tag_name,
            **extra,
        )

    # ------------------------------------------------------------------
    # Heritage

    def _heritage(
        self, node: Any, base_parameters: Sequence[str]
    ) -> Tuple[Optional[InheritanceEdge], List[InheritanceEdge]]:
        heritage = first_child(node, {"class_heritage"})
        if heritage is None:
            return None, []
        extends = first_child(heritage, {"extends_clause"})
        if extends is not None:
            expression = field(extends, "value")
            if expression is None and extends.named_children:
                expression = extends.named_children[0]
        else:
            candidates = [child for child in heritage.named_children if child.type != "implements_clause"]
            expression = candidates[0] if candidates else None

        mixins: List[InheritanceEdge] = []
        expression = unwrap_expression(expression)
        while expression is not None and expression.type == "call_expression":
            function = field(expression, "function")
            mixins.append(self._edge(self._parsed.text(function)))
            arguments = field(expression, "arguments")
            args = arguments.named_children if arguments is not None else []
            expression = unwrap_expression(args[0]) if args else None

        superclass = None
        if expression is not None and expression.type in {"identifier", "member_expression"}:
            base_name = self._parsed.text(expression)
            if base_name not in base_parameters:
                superclass = self._edge(base_name)
        return superclass, mixins

    def _edge(self, name: str) -> InheritanceEdge:
        record = self._imports.get(name.split(".")[0])
        return InheritanceEdge(name=name, specifier=record.specifier if record else None)

    # ------------------------------------------------------------------
    # Members

    def _member_name(self, member: Any) -> Optional[str]:
        name_node = field(member, "name", "property")
        if name_node is None:
            return None
        value = string_value(self._parsed, name_node)
        return value if value is not None else self._parsed.text(name_node)

    def _privacy(self, member: Any, name: str, doc: JSDoc) -> str:
        if doc.privacy:
            return doc.privacy
        modifier = first_child(member, {"accessibility_modifier"})
        if modifier is not None:
            return self._parsed.text(modifier).strip()
        if name.startswith("#"):
            return PRIVATE
        return PUBLIC

    def _field(self, member: Any, name: str, static: bool, value: Any) -> ClassMember:
        doc = parse_jsdoc(jsdoc_comment(self._parsed, member))
        annotation = type_annotation_text(self._parsed, field(member, "type"))
        return ClassMember(
            name=name,
            kind="field",
            static=static,
            privacy=self._privacy(member, name, doc),
            tags=doc.tag_names,
            description=doc.description,
            deprecated=doc.deprecated,
            type_text=annotation or doc.type_text or infer_type(value),
            default=self._parsed.text(value) if value is not None else None,
            readonly=has_keyword(member, "readonly") or "readonly" in doc.tag_names,
            location=location(member),
            node=member,
        )

    def _method(self, member: Any, name: str, static: bool, function: Any = None) -> ClassMember:
        doc = parse_jsdoc(jsdoc_comment(self._parsed, member))
        source = function if function is not None else member
        params = field(source, "parameters", "parameter")
        return ClassMember(
            name=name,
            kind="method",
            static=static,
            privacy=self._privacy(member, name, doc),
            tags=doc.tag_names,
            description=doc.description,
            deprecated=doc.deprecated,
            parameters=extract_parameters(self._parsed, params, doc),
            return_type=return_type(self._parsed, source, doc),
            location=location(member),
            node=member,
        )

    def _add_accessor(
        self,
        member: Any,
        name: str,
        static: bool,
        fields: List[ClassMember],
        accessor_index: Dict[Tuple[str, bool], int],
    ) -> None:
        doc = parse_jsdoc(jsdoc_comment(self._parsed, member))
        is_getter = has_keyword(member, "get")
        type_text = return_type(self._parsed, member, doc) if is_getter else None
        if not is_getter:
            params = extract_parameters(self._parsed, field(member, "parameters"), doc)
            type_text = params[0].type_text if params else None
        type_text = doc.type_text or type_text

        key = (name, static)
        if key in accessor_index:
            position = accessor_index[key]
            existing = fields[position]
            fields[position] = replace(
                existing,
                readonly=existing.readonly and is_getter,
                type_text=existing.type_text or type_text,
                description=existing.description or doc.description,
                tags=existing.tags | doc.tag_names,
            )
            return
        accessor_index[key] = len(fields)
        fields.append(
            ClassMember(
                name=name,
                kind="field",
                static=static,
                privacy=self._privacy(member, name, doc),
                tags=doc.tag_names,
                description=doc.description,
                deprecated=doc.deprecated,
                type_text=type_text,
                readonly=is_getter,
                location=location(member),
                node=member,
            )
        )

    def _constructor_fields(self, constructor: Any, declared_members: List[ClassMember]) -> List[ClassMember]:
        declared = {member.name for member in declared_members if not member.static}
        found: List[ClassMember] = []
        for statement, name, value in self._this_assignments(constructor):
            if name in declared:
                continue
            declared.add(name)
            doc = parse_jsdoc(jsdoc_comment(self._parsed, statement))
            found.append(
                ClassMember(
                    name=name,
                    kind="field",
                    privacy=self._privacy(statement, name, doc),
                    tags=doc.tag_names,
                    description=doc.description,
                    deprecated=doc.deprecated,
                    type_text=doc.type_text or infer_type(value),
                    default=self._parsed.text(value),
                    location=location(statement),
                    node=statement,
                )
            )
        return found

    def _merge_constructor_defaults(self, constructor: Any, fields: List[ClassMember]) -> List[ClassMember]:
        if constructor is None:
            return fields
        defaults = {name: value for _, name, value in self._this_assignments(constructor)}
        merged: List[ClassMember] = []
        for member in fields:
            value = defaults.get(member.name)
            if not member.static and member.default is None and value is not None:
                member = replace(
                    member,
                    default=self._parsed.text(value),
                    type_text=member.type_text or infer_type(value),
                )
            merged.append(member)
        return merged

    def _this_assignments(self, constructor: Any) -> List[Tuple[Any, str, Any]]:
        body = field(constructor, "body")
        if body is None:
            return []
        assignments: List[Tuple[Any, str, Any]] = []
        for statement in body.named_children:
            if statement.type != "expression_statement" or not statement.named_children:
                continue
            expression = statement.named_children[0]
            if expression.type != "assignment_expression":
                continue
            left = field(expression, "left")
            if left is None or left.type != "member_expression":
                continue
            target = field(left, "object")
            prop = field(left, "property")
            if target is None or target.type != "this" or prop is None:
                continue
            assignments.append((statement, self._parsed.text(prop), field(expression, "right")))
        return assignments

    # ------------------------------------------------------------------
    # Attributes and events

    def _observed_attributes(self, member: Any) -> List[Attribute]:
        body = field(member, "body")
        if body is None:
            return []
        for node in iter_descendants(body):
            if node.type == "return_statement" and node.named_children:
                return self._string_array(node.named_children[0])
        return []

    def _string_array(self, node: Any) -> List[Attribute]:
        node = unwrap_expression(node)
        if node is None or node.type != "array":
            return []
        attributes: List[Attribute] = []
        for element in node.named_children:
            value = string_value(self._parsed, element)
            if value:
                attributes.append(Attribute(name=value))
        return attributes

    def _collect_events(self, node: Any, events: List[Event]) -> None:
        for call in iter_descendants(node):
            if call.type != "call_expression":
                continue
            function = field(call, "function")
            if function is None or not self._parsed.text(function).endswith("dispatchEvent"):
                continue
            arguments = field(call, "arguments")
            if arguments is None or not arguments.named_children:
                continue
            created = unwrap_expression(arguments.named_children[0])
            if created is None or created.type != "new_expression":
                continue
            constructor = field(created, "constructor")
            created_args = field(created, "arguments")
            first = created_args.named_children[0] if created_args is not None and created_args.named_children else None
            name = string_value(self._parsed, first)
            if not name:
                continue
            position = _index_of(events, name)
            if position is not None and IGNORE not in events[position].tags:
                continue
            doc = parse_jsdoc(jsdoc_comment(self._parsed, _enclosing_statement(call)))
            if position is not None and IGNORE in doc.tag_names:
                continue
            event = Event(
                name=name,
                type_text=doc.type_text or (self._parsed.text(constructor) if constructor is not None else None),
                description=doc.description,
                deprecated=doc.deprecated,
                tags=doc.tag_names,
            )
            # A later untagged dispatch wins over an ignored one.
            if position is None:
                events.append(event)
            else:
                events[position] = event

    # ------------------------------------------------------------------
    # Class level JSDoc

    def _apply_class_tags(
        self,
        doc: JSDoc,
        members: List[ClassMember],
        attributes: List[Attribute],
        events: List[Event],
    ):
        for tag in doc.all("fires", "event"):
            if not tag.name:
                continue
            position = _index_of(events, tag.name)
            if position is None:
                events.append(Event(name=tag.name, type_text=tag.type_text, description=tag.description))
            else:
                existing = events[position]
                events[position] = replace(
                    existing,
                    description=existing.description or tag.description,
                    type_text=tag.type_text or existing.type_text,
                )

        for tag in doc.all("attr", "attribute"):
            if not tag.name:
                continue
            position = _index_of(attributes, tag.name)
            documented = Attribute(
                name=tag.name, type_text=tag.type_text, default=tag.default, description=tag.description
            )
            if position is None:
                attributes.append(documented)
            else:
                existing = attributes[position]
                attributes[position] = replace(
                    existing,
                    type_text=tag.type_text or existing.type_text,
                    default=tag.default or existing.default,
                    description=tag.description or existing.description,
                )

        for tag in doc.all("prop", "property"):
            if not tag.name:
                continue
            position = next(
                (index for index, member in enumerate(members) if member.name == tag.name and not member.static),
                None,
            )
            if position is None:
                members.append(
                    ClassMember(
                        name=tag.name,
                        kind="field",
                        type_text=tag.type_text,
                        default=tag.default,
                        description=tag.description,
                    )
                )
            else:
                existing = members[position]
                members[position] = replace(
                    existing,
                    type_text=tag.type_text or existing.type_text,
                    description=tag.description or existing.description,
                )

        slots = [Slot(name=tag.name or "", description=tag.description) for tag in doc.all("slot")]
        css_properties = [
            CssProperty(name=tag.name, description=tag.description, default=tag.default, syntax=tag.type_text)
            for tag in doc.all("cssprop", "cssproperty")
            if tag.name
        ]
        css_parts = [
            CssPart(name=tag.name, description=tag.description) for tag in doc.all("csspart") if tag.name
        ]
        return members, attributes, events, slots, css_properties, css_parts


def _link_attributes(
    attributes: List[Attribute], members: List[ClassMember]
) -> Tuple[List[Attribute], List[ClassMember]]:
    by_name = {member.name: index for index, member in enumerate(members) if member.kind == "field" and not member.static}
    linked: List[Attribute] = []
    for attribute in attributes:
        position = by_name.get(attribute.field_name or attribute.name)
        if position is None:
            position = by_name.get(camel_case(attribute.name))
        if position is None:
            linked.append(attribute)
            continue
        member = members[position]
        members[position] = replace(member, attribute=member.attribute or attribute.name)
        linked.append(
            replace(
                attribute,
                field_name=member.name,
                type_text=attribute.type_text or member.type_text,
                default=attribute.default or member.default,
                tags=attribute.tags | _hiding_tags(member.tags),
            )
        )
    return linked, members


def _hiding_tags(tags: FrozenSet[str]) -> FrozenSet[str]:
    return tags & {IGNORE, INTERNAL}


def _index_of(items: Sequence[Any], name: str) -> Optional[int]:
    for index, item in enumerate(items):
        if item.name == name:
            return index
    return None


def _enclosing_statement(node: Any) -> Any:
    current = node
    while current.parent is not None and not current.type.endswith("statement"):
        current = current.parent
    return current


__all__ = [
    "ClassAnalyzer",
    "LIFECYCLE_CALLBACKS",
    "camel_case",
    "extract_parameters",
    "infer_type",
    "kebab_case",
    "return_type",
]
