"""Rust emitter: serde types plus a ``graphql_client::GraphQLQuery`` impl."""

import logging

from jinja2 import Environment

from ..core.errors import EmitterError
from ..core.ir import (
    AbsentLiteral,
    BooleanLiteral,
    EmissionPlan,
    EnumLiteral,
    FloatLiteral,
    GeneratedField,
    GeneratedStruct,
    GeneratedUnion,
    InputObjectLiteral,
    IntLiteral,
    ListLiteral,
    ListShape,
    Literal,
    OptionalShape,
    PresentLiteral,
    StringLiteral,
    TypeShape,
)
from ..core.naming import safe_name
from ..core.options import CodegenOptions, TargetLanguage
from ..core.query import TYPENAME

logger = logging.getLogger(__name__)

RUST_KEYWORDS = {
    "abstract", "as", "async", "await", "become", "box", "break", "const", "continue",
    "crate", "do", "dyn", "else", "enum", "extern", "false", "final", "fn", "for", "if",
    "impl", "in", "let", "loop", "macro", "match", "mod", "move", "mut", "override",
    "priv", "pub", "ref", "return", "self", "Self", "static", "struct", "super", "trait",
    "true", "try", "type", "typeof", "unsafe", "unsized", "use", "virtual", "where",
    "while", "yield",
}


def rust_name(name: str) -> str:
    """Escape Rust keywords with a trailing underscore."""
    if name in RUST_KEYWORDS:
        return f"{name}_"
    return name


def rust_string(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def render_derives(derives: list[str]) -> str:
    if not derives:
        return ""
    return f"#[derive({', '.join(derives)})]"


class RustEmitter:
    """Renders every operation of a query file into one ``.rs`` module.

    Example:
        emitter = RustEmitter(CodegenOptions(target_language=TargetLanguage.RUST), env)
        files = emitter.layout([(plan, emitter.emit(plan))], "my_query")
    """

    target = TargetLanguage.RUST
    extension = ".rs"
    template_name = "rust_module.rs.j2"

    def __init__(self, options: CodegenOptions, env: Environment):
        self.options = options
        self.env = env

    def type_expr(self, shape: TypeShape, indirect: bool = False) -> str:
        if isinstance(shape, OptionalShape):
            return f"Option<{self.type_expr(shape.inner, indirect)}>"
        if isinstance(shape, ListShape):
            # Vec already allocates; no Box needed inside it.
            return f"Vec<{self.type_expr(shape.inner)}>"
        if indirect:
            return f"Box<{shape.name}>"
        return shape.name

    def render_literal(self, literal: Literal, plan: EmissionPlan, boxed: bool = False) -> str:
        if isinstance(literal, PresentLiteral):
            return f"Some({self.render_literal(literal.inner, plan, boxed)})"
        if isinstance(literal, AbsentLiteral):
            return "None"
        if isinstance(literal, BooleanLiteral):
            value = "true" if literal.value else "false"
        elif isinstance(literal, IntLiteral):
            value = str(literal.value)
        elif isinstance(literal, FloatLiteral):
            value = repr(literal.value)
            if "." not in value and "e" not in value:
                value += ".0"
        elif isinstance(literal, StringLiteral):
            value = f"{rust_string(literal.value)}.to_string()"
        elif isinstance(literal, EnumLiteral):
            value = f"{literal.enum}::{rust_name(safe_name(literal.value))}"
        elif isinstance(literal, ListLiteral):
            value = "vec![" + ", ".join(self.render_literal(i, plan) for i in literal.items) + "]"
        elif isinstance(literal, InputObjectLiteral):
            value = self._render_input_object(literal, plan)
        else:
            raise EmitterError(f"Cannot render literal {literal!r}")
        if boxed:
            return f"Box::new({value})"
        return value

    def _render_input_object(self, literal: InputObjectLiteral, plan: EmissionPlan) -> str:
        input_type = next((i for i in plan.inputs if i.name == literal.type_name), None)
        if input_type is None:
            raise EmitterError(f"Input type {literal.type_name} is not part of the plan")
        fields = {f.wire_name: f for f in input_type.fields}
        parts = []
        for name, value in literal.fields:
            field = fields[name]
            parts.append(f"{rust_name(field.name)}: {self.render_literal(value, plan, field.indirect)}")
        return f"{literal.type_name} {{ {', '.join(parts)} }}"

    def field_context(self, field: GeneratedField) -> dict:
        name = rust_name(field.name)
        return {
            "name": name,
            "type": self.type_expr(field.shape, field.indirect),
            "rename": field.wire_name if field.wire_name != name and not field.flatten else None,
            "flatten": field.flatten,
            "deprecation": rust_string(field.deprecation) if field.deprecation else None,
            "description": field.description,
        }

    def _struct_context(self, struct: GeneratedStruct, tagged: bool) -> dict:
        fields = struct.fields
        if tagged or struct.on:
            # serde consumes `__typename` as the union tag.
            fields = [f for f in fields if f.wire_name != TYPENAME]
        if struct.on:
            # Flattened fragments take the keys they read, including
            # `__typename`, so the tagged `on` union is read first.
            fields = sorted(fields, key=lambda f: f.name != "on" or not f.flatten)
        return {
            "kind": "struct",
            "name": struct.name,
            "fields": [self.field_context(f) for f in fields],
        }

    def _union_context(self, union: GeneratedUnion) -> dict:
        return {
            "kind": "union",
            "name": union.name,
            "variants": [
                {"name": rust_name(v.type_name), "wire_name": v.type_name, "struct": v.struct}
                for v in union.variants
            ],
        }

    def context(self, plan: EmissionPlan) -> dict:
        tagged = {v.struct for union in plan.unions for v in union.variants if v.struct}
        definitions = []
        for definition in plan.definitions:
            if isinstance(definition, GeneratedUnion):
                definitions.append(self._union_context(definition))
            else:
                definitions.append(self._struct_context(definition, definition.name in tagged))

        response_derives = self.options.all_response_derives()
        return {
            "plan": plan,
            "visibility": self.options.module_visibility,
            "operation_struct": plan.operation_name,
            "query": rust_string(plan.query_text),
            "operation_name": rust_string(plan.operation_name),
            "response_derives": render_derives(response_derives),
            "enum_derives": render_derives(
                [d for d in response_derives if d not in ("Serialize", "Deserialize")]
            ),
            "variable_derives": render_derives(["Serialize"]),
            "scalars": plan.scalars,
            "enums": [
                {
                    "name": enum.name,
                    "other": enum.other_variant,
                    "variants": [
                        {"name": rust_name(v.name), "wire_name": rust_string(v.wire_name)}
                        for v in enum.variants
                    ],
                }
                for enum in plan.enums
            ],
            "inputs": [
                {"name": i.name, "fields": [self.field_context(f) for f in i.fields]}
                for i in plan.inputs
            ],
            "variables": [
                {
                    "name": rust_name(v.name),
                    "rename": v.wire_name if v.wire_name != rust_name(v.name) else None,
                    "type": self.type_expr(v.shape),
                }
                for v in plan.variables.fields
            ],
            "defaults": [
                {
                    "name": v.default_constructor,
                    "type": self.type_expr(v.shape),
                    "value": self.render_literal(v.default, plan),
                }
                for v in plan.variables.defaults
            ],
            "definitions": definitions,
        }

    def emit(self, plan: EmissionPlan) -> str:
        template = self.env.get_template(self.template_name)
        content = template.render(self.context(plan))
        logger.debug("Rendered %s: %d lines", plan.operation_name, content.count("\n"))
        return content

    def layout(self, rendered: list[tuple[EmissionPlan, str]], query_stem: str) -> dict[str, str]:
        content = "\n".join(code for _, code in rendered)
        return {f"{query_stem}{self.extension}": content}
