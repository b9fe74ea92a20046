"""Python emitter: pydantic v2 models built on :mod:`gql_typegen.runtime`."""

import ast
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
    GeneratedVariable,
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
from ..core.naming import field_name, safe_name
from ..core.options import CodegenOptions, TargetLanguage
from ..core.scalars import BUILTIN_PYTHON_TYPES, ScalarRegistry

logger = logging.getLogger(__name__)


def query_literal(text: str) -> str:
    """Render query text as a Python string literal, triple-quoted when possible."""
    if '"""' in text or "\\" in text or text.endswith('"'):
        return repr(text)
    return f'"""{text}"""'


class PythonEmitter:
    """Renders one module per operation.

    Example:
        emitter = PythonEmitter(CodegenOptions(), env=make_environment())
        source = emitter.emit(plan)
    """

    target = TargetLanguage.PYTHON
    extension = ".py"
    template_name = "python_module.py.j2"

    def __init__(
        self,
        options: CodegenOptions,
        env: Environment,
        scalars: ScalarRegistry | None = None,
    ):
        self.options = options
        self.env = env
        self.scalars = scalars or ScalarRegistry()

    # Types and values

    def type_expr(self, shape: TypeShape) -> str:
        if isinstance(shape, OptionalShape):
            return f"Optional[{self.type_expr(shape.inner)}]"
        if isinstance(shape, ListShape):
            return f"List[{self.type_expr(shape.inner)}]"
        # Custom scalars are aliased at module level under their GraphQL name.
        return BUILTIN_PYTHON_TYPES.get(shape.name, shape.name)

    def render_literal(self, literal: Literal) -> str:
        if isinstance(literal, PresentLiteral):
            return self.render_literal(literal.inner)
        if isinstance(literal, AbsentLiteral):
            return "None"
        if isinstance(literal, BooleanLiteral):
            return "True" if literal.value else "False"
        if isinstance(literal, IntLiteral):
            return str(literal.value)
        if isinstance(literal, (FloatLiteral, StringLiteral)):
            return repr(literal.value)
        if isinstance(literal, EnumLiteral):
            return f"{literal.enum}({literal.value!r})"
        if isinstance(literal, ListLiteral):
            return "[" + ", ".join(self.render_literal(item) for item in literal.items) + "]"
        if isinstance(literal, InputObjectLiteral):
            arguments = ", ".join(
                f"{field_name(name)}={self.render_literal(value)}"
                for name, value in literal.fields
                if not isinstance(value, AbsentLiteral)
            )
            return f"{literal.type_name}({arguments})"
        raise EmitterError(f"Cannot render literal {literal!r}")

    def field_declaration(self, field: GeneratedField | GeneratedVariable) -> str:
        annotation = self.type_expr(field.shape)
        arguments = []
        if isinstance(field.shape, OptionalShape):
            arguments.append("default=None")
        if field.needs_rename and not getattr(field, "flatten", False):
            arguments.append(f"alias={field.wire_name!r}")
        deprecation = getattr(field, "deprecation", None)
        if deprecation:
            arguments.append(f"deprecated={deprecation!r}")

        if not arguments:
            return f"{field.name}: {annotation}"
        if arguments == ["default=None"]:
            return f"{field.name}: {annotation} = None"
        return f"{field.name}: {annotation} = Field({', '.join(arguments)})"

    # Context

    def _variant_tags(self, plan: EmissionPlan) -> dict[str, str]:
        tags = {}
        for union in plan.unions:
            for variant in union.variants:
                if variant.struct:
                    tags[variant.struct] = variant.type_name
        return tags

    def _struct_context(self, struct: GeneratedStruct, tag: str | None) -> dict:
        fields = struct.fields
        if tag:
            # The tag field below replaces any plain `__typename`.
            fields = [f for f in fields if f.wire_name != "__typename"]
        return {
            "kind": "struct",
            "name": struct.name,
            "tag": tag,
            "flattened": [f.name for f in fields if f.flatten],
            "fields": [
                {"declaration": self.field_declaration(f), "description": f.description}
                for f in fields
            ],
        }

    def _union_context(self, union: GeneratedUnion) -> dict:
        members = [v.struct for v in union.variants if v.struct]
        unselected = [v.type_name for v in union.variants if v.is_placeholder]
        placeholder = f"{union.name}Unselected" if unselected else None
        if placeholder:
            members.append(placeholder)
        return {
            "kind": "union",
            "name": union.name,
            "members": members,
            "placeholder": placeholder,
            "unselected": ", ".join(repr(name) for name in unselected),
        }

    def context(self, plan: EmissionPlan) -> dict:
        scalar_names = [scalar.name for scalar in plan.scalars]
        tags = self._variant_tags(plan)

        definitions = []
        for definition in plan.definitions:
            if isinstance(definition, GeneratedUnion):
                definitions.append(self._union_context(definition))
            else:
                definitions.append(self._struct_context(definition, tags.get(definition.name)))

        return {
            "plan": plan,
            "operation_class": safe_name(plan.operation_name),
            "query_literal": query_literal(plan.query_text),
            "scalar_imports": self.scalars.imports_for(scalar_names),
            "scalars": [
                {
                    "name": scalar.name,
                    "python_type": self.scalars.python_type(scalar.name) or "Any",
                    "description": scalar.description,
                }
                for scalar in plan.scalars
            ],
            "enums": plan.enums,
            "inputs": [
                {
                    "name": input_type.name,
                    "description": input_type.description,
                    "fields": [self.field_declaration(f) for f in input_type.fields],
                }
                for input_type in plan.inputs
            ],
            "variables": [self.field_declaration(v) for v in plan.variables.fields],
            "defaults": [
                {
                    "name": v.default_constructor,
                    "annotation": self.type_expr(v.shape),
                    "value": self.render_literal(v.default),
                }
                for v in plan.variables.defaults
            ],
            "definitions": definitions,
            "models": [d["name"] for d in definitions if d["kind"] == "struct"]
            + [d["placeholder"] for d in definitions if d["kind"] == "union" and d["placeholder"]]
            + [i.name for i in plan.inputs]
            + ["Variables"],
        }

    def emit(self, plan: EmissionPlan) -> str:
        template = self.env.get_template(self.template_name)
        content = template.render(self.context(plan))

        # Validate Python syntax
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise EmitterError(
                f"Generated invalid Python for {plan.operation_name}: {e}\n"
                f"Template: {self.template_name}"
            ) from e
        logger.debug("Rendered %s: %d lines", plan.operation_name, content.count("\n"))
        return content

    def layout(self, rendered: list[tuple[EmissionPlan, str]], query_stem: str) -> dict[str, str]:
        return {f"{plan.module_name}{self.extension}": content for plan, content in rendered}
