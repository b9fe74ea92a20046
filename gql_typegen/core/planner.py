"""Turn one operation into an :class:`EmissionPlan`."""

import logging

from .enums import generate_enum
from .ir import EmissionPlan, GeneratedField, GeneratedFragment, GeneratedInput, GeneratedScalar
from .naming import field_name, snake_case
from .options import CodegenOptions
from .qualifiers import decorate_ref
from .query import Operation, QueryDocument
from .resolver import SelectionResolver
from .schema import InputType, Qualifier, Schema
from .used_types import UsedTypesCollector
from .variables import build_variables

logger = logging.getLogger(__name__)


def _reaches(schema: Schema, start: str, target: str) -> bool:
    """True if input type ``start`` can reach ``target`` through its fields."""
    seen = set()
    pending = [start]
    while pending:
        current = pending.pop()
        if current == target:
            return True
        if current in seen:
            continue
        seen.add(current)
        definition = schema.get(current)
        if isinstance(definition, InputType):
            pending.extend(f.type.name for f in definition.fields)
    return False


def generate_input(input_type: InputType, schema: Schema) -> GeneratedInput:
    """Build an input object definition.

    A field that leads back to its own input type without passing through a
    list is marked ``indirect``.
    """
    fields = []
    for input_field in input_type.fields:
        ref = input_field.type
        indirect = Qualifier.LIST not in ref.qualifiers and _reaches(schema, ref.name, input_type.name)
        fields.append(GeneratedField(
            wire_name=input_field.name,
            name=field_name(input_field.name),
            shape=decorate_ref(ref),
            indirect=indirect,
            description=input_field.description,
        ))
    return GeneratedInput(name=input_type.name, fields=fields, description=input_type.description)


class OperationPlanner:
    """Plans operations of one document against one schema.

    Example:
        planner = OperationPlanner(schema, document, CodegenOptions())
        plan = planner.plan(document.get_operation("MyQuery"))
    """

    def __init__(self, schema: Schema, document: QueryDocument, options: CodegenOptions):
        self.schema = schema
        self.document = document
        self.options = options

    def plan(self, operation: Operation) -> EmissionPlan:
        used = UsedTypesCollector(self.schema, self.document, self.options).collect(operation)
        reserved = [f.name for f in used.fragments]
        reserved += [t.name for t in (*used.scalars, *used.enums, *used.inputs)]
        resolver = SelectionResolver(self.schema, self.document, self.options, reserved)

        fragments = []
        for fragment in used.fragments:
            resolver.resolve_fragment(fragment)
            fragments.append(GeneratedFragment(
                name=fragment.name,
                on=fragment.on,
                on_kind=self.schema.lookup(fragment.on).kind,
                recursive=fragment.recursive,
            ))

        response = resolver.resolve_operation(operation)

        plan = EmissionPlan(
            operation_name=operation.name,
            operation_kind=operation.kind,
            module_name=snake_case(operation.name),
            query_text=self.document.source,
            response=response,
            variables=build_variables(operation, self.schema),
            scalars=[GeneratedScalar(s.name, s.description) for s in used.scalars],
            enums=[generate_enum(e) for e in used.enums],
            inputs=[generate_input(i, self.schema) for i in used.inputs],
            fragments=fragments,
            definitions=resolver.definitions,
        )
        logger.debug(
            "Planned %s: %d structs, %d unions, %d enums, %d inputs",
            operation.name,
            len(plan.structs),
            len(plan.unions),
            len(plan.enums),
            len(plan.inputs),
        )
        return plan
