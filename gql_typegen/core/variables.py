"""Operation variables and their default values.

Default values are compiled from graphql-core ``ValueNode``s into the
literal IR of :mod:`gql_typegen.core.ir`, checked against the declared
variable type. Emitters turn the literals into ``default_<name>``
constructors.
"""

from graphql import (
    BooleanValueNode,
    EnumValueNode,
    FloatValueNode,
    IntValueNode,
    ListValueNode,
    NullValueNode,
    ObjectValueNode,
    StringValueNode,
    ValueNode,
    VariableNode,
)

from .errors import DefaultValueError, UnknownFieldError, UnknownInputTypeError
from .ir import (
    AbsentLiteral,
    BooleanLiteral,
    EnumLiteral,
    FloatLiteral,
    GeneratedVariable,
    GeneratedVariables,
    InputObjectLiteral,
    IntLiteral,
    ListLiteral,
    Literal,
    PresentLiteral,
    StringLiteral,
)
from .naming import field_name, snake_case
from .qualifiers import decorate_ref
from .query import Operation
from .schema import InputType, Qualifier, Schema, TypeRef


def default_constructor_name(variable_name: str) -> str:
    return f"default_{snake_case(variable_name)}"


def _is_list(ref: TypeRef) -> bool:
    qualifiers = list(ref.qualifiers)
    if qualifiers and qualifiers[0] is Qualifier.REQUIRED:
        qualifiers.pop(0)
    return bool(qualifiers) and qualifiers[0] is Qualifier.LIST


def compile_default(
    value: ValueNode,
    ref: TypeRef,
    schema: Schema,
    variable_name: str,
) -> Literal:
    """Compile a default value literal for a slot of type ``ref``.

    Nullable slots are wrapped in :class:`PresentLiteral` so that emitters
    can tell an explicit value from an omitted input field.

    Raises:
        DefaultValueError: for variable references and ``null``
        UnknownInputTypeError: for an object literal on a non-input type
        UnknownFieldError: for an object literal field the input type lacks
    """
    if isinstance(value, VariableNode):
        raise DefaultValueError(variable_name, f"variable ${value.name.value} is not allowed here")
    if isinstance(value, NullValueNode):
        raise DefaultValueError(variable_name, "null default values are not supported")

    literal = _compile_value(value, ref, schema, variable_name)
    if ref.is_optional:
        return PresentLiteral(literal)
    return literal


def _compile_value(value: ValueNode, ref: TypeRef, schema: Schema, variable_name: str) -> Literal:
    if isinstance(value, ListValueNode):
        if not _is_list(ref):
            raise DefaultValueError(variable_name, f"list value for non-list type {ref}")
        element = ref.element()
        return ListLiteral(tuple(
            compile_default(item, element, schema, variable_name) for item in value.values
        ))
    if _is_list(ref):
        # Input coercion accepts a single item where a list is expected.
        return ListLiteral((compile_default(value, ref.element(), schema, variable_name),))

    if isinstance(value, BooleanValueNode):
        return BooleanLiteral(value.value)
    if isinstance(value, IntValueNode):
        if ref.name == "Float":
            return FloatLiteral(float(value.value))
        return IntLiteral(int(value.value))
    if isinstance(value, FloatValueNode):
        return FloatLiteral(float(value.value))
    if isinstance(value, StringValueNode):
        return StringLiteral(value.value)
    if isinstance(value, EnumValueNode):
        return EnumLiteral(ref.name, value.value)
    if isinstance(value, ObjectValueNode):
        return _compile_object(value, ref, schema, variable_name)
    raise DefaultValueError(variable_name, f"unsupported value {type(value).__name__}")


def _compile_object(
    value: ObjectValueNode,
    ref: TypeRef,
    schema: Schema,
    variable_name: str,
) -> InputObjectLiteral:
    input_type = schema.get(ref.name)
    if not isinstance(input_type, InputType):
        raise UnknownInputTypeError(ref.name)

    provided = {}
    for object_field in value.fields:
        name = object_field.name.value
        if input_type.get_field(name) is None:
            raise UnknownFieldError(name, input_type.name, [f.name for f in input_type.fields])
        provided[name] = object_field.value

    fields = []
    for input_field in input_type.fields:
        if input_field.name in provided:
            literal = compile_default(provided[input_field.name], input_field.type, schema, variable_name)
        else:
            literal = AbsentLiteral()
        fields.append((input_field.name, literal))
    return InputObjectLiteral(type_name=input_type.name, fields=tuple(fields))


def build_variables(operation: Operation, schema: Schema) -> GeneratedVariables:
    """Build the ``Variables`` definition of an operation."""
    variables = GeneratedVariables()
    for variable in operation.variables:
        schema.lookup(variable.type.name)
        generated = GeneratedVariable(
            wire_name=variable.name,
            name=field_name(variable.name),
            type_name=variable.type.name,
            shape=decorate_ref(variable.type),
        )
        if variable.default_value is not None:
            generated.default = compile_default(
                variable.default_value, variable.type, schema, variable.name
            )
            generated.default_constructor = default_constructor_name(variable.name)
        variables.fields.append(generated)
    return variables
