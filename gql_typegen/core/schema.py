"""Semantic model of a GraphQL schema.

All six categories of named types (scalars, enums, objects, interfaces,
unions and input objects) share one namespace. The model is built once per
schema by :class:`gql_typegen.core.parser.SchemaParser`; after loading, the
only mutation is the ``required`` flag, which goes from False to True when a
generated operation references the definition.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from .errors import DuplicateTypeError, InternalError, UnknownFieldError, UnknownTypeError


class TypeKind(Enum):
    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    INPUT = "input object"


class Qualifier(Enum):
    LIST = "list"
    REQUIRED = "required"


class OperationKind(Enum):
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


DEFAULT_ROOT_TYPES = {
    OperationKind.QUERY: "Query",
    OperationKind.MUTATION: "Mutation",
    OperationKind.SUBSCRIPTION: "Subscription",
}

BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")


@dataclass(frozen=True)
class TypeRef:
    """A named type plus its qualifiers, outermost first.

    ``[Int!]!`` is ``TypeRef("Int", (REQUIRED, LIST, REQUIRED))``.
    """
    name: str
    qualifiers: tuple[Qualifier, ...] = ()

    @property
    def is_optional(self) -> bool:
        return not self.qualifiers or self.qualifiers[0] is not Qualifier.REQUIRED

    @property
    def is_list(self) -> bool:
        return Qualifier.LIST in self.qualifiers

    def element(self) -> "TypeRef":
        """Return the reference of the list element."""
        qualifiers = list(self.qualifiers)
        if qualifiers and qualifiers[0] is Qualifier.REQUIRED:
            qualifiers.pop(0)
        if not qualifiers or qualifiers[0] is not Qualifier.LIST:
            raise InternalError(f"{self} is not a list type")
        return TypeRef(self.name, tuple(qualifiers[1:]))

    def __str__(self) -> str:
        rendered = self.name
        for qualifier in reversed(self.qualifiers):
            if qualifier is Qualifier.LIST:
                rendered = f"[{rendered}]"
            else:
                rendered = f"{rendered}!"
        return rendered


@dataclass(frozen=True)
class DeprecationStatus:
    is_deprecated: bool = False
    reason: str | None = None


CURRENT = DeprecationStatus()


@dataclass
class SchemaField:
    """A field on an object or interface type."""
    name: str
    type: TypeRef
    description: str | None = None
    deprecation: DeprecationStatus = CURRENT


@dataclass
class InputField:
    """A field on an input object type."""
    name: str
    type: TypeRef
    description: str | None = None


@dataclass
class EnumValue:
    name: str
    description: str | None = None
    deprecation: DeprecationStatus = CURRENT


@dataclass
class TypeDefinition:
    name: str
    kind: TypeKind
    description: str | None = None
    # Set once an operation references this definition; never reset.
    required: bool = field(default=False, compare=False)


@dataclass
class ScalarType(TypeDefinition):
    kind: TypeKind = TypeKind.SCALAR
    builtin: bool = False


@dataclass
class EnumType(TypeDefinition):
    kind: TypeKind = TypeKind.ENUM
    values: list[EnumValue] = field(default_factory=list)


@dataclass
class ObjectType(TypeDefinition):
    kind: TypeKind = TypeKind.OBJECT
    fields: list[SchemaField] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)


@dataclass
class InterfaceType(TypeDefinition):
    kind: TypeKind = TypeKind.INTERFACE
    fields: list[SchemaField] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)


@dataclass
class UnionType(TypeDefinition):
    kind: TypeKind = TypeKind.UNION
    members: list[str] = field(default_factory=list)


@dataclass
class InputType(TypeDefinition):
    kind: TypeKind = TypeKind.INPUT
    fields: list[InputField] = field(default_factory=list)

    def get_field(self, name: str) -> InputField | None:
        for input_field in self.fields:
            if input_field.name == name:
                return input_field
        return None


COMPOSITE_KINDS = (TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.UNION)


class Schema:
    """Registry of every named type in a GraphQL schema."""

    def __init__(
        self,
        query_type: str | None = None,
        mutation_type: str | None = None,
        subscription_type: str | None = None,
    ):
        self.types: dict[str, TypeDefinition] = {}
        self.root_types: dict[OperationKind, str] = {}
        for kind, name in (
            (OperationKind.QUERY, query_type),
            (OperationKind.MUTATION, mutation_type),
            (OperationKind.SUBSCRIPTION, subscription_type),
        ):
            if name:
                self.root_types[kind] = name
        for name in BUILTIN_SCALARS:
            self.add(ScalarType(name=name, builtin=True))

    def __contains__(self, name: str) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[TypeDefinition]:
        return iter(self.types.values())

    def add(self, definition: TypeDefinition) -> TypeDefinition:
        """Register a definition; names are unique across all categories."""
        if definition.name in self.types:
            raise DuplicateTypeError(definition.name)
        self.types[definition.name] = definition
        return definition

    def get(self, name: str) -> TypeDefinition | None:
        return self.types.get(name)

    def lookup(self, name: str) -> TypeDefinition:
        try:
            return self.types[name]
        except KeyError:
            raise UnknownTypeError(name) from None

    def set_root_type(self, kind: OperationKind, name: str):
        self.root_types[kind] = name

    def root_type_for(self, kind: OperationKind) -> str:
        """Return the declared root type for an operation kind, or the conventional name."""
        return self.root_types.get(kind, DEFAULT_ROOT_TYPES[kind])

    def mark_required(self, name: str):
        """Flag a definition as referenced by a generated operation."""
        self.lookup(name).required = True

    def required_names(self) -> list[str]:
        return [definition.name for definition in self.types.values() if definition.required]

    def fields_of(self, type_name: str) -> list[SchemaField]:
        definition = self.lookup(type_name)
        if isinstance(definition, (ObjectType, InterfaceType)):
            return definition.fields
        return []

    def field(self, type_name: str, field_name: str) -> SchemaField:
        """Look up a field on an object or interface, listing alternatives on failure."""
        fields = self.fields_of(type_name)
        for schema_field in fields:
            if schema_field.name == field_name:
                return schema_field
        raise UnknownFieldError(field_name, type_name, [f.name for f in fields])

    def possible_types(self, type_name: str) -> list[str]:
        """Return the concrete object types a union or interface can resolve to."""
        definition = self.lookup(type_name)
        if isinstance(definition, UnionType):
            return list(definition.members)
        if isinstance(definition, InterfaceType):
            return [
                candidate.name
                for candidate in self.types.values()
                if isinstance(candidate, ObjectType) and type_name in candidate.interfaces
            ]
        if isinstance(definition, ObjectType):
            return [definition.name]
        return []

    def is_composite(self, type_name: str) -> bool:
        definition = self.get(type_name)
        return definition is not None and definition.kind in COMPOSITE_KINDS

    def covers(self, scope: str, target: str) -> bool:
        """True when every value of type ``scope`` is also a ``target``.

        A fragment on ``target`` then always applies inside a selection on
        ``scope`` and needs no variant.
        """
        if scope == target:
            return True
        definition = self.get(scope)
        if isinstance(definition, ObjectType):
            return scope in self.possible_types(target)
        if isinstance(definition, InterfaceType):
            return target in definition.interfaces
        return False

    def of_kind(self, kind: TypeKind) -> list[TypeDefinition]:
        return [definition for definition in self.types.values() if definition.kind is kind]
