"""Emission plan: the language-agnostic description of generated types.

One :class:`EmissionPlan` is produced per operation. Target emitters render
it to source text; nothing in this module knows about a target language.
"""

from dataclasses import dataclass, field
from typing import Union

from .schema import OperationKind, TypeKind


# Type shapes


@dataclass(frozen=True)
class NamedShape:
    name: str


@dataclass(frozen=True)
class OptionalShape:
    inner: "TypeShape"


@dataclass(frozen=True)
class ListShape:
    inner: "TypeShape"


TypeShape = Union[NamedShape, OptionalShape, ListShape]


def base_name(shape: TypeShape) -> str:
    """Return the named type at the core of a shape."""
    while not isinstance(shape, NamedShape):
        shape = shape.inner
    return shape.name


# Response types


@dataclass
class GeneratedField:
    """A field of a generated struct.

    ``flatten`` fields share the JSON object of their parent on the wire.
    ``indirect`` marks a reference that needs one level of indirection
    (a recursive fragment); each emitter decides how to express it.
    """
    wire_name: str
    name: str
    shape: TypeShape
    deprecation: str | None = None
    flatten: bool = False
    indirect: bool = False
    description: str | None = None

    @property
    def needs_rename(self) -> bool:
        return self.wire_name != self.name

    @property
    def type_name(self) -> str:
        return base_name(self.shape)


@dataclass
class GeneratedStruct:
    name: str
    fields: list[GeneratedField] = field(default_factory=list)
    # Name of the companion union the `on` field flattens into.
    on: str | None = None


@dataclass
class GeneratedUnionVariant:
    type_name: str
    struct: str | None = None  # None for members the query does not select

    @property
    def is_placeholder(self) -> bool:
        return self.struct is None


@dataclass
class GeneratedUnion:
    """A tagged union discriminated by `__typename`."""
    name: str
    variants: list[GeneratedUnionVariant] = field(default_factory=list)


Definition = Union[GeneratedStruct, GeneratedUnion]


# Schema-level definitions


@dataclass
class GeneratedEnumVariant:
    wire_name: str
    name: str
    description: str | None = None


@dataclass
class GeneratedEnum:
    """An open enum: known variants plus a catch-all for unknown values."""
    name: str
    variants: list[GeneratedEnumVariant] = field(default_factory=list)
    other_variant: str = "Other"
    description: str | None = None


@dataclass
class GeneratedScalar:
    name: str
    description: str | None = None


@dataclass
class GeneratedInput:
    name: str
    fields: list[GeneratedField] = field(default_factory=list)
    description: str | None = None


@dataclass
class GeneratedFragment:
    name: str
    on: str
    on_kind: TypeKind
    recursive: bool = False


# Default value literals


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool


@dataclass(frozen=True)
class IntLiteral:
    value: int


@dataclass(frozen=True)
class FloatLiteral:
    value: float


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class EnumLiteral:
    enum: str
    value: str


@dataclass(frozen=True)
class ListLiteral:
    items: tuple["Literal", ...]


@dataclass(frozen=True)
class InputObjectLiteral:
    type_name: str
    fields: tuple[tuple[str, "Literal"], ...]


@dataclass(frozen=True)
class AbsentLiteral:
    pass


@dataclass(frozen=True)
class PresentLiteral:
    inner: "Literal"


Literal = Union[
    BooleanLiteral,
    IntLiteral,
    FloatLiteral,
    StringLiteral,
    EnumLiteral,
    ListLiteral,
    InputObjectLiteral,
    AbsentLiteral,
    PresentLiteral,
]


# Variables


@dataclass
class GeneratedVariable:
    wire_name: str
    name: str
    type_name: str
    shape: TypeShape
    default: Literal | None = None
    default_constructor: str | None = None

    @property
    def needs_rename(self) -> bool:
        return self.wire_name != self.name


@dataclass
class GeneratedVariables:
    name: str = "Variables"
    fields: list[GeneratedVariable] = field(default_factory=list)

    @property
    def defaults(self) -> list[GeneratedVariable]:
        return [v for v in self.fields if v.default is not None]


@dataclass
class EmissionPlan:
    """Everything an emitter needs to render one operation."""
    operation_name: str
    operation_kind: OperationKind
    module_name: str
    query_text: str
    response: GeneratedStruct
    variables: GeneratedVariables = field(default_factory=GeneratedVariables)
    scalars: list[GeneratedScalar] = field(default_factory=list)
    enums: list[GeneratedEnum] = field(default_factory=list)
    inputs: list[GeneratedInput] = field(default_factory=list)
    fragments: list[GeneratedFragment] = field(default_factory=list)
    # Structs and unions in dependency order, children first.
    definitions: list[Definition] = field(default_factory=list)

    @property
    def structs(self) -> list[GeneratedStruct]:
        return [d for d in self.definitions if isinstance(d, GeneratedStruct)]

    @property
    def unions(self) -> list[GeneratedUnion]:
        return [d for d in self.definitions if isinstance(d, GeneratedUnion)]

    def get_definition(self, name: str) -> Definition | None:
        if name == self.response.name:
            return self.response
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None
