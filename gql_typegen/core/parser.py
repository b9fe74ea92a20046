"""Normalise parsed GraphQL schemas into a :class:`Schema`.

Two input forms are supported and produce the same model:

- an SDL document parsed with graphql-core (``graphql.parse``);
- an introspection query response decoded from JSON.
"""

import logging
from typing import Any

from graphql import (
    DirectiveNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    StringValueNode,
    TypeNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
)

from .errors import ConfigError, InternalError
from .schema import (
    BUILTIN_SCALARS,
    CURRENT,
    DeprecationStatus,
    EnumType,
    EnumValue,
    InputField,
    InputType,
    InterfaceType,
    ObjectType,
    OperationKind,
    Qualifier,
    ScalarType,
    Schema,
    SchemaField,
    TypeRef,
    UnionType,
)

logger = logging.getLogger(__name__)

_EXTENDED_CLASSES = {
    ObjectTypeExtensionNode: ObjectType,
    InterfaceTypeExtensionNode: InterfaceType,
    UnionTypeExtensionNode: UnionType,
    EnumTypeExtensionNode: EnumType,
    InputObjectTypeExtensionNode: InputType,
}


def type_ref_from_node(type_node: TypeNode) -> TypeRef:
    """Flatten a graphql-core type node into a name and an outermost-first qualifier chain."""
    qualifiers = []
    while True:
        if isinstance(type_node, NonNullTypeNode):
            qualifiers.append(Qualifier.REQUIRED)
            type_node = type_node.type
        elif isinstance(type_node, ListTypeNode):
            qualifiers.append(Qualifier.LIST)
            type_node = type_node.type
        elif isinstance(type_node, NamedTypeNode):
            return TypeRef(type_node.name.value, tuple(qualifiers))
        else:
            raise InternalError(f"Unexpected type node: {type(type_node).__name__}")


def type_ref_from_introspection(type_obj: dict[str, Any]) -> TypeRef:
    """Flatten an introspection ``{kind, name, ofType}`` chain."""
    qualifiers = []
    while type_obj is not None:
        kind = type_obj.get("kind")
        if kind == "NON_NULL":
            qualifiers.append(Qualifier.REQUIRED)
        elif kind == "LIST":
            qualifiers.append(Qualifier.LIST)
        else:
            return TypeRef(type_obj["name"], tuple(qualifiers))
        type_obj = type_obj.get("ofType")
    raise InternalError("Introspection type reference has no named type")


def _description(node) -> str | None:
    return node.description.value if getattr(node, "description", None) else None


def _deprecation(directives: tuple[DirectiveNode, ...] | None) -> DeprecationStatus:
    for directive in directives or ():
        if directive.name.value != "deprecated":
            continue
        for argument in directive.arguments or ():
            if argument.name.value == "reason" and isinstance(argument.value, StringValueNode):
                return DeprecationStatus(True, argument.value.value)
        return DeprecationStatus(True, None)
    return CURRENT


class SchemaParser:
    """Builds a :class:`Schema` from SDL or introspection input."""

    def __init__(self):
        self.schema = Schema()
        # Extensions may precede their base definition in SDL.
        self._pending_extensions: list = []

    # SDL

    def parse_sdl(self, document: DocumentNode) -> Schema:
        """Process every definition of a parsed SDL document."""
        for definition in document.definitions:
            if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
                self._process_schema_definition(definition)
            elif isinstance(definition, ScalarTypeDefinitionNode):
                if definition.name.value in BUILTIN_SCALARS:
                    continue
                self.schema.add(ScalarType(
                    name=definition.name.value,
                    description=_description(definition),
                ))
            elif isinstance(definition, EnumTypeDefinitionNode):
                self.schema.add(EnumType(
                    name=definition.name.value,
                    description=_description(definition),
                    values=self._enum_values(definition.values),
                ))
            elif isinstance(definition, ObjectTypeDefinitionNode):
                self.schema.add(ObjectType(
                    name=definition.name.value,
                    description=_description(definition),
                    fields=self._fields(definition.fields),
                    interfaces=[i.name.value for i in definition.interfaces or ()],
                ))
            elif isinstance(definition, InterfaceTypeDefinitionNode):
                self.schema.add(InterfaceType(
                    name=definition.name.value,
                    description=_description(definition),
                    fields=self._fields(definition.fields),
                    interfaces=[i.name.value for i in definition.interfaces or ()],
                ))
            elif isinstance(definition, UnionTypeDefinitionNode):
                self.schema.add(UnionType(
                    name=definition.name.value,
                    description=_description(definition),
                    members=[t.name.value for t in definition.types or ()],
                ))
            elif isinstance(definition, InputObjectTypeDefinitionNode):
                self.schema.add(InputType(
                    name=definition.name.value,
                    description=_description(definition),
                    fields=self._input_fields(definition.fields),
                ))
            elif isinstance(definition, (
                ObjectTypeExtensionNode,
                InterfaceTypeExtensionNode,
                UnionTypeExtensionNode,
                EnumTypeExtensionNode,
                InputObjectTypeExtensionNode,
            )):
                self._pending_extensions.append(definition)

        for extension in self._pending_extensions:
            self._merge_extension(extension)
        self._pending_extensions = []

        logger.debug("Parsed SDL schema with %d types", len(self.schema.types))
        return self.schema

    def _process_schema_definition(self, node):
        for operation_type in node.operation_types or ():
            kind = OperationKind(operation_type.operation.value)
            self.schema.set_root_type(kind, operation_type.type.name.value)

    def _merge_extension(self, node):
        """Merge `extend type ...` definitions into the base type, skipping duplicates."""
        name = node.name.value
        definition_class = _EXTENDED_CLASSES[type(node)]
        existing = self.schema.get(name)
        if existing is None:
            # Extension without a base definition: treat it as the definition.
            existing = self.schema.add(definition_class(name=name))
        elif not isinstance(existing, definition_class):
            raise ConfigError(f"Cannot extend {existing.kind.value} {name} as a different kind of type")

        if isinstance(existing, (ObjectType, InterfaceType)):
            known = {f.name for f in existing.fields}
            for schema_field in self._fields(node.fields):
                if schema_field.name not in known:
                    existing.fields.append(schema_field)
                    known.add(schema_field.name)
            for interface in getattr(node, "interfaces", None) or ():
                if interface.name.value not in existing.interfaces:
                    existing.interfaces.append(interface.name.value)
        elif isinstance(existing, UnionType):
            for member in node.types or ():
                if member.name.value not in existing.members:
                    existing.members.append(member.name.value)
        elif isinstance(existing, EnumType):
            known = {v.name for v in existing.values}
            for value in self._enum_values(node.values):
                if value.name not in known:
                    existing.values.append(value)
                    known.add(value.name)
        elif isinstance(existing, InputType):
            known = {f.name for f in existing.fields}
            for input_field in self._input_fields(node.fields):
                if input_field.name not in known:
                    existing.fields.append(input_field)
                    known.add(input_field.name)

    @staticmethod
    def _fields(field_nodes) -> list[SchemaField]:
        return [
            SchemaField(
                name=node.name.value,
                type=type_ref_from_node(node.type),
                description=_description(node),
                deprecation=_deprecation(node.directives),
            )
            for node in field_nodes or ()
        ]

    @staticmethod
    def _input_fields(field_nodes) -> list[InputField]:
        return [
            InputField(
                name=node.name.value,
                type=type_ref_from_node(node.type),
                description=_description(node),
            )
            for node in field_nodes or ()
        ]

    @staticmethod
    def _enum_values(value_nodes) -> list[EnumValue]:
        return [
            EnumValue(
                name=node.name.value,
                description=_description(node),
                deprecation=_deprecation(node.directives),
            )
            for node in value_nodes or ()
        ]

    # Introspection

    def parse_introspection(self, data: dict[str, Any]) -> Schema:
        """Process an introspection response.

        Accepts ``{"data": {"__schema": ...}}``, ``{"__schema": ...}`` or the
        bare ``__schema`` object.
        """
        if "data" in data:
            data = data["data"] or {}
        schema_obj = data.get("__schema", data)
        if "types" not in schema_obj:
            raise ConfigError("Introspection response has no `__schema.types` entry")

        for kind, key in (
            (OperationKind.QUERY, "queryType"),
            (OperationKind.MUTATION, "mutationType"),
            (OperationKind.SUBSCRIPTION, "subscriptionType"),
        ):
            root = schema_obj.get(key)
            if root and root.get("name"):
                self.schema.set_root_type(kind, root["name"])

        for type_obj in schema_obj["types"]:
            name = type_obj.get("name")
            if not name or name.startswith("__"):
                continue
            self._process_introspection_type(name, type_obj)

        logger.debug("Parsed introspection schema with %d types", len(self.schema.types))
        return self.schema

    def _process_introspection_type(self, name: str, type_obj: dict[str, Any]):
        kind = type_obj.get("kind")
        description = type_obj.get("description")
        if kind == "SCALAR":
            if name in self.schema:
                # Built-in scalars are listed by servers too.
                return
            self.schema.add(ScalarType(name=name, description=description))
        elif kind == "ENUM":
            self.schema.add(EnumType(
                name=name,
                description=description,
                values=[
                    EnumValue(
                        name=value["name"],
                        description=value.get("description"),
                        deprecation=self._introspection_deprecation(value),
                    )
                    for value in type_obj.get("enumValues") or []
                ],
            ))
        elif kind in ("OBJECT", "INTERFACE"):
            fields = [
                SchemaField(
                    name=field_obj["name"],
                    type=type_ref_from_introspection(field_obj["type"]),
                    description=field_obj.get("description"),
                    deprecation=self._introspection_deprecation(field_obj),
                )
                for field_obj in type_obj.get("fields") or []
            ]
            interfaces = [i["name"] for i in type_obj.get("interfaces") or []]
            cls = ObjectType if kind == "OBJECT" else InterfaceType
            self.schema.add(cls(
                name=name,
                description=description,
                fields=fields,
                interfaces=interfaces,
            ))
        elif kind == "UNION":
            self.schema.add(UnionType(
                name=name,
                description=description,
                members=[t["name"] for t in type_obj.get("possibleTypes") or []],
            ))
        elif kind == "INPUT_OBJECT":
            self.schema.add(InputType(
                name=name,
                description=description,
                fields=[
                    InputField(
                        name=field_obj["name"],
                        type=type_ref_from_introspection(field_obj["type"]),
                        description=field_obj.get("description"),
                    )
                    for field_obj in type_obj.get("inputFields") or []
                ],
            ))
        else:
            raise ConfigError(f"Unsupported introspection type kind {kind!r} for {name}")

    @staticmethod
    def _introspection_deprecation(obj: dict[str, Any]) -> DeprecationStatus:
        if obj.get("isDeprecated"):
            return DeprecationStatus(True, obj.get("deprecationReason"))
        return CURRENT
