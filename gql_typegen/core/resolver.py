"""Resolve selection sets against the schema into generated structs.

Generated names are built from the chain of response keys leading to a
selection (``MyQuery`` + ``user`` + ``friends`` -> ``MyQueryUserFriends``).
Concatenating keys can still produce the same name for two paths
(``user { friends }`` next to ``userFriends: users``), so every name is
claimed through :meth:`SelectionResolver.claim_name`, which appends a
numeric suffix to a name that is already taken.
"""

import logging
from typing import Iterable

from .errors import (
    ConflictingSelectionError,
    InternalError,
    InvalidFragmentTargetError,
    MissingTypenameError,
    UnknownFragmentError,
    UnknownTypeError,
)
from .ir import Definition, GeneratedField, GeneratedStruct, GeneratedUnion, NamedShape
from .naming import field_name, pascal_case
from .options import CodegenOptions, DeprecationStrategy
from .qualifiers import decorate_ref
from .query import (
    Fragment,
    FragmentSpread,
    InlineFragment,
    Operation,
    QueryDocument,
    SelectedField,
    SelectionItem,
    SelectionSet,
    Typename,
)
from .schema import COMPOSITE_KINDS, DeprecationStatus, Schema, TypeKind
from .unions import resolve_variants, split_selection

logger = logging.getLogger(__name__)

RESPONSE_DATA = "ResponseData"
DEFAULT_DEPRECATION_MESSAGE = "This field is deprecated."


def deprecation_marker(
    status: DeprecationStatus,
    strategy: DeprecationStrategy,
) -> tuple[bool, str | None]:
    """Return ``(keep, marker)`` for a field with the given deprecation status."""
    if not status.is_deprecated or strategy is DeprecationStrategy.ALLOW:
        return True, None
    if strategy is DeprecationStrategy.DENY:
        return False, None
    return True, status.reason or DEFAULT_DEPRECATION_MESSAGE


def _item_key(item: SelectionItem) -> str:
    if isinstance(item, FragmentSpread):
        return f"...{item.fragment_name}"
    return item.response_key


class SelectionResolver:
    """Walks operations and fragments, collecting struct and union definitions.

    One resolver serves one generation pass; ``definitions`` lists every
    generated struct and union with children before their parents.
    ``reserved`` names (fragments, schema types emitted alongside) are never
    handed out to path-derived structs.
    """

    def __init__(
        self,
        schema: Schema,
        document: QueryDocument,
        options: CodegenOptions,
        reserved: Iterable[str] = (),
    ):
        self.schema = schema
        self.document = document
        self.options = options
        self.definitions: list[Definition] = []
        self.names: set[str] = {RESPONSE_DATA, *reserved}

    def claim_name(self, name: str) -> str:
        """Return ``name``, suffixed with 2, 3, ... if it is already taken."""
        unique = name
        suffix = 2
        while unique in self.names:
            unique = f"{name}{suffix}"
            suffix += 1
        if unique != name:
            logger.debug("Generated name %s is already taken, using %s", name, unique)
        self.names.add(unique)
        return unique

    def resolve_operation(self, operation: Operation) -> GeneratedStruct:
        root = self.schema.root_type_for(operation.kind)
        self.schema.lookup(root)
        return self.build_struct(RESPONSE_DATA, root, operation.selection, pascal_case(operation.name))

    def resolve_fragment(self, fragment: Fragment) -> Definition:
        """Build the struct (object/interface) or union a fragment expands to."""
        definition = self.schema.get(fragment.on)
        if definition is None:
            raise UnknownTypeError(fragment.on)
        if definition.kind not in COMPOSITE_KINDS:
            raise InvalidFragmentTargetError(fragment.name, fragment.on, definition.kind.value)
        if definition.kind is TypeKind.UNION:
            return self.build_union(fragment.name, fragment.on, fragment.selection)
        return self.build_struct(fragment.name, fragment.on, fragment.selection, fragment.name)

    def get_fragment(self, name: str) -> Fragment:
        fragment = self.document.fragments.get(name)
        if fragment is None:
            raise UnknownFragmentError(name, self.document.fragments)
        return fragment

    # Structs and unions

    def build_struct(
        self,
        name: str,
        scope: str,
        selection: SelectionSet,
        prefix: str,
    ) -> GeneratedStruct:
        """Resolve ``selection`` on an object or interface into a struct.

        Variant selections produce a companion union named ``<prefix>On``
        and one extra flattened ``on`` field.
        """
        plain, groups = split_selection(self, scope, selection)
        struct = GeneratedStruct(name=name, fields=self.resolve_fields(scope, plain, prefix, name))

        if groups:
            if not self.selects_typename(scope, plain):
                raise MissingTypenameError(prefix)
            union = resolve_variants(self, scope, groups, prefix, self.claim_name(f"{prefix}On"))
            struct.on = union.name
            struct.fields.append(GeneratedField(
                wire_name="on",
                name="on",
                shape=NamedShape(union.name),
                flatten=True,
            ))

        self.definitions.append(struct)
        return struct

    def build_union(self, name: str, scope: str, selection: SelectionSet) -> GeneratedUnion:
        """Resolve a selection on a union type into a tagged union."""
        plain, groups = split_selection(self, scope, selection)
        if not self.selects_typename(scope, plain):
            raise MissingTypenameError(name)
        for item in plain:
            if isinstance(item, SelectedField):
                # Unions have no fields of their own; this raises with the details.
                self.schema.field(scope, item.name)
        return resolve_variants(self, scope, groups, name, name)

    def selects_typename(
        self,
        scope: str,
        items: Iterable[SelectionItem],
        _expanding: frozenset[str] = frozenset(),
    ) -> bool:
        """True if ``__typename`` is selected on ``scope``.

        Fragment spreads and inline fragments count when their type condition
        covers the scope, since their fields are present on every response
        object of that scope.
        """
        for item in items:
            if isinstance(item, Typename):
                return True
            if isinstance(item, FragmentSpread):
                if item.fragment_name in _expanding:
                    continue
                fragment = self.get_fragment(item.fragment_name)
                if self.schema.covers(scope, fragment.on) and self.selects_typename(
                    scope, fragment.selection, _expanding | {fragment.name}
                ):
                    return True
            elif isinstance(item, InlineFragment):
                target = item.type_condition or scope
                if self.schema.covers(scope, target) and self.selects_typename(
                    scope, item.selection, _expanding
                ):
                    return True
        return False

    # Fields

    def resolve_fields(
        self,
        scope: str,
        items: list[SelectionItem],
        prefix: str,
        struct_name: str,
    ) -> list[GeneratedField]:
        fields = []
        seen: dict[str, SelectionItem] = {}
        for item in items:
            key = _item_key(item)
            if key in seen:
                if seen[key] != item:
                    raise ConflictingSelectionError(key, struct_name)
                continue
            seen[key] = item

            generated = self.resolve_item(scope, item, prefix)
            if generated is not None:
                fields.append(generated)
        return fields

    def resolve_item(self, scope: str, item: SelectionItem, prefix: str) -> GeneratedField | None:
        if isinstance(item, Typename):
            return GeneratedField(
                wire_name=item.response_key,
                name=field_name(item.alias) if item.alias else "typename",
                shape=NamedShape("String"),
            )
        if isinstance(item, FragmentSpread):
            return self.resolve_spread(item)
        if isinstance(item, SelectedField):
            return self.resolve_field(scope, item, prefix)
        raise InternalError(f"Unexpected selection item {item!r} on {scope}")

    def resolve_spread(self, item: FragmentSpread) -> GeneratedField:
        fragment = self.get_fragment(item.fragment_name)
        fragment.required = True
        return GeneratedField(
            wire_name=fragment.name,
            name=field_name(fragment.name),
            shape=NamedShape(fragment.name),
            flatten=True,
            indirect=fragment.recursive,
        )

    def resolve_field(self, scope: str, item: SelectedField, prefix: str) -> GeneratedField | None:
        schema_field = self.schema.field(scope, item.name)
        keep, deprecation = deprecation_marker(
            schema_field.deprecation, self.options.deprecation_strategy
        )
        if not keep:
            logger.debug("Dropping deprecated field %s.%s", scope, item.name)
            return None

        field_type = self.schema.lookup(schema_field.type.name)
        if field_type.kind in (TypeKind.SCALAR, TypeKind.ENUM):
            shape = decorate_ref(schema_field.type)
        elif field_type.kind in (TypeKind.OBJECT, TypeKind.INTERFACE):
            struct_name = self.claim_name(prefix + pascal_case(item.response_key))
            self.build_struct(struct_name, field_type.name, item.selection, struct_name)
            shape = decorate_ref(schema_field.type, struct_name)
        elif field_type.kind is TypeKind.UNION:
            union_name = self.claim_name(prefix + pascal_case(item.response_key))
            self.build_union(union_name, field_type.name, item.selection)
            shape = decorate_ref(schema_field.type, union_name)
        else:
            raise InternalError(f"Field {scope}.{item.name} has input object type {field_type.name}")

        return GeneratedField(
            wire_name=item.response_key,
            name=field_name(item.response_key),
            shape=shape,
            deprecation=deprecation,
            description=schema_field.description,
        )
