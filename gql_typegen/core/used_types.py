"""Collect the schema definitions an operation actually references.

Only collected scalars, enums and input objects end up in an emission plan,
so a schema with thousands of types still produces small modules.
"""

import logging
from dataclasses import dataclass, field

from .errors import InvalidFragmentTargetError, UnknownFragmentError
from .options import CodegenOptions, DeprecationStrategy
from .query import (
    Fragment,
    FragmentSpread,
    InlineFragment,
    Operation,
    QueryDocument,
    SelectedField,
    SelectionSet,
)
from .schema import COMPOSITE_KINDS, EnumType, InputType, ScalarType, Schema, TypeDefinition

logger = logging.getLogger(__name__)


@dataclass
class UsedTypes:
    """Definitions referenced by one operation.

    ``types`` follows schema declaration order and ``fragments`` document
    order, so output is stable across runs.
    """
    types: list[TypeDefinition] = field(default_factory=list)
    fragments: list[Fragment] = field(default_factory=list)

    @property
    def scalars(self) -> list[ScalarType]:
        """Custom scalars; built-in scalars map to target primitives."""
        return [t for t in self.types if isinstance(t, ScalarType) and not t.builtin]

    @property
    def enums(self) -> list[EnumType]:
        return [t for t in self.types if isinstance(t, EnumType)]

    @property
    def inputs(self) -> list[InputType]:
        return [t for t in self.types if isinstance(t, InputType)]


class UsedTypesCollector:
    def __init__(self, schema: Schema, document: QueryDocument, options: CodegenOptions):
        self.schema = schema
        self.document = document
        self.options = options
        self._types: set[str] = set()
        self._fragments: set[str] = set()

    def collect(self, operation: Operation) -> UsedTypes:
        self._types = set()
        self._fragments = set()

        for variable in operation.variables:
            self._add_input_closure(variable.type.name)

        root = self.schema.root_type_for(operation.kind)
        self._add(root)
        self._walk(root, operation.selection)

        used = UsedTypes(
            types=[d for d in self.schema if d.name in self._types],
            fragments=[f for f in self.document.fragments.values() if f.name in self._fragments],
        )
        for definition in used.types:
            self.schema.mark_required(definition.name)
        for fragment in used.fragments:
            fragment.required = True

        logger.debug(
            "Operation %s uses %d types and %d fragments",
            operation.name,
            len(used.types),
            len(used.fragments),
        )
        return used

    def _add(self, name: str) -> TypeDefinition:
        definition = self.schema.lookup(name)
        self._types.add(name)
        return definition

    def _add_input_closure(self, name: str):
        """Add a variable type and, for input objects, every type reachable from its fields."""
        pending = [name]
        while pending:
            current = pending.pop()
            if current in self._types:
                continue
            definition = self._add(current)
            if isinstance(definition, InputType):
                pending.extend(input_field.type.name for input_field in definition.fields)

    def _walk(self, scope: str, selection: SelectionSet):
        for item in selection:
            if isinstance(item, SelectedField):
                schema_field = self.schema.field(scope, item.name)
                if (
                    schema_field.deprecation.is_deprecated
                    and self.options.deprecation_strategy is DeprecationStrategy.DENY
                ):
                    continue
                self._add(schema_field.type.name)
                self._walk(schema_field.type.name, item.selection)
            elif isinstance(item, InlineFragment):
                target = item.type_condition or scope
                self._add(target)
                self._walk(target, item.selection)
            elif isinstance(item, FragmentSpread):
                fragment = self.document.fragments.get(item.fragment_name)
                if fragment is None:
                    raise UnknownFragmentError(item.fragment_name, self.document.fragments)
                # Recursive fragments are walked once.
                if fragment.name in self._fragments:
                    continue
                self._fragments.add(fragment.name)
                target = self._add(fragment.on)
                if target.kind not in COMPOSITE_KINDS:
                    raise InvalidFragmentTargetError(fragment.name, fragment.on, target.kind.value)
                self._walk(fragment.on, fragment.selection)
