"""Query document model: operations, fragments and selection sets.

Built from a graphql-core ``DocumentNode``. Selection items are frozen
dataclasses so that identical selections compare equal and can be
deduplicated when several fragments select the same thing.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Union

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
    TokenKind,
    ValueNode,
)

from .errors import (
    DuplicateFragmentError,
    OperationNotFoundError,
    SelectionSetAtRootError,
    SubscriptionRootError,
    UnnamedOperationError,
)
from .options import CodegenMode, CodegenOptions
from .parser import type_ref_from_node
from .schema import OperationKind, TypeRef

logger = logging.getLogger(__name__)

TYPENAME = "__typename"


@dataclass(frozen=True)
class SelectedField:
    name: str
    alias: str | None = None
    selection: "SelectionSet" = ()

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class Typename:
    """The `__typename` meta-field."""
    alias: str | None = None

    @property
    def response_key(self) -> str:
        return self.alias or TYPENAME


@dataclass(frozen=True)
class FragmentSpread:
    fragment_name: str


@dataclass(frozen=True)
class InlineFragment:
    type_condition: str | None
    selection: "SelectionSet" = ()


SelectionItem = Union[SelectedField, Typename, FragmentSpread, InlineFragment]
SelectionSet = tuple[SelectionItem, ...]


def selection_from_node(node: SelectionSetNode | None) -> SelectionSet:
    """Convert a graphql-core selection set, preserving order."""
    if node is None:
        return ()
    items: list[SelectionItem] = []
    for selection in node.selections:
        if isinstance(selection, FieldNode):
            alias = selection.alias.value if selection.alias else None
            if selection.name.value == TYPENAME:
                items.append(Typename(alias))
            else:
                items.append(SelectedField(
                    name=selection.name.value,
                    alias=alias,
                    selection=selection_from_node(selection.selection_set),
                ))
        elif isinstance(selection, FragmentSpreadNode):
            items.append(FragmentSpread(selection.name.value))
        elif isinstance(selection, InlineFragmentNode):
            condition = selection.type_condition.name.value if selection.type_condition else None
            items.append(InlineFragment(condition, selection_from_node(selection.selection_set)))
    return tuple(items)


def iter_spreads(selection: SelectionSet) -> Iterator[str]:
    """Yield the fragment names spread anywhere inside a selection set."""
    for item in selection:
        if isinstance(item, FragmentSpread):
            yield item.fragment_name
        elif isinstance(item, (SelectedField, InlineFragment)):
            yield from iter_spreads(item.selection)


@dataclass
class Variable:
    name: str
    type: TypeRef
    default_value: ValueNode | None = None


@dataclass
class Operation:
    name: str
    kind: OperationKind
    variables: list[Variable] = field(default_factory=list)
    selection: SelectionSet = ()


@dataclass
class Fragment:
    name: str
    on: str
    selection: SelectionSet = ()
    required: bool = False
    recursive: bool = False


@dataclass
class QueryDocument:
    operations: list[Operation] = field(default_factory=list)
    fragments: dict[str, Fragment] = field(default_factory=dict)
    source: str = ""

    @classmethod
    def from_ast(cls, document: DocumentNode, source: str = "") -> "QueryDocument":
        query = cls(source=source)
        for definition in document.definitions:
            if isinstance(definition, OperationDefinitionNode):
                query.operations.append(_operation_from_node(definition))
            elif isinstance(definition, FragmentDefinitionNode):
                name = definition.name.value
                if name in query.fragments:
                    raise DuplicateFragmentError(name)
                query.fragments[name] = Fragment(
                    name=name,
                    on=definition.type_condition.name.value,
                    selection=selection_from_node(definition.selection_set),
                )
        compute_fragment_recursion(query.fragments)
        logger.debug(
            "Loaded query document: %d operations, %d fragments",
            len(query.operations),
            len(query.fragments),
        )
        return query

    @property
    def operation_names(self) -> list[str]:
        return [operation.name for operation in self.operations]

    def get_operation(self, name: str) -> Operation | None:
        for operation in self.operations:
            if operation.name == name:
                return operation
        return None


def _operation_from_node(node: OperationDefinitionNode) -> Operation:
    kind = OperationKind(node.operation.value)
    if node.name is None:
        if node.loc is not None and node.loc.start_token.kind == TokenKind.BRACE_L:
            raise SelectionSetAtRootError()
        raise UnnamedOperationError(kind.value)

    name = node.name.value
    selection = selection_from_node(node.selection_set)
    if not selection:
        raise SelectionSetAtRootError(name)

    if kind is OperationKind.SUBSCRIPTION:
        root_fields = [item.response_key for item in selection if isinstance(item, SelectedField)]
        if len(root_fields) != 1:
            raise SubscriptionRootError(name, root_fields)

    variables = [
        Variable(
            name=definition.variable.name.value,
            type=type_ref_from_node(definition.type),
            default_value=definition.default_value,
        )
        for definition in node.variable_definitions or ()
    ]
    return Operation(name=name, kind=kind, variables=variables, selection=selection)


def compute_fragment_recursion(fragments: dict[str, Fragment]):
    """Flag every fragment whose expansion reaches a spread of itself."""
    direct = {name: set(iter_spreads(fragment.selection)) for name, fragment in fragments.items()}

    for name, fragment in fragments.items():
        seen: set[str] = set()
        stack = list(direct[name])
        while stack:
            current = stack.pop()
            if current == name:
                fragment.recursive = True
                break
            if current in seen or current not in direct:
                continue
            seen.add(current)
            stack.extend(direct[current])


def select_operations(document: QueryDocument, options: CodegenOptions) -> list[Operation]:
    """Pick the operations to generate.

    A selected name must match an operation. Without one, CLI mode
    generates every operation and library mode needs exactly one.
    """
    name = options.selected_operation_name
    if name:
        operation = document.get_operation(name)
        if operation is None:
            raise OperationNotFoundError(name, document.operation_names)
        return [operation]

    if options.mode is CodegenMode.CLI:
        return list(document.operations)

    if len(document.operations) != 1:
        raise OperationNotFoundError(None, document.operation_names)
    return list(document.operations)
