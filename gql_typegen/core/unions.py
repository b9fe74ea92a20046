"""Variant resolution for selections on unions and interfaces.

Union and interface coverage is closed: every schema-declared member gets a
variant, selected or not. Enums are the open-world counterpart and live in
:mod:`gql_typegen.core.enums`; the two share no code.
"""

from typing import TYPE_CHECKING

from .errors import UnknownFragmentError, UnknownTypeError
from .ir import GeneratedUnion, GeneratedUnionVariant
from .query import FragmentSpread, InlineFragment, SelectionItem, SelectionSet, Typename
from .schema import UnionType

if TYPE_CHECKING:
    from .resolver import SelectionResolver


Groups = dict[str, list[SelectionItem]]


def split_selection(
    resolver: "SelectionResolver",
    scope: str,
    selection: SelectionSet,
    _expanding: frozenset[str] = frozenset(),
) -> tuple[list[SelectionItem], Groups]:
    """Separate the items that always apply to ``scope`` from per-member groups.

    Inline fragments and fragment spreads on the scope itself (or on a type
    that covers it) are merged into the plain part. Everything else is
    grouped by the member type it targets, in first-seen order.
    """
    schema = resolver.schema
    plain: list[SelectionItem] = []
    groups: Groups = {}

    def merge(sub_plain: list[SelectionItem], sub_groups: Groups):
        plain.extend(sub_plain)
        for target, items in sub_groups.items():
            groups.setdefault(target, []).extend(items)

    for item in selection:
        if isinstance(item, InlineFragment):
            target = item.type_condition or scope
            if schema.covers(scope, target):
                merge(*split_selection(resolver, scope, item.selection, _expanding))
            else:
                groups.setdefault(target, []).extend(item.selection)
        elif isinstance(item, FragmentSpread):
            fragment = resolver.document.fragments.get(item.fragment_name)
            if fragment is None:
                raise UnknownFragmentError(item.fragment_name, resolver.document.fragments)
            fragment.required = True
            if not schema.covers(scope, fragment.on):
                groups.setdefault(fragment.on, []).append(item)
            elif isinstance(schema.get(scope), UnionType):
                # A union has no struct to flatten into, so the fragment's
                # variants are merged into this selection.
                if fragment.name not in _expanding:
                    merge(*split_selection(
                        resolver, scope, fragment.selection, _expanding | {fragment.name}
                    ))
            else:
                plain.append(item)
        else:
            plain.append(item)

    return plain, groups


def resolve_variants(
    resolver: "SelectionResolver",
    scope: str,
    groups: Groups,
    prefix: str,
    union_name: str,
) -> GeneratedUnion:
    """Build one struct per selected member plus placeholders for the rest.

    The variant count always equals the number of declared members.
    """
    members = resolver.schema.possible_types(scope)
    for target in groups:
        if target not in members:
            raise UnknownTypeError(target, members)

    variants = []
    for target, items in groups.items():
        struct_name = resolver.claim_name(f"{prefix}On{target}")
        # The discriminator is carried by the union tag.
        fields = tuple(item for item in items if not isinstance(item, Typename))
        resolver.build_struct(struct_name, target, fields, struct_name)
        variants.append(GeneratedUnionVariant(type_name=target, struct=struct_name))

    for member in members:
        if member not in groups:
            variants.append(GeneratedUnionVariant(type_name=member))

    union = GeneratedUnion(name=union_name, variants=variants)
    resolver.definitions.append(union)
    return union
