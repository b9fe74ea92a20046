"""Map GraphQL type qualifiers to target nullability and list shapes."""

from typing import Sequence

from .errors import DoubleRequiredError
from .ir import ListShape, NamedShape, OptionalShape, TypeShape
from .schema import Qualifier, TypeRef


def decorate(base: str, qualifiers: Sequence[Qualifier]) -> TypeShape:
    """Wrap ``base`` according to an outermost-first qualifier chain.

    ``[Int!]`` (LIST, REQUIRED) becomes ``Optional[List[Int]]`` and
    ``[Int]!`` (REQUIRED, LIST) becomes ``List[Optional[Int]]``.
    """
    shape: TypeShape = NamedShape(base)
    non_null = False

    # Walk from the inner type outwards.
    for qualifier in reversed(qualifiers):
        if qualifier is Qualifier.LIST:
            if non_null:
                shape = ListShape(shape)
                non_null = False
            else:
                shape = ListShape(OptionalShape(shape))
        elif non_null:
            raise DoubleRequiredError(base)
        else:
            non_null = True

    if not non_null:
        shape = OptionalShape(shape)
    return shape


def decorate_ref(ref: TypeRef, name: str | None = None) -> TypeShape:
    """Decorate a type reference, optionally replacing its base name."""
    return decorate(name or ref.name, ref.qualifiers)
