"""Name conversions shared by the resolver and the emitters."""

import keyword
import re


def snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def pascal_case(name: str) -> str:
    """Convert snake_case or camelCase to PascalCase."""
    return "".join(word[:1].upper() + word[1:] for word in snake_case(name).split("_"))


# Soft keywords are valid identifiers, but `type` and `match` read badly as
# attribute names on generated models, so they are escaped as well.
PYTHON_KEYWORDS = set(keyword.kwlist) | {"type", "match", "case"}


def safe_name(name: str) -> str:
    """Suffix Python keywords with an underscore."""
    if name in PYTHON_KEYWORDS:
        return f"{name}_"
    return name


def field_name(response_key: str) -> str:
    """Attribute name for a GraphQL response key, e.g. `firstName` -> `first_name`."""
    return safe_name(snake_case(response_key))
