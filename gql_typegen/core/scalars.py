"""Scalar type mappings for the Python target.

Built-in GraphQL scalars always map to Python primitives. Custom scalars
map through a :class:`ScalarRegistry`; unregistered ones become aliases of
``Any`` in the generated module.

Example usage:
    from gql_typegen.core.scalars import ScalarMapping, ScalarRegistry

    registry = ScalarRegistry()
    registry.register("Money", ScalarMapping("Decimal", "from decimal import Decimal"))
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for custom scalar mappings.

    Attributes:
        python_type: The Python type name (e.g., "datetime", "Decimal")
        import_statement: The import needed for this type (e.g., "from datetime import datetime")
    """

    python_type: str
    import_statement: str | None


@dataclass(frozen=True)
class ScalarMapping:
    python_type: str
    import_statement: str | None = None


BUILTIN_PYTHON_TYPES = {
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
    "ID": "str",
}

DateTimeHandler = ScalarMapping("datetime", "from datetime import datetime")
DateHandler = ScalarMapping("date", "from datetime import date")
UUIDHandler = ScalarMapping("UUID", "from uuid import UUID")
JSONHandler = ScalarMapping("Any", "from typing import Any")


class ScalarRegistry:
    """Registry for custom scalar mappings.

    Example:
        registry = ScalarRegistry()
        registry.python_type("DateTime")  # "datetime"
        registry.python_type("Cursor")    # None, emitted as an alias of Any
    """

    def __init__(self):
        self._handlers: dict[str, ScalarHandler] = {}
        # Register default handlers
        self._register_defaults()

    def _register_defaults(self):
        self.register("DateTime", DateTimeHandler)
        self.register("Date", DateHandler)
        self.register("UUID", UUIDHandler)
        self.register("JSON", JSONHandler)
        self.register("JSONObject", JSONHandler)

    def register(self, scalar_name: str, handler: ScalarHandler):
        """Register a handler for a scalar type, replacing any existing one."""
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        return self._handlers.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        return scalar_name in self._handlers

    def python_type(self, scalar_name: str) -> str | None:
        """Return the Python type for a scalar, or None if it is not mapped."""
        if scalar_name in BUILTIN_PYTHON_TYPES:
            return BUILTIN_PYTHON_TYPES[scalar_name]
        handler = self.get(scalar_name)
        return handler.python_type if handler else None

    def imports_for(self, scalar_names) -> list[str]:
        """Import statements needed by the given scalars, sorted and deduplicated."""
        imports = set()
        for name in scalar_names:
            handler = self.get(name)
            if handler and handler.import_statement:
                imports.add(handler.import_statement)
        return sorted(imports)
