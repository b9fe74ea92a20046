"""Exceptions raised while resolving and planning GraphQL operations.

Every error is fatal for the operation being generated. Errors keep the
offending names and the available alternatives as attributes so callers
can render their own messages.
"""

from typing import Iterable


def _join(names: Iterable[str]) -> str:
    return ", ".join(names)


class CodegenError(Exception):
    """Base exception for all code generation errors."""
    pass


class ConfigError(CodegenError):
    """Raised for invalid options or unreadable input files."""
    pass


class EmitterError(CodegenError):
    """Raised when a target emitter cannot render a plan."""
    pass


# Structural errors


class UnnamedOperationError(CodegenError):
    """Raised for `query { ... }` operations without a name."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unnamed {kind} operation. All operations must be named.")


class SelectionSetAtRootError(CodegenError):
    """Raised for bare or empty selection sets at the document root."""

    def __init__(self, operation_name: str | None = None):
        self.operation_name = operation_name
        if operation_name:
            message = f"Operation {operation_name} has an empty selection set."
        else:
            message = (
                "Bare selection sets are not supported at the document root. "
                "Use a named operation, e.g. `query MyQuery { ... }`."
            )
        super().__init__(message)


class SubscriptionRootError(CodegenError):
    """Raised when a subscription does not select exactly one root field."""

    def __init__(self, operation_name: str, root_fields: list[str]):
        self.operation_name = operation_name
        self.root_fields = root_fields
        super().__init__(
            f"Subscription {operation_name} must select exactly one root field, "
            f"found {len(root_fields)}: {_join(root_fields)}"
        )


# Resolution errors


class UnknownTypeError(CodegenError):
    """Raised when a type name is not defined where it is expected."""

    def __init__(self, type_name: str, available: Iterable[str] | None = None):
        self.type_name = type_name
        self.available = list(available) if available is not None else []
        message = f"Unknown type: {type_name}"
        if self.available:
            message += f". Expected one of: {_join(self.available)}"
        super().__init__(message)


class DuplicateTypeError(CodegenError):
    """Raised when two schema definitions share a name."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Type {type_name} is defined more than once")


class UnknownFieldError(CodegenError):
    """Raised when a selected field does not exist on the scope type."""

    def __init__(self, field_name: str, type_name: str, available: Iterable[str]):
        self.field_name = field_name
        self.type_name = type_name
        self.available = list(available)
        super().__init__(
            f"Could not find field `{field_name}` on `{type_name}`. "
            f"Available fields: `{_join(self.available)}`."
        )


class UnknownFragmentError(CodegenError):
    """Raised for a spread of a fragment that is not defined in the document."""

    def __init__(self, fragment_name: str, available: Iterable[str]):
        self.fragment_name = fragment_name
        self.available = list(available)
        super().__init__(
            f"Unknown fragment: {fragment_name}. "
            f"Defined fragments: {_join(self.available) or '(none)'}"
        )


class DuplicateFragmentError(CodegenError):
    """Raised when a document defines two fragments with the same name."""

    def __init__(self, fragment_name: str):
        self.fragment_name = fragment_name
        super().__init__(f"Fragment {fragment_name} is defined more than once")


class InvalidFragmentTargetError(CodegenError):
    """Raised when a fragment's type condition is not a composite type."""

    def __init__(self, fragment_name: str, type_name: str, kind: str):
        self.fragment_name = fragment_name
        self.type_name = type_name
        self.kind = kind
        super().__init__(
            f"Fragment {fragment_name} is defined on {type_name}, which is a {kind}. "
            f"Fragments must target an object, interface or union."
        )


class MissingTypenameError(CodegenError):
    """Raised when a polymorphic selection does not select `__typename`."""

    def __init__(self, union_name: str):
        self.union_name = union_name
        super().__init__(f"Missing __typename in selection for {union_name}")


class OperationNotFoundError(CodegenError):
    """Raised when the requested operation is not defined in the document."""

    def __init__(self, operation_name: str | None, available: Iterable[str]):
        self.operation_name = operation_name
        self.available = list(available)
        super().__init__(
            "The operation name does not match any defined operation in the query file.\n"
            f"Operation name: {operation_name or ''}\n"
            f"Defined operations: {_join(self.available)}"
        )


class ConflictingSelectionError(CodegenError):
    """Raised when one response key is selected with different sub-selections."""

    def __init__(self, response_key: str, struct_name: str):
        self.response_key = response_key
        self.struct_name = struct_name
        super().__init__(
            f"Conflicting selections for `{response_key}` in {struct_name}: "
            f"the same response key must always select the same field and sub-selection"
        )


# Internal invariant violations


class InternalError(CodegenError):
    """Raised when an invariant that valid input guarantees is broken."""
    pass


class DoubleRequiredError(InternalError):
    """Raised for a qualifier chain with two consecutive required markers."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Double required annotation on {type_name}")


# Literal compilation errors


class DefaultValueError(CodegenError):
    """Raised for default values GraphQL does not allow (variables, null)."""

    def __init__(self, variable_name: str, reason: str):
        self.variable_name = variable_name
        self.reason = reason
        super().__init__(f"Invalid default value for ${variable_name}: {reason}")


class UnknownInputTypeError(CodegenError):
    """Raised when an object literal targets a type that is not an input object."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Unknown input type in default value: {type_name}")
