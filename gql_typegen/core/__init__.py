"""Core modules for GraphQL type generation."""

from .cache import DocumentCache, FileCache, NoCache
from .enums import generate_enum
from .errors import (
    CodegenError,
    ConfigError,
    ConflictingSelectionError,
    DefaultValueError,
    DoubleRequiredError,
    DuplicateFragmentError,
    DuplicateTypeError,
    EmitterError,
    InternalError,
    InvalidFragmentTargetError,
    MissingTypenameError,
    OperationNotFoundError,
    SelectionSetAtRootError,
    SubscriptionRootError,
    UnknownFieldError,
    UnknownFragmentError,
    UnknownInputTypeError,
    UnknownTypeError,
    UnnamedOperationError,
)
from .generator import CodeGenerator, generate_module, load_generator
from .hooks import (
    AddHeaderHook,
    FormatHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from .ir import (
    EmissionPlan,
    GeneratedEnum,
    GeneratedField,
    GeneratedFragment,
    GeneratedInput,
    GeneratedScalar,
    GeneratedStruct,
    GeneratedUnion,
    GeneratedUnionVariant,
    GeneratedVariable,
    GeneratedVariables,
)
from .loader import load_query, load_schema
from .options import CodegenMode, CodegenOptions, DeprecationStrategy, TargetLanguage
from .parser import SchemaParser
from .planner import OperationPlanner
from .qualifiers import decorate, decorate_ref
from .query import QueryDocument, select_operations
from .resolver import SelectionResolver
from .scalars import ScalarHandler, ScalarMapping, ScalarRegistry
from .schema import Schema, TypeKind, TypeRef
from .used_types import UsedTypesCollector
from .variables import build_variables, compile_default

__all__ = [
    # Schema
    "Schema",
    "SchemaParser",
    "TypeKind",
    "TypeRef",
    # Query documents
    "QueryDocument",
    "select_operations",
    # Resolution
    "SelectionResolver",
    "UsedTypesCollector",
    "OperationPlanner",
    "decorate",
    "decorate_ref",
    "generate_enum",
    "build_variables",
    "compile_default",
    # Plan
    "EmissionPlan",
    "GeneratedEnum",
    "GeneratedField",
    "GeneratedFragment",
    "GeneratedInput",
    "GeneratedScalar",
    "GeneratedStruct",
    "GeneratedUnion",
    "GeneratedUnionVariant",
    "GeneratedVariable",
    "GeneratedVariables",
    # Options
    "CodegenMode",
    "CodegenOptions",
    "DeprecationStrategy",
    "TargetLanguage",
    # Loading and caching
    "DocumentCache",
    "FileCache",
    "NoCache",
    "load_query",
    "load_schema",
    # Generation
    "CodeGenerator",
    "generate_module",
    "load_generator",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "FormatHook",
    "HookRunner",
    # Scalars
    "ScalarHandler",
    "ScalarMapping",
    "ScalarRegistry",
    # Errors
    "CodegenError",
    "ConfigError",
    "ConflictingSelectionError",
    "DefaultValueError",
    "DoubleRequiredError",
    "DuplicateFragmentError",
    "DuplicateTypeError",
    "EmitterError",
    "InternalError",
    "InvalidFragmentTargetError",
    "MissingTypenameError",
    "OperationNotFoundError",
    "SelectionSetAtRootError",
    "SubscriptionRootError",
    "UnknownFieldError",
    "UnknownFragmentError",
    "UnknownInputTypeError",
    "UnknownTypeError",
    "UnnamedOperationError",
]
