"""Core modules for GraphQL client generation and the client runtime."""

from .auth import ApiKeyAuth, BasicAuth, BearerAuth, HeaderAuth, auth_from_token
from .client_generator import ClientGenerator
from .errors import (
    GeneratedCodeError,
    GenerationError,
    InvalidPackageNameError,
    SchemaNotFoundError,
    SchemaParseError,
)
from .executor import GraphQLError, GraphQLExecutor
from .generator import CodeGenerator
from .hooks import (
    AddHeaderHook,
    FilterTypesHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from .ir import (
    IRArgument,
    IREnum,
    IREnumValue,
    IRField,
    IROperation,
    IRScalar,
    IRSchema,
    IRType,
    IRUnion,
    TypeRef,
)
from .locator import locate_schema_files
from .parser import SchemaParser
from .pipeline import GenerationPipeline, GenerationResult
from .query_builder import FieldSelection, FieldSelectionMode, QueryBuilder
from .scalars import ScalarRegistry, ScalarType

__all__ = [
    # Auth
    "ApiKeyAuth",
    "BearerAuth",
    "BasicAuth",
    "HeaderAuth",
    "auth_from_token",
    # Errors
    "GenerationError",
    "SchemaNotFoundError",
    "SchemaParseError",
    "InvalidPackageNameError",
    "GeneratedCodeError",
    # Scalars
    "ScalarRegistry",
    "ScalarType",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "FilterTypesHook",
    "HookRunner",
    # IR types
    "IRArgument",
    "IREnum",
    "IREnumValue",
    "IRField",
    "IROperation",
    "IRScalar",
    "IRSchema",
    "IRType",
    "IRUnion",
    "TypeRef",
    # Locating and parsing
    "locate_schema_files",
    "SchemaParser",
    # Generation
    "CodeGenerator",
    "ClientGenerator",
    "GenerationPipeline",
    "GenerationResult",
    # Query Builder
    "FieldSelection",
    "FieldSelectionMode",
    "QueryBuilder",
    # Executor
    "GraphQLError",
    "GraphQLExecutor",
]
