from ._constants import StorageTypes, TypeKinds, TypeSources, OptionKeys, SchemaKeys
from ._types import (
    CustomType,
    custom_type,
    Primitive,
    ArrayOf,
    MapOf,
    Nested,
    Reference,
    Mixed,
    ResolvedType,
)
from ._hints import NO_HINT, TypeHintProvider, AnnotationTypeHintProvider, DictTypeHintProvider
from ._resolver import Resolution, TypeResolver
from ._plan import (
    Validator,
    Transform,
    VirtualPopulate,
    Plugin,
    Hook,
    FieldPlan,
    SchemaPlan,
    DiscriminatorGroup,
)
from ._validator import OptionValidator, ValidatedOptions, permitted_options
from ._property_compiler import PropertyCompiler
from ._compiler import (
    ClassCompiler,
    ClassStates,
    get_compiler,
    build_schema,
    add_plan,
    get_plan_by_name,
    get_discriminator_group,
)
from ._builder import SchemaBuilder, DefinitionGenerator, generate_definitions

__all__ = [
    "StorageTypes",
    "TypeKinds",
    "TypeSources",
    "OptionKeys",
    "SchemaKeys",
    "CustomType",
    "custom_type",
    "Primitive",
    "ArrayOf",
    "MapOf",
    "Nested",
    "Reference",
    "Mixed",
    "ResolvedType",
    "NO_HINT",
    "TypeHintProvider",
    "AnnotationTypeHintProvider",
    "DictTypeHintProvider",
    "Resolution",
    "TypeResolver",
    "Validator",
    "Transform",
    "VirtualPopulate",
    "Plugin",
    "Hook",
    "FieldPlan",
    "SchemaPlan",
    "DiscriminatorGroup",
    "OptionValidator",
    "ValidatedOptions",
    "permitted_options",
    "PropertyCompiler",
    "ClassCompiler",
    "ClassStates",
    "get_compiler",
    "build_schema",
    "add_plan",
    "get_plan_by_name",
    "get_discriminator_group",
    "SchemaBuilder",
    "DefinitionGenerator",
    "generate_definitions",
]
