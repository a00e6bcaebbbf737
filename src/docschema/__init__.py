from docschema.config import load_config, set_global_options, get_settings, CompilerSettings
from docschema.metadata import (
    MetadataStore,
    prop,
    array_prop,
    map_prop,
    add_prop,
    model_options,
    plugin,
    pre,
    post,
    discriminator,
)
from docschema.schema import (
    StorageTypes,
    custom_type,
    ClassCompiler,
    SchemaPlan,
    FieldPlan,
    DiscriminatorGroup,
    build_schema,
    add_plan,
    get_plan_by_name,
    get_discriminator_group,
    generate_definitions,
)

__version__ = "0.1.0"

__all__ = [
    "load_config",
    "set_global_options",
    "get_settings",
    "CompilerSettings",
    "MetadataStore",
    "prop",
    "array_prop",
    "map_prop",
    "add_prop",
    "model_options",
    "plugin",
    "pre",
    "post",
    "discriminator",
    "StorageTypes",
    "custom_type",
    "ClassCompiler",
    "SchemaPlan",
    "FieldPlan",
    "DiscriminatorGroup",
    "build_schema",
    "add_plan",
    "get_plan_by_name",
    "get_discriminator_group",
    "generate_definitions",
]
