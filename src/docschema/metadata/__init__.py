from ._store import (
    DecoratorKeys,
    MetadataStore,
    default_store,
    assign_metadata,
    merge_metadata,
    merge_schema_options,
)
from ._decorators import (
    ARRAY_ITEMS,
    MAP_OF,
    PropMarker,
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

__all__ = [
    "DecoratorKeys",
    "MetadataStore",
    "default_store",
    "assign_metadata",
    "merge_metadata",
    "merge_schema_options",
    "ARRAY_ITEMS",
    "MAP_OF",
    "PropMarker",
    "prop",
    "array_prop",
    "map_prop",
    "add_prop",
    "model_options",
    "plugin",
    "pre",
    "post",
    "discriminator",
]
