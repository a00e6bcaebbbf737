from .util import clone, deep_merge, is_class, type_name

__all__ = [
    "clone",
    "deep_merge",
    "is_class",
    "type_name",
]
