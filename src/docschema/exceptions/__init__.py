from ._exception import (
    SchemaException,
    ConfigurationError,
    NotNumberTypeError,
    NotStringTypeError,
    MissingPairedOptionError,
    NotAllVirtualPopulateOptionsError,
    InvalidEnumError,
    InvalidOptionError,
    DuplicateDiscriminatorError,
    NoMetadataError,
    TypeMismatchError,
    InvalidTypeError,
    NoValidClassError,
)

__all__ = [
    "SchemaException",
    "ConfigurationError",
    "NotNumberTypeError",
    "NotStringTypeError",
    "MissingPairedOptionError",
    "NotAllVirtualPopulateOptionsError",
    "InvalidEnumError",
    "InvalidOptionError",
    "DuplicateDiscriminatorError",
    "NoMetadataError",
    "TypeMismatchError",
    "InvalidTypeError",
    "NoValidClassError",
]
