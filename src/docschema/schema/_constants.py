from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

# ==================== CONSTANTS ====================


class StorageTypes:
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    BUFFER = "buffer"
    DECIMAL = "decimal"
    UUID = "uuid"
    OBJECT_ID = "objectid"


BUILTIN_STORAGE_TYPES = frozenset(
    {
        StorageTypes.STRING,
        StorageTypes.NUMBER,
        StorageTypes.BOOLEAN,
        StorageTypes.DATE,
        StorageTypes.BUFFER,
        StorageTypes.DECIMAL,
        StorageTypes.UUID,
        StorageTypes.OBJECT_ID,
    }
)


class TypeKinds:
    PRIMITIVE = "primitive"
    ARRAY = "array"
    MAP = "map"
    NESTED = "nested"
    REFERENCE = "reference"
    MIXED = "mixed"


class TypeSources:
    INFERRED = "inferred"
    OVERRIDE = "override"


class OptionKeys:
    REQUIRED = "required"
    INDEX = "index"
    UNIQUE = "unique"
    DEFAULT = "default"
    ID = "_id"
    REF = "ref"
    REF_PATH = "ref_path"
    REF_TYPE = "ref_type"
    VALIDATE = "validate"
    ALIAS = "alias"
    GET = "get"
    SET = "set"
    TYPE = "type"
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    TRIM = "trim"
    MAXLENGTH = "maxlength"
    MINLENGTH = "minlength"
    MATCH = "match"
    ENUM = "enum"
    MAX = "max"
    MIN = "min"
    ITEMS = "items"
    OF = "of"
    LOCAL_FIELD = "local_field"
    FOREIGN_FIELD = "foreign_field"
    JUST_ONE = "just_one"
    COUNT = "count"


class SchemaKeys:
    TYPE = "type"
    ITEMS = "items"
    OF = "of"
    ENTITY = "entity"
    REF = "ref"
    REF_PATH = "ref_path"
    REF_TYPE = "ref_type"
    REQUIRED = "required"
    DEFAULT = "default"
    INDEX = "index"
    UNIQUE = "unique"
    VALIDATORS = "validators"
    VALIDATOR = "validator"
    MESSAGE = "message"
    GET = "get"
    SET = "set"
    ALIAS = "alias"
    ID = "_id"
    ENUM = "enum"
    FIELDS = "fields"
    VIRTUALS = "virtuals"
    ENTITY_METADATA = "entity_metadata"
    ENTITY_NAME = "entity_name"
    SCHEMA_OPTIONS = "schema_options"
    DISCRIMINATOR_KEY = "discriminator_key"
    DISCRIMINATOR_VALUE = "discriminator_value"
    DISCRIMINATORS = "discriminators"
    PLUGINS = "plugins"
    HOOKS = "hooks"
    ALIASES = "aliases"
    DEPENDENCIES = "dependencies"
    EMBEDDED = "embedded"
    REFERENCES = "references"
    LOCAL_FIELD = "local_field"
    FOREIGN_FIELD = "foreign_field"
    JUST_ONE = "just_one"
    COUNT = "count"


# Opciones que solo tienen sentido para un tipo concreto
STRING_ONLY_OPTIONS = frozenset(
    {
        OptionKeys.LOWERCASE,
        OptionKeys.UPPERCASE,
        OptionKeys.TRIM,
        OptionKeys.MAXLENGTH,
        OptionKeys.MINLENGTH,
        OptionKeys.MATCH,
    }
)
NUMBER_ONLY_OPTIONS = frozenset({OptionKeys.MIN, OptionKeys.MAX})

PAIRED_OPTIONS = ((OptionKeys.GET, OptionKeys.SET),)

VIRTUAL_TRIGGER_OPTIONS = (
    OptionKeys.LOCAL_FIELD,
    OptionKeys.FOREIGN_FIELD,
    OptionKeys.JUST_ONE,
    OptionKeys.COUNT,
)
VIRTUAL_REQUIRED_OPTIONS = (OptionKeys.REF, OptionKeys.LOCAL_FIELD, OptionKeys.FOREIGN_FIELD)

BOOLEAN_OPTIONS = frozenset(
    {
        OptionKeys.INDEX,
        OptionKeys.UNIQUE,
        OptionKeys.ID,
        OptionKeys.LOWERCASE,
        OptionKeys.UPPERCASE,
        OptionKeys.TRIM,
        OptionKeys.JUST_ONE,
        OptionKeys.COUNT,
    }
)

# Claves consumidas por el compilador; el resto pasa tal cual al driver
KNOWN_OPTIONS = frozenset(
    value for name, value in vars(OptionKeys).items() if not name.startswith("_")
)

PRIMITIVE_TYPES = {
    str: StorageTypes.STRING,
    int: StorageTypes.NUMBER,
    float: StorageTypes.NUMBER,
    bool: StorageTypes.BOOLEAN,
    datetime: StorageTypes.DATE,
    date: StorageTypes.DATE,
    bytes: StorageTypes.BUFFER,
    bytearray: StorageTypes.BUFFER,
    Decimal: StorageTypes.DECIMAL,
    UUID: StorageTypes.UUID,
}

NUMERIC_STORAGE = frozenset({StorageTypes.NUMBER, StorageTypes.DECIMAL})

DEFAULT_REF_TYPE = StorageTypes.OBJECT_ID
