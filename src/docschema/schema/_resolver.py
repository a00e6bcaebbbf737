from typing import Annotated, Any, Dict, List, Literal, NamedTuple, Optional, Tuple, Type, Union, get_args, get_origin
from enum import Enum
import collections.abc
import types

from docschema.config import CompilerSettings, get_settings
from docschema.exceptions import (
    InvalidEnumError,
    InvalidOptionError,
    InvalidTypeError,
    NoMetadataError,
    NotNumberTypeError,
    NotStringTypeError,
    NoValidClassError,
    SchemaException,
    TypeMismatchError,
)
from docschema.util import is_class, type_name
from ._constants import (
    BUILTIN_STORAGE_TYPES,
    DEFAULT_REF_TYPE,
    NUMERIC_STORAGE,
    OptionKeys,
    PRIMITIVE_TYPES,
    StorageTypes,
    TypeKinds,
    TypeSources,
)
from ._hints import NO_HINT, TypeHintProvider
from ._types import ArrayOf, CustomType, MapOf, Mixed, Nested, Primitive, Reference, ResolvedType

ARRAY_ORIGINS = frozenset(
    {
        list,
        set,
        frozenset,
        tuple,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
    }
)
MAP_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})
BARE_ARRAYS = frozenset({list, set, frozenset, tuple})
UNION_ORIGINS = frozenset({Union, types.UnionType})


class Resolution(NamedTuple):
    stored: ResolvedType
    exposed: ResolvedType
    source: str
    enum_values: Optional[List[Any]]


class _Context(NamedTuple):
    class_name: str
    key: str
    options: Dict[str, Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _enum_values(enum_cls: Type[Enum]) -> List[Any]:
    return [member.value for member in enum_cls]


def _storage_for_values(values: List[Any]) -> Optional[str]:
    if values and all(isinstance(v, str) for v in values):
        return StorageTypes.STRING
    if values and all(_is_number(v) for v in values):
        return StorageTypes.NUMBER
    if values and all(isinstance(v, bool) for v in values):
        return StorageTypes.BOOLEAN
    return None


class TypeResolver:
    """
    Resuelve el tipo de almacenamiento de una propiedad.

    Orden: override explícito "type" > tipo declarado (anotación) >
    contenedor declarado con items/of. Las clases con ref/ref_path son
    referencias, el resto de clases no primitivas se anidan.
    """

    def __init__(self, hints: TypeHintProvider, settings: Optional[CompilerSettings] = None):
        self.hints = hints
        self._settings = settings

    @property
    def settings(self) -> CompilerSettings:
        return self._settings or get_settings()

    def resolve(self, cls: Type, key: str, options: Dict[str, Any]) -> Resolution:
        ctx = _Context(cls.__name__, key, options)
        hint = self.hints.get_type_hint(cls, key)
        override = options.get(OptionKeys.TYPE)
        has_transform = OptionKeys.GET in options or OptionKeys.SET in options

        declared = self._declared_wrapper(ctx)
        exposed: Optional[ResolvedType] = None
        implied_enum: Any = None

        if hint is not NO_HINT:
            try:
                exposed, implied_enum = self._convert(hint, ctx, top=True)
            except SchemaException:
                # el override es la salida de emergencia cuando la inferencia falla
                if override is None:
                    raise

        if override is not None:
            override_type, override_enum = self._convert(override, ctx, top=True, override=True)
            stored = self._apply_override(exposed, override_type, declared, has_transform, ctx)
            source = TypeSources.OVERRIDE
            if override_enum is not None or has_transform:
                implied_enum = override_enum
        elif exposed is not None:
            stored = exposed
            source = TypeSources.INFERRED
        else:
            stored = self._from_declared_wrapper(declared, ctx)
            source = TypeSources.INFERRED

        self._check_declared_wrapper(exposed if has_transform and exposed is not None else stored, declared, ctx)

        enum_option = options.get(OptionKeys.ENUM)
        enum_values = self._check_enum(stored, enum_option if enum_option is not None else implied_enum, ctx)
        return Resolution(stored, exposed if exposed is not None else stored, source, enum_values)

    # ==================== CONVERSION ====================

    def _convert(self, hint: Any, ctx: _Context, top: bool, override: bool = False) -> Tuple[ResolvedType, Any]:
        origin = get_origin(hint)

        # Annotated[X, ...] -> X
        if origin is Annotated:
            return self._convert(get_args(hint)[0], ctx, top, override)

        if override:
            converted = self._convert_override_value(hint, ctx, top)
            if converted is not None:
                return converted

        if hint is Any or hint is object:
            if self._has_ref(ctx):
                return self._reference(None, None, ctx), None
            return Mixed(), None

        if hint is None or hint is type(None):
            raise InvalidTypeError(ctx.class_name, ctx.key, hint, "None is not a storage type")

        if origin in UNION_ORIGINS:
            non_none = [arg for arg in get_args(hint) if arg is not type(None)]
            if len(non_none) == 1:
                return self._convert(non_none[0], ctx, top, override)
            raise InvalidTypeError(
                ctx.class_name, ctx.key, hint, 'ambiguous union, use an explicit "type" option'
            )

        if origin is Literal:
            values = list(get_args(hint))
            storage = _storage_for_values(values)
            if storage is None:
                raise InvalidTypeError(ctx.class_name, ctx.key, hint, "literal values of mixed types")
            return Primitive(storage=storage), (values if storage != StorageTypes.BOOLEAN else None)

        if origin in ARRAY_ORIGINS:
            item_hint = self._array_item(hint, origin, ctx)
            return self._array(item_hint, ctx, top)

        if origin in MAP_ORIGINS:
            args = get_args(hint)
            if not args:
                return self._convert(dict, ctx, top, override)
            key_hint, value_hint = args
            if key_hint is not str:
                raise InvalidTypeError(ctx.class_name, ctx.key, hint, "map keys must be strings")
            return self._map(value_hint, ctx, top)

        if origin is not None:
            raise InvalidTypeError(ctx.class_name, ctx.key, hint)

        if is_class(hint) and hint in BARE_ARRAYS:
            return self._array(Any, ctx, top)

        if hint is dict:
            if top and ctx.options.get(OptionKeys.OF) is not None:
                return self._map(Any, ctx, top)
            return Mixed(), None

        if is_class(hint):
            return self._convert_class(hint, ctx)

        raise InvalidTypeError(ctx.class_name, ctx.key, hint)

    def _convert_override_value(self, value: Any, ctx: _Context, top: bool) -> Optional[Tuple[ResolvedType, Any]]:
        if isinstance(value, CustomType):
            return Primitive(storage=value.name), None
        if isinstance(value, str):
            if value in BUILTIN_STORAGE_TYPES:
                return Primitive(storage=value), None
            if value == TypeKinds.MIXED:
                return Mixed(), None
            raise InvalidTypeError(ctx.class_name, ctx.key, value, "unknown storage type")
        if isinstance(value, list):
            # [str] -> array de str
            if len(value) != 1:
                raise InvalidTypeError(ctx.class_name, ctx.key, value, "array override needs exactly one item type")
            item, enum = self._convert(value[0], ctx, top=False, override=True)
            return ArrayOf(item=item), enum
        return None

    def _convert_class(self, hint: type, ctx: _Context) -> Tuple[ResolvedType, Any]:
        if issubclass(hint, Enum):
            storage = _storage_for_values(_enum_values(hint)) or StorageTypes.STRING
            return Primitive(storage=storage), (hint if storage != StorageTypes.BOOLEAN else None)

        storage = self._primitive_storage(hint)
        if self._has_ref(ctx):
            return self._reference(hint, storage, ctx), None
        if storage is not None:
            return Primitive(storage=storage), None
        return Nested(target=hint), None

    def _primitive_storage(self, hint: type) -> Optional[str]:
        for base in hint.__mro__:
            if base in PRIMITIVE_TYPES:
                return PRIMITIVE_TYPES[base]
        return None

    def _array_item(self, hint: Any, origin: Any, ctx: _Context) -> Any:
        args = get_args(hint)
        if not args:
            return Any
        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return args[0]
            if all(arg == args[0] for arg in args):
                return args[0]
            raise InvalidTypeError(ctx.class_name, ctx.key, hint, "heterogeneous tuples are not supported")
        return args[0]

    def _array(self, item_hint: Any, ctx: _Context, top: bool) -> Tuple[ResolvedType, Any]:
        items = ctx.options.get(OptionKeys.ITEMS) if top else None
        if items is not None:
            item, enum = self._convert(items, ctx, top=False, override=True)
        else:
            item, enum = self._convert(item_hint, ctx, top=False)
        return ArrayOf(item=item), enum

    def _map(self, value_hint: Any, ctx: _Context, top: bool) -> Tuple[ResolvedType, Any]:
        of = ctx.options.get(OptionKeys.OF) if top else None
        if of is not None:
            value, enum = self._convert(of, ctx, top=False, override=True)
        else:
            value, enum = self._convert(value_hint, ctx, top=False)
        return MapOf(value=value), enum

    # ==================== REFERENCES ====================

    def _has_ref(self, ctx: _Context) -> bool:
        return ctx.options.get(OptionKeys.REF) is not None or ctx.options.get(OptionKeys.REF_PATH) is not None

    def _reference(self, hint: Optional[type], hint_storage: Optional[str], ctx: _Context) -> Reference:
        ref = ctx.options.get(OptionKeys.REF)
        ref_path = ctx.options.get(OptionKeys.REF_PATH)

        if ref is not None and ref_path is not None:
            raise InvalidOptionError(ctx.class_name, ctx.key, OptionKeys.REF_PATH, 'use either "ref" or "ref_path"')
        if ref_path is not None and (not isinstance(ref_path, str) or not ref_path):
            raise InvalidOptionError(ctx.class_name, ctx.key, OptionKeys.REF_PATH, "must be a non-empty string")

        target: Union[type, str, None] = None
        if ref is True:
            # ref=True referencia a la clase anotada
            if hint is None or hint_storage is not None:
                raise NoValidClassError(hint, ctx.class_name, ctx.key)
            target = hint
        elif ref is not None:
            if not (is_class(ref) or (isinstance(ref, str) and ref)):
                raise NoValidClassError(ref, ctx.class_name, ctx.key)
            target = ref

        ref_type = ctx.options.get(OptionKeys.REF_TYPE)
        if ref_type is None:
            ref_type = hint_storage or DEFAULT_REF_TYPE
        else:
            ref_type = self._ref_type_tag(ref_type, ctx)

        return Reference(target=target, path=ref_path, ref_type=ref_type)

    def _ref_type_tag(self, ref_type: Any, ctx: _Context) -> str:
        if isinstance(ref_type, CustomType):
            return ref_type.name
        if isinstance(ref_type, str) and ref_type in BUILTIN_STORAGE_TYPES:
            return ref_type
        if is_class(ref_type):
            storage = self._primitive_storage(ref_type)
            if storage is not None:
                return storage
        raise InvalidOptionError(
            ctx.class_name, ctx.key, OptionKeys.REF_TYPE, f'"{type_name(ref_type)}" is not a storage type'
        )

    # ==================== DECLARED WRAPPERS ====================

    def _declared_wrapper(self, ctx: _Context) -> Optional[str]:
        has_items = OptionKeys.ITEMS in ctx.options
        has_of = OptionKeys.OF in ctx.options
        if has_items and has_of:
            raise TypeMismatchError(ctx.class_name, ctx.key, TypeKinds.ARRAY, TypeKinds.MAP)
        if has_items:
            return TypeKinds.ARRAY
        if has_of:
            return TypeKinds.MAP
        return None

    def _from_declared_wrapper(self, declared: Optional[str], ctx: _Context) -> ResolvedType:
        if declared == TypeKinds.ARRAY and ctx.options.get(OptionKeys.ITEMS) is not None:
            return self._array(Any, ctx, top=True)[0]
        if declared == TypeKinds.MAP and ctx.options.get(OptionKeys.OF) is not None:
            return self._map(Any, ctx, top=True)[0]
        raise NoMetadataError(ctx.class_name, ctx.key)

    def _check_declared_wrapper(self, resolved: ResolvedType, declared: Optional[str], ctx: _Context):
        if declared is not None and resolved.kind != declared:
            raise TypeMismatchError(ctx.class_name, ctx.key, declared, resolved.describe())

    def _apply_override(
        self,
        exposed: Optional[ResolvedType],
        override_type: ResolvedType,
        declared: Optional[str],
        has_transform: bool,
        ctx: _Context,
    ) -> ResolvedType:
        # con get/set el tipo guardado puede diferir del expuesto
        if has_transform:
            return override_type

        expected = exposed.kind if exposed is not None and exposed.is_wrapper else declared
        if expected is None:
            return override_type

        if override_type.is_wrapper:
            if override_type.kind != expected:
                raise TypeMismatchError(
                    ctx.class_name,
                    ctx.key,
                    exposed.describe() if exposed is not None else expected,
                    override_type.describe(),
                )
            return override_type

        if expected == TypeKinds.ARRAY:
            return ArrayOf(item=override_type)
        return MapOf(value=override_type)

    # ==================== ENUM ====================

    def _check_enum(self, stored: ResolvedType, enum_option: Any, ctx: _Context) -> Optional[List[Any]]:
        if enum_option is None:
            return None

        if is_class(enum_option) and issubclass(enum_option, Enum):
            values = _enum_values(enum_option)
        elif isinstance(enum_option, (list, tuple)):
            values = list(enum_option)
        else:
            raise InvalidOptionError(ctx.class_name, ctx.key, OptionKeys.ENUM, "must be an Enum class or a list")

        if not values:
            raise InvalidEnumError(ctx.class_name, ctx.key, "it has no values")

        leaf = stored.leaf()
        actual = leaf.describe()
        if all(isinstance(v, str) for v in values):
            if not (isinstance(leaf, Primitive) and leaf.storage == StorageTypes.STRING):
                raise NotStringTypeError(ctx.class_name, ctx.key, OptionKeys.ENUM, actual)
        elif all(_is_number(v) for v in values):
            if self.settings.strict_enum:
                raise InvalidEnumError(
                    ctx.class_name,
                    ctx.key,
                    "numeric enum values are rejected in strict enum mode, use string values",
                )
            if not (isinstance(leaf, Primitive) and leaf.storage in NUMERIC_STORAGE):
                raise NotNumberTypeError(ctx.class_name, ctx.key, OptionKeys.ENUM, actual)
        else:
            raise InvalidEnumError(ctx.class_name, ctx.key, "values must be all strings or all numbers")

        return values
