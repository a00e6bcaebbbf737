from typing import Any, Callable, Dict, Optional, Type, TypeVar

from docschema.exceptions import InvalidOptionError, NoValidClassError
from docschema.util import is_class
from ._store import DecoratorKeys, MetadataStore, default_store


T = TypeVar("T")

ARRAY_ITEMS = "items"
MAP_OF = "of"


# ==================== PROPERTY MARKERS ====================


class PropMarker:
    """
    Marca de propiedad usada como valor de atributo de clase.

    Al crearse la clase, __set_name__ registra las opciones en el store y
    elimina el atributo, de modo que solo queda la anotación de tipo.

    Usage:
        class Cat:
            name: str = prop(required=True)
            tags: List[str] = array_prop(lowercase=True)
    """

    def __init__(self, options: Dict[str, Any], store: Optional[MetadataStore] = None):
        self.options = options
        self.store = store or default_store
        self.owner: Optional[type] = None
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str):
        self.owner = owner
        self.name = name
        self.store.merge(owner, DecoratorKeys.PROPERTIES, {name: self.options})
        delattr(owner, name)

    def __repr__(self):
        return f"PropMarker({self.options!r})"


def prop(*, store: Optional[MetadataStore] = None, **options: Any) -> Any:
    return PropMarker(dict(options), store)


def array_prop(items: Any = None, *, store: Optional[MetadataStore] = None, **options: Any) -> Any:
    """Propiedad array; items fuerza el tipo de los elementos."""
    return PropMarker({**options, ARRAY_ITEMS: items}, store)


def map_prop(of: Any = None, *, store: Optional[MetadataStore] = None, **options: Any) -> Any:
    """Propiedad map (claves string); of fuerza el tipo de los valores."""
    return PropMarker({**options, MAP_OF: of}, store)


def add_prop(cls: Type, name: str, store: Optional[MetadataStore] = None, **options: Any):
    """Registro manual de una propiedad sin usar el marcador."""
    if not is_class(cls):
        raise NoValidClassError(cls)
    (store or default_store).merge(cls, DecoratorKeys.PROPERTIES, {name: dict(options)})


# ==================== CLASS DECORATORS ====================


def model_options(
    schema_options: Optional[Dict[str, Any]] = None,
    options: Optional[Dict[str, Any]] = None,
    store: Optional[MetadataStore] = None,
) -> Callable[[Type[T]], Type[T]]:
    """
    Opciones de clase.

    schema_options van al driver (timestamps, collection, _id,
    discriminator_key...); options son del compilador (custom_name).
    """

    def decorator(cls: Type[T]) -> Type[T]:
        if not is_class(cls):
            raise NoValidClassError(cls)
        partial: Dict[str, Any] = {}
        if schema_options is not None:
            partial["schema_options"] = schema_options
        if options is not None:
            partial["options"] = options
        (store or default_store).merge(cls, DecoratorKeys.MODEL_OPTIONS, partial)
        return cls

    return decorator


def plugin(fn: Callable[..., Any], options: Optional[Dict[str, Any]] = None, store: Optional[MetadataStore] = None):
    if not callable(fn):
        raise InvalidOptionError(None, None, "plugin", f"{fn!r} is not callable")

    def decorator(cls: Type[T]) -> Type[T]:
        if not is_class(cls):
            raise NoValidClassError(cls)
        (store or default_store).append(cls, DecoratorKeys.PLUGINS, {"fn": fn, "options": options})
        return cls

    return decorator


def _hook(kind: str, method: str, fn: Callable[..., Any], store: Optional[MetadataStore]):
    if not callable(fn):
        raise InvalidOptionError(None, None, kind, f"hook for '{method}' is not callable")

    def decorator(cls: Type[T]) -> Type[T]:
        if not is_class(cls):
            raise NoValidClassError(cls)
        (store or default_store).append(cls, DecoratorKeys.HOOKS, {"kind": kind, "method": method, "fn": fn})
        return cls

    return decorator


def pre(method: str, fn: Callable[..., Any], store: Optional[MetadataStore] = None):
    return _hook("pre", method, fn, store)


def post(method: str, fn: Callable[..., Any], store: Optional[MetadataStore] = None):
    return _hook("post", method, fn, store)


def discriminator(root: Type, value: Optional[str] = None, store: Optional[MetadataStore] = None):
    """
    Registra la clase decorada como discriminador de root.

    El valor por defecto es el nombre de la clase.
    """
    if not is_class(root):
        raise NoValidClassError(root)

    def decorator(cls: Type[T]) -> Type[T]:
        if not is_class(cls) or cls is root or not issubclass(cls, root):
            raise NoValidClassError(cls, root.__name__, "discriminator")
        if value is not None and (not isinstance(value, str) or not value):
            raise InvalidOptionError(cls.__name__, None, "discriminator", "value must be a non-empty string")
        target = store or default_store
        target.set(cls, DecoratorKeys.DISCRIMINATOR, {"root": root, "value": value or cls.__name__})
        target.append(root, DecoratorKeys.DISCRIMINATORS, cls)
        return cls

    return decorator
