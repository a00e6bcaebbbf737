from typing import Any, Dict, List, Optional, Type
from weakref import WeakKeyDictionary
import threading

from docschema.exceptions import NoValidClassError
from docschema.util import clone, deep_merge, is_class


class DecoratorKeys:
    PROPERTIES = "docschema:properties"
    MODEL_OPTIONS = "docschema:model_options"
    PLUGINS = "docschema:plugins"
    HOOKS = "docschema:hooks"
    DISCRIMINATOR = "docschema:discriminator"
    DISCRIMINATORS = "docschema:discriminators"


class MetadataStore:
    """
    Almacén de metadata por (clase, clave).

    Cada clase guarda solo su propia metadata; la herencia se resuelve al
    leer con get_inherited/collect recorriendo el MRO de la raíz a la hoja.
    """

    def __init__(self):
        self._data: "WeakKeyDictionary[type, Dict[str, Any]]" = WeakKeyDictionary()
        self._lock = threading.RLock()

    def _own(self, cls: Type) -> Dict[str, Any]:
        if not is_class(cls):
            raise NoValidClassError(cls)
        own = self._data.get(cls)
        if own is None:
            own = {}
            self._data[cls] = own
        return own

    def get(self, cls: Type, key: str) -> Optional[Any]:
        if not is_class(cls):
            raise NoValidClassError(cls)
        own = self._data.get(cls)
        if own is None:
            return None
        return own.get(key)

    def has(self, cls: Type, key: str) -> bool:
        return self.get(cls, key) is not None

    def set(self, cls: Type, key: str, value: Any) -> None:
        with self._lock:
            self._own(cls)[key] = value

    def merge(self, cls: Type, key: str, partial: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Mezcla partial sobre una copia de lo existente; el objeto guardado no se toca."""
        with self._lock:
            own = self._own(cls)
            merged = deep_merge(own.get(key), partial)
            own[key] = merged
            return clone(merged)

    def assign(self, cls: Type, key: str, partial: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Actualización superficial; partial=None no cambia nada."""
        with self._lock:
            own = self._own(cls)
            current = dict(own.get(key) or {})
            if partial is not None:
                current.update(partial)
                own[key] = current
            return current

    def append(self, cls: Type, key: str, item: Any) -> List[Any]:
        with self._lock:
            own = self._own(cls)
            items = list(own.get(key) or [])
            items.append(item)
            own[key] = items
            return list(items)

    def get_inherited(self, cls: Type, key: str) -> Dict[str, Any]:
        """Mezcla la metadata de la raíz a la hoja; la clase derivada gana."""
        result: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            own = self.get(klass, key)
            if own:
                result = deep_merge(result, own)
        return result

    def collect(self, cls: Type, key: str) -> List[Any]:
        """Concatena listas propias de la raíz a la hoja (plugins, hooks)."""
        result: List[Any] = []
        for klass in reversed(cls.__mro__):
            own = self.get(klass, key)
            if own:
                result.extend(own)
        return result


default_store = MetadataStore()


# ==================== HELPERS ====================


def assign_metadata(key: str, value: Optional[Dict[str, Any]], cls: Type, store: Optional[MetadataStore] = None):
    return (store or default_store).assign(cls, key, value)


def merge_metadata(key: str, value: Optional[Dict[str, Any]], cls: Type, store: Optional[MetadataStore] = None):
    """Devuelve la mezcla de la metadata propia de cls con value, sin guardarla."""
    return deep_merge((store or default_store).get(cls, key), value)


def merge_schema_options(value: Optional[Dict[str, Any]], cls: Type, store: Optional[MetadataStore] = None):
    """schema_options heredadas de cls con value mezclado encima."""
    inherited = (store or default_store).get_inherited(cls, DecoratorKeys.MODEL_OPTIONS)
    return deep_merge(inherited.get("schema_options"), value)
