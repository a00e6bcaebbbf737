from typing import Any, Dict, Optional
import inspect


def clone(value: Any) -> Any:
    """Copia recursiva de contenedores; los escalares, clases y callables se comparten."""
    if isinstance(value, dict):
        return {key: clone(item) for key, item in value.items()}
    if isinstance(value, list):
        return [clone(item) for item in value]
    if isinstance(value, set):
        return {clone(item) for item in value}
    if isinstance(value, tuple):
        return tuple(clone(item) for item in value)
    return value


def deep_merge(base: Optional[Dict[str, Any]], override: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Mezcla override sobre base y devuelve un dict nuevo.

    Los dicts anidados se mezclan clave a clave, el resto de valores de
    override sustituyen a los de base. Ninguno de los argumentos se modifica.
    """
    result = clone(base) if base else {}
    if not override:
        return result

    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = clone(value)
    return result


def is_class(value: Any) -> bool:
    return inspect.isclass(value)


def type_name(value: Any) -> str:
    if inspect.isclass(value):
        return value.__name__
    return getattr(value, "__name__", None) or repr(value)
