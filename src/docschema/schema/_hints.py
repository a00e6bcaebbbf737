from typing import Any, Dict, Optional, Protocol, Tuple, Type, get_type_hints
import inspect
import sys
import threading


class _NoHint:
    def __repr__(self):
        return "NO_HINT"

    def __bool__(self):
        return False


NO_HINT: Any = _NoHint()


class TypeHintProvider(Protocol):
    """Fuente de los tipos declarados de cada propiedad."""

    def get_type_hint(self, cls: Type, name: str) -> Any:
        """Devuelve el tipo declarado o NO_HINT si no hay información."""
        ...


class AnnotationTypeHintProvider:
    """
    TypeHintProvider basado en las anotaciones de la clase.

    Usa typing.get_type_hints; si alguna referencia adelantada no se puede
    resolver, evalúa las anotaciones una a una para que solo fallen las
    propiedades afectadas. El nombre de la propia clase siempre es visible,
    lo que permite clases autorreferenciadas definidas dentro de funciones.
    """

    def __init__(self):
        self._cache: Dict[type, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get_type_hint(self, cls: Type, name: str) -> Any:
        hints = self._cache.get(cls)
        if hints is None:
            hints, complete = self._load(cls)
            # un resultado parcial no se guarda: la clase que falta puede definirse después
            if complete:
                with self._lock:
                    self._cache[cls] = hints
        return hints.get(name, NO_HINT)

    def _load(self, cls: Type) -> Tuple[Dict[str, Any], bool]:
        try:
            return get_type_hints(cls, include_extras=True), True
        except NameError:
            pass

        hints: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            try:
                annotations = inspect.get_annotations(klass)
            except NameError:
                continue
            for field_name, raw in annotations.items():
                resolved = self._evaluate(raw, klass)
                if resolved is NO_HINT:
                    hints.pop(field_name, None)
                else:
                    hints[field_name] = resolved
        return hints, False

    def _evaluate(self, raw: Any, klass: type) -> Any:
        # raw puede ser un string o un tipo con ForwardRef dentro (Optional["X"])
        module = sys.modules.get(klass.__module__)
        globalns = dict(vars(module)) if module else {}
        localns = dict(vars(klass))
        localns.setdefault(klass.__name__, klass)
        holder = type(klass.__name__, (), {"__annotations__": {"hint": raw}, "__module__": klass.__module__})
        try:
            return get_type_hints(holder, globalns=globalns, localns=localns, include_extras=True)["hint"]
        except NameError:
            return NO_HINT


class DictTypeHintProvider:
    """TypeHintProvider explícito: {clase: {propiedad: tipo}}."""

    def __init__(self, hints: Optional[Dict[type, Dict[str, Any]]] = None):
        self.hints: Dict[type, Dict[str, Any]] = hints or {}

    def add(self, cls: type, name: str, hint: Any):
        self.hints.setdefault(cls, {})[name] = hint

    def get_type_hint(self, cls: Type, name: str) -> Any:
        for klass in cls.__mro__:
            own = self.hints.get(klass)
            if own and name in own:
                return own[name]
        return NO_HINT
