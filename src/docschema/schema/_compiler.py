from typing import Any, Dict, List, Optional, Set, Tuple, Type
import threading

from docschema.config import CompilerSettings, get_settings
from docschema.exceptions import (
    DuplicateDiscriminatorError,
    InvalidOptionError,
    NoValidClassError,
    SchemaException,
)
from docschema.metadata import DecoratorKeys, MetadataStore, default_store
from docschema.telemetry import get_logger, traced_class
from docschema.util import clone, is_class
from ._hints import AnnotationTypeHintProvider, TypeHintProvider
from ._plan import DiscriminatorGroup, FieldPlan, Hook, Plugin, SchemaPlan
from ._property_compiler import PropertyCompiler
from ._resolver import TypeResolver
from ._validator import OptionValidator

logger = get_logger(__name__)


class ClassStates:
    UNCOMPILED = "uncompiled"
    COMPILING = "compiling"
    COMPILED = "compiled"


class _Session:
    """Estado de una compilación de primer nivel; solo se publica si termina bien."""

    def __init__(self):
        self.compiling: Set[type] = set()
        self.plans: Dict[type, SchemaPlan] = {}


@traced_class(["compile", "get_discriminator_group"])
class ClassCompiler:
    """
    Compila clases a SchemaPlan.

    Cada clase pasa por uncompiled -> compiling -> compiled. Las clases
    anidadas se compilan en la misma sesión; si una ya está compilándose
    (autorreferencia o referencia mutua) se deja como Nested(target) y se
    resuelve por identidad desde la caché. La caché se indexa por la clase,
    nunca por su nombre.
    """

    def __init__(
        self,
        store: Optional[MetadataStore] = None,
        hints: Optional[TypeHintProvider] = None,
        settings: Optional[CompilerSettings] = None,
    ):
        self.store = store or default_store
        self.hints = hints or AnnotationTypeHintProvider()
        self._settings = settings
        self.properties = PropertyCompiler(TypeResolver(self.hints, settings), OptionValidator())
        self._plans: Dict[type, SchemaPlan] = {}
        self._names: Dict[str, SchemaPlan] = {}
        self._groups: Dict[type, Tuple[Tuple[type, ...], DiscriminatorGroup]] = {}
        self._lock = threading.RLock()
        self._session: Optional[_Session] = None

    @property
    def settings(self) -> CompilerSettings:
        return self._settings or get_settings()

    # ==================== PUBLIC API ====================

    def compile(self, cls: Type) -> SchemaPlan:
        if not is_class(cls):
            raise NoValidClassError(cls)

        plan = self._plans.get(cls)
        if plan is not None:
            logger.debug("schema plan cache hit", target=cls.__name__)
            return plan

        with self._lock:
            plan = self._plans.get(cls)
            if plan is not None:
                return plan

            if self._session is not None:
                # llamada reentrante desde un plugin o un hint durante la compilación
                return self._compile_class(cls, self._session)

            self._session = _Session()
            try:
                plan = self._compile_class(cls, self._session)
                self._commit(self._session)
            except SchemaException as exc:
                logger.warning(
                    "schema compilation failed",
                    target=cls.__name__,
                    error=exc.error,
                    location=exc.location,
                )
                raise
            finally:
                self._session = None
            return plan

    def build_schema(self, cls: Type, schema_options: Optional[Dict[str, Any]] = None) -> SchemaPlan:
        """Plan cacheado, o una copia con schema_options de llamada por encima (no se cachea)."""
        return self.compile(cls).with_schema_options(schema_options)

    def state(self, cls: Type) -> str:
        if cls in self._plans:
            return ClassStates.COMPILED
        session = self._session
        if session is not None and cls in session.compiling:
            return ClassStates.COMPILING
        return ClassStates.UNCOMPILED

    def is_compiled(self, cls: Type) -> bool:
        return cls in self._plans

    def add_plan(self, cls: Type, plan: SchemaPlan) -> SchemaPlan:
        """Registra un plan construido fuera del compilador."""
        if not is_class(cls):
            raise NoValidClassError(cls)
        if not isinstance(plan, SchemaPlan):
            raise InvalidOptionError(cls.__name__, None, "plan", "must be a SchemaPlan")
        with self._lock:
            existing = self._plans.get(cls)
            if existing is not None:
                return existing
            if plan.cls is not cls:
                plan = plan.model_copy(update={"cls": cls})
            self._plans[cls] = plan
            self._names[plan.name] = plan
            return plan

    def get_plan_by_name(self, name: str) -> Optional[SchemaPlan]:
        return self._names.get(name)

    def entity_name(self, cls: Type) -> str:
        """Nombre de entidad sin forzar la compilación (custom_name o nombre de clase)."""
        plan = self._plans.get(cls)
        if plan is not None:
            return plan.name
        options = self.store.get_inherited(cls, DecoratorKeys.MODEL_OPTIONS).get("options") or {}
        return options.get("custom_name") or cls.__name__

    def get_discriminator_group(self, root: Type) -> DiscriminatorGroup:
        if not is_class(root):
            raise NoValidClassError(root)

        with self._lock:
            children = self._discriminator_children(root)
            cached = self._groups.get(root)
            if cached is not None and cached[0] == children:
                return cached[1]

            root_plan = self.compile(root)
            key = root_plan.discriminator_key or self.settings.discriminator_key
            plans: Dict[str, SchemaPlan] = {}
            for child in children:
                child_plan = self.compile(child)
                value = child_plan.discriminator_value
                existing = plans.get(value)
                if existing is not None and existing.cls is not child:
                    raise DuplicateDiscriminatorError(root_plan.name, value, existing.cls.__name__, child.__name__)
                plans[value] = child_plan

            group = DiscriminatorGroup(root=root_plan, key=key, children=plans)
            self._groups[root] = (children, group)
            return group

    # ==================== COMPILATION ====================

    def _compile_class(self, cls: Type, session: _Session) -> SchemaPlan:
        existing = self._plans.get(cls) or session.plans.get(cls)
        if existing is not None:
            return existing

        session.compiling.add(cls)
        try:
            discriminator = self.store.get(cls, DecoratorKeys.DISCRIMINATOR)
            if discriminator:
                # la raíz se compila antes para que sus errores salgan primero
                self._compile_class(discriminator["root"], session)

            fields = self._compile_fields(cls)
            plan = self._build_plan(cls, fields, discriminator)
            session.plans[cls] = plan

            for nested in plan.nested_classes:
                if nested in session.compiling or nested in session.plans or nested in self._plans:
                    continue
                self._compile_class(nested, session)
        finally:
            session.compiling.discard(cls)

        return plan

    def _collect_properties(self, cls: Type) -> Dict[str, Dict[str, Any]]:
        """Propiedades de la raíz a la hoja; una redefinición sustituye las opciones en su sitio."""
        properties: Dict[str, Dict[str, Any]] = {}
        for klass in reversed(cls.__mro__):
            own = self.store.get(klass, DecoratorKeys.PROPERTIES)
            if not own:
                continue
            for name, options in own.items():
                properties[name] = clone(options)
        return properties

    def _compile_fields(self, cls: Type) -> List[FieldPlan]:
        return [
            self.properties.compile(cls, name, options)
            for name, options in self._collect_properties(cls).items()
        ]

    def _build_plan(self, cls: Type, fields: List[FieldPlan], discriminator: Optional[Dict[str, Any]]) -> SchemaPlan:
        model_options = self.store.get_inherited(cls, DecoratorKeys.MODEL_OPTIONS)
        schema_options: Dict[str, Any] = model_options.get("schema_options") or {}
        options: Dict[str, Any] = model_options.get("options") or {}

        name = options.get("custom_name") or cls.__name__
        if not isinstance(name, str):
            raise InvalidOptionError(cls.__name__, None, "custom_name", "must be a string")

        discriminator_key = schema_options.get("discriminator_key")
        if discriminator_key is None and (discriminator or self.store.get(cls, DecoratorKeys.DISCRIMINATORS)):
            discriminator_key = self.settings.discriminator_key

        return SchemaPlan(
            cls=cls,
            name=name,
            fields=tuple(fields),
            schema_options=schema_options,
            options=options,
            plugins=tuple(Plugin(**item) for item in self.store.collect(cls, DecoratorKeys.PLUGINS)),
            hooks=tuple(Hook(**item) for item in self.store.collect(cls, DecoratorKeys.HOOKS)),
            discriminator_key=discriminator_key,
            discriminator_value=discriminator["value"] if discriminator else None,
            aliases=self._aliases(cls, fields),
        )

    def _aliases(self, cls: Type, fields: List[FieldPlan]) -> Dict[str, str]:
        names = {field_plan.name for field_plan in fields}
        aliases: Dict[str, str] = {}
        for field_plan in fields:
            if field_plan.alias is None:
                continue
            if field_plan.alias in names or field_plan.alias in aliases:
                raise InvalidOptionError(
                    cls.__name__, field_plan.name, "alias", f'"{field_plan.alias}" is already used'
                )
            aliases[field_plan.alias] = field_plan.name
        return aliases

    def _discriminator_children(self, root: Type) -> Tuple[type, ...]:
        children: List[type] = []
        for child in self.store.get(root, DecoratorKeys.DISCRIMINATORS) or []:
            if child not in children:
                children.append(child)
        return tuple(children)

    def _commit(self, session: _Session):
        for cls, plan in session.plans.items():
            self._plans[cls] = plan
            self._names[plan.name] = plan
            logger.info("schema plan compiled", target=cls.__name__, entity=plan.name, fields=len(plan.fields))


# ==================== DEFAULT COMPILER ====================

_default_compiler: Optional[ClassCompiler] = None
_default_lock = threading.Lock()


def get_compiler() -> ClassCompiler:
    global _default_compiler
    if _default_compiler is None:
        with _default_lock:
            if _default_compiler is None:
                _default_compiler = ClassCompiler()
    return _default_compiler


def build_schema(cls: Type, schema_options: Optional[Dict[str, Any]] = None) -> SchemaPlan:
    return get_compiler().build_schema(cls, schema_options)


def add_plan(cls: Type, plan: SchemaPlan) -> SchemaPlan:
    return get_compiler().add_plan(cls, plan)


def get_plan_by_name(name: str) -> Optional[SchemaPlan]:
    return get_compiler().get_plan_by_name(name)


def get_discriminator_group(root: Type) -> DiscriminatorGroup:
    return get_compiler().get_discriminator_group(root)
