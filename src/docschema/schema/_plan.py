from typing import Any, Callable, Dict, List, Optional, Tuple, Type
from pydantic import BaseModel, ConfigDict, Field

from docschema.util import deep_merge
from ._constants import TypeSources
from ._types import Nested, ResolvedType, iter_types


# ===== PIEZAS DEL PLAN =====


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Validator(_Frozen):
    """Validador normalizado: predicado o regex, con mensaje opcional."""

    validator: Any
    message: Optional[str] = None


class Transform(_Frozen):
    get: Callable[..., Any]
    set: Callable[..., Any]


class VirtualPopulate(_Frozen):
    ref: Optional[Any] = None
    ref_path: Optional[str] = None
    local_field: str
    foreign_field: str
    just_one: bool = False
    count: bool = False


class Plugin(_Frozen):
    fn: Callable[..., Any]
    options: Optional[Dict[str, Any]] = None


class Hook(_Frozen):
    kind: str
    method: str
    fn: Callable[..., Any]


# ===== FIELD PLAN =====


class FieldPlan(_Frozen):
    """Propiedad compilada. Inmutable; pertenece a su SchemaPlan."""

    name: str
    type: ResolvedType
    exposed_type: ResolvedType
    type_source: str = TypeSources.INFERRED
    required: Any = False
    has_default: bool = False
    default: Any = None
    index: bool = False
    unique: bool = False
    validators: Tuple[Validator, ...] = ()
    transform: Optional[Transform] = None
    alias: Optional[str] = None
    suppress_id: bool = False
    enum: Optional[List[Any]] = None
    constraints: Dict[str, Any] = Field(default_factory=dict)
    virtual: Optional[VirtualPopulate] = None
    extra: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_virtual(self) -> bool:
        return self.virtual is not None

    @property
    def nested_targets(self) -> List[type]:
        return [t.target for t in iter_types(self.type) if isinstance(t, Nested)]


# ===== SCHEMA PLAN =====


class SchemaPlan(_Frozen):
    """
    Plan compilado de una clase.

    fields mantiene el orden de declaración con los campos heredados
    primero. Las opciones se copian al construir el plan: mutar las de un
    plan nunca afecta a otra clase.
    """

    cls: Type[Any]
    name: str
    fields: Tuple[FieldPlan, ...] = ()
    schema_options: Dict[str, Any] = Field(default_factory=dict)
    options: Dict[str, Any] = Field(default_factory=dict)
    plugins: Tuple[Plugin, ...] = ()
    hooks: Tuple[Hook, ...] = ()
    discriminator_key: Optional[str] = None
    discriminator_value: Optional[str] = None
    aliases: Dict[str, str] = Field(default_factory=dict)

    def field(self, name: str) -> Optional[FieldPlan]:
        for field_plan in self.fields:
            if field_plan.name == name:
                return field_plan
        return None

    @property
    def field_names(self) -> List[str]:
        return [field_plan.name for field_plan in self.fields]

    @property
    def stored_fields(self) -> List[FieldPlan]:
        return [field_plan for field_plan in self.fields if not field_plan.is_virtual]

    @property
    def virtual_fields(self) -> List[FieldPlan]:
        return [field_plan for field_plan in self.fields if field_plan.is_virtual]

    @property
    def nested_classes(self) -> List[type]:
        seen: List[type] = []
        for field_plan in self.fields:
            for target in field_plan.nested_targets:
                if target not in seen:
                    seen.append(target)
        return seen

    def resolve_alias(self, name: str) -> str:
        """Nombre guardado para un alias (o el propio nombre)."""
        return self.aliases.get(name, name)

    def with_schema_options(self, schema_options: Optional[Dict[str, Any]]) -> "SchemaPlan":
        if not schema_options:
            return self
        merged = deep_merge(self.schema_options, schema_options)
        return self.model_copy(update={"schema_options": merged})


# ===== DISCRIMINATORS =====


class DiscriminatorGroup(_Frozen):
    """Plan raíz y planes hijos indexados por valor de discriminador."""

    root: SchemaPlan
    key: str
    children: Dict[str, SchemaPlan] = Field(default_factory=dict)

    def child(self, value: str) -> Optional[SchemaPlan]:
        return self.children.get(value)

    def plan_for(self, cls: type) -> Optional[SchemaPlan]:
        if cls is self.root.cls:
            return self.root
        for plan in self.children.values():
            if plan.cls is cls:
                return plan
        return None
