from typing import Annotated, Any, Literal, Optional, Type, Union
from pydantic import BaseModel, ConfigDict, Field

from ._constants import DEFAULT_REF_TYPE, TypeKinds


class CustomType(BaseModel):
    """Tipo de almacenamiento registrado en el driver (p.ej. un SchemaType propio)."""

    name: str
    model_config = ConfigDict(frozen=True)


def custom_type(name: str) -> CustomType:
    return CustomType(name=name)


# ===== RESOLVED TYPES =====


class _ResolvedBase(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_wrapper(self) -> bool:
        return False

    def leaf(self) -> "ResolvedType":
        return self

    def describe(self) -> str:
        return self.kind


class Primitive(_ResolvedBase):
    kind: Literal["primitive"] = TypeKinds.PRIMITIVE
    storage: str

    def describe(self) -> str:
        return self.storage


class ArrayOf(_ResolvedBase):
    kind: Literal["array"] = TypeKinds.ARRAY
    item: "ResolvedType"

    @property
    def is_wrapper(self) -> bool:
        return True

    def leaf(self) -> "ResolvedType":
        return self.item.leaf()

    def describe(self) -> str:
        return f"array<{self.item.describe()}>"


class MapOf(_ResolvedBase):
    kind: Literal["map"] = TypeKinds.MAP
    value: "ResolvedType"

    @property
    def is_wrapper(self) -> bool:
        return True

    def leaf(self) -> "ResolvedType":
        return self.value.leaf()

    def describe(self) -> str:
        return f"map<{self.value.describe()}>"


class Nested(_ResolvedBase):
    kind: Literal["nested"] = TypeKinds.NESTED
    target: Type[Any]

    def describe(self) -> str:
        return f"nested<{self.target.__name__}>"


class Reference(_ResolvedBase):
    """Referencia a otro documento, por clase, por nombre de clase o por path."""

    kind: Literal["reference"] = TypeKinds.REFERENCE
    target: Optional[Union[Type[Any], str]] = None
    path: Optional[str] = None
    ref_type: str = DEFAULT_REF_TYPE

    @property
    def target_name(self) -> Optional[str]:
        if self.target is None:
            return None
        if isinstance(self.target, str):
            return self.target
        return self.target.__name__

    def describe(self) -> str:
        return f"reference<{self.target_name or self.path}>"


class Mixed(_ResolvedBase):
    kind: Literal["mixed"] = TypeKinds.MIXED


ResolvedType = Annotated[
    Union[Primitive, ArrayOf, MapOf, Nested, Reference, Mixed],
    Field(discriminator="kind"),
]

ArrayOf.model_rebuild()
MapOf.model_rebuild()


def iter_types(resolved: ResolvedType):
    """Recorre resolved y sus tipos internos."""
    yield resolved
    if isinstance(resolved, ArrayOf):
        yield from iter_types(resolved.item)
    elif isinstance(resolved, MapOf):
        yield from iter_types(resolved.value)
