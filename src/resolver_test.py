from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Dict, List, Literal, Optional, Set, Tuple, Union
from uuid import UUID

import pytest

from docschema.config import CompilerSettings
from docschema.exceptions import (
    InvalidEnumError,
    InvalidOptionError,
    InvalidTypeError,
    NoMetadataError,
    NotNumberTypeError,
    NotStringTypeError,
    NoValidClassError,
    TypeMismatchError,
)
from docschema.metadata import add_prop, array_prop, map_prop, prop
from docschema.schema import (
    ArrayOf,
    ClassCompiler,
    DictTypeHintProvider,
    MapOf,
    Mixed,
    Nested,
    Primitive,
    Reference,
    StorageTypes,
    TypeSources,
    custom_type,
)


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Switch(Enum):
    ON = True
    OFF = False


class Level(IntEnum):
    LOW = 1
    HIGH = 2


def field(cls, name, compiler=None):
    return (compiler or ClassCompiler()).compile(cls).field(name)


# ===== PRIMITIVES =====


def test_optional_string_is_one_plain_field():
    class A:
        x: Optional[str] = prop()

    plan = ClassCompiler().compile(A)

    assert plan.field_names == ["x"]
    assert plan.fields[0].type == Primitive(storage=StorageTypes.STRING)
    assert plan.fields[0].required is False


@pytest.mark.parametrize(
    "hint, storage",
    [
        (str, StorageTypes.STRING),
        (int, StorageTypes.NUMBER),
        (float, StorageTypes.NUMBER),
        (bool, StorageTypes.BOOLEAN),
        (datetime, StorageTypes.DATE),
        (bytes, StorageTypes.BUFFER),
        (Decimal, StorageTypes.DECIMAL),
        (UUID, StorageTypes.UUID),
    ],
)
def test_primitive_hints(hint, storage):
    class A:
        pass

    add_prop(A, "value")
    compiler = ClassCompiler(hints=DictTypeHintProvider({A: {"value": hint}}))

    assert field(A, "value", compiler).type == Primitive(storage=storage)


def test_any_and_bare_dict_are_mixed():
    class A:
        anything: Any = prop()
        blob: dict = prop()
        table: Dict = prop()

    plan = ClassCompiler().compile(A)

    assert plan.field("anything").type == Mixed()
    assert plan.field("blob").type == Mixed()
    assert plan.field("table").type == Mixed()


def test_literal_is_primitive_with_enum():
    class A:
        size: Literal["s", "m", "l"] = prop()

    resolved = field(A, "size")

    assert resolved.type == Primitive(storage=StorageTypes.STRING)
    assert resolved.enum == ["s", "m", "l"]


# ===== WRAPPERS =====


def test_list_set_and_tuple_are_arrays():
    class A:
        tags: List[str] = prop()
        ids: Set[int] = prop()
        pair: Tuple[float, ...] = prop()
        anything: list = prop()

    plan = ClassCompiler().compile(A)

    assert plan.field("tags").type == ArrayOf(item=Primitive(storage=StorageTypes.STRING))
    assert plan.field("ids").type == ArrayOf(item=Primitive(storage=StorageTypes.NUMBER))
    assert plan.field("pair").type == ArrayOf(item=Primitive(storage=StorageTypes.NUMBER))
    assert plan.field("anything").type == ArrayOf(item=Mixed())


def test_heterogeneous_tuple_is_rejected():
    class A:
        pair: Tuple[str, int] = prop()

    with pytest.raises(InvalidTypeError):
        ClassCompiler().compile(A)


def test_dict_with_string_keys_is_map():
    class A:
        scores: Dict[str, int] = prop()

    assert field(A, "scores").type == MapOf(value=Primitive(storage=StorageTypes.NUMBER))


def test_map_keys_must_be_strings():
    class A:
        scores: Dict[int, int] = prop()

    with pytest.raises(InvalidTypeError):
        ClassCompiler().compile(A)


def test_items_overrides_element_type():
    class A:
        values: list = array_prop(items=int)

    assert field(A, "values").type == ArrayOf(item=Primitive(storage=StorageTypes.NUMBER))


def test_of_declares_map_without_hint():
    class A:
        pass

    add_prop(A, "labels", of=str)

    assert field(A, "labels").type == MapOf(value=Primitive(storage=StorageTypes.STRING))


def test_declared_wrapper_must_match_annotation():
    class A:
        name: str = array_prop()

    with pytest.raises(TypeMismatchError):
        ClassCompiler().compile(A)


def test_map_prop_on_list_is_mismatch():
    class A:
        names: List[str] = map_prop()

    with pytest.raises(TypeMismatchError):
        ClassCompiler().compile(A)


# ===== NESTED & REFERENCES =====


class Address:
    street: str = prop()


class Person:
    name: str = prop()


def test_plain_class_is_nested():
    class A:
        home: Address = prop()
        previous: List[Address] = prop()

    plan = ClassCompiler().compile(A)

    assert plan.field("home").type == Nested(target=Address)
    assert plan.field("previous").type == ArrayOf(item=Nested(target=Address))


def test_ref_true_references_annotated_class():
    class A:
        owner: Person = prop(ref=True)

    resolved = field(A, "owner").type

    assert resolved == Reference(target=Person, ref_type=StorageTypes.OBJECT_ID)


def test_ref_by_name_takes_hint_storage_as_ref_type():
    class A:
        owner_id: str = prop(ref="Person")

    resolved = field(A, "owner_id").type

    assert resolved.target == "Person"
    assert resolved.ref_type == StorageTypes.STRING


def test_ref_path_reference():
    class A:
        owner: Any = prop(ref_path="owner_model")

    resolved = field(A, "owner").type

    assert resolved.path == "owner_model"
    assert resolved.target is None


def test_explicit_ref_type():
    class A:
        owner: Any = prop(ref=Person, ref_type=custom_type("Long"))

    assert field(A, "owner").type.ref_type == "Long"


def test_ref_true_on_primitive_is_not_a_class():
    class A:
        owner: str = prop(ref=True)

    with pytest.raises(NoValidClassError):
        ClassCompiler().compile(A)


def test_ref_must_be_class_or_name():
    class A:
        owner: Any = prop(ref=5)

    with pytest.raises(NoValidClassError):
        ClassCompiler().compile(A)


def test_ref_and_ref_path_are_exclusive():
    class A:
        owner: Any = prop(ref=Person, ref_path="kind")

    with pytest.raises(InvalidOptionError):
        ClassCompiler().compile(A)


# ===== AMBIGUOUS / MISSING =====


def test_ambiguous_union_needs_override():
    class A:
        value: Union[str, int] = prop()

    with pytest.raises(InvalidTypeError):
        ClassCompiler().compile(A)


def test_override_resolves_ambiguous_union():
    class A:
        value: Union[str, int] = prop(type="string")

    resolved = field(A, "value")

    assert resolved.type == Primitive(storage=StorageTypes.STRING)
    assert resolved.type_source == TypeSources.OVERRIDE


def test_missing_hint_raises_no_metadata():
    class A:
        pass

    add_prop(A, "ghost")

    with pytest.raises(NoMetadataError) as exc_info:
        ClassCompiler().compile(A)

    assert exc_info.value.class_name == "A"
    assert exc_info.value.property_name == "ghost"
    assert "forward references" in str(exc_info.value)


def test_unresolvable_forward_reference_raises_no_metadata():
    class A:
        other: "DoesNotExist" = prop()  # noqa: F821

    with pytest.raises(NoMetadataError):
        ClassCompiler().compile(A)


def test_forward_reference_resolves_once_the_class_exists(monkeypatch):
    class Owner:
        pet: "Kennel" = prop()  # noqa: F821

    compiler = ClassCompiler()
    with pytest.raises(NoMetadataError):
        compiler.compile(Owner)

    class Kennel:
        size: int = prop()

    monkeypatch.setitem(globals(), "Kennel", Kennel)

    assert compiler.compile(Owner).field("pet").type == Nested(target=Kennel)


# ===== OVERRIDES =====


def test_scalar_override_refines_array_element():
    class A:
        codes: List[str] = prop(type="number")

    resolved = field(A, "codes")

    assert resolved.type == ArrayOf(item=Primitive(storage=StorageTypes.NUMBER))
    assert resolved.type_source == TypeSources.OVERRIDE


def test_wrapper_override_of_other_kind_is_mismatch():
    class A:
        labels: Dict[str, str] = prop(type=["string"])

    with pytest.raises(TypeMismatchError) as exc_info:
        ClassCompiler().compile(A)

    assert exc_info.value.expected == "map<string>"
    assert exc_info.value.actual == "array<string>"


def test_unknown_storage_tag_is_invalid():
    class A:
        value: str = prop(type="text")

    with pytest.raises(InvalidTypeError):
        ClassCompiler().compile(A)


def test_custom_type_override():
    class A:
        location: Any = prop(type=custom_type("Point"))

    assert field(A, "location").type == Primitive(storage="Point")


def test_get_set_keeps_exposed_type():
    class A:
        tags: List[str] = prop(type="string", get=lambda v: v.split(","), set=lambda v: ",".join(v))

    resolved = field(A, "tags")

    assert resolved.type == Primitive(storage=StorageTypes.STRING)
    assert resolved.exposed_type == ArrayOf(item=Primitive(storage=StorageTypes.STRING))
    assert resolved.transform is not None


# ===== ENUMS =====


def test_enum_list_is_emitted_verbatim():
    class A:
        color: str = prop(enum=["red", "green"], type="string")

    assert field(A, "color").enum == ["red", "green"]


def test_string_enum_class():
    class A:
        color: Color = prop()

    resolved = field(A, "color", ClassCompiler(settings=CompilerSettings(strict_enum=True)))

    assert resolved.type == Primitive(storage=StorageTypes.STRING)
    assert resolved.enum == ["red", "green"]


def test_numeric_enum_allowed_when_not_strict():
    class A:
        level: Level = prop()

    resolved = field(A, "level")

    assert resolved.type == Primitive(storage=StorageTypes.NUMBER)
    assert resolved.enum == [1, 2]


def test_numeric_enum_rejected_in_strict_mode():
    class A:
        level: Level = prop()

    with pytest.raises(InvalidEnumError):
        ClassCompiler(settings=CompilerSettings(strict_enum=True)).compile(A)


def test_string_enum_on_number_field():
    class A:
        level: int = prop(enum=["low", "high"])

    with pytest.raises(NotStringTypeError):
        ClassCompiler().compile(A)


def test_number_enum_on_string_field():
    class A:
        level: str = prop(enum=[1, 2])

    with pytest.raises(NotNumberTypeError):
        ClassCompiler().compile(A)


def test_mixed_enum_values_are_invalid():
    class A:
        level: str = prop(enum=["low", 2])

    with pytest.raises(InvalidEnumError):
        ClassCompiler().compile(A)


def test_empty_enum_is_invalid():
    class A:
        level: str = prop(enum=[])

    with pytest.raises(InvalidEnumError):
        ClassCompiler().compile(A)


def test_boolean_enum_class_is_plain_boolean():
    class A:
        state: Switch = prop()
        flag: Literal[True, False] = prop()

    plan = ClassCompiler().compile(A)

    assert plan.field("state").type == Primitive(storage=StorageTypes.BOOLEAN)
    assert plan.field("state").enum is None
    assert plan.field("flag").type == plan.field("state").type
