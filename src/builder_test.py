from typing import Any, Dict, List, Optional

from docschema.metadata import discriminator, model_options, plugin, prop
from docschema.schema import (
    ArrayOf,
    ClassCompiler,
    MapOf,
    Mixed,
    Nested,
    Primitive,
    Reference,
    SchemaBuilder,
    generate_definitions,
)


def name_of(cls):
    return cls.__name__


# ===== SCHEMA BUILDER =====


def test_build_type_renders_every_variant():
    class Address:
        pass

    assert SchemaBuilder.build_type(Primitive(storage="string"), name_of) == {"type": "string"}
    assert SchemaBuilder.build_type(ArrayOf(item=Primitive(storage="number")), name_of) == {
        "type": "array",
        "items": {"type": "number"},
    }
    assert SchemaBuilder.build_type(MapOf(value=Mixed()), name_of) == {"type": "map", "of": {"type": "mixed"}}
    assert SchemaBuilder.build_type(Nested(target=Address), name_of) == {"type": "nested", "entity": "Address"}
    assert SchemaBuilder.build_type(Reference(target=Address), name_of) == {
        "type": "reference",
        "ref": "Address",
        "ref_type": "objectid",
    }
    assert SchemaBuilder.build_type(Reference(path="kind", ref_type="string"), name_of) == {
        "type": "reference",
        "ref_type": "string",
        "ref_path": "kind",
    }


# ===== DEFINITIONS =====


def test_definitions_are_flat_and_keyed_by_entity():
    class Address:
        street: str = prop(required=True, trim=True)

    class Person:
        name: str = prop(required=True, unique=True)
        home: Address = prop(_id=False)
        previous: List[Address] = prop()
        nickname: Optional[str] = prop(default="anon", alias="nick")

    definitions = generate_definitions(Person, ClassCompiler())

    assert set(definitions) == {"Person", "Address"}

    person = definitions["Person"]
    assert list(person["fields"]) == ["name", "home", "previous", "nickname"]
    assert person["fields"]["name"] == {"type": "string", "required": True, "index": True, "unique": True}
    assert person["fields"]["home"] == {"type": "nested", "entity": "Address", "_id": False}
    assert person["fields"]["previous"] == {"type": "array", "items": {"type": "nested", "entity": "Address"}}
    assert person["fields"]["nickname"] == {"type": "string", "default": "anon", "alias": "nick"}
    assert person["entity_metadata"]["aliases"] == {"nick": "nickname"}
    assert person["entity_metadata"]["dependencies"] == {"embedded": ["Address"]}

    assert definitions["Address"]["fields"]["street"] == {"type": "string", "required": True, "trim": True}


def test_definitions_include_class_options_and_plugins():
    def audit(schema, options):
        return schema

    @model_options(schema_options={"collection": "cats", "timestamps": True})
    @plugin(audit)
    class Cat:
        owner: Any = prop(ref="Person")
        color: str = prop(enum=["red", "green"], sparse=True)

    metadata = generate_definitions(Cat, ClassCompiler())["Cat"]
    entity = metadata["entity_metadata"]

    assert entity["entity_name"] == "Cat"
    assert entity["schema_options"] == {"collection": "cats", "timestamps": True}
    assert entity["plugins"] == [audit]
    assert entity["dependencies"] == {"references": ["Person"]}
    assert metadata["fields"]["color"] == {"type": "string", "enum": ["red", "green"], "sparse": True}


def test_virtuals_are_kept_apart_from_fields():
    class Owner:
        name: str = prop()
        pets: List[Any] = prop(ref="Pet", local_field="_id", foreign_field="owner")

    definition = generate_definitions(Owner, ClassCompiler())["Owner"]

    assert list(definition["fields"]) == ["name"]
    assert definition["virtuals"]["pets"] == {
        "ref": "Pet",
        "local_field": "_id",
        "foreign_field": "owner",
        "just_one": False,
        "count": False,
    }


def test_definitions_include_discriminator_children():
    class Animal:
        name: str = prop()

    @discriminator(Animal, "feline")
    class Cat(Animal):
        lives: int = prop()

    definitions = generate_definitions(Animal, ClassCompiler())

    assert set(definitions) == {"Animal", "Cat"}
    assert definitions["Animal"]["entity_metadata"]["discriminators"] == {"feline": "Cat"}
    assert definitions["Animal"]["entity_metadata"]["discriminator_key"] == "__t"
    assert definitions["Cat"]["entity_metadata"]["discriminator_value"] == "feline"


def test_map_and_validators_render():
    def positive(value):
        return value > 0

    class Stats:
        scores: Dict[str, int] = prop(validate={"validator": positive, "message": "must be positive"})

    field = generate_definitions(Stats, ClassCompiler())["Stats"]["fields"]["scores"]

    assert field["type"] == "map"
    assert field["of"] == {"type": "number"}
    assert field["validators"] == [{"validator": positive, "message": "must be positive"}]


def test_root_compiled_before_children_gets_discriminator_key():
    class Animal:
        name: str = prop()

    compiler = ClassCompiler()
    assert compiler.compile(Animal).discriminator_key is None

    @discriminator(Animal, "feline")
    class Cat(Animal):
        lives: int = prop()

    entity = generate_definitions(Animal, compiler)["Animal"]["entity_metadata"]

    assert entity["discriminators"] == {"feline": "Cat"}
    assert entity["discriminator_key"] == "__t"
