from typing import List, Optional

import pytest

from docschema.exceptions import InvalidOptionError, NoValidClassError
from docschema.metadata import (
    DecoratorKeys,
    MetadataStore,
    add_prop,
    array_prop,
    discriminator,
    merge_metadata,
    merge_schema_options,
    model_options,
    plugin,
    post,
    pre,
    prop,
)


# ===== STORE =====


def test_get_returns_none_when_absent():
    store = MetadataStore()

    class Empty:
        pass

    assert store.get(Empty, DecoratorKeys.PROPERTIES) is None
    assert not store.has(Empty, DecoratorKeys.PROPERTIES)


def test_get_rejects_non_class():
    store = MetadataStore()
    with pytest.raises(NoValidClassError):
        store.get("Cat", DecoratorKeys.PROPERTIES)


def test_merge_does_not_mutate_previous_value():
    store = MetadataStore()

    class Cat:
        pass

    store.set(Cat, "options", {"nested": {"a": 1}})
    before = store.get(Cat, "options")

    merged = store.merge(Cat, "options", {"nested": {"b": 2}})

    assert merged == {"nested": {"a": 1, "b": 2}}
    assert before == {"nested": {"a": 1}}
    assert store.get(Cat, "options") == {"nested": {"a": 1, "b": 2}}


def test_merge_returns_copy():
    store = MetadataStore()

    class Cat:
        pass

    merged = store.merge(Cat, "options", {"nested": {"a": 1}})
    merged["nested"]["a"] = 99

    assert store.get(Cat, "options") == {"nested": {"a": 1}}


def test_merge_with_none_keeps_existing():
    store = MetadataStore()

    class Cat:
        pass

    store.set(Cat, "options", {"a": 1})
    assert store.merge(Cat, "options", None) == {"a": 1}


def test_assign_is_shallow_and_none_is_noop():
    store = MetadataStore()

    class Cat:
        pass

    store.assign(Cat, "options", {"a": {"x": 1}})
    store.assign(Cat, "options", {"a": {"y": 2}})
    store.assign(Cat, "options", None)

    assert store.get(Cat, "options") == {"a": {"y": 2}}


def test_get_inherited_merges_root_to_leaf():
    store = MetadataStore()

    class Base:
        pass

    class Child(Base):
        pass

    store.set(Base, "options", {"schema_options": {"timestamps": True, "collection": "animals"}})
    store.set(Child, "options", {"schema_options": {"collection": "cats"}})

    assert store.get_inherited(Child, "options") == {
        "schema_options": {"timestamps": True, "collection": "cats"}
    }
    assert store.get_inherited(Base, "options") == {
        "schema_options": {"timestamps": True, "collection": "animals"}
    }


def test_get_inherited_result_is_independent():
    store = MetadataStore()

    class Base:
        pass

    class Child(Base):
        pass

    store.set(Base, "options", {"schema_options": {"timestamps": True}})

    inherited = store.get_inherited(Child, "options")
    inherited["schema_options"]["timestamps"] = False

    assert store.get(Base, "options") == {"schema_options": {"timestamps": True}}


def test_collect_concatenates_lists_root_first():
    store = MetadataStore()

    class Base:
        pass

    class Child(Base):
        pass

    store.append(Base, "plugins", "base")
    store.append(Child, "plugins", "child")

    assert store.collect(Child, "plugins") == ["base", "child"]
    assert store.collect(Base, "plugins") == ["base"]


def test_merge_metadata_does_not_store():
    store = MetadataStore()

    class Cat:
        pass

    store.set(Cat, "options", {"a": 1})

    assert merge_metadata("options", {"b": 2}, Cat, store) == {"a": 1, "b": 2}
    assert store.get(Cat, "options") == {"a": 1}


# ===== MARKERS =====


def test_prop_registers_options_and_removes_attribute():
    store = MetadataStore()

    class Cat:
        name: str = prop(required=True, store=store)
        tags: List[str] = array_prop(lowercase=True, store=store)

    assert store.get(Cat, DecoratorKeys.PROPERTIES) == {
        "name": {"required": True},
        "tags": {"lowercase": True, "items": None},
    }
    assert "name" not in vars(Cat)
    assert "tags" not in vars(Cat)


def test_prop_options_are_per_class():
    store = MetadataStore()

    class Base:
        name: Optional[str] = prop(store=store)

    class Child(Base):
        name: Optional[str] = prop(maxlength=10, store=store)

    assert store.get(Base, DecoratorKeys.PROPERTIES) == {"name": {}}
    assert store.get(Child, DecoratorKeys.PROPERTIES) == {"name": {"maxlength": 10}}


def test_add_prop_registers_without_marker():
    store = MetadataStore()

    class Cat:
        name: str

    add_prop(Cat, "name", store=store, required=True)

    assert store.get(Cat, DecoratorKeys.PROPERTIES) == {"name": {"required": True}}


# ===== CLASS DECORATORS =====


def test_model_options_merges_on_repeated_use():
    store = MetadataStore()

    @model_options(schema_options={"timestamps": True}, store=store)
    @model_options(schema_options={"collection": "cats"}, options={"custom_name": "Kitty"}, store=store)
    class Cat:
        pass

    assert store.get(Cat, DecoratorKeys.MODEL_OPTIONS) == {
        "schema_options": {"collection": "cats", "timestamps": True},
        "options": {"custom_name": "Kitty"},
    }
    assert merge_schema_options({"strict": False}, Cat, store) == {
        "collection": "cats",
        "timestamps": True,
        "strict": False,
    }


def test_plugin_and_hooks_are_appended():
    store = MetadataStore()

    def audit(schema, options):
        return schema

    def before_save(doc):
        return doc

    @plugin(audit, {"level": 1}, store=store)
    @pre("save", before_save, store=store)
    @post("save", before_save, store=store)
    class Cat:
        pass

    assert store.get(Cat, DecoratorKeys.PLUGINS) == [{"fn": audit, "options": {"level": 1}}]
    assert [hook["kind"] for hook in store.get(Cat, DecoratorKeys.HOOKS)] == ["post", "pre"]


def test_plugin_rejects_non_callable():
    with pytest.raises(InvalidOptionError):
        plugin("not callable")


def test_discriminator_requires_subclass():
    store = MetadataStore()

    class Animal:
        pass

    class Stone:
        pass

    with pytest.raises(NoValidClassError):
        discriminator(Animal, store=store)(Stone)

    with pytest.raises(NoValidClassError):
        discriminator(Animal, store=store)(Animal)


def test_discriminator_registers_child_on_root():
    store = MetadataStore()

    class Animal:
        pass

    @discriminator(Animal, store=store)
    class Cat(Animal):
        pass

    @discriminator(Animal, "canine", store=store)
    class Dog(Animal):
        pass

    assert store.get(Cat, DecoratorKeys.DISCRIMINATOR) == {"root": Animal, "value": "Cat"}
    assert store.get(Dog, DecoratorKeys.DISCRIMINATOR) == {"root": Animal, "value": "canine"}
    assert store.get(Animal, DecoratorKeys.DISCRIMINATORS) == [Cat, Dog]
