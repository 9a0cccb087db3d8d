from fastval.core.nesting import declare_nested_field, expand_items
from fastval.core.rules import STRICT_KEY, get_inner_schema, get_schema
from fastval.decorators import Alphabet, ArrayOf, NestedObject, Numeric, validation_schema

from tests.helpers import build_schema


def test_nested_object_embeds_props_without_strict_flag():
    @validation_schema(strict=True)
    class Address:
        city = Alphabet()
        zip = Numeric()

    class Person:
        addr = NestedObject(Address)

    rule = get_schema(Person)["addr"]
    assert rule["type"] == "object"
    assert rule["props"] == get_inner_schema(Address)
    assert rule["props"] == {
        "city": {"empty": False, "type": "string"},
        "zip": {"convert": True, "type": "number"},
    }
    assert rule["strict"] is True
    # the nested type keeps its own flag
    assert get_schema(Address)[STRICT_KEY] is True


def test_nested_type_resolved_from_annotation():
    class Address:
        city = Alphabet()

    class Person:
        addr: Address = NestedObject()

    rule = get_schema(Person)["addr"]
    assert rule == {"props": {"city": {"empty": False, "type": "string"}}, "strict": False, "type": "object"}


def test_nested_options_are_kept_but_kind_is_fixed():
    Address = build_schema("Address", city=Alphabet())

    class Person:
        addr = NestedObject(Address, optional=True, type="string")

    rule = get_schema(Person)["addr"]
    assert rule["optional"] is True
    assert rule["type"] == "object"


def test_nested_non_validated_type_has_empty_props():
    class Loose:
        pass

    class Person:
        extra = NestedObject(Loose)

    assert get_schema(Person)["extra"] == {"props": {}, "strict": False, "type": "object"}


def test_redeclaring_nested_field_replaces_rule():
    Old = build_schema("Old", a=Alphabet())
    New = build_schema("New", b=Numeric())

    class Person:
        pass

    declare_nested_field(Person, "child", schema_type=Old)
    declare_nested_field(Person, "child", schema_type=New)
    assert get_schema(Person)["child"]["props"] == {"b": {"convert": True, "type": "number"}}


def test_nested_type_resolved_through_descriptor():
    Address = build_schema("Address", city=Alphabet())

    class Descriptor:
        def field_kind(self, name):
            return Address if name == "home" else None

    class Person:
        pass

    declare_nested_field(Person, "home", descriptor=Descriptor())
    assert get_schema(Person)["home"]["props"] == {"city": {"empty": False, "type": "string"}}


def test_array_items_class_is_expanded_to_object_rule():
    Tag = build_schema("Tag", strict=True, label=Alphabet())

    class Post:
        tags = ArrayOf(items=Tag, max=3)

    assert get_schema(Post)["tags"] == {
        "items": {"type": "object", "props": {"label": {"empty": False, "type": "string"}}},
        "max": 3,
        "type": "array",
    }


def test_array_primitive_items_are_left_alone():
    class Post:
        tags = ArrayOf(items={"type": "string"})

    assert get_schema(Post)["tags"] == {"items": {"type": "string"}, "type": "array"}


def test_expand_items_does_not_touch_caller_options():
    Tag = build_schema("Tag", label=Alphabet())
    options = {"items": Tag}
    expanded = expand_items(options)
    assert options["items"] is Tag
    assert expanded["items"]["type"] == "object"
