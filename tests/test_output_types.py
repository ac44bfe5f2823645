from enum import Enum
from typing import List, Optional

import pytest

from collectionql.errors import SchemaConfigurationError
from collectionql.interface import (
    INTEGER, STRING, EnumType, Field, Inventory, ListType, NullableType, ObjectType,
)
from collectionql.registry import BuildContext
from collectionql.schema.output_types import get_output_type
from tests.schema import build_inventory, post_status


def _context(inventory=None):
    return BuildContext(inventory or Inventory())


def test_scalar_nullable_and_list_annotations():
    ctx = _context()
    assert get_output_type(ctx, STRING).annotation is str
    assert get_output_type(ctx, NullableType(INTEGER)).annotation == Optional[int]
    assert get_output_type(ctx, ListType(NullableType(STRING))).annotation == List[Optional[str]]
    assert get_output_type(ctx, NullableType(INTEGER)).to_output(None) is None
    assert get_output_type(ctx, INTEGER).to_output(5) == 5


def test_results_are_memoised_per_value_type():
    ctx = _context()
    assert get_output_type(ctx, post_status) is get_output_type(ctx, post_status)
    assert get_output_type(ctx, NullableType(post_status)).annotation == Optional[get_output_type(ctx, post_status).annotation]


def test_enum_members_and_transform():
    ctx = _context()
    out = get_output_type(ctx, post_status)
    members = [m.name for m in out.annotation]
    assert members == ['DRAFT', 'PUBLISHED', 'ARCHIVED']
    assert out.to_output('published') is out.annotation.PUBLISHED

    class Foreign(Enum):
        DRAFTED = 'draft'
    assert out.to_output(Foreign.DRAFTED) is out.annotation.DRAFT
    listed = get_output_type(ctx, ListType(post_status)).to_output(['draft', 'archived'])
    assert [m.name for m in listed] == ['DRAFT', 'ARCHIVED']


def test_enum_variant_name_clash_is_a_configuration_error():
    ctx = _context()
    with pytest.raises(SchemaConfigurationError):
        get_output_type(ctx, EnumType('clash', ['in progress', 'IN_PROGRESS']))


def test_object_type_of_a_collection_maps_to_its_output_type():
    inventory = build_inventory()
    ctx = _context(inventory)
    people = inventory.get_collection('people')
    from collectionql.schema.collection_type import get_collection_output_type
    assert get_output_type(ctx, people.type).annotation is get_collection_output_type(ctx, people)


def test_free_object_type_gets_a_lazy_type():
    ctx = _context()
    address = ObjectType('address', [Field('street', STRING), Field('zip_code', NullableType(STRING))])
    shell = get_output_type(ctx, address).annotation
    assert shell.__name__ == 'Address'
    assert ctx.registry.get('Address') is shell
    assert list(ctx.registry.fields_of('Address')) == ['street', 'zipCode']
