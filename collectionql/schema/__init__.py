"""Strawberry type generation for collections."""
from .collection_type import get_collection_output_type
from .condition_types import ConditionType, get_condition_type
from .connection import ConnectionValue, PageInfo, connection_field, get_connection_type
from .node import NodeDict, get_node_interface, mark_node_value, node_value_collection
from .output_types import OutputType, get_output_type
from .query import create_query_type

__all__ = [
    'get_collection_output_type',
    'ConditionType',
    'get_condition_type',
    'ConnectionValue',
    'PageInfo',
    'connection_field',
    'get_connection_type',
    'NodeDict',
    'get_node_interface',
    'mark_node_value',
    'node_value_collection',
    'OutputType',
    'get_output_type',
    'create_query_type',
]
