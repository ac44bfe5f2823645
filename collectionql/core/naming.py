"""Naming rules shared by every generated type, field and argument.

All generated GraphQL names pass through these helpers so that the same data
model always yields the same schema. Python attribute names of generated
Strawberry fields are the snake_case form of their GraphQL names.
"""
from __future__ import annotations

import re
from typing import List

__all__ = [
    'camel_to_snake',
    'split_words',
    'format_type',
    'format_field',
    'format_enum_value',
    'python_name',
]


_NON_ALNUM = re.compile(r'[^0-9A-Za-z]+')


def camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase identifier to snake_case.

    Idempotent for already snake_case input. Handles sequences of capitals.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def split_words(name: str) -> List[str]:
    """Split a name on non-alphanumerics and lower-to-upper case boundaries."""
    snake = camel_to_snake(_NON_ALNUM.sub('_', str(name)))
    return [w for w in snake.split('_') if w]


def format_type(name: str) -> str:
    """``person`` -> ``Person``, ``blog-post`` -> ``BlogPost``."""
    return ''.join(w.capitalize() for w in split_words(name))


def format_field(name: str) -> str:
    """``posts-by-author`` -> ``postsByAuthor``, ``created_at`` -> ``createdAt``."""
    words = split_words(name)
    if not words:
        return ''
    return words[0] + ''.join(w.capitalize() for w in words[1:])


def format_enum_value(value: object) -> str:
    """``in progress`` -> ``IN_PROGRESS``. Leading digits get an underscore prefix."""
    out = '_'.join(w.upper() for w in split_words(str(value)))
    if not out or out[0].isdigit():
        out = '_' + out
    return out


def python_name(graphql_name: str) -> str:
    """Attribute name used on generated Strawberry classes for a GraphQL field."""
    return camel_to_snake(graphql_name)
