"""
conftest.py

Shared pytest fixtures for json_constraints tests.
"""

import pytest

from json_constraints.examples import character_schema, quest_schema, scene_event_schema
from json_constraints.models import (
    ArrayField,
    CompositeField,
    IntegerField,
    StringField,
)


@pytest.fixture
def character() -> CompositeField:
    """The character sheet schema."""
    return character_schema()


@pytest.fixture
def scene_event() -> CompositeField:
    """A schema with a variant whose alternatives depend on the event type."""
    return scene_event_schema()


@pytest.fixture
def quest() -> CompositeField:
    """A schema mixing arrays of objects, optionals and variants."""
    return quest_schema()


@pytest.fixture
def two_names() -> CompositeField:
    """Two string fields with the same bounds."""
    return CompositeField(
        "Pair",
        StringField("first", 3, 20),
        StringField("second", 3, 20),
    )


@pytest.fixture
def party() -> CompositeField:
    """An array with both bounds above zero."""
    return CompositeField(
        "Party",
        ArrayField("members", IntegerField("level", 1, 10), 1, 3),
    )


@pytest.fixture
def valid_character() -> dict:
    """A document that satisfies character_schema()."""
    return {
        "name": "Narada",
        "age": 34,
        "class": "mage",
        "stats": {
            "strength": 8,
            "dexterity": 12,
            "intelligence": 18,
            "constitution": 10,
        },
        "skills": ["arcana", "history"],
        "health": 40,
    }
