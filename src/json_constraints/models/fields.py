"""
fields.py

PURPOSE: The closed vocabulary of field kinds that describe an expected JSON value.
DEPENDENCIES: None (pure Python + dataclasses)

ARCHITECTURE NOTES:
A schema is a tree of frozen field values rooted at one field, usually a
CompositeField. Every variant validates its own invariants in __post_init__, so
an invalid schema can never be built; the compilers assume valid input.

The set of variants is closed. The compilers dispatch with `match` over the
classes listed in FIELD_TYPES and treat anything else as an integration error.

Equality and hashing are structural (the optional hint is ignored), which lets
the grammar compiler recognise identical sub-schemas at different positions.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

from json_constraints.errors import SchemaError

# Marker a TemplateStringField uses to say where generated text goes
GENERATED_MARKER = "<generated>"

ConstantValue = Union[int, float, str]
ChoiceValue = Union[int, float, str]


def _has_control_chars(text: str) -> bool:
    return any(ord(c) < 0x20 or ord(c) == 0x7F for c in text)


def _is_int(value: object) -> bool:
    # bool is a subclass of int but never a valid bound or literal
    return type(value) is int


def _is_number(value: object) -> bool:
    return type(value) in (int, float)


def _collect(members: tuple) -> tuple:
    """Accept members as varargs or as a single list/tuple."""
    if len(members) == 1 and isinstance(members[0], (list, tuple)):
        members = tuple(members[0])
    return members


@dataclass(frozen=True)
class BaseField:
    """
    Common data for every field.

    Attributes:
        name: Key of the field when nested inside an object. Also the base of
            the grammar rule name for structured fields.
        hint: Optional free-text guidance for prompt authors. Ignored by the
            grammar, the template and the validator.
    """

    name: str
    hint: str | None = field(default=None, compare=False, kw_only=True)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError(f"Field name must be a non-empty string, got {self.name!r}")
        if _has_control_chars(self.name):
            raise SchemaError(f"Field name {self.name!r} contains control characters")
        if self.hint is not None and not isinstance(self.hint, str):
            raise SchemaError(f"Hint for '{self.name}' must be a string")


@dataclass(frozen=True)
class IntegerField(BaseField):
    """An integer in the inclusive range [min, max]."""

    min: int
    max: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if not (_is_int(self.min) and _is_int(self.max)):
            raise SchemaError(f"IntegerField '{self.name}' bounds must be integers")
        if self.min > self.max:
            raise SchemaError(
                f"IntegerField '{self.name}': min {self.min} is greater than max {self.max}"
            )


@dataclass(frozen=True)
class FloatField(BaseField):
    """A number in the inclusive range [min, max]."""

    min: float
    max: float

    def __post_init__(self) -> None:
        super().__post_init__()
        if not (_is_number(self.min) and _is_number(self.max)):
            raise SchemaError(f"FloatField '{self.name}' bounds must be numbers")
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise SchemaError(f"FloatField '{self.name}' bounds must be finite")
        if self.min > self.max:
            raise SchemaError(
                f"FloatField '{self.name}': min {self.min} is greater than max {self.max}"
            )
        # Normalise int bounds so FloatField("x", 0, 1) == FloatField("x", 0.0, 1.0)
        object.__setattr__(self, "min", float(self.min))
        object.__setattr__(self, "max", float(self.max))


@dataclass(frozen=True)
class StringField(BaseField):
    """A string whose length lies in [min_length, max_length]."""

    min_length: int
    max_length: int

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_length_bounds("StringField", self.name, self.min_length, self.max_length)


@dataclass(frozen=True)
class ConstantField(BaseField):
    """A value that is always exactly `value`."""

    value: ConstantValue

    def __post_init__(self) -> None:
        super().__post_init__()
        if type(self.value) not in (int, float, str):
            raise SchemaError(
                f"ConstantField '{self.name}' value must be int, float or str, "
                f"got {type(self.value).__name__}"
            )
        if isinstance(self.value, float) and not math.isfinite(self.value):
            raise SchemaError(f"ConstantField '{self.name}' value must be finite")


@dataclass(frozen=True)
class BooleanField(BaseField):
    """true or false."""


@dataclass(frozen=True, init=False)
class ChoiceField(BaseField):
    """
    One of a fixed, ordered set of literal options.

    Options are all ints, all floats or all strings.

    Example:
        ChoiceField("class", "warrior", "mage", "rogue")
    """

    options: tuple[ChoiceValue, ...]

    def __init__(self, name: str, *options: ChoiceValue, hint: str | None = None):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "options", _collect(options))
        object.__setattr__(self, "hint", hint)
        self.__post_init__()

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.options:
            raise SchemaError(f"ChoiceField '{self.name}' needs at least one option")
        kinds = {type(opt) for opt in self.options}
        if not kinds <= {int, float, str} or len(kinds) > 1:
            raise SchemaError(
                f"ChoiceField '{self.name}' options must all be ints, all floats or all strings"
            )
        if kinds == {float} and not all(math.isfinite(opt) for opt in self.options):
            raise SchemaError(f"ChoiceField '{self.name}' options must be finite")
        if len(set(self.options)) != len(self.options):
            raise SchemaError(f"ChoiceField '{self.name}' options must be unique")


@dataclass(frozen=True, init=False)
class CompositeField(BaseField):
    """
    A JSON object with a fixed, ordered set of keys.

    Each child's name is its key. Children wrapped in OptionalField may be
    omitted; every other child is required.
    """

    fields: tuple[JsonField, ...]

    def __init__(self, name: str, *fields: JsonField, hint: str | None = None):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "fields", _collect(fields))
        object.__setattr__(self, "hint", hint)
        self.__post_init__()

    def __post_init__(self) -> None:
        super().__post_init__()
        seen: set[str] = set()
        for child in self.fields:
            if not isinstance(child, FIELD_TYPES):
                raise SchemaError(
                    f"CompositeField '{self.name}' child {child!r} is not a field"
                )
            if child.name in seen:
                raise SchemaError(
                    f"CompositeField '{self.name}' has duplicate child name '{child.name}'"
                )
            seen.add(child.name)


@dataclass(frozen=True, init=False)
class VariantField(BaseField):
    """A value that matches exactly one of several object shapes."""

    variants: tuple[CompositeField, ...]

    def __init__(self, name: str, *variants: CompositeField, hint: str | None = None):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "variants", _collect(variants))
        object.__setattr__(self, "hint", hint)
        self.__post_init__()

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.variants:
            raise SchemaError(f"VariantField '{self.name}' needs at least one alternative")
        for variant in self.variants:
            if not isinstance(variant, CompositeField):
                raise SchemaError(
                    f"VariantField '{self.name}' alternatives must be CompositeFields, "
                    f"got {type(variant).__name__}"
                )


@dataclass(frozen=True)
class ArrayField(BaseField):
    """A homogeneous list of `element` values, between min_length and max_length long."""

    element: JsonField
    min_length: int
    max_length: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.element, FIELD_TYPES):
            raise SchemaError(f"ArrayField '{self.name}' element must be a field")
        _check_length_bounds("ArrayField", self.name, self.min_length, self.max_length)


@dataclass(frozen=True)
class OptionalField(BaseField):
    """A value that may be absent."""

    inner: JsonField

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.inner, FIELD_TYPES):
            raise SchemaError(f"OptionalField '{self.name}' inner must be a field")


@dataclass(frozen=True)
class TemplateStringField(BaseField):
    """
    A string with fixed text around one generated span.

    The template holds exactly one GENERATED_MARKER; the generated text that
    replaces it must be between min_gen_length and max_gen_length characters.

    Example:
        TemplateStringField("action", "try to <generated>", 10, 400)
    """

    template: str
    min_gen_length: int
    max_gen_length: int

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.template, str):
            raise SchemaError(f"TemplateStringField '{self.name}' template must be a string")
        count = self.template.count(GENERATED_MARKER)
        if count != 1:
            raise SchemaError(
                f"TemplateStringField '{self.name}' template must contain "
                f"{GENERATED_MARKER} exactly once, found {count}"
            )
        if _has_control_chars(self.template):
            raise SchemaError(
                f"TemplateStringField '{self.name}' template contains control characters"
            )
        _check_length_bounds(
            "TemplateStringField", self.name, self.min_gen_length, self.max_gen_length
        )

    @property
    def prefix(self) -> str:
        """Fixed text before the generated span."""
        return self.template.split(GENERATED_MARKER, 1)[0]

    @property
    def suffix(self) -> str:
        """Fixed text after the generated span."""
        return self.template.split(GENERATED_MARKER, 1)[1]


def _check_length_bounds(kind: str, name: str, low: object, high: object) -> None:
    if not (_is_int(low) and _is_int(high)):
        raise SchemaError(f"{kind} '{name}' length bounds must be integers")
    if low < 0:
        raise SchemaError(f"{kind} '{name}': minimum length cannot be negative")
    if low > high:
        raise SchemaError(
            f"{kind} '{name}': minimum length {low} is greater than maximum length {high}"
        )


JsonField = Union[
    IntegerField,
    FloatField,
    StringField,
    ConstantField,
    BooleanField,
    ChoiceField,
    CompositeField,
    VariantField,
    ArrayField,
    OptionalField,
    TemplateStringField,
]

FIELD_TYPES: tuple[type, ...] = (
    IntegerField,
    FloatField,
    StringField,
    ConstantField,
    BooleanField,
    ChoiceField,
    CompositeField,
    VariantField,
    ArrayField,
    OptionalField,
    TemplateStringField,
)


def iter_fields(root: JsonField) -> Iterable[JsonField]:
    """Yield every field in the tree, parents before children."""
    yield root
    match root:
        case CompositeField(fields=children):
            for child in children:
                yield from iter_fields(child)
        case VariantField(variants=variants):
            for variant in variants:
                yield from iter_fields(variant)
        case ArrayField(element=element):
            yield from iter_fields(element)
        case OptionalField(inner=inner):
            yield from iter_fields(inner)
