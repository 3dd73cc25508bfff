"""Schema model: the field vocabulary shared by the compilers and the validator."""

from json_constraints.models.fields import (
    FIELD_TYPES,
    GENERATED_MARKER,
    ArrayField,
    BaseField,
    BooleanField,
    ChoiceField,
    CompositeField,
    ConstantField,
    FloatField,
    IntegerField,
    JsonField,
    OptionalField,
    StringField,
    TemplateStringField,
    VariantField,
    iter_fields,
)

__all__ = [
    "ArrayField",
    "BaseField",
    "BooleanField",
    "ChoiceField",
    "CompositeField",
    "ConstantField",
    "FIELD_TYPES",
    "FloatField",
    "GENERATED_MARKER",
    "IntegerField",
    "JsonField",
    "OptionalField",
    "StringField",
    "TemplateStringField",
    "VariantField",
    "iter_fields",
]
