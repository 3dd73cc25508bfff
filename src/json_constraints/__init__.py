"""
JSON Constraints - Compile declarative schemas for LLM output.

This package provides tools for:
- Describing an expected JSON shape as a tree of fields
- Compiling that tree into a GBNF grammar for constrained decoding
- Rendering a human-readable JSON template for prompts
- Validating model output with path-qualified error messages
"""

__version__ = "0.1.0"

from json_constraints.errors import (
    GrammarError,
    JsonConstraintsError,
    SchemaError,
    UnsupportedFieldError,
)
from json_constraints.grammar import compile_grammar
from json_constraints.models import (
    ArrayField,
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
)
from json_constraints.template import compile_hints, compile_template
from json_constraints.validator import SchemaValidator, validate_json

__all__ = [
    "ArrayField",
    "BooleanField",
    "ChoiceField",
    "CompositeField",
    "ConstantField",
    "FloatField",
    "GrammarError",
    "IntegerField",
    "JsonConstraintsError",
    "JsonField",
    "OptionalField",
    "SchemaError",
    "SchemaValidator",
    "StringField",
    "TemplateStringField",
    "UnsupportedFieldError",
    "VariantField",
    "compile_grammar",
    "compile_hints",
    "compile_template",
    "validate_json",
]
