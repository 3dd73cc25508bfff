"""
validator.py

PURPOSE: Check JSON text against a field tree and report every mismatch.
DEPENDENCIES: models

ARCHITECTURE NOTES:
The text is parsed once with the standard json module. If that fails, the
result is a single error and nothing else is checked. Otherwise the parsed
value and the field tree are walked together and every problem is collected;
nothing short-circuits, so callers see all problems from one pass.

Errors are plain strings "<dotted.path>: <message>". The root field's name is
the first path segment, object members add ".<key>", array items add "[i]".

The error list is created per call and threaded through the walk, so one
SchemaValidator can be shared between threads.
"""

import json
import logging
import math

from json_constraints.errors import UnsupportedFieldError
from json_constraints.models.fields import (
    GENERATED_MARKER,
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

logger = logging.getLogger(__name__)

# Tolerance when comparing float constants and float choices
FLOAT_TOLERANCE = 1e-9


def json_type_name(value: object) -> str:
    """Name of the JSON type of a parsed value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_options(options: tuple) -> str:
    return "[" + ", ".join(str(opt) for opt in options) + "]"


class SchemaValidator:
    """
    Validates JSON documents against one field tree.

    Usage:
        validator = SchemaValidator(schema)
        is_valid, errors = validator.validate('{"name": "Narada"}')
        for error in errors:
            print(error)
    """

    def __init__(self, schema: JsonField):
        self.schema = schema

    def validate(self, json_text: str) -> tuple[bool, list[str]]:
        """
        Validate a JSON document.

        Args:
            json_text: The document to check.

        Returns:
            (is_valid, errors) where errors is empty exactly when is_valid.
        """
        root_path = self.schema.name
        errors: list[str] = []

        if json_text is None or not json_text.strip():
            errors.append(f"{root_path}: JSON text is empty")
            return False, errors

        try:
            document = json.loads(json_text)
        except json.JSONDecodeError as e:
            errors.append(
                f"{root_path}: Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}"
            )
            return False, errors
        except ValueError as e:
            # Oversized integer literals hit the int conversion digit limit
            errors.append(f"{root_path}: Invalid JSON: {e}")
            return False, errors
        except RecursionError:
            errors.append(f"{root_path}: Invalid JSON: nesting is too deep")
            return False, errors

        self._check(document, self.schema, root_path, errors)

        if errors:
            logger.debug(f"Validation of '{root_path}' found {len(errors)} errors")
        return not errors, errors

    def _check(self, value: object, field: JsonField, path: str, errors: list[str]) -> None:
        match field:
            case IntegerField():
                self._check_integer(value, field, path, errors)
            case FloatField():
                self._check_float(value, field, path, errors)
            case StringField():
                self._check_string(value, field, path, errors)
            case BooleanField():
                if not isinstance(value, bool):
                    errors.append(f"{path}: Expected boolean, got {json_type_name(value)}")
            case ConstantField():
                self._check_constant(value, field, path, errors)
            case ChoiceField():
                self._check_choice(value, field, path, errors)
            case TemplateStringField():
                self._check_template_string(value, field, path, errors)
            case CompositeField():
                self._check_composite(value, field, path, errors)
            case VariantField():
                self._check_variant(value, field, path, errors)
            case ArrayField():
                self._check_array(value, field, path, errors)
            case OptionalField():
                # Outside an object an absent value is written as null
                if value is not None:
                    self._check(value, field.inner, path, errors)
            case _:
                raise UnsupportedFieldError(field)

    def _check_integer(
        self, value: object, field: IntegerField, path: str, errors: list[str]
    ) -> None:
        if not _is_integer(value):
            errors.append(f"{path}: Expected integer, got {json_type_name(value)}")
            return
        if value < field.min or value > field.max:
            errors.append(
                f"{path}: Value {value} is outside range [{field.min}, {field.max}]"
            )

    def _check_float(self, value: object, field: FloatField, path: str, errors: list[str]) -> None:
        if not _is_number(value):
            errors.append(f"{path}: Expected number, got {json_type_name(value)}")
            return
        if not math.isfinite(value) or value < field.min or value > field.max:
            errors.append(
                f"{path}: Value {value} is outside range [{field.min}, {field.max}]"
            )

    def _check_string(self, value: object, field: StringField, path: str, errors: list[str]) -> None:
        if not isinstance(value, str):
            errors.append(f"{path}: Expected string, got {json_type_name(value)}")
            return
        if len(value) < field.min_length or len(value) > field.max_length:
            errors.append(
                f"{path}: String length {len(value)} is outside range "
                f"[{field.min_length}, {field.max_length}]"
            )

    def _check_constant(
        self, value: object, field: ConstantField, path: str, errors: list[str]
    ) -> None:
        expected = field.value
        if isinstance(expected, str):
            matches = value == expected
        elif isinstance(expected, float):
            matches = _is_number(value) and math.isclose(
                value, expected, rel_tol=FLOAT_TOLERANCE, abs_tol=FLOAT_TOLERANCE
            )
        else:
            matches = _is_integer(value) and value == expected

        if not matches:
            errors.append(
                f"{path}: Expected constant value {json.dumps(expected)}, "
                f"got {json.dumps(value)}"
            )

    def _check_choice(self, value: object, field: ChoiceField, path: str, errors: list[str]) -> None:
        sample = field.options[0]
        if isinstance(sample, str):
            type_ok, expected_type = isinstance(value, str), "string"
        elif isinstance(sample, float):
            type_ok, expected_type = _is_number(value), "number"
        else:
            type_ok, expected_type = _is_integer(value), "integer"

        if not type_ok:
            errors.append(
                f"{path}: Expected {expected_type} choice, got {json_type_name(value)}"
            )
            return

        if isinstance(sample, float):
            found = any(
                math.isclose(value, opt, rel_tol=FLOAT_TOLERANCE, abs_tol=FLOAT_TOLERANCE)
                for opt in field.options
            )
        else:
            found = value in field.options

        if not found:
            errors.append(
                f"{path}: Value {json.dumps(value, ensure_ascii=False)} is not in allowed "
                f"choices: {_format_options(field.options)}"
            )

    def _check_template_string(
        self, value: object, field: TemplateStringField, path: str, errors: list[str]
    ) -> None:
        if not isinstance(value, str):
            errors.append(f"{path}: Expected string, got {json_type_name(value)}")
            return

        prefix, suffix = field.prefix, field.suffix
        if (
            len(value) < len(prefix) + len(suffix)
            or not value.startswith(prefix)
            or not value.endswith(suffix)
        ):
            expected = field.template.replace(GENERATED_MARKER, "[generated text]")
            errors.append(
                f"{path}: Template string does not match pattern. Expected format: '{expected}'"
            )
            return

        generated = len(value) - len(prefix) - len(suffix)
        if generated < field.min_gen_length or generated > field.max_gen_length:
            errors.append(
                f"{path}: Generated portion length {generated} is outside range "
                f"[{field.min_gen_length}, {field.max_gen_length}]"
            )

    def _check_composite(
        self, value: object, field: CompositeField, path: str, errors: list[str]
    ) -> None:
        if not isinstance(value, dict):
            errors.append(f"{path}: Expected object, got {json_type_name(value)}")
            return

        for child in field.fields:
            child_path = f"{path}.{child.name}"
            if child.name in value:
                if isinstance(child, OptionalField):
                    self._check(value[child.name], child.inner, child_path, errors)
                else:
                    self._check(value[child.name], child, child_path, errors)
            elif not isinstance(child, OptionalField):
                errors.append(f"{child_path}: Required field is missing")

        known = {child.name for child in field.fields}
        for key in value:
            if key not in known:
                errors.append(f"{path}.{key}: Unexpected field")

    def _check_variant(
        self, value: object, field: VariantField, path: str, errors: list[str]
    ) -> None:
        if not isinstance(value, dict):
            errors.append(f"{path}: Expected object for variant, got {json_type_name(value)}")
            return

        for variant in field.variants:
            variant_errors: list[str] = []
            self._check_composite(value, variant, path, variant_errors)
            if not variant_errors:
                return
            logger.debug(
                f"{path}: alternative '{variant.name}' rejected with {len(variant_errors)} errors"
            )

        names = ", ".join(variant.name for variant in field.variants)
        errors.append(
            f"{path}: Value does not match any of the {len(field.variants)} "
            f"possible variants: [{names}]"
        )

    def _check_array(self, value: object, field: ArrayField, path: str, errors: list[str]) -> None:
        if not isinstance(value, list):
            errors.append(f"{path}: Expected array, got {json_type_name(value)}")
            return

        if len(value) < field.min_length or len(value) > field.max_length:
            errors.append(
                f"{path}: Array length {len(value)} is outside range "
                f"[{field.min_length}, {field.max_length}]"
            )

        for index, item in enumerate(value):
            self._check(item, field.element, f"{path}[{index}]", errors)


def validate_json(json_text: str, schema: JsonField) -> tuple[bool, list[str]]:
    """
    Convenience function to validate a document against a schema.

    Args:
        json_text: The JSON document.
        schema: The root field.

    Returns:
        (is_valid, errors); errors are "<dotted.path>: <message>" strings.
    """
    return SchemaValidator(schema).validate(json_text)
