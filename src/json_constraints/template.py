"""
template.py

PURPOSE: Render a field tree as a JSON template with English placeholders.
DEPENDENCIES: models

ARCHITECTURE NOTES:
The template is built independently of the grammar: the field tree is mapped
onto plain Python values (dicts for objects, descriptive strings for
everything else), dumped with the standard json writer, and then cleaned up
so placeholders read as prompt text instead of \\uXXXX escapes. The cleanup
only rewrites escape sequences, so the result is still valid JSON.

The same walk also produces the "hints" text: one line per field that carries
a hint, addressed by the dotted path the validator uses in its errors.
Array elements are written "name[]" since a hint applies to every index,
where the validator reports a concrete "name[i]".
"""

import json
import logging
import re
from pathlib import Path

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

# \uXXXX not preceded by an escaped backslash
_UNICODE_ESCAPE = re.compile(r"(?<!\\)((?:\\\\)*)\\u([0-9a-fA-F]{4})")

# Characters that must stay escaped inside a JSON string
_QUOTE_LIKE = {0x22, 0x201C, 0x201D}
_KEEP_ESCAPED = {0x5C}


def compile_template(root: JsonField, output_path: Path | str | None = None, indent: int = 2) -> str:
    """
    Build the JSON template for a field tree.

    Args:
        root: The top-level field, usually a CompositeField.
        output_path: If given, the template is also written to this file.
        indent: Indentation passed to the JSON writer.

    Returns:
        Valid JSON text with descriptive placeholders in place of values.

    Raises:
        UnsupportedFieldError: If the tree contains a value that is not a field.
    """
    value = _template_value(root)
    template = clean_json_text(json.dumps(value, indent=indent))

    if output_path is not None:
        path = Path(output_path)
        path.write_text(template, encoding="utf-8")
        logger.info(f"Wrote template for '{root.name}' to {path}")

    return template


def clean_json_text(text: str) -> str:
    """
    Replace \\uXXXX escapes of printable characters with the characters themselves.

    Quote-like characters become an escaped ASCII quote, control characters,
    backslashes and surrogate halves stay escaped, so valid JSON stays valid.
    """

    def replace(match: re.Match[str]) -> str:
        backslashes, hex_code = match.group(1), match.group(2)
        code = int(hex_code, 16)
        if code in _QUOTE_LIKE:
            return backslashes + '\\"'
        if code < 0x20 or code == 0x7F or code in _KEEP_ESCAPED or 0xD800 <= code <= 0xDFFF:
            return match.group(0)
        return backslashes + chr(code)

    return _UNICODE_ESCAPE.sub(replace, text)


def _inline(value: object) -> str:
    """Render a nested template value for embedding inside a placeholder string."""
    if isinstance(value, str):
        return value
    return clean_json_text(json.dumps(value))


def _template_value(field: JsonField) -> object:
    match field:
        case IntegerField():
            return f"<integer between {field.min}–{field.max}>"
        case FloatField():
            return f"<float between {field.min}–{field.max}>"
        case StringField():
            return f"<string of {field.min_length}–{field.max_length} characters>"
        case BooleanField():
            return "<boolean: true or false>"
        case ConstantField():
            return field.value
        case ChoiceField():
            return f"<choice between {_inline(list(field.options))}>"
        case TemplateStringField():
            span = f"<text of {field.min_gen_length}–{field.max_gen_length} characters>"
            return field.template.replace(GENERATED_MARKER, span)
        case CompositeField():
            return {child.name: _template_value(child) for child in field.fields}
        case ArrayField():
            element = _inline(_template_value(field.element))
            return (
                f"<array of {field.min_length}–{field.max_length} elements, "
                f"each element should be: {element}>"
            )
        case VariantField():
            structures = [_inline(_template_value(variant)) for variant in field.variants]
            return "<choose one of the following structures>\n" + "\nOR\n".join(structures)
        case OptionalField():
            return f"<optional: {_inline(_template_value(field.inner))}>"
        case _:
            raise UnsupportedFieldError(field)


def compile_hints(root: JsonField) -> str:
    """
    List the hints attached to fields, one "- path: hint" line each.

    Paths match validator error paths, except that array elements use "[]"
    for any index.

    Returns:
        The hint lines in document order, or an empty string if no field has a hint.
    """
    lines: list[str] = []
    _collect_hints(root, root.name, lines)
    return "\n".join(lines)


def _collect_hints(field: JsonField, path: str, lines: list[str]) -> None:
    if field.hint:
        lines.append(f"- {path}: {field.hint}")

    match field:
        case CompositeField():
            for child in field.fields:
                _collect_hints(child, f"{path}.{child.name}", lines)
        case VariantField():
            for variant in field.variants:
                _collect_hints(variant, path, lines)
        case ArrayField():
            _collect_hints(field.element, f"{path}[]", lines)
        case OptionalField():
            _collect_hints(field.inner, path, lines)
