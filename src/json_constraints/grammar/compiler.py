"""
compiler.py

PURPOSE: Compile a field tree into a GBNF grammar for constrained decoding.
DEPENDENCIES: models, grammar.literals

ARCHITECTURE NOTES:
Compilation is a post-order walk: every child is compiled to a rule name
before its parent's production is built. Rules are collected in a RuleSet that
lives for exactly one compile_grammar() call and is passed down the recursion,
never stored on a module or shared object, so concurrent compiles cannot see
each other's rules.

Primitive bounded fields get a shared rule named after kind and bounds
(string-3-20), so any two fields with the same bounds resolve to one rule.
Structured fields are named after the field; when two different structures
want the same name the later one is suffixed (-2, -3, ...), and when two
fields produce the same structure the first name wins. Because the input is a
tree, rules only reference rules emitted before them and the grammar is
acyclic.

An OptionalField inside an object becomes a member group ending in "?" that
carries its own comma. Anywhere else an absent value is spelled null, since
an empty array slot or an empty document would not be JSON.

Output format:
    root ::= <top rule>
    <name> ::= <production>     (one line per distinct rule, emission order)
"""

from __future__ import annotations

import logging
from pathlib import Path

from json_constraints.errors import UnsupportedFieldError
from json_constraints.grammar.literals import (
    STRING_CHAR,
    bounded_repeat,
    float_pattern,
    integer_range,
    json_literal,
    json_text,
    literal,
    number_token,
    sanitize_rule_name,
)
from json_constraints.models.fields import (
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

ROOT_RULE = "root"

_NULL = literal("null")
_QUOTE = literal('"')


class RuleSet:
    """
    Rules emitted during a single compile.

    Every name is defined once and every production is emitted once. Shared
    primitive rules are looked up by their kind+bounds name; structured rules
    are looked up by production so identical sub-schemas collapse into one.
    """

    # Names only the compiler itself may define
    RESERVED = frozenset({ROOT_RULE, "boolean"})

    def __init__(self) -> None:
        self._productions: dict[str, str] = {}
        self._names: dict[str, str] = {}
        self._order: list[str] = []
        self.reused = 0

    def shared(self, name: str, production: str) -> str:
        """Define (or reuse) a primitive rule keyed by kind and bounds."""
        if name in self._productions:
            self.reused += 1
            return name
        self._define(name, production)
        return name

    def add(self, preferred_name: str, production: str) -> str:
        """
        Register a structured production and return the rule name that defines it.

        Args:
            preferred_name: Name to use if it is still free.
            production: Right-hand side of the rule.

        Returns:
            The existing name if this production was already emitted,
            otherwise preferred_name or a suffixed variant of it.
        """
        existing = self._names.get(production)
        if existing is not None:
            self.reused += 1
            return existing

        name = preferred_name
        suffix = 2
        while name in self._productions or name in self.RESERVED:
            name = f"{preferred_name}-{suffix}"
            suffix += 1

        self._define(name, production)
        return name

    def _define(self, name: str, production: str) -> None:
        self._productions[name] = production
        self._names.setdefault(production, name)
        self._order.append(name)

    def __len__(self) -> int:
        return len(self._order)

    def lines(self) -> list[str]:
        """Rule definitions in emission order."""
        return [f"{name} ::= {self._productions[name]}" for name in self._order]


def compile_grammar(root: JsonField, output_path: Path | str | None = None) -> str:
    """
    Compile a field tree into GBNF grammar text.

    Args:
        root: The top-level field, usually a CompositeField.
        output_path: If given, the grammar is also written to this file.

    Returns:
        The grammar text; identical input always gives identical output.

    Raises:
        UnsupportedFieldError: If the tree contains a value that is not a field.
    """
    rules = RuleSet()
    top = _compile_field(root, rules)

    lines = [f"{ROOT_RULE} ::= {top}", *rules.lines()]
    grammar = "\n".join(lines) + "\n"

    logger.debug(
        f"Compiled grammar for '{root.name}': {len(rules)} rules, "
        f"{rules.reused} shared references"
    )

    if output_path is not None:
        path = Path(output_path)
        path.write_text(grammar, encoding="utf-8")
        logger.info(f"Wrote grammar for '{root.name}' to {path}")

    return grammar


def _compile_field(field: JsonField, rules: RuleSet) -> str:
    """Compile one field and return the name of the rule that matches it."""
    match field:
        case IntegerField():
            return _integer_rule(field, rules)
        case FloatField():
            return _float_rule(field, rules)
        case StringField():
            return _string_rule(field, rules)
        case BooleanField():
            return rules.shared("boolean", f'{literal("true")} | {literal("false")}')
        case ConstantField():
            return rules.add(sanitize_rule_name(field.name), json_literal(field.value))
        case ChoiceField():
            options = " | ".join(json_literal(opt) for opt in field.options)
            return rules.add(sanitize_rule_name(field.name), options)
        case TemplateStringField():
            return _template_string_rule(field, rules)
        case CompositeField():
            return _composite_rule(field, rules)
        case VariantField():
            alternatives = [_compile_field(variant, rules) for variant in field.variants]
            return rules.add(sanitize_rule_name(field.name), " | ".join(alternatives))
        case ArrayField():
            return _array_rule(field, rules)
        case OptionalField():
            inner = _compile_field(field.inner, rules)
            return rules.add(sanitize_rule_name(field.name), f"{inner} | {_NULL}")
        case _:
            raise UnsupportedFieldError(field)


def _integer_rule(field: IntegerField, rules: RuleSet) -> str:
    name = f"integer-{number_token(field.min)}-{number_token(field.max)}"
    return rules.shared(name, integer_range(field.min, field.max))


def _float_rule(field: FloatField, rules: RuleSet) -> str:
    name = f"float-{number_token(field.min)}-{number_token(field.max)}"
    return rules.shared(name, float_pattern(field.min, field.max))


def _string_rule(field: StringField, rules: RuleSet) -> str:
    name = f"string-{field.min_length}-{field.max_length}"
    body = bounded_repeat(STRING_CHAR, field.min_length, field.max_length)
    return rules.shared(name, _join(_QUOTE, body, _QUOTE))


def _template_string_rule(field: TemplateStringField, rules: RuleSet) -> str:
    # json_text() adds the surrounding quotes; keep them with the fixed text
    prefix = json_text(field.prefix)[:-1]
    suffix = json_text(field.suffix)[1:]
    span = bounded_repeat(STRING_CHAR, field.min_gen_length, field.max_gen_length)
    production = _join(literal(prefix), span, literal(suffix))
    return rules.add(sanitize_rule_name(field.name), production)


def _member(child: JsonField, rules: RuleSet) -> tuple[str, bool]:
    """Return the `"key": value` sequence for an object member and whether it is optional."""
    if isinstance(child, OptionalField):
        value = _compile_field(child.inner, rules)
        optional = True
    else:
        value = _compile_field(child, rules)
        optional = False
    return f"{literal(json_text(child.name) + ':')} {value}", optional


def _composite_rule(field: CompositeField, rules: RuleSet) -> str:
    members = [_member(child, rules) for child in field.fields]
    body = _object_body(members)
    return rules.add(sanitize_rule_name(field.name), _join(literal("{"), body, literal("}")))


def _object_body(members: list[tuple[str, bool]]) -> str:
    """
    Join object members with commas, letting optional members drop out cleanly.

    Optional members before the first required one carry a trailing comma,
    those after it carry a leading comma. If every member is optional, the
    body is an alternation over which member comes first.
    """
    if not members:
        return ""

    comma = literal(",")
    required = [i for i, (_, optional) in enumerate(members) if not optional]

    if not required:
        alternatives = []
        for start, (first, _) in enumerate(members):
            tail = [f"({comma} {seq})?" for seq, _ in members[start + 1 :]]
            alternatives.append(" ".join([first, *tail]))
        return f"({' | '.join(alternatives)})?"

    anchor = required[0]
    parts = []
    for index, (seq, optional) in enumerate(members):
        if index < anchor:
            parts.append(f"({seq} {comma})?")
        elif index == anchor:
            parts.append(seq)
        elif optional:
            parts.append(f"({comma} {seq})?")
        else:
            parts.append(f"{comma} {seq}")
    return " ".join(parts)


def _array_rule(field: ArrayField, rules: RuleSet) -> str:
    element = _compile_field(field.element, rules)
    comma = literal(",")

    if field.max_length == 0:
        body = ""
    elif field.min_length == 0:
        extra = [f"({comma} {element})?"] * (field.max_length - 1)
        body = f"({' '.join([element, *extra])})?"
    else:
        mandatory = f" {comma} ".join([element] * field.min_length)
        extra = [f"({comma} {element})?"] * (field.max_length - field.min_length)
        body = " ".join([mandatory, *extra])

    production = _join(literal("["), body, literal("]"))
    return rules.add(sanitize_rule_name(field.name), production)


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)
