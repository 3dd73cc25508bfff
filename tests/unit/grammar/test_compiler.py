"""
TEST DOC: Grammar Compiler

WHAT: Tests for compile_grammar and the RuleSet it fills
WHY: The grammar is handed to the decoder as-is; a malformed or ambiguous rule breaks generation
HOW: Compile small schemas and inspect the emitted rules

CASES:
- Output starts with the root rule and defines every rule once
- Identical primitive bounds share one rule
- Identical structures share one rule, different structures get suffixed names
- Arrays, optionals and variants produce the expected productions
- Rule names are valid identifiers
- Output is deterministic and can be written to a file

EDGE CASES:
- A field named "root"
- Arrays with max_length 0 and min_length 0
- Objects whose members are all optional
- An optional at the top level
- Values that are not fields
"""

import re

import pytest

from json_constraints.errors import UnsupportedFieldError
from json_constraints.examples import EXAMPLE_SCHEMAS
from json_constraints.grammar import ROOT_RULE, RuleSet, compile_grammar
from json_constraints.models import (
    ArrayField,
    BooleanField,
    ChoiceField,
    CompositeField,
    ConstantField,
    IntegerField,
    OptionalField,
    StringField,
    TemplateStringField,
)

RULE_LINE = re.compile(r"^([a-zA-Z0-9-]+) ::= (.+)$")


def parse_rules(grammar: str) -> dict[str, str]:
    """Map rule name to production, failing on duplicates or malformed lines."""
    rules: dict[str, str] = {}
    for line in grammar.splitlines():
        match = RULE_LINE.match(line)
        assert match, f"malformed rule line: {line!r}"
        name, production = match.groups()
        assert name not in rules, f"rule {name} defined twice"
        rules[name] = production
    return rules


def references(production: str) -> list[str]:
    """Rule names used in a production, skipping literals and character classes."""
    names = []
    i = 0
    while i < len(production):
        char = production[i]
        if char in '"[':
            closing = '"' if char == '"' else "]"
            i += 1
            while production[i] != closing:
                i += 2 if production[i] == "\\" else 1
            i += 1
        elif char.isalnum() or char == "-":
            start = i
            while i < len(production) and (production[i].isalnum() or production[i] == "-"):
                i += 1
            names.append(production[start:i])
        else:
            i += 1
    return names


class TestRuleSet:
    """Tests for the per-compile rule registry."""

    def test_shared_reuses_name(self):
        """A shared rule is defined once."""
        rules = RuleSet()
        assert rules.shared("boolean", '"true" | "false"') == "boolean"
        assert rules.shared("boolean", '"true" | "false"') == "boolean"
        assert len(rules) == 1
        assert rules.reused == 1

    def test_add_dedupes_by_production(self):
        """A second identical production reuses the first name."""
        rules = RuleSet()
        assert rules.add("a", '"x"') == "a"
        assert rules.add("b", '"x"') == "a"
        assert len(rules) == 1

    def test_add_suffixes_on_collision(self):
        """Different productions under one name get numbered."""
        rules = RuleSet()
        assert rules.add("kind", '"x"') == "kind"
        assert rules.add("kind", '"y"') == "kind-2"
        assert rules.add("kind", '"z"') == "kind-3"

    def test_reserved_names(self):
        """root and boolean are never handed out to structured rules."""
        rules = RuleSet()
        assert rules.add("root", '"x"') == "root-2"
        assert rules.add("boolean", '"y"') == "boolean-2"

    def test_lines_in_order(self):
        """Rules are listed in definition order."""
        rules = RuleSet()
        rules.add("b", '"1"')
        rules.add("a", '"2"')
        assert rules.lines() == ['b ::= "1"', 'a ::= "2"']


class TestCompileGrammar:
    """Tests for the overall grammar shape."""

    def test_root_first(self, character):
        """The first line points root at the top rule."""
        grammar = compile_grammar(character)
        assert grammar.splitlines()[0] == f"{ROOT_RULE} ::= character"
        assert grammar.endswith("\n")

    def test_every_reference_defined(self, quest):
        """Every identifier used in a production is defined."""
        rules = parse_rules(compile_grammar(quest))
        for production in rules.values():
            for token in references(production):
                assert token in rules, f"undefined rule {token}"

    def test_deterministic(self, scene_event):
        """The same schema always compiles to the same text."""
        assert compile_grammar(scene_event) == compile_grammar(scene_event)

    def test_equal_schemas_same_grammar(self):
        """Structurally equal schemas built separately compile identically."""
        first = EXAMPLE_SCHEMAS["Quest"]()
        second = EXAMPLE_SCHEMAS["Quest"]()
        assert compile_grammar(first) == compile_grammar(second)

    def test_example_schemas_compile(self):
        """Every example schema compiles to well-formed rule lines."""
        for builder in EXAMPLE_SCHEMAS.values():
            parse_rules(compile_grammar(builder()))

    def test_writes_file(self, character, tmp_path):
        """The grammar is also written when a path is given."""
        path = tmp_path / "Character.gbnf"
        grammar = compile_grammar(character, output_path=path)
        assert path.read_text(encoding="utf-8") == grammar

    def test_unsupported_value(self):
        """Anything that is not a field is rejected."""
        with pytest.raises(UnsupportedFieldError, match="str"):
            compile_grammar("not a field")


class TestPrimitiveRules:
    """Tests for scalar field rules."""

    def test_same_string_bounds_shared(self, two_names):
        """Two strings with the same bounds share one rule."""
        grammar = compile_grammar(two_names)
        rules = parse_rules(grammar)
        assert "string-3-20" in rules
        assert rules["Pair"].count("string-3-20") == 2
        assert grammar.count("string-3-20 ::=") == 1

    def test_pair_production(self, two_names):
        """Object members are quoted keys followed by value rules."""
        rules = parse_rules(compile_grammar(two_names))
        assert rules["Pair"] == (
            '"{" "\\"first\\":" string-3-20 "," "\\"second\\":" string-3-20 "}"'
        )

    def test_string_rule(self):
        """A string rule is quoted characters with nested optional tails."""
        schema = CompositeField("s", StringField("code", 1, 2))
        rules = parse_rules(compile_grammar(schema))
        assert rules["string-1-2"] == (
            '"\\"" [^"\\\\\\x00-\\x1F\\x7F] ([^"\\\\\\x00-\\x1F\\x7F])? "\\""'
        )

    def test_integer_rule(self, character):
        """Integer rules are named after their bounds."""
        rules = parse_rules(compile_grammar(character))
        assert rules["integer-0-120"] == (
            '[0-9] | [1-9] [0-9] | "1" [0-1] [0-9] | "1" "2" "0"'
        )
        assert "integer-1-20" in rules

    def test_negative_integer_rule_name(self):
        """Negative bounds are spelled with m."""
        schema = CompositeField("t", IntegerField("temp", -40, 50))
        assert "integer-m40-50" in parse_rules(compile_grammar(schema))

    def test_boolean_shared(self, scene_event):
        """All booleans use the one boolean rule."""
        rules = parse_rules(compile_grammar(scene_event))
        assert rules["boolean"] == '"true" | "false"'

    def test_constant_rule(self):
        """Constants become their JSON text."""
        schema = CompositeField(
            "c", ConstantField("port", 8080), ConstantField("protocol", "http")
        )
        rules = parse_rules(compile_grammar(schema))
        assert rules["port"] == '"8080"'
        assert rules["protocol"] == '"\\"http\\""'

    def test_choice_rule(self):
        """Choices are an alternation of JSON literals."""
        schema = CompositeField("c", ChoiceField("class", "warrior", "mage"))
        rules = parse_rules(compile_grammar(schema))
        assert rules["class"] == '"\\"warrior\\"" | "\\"mage\\""'

    def test_template_string_rule(self):
        """Fixed text surrounds a bounded generated span."""
        schema = CompositeField("c", TemplateStringField("text", "says <generated>", 1, 2))
        rules = parse_rules(compile_grammar(schema))
        assert rules["text"].startswith('"\\"says " [^')
        assert rules["text"].endswith(')? "\\""')


class TestStructuredRules:
    """Tests for composites, variants, arrays and optionals."""

    def test_array_with_minimum(self, party):
        """Mandatory elements come first, then optional comma-element pairs."""
        rules = parse_rules(compile_grammar(party))
        assert rules["members"] == (
            '"[" integer-1-10 ("," integer-1-10)? ("," integer-1-10)? "]"'
        )

    def test_array_without_minimum(self):
        """An empty array is allowed and never starts with a comma."""
        schema = CompositeField("c", ArrayField("flags", BooleanField("flag"), 0, 2))
        rules = parse_rules(compile_grammar(schema))
        assert rules["flags"] == '"[" (boolean ("," boolean)?)? "]"'

    def test_array_max_zero(self):
        """max_length 0 only allows an empty array."""
        schema = CompositeField("c", ArrayField("none", BooleanField("flag"), 0, 0))
        rules = parse_rules(compile_grammar(schema))
        assert rules["none"] == '"[" "]"'

    def test_variant_rule(self, scene_event):
        """A variant is an alternation of its object rules."""
        rules = parse_rules(compile_grammar(scene_event))
        assert rules["content"] == "combat | dialogue | exploration"

    def test_optional_member_after_required(self, character):
        """An optional member carries its own leading comma."""
        rules = parse_rules(compile_grammar(character))
        assert '("," "\\"backstory\\":" string-50-500)?' in rules["character"]

    def test_optional_member_before_required(self):
        """An optional member before the first required one carries a trailing comma."""
        schema = CompositeField(
            "o",
            OptionalField("a", BooleanField("a")),
            BooleanField("b"),
        )
        rules = parse_rules(compile_grammar(schema))
        assert rules["o"] == '"{" ("\\"a\\":" boolean ",")? "\\"b\\":" boolean "}"'

    def test_all_members_optional(self):
        """With no required member, any one of them may come first."""
        schema = CompositeField(
            "o",
            OptionalField("a", BooleanField("a")),
            OptionalField("b", BooleanField("b")),
        )
        rules = parse_rules(compile_grammar(schema))
        assert rules["o"] == (
            '"{" ("\\"a\\":" boolean ("," "\\"b\\":" boolean)? | "\\"b\\":" boolean)? "}"'
        )

    def test_empty_object(self):
        """An object without members is just braces."""
        rules = parse_rules(compile_grammar(CompositeField("e")))
        assert rules["e"] == '"{" "}"'

    def test_top_level_optional(self):
        """Outside an object an absent value is null."""
        schema = OptionalField("maybe", IntegerField("n", 0, 9))
        rules = parse_rules(compile_grammar(schema))
        assert rules[ROOT_RULE] == "maybe"
        assert rules["maybe"] == 'integer-0-9 | "null"'

    def test_field_named_root(self):
        """A field called root does not clash with the root rule."""
        schema = CompositeField("root", BooleanField("x"))
        rules = parse_rules(compile_grammar(schema))
        assert rules[ROOT_RULE] == "root-2"

    def test_identical_structures_shared(self):
        """The same sub-schema in two places yields one rule."""
        position = CompositeField("pos", IntegerField("x", 0, 9))
        schema = CompositeField(
            "top",
            position,
            ArrayField("path", CompositeField("pos", IntegerField("x", 0, 9)), 0, 1),
        )
        grammar = compile_grammar(schema)
        assert grammar.count("pos ::=") == 1
        assert "pos-2" not in grammar

    def test_same_name_different_structure(self):
        """Two different structures with one name get distinct rules."""
        schema = CompositeField(
            "top",
            CompositeField("a", ChoiceField("kind", "x")),
            CompositeField("b", ChoiceField("kind", "y")),
        )
        rules = parse_rules(compile_grammar(schema))
        assert rules["kind"] == '"\\"x\\""'
        assert rules["kind-2"] == '"\\"y\\""'
        assert "kind-2" in rules["b"]

    def test_names_sanitized(self):
        """Field names with underscores become valid rule names."""
        schema = CompositeField("action_outcome", ChoiceField("player_class", "a"))
        rules = parse_rules(compile_grammar(schema))
        assert "action-x5f-outcome" in rules
        assert "player-x5f-class" in rules
        # the JSON key keeps its underscore
        assert '"\\"player_class\\":"' in rules["action-x5f-outcome"]
