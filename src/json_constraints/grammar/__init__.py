"""Grammar compiler: field tree to GBNF text."""

from json_constraints.grammar.compiler import ROOT_RULE, RuleSet, compile_grammar
from json_constraints.grammar.literals import (
    integer_range,
    literal,
    sanitize_rule_name,
)

__all__ = [
    "ROOT_RULE",
    "RuleSet",
    "compile_grammar",
    "integer_range",
    "literal",
    "sanitize_rule_name",
]
