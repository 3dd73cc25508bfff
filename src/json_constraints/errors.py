"""
errors.py

PURPOSE: Exception hierarchy shared by the schema model and the compilers.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
Schema construction problems are raised immediately by the field constructors.
Compile-time errors only guard against integration mistakes (a value that is not
one of the known field variants, a literal the grammar cannot quote).
Validation problems are never raised; the validator returns them as data.
"""


class JsonConstraintsError(Exception):
    """Base class for all json_constraints errors."""

    pass


class SchemaError(JsonConstraintsError, ValueError):
    """A field was constructed with data that violates its invariants."""

    pass


class GrammarError(JsonConstraintsError):
    """The grammar compiler was asked to emit something it cannot express."""

    pass


class UnsupportedFieldError(JsonConstraintsError, TypeError):
    """A compiler received a value that is not one of the known field variants."""

    def __init__(self, field: object):
        self.field = field
        super().__init__(f"Unsupported field type: {type(field).__name__}")
