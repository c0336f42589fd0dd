"""Configuration enums for type-safe settings.

These enums provide type safety and IDE autocomplete for configuration values.
They inherit from str to maintain JSON serialization compatibility.
"""

from enum import Enum


class Environment(str, Enum):
    """Deployment environments.

    Controls environment-specific behavior like log formatting and
    development-only diagnostics.
    """

    LOCAL = "local"
    TEST = "test"
    DEV = "dev"
    PRD = "prd"


class AbsentRelationPolicy(str, Enum):
    """How a single-record relation that resolves ABSENT is rendered.

    OMIT drops the key from the parent, NULL keeps the key with a null value.
    """

    OMIT = "omit"
    NULL = "null"
