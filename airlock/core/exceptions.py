"""Shared exceptions module."""

from enum import Enum
from typing import Optional


class AirlockException(Exception):
    """Base exception for Airlock."""

    pass


class ConfigurationErrorReason(str, Enum):
    """Why a serialization configuration was rejected.

    Every reason is a developer mistake: none of them can be recovered from
    at runtime by retrying or by changing the request.
    """

    MISSING_ROLE_DETERMINER = "missing_role_determiner"
    MISSING_VISIBILITY_TABLE = "missing_visibility_table"
    NON_ARRAY_VISIBLE_SET = "non_array_visible_set"
    UNDEFINED_ROLE_VISIBILITY = "undefined_role_visibility"
    NON_OBJECT_CONTEXT_TABLE = "non_object_context_table"
    MISSING_CONTEXT_DESIGNATOR = "missing_context_designator"
    MALFORMED_CONTEXT_TABLE_ENTRY = "malformed_context_table_entry"
    UNDECLARED_RELATION = "undeclared_relation"


class SerializationConfigurationError(AirlockException):
    """Exception raised when serialization is attempted with an invalid configuration.

    Not a ValueError subclass, so it propagates unwrapped out of pydantic
    validators instead of becoming a ValidationError.
    """

    def __init__(self, reason: ConfigurationErrorReason, message: Optional[str] = None):
        """Create a new SerializationConfigurationError instance.

        Args:
        ----
            reason (ConfigurationErrorReason): The machine-readable reason.
            message (str, optional): The error message. Defaults to the reason value.

        """
        self.reason = reason
        self.message = message or reason.value
        super().__init__(self.message)
