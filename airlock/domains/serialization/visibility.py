"""Visibility resolution: the whitelist a requester gets for one record."""

from typing import Any, List, Optional

from airlock.core.exceptions import ConfigurationErrorReason, SerializationConfigurationError
from airlock.domains.serialization.designation import ContextDesignation
from airlock.domains.serialization.options import SerializationOptions
from airlock.domains.serialization.types import RecordTypeCapabilities
from airlock.domains.serialization.utils import intersect, is_name_list

CONTEXT_TABLE_NAME = "context_specific_visible_properties"


class VisibilityResolver:
    """Computes ``ultimately_visible = role_visible ∩ context_visible``.

    Role visibility is the permission ceiling; context visibility only ever
    narrows it and is not the place for permission logic.
    """

    def role_visible(self, capabilities: RecordTypeCapabilities, role: Any) -> List[str]:
        """Look up the properties ``role`` may ever see.

        Raises:
            SerializationConfigurationError: UNDEFINED_ROLE_VISIBILITY when the
                role has no entry, NON_ARRAY_VISIBLE_SET when the entry is not
                a list.
        """
        table = capabilities.roles_to_visible_properties
        if not isinstance(role, str) or role not in table:
            raise SerializationConfigurationError(
                ConfigurationErrorReason.UNDEFINED_ROLE_VISIBILITY,
                f"roles_to_visible_properties for type {capabilities.type_tag} "
                f"does not contain a list of visible properties for role: {role}",
            )
        visible = table[role]
        if not is_name_list(visible):
            raise SerializationConfigurationError(
                ConfigurationErrorReason.NON_ARRAY_VISIBLE_SET,
                f"roles_to_visible_properties for type {capabilities.type_tag} "
                f"must map role {role} to a list",
            )
        return list(visible)

    async def context_visible(
        self,
        options: SerializationOptions,
        type_tag: str,
        designation: ContextDesignation,
    ) -> Optional[List[str]]:
        """Context-specific whitelist for the type, or None when unrestricted."""
        entry = options.context_entry(type_tag)
        if entry is None:
            return None
        return await designation.resolve(entry, CONTEXT_TABLE_NAME)

    @staticmethod
    def ultimately_visible(
        role_visible: List[str], context_visible: Optional[List[str]]
    ) -> List[str]:
        """Intersect the two whitelists, keeping role order."""
        return intersect(role_visible, context_visible)
