"""Capability registry: in-memory registry built once at startup."""

from typing import Iterable

from airlock.core.logging import logger
from airlock.domains.serialization.protocols import CapabilityRegistryProtocol
from airlock.domains.serialization.types import RecordTypeCapabilities

registry_logger = logger.with_prefix("CapabilityRegistry: ").with_context(
    component="capability_registry"
)


class CapabilityRegistry(CapabilityRegistryProtocol):
    """In-memory registry of record type capabilities, keyed by type tag."""

    def __init__(self) -> None:
        """Initialize the capability registry."""
        self._entries: dict[str, RecordTypeCapabilities] = {}

    def get(self, type_tag: str) -> RecordTypeCapabilities:
        """Get the capabilities of a record type.

        Args:
            type_tag: The record type tag (e.g., "users").

        Returns:
            The capabilities entry.

        Raises:
            KeyError: If no capabilities are registered for the type tag.
        """
        return self._entries[type_tag]

    def list_all(self) -> list[RecordTypeCapabilities]:
        """List all registered capabilities."""
        return list(self._entries.values())

    def register(self, capabilities: RecordTypeCapabilities) -> None:
        """Register the capabilities of one record type.

        A later registration for the same type tag replaces the earlier one.
        """
        if capabilities.type_tag in self._entries:
            registry_logger.info(f"Replacing capabilities for type '{capabilities.type_tag}'")
        self._entries[capabilities.type_tag] = capabilities

    def build(self, entries: Iterable[RecordTypeCapabilities]) -> None:
        """Register every entry.

        Called once at startup. After this, all lookups are dict reads.
        """
        for entry in entries:
            self.register(entry)

        registry_logger.info(f"Built registry with {len(self._entries)} record types.")
