"""Protocols for registries."""

from typing import Protocol, TypeVar

from pydantic import BaseModel, ConfigDict


class BaseRegistryEntry(BaseModel):
    """Registry entry keyed by a record type tag."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type_tag: str
    description: str | None = None


EntryT = TypeVar("EntryT", bound=BaseRegistryEntry, covariant=True)


class RegistryProtocol(Protocol[EntryT]):
    """Base protocol for in-memory registries.

    Built once at startup. All lookups are synchronous dict reads.
    """

    def get(self, type_tag: str) -> EntryT:
        """Get an entry by type tag. Raises KeyError if not found."""
        ...

    def list_all(self) -> list[EntryT]:
        """List all registered entries."""
        ...
