"""Context designation: which label applies to a record in this call.

The same record type can be reached along different relation paths (the
requested comment, its parent, its children). A context designator maps a
record to a label, and labelled table entries pick their list by label.
"""

import asyncio
from typing import Any, Callable, List, Optional, Sequence, Tuple

from airlock.core.exceptions import ConfigurationErrorReason, SerializationConfigurationError
from airlock.core.protocols.record import RecordProtocol
from airlock.domains.serialization.options import PropertyTableEntry
from airlock.domains.serialization.utils import maybe_await


def default_designator_arguments(record: RecordProtocol) -> Tuple[Any, ...]:
    """Arguments passed to the context designator unless configured otherwise."""
    return (record.type_tag, record.relation_chain, record.identity)


class ContextDesignation:
    """Lazily computed, memoized context label for one record in one call.

    The designator runs at most once no matter how many table lookups ask
    for the label, and only if some lookup actually needs it.
    """

    def __init__(
        self,
        record: RecordProtocol,
        designator: Optional[Callable[..., Any]],
        arguments_builder: Callable[[RecordProtocol], Sequence[Any]] = default_designator_arguments,
    ) -> None:
        """Bind a record to a designator.

        Args:
            record: The record being serialized.
            designator: The per-call context designator, if any.
            arguments_builder: Builds the designator's positional arguments.
        """
        self._record = record
        self._designator = designator
        self._arguments_builder = arguments_builder
        self._pending: Optional[asyncio.Future] = None

    async def _designate(self) -> Any:
        arguments = self._arguments_builder(self._record)
        return await maybe_await(self._designator(*arguments))

    async def label(self) -> Any:
        """Return the record's context label, invoking the designator on first use."""
        if self._designator is None:
            raise SerializationConfigurationError(
                ConfigurationErrorReason.MISSING_CONTEXT_DESIGNATOR,
                f"a context_designator is required to resolve labelled entries "
                f"for type: {self._record.type_tag}",
            )
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._designate())
        return await self._pending

    async def resolve(self, entry: PropertyTableEntry, table_name: str) -> List[str]:
        """Resolve a table entry to its list of names.

        Args:
            entry: A list, or a mapping from label to list.
            table_name: Table the entry came from, for error messages.

        Raises:
            SerializationConfigurationError: MALFORMED_CONTEXT_TABLE_ENTRY if
                the label has no list in the mapping.
        """
        if isinstance(entry, list):
            return entry

        label = await self.label()
        names = entry.get(label) if isinstance(label, str) else None
        if not isinstance(names, list):
            raise SerializationConfigurationError(
                ConfigurationErrorReason.MALFORMED_CONTEXT_TABLE_ENTRY,
                f"context designator did not identify a list within {table_name}."
                f"{self._record.type_tag} (label: {label!r})",
            )
        return names
