"""Relation loading ahead of serialization.

Only relations that will end up in the output are loaded unless the engine
is configured to force-load everything that was requested. A custom handler
can replace the per-name behavior entirely, e.g. to compute a derived
attribute instead of loading rows:

    async def handle_ensure_relation(record, name):
        if name.endswith("CountPseudoRelation"):
            record.set_attribute(...)
        else:
            await default_handle_ensure_relation(record, name)
"""

import asyncio
from typing import List, Optional, Sequence

from airlock.core.logging import ContextualLogger, logger
from airlock.core.protocols.record import RecordProtocol
from airlock.domains.serialization.options import EnsureRelationHandler
from airlock.domains.serialization.types import RelationValue
from airlock.domains.serialization.utils import maybe_await

loader_logger = logger.with_prefix("RelationLoader: ").with_context(component="relation_loader")


async def default_handle_ensure_relation(
    record: RecordProtocol, relation_name: str
) -> RelationValue:
    """Return the relation, loading it first if it is not populated yet."""
    if not record.is_relation_loaded(relation_name):
        await record.load_relation(relation_name)
    return record.related(relation_name)


class RelationLoader:
    """Populates the requested relations of one record."""

    def __init__(
        self,
        handle_ensure_relation: Optional[EnsureRelationHandler] = None,
        force_load_invisible_relations: bool = False,
        emit_diagnostics: bool = True,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize the loader.

        Args:
            handle_ensure_relation: Per-name override; defaults to loading
                the relation through the record.
            force_load_invisible_relations: Load requested relations even
                when they are not visible.
            emit_diagnostics: Log requested names that are not visible.
            logger: Logger to use; defaults to the module logger.
        """
        self._handle = handle_ensure_relation or default_handle_ensure_relation
        self._force = force_load_invisible_relations
        self._emit_diagnostics = emit_diagnostics
        self._logger = logger or loader_logger

    def select(
        self, record: RecordProtocol, requested: Sequence[str], visible: Sequence[str]
    ) -> List[str]:
        """Pick which requested relation names to load."""
        requested = list(dict.fromkeys(requested))
        visible_set = set(visible)
        invisible = [name for name in requested if name not in visible_set]

        if invisible and self._emit_diagnostics:
            self._logger.warning(
                f"Requested relations which are not visible properties: {', '.join(invisible)}. "
                f"These relations will {'nevertheless' if self._force else 'not'} be loaded, "
                f"because force_load_invisible_relations is {self._force}.",
                extra={
                    "type_tag": record.type_tag,
                    "relation_chain": "/".join(record.relation_chain),
                },
            )

        if self._force:
            return list(requested)
        return [name for name in requested if name in visible_set]

    async def ensure(
        self, record: RecordProtocol, requested: Sequence[str], visible: Sequence[str]
    ) -> List[str]:
        """Load the selected relations concurrently.

        Returns:
            The relation names that were handed to the handler.
        """
        names = self.select(record, requested, visible)
        if names:
            await asyncio.gather(*[maybe_await(self._handle(record, name)) for name in names])
        return names
