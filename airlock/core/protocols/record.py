"""Record protocol: the data-access boundary of the serializer.

A record is one node of a domain graph (a user, a group, a comment) as seen
by one requester. Adapters wrap whatever the data-access layer produces
(ORM instances, plain dicts) and are responsible for two stamps:

- ``accessor``: who the record is being read for. Propagated unchanged to
  every record returned by ``related()``.
- ``relation_chain``: the relation names walked from the serialization root
  to this record. ``related(name)`` returns records whose chain is this
  record's chain plus ``name``.

Usage:
    record = SqlAlchemyRecord(user, session, accessor={"user_id": me})
    if not record.is_relation_loaded("groups"):
        await record.load_relation("groups")
    groups = record.related("groups")  # list of records, chain ("groups",)
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable


@runtime_checkable
class RecordProtocol(Protocol):
    """A hierarchical data node with attributes and named relations."""

    @property
    def type_tag(self) -> str:
        """Schema identifier used to look up the record type's capabilities."""
        ...

    @property
    def identity(self) -> Optional[Any]:
        """Primary identity value, or None when the record has none yet."""
        ...

    @property
    def accessor(self) -> Any:
        """Opaque descriptor of the requester."""
        ...

    @property
    def relation_chain(self) -> Tuple[str, ...]:
        """Relation names from the serialization root to this record."""
        ...

    @property
    def is_persisted(self) -> bool:
        """Whether the record exists in the backing store."""
        ...

    def attributes(self) -> Dict[str, Any]:
        """Return the scalar attributes currently present on the record."""
        ...

    def relation_names(self) -> List[str]:
        """Return the names of relations currently populated on the record."""
        ...

    def is_relation_loaded(self, name: str) -> bool:
        """Whether ``name`` is populated (possibly with None or an empty list)."""
        ...

    def related(self, name: str) -> Union["RecordProtocol", Sequence["RecordProtocol"], None]:
        """Return a populated relation, stamped with accessor and extended chain.

        Raises:
            KeyError: If the relation is not populated.
        """
        ...

    async def load_relation(self, name: str) -> None:
        """Populate relation ``name`` from the backing store."""
        ...

    def with_accessor(self, accessor: Any) -> "RecordProtocol":
        """Return the same record read for ``accessor``.

        The copy shares state with this record: relations it loads are
        loaded here too.
        """
        ...
