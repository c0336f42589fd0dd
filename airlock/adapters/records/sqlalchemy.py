"""SQLAlchemy record adapter.

Wraps a mapped instance and the AsyncSession it belongs to. Reads go
through the instance state only, so serializing never triggers an implicit
lazy load (which would fail under asyncio); relations are fetched
explicitly through ``AsyncSession.refresh`` with the relation name.

Record types carry their capabilities on the mapped class:

    class User(Base):
        __tablename__ = "users"

        roles_to_visible_properties = {
            "self": ["id", "username", "email", "groups"],
            "other": ["id", "username"],
        }

        @staticmethod
        def role_determiner(record, accessor):
            return "self" if accessor and accessor.user_id == record.identity else "other"

    registry.build(capabilities_from_mapped_class(cls) for cls in (User, Group))
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from airlock.domains.serialization.types import RecordTypeCapabilities

SqlAlchemyRelation = Union["SqlAlchemyRecord", List["SqlAlchemyRecord"], None]


class SqlAlchemyRecord:
    """RecordProtocol implementation over a SQLAlchemy mapped instance."""

    def __init__(
        self,
        instance: Any,
        session: AsyncSession,
        accessor: Any = None,
        relation_chain: Sequence[str] = (),
    ) -> None:
        """Wrap a mapped instance.

        Args:
            instance: The mapped ORM instance.
            session: Session used to load relations.
            accessor: Who the record is being read for.
            relation_chain: Relation names from the serialization root.
        """
        self.instance = instance
        self.session = session
        self.accessor = accessor
        self.relation_chain: Tuple[str, ...] = tuple(relation_chain)
        self._state = sa_inspect(instance)
        self._mapper = self._state.mapper

    @classmethod
    def wrap_all(
        cls, instances: Iterable[Any], session: AsyncSession, accessor: Any = None
    ) -> List["SqlAlchemyRecord"]:
        """Wrap every row of a query result for the same accessor."""
        return [cls(instance, session, accessor=accessor) for instance in instances]

    @property
    def type_tag(self) -> str:
        return getattr(self._mapper.class_, "__tablename__", self._mapper.class_.__name__)

    @property
    def identity(self) -> Optional[Any]:
        """Primary key value, a tuple for composite keys, None when unset."""
        values = []
        for column in self._mapper.primary_key:
            key = self._mapper.get_property_by_column(column).key
            values.append(self._state.dict.get(key))
        if all(value is None for value in values):
            return None
        return values[0] if len(values) == 1 else tuple(values)

    @property
    def is_persisted(self) -> bool:
        return self._state.has_identity

    def attributes(self) -> Dict[str, Any]:
        """Column attributes currently loaded on the instance."""
        loaded = self._state.dict
        return {
            prop.key: loaded[prop.key] for prop in self._mapper.column_attrs if prop.key in loaded
        }

    def relation_names(self) -> List[str]:
        loaded = self._state.dict
        return [rel.key for rel in self._mapper.relationships if rel.key in loaded]

    def is_relation_loaded(self, name: str) -> bool:
        return name in self._mapper.relationships and name in self._state.dict

    def related(self, name: str) -> SqlAlchemyRelation:
        """Wrap a loaded relation, propagating accessor and extending the chain.

        Raises:
            KeyError: If the relation is not loaded.
        """
        if not self.is_relation_loaded(name):
            raise KeyError(name)
        value = self._state.dict[name]
        chain = self.relation_chain + (name,)
        if value is None:
            return None
        if self._mapper.relationships[name].uselist:
            return [
                SqlAlchemyRecord(member, self.session, self.accessor, chain) for member in value
            ]
        return SqlAlchemyRecord(value, self.session, self.accessor, chain)

    async def load_relation(self, name: str) -> None:
        """Load a relation through the session."""
        await self.session.refresh(self.instance, attribute_names=[name])

    def with_accessor(self, accessor: Any) -> "SqlAlchemyRecord":
        """Wrap the same instance for another accessor."""
        return SqlAlchemyRecord(self.instance, self.session, accessor, self.relation_chain)


def capabilities_from_mapped_class(
    mapped_class: type, description: Optional[str] = None
) -> RecordTypeCapabilities:
    """Build a capabilities entry from a mapped class's attributes.

    Reads ``role_determiner`` and ``roles_to_visible_properties`` off the
    class and lists the mapper's relationships as the type's relations.
    """
    mapper = sa_inspect(mapped_class)
    return RecordTypeCapabilities(
        type_tag=getattr(mapped_class, "__tablename__", mapped_class.__name__),
        description=description or mapped_class.__doc__,
        role_determiner=getattr(mapped_class, "role_determiner", None),
        roles_to_visible_properties=getattr(mapped_class, "roles_to_visible_properties", None),
        relations=tuple(rel.key for rel in mapper.relationships),
    )
