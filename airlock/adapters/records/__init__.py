"""Record adapters."""

from airlock.adapters.records.fake import FakeRecord
from airlock.adapters.records.sqlalchemy import SqlAlchemyRecord, capabilities_from_mapped_class

__all__ = ["FakeRecord", "SqlAlchemyRecord", "capabilities_from_mapped_class"]
