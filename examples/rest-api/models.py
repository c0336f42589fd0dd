"""Mapped models for the REST API example.

Each class carries its own ``roles_to_visible_properties`` and
``role_determiner``; ``registry`` is built from them at import time.
Accessors are ``{"user_id": <id>}`` dicts, or None for anonymous requests.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, ForeignKey, Table
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from airlock import CapabilityRegistry, default_handle_ensure_relation
from airlock.adapters.records.sqlalchemy import capabilities_from_mapped_class


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _user_id(accessor) -> Optional[int]:
    return (accessor or {}).get("user_id")


class Base(DeclarativeBase):
    pass


group_members = Table(
    "group_members",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("group_id", ForeignKey("groups.id"), primary_key=True),
)

group_admins = Table(
    "group_admins",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("group_id", ForeignKey("groups.id"), primary_key=True),
)


class User(Base):
    """A registered user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(unique=True)
    email: Mapped[str]
    # Never listed below, so never serialized.
    hashed_password: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=_now)

    groups_member_of: Mapped[List["Group"]] = relationship(
        secondary=group_members, back_populates="members"
    )
    groups_admin_of: Mapped[List["Group"]] = relationship(
        secondary=group_admins, back_populates="admins"
    )

    roles_to_visible_properties = {
        "the_user_themself": [
            "id",
            "username",
            "created_at",
            "email",
            "groups_member_of",
            "groups_admin_of",
        ],
        "someone_else": ["id", "username", "created_at"],
    }

    @staticmethod
    def role_determiner(record, accessor):
        if _user_id(accessor) is not None and _user_id(accessor) == record.identity:
            return "the_user_themself"
        return "someone_else"


class Group(Base):
    """A group of users, run by its admins."""

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=_now)

    admins: Mapped[List[User]] = relationship(
        secondary=group_admins, back_populates="groups_admin_of"
    )
    members: Mapped[List[User]] = relationship(
        secondary=group_members, back_populates="groups_member_of"
    )

    roles_to_visible_properties = {
        "admin": ["id", "name", "admins", "members", "created_at"],
        "member": ["id", "name", "admins", "members"],
        "outsider": [],
    }

    @staticmethod
    async def role_determiner(record, accessor):
        """Look the requester up among admins, then members.

        Loads the relations it needs, so they are populated for serialization.
        """
        user_id = _user_id(accessor)
        if user_id is None:
            return "outsider"
        admins = await default_handle_ensure_relation(record, "admins")
        if any(admin.identity == user_id for admin in admins):
            return "admin"
        members = await default_handle_ensure_relation(record, "members")
        if any(member.identity == user_id for member in members):
            return "member"
        return "outsider"


class Comment(Base):
    """A comment, optionally replying to another one."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    content: Mapped[str]
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("comments.id"))

    author: Mapped[User] = relationship()
    parent: Mapped[Optional["Comment"]] = relationship(
        back_populates="children", remote_side=[id]
    )
    children: Mapped[List["Comment"]] = relationship(back_populates="parent")

    roles_to_visible_properties = {
        "anyone": ["id", "author", "content", "parent", "children"],
    }

    @staticmethod
    def role_determiner(record, accessor):
        return "anyone"


registry = CapabilityRegistry()
registry.build(capabilities_from_mapped_class(cls) for cls in (User, Group, Comment))
