"""Airlock REST API Example.

A minimal FastAPI app serving users, groups and comments from an in-memory
SQLite database. The ``X-User-Id`` header names the requesting user and stands
in for authentication; what each route returns depends on who that is.

Usage:
    pip install -e ".[examples]"
    uvicorn app:app --port 8080

    curl -H "X-User-Id: 2" localhost:8080/users/antelope99
    curl -H "X-User-Id: 1" localhost:8080/users/antelope99
    curl -H "X-User-Id: 2" localhost:8080/groups/2
    curl localhost:8080/comments/2
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from airlock import ABSENT, EngineConfig, SerializationEngine, SerializationOptions
from airlock.adapters.records.sqlalchemy import SqlAlchemyRecord
from airlock.api import register_exception_handlers
from airlock.core.logging import logger
from models import Base, Comment, Group, User, registry

example_logger = logger.with_prefix("REST API example: ").with_context(component="rest_api")

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

# One shared connection keeps the in-memory database alive between sessions.
async_engine = create_async_engine(
    "sqlite+aiosqlite://",
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
AsyncSessionLocal = async_sessionmaker(autocommit=False, autoflush=False, bind=async_engine)


async def seed(db: AsyncSession) -> None:
    """Create the example users, groups and comments."""
    elephant = User(id=1, username="elephant1", email="elephant1@example.com", hashed_password="x")
    antelope = User(
        id=2, username="antelope99", email="antelope99@example.com", hashed_password="x"
    )
    gazelle = User(id=3, username="gazelle22", email="gazelle22@example.com", hashed_password="x")

    gauchos = Group(id=1, name="Slouchy gauchos", members=[elephant, antelope])
    economists = Group(
        id=2, name="Neo-Post-Tangential Economics Society", admins=[antelope], members=[gazelle]
    )

    question = Comment(id=1, content="Anyone seen my hat?", author=antelope)
    reply = Comment(id=2, content="Hello, World!", author=elephant, parent=question)
    follow_ups = [
        Comment(id=3, content="Which hat?", author=gazelle, parent=reply),
        Comment(id=4, content="The sombrero.", author=antelope, parent=reply),
    ]

    db.add_all([elephant, antelope, gazelle, gauchos, economists, question, reply, *follow_ups])
    await db.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema and seed it on startup."""
    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        await seed(db)
    example_logger.info("Seeded example database")
    yield
    await async_engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request."""
    async with AsyncSessionLocal() as db:
        yield db


def get_accessor(x_user_id: Optional[int] = Header(None)) -> Optional[Dict[str, Any]]:
    """The requesting user, or None for anonymous requests."""
    return None if x_user_id is None else {"user_id": x_user_id}


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

# Comments also pass their parent id, so replies to the requested comment
# can be told apart from other comments.
engine = SerializationEngine(
    registry,
    EngineConfig(
        designator_arguments=lambda record: (
            record.type_tag,
            record.relation_chain,
            record.identity,
            record.attributes().get("parent_id"),
        )
    ),
)


def found(payload):
    if payload is ABSENT:
        raise HTTPException(status_code=404, detail="Not found")
    return payload


app = FastAPI(title="Airlock REST API Example", lifespan=lifespan)
register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/comments/{comment_id}")
async def read_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    accessor: Optional[Dict[str, Any]] = Depends(get_accessor),
):
    """Return a comment with its author, parent and replies.

    Authors show only their username; the parent and replies show only
    their id and author:

        {
            "id": 2,
            "author": {"username": "elephant1"},
            "content": "Hello, World!",
            "parent": {"id": 1, "author": {"username": "antelope99"}},
            "children": [
                {"id": 3, "author": {"username": "gazelle22"}},
                {"id": 4, "author": {"username": "antelope99"}}
            ]
        }
    """
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Not found")

    def context_designator(type_tag, relation_chain, identity, parent_id):
        if type_tag == "comments":
            if identity == comment.id:
                return "requested_comment"
            if identity == comment.parent_id:
                return "requested_comment_parent"
            if parent_id == comment.id:
                return "requested_comment_child"
        return None

    options = SerializationOptions(
        context_specific_visible_properties={
            "comments": {
                "requested_comment": ["id", "author", "content", "parent", "children"],
                "requested_comment_parent": ["id", "author"],
                "requested_comment_child": ["id", "author"],
            },
            "users": ["username"],
        },
        ensure_relations_loaded={
            "comments": {
                "requested_comment": ["author", "parent", "children"],
                "requested_comment_parent": ["author"],
                "requested_comment_child": ["author"],
            },
        },
        context_designator=context_designator,
    )
    return found(await engine.serialize(SqlAlchemyRecord(comment, db, accessor), options))


@app.get("/users/{username}")
async def read_user(
    username: str,
    db: AsyncSession = Depends(get_db),
    accessor: Optional[Dict[str, Any]] = Depends(get_accessor),
):
    """Return a user; their groups are listed only to the user themself.

    Groups show their id and name, plus created_at where the user is an admin.
    Any other requester gets id, username and created_at.
    """
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="Not found")

    options = SerializationOptions(
        # Group role resolution loads admins and members; keep them out of this payload.
        context_specific_visible_properties={"groups": ["id", "name", "created_at"]},
        ensure_relations_loaded={"users": ["groups_member_of", "groups_admin_of"]},
    )
    return found(await engine.serialize(SqlAlchemyRecord(user, db, accessor), options))


@app.get("/groups/{group_id}")
async def read_group(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    accessor: Optional[Dict[str, Any]] = Depends(get_accessor),
):
    """Return a group to its admins and members; 404 for everyone else.

    Admins also see created_at. Admins and members are listed by id and username.
    """
    group = await db.get(Group, group_id)
    if group is None:
        raise HTTPException(status_code=404, detail="Not found")

    options = SerializationOptions(
        context_specific_visible_properties={"users": ["id", "username"]},
    )
    return found(await engine.serialize(SqlAlchemyRecord(group, db, accessor), options))
