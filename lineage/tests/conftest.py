"""
Pytest configuration for lineage tests.

All fixtures run on the in-memory stores; nothing here needs PostgreSQL.
"""

import pytest

from lineage.models import Post, PostKind, PostType
from lineage.repositories import InMemoryPostRepository, InMemoryRelationRepository
from lineage.services import LineageService, TraversalLimits


def pytest_configure(config):
    """Configure pytest with asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test."
    )


def make_post(post_id: str, **overrides) -> Post:
    """A public, active Spark unless overridden."""
    fields = dict(
        id=post_id,
        user_id=overrides.pop('user_id', 'user_1'),
        content=f"Content of {post_id}",
        type=PostType.BRAINSTORM,
        kind=PostKind.SPARK,
        title=f"Title {post_id}",
    )
    fields.update(overrides)
    return Post(**fields)


@pytest.fixture
def post_store():
    return InMemoryPostRepository()


@pytest.fixture
def relation_store(post_store):
    return InMemoryRelationRepository(post_store)


@pytest.fixture
def add_posts(post_store):
    """Register posts by id: add_posts('R', 'A', ...)"""
    async def _add(*post_ids, **overrides):
        created = []
        for post_id in post_ids:
            created.append(await post_store.create_post(make_post(post_id, **overrides)))
        return created
    return _add


@pytest.fixture
def limits():
    return TraversalLimits()


@pytest.fixture
def service(post_store, relation_store, limits):
    return LineageService(post_store, relation_store, limits)


@pytest.fixture
def thread(add_posts, relation_store):
    """
    R -> A -> B
    R -> C

    Created in that order, so C is R's second continuation.
    """
    async def _build():
        await add_posts('R', 'A', 'B', 'C')
        await relation_store.create_relation('R', 'A', 'reply')
        await relation_store.create_relation('A', 'B', 'reply')
        await relation_store.create_relation('R', 'C', 'reply')
    return _build


@pytest.fixture
def post_factory():
    return make_post
