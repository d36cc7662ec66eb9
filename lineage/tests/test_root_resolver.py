"""
Tests for RootResolver: origin lookup and reply-cycle recovery
"""

import logging

import pytest

from lineage.errors import IntegrityViolation
from lineage.models import Relation
from lineage.repositories import InMemoryRelationRepository
from lineage.services import RootResolver, TraversalLimits


def seed_replies(store, *pairs):
    for parent, child in pairs:
        store.seed(Relation(id='', parent_post_id=parent, child_post_id=child, relation_type='reply'))


class TestFindRoot:

    @pytest.mark.asyncio
    async def test_every_member_resolves_to_origin(self, thread, relation_store):
        await thread()
        resolver = RootResolver(relation_store)

        for post_id in ('R', 'A', 'B', 'C'):
            assert await resolver.find_root(post_id) == 'R'

    @pytest.mark.asyncio
    async def test_post_without_parent_is_its_own_root(self, relation_store):
        resolver = RootResolver(relation_store)
        assert await resolver.find_root('lonely') == 'lonely'

    @pytest.mark.asyncio
    async def test_soft_edges_ignored(self, add_posts, relation_store):
        await add_posts('A', 'B')
        await relation_store.create_relation('A', 'B', 'cross_link')
        await relation_store.create_relation('A', 'B', 'quote')

        assert await RootResolver(relation_store).find_root('B') == 'B'

    @pytest.mark.asyncio
    async def test_walk_up_path(self, thread, relation_store):
        await thread()
        assert await RootResolver(relation_store).walk_up('B') == ['B', 'A', 'R']


class TestCycles:

    @pytest.mark.asyncio
    async def test_two_cycle_terminates(self, caplog):
        store = InMemoryRelationRepository()
        seed_replies(store, ('A', 'B'), ('B', 'A'))
        resolver = RootResolver(store)

        with caplog.at_level(logging.ERROR):
            root = await resolver.find_root('A')

        assert root == 'A'
        assert 'INTEGRITY VIOLATION' in caplog.text

    @pytest.mark.asyncio
    async def test_each_cycle_member_resolves_to_itself(self):
        store = InMemoryRelationRepository()
        seed_replies(store, ('A', 'B'), ('B', 'C'), ('C', 'A'))
        resolver = RootResolver(store)

        assert await resolver.find_root('B') == 'B'
        assert await resolver.find_root('C') == 'C'

    @pytest.mark.asyncio
    async def test_tail_into_cycle_resolves_to_entry(self):
        store = InMemoryRelationRepository()
        seed_replies(store, ('A', 'B'), ('B', 'A'), ('B', 'T'))
        resolver = RootResolver(store)

        assert await resolver.walk_up('T') == ['T', 'B']

    @pytest.mark.asyncio
    async def test_raise_on_cycle(self):
        store = InMemoryRelationRepository()
        seed_replies(store, ('A', 'B'), ('B', 'A'))
        resolver = RootResolver(store, TraversalLimits(raise_on_cycle=True))

        with pytest.raises(IntegrityViolation) as exc_info:
            await resolver.find_root('A')

        assert exc_info.value.reentry_post_id == 'A'
        assert exc_info.value.path == ['A', 'B']


class TestBounds:

    @pytest.mark.asyncio
    async def test_long_chain_stops_at_max_nodes(self):
        store = InMemoryRelationRepository()
        ids = [f'p{i}' for i in range(10)]
        seed_replies(store, *zip(ids, ids[1:]))
        resolver = RootResolver(store, TraversalLimits(max_nodes=4))

        path = await resolver.walk_up('p9')

        assert path == ['p9', 'p8', 'p7', 'p6']
