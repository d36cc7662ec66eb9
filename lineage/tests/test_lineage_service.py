"""
Tests for LineageService: lineage rules on writes and the degraded thread view
"""

import logging

import pytest

from lineage.errors import LineageRuleError, NotFoundError, ReplyCycleError, SelfLoopError
from lineage.models import PostKind, PostStatus, PostType, RelationType
from lineage.services import can_link


@pytest.fixture
def kinds(add_posts, post_factory, post_store):
    """One post of each kind that matters to the rules."""
    async def _build():
        await add_posts('spark1', 'spark2')
        await post_store.create_post(post_factory('bi', type=PostType.INSIGHT, kind=PostKind.BUSINESS_INSIGHT))
        await post_store.create_post(post_factory('insight', type=PostType.INSIGHT, kind=PostKind.INSIGHT))
        await post_store.create_post(post_factory('idea', type=PostType.OPEN_IDEA, kind=None))
        await post_store.create_post(post_factory('report', type=PostType.REPORT, kind=None))
    return _build


class TestLineageRules:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("parent,child,relation_type,allowed", [
        ('spark1', 'spark2', 'reply', True),
        ('spark1', 'bi', 'cross_link', True),
        ('bi', 'spark1', 'quote', True),
        ('spark1', 'insight', 'cross_link', False),
        ('report', 'spark1', 'reply', False),
        ('idea', 'spark1', 'origin', True),
        ('idea', 'bi', 'origin', True),
        ('idea', 'spark1', 'reply', False),
        ('idea', 'report', 'origin', False),
        ('spark1', 'idea', 'origin', False),
    ])
    async def test_can_link(self, kinds, post_store, parent, child, relation_type, allowed):
        await kinds()
        parent_post = await post_store.get_post_by_id(parent)
        child_post = await post_store.get_post_by_id(child)

        assert can_link(parent_post, child_post, relation_type) is allowed

    @pytest.mark.asyncio
    async def test_link_rejected_by_rules(self, kinds, service, relation_store):
        await kinds()

        with pytest.raises(LineageRuleError):
            await service.link_posts('spark1', 'insight', 'soft')
        assert len(relation_store) == 0

    @pytest.mark.asyncio
    async def test_open_idea_origin(self, kinds, service):
        await kinds()

        relation = await service.link_posts('idea', 'spark1', 'origin')

        assert relation.relation_type == RelationType.ORIGIN


class TestWrites:

    @pytest.mark.asyncio
    async def test_continue_post(self, add_posts, service):
        await add_posts('R', 'A')

        relation = await service.continue_post('R', 'A')

        assert relation.relation_type == RelationType.REPLY
        assert await service.find_root('A') == 'R'

    @pytest.mark.asyncio
    async def test_continuing_own_continuation_rejected(self, add_posts, service, relation_store, caplog):
        await add_posts('A', 'B')
        await service.continue_post('A', 'B')

        with pytest.raises(ReplyCycleError):
            await service.continue_post('B', 'A')

        with caplog.at_level(logging.ERROR):
            assert await service.find_root('B') == 'A'
        assert len(relation_store) == 1
        assert 'INTEGRITY VIOLATION' not in caplog.text

    @pytest.mark.asyncio
    async def test_link_missing_post(self, add_posts, service):
        await add_posts('R')

        with pytest.raises(NotFoundError):
            await service.link_posts('R', 'ghost', 'quote')

    @pytest.mark.asyncio
    async def test_self_link(self, add_posts, service):
        await add_posts('R')

        with pytest.raises(SelfLoopError):
            await service.link_posts('R', 'R', 'quote')

    @pytest.mark.asyncio
    async def test_link_many(self, add_posts, service):
        await add_posts('P', 'A', 'B')

        created = await service.link_many('P', ['A', 'B', 'A'])

        assert [r.child_post_id for r in created] == ['A', 'B']

    @pytest.mark.asyncio
    async def test_link_many_accepts_archived_children(self, add_posts, service, post_store):
        await add_posts('P', 'A')
        await post_store.set_status('A', PostStatus.ARCHIVED)

        created = await service.link_many('P', ['A'])

        assert len(created) == 1

    @pytest.mark.asyncio
    async def test_link_many_all_or_nothing(self, kinds, service, relation_store):
        await kinds()

        with pytest.raises(LineageRuleError):
            await service.link_many('spark1', ['spark2', 'insight'])
        assert len(relation_store) == 0

    @pytest.mark.asyncio
    async def test_link_many_missing_child(self, add_posts, service, relation_store):
        await add_posts('P', 'A')

        with pytest.raises(NotFoundError):
            await service.link_many('P', ['A', 'ghost'])
        assert len(relation_store) == 0

    @pytest.mark.asyncio
    async def test_unlink(self, add_posts, service):
        await add_posts('R', 'A')
        relation = await service.continue_post('R', 'A')

        await service.unlink(relation.id)

        assert await service.find_root('A') == 'A'
        with pytest.raises(NotFoundError):
            await service.unlink(relation.id)


class TestThreadView:

    @pytest.mark.asyncio
    async def test_full_view(self, thread, service):
        await thread()

        view = await service.thread_view('B')

        assert view.root_post.id == 'R'
        assert not view.degraded
        assert [node.post_id for node in service.flatten(view.tree)] == ['R', 'A', 'B', 'C']

    @pytest.mark.asyncio
    async def test_degrades_to_single_post(self, thread, service, post_store, caplog):
        await thread()
        await post_store.set_status('R', PostStatus.DELETED)

        with caplog.at_level(logging.ERROR):
            view = await service.thread_view('B')

        assert view.degraded
        assert view.root_post.id == 'B'
        assert view.tree.is_leaf
        assert [p.id for p in view.posts] == ['B']
        assert 'Thread build failed for B' in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_post(self, service):
        with pytest.raises(NotFoundError):
            await service.thread_view('ghost')

    @pytest.mark.asyncio
    async def test_breadcrumbs_and_orbit_passthrough(self, thread, service):
        await thread()

        trail = await service.build_breadcrumbs('B')
        related = await service.find_related_posts('R')

        assert [entry.post_id for entry in trail] == ['R', 'A', 'B']
        assert [p.id for p in related.hard_children] == ['C', 'A']
