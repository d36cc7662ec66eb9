"""
Tests for BreadcrumbBuilder
"""

import pytest

from lineage.errors import NotFoundError
from lineage.models import PostStatus, PostType
from lineage.services import BreadcrumbBuilder, TraversalLimits


class TestBreadcrumbs:

    @pytest.mark.asyncio
    async def test_root_first_path(self, thread, post_store, relation_store):
        await thread()

        trail = await BreadcrumbBuilder(post_store, relation_store).build_breadcrumbs('B')

        assert [entry.post_id for entry in trail] == ['R', 'A', 'B']
        assert trail[0].title == 'Title R'
        assert trail[0].post_type == PostType.BRAINSTORM

    @pytest.mark.asyncio
    async def test_root_alone(self, thread, post_store, relation_store):
        await thread()

        trail = await BreadcrumbBuilder(post_store, relation_store).build_breadcrumbs('R')

        assert [entry.post_id for entry in trail] == ['R']

    @pytest.mark.asyncio
    async def test_excerpt_length(self, add_posts, post_store, relation_store):
        await add_posts('L', content='word ' * 50)

        trail = await BreadcrumbBuilder(
            post_store, relation_store, TraversalLimits(excerpt_length=9)
        ).build_breadcrumbs('L')

        assert trail[0].excerpt == 'word word...'

    @pytest.mark.asyncio
    async def test_unresolved_ancestor_pruned(self, thread, post_store, relation_store):
        await thread()
        await post_store.set_status('A', PostStatus.ARCHIVED)

        trail = await BreadcrumbBuilder(post_store, relation_store).build_breadcrumbs('B')

        assert [entry.post_id for entry in trail] == ['R', 'B']

    @pytest.mark.asyncio
    async def test_unknown_post(self, post_store, relation_store):
        with pytest.raises(NotFoundError):
            await BreadcrumbBuilder(post_store, relation_store).build_breadcrumbs('ghost')
