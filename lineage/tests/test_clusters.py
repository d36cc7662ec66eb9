"""
Tests for continuation clusters
"""

from datetime import datetime, timedelta, timezone

import pytest

from lineage.errors import NotFoundError
from lineage.models import PostStatus
from lineage.services import ClusterBuilder, TraversalLimits, count_deeper_continuations, top_continuations
from lineage.services.clusters import continuation_score

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def cluster_graph(post_store, relation_store, post_factory):
    """
    S -reply-> A -reply-> B
    S -origin-> C
    """
    async def _build():
        for offset, (post_id, t_score) in enumerate([('S', 5.0), ('A', 1.0), ('B', None), ('C', 10.0)]):
            await post_store.create_post(
                post_factory(post_id, t_score=t_score, created_at=T0 + timedelta(hours=offset))
            )
        await relation_store.create_relation('S', 'A', 'reply')
        await relation_store.create_relation('A', 'B', 'reply')
        await relation_store.create_relation('S', 'C', 'origin')
    return _build


class TestContinuationScore:

    def test_weights(self, post_factory):
        post = post_factory('P', t_score=2.0)
        assert continuation_score(post, 3) == pytest.approx(2.0 * 0.30 + 3 * 0.70)

    def test_missing_t_score(self, post_factory):
        assert continuation_score(post_factory('P'), 1) == pytest.approx(0.70)


class TestBuildCluster:

    @pytest.mark.asyncio
    async def test_ranked_continuations(self, cluster_graph, post_store, relation_store):
        await cluster_graph()

        cluster = await ClusterBuilder(post_store, relation_store).build_cluster('S')

        assert cluster.spark.id == 'S'
        assert [node.post.id for node in cluster.continuations] == ['C', 'A', 'B']
        assert cluster.total_continuations == 3
        assert cluster.latest_activity_at == T0 + timedelta(hours=3)
        assert not cluster.truncated

        by_id = {node.post.id: node for node in cluster.continuations}
        assert by_id['A'].descendant_count == 1
        assert by_id['A'].score == pytest.approx(1.0)
        assert (by_id['B'].depth, by_id['B'].parent_id) == (2, 'A')

    @pytest.mark.asyncio
    async def test_shared_descendant_counted_under_each_branch(self, add_posts, post_store, relation_store):
        await add_posts('S', 'X', 'Y', 'Z', 'W')
        for parent, child in [('S', 'X'), ('S', 'Y'), ('X', 'Z'), ('Y', 'Z'), ('Z', 'W')]:
            await relation_store.create_relation(parent, child, 'origin')

        cluster = await ClusterBuilder(post_store, relation_store).build_cluster('S')

        by_id = {node.post.id: node for node in cluster.continuations}
        assert {post_id: node.descendant_count for post_id, node in by_id.items()} == {
            'X': 2, 'Y': 2, 'Z': 1, 'W': 0,
        }
        assert by_id['Y'].score == pytest.approx(2 * 0.70)
        assert cluster.total_continuations == 4

    @pytest.mark.asyncio
    async def test_cross_links_not_followed(self, cluster_graph, add_posts, post_store, relation_store):
        await cluster_graph()
        await add_posts('X')
        await relation_store.create_relation('S', 'X', 'cross_link')

        cluster = await ClusterBuilder(post_store, relation_store).build_cluster('S')

        assert 'X' not in [node.post.id for node in cluster.continuations]

    @pytest.mark.asyncio
    async def test_unresolved_continuation_drops_branch(self, cluster_graph, post_store, relation_store):
        await cluster_graph()
        await post_store.set_status('A', PostStatus.DELETED)

        cluster = await ClusterBuilder(post_store, relation_store).build_cluster('S')

        assert [node.post.id for node in cluster.continuations] == ['C']

    @pytest.mark.asyncio
    async def test_inactive_root(self, cluster_graph, post_store, relation_store):
        await cluster_graph()
        await post_store.set_status('S', PostStatus.ARCHIVED)

        with pytest.raises(NotFoundError):
            await ClusterBuilder(post_store, relation_store).build_cluster('S')

    @pytest.mark.asyncio
    async def test_depth_bound(self, cluster_graph, post_store, relation_store):
        await cluster_graph()

        cluster = await ClusterBuilder(
            post_store, relation_store, TraversalLimits(max_depth=1)
        ).build_cluster('S')

        assert sorted(node.post.id for node in cluster.continuations) == ['A', 'C']
        assert cluster.truncated


class TestClusterHelpers:

    @pytest.mark.asyncio
    async def test_top_and_deeper(self, cluster_graph, post_store, relation_store):
        await cluster_graph()
        cluster = await ClusterBuilder(post_store, relation_store).build_cluster('S')

        assert [node.post.id for node in top_continuations(cluster, max_count=1)] == ['C']
        assert [node.post.id for node in top_continuations(cluster)] == ['C', 'A']
        assert count_deeper_continuations(cluster, depth=1) == 1
        assert count_deeper_continuations(cluster) == 0
