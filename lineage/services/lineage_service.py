"""
LineageService - the operations the UI layer calls

Wires the traversal services over one PostStore and one RelationStore and
adds the write paths that need post data (lineage rules).

Reads:
- find_root, build_thread, thread_view, flatten, build_breadcrumbs
- find_related_posts, find_cross_links, build_cluster

Writes (delegated to the relation store, the only edge writer):
- link_posts, continue_post, link_many, unlink
"""
import logging
from typing import Iterable, List, Optional, Union

from ..errors import NotFoundError
from ..models import (
    BreadcrumbEntry,
    CrossLink,
    LineageCluster,
    PostStatus,
    RelatedPosts,
    Relation,
    RelationType,
    ThreadNode,
    ThreadView,
    normalize_relation_type,
)
from ..repositories.interfaces import PostStore, RelationStore
from .breadcrumbs import BreadcrumbBuilder
from .clusters import ClusterBuilder
from .limits import DEFAULT_LIMITS, TraversalLimits
from .lineage_rules import check_link
from .orbit import OrbitResolver
from .root_resolver import RootResolver
from .thread_builder import ThreadBuilder, flatten_thread

logger = logging.getLogger(__name__)

ALL_STATUSES = tuple(PostStatus)


class LineageService:

    def __init__(
        self,
        posts: PostStore,
        relations: RelationStore,
        limits: Optional[TraversalLimits] = None,
    ):
        self.posts = posts
        self.relations = relations
        self.limits = limits or DEFAULT_LIMITS

        self.root_resolver = RootResolver(relations, self.limits)
        self.thread_builder = ThreadBuilder(posts, relations, self.limits, self.root_resolver)
        self.breadcrumb_builder = BreadcrumbBuilder(posts, relations, self.limits, self.root_resolver)
        self.orbit = OrbitResolver(posts, relations)
        self.cluster_builder = ClusterBuilder(posts, relations, self.limits)

    # =========================================================================
    # READS
    # =========================================================================

    async def find_root(self, post_id: str) -> str:
        return await self.root_resolver.find_root(post_id)

    async def build_thread(self, post_id: str) -> ThreadNode:
        return await self.thread_builder.build_thread(post_id)

    async def thread_view(self, post_id: str) -> ThreadView:
        """
        Thread for display. If the build fails, falls back to the requested
        post alone (degraded=True) instead of failing the page.

        Raises:
            NotFoundError: The requested post itself does not exist
        """
        try:
            return await self.thread_builder.build(post_id)
        except Exception as e:
            post = await self.posts.get_post_by_id(post_id)
            if post is None:
                raise NotFoundError('Post', post_id) from e
            logger.exception(f"Thread build failed for {post_id}, showing post alone")
            return ThreadView(
                root_post=post,
                tree=ThreadNode(post=post),
                posts=[post],
                degraded=True,
            )

    @staticmethod
    def flatten(tree: ThreadNode) -> List[ThreadNode]:
        return flatten_thread(tree)

    async def build_breadcrumbs(self, post_id: str) -> List[BreadcrumbEntry]:
        return await self.breadcrumb_builder.build_breadcrumbs(post_id)

    async def find_related_posts(self, post_id: str) -> RelatedPosts:
        return await self.orbit.find_related_posts(post_id)

    async def find_cross_links(self, post_id: str) -> List[CrossLink]:
        return await self.orbit.find_cross_links(post_id)

    async def build_cluster(self, post_id: str) -> LineageCluster:
        return await self.cluster_builder.build_cluster(post_id)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def link_posts(
        self,
        parent_id: str,
        child_id: str,
        relation_type: Union[RelationType, str],
    ) -> Relation:
        """
        Relate two existing posts, subject to lineage rules.

        Raises:
            NotFoundError: Either post does not exist
            ValidationError: Rules, self-loop, or second reply parent
        """
        relation_type = normalize_relation_type(relation_type)
        parent = await self._require_post(parent_id)
        child = await self._require_post(child_id)
        check_link(parent, child, relation_type)
        return await self.relations.create_relation(parent_id, child_id, relation_type)

    async def continue_post(self, parent_id: str, child_id: str) -> Relation:
        """Mark child as a continuation of parent ('Continue Spark')."""
        return await self.link_posts(parent_id, child_id, RelationType.REPLY)

    async def link_many(self, parent_id: str, child_ids: Iterable[str]) -> List[Relation]:
        """Cross-link one post to several; all or nothing."""
        child_ids = list(dict.fromkeys(child_ids))
        if not child_ids:
            return []

        parent = await self._require_post(parent_id)
        children = {
            post.id: post
            for post in await self.posts.get_posts_by_ids(child_ids, statuses=ALL_STATUSES)
        }
        for child_id in child_ids:
            if child_id not in children:
                raise NotFoundError('Post', child_id)
            check_link(parent, children[child_id], RelationType.CROSS_LINK)

        return await self.relations.create_cross_links(parent_id, child_ids)

    async def unlink(self, relation_id: str) -> None:
        """
        Raises:
            NotFoundError: No relation with this id
        """
        await self.relations.delete_relation(relation_id)

    async def _require_post(self, post_id: str):
        post = await self.posts.get_post_by_id(post_id)
        if post is None:
            raise NotFoundError('Post', post_id)
        return post
