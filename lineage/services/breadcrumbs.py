"""
Breadcrumb Builder - "you are here" path from thread root to a post

Single upward path (RootResolver.walk_up, same cycle guard), reversed so the
root comes first and the requested post last.
"""
import logging
from typing import List, Optional

from ..errors import NotFoundError
from ..models import BreadcrumbEntry
from ..repositories.interfaces import PostStore, RelationStore
from .limits import DEFAULT_LIMITS, TraversalLimits
from .root_resolver import RootResolver

logger = logging.getLogger(__name__)


class BreadcrumbBuilder:

    def __init__(
        self,
        posts: PostStore,
        relations: RelationStore,
        limits: Optional[TraversalLimits] = None,
        root_resolver: Optional[RootResolver] = None,
    ):
        self.posts = posts
        self.limits = limits or DEFAULT_LIMITS
        self.root_resolver = root_resolver or RootResolver(relations, self.limits)

    async def build_breadcrumbs(self, post_id: str) -> List[BreadcrumbEntry]:
        """
        Root-first path ending at post_id.

        Ancestors that do not resolve are left out of the trail.

        Raises:
            NotFoundError: post_id itself does not resolve
        """
        path = await self.root_resolver.walk_up(post_id)
        post_map = {post.id: post for post in await self.posts.get_posts_by_ids(path)}

        if post_id not in post_map:
            raise NotFoundError('Post', post_id)

        skipped = [pid for pid in path if pid not in post_map]
        if skipped:
            logger.debug(f"Breadcrumbs for {post_id}: pruned unresolved ancestors {skipped}")

        return [
            BreadcrumbEntry.from_post(post_map[pid], self.limits.excerpt_length)
            for pid in reversed(path)
            if pid in post_map
        ]
