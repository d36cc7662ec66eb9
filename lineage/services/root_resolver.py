"""
Root Resolver - walk continuation ('reply') edges up to a thread's origin

Every post has at most one incoming reply edge, so the walk is a single
deterministic chain: one indexed lookup per step, O(depth).

Cycle recovery:
    A cycle can only exist if the store let a bad write through. When the walk
    revisits a post, that re-entered post is treated as the root and the walk
    stops. The event is logged at ERROR as an INTEGRITY VIOLATION, or raised
    when limits.raise_on_cycle is set. Each post on a pure cycle therefore
    resolves to itself; a post hanging off a cycle resolves to the cycle post
    it enters through.
"""
import logging
from typing import List, Optional

from ..errors import IntegrityViolation
from ..repositories.interfaces import RelationStore
from .limits import DEFAULT_LIMITS, TraversalLimits

logger = logging.getLogger(__name__)


class RootResolver:

    def __init__(self, relations: RelationStore, limits: Optional[TraversalLimits] = None):
        self.relations = relations
        self.limits = limits or DEFAULT_LIMITS

    async def find_root(self, post_id: str) -> str:
        """Id of the origin of the thread containing post_id."""
        path = await self.walk_up(post_id)
        return path[-1]

    async def walk_up(self, post_id: str) -> List[str]:
        """
        Upward path from a post to its root.

        Returns:
            [post_id, parent, grandparent, ..., root]
        """
        path = [post_id]
        visited = {post_id}
        current = post_id

        while True:
            if len(path) >= self.limits.max_nodes:
                logger.warning(
                    f"Root walk from {post_id} stopped at {current} after {len(path)} steps"
                )
                break

            edge = await self.relations.get_reply_parent(current)
            if edge is None:
                break

            parent_id = edge.parent_post_id
            if parent_id in visited:
                self._report_cycle(IntegrityViolation(post_id, parent_id, path))
                return path[:path.index(parent_id) + 1]

            path.append(parent_id)
            visited.add(parent_id)
            current = parent_id

        return path

    def _report_cycle(self, violation: IntegrityViolation) -> None:
        if self.limits.raise_on_cycle:
            raise violation
        logger.error(
            f"INTEGRITY VIOLATION: {violation}; "
            f"treating {violation.reentry_post_id} as thread root"
        )
