"""
Continuation clusters - a Spark and everything continuing from it

Used by the feed to rank a Spark's continuations. Follows both 'reply' and
'origin' edges downward. Each continuation is scored as

    score = t_score * 0.30 + descendant_count * 0.70

descendant_count is every distinct post reachable below the continuation
along those edges, so a post reached by two paths counts under both.
"""
import logging
from typing import Dict, List, Optional, Set, Tuple

from ..errors import NotFoundError
from ..models import ContinuationNode, LineageCluster, Post, RelationType
from ..repositories.interfaces import PostStore, RelationStore
from .limits import DEFAULT_LIMITS, TraversalLimits

logger = logging.getLogger(__name__)

T_SCORE_WEIGHT = 0.30
DESCENDANT_WEIGHT = 0.70

CONTINUATION_TYPES = (RelationType.REPLY, RelationType.ORIGIN)


def continuation_score(post: Post, descendant_count: int) -> float:
    return (post.t_score or 0.0) * T_SCORE_WEIGHT + descendant_count * DESCENDANT_WEIGHT


class ClusterBuilder:

    def __init__(
        self,
        posts: PostStore,
        relations: RelationStore,
        limits: Optional[TraversalLimits] = None,
    ):
        self.posts = posts
        self.relations = relations
        self.limits = limits or DEFAULT_LIMITS

    async def build_cluster(self, root_post_id: str) -> LineageCluster:
        """
        Raises:
            NotFoundError: The root post is missing or not active
        """
        spark = await self.posts.get_post_by_id(root_post_id)
        if spark is None or not spark.is_active:
            raise NotFoundError('Post', root_post_id)

        order, parent_of, depth_of, children, truncated = await self._collect(root_post_id)

        post_map = {p.id: p for p in await self.posts.get_posts_by_ids(order)}

        # Keep a node only if its whole ancestor chain resolved (BFS order
        # guarantees parents are decided before children)
        kept = []
        kept_ids = {root_post_id}
        for post_id in order:
            if post_id in post_map and parent_of[post_id] in kept_ids:
                kept.append(post_id)
                kept_ids.add(post_id)

        kept_set = set(kept)
        descendants = {
            post_id: _count_descendants(post_id, children, kept_set)
            for post_id in kept
        }

        continuations = [
            ContinuationNode(
                post=post_map[post_id],
                depth=depth_of[post_id],
                parent_id=parent_of[post_id],
                descendant_count=descendants[post_id],
                score=continuation_score(post_map[post_id], descendants[post_id]),
            )
            for post_id in kept
        ]
        continuations.sort(key=lambda node: node.score, reverse=True)

        timestamps = [spark.created_at] + [node.post.created_at for node in continuations]
        timestamps = [ts for ts in timestamps if ts is not None]

        if truncated:
            logger.warning(f"Cluster {root_post_id} truncated at {len(order)} continuations")

        return LineageCluster(
            spark=spark,
            continuations=continuations,
            latest_activity_at=max(timestamps) if timestamps else None,
            total_continuations=len(continuations),
            truncated=truncated,
        )

    async def _collect(
        self,
        root_post_id: str,
    ) -> Tuple[List[str], Dict[str, str], Dict[str, int], Dict[str, Set[str]], bool]:
        """
        BFS over continuation edges.

        Returns:
            (ids in BFS order, first-parent map, depth map, child adjacency, truncated).
            The adjacency also holds edges into posts already visited.
        """
        visited = {root_post_id}
        order: List[str] = []
        parent_of: Dict[str, str] = {}
        depth_of: Dict[str, int] = {}
        children: Dict[str, Set[str]] = {}
        frontier = [root_post_id]
        depth = 0
        truncated = False

        while frontier and not truncated:
            edges = []
            for relation_type in CONTINUATION_TYPES:
                edges.extend(await self.relations.fetch_relations_by_type(relation_type, scope=frontier))
            edges.sort(key=lambda e: e.created_at)

            frontier_ids = set(frontier)
            next_frontier = []
            for edge in edges:
                if edge.parent_post_id not in frontier_ids:
                    continue
                if edge.child_post_id in visited:
                    children.setdefault(edge.parent_post_id, set()).add(edge.child_post_id)
                    continue
                if depth + 1 > self.limits.max_depth or len(visited) >= self.limits.max_nodes:
                    truncated = True
                    break
                child_id = edge.child_post_id
                visited.add(child_id)
                order.append(child_id)
                parent_of[child_id] = edge.parent_post_id
                children.setdefault(edge.parent_post_id, set()).add(child_id)
                depth_of[child_id] = depth + 1
                next_frontier.append(child_id)

            frontier = next_frontier
            depth += 1

        return order, parent_of, depth_of, children, truncated


def _count_descendants(post_id: str, children: Dict[str, Set[str]], kept: Set[str]) -> int:
    seen = set()
    stack = [post_id]
    while stack:
        for child_id in children.get(stack.pop(), ()):
            if child_id in kept and child_id != post_id and child_id not in seen:
                seen.add(child_id)
                stack.append(child_id)
    return len(seen)


def top_continuations(cluster: LineageCluster, max_count: int = 3) -> List[ContinuationNode]:
    """Best direct continuations (depth 1) by score."""
    direct = [node for node in cluster.continuations if node.depth == 1]
    return sorted(direct, key=lambda node: node.score, reverse=True)[:max_count]


def count_deeper_continuations(cluster: LineageCluster, depth: int = 3) -> int:
    """Continuations below the levels the card shows."""
    return sum(1 for node in cluster.continuations if node.depth > depth)
