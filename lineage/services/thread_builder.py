"""
Thread Tree Builder - full continuation tree around any post

Pipeline:
1. Resolve the thread root (RootResolver)
2. BFS down 'reply' edges, one store round trip per tree level
3. One batch fetch of every post reached
4. Assemble parent -> children, children in edge creation order

Posts that do not resolve (missing, or not active) drop out together with
everything below them; the rest of the tree is still returned.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ..errors import NotFoundError
from ..models import Post, Relation, RelationType, ThreadNode, ThreadView
from ..repositories.interfaces import PostStore, RelationStore
from .limits import DEFAULT_LIMITS, TraversalLimits
from .root_resolver import RootResolver

logger = logging.getLogger(__name__)


class ThreadBuilder:

    def __init__(
        self,
        posts: PostStore,
        relations: RelationStore,
        limits: Optional[TraversalLimits] = None,
        root_resolver: Optional[RootResolver] = None,
    ):
        self.posts = posts
        self.relations = relations
        self.limits = limits or DEFAULT_LIMITS
        self.root_resolver = root_resolver or RootResolver(relations, self.limits)

    async def build_thread(self, post_id: str) -> ThreadNode:
        """Tree rooted at the thread origin of post_id."""
        view = await self.build(post_id)
        return view.tree

    async def build(self, post_id: str) -> ThreadView:
        """
        Build the thread containing post_id.

        Raises:
            NotFoundError: The thread root post does not resolve
        """
        root_id = await self.root_resolver.find_root(post_id)
        edges, truncated = await self._collect_edges(root_id)

        ids = [root_id] + [edge.child_post_id for edge in edges]
        post_map: Dict[str, Post] = {
            post.id: post for post in await self.posts.get_posts_by_ids(ids)
        }

        root_post = post_map.get(root_id)
        if root_post is None:
            raise NotFoundError('Post', root_id)

        children_map: Dict[str, List[str]] = defaultdict(list)
        for edge in edges:
            children_map[edge.parent_post_id].append(edge.child_post_id)

        tree = self._assemble(root_post, children_map, post_map, depth=0, parent_id=None)
        nodes = flatten_thread(tree)
        in_tree = {node.post_id for node in nodes}

        if truncated:
            logger.warning(
                f"Thread {root_id} truncated at {len(in_tree)} posts "
                f"(max_nodes={self.limits.max_nodes}, max_depth={self.limits.max_depth})"
            )

        return ThreadView(
            root_post=root_post,
            tree=tree,
            posts=[node.post for node in nodes],
            relations=[edge for edge in edges if edge.child_post_id in in_tree],
            truncated=truncated,
        )

    async def _collect_edges(self, root_id: str) -> Tuple[List[Relation], bool]:
        """
        Reply edges of the component rooted at root_id, oldest first.

        Returns:
            (edges, truncated)
        """
        visited = {root_id}
        frontier = [root_id]
        depth = 0
        collected: List[Relation] = []
        truncated = False

        while frontier and not truncated:
            level = await self.relations.fetch_relations_by_type(RelationType.REPLY, scope=frontier)
            frontier_ids = set(frontier)
            next_frontier = []

            for edge in level:
                if edge.parent_post_id not in frontier_ids:
                    continue
                child_id = edge.child_post_id
                if child_id in visited:
                    logger.warning(
                        f"Skipping reply edge {edge.id}: {child_id} is already in thread {root_id}"
                    )
                    continue
                if depth + 1 > self.limits.max_depth or len(visited) >= self.limits.max_nodes:
                    truncated = True
                    break
                visited.add(child_id)
                collected.append(edge)
                next_frontier.append(child_id)

            frontier = next_frontier
            depth += 1

        return collected, truncated

    def _assemble(
        self,
        post: Post,
        children_map: Dict[str, List[str]],
        post_map: Dict[str, Post],
        depth: int,
        parent_id: Optional[str],
    ) -> ThreadNode:
        # Recursion depth is bounded by limits.max_depth
        node = ThreadNode(post=post, depth=depth, parent_id=parent_id)
        for child_id in children_map.get(post.id, []):
            child = post_map.get(child_id)
            if child is None:
                continue
            node.children.append(
                self._assemble(child, children_map, post_map, depth + 1, post.id)
            )
        return node


def flatten_thread(tree: ThreadNode) -> List[ThreadNode]:
    """
    Pre-order listing of a thread: each node before its children, siblings in
    stored order. Does not modify the tree.
    """
    result = []
    stack = [tree]
    while stack:
        node = stack.pop()
        result.append(node)
        stack.extend(reversed(node.children))
    return result
