"""
Orbit Resolver - a post's immediate relational neighbourhood

Two views over the same relation rows:

find_related_posts (orbit view): four buckets, direction x kind class.
    hard = reply. soft = origin, quote and cross_link collapsed into one
    "reference" class, so this view does not tell them apart. Each neighbour
    appears once: hard beats soft, and within a class the newest relation
    decides the bucket.

find_cross_links (cross-links feed): every non-reply relation, one entry per
    row, keeping the relation type as a label.
"""
import logging
from typing import Dict, List

from ..models import CrossLink, Post, RelatedPosts, Relation
from ..repositories.interfaces import PostStore, RelationStore

logger = logging.getLogger(__name__)


class OrbitResolver:

    def __init__(self, posts: PostStore, relations: RelationStore):
        self.posts = posts
        self.relations = relations

    async def find_related_posts(self, post_id: str) -> RelatedPosts:
        relations = await self.relations.fetch_relations_for_post(post_id)
        result = RelatedPosts(relations=relations)
        if not relations:
            return result

        post_map = await self._resolve_neighbours(post_id, relations)
        placed = set()

        for hard_pass in (True, False):
            for relation in relations:
                if relation.is_hard != hard_pass:
                    continue
                other_id = relation.other_side(post_id)
                if other_id == post_id or other_id in placed:
                    continue
                post = post_map.get(other_id)
                if post is None:
                    continue

                as_parent = relation.parent_post_id == post_id
                if relation.is_hard:
                    bucket = result.hard_children if as_parent else result.hard_parents
                else:
                    bucket = result.soft_children if as_parent else result.soft_parents
                bucket.append(post)
                placed.add(other_id)

        return result

    async def find_cross_links(self, post_id: str) -> List[CrossLink]:
        """Non-reply relations of a post, newest first, with labels."""
        relations = [
            r for r in await self.relations.fetch_relations_for_post(post_id)
            if r.is_soft
        ]
        if not relations:
            return []

        post_map = await self._resolve_neighbours(post_id, relations)
        links = []
        for relation in relations:
            other_id = relation.other_side(post_id)
            post = post_map.get(other_id)
            if post is None or other_id == post_id:
                continue
            links.append(CrossLink(
                relation_id=relation.id,
                post=post,
                relation_type=relation.relation_type,
                direction='outgoing' if relation.parent_post_id == post_id else 'incoming',
                label=relation.label,
                created_at=relation.created_at,
            ))
        return links

    async def _resolve_neighbours(self, post_id: str, relations: List[Relation]) -> Dict[str, Post]:
        other_ids = [r.other_side(post_id) for r in relations]
        posts = await self.posts.get_posts_by_ids([pid for pid in other_ids if pid != post_id])
        post_map = {post.id: post for post in posts}

        dropped = len(set(other_ids) - set(post_map) - {post_id})
        if dropped:
            logger.debug(f"Orbit of {post_id}: {dropped} neighbours unresolved")
        return post_map
