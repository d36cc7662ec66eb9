"""
In-memory post and relation stores

Same contracts and invariants as the PostgreSQL repositories. Each write
holds an asyncio.Lock across its check and insert, which plays the role of
the table constraints.
"""
import asyncio
import itertools
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..errors import DuplicateReplyParentError, NotFoundError, ReplyCycleError
from ..models import Post, PostStatus, Relation, RelationType, normalize_relation_type
from ..models.post import COUNTER_FIELDS
from ..utils.datetime_utils import utcnow
from .validation import check_pair, unique_children

logger = logging.getLogger(__name__)


class InMemoryPostRepository:
    """Dict-backed post store."""

    def __init__(self, posts: Iterable[Post] = ()):
        self._posts: Dict[str, Post] = {}
        for post in posts:
            self._posts[post.id] = post

    def __contains__(self, post_id: str) -> bool:
        return post_id in self._posts

    async def get_post_by_id(self, post_id: str) -> Optional[Post]:
        return self._posts.get(post_id)

    async def get_posts_by_ids(
        self,
        post_ids: Iterable[str],
        statuses: Sequence[PostStatus] = (PostStatus.ACTIVE,),
    ) -> List[Post]:
        allowed = {PostStatus(s) for s in statuses}
        result = []
        for post_id in dict.fromkeys(post_ids):
            post = self._posts.get(post_id)
            if post is not None and post.status in allowed:
                result.append(post)
        return result

    async def create_post(self, post: Post) -> Post:
        now = utcnow()
        post.created_at = post.created_at or now
        post.updated_at = now
        self._posts[post.id] = post
        logger.info(f"Created post {post.id} ({post.type.value}) by user {post.user_id}")
        return post

    async def update_content(self, post_id: str, title: Optional[str], content: str) -> None:
        post = self._require(post_id)
        post.title = title
        post.content = content
        post.updated_at = utcnow()

    async def set_status(self, post_id: str, status: PostStatus) -> None:
        post = self._require(post_id)
        post.status = PostStatus(status)
        post.updated_at = utcnow()
        logger.info(f"Post {post_id} -> {post.status.value}")

    async def increment_counter(self, post_id: str, counter: str, amount: int = 1) -> int:
        if counter not in COUNTER_FIELDS:
            raise ValueError(f"Invalid counter: {counter}. Must be one of: {list(COUNTER_FIELDS)}")
        post = self._require(post_id)
        setattr(post, counter, getattr(post, counter) + amount)
        return getattr(post, counter)

    def _require(self, post_id: str) -> Post:
        post = self._posts.get(post_id)
        if post is None:
            raise NotFoundError('Post', post_id)
        return post


class InMemoryRelationRepository:
    """
    List-backed relation store.

    If a post store is given, both endpoints of a new relation must exist in
    it (any status), mirroring the foreign keys of post_relations.
    """

    def __init__(self, posts: Optional[InMemoryPostRepository] = None):
        self._posts = posts
        self._relations: Dict[str, Relation] = {}
        self._order: Dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._relations)

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def _sort_key(self, relation: Relation) -> Tuple:
        return (relation.created_at, self._order[relation.id])

    async def get_by_id(self, relation_id: str) -> Optional[Relation]:
        return self._relations.get(relation_id)

    async def fetch_relations_for_post(self, post_id: str) -> List[Relation]:
        matching = [r for r in self._relations.values() if r.touches(post_id)]
        return sorted(matching, key=self._sort_key, reverse=True)

    async def fetch_relations_by_type(
        self,
        relation_type: Union[RelationType, str],
        scope: Optional[Iterable[str]] = None,
    ) -> List[Relation]:
        relation_type = normalize_relation_type(relation_type)
        scope_ids = None if scope is None else set(scope)
        matching = [
            r for r in self._relations.values()
            if r.relation_type == relation_type
            and (scope_ids is None
                 or r.parent_post_id in scope_ids
                 or r.child_post_id in scope_ids)
        ]
        return sorted(matching, key=self._sort_key)

    async def get_reply_parent(self, post_id: str) -> Optional[Relation]:
        replies = [
            r for r in self._relations.values()
            if r.child_post_id == post_id and r.relation_type == RelationType.REPLY
        ]
        return min(replies, key=self._sort_key) if replies else None

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create_relation(
        self,
        parent_id: str,
        child_id: str,
        relation_type: Union[RelationType, str],
    ) -> Relation:
        relation_type = normalize_relation_type(relation_type)
        check_pair(parent_id, child_id)

        async with self._lock:
            existing, conflict = self._check_insert(parent_id, child_id, relation_type)
            if existing is not None:
                logger.debug(f"Relation {parent_id} -[{relation_type.value}]-> {child_id} already exists")
                return existing
            if conflict is not None:
                raise conflict
            return self._store(parent_id, child_id, relation_type)

    async def create_cross_links(self, parent_id: str, child_ids: Iterable[str]) -> List[Relation]:
        children = unique_children(parent_id, child_ids)
        if not children:
            return []

        async with self._lock:
            # Validate the whole batch before writing any of it
            plan = []
            for child_id in children:
                existing, conflict = self._check_insert(parent_id, child_id, RelationType.CROSS_LINK)
                if conflict is not None:
                    raise conflict
                plan.append((child_id, existing))

            created = [
                existing or self._store(parent_id, child_id, RelationType.CROSS_LINK)
                for child_id, existing in plan
            ]

        logger.info(f"Cross-linked {parent_id} to {len(created)} posts")
        return created

    async def delete_relation(self, relation_id: str) -> None:
        async with self._lock:
            if relation_id not in self._relations:
                raise NotFoundError('Relation', relation_id)
            del self._relations[relation_id]
            del self._order[relation_id]
        logger.info(f"Deleted relation {relation_id}")

    def seed(self, relation: Relation) -> Relation:
        """
        Insert a relation as-is, skipping every invariant check.

        Only for loading fixtures and reproducing corrupt data.
        """
        relation = replace(relation)
        if relation.created_at is None:
            relation.created_at = utcnow()
        self._relations[relation.id] = relation
        self._order[relation.id] = next(self._seq)
        return relation

    def _check_insert(self, parent_id, child_id, relation_type):
        """Returns (existing relation for the triple, error to raise)."""
        for relation in self._relations.values():
            if relation.key == (parent_id, child_id, relation_type):
                return relation, None

        if self._posts is not None:
            for post_id in (parent_id, child_id):
                if post_id not in self._posts:
                    return None, NotFoundError('Post', post_id)

        if relation_type == RelationType.REPLY:
            for relation in self._relations.values():
                if relation.child_post_id == child_id and relation.relation_type == RelationType.REPLY:
                    return None, DuplicateReplyParentError(child_id, relation.parent_post_id)
            if child_id in self._reply_ancestors(parent_id):
                return None, ReplyCycleError(parent_id, child_id)

        return None, None

    def _reply_ancestors(self, post_id: str) -> set:
        """post_id and every post above it along 'reply' edges."""
        parents = {
            r.child_post_id: r.parent_post_id
            for r in self._relations.values()
            if r.relation_type == RelationType.REPLY
        }
        seen = {post_id}
        current = post_id
        while current in parents and parents[current] not in seen:
            current = parents[current]
            seen.add(current)
        return seen

    def _store(self, parent_id, child_id, relation_type) -> Relation:
        relation = Relation(
            id='',
            parent_post_id=parent_id,
            child_post_id=child_id,
            relation_type=relation_type,
            created_at=utcnow(),
        )
        self._relations[relation.id] = relation
        self._order[relation.id] = next(self._seq)
        logger.info(f"Created relation {relation.id}: {parent_id} -[{relation_type.value}]-> {child_id}")
        return relation
