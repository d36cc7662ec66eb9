"""
Post Repository - PostgreSQL storage for posts

Storage: PostgreSQL (posts table)
"""
import json
import logging
from typing import Iterable, List, Optional, Sequence

import asyncpg

from ..errors import NotFoundError
from ..models import Post, PostStatus
from ..models.post import COUNTER_FIELDS

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, user_id, title, content, body, type, kind, visibility, mode, status,
    org_id, likes_count, comments_count, views_count, t_score, u_score,
    metadata, published_at, created_at, updated_at
"""


class PostRepository:
    """
    Repository for Post domain model

    Posts are soft-deleted by status; reads used by traversal default to
    active posts only.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_post_by_id(self, post_id: str) -> Optional[Post]:
        """
        Retrieve post by ID, whatever its status.

        Args:
            post_id: Post ID (ps_xxxxxxxx)

        Returns:
            Post model or None
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(f"""
                SELECT {_COLUMNS}
                FROM posts
                WHERE id = $1
            """, post_id)

        return Post.from_row(row) if row else None

    async def get_posts_by_ids(
        self,
        post_ids: Iterable[str],
        statuses: Sequence[PostStatus] = (PostStatus.ACTIVE,),
    ) -> List[Post]:
        """
        Batch fetch. Missing ids and posts in other statuses are omitted.

        Returns:
            Posts in the order their ids were given
        """
        ids = list(dict.fromkeys(post_ids))
        if not ids:
            return []

        async with self.db_pool.acquire() as conn:
            rows = await conn.fetch(f"""
                SELECT {_COLUMNS}
                FROM posts
                WHERE id = ANY($1::text[]) AND status = ANY($2::text[])
            """, ids, [PostStatus(s).value for s in statuses])

        by_id = {row['id']: Post.from_row(row) for row in rows}
        return [by_id[post_id] for post_id in ids if post_id in by_id]

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create_post(self, post: Post) -> Post:
        """
        Create a new post.

        Returns:
            Created post with database timestamps
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow("""
                INSERT INTO posts (
                    id, user_id, title, content, body, type, kind, visibility,
                    mode, status, org_id, t_score, u_score, metadata, published_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14::jsonb, $15)
                RETURNING created_at, updated_at
            """,
                post.id,
                post.user_id,
                post.title,
                post.content,
                post.body,
                post.type.value,
                post.kind.value if post.kind else None,
                post.visibility.value,
                post.mode.value,
                post.status.value,
                post.org_id,
                post.t_score,
                post.u_score,
                json.dumps(post.metadata),
                post.published_at,
            )

        post.created_at = row['created_at']
        post.updated_at = row['updated_at']
        logger.info(f"Created post {post.id} ({post.type.value}) by user {post.user_id}")
        return post

    async def update_content(self, post_id: str, title: Optional[str], content: str) -> None:
        """
        Update title and content (owner edit).

        Raises:
            NotFoundError: No post with this id
        """
        async with self.db_pool.acquire() as conn:
            result = await conn.execute("""
                UPDATE posts
                SET title = $2, content = $3, updated_at = NOW()
                WHERE id = $1
            """, post_id, title, content)

        if int(result.split()[-1]) == 0:
            raise NotFoundError('Post', post_id)
        logger.info(f"Updated post {post_id}")

    async def set_status(self, post_id: str, status: PostStatus) -> None:
        """
        Move a post through its soft lifecycle (deleted = status 'deleted').

        Raises:
            NotFoundError: No post with this id
        """
        status = PostStatus(status)
        async with self.db_pool.acquire() as conn:
            result = await conn.execute("""
                UPDATE posts
                SET status = $2, updated_at = NOW()
                WHERE id = $1
            """, post_id, status.value)

        if int(result.split()[-1]) == 0:
            raise NotFoundError('Post', post_id)
        logger.info(f"Post {post_id} -> {status.value}")

    async def increment_counter(self, post_id: str, counter: str, amount: int = 1) -> int:
        """
        Bump an interaction counter.

        Returns:
            New counter value
        """
        if counter not in COUNTER_FIELDS:
            raise ValueError(f"Invalid counter: {counter}. Must be one of: {list(COUNTER_FIELDS)}")

        # counter is whitelisted above
        async with self.db_pool.acquire() as conn:
            value = await conn.fetchval(f"""
                UPDATE posts
                SET {counter} = {counter} + $2
                WHERE id = $1
                RETURNING {counter}
            """, post_id, amount)

        if value is None:
            raise NotFoundError('Post', post_id)
        return value
