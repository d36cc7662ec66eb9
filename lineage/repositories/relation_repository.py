"""
Relation Repository - PostgreSQL storage for post relations

Storage: PostgreSQL (post_relations table)

The table's constraints carry the graph invariants, so every check here is
atomic with the write:
- post_relations_unique_edge: one row per (parent, child, type)
- post_relations_single_reply_parent: one incoming 'reply' per child
- post_relations_no_self_loop: parent <> child

Acyclicity of 'reply' edges is not expressible as a constraint; reply inserts
take a transaction-scoped advisory lock and check ancestry before writing.
"""
import logging
from typing import Iterable, List, Optional, Union

import asyncpg

from ..errors import DuplicateReplyParentError, NotFoundError, ReplyCycleError, SelfLoopError
from ..models import Relation, RelationType, normalize_relation_type
from ..utils.id_generator import generate_relation_id
from .validation import check_pair, unique_children

logger = logging.getLogger(__name__)

_COLUMNS = "id, parent_post_id, child_post_id, relation_type, created_at"

SINGLE_REPLY_PARENT = 'post_relations_single_reply_parent'

# pg_advisory_xact_lock key held by every 'reply' insert
REPLY_WRITE_LOCK = 0x7265706C79


class RelationRepository:
    """
    Repository for Relation domain model

    Sole writer of post_relations. Legacy 'hard'/'soft' types are normalized
    here, once, before anything is stored.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_id(self, relation_id: str) -> Optional[Relation]:
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(f"""
                SELECT {_COLUMNS}
                FROM post_relations
                WHERE id = $1
            """, relation_id)

        return Relation.from_row(row) if row else None

    async def fetch_relations_for_post(self, post_id: str) -> List[Relation]:
        """
        All relations where the post is parent or child.

        Returns:
            Relations, newest first
        """
        async with self.db_pool.acquire() as conn:
            rows = await conn.fetch(f"""
                SELECT {_COLUMNS}
                FROM post_relations
                WHERE parent_post_id = $1 OR child_post_id = $1
                ORDER BY created_at DESC, id DESC
            """, post_id)

        return [Relation.from_row(row) for row in rows]

    async def fetch_relations_by_type(
        self,
        relation_type: Union[RelationType, str],
        scope: Optional[Iterable[str]] = None,
    ) -> List[Relation]:
        """
        All relations of one kind.

        Args:
            relation_type: Kind to fetch (legacy aliases accepted)
            scope: If given, only edges touching one of these post ids

        Returns:
            Relations, oldest first
        """
        relation_type = normalize_relation_type(relation_type)

        async with self.db_pool.acquire() as conn:
            if scope is None:
                rows = await conn.fetch(f"""
                    SELECT {_COLUMNS}
                    FROM post_relations
                    WHERE relation_type = $1
                    ORDER BY created_at ASC, id ASC
                """, relation_type.value)
            else:
                scope_ids = list(dict.fromkeys(scope))
                if not scope_ids:
                    return []
                rows = await conn.fetch(f"""
                    SELECT {_COLUMNS}
                    FROM post_relations
                    WHERE relation_type = $1
                      AND (parent_post_id = ANY($2::text[]) OR child_post_id = ANY($2::text[]))
                    ORDER BY created_at ASC, id ASC
                """, relation_type.value, scope_ids)

        return [Relation.from_row(row) for row in rows]

    async def get_reply_parent(self, post_id: str) -> Optional[Relation]:
        """The post's incoming 'reply' edge (unique by index)."""
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow(f"""
                SELECT {_COLUMNS}
                FROM post_relations
                WHERE child_post_id = $1 AND relation_type = 'reply'
                ORDER BY created_at ASC
                LIMIT 1
            """, post_id)

        return Relation.from_row(row) if row else None

    # =========================================================================
    # CREATE OPERATIONS
    # =========================================================================

    async def create_relation(
        self,
        parent_id: str,
        child_id: str,
        relation_type: Union[RelationType, str],
    ) -> Relation:
        """
        Create a relation, or return the existing one for the same triple.

        Raises:
            UnknownRelationTypeError: Type is neither canonical nor legacy
            SelfLoopError: parent_id == child_id
            DuplicateReplyParentError: child already continues another post
            ReplyCycleError: child is already an ancestor of parent
            NotFoundError: Either post does not exist
        """
        relation_type = normalize_relation_type(relation_type)
        check_pair(parent_id, child_id)

        async with self.db_pool.acquire() as conn:
            if relation_type != RelationType.REPLY:
                return await self._insert(conn, parent_id, child_id, relation_type)

            # Reply writes are serialized so the cycle check holds until commit
            async with conn.transaction():
                await conn.execute("SELECT pg_advisory_xact_lock($1)", REPLY_WRITE_LOCK)
                if await self._is_reply_ancestor(conn, child_id, parent_id):
                    raise ReplyCycleError(parent_id, child_id)
                return await self._insert(conn, parent_id, child_id, relation_type)

    async def _is_reply_ancestor(self, conn, ancestor_id: str, post_id: str) -> bool:
        """True if ancestor_id is post_id or lies above it along 'reply' edges."""
        return await conn.fetchval("""
            WITH RECURSIVE ancestors(post_id) AS (
                SELECT $1::text
                UNION
                SELECT r.parent_post_id
                FROM post_relations r
                JOIN ancestors a ON r.child_post_id = a.post_id
                WHERE r.relation_type = 'reply'
            )
            SELECT EXISTS (SELECT 1 FROM ancestors WHERE post_id = $2)
        """, post_id, ancestor_id)

    async def create_cross_links(self, parent_id: str, child_ids: Iterable[str]) -> List[Relation]:
        """
        Link a post to several others with 'cross_link' relations.

        All pairs are validated up front and inserted in one transaction, so
        either every link exists afterwards or none of the new ones do.
        Existing links are kept as they are.

        Returns:
            One relation per distinct child id (existing or new)
        """
        children = unique_children(parent_id, child_ids)
        if not children:
            return []

        async with self.db_pool.acquire() as conn:
            async with conn.transaction():
                created = []
                for child_id in children:
                    created.append(
                        await self._insert(conn, parent_id, child_id, RelationType.CROSS_LINK)
                    )

        logger.info(f"Cross-linked {parent_id} to {len(created)} posts")
        return created

    async def _insert(
        self,
        conn,
        parent_id: str,
        child_id: str,
        relation_type: RelationType,
    ) -> Relation:
        try:
            row = await conn.fetchrow(f"""
                INSERT INTO post_relations (id, parent_post_id, child_post_id, relation_type)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT ON CONSTRAINT post_relations_unique_edge DO NOTHING
                RETURNING {_COLUMNS}
            """, generate_relation_id(), parent_id, child_id, relation_type.value)
        except asyncpg.exceptions.UniqueViolationError as e:
            if e.constraint_name == SINGLE_REPLY_PARENT:
                raise DuplicateReplyParentError(child_id) from e
            raise
        except asyncpg.exceptions.CheckViolationError as e:
            raise SelfLoopError(f"Post {parent_id} cannot be related to itself") from e
        except asyncpg.exceptions.ForeignKeyViolationError as e:
            missing = parent_id if 'parent_post_id' in str(e) else child_id
            raise NotFoundError('Post', missing) from e

        if row is None:
            row = await conn.fetchrow(f"""
                SELECT {_COLUMNS}
                FROM post_relations
                WHERE parent_post_id = $1 AND child_post_id = $2 AND relation_type = $3
            """, parent_id, child_id, relation_type.value)
            logger.debug(f"Relation {parent_id} -[{relation_type.value}]-> {child_id} already exists")
            return Relation.from_row(row)

        relation = Relation.from_row(row)
        logger.info(f"Created relation {relation.id}: {parent_id} -[{relation_type.value}]-> {child_id}")
        return relation

    # =========================================================================
    # DELETE OPERATION
    # =========================================================================

    async def delete_relation(self, relation_id: str) -> None:
        """
        Delete a relation by id.

        Ownership of one of the two posts is checked by the caller.

        Raises:
            NotFoundError: No relation with this id
        """
        async with self.db_pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM post_relations
                WHERE id = $1
            """, relation_id)

        rows_deleted = int(result.split()[-1])
        if rows_deleted == 0:
            raise NotFoundError('Relation', relation_id)
        logger.info(f"Deleted relation {relation_id}")
