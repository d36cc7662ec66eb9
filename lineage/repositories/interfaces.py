"""
Store contracts consumed by the traversal services

Services receive these as constructor arguments; both the asyncpg
repositories and the in-memory stores satisfy them.
"""
from typing import Iterable, List, Optional, Protocol, Sequence, Union

from ..models import Post, PostStatus, Relation, RelationType


class PostStore(Protocol):

    async def get_post_by_id(self, post_id: str) -> Optional[Post]:
        ...

    async def get_posts_by_ids(
        self,
        post_ids: Iterable[str],
        statuses: Sequence[PostStatus] = (PostStatus.ACTIVE,),
    ) -> List[Post]:
        """Existing posts with a matching status; missing ids are omitted."""
        ...


class RelationStore(Protocol):

    async def get_by_id(self, relation_id: str) -> Optional[Relation]:
        ...

    async def fetch_relations_for_post(self, post_id: str) -> List[Relation]:
        """Edges where the post is parent or child, newest first."""
        ...

    async def fetch_relations_by_type(
        self,
        relation_type: Union[RelationType, str],
        scope: Optional[Iterable[str]] = None,
    ) -> List[Relation]:
        """Edges of one kind (touching `scope` if given), oldest first."""
        ...

    async def get_reply_parent(self, post_id: str) -> Optional[Relation]:
        """The incoming reply edge of a post, if any."""
        ...

    async def create_relation(
        self,
        parent_id: str,
        child_id: str,
        relation_type: Union[RelationType, str],
    ) -> Relation:
        ...

    async def create_cross_links(self, parent_id: str, child_ids: Iterable[str]) -> List[Relation]:
        ...

    async def delete_relation(self, relation_id: str) -> None:
        ...
