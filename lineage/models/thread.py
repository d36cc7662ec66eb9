"""
Traversal result models

Built fresh on every call from current store state; nothing here is cached
across requests.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .post import Post, PostType
from .relation import Relation, RelationType


@dataclass
class ThreadNode:
    """One post in a continuation tree"""
    post: Post
    children: List['ThreadNode'] = field(default_factory=list)
    depth: int = 0
    parent_id: Optional[str] = None

    @property
    def post_id(self) -> str:
        return self.post.id

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def size(self) -> int:
        """Number of nodes in this subtree, itself included"""
        count = 0
        stack = [self]
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.children)
        return count


@dataclass
class ThreadView:
    """
    Thread tree plus the material it was built from

    truncated: the node or depth bound cut the traversal short
    degraded: the build failed and only the requested post is shown
    """
    root_post: Post
    tree: ThreadNode
    posts: List[Post] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    truncated: bool = False
    degraded: bool = False


@dataclass
class BreadcrumbEntry:
    """One step of the root-to-post navigation path"""
    post_id: str
    title: Optional[str]
    excerpt: str
    post_type: PostType
    created_at: Optional[datetime] = None

    @classmethod
    def from_post(cls, post: Post, excerpt_length: int = 100) -> 'BreadcrumbEntry':
        return cls(
            post_id=post.id,
            title=post.title,
            excerpt=post.excerpt(excerpt_length),
            post_type=post.type,
            created_at=post.created_at,
        )


@dataclass
class RelatedPosts:
    """
    Immediate neighbourhood of a post, by direction and kind class

    hard = reply; soft = origin, quote and cross_link collapsed together.
    A post appears in at most one bucket.
    """
    hard_children: List[Post] = field(default_factory=list)
    hard_parents: List[Post] = field(default_factory=list)
    soft_children: List[Post] = field(default_factory=list)
    soft_parents: List[Post] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.hard_children or self.hard_parents
                    or self.soft_children or self.soft_parents)

    def all_posts(self) -> List[Post]:
        return self.hard_parents + self.hard_children + self.soft_parents + self.soft_children


@dataclass
class CrossLink:
    """Entry in the cross-links feed"""
    relation_id: str
    post: Post
    relation_type: RelationType
    direction: str  # 'incoming' (post is referenced) or 'outgoing'
    label: str
    created_at: Optional[datetime] = None


@dataclass
class ContinuationNode:
    """A continuation inside a Spark's lineage cluster"""
    post: Post
    depth: int
    parent_id: Optional[str]
    descendant_count: int = 0
    score: float = 0.0


@dataclass
class LineageCluster:
    """A root Spark and everything continuing from it, ranked for the feed"""
    spark: Post
    continuations: List[ContinuationNode] = field(default_factory=list)
    latest_activity_at: Optional[datetime] = None
    total_continuations: int = 0
    truncated: bool = False
