"""
Post domain model
"""
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..utils.datetime_utils import to_datetime
from ..utils.id_generator import generate_post_id
from ..utils.text import make_excerpt


class PostType(str, Enum):
    """posts.type discriminator"""
    BRAINSTORM = "brainstorm"
    INSIGHT = "insight"
    REPORT = "report"
    WHITEPAPER = "whitepaper"
    WEBINAR = "webinar"
    VIDEO = "video"
    OPEN_IDEA = "open_idea"


class PostKind(str, Enum):
    """posts.kind refinement of type"""
    SPARK = "Spark"
    BUSINESS_INSIGHT = "BusinessInsight"
    INSIGHT = "Insight"


class PostVisibility(str, Enum):
    PUBLIC = "public"
    MY_BUSINESS = "my_business"
    OTHER_BUSINESSES = "other_businesses"
    DRAFT = "draft"
    PRIVATE = "private"


class PostMode(str, Enum):
    PUBLIC = "public"
    BUSINESS = "business"


class PostStatus(str, Enum):
    """Soft lifecycle marker; posts are never hard-deleted in the common path"""
    ACTIVE = "active"
    PENDING = "pending"
    ARCHIVED = "archived"
    DELETED = "deleted"


# Counters that interactions may increment
COUNTER_FIELDS = ('likes_count', 'comments_count', 'views_count')


def _load_metadata(value) -> dict:
    """jsonb comes back from asyncpg as a string unless a codec is registered"""
    if not value:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


@dataclass
class Post:
    """
    Post domain model - storage-agnostic representation

    Storage: PostgreSQL (posts table)

    Traversal code treats posts as read-only snapshots fetched by id.

    ID format: ps_xxxxxxxx (11 chars)
    """
    id: str  # Short ID: ps_xxxxxxxx
    user_id: str
    content: str
    type: PostType = PostType.BRAINSTORM
    kind: Optional[PostKind] = None
    title: Optional[str] = None
    body: Optional[str] = None

    visibility: PostVisibility = PostVisibility.PUBLIC
    mode: PostMode = PostMode.PUBLIC
    status: PostStatus = PostStatus.ACTIVE
    org_id: Optional[str] = None

    # Interaction counters (informational)
    likes_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    t_score: Optional[float] = None
    u_score: Optional[float] = None

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        """Generate ID if needed and coerce enum/timestamp fields"""
        if not self.id:
            self.id = generate_post_id()
        self.type = PostType(self.type)
        if self.kind is not None:
            self.kind = PostKind(self.kind)
        self.visibility = PostVisibility(self.visibility)
        self.mode = PostMode(self.mode)
        self.status = PostStatus(self.status)
        self.created_at = to_datetime(self.created_at)
        self.updated_at = to_datetime(self.updated_at)
        self.published_at = to_datetime(self.published_at)
        if self.metadata is None:
            self.metadata = {}

    @classmethod
    def from_row(cls, row) -> 'Post':
        """Build from an asyncpg Record or dict"""
        return cls(
            id=row['id'],
            user_id=str(row['user_id']),
            content=row['content'],
            type=row['type'],
            kind=row['kind'],
            title=row['title'],
            body=row['body'],
            visibility=row['visibility'],
            mode=row['mode'],
            status=row['status'],
            org_id=row['org_id'],
            likes_count=row['likes_count'] or 0,
            comments_count=row['comments_count'] or 0,
            views_count=row['views_count'] or 0,
            t_score=row['t_score'],
            u_score=row['u_score'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
            published_at=row['published_at'],
            metadata=_load_metadata(row['metadata']),
        )

    @property
    def is_active(self) -> bool:
        return self.status == PostStatus.ACTIVE

    @property
    def is_spark(self) -> bool:
        """Spark = type 'brainstorm' with kind 'Spark'"""
        return self.type == PostType.BRAINSTORM and self.kind == PostKind.SPARK

    @property
    def is_business_insight(self) -> bool:
        """Business Insight = type 'insight' with kind 'BusinessInsight'"""
        return self.type == PostType.INSIGHT and self.kind == PostKind.BUSINESS_INSIGHT

    def excerpt(self, length: int = 100) -> str:
        return make_excerpt(self.content, length)

    @property
    def display_title(self) -> str:
        """Title, falling back to the opening of the content"""
        return self.title or self.excerpt(30)
