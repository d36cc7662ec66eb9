"""
Post lineage graph for Public Business

Typed relations between posts (origin, reply, quote, cross_link) and the
traversals built on them: thread roots, thread trees, breadcrumbs, orbit
neighbourhoods, and continuation clusters.

Usage:
    from lineage import LineageService
    from lineage.repositories import PostRepository, RelationRepository

    service = LineageService(PostRepository(pool), RelationRepository(pool))
    tree = await service.build_thread(post_id)
"""

from .errors import (
    LineageError,
    ValidationError,
    SelfLoopError,
    DuplicateReplyParentError,
    ReplyCycleError,
    UnknownRelationTypeError,
    LineageRuleError,
    NotFoundError,
    IntegrityViolation,
)
from .models import (
    Post,
    PostType,
    PostKind,
    PostStatus,
    Relation,
    RelationType,
    ThreadNode,
    ThreadView,
    BreadcrumbEntry,
    RelatedPosts,
    CrossLink,
    LineageCluster,
)
from .services import LineageService, TraversalLimits, flatten_thread

__version__ = "0.3.0"

__all__ = [
    'LineageService',
    'TraversalLimits',
    'flatten_thread',

    # Errors
    'LineageError',
    'ValidationError',
    'SelfLoopError',
    'DuplicateReplyParentError',
    'ReplyCycleError',
    'UnknownRelationTypeError',
    'LineageRuleError',
    'NotFoundError',
    'IntegrityViolation',

    # Models
    'Post',
    'PostType',
    'PostKind',
    'PostStatus',
    'Relation',
    'RelationType',
    'ThreadNode',
    'ThreadView',
    'BreadcrumbEntry',
    'RelatedPosts',
    'CrossLink',
    'LineageCluster',
]
