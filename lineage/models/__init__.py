"""
Domain Models - Storage-agnostic data structures

Posts and the typed relations between them, plus the structures the
traversal services return (trees, breadcrumbs, neighbourhoods, clusters).
Services operate on these models, never on raw database rows.
"""

from .post import Post, PostType, PostKind, PostVisibility, PostMode, PostStatus
from .relation import Relation, RelationType, normalize_relation_type
from .thread import (
    ThreadNode,
    ThreadView,
    BreadcrumbEntry,
    RelatedPosts,
    CrossLink,
    ContinuationNode,
    LineageCluster,
)

__all__ = [
    # Core entities
    'Post',
    'PostType',
    'PostKind',
    'PostVisibility',
    'PostMode',
    'PostStatus',
    'Relation',
    'RelationType',
    'normalize_relation_type',

    # Traversal results
    'ThreadNode',
    'ThreadView',
    'BreadcrumbEntry',
    'RelatedPosts',
    'CrossLink',
    'ContinuationNode',
    'LineageCluster',
]
