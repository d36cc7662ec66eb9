"""
Post lineage API
================

Read-only views over the relation graph of one post:

- GET /api/posts/{id}/root         thread origin
- GET /api/posts/{id}/thread       nested continuation tree
- GET /api/posts/{id}/thread/flat  same tree, pre-order
- GET /api/posts/{id}/breadcrumbs  root -> post path
- GET /api/posts/{id}/related      orbit buckets
- GET /api/posts/{id}/cross-links  labelled reference feed
- GET /api/posts/{id}/cluster      ranked continuations of a Spark
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from ..errors import IntegrityViolation, NotFoundError
from ..models import CrossLink, Post, ThreadNode
from ..services import LineageService, count_deeper_continuations, flatten_thread, top_continuations
from .dependencies import get_lineage_service


router = APIRouter(prefix="/api/posts", tags=["Lineage"])


# =============================================================================
# Response Models
# =============================================================================

class PostSummary(BaseModel):
    """Post fields the lineage views render."""
    id: str
    user_id: str
    type: str
    kind: Optional[str] = None
    title: Optional[str] = None
    excerpt: str
    status: str
    visibility: str
    t_score: Optional[float] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_post(cls, post: Post) -> 'PostSummary':
        return cls(
            id=post.id,
            user_id=post.user_id,
            type=post.type.value,
            kind=post.kind.value if post.kind else None,
            title=post.title,
            excerpt=post.excerpt(),
            status=post.status.value,
            visibility=post.visibility.value,
            t_score=post.t_score,
            created_at=post.created_at,
        )


class RootResponse(BaseModel):
    post_id: str
    root_id: str


class ThreadNodeResponse(BaseModel):
    post: PostSummary
    depth: int
    parent_id: Optional[str] = None
    children: List['ThreadNodeResponse'] = []

    @classmethod
    def from_node(cls, node: ThreadNode) -> 'ThreadNodeResponse':
        return cls(
            post=PostSummary.from_post(node.post),
            depth=node.depth,
            parent_id=node.parent_id,
            children=[cls.from_node(child) for child in node.children],
        )


ThreadNodeResponse.model_rebuild()


class ThreadResponse(BaseModel):
    root_id: str
    tree: ThreadNodeResponse
    post_count: int
    truncated: bool = False
    degraded: bool = False


class FlatNodeResponse(BaseModel):
    post: PostSummary
    depth: int
    parent_id: Optional[str] = None


class BreadcrumbResponse(BaseModel):
    post_id: str
    title: Optional[str] = None
    excerpt: str
    post_type: str
    created_at: Optional[datetime] = None


class RelatedPostsResponse(BaseModel):
    hard_children: List[PostSummary]
    hard_parents: List[PostSummary]
    soft_children: List[PostSummary]
    soft_parents: List[PostSummary]


class CrossLinkResponse(BaseModel):
    relation_id: str
    post: PostSummary
    relation_type: str
    direction: str
    label: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_link(cls, link: CrossLink) -> 'CrossLinkResponse':
        return cls(
            relation_id=link.relation_id,
            post=PostSummary.from_post(link.post),
            relation_type=link.relation_type.value,
            direction=link.direction,
            label=link.label,
            created_at=link.created_at,
        )


class ContinuationResponse(BaseModel):
    post: PostSummary
    depth: int
    parent_id: Optional[str] = None
    descendant_count: int
    score: float


class ClusterResponse(BaseModel):
    spark: PostSummary
    continuations: List[ContinuationResponse]
    top_continuations: List[ContinuationResponse]
    deeper_count: int
    total_continuations: int
    latest_activity_at: Optional[datetime] = None
    truncated: bool = False


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _continuation(node) -> ContinuationResponse:
    return ContinuationResponse(
        post=PostSummary.from_post(node.post),
        depth=node.depth,
        parent_id=node.parent_id,
        descendant_count=node.descendant_count,
        score=node.score,
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{post_id}/root", response_model=RootResponse)
async def get_root(post_id: str, service: LineageService = Depends(get_lineage_service)):
    """Origin of the thread this post belongs to."""
    try:
        root_id = await service.find_root(post_id)
    except IntegrityViolation as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return RootResponse(post_id=post_id, root_id=root_id)


@router.get("/{post_id}/thread", response_model=ThreadResponse)
async def get_thread(post_id: str, service: LineageService = Depends(get_lineage_service)):
    """
    Full continuation tree around a post.

    Never errors for an existing post: a failed build returns the post
    alone with degraded=true.
    """
    try:
        view = await service.thread_view(post_id)
    except NotFoundError as e:
        raise _not_found(e)

    return ThreadResponse(
        root_id=view.root_post.id,
        tree=ThreadNodeResponse.from_node(view.tree),
        post_count=len(view.posts),
        truncated=view.truncated,
        degraded=view.degraded,
    )


@router.get("/{post_id}/thread/flat", response_model=List[FlatNodeResponse])
async def get_thread_flat(post_id: str, service: LineageService = Depends(get_lineage_service)):
    """Thread in reading order (each post before its continuations)."""
    try:
        view = await service.thread_view(post_id)
    except NotFoundError as e:
        raise _not_found(e)

    return [
        FlatNodeResponse(post=PostSummary.from_post(node.post), depth=node.depth, parent_id=node.parent_id)
        for node in flatten_thread(view.tree)
    ]


@router.get("/{post_id}/breadcrumbs", response_model=List[BreadcrumbResponse])
async def get_breadcrumbs(post_id: str, service: LineageService = Depends(get_lineage_service)):
    try:
        entries = await service.build_breadcrumbs(post_id)
    except NotFoundError as e:
        raise _not_found(e)
    except IntegrityViolation as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return [
        BreadcrumbResponse(
            post_id=entry.post_id,
            title=entry.title,
            excerpt=entry.excerpt,
            post_type=entry.post_type.value,
            created_at=entry.created_at,
        )
        for entry in entries
    ]


@router.get("/{post_id}/related", response_model=RelatedPostsResponse)
async def get_related(post_id: str, service: LineageService = Depends(get_lineage_service)):
    """Orbit view: direct neighbours by direction and hard/soft class."""
    related = await service.find_related_posts(post_id)
    return RelatedPostsResponse(
        hard_children=[PostSummary.from_post(p) for p in related.hard_children],
        hard_parents=[PostSummary.from_post(p) for p in related.hard_parents],
        soft_children=[PostSummary.from_post(p) for p in related.soft_children],
        soft_parents=[PostSummary.from_post(p) for p in related.soft_parents],
    )


@router.get("/{post_id}/cross-links", response_model=List[CrossLinkResponse])
async def get_cross_links(post_id: str, service: LineageService = Depends(get_lineage_service)):
    links = await service.find_cross_links(post_id)
    return [CrossLinkResponse.from_link(link) for link in links]


@router.get("/{post_id}/cluster", response_model=ClusterResponse)
async def get_cluster(
    post_id: str,
    top: int = Query(3, ge=1, le=20, description="Direct continuations to highlight"),
    shown_depth: int = Query(3, ge=1, le=50, description="Levels the card renders"),
    service: LineageService = Depends(get_lineage_service),
):
    try:
        cluster = await service.build_cluster(post_id)
    except NotFoundError as e:
        raise _not_found(e)

    return ClusterResponse(
        spark=PostSummary.from_post(cluster.spark),
        continuations=[_continuation(node) for node in cluster.continuations],
        top_continuations=[_continuation(node) for node in top_continuations(cluster, top)],
        deeper_count=count_deeper_continuations(cluster, shown_depth),
        total_continuations=cluster.total_continuations,
        latest_activity_at=cluster.latest_activity_at,
        truncated=cluster.truncated,
    )
