"""
Relations API router

Writes go through LineageService, which checks lineage rules and then hands
the edge to the relation store.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from ..errors import NotFoundError, ValidationError
from ..models import Relation
from ..services import LineageService
from .dependencies import get_lineage_service

router = APIRouter(prefix="/api/relations", tags=["Relations"])


class RelationCreate(BaseModel):
    """Request model for creating a relation"""
    parent_post_id: str
    child_post_id: str
    relation_type: str  # 'origin', 'reply', 'quote', 'cross_link' (legacy 'hard'/'soft' accepted)


class CrossLinksCreate(BaseModel):
    """Request model for linking one post to several"""
    parent_post_id: str
    child_post_ids: List[str] = Field(default_factory=list)


class RelationResponse(BaseModel):
    """Response model for a relation"""
    id: str
    parent_post_id: str
    child_post_id: str
    relation_type: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_relation(cls, relation: Relation) -> 'RelationResponse':
        return cls(
            id=relation.id,
            parent_post_id=relation.parent_post_id,
            child_post_id=relation.child_post_id,
            relation_type=relation.relation_type.value,
            created_at=relation.created_at,
        )


@router.post("", response_model=RelationResponse, status_code=status.HTTP_201_CREATED)
async def create_relation(
    data: RelationCreate,
    service: LineageService = Depends(get_lineage_service),
):
    """
    Create a relation between two posts.

    Creating an edge that already exists returns the existing edge.
    """
    try:
        relation = await service.link_posts(data.parent_post_id, data.child_post_id, data.relation_type)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return RelationResponse.from_relation(relation)


@router.post("/cross-links", response_model=List[RelationResponse], status_code=status.HTTP_201_CREATED)
async def create_cross_links(
    data: CrossLinksCreate,
    service: LineageService = Depends(get_lineage_service),
):
    """Cross-link a post to several others. Nothing is written if any link is invalid."""
    try:
        relations = await service.link_many(data.parent_post_id, data.child_post_ids)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return [RelationResponse.from_relation(r) for r in relations]


@router.delete("/{relation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_relation(
    relation_id: str,
    service: LineageService = Depends(get_lineage_service),
):
    """Delete a relation. Ownership is checked upstream of this service."""
    try:
        await service.unlink(relation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)
