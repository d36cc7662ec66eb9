"""
Write-boundary checks shared by every relation store
"""
from typing import Iterable, List

from ..errors import SelfLoopError, ValidationError


def check_pair(parent_id: str, child_id: str) -> None:
    """Reject empty ids and self-loops."""
    if not parent_id or not child_id:
        raise ValidationError("Both parent_post_id and child_post_id are required")
    if parent_id == child_id:
        raise SelfLoopError(f"Post {parent_id} cannot be related to itself")


def unique_children(parent_id: str, child_ids: Iterable[str]) -> List[str]:
    """
    Deduplicate a batch of child ids (first occurrence wins) and validate
    every pair before anything is written.
    """
    children = list(dict.fromkeys(child_ids))
    for child_id in children:
        check_pair(parent_id, child_id)
    return children
