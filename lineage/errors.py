"""
Lineage errors

ValidationError and NotFoundError are surfaced to callers. IntegrityViolation
marks corrupt store data (a `reply` cycle) and is normally logged and recovered
by the upward walk rather than raised; see RootResolver.
"""
from typing import List, Optional


class LineageError(Exception):
    """Base class for lineage graph errors."""
    pass


# =============================================================================
# Validation
# =============================================================================

class ValidationError(LineageError):
    """Raised when a relation request is malformed."""
    pass


class SelfLoopError(ValidationError):
    """Raised when a relation would link a post to itself."""
    pass


class DuplicateReplyParentError(ValidationError):
    """Raised when a post that already continues from a parent gets a second `reply` parent."""

    def __init__(self, child_post_id: str, existing_parent_id: Optional[str] = None):
        self.child_post_id = child_post_id
        self.existing_parent_id = existing_parent_id
        detail = f" (already continues {existing_parent_id})" if existing_parent_id else ""
        super().__init__(f"Post {child_post_id} already has a reply parent{detail}")


class ReplyCycleError(ValidationError):
    """Raised when a `reply` edge would make a post continue one of its own continuations."""

    def __init__(self, parent_post_id: str, child_post_id: str):
        self.parent_post_id = parent_post_id
        self.child_post_id = child_post_id
        super().__init__(
            f"Post {child_post_id} is already an ancestor of {parent_post_id}; "
            f"a reply edge between them would form a cycle"
        )


class UnknownRelationTypeError(ValidationError):
    """Raised for relation types that are neither canonical nor a legacy alias."""
    pass


class LineageRuleError(ValidationError):
    """Raised when the two post kinds may not be linked."""
    pass


# =============================================================================
# Lookup
# =============================================================================

class NotFoundError(LineageError):
    """Raised when a post or relation id does not exist (or is not active)."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


# =============================================================================
# Integrity
# =============================================================================

class IntegrityViolation(LineageError):
    """
    Raised (or logged) when an upward `reply` walk revisits a post.

    The single-reply-parent constraint makes `reply` edges a forest, so a cycle
    means the store accepted a write it should have rejected.
    """

    def __init__(self, start_post_id: str, reentry_post_id: str, path: List[str]):
        self.start_post_id = start_post_id
        self.reentry_post_id = reentry_post_id
        self.path = list(path)
        chain = ' -> '.join(self.path + [reentry_post_id])
        super().__init__(
            f"reply cycle walking up from {start_post_id}: {chain}"
        )
