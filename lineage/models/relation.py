"""
Relation domain model

A directed, typed edge between two posts (parent -> child).

ID format: rl_xxxxxxxx (11 chars)
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from ..errors import UnknownRelationTypeError
from ..utils.datetime_utils import to_datetime
from ..utils.id_generator import generate_relation_id


class RelationType(str, Enum):
    """Canonical relation kinds"""
    ORIGIN = "origin"          # child originates from parent (idea -> first spark)
    REPLY = "reply"            # child continues parent; the "hard" thread edge
    QUOTE = "quote"            # child quotes parent
    CROSS_LINK = "cross_link"  # related, neither continuation nor quote


# Legacy relation type strings still sent by older clients
LEGACY_ALIASES = {
    'hard': RelationType.REPLY,
    'soft': RelationType.CROSS_LINK,
}

# Display labels for the cross-links feed
RELATION_LABELS = {
    RelationType.ORIGIN: 'Origin',
    RelationType.REPLY: 'Continuation',
    RelationType.QUOTE: 'Quote',
    RelationType.CROSS_LINK: 'Cross-link',
}


def normalize_relation_type(value: Union[RelationType, str]) -> RelationType:
    """
    Map a relation type (canonical or legacy) to its canonical RelationType.

    Raises:
        UnknownRelationTypeError: If value is neither canonical nor a known alias
    """
    if isinstance(value, RelationType):
        return value
    if not isinstance(value, str):
        raise UnknownRelationTypeError(f"Invalid relation type: {value!r}")

    key = value.strip().lower()
    if key in LEGACY_ALIASES:
        return LEGACY_ALIASES[key]
    try:
        return RelationType(key)
    except ValueError:
        raise UnknownRelationTypeError(
            f"Invalid relation type: {value!r}. "
            f"Must be one of: {[t.value for t in RelationType]}"
        ) from None


@dataclass
class Relation:
    """
    Relation domain model - storage-agnostic representation

    Storage: PostgreSQL (post_relations table)
    """
    id: str  # Short ID: rl_xxxxxxxx
    parent_post_id: str
    child_post_id: str
    relation_type: RelationType
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Generate ID if needed, coerce relation type and timestamp"""
        if not self.id:
            self.id = generate_relation_id()
        self.relation_type = normalize_relation_type(self.relation_type)
        self.created_at = to_datetime(self.created_at)

    @classmethod
    def from_row(cls, row) -> 'Relation':
        """Build from an asyncpg Record or dict"""
        return cls(
            id=row['id'],
            parent_post_id=row['parent_post_id'],
            child_post_id=row['child_post_id'],
            relation_type=row['relation_type'],
            created_at=row['created_at'],
        )

    @property
    def key(self) -> tuple:
        """Logical identity of the edge"""
        return (self.parent_post_id, self.child_post_id, self.relation_type)

    @property
    def is_hard(self) -> bool:
        """Continuation edge (thread structure)"""
        return self.relation_type == RelationType.REPLY

    @property
    def is_soft(self) -> bool:
        """Reference edge: origin, quote or cross_link"""
        return self.relation_type != RelationType.REPLY

    @property
    def label(self) -> str:
        return RELATION_LABELS[self.relation_type]

    def touches(self, post_id: str) -> bool:
        return post_id in (self.parent_post_id, self.child_post_id)

    def other_side(self, post_id: str) -> str:
        """Id of the post at the other end of this edge"""
        if post_id == self.parent_post_id:
            return self.child_post_id
        if post_id == self.child_post_id:
            return self.parent_post_id
        raise ValueError(f"Relation {self.id} does not touch post {post_id}")
