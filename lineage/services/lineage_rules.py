"""
Lineage rules - which posts may be linked

Allowed, for every relation type:
- Spark <-> Spark
- Spark <-> Business Insight
- Business Insight <-> Business Insight

Open ideas may only appear as the parent of an 'origin' relation, pointing
at the first Spark (or Business Insight) built on them.

Everything else is rejected.
"""
from typing import Union

from ..errors import LineageRuleError
from ..models import Post, PostType, RelationType, normalize_relation_type


def is_linkable(post: Post) -> bool:
    """Spark or Business Insight"""
    return post.is_spark or post.is_business_insight


def can_link(parent: Post, child: Post, relation_type: Union[RelationType, str]) -> bool:
    relation_type = normalize_relation_type(relation_type)

    if parent.type == PostType.OPEN_IDEA:
        return relation_type == RelationType.ORIGIN and is_linkable(child)

    return is_linkable(parent) and is_linkable(child)


def check_link(parent: Post, child: Post, relation_type: Union[RelationType, str]) -> None:
    """
    Raises:
        LineageRuleError: The pair may not be linked with this type
    """
    if not can_link(parent, child, relation_type):
        relation_type = normalize_relation_type(relation_type)
        raise LineageRuleError(
            f"Cannot link {parent.type.value}/{parent.kind.value if parent.kind else '-'} {parent.id} "
            f"to {child.type.value}/{child.kind.value if child.kind else '-'} {child.id} "
            f"with '{relation_type.value}'"
        )
