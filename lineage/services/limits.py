"""
Traversal bounds handed to the services

Services never read global settings; whoever wires them passes limits in.
"""
from dataclasses import dataclass
from typing import Optional

from ..config.settings import Settings, get_settings


@dataclass(frozen=True)
class TraversalLimits:
    max_nodes: int = 500
    max_depth: int = 50
    excerpt_length: int = 100
    raise_on_cycle: bool = False

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'TraversalLimits':
        settings = settings or get_settings()
        return cls(
            max_nodes=settings.max_tree_nodes,
            max_depth=settings.max_tree_depth,
            excerpt_length=settings.excerpt_length,
            raise_on_cycle=settings.raise_on_cycle,
        )


DEFAULT_LIMITS = TraversalLimits()
