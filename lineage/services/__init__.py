"""
Traversal services

All read-only over the stores they are given; LineageService ties them
together for the UI layer.
"""
from .limits import TraversalLimits, DEFAULT_LIMITS
from .root_resolver import RootResolver
from .thread_builder import ThreadBuilder, flatten_thread
from .breadcrumbs import BreadcrumbBuilder
from .orbit import OrbitResolver
from .clusters import ClusterBuilder, top_continuations, count_deeper_continuations
from .lineage_rules import can_link, check_link
from .lineage_service import LineageService

__all__ = [
    'TraversalLimits',
    'DEFAULT_LIMITS',
    'RootResolver',
    'ThreadBuilder',
    'flatten_thread',
    'BreadcrumbBuilder',
    'OrbitResolver',
    'ClusterBuilder',
    'top_continuations',
    'count_deeper_continuations',
    'can_link',
    'check_link',
    'LineageService',
]
