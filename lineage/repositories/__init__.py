"""
Repository Pattern - Storage abstraction layer

Repositories hide storage details from the traversal services, which only
see the PostStore / RelationStore contracts.

Storage:
- PostRepository: PostgreSQL (posts)
- RelationRepository: PostgreSQL (post_relations); sole writer of edges
- InMemory*Repository: same contracts without a database
"""
from .interfaces import PostStore, RelationStore
from .memory import InMemoryPostRepository, InMemoryRelationRepository
from .post_repository import PostRepository
from .relation_repository import RelationRepository

__all__ = [
    'PostStore',
    'RelationStore',
    'PostRepository',
    'RelationRepository',
    'InMemoryPostRepository',
    'InMemoryRelationRepository',
]
