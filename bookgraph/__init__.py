from .applications import GraphQL
from .entities import EntityRegistry, EntityType, default_registry
from .references import Reference, ReferenceResolver
from .subgraph import Subgraph
from .upstream import UpstreamClient

__all__ = [
    'EntityRegistry',
    'EntityType',
    'GraphQL',
    'Reference',
    'ReferenceResolver',
    'Subgraph',
    'UpstreamClient',
    'default_registry',
]
