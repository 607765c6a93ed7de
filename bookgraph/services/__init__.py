import logging
import typing

import httpx

from ..applications import GraphQL
from ..config import Settings
from ..entities import EntityRegistry, default_registry
from ..references import ReferenceResolver
from ..subgraph import Subgraph
from ..upstream import UpstreamClient
from . import listing, messaging, user

logger = logging.getLogger(__name__)

SUBGRAPHS: typing.Dict[str, Subgraph] = {
    'user': user.subgraph,
    'listing': listing.subgraph,
    'messaging': messaging.subgraph,
}


def create_app(
    name: str,
    settings: Settings = None,
    *,
    registry: EntityRegistry = None,
    transport: httpx.AsyncBaseTransport = None,
) -> GraphQL:
    try:
        subgraph = SUBGRAPHS[name]
    except KeyError:
        raise ValueError(f'Unknown subgraph {name!r}, expected one of {", ".join(SUBGRAPHS)}.') from None

    settings = settings or Settings()
    registry = registry or default_registry()
    client = UpstreamClient.from_settings(settings, transport=transport)
    references = ReferenceResolver(registry, client, service=name)

    def context_builder() -> typing.Dict[str, typing.Any]:
        return {'upstream': client, 'references': references}

    logger.info('%s subgraph proxying %s', name, client.base_url)
    return GraphQL(
        subgraph.make_schema(),
        name=name,
        debug=settings.debug,
        playground=settings.playground,
        context_builder=context_builder,
    )
