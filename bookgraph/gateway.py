"""Gateway side of the federation.

Query planning and response stitching are done by Apollo Router; this module
produces the subgraph list and config files it starts from, and probes the
subgraphs the way the router does at composition time.
"""
import asyncio
import logging
import typing
from pathlib import Path

import httpx
import yaml

from .config import Settings
from .errors import UpstreamError, UpstreamStatusError, UpstreamUnreachable

logger = logging.getLogger(__name__)

SDL_QUERY = '{ _service { sdl } }'
FORWARDED_HEADERS = ('authorization',)


class SubgraphEndpoint(typing.NamedTuple):
    name: str
    url: str


def service_list(settings: Settings) -> typing.List[SubgraphEndpoint]:
    return [SubgraphEndpoint(name, url) for name, url in settings.subgraph_urls.items()]


def supergraph_config(settings: Settings) -> typing.Dict[str, typing.Any]:
    """``rover supergraph compose`` input."""
    return {
        'federation_version': settings.federation_version,
        'subgraphs': {
            endpoint.name: {
                'routing_url': endpoint.url,
                'schema': {'subgraph_url': endpoint.url},
            }
            for endpoint in service_list(settings)
        },
    }


def router_config(settings: Settings) -> typing.Dict[str, typing.Any]:
    return {
        'supergraph': {
            'listen': f'{settings.host}:{settings.port_for("gateway")}',
            'introspection': True,
        },
        'headers': {
            'all': {'request': [{'propagate': {'named': header}} for header in FORWARDED_HEADERS]},
        },
        'subscription': {'enabled': False},
    }


def write_configs(settings: Settings, directory: typing.Union[str, Path]) -> typing.List[Path]:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, config in (
        ('supergraph.yaml', supergraph_config(settings)),
        ('router.yaml', router_config(settings)),
    ):
        path = directory / filename
        path.write_text(yaml.safe_dump(config, sort_keys=False))
        logger.info('wrote %s', path)
        written.append(path)
    return written


async def fetch_sdl(
    endpoint: SubgraphEndpoint,
    *,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport = None,
) -> str:
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(endpoint.url, json={'query': SDL_QUERY})
    except httpx.TransportError as exc:
        raise UpstreamUnreachable(f'{endpoint.name} unreachable: {exc!r}', url=endpoint.url) from exc
    if not response.is_success:
        raise UpstreamStatusError(response.status_code, url=endpoint.url)

    try:
        body = response.json()
    except ValueError as exc:
        raise UpstreamError(f'{endpoint.name} returned invalid JSON.', url=endpoint.url) from exc
    if body.get('errors'):
        raise UpstreamError(f'{endpoint.name} rejected the SDL query: {body["errors"]}', url=endpoint.url)
    return body['data']['_service']['sdl']


async def check_subgraphs(
    settings: Settings, *, transport: httpx.AsyncBaseTransport = None
) -> typing.Dict[str, typing.Optional[str]]:
    """Map each subgraph name to ``None`` when healthy, else the failure."""
    endpoints = service_list(settings)
    results = await asyncio.gather(
        *(fetch_sdl(endpoint, timeout=settings.upstream_timeout, transport=transport) for endpoint in endpoints),
        return_exceptions=True,
    )
    report = {}
    for endpoint, result in zip(endpoints, results):
        if isinstance(result, Exception):
            logger.warning('subgraph %s failed: %s', endpoint.name, result)
            report[endpoint.name] = str(result)
        else:
            logger.info('subgraph %s ok (%d bytes of SDL)', endpoint.name, len(result))
            report[endpoint.name] = None
    return report
