import asyncio
import logging
import typing
from urllib.parse import quote

import httpx

from .errors import UpstreamError, UpstreamNotFound, UpstreamStatusError, UpstreamUnreachable

logger = logging.getLogger(__name__)

NOT_FOUND_STATUSES = frozenset({404, 410})


def path_segment(value: typing.Any) -> str:
    return quote(str(value), safe='')


class UpstreamClient:
    """Async GET-only client for the REST origin a subgraph proxies.

    Every call opens its own ``httpx.AsyncClient`` so a cancelled resolver
    closes its connection with it.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retries: int = 0,
        backoff: float = 0.2,
        transport: httpx.AsyncBaseTransport = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retries = max(retries, 0)
        self.backoff = backoff
        self.transport = transport

    @classmethod
    def from_settings(cls, settings, transport: httpx.AsyncBaseTransport = None) -> 'UpstreamClient':
        return cls(
            settings.base_url,
            timeout=settings.upstream_timeout,
            retries=settings.upstream_retries,
            backoff=settings.upstream_backoff,
            transport=transport,
        )

    async def get_json(
        self,
        path: str,
        *,
        params: typing.Mapping[str, typing.Any] = None,
        headers: typing.Mapping[str, str] = None,
    ) -> typing.Any:
        """GET ``path`` and return the decoded JSON body.

        Raises ``UpstreamNotFound`` on 404/410, ``UpstreamStatusError`` on any
        other non-2xx, ``UpstreamUnreachable`` once transport failures have
        exhausted the retries.
        """
        url = f'{self.base_url}{path}'
        response = await self._send(url, params=params, headers=headers)
        if response.status_code in NOT_FOUND_STATUSES:
            raise UpstreamNotFound(response.status_code, url=url)
        if not response.is_success:
            raise UpstreamStatusError(response.status_code, url=url)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f'Upstream returned invalid JSON for {url}.', url=url) from exc

    async def _send(self, url, params=None, headers=None) -> httpx.Response:
        attempt = 0
        while True:
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                    response = await client.get(url, params=params, headers=headers)
                logger.debug('GET %s -> %s', response.request.url, response.status_code)
                return response
            except httpx.TransportError as exc:
                if attempt >= self.retries:
                    logger.warning('GET %s failed after %d attempt(s): %r', url, attempt + 1, exc)
                    raise UpstreamUnreachable(f'Upstream unreachable: {exc!r}', url=url) from exc
                delay = self.backoff * 2 ** attempt
                attempt += 1
                logger.warning('GET %s failed (%r), retry %d in %.2fs', url, exc, attempt, delay)
                await asyncio.sleep(delay)
