import logging
import typing
from functools import wraps

from graphql import GraphQLResolveInfo

from .errors import UpstreamStatusError
from .upstream import UpstreamClient

logger = logging.getLogger(__name__)

ResolverFn = typing.Callable[..., typing.Awaitable[typing.Any]]


def degrade(fallback: typing.Callable[[], typing.Any]) -> typing.Callable[[ResolverFn], ResolverFn]:
    """Turn a non-2xx upstream response into ``fallback()``.

    Transport failures still propagate and become field errors.
    """

    def wrap(func: ResolverFn) -> ResolverFn:
        @wraps(func)
        async def _wrap(parent: typing.Any, info: GraphQLResolveInfo, **kwargs: typing.Any) -> typing.Any:
            try:
                return await func(parent, info, **kwargs)
            except UpstreamStatusError as exc:
                logger.warning('%s.%s degraded: %s', info.parent_type.name, info.field_name, exc)
                return fallback()

        return _wrap

    return wrap


def single(func: ResolverFn) -> ResolverFn:
    return degrade(lambda: None)(func)


def many(func: ResolverFn) -> ResolverFn:
    return degrade(list)(func)


def upstream(info: GraphQLResolveInfo) -> UpstreamClient:
    return info.context['upstream']


def forwarded_auth(info: GraphQLResolveInfo) -> typing.Dict[str, str]:
    """The inbound Authorization header, verbatim, or nothing."""
    authorization = info.context['request'].headers.get('authorization')
    if authorization is None:
        return {}
    return {'Authorization': authorization}
