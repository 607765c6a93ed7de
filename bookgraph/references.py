import logging
import typing
from dataclasses import dataclass

from .entities import EntityRegistry, EntityType
from .errors import InvalidKey, UpstreamError, UpstreamNotFound
from .upstream import UpstreamClient, path_segment

logger = logging.getLogger(__name__)

TYPENAME = '__typename'


@dataclass(frozen=True)
class Reference:
    typename: str
    keys: typing.Tuple[typing.Tuple[str, typing.Any], ...]

    def key_values(self) -> typing.Dict[str, typing.Any]:
        return dict(self.keys)

    def to_dict(self) -> typing.Dict[str, typing.Any]:
        return {TYPENAME: self.typename, **self.key_values()}


class ReferenceResolver:
    """Builds entity references and resolves the ones this service owns."""

    def __init__(self, registry: EntityRegistry, upstream: UpstreamClient, service: str) -> None:
        self.registry = registry
        self.upstream = upstream
        self.service = service

    def make_reference(self, type_name: str, key_values: typing.Mapping[str, typing.Any]) -> Reference:
        entity_type = self.registry.lookup(type_name)
        key_values = key_values or {}
        missing = [field for field in entity_type.key_fields if key_values.get(field) in (None, '')]
        if missing:
            raise InvalidKey(type_name, missing)
        return Reference(type_name, tuple((field, key_values[field]) for field in entity_type.key_fields))

    def reference_from_representation(self, representation: typing.Mapping[str, typing.Any]) -> Reference:
        return self.make_reference(representation.get(TYPENAME), representation)

    async def resolve_reference(self, reference: Reference) -> typing.Optional[typing.Dict[str, typing.Any]]:
        entity_type = self.registry.lookup(reference.typename)
        if entity_type.owner != self.service:
            # only extension fields are served here, the key is all they need
            return reference.to_dict()
        if entity_type.path is None:
            logger.debug('%s has no authoritative fetch, resolving %s as absent', reference.typename, reference)
            return None

        path = self._path(entity_type, reference)
        try:
            body = await self.upstream.get_json(path)
        except UpstreamNotFound:
            logger.debug('%s absent upstream', reference)
            return None

        if not isinstance(body, dict):
            raise UpstreamError(
                f'Upstream returned a {type(body).__name__} for {reference}, expected an object.', url=path
            )
        entity = {**body, **reference.to_dict()}
        logger.debug('%s resolved', reference)
        return entity

    async def resolve_representation(
        self, representation: typing.Mapping[str, typing.Any]
    ) -> typing.Optional[typing.Dict[str, typing.Any]]:
        return await self.resolve_reference(self.reference_from_representation(representation))

    def resolve_representations(
        self, representations: typing.Sequence[typing.Mapping[str, typing.Any]]
    ) -> typing.List[typing.Awaitable[typing.Optional[typing.Dict[str, typing.Any]]]]:
        """One awaitable per representation, so each item fails on its own."""
        return [self.resolve_representation(representation) for representation in representations]

    @staticmethod
    def _path(entity_type: EntityType, reference: Reference) -> str:
        return entity_type.path.format(**{k: path_segment(v) for k, v in reference.keys})
