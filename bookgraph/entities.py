import typing
from dataclasses import dataclass
from types import MappingProxyType

from .errors import UnknownEntity


@dataclass(frozen=True)
class EntityType:
    """Federated entity declaration.

    ``owner`` names the subgraph that is authoritative for the full field set.
    ``path`` is the upstream path template used for that authoritative fetch,
    formatted with the key values; ``None`` means the owner cannot fetch the
    entity by key.
    """

    name: str
    key_fields: typing.Tuple[str, ...]
    owner: str
    path: typing.Optional[str] = None

    def __post_init__(self) -> None:
        if not self.key_fields:
            raise ValueError(f'Entity type {self.name!r} must declare at least one key field.')


class EntityRegistry:
    def __init__(self, entity_types: typing.Iterable[EntityType]) -> None:
        types: typing.Dict[str, EntityType] = {}
        for entity_type in entity_types:
            if entity_type.name in types:
                raise ValueError(f'Entity type {entity_type.name!r} registered twice.')
            types[entity_type.name] = entity_type
        self._types = MappingProxyType(types)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    def __iter__(self) -> typing.Iterator[EntityType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def lookup(self, type_name: str) -> EntityType:
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownEntity(type_name) from None

    def owned_by(self, service: str) -> typing.List[EntityType]:
        return [entity_type for entity_type in self if entity_type.owner == service]


def default_registry() -> EntityRegistry:
    return EntityRegistry(
        [
            EntityType('User', ('id',), owner='user', path='/api/users/{id}'),
            EntityType('Listing', ('id',), owner='listing', path='/api/books/{id}'),
            # no upstream endpoint returns a single message
            EntityType('Message', ('id',), owner='messaging'),
        ]
    )
