import dataclasses

import pytest

from bookgraph.entities import EntityRegistry, EntityType, default_registry
from bookgraph.errors import UnknownEntity


def test_default_registry_declares_every_entity():
    registry = default_registry()

    assert {entity_type.name for entity_type in registry} == {'User', 'Listing', 'Message'}
    assert registry.lookup('User') == EntityType('User', ('id',), owner='user', path='/api/users/{id}')
    assert registry.lookup('Listing').owner == 'listing'
    assert registry.lookup('Message').path is None


def test_lookup_unknown_type():
    with pytest.raises(UnknownEntity) as exc_info:
        default_registry().lookup('Review')

    assert exc_info.value.type_name == 'Review'
    assert isinstance(exc_info.value, LookupError)


def test_registry_is_immutable():
    registry = default_registry()
    user = registry.lookup('User')

    with pytest.raises(dataclasses.FrozenInstanceError):
        user.owner = 'listing'
    with pytest.raises(TypeError):
        registry._types['Review'] = user


def test_duplicate_registration_fails_fast():
    with pytest.raises(ValueError, match='twice'):
        EntityRegistry([EntityType('User', ('id',), owner='user'), EntityType('User', ('id',), owner='listing')])


def test_entity_needs_a_key():
    with pytest.raises(ValueError, match='key field'):
        EntityType('User', (), owner='user')


def test_owned_by():
    registry = default_registry()

    assert [entity_type.name for entity_type in registry.owned_by('listing')] == ['Listing']
    assert registry.owned_by('gateway') == []
    assert 'User' in registry
    assert len(registry) == 3
