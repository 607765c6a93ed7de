import typing

from gql import make_schema
from graphql import GraphQLResolveInfo, GraphQLSchema
from graphql.pyutils import camel_to_snake

from .references import TYPENAME

Resolver = typing.Callable[..., typing.Any]


class Subgraph:
    """Resolver map for one federated service.

    Works like python-gql's ``@query`` / ``@field_resolver`` decorators, but
    the map belongs to the instance, so several subgraphs can live in one
    process. Arguments reach resolvers as snake_case keywords.
    """

    def __init__(self, name: str, type_defs: str) -> None:
        self.name = name
        self.type_defs = type_defs
        self.resolvers: typing.Dict[typing.Tuple[str, str], Resolver] = {}

    def field(self, type_name: str, field_name: str) -> typing.Callable[[Resolver], Resolver]:
        def wrap(func: Resolver) -> Resolver:
            self.resolvers[(type_name, field_name)] = func
            return func

        return wrap

    def query(self, field_name: str) -> typing.Callable[[Resolver], Resolver]:
        return self.field('Query', field_name)

    def make_schema(self) -> GraphQLSchema:
        schema = make_schema(self.type_defs, federation=True)
        for (type_name, field_name), resolver in self.resolvers.items():
            object_type = schema.get_type(type_name)
            if object_type is None or field_name not in object_type.fields:
                raise ValueError(f'{self.name}: {type_name}.{field_name} is not declared in the schema.')
            field = object_type.fields[field_name]
            for arg_name, arg in field.args.items():
                arg.out_name = camel_to_snake(arg_name)
            field.resolve = resolver

        query_fields = schema.query_type.fields
        query_fields['_service'].resolve = self.resolve_service
        query_fields['_entities'].resolve = resolve_entities
        schema.get_type('_Entity').resolve_type = resolve_entity_type
        return schema

    def resolve_service(self, _, info: GraphQLResolveInfo) -> typing.Dict[str, str]:
        return {'sdl': self.type_defs}


def resolve_entities(_, info: GraphQLResolveInfo, representations: typing.List[dict]) -> typing.List:
    return info.context['references'].resolve_representations(representations)


def resolve_entity_type(entity: typing.Mapping[str, typing.Any], info: GraphQLResolveInfo, abstract_type) -> str:
    return entity[TYPENAME]
