import json
import logging
import traceback
import typing

from gql.playground import PLAYGROUND_HTML
from graphql import GraphQLError, GraphQLSchema, Middleware, graphql
from starlette import status
from starlette.applications import Starlette
from starlette.background import BackgroundTasks
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.routing import BaseRoute, Route
from starlette.types import Receive, Scope, Send

logger = logging.getLogger(__name__)

ERROR_FORMATER = typing.Callable[[GraphQLError], typing.Dict[str, typing.Any]]
CONTEXT_BUILDER = typing.Callable[[], typing.Dict[str, typing.Any]]


class GraphQL(Starlette):
    def __init__(
        self,
        schema: GraphQLSchema,
        *,
        name: str = 'graphql',
        playground: bool = True,
        debug: bool = False,
        routes: typing.List[BaseRoute] = None,
        path: str = '/',
        health_path: str = '/health',
        error_formater: ERROR_FORMATER = None,
        graphql_middleware: Middleware = None,
        context_builder: CONTEXT_BUILDER = None,
        **kwargs,
    ):
        self.schema = schema
        self.name = name
        routes = list(routes or [])
        routes.extend(
            [
                Route(health_path, self.health, methods=['GET']),
                Route(
                    path,
                    ASGIApp(
                        self.schema,
                        debug=debug,
                        playground=playground,
                        error_formater=error_formater,
                        graphql_middleware=graphql_middleware,
                        context_builder=context_builder,
                    ),
                ),
            ]
        )
        super().__init__(debug=debug, routes=routes, **kwargs)

    async def health(self, request: Request) -> JSONResponse:
        return JSONResponse({'status': 'ok', 'service': self.name})


class ASGIApp:
    def __init__(
        self,
        schema: GraphQLSchema,
        debug: bool = False,
        playground: bool = True,
        error_formater: ERROR_FORMATER = None,
        graphql_middleware: Middleware = None,
        context_builder: CONTEXT_BUILDER = None,
    ) -> None:
        self.schema = schema
        self.playground = playground
        self.error_formater = error_formater or self.format_error
        self.debug = debug
        self.middleware = graphql_middleware
        self.context_builder = context_builder

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive=receive, send=send)
        response = await self.handle_graphql(request)
        await response(scope, receive, send)

    def format_error(self, error: GraphQLError) -> typing.Dict[str, typing.Any]:
        if not error:
            raise ValueError("Received null or undefined error.")
        formatted = dict(
            message=error.message or "An unknown error occurred.",
            locations=[l._asdict() for l in error.locations] if error.locations else None,
            path=error.path,
        )
        extensions = dict(error.extensions or {})
        if self.debug and error.original_error:
            original_error = error.original_error
            exception = dict(extensions.get('exception', {}))
            exception['traceback'] = traceback.format_exception(
                type(original_error), original_error, original_error.__traceback__
            )
            extensions['exception'] = exception
        if extensions:
            formatted.update(extensions=extensions)
        return formatted

    async def handle_graphql(self, request: Request) -> Response:
        if request.method in ('GET', 'HEAD'):
            if 'text/html' in request.headers.get('Accept', ''):
                if not self.playground:
                    return PlainTextResponse('Not Found', status_code=status.HTTP_404_NOT_FOUND)
                return HTMLResponse(PLAYGROUND_HTML)

            data = request.query_params  # type: typing.Mapping[str, typing.Any]

        elif request.method == 'POST':
            content_type = request.headers.get('Content-Type', '')

            if 'application/json' in content_type:
                try:
                    data = await request.json()
                except ValueError:
                    return PlainTextResponse(
                        'Request body is not valid JSON', status_code=status.HTTP_400_BAD_REQUEST
                    )
            elif 'application/graphql' in content_type:
                body = await request.body()
                data = {'query': body.decode()}
            elif 'query' in request.query_params:
                data = request.query_params
            else:
                return PlainTextResponse(
                    'Unsupported Media Type', status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                )
        else:
            return PlainTextResponse(
                'Method Not Allowed', status_code=status.HTTP_405_METHOD_NOT_ALLOWED
            )

        try:
            query = data['query']
            variables = data.get('variables')
            operation_name = data.get('operationName')
        except (KeyError, TypeError, AttributeError):
            return PlainTextResponse(
                'No GraphQL query found in the request', status_code=status.HTTP_400_BAD_REQUEST,
            )
        if not isinstance(query, str) or not query:
            return PlainTextResponse(
                'No GraphQL query found in the request', status_code=status.HTTP_400_BAD_REQUEST,
            )
        if isinstance(variables, str):
            try:
                variables = json.loads(variables)
            except ValueError:
                return PlainTextResponse(
                    'variables sent invalid JSON', status_code=status.HTTP_400_BAD_REQUEST,
                )

        background = BackgroundTasks()
        context = self.context_builder() if self.context_builder else {}
        context.update(request=request, background=background)

        result = await graphql(
            self.schema,
            query,
            variable_values=variables,
            operation_name=operation_name,
            context_value=context,
            middleware=self.middleware,
        )
        if result.errors:
            for error in result.errors:
                logger.warning('GraphQL error at %s: %s', error.path, error.message)
        error_data = [self.error_formater(err) for err in result.errors] if result.errors else None
        response_data = {'data': result.data, 'errors': error_data}

        return JSONResponse(response_data, status_code=status.HTTP_200_OK, background=background)
