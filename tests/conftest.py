import typing

import httpx
import pytest
from starlette.testclient import TestClient

from bookgraph.config import Settings
from bookgraph.services import create_app

UPSTREAM = 'http://upstream.test'
TOKEN = 'Bearer ada-token'


class FakeBookApi:
    """In-memory stand-in for the book-swap REST API."""

    def __init__(self) -> None:
        self.users = {
            '7': {
                'id': '7',
                'username': 'ada',
                'email': 'ada@example.com',
                'role': 'student',
                'firstName': 'Ada',
                'lastName': 'Lovelace',
                'verified': True,
            },
            '8': {
                'id': '8',
                'username': 'alan',
                'email': 'alan@example.com',
                'role': 'student',
                'firstName': 'Alan',
                'lastName': 'Turing',
                'verified': False,
            },
        }
        self.books = {
            '123': {
                'id': '123',
                'title': 'Linear Algebra Done Right',
                'description': 'Some pencil marks.',
                'price': 25.5,
                'condition': 'good',
                'ownerId': '7',
                'postedAt': '2024-01-02T10:00:00Z',
                'imageUrl': None,
                'courseCode': 'MATH221',
            },
            '124': {
                'id': '124',
                'title': 'Apartment Hunting for Students',
                'description': None,
                'price': 5.0,
                'condition': 'worn',
                'ownerId': '8',
                'postedAt': '2024-02-03T10:00:00Z',
                'imageUrl': 'http://img.test/124.png',
                'courseCode': None,
            },
        }
        self.messages = [
            {'id': 'm1', 'senderId': '8', 'receiverId': '7', 'content': 'Still available?', 'timestamp': '1'},
            {'id': 'm2', 'senderId': '7', 'receiverId': '8', 'content': 'Yes!', 'timestamp': '2'},
        ]
        self.requests: typing.List[httpx.Request] = []
        self.fail_with: typing.Optional[Exception] = None
        self.status_override: typing.Optional[int] = None
        self.bodies: typing.Dict[str, typing.Any] = {}
        self.failing_paths: typing.Dict[str, Exception] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        if self.status_override is not None:
            return httpx.Response(self.status_override, json={'error': 'overridden'})
        if request.url.path in self.failing_paths:
            raise self.failing_paths[request.url.path]
        if request.url.path in self.bodies:
            return httpx.Response(200, json=self.bodies[request.url.path])

        parts = request.url.path.strip('/').split('/')
        params = request.url.params
        authorized = request.headers.get('authorization') == TOKEN

        if parts[:2] == ['api', 'users'] and len(parts) == 3:
            return self._one(self.users.get(parts[2]))
        if parts == ['api', 'auth', 'user']:
            return httpx.Response(200, json=self.users['7']) if authorized else self._unauthorized()
        if parts == ['api', 'books', 'search']:
            needle = params.get('query', '').lower()
            found = [book for book in self.books.values() if needle in book['title'].lower()]
            if 'maxPrice' in params:
                found = [book for book in found if book['price'] <= float(params['maxPrice'])]
            return httpx.Response(200, json=found)
        if parts == ['api', 'books', 'my-listings']:
            if not authorized:
                return self._unauthorized()
            return httpx.Response(200, json=self._books_of('7'))
        if parts == ['api', 'books']:
            if 'ownerId' in params:
                return httpx.Response(200, json=self._books_of(params['ownerId']))
            return httpx.Response(200, json=list(self.books.values()))
        if parts[:2] == ['api', 'books'] and len(parts) == 3:
            return self._one(self.books.get(parts[2]))
        if parts[:3] == ['api', 'messages', 'received'] and len(parts) == 4:
            return httpx.Response(200, json=[m for m in self.messages if m['receiverId'] == parts[3]])
        if parts[:3] == ['api', 'messages', 'between'] and len(parts) == 5:
            pair = {parts[3], parts[4]}
            return httpx.Response(
                200, json=[m for m in self.messages if {m['senderId'], m['receiverId']} == pair]
            )
        return httpx.Response(404, json={'error': 'no route'})

    def _books_of(self, owner_id: str) -> typing.List[dict]:
        return [book for book in self.books.values() if book['ownerId'] == owner_id]

    @staticmethod
    def _one(item: typing.Optional[dict]) -> httpx.Response:
        if item is None:
            return httpx.Response(404, json={'error': 'not found'})
        return httpx.Response(200, json=item)

    @staticmethod
    def _unauthorized() -> httpx.Response:
        return httpx.Response(401, json={'error': 'unauthorized'})

    @property
    def paths(self) -> typing.List[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def api() -> FakeBookApi:
    return FakeBookApi()


@pytest.fixture
def transport(api: FakeBookApi) -> httpx.MockTransport:
    return httpx.MockTransport(api.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=UPSTREAM, upstream_retries=0, upstream_backoff=0, debug=False)


@pytest.fixture
def make_client(settings, transport):
    def make(name: str) -> TestClient:
        return TestClient(create_app(name, settings, transport=transport))

    return make


@pytest.fixture
def user_client(make_client) -> TestClient:
    return make_client('user')


@pytest.fixture
def listing_client(make_client) -> TestClient:
    return make_client('listing')


@pytest.fixture
def messaging_client(make_client) -> TestClient:
    return make_client('messaging')


@pytest.fixture
def execute():
    def run(client: TestClient, query: str, variables: dict = None, headers: dict = None) -> dict:
        response = client.post('/', json={'query': query, 'variables': variables}, headers=headers or {})
        assert response.status_code == 200
        return response.json()

    return run


@pytest.fixture
def token() -> str:
    return TOKEN
