import typing


class BookgraphError(Exception):
    pass


class UnknownEntity(BookgraphError, LookupError):
    def __init__(self, type_name: str, detail: str = None) -> None:
        self.type_name = type_name
        super().__init__(detail or f'Entity type {type_name!r} is not registered.')


class InvalidKey(BookgraphError, ValueError):
    def __init__(self, type_name: str, missing: typing.Sequence[str]) -> None:
        self.type_name = type_name
        self.missing = tuple(missing)
        super().__init__(f'Reference to {type_name} is missing key field(s): {", ".join(self.missing)}.')


class UpstreamError(BookgraphError):
    """Upstream REST call did not produce a usable body."""

    def __init__(self, message: str, url: str = None) -> None:
        self.url = url
        super().__init__(message)


class UpstreamStatusError(UpstreamError):
    def __init__(self, status_code: int, url: str = None) -> None:
        self.status_code = status_code
        super().__init__(f'Upstream responded {status_code} for {url}.', url=url)


class UpstreamNotFound(UpstreamStatusError):
    pass


class UpstreamUnreachable(UpstreamError):
    pass
