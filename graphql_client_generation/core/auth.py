"""Authentication for generated clients.

Clients accept any ``httpx.Auth``; httpx applies it to every request. The
classes here cover the header schemes GraphQL APIs commonly use, and
``httpx.BasicAuth`` covers basic authentication.
"""

from collections.abc import Generator

import httpx

BasicAuth = httpx.BasicAuth


class HeaderAuth(httpx.Auth):
    """Static headers, e.g. an API key plus a tenant id."""

    def __init__(self, headers: dict[str, str]):
        self.headers = dict(headers)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers.update(self.headers)
        yield request


class ApiKeyAuth(HeaderAuth):
    """API key in a custom header, ``x-api-key`` unless told otherwise."""

    def __init__(self, api_key: str, header_name: str = "x-api-key"):
        super().__init__({header_name: api_key})


class BearerAuth(HeaderAuth):
    def __init__(self, token: str):
        super().__init__({"Authorization": f"Bearer {token}"})


def auth_from_token(token: str | None, header_name: str | None = None) -> httpx.Auth | None:
    """Pick the auth for a configured credential.

    No token means no auth; a header name sends the token raw in that
    header, otherwise it is sent as a bearer token.
    """
    if not token:
        return None
    if header_name:
        return ApiKeyAuth(token, header_name)
    return BearerAuth(token)
