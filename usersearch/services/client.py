"""HTTP client for the user search service.

``find_users`` performs at most one round trip. To detect whether another
page exists it asks the server for one record more than the caller wants
(the probe record): if the probe comes back, ``next_page`` is set and the
probe is dropped from the result.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, AsyncIterator, NoReturn

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from usersearch.config import ClientSettings
from usersearch.domain.models import (
    OrderBy,
    SearchErrorResponse,
    SearchRequest,
    SearchResponse,
    User,
)
from usersearch.services.exceptions import (
    AuthError,
    ErrorKind,
    FatalServerError,
    ProtocolError,
    SearchTimeoutError,
    SearchValidationError,
    UnknownNetworkError,
    UnknownStatusError,
)

MAX_LIMIT = 25
PROBE_RECORDS = 1
ACCESS_TOKEN_HEADER = "AccessToken"

_users_adapter = TypeAdapter(list[User])


def build_params(request: SearchRequest) -> dict[str, str]:
    """Validate ``request`` and encode it as query parameters.

    Raises ``SearchValidationError`` for a negative limit or offset; nothing
    is sent in that case.
    """

    if request.limit < 0:
        raise SearchValidationError("limit must be > 0")
    if request.offset < 0:
        raise SearchValidationError("offset must be > 0")

    limit = min(request.limit, MAX_LIMIT)
    params = {
        "limit": str(limit + PROBE_RECORDS),
        "offset": str(request.offset),
        "order_by": str(int(request.order_by)),
    }
    if request.query:
        params["query"] = request.query
    if request.order_field:
        params["order_field"] = request.order_field
    return params


class SearchClient:
    """Query a remote search server.

    An injected ``http_client`` is borrowed and left open; otherwise the
    client owns one and closes it in ``aclose`` / ``async with``.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str,
        *,
        timeout: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._access_token = access_token
        self._url = base_url
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    @classmethod
    def from_settings(
        cls, settings: ClientSettings, http_client: httpx.AsyncClient | None = None
    ) -> "SearchClient":
        token = settings.access_token.get_secret_value() if settings.access_token else ""
        return cls(
            token,
            str(settings.base_url),
            timeout=settings.timeout_seconds,
            http_client=http_client,
        )

    @property
    def url(self) -> str:
        return self._url

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SearchClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def find_users(self, request: SearchRequest) -> SearchResponse:
        params = build_params(request)
        limit = min(request.limit, MAX_LIMIT)

        # wait_for bounds the whole round trip; httpx's own timeout is per phase
        try:
            status_code, body = await asyncio.wait_for(
                self._exchange(params), timeout=self._timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise SearchTimeoutError(f"timeout for {self._url}") from exc
        except httpx.HTTPError as exc:
            raise UnknownNetworkError(f"unknown error {exc}") from exc

        if status_code == httpx.codes.UNAUTHORIZED:
            raise AuthError("Bad AccessToken")
        if status_code == httpx.codes.INTERNAL_SERVER_ERROR:
            raise FatalServerError("SearchServer fatal error")
        if status_code == httpx.codes.BAD_REQUEST:
            self._raise_bad_request(body, request)
        if status_code != httpx.codes.OK:
            raise UnknownStatusError(status_code)

        try:
            users = _users_adapter.validate_json(body)
        except PydanticValidationError as exc:
            raise ProtocolError(f"cant unpack result json: {_describe(exc)}") from exc

        if len(users) == limit + PROBE_RECORDS:
            return SearchResponse(users=users[:limit], next_page=True)
        return SearchResponse(users=users, next_page=False)

    async def iter_pages(self, request: SearchRequest) -> AsyncIterator[SearchResponse]:
        """Yield consecutive pages starting at ``request.offset``.

        Each page holds at most ``request.limit`` (clamped) users; iteration
        stops after the first page without ``next_page``.

        The server applies ``offset`` to the raw dataset before filtering and
        sorting, so offsets only line up with result rows for unfiltered
        ``AS_IS`` queries. Any ``query`` or non-``AS_IS`` order is rejected
        with ``SearchValidationError``.
        """

        page_size = min(request.limit, MAX_LIMIT)
        if page_size <= 0:
            raise SearchValidationError("limit must be > 0")
        if request.query:
            raise SearchValidationError("cannot page through a filtered query")
        if request.order_by != OrderBy.AS_IS:
            raise SearchValidationError("cannot page through a sorted query")
        current = request
        while True:
            page = await self.find_users(current)
            yield page
            if not page.next_page:
                return
            current = replace(current, limit=page_size, offset=current.offset + page_size)

    async def _exchange(self, params: dict[str, str]) -> tuple[int, bytes]:
        """Send one request; only ``200`` and ``400`` bodies are read."""

        http_request = self._client.build_request(
            "GET",
            self._url,
            params=params,
            headers={ACCESS_TOKEN_HEADER: self._access_token},
            timeout=self._timeout,
        )
        response = await self._client.send(http_request, stream=True)
        try:
            if response.status_code in (httpx.codes.OK, httpx.codes.BAD_REQUEST):
                return response.status_code, await response.aread()
            return response.status_code, b""
        finally:
            await response.aclose()

    @staticmethod
    def _raise_bad_request(body: bytes, request: SearchRequest) -> NoReturn:
        try:
            envelope = SearchErrorResponse.model_validate_json(body)
        except PydanticValidationError as exc:
            raise ProtocolError(f"cant unpack error json: {_describe(exc)}") from exc

        if envelope.error == ErrorKind.BAD_ORDER_FIELD.value:
            # report the caller's own field, not anything echoed by the server
            raise SearchValidationError(f"OrderFeld {request.order_field} invalid")
        raise ProtocolError(f"unknown bad request error: {envelope.error}")


def _describe(exc: PydanticValidationError) -> str:
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    first = errors[0]
    return first.get("msg", str(exc))


__all__ = [
    "ACCESS_TOKEN_HEADER",
    "MAX_LIMIT",
    "PROBE_RECORDS",
    "SearchClient",
    "build_params",
]
