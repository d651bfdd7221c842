"""FastAPI application serving the user dataset."""

from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from usersearch.config import SearchSettings, get_settings
from usersearch.domain.models import SearchErrorResponse
from usersearch.logging import logger
from usersearch.services.exceptions import SearchServerError
from usersearch.services.pipeline import SearchQuery, run_query
from usersearch.services.records import RecordProvider, XmlRecordProvider

ACCESS_TOKEN_HEADER = "AccessToken"

router = APIRouter()


class AccessTokenRejected(Exception):
    pass


def require_access_token(
    request: Request,
    access_token: str | None = Header(default=None, alias=ACCESS_TOKEN_HEADER),
) -> None:
    expected = request.app.state.access_token
    if not access_token or not secrets.compare_digest(
        access_token.encode("utf-8"), expected.encode("utf-8")
    ):
        raise AccessTokenRejected()


def get_record_provider(request: Request) -> RecordProvider:
    return request.app.state.record_provider


@router.get("/", dependencies=[Depends(require_access_token)])
@router.get("/search", dependencies=[Depends(require_access_token)])
def search_users(
    request: Request,
    provider: RecordProvider = Depends(get_record_provider),
) -> JSONResponse:
    """Run the query pipeline over a fresh copy of the dataset."""

    records = provider.load()
    query = SearchQuery.from_params(request.query_params)
    page = run_query(records, query)
    return JSONResponse(
        content=[record.to_user().model_dump() for record in page],
        headers={"Access-Control-Allow-Origin": "*"},
    )


@router.get("/health")
def health_check():
    return {"status": "ok"}


async def _access_token_rejected(request: Request, exc: AccessTokenRejected):
    logger.warning("search_request_rejected", reason="bad_access_token", path=request.url.path)
    return PlainTextResponse("bad Access Token", status_code=401)


async def _search_server_error(request: Request, exc: SearchServerError):
    logger.warning(
        "search_request_failed",
        kind=exc.kind.name,
        status_code=exc.status_code,
        error=exc.message,
    )
    if exc.status_code == 400:
        envelope = SearchErrorResponse(error=exc.wire_error)
        return JSONResponse(envelope.model_dump(), status_code=400)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(
    settings: SearchSettings | None = None,
    record_provider: RecordProvider | None = None,
) -> FastAPI:
    """Build the search app with its credential and record source injected."""

    settings = settings or get_settings()
    app = FastAPI(title="User Search API", version="0.1.0")
    app.state.access_token = settings.server.access_token.get_secret_value()
    app.state.record_provider = record_provider or XmlRecordProvider(
        settings.server.dataset_path
    )
    app.include_router(router)
    app.add_exception_handler(AccessTokenRejected, _access_token_rejected)
    app.add_exception_handler(SearchServerError, _search_server_error)
    return app


__all__ = ["ACCESS_TOKEN_HEADER", "create_app", "router"]
