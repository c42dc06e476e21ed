from __future__ import annotations

"""Asynchronous CouchDB client built on a single request/response pipeline.

``CouchDB.request`` does all the HTTP work:
- joins the database path prefix with the relative request path
- serializes ``POST``/``PUT`` bodies as JSON, turns other bodies into queries
- derives the Basic ``Authorization`` header from the base URL userinfo
- parses JSON responses and classifies failures into ``CouchError`` kinds

Database and document operations are thin compositions of ``request``,
``encode`` and (for ``force`` writes) a ``HEAD`` revision lookup. Every
operation returns its error instead of raising it.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .config import Settings, get_settings
from .connection import ConnectionDescriptor
from .encoding import encode, join_path
from .errors import (
    CouchError,
    ResponseDecodeError,
    SerializationError,
    ServiceError,
    TransportError,
    status_code_error,
)
from .models import ExistsResult, Outcome, WriteOptions

LOGGER = logging.getLogger("couchlite")
LOGGER.addHandler(logging.NullHandler())

BODY_METHODS = frozenset({"POST", "PUT"})
UUIDS_PATH = "_uuids"
DEFAULT_TIMEOUT_SECONDS = 30.0
SESSION_HEADERS = frozenset({"cookie", "set-cookie"})


def _masked_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy request or response headers for logging without credentials."""

    masked: dict[str, str] = {}
    for key, value in headers.items():
        name = key.lower()
        if name == "authorization":
            value = "Basic ***"
        elif name in SESSION_HEADERS:
            value = "***"
        masked[key] = value
    return masked


def _revision_from_etag(response: httpx.Response) -> str | None:
    """Extract a revision token from the quoted ``ETag`` header."""

    etag = response.headers.get("etag")
    if not etag:
        return None
    return etag.strip('"')


def _unexpected_body(outcome: Outcome, expected: str) -> Outcome:
    """Report a successful response whose body lacks the expected fields."""

    error = ResponseDecodeError(
        f"Response body does not contain {expected}: {outcome.data!r}", outcome.response
    )
    return Outcome(error, outcome.data, outcome.response)


class CouchDB:
    """Client handle for one CouchDB database URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Parse the base URL once and open a persistent async HTTP client."""

        self.url = base_url
        self.connection = ConnectionDescriptor.from_url(base_url)
        self.log = logger or LOGGER
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def __repr__(self) -> str:
        connection = self.connection
        return f"{self.__class__.__name__}({connection.origin}{connection.path_prefix})"

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""

        await self._client.aclose()

    async def __aenter__(self) -> CouchDB:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # REQUEST PIPELINE

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        root: bool = False,
    ) -> Outcome:
        """Issue one HTTP request and classify the response.

        ``path`` is relative to the database URL, or to the server root when
        ``root`` is set. ``POST``/``PUT`` bodies are sent as JSON (strings are
        sent verbatim); for other methods a mapping body becomes the query
        string.
        """

        method = method.upper()
        connection = self.connection
        path = join_path("" if root else connection.path_prefix, path)
        headers = {"Host": connection.netloc_host, "Accept": "application/json"}

        content: str | None = None
        if method in BODY_METHODS:
            if isinstance(body, str):
                content = body
            elif body is not None:
                try:
                    content = json.dumps(body, allow_nan=False)
                except (TypeError, ValueError) as exc:
                    error = SerializationError(f"Request body is not JSON serializable: {exc}")
                    error.__cause__ = exc
                    return Outcome(error)
            headers["Content-Type"] = "application/json"
        elif isinstance(body, Mapping) and body:
            path = f"{path.split('?', 1)[0]}?{httpx.QueryParams(body)}"

        authorization = connection.authorization()
        if authorization:
            headers["Authorization"] = authorization

        self.log.debug(
            "request %s %s",
            method,
            path,
            extra={
                "couchlite": {
                    "method": method,
                    "path": path,
                    "headers": _masked_headers(headers),
                    "body": content,
                }
            },
        )

        try:
            response = await self._client.request(
                method,
                f"{connection.origin}{path}",
                headers=headers,
                content=content.encode("utf-8") if content else None,
            )
        except httpx.DecodingError as exc:
            error = ResponseDecodeError(f"Response body could not be decoded: {exc}")
            error.__cause__ = exc
            return Outcome(error)
        except httpx.RequestError as exc:
            error = TransportError(str(exc) or exc.__class__.__name__)
            error.__cause__ = exc
            return Outcome(error)

        self.log.debug(
            "response %s %s -> %s",
            method,
            path,
            response.status_code,
            extra={
                "couchlite": {
                    "status_code": response.status_code,
                    "headers": _masked_headers(response.headers),
                }
            },
        )

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError as exc:
                error = ResponseDecodeError(
                    f"Response body is not valid JSON: {exc}", response
                )
                error.__cause__ = exc
                return Outcome(error, None, response)
        self.log.debug("response data %s %s", method, path, extra={"couchlite": {"data": data}})

        if response.status_code >= 300:
            if isinstance(data, dict) and data.get("error"):
                error = ServiceError(data["error"], data.get("reason"), response)
            else:
                error = status_code_error(response.status_code, response)
            return Outcome(error, data, response)

        # Successes resume on the next loop iteration, after failures would have.
        await asyncio.sleep(0)
        return Outcome(None, data, response)

    # DATABASE API

    async def ensure_db(self) -> tuple[CouchError | None, CouchDB]:
        """Create the database unless it already exists."""

        lookup = await self.exists("")
        if lookup.error is not None or lookup.exists:
            return lookup.error, self

        created = await self.create_db()
        error = created.error
        if isinstance(error, ServiceError) and error.status_code == 412:
            # Created by a concurrent caller between the lookup and the PUT.
            error = None
        return error, self

    async def create_db(self) -> Outcome:
        """Create the database at the handle's URL."""

        return await self.request("PUT", "")

    # DOCUMENTS API

    async def exists(self, id: str | None) -> ExistsResult:
        """Check for a document (or, with ``""``, the database) with ``HEAD``.

        A 404 is reported as ``exists=False`` rather than an error.
        """

        outcome = await self.request("HEAD", encode(id or ""))
        response = outcome.response
        if outcome.error is not None and (response is None or response.status_code != 404):
            return ExistsResult(outcome.error)
        return ExistsResult(None, response.status_code == 200, _revision_from_etag(response))

    async def get(self, id: str | None, query: Mapping[str, Any] | None = None) -> Outcome:
        """Retrieve a document, optionally with query parameters."""

        return await self.request("GET", encode(id or ""), query)

    async def save(
        self,
        id: str | None,
        doc: dict[str, Any],
        options: WriteOptions | Mapping[str, Any] | None = None,
    ) -> Outcome:
        """Create or update a document.

        Without ``id`` the server assigns one (``POST``). With ``force`` the
        current revision is looked up and written into ``doc["_rev"]`` before
        the ``PUT``; on success ``doc`` gets the new ``_id``/``_rev`` and is
        returned as the outcome data.
        """

        options = WriteOptions.coerce(options)
        method = "PUT" if id else "POST"
        path = encode(id or "")

        if not (options.force and id):
            return await self.request(method, path, doc)

        lookup = await self.exists(id)
        if lookup.error is not None:
            return Outcome(lookup.error)
        if lookup.exists:
            doc["_rev"] = lookup.rev

        outcome = await self.request(method, path, doc)
        if outcome.error is not None:
            return outcome
        data = outcome.data if isinstance(outcome.data, dict) else {}
        if "id" not in data or "rev" not in data:
            return _unexpected_body(outcome, "id and rev")
        doc["_id"] = data["id"]
        doc["_rev"] = data["rev"]
        return Outcome(None, doc, outcome.response)

    async def delete(
        self,
        id: str | None,
        rev: str | None = None,
        options: WriteOptions | Mapping[str, Any] | None = None,
    ) -> Outcome:
        """Delete a document at revision ``rev``.

        With ``force`` the current revision replaces ``rev`` before deleting.
        """

        options = WriteOptions.coerce(options)
        args: dict[str, str] = {}
        if rev:
            args["rev"] = rev
        path = encode(id or "")

        if options.force:
            lookup = await self.exists(id)
            if lookup.error is not None:
                return Outcome(lookup.error)
            if lookup.exists:
                args["rev"] = lookup.rev

        return await self.request("DELETE", path, args)

    # SERVER API

    async def uuids(self, count: int | None = None) -> Outcome:
        """Fetch ``count`` (default 1) server-generated UUIDs."""

        outcome = await self.request("GET", UUIDS_PATH, {"count": count or 1}, root=True)
        if outcome.error is not None:
            return Outcome(outcome.error, None, outcome.response)
        data = outcome.data if isinstance(outcome.data, dict) else {}
        if not isinstance(data.get("uuids"), list):
            return _unexpected_body(outcome, "a uuids list")
        return Outcome(None, data["uuids"], outcome.response)


def client(base_url: str, **kwargs: Any) -> CouchDB:
    """Create a ``CouchDB`` handle for ``base_url``."""

    return CouchDB(base_url, **kwargs)


def from_settings(settings: Settings | None = None, **kwargs: Any) -> CouchDB:
    """Create a ``CouchDB`` handle from environment-backed settings."""

    settings = settings or get_settings()
    kwargs.setdefault("timeout", settings.couchdb_timeout_seconds)
    return CouchDB(settings.couchdb_url, **kwargs)
