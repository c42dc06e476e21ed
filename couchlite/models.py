from __future__ import annotations

"""Result and option types returned by or passed to ``CouchDB`` operations."""

from collections.abc import Mapping
from typing import Any, NamedTuple

import httpx
from pydantic import BaseModel, ConfigDict

from .errors import CouchError


class Outcome(NamedTuple):
    """``(error, data, response)`` triple produced by one request."""

    error: CouchError | None
    data: Any = None
    response: httpx.Response | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return ``data`` or raise the attached error."""

        if self.error is not None:
            raise self.error
        return self.data


class ExistsResult(NamedTuple):
    """``(error, exists, rev)`` triple produced by ``CouchDB.exists``."""

    error: CouchError | None
    exists: bool | None = None
    rev: str | None = None


class WriteOptions(BaseModel):
    """Options for ``save`` and ``delete``.

    ``force`` fetches the latest revision right before writing, so the write
    wins regardless of conflicts. Concurrent writers can still race it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    force: bool = False

    @classmethod
    def coerce(cls, options: WriteOptions | Mapping[str, Any] | None) -> WriteOptions:
        """Accept an instance, a plain mapping or ``None``."""

        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))
