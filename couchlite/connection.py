from __future__ import annotations

"""Parsed, immutable view of the database base URL."""

from base64 import b64encode
from typing import Literal
from urllib.parse import unquote

import httpx
from pydantic import BaseModel, ConfigDict

DEFAULT_PORTS: dict[str, int] = {"https": 443, "http": 80}


class ConnectionDescriptor(BaseModel):
    """Scheme, host, port, path prefix and credentials used by every request."""

    model_config = ConfigDict(frozen=True)

    scheme: Literal["http", "https"]
    host: str
    port: int
    path_prefix: str = ""
    credentials: str | None = None

    @classmethod
    def from_url(cls, base_url: str) -> "ConnectionDescriptor":
        """Parse ``base_url``, applying the default port for its scheme."""

        url = httpx.URL(base_url)
        scheme = url.scheme.lower()
        raw_path = url.raw_path.decode("ascii").split("?", 1)[0]
        userinfo = url.userinfo.decode("ascii") or None
        return cls(
            scheme=scheme,
            host=url.host,
            port=url.port or DEFAULT_PORTS.get(scheme, 80),
            path_prefix=raw_path,
            credentials=userinfo,
        )

    @property
    def netloc_host(self) -> str:
        """Host as written in URLs and the ``Host`` header (IPv6 bracketed)."""

        return f"[{self.host}]" if ":" in self.host else self.host

    @property
    def origin(self) -> str:
        """``scheme://host:port`` prefix for request URLs."""

        return f"{self.scheme}://{self.netloc_host}:{self.port}"

    def authorization(self) -> str | None:
        """Return the ``Authorization`` header value, if credentials exist."""

        if not self.credentials:
            return None
        token = b64encode(unquote(self.credentials).encode("utf-8")).decode("ascii")
        return f"Basic {token}"
