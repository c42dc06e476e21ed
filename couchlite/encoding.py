from __future__ import annotations

"""URL path helpers for document ids and request paths."""

import re
from urllib.parse import quote

DESIGN_PREFIX = "_design/"

# Characters left alone by JavaScript's encodeURIComponent on top of quote()'s
# always-safe set.
_COMPONENT_SAFE = "!*'()"
_ENCODED_DESIGN_PREFIX = quote(DESIGN_PREFIX, safe="")
_LEADING_SLASHES = re.compile(r"^//+")


def encode(identifier: str) -> str:
    """Percent-encode a document id or view/list/show name.

    A leading ``_design/`` stays literal so design documents and their
    sub-resources route correctly.
    """

    encoded = quote(identifier, safe=_COMPONENT_SAFE)
    if encoded.startswith(_ENCODED_DESIGN_PREFIX):
        encoded = DESIGN_PREFIX + encoded[len(_ENCODED_DESIGN_PREFIX) :]
    return encoded


def join_path(prefix: str, path: str) -> str:
    """Join the database path prefix and a relative request path."""

    joined = f"{prefix}/{path}" if prefix else f"/{path}"
    return _LEADING_SLASHES.sub("/", joined)
