"""Single-shot HTTP transport.

``execute`` performs exactly one HTTP exchange and hands back the status,
headers and raw body. It never retries and never interprets the status
code; see ``retry.py`` for the former and the callers for the latter.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, Mapping
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import ReadTimeoutError

from .errors import ConnectError, TlsError, TransportTimeout, VaultError
from .json_parser import parse
from .json_value import JsonValue
from .jsonlog import jlog
from .tls import TlsPolicy

METHODS = ("GET", "POST", "PUT", "DELETE")
_BODYLESS = ("GET", "DELETE")


@dataclass
class Request:
    method: str
    url: str
    headers: list[tuple[str, str | None]] = field(default_factory=list)
    body: bytes | None = None
    params: list[tuple[str, str]] = field(default_factory=list)
    connect_timeout: float | None = None
    read_timeout: float | None = None
    tls: TlsPolicy = field(default_factory=TlsPolicy)


@dataclass(frozen=True)
class Response:
    status: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""

    @property
    def mime_type(self) -> str | None:
        ctype = self.headers.get("Content-Type")
        if not ctype:
            return None
        return ctype.split(";", 1)[0].strip().lower()

    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> JsonValue:
        return parse(self.body)


def merge_query(url: str, params: Iterable[tuple[str, str]] | Mapping[str, str] | None) -> str:
    """Append ``params`` to ``url``, keeping any query string already there."""
    if not params:
        return url
    extra = urlencode(list(params.items()) if isinstance(params, Mapping) else list(params))
    scheme, netloc, path, query, fragment = urlsplit(url)
    query = f"{query}&{extra}" if query else extra
    return urlunsplit((scheme, netloc, path, query, fragment))


def filter_headers(headers: Iterable[tuple[str, str | None]]) -> CaseInsensitiveDict:
    """Drop empty values; the last remaining value for a name wins."""
    out = CaseInsensitiveDict()
    for name, value in headers:
        if value is None or value == "":
            continue
        out[name] = value
    return out


def execute(request: Request) -> Response:
    method = request.method.upper()
    if method not in METHODS:
        raise ValueError(f"unsupported HTTP method: {request.method}")
    if not request.url:
        raise ValueError("No URL is set")

    url = merge_query(request.url, request.params)
    headers = filter_headers(request.headers)
    body = None
    if method not in _BODYLESS:
        body = request.body or b""
        headers["Content-Length"] = str(len(body))

    started = time.monotonic()
    try:
        r = requests.request(
            method, url, headers=headers, data=body,
            timeout=(request.connect_timeout, request.read_timeout),
            **request.tls.requests_kwargs(),
        )
    except requests.exceptions.SSLError as e:
        raise TlsError(f"TLS handshake with {_where(url)} failed: {e}") from e
    except requests.exceptions.Timeout as e:
        raise TransportTimeout(f"{method} {_where(url)} timed out: {e}") from e
    except requests.exceptions.ConnectionError as e:
        # requests wraps a read timeout in the body as ConnectionError
        if e.args and isinstance(e.args[0], ReadTimeoutError):
            raise TransportTimeout(f"{method} {_where(url)} timed out: {e}") from e
        raise ConnectError(f"cannot connect to {_where(url)}: {e}") from e
    except requests.exceptions.RequestException as e:
        raise VaultError(f"{method} {_where(url)} failed: {e}") from e

    jlog("debug", "http_exchange", method=method, url=_where(url), status=r.status_code,
         elapsed_ms=round((time.monotonic() - started) * 1000, 1))
    return Response(r.status_code, CaseInsensitiveDict(r.headers), r.content or b"")


def get(url: str, **kw) -> Response:
    return execute(Request("GET", url, **kw))


def post(url: str, **kw) -> Response:
    return execute(Request("POST", url, **kw))


def put(url: str, **kw) -> Response:
    return execute(Request("PUT", url, **kw))


def delete(url: str, **kw) -> Response:
    return execute(Request("DELETE", url, **kw))


def _where(url: str) -> str:
    scheme, netloc, path, _, _ = urlsplit(url)
    return urlunsplit((scheme, netloc, path, "", ""))
