"""HTTP fetch worker: one GET per URL, failures captured as data."""

from __future__ import annotations

import logging
import time
from typing import List, Tuple

import httpx

from .config import Settings
from .models import ConnectionFailure, FetchOutcome, FetchSuccess, RequestFailure

logger = logging.getLogger(__name__)

REQUEST_ERROR_STATUS = "HTTP/1.0 599 Request Error"
CONNECTION_ERROR_STATUS = "HTTP/1.0 599 Connection Error"

# Re-emitted from the body actually read, so the serialized message is self-consistent.
FRAMING_HEADERS = frozenset({"content-length", "transfer-encoding"})


def build_client(settings: Settings) -> httpx.Client:
    """Return the HTTP client shared by all fetch tasks of a run."""
    return httpx.Client(
        timeout=settings.request_timeout,
        max_redirects=settings.max_redirects,
        headers={"user-agent": settings.user_agent},
        limits=httpx.Limits(max_connections=settings.concurrency),
    )


def _one_line(text: str) -> str:
    return " ".join(text.splitlines()).strip()


def _describe(exc: Exception) -> str:
    return _one_line(str(exc)) or type(exc).__name__


def _status_line(resp: httpx.Response) -> str:
    reason = resp.reason_phrase or httpx.codes.get_reason_phrase(resp.status_code)
    return f"{resp.http_version} {resp.status_code} {reason}".rstrip()


def _wire_headers(resp: httpx.Response, body_length: int) -> List[Tuple[str, str]]:
    headers = [
        (k.decode("latin-1"), v.decode("latin-1"))
        for k, v in resp.headers.raw
        if k.decode("latin-1").lower() not in FRAMING_HEADERS
    ]
    headers.append(("Content-Length", str(body_length)))
    return headers


TIMEOUT_PHASES = ("connect", "read", "write", "pool")


def _check_deadline(request: httpx.Request, deadline: float) -> float:
    """Return the seconds left before ``deadline``, raising once it has passed."""
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise httpx.ReadTimeout("request deadline exceeded", request=request)
    return remaining


def _bound_timeout(request: httpx.Request, deadline: float) -> None:
    """Shrink every timeout phase of ``request`` to the time left."""
    remaining = _check_deadline(request, deadline)
    current = request.extensions.get("timeout") or {}
    request.extensions["timeout"] = {
        phase: remaining if current.get(phase) is None else min(current[phase], remaining)
        for phase in TIMEOUT_PHASES
    }


def _send_following_redirects(
    client: httpx.Client, request: httpx.Request, deadline: float
) -> Tuple[httpx.Response, int]:
    """Send ``request`` and every redirect hop under one deadline.

    Returns the open final response and the number of hops followed.
    """
    hops = 0
    while True:
        _bound_timeout(request, deadline)
        resp = client.send(request, stream=True, follow_redirects=False)
        next_request = resp.next_request
        try:
            _check_deadline(request, deadline)
        except httpx.TimeoutException:
            resp.close()
            raise
        if next_request is None:
            return resp, hops
        resp.close()
        hops += 1
        if hops > client.max_redirects:
            raise httpx.TooManyRedirects(
                "Exceeded maximum allowed redirects.", request=next_request
            )
        request = next_request


def _read_raw_body(resp: httpx.Response, deadline: float) -> bytes:
    """Read the undecoded body, giving up once ``deadline`` has passed."""
    chunks = []
    for chunk in resp.iter_raw():
        chunks.append(chunk)
        _check_deadline(resp.request, deadline)
    _check_deadline(resp.request, deadline)
    return b"".join(chunks)


def _error_outcome(cls, status_line: str, url: str, reason: str) -> FetchOutcome:
    return cls(
        url=url,
        status_line=status_line,
        headers=[("Error", reason)],
        reason=reason,
    )


def fetch_url(client: httpx.Client, url: httpx.URL, *, timeout: float) -> FetchOutcome:
    """GET ``url`` and return the final response, following redirects.

    Never raises for request or transport problems: a request that cannot be
    built yields a ``RequestFailure`` and one that fails on the wire (DNS,
    TCP, TLS, protocol, redirect loop or deadline expiry) yields a
    ``ConnectionFailure``, each with a synthetic 599 status line.

    Args:
        client: Shared HTTP client. Its redirect limit applies.
        url: The URL to fetch.
        timeout: Deadline in seconds for the whole fetch, every redirect hop
            and the body read included.

    Returns:
        The fetch outcome for ``url``.
    """
    urlstr = str(url)
    try:
        request = client.build_request("GET", url)
    except (httpx.InvalidURL, ValueError, TypeError) as exc:
        reason = f"GET {urlstr!r}: {_describe(exc)}"
        logger.debug("Request error: %s", reason)
        return _error_outcome(RequestFailure, REQUEST_ERROR_STATUS, urlstr, reason)

    deadline = time.monotonic() + timeout
    try:
        resp, hops = _send_following_redirects(client, request, deadline)
        try:
            body = _read_raw_body(resp, deadline)
        finally:
            resp.close()
    except httpx.RequestError as exc:
        reason = f"GET {urlstr!r}: {_describe(exc)}"
        logger.debug("Connection error: %s", reason)
        return _error_outcome(ConnectionFailure, CONNECTION_ERROR_STATUS, urlstr, reason)

    if hops:
        logger.debug("Followed %d redirect(s): %s -> %s", hops, urlstr, resp.url)

    return FetchSuccess(
        url=urlstr,
        status_line=_status_line(resp),
        headers=_wire_headers(resp, len(body)),
        body=body,
    )
