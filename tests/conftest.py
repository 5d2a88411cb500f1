"""Shared test fixtures for geturilist tests."""

import os
from pathlib import Path
from typing import Callable

import httpx
import pytest

from geturilist.config import Settings
from geturilist.storage import LocalObjectStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep GUL_* variables and any .env file out of the tests."""
    for key in list(os.environ):
        if key.startswith("GUL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(output_bucket="warcs", storage_root=tmp_path / "buckets")


@pytest.fixture
def store(settings: Settings) -> LocalObjectStore:
    return LocalObjectStore(settings.storage_root)


@pytest.fixture
def uri_list_bytes() -> bytes:
    """Three valid URLs, a comment, a blank line and one invalid line."""
    return (
        b"# seed list\n"
        b"http://example.com/\n"
        b"https://example.org/page?q=1\r\n"
        b"\n"
        b"http://example.com:notaport/\n"
        b"http://example.net/a/b\n"
    )


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Build a redirect-following client backed by a MockTransport handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        return httpx.Client(
            transport=httpx.MockTransport(handler),
            follow_redirects=True,
            max_redirects=10,
        )

    return factory


@pytest.fixture
def ok_handler() -> Callable[[httpx.Request], httpx.Response]:
    """Answer every request with a small text/plain 200."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"content-type": "text/plain"},
            content=f"hello from {request.url}".encode(),
        )

    return handler
