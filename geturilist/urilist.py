"""Read text/uri-list objects into validated URLs."""

from __future__ import annotations

import bz2
import gzip
import io
import logging
import lzma
import re
import zlib
from typing import IO, Callable, Dict, Iterable, List

import httpx

from .errors import ListSourceError, StorageError
from .storage import ObjectStore

logger = logging.getLogger(__name__)

URI_LIST_RE = re.compile(r"\.txt(\.(gz|bz2|xz))?$")

_DECOMPRESSORS: Dict[str, Callable[[IO[bytes]], IO[bytes]]] = {
    ".gz": lambda f: gzip.GzipFile(fileobj=f, mode="rb"),
    ".bz2": lambda f: bz2.BZ2File(f, mode="rb"),
    ".xz": lambda f: lzma.LZMAFile(f, mode="rb"),
}


def is_uri_list_name(name: str) -> bool:
    """Return True for names like ``list.txt`` or ``list.txt.gz``."""
    return URI_LIST_RE.search(name) is not None


def parse_prefix(name: str) -> str:
    """Return the directory part of an object name ('' if there is none)."""
    tokens = name.split("/")
    if len(tokens) == 1:
        return ""
    return "/".join(tokens[:-1])


def decode_uri_list(lines: Iterable[bytes]) -> List[httpx.URL]:
    """Parse one URL per line, skipping blanks, comments and invalid lines."""
    urls: List[httpx.URL] = []
    for lineno, raw in enumerate(lines, start=1):
        text = raw.decode("utf-8", errors="replace").strip()
        if not text or text.startswith("#"):
            continue
        try:
            urls.append(httpx.URL(text))
        except httpx.InvalidURL as exc:
            logger.warning("Skipping invalid url on line %d: %r (%s)", lineno, text, exc)
    return urls


def open_list_source(data: bytes, name: str) -> IO[bytes]:
    """Wrap raw object bytes, decompressing according to the name's suffix."""
    stream: IO[bytes] = io.BytesIO(data)
    for suffix, opener in _DECOMPRESSORS.items():
        if name.endswith(suffix):
            return opener(stream)
    return stream


def load_uri_list(store: ObjectStore, bucket: str, name: str) -> List[httpx.URL]:
    """Read and decode the URL list stored at ``bucket/name``.

    Raises:
        ListSourceError: If the object cannot be read or decompressed.
    """
    try:
        data = store.read(bucket, name)
    except StorageError as exc:
        raise ListSourceError(f"reading {bucket}/{name}: {exc}") from exc

    try:
        with open_list_source(data, name) as stream:
            return decode_uri_list(stream)
    except (OSError, EOFError, lzma.LZMAError, zlib.error) as exc:
        raise ListSourceError(f"decompressing {bucket}/{name}: {exc}") from exc
