"""Deterministic output object names for fetched URLs."""

from __future__ import annotations

import hashlib
from urllib.parse import quote

import httpx

from .config import NameFormat

ARCHIVE_SUFFIX = ".warc.gz"

# Characters left unescaped in a single path segment, besides unreserved ones.
_PATH_SEGMENT_SAFE = "$&+=:@"


def object_name(url: httpx.URL, name_format: NameFormat) -> str:
    """Return the archive file name for ``url``.

    ``hostname`` names collide for URLs sharing a host.
    """
    urlstr = str(url)
    if name_format is NameFormat.SHA1:
        filename = hashlib.sha1(urlstr.encode("utf-8")).hexdigest()
    elif name_format is NameFormat.URL:
        filename = quote(urlstr, safe=_PATH_SEGMENT_SAFE)
    elif name_format is NameFormat.HOSTNAME:
        filename = url.host
    else:
        raise ValueError(f"Unknown name format: {name_format!r}")
    return filename + ARCHIVE_SUFFIX


def object_key(url: httpx.URL, name_format: NameFormat, prefix: str = "") -> str:
    """Return the full output key, under ``prefix`` when one is given."""
    name = object_name(url, name_format)
    if prefix:
        return f"{prefix}/{name}"
    return name
