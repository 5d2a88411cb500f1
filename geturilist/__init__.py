"""geturilist: fetch a text/uri-list concurrently and archive each response as WARC."""

from .config import NameFormat, Settings, load_settings
from .fetch import build_client, fetch_url
from .naming import object_key, object_name
from .pipeline import ArchiveJob, handle_event
from .scheduler import BoundedScheduler
from .storage import LocalObjectStore, ObjectStore
from .urilist import decode_uri_list, load_uri_list
from .warc import encode_record

__all__ = [
    "Settings",
    "NameFormat",
    "load_settings",
    "build_client",
    "fetch_url",
    "object_name",
    "object_key",
    "ArchiveJob",
    "handle_event",
    "BoundedScheduler",
    "ObjectStore",
    "LocalObjectStore",
    "decode_uri_list",
    "load_uri_list",
    "encode_record",
]
