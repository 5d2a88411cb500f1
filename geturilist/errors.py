"""Exception types raised by geturilist.

Only configuration, list-source and final storage failures escape a run.
Per-URL fetch failures are captured as data (see ``models.FetchOutcome``)
and encode failures are logged and dropped by the pipeline.
"""

from __future__ import annotations


class GetUriListError(Exception):
    """Base class for all geturilist errors."""


class ConfigError(GetUriListError):
    """Missing or invalid configuration. Raised before any work starts."""


class ListSourceError(GetUriListError):
    """The input URL list could not be read or decompressed."""


class EncodeError(GetUriListError):
    """A fetched response could not be wrapped into an archive record."""


class StorageError(GetUriListError):
    """Base class for object store failures."""


class ObjectNotFoundError(StorageError):
    """The requested object does not exist."""


class PersistError(StorageError):
    """An output object could not be written."""


class DeleteError(StorageError):
    """The input object could not be removed on completion."""
