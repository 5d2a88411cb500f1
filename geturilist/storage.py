"""Object store collaborator.

The pipeline only needs three primitives: read an input object, write an
output object, and delete the input object once a run completes.
``LocalObjectStore`` maps buckets to directories on the local filesystem.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Protocol

from .errors import DeleteError, ObjectNotFoundError, PersistError, StorageError

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Bucket/object storage used by the pipeline.

    Implementations must tolerate concurrent writes to distinct names.
    """

    def read(self, bucket: str, name: str) -> bytes: ...

    def write(self, bucket: str, name: str, data: bytes) -> None: ...

    def delete(self, bucket: str, name: str) -> None: ...


class LocalObjectStore:
    """Store objects as files under ``root/<bucket>/<name>``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, bucket: str, name: str) -> Path:
        base = (self.root / bucket).resolve()
        path = (base / name).resolve()
        if base not in path.parents:
            raise StorageError(f"object name escapes bucket {bucket!r}: {name!r}")
        return path

    def read(self, bucket: str, name: str) -> bytes:
        path = self._path(bucket, name)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(f"{bucket}/{name} not found") from exc
        except OSError as exc:
            raise StorageError(f"reading {bucket}/{name}: {exc}") from exc

    def write(self, bucket: str, name: str, data: bytes) -> None:
        """Write atomically via tmp-file rename."""
        path = self._path(bucket, name)
        tmp = path.with_name(f"{path.name}.{threading.get_ident()}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            tmp.replace(path)
        except OSError as exc:
            raise PersistError(f"writing {bucket}/{name}: {exc}") from exc
        logger.debug("Saved %s/%s (%d bytes)", bucket, name, len(data))

    def delete(self, bucket: str, name: str) -> None:
        path = self._path(bucket, name)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise DeleteError(f"deleting {bucket}/{name}: not found") from exc
        except PermissionError as exc:
            raise DeleteError(f"deleting {bucket}/{name}: permission denied") from exc
        except OSError as exc:
            raise DeleteError(f"deleting {bucket}/{name}: {exc}") from exc
        logger.debug("Deleted %s/%s", bucket, name)
