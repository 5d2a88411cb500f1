"""Fetch every URL in a list object and archive each response as WARC."""

from __future__ import annotations

import logging
import time
from contextlib import nullcontext
from typing import ContextManager, Optional

import httpx

from .config import Settings
from .errors import EncodeError
from .fetch import build_client, fetch_url
from .models import RunSummary, TaskResult, TaskState, TriggerEvent
from .naming import object_key
from .scheduler import BoundedScheduler
from .storage import ObjectStore
from .urilist import is_uri_list_name, load_uri_list, parse_prefix
from .warc import encode_record

logger = logging.getLogger(__name__)


def _log_state(url: str, state: TaskState, detail: str = "") -> None:
    logger.debug("%s -> %s %s", url, state.value, detail)


class ArchiveJob:
    """One run over one input list object.

    The input object is deleted once every URL has reached a terminal state.
    A job runs at most once.
    """

    def __init__(
        self,
        settings: Settings,
        store: ObjectStore,
        bucket: str,
        name: str,
        *,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.bucket = bucket
        self.name = name
        self.prefix = parse_prefix(name)
        self._client = client
        self._started = False
        self._input_deleted = False

    def _client_context(self) -> ContextManager[httpx.Client]:
        if self._client is not None:
            return nullcontext(self._client)
        return build_client(self.settings)

    def archive_one(self, client: httpx.Client, url: httpx.URL, key: str) -> TaskResult:
        """Fetch, encode and persist one URL.

        Encode failures drop the URL. Persist failures propagate.
        """
        urlstr = str(url)
        _log_state(urlstr, TaskState.ADMITTED)
        _log_state(urlstr, TaskState.FETCHING)
        outcome = fetch_url(client, url, timeout=self.settings.request_timeout)
        _log_state(urlstr, TaskState.ENCODING, outcome.kind.value)
        try:
            data = encode_record(outcome.to_http_bytes(), urlstr)
        except EncodeError as exc:
            logger.error("Dropping %s: %s", urlstr, exc)
            return TaskResult(urlstr, key, TaskState.DROPPED, outcome.kind, str(exc))

        self.store.write(self.settings.output_bucket, key, data)
        _log_state(urlstr, TaskState.PERSISTED, key)
        return TaskResult(urlstr, key, TaskState.PERSISTED, outcome.kind)

    def _delete_input(self) -> None:
        if self._input_deleted:
            logger.warning("%s already deleted, skipping", self.name)
            return
        self.store.delete(self.bucket, self.name)
        self._input_deleted = True

    def run(self) -> RunSummary:
        """Process the whole list.

        Raises:
            ListSourceError: The list object could not be read.
            PersistError: An archive could not be written (after all tasks finish).
            DeleteError: The list object could not be removed.
        """
        if self._started:
            raise RuntimeError(f"job for {self.bucket}/{self.name} has already run")
        self._started = True
        s = self.settings

        logger.info("%s execution started", self.name)
        urls = load_uri_list(self.store, self.bucket, self.name)
        logger.info("%s URL count: %d", self.name, len(urls))

        with self._client_context() as client, BoundedScheduler(s.concurrency) as scheduler:
            for line, url in enumerate(urls):
                key = object_key(url, s.name_format, self.prefix)
                _log_state(str(url), TaskState.PENDING, key)
                if line % s.progress_every == 0:
                    logger.info("%s [%d] %s", self.name, line, url)
                scheduler.submit(self.archive_one, client, url, key)
                if s.sleep_seconds > 0:
                    time.sleep(s.sleep_seconds)
            results = scheduler.drain()

        logger.info("%s all clients completed, cleaning up", self.name)
        summary = RunSummary(name=self.name, results=results)
        self._delete_input()
        logger.info(
            "%s execution completed: %d persisted, %d dropped",
            self.name, summary.persisted, summary.dropped,
        )
        return summary


def handle_event(
    event: TriggerEvent,
    settings: Settings,
    store: ObjectStore,
    *,
    client: Optional[httpx.Client] = None,
) -> Optional[RunSummary]:
    """Run a job for a storage notification; returns None for non-list objects."""
    if not is_uri_list_name(event.name):
        logger.info("skipping non-uri file %r", event.name)
        return None
    return ArchiveJob(settings, store, event.bucket, event.name, client=client).run()
