"""Wrap raw HTTP responses into gzipped WARC response records."""

from __future__ import annotations

import io
import logging

from warcio.exceptions import ArchiveLoadFailed
from warcio.statusandheaders import StatusAndHeadersParserException
from warcio.warcwriter import WARCWriter

from .errors import EncodeError

logger = logging.getLogger(__name__)

RECORD_TYPE = "response"
HTTP_RESPONSE_CONTENT_TYPE = "application/http;msgtype=response"


def encode_record(content: bytes, target_uri: str) -> bytes:
    """Return one gzip-compressed WARC ``response`` record for ``content``.

    Args:
        content: The HTTP response exactly as it would appear on the wire.
        target_uri: The originally requested URL (``WARC-Target-URI``).

    Raises:
        EncodeError: If the record cannot be built or written.
    """
    buf = io.BytesIO()
    try:
        writer = WARCWriter(buf, gzip=True)
        record = writer.create_warc_record(
            target_uri,
            RECORD_TYPE,
            payload=io.BytesIO(content),
            length=len(content),
            warc_content_type=HTTP_RESPONSE_CONTENT_TYPE,
        )
        writer.write_record(record)
    except (StatusAndHeadersParserException, ArchiveLoadFailed, OSError, ValueError) as exc:
        raise EncodeError(f"encoding WARC record for {target_uri}: {exc}") from exc

    data = buf.getvalue()
    logger.debug("Encoded %s (%d -> %d bytes)", target_uri, len(content), len(data))
    return data
