"""Pydantic models shared across the pipeline."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

CRLF = b"\r\n"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    REQUEST_ERROR = "request_error"
    CONNECTION_ERROR = "connection_error"


class _BaseOutcome(BaseModel):
    """Common shape of every fetch outcome.

    ``headers`` keeps the order and case the server sent them in.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    status_line: str
    headers: List[Tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""

    def to_http_bytes(self) -> bytes:
        """Serialize as an HTTP/1.x response message."""
        lines = [self.status_line.encode("latin-1", errors="replace")]
        for name, value in self.headers:
            lines.append(f"{name}: {value}".encode("latin-1", errors="replace"))
        return CRLF.join(lines) + CRLF + CRLF + self.body


class FetchSuccess(_BaseOutcome):
    """The final response of a delivered request (after redirects)."""

    kind: Literal[OutcomeKind.SUCCESS] = OutcomeKind.SUCCESS


class RequestFailure(_BaseOutcome):
    """The GET request could not be built."""

    kind: Literal[OutcomeKind.REQUEST_ERROR] = OutcomeKind.REQUEST_ERROR
    reason: str


class ConnectionFailure(_BaseOutcome):
    """The request was sent but failed below HTTP (DNS, TCP, TLS, timeout)."""

    kind: Literal[OutcomeKind.CONNECTION_ERROR] = OutcomeKind.CONNECTION_ERROR
    reason: str


FetchOutcome = Annotated[
    Union[FetchSuccess, RequestFailure, ConnectionFailure],
    Field(discriminator="kind"),
]


class TriggerEvent(BaseModel):
    """Payload of a storage object-finalize notification."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    bucket: str
    name: str
    metageneration: Optional[str] = None
    resource_state: Optional[str] = Field(default=None, alias="resourceState")
    time_created: Optional[datetime] = Field(default=None, alias="timeCreated")
    updated: Optional[datetime] = None


class TaskState(str, Enum):
    """Per-URL task lifecycle. PERSISTED and DROPPED are terminal."""

    PENDING = "pending"
    ADMITTED = "admitted"
    FETCHING = "fetching"
    ENCODING = "encoding"
    PERSISTED = "persisted"
    DROPPED = "dropped"


@dataclass(frozen=True)
class TaskResult:
    """Terminal record of one URL's trip through the pipeline."""

    url: str
    key: str
    state: TaskState
    outcome: Optional[OutcomeKind] = None
    error: Optional[str] = None


@dataclass
class RunSummary:
    """Aggregated results of one job."""

    name: str
    results: List[TaskResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def persisted(self) -> int:
        return sum(1 for r in self.results if r.state is TaskState.PERSISTED)

    @property
    def dropped(self) -> int:
        return sum(1 for r in self.results if r.state is TaskState.DROPPED)

    def outcome_counts(self) -> Dict[str, int]:
        return dict(Counter(r.outcome.value for r in self.results if r.outcome))

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "total": self.total,
            "persisted": self.persisted,
            "dropped": self.dropped,
            "outcomes": self.outcome_counts(),
        }
