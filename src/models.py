"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

# ---------------------------------------------------------------------------
# Chain models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventHandle:
    """Identity of an on-chain event stream."""

    owner: str
    struct: str
    field: str


@dataclass(frozen=True)
class Event:
    """Single entry from an event stream."""

    sequence_number: int
    type: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    guid: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> Event:
        return cls(
            sequence_number=int(raw.get("sequence_number", 0)),
            type=raw.get("type", ""),
            data=dict(raw.get("data") or {}),
            guid=dict(raw.get("guid") or {}),
        )


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a dry-run transaction."""

    success: bool
    vm_status: str
    gas_used: int = 0
    hash: str = ""

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> SimulationResult:
        return cls(
            success=bool(raw.get("success", False)),
            vm_status=raw.get("vm_status", ""),
            gas_used=int(raw.get("gas_used", 0)),
            hash=raw.get("hash", ""),
        )


# ---------------------------------------------------------------------------
# Oracle job models
# ---------------------------------------------------------------------------


class HttpMethod(IntEnum):
    UNKNOWN = 0
    GET = 1
    POST = 2


class AggregationMethod(IntEnum):
    NONE = 0
    MIN = 1
    MAX = 2
    SUM = 3
    MEAN = 4
    MEDIAN = 5


@dataclass(frozen=True)
class Header:
    key: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class HttpTask:
    """Fetch a URL and yield the response body."""

    url: str | None = None
    method: HttpMethod | None = None
    headers: tuple[Header, ...] = ()
    body: str | None = None


@dataclass(frozen=True)
class JsonParseTask:
    """Extract a value from the previous result with a JSONPath."""

    path: str | None = None
    aggregation_method: AggregationMethod | None = None


@dataclass(frozen=True)
class RegexExtractTask:
    pattern: str | None = None
    group_number: int | None = None


@dataclass(frozen=True)
class ValueTask:
    """Constant value, or the latest result of another aggregator."""

    value: float | None = None
    aggregator_pubkey: str | None = None
    big: str | None = None


@dataclass(frozen=True)
class _ArithmeticTask:
    scalar: float | None = None
    aggregator_pubkey: str | None = None
    job: OracleJob | None = None
    big: str | None = None


@dataclass(frozen=True)
class MultiplyTask(_ArithmeticTask):
    pass


@dataclass(frozen=True)
class DivideTask(_ArithmeticTask):
    pass


@dataclass(frozen=True)
class AddTask(_ArithmeticTask):
    pass


@dataclass(frozen=True)
class SubtractTask(_ArithmeticTask):
    pass


@dataclass(frozen=True)
class _ReducerTask:
    tasks: tuple[Task, ...] = ()
    jobs: tuple[OracleJob, ...] = ()
    min_successful_required: int | None = None


@dataclass(frozen=True)
class MedianTask(_ReducerTask):
    pass


@dataclass(frozen=True)
class MeanTask(_ReducerTask):
    pass


@dataclass(frozen=True)
class MaxTask(_ReducerTask):
    pass


@dataclass(frozen=True)
class UnknownTask:
    """Task variant this client does not model; kept as raw bytes."""

    field_number: int
    raw: bytes = b""


Task = Union[
    HttpTask,
    JsonParseTask,
    RegexExtractTask,
    ValueTask,
    MultiplyTask,
    DivideTask,
    AddTask,
    SubtractTask,
    MedianTask,
    MeanTask,
    MaxTask,
    UnknownTask,
]


@dataclass(frozen=True)
class OracleJob:
    """Ordered list of tasks producing a single value."""

    tasks: tuple[Task, ...] = ()
