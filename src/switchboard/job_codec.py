"""Protobuf wire codec for Switchboard ``OracleJob`` payloads — no I/O.

Only the subset of the job schema modelled in ``src.models`` is understood.
Unknown fields inside known messages are skipped, unknown task variants are
carried through as ``UnknownTask`` so they survive a decode/encode cycle.

Wire layout::

    delimited := varint(len(job)) job
    job       := { tag(1, LEN) task }*
    task      := tag(variant, LEN) variant_message
"""
from __future__ import annotations

import struct
from typing import Any, Iterator

from ..exceptions import MalformedJobPayload
from ..models import (
    AddTask,
    AggregationMethod,
    DivideTask,
    Header,
    HttpMethod,
    HttpTask,
    JsonParseTask,
    MaxTask,
    MeanTask,
    MedianTask,
    MultiplyTask,
    OracleJob,
    RegexExtractTask,
    SubtractTask,
    Task,
    UnknownTask,
    ValueTask,
)

HEX_PREFIX = "0x"

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LEN = 2
WIRE_FIXED32 = 5

_STRING = "string"
_DOUBLE = "double"
_INT32 = "int32"
_TASK = "task"

_ARITHMETIC_SCHEMA: dict[int, tuple[str, Any, bool]] = {
    1: ("scalar", _DOUBLE, False),
    2: ("aggregator_pubkey", _STRING, False),
    3: ("job", OracleJob, False),
    4: ("big", _STRING, False),
}

_REDUCER_SCHEMA: dict[int, tuple[str, Any, bool]] = {
    1: ("tasks", _TASK, True),
    2: ("jobs", OracleJob, True),
    3: ("min_successful_required", _INT32, False),
}

# field number -> (attribute, kind, repeated)
_SCHEMAS: dict[type, dict[int, tuple[str, Any, bool]]] = {
    OracleJob: {1: ("tasks", _TASK, True)},
    Header: {1: ("key", _STRING, False), 2: ("value", _STRING, False)},
    HttpTask: {
        1: ("url", _STRING, False),
        2: ("method", HttpMethod, False),
        3: ("headers", Header, True),
        4: ("body", _STRING, False),
    },
    JsonParseTask: {
        1: ("path", _STRING, False),
        2: ("aggregation_method", AggregationMethod, False),
    },
    RegexExtractTask: {
        1: ("pattern", _STRING, False),
        2: ("group_number", _INT32, False),
    },
    ValueTask: {
        1: ("value", _DOUBLE, False),
        2: ("aggregator_pubkey", _STRING, False),
        3: ("big", _STRING, False),
    },
    MultiplyTask: _ARITHMETIC_SCHEMA,
    DivideTask: _ARITHMETIC_SCHEMA,
    AddTask: _ARITHMETIC_SCHEMA,
    SubtractTask: _ARITHMETIC_SCHEMA,
    MedianTask: _REDUCER_SCHEMA,
    MeanTask: _REDUCER_SCHEMA,
    MaxTask: _REDUCER_SCHEMA,
}

# Task oneof: field number -> variant class
_TASK_VARIANTS: dict[int, type] = {
    1: HttpTask,
    2: JsonParseTask,
    4: MedianTask,
    5: MeanTask,
    7: DivideTask,
    8: MultiplyTask,
    12: ValueTask,
    13: MaxTask,
    14: RegexExtractTask,
    16: AddTask,
    17: SubtractTask,
}
_TASK_NUMBERS: dict[type, int] = {cls: num for num, cls in _TASK_VARIANTS.items()}


def _wire_type(kind: Any) -> int:
    if kind == _DOUBLE:
        return WIRE_FIXED64
    if kind == _INT32 or (isinstance(kind, type) and issubclass(kind, int)):
        return WIRE_VARINT
    return WIRE_LEN


# ---------------------------------------------------------------------------
# Primitive encoding
# ---------------------------------------------------------------------------


def _encode_varint(value: int) -> bytes:
    if value < 0:
        value += 1 << 64
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _tag(field_number: int, wire_type: int) -> bytes:
    return _encode_varint((field_number << 3) | wire_type)


def _len_field(field_number: int, payload: bytes) -> bytes:
    return _tag(field_number, WIRE_LEN) + _encode_varint(len(payload)) + payload


class _Reader:
    """Cursor over a protobuf byte buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self._data)

    def read_varint(self) -> int:
        result = 0
        shift = 0
        while True:
            if self.pos >= len(self._data):
                raise MalformedJobPayload("truncated varint")
            byte = self._data[self.pos]
            self.pos += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7
            if shift >= 70:
                raise MalformedJobPayload("varint too long")

    def read_bytes(self, length: int) -> bytes:
        end = self.pos + length
        if end > len(self._data):
            raise MalformedJobPayload(
                f"truncated field: need {length} bytes, have {len(self._data) - self.pos}"
            )
        chunk = self._data[self.pos:end]
        self.pos = end
        return chunk

    def fields(self) -> Iterator[tuple[int, int, Any]]:
        """Yield ``(field_number, wire_type, value)`` until the buffer is consumed."""
        while not self.at_end():
            key = self.read_varint()
            field_number, wire_type = key >> 3, key & 0x07
            if field_number == 0:
                raise MalformedJobPayload("field number 0 is invalid")
            if wire_type == WIRE_VARINT:
                value: Any = self.read_varint()
            elif wire_type == WIRE_FIXED64:
                value = self.read_bytes(8)
            elif wire_type == WIRE_LEN:
                value = self.read_bytes(self.read_varint())
            elif wire_type == WIRE_FIXED32:
                value = self.read_bytes(4)
            else:
                raise MalformedJobPayload(f"unsupported wire type {wire_type}")
            yield field_number, wire_type, value


# ---------------------------------------------------------------------------
# Message encoding
# ---------------------------------------------------------------------------


def _encode_value(field_number: int, kind: Any, value: Any) -> bytes:
    if kind == _STRING:
        return _len_field(field_number, value.encode("utf-8"))
    if kind == _DOUBLE:
        return _tag(field_number, WIRE_FIXED64) + struct.pack("<d", value)
    if kind == _INT32 or (isinstance(kind, type) and issubclass(kind, int)):
        return _tag(field_number, WIRE_VARINT) + _encode_varint(int(value))
    if kind == _TASK:
        return _len_field(field_number, _encode_task(value))
    return _len_field(field_number, _encode_message(value))


def _encode_message(message: Any) -> bytes:
    schema = _SCHEMAS[type(message)]
    out = bytearray()
    for field_number in sorted(schema):
        name, kind, repeated = schema[field_number]
        value = getattr(message, name)
        if value is None:
            continue
        items = value if repeated else (value,)
        for item in items:
            out += _encode_value(field_number, kind, item)
    return bytes(out)


def _encode_task(task: Task) -> bytes:
    if isinstance(task, UnknownTask):
        return _len_field(task.field_number, task.raw)
    field_number = _TASK_NUMBERS.get(type(task))
    if field_number is None:
        raise TypeError(f"Unsupported task type: {type(task).__name__}")
    return _len_field(field_number, _encode_message(task))


# ---------------------------------------------------------------------------
# Message decoding
# ---------------------------------------------------------------------------


def _decode_value(kind: Any, raw: Any) -> Any:
    if kind == _STRING:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedJobPayload(f"invalid utf-8 string: {e}") from e
    if kind == _DOUBLE:
        return struct.unpack("<d", raw)[0]
    if kind == _INT32:
        return raw - (1 << 64) if raw >= 1 << 63 else raw
    if kind == _TASK:
        return _decode_task(raw)
    if isinstance(kind, type) and issubclass(kind, int):
        try:
            return kind(raw)
        except ValueError as e:
            raise MalformedJobPayload(f"unknown {kind.__name__} value {raw}") from e
    return _decode_message(kind, raw)


def _decode_message(cls: type, data: bytes) -> Any:
    schema = _SCHEMAS[cls]
    values: dict[str, Any] = {}
    for field_number, wire_type, raw in _Reader(data).fields():
        entry = schema.get(field_number)
        if entry is None:
            continue
        name, kind, repeated = entry
        if wire_type != _wire_type(kind):
            raise MalformedJobPayload(
                f"{cls.__name__}.{name}: unexpected wire type {wire_type}"
            )
        value = _decode_value(kind, raw)
        if repeated:
            values.setdefault(name, []).append(value)
        else:
            values[name] = value
    for name, _kind, repeated in schema.values():
        if repeated and name in values:
            values[name] = tuple(values[name])
    return cls(**values)


def _decode_task(data: bytes) -> Task:
    task: Task | None = None
    # Last variant wins, as with any protobuf oneof.
    for field_number, wire_type, raw in _Reader(data).fields():
        if wire_type != WIRE_LEN:
            raise MalformedJobPayload(
                f"task variant {field_number}: unexpected wire type {wire_type}"
            )
        cls = _TASK_VARIANTS.get(field_number)
        if cls is None:
            task = UnknownTask(field_number=field_number, raw=raw)
        else:
            task = _decode_message(cls, raw)
    if task is None:
        raise MalformedJobPayload("task carries no variant")
    return task


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encode_job(job: OracleJob) -> bytes:
    """Serialize a job without a length prefix."""
    return _encode_message(job)


def decode_job(data: bytes) -> OracleJob:
    """Parse a job that is not length-prefixed."""
    return _decode_message(OracleJob, data)


def encode_delimited(job: OracleJob) -> bytes:
    """Serialize a job prefixed with its varint byte length."""
    body = encode_job(job)
    return _encode_varint(len(body)) + body


def decode_delimited(data: bytes) -> OracleJob:
    """Parse the first length-prefixed job in ``data``."""
    reader = _Reader(data)
    length = reader.read_varint()
    return decode_job(reader.read_bytes(length))


def iter_delimited(data: bytes) -> Iterator[OracleJob]:
    """Yield every length-prefixed job packed back to back in ``data``."""
    reader = _Reader(data)
    while not reader.at_end():
        length = reader.read_varint()
        yield decode_job(reader.read_bytes(length))


def encode_job_hex(job: OracleJob) -> str:
    """Encode a job for transport: ``0x`` + hex of the delimited bytes."""
    return HEX_PREFIX + encode_delimited(job).hex()


def decode_job_hex(text: str) -> OracleJob:
    """Decode the ``0x``-prefixed hex form stored in a Job resource."""
    if not isinstance(text, str) or not text.startswith(HEX_PREFIX):
        raise MalformedJobPayload(f"job payload must start with {HEX_PREFIX!r}")
    try:
        raw = bytes.fromhex(text[len(HEX_PREFIX):])
    except ValueError as e:
        raise MalformedJobPayload(f"invalid hex payload: {e}") from e
    return decode_delimited(raw)
