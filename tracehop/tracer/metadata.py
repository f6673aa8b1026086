"""Trace identifiers and their X-Trace header encoding.

An identifier packs four fields into a 30-byte value which travels as a
60-character hex string::

    version (1B) | task_id (20B) | op_id (8B) | flags (1B)

``task_id`` is shared by every event of one trace, ``op_id`` is fresh for
every event and bit 0 of ``flags`` carries the sample decision.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, replace

from tracehop.errors import MalformedHeader
from tracehop.utils.helpers import format_hex, is_zero, parse_hex

VERSION = 0x2B
TASK_ID_SIZE = 20
OP_ID_SIZE = 8
FLAG_SAMPLED = 0x01

HEADER_LENGTH = 2 * (1 + TASK_ID_SIZE + OP_ID_SIZE + 1)


@dataclass(frozen=True)
class TraceIdentifier:
    task_id: bytes
    op_id: bytes
    flags: int = 0
    version: int = VERSION

    def __post_init__(self) -> None:
        if len(self.task_id) != TASK_ID_SIZE:
            raise ValueError(f"task_id must be {TASK_ID_SIZE} bytes")
        if len(self.op_id) != OP_ID_SIZE:
            raise ValueError(f"op_id must be {OP_ID_SIZE} bytes")
        if not 0 <= self.flags <= 0xFF:
            raise ValueError("flags must fit in one byte")

    @property
    def sampled(self) -> bool:
        return bool(self.flags & FLAG_SAMPLED)

    @property
    def task_id_hex(self) -> str:
        return format_hex(self.task_id)

    @property
    def op_id_hex(self) -> str:
        return format_hex(self.op_id)

    def with_sampled(self, sampled: bool) -> "TraceIdentifier":
        flags = self.flags | FLAG_SAMPLED if sampled else self.flags & ~FLAG_SAMPLED
        return replace(self, flags=flags)

    def __str__(self) -> str:
        return encode(self)


def new_task_id() -> bytes:
    return secrets.token_bytes(TASK_ID_SIZE)


def new_op_id() -> bytes:
    return secrets.token_bytes(OP_ID_SIZE)


def new_root(sampled: bool) -> TraceIdentifier:
    """Start a new trace with a fresh task id."""
    return TraceIdentifier(
        task_id=new_task_id(),
        op_id=new_op_id(),
        flags=FLAG_SAMPLED if sampled else 0,
    )


def derive_child(parent: TraceIdentifier) -> TraceIdentifier:
    """Keep the parent's task id and flags, generate a fresh op id."""
    return replace(parent, op_id=new_op_id())


def encode(identifier: TraceIdentifier) -> str:
    """
    Encode an identifier into its X-Trace header value.

    Each field is hex-encoded on its own and the results are concatenated,
    so the output always has ``HEADER_LENGTH`` characters.
    """
    return (
        format_hex(bytes([identifier.version]))
        + format_hex(identifier.task_id)
        + format_hex(identifier.op_id)
        + format_hex(bytes([identifier.flags]))
    )


def decode(header: str) -> TraceIdentifier:
    """
    Decode an X-Trace header value.

    Raises:
        MalformedHeader: If the value is empty, has the wrong length or
            version, is not hex, or carries an all-zero task or op id.
    """
    if not header:
        raise MalformedHeader("empty X-Trace header")
    if not isinstance(header, str):
        raise MalformedHeader("X-Trace header must be a string", {"type": type(header).__name__})
    header = header.strip()
    if len(header) != HEADER_LENGTH:
        raise MalformedHeader(
            "X-Trace header has wrong length",
            {"expected": HEADER_LENGTH, "actual": len(header)},
        )

    try:
        version = parse_hex(header[0:2], 1)[0]
        task_id = parse_hex(header[2:42], TASK_ID_SIZE)
        op_id = parse_hex(header[42:58], OP_ID_SIZE)
        flags = parse_hex(header[58:60], 1)[0]
    except ValueError as exc:
        raise MalformedHeader("X-Trace header is not valid hex", {"error": exc}) from exc

    if version != VERSION:
        raise MalformedHeader(
            "unsupported X-Trace version",
            {"expected": f"{VERSION:02X}", "actual": f"{version:02X}"},
        )
    if is_zero(task_id) or is_zero(op_id):
        raise MalformedHeader("X-Trace header carries an empty task or op id")

    try:
        return TraceIdentifier(task_id=task_id, op_id=op_id, flags=flags, version=version)
    except ValueError as exc:
        raise MalformedHeader("X-Trace header has invalid fields", {"error": exc}) from exc
