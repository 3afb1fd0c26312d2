"""Minimal DER framing reader, enough to check PKCS#8 documents."""
from __future__ import annotations

from typing import Optional, Tuple

from ..exceptions import KeyMalformed

INTEGER = 0x02
OBJECT_IDENTIFIER = 0x06
SEQUENCE = 0x30

# Four length octets already allow 4 GiB
_MAX_LENGTH_OCTETS = 4


def read_tlv(data: memoryview, offset: int = 0, limit: Optional[int] = None) -> Tuple[int, int, int]:
    """Read the element at ``offset``, returning ``(tag, content_start, end)``

    ``limit`` bounds the element to its enclosing container.
    """
    limit = len(data) if limit is None else limit
    if offset + 2 > limit:
        raise KeyMalformed("Truncated DER element")
    tag = data[offset]
    if tag & 0x1F == 0x1F:
        raise KeyMalformed("Unsupported multi-byte DER tag")

    first = data[offset + 1]
    start = offset + 2
    if first < 0x80:
        length = first
    else:
        count = first & 0x7F
        if count == 0 or count > _MAX_LENGTH_OCTETS:
            raise KeyMalformed("Unsupported DER length encoding")
        if start + count > limit:
            raise KeyMalformed("Truncated DER length")
        if data[start] == 0:
            raise KeyMalformed("Non-minimal DER length")
        length = int.from_bytes(bytes(data[start:start + count]), "big")
        if length < 0x80:
            raise KeyMalformed("Non-minimal DER length")
        start += count

    end = start + length
    if end > limit:
        raise KeyMalformed("DER element overruns its container")
    return tag, start, end


def check_document(data: memoryview) -> None:
    """Require ``data`` to be exactly one DER SEQUENCE"""
    tag, _start, end = read_tlv(data)
    if tag != SEQUENCE:
        raise KeyMalformed("DER document is not a SEQUENCE")
    if end != len(data):
        raise KeyMalformed("Trailing data after DER document")


def expect(data: memoryview, tag: int, offset: int, limit: int) -> Tuple[int, int]:
    found, start, end = read_tlv(data, offset, limit)
    if found != tag:
        raise KeyMalformed(f"Expected DER tag 0x{tag:02x}, found 0x{found:02x}")
    return start, end


def decode_oid(content: bytes) -> str:
    """Dotted-decimal form of an OBJECT IDENTIFIER's content octets"""
    if not content or content[-1] & 0x80:
        raise KeyMalformed("Truncated OBJECT IDENTIFIER")
    arcs = []
    value = 0
    fresh = True
    for byte in content:
        if fresh and byte == 0x80:
            raise KeyMalformed("Non-minimal OBJECT IDENTIFIER arc")
        value = (value << 7) | (byte & 0x7F)
        fresh = not byte & 0x80
        if fresh:
            arcs.append(value)
            value = 0

    root = min(arcs[0] // 40, 2)
    head = [root, arcs[0] - 40 * root]
    return ".".join(str(arc) for arc in head + arcs[1:])


__all__ = [
    "INTEGER",
    "OBJECT_IDENTIFIER",
    "SEQUENCE",
    "check_document",
    "decode_oid",
    "expect",
    "read_tlv",
]
