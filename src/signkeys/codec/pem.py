"""Minimal RFC 7468 PEM envelope codec operating on scrubbable buffers."""
from __future__ import annotations

import base64
import binascii
import re
from typing import List, Tuple

from ..exceptions import KeyMalformed
from ..secret import SecretBuffer, SecretDocument

LINE_WIDTH = 64
LINE_ENDING = b"\n"

_PRE = b"-----BEGIN "
_POST = b"-----END "
_DASHES = b"-----"
_LABEL_RE = re.compile(rb"[\x21-\x2c\x2e-\x7e]+(?:[ -][\x21-\x2c\x2e-\x7e]+)*")


def _check_label(label: bytes) -> None:
    if not _LABEL_RE.fullmatch(label):
        raise KeyMalformed(f"Invalid PEM label: {label!r}")


def boundary(label: str) -> bytes:
    """Pre-encapsulation boundary line for ``label``"""
    return _PRE + label.encode("ascii") + _DASHES


def encode(document: SecretDocument, label: str) -> SecretBuffer:
    """Wrap DER ``document`` in a PEM envelope with the given label"""
    raw_label = label.encode("ascii")
    _check_label(raw_label)

    with document.view() as der:
        body = SecretBuffer(base64.b64encode(der))
    with body:
        out = SecretBuffer(_PRE + raw_label + _DASHES + LINE_ENDING)
        with body.view() as encoded:
            for start in range(0, len(encoded), LINE_WIDTH):
                out.extend(encoded[start:start + LINE_WIDTH])
                out.extend(LINE_ENDING)
        out.extend(_POST + raw_label + _DASHES + LINE_ENDING)
    return out


def decode(pem: SecretBuffer) -> Tuple[str, SecretDocument]:
    """Parse a PEM envelope, returning its label and decoded DER payload"""
    raw_lines = pem.lines()
    lines: List[bytearray] = [line.strip() for line in raw_lines]
    body = SecretBuffer()
    try:
        while lines and not lines[-1]:
            lines.pop()
        if len(lines) < 2:
            raise KeyMalformed("Truncated PEM document")

        # Nothing may precede the pre-encapsulation boundary
        first, last = raw_lines[0].rstrip(), lines[-1]
        if not (first.startswith(_PRE) and first.endswith(_DASHES)):
            raise KeyMalformed("Missing PEM pre-encapsulation boundary")
        label = bytes(first[len(_PRE):-len(_DASHES)])
        _check_label(label)
        if last != _POST + label + _DASHES:
            raise KeyMalformed("PEM boundaries do not match")

        for line in lines[1:-1]:
            body.extend(line)
        try:
            with body.view() as encoded:
                der = SecretDocument(base64.b64decode(encoded, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise KeyMalformed("Invalid base64 in PEM body") from exc
    finally:
        for line in raw_lines + lines:
            line[:] = bytes(len(line))
        body.zeroize()

    return label.decode("ascii"), der


__all__ = ["LINE_ENDING", "LINE_WIDTH", "boundary", "decode", "encode"]
