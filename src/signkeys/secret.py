"""Byte buffers for key material that are overwritten with zeros on release.

Python's ``bytes`` and ``str`` are immutable and cannot be scrubbed, so
anything holding PEM text or DER key bytes lives in a ``bytearray`` owned by
one of these wrappers. Use them as context managers so the scrub happens on
every exit path; ``__del__`` is a fallback for handles that escape.
"""
from __future__ import annotations

import hmac
import os
from pathlib import Path
from typing import BinaryIO, List, Union

BytesLike = Union[bytes, bytearray, memoryview]

_READ_CHUNK = 4096


class SecretBuffer:
    """Mutable buffer of sensitive bytes, zeroed on ``zeroize()``/exit/GC"""

    __slots__ = ("_data",)

    def __init__(self, data: BytesLike = b"") -> None:
        self._data = bytearray(data)

    @classmethod
    def from_file(cls, path: Path) -> SecretBuffer:
        """Read ``path`` straight into a scrubbable buffer"""
        with open(path, "rb", buffering=0) as handle:
            return cls._read_all(handle)

    @classmethod
    def _read_all(cls, handle: BinaryIO) -> SecretBuffer:
        size = os.fstat(handle.fileno()).st_size
        buf = cls()
        buf._data = bytearray(max(size + 1, _READ_CHUNK))
        filled = 0
        try:
            while True:
                if filled == len(buf._data):
                    # File grew after fstat
                    grown = bytearray(len(buf._data) * 2)
                    grown[:filled] = buf._data
                    buf.zeroize()
                    buf._data = grown
                with memoryview(buf._data) as view, view[filled:] as window:
                    count = handle.readinto(window)
                if not count:
                    break
                filled += count
        except BaseException:
            buf.zeroize()
            raise
        buf.truncate(filled)
        return buf

    def truncate(self, length: int) -> None:
        """Shrink to ``length`` bytes, zeroing the discarded tail first"""
        tail = len(self._data) - length
        if tail > 0:
            self._data[length:] = bytes(tail)
            del self._data[length:]

    def extend(self, data: BytesLike) -> None:
        self._data += data

    def lines(self) -> List[bytearray]:
        """Split on line boundaries; callers must scrub the returned slices"""
        return self._data.splitlines()

    def zeroize(self) -> None:
        if self._data:
            self._data[:] = bytes(len(self._data))

    @property
    def is_zeroized(self) -> bool:
        return not any(self._data)

    def view(self) -> memoryview:
        """Zero-copy read access; release the view before zeroizing"""
        return memoryview(self._data)

    def as_bytes(self) -> bytes:
        """Return an immutable copy; the copy cannot be scrubbed"""
        return bytes(self._data)

    def startswith(self, prefix: bytes) -> bool:
        return self._data.startswith(prefix)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretBuffer):
            return hmac.compare_digest(self._data, other._data)
        if isinstance(other, (bytes, bytearray)):
            return hmac.compare_digest(self._data, other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __enter__(self) -> SecretBuffer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.zeroize()

    def __del__(self) -> None:
        try:
            self.zeroize()
        except (AttributeError, BufferError):
            # Interpreter teardown or an outstanding memoryview
            pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(<{len(self._data)} bytes redacted>)"


class SecretDocument(SecretBuffer):
    """DER encoding of a PKCS#8 ``PrivateKeyInfo`` or ``EncryptedPrivateKeyInfo``"""

    __slots__ = ()

    def __enter__(self) -> SecretDocument:
        return self


__all__ = ["SecretBuffer", "SecretDocument"]
