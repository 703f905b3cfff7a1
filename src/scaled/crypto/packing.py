from __future__ import annotations

from typing import Final

UINT_WIDTHS: Final[frozenset[int]] = frozenset({16, 64, 128, 256})


class PackedWriter:
    """Appends fixed-width big-endian unsigned integers to a growable buffer.

    Mirrors Solidity's `abi.encodePacked` for the integer widths used by the
    settlement contract.
    """

    def __init__(self) -> None:
        self._buf = bytearray()

    def write_uint(self, value: int, bits: int) -> "PackedWriter":
        if bits not in UINT_WIDTHS:
            raise ValueError(f"Unsupported integer width: {bits}")
        if not 0 <= value < (1 << bits):
            raise ValueError(f"Value {value} does not fit in uint{bits}")
        self._buf += value.to_bytes(bits // 8, "big")
        return self

    def write_bytes(self, data: bytes) -> "PackedWriter":
        self._buf += data
        return self

    def __len__(self) -> int:
        return len(self._buf)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class PackedReader:
    """Reads fixed-width big-endian unsigned integers back from a buffer."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    def read_uint(self, bits: int) -> int:
        return int.from_bytes(self.read_bytes(bits // 8), "big")

    def read_bytes(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._data):
            raise ValueError(
                f"Truncated input: need {size} bytes at offset {self._offset}, "
                f"have {len(self._data) - self._offset}"
            )
        chunk = self._data[self._offset : end]
        self._offset = end
        return chunk

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset


def pack_uints(*fields: tuple[int, int]) -> bytes:
    """Pack `(value, bits)` pairs back to back."""
    writer = PackedWriter()
    for value, bits in fields:
        writer.write_uint(value, bits)
    return writer.getvalue()
