import pytest

from scaled.crypto.packing import PackedReader, PackedWriter, pack_uints


def test_writer_appends_big_endian_fixed_width() -> None:
    writer = PackedWriter()
    writer.write_uint(1, 16).write_uint(2, 64).write_bytes(b"\xaa")

    assert writer.getvalue() == b"\x00\x01" + b"\x00" * 7 + b"\x02" + b"\xaa"
    assert len(writer) == 11


@pytest.mark.parametrize("bits", [16, 64, 128, 256])
def test_writer_rejects_overflow(bits: int) -> None:
    with pytest.raises(ValueError, match=f"uint{bits}"):
        PackedWriter().write_uint(1 << bits, bits)


def test_writer_rejects_negative() -> None:
    with pytest.raises(ValueError):
        PackedWriter().write_uint(-1, 64)


def test_writer_rejects_unknown_width() -> None:
    with pytest.raises(ValueError, match="Unsupported"):
        PackedWriter().write_uint(1, 32)


def test_reader_reads_back_fields() -> None:
    reader = PackedReader(pack_uints((7, 64), (1, 16), (2**128 - 1, 128)))

    assert reader.read_uint(64) == 7
    assert reader.read_uint(16) == 1
    assert reader.read_uint(128) == 2**128 - 1
    assert reader.remaining == 0


def test_reader_rejects_truncated_input() -> None:
    with pytest.raises(ValueError, match="Truncated"):
        PackedReader(b"\x00\x01").read_uint(64)
