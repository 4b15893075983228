import zlib

import pytest

from deflate_tracer.blocks import BlockKind
from deflate_tracer.compress import COMPRESSORS, CompressionStats, compress, compress_and_trace, zlib_compress

TEXT = "the quick brown fox jumps over the lazy dog. " * 40


def test_stats_ratio():
    stats = CompressionStats(original_size=200, compressed_size=50)
    assert stats.ratio == pytest.approx(-0.75)
    assert str(stats) == "200 -> 50 bytes (-75.0%)"


def test_stats_for_empty_input():
    assert CompressionStats(0, 0).ratio == 0.0


def test_invalid_level():
    with pytest.raises(ValueError):
        zlib_compress(b"abc", level=10)


@pytest.mark.parametrize("name", sorted(COMPRESSORS))
def test_every_compressor_produces_zlib(name):
    data = TEXT.encode()
    assert zlib.decompress(COMPRESSORS[name](data)) == data


def test_level_zero_gives_stored_blocks():
    result, stats = compress_and_trace(TEXT, level=0)
    assert result.ok
    assert result.data == TEXT.encode()
    assert {b.kind for b in result.deflate_blocks} == {BlockKind.STORED}
    assert stats.ratio > 0


def test_compressed_text_is_smaller():
    result, stats = compress_and_trace(TEXT, level=9)
    assert result.ok
    assert result.checksum == zlib.adler32(TEXT.encode())
    assert stats.compressed_size == len(result.compressed)
    assert stats.ratio < 0


def test_zopfli_trace():
    result, stats = compress_and_trace(TEXT, use_zopfli=True)
    assert result.ok
    assert result.data == TEXT.encode()
    assert stats.compressed_size == len(result.compressed)


def test_raw_trace_has_no_envelope():
    result, stats = compress_and_trace(TEXT.encode(), raw=True)
    assert result.ok
    assert result.data == TEXT.encode()
    assert result.zlib_header is None
    assert all(b.kind.is_deflate for b in result.blocks)
    assert stats.compressed_size == len(compress(TEXT.encode())) - 6


def test_empty_text():
    result, stats = compress_and_trace("")
    assert result.ok
    assert result.blocks == []
    assert (stats.original_size, stats.compressed_size) == (0, 0)
