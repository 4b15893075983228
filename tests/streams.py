"""Hand-built DEFLATE streams for tests that need exact control over the bits."""

import struct
import zlib

from deflate_tracer.bitio import BitWriter
from deflate_tracer.blocks.dynamic_huffman import CL_ORDER
from deflate_tracer.blocks.fixed_huffman import STATIC_DIST_CODEC, STATIC_LITLEN_CODEC
from deflate_tracer.blocks.huffman import DIST_BASES, DIST_EXTRA, LEN_BASES, LEN_EXTRA
from deflate_tracer.huffman import CanonicalHuffman

ZLIB_HEADER = b"\x78\x9c"


def zlib_wrap(deflate: bytes, data: bytes) -> bytes:
    return ZLIB_HEADER + deflate + struct.pack(">I", zlib.adler32(data))


def length_to_code_and_extra(length: int) -> tuple[int, int, int]:
    if length == 258:
        return 285, 0, 0
    for i in range(len(LEN_BASES) - 1):
        if LEN_BASES[i] <= length < LEN_BASES[i + 1]:
            return 257 + i, length - LEN_BASES[i], LEN_EXTRA[i]
    raise ValueError("length out of range")


def distance_to_code_and_extra(distance: int) -> tuple[int, int, int]:
    for i in range(len(DIST_BASES)):
        nextb = DIST_BASES[i + 1] if i + 1 < len(DIST_BASES) else 32769
        if DIST_BASES[i] <= distance < nextb:
            return i, distance - DIST_BASES[i], DIST_EXTRA[i]
    raise ValueError("distance out of range")


def write_symbol(bw: BitWriter, codec: CanonicalHuffman, sym: int) -> None:
    code, n = codec.codes[sym]
    bw.write_code(code, n)


def write_tokens(bw: BitWriter, tokens, litlen: CanonicalHuffman, dist: CanonicalHuffman) -> None:
    """tokens: ints are literals, (length, distance) tuples are back-references."""
    for t in tokens:
        if isinstance(t, int):
            write_symbol(bw, litlen, t)
            continue
        length, distance = t
        lcode, lextra, lbits = length_to_code_and_extra(length)
        write_symbol(bw, litlen, lcode)
        if lbits:
            bw.write_bits(lextra, lbits)
        dcode, dextra, dbits = distance_to_code_and_extra(distance)
        write_symbol(bw, dist, dcode)
        if dbits:
            bw.write_bits(dextra, dbits)
    write_symbol(bw, litlen, 256)


def stored_block(bw: BitWriter, payload: bytes, final: bool = True, nlen: int | None = None) -> None:
    bw.write_bits(int(final), 1)
    bw.write_bits(0b00, 2)
    bw.align_to_byte()
    bw.write_bits(len(payload), 16)
    bw.write_bits(len(payload) ^ 0xFFFF if nlen is None else nlen, 16)
    bw.write_bytes(payload)


def fixed_block(bw: BitWriter, tokens, final: bool = True) -> None:
    bw.write_bits(int(final), 1)
    bw.write_bits(0b01, 2)
    write_tokens(bw, tokens, STATIC_LITLEN_CODEC, STATIC_DIST_CODEC)


# code-length alphabet where 0..15 all get 4-bit codes (a complete code, no run symbols)
FLAT_CL_LENGTHS = [4] * 16 + [0, 0, 0]


def dynamic_header(bw: BitWriter, litlen_lengths: list[int], dist_lengths: list[int], final: bool = True) -> None:
    bw.write_bits(int(final), 1)
    bw.write_bits(0b10, 2)
    bw.write_bits(len(litlen_lengths) - 257, 5)
    bw.write_bits(len(dist_lengths) - 1, 5)
    bw.write_bits(19 - 4, 4)
    for sym in CL_ORDER:
        bw.write_bits(FLAT_CL_LENGTHS[sym], 3)
    cl_code = CanonicalHuffman(FLAT_CL_LENGTHS)
    for l in litlen_lengths + dist_lengths:
        write_symbol(bw, cl_code, l)


def dynamic_block(bw: BitWriter, litlen_lengths: list[int], dist_lengths: list[int], tokens,
                  final: bool = True) -> None:
    dynamic_header(bw, litlen_lengths, dist_lengths, final)
    write_tokens(bw, tokens, CanonicalHuffman(litlen_lengths), CanonicalHuffman(dist_lengths))


def abcdeabcd_stream() -> bytes:
    """zlib stream for b"abcdeabcd": five fixed-code literals, then length 4 at distance 5."""
    bw = BitWriter()
    fixed_block(bw, [ord(c) for c in "abcde"] + [(4, 5)])
    return zlib_wrap(bw.get_bytes(), b"abcdeabcd")
