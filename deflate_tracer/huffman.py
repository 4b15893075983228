from typing import NamedTuple, Optional, Sequence

from deflate_tracer.bitio import BitReader
from deflate_tracer.errors import InvalidCodeLengths, InvalidHuffmanCode

MAX_BITS = 15


class HuffmanMatch(NamedTuple):
    symbol: int
    length: int
    bit_start: int
    bit_end: int


def _kraft_left(lengths: Sequence[int], maxbits: int = MAX_BITS) -> int:
    """Unused code space at depth ``maxbits``; negative means over-subscribed."""
    bit_counts = [0] * (maxbits + 1)
    for l in lengths:
        if 0 < l <= maxbits:
            bit_counts[l] += 1

    left_after_counts = 1
    for bits in range(1, maxbits + 1):
        left_after_counts <<= 1
        left_after_counts -= bit_counts[bits]
    return left_after_counts


def is_complete_huffman_lengths(lengths: Sequence[int], maxbits: int = MAX_BITS) -> bool:
    return _kraft_left(lengths, maxbits) == 0


class CanonicalHuffman:
    """Canonical prefix code built from per-symbol code lengths (RFC 1951 3.2.2).

    Codes are matched MSB-first: the first bit read from the stream is the most
    significant bit of the code.
    """
    __slots__ = ("lengths", "max_symbol", "codes", "_dec_map")

    def __init__(self, lengths: Sequence[int], max_symbol: Optional[int] = None):
        if len(lengths) == 0:
            raise InvalidCodeLengths("cannot build a Huffman code from an empty length list")
        if max_symbol is None:
            max_symbol = len(lengths) - 1
        lengths = list(lengths[:max_symbol + 1])
        for sym, l in enumerate(lengths):
            if not 0 <= l <= MAX_BITS:
                raise InvalidCodeLengths(f"symbol {sym} has code length {l}, expected 0..{MAX_BITS}")
        if _kraft_left(lengths) < 0:
            raise InvalidCodeLengths("code lengths are over-subscribed")

        self.lengths = lengths
        self.max_symbol = max_symbol

        bl_count = [0] * (MAX_BITS + 1)
        for l in lengths:
            bl_count[l] += 1
        bl_count[0] = 0
        next_code = [0] * (MAX_BITS + 1)
        code = 0
        for bits in range(1, MAX_BITS + 1):
            code = (code + bl_count[bits - 1]) << 1
            next_code[bits] = code

        codes: dict[int, tuple[int, int]] = {}
        dec_map: dict[tuple[int, int], int] = {}
        for sym, l in enumerate(lengths):
            if l == 0:
                continue
            c = next_code[l]
            next_code[l] += 1
            codes[sym] = (c, l)
            dec_map[(c, l)] = sym

        self.codes = codes
        self._dec_map = dec_map

    def __len__(self) -> int:
        return len(self.codes)

    @property
    def is_complete(self) -> bool:
        return is_complete_huffman_lengths(self.lengths)

    def code_length(self, sym: int) -> int:
        return self.lengths[sym] if 0 <= sym < len(self.lengths) else 0

    def decode(self, br: BitReader) -> HuffmanMatch:
        if not self._dec_map:
            raise InvalidHuffmanCode(f"empty Huffman code used at {br.position()}")
        start = br.bit_offset()
        code = 0
        for bits in range(1, MAX_BITS + 1):
            code = (code << 1) | br.read_bit()
            sym = self._dec_map.get((code, bits))
            if sym is not None:
                return HuffmanMatch(sym, bits, start, br.bit_offset())
        raise InvalidHuffmanCode(f"no Huffman code matches {code:015b} starting at bit {start}")
