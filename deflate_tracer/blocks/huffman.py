from typing import Optional

from deflate_tracer.bitio import BitReader
from deflate_tracer.blocks import DeflateBlock
from deflate_tracer.errors import IncompleteCodeLengths, InvalidHuffmanCode
from deflate_tracer.huffman import CanonicalHuffman
from deflate_tracer.lz77 import resolve_back_reference
from deflate_tracer.trace import BackReference, EndOfBlock

END_OF_BLOCK = 256

LEN_BASES = [
    3,4,5,6,7,8,9,10,11,13,15,17,19,23,27,31,
    35,43,51,59,67,83,99,115,131,163,195,227,258
]
LEN_EXTRA = [
    0,0,0,0,0,0,0,0,1,1,1,1,2,2,2,2,
    3,3,3,3,4,4,4,4,5,5,5,5,0
]
DIST_BASES = [
    1,2,3,4,5,7,9,13,17,25,33,49,65,97,129,193,
    257,385,513,769,1025,1537,2049,3073,4097,6145,8193,12289,16385,24577
]
DIST_EXTRA = [
    0,0,0,0,1,1,2,2,3,3,4,4,5,5,6,6,
    7,7,8,8,9,9,10,10,11,11,12,12,13,13
]


def len_code_to_length(code: int, br: BitReader) -> int:
    i = code - 257
    if not 0 <= i < len(LEN_BASES):
        raise InvalidHuffmanCode(f"literal/length symbol {code} is not a valid length code")
    ebits = LEN_EXTRA[i]
    extra = br.read_bits(ebits) if ebits else 0
    return LEN_BASES[i] + extra


def dist_code_to_distance(code: int, br: BitReader) -> int:
    if not 0 <= code < len(DIST_BASES):
        raise InvalidHuffmanCode(f"distance symbol {code} is not a valid distance code")
    ebits = DIST_EXTRA[code]
    extra = br.read_bits(ebits) if ebits else 0
    return DIST_BASES[code] + extra


def load_symbols(br: BitReader, block: DeflateBlock, out: bytearray,
                 litlen_codec: CanonicalHuffman, dist_codec: Optional[CanonicalHuffman]) -> None:
    """Symbol loop shared by fixed and dynamic blocks; runs through end-of-block."""
    while True:
        m = litlen_codec.decode(br)
        if m.symbol < 256:
            block.add_literal(out, m.symbol, m.bit_start, m.bit_end, m.length)
        elif m.symbol == END_OF_BLOCK:
            block.items.append(EndOfBlock(m.bit_start, m.bit_end))
            return
        else:
            length = len_code_to_length(m.symbol, br)
            if dist_codec is None:
                raise IncompleteCodeLengths(
                    f"length code {m.symbol} at bit {m.bit_start} but the block declares no distance codes")
            d = dist_codec.decode(br)
            distance = dist_code_to_distance(d.symbol, br)
            resolved = resolve_back_reference(length, distance, out)
            block.add_back_reference(out, BackReference(
                m.bit_start, br.bit_offset(),
                length=length, distance=distance, resolved_bytes=resolved,
                length_symbol=m.symbol, distance_symbol=d.symbol, output_offset=len(out),
            ))
