from deflate_tracer.bitio import BitReader
from deflate_tracer.blocks import DeflateBlock
from deflate_tracer.blocks.huffman import load_symbols
from deflate_tracer.huffman import CanonicalHuffman


def _fixed_litlen_lengths() -> list[int]:
    lens = [0]*288  # 0..287
    for s in range(0, 144):   lens[s] = 8
    for s in range(144, 256): lens[s] = 9
    for s in range(256, 280): lens[s] = 7
    for s in range(280, 288): lens[s] = 8
    return lens


def _fixed_dist_lengths() -> list[int]:
    return [5]*32  # 0..31


# shared by every fixed block, never mutated
STATIC_LITLEN_CODEC, STATIC_DIST_CODEC = CanonicalHuffman(_fixed_litlen_lengths()), CanonicalHuffman(_fixed_dist_lengths())


def load_fixed_body(br: BitReader, block: DeflateBlock, out: bytearray) -> None:
    """Fixed Huffman block (BTYPE=01)."""
    load_symbols(br, block, out, STATIC_LITLEN_CODEC, STATIC_DIST_CODEC)
