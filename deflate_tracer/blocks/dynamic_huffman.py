import logging
from dataclasses import dataclass
from typing import Optional

from deflate_tracer.bitio import BitReader
from deflate_tracer.blocks import DeflateBlock
from deflate_tracer.blocks.huffman import END_OF_BLOCK, load_symbols
from deflate_tracer.errors import IncompleteCodeLengths, InvalidCodeLengths
from deflate_tracer.huffman import CanonicalHuffman
from deflate_tracer.trace import CodeLengthCodeEntry, DynamicCodeLengthEntry, DynamicHeader

logger = logging.getLogger(__name__)

CL_ORDER = [16, 17, 18, 0, 8, 7, 9, 6, 10, 5, 11, 4, 12, 3, 13, 2, 14, 1, 15]


def load_code_length_code(br: BitReader, block: DeflateBlock, hclen_count: int) -> CanonicalHuffman:
    lens = [0]*19
    for i in range(hclen_count):
        sym = CL_ORDER[i]
        start = br.bit_offset()
        lens[sym] = br.read_bits(3)
        block.items.append(CodeLengthCodeEntry(start, br.bit_offset(), symbol=sym, code_length=lens[sym]))
    return CanonicalHuffman(lens)


@dataclass
class DynamicHuffmanHeader:
    hlit: int   # HLIT + 257
    hdist: int  # HDIST + 1
    hclen: int  # HCLEN + 4
    cl_code: CanonicalHuffman
    litlen_code: CanonicalHuffman
    dist_code: Optional[CanonicalHuffman]  # None when every distance length is 0

    @property
    def litlen_lengths(self) -> list[int]:
        return self.litlen_code.lengths

    @property
    def dist_lengths(self) -> list[int]:
        return self.dist_code.lengths if self.dist_code is not None else [0] * self.hdist

    @staticmethod
    def load(br: BitReader, block: DeflateBlock) -> "DynamicHuffmanHeader":
        start = br.bit_offset()
        num_litlen = br.read_bits(5) + 257
        num_dist   = br.read_bits(5) + 1
        cl_count   = br.read_bits(4) + 4
        block.items.append(DynamicHeader(start, br.bit_offset(), hlit=num_litlen, hdist=num_dist, hclen=cl_count))

        cl_code = load_code_length_code(br, block, cl_count)

        total = num_litlen + num_dist
        seq: list[int] = []
        while len(seq) < total:
            m = cl_code.decode(br)
            sym = m.symbol
            if sym <= 15:
                run = [sym]
            elif sym == 16:
                if not seq:
                    raise InvalidCodeLengths(f"code length symbol 16 at bit {m.bit_start} has no previous length")
                run = [seq[-1]] * (br.read_bits(2) + 3)   # 3..6
            elif sym == 17:
                run = [0] * (br.read_bits(3) + 3)         # 3..10 zeros
            else:
                run = [0] * (br.read_bits(7) + 11)        # 11..138 zeros
            if len(seq) + len(run) > total:
                raise InvalidCodeLengths(
                    f"code lengths overrun the declared {total} entries at bit {m.bit_start}")
            block.items.append(DynamicCodeLengthEntry(
                m.bit_start, br.bit_offset(), symbol=sym, first_index=len(seq), lengths=tuple(run)))
            seq.extend(run)

        litlen_lengths = seq[:num_litlen]
        dist_lengths   = seq[num_litlen:]
        if not any(litlen_lengths):
            raise IncompleteCodeLengths("literal/length code has no symbols")
        if litlen_lengths[END_OF_BLOCK] == 0:
            raise InvalidCodeLengths("end-of-block (256) must have a non-zero code length")

        # a single zero distance length means the block is literals only (RFC 1951 3.2.7)
        dist_code = CanonicalHuffman(dist_lengths) if any(dist_lengths) else None
        litlen_code = CanonicalHuffman(litlen_lengths)
        logger.debug("dynamic header at bit %d: %d litlen, %d dist, %d cl codes, %d header bits",
                     start, num_litlen, num_dist, cl_count, br.bit_offset() - start)
        return DynamicHuffmanHeader(
            hlit=num_litlen, hdist=num_dist, hclen=cl_count,
            cl_code=cl_code, litlen_code=litlen_code, dist_code=dist_code,
        )


def load_dynamic_body(br: BitReader, block: DeflateBlock, out: bytearray) -> None:
    """Dynamic Huffman block (BTYPE=10)."""
    header = DynamicHuffmanHeader.load(br, block)
    block.header = header
    load_symbols(br, block, out, header.litlen_code, header.dist_code)
