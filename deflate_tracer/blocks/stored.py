from deflate_tracer.bitio import BitReader
from deflate_tracer.blocks import DeflateBlock
from deflate_tracer.errors import InvalidStoredBlock
from deflate_tracer.trace import StoredHeader


def load_stored_body(br: BitReader, block: DeflateBlock, out: bytearray) -> None:
    """Non-compressed block (BTYPE=00)."""
    # the body starts on the next byte boundary
    br.align_to_byte()
    start = br.bit_offset()
    # LEN / NLEN (16-bit, little-endian)
    length = br.read_byte() | (br.read_byte() << 8)
    nlen = br.read_byte() | (br.read_byte() << 8)
    block.items.append(StoredHeader(start, br.bit_offset(), length=length, nlength=nlen))
    if (length ^ nlen) != 0xFFFF:
        raise InvalidStoredBlock(
            f"stored block LEN/NLEN mismatch at bit {start}: LEN={length:#06x} NLEN={nlen:#06x}")
    for _ in range(length):
        pos = br.bit_offset()
        b = br.read_byte()
        block.add_literal(out, b, pos, pos + 8, 8)
