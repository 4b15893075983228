from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from deflate_tracer.bitio import BitReader
from deflate_tracer.errors import DeflateError, InvalidBlockType
from deflate_tracer.trace import BackReference, BlockHeader, Literal, TraceItem


class BlockKind(Enum):
    ZLIB_HEADER = "zlib_header"
    STORED = "stored"
    FIXED_HUFFMAN = "fixed"
    DYNAMIC_HUFFMAN = "dynamic"
    ZLIB_CHECKSUM = "zlib_checksum"
    RESERVED = "reserved"  # BTYPE=11, decoding stops after its header

    @property
    def is_deflate(self) -> bool:
        return self in (BlockKind.STORED, BlockKind.FIXED_HUFFMAN, BlockKind.DYNAMIC_HUFFMAN, BlockKind.RESERVED)


BTYPE_KINDS = {
    0b00: BlockKind.STORED,
    0b01: BlockKind.FIXED_HUFFMAN,
    0b10: BlockKind.DYNAMIC_HUFFMAN,
    0b11: BlockKind.RESERVED,
}


@dataclass
class DeflateBlock:
    kind: BlockKind
    start_bit: int
    end_bit: int = 0
    final: bool = False
    items: list[TraceItem] = field(default_factory=list)
    decoded: bytearray = field(default_factory=bytearray)
    header: Optional[Any] = None  # DynamicHuffmanHeader for dynamic blocks
    error: Optional[str] = None

    @property
    def bit_length(self) -> int:
        return self.end_bit - self.start_bit

    @property
    def byte_start(self) -> int:
        return self.start_bit // 8

    @property
    def byte_end(self) -> int:
        return (self.end_bit + 7) // 8

    @property
    def size_bytes(self) -> int:
        return self.byte_end - self.byte_start

    def add_literal(self, out: bytearray, sym: int, bit_start: int, bit_end: int, code_length: int) -> Literal:
        item = Literal(bit_start, bit_end, symbol=sym, code_length=code_length, output_offset=len(out))
        out.append(sym)
        self.decoded.append(sym)
        self.items.append(item)
        return item

    def add_back_reference(self, out: bytearray, item: BackReference) -> BackReference:
        out += item.resolved_bytes
        self.decoded += item.resolved_bytes
        self.items.append(item)
        return item

    def as_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "start_bit": self.start_bit,
            "end_bit": self.end_bit,
            "byte_start": self.byte_start,
            "size_bytes": self.size_bytes,
            "final": self.final,
            "decoded": bytes(self.decoded).hex(),
            "error": self.error,
            "items": [item.as_dict() for item in self.items],
        }


def decode_block(br: BitReader, out: bytearray) -> DeflateBlock:
    """Decode one DEFLATE block, appending its bytes to ``out``.

    On a malformed stream the raised DeflateError carries the partially decoded
    block in ``partial_block``.
    """
    import deflate_tracer.blocks.stored
    import deflate_tracer.blocks.fixed_huffman
    import deflate_tracer.blocks.dynamic_huffman
    start = br.bit_offset()
    bfinal = br.read_bit()
    btype = br.read_bits(2)
    kind = BTYPE_KINDS[btype]

    block = DeflateBlock(kind=kind, start_bit=start, final=bool(bfinal))
    block.items.append(BlockHeader(start, br.bit_offset(), final=bool(bfinal), btype=btype))
    try:
        match kind:
            case BlockKind.STORED:
                deflate_tracer.blocks.stored.load_stored_body(br, block, out)
            case BlockKind.FIXED_HUFFMAN:
                deflate_tracer.blocks.fixed_huffman.load_fixed_body(br, block, out)
            case BlockKind.DYNAMIC_HUFFMAN:
                deflate_tracer.blocks.dynamic_huffman.load_dynamic_body(br, block, out)
            case BlockKind.RESERVED:
                raise InvalidBlockType(f"reserved BTYPE=0b{btype:02b} at bit {start}")
    except DeflateError as e:
        block.error = str(e)
        e.partial_block = block
        raise
    finally:
        block.end_bit = br.bit_offset()
    return block
