"""Trace items: one record per syntactic element consumed from the compressed stream.

Every item carries the half-open bit range ``[bit_start, bit_end)`` it occupies
in the compressed input.  The decode engine fills in ``block_index`` and
``item_index`` once a block is complete so that a flat item list can be mapped
back to its block.
"""

from dataclasses import dataclass, field, fields
from typing import ClassVar, Optional, Union

from deflate_tracer.bitio import BitPosition


@dataclass
class TraceItem:
    kind: ClassVar[str] = "item"

    bit_start: int
    bit_end: int
    block_index: Optional[int] = field(default=None, kw_only=True)
    item_index: Optional[int] = field(default=None, kw_only=True)

    @property
    def bit_length(self) -> int:
        return self.bit_end - self.bit_start

    @property
    def position(self) -> BitPosition:
        return BitPosition.from_offset(self.bit_start)

    # byte range of the compressed input touched by this item
    @property
    def byte_start(self) -> int:
        return self.bit_start // 8

    @property
    def byte_end(self) -> int:
        return (self.bit_end + 7) // 8

    @property
    def start_bit_in_byte(self) -> int:
        return self.bit_start % 8

    @property
    def end_bit_in_byte(self) -> int:
        """Bit index of the last bit of the item within its last byte."""
        return (self.bit_end - 1) % 8

    def as_dict(self) -> dict[str, object]:
        d: dict[str, object] = {"type": self.kind}
        for f in fields(self):
            v = getattr(self, f.name)
            if isinstance(v, (bytes, bytearray)):
                v = bytes(v).hex()
            elif isinstance(v, tuple):
                v = list(v)
            d[f.name] = v
        return d


@dataclass
class ZlibHeader(TraceItem):
    kind: ClassVar[str] = "zlib_header"

    cmf: int
    flg: int
    compression_method: int
    compression_info: int
    fcheck: int
    fdict: int
    flevel: int

    @property
    def window_size(self) -> int:
        return 1 << (self.compression_info + 8)


@dataclass
class ZlibChecksum(TraceItem):
    kind: ClassVar[str] = "zlib_checksum"

    checksum: int


@dataclass
class BlockHeader(TraceItem):
    kind: ClassVar[str] = "block_header"

    final: bool
    btype: int


@dataclass
class StoredHeader(TraceItem):
    kind: ClassVar[str] = "stored_header"

    length: int
    nlength: int


@dataclass
class Literal(TraceItem):
    kind: ClassVar[str] = "literal"

    symbol: int
    code_length: int
    output_offset: int

    @property
    def value(self) -> bytes:
        return bytes((self.symbol,))

    @property
    def output_end(self) -> int:
        return self.output_offset + 1


@dataclass
class BackReference(TraceItem):
    kind: ClassVar[str] = "back_reference"

    length: int
    distance: int
    resolved_bytes: bytes
    length_symbol: int
    distance_symbol: int
    output_offset: int

    @property
    def value(self) -> bytes:
        return self.resolved_bytes

    @property
    def output_end(self) -> int:
        return self.output_offset + self.length


@dataclass
class EndOfBlock(TraceItem):
    kind: ClassVar[str] = "end_of_block"


@dataclass
class DynamicHeader(TraceItem):
    kind: ClassVar[str] = "dynamic_header"

    hlit: int   # number of literal/length codes, 257..286
    hdist: int  # number of distance codes, 1..32
    hclen: int  # number of code length codes, 4..19


@dataclass
class CodeLengthCodeEntry(TraceItem):
    """One 3-bit length of the code-length alphabet."""
    kind: ClassVar[str] = "code_length_code"

    symbol: int
    code_length: int


@dataclass
class DynamicCodeLengthEntry(TraceItem):
    """One code-length symbol and the literal/length or distance lengths it expands to."""
    kind: ClassVar[str] = "code_length"

    symbol: int
    first_index: int  # index into the concatenated HLIT + HDIST length list
    lengths: tuple[int, ...]

    @property
    def repeat(self) -> int:
        return len(self.lengths)


AnyTraceItem = Union[
    ZlibHeader, ZlibChecksum, BlockHeader, StoredHeader, Literal, BackReference,
    EndOfBlock, DynamicHeader, CodeLengthCodeEntry, DynamicCodeLengthEntry,
]
