"""Top-level decode: zlib header, DEFLATE blocks until BFINAL, zlib trailer.

Each call owns its reader and output buffer, so concurrent calls on separate
inputs do not interact.  Malformed streams never raise out of ``decode_zlib`` /
``decode_deflate``: the error is stored on the result next to everything that
was decoded before it.
"""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Optional

from deflate_tracer.bitio import BitReader
from deflate_tracer.blocks import BlockKind, DeflateBlock, decode_block
from deflate_tracer.errors import DeflateError
from deflate_tracer.trace import BackReference, Literal, TraceItem, ZlibChecksum, ZlibHeader
from deflate_tracer.zlib_envelope import parse_header, parse_trailer

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    compressed: bytes
    blocks: list[DeflateBlock] = field(default_factory=list)
    data: bytes = b""
    error: Optional[DeflateError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return f"{type(self.error).__name__}: {self.error}"

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    @property
    def items(self) -> list[TraceItem]:
        return [item for block in self.blocks for item in block.items]

    @property
    def deflate_blocks(self) -> list[DeflateBlock]:
        return [block for block in self.blocks if block.kind.is_deflate]

    @property
    def zlib_header(self) -> Optional[ZlibHeader]:
        for block in self.blocks:
            if block.kind is BlockKind.ZLIB_HEADER:
                return block.items[0]
        return None

    @property
    def checksum(self) -> Optional[int]:
        for block in self.blocks:
            if block.kind is BlockKind.ZLIB_CHECKSUM:
                item = block.items[0]
                if isinstance(item, ZlibChecksum):
                    return item.checksum
        return None

    def output_items(self) -> list[Literal | BackReference]:
        return [item for item in self.items if isinstance(item, (Literal, BackReference))]

    def item_at_output(self, offset: int) -> Optional[Literal | BackReference]:
        """The literal or back-reference that produced decompressed byte ``offset``."""
        produced = self.output_items()
        starts = [item.output_offset for item in produced]
        i = bisect.bisect_right(starts, offset) - 1
        if i < 0 or offset >= produced[i].output_end:
            return None
        return produced[i]

    def as_dict(self) -> dict[str, object]:
        return {
            "compressed": self.compressed.hex(),
            "data": self.data.hex(),
            "error": self.error_message,
            "blocks": [block.as_dict() for block in self.blocks],
        }


def _marker_block(kind: BlockKind, item: TraceItem) -> DeflateBlock:
    return DeflateBlock(kind=kind, start_bit=item.bit_start, end_bit=item.bit_end, items=[item])


def _number_items(blocks: list[DeflateBlock]) -> None:
    for block_index, block in enumerate(blocks):
        for item_index, item in enumerate(block.items):
            item.block_index = block_index
            item.item_index = item_index


def _decode(data: bytes, zlib_wrapped: bool) -> DecodeResult:
    data = bytes(data)
    result = DecodeResult(compressed=data)
    if not data:
        return result

    br = BitReader(data)
    out = bytearray()
    blocks = result.blocks
    try:
        if zlib_wrapped:
            blocks.append(_marker_block(BlockKind.ZLIB_HEADER, parse_header(br)))
        while True:
            block = decode_block(br, out)
            blocks.append(block)
            logger.debug("%s block %d: bits [%d, %d), %d bytes out",
                         block.kind.value, len(blocks) - 1, block.start_bit, block.end_bit, len(block.decoded))
            if block.final:
                break
        if zlib_wrapped:
            blocks.append(_marker_block(BlockKind.ZLIB_CHECKSUM, parse_trailer(br)))
    except DeflateError as e:
        if e.partial_block is not None:
            blocks.append(e.partial_block)
        logger.warning("decode stopped at bit %d: %s", br.bit_offset(), e)
        result.error = e

    _number_items(blocks)
    result.data = bytes(out)
    return result


def decode_zlib(data: bytes) -> DecodeResult:
    """Trace a zlib stream (RFC 1950 envelope around RFC 1951 blocks)."""
    return _decode(data, zlib_wrapped=True)


def decode_deflate(data: bytes) -> DecodeResult:
    """Trace a raw DEFLATE stream with no envelope."""
    return _decode(data, zlib_wrapped=False)
