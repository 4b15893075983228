from deflate_tracer.bitio import BitPosition, BitReader, BitWriter
from deflate_tracer.blocks import BlockKind, DeflateBlock
from deflate_tracer.engine import DecodeResult, decode_deflate, decode_zlib
from deflate_tracer.errors import (
    DeflateError, IncompleteCodeLengths, InvalidBackReference, InvalidBlockType, InvalidCodeLengths,
    InvalidHuffmanCode, InvalidStoredBlock, UnexpectedEndOfData,
)
from deflate_tracer.huffman import CanonicalHuffman
from deflate_tracer.lz77 import resolve_back_reference
from deflate_tracer.trace import (
    BackReference, BlockHeader, CodeLengthCodeEntry, DynamicCodeLengthEntry, DynamicHeader, EndOfBlock,
    Literal, StoredHeader, TraceItem, ZlibChecksum, ZlibHeader,
)

__all__ = [
    "BitPosition", "BitReader", "BitWriter",
    "BlockKind", "DeflateBlock",
    "DecodeResult", "decode_deflate", "decode_zlib",
    "DeflateError", "IncompleteCodeLengths", "InvalidBackReference", "InvalidBlockType", "InvalidCodeLengths",
    "InvalidHuffmanCode", "InvalidStoredBlock", "UnexpectedEndOfData",
    "CanonicalHuffman", "resolve_back_reference",
    "BackReference", "BlockHeader", "CodeLengthCodeEntry", "DynamicCodeLengthEntry", "DynamicHeader",
    "EndOfBlock", "Literal", "StoredHeader", "TraceItem", "ZlibChecksum", "ZlibHeader",
]
