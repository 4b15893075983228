import logging

from deflate_tracer.bitio import BitReader
from deflate_tracer.trace import ZlibChecksum, ZlibHeader

logger = logging.getLogger(__name__)

CM_DEFLATE = 8


def parse_header(br: BitReader) -> ZlibHeader:
    """CMF/FLG (RFC 1950 2.2). Fields are recorded as read; FCHECK is not verified."""
    start = br.bit_offset()
    cmf = br.read_byte()
    flg = br.read_byte()
    header = ZlibHeader(
        start, br.bit_offset(),
        cmf=cmf, flg=flg,
        compression_method=cmf & 0x0F,
        compression_info=cmf >> 4,
        fcheck=flg & 0x1F,
        fdict=(flg >> 5) & 1,
        flevel=flg >> 6,
    )
    if header.compression_method != CM_DEFLATE:
        logger.warning("zlib header declares compression method %d, not deflate", header.compression_method)
    if header.fdict:
        logger.warning("zlib header requests a preset dictionary, which is not supported")
    return header


def parse_trailer(br: BitReader) -> ZlibChecksum:
    """Adler-32 of the uncompressed data, big-endian, on a byte boundary. Not verified."""
    br.align_to_byte()
    start = br.bit_offset()
    checksum = 0
    for _ in range(4):
        checksum = (checksum << 8) | br.read_byte()
    return ZlibChecksum(start, br.bit_offset(), checksum=checksum)
