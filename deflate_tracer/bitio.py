# =========================================================
# Bit I/O with absolute positions (LSB-first as in Deflate)
# =========================================================

from dataclasses import dataclass

from deflate_tracer.errors import UnexpectedEndOfData


@dataclass(frozen=True)
class BitPosition:
    byte_index: int
    bit_index: int  # 0..7

    @property
    def offset(self) -> int:
        return self.byte_index * 8 + self.bit_index

    @staticmethod
    def from_offset(offset: int) -> "BitPosition":
        return BitPosition(offset // 8, offset % 8)

    def __str__(self) -> str:
        return f"{self.byte_index}.{self.bit_index}"


class BitWriter:
    """Packs values LSB-first; the inverse of BitReader. Used to hand-build streams."""
    __slots__ = ("_buf", "_bitbuf", "_bitcnt")

    def __init__(self, data: bytes = b"") -> None:
        self._buf = bytearray(data)
        self._bitbuf = 0
        self._bitcnt = 0

    def write_bits(self, value: int, nbits: int) -> None:
        if nbits < 0:
            raise ValueError("nbits must be >= 0")
        v = value & ((1 << nbits) - 1) if nbits else 0
        self._bitbuf |= v << self._bitcnt
        self._bitcnt += nbits
        while self._bitcnt >= 8:
            self._buf.append(self._bitbuf & 0xFF)
            self._bitbuf >>= 8
            self._bitcnt -= 8

    def write_code(self, code: int, length: int) -> None:
        # Huffman codes go out MSB-first
        for i in range(length - 1, -1, -1):
            self.write_bits((code >> i) & 1, 1)

    def write_bytes(self, data: bytes) -> None:
        self.align_to_byte()
        self._buf += data

    def align_to_byte(self) -> None:
        if self._bitcnt > 0:
            self._buf.append(self._bitbuf & 0xFF)
            self._bitbuf = 0
            self._bitcnt = 0

    def num_written_bits(self) -> int:
        return len(self._buf) * 8 + self._bitcnt

    def get_bytes(self) -> bytes:
        self.align_to_byte()
        return bytes(self._buf)


class BitReader:
    __slots__ = ("_data", "_pos", "_bit")

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0
        self._bit = 0

    def bits_remaining(self) -> int:
        return (len(self._data) - self._pos) * 8 - self._bit

    def read_bits(self, nbits: int) -> int:
        if not 1 <= nbits <= 32:
            raise ValueError("nbits must be in 1..32")
        if nbits > self.bits_remaining():
            raise UnexpectedEndOfData(
                f"need {nbits} bits at {self.position()}, only {self.bits_remaining()} left")
        result = 0
        shift = 0
        while shift < nbits:
            take = min(8 - self._bit, nbits - shift)
            chunk = (self._data[self._pos] >> self._bit) & ((1 << take) - 1)
            result |= chunk << shift
            shift += take
            self._bit += take
            if self._bit == 8:
                self._bit = 0
                self._pos += 1
        return result

    def read_bit(self) -> int:
        return self.read_bits(1)

    def align_to_byte(self) -> None:
        """Drop the rest of a partial byte (stored blocks and the zlib trailer start on a byte boundary)."""
        if self._bit:
            self._bit = 0
            self._pos += 1

    def read_byte(self) -> int:
        self.align_to_byte()
        if self._pos >= len(self._data):
            raise UnexpectedEndOfData(f"no byte left at offset {self._pos}")
        b = self._data[self._pos]
        self._pos += 1
        return b

    def read_bytes(self, n: int) -> bytes:
        self.align_to_byte()
        if self._pos + n > len(self._data):
            raise UnexpectedEndOfData(
                f"need {n} bytes at offset {self._pos}, only {len(self._data) - self._pos} left")
        out = self._data[self._pos:self._pos + n]
        self._pos += n
        return out

    def position(self) -> BitPosition:
        return BitPosition(self._pos, self._bit)

    def bit_offset(self) -> int:
        return self._pos * 8 + self._bit

    def at_eof(self) -> bool:
        return self._pos >= len(self._data)
