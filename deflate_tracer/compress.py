# Upstream compressors: this package only decodes, the streams come from zlib / zopfli.

from dataclasses import dataclass
from typing import Callable, Union
import zlib

import zopfli.zlib

from deflate_tracer.engine import DecodeResult, decode_deflate, decode_zlib

DEFAULT_LEVEL = 9
ZOPFLI_NUM_ITER = 15


@dataclass(frozen=True)
class CompressionStats:
  original_size: int
  compressed_size: int

  @property
  def ratio(self) -> float:
    """compressed / original - 1; negative when the stream is smaller than its input."""
    if self.original_size == 0:
      return 0.0
    return self.compressed_size / self.original_size - 1

  def __str__(self) -> str:
    return f"{self.original_size} -> {self.compressed_size} bytes ({self.ratio * 100:+.1f}%)"


def zlib_compress(data: bytes, level: int = DEFAULT_LEVEL, wbits: int = 15) -> bytes:
  if not -1 <= level <= 9:
    raise ValueError(f"zlib level must be in -1..9, got {level}")
  return zlib.compress(data, level=level, wbits=wbits)


def zopfli_compress(data: bytes, numiterations: int = ZOPFLI_NUM_ITER, blocksplitting: bool = True) -> bytes:
  return zopfli.zlib.compress(data, numiterations=numiterations, blocksplitting=blocksplitting)


COMPRESSORS: dict[str, Callable[[bytes], bytes]] = {
  "zlib": zlib_compress,
  "zlib-1": lambda x: zlib_compress(x, level=1),
  "zlib-store": lambda x: zlib_compress(x, level=0),
  "zopfli": zopfli_compress,
}


def compress(data: bytes, level: int = DEFAULT_LEVEL, use_zopfli: bool = False,
             numiterations: int = ZOPFLI_NUM_ITER) -> bytes:
  """zlib-wrapped stream of ``data``; zopfli ignores ``level``."""
  if use_zopfli:
    return zopfli_compress(data, numiterations=numiterations)
  return zlib_compress(data, level=level)


def compress_and_trace(text: Union[str, bytes], level: int = DEFAULT_LEVEL, use_zopfli: bool = False,
                       raw: bool = False) -> tuple[DecodeResult, CompressionStats]:
  """Compress ``text`` and trace the result. Empty text gives an empty trace without compressing."""
  data = text.encode() if isinstance(text, str) else bytes(text)
  if not data:
    return DecodeResult(compressed=b""), CompressionStats(0, 0)
  compressed = compress(data, level=level, use_zopfli=use_zopfli)
  if raw:
    compressed = compressed[2:-4]
    result = decode_deflate(compressed)
  else:
    result = decode_zlib(compressed)
  return result, CompressionStats(len(data), len(compressed))
