# -*- coding: utf-8 -*-
# Text / JSON dump of a DEFLATE trace.
# Python 3.10+
# Usage:  python3 -m deflate_tracer.dump_deflate_trace [--stdin | --summary | path ...] [--compressed] [--raw] [--json]

from __future__ import annotations
from collections import Counter
from io import StringIO
import argparse
import glob
import json
import logging
import sys

import tqdm

from .compress import COMPRESSORS, DEFAULT_LEVEL, compress_and_trace
from .engine import DecodeResult, decode_deflate, decode_zlib
from .trace import (BackReference, BlockHeader, CodeLengthCodeEntry, DynamicCodeLengthEntry, DynamicHeader,
                    EndOfBlock, Literal, StoredHeader, TraceItem, ZlibChecksum, ZlibHeader)
from .utils import openable_uri, printable_bytes, signed_str, viz_deflate_url, viz_plane_url

logger = logging.getLogger(__name__)


def describe_item(item: TraceItem) -> str:
  match item:
    case ZlibHeader():
      return (f"zlib header: CM={item.compression_method} CINFO={item.compression_info} "
              f"(window {item.window_size}) FCHECK={item.fcheck} FDICT={item.fdict} FLEVEL={item.flevel}")
    case ZlibChecksum(checksum=checksum):
      return f"Adler-32: {checksum:#010x}"
    case BlockHeader(final=final, btype=btype):
      return f"BFINAL={int(final)} BTYPE={btype:02b}"
    case StoredHeader(length=length, nlength=nlength):
      return f"LEN={length} NLEN={nlength:#06x}"
    case Literal(symbol=symbol):
      return f"Literal: {symbol} ({printable_bytes(item.value)})"
    case BackReference(length=length, distance=distance, resolved_bytes=resolved):
      return f"LZ77: length={length}, distance={distance} -> {printable_bytes(resolved)}"
    case EndOfBlock():
      return "End of block"
    case DynamicHeader(hlit=hlit, hdist=hdist, hclen=hclen):
      return f"HLIT: {hlit} HDIST: {hdist} HCLEN: {hclen}"
    case CodeLengthCodeEntry(symbol=symbol, code_length=code_length):
      return f"code length code {symbol}→{code_length}"
    case DynamicCodeLengthEntry(symbol=symbol, first_index=first, lengths=lengths):
      if symbol < 16:
        return f"length[{first}] = {symbol}"
      if symbol == 16:
        return f"length[{first}:{first + len(lengths)}] = {lengths[0]} (←×{len(lengths)})"
      return f"length[{first}:{first + len(lengths)}] = 0 (0×{len(lengths)})"
    case _:
      raise TypeError(f"unknown trace item {item!r}")


def dump_trace(result: DecodeResult) -> str:
  tw = StringIO()
  for i, block in enumerate(result.blocks):
    print(f"--- block {i}: {block.kind.value} bits [{block.start_bit}, {block.end_bit}) "
          f"bytes [{block.byte_start}, {block.byte_end}) ---", file=tw)
    for item in block.items:
      print(f"{item.bit_start:>8} {item.bit_length:>4}b  {describe_item(item)}", file=tw)
    if block.kind.is_deflate:
      counts = Counter(type(item) for item in block.items)
      print(f"Summary: {counts[Literal]} literals, {counts[BackReference]} back-references, "
            f"{len(block.decoded)} bytes", file=tw)
    if block.error is not None:
      print(f"Parse error: {block.error}", file=tw)
  if result.error is not None and (not result.blocks or result.blocks[-1].error is None):
    print(f"Parse error: {result.error_message}", file=tw)
  return tw.getvalue()


def _expand_paths(patterns: list[str]) -> list[str]:
  paths = []
  for pattern in patterns:
    matched = sorted(glob.glob(pattern)) if glob.has_magic(pattern) else [pattern]
    paths.extend(matched)
  return paths


def summarize(paths: list[str], out=None) -> int:
  """Per-compressor block statistics over many inputs."""
  out = out if out is not None else sys.stdout
  totals = {name: Counter() for name in COMPRESSORS}
  failures = 0
  for path in tqdm.tqdm(paths, file=sys.stderr):
    with open(path, "rb") as f:
      data = f.read()
    if not data:
      continue
    for name, compressor in COMPRESSORS.items():
      compressed = compressor(data)
      result = decode_zlib(compressed)
      total = totals[name]
      if not result.ok or result.data != data:
        logger.warning("%s: %s trace failed: %s", path, name, result.error_message or "output mismatch")
        failures += 1
        continue
      total["files"] += 1
      total["original"] += len(data)
      total["compressed"] += len(compressed)
      for block in result.deflate_blocks:
        total[block.kind.value] += 1
      for item in result.items:
        total[item.kind] += 1
  for name, total in totals.items():
    print(f"{name:>10}: {total['files']} files, {total['original']} -> {total['compressed']} bytes "
          f"({signed_str(total['compressed'] - total['original'])}), "
          f"blocks stored/fixed/dynamic = {total['stored']}/{total['fixed']}/{total['dynamic']}, "
          f"{total['literal']} literals, {total['back_reference']} back-references", file=out)
  return 1 if failures else 0


def deflate_payload(result: DecodeResult) -> bytes:
  """The DEFLATE bytes of the trace, without the zlib envelope."""
  blocks = result.deflate_blocks
  if not blocks:
    return b""
  return result.compressed[blocks[0].byte_start:blocks[-1].byte_end]


def _link(title: str, uri: str) -> str:
  return openable_uri(title, uri) if sys.stdout.isatty() else uri


def main(argv: list[str] | None = None) -> int:
  parser = argparse.ArgumentParser(prog="deflate-trace", description="Trace every element of a zlib/DEFLATE stream.")
  parser.add_argument("paths", nargs="*", help="input files (glob patterns allowed)")
  parser.add_argument("--stdin", action="store_true", help="read a single input from stdin")
  parser.add_argument("--compressed", action="store_true", help="inputs are already compressed streams")
  parser.add_argument("--raw", action="store_true", help="raw DEFLATE, no zlib header/trailer")
  parser.add_argument("--level", type=int, default=DEFAULT_LEVEL, help="zlib compression level (0-9)")
  parser.add_argument("--zopfli", action="store_true", help="compress with zopfli instead of zlib")
  parser.add_argument("--json", action="store_true", help="print the trace as JSON")
  parser.add_argument("--summary", action="store_true", help="block statistics per compressor over all inputs")
  parser.add_argument("-v", "--verbose", action="store_true")
  args = parser.parse_args(argv)

  logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

  paths = _expand_paths(args.paths)
  if args.summary:
    print(f'Summarizing {len(paths)} files...', file=sys.stderr)
    return summarize(paths)

  if args.stdin:
    inputs = [("<stdin>", sys.stdin.buffer.read())]
  elif paths:
    inputs = []
    for path in paths:
      with open(path, "rb") as f:
        inputs.append((path, f.read()))
  else:
    parser.print_usage(sys.stderr)
    return 2

  status = 0
  for name, content in inputs:
    print(f'Processing {name}...', file=sys.stderr)
    stats = None
    if args.compressed:
      result = decode_deflate(content) if args.raw else decode_zlib(content)
    else:
      result, stats = compress_and_trace(content, level=args.level, use_zopfli=args.zopfli, raw=args.raw)
    if not result.ok:
      status = 1
    if args.json:
      print(json.dumps(result.as_dict(), indent=2))
      continue
    print(f'--- {name} ---')
    print(dump_trace(result), end="")
    if stats is not None:
      print(f'compression: {stats}')
      print(f'input URL: {_link("input", viz_plane_url(content))}')
    payload = deflate_payload(result)
    if payload:
      print(f'deflate URL: {_link("deflate", viz_deflate_url(payload))}')
  return status


if __name__ == '__main__':
  sys.exit(main())
