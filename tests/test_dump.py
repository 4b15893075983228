import json
import zlib

from deflate_tracer import decode_zlib
from deflate_tracer.dump_deflate_trace import deflate_payload, describe_item, dump_trace, main, summarize
from deflate_tracer.trace import DynamicCodeLengthEntry

from streams import abcdeabcd_stream

HELLO = bytes.fromhex("78dacb48cdc9c90700062c0215")


def test_dump_hello():
    text = dump_trace(decode_zlib(HELLO))
    assert "--- block 0: zlib_header bits [0, 16) bytes [0, 2) ---" in text
    assert "--- block 1: fixed bits [16, 66) bytes [2, 9) ---" in text
    assert 'Literal: 104 ("h")' in text
    assert "End of block" in text
    assert "Summary: 5 literals, 0 back-references, 5 bytes" in text
    assert "Adler-32: 0x062c0215" in text
    assert "Parse error" not in text


def test_dump_back_reference():
    text = dump_trace(decode_zlib(abcdeabcd_stream()))
    assert 'LZ77: length=4, distance=5 -> "abcd"' in text
    assert "Summary: 5 literals, 1 back-references, 9 bytes" in text


def test_dump_reports_parse_error_once():
    text = dump_trace(decode_zlib(HELLO[:6]))
    assert text.count("Parse error:") == 1


def test_dump_reports_error_without_partial_block():
    text = dump_trace(decode_zlib(HELLO[:-4]))
    assert "Parse error: UnexpectedEndOfData" in text


def test_describe_code_length_runs():
    repeat = DynamicCodeLengthEntry(0, 9, symbol=16, first_index=10, lengths=(5, 5, 5))
    zeros = DynamicCodeLengthEntry(0, 14, symbol=18, first_index=0, lengths=(0,) * 20)
    single = DynamicCodeLengthEntry(0, 4, symbol=7, first_index=3, lengths=(7,))
    assert describe_item(repeat) == "length[10:13] = 5 (←×3)"
    assert describe_item(zeros) == "length[0:20] = 0 (0×20)"
    assert describe_item(single) == "length[3] = 7"


def test_deflate_payload_strips_envelope():
    assert deflate_payload(decode_zlib(HELLO)) == HELLO[2:-4]
    assert deflate_payload(decode_zlib(b"")) == b""


def test_main_text_file(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_bytes(b"hello hello hello")
    assert main([str(path)]) == 0
    captured = capsys.readouterr()
    assert f"Processing {path}..." in captured.err
    assert "compression: 17 -> " in captured.out
    assert "deflate URL: https://deflate-viz.pages.dev?deflate=" in captured.out
    assert "input URL: https://deflate-viz.pages.dev?text=" in captured.out


def test_main_json(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_bytes(b"abcdeabcd")
    assert main(["--json", "--level", "9", str(path)]) == 0
    d = json.loads(capsys.readouterr().out)
    assert bytes.fromhex(d["data"]) == b"abcdeabcd"
    assert d["error"] is None


def test_main_compressed_input_with_error(tmp_path, capsys):
    data = bytearray(zlib.compress(b"hello world", 0))
    data[5] ^= 1
    path = tmp_path / "broken.z"
    path.write_bytes(bytes(data))
    assert main(["--compressed", str(path)]) == 1
    assert "Parse error:" in capsys.readouterr().out


def test_main_glob(tmp_path, capsys):
    for i in range(3):
        (tmp_path / f"f{i}.z").write_bytes(zlib.compress(b"x" * (i + 1) * 10))
    assert main(["--compressed", str(tmp_path / "*.z")]) == 0
    assert capsys.readouterr().out.count("Adler-32:") == 3


def test_main_without_inputs(capsys):
    assert main([]) == 2
    assert "usage:" in capsys.readouterr().err


def test_summarize(tmp_path, capsys):
    paths = []
    for i, content in enumerate([b"abc" * 100, b"", bytes(range(256)) * 4]):
        path = tmp_path / f"{i}.bin"
        path.write_bytes(content)
        paths.append(str(path))
    assert summarize(paths) == 0
    out = capsys.readouterr().out
    assert "zlib-store: 2 files" in out
    assert "zopfli: 2 files" in out


def test_dump_reserved_block_header():
    # "ok" as a non-final stored block, then BFINAL=1 BTYPE=11
    data = bytes.fromhex("789c" "000200fdff6f6b" "07")
    text = dump_trace(decode_zlib(data))
    assert "reserved bits [72, 75)" in text
    assert "BFINAL=1 BTYPE=11" in text
    assert text.count("Parse error:") == 1
