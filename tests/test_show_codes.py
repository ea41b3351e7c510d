import io
import sys

from show_codes import format_code_table, format_symbol, main


def test_format_symbol():
    assert format_symbol('a') == 'a'
    assert format_symbol(' ') == ' '
    assert format_symbol('\n') == '\\n'
    assert format_symbol("'") == "\\'"
    assert format_symbol(65) == 'A'
    assert format_symbol(0) == '\\x00'
    assert format_symbol(10) == '\\n'
    assert format_symbol(200) == '\\xc8'


def test_format_code_table_sorted_by_symbol():
    assert format_code_table({'b': '0', 'a': '1'}) == ["'a' --> 1", "'b' --> 0"]


def test_main_prints_table(tmp_path, capsys):
    path = tmp_path / "msg.txt"
    path.write_text("aab", encoding="utf-8")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "'a' --> 1\n'b' --> 0\n"


def _fake_stdin(data: bytes):
    return io.TextIOWrapper(io.BytesIO(data), encoding="utf-8")


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _fake_stdin(b"aab"))
    assert main([]) == 0
    assert capsys.readouterr().out == "'a' --> 1\n'b' --> 0\n"


def test_main_reads_stdin_bytes(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _fake_stdin(b"\x00\x00\x01"))
    assert main(["--bytes"]) == 0
    assert capsys.readouterr().out == "'\\x00' --> 1\n'\\x01' --> 0\n"


def test_main_stdin_uses_encoding(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _fake_stdin("ééa".encode("latin-1")))
    assert main(["--encoding", "latin-1"]) == 0
    assert capsys.readouterr().out == "'a' --> 0\n'é' --> 1\n"


def test_main_keeps_carriage_returns(tmp_path, capsys):
    path = tmp_path / "crlf.txt"
    path.write_bytes(b"a\r\nb")
    assert main([str(path), "--stats"]) == 0
    out = capsys.readouterr().out
    assert "'\\r' -->" in out
    assert "'\\n' -->" in out
    assert "Symbols: 4 (4 distinct)" in out
    assert "Encoded length: 8 bits" in out


def test_main_keeps_carriage_returns_on_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _fake_stdin(b"a\r\nb"))
    assert main(["--stats"]) == 0
    assert "Symbols: 4 (4 distinct)" in capsys.readouterr().out


def test_main_empty_message(tmp_path, capsys):
    path = tmp_path / "empty.txt"
    path.write_text("", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "empty" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.txt")]) == 2
    assert "cannot read" in capsys.readouterr().err


def test_main_single_symbol(tmp_path, capsys):
    path = tmp_path / "msg.txt"
    path.write_text("aaaa", encoding="utf-8")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "'a' --> \n"
    assert main([str(path), "--one-bit-single"]) == 0
    assert capsys.readouterr().out == "'a' --> 0\n"


def test_main_bytes_mode(tmp_path, capsys):
    path = tmp_path / "msg.bin"
    path.write_bytes(b"\x00\x00\x01")
    assert main(["--bytes", str(path)]) == 0
    assert capsys.readouterr().out == "'\\x00' --> 1\n'\\x01' --> 0\n"


def test_main_stats(tmp_path, capsys):
    path = tmp_path / "msg.txt"
    path.write_text("aab", encoding="utf-8")
    assert main(["--stats", str(path)]) == 0
    out = capsys.readouterr().out
    assert "Symbols: 3 (2 distinct)" in out
    assert "Encoded length: 3 bits" in out
    assert "Average: 1.0000 bits/symbol" in out
