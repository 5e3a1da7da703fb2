import os
import stat

import pytest

from diverge.services.file_io import (
    FileIOService,
    FileWriteError,
    LocalFileWriter,
)


@pytest.fixture
def file_io():
    return FileIOService()


def latin1_service():
    service = FileIOService()
    service._detect_encoding = lambda content: "latin-1"
    return service


def test_read_utf8(tmp_path, file_io):
    path = tmp_path / "a.txt"
    path.write_bytes("héllo wörld, ñandú çà été\n".encode("utf-8"))
    result = file_io.read_file(path)
    assert result.success
    assert result.content.content == "héllo wörld, ñandú çà été\n"
    assert result.content.bom == b""


def test_read_utf8_bom(tmp_path, file_io):
    path = tmp_path / "bom.txt"
    path.write_bytes(b"\xef\xbb\xbfkey: value\r\n")
    result = file_io.read_file(path)
    assert result.content.bom == b"\xef\xbb\xbf"
    assert result.content.encoding == "utf-8"
    assert result.content.content == "key: value\r\n"


def test_read_utf16_with_bom_is_text(tmp_path, file_io):
    path = tmp_path / "wide.txt"
    path.write_bytes(b"\xff\xfe" + "name: x\n".encode("utf-16-le"))
    result = file_io.read_file(path)
    assert result.success
    assert result.content.content == "name: x\n"
    assert result.content.encoding == "utf-16-le"


@pytest.mark.parametrize("payload", [b"abc\x00def", b"%PDF-1.7\n", b"\x01\x02\x03\x04abc"])
def test_binary_detected(tmp_path, file_io, payload):
    path = tmp_path / "blob.bin"
    path.write_bytes(payload)
    result = file_io.read_file(path)
    assert not result.success
    assert result.is_binary


def test_size_limit(tmp_path, file_io):
    path = tmp_path / "big.txt"
    path.write_text("x" * 100)
    assert not file_io.read_file(path, max_text_size=10).success
    assert file_io.read_file(path, max_text_size=100).success


def test_missing_file(tmp_path, file_io):
    result = file_io.read_file(tmp_path / "nope.txt")
    assert not result.success
    assert "not found" in result.error


def test_undecodable_bytes_fall_back(tmp_path, file_io):
    path = tmp_path / "odd.txt"
    path.write_bytes(b"caf\xe9\n")
    result = file_io.read_file(path, encoding="utf-8")
    assert result.success
    assert result.content.encoding == "latin-1"
    assert result.content.content == "café\n"


def test_write_creates_parents(tmp_path, file_io):
    path = tmp_path / "deep" / "er" / "out.txt"
    result = file_io.write_file(path, "content\n")
    assert result.success
    assert result.bytes_written == 8
    assert path.read_text() == "content\n"


def test_write_keeps_text_verbatim(tmp_path, file_io):
    path = tmp_path / "crlf.txt"
    file_io.write_file(path, "a\r\nb\r\n")
    assert path.read_bytes() == b"a\r\nb\r\n"


def test_write_leaves_no_temp_files(tmp_path, file_io):
    file_io.write_file(tmp_path / "one.txt", "1")
    file_io.write_file(tmp_path / "one.txt", "2")
    assert os.listdir(tmp_path) == ["one.txt"]


def test_write_keeps_permission_bits(tmp_path, file_io):
    path = tmp_path / "run.sh"
    path.write_text("echo old\n")
    path.chmod(0o755)
    file_io.write_file(path, "echo new\n")
    assert stat.S_IMODE(path.stat().st_mode) == 0o755


def test_write_unencodable_text_fails(tmp_path, file_io):
    result = file_io.write_file(tmp_path / "x.txt", "snow ☃", encoding="latin-1")
    assert not result.success
    assert not (tmp_path / "x.txt").exists()


def test_local_writer_overwrites(tmp_path):
    path = tmp_path / "f.txt"
    path.write_text("old")
    LocalFileWriter().write(str(path), "new")
    assert path.read_text() == "new"


def test_local_writer_keeps_bom(tmp_path):
    path = tmp_path / "bom.yaml"
    path.write_bytes(b"\xef\xbb\xbfkey: old\n")
    LocalFileWriter().write(str(path), "key: new\n")
    assert path.read_bytes() == b"\xef\xbb\xbfkey: new\n"


def test_local_writer_keeps_existing_encoding(tmp_path):
    path = tmp_path / "legacy.txt"
    path.write_bytes("caf\xe9\n".encode("latin-1"))
    LocalFileWriter(latin1_service()).write(str(path), "déjà vu\n")
    assert path.read_bytes() == "déjà vu\n".encode("latin-1")


def test_local_writer_falls_back_to_utf8(tmp_path, caplog):
    path = tmp_path / "legacy.txt"
    path.write_bytes("caf\xe9\n".encode("latin-1"))
    LocalFileWriter(latin1_service()).write(str(path), "snow ☃\n")
    assert path.read_bytes() == "snow ☃\n".encode("utf-8")
    assert "writing UTF-8" in caplog.text


def test_local_writer_new_file_is_utf8(tmp_path):
    path = tmp_path / "new" / "file.txt"
    LocalFileWriter().write(str(path), "ünïcode\n")
    assert path.read_bytes() == "ünïcode\n".encode("utf-8")


def test_local_writer_raises_on_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    with pytest.raises(FileWriteError):
        LocalFileWriter().write(str(blocker / "child.txt"), "x")
