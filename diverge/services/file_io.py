"""
Reading compared files as text and writing saved content back.

Reads decide once per file whether it is text at all, then which codec
decodes it: a byte order mark wins, chardet guesses otherwise. The codec
and BOM found on read travel with the text so that a save can write the
file back in the format it was found in.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import chardet


# Checked in order; the UTF-8 mark must come first
BYTE_ORDER_MARKS = (
    (b'\xef\xbb\xbf', 'utf-8'),
    (b'\xff\xfe', 'utf-16-le'),
    (b'\xfe\xff', 'utf-16-be'),
)

# Binary formats whose header has no NUL byte
BINARY_MAGIC = (b'%PDF-', b'GIF8', b'\xff\xd8\xff')


@dataclass
class FileContent:
    """Decoded text plus the on-disk format it came from."""
    content: str
    encoding: str       # codec for the bytes after the BOM
    bom: bytes = b''


@dataclass
class ReadResult:
    success: bool
    content: Optional[FileContent] = None
    error: Optional[str] = None
    is_binary: bool = False


@dataclass
class WriteResult:
    success: bool
    bytes_written: int = 0
    error: Optional[str] = None


class FileWriteError(OSError):
    """Raised when a file writer cannot persist content."""
    pass


class FileIOService:
    """Text reads with encoding detection, atomic text writes."""

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        fallback_encoding: str = 'latin-1',
        sniff_size: int = 8192,
        min_confidence: float = 0.7
    ):
        self.default_encoding = default_encoding
        self.fallback_encoding = fallback_encoding
        self.sniff_size = sniff_size
        self.min_confidence = min_confidence

    def read_file(
        self,
        path: Path | str,
        encoding: Optional[str] = None,
        max_text_size: Optional[int] = None
    ) -> ReadResult:
        """
        Read `path` as text.

        Args:
            path: File to read
            encoding: Codec to use instead of detecting one
            max_text_size: Files larger than this many bytes are refused

        Returns:
            ReadResult; on failure `error` says why and `is_binary` is set
            for files that do not look like text.
        """
        path = Path(path)
        if not path.is_file():
            reason = "File not found" if not path.exists() else "Not a file"
            return ReadResult(success=False, error=f"{reason}: {path}")

        try:
            if max_text_size is not None and path.stat().st_size > max_text_size:
                return ReadResult(success=False, error=f"File too large for text comparison: {path}")
            raw = path.read_bytes()
        except PermissionError:
            return ReadResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return ReadResult(success=False, error=f"Cannot read {path}: {e}")

        bom, codec = self._split_bom(raw)
        if not bom and self.looks_binary(raw[:self.sniff_size]):
            return ReadResult(success=False, is_binary=True, error="File appears to be binary")

        body = raw[len(bom):]
        codec = encoding or codec or self._detect_encoding(body)
        try:
            text = body.decode(codec)
        except (UnicodeDecodeError, LookupError):
            logging.debug(f"FileIOService - {path} is not {codec}, reading as {self.fallback_encoding}")
            codec = self.fallback_encoding
            text = body.decode(codec, errors='replace')

        return ReadResult(success=True, content=FileContent(text, codec, bom))

    def write_file(
        self,
        path: Path | str,
        content: str,
        encoding: str = 'utf-8',
        bom: bytes = b''
    ) -> WriteResult:
        """
        Replace `path` with `content`, creating missing parent folders.

        The bytes go to a temporary file in the target folder which is then
        moved over the target, so readers never see a half-written file.
        An existing file keeps its permission bits.
        """
        path = Path(path)
        try:
            data = bom + content.encode(encoding)
        except (UnicodeEncodeError, LookupError) as e:
            return WriteResult(success=False, error=f"Cannot encode {path} as {encoding}: {e}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, 'wb') as handle:
                    handle.write(data)
                if path.exists():
                    shutil.copymode(path, temp_name)
                os.replace(temp_name, path)
            except BaseException:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
                raise
        except PermissionError:
            return WriteResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return WriteResult(success=False, error=f"Failed to write {path}: {e}")

        return WriteResult(success=True, bytes_written=len(data))

    @staticmethod
    def looks_binary(chunk: bytes) -> bool:
        """NUL bytes, a known binary header or mostly control bytes."""
        if not chunk:
            return False
        if b'\x00' in chunk or chunk.startswith(BINARY_MAGIC):
            return True
        control = sum(1 for b in chunk if b < 9 or 13 < b < 32)
        return control / len(chunk) > 0.3

    @staticmethod
    def _split_bom(raw: bytes) -> tuple[bytes, Optional[str]]:
        for mark, codec in BYTE_ORDER_MARKS:
            if raw.startswith(mark):
                return mark, codec
        return b'', None

    def _detect_encoding(self, content: bytes) -> str:
        if not content:
            return self.default_encoding
        guess = chardet.detect(content)
        name = (guess.get('encoding') or '').lower()
        if not name or guess.get('confidence', 0) <= self.min_confidence:
            return self.default_encoding
        # ASCII text is valid UTF-8; saving non-ASCII edits must not fail
        return 'utf-8' if name == 'ascii' else name


# =============================================================================
# File Writers
# =============================================================================

class FileWriter(ABC):
    """Destination for saved right-side content."""

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        """
        Persist `content` at the absolute `path`.

        Raises:
            FileWriteError: If the content could not be written.
        """


class LocalFileWriter(FileWriter):
    """
    Writes to the local filesystem through FileIOService.

    Overwrites keep the encoding and BOM of the file being replaced. When
    the new text cannot be represented in that encoding the file is
    written as UTF-8 instead. New files are written as UTF-8.
    """

    def __init__(self, file_io: Optional[FileIOService] = None):
        self.file_io = file_io or FileIOService()

    def write(self, path: str, content: str) -> None:
        encoding, bom = self.existing_format(path)
        try:
            content.encode(encoding)
        except (UnicodeEncodeError, LookupError):
            logging.warning(
                f"LocalFileWriter - {path} cannot hold the new text as {encoding}, writing UTF-8"
            )
            encoding, bom = self.file_io.default_encoding, b''

        result = self.file_io.write_file(path, content, encoding=encoding, bom=bom)
        if not result.success:
            raise FileWriteError(result.error or f"Failed to write {path}")
        logging.debug(f"LocalFileWriter - Wrote {result.bytes_written} bytes ({encoding}) to {path}")

    def existing_format(self, path: str) -> tuple[str, bytes]:
        """Encoding and BOM of the file currently at `path`."""
        if not Path(path).is_file():
            return self.file_io.default_encoding, b''
        read = self.file_io.read_file(path)
        if not read.success or read.content is None:
            return self.file_io.default_encoding, b''
        return read.content.encoding, read.content.bom
