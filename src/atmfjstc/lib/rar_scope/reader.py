"""
This module contains the `RarArchiveReader` class, which wraps the file object of an open RAR archive and keeps
track of how many bytes of it are still unread.
"""

import logging

from typing import BinaryIO, Optional, Union, AnyStr
from io import BytesIO, IOBase, TextIOBase
from os import SEEK_CUR

from atmfjstc.lib.file_utils.fileobj import get_fileobj_size

from atmfjstc.lib.rar_scope.byte_fields import decode_le
from atmfjstc.lib.rar_scope.errors import RarInvalidMarkerError, RarIoError, RarTruncatedError


LOG = logging.getLogger(__name__)


RAR_MARKER = 0x21726152
"""The signature ``b'Rar!'``, as decoded from the first four bytes of the archive"""

MARKER_BLOCK_SIZE = 7
ARCHIVE_HEADER_SIZE = 13
PROLOGUE_SIZE = MARKER_BLOCK_SIZE + ARCHIVE_HEADER_SIZE

SKIP_CHUNK_SIZE = 1000000


class RarArchiveReader:
    """
    Forward-only reader over the data of a RAR archive.

    The reader maintains a count of the bytes not yet consumed from the archive, which is decremented by exactly
    the amount of data returned by every read or skip. The count cannot be modified otherwise.

    Readers are not normally created directly; use `open_archive_reader`, which also validates the archive
    prologue.
    """

    _fileobj: BinaryIO

    _position: int
    _end_position: int
    _bytes_remaining: int

    def __init__(self, fileobj: BinaryIO, size: int):
        """
        Constructor.

        Args:
            fileobj: A binary file object, positioned at the start of the archive.
            size: The number of bytes available in the file object, starting from its current position.
        """
        if size < 0:
            raise ValueError("Archive size must be non-negative")

        self._fileobj = fileobj
        try:
            self._position = fileobj.tell() if fileobj.seekable() else 0
        except OSError as e:
            raise RarIoError("Failed to get the position of the archive file object") from e

        self._end_position = self._position + size
        self._bytes_remaining = size

    @property
    def bytes_remaining(self) -> int:
        return self._bytes_remaining

    @property
    def closed(self) -> bool:
        return self._fileobj.closed

    def name(self) -> Optional[AnyStr]:
        name = getattr(self._fileobj, 'name', None)

        return None if ((name is None) or (name == '')) else name

    def tell(self) -> int:
        return self._position

    def read_once(self, n_bytes: int) -> bytes:
        """
        Performs a single read of up to `n_bytes`, without retrying if fewer bytes are returned.

        The count of remaining bytes is decremented by however many bytes were actually returned.
        """
        if n_bytes < 0:
            raise ValueError("The number of bytes to read cannot be negative")
        if n_bytes == 0:
            return b''

        data = self._raw_read(n_bytes)
        self._consume(len(data))

        return data

    def read_at_most(self, n_bytes: int) -> bytes:
        """
        Tries to read `n_bytes` of data, returning fewer only if the data is exhausted. Short reads are retried.
        """
        data = self.read_once(n_bytes)

        while len(data) < n_bytes:
            new_data = self.read_once(n_bytes - len(data))

            if len(new_data) == 0:
                break

            data += new_data

        return data

    def read_exact(self, n_bytes: int, meaning: Optional[str] = None) -> bytes:
        """
        Reads exactly `n_bytes` from the archive.

        Args:
            n_bytes: The amount of bytes to read.
            meaning: An indication as to the meaning of the data being read (e.g. "file name"). It is used in the text
                of any exceptions that may be thrown.

        Raises:
            RarTruncatedError: If the data ends before `n_bytes` could be read. Whatever was read is still counted
                as consumed.
        """
        original_pos = self._position

        data = self.read_at_most(n_bytes)

        if len(data) < n_bytes:
            raise RarTruncatedError(original_pos, n_bytes, len(data), meaning)

        return data

    def skip(self, n_bytes: int, meaning: Optional[str] = None):
        """
        Skips forward over a number of bytes, ignoring the data. The reader never moves backward, so a negative
        amount skips nothing.

        Seekable file objects are skipped by seeking; others are read through in chunks.

        Raises:
            RarTruncatedError: If the data ends before the full amount could be skipped. The count of remaining bytes
                is still decremented by the amount actually skipped.
        """
        if n_bytes <= 0:
            return

        original_pos = self._position

        if self._fileobj.seekable():
            skipped = min(n_bytes, max(0, self._end_position - self._position))

            try:
                self._fileobj.seek(skipped, SEEK_CUR)
            except OSError as e:
                raise RarIoError(f"Failed to skip {n_bytes} bytes at position {original_pos}") from e

            self._consume(skipped)
        else:
            skipped = 0

            while skipped < n_bytes:
                to_read = min(SKIP_CHUNK_SIZE, n_bytes - skipped)

                data = self.read_once(to_read)
                skipped += len(data)

                if len(data) == 0:
                    break

        if skipped < n_bytes:
            raise RarTruncatedError(original_pos, n_bytes, skipped, meaning)

    def close(self):
        self._fileobj.close()

    def _raw_read(self, n_bytes: int) -> bytes:
        try:
            return self._fileobj.read(n_bytes)
        except OSError as e:
            raise RarIoError(f"Failed to read {n_bytes} bytes at position {self._position}") from e

    def _consume(self, n_bytes: int):
        self._position += n_bytes
        self._bytes_remaining -= n_bytes


def open_archive_reader(
    data_or_fileobj: Union[bytes, BinaryIO], size: Optional[int] = None
) -> RarArchiveReader:
    """
    Validates the prologue of a RAR archive and returns a reader positioned at its first header block.

    The prologue consists of the 7-byte marker block and the 13-byte archive header. Neither is decoded any further
    than checking the ``Rar!`` signature.

    Args:
        data_or_fileobj: Either the archive data as bytes, or a binary file object positioned at the start of the
            archive.
        size: The number of bytes in the archive, counted from the current position of the file object. Can be
            omitted for seekable file objects, in which case it is measured. Mandatory otherwise.

    Returns:
        A `RarArchiveReader` for which exactly 20 bytes have been consumed.

    Raises:
        RarInvalidMarkerError: If the data does not start with a RAR signature.
        RarTruncatedError: If the signature is present but the data ends before the end of the archive header.
        RarIoError: If reading from the file object fails.
    """
    fileobj = _parse_main_input_arg(data_or_fileobj)

    if size is None:
        if not fileobj.seekable():
            raise ValueError("The archive size must be specified for non-seekable file objects")

        try:
            size = get_fileobj_size(fileobj, whence='current')
        except OSError as e:
            raise RarIoError("Failed to determine the size of the archive") from e

    reader = RarArchiveReader(fileobj, size)
    start_pos = reader.tell()

    prologue = reader.read_at_most(PROLOGUE_SIZE)

    marker = decode_le(prologue, 0, 3)
    if marker != RAR_MARKER:
        raise RarInvalidMarkerError(reader.name(), marker)

    if len(prologue) < PROLOGUE_SIZE:
        raise RarTruncatedError(start_pos, PROLOGUE_SIZE, len(prologue), 'marker block and archive header')

    LOG.debug("Opened RAR archive %s, %d bytes after the prologue", reader.name() or '<fileobj>', reader.bytes_remaining)

    return reader


def _parse_main_input_arg(input_: Union[bytes, BinaryIO]) -> BinaryIO:
    if isinstance(input_, bytes):
        return BytesIO(input_)

    if not isinstance(input_, IOBase):
        raise TypeError("Input must be either bytes or a file object")
    if isinstance(input_, TextIOBase):
        raise TypeError("RAR archives must be read from binary, not text file objects")

    return input_
