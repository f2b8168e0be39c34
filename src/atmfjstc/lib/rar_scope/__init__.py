"""
This package provides a lightweight scanner for listing the contents of RAR archives (format versions 1.5 to 4.x).

Unlike full-featured libraries such as `rarfile`, it never decompresses anything and needs no external tools. It only
walks the header blocks, skipping over the entry data, and reports the metadata recorded for each entry: name,
sizes, CRC, timestamp, host OS, compression method and version. This is sufficient for cataloguing or auditing
archives.

The main class of interest is `RarFile`. We can open an archive like so::

    with RarFile('path/to/file.rar') as rar_file:
        for entry in rar_file.iter_entries():
            print(entry.name, entry.size)

Each entry is returned as a `RarEntry` object. For closer control over the enumeration, use the single-pass
`RarEntrySequence` obtained from `RarFile.entries`::

    entries = rar_file.entries()
    while entries.has_next():
        entry = entries.next()

Limitations:

- Enumeration stops at the first header block that is not a file header (e.g. a comment or service block)
- Multi-volume archives and archives with encrypted headers are not supported
- CRCs are reported, not verified
"""

__version__ = '1.0.0'


import logging

from typing import Union, BinaryIO, AnyStr, Optional, ContextManager, Iterator
from os import PathLike
from io import IOBase

from atmfjstc.lib.error_utils import ignore_errors

from atmfjstc.lib.rar_scope.byte_fields import decode_le
from atmfjstc.lib.rar_scope.dos_time import datetime_from_dos_timestamp, dos_timestamp_from_datetime
from atmfjstc.lib.rar_scope.entry import RarEntry, decode_next_entry, FIXED_HEADER_SIZE
from atmfjstc.lib.rar_scope.errors import RarError, RarInvalidMarkerError, RarIoError, RarTruncatedError, \
    RarSequenceExhaustedError
from atmfjstc.lib.rar_scope.reader import RarArchiveReader, open_archive_reader, RAR_MARKER
from atmfjstc.lib.rar_scope.tables import RarHostOS, RarCompressionMethod, RarBlockType, RarFileHeaderFlags, \
    host_os_name, compression_method_name, version_string


LOG = logging.getLogger(__name__)


class RarFile(ContextManager['RarFile']):
    """
    This class provides access to the entry metadata of a RAR archive stored in a file or file object.

    The archive signature is checked as soon as the `RarFile` is constructed. The entries are then read lazily, in
    a single forward pass, as they are requested through `entries` or `iter_entries`.

    A `RarFile` can be either opened and closed manually::

        rf = RarFile("file.rar")
        entries = list(rf.iter_entries())
        rf.close()

    or used as a context manager::

        with RarFile("file.rar") as rf:
            entries = list(rf.iter_entries())

    The scanning position is shared by all sequences obtained from the same `RarFile`: a new sequence continues
    where the previous one stopped. To scan an archive again, open it again.
    """

    _reader: RarArchiveReader
    _fileobj_owned: bool = False
    _name_encoding: str

    def __init__(
        self, path_or_fileobj: Union[PathLike, AnyStr, BinaryIO], name_encoding: str = 'utf-8',
        size: Optional[int] = None
    ):
        """
        Opens a RAR archive for scanning.

        Args:
            path_or_fileobj: Either a filename, or an open binary file object containing the archive.
            name_encoding: The codec used to decode entry names. Undecodable bytes are replaced, but the exact bytes
                are always available in `RarEntry.raw_name`.
            size: The number of bytes in the archive. Only needed for non-seekable file objects.

        Raises:
            RarInvalidMarkerError: If the data does not start with a RAR signature.
            RarIoError: If the archive could not be read.

        If a file object is passed, the archive is read from its current position. The `RarFile` will not close it
        when used as a context manager, but it will when `close` is called explicitly.
        """
        self._name_encoding = name_encoding

        if isinstance(path_or_fileobj, IOBase):
            fileobj = path_or_fileobj
        else:
            try:
                fileobj = open(path_or_fileobj, 'rb')
            except OSError as e:
                raise RarIoError(f"Failed to open archive '{path_or_fileobj}'") from e

            self._fileobj_owned = True

        try:
            self._reader = open_archive_reader(fileobj, size=size)
        except Exception:
            if self._fileobj_owned:
                with ignore_errors():
                    fileobj.close()

            raise

    def name(self) -> Optional[AnyStr]:
        return self._reader.name()

    def entries(self) -> 'RarEntrySequence':
        """
        Returns a single-pass sequence of the entries in the archive, starting from the current scanning position.
        """
        return RarEntrySequence(self._reader, name_encoding=self._name_encoding)

    def iter_entries(self) -> Iterator[RarEntry]:
        """
        Iterates through the entries in the archive, starting from the current scanning position.

        Unlike a `RarEntrySequence`, this ends quietly when a header block that is not a file header is encountered.
        Read errors are still raised.
        """
        entries = self.entries()

        while entries.has_next():
            entry = decode_next_entry(self._reader, name_encoding=self._name_encoding)
            if entry is None:
                LOG.debug("Non-file header block found, %d bytes left unscanned", self._reader.bytes_remaining)
                return

            yield entry

    def close(self):
        """
        Closes the underlying file object.

        Entries already obtained remain valid. Note that this method closes the file object regardless of whether it
        was opened by `RarFile` or received from elsewhere!
        """
        if not self._reader.closed:
            self._reader.close()

    def __enter__(self) -> 'RarFile':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if (not self._fileobj_owned) or self._reader.closed:
            return

        self._reader.close()


class RarEntrySequence(Iterator[RarEntry]):
    """
    A lazy, forward-only sequence of the entries in a RAR archive. It can be walked exactly once.

    The sequence offers an explicit interface::

        while entries.has_next():
            entry = entries.next()

    as well as the Python iterator protocol. Note that in both cases, running into a header block that is not a file
    header raises `RarSequenceExhaustedError`, rather than quietly ending the sequence. Use `RarFile.iter_entries`
    for the quiet behavior.
    """

    _reader: RarArchiveReader
    _name_encoding: str

    def __init__(self, reader: RarArchiveReader, name_encoding: str = 'utf-8'):
        self._reader = reader
        self._name_encoding = name_encoding

    def has_next(self) -> bool:
        """
        Checks whether there is room for more entries in the archive.

        This is only a length check: it is true while more than 32 bytes (the size of a fixed file header) remain
        unread. It does not guarantee that a file header actually follows.
        """
        return self._reader.bytes_remaining > FIXED_HEADER_SIZE

    def next(self) -> RarEntry:
        """
        Reads the next entry.

        Raises:
            RarSequenceExhaustedError: If there is no room left for more entries, or the next header block is not a
                file header.
            RarIoError: If reading the archive failed. Entries already returned remain valid.
        """
        if not self.has_next():
            raise RarSequenceExhaustedError("No more entries in the archive")

        entry = decode_next_entry(self._reader, name_encoding=self._name_encoding)
        if entry is None:
            raise RarSequenceExhaustedError("Encountered a header block that is not a file header")

        return entry

    def __iter__(self) -> 'RarEntrySequence':
        return self

    def __next__(self) -> RarEntry:
        if not self.has_next():
            raise StopIteration

        return self.next()
