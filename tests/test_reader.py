import io
import unittest

from atmfjstc.lib.rar_scope.errors import RarInvalidMarkerError, RarIoError, RarTruncatedError
from atmfjstc.lib.rar_scope.reader import open_archive_reader, RarArchiveReader

from rar_builder import PROLOGUE, NonSeekableReader, archive


class _UntellableBytesIO(io.BytesIO):
    def tell(self) -> int:
        raise OSError("Simulated tell failure")


class OpenArchiveReaderTest(unittest.TestCase):
    def test_valid_prologue(self):
        data = archive()

        reader = open_archive_reader(io.BytesIO(data))

        self.assertEqual(reader.tell(), 20)
        self.assertEqual(reader.bytes_remaining, len(data) - 20)

    def test_from_bytes(self):
        reader = open_archive_reader(PROLOGUE + b'\x00' * 50)

        self.assertEqual(reader.bytes_remaining, 50)

    def test_file_position_advanced(self):
        fileobj = io.BytesIO(archive())

        open_archive_reader(fileobj)

        self.assertEqual(fileobj.tell(), 20)

    def test_starts_mid_file(self):
        fileobj = io.BytesIO(b'junk' + archive())
        fileobj.seek(4)

        reader = open_archive_reader(fileobj)

        self.assertEqual(reader.bytes_remaining, len(archive()) - 20)

    def test_invalid_marker(self):
        with self.assertRaises(RarInvalidMarkerError) as cm:
            open_archive_reader(b'PK\x03\x04' + b'\x00' * 30)

        self.assertEqual(cm.exception.found_marker, 0x04034b50)

    def test_only_first_bytes_checked(self):
        reader = open_archive_reader(b'Rar!' + b'\xff' * 16)

        self.assertEqual(reader.bytes_remaining, 0)

    def test_too_short_for_marker(self):
        with self.assertRaises(RarInvalidMarkerError):
            open_archive_reader(b'Ra')

    def test_empty(self):
        with self.assertRaises(RarInvalidMarkerError):
            open_archive_reader(b'')

    def test_truncated_archive_header(self):
        with self.assertRaises(RarTruncatedError) as cm:
            open_archive_reader(PROLOGUE[:12])

        self.assertEqual(cm.exception.actual_length, 12)

    def test_non_seekable_needs_size(self):
        with self.assertRaises(ValueError):
            open_archive_reader(NonSeekableReader(archive()))

    def test_non_seekable_with_size(self):
        data = archive()

        reader = open_archive_reader(NonSeekableReader(data, max_chunk=3), size=len(data))

        self.assertEqual(reader.bytes_remaining, len(data) - 20)

    def test_read_failure(self):
        with self.assertRaises(RarIoError) as cm:
            open_archive_reader(NonSeekableReader(archive(), fail_after=0), size=100)

        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_position_failure(self):
        with self.assertRaises(RarIoError) as cm:
            open_archive_reader(_UntellableBytesIO(archive()), size=len(archive()))

        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_size_measurement_failure(self):
        with self.assertRaises(RarIoError) as cm:
            open_archive_reader(_UntellableBytesIO(archive()))

        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_text_fileobj_rejected(self):
        with self.assertRaises(TypeError):
            open_archive_reader(io.StringIO('Rar!'))


class RarArchiveReaderTest(unittest.TestCase):
    def test_read_once_does_not_retry(self):
        reader = RarArchiveReader(NonSeekableReader(b'\x01' * 100, max_chunk=10), 100)

        data = reader.read_once(32)

        self.assertEqual(len(data), 10)
        self.assertEqual(reader.bytes_remaining, 90)

    def test_read_exact_retries(self):
        reader = RarArchiveReader(NonSeekableReader(b'\x01' * 100, max_chunk=10), 100)

        data = reader.read_exact(32)

        self.assertEqual(len(data), 32)
        self.assertEqual(reader.bytes_remaining, 68)

    def test_read_exact_short(self):
        reader = RarArchiveReader(io.BytesIO(b'\x01' * 10), 10)

        with self.assertRaises(RarTruncatedError) as cm:
            reader.read_exact(32, 'entry name')

        self.assertEqual(cm.exception.meaning, 'entry name')
        self.assertEqual(reader.bytes_remaining, 0)

    def test_skip_seekable(self):
        fileobj = io.BytesIO(b'\x01' * 100)
        reader = RarArchiveReader(fileobj, 100)

        reader.skip(60)

        self.assertEqual(fileobj.tell(), 60)
        self.assertEqual(reader.bytes_remaining, 40)

    def test_skip_non_seekable(self):
        reader = RarArchiveReader(NonSeekableReader(b'\x01' * 100, max_chunk=7), 100)

        reader.skip(60)

        self.assertEqual(reader.bytes_remaining, 40)
        self.assertEqual(reader.read_exact(40), b'\x01' * 40)

    def test_skip_negative_is_noop(self):
        reader = RarArchiveReader(io.BytesIO(b'\x01' * 100), 100)

        reader.skip(-20)

        self.assertEqual(reader.bytes_remaining, 100)

    def test_skip_past_end(self):
        fileobj = io.BytesIO(b'\x01' * 100)
        reader = RarArchiveReader(fileobj, 100)
        reader.skip(30)

        with self.assertRaises(RarTruncatedError) as cm:
            reader.skip(200)

        self.assertEqual(cm.exception.actual_length, 70)
        self.assertEqual(reader.bytes_remaining, 0)

    def test_skip_past_end_non_seekable(self):
        reader = RarArchiveReader(NonSeekableReader(b'\x01' * 100), 100)

        with self.assertRaises(RarTruncatedError):
            reader.skip(200)

        self.assertEqual(reader.bytes_remaining, 0)

    def test_close(self):
        fileobj = io.BytesIO(b'')
        reader = RarArchiveReader(fileobj, 0)

        reader.close()

        self.assertTrue(reader.closed)
        self.assertTrue(fileobj.closed)


if __name__ == '__main__':
    unittest.main()
