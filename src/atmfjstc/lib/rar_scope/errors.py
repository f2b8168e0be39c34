from typing import Optional


class RarError(Exception):
    """
    Base class for all errors raised while scanning a RAR archive.
    """


class RarInvalidMarkerError(RarError):
    file_name: Optional[str]
    found_marker: int

    def __init__(self, file_name: Optional[str], found_marker: int):
        self.file_name = file_name
        self.found_marker = found_marker

        quoted_name = f" '{file_name}'" if file_name is not None else ''
        super().__init__(f"File{quoted_name} is not a RAR archive (found marker 0x{found_marker:08x})")


class RarIoError(RarError):
    """
    Raised for any failure while reading or skipping data in the archive. The original `OSError`, if any, is
    available as the ``__cause__``.
    """


class RarTruncatedError(RarIoError):
    position: int
    expected_length: int
    actual_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {expected_length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but only {actual_length} were found"
        )


class RarSequenceExhaustedError(RarError):
    """
    Raised when advancing an entry sequence that has no more entries, or that has run into a header block that is
    not a file header.
    """
