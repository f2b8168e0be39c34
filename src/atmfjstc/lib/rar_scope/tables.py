from enum import IntEnum, IntFlag
from typing import Dict

from atmfjstc.lib.archive_forensics.rar import RarHostOS, RarCompressionMethod


class RarBlockType(IntEnum):
    MARKER = 0x72
    ARCHIVE_HEADER = 0x73
    FILE_HEADER = 0x74
    OLD_COMMENT = 0x75
    OLD_AUTHENTICITY = 0x76
    OLD_SUBBLOCK = 0x77
    OLD_RECOVERY = 0x78
    OLD_AUTHENTICITY2 = 0x79
    SUBBLOCK = 0x7a
    END_OF_ARCHIVE = 0x7b


class RarFileHeaderFlags(IntFlag):
    SPLIT_BEFORE = 1 << 0
    SPLIT_AFTER = 1 << 1
    ENCRYPTED = 1 << 2
    HAS_COMMENT = 1 << 3
    SOLID = 1 << 4
    DIRECTORY = 0xe0  # All three dictionary size bits set
    LARGE = 1 << 8
    UNICODE_NAME = 1 << 9
    HAS_SALT = 1 << 10
    HAS_VERSION = 1 << 11
    HAS_EXTENDED_TIME = 1 << 12
    LONG_BLOCK = 1 << 15  # Always set for file headers, as the data follows the block


UNKNOWN = 'Unknown'

_HOST_OS_NAMES: Dict[RarHostOS, str] = {
    RarHostOS.DOS: 'MS DOS',
    RarHostOS.OS2: 'OS/2',
    RarHostOS.WINDOWS: 'Win32',
    RarHostOS.UNIX: 'Unix',
    RarHostOS.MACOS: 'Mac OS',
    RarHostOS.BEOS: 'BeOS',
}

_COMPRESSION_METHOD_NAMES: Dict[RarCompressionMethod, str] = {
    RarCompressionMethod.STORE: 'Storing',
    RarCompressionMethod.M1: 'Fastest Compression',
    RarCompressionMethod.M2: 'Fast Compression',
    RarCompressionMethod.M3: 'Normal Compression',
    RarCompressionMethod.M4: 'Good Compression',
    RarCompressionMethod.M5: 'Best Compression',
}


def host_os_name(code: int) -> str:
    """
    Returns the display name for a host OS code, or ``'Unknown'`` if the code is not recognized.
    """
    return _HOST_OS_NAMES.get(code, UNKNOWN)


def compression_method_name(code: int) -> str:
    """
    Returns the display name for a compression method code, or ``'Unknown'`` if the code is not recognized.
    """
    return _COMPRESSION_METHOD_NAMES.get(code, UNKNOWN)


def version_string(code: int) -> str:
    """
    Decodes the version needed to extract, which is stored as ``10 * major + minor`` (e.g. 29 -> ``'2.9'``).
    """
    return str(code / 10)
