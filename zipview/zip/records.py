"""
Fixed-size records of the ZIP format. Each structure reads only its fixed part; the variable
length fields that follow a header are sliced by the caller, which knows how far it may read.
"""
from __future__ import annotations

import enum

from datetime import datetime

from zipview.lib.structures import FlagAccessMixin, Struct, StructReader

ZIP64_SENTINEL_32 = 0xFFFFFFFF


class ZipStructureError(ValueError):
    pass


class ZipFlags(FlagAccessMixin, enum.IntFlag):
    Encrypted           = 0x0001 # noqa
    CompressOption1     = 0x0002 # noqa
    CompressOption2     = 0x0004 # noqa
    DataDescriptor      = 0x0008 # noqa
    EnhancedDeflate     = 0x0010 # noqa
    CompressedPatched   = 0x0020 # noqa
    StrongEncryption    = 0x0040 # noqa
    UseUTF8             = 0x0800 # noqa
    EncryptedCD         = 0x2000 # noqa


def dostime(mdate: int, mtime: int) -> datetime | None:
    """
    Parses a DOS date and time pair into a datetime object. Returns `None` when the fields do not
    describe a valid point in time.
    """
    s = (mtime & 0x1F) << 1
    try:
        return datetime(
            year   = ((mdate & 0xFE00) >> 0x9) + 1980,  # noqa
            month  = ((mdate & 0x01E0) >> 0x5),         # noqa
            day    = ((mdate & 0x001F) >> 0x0),         # noqa
            hour   = ((mtime & 0xF800) >> 0xB),         # noqa
            minute = ((mtime & 0x07E0) >> 0x5),         # noqa
            second = 59 if s == 60 else s,              # noqa
        )
    except ValueError:
        return None


class ZipRecord(Struct):
    Signature: bytes
    Size: int

    def _read_signature(self, reader: StructReader, check: bool):
        self.signature = signature = reader.read_exactly(4)
        if check and signature != self.Signature:
            raise ZipStructureError(
                F'Invalid signature {bytes(signature).hex()} for {self.__class__.__name__} at offset {reader.tell() - 4:#x}.')

    @property
    def signature_ok(self) -> bool:
        return self.signature == self.Signature


class ZipLocalFileHeader(ZipRecord):
    """
    The header that immediately precedes the payload of an archive member. Its filename and extra
    field lengths are independent of the copy in the central directory.
    """
    Signature = B'PK\x03\x04'
    Size = 30

    def __init__(self, reader: StructReader, check_signature: bool = False):
        self.offset = reader.tell()
        self._read_signature(reader, check_signature)
        self.version_to_extract = reader.u16()
        self.flags = ZipFlags(reader.u16())
        self.method = reader.u16()
        self.mtime = reader.u16()
        self.mdate = reader.u16()
        self.crc32 = reader.u32()
        self.csize = reader.u32()
        self.usize = reader.u32()
        self.name_length = reader.u16()
        self.xtra_length = reader.u16()

    @property
    def data_offset(self) -> int:
        return self.offset + self.Size + self.name_length + self.xtra_length


class ZipCentralDirectoryHeader(ZipRecord):
    Signature = B'PK\x01\x02'
    Size = 46

    def __init__(self, reader: StructReader, check_signature: bool = False):
        self.offset = reader.tell()
        self._read_signature(reader, check_signature)
        self.version_made_by = reader.u16()
        self.version_to_extract = reader.u16()
        self.flags = ZipFlags(reader.u16())
        self.method = reader.u16()
        self.mtime = reader.u16()
        self.mdate = reader.u16()
        self.crc32 = reader.u32()
        self.csize = reader.u32()
        self.usize = reader.u32()
        self.name_length = reader.u16()
        self.xtra_length = reader.u16()
        self.comment_length = reader.u16()
        self.disk_nr_start = reader.u16()
        self.internal_attributes = reader.u16()
        self.external_attributes = reader.u32()
        self.header_offset = reader.u32()

    @property
    def total_length(self) -> int:
        """
        The size of this header including the variable length fields that follow it.
        """
        return self.Size + self.name_length + self.xtra_length + self.comment_length


class ZipEndOfCentralDirectory(ZipRecord):
    """
    The record at the end of an archive which locates the central directory. Parsing it also
    reads the archive comment that follows it, so a successful parse proves that the comment fits
    into the buffer.
    """
    Signature = B'PK\x05\x06'
    Size = 22
    MaxCommentLength = 0xFFFF

    def __init__(self, reader: StructReader, check_signature: bool = True):
        self.offset = reader.tell()
        self._read_signature(reader, check_signature)
        self.disk_number = reader.u16()
        self.start_disk_number = reader.u16()
        self.entries_on_disk = reader.u16()
        self.entries_in_directory = reader.u16()
        self.directory_size = reader.u32()
        self.directory_offset = reader.u32()
        self.comment_length = reader.u16()
        self.comment = reader.read_exactly(self.comment_length)


class ZipEndOfCentralDirectory64(ZipRecord):
    """
    The Zip64 variant of the end of central directory record. Its layout is recognized, but an
    archive handle does not consume it.
    """
    Signature = B'PK\x06\x06'
    Size = 56

    def __init__(self, reader: StructReader, check_signature: bool = True):
        self.offset = reader.tell()
        self._read_signature(reader, check_signature)
        self.eocd64_size = reader.u64()
        self.version_made_by = reader.u16()
        self.version_to_extract = reader.u16()
        self.disk_number = reader.u32()
        self.start_disk_number = reader.u32()
        self.entries_on_disk = reader.u64()
        self.entries_in_directory = reader.u64()
        self.directory_size = reader.u64()
        self.directory_offset = reader.u64()
