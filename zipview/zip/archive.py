"""
The archive handle and the iterator over its central directory. Every byte field of a yielded
`zipview.zip.archive.ZipEntry` is a `memoryview` into the buffer that was passed to the handle:
The entry is valid as long as that buffer is kept alive and unchanged, and no member data is
ever copied or decompressed.

By default, the parser is permissive. It trusts the lengths and counts that are declared in the
headers, does not verify record signatures, and ends the iteration on the first entry that it
cannot resolve. A truncated and a malformed directory therefore look the same to the caller.
Stricter behavior can be requested per handle with `zipview.zip.archive.ZipChecks`.
"""
from __future__ import annotations

import enum

from datetime import datetime
from typing import Iterator, NamedTuple

from zipview.lib.environment import environment, logger
from zipview.lib.structures import FlagAccessMixin, StructReader, asview, split_at
from zipview.lib.types import buf
from zipview.zip.extra import ZipExtInfo64, ZipExtraFields
from zipview.zip.locator import locate_end_of_central_directory
from zipview.zip.methods import ZipCompressionMethod
from zipview.zip.records import (
    ZIP64_SENTINEL_32,
    ZipCentralDirectoryHeader,
    ZipEndOfCentralDirectory,
    ZipEndOfCentralDirectory64,
    ZipFlags,
    ZipLocalFileHeader,
    ZipStructureError,
    dostime,
)

_log = logger(__name__)


class ZipChecks(FlagAccessMixin, enum.IntFlag):
    """
    Optional validation steps for the central directory iterator. A failed check raises a
    `zipview.zip.records.ZipStructureError` instead of silently ending the iteration.
    """
    Nothing         = 0x0 # noqa
    Signatures      = 0x1 # noqa
    EntryCount      = 0x2 # noqa
    Zip64Sentinel   = 0x4 # noqa
    Strict          = 0x3 # noqa

    @classmethod
    def Default(cls) -> ZipChecks:
        """
        The checks used when none are specified; this is controlled by `ZIPVIEW_STRICT`.
        """
        return cls.Strict if environment.strict.value else cls.Nothing


class ZipEntry(NamedTuple):
    method: ZipCompressionMethod
    crc32: int
    usize: int
    csize: int
    name: memoryview
    xtra: memoryview
    comment: memoryview
    data: memoryview
    header_offset: int
    data_offset: int
    flags: ZipFlags
    mtime: int
    mdate: int
    version_made_by: int
    external_attributes: int
    zip64: ZipExtInfo64 | None

    @property
    def date(self) -> datetime | None:
        return dostime(self.mdate, self.mtime)

    @property
    def extras(self) -> ZipExtraFields:
        return ZipExtraFields(self.xtra)

    def is_dir(self) -> bool:
        return bytes(self.name[-1:]) in (B'/', B'\\')


class ZipIteratorState(str, enum.Enum):
    ITERATING = 'iterating'
    ENDED = 'ended'


class _Unrecognized(Exception):
    pass


_TRAILER_SIGNATURES = (
    B'PK\x05\x05',
    B'PK\x06\x07',
    ZipEndOfCentralDirectory.Signature,
    ZipEndOfCentralDirectory64.Signature,
)


def _zip64_override(value: int, wide: int, gated: bool) -> int:
    if gated and value != ZIP64_SENTINEL_32:
        return value
    return wide


class ZipDirectoryIterator:
    """
    A cursor over the central directory that produces one `zipview.zip.archive.ZipEntry` per
    step. The cursor always moves past the complete central header, even when the entry it
    describes cannot be resolved. Once the iteration has ended, it stays ended.
    """
    def __init__(
        self,
        data: buf,
        offset: int,
        checks: ZipChecks = ZipChecks.Nothing,
        claimed: int | None = None,
    ):
        self.data = asview(data)
        self.offset = offset
        self.checks = checks
        self.claimed = claimed
        self.count = 0
        self.state = ZipIteratorState.ITERATING

    def __iter__(self):
        return self

    def __next__(self) -> ZipEntry:
        if self.state is ZipIteratorState.ENDED:
            raise StopIteration
        if self.checks.EntryCount and self.claimed is not None and self.count >= self.claimed:
            self._end(F'all {self.claimed} claimed entries were read')
        try:
            return self._step()
        except ZipStructureError:
            self.state = ZipIteratorState.ENDED
            raise
        except (EOFError, _Unrecognized) as E:
            self._end(str(E))

    def _end(self, reason: str):
        self.state = ZipIteratorState.ENDED
        _log.debug(F'central directory iteration ended after {self.count} entries: {reason}')
        if self.checks.EntryCount and self.claimed is not None and self.count != self.claimed:
            raise ZipStructureError(
                F'The directory end record claims {self.claimed} entries, but {self.count} were read: {reason}')
        raise StopIteration

    def _step(self) -> ZipEntry:
        view = self.data
        checks = self.checks

        reader = StructReader(view, self.offset)
        if checks.Signatures and bytes(reader.peek(4)) in _TRAILER_SIGNATURES:
            raise _Unrecognized(F'trailing record at {self.offset:#x} follows the central directory')
        header = ZipCentralDirectoryHeader(reader, checks.Signatures)
        rest = view[reader.tell():]
        name, rest = split_at(rest, header.name_length)
        xtra, rest = split_at(rest, header.xtra_length)
        comment, _ = split_at(rest, header.comment_length)

        csize = header.csize
        usize = header.usize
        header_offset = header.header_offset

        if (zip64 := ZipExtraFields(xtra).find(ZipExtInfo64)) is not None:
            gated = checks.Zip64Sentinel
            csize = _zip64_override(csize, zip64.csize, gated)
            usize = _zip64_override(usize, zip64.usize, gated)
            header_offset = _zip64_override(header_offset, zip64.header_offset, gated)

        self.offset += header.total_length

        local = ZipLocalFileHeader(StructReader(view, header_offset), checks.Signatures)
        _, rest = split_at(view, local.data_offset)
        data, _ = split_at(rest, csize)

        if (method := ZipCompressionMethod.FromCode(header.method)) is None:
            raise _Unrecognized(
                F'unrecognized compression method {header.method:#x} in central header at {header.offset:#x}')

        self.count += 1

        return ZipEntry(
            method,
            header.crc32,
            usize,
            csize,
            name,
            xtra,
            comment,
            data,
            header_offset,
            local.data_offset,
            header.flags,
            header.mtime,
            header.mdate,
            header.version_made_by,
            header.external_attributes,
            zip64,
        )


class Zip:
    """
    A handle for a ZIP archive in memory. Construction locates the end of central directory
    record and raises a `zipview.zip.records.ZipStructureError` if there is none; use
    `zipview.zip.archive.Zip.TryParse` to receive `None` instead. Iterating the handle walks the
    central directory; every iteration starts with a fresh cursor.
    """
    data: memoryview
    eocd: ZipEndOfCentralDirectory
    checks: ZipChecks

    def __init__(self, data: buf, checks: ZipChecks | None = None):
        self.data = view = asview(data)
        if (eocd := locate_end_of_central_directory(view)) is None:
            raise ZipStructureError('No end of central directory record was found.')
        # TODO: read the Zip64 end of central directory record when the counts or offsets in
        #       the classic record carry the overflow sentinel.
        self.eocd = eocd
        self.checks = ZipChecks.Default() if checks is None else checks

    @classmethod
    def TryParse(cls, data: buf, checks: ZipChecks | None = None) -> Zip | None:
        try:
            return cls(data, checks)
        except ZipStructureError:
            return None

    @property
    def entries_total(self) -> int:
        return self.eocd.entries_in_directory

    @property
    def directory_offset(self) -> int:
        return self.eocd.directory_offset

    @property
    def directory_size(self) -> int:
        return self.eocd.directory_size

    @property
    def comment(self) -> memoryview:
        return self.eocd.comment

    def __iter__(self) -> Iterator[ZipEntry]:
        return ZipDirectoryIterator(self.data, self.directory_offset, self.checks, self.entries_total)

    def find(self, name: buf) -> ZipEntry | None:
        """
        Return the first entry with the given file name, or `None`.
        """
        for entry in self:
            if entry.name == name:
                return entry
