"""
Decoding of the extra field block that can be attached to ZIP headers. The block is a chain of
records, each consisting of a 16-bit header id, a 16-bit length and that many bytes of payload.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, NamedTuple, TypeVar

from zipview.lib.structures import EOF, Struct, StructReader, asview
from zipview.lib.types import buf

if TYPE_CHECKING:
    from typing import Self

_X = TypeVar('_X', bound='ZipExt')


class ZipExtraField(NamedTuple):
    header_id: int
    data: memoryview

    @classmethod
    def Read(cls, reader: StructReader) -> ZipExtraField:
        header_id = reader.u16()
        size = reader.u16()
        return cls(header_id, reader.read_exactly(size))


class ZipExtraFields:
    """
    A view of an extra field block that can be iterated any number of times. Iteration stops when
    fewer than four bytes remain or when a record declares more data than is left.
    """
    __slots__ = 'data',

    def __init__(self, data: buf):
        self.data = asview(data)

    def __iter__(self) -> Iterator[ZipExtraField]:
        reader = StructReader(self.data)
        while reader.remaining_bytes >= 4:
            try:
                yield ZipExtraField.Read(reader)
            except EOFError:
                break

    def find(self, ext: type[_X]) -> _X | None:
        """
        Parse the first record with the header id of the given extension. The result is `None`
        when there is no such record or when the first one is too short; later records with the
        same id are never consulted.
        """
        for field in self:
            if field.header_id == ext.HeaderID:
                return ext.TryParse(field)


class ZipExt(Struct):
    """
    Base class for typed extra field records. A subclass names the header id it handles and the
    number of leading payload bytes it decodes; trailing payload bytes are ignored.
    """
    HeaderID: int
    PrefixSize: int

    @classmethod
    def TryParse(cls, extra: ZipExtraField) -> Self | None:
        if extra.header_id != cls.HeaderID:
            return None
        try:
            return cls.Parse(extra.data)
        except EOF:
            return None


class ZipExtInfo64(ZipExt):
    HeaderID = 0x0001
    PrefixSize = 28

    def __init__(self, reader: StructReader):
        prefix = StructReader(reader.read_exactly(self.PrefixSize))
        self.usize = prefix.u64()
        self.csize = prefix.u64()
        self.header_offset = prefix.u64()
        self.disk_nr_start = prefix.u32()
