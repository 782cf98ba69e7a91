"""
Interfaces and classes to read structured data from memory. Everything in this module works on
`memoryview` objects, and every byte range that is returned is a view into the original buffer:
Nothing is copied. All integers are read explicitly as little endian values from their byte
offsets, regardless of the alignment of the underlying memory.
"""
from __future__ import annotations

import abc
import enum
import functools

from typing import TYPE_CHECKING

from zipview.lib.types import buf

if TYPE_CHECKING:
    from typing import Generator, Self


class EOF(EOFError):
    """
    While reading from a `zipview.lib.structures.StructReader`, less bytes were available than
    requested. The exception contains the data that was available.
    """
    def __init__(self, size: int, rest: buf = B''):
        super().__init__(F'Unexpected end of buffer; attempted to read {size} bytes, but got only {len(rest)}.')
        self.rest = rest
        self.size = size

    def __bytes__(self):
        return bytes(self.rest)


def asview(data: buf) -> memoryview:
    """
    Acquire a flat memoryview of unsigned bytes for the given buffer without copying it.
    """
    view = memoryview(data)
    if view.ndim != 1 or view.format != 'B':
        view = view.cast('B')
    return view


def split_at(data: memoryview, index: int) -> tuple[memoryview, memoryview]:
    """
    Cut `data` into its first `index` bytes and the remainder. This is the bounds check that
    guards every read in this package; it raises `zipview.lib.structures.EOF` when `index` is
    negative or exceeds the length of `data`.
    """
    if not 0 <= index <= len(data):
        raise EOF(index, data)
    return data[:index], data[index:]


class StructReader:
    """
    A cursor over a byte buffer which provides methods to read little endian integers and byte
    ranges. The cursor may be placed beyond the end of the data; a read that cannot be satisfied
    raises `zipview.lib.structures.EOF` and leaves the cursor where it was.
    """
    __slots__ = '_data', '_cursor'

    _data: memoryview
    _cursor: int

    def __init__(self, data: buf | StructReader, offset: int = 0):
        if isinstance(data, StructReader):
            data = data._data
        self._data = asview(data)
        self._cursor = 0
        self.seekset(offset)

    def __len__(self):
        return len(self._data)

    @property
    def eof(self) -> bool:
        return self._cursor >= len(self._data)

    @property
    def remaining_bytes(self) -> int:
        return max(0, len(self._data) - self._cursor)

    def tell(self) -> int:
        return self._cursor

    def seekset(self, offset: int) -> int:
        if offset < 0:
            raise ValueError('no negative offsets allowed.')
        self._cursor = offset
        return offset

    def skip(self, n: int):
        self.seekset(self._cursor + n)

    def getbuffer(self) -> memoryview:
        return self._data

    def peek(self, size: int | None = None) -> memoryview:
        rest = self._data[self._cursor:]
        if size is None or size < 0:
            return rest
        return rest[:size]

    def read(self, size: int | None = None, peek: bool = False) -> memoryview:
        """
        Read at most `size` bytes; fewer bytes are returned when the buffer ends early.
        """
        data = self.peek(size)
        if not peek:
            self._cursor += len(data)
        return data

    def read_exactly(self, size: int, peek: bool = False) -> memoryview:
        """
        Read exactly `size` bytes from the buffer as a view. Raises an exception of type
        `zipview.lib.structures.EOF` when fewer data is available than requested.
        """
        data, _ = split_at(self._data[self._cursor:], size)
        if not peek:
            self._cursor += size
        return data

    def read_integer(self, size: int, peek: bool = False, signed: bool = False) -> int:
        """
        Read a little endian integer of the given size (in bits) from the buffer.
        """
        nbytes, rest = divmod(size, 8)
        if rest > 0:
            raise ValueError(
                F'A {self.__class__.__name__} cannot read {size} bits, only multiples of 8 are possible.')
        return int.from_bytes(self.read_exactly(nbytes, peek), 'little', signed=signed)

    def u8(self, peek: bool = False) -> int:
        return self.read_integer(8, peek)

    def u16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek)

    def u32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek)

    def u64(self, peek: bool = False) -> int:
        return self.read_integer(64, peek)


class StructMeta(abc.ABCMeta):
    """
    A metaclass to facilitate the behavior outlined for `zipview.lib.structures.Struct`.
    """
    def __init__(cls, name, bases, nmspc, **_):
        super().__init__(name, bases, nmspc)
        if '__init__' not in nmspc:
            return
        original__init__ = nmspc['__init__']

        @functools.wraps(original__init__)
        def wrapped__init__(self: Struct, reader: StructReader, *args, **kwargs):
            start = reader.tell()
            original__init__(self, reader, *args, **kwargs)
            self._data = reader.getbuffer()[start:reader.tell()]

        setattr(cls, '__init__', wrapped__init__)


class Struct(metaclass=StructMeta):
    """
    A class to parse structured data. A `zipview.lib.structures.Struct` can be parsed from any
    buffer as follows:

        record = Record.Parse(data)

    The initialization routine of the structure is called with a single argument `reader`. If
    `data` is already a `zipview.lib.structures.StructReader`, then it will be passed as `reader`.
    Otherwise, it is wrapped in a new reader positioned at offset zero. After parsing, the bytes
    consumed by the structure remain accessible as a view.
    """
    _data: memoryview

    @classmethod
    def Parse(cls, reader: buf | StructReader, *args, **kwargs) -> Self:
        if not isinstance(reader, StructReader):
            reader = StructReader(reader)
        return cls(reader, *args, **kwargs)

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def __init__(self, reader: StructReader, *args, **kwargs):
        pass


class FlagAccessMixin:
    """
    This class can be mixed into an `enum.IntFlag` for some quality of life improvements. Firstly,
    you can now access flags as follows:

        class Flags(FlagAccessMixin, enum.IntFlag):
            Encrypted = 1
            DataDescriptor = 8

        flag = Flags(9)

        if flag.Encrypted:
            refuse()

    Furthermore, flag values can be enumerated and are represented by their name.
    """
    def __getattribute__(self, name: str):
        if not isinstance(self, enum.IntFlag):
            raise RuntimeError
        if not name.startswith('_'):
            try:
                flag = self.__class__[name]
            except KeyError:
                pass
            else:
                return flag in self
        return super().__getattribute__(name)

    def __iter__(self) -> Generator[Self]:
        if not isinstance(self, enum.IntFlag):
            raise RuntimeError
        for flag in self.__class__:
            if flag in self:
                yield flag

    def __repr__(self):
        if not isinstance(self, enum.IntFlag):
            raise RuntimeError
        if name := self.name:
            return name
        return super().__repr__()
