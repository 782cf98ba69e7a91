from __future__ import annotations

import io
import struct
import zipfile
import zlib

from typing import NamedTuple


LOCAL = struct.Struct('<4sHHHHHIIIHH')
CENTRAL = struct.Struct('<4sHHHHHHIIIHHHHHII')
END = struct.Struct('<4sHHHHIIH')
END64 = struct.Struct('<4sQHHIIQQQQ')
ZIP64 = struct.Struct('<HHQQQI')

# 2020-05-17 13:37:42
MDATE = 0x50B1
MTIME = 0x6CB5

KADATH1 = (
    B"Three times Randolph Carter dreamed of the marvellous city, and three times was he snatched "
    B"away while still he paused on the high terrace above it. All golden and lovely it blazed in "
    B"the sunset, with walls, temples, colonnades, and arched bridges of veined marble, "
    B"silver-basined fountains of prismatic spray in broad squares and perfumed gardens, and wide "
    B"streets marching between delicate trees and blossom-laden urns and ivory statues in gleaming "
    B"rows; while on steep northward slopes climbed tiers of red roofs and old peaked gables "
    B"harbouring little lanes of grassy cobbles."
)

KADATH2 = (
    B"It was a fever of the gods; a fanfare of supernal trumpets and a clash of immortal cymbals. "
    B"Mystery hung about it as clouds about a fabulous unvisited mountain; and as Carter stood "
    B"breathless and expectant on that balustraded parapet there swept up to him the poignancy "
    B"and suspense of almost-vanished memory."
)


def extra_field(header_id: int, data: bytes) -> bytes:
    return struct.pack('<HH', header_id, len(data)) + data


def zip64_extra(usize: int, csize: int, offset: int, disk: int = 0) -> bytes:
    return ZIP64.pack(0x0001, 28, usize, csize, offset, disk)


def end_record(
    entries: int,
    size: int,
    offset: int,
    comment_length: int = 0,
    signature: bytes = B'PK\x05\x06',
) -> bytes:
    return END.pack(signature, 0, 0, entries, entries, size, offset, comment_length)


class Member(NamedTuple):
    """
    An archive member as it is written by `build_archive`. The central and local headers share
    the name and payload, unless one of the override fields is set.
    """
    name: bytes
    data: bytes
    method: int = 0
    usize: int | None = None
    csize: int | None = None
    crc32: int | None = None
    comment: bytes = B''
    central_xtra: bytes = B''
    local_xtra: bytes = B''
    local_name: bytes | None = None
    header_offset: int | None = None
    central_signature: bytes = B'PK\x01\x02'
    local_signature: bytes = B'PK\x03\x04'


def build_archive(members: list[Member], comment: bytes = B'', entries: int | None = None) -> bytes:
    """
    Assemble an archive field by field; this can produce archives that the zipfile module would
    never write.
    """
    body = bytearray()
    directory = bytearray()
    for m in members:
        offset = len(body)
        local_name = m.name if m.local_name is None else m.local_name
        usize = len(m.data) if m.usize is None else m.usize
        csize = len(m.data) if m.csize is None else m.csize
        crc32 = zlib.crc32(m.data) & 0xFFFFFFFF if m.crc32 is None else m.crc32
        body += LOCAL.pack(
            m.local_signature, 20, 0, m.method, MTIME, MDATE, crc32, len(m.data), len(m.data),
            len(local_name), len(m.local_xtra))
        body += local_name
        body += m.local_xtra
        body += m.data
        directory += CENTRAL.pack(
            m.central_signature, 0x031E, 20, 0, m.method, MTIME, MDATE, crc32, csize, usize,
            len(m.name), len(m.central_xtra), len(m.comment), 0, 0, 0o100644 << 16,
            offset if m.header_offset is None else m.header_offset)
        directory += m.name
        directory += m.central_xtra
        directory += m.comment
    if entries is None:
        entries = len(members)
    end = end_record(entries, len(directory), len(body), len(comment))
    return bytes(body + directory + end + comment)


def reference_archive(comment: bytes = B'') -> bytes:
    """
    Create an archive with the zipfile module that mixes stored and deflated members, member
    comments and a directory entry.
    """
    stream = io.BytesIO()
    with zipfile.ZipFile(stream, 'w') as archive:
        for name, data, method, note in [
            ('kadath/one.txt', KADATH1, zipfile.ZIP_DEFLATED, B'first'),
            ('kadath/two.txt', KADATH2, zipfile.ZIP_STORED, B''),
            ('kadath/', B'', zipfile.ZIP_STORED, B''),
            ('empty.bin', B'', zipfile.ZIP_DEFLATED, B'nothing to see here'),
            ('kadath/both.txt', KADATH1 + KADATH2, zipfile.ZIP_DEFLATED, B'third'),
        ]:
            info = zipfile.ZipInfo(name, date_time=(2020, 5, 17, 13, 37, 42))
            info.compress_type = method
            info.comment = note
            archive.writestr(info, data)
        archive.comment = comment
    return stream.getvalue()
