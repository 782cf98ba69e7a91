"""
Locating the end of central directory record. The record has a fixed size, but it is followed by
a comment of up to 65535 bytes whose content is arbitrary. The comment can therefore contain
byte sequences that look exactly like another end of central directory record. A candidate is
only accepted if its declared comment extends precisely to the end of the buffer.
"""
from __future__ import annotations

import re

from zipview.lib.environment import logger
from zipview.lib.structures import StructReader, asview
from zipview.lib.types import buf
from zipview.zip.records import ZipEndOfCentralDirectory

_log = logger(__name__)

_EOCD_SIGNATURE = re.compile(re.escape(ZipEndOfCentralDirectory.Signature))


def locate_end_of_central_directory(data: buf) -> ZipEndOfCentralDirectory | None:
    """
    Find the authentic end of central directory record in `data`. Only the final window that can
    hold a record plus a maximum length comment is searched. When more than one candidate claims
    a comment that ends at the end of the buffer, all but one of them are embedded in the comment
    of another; the topmost candidate is the genuine one.
    """
    view = asview(data)
    size = ZipEndOfCentralDirectory.Size
    if len(view) < size:
        _log.debug(F'buffer of length {len(view)} is too short for an end of central directory record')
        return None
    start = max(0, len(view) - size - ZipEndOfCentralDirectory.MaxCommentLength)
    offsets = [match.start() for match in _EOCD_SIGNATURE.finditer(view, start)]
    genuine: list[ZipEndOfCentralDirectory] = []
    for offset in reversed(offsets):
        if offset + size > len(view):
            continue
        distance = len(view) - offset - size
        if StructReader(view, offset + size - 2).u16() != distance:
            continue
        genuine.append(ZipEndOfCentralDirectory(StructReader(view, offset)))
    if not genuine:
        _log.debug('no end of central directory record with a matching comment length was found')
        return None
    eocd = genuine[-1]
    if len(genuine) > 1:
        forged = ', '.join(F'{r.offset:#x}' for r in genuine[:-1])
        _log.warning(
            F'ignoring {len(genuine) - 1} end of central directory record(s) inside the archive comment at: {forged}')
    _log.debug(F'found end of central directory at offset {eocd.offset:#x} with comment length {eocd.comment_length}')
    return eocd
