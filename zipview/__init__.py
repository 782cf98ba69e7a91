"""
The zipview package parses ZIP archives that reside in memory without copying or decompressing
any of their contents. Open an archive with `zipview.zip.archive.Zip` and iterate it to receive
one `zipview.zip.archive.ZipEntry` per central directory record:

    from zipview import Zip

    for entry in Zip(data):
        print(bytes(entry.name), entry.method.name, len(entry.data))

The byte fields of every entry are views into `data`. See `zipview.zip` for the format modules,
`zipview.lib.environment` for the available environment variables, and `zipview.listing` for the
`zipls` command line tool.
"""
from __future__ import annotations

__version__ = '0.1.0'
__distribution__ = 'zipview'

from zipview.zip import (
    Zip,
    ZipChecks,
    ZipCompressionMethod,
    ZipEntry,
    ZipStructureError,
)

__all__ = [
    'Zip',
    'ZipChecks',
    'ZipCompressionMethod',
    'ZipEntry',
    'ZipStructureError',
]
