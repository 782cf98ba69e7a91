"""
A zero-copy reader for ZIP archives in memory. The entry point is `zipview.zip.archive.Zip`; the
remaining modules contain the record layouts and decoders that it is built from.
"""
from __future__ import annotations

from zipview.zip.archive import Zip, ZipChecks, ZipDirectoryIterator, ZipEntry, ZipIteratorState
from zipview.zip.extra import ZipExt, ZipExtInfo64, ZipExtraField, ZipExtraFields
from zipview.zip.locator import locate_end_of_central_directory
from zipview.zip.methods import ZipCompressionMethod
from zipview.zip.records import ZipFlags, ZipStructureError

__all__ = [
    'locate_end_of_central_directory',
    'Zip',
    'ZipChecks',
    'ZipCompressionMethod',
    'ZipDirectoryIterator',
    'ZipEntry',
    'ZipExt',
    'ZipExtInfo64',
    'ZipExtraField',
    'ZipExtraFields',
    'ZipFlags',
    'ZipIteratorState',
    'ZipStructureError',
]
