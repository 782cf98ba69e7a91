"""
The registry of ZIP compression methods. The method of an entry is reported, not decoded; only
the codes listed in `zipview.zip.methods.CONVERTIBLE_METHODS` are accepted when converting a raw
code from a header.
"""
from __future__ import annotations

import enum


class ZipCompressionMethod(enum.IntEnum):
    STORE           = 0x00 # noqa
    DEFLATE         = 0x08 # noqa
    DEFLATE64       = 0x09 # noqa
    IBM_TERSE_OLD   = 0x0A # noqa
    BZIP2           = 0x0C # noqa
    LZMA            = 0x0E # noqa
    IBM_CMPSC       = 0x10 # noqa
    IBM_TERSE_NEW   = 0x12 # noqa
    IBM_LZ77        = 0x13 # noqa
    ZSTD            = 0x5D # noqa
    MP3             = 0x5E # noqa
    XZ              = 0x5F # noqa
    JPEG            = 0x60 # noqa
    WAVPACK         = 0x61 # noqa
    PPMD            = 0x62 # noqa

    @classmethod
    def FromCode(cls, code: int) -> ZipCompressionMethod | None:
        """
        Convert a raw method code to a member of this enumeration. The return value is `None` for
        codes that are not convertible, including the named methods that are not yet supported.
        """
        if code not in CONVERTIBLE_METHODS:
            return None
        return cls(code)


CONVERTIBLE_METHODS = frozenset({
    ZipCompressionMethod.STORE,
    ZipCompressionMethod.DEFLATE,
})
