"""
A commandline script to list the entries of ZIP archives without extracting them.
"""
from __future__ import annotations

import argparse
import codecs
import sys

import colorama

import zipview

from zipview.lib.environment import LogLevel, environment, logger, set_log_level
from zipview.zip import Zip, ZipChecks, ZipEntry, ZipStructureError

_log = logger(__name__)


def display_name(entry: ZipEntry) -> str:
    """
    Decode the file name of an entry for display; names are stored as raw bytes.
    """
    codec = 'utf8' if entry.flags.UseUTF8 else 'latin1'
    return codecs.decode(bytes(entry.name), codec, 'backslashreplace')


def format_entry(entry: ZipEntry, color: bool = False) -> str:
    name = display_name(entry)
    if (date := entry.date) is None:
        stamp = '-' * 19
    else:
        stamp = date.isoformat(' ', 'seconds')
    if color:
        tint = colorama.Fore.LIGHTBLUE_EX if entry.is_dir() else colorama.Fore.LIGHTYELLOW_EX
        name = F'{tint}{name}{colorama.Style.RESET_ALL}'
    return F'{entry.method.name:<8} {entry.csize:>12} {entry.usize:>12} {entry.crc32:08X} {stamp} {name}'


def lister(argv: list[str] | None = None) -> int:
    """
    Main routine of the zipls command. Returns the exit status.
    """
    argp = argparse.ArgumentParser(
        prog='zipls',
        description='List the entries of ZIP archives: method, compressed size, decompressed size, '
                    'CRC, modification time and name.')
    argp.add_argument(
        'files',
        metavar='file',
        nargs='+',
        help='ZIP archives to list.'
    )
    argp.add_argument(
        '-s', '--strict',
        action='store_true',
        help='Verify record signatures and the number of entries claimed by the archive.'
    )
    argp.add_argument(
        '-c', '--colorless',
        action='store_true',
        help='Do not use colors in the output.'
    )
    argp.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase the log verbosity; can be specified twice.'
    )
    argp.add_argument(
        '-V', '--version',
        action='version',
        version=zipview.__version__,
    )

    args = argp.parse_args(argv)

    if args.verbose:
        set_log_level(LogLevel.FromVerbosity(args.verbose))

    color = not (args.colorless or environment.colorless.value)
    if color:
        colorama.init()

    checks = ZipChecks.Strict if args.strict else None
    status = 0

    for path in args.files:
        try:
            with open(path, 'rb') as stream:
                data = stream.read()
        except OSError as E:
            _log.error(F'unable to read {path}: {E!s}')
            status = 1
            continue
        if (archive := Zip.TryParse(data, checks)) is None:
            _log.error(F'not a ZIP archive: {path}')
            status = 1
            continue
        if len(args.files) > 1:
            print(F'{path}:')
        count = 0
        try:
            for entry in archive:
                print(format_entry(entry, color))
                count += 1
        except ZipStructureError as E:
            _log.error(F'{path}: {E!s}')
            status = 1
        print(F'{count} of {archive.entries_total} entries listed')

    return status


def main():
    sys.exit(lister())


if __name__ == '__main__':
    main()
