"""
Settings that are read from `ZIPVIEW_*` environment variables, and the logging setup of the
package. All loggers of the package are created through `zipview.lib.environment.logger` so that
their level can be changed together:

- `ZIPVIEW_VERBOSITY`: a log level name like `DEBUG` or a verbosity count; `DETACHED` silences
  the package entirely.
- `ZIPVIEW_STRICT`: open archives with `zipview.zip.archive.ZipChecks.Strict` unless other checks
  are given explicitly.
- `ZIPVIEW_COLORLESS`: disable colors in the output of `zipls`.
"""
from __future__ import annotations

import os
import logging

from enum import IntEnum
from typing import Dict, Generic, Optional, TypeVar

_T = TypeVar('_T')

_PREFIX = 'ZIPVIEW_'
_PACKAGE = __name__.partition('.')[0]


class LogLevel(IntEnum):
    DETACHED = logging.CRITICAL + 100
    CRITICAL = logging.CRITICAL
    ERROR    = logging.ERROR    # noqa
    WARNING  = logging.WARNING  # noqa
    INFO     = logging.INFO     # noqa
    DEBUG    = logging.DEBUG    # noqa

    @classmethod
    def FromVerbosity(cls, verbosity: int) -> LogLevel:
        """
        Map a count of `-v` switches to a level; negative counts detach logging.
        """
        if verbosity < 0:
            return cls.DETACHED
        if verbosity == 0:
            return cls.WARNING
        if verbosity == 1:
            return cls.INFO
        return cls.DEBUG


class ZipviewFormatter(logging.Formatter):
    """
    Formats records as `level in component: message`, where the component is the logger name
    with the package prefix removed.
    """
    NAMES = {
        logging.CRITICAL : 'failure',
        logging.ERROR    : 'failure',
        logging.WARNING  : 'warning',
        logging.INFO     : 'comment',
        logging.DEBUG    : 'verbose',
    }

    def formatMessage(self, record: logging.LogRecord) -> str:
        record.custom_level_name = self.NAMES.get(record.levelno, 'message')
        name = record.name
        if name.startswith(F'{_PACKAGE}.'):
            name = name[len(_PACKAGE) + 1:]
        record.component = name
        return super().formatMessage(record)


class EnvironmentVariableSetting(Generic[_T]):
    """
    A setting that is parsed once from the environment variable `ZIPVIEW_{name}`. The parsed
    value is available as `value`; it is `default` when the variable is unset or empty.
    """
    key: str
    value: _T

    def __init__(self, name: str, default: _T):
        self.key = F'{_PREFIX}{name}'
        raw = os.environ.get(self.key, '').strip()
        self.value = self.parse(raw) if raw else default

    def parse(self, raw: str) -> _T:
        raise NotImplementedError


class EVBool(EnvironmentVariableSetting[bool]):
    def __init__(self, name: str):
        super().__init__(name, False)

    def parse(self, raw: str) -> bool:
        if raw.isdigit():
            return bool(int(raw))
        return raw.lower() not in {'no', 'off', 'false'}


class EVLog(EnvironmentVariableSetting[Optional[LogLevel]]):
    def __init__(self, name: str):
        super().__init__(name, None)

    def parse(self, raw: str) -> Optional[LogLevel]:
        if raw.isdigit():
            return LogLevel.FromVerbosity(int(raw))
        try:
            return LogLevel[raw.upper()]
        except KeyError:
            levels = ', '.join(ll.name for ll in LogLevel)
            logging.getLogger(__name__).warning(
                F'ignoring unknown verbosity {raw!r} in {self.key}; pick from: {levels}')
            return None


class environment:
    verbosity = EVLog('VERBOSITY')
    strict = EVBool('STRICT')
    colorless = EVBool('COLORLESS')


_loggers: Dict[str, logging.Logger] = {}


def logger(name: str) -> logging.Logger:
    """
    Obtain a logger with the zipview output format. Its level is taken from `ZIPVIEW_VERBOSITY`
    and defaults to warnings.
    """
    try:
        return _loggers[name]
    except KeyError:
        pass
    log = logging.getLogger(name)
    stream = logging.StreamHandler()
    stream.setFormatter(ZipviewFormatter(
        '({asctime}) {custom_level_name} in {component}: {message}',
        style='{',
        datefmt='%H:%M:%S',
    ))
    log.addHandler(stream)
    level = environment.verbosity.value
    log.setLevel(LogLevel.WARNING if level is None else level)
    log.propagate = False
    _loggers[name] = log
    return log


def set_log_level(level: LogLevel):
    """
    Change the level of every logger that was obtained from `zipview.lib.environment.logger`.
    """
    for log in _loggers.values():
        log.setLevel(level)
