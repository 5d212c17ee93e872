#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
A common interface to all configuration settings available via environment variables. This
module is also host to the logging configuration.
"""
from __future__ import annotations

import logging
import os

from enum import IntEnum
from typing import Generic, Optional, TypeVar

_T = TypeVar('_T')


class LogLevel(IntEnum):
    """
    Log levels understood by `IL2CPPMETA_VERBOSITY`; the standard levels plus two silent ones.
    """
    DETACHED = logging.CRITICAL + 100
    """
    Nothing is written to the terminal; problems surface only as exceptions from the decoder.
    """
    NONE = logging.CRITICAL + 50

    NOTSET   = logging.NOTSET    # noqa
    CRITICAL = logging.CRITICAL  # noqa
    ERROR    = logging.ERROR     # noqa
    WARNING  = logging.WARNING   # noqa
    INFO     = logging.INFO      # noqa
    DEBUG    = logging.DEBUG     # noqa

    @classmethod
    def FromVerbosity(cls, verbosity: int):
        """
        Map a numeric verbosity to a level: negative values detach, 0 shows warnings, 1 adds
        comments and anything above shows every message.
        """
        if verbosity < 0:
            return cls.DETACHED
        return (cls.WARNING, cls.INFO)[verbosity] if verbosity < 2 else cls.DEBUG


class MetadataFormatter(logging.Formatter):

    NAMES = {
        logging.CRITICAL : 'failure',
        logging.ERROR    : 'failure',
        logging.WARNING  : 'warning',
        logging.INFO     : 'comment',
        logging.DEBUG    : 'verbose',
    }

    def formatMessage(self, record: logging.LogRecord) -> str:
        record.custom_level_name = self.NAMES.get(record.levelno, record.levelname.lower())
        return super().formatMessage(record)


def logger(name: str) -> logging.Logger:
    """
    Obtain a logger which is configured with the default format. When the environment variable
    `IL2CPPMETA_VERBOSITY` is set, it determines the initial level of the logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(MetadataFormatter(
            '({asctime}) {custom_level_name} in {name}: {message}',
            style='{',
            datefmt='%H:%M:%S',
        ))
        logger.addHandler(stream)
    if (level := environment.verbosity.value) is not None:
        logger.setLevel(level)
    logger.propagate = False
    return logger


class EnvironmentVariableSetting(Generic[_T]):
    key: str
    value: Optional[_T]

    def __init__(self, name: str):
        self.key = F'IL2CPPMETA_{name}'
        self.value = self.read()

    def read(self) -> Optional[_T]:
        return None


class EVLog(EnvironmentVariableSetting[LogLevel]):
    def read(self):
        if (setting := os.environ.get(self.key)) is None:
            return None
        if setting.isdigit():
            return LogLevel.FromVerbosity(int(setting))
        if setting in LogLevel.__members__:
            return LogLevel[setting]
        levels = ', '.join(LogLevel.__members__)
        logging.getLogger(__name__).warning(
            F'ignoring unknown verbosity "{setting!r}"; pick from: {levels}')
        return None


class environment:
    verbosity = EVLog('VERBOSITY')
