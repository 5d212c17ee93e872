import logging
import os

from unittest.mock import patch

from il2cppmeta.lib.environment import EVLog, LogLevel, MetadataFormatter, environment, logger

from .. import TestBase


class TestEnvironment(TestBase):

    def test_verbosity_levels(self):
        self.assertEqual(LogLevel.FromVerbosity(-1), LogLevel.DETACHED)
        self.assertEqual(LogLevel.FromVerbosity(0), LogLevel.WARNING)
        self.assertEqual(LogLevel.FromVerbosity(1), LogLevel.INFO)
        self.assertEqual(LogLevel.FromVerbosity(7), LogLevel.DEBUG)

    def test_verbosity_from_name(self):
        with patch.dict(os.environ, {'IL2CPPMETA_VERBOSITY': 'DETACHED'}):
            self.assertEqual(EVLog('VERBOSITY').value, LogLevel.DETACHED)

    def test_verbosity_from_digit(self):
        with patch.dict(os.environ, {'IL2CPPMETA_VERBOSITY': '2'}):
            self.assertEqual(EVLog('VERBOSITY').value, LogLevel.DEBUG)

    def test_verbosity_unknown_or_unset(self):
        with patch.dict(os.environ, {'IL2CPPMETA_VERBOSITY': 'CHATTY'}):
            self.assertIsNone(EVLog('VERBOSITY').value)
        with patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(EVLog('VERBOSITY').value)

    def test_logger_uses_configured_level(self):
        previous = environment.verbosity.value
        environment.verbosity.value = LogLevel.INFO
        try:
            log = logger('il2cppmeta.test.configured')
            self.assertEqual(log.level, LogLevel.INFO)
            self.assertFalse(log.propagate)
            self.assertEqual(len(log.handlers), 1)
            self.assertIs(logger('il2cppmeta.test.configured'), log)
            self.assertEqual(len(log.handlers), 1)
        finally:
            environment.verbosity.value = previous

    def test_formatter_level_names(self):
        formatter = MetadataFormatter('{custom_level_name}: {message}', style='{')
        record = logging.LogRecord('x', logging.WARNING, __file__, 1, 'clamped', None, None)
        self.assertEqual(formatter.format(record), 'warning: clamped')
        record = logging.LogRecord('x', logging.DEBUG, __file__, 1, 'count', None, None)
        self.assertEqual(formatter.format(record), 'verbose: count')
