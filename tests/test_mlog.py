# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import os
import unittest

from mlibtool import mlog
from mlibtool.ltlib import UsageError

from .helpers import MlibtoolTestCase


class AnsiDecoratorTests(unittest.TestCase):

    def test_codes(self) -> None:
        self.assertEqual(mlog.bold('x').get_text(False), 'x')
        self.assertEqual(mlog.red('x').get_text(True), '\033[1;31mx\033[0m')
        self.assertEqual(mlog.bold('x', quoted=True).get_text(False), '"x"')
        self.assertEqual(len(mlog.yellow('abc')), 3)


class LogTests(MlibtoolTestCase):

    def test_console_is_stderr(self) -> None:
        mlog.log(mlog.bold('mlibtool:'), 'cc -c foo.c')
        self.assertEqual(self.stderr.getvalue(), 'mlibtool: cc -c foo.c\n')

    def test_quiet_keeps_errors(self) -> None:
        mlog.set_quiet()
        mlog.log('hidden')
        mlog.warning('shown')
        mlog.exception(UsageError('bad'))
        self.assertEqual(self.stderr.getvalue(), 'WARNING: shown\nERROR: bad\n')

    def test_debug_goes_to_log_file_only(self) -> None:
        mlog.debug('before the log file exists')
        mlog.initialize(self.tooldir)
        mlog.debug('details')
        mlog.log('summary')
        path = mlog.shutdown()
        self.assertEqual(path, os.path.join(self.tooldir, mlog.log_fname))
        with open(path, encoding='utf-8') as f:
            self.assertEqual(f.read(), 'details\nsummary\n')
        self.assertEqual(self.stderr.getvalue(), 'summary\n')
        self.assertIsNone(mlog.shutdown())


if __name__ == '__main__':
    unittest.main()
