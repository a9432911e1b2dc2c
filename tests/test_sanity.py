# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import os
import shutil
import sys
import unittest
from unittest import mock

from mlibtool.descriptor import OutputLayout, write_libtool_object
from mlibtool.sanity import SANITY_CHECK, check_lo_sanity, system_is_sane

from .helpers import MlibtoolTestCase, write_file

GNU_LIBTOOL_OBJECT = '# foo.lo - a libtool object file\n# Generated by libtool (GNU libtool) 2.4.7\n'


class SystemIsSaneTests(MlibtoolTestCase):

    def test_sanity_check_snippet(self) -> None:
        self.assertTrue(SANITY_CHECK.startswith('#if __linux__ || '))
        self.assertIn('__OpenBSD__', SANITY_CHECK)
        self.assertIn('\nSYSTEM_IS_SANE\n', SANITY_CHECK)

    def test_sane(self) -> None:
        self.assertTrue(system_is_sane(self.cc))
        self.assertEqual(self.tool_calls('cc'), [['-E', '-']])

    def test_token_not_printed(self) -> None:
        with mock.patch.dict(os.environ, {'FAKE_CC_SANE': '0'}):
            self.assertFalse(system_is_sane(self.cc))

    def test_preprocessor_fails(self) -> None:
        with mock.patch.dict(os.environ, {'FAKE_CC_PREPROCESS_STATUS': '1'}):
            self.assertFalse(system_is_sane(self.cc))

    def test_missing_compiler(self) -> None:
        self.assertFalse(system_is_sane(os.path.join(self.tooldir, 'no-such-cc')))

    @unittest.skipUnless(sys.platform.startswith('linux') and shutil.which('cc'),
                         'needs a native compiler on Linux')
    def test_real_compiler(self) -> None:
        self.assertTrue(system_is_sane('cc'))


class CheckLoSanityTests(MlibtoolTestCase):

    def test_own_object(self) -> None:
        write_libtool_object(OutputLayout('foo.lo'))
        self.assertTrue(check_lo_sanity(['cc', '-o', 'prog', 'foo.lo'], self.cc))
        # Decided by the descriptor alone
        self.assertEqual(self.tool_calls(), [])

    def test_foreign_object(self) -> None:
        write_file('foo.lo', GNU_LIBTOOL_OBJECT)
        self.assertFalse(check_lo_sanity(['cc', '-o', 'prog', 'foo.lo'], self.cc))
        self.assertEqual(self.tool_calls(), [])

    def test_first_readable_descriptor_decides(self) -> None:
        write_file('gnu.lo', GNU_LIBTOOL_OBJECT)
        write_libtool_object(OutputLayout('own.lo'))
        self.assertFalse(check_lo_sanity(['cc', 'missing.la', 'gnu.lo', 'own.lo'], self.cc))
        self.assertTrue(check_lo_sanity(['cc', 'missing.la', 'own.lo', 'gnu.lo'], self.cc))

    def test_options_are_skipped(self) -> None:
        write_file('gnu.lo', GNU_LIBTOOL_OBJECT)
        self.assertTrue(check_lo_sanity(['cc', '-Wl,gnu.lo', '-o', 'prog', 'main.o'], self.cc))

    def test_no_descriptor_probes_compiler(self) -> None:
        self.assertTrue(check_lo_sanity(['cc', '-o', 'prog', 'main.o', 'missing.lo'], self.cc))
        self.assertEqual(self.tool_calls('cc'), [['-E', '-']])

    def test_no_descriptor_no_compiler(self) -> None:
        self.assertFalse(check_lo_sanity(['cc', '-o', 'prog', 'main.o']))


if __name__ == '__main__':
    unittest.main()
