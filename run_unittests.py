#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import os
import sys
import unittest


def unset_envs() -> None:
    # The native tools must be the fake ones the tests set up, not
    # whatever the calling build exported.
    for v in ['AR', 'RANLIB', 'MLIBTOOL_LOG_DIR', 'MLIBTOOL_FORCE_BACKTRACE']:
        if v in os.environ:
            del os.environ[v]


def main() -> int:
    unset_envs()
    root = os.path.dirname(os.path.abspath(__file__))
    suite = unittest.defaultTestLoader.discover(os.path.join(root, 'tests'), top_level_dir=root)
    result = unittest.TextTestRunner(verbosity=1 if '-v' not in sys.argv else 2).run(suite)
    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(main())
