#!/usr/bin/env python3

# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import sys

if sys.version_info < (3, 7):
    raise SystemExit('ERROR: Tried to install mlibtool with an unsupported Python version: \n{}'
                     '\nmlibtool requires Python 3.7 or greater'.format(sys.version))

from mlibtool.coredata import version
from setuptools import setup

# The command is meant to be put in front of the project's own libtool:
#   make LIBTOOL="mlibtool ./libtool"
entries = {'console_scripts': ['mlibtool=mlibtool.ltmain:main']}
packages = ['mlibtool']

if __name__ == '__main__':
    setup(name='mlibtool',
          version=version,
          description='A mini libtool for sensible systems',
          license='Apache-2.0',
          python_requires='>=3.7',
          packages=packages,
          entry_points=entries,
          extras_require={'test': ['pytest']},)
