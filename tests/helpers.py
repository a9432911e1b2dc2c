# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import io
import json
import os
import shutil
import stat
import sys
import tempfile
import textwrap
import typing as T
import unittest
from unittest import mock

from mlibtool import mlog

# Every fake tool appends its name and arguments to the file named by
# MLIBTOOL_TEST_LOG, one JSON list per run.
_FAKE_TOOL_PROLOGUE = textwrap.dedent('''\
    import json, os, sys
    args = sys.argv[1:]
    with open(os.environ['MLIBTOOL_TEST_LOG'], 'a') as f:
        f.write(json.dumps([os.path.basename(sys.argv[0])] + args) + '\\n')
    ''')

# Preprocesses by echoing stdin, which contains the sanity token as is.
# Compiling and linking write the -o file, unless FAKE_CC_NO_OUTPUT is set.
FAKE_CC = textwrap.dedent('''\
    if '-E' in args:
        data = sys.stdin.read()
        if os.environ.get('FAKE_CC_SANE', '1') == '1':
            sys.stdout.write(data)
        sys.exit(int(os.environ.get('FAKE_CC_PREPROCESS_STATUS', '0')))
    if os.environ.get('FAKE_CC_FAIL'):
        sys.exit(1)
    if '-o' in args and not os.environ.get('FAKE_CC_NO_OUTPUT'):
        with open(args[args.index('-o') + 1], 'w') as f:
            f.write('object\\n')
    ''')

FAKE_AR = textwrap.dedent('''\
    with open(args[1], 'a') as f:
        f.write('archive\\n')
    ''')

FAKE_RANLIB = ''

FAKE_LIBTOOL = textwrap.dedent('''\
    sys.exit(int(os.environ.get('FAKE_LIBTOOL_STATUS', '0')))
    ''')


def make_fake_tool(dirname: str, name: str, body: str) -> str:
    path = os.path.join(dirname, name)
    with open(path, 'w', encoding='utf-8') as f:
        f.write('#!' + sys.executable + '\n')
        f.write(_FAKE_TOOL_PROLOGUE)
        f.write(body)
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def write_file(fname: str, contents: str = '') -> None:
    dirname = os.path.dirname(fname)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    with open(fname, 'w', encoding='utf-8') as f:
        f.write(contents)


def read_file(fname: str) -> str:
    with open(fname, encoding='utf-8') as f:
        return f.read()


class MlibtoolTestCase(unittest.TestCase):

    '''Runs every test in a fresh build directory with fake native
    tools, and captures what mlibtool prints.'''

    def setUp(self) -> None:
        super().setUp()
        self.tooldir = tempfile.mkdtemp()
        self.builddir = tempfile.mkdtemp()
        self.orig_cwd = os.getcwd()
        os.chdir(self.builddir)
        self.addCleanup(self._cleanup_dirs)

        self.tool_log = os.path.join(self.tooldir, 'calls.log')
        self.cc = make_fake_tool(self.tooldir, 'cc', FAKE_CC)
        self.ar = make_fake_tool(self.tooldir, 'ar', FAKE_AR)
        self.ranlib = make_fake_tool(self.tooldir, 'ranlib', FAKE_RANLIB)
        self.libtool = make_fake_tool(self.tooldir, 'libtool', FAKE_LIBTOOL)

        env = {
            'MLIBTOOL_TEST_LOG': self.tool_log,
            'AR': self.ar,
            'RANLIB': self.ranlib,
        }
        patcher = mock.patch.dict(os.environ, env)
        patcher.start()
        self.addCleanup(patcher.stop)
        for var in ('MLIBTOOL_LOG_DIR', 'MLIBTOOL_FORCE_BACKTRACE', 'FAKE_CC_FAIL', 'FAKE_CC_NO_OUTPUT', 'FAKE_LIBTOOL_STATUS'):
            os.environ.pop(var, None)

        self.stderr = io.StringIO()
        patcher = mock.patch('sys.stderr', new=self.stderr)
        patcher.start()
        self.addCleanup(patcher.stop)
        mlog.set_verbose()
        self.addCleanup(mlog.shutdown)

    def _cleanup_dirs(self) -> None:
        os.chdir(self.orig_cwd)
        shutil.rmtree(self.builddir, ignore_errors=True)
        shutil.rmtree(self.tooldir, ignore_errors=True)

    def tool_calls(self, name: T.Optional[str] = None) -> T.List[T.List[str]]:
        '''Argument lists the fake tools were run with, optionally only
        those of one tool. The tool name is dropped from each entry.'''
        if not os.path.exists(self.tool_log):
            return []
        calls = []
        with open(self.tool_log, encoding='utf-8') as f:
            for line in f:
                call = json.loads(line)
                if name is None or call[0] == name:
                    calls.append(call if name is None else call[1:])
        return calls

    def build_calls(self) -> T.List[T.List[str]]:
        '''Compiler runs, minus the sanity probes.'''
        return [c for c in self.tool_calls('cc') if '-E' not in c]
