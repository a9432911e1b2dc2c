# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import subprocess
import typing as T

from . import mlog
from .ltlib import BuildFailed, FallbackRequested, Invocation, join_args


def spawn(inv: Invocation, cmd: T.List[str], retry_if_fail: bool = False) -> None:
    '''Run one native tool to completion.

    The command is echoed unless the invocation is quiet and only echoed
    in dry-run mode. A failing command either hands the whole invocation
    to the real libtool (retry_if_fail) or aborts the build.
    '''
    if not inv.quiet:
        mlog.log(mlog.bold('mlibtool:'), join_args(cmd))
    if inv.dry_run:
        return

    try:
        returncode = subprocess.call(cmd)
    except OSError as e:
        mlog.error(f'{cmd[0]}: {e.strerror}')
        returncode = None

    if returncode == 0:
        return
    if retry_if_fail:
        raise FallbackRequested(f'{cmd[0]} failed, retrying with libtool')
    raise BuildFailed(cmd, returncode)


def exec_libtool(inv: Invocation) -> int:
    '''Run the real libtool with the untouched original arguments and
    return its exit status as ours.'''
    cmd = inv.fallback_command
    if not cmd:
        mlog.error('No libtool to fall back to')
        return 1
    mlog.debug('Falling back to', join_args(cmd))
    try:
        return subprocess.call(cmd)
    except OSError as e:
        mlog.error(f'{cmd[0]}: {e.strerror}')
        return 1
